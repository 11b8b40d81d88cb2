"""
Serve the report API with uvicorn.
"""

import argparse
import os

import uvicorn

APP = "flowreport.api.main:app"


def main(argv=None):
    parser = argparse.ArgumentParser(description="Serve the flow validation report API")
    parser.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"), help="Interface to bind")
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "3000")), help="Port to listen on")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args(argv)

    uvicorn.run(APP, host=args.host, port=args.port, reload=args.reload)
    return 0
