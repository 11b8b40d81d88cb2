"""
HTTP surface of the report service.
"""

import logging
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException, Security
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse
from fastapi.security import APIKeyHeader

from .schemas import HealthResponse
from ..core.config import VERSION, debug_enabled, get_api_service_key, is_utility_mode, validate_config
from ..core.correlation import CorrelationStore
from ..core.db import health_check
from ..core.errors import InvalidRecordError, UpstreamError
from ..core.report import generate_report
from ..core.resolver import ValidatorResolver
from ..util.logging import logger
from ..validations import register_builtin_validators

# Initialize the FastAPI application
app = FastAPI(
    title="Flow Validation Report API",
    version=VERSION,
    description="Validates captured protocol flows of a session and renders an HTML report",
    docs_url="/docs" if debug_enabled() else None,
    redoc_url="/redoc" if debug_enabled() else None
)


api_key_header = APIKeyHeader(name="x-api-key", auto_error=False)


def require_api_key(api_key: str = Security(api_key_header)):
    """Reject requests whose x-api-key does not match API_SERVICE_KEY."""
    server_key = get_api_service_key()
    if not server_key:
        logger.error("API key is not set in the environment variables")
        raise HTTPException(status_code=500, detail="API key is not set in the environment variables")
    if not api_key:
        raise HTTPException(status_code=403, detail="API key is missing in the request")
    if api_key != server_key:
        raise HTTPException(status_code=403, detail="API key is invalid.")


@lru_cache(maxsize=None)
def get_store() -> CorrelationStore:
    """Shared correlation store for all requests."""
    return CorrelationStore()


@lru_cache(maxsize=None)
def get_resolver() -> ValidatorResolver:
    """Shared resolver; resolved entry points stay cached across requests."""
    register_builtin_validators()
    return ValidatorResolver()


@app.get("/health", response_model=HealthResponse)
def health_check_endpoint(store: CorrelationStore = Depends(get_store)):
    """Check service health."""
    db_health = health_check(store.db_path)
    issues = validate_config()

    return HealthResponse(
        status="healthy" if db_health and not issues else "unhealthy",
        version=VERSION,
        db_health=db_health,
        utility_mode=is_utility_mode(),
        config_issues=issues
    )


@app.get("/generate-report", dependencies=[Depends(require_api_key)])
def generate_report_endpoint(sessionId: str = None,
                             store: CorrelationStore = Depends(get_store),
                             resolver: ValidatorResolver = Depends(get_resolver)):
    """Validate every flow captured for a session and return the HTML report."""
    logger.info(f"Received sessionId: {sessionId}")
    if not sessionId:
        logger.error("Missing sessionId parameter")
        return PlainTextResponse("Missing sessionId parameter", status_code=400)

    try:
        html_report = generate_report(sessionId, resolver, store)
    except UpstreamError as e:
        logger.log_operation("report.generate", "failed", {"session_id": sessionId, "error": str(e)})
        return PlainTextResponse(str(e), status_code=502)
    except InvalidRecordError as e:
        logger.log_operation("report.generate", "failed", {"session_id": sessionId, "error": str(e)})
        return PlainTextResponse(str(e), status_code=400)
    except Exception as e:
        logger.error(f"Error generating report: {e}")
        return PlainTextResponse("Failed to generate report", status_code=500)

    return HTMLResponse(html_report)


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Handle all unhandled exceptions."""
    logging.error(f"Unhandled exception: {exc}")
    content = {"detail": "Internal server error"}
    if debug_enabled():
        content["debug"] = str(exc)
    return JSONResponse(
        status_code=500,
        content=content,
    )
