"""
Command-line report generation.
Renders a report from a JSON file of raw records, or from the storage backend,
without going through the HTTP layer.
"""

import argparse
import json
from pathlib import Path

from .core.config import validate_config
from .core.correlation import CorrelationStore
from .core.errors import FlowReportError
from .core.flows import FLOW_TEMPLATES
from .core.records import fetch_payloads
from .core.report import render_report
from .core.resolver import ValidatorResolver
from .validations import register_builtin_validators


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a flow validation report for a session",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s SESSION --input records.json            # Validate records from a file
  %(prog)s SESSION                                 # Fetch records from STORAGE_URL
  %(prog)s SESSION --input records.json --utility  # Use the external validation service

Environment variables:
- STORAGE_URL=... (required without --input)
- DB_PATH=./data/correlation.db
- ENABLED_RULES=gps_precision,breakup_titles (optional rules, off by default)
        """
    )

    parser.add_argument(
        "session_id",
        help="Session whose flows are validated"
    )

    parser.add_argument(
        "--input", "-i",
        help="JSON file holding the raw records (default: fetch from STORAGE_URL)"
    )

    parser.add_argument(
        "--output", "-o",
        default="report.html",
        help="Where to write the HTML report (default: report.html)"
    )

    parser.add_argument(
        "--template", "-t",
        default="default",
        choices=sorted(FLOW_TEMPLATES),
        help="Expected action sequence (default: default)"
    )

    parser.add_argument(
        "--utility", "-u",
        action="store_true",
        help="Validate through the external validation service instead of the local engine"
    )

    parser.add_argument(
        "--db-path",
        help="Correlation cache database (default: DB_PATH)"
    )

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.input:
            with open(args.input, "r", encoding="utf-8") as handle:
                raw_records = json.load(handle)
        else:
            raw_records = fetch_payloads(args.session_id)

        register_builtin_validators()
        store = CorrelationStore(db_path=args.db_path)
        resolver = ValidatorResolver()
        html_report = render_report(
            raw_records,
            args.session_id,
            resolver,
            store,
            utility=args.utility or None,
            template_name=args.template,
        )
    except (OSError, ValueError) as e:
        print(f"ERROR: Unable to read records: {e}")
        return 1
    except FlowReportError as e:
        print(f"ERROR: Report generation failed: {e}")
        return 1

    for issue in validate_config():
        if not (args.input and issue == "STORAGE_URL is not set"):
            print(f"WARNING: {issue}")

    Path(args.output).write_text(html_report, encoding="utf-8")
    print(f"Report written to {args.output}")
    return 0
