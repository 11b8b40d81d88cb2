"""
Report generation for one session: fetch, parse, group, validate, render.
"""

from typing import Any, Dict, List

from .config import is_utility_mode
from .correlation import CorrelationStore
from .grouping import group_and_sort
from .records import fetch_payloads, parse_records
from .report_html import render_flow_report, render_utility_report
from .resolver import ValidatorResolver
from .sequence import validate_flows
from .utility import utility_report
from ..util.logging import logger


def build_flow_report(raw_records: List[Dict[str, Any]], session_id: str,
                      resolver: ValidatorResolver, store: CorrelationStore,
                      template_name: str = "default") -> Dict[str, Any]:
    """Validate raw records with the local engine; returns FlowReports keyed by flow id."""
    grouped = group_and_sort(parse_records(raw_records))
    return validate_flows(grouped, session_id, resolver, store, template_name)


def render_report(raw_records: List[Dict[str, Any]], session_id: str,
                  resolver: ValidatorResolver, store: CorrelationStore,
                  utility: bool = None, template_name: str = "default") -> str:
    """Produce the HTML report for already-fetched raw records."""
    utility = is_utility_mode() if utility is None else utility

    if utility:
        grouped = group_and_sort(parse_records(raw_records))
        results = utility_report(grouped)
        logger.log_operation("report.utility", "success", {"session_id": session_id, "flows": len(results)})
        return render_utility_report(results)

    report = build_flow_report(raw_records, session_id, resolver, store, template_name)
    invalid = [flow_id for flow_id, flow in report.items() if not flow.valid_sequence]
    logger.log_operation("report.generated", "success", {
        "session_id": session_id,
        "flows": len(report),
        "invalid_flows": len(invalid),
    })
    return render_flow_report(report)


def generate_report(session_id: str, resolver: ValidatorResolver, store: CorrelationStore,
                    utility: bool = None) -> str:
    """Fetch the session's records from storage and produce its HTML report."""
    raw_records = fetch_payloads(session_id)
    return render_report(raw_records, session_id, resolver, store, utility)
