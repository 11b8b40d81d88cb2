"""
Flow sequence validation and report assembly.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence

from .config import FLOW_WORKERS
from .correlation import CorrelationStore
from .dispatcher import check_message
from .flows import ACTIONS, get_template, is_valid_action
from .resolver import ValidatorResolver
from .schema import FlowReport, MessageRecord
from ..util.logging import logger


def check_sequence(records: Sequence[MessageRecord], template: Sequence[str]) -> Optional[str]:
    """
    Compare a flow position by position against the expected template.

    Returns:
        An error describing the first mismatch, or None if the flow matches
    """
    for index, expected in enumerate(template):
        actual = records[index].action if index < len(records) else None
        if actual is not None and actual.lower() == expected:
            continue

        if expected == "select":
            expected = "select or init"
        previous = records[index - 1].action.lower() if index > 0 else "start of flow"
        return f"Error: Expected '{expected}' after '{previous}', but found '{actual or 'undefined'}'."

    return None


def validate_flow(flow_id: str, records: Sequence[MessageRecord], session_id: str,
                  resolver: ValidatorResolver, store: CorrelationStore,
                  template: Sequence[str] = None) -> FlowReport:
    """
    Validate one flow: its action order, then every recognized message in order.

    Messages are dispatched sequentially since later validators read what
    earlier ones stored in the correlation store.
    """
    template = template if template is not None else get_template()
    report = FlowReport(flow_id=flow_id)

    sequence_error = check_sequence(records, template)
    if sequence_error:
        report.valid_sequence = False
        report.errors.append(sequence_error)

    counters = {action: 1 for action in ACTIONS}
    for index, record in enumerate(records):
        action = record.action.lower()
        if not is_valid_action(action):
            continue

        try:
            result = check_message(record.domain, record, action, session_id, flow_id, resolver, store)
        except Exception as e:
            logger.log_dispatch_failure(flow_id, action, index, e)
            continue

        report.messages[f"{action}_{counters[action]}"] = result
        counters[action] += 1

    logger.log_flow_validation(flow_id, report.valid_sequence, len(records), report.errors)
    return report


def build_report(flow_reports: List[FlowReport]) -> Dict[str, FlowReport]:
    """Key flow reports by flow id."""
    return {report.flow_id: report for report in flow_reports}


def validate_flows(grouped: Dict[str, List[MessageRecord]], session_id: str,
                   resolver: ValidatorResolver, store: CorrelationStore,
                   template_name: str = "default", max_workers: int = None) -> Dict[str, FlowReport]:
    """
    Validate every flow of a session and assemble the final report.

    Flows are independent and run on a thread pool; the report keeps the
    order of the grouped input.
    """
    template = get_template(template_name)
    flow_ids = list(grouped.keys())
    if not flow_ids:
        return {}

    workers = max(1, min(max_workers or FLOW_WORKERS, len(flow_ids)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [
            executor.submit(validate_flow, flow_id, grouped[flow_id], session_id, resolver, store, template)
            for flow_id in flow_ids
        ]
        reports = []
        for flow_id, future in zip(flow_ids, futures):
            try:
                reports.append(future.result())
            except Exception as e:
                logger.error(f"Validation of flow {flow_id} failed: {e}")
                reports.append(FlowReport(
                    flow_id=flow_id,
                    valid_sequence=False,
                    errors=[f"Error: Flow validation failed: {e}"],
                ))

    return build_report(reports)
