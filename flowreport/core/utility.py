"""
Utility report mode.
Each flow is folded into one parsed payload and validated by the external log
validation service instead of the local engine.
"""

import time
from typing import Any, Dict, List, Sequence

import requests

from .config import UTILITY_DOMAIN, UTILITY_VERSION, VALIDATION_TIMEOUT_SEC, get_validation_url
from .errors import UpstreamError
from .flows import ACTIONS
from .schema import MessageRecord
from ..util.logging import logger

NUMBERED_ACTIONS = ("search", "on_search")
SOFT_CANCEL_KEYS = {"cancel": "soft_cancel", "on_cancel": "soft_on_cancel"}

# Keys the validation service always expects, empty when the flow lacks them
STANDARD_KEYS = (
    "select", "on_select", "init", "on_init",
    "confirm", "on_confirm", "status", "on_status",
    "soft_cancel", "soft_on_cancel", "cancel", "on_cancel",
)


def parse_flow(flow_id: str, records: Sequence[MessageRecord],
               domain: str = None, version: str = None) -> Dict[str, Any]:
    """
    Fold one flow's records into the payload shape of the validation service.

    search/on_search are numbered in order; the first cancel/on_cancel are the
    soft cancellation and later ones are numbered; other known actions keep their
    name and unknown ones are skipped.
    """
    payload: Dict[str, Any] = {}
    counters = {"search": 0, "on_search": 0, "cancel": 0, "on_cancel": 0}
    soft_mapped = set()

    for record in sorted(records, key=lambda r: r.created_at):
        action = (record.action or "").lower()
        if not action:
            logger.warning(f"Missing action in payload for flow ID {flow_id}")
            continue

        if action in NUMBERED_ACTIONS:
            counters[action] += 1
            payload[f"{action}_{counters[action]}"] = record.request
        elif action in SOFT_CANCEL_KEYS:
            if action not in soft_mapped:
                payload[SOFT_CANCEL_KEYS[action]] = record.request
                soft_mapped.add(action)
            else:
                counters[action] += 1
                payload[f"{action}_{counters[action]}"] = record.request
        elif action in ACTIONS:
            payload[action] = record.request
        else:
            logger.warning(f"Skipping unknown action {action} in flow ID {flow_id}")

    for key in STANDARD_KEYS:
        payload.setdefault(key, {})

    return {
        "domain": domain or UTILITY_DOMAIN,
        "version": version or UTILITY_VERSION,
        "flow": flow_id,
        "payload": payload,
    }


def parse_flows(grouped: Dict[str, List[MessageRecord]]) -> Dict[str, Dict[str, Any]]:
    """Parse every flow of a session, keeping the grouped order."""
    return {flow_id: parse_flow(flow_id, records) for flow_id, records in grouped.items()}


def post_parsed_flow(parsed: Dict[str, Any], validation_url: str = None,
                     timeout: float = None) -> Any:
    """
    POST one parsed flow to the validation service.

    Raises:
        UpstreamError: On transport failures, non-2xx answers or a non-JSON body
    """
    url = validation_url or get_validation_url()
    start_time = time.time()
    try:
        response = requests.post(url, json=parsed, timeout=timeout or VALIDATION_TIMEOUT_SEC)
    except requests.RequestException as e:
        logger.log_upstream_call("validation", url, "failed")
        raise UpstreamError(f"Validation request failed: {e}") from e

    duration_ms = (time.time() - start_time) * 1000
    if not response.ok:
        logger.log_upstream_call("validation", url, "failed", response.status_code, duration_ms)
        try:
            details = response.json()
        except ValueError:
            details = response.text or None
        raise UpstreamError(
            f"Validation failed with status {response.status_code}",
            status_code=response.status_code,
            details=details,
        )

    logger.log_upstream_call("validation", url, "success", response.status_code, duration_ms)
    try:
        return response.json()
    except ValueError as e:
        raise UpstreamError("Validation service returned invalid JSON", status_code=response.status_code,
                            details=response.text[:500]) from e


def validate_logs(flow_id: str, parsed: Dict[str, Any], validation_url: str = None,
                  timeout: float = None) -> Dict[str, Any]:
    """Validate one parsed flow, turning every failure into a typed result."""
    try:
        return {"success": True, "response": post_parsed_flow(parsed, validation_url, timeout)}
    except UpstreamError as e:
        logger.log_operation("utility.validate", "failed", {"flow_id": flow_id, "error": str(e)})
        if e.status_code is not None:
            error = str(e)
        else:
            error = "Validation failed with status Unknown status code"
        return {
            "success": False,
            "error": error,
            "details": e.details if e.details is not None else {"message": "No response data"},
        }


def utility_report(grouped: Dict[str, List[MessageRecord]], validation_url: str = None,
                   timeout: float = None) -> Dict[str, Dict[str, Any]]:
    """Validate every flow of a session through the validation service."""
    parsed_flows = parse_flows(grouped)
    return {
        flow_id: validate_logs(flow_id, parsed, validation_url, timeout)
        for flow_id, parsed in parsed_flows.items()
    }
