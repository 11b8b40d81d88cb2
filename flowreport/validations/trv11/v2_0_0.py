"""
TRV11 2.0.0 validators.
"""

from ...core.correlation import CorrelationStore
from ...core.schema import MessageRecord, ValidationResult
from ..base import expect, finish, start_result
from ..common import check_common, check_context
from ..registry import PLUGINS
from .constants import DOMAIN, TECHNICAL_CANCEL_CODE
from .orders import cancellation_reason_id, check_authorization_validity, check_ticket_count

VERSION = "2.0.0"


@PLUGINS.register(DOMAIN, VERSION, "init")
def check_init(record: MessageRecord, session_id: str, flow_id: str,
               store: CorrelationStore) -> ValidationResult:
    results = start_result(record)
    check_context(record, results)
    check_ticket_count(record, results)
    return finish(results, "init")


@PLUGINS.register(DOMAIN, VERSION, "on_confirm")
def check_on_confirm(record: MessageRecord, session_id: str, flow_id: str,
                     store: CorrelationStore) -> ValidationResult:
    results = start_result(record)
    check_context(record, results)
    check_ticket_count(record, results)
    check_authorization_validity(record, results)
    results.merge(check_common(record))
    return finish(results, "on_confirm")


@PLUGINS.register(DOMAIN, VERSION, "on_cancel")
def check_on_cancel(record: MessageRecord, session_id: str, flow_id: str,
                    store: CorrelationStore) -> ValidationResult:
    results = start_result(record)
    check_context(record, results)
    expect(results, cancellation_reason_id(record) == TECHNICAL_CANCEL_CODE,
           "Valid technical cancellation_reason_id",
           f"If technical cancellation, cancellation_reason_id should be '{TECHNICAL_CANCEL_CODE}'")
    results.merge(check_common(record))
    return finish(results, "on_cancel")


@PLUGINS.register(DOMAIN, VERSION, "on_update")
def check_on_update(record: MessageRecord, session_id: str, flow_id: str,
                    store: CorrelationStore) -> ValidationResult:
    results = start_result(record)
    check_context(record, results)
    results.merge(check_common(record))
    return finish(results, "on_update")
