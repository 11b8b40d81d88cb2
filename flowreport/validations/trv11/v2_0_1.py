"""
TRV11 2.0.1 validators.
The ticket and quantity checks here are optional rules enabled through ENABLED_RULES.
"""

from ...core.config import is_rule_enabled
from ...core.correlation import CorrelationStore
from ...core.flows import BUYER_CANCEL_CODES, SELLER_CANCEL_CODES
from ...core.schema import MessageRecord, ValidationResult, dig
from ..base import as_count, expect, finish, start_result
from ..common import check_common, check_context
from ..registry import PLUGINS
from .constants import DOMAIN, TECHNICAL_CANCEL_CODE
from .orders import cancellation_reason_id, check_authorization_validity, check_ticket_count

VERSION = "2.0.1"


@PLUGINS.register(DOMAIN, VERSION, "on_select")
def check_on_select(record: MessageRecord, session_id: str, flow_id: str,
                    store: CorrelationStore) -> ValidationResult:
    results = start_result(record)
    check_context(record, results)

    if is_rule_enabled("on_select_quantity"):
        for item in dig(record.message, "order", "items", default=[]):
            selected = as_count(dig(item, "quantity", "selected", "count"))
            maximum = as_count(dig(item, "quantity", "maximum", "count"))
            if selected is None or maximum is None:
                continue
            expect(results, selected <= maximum,
                   f"Valid item quantity for item id: {dig(item, 'id')}",
                   f"Item {dig(item, 'id')}: selected count exceeds maximum count")

    return finish(results, "on_select")


@PLUGINS.register(DOMAIN, VERSION, "confirm")
def check_confirm(record: MessageRecord, session_id: str, flow_id: str,
                  store: CorrelationStore) -> ValidationResult:
    results = start_result(record)
    check_context(record, results)

    if is_rule_enabled("fulfillment_count"):
        check_ticket_count(record, results)
    if is_rule_enabled("authorization_validity"):
        check_authorization_validity(record, results)

    results.merge(check_common(record))
    return finish(results, "confirm")


@PLUGINS.register(DOMAIN, VERSION, "cancel")
def check_cancel(record: MessageRecord, session_id: str, flow_id: str,
                 store: CorrelationStore) -> ValidationResult:
    results = start_result(record)
    check_context(record, results)

    reason = cancellation_reason_id(record)
    if reason is not None:
        known = set(BUYER_CANCEL_CODES) | set(SELLER_CANCEL_CODES) | {TECHNICAL_CANCEL_CODE}
        expect(results, reason in known,
               "Valid cancellation_reason_id",
               f"cancellation_reason_id {reason} is not a valid cancellation code")

    results.merge(check_common(record))
    return finish(results, "cancel")


@PLUGINS.register(DOMAIN, VERSION, "on_cancel")
def check_on_cancel(record: MessageRecord, session_id: str, flow_id: str,
                    store: CorrelationStore) -> ValidationResult:
    results = start_result(record)
    check_context(record, results)
    results.merge(check_common(record))
    return finish(results, "on_cancel")
