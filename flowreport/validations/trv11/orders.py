"""
Order checks shared by the TRV11 version plugins.
"""

from typing import Optional

from ...core.errors import InvalidRecordError
from ...core.records import parse_timestamp
from ...core.schema import MessageRecord, ValidationResult, dig
from ..base import as_count, expect
from .constants import TICKET


def check_ticket_count(record: MessageRecord, results: ValidationResult) -> None:
    """One TICKET fulfillment is expected per selected unit across the order items."""
    order = dig(record.message, "order", default={})
    selected = 0
    for item in dig(order, "items", default=[]):
        selected += as_count(dig(item, "quantity", "selected", "count")) or 0
    if not selected:
        return

    tickets = [f for f in dig(order, "fulfillments", default=[])
               if isinstance(f, dict) and f.get("type") == TICKET]
    expect(results, len(tickets) == selected,
           "Fulfillments array length is proportional to selected count",
           f"Fulfillments array length check: expected {int(selected)} TICKET fulfillments, found {len(tickets)}")


def check_authorization_validity(record: MessageRecord, results: ValidationResult) -> None:
    """Stop authorizations must remain valid after the message timestamp."""
    try:
        sent_at = parse_timestamp(record.context.get("timestamp"))
    except (InvalidRecordError, AttributeError):
        return

    for fulfillment in dig(record.message, "order", "fulfillments", default=[]):
        for stop in dig(fulfillment, "stops", default=[]):
            valid_to = dig(stop, "authorization", "valid_to")
            if valid_to is None:
                continue
            try:
                valid = parse_timestamp(valid_to) > sent_at
            except (InvalidRecordError, AttributeError):
                valid = False
            expect(results, valid,
                   "Authorization.valid_to timestamp is valid",
                   f"Authorization.valid_to timestamp {valid_to} should be greater than context.timestamp")


def cancellation_reason_id(record: MessageRecord) -> Optional[str]:
    """Reason id from a cancel request or an on_cancel order."""
    reason = dig(record.message, "cancellation_reason_id")
    if reason is None:
        reason = dig(record.message, "order", "cancellation", "reason", "id")
    return None if reason is None else str(reason)
