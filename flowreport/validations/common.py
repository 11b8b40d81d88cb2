"""
Checks shared across actions.
The order-level checks are optional rules, each switched on through ENABLED_RULES.
"""

import re

from ..core.config import is_rule_enabled
from ..core.schema import MessageRecord, ValidationResult, dig
from .base import expect

GPS_COORDINATE = re.compile(r"^-?\d{1,3}\.\d{6}$")
BREAKUP_TITLES = ("BASE_FARE", "REFUND", "CANCELLATION_CHARGES")
CANCELLATION_TITLES = ("REFUND", "CANCELLATION_CHARGES")


def check_context(record: MessageRecord, results: ValidationResult) -> ValidationResult:
    """Record failures for a context without a transaction id or timestamp."""
    transaction_id = record.context.get("transaction_id")
    if not isinstance(transaction_id, str) or not transaction_id:
        results.failed.append("context.transaction_id should be a non-empty string")

    if not isinstance(record.context.get("timestamp"), str):
        results.failed.append("context.timestamp should be a string")

    return results


def check_common(record: MessageRecord) -> ValidationResult:
    """Order-level checks applied to confirm, cancel and their callbacks."""
    results = ValidationResult()
    order = dig(record.message, "order", default={})
    fulfillments = [f for f in dig(order, "fulfillments", default=[]) if isinstance(f, dict)]

    if is_rule_enabled("fulfillment_ids_unique"):
        ids = [f.get("id") for f in fulfillments]
        expect(results, len(ids) == len(set(ids)),
               "Ids are unique", "Unique Ids check: Ids must be unique")

    if is_rule_enabled("gps_precision"):
        invalid = []
        for fulfillment in fulfillments:
            for stop in fulfillment.get("stops") or []:
                gps = dig(stop, "location", "gps")
                if gps is None:
                    continue
                parts = [part.strip() for part in str(gps).split(",")]
                if not all(GPS_COORDINATE.match(part) for part in parts):
                    invalid.append(str(gps))
        expect(results, not invalid,
               "GPS has 6 decimal precision",
               f"GPS precision check: GPS must have 6 decimal precision ({', '.join(invalid)})")

    if is_rule_enabled("parent_stop_linkage"):
        for fulfillment in fulfillments:
            stops = fulfillment.get("stops") or []
            linked = all(
                stops[i].get("parent_stop_id") == stops[i - 1].get("id")
                for i in range(1, len(stops))
            )
            expect(results, linked,
                   "parent_stop_id refers to previous stop id",
                   f"parent_stop_id check: fulfillment {fulfillment.get('id')} stops are not linked to the previous stop")

    if is_rule_enabled("breakup_titles"):
        breakup = dig(order, "quote", "breakup", default=[])
        problems = []
        for item in breakup:
            title = dig(item, "title")
            if title not in BREAKUP_TITLES:
                problems.append(f"invalid title {title}")
            elif title in CANCELLATION_TITLES and order.get("status") != "CANCELLED":
                problems.append(f"{title} is only allowed when the order is cancelled")
        expect(results, not problems,
               "Valid titles in quote.breakup",
               f"Quote.breakup validation: {'; '.join(problems)}")

    return results
