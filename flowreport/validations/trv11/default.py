"""
TRV11 validators used when no version-specific plugin is registered.

search and on_search correlate the two discovery rounds of a flow: the first
on_search lists routes and their stop codes, the second search must only
use those stops, and the second on_search returns trips. Items offered in
on_search are kept so select can be checked against their quantity limits.
"""

from typing import List

from ...core.correlation import CorrelationStore
from ...core.schema import DEFAULT_VERSION, MessageRecord, ValidationResult, dig
from ...util.logging import logger
from ..base import as_count, expect, finish, start_result
from ..common import check_common, check_context
from ..registry import PLUGINS
from .constants import CATALOG_ITEMS_KEY, DOMAIN, ROUTE, STOP_CODES_KEY, TRIP


@PLUGINS.register(DOMAIN, DEFAULT_VERSION, "search")
def check_search(record: MessageRecord, session_id: str, flow_id: str,
                 store: CorrelationStore) -> ValidationResult:
    results = start_result(record)
    check_context(record, results)

    transaction_id = record.transaction_id
    if not transaction_id:
        return finish(results, "search")

    transaction_ids = store.add_transaction_id(session_id, flow_id, transaction_id)
    if len(transaction_ids) > 1 and transaction_id == transaction_ids[1]:
        check_search_stops(record, session_id, transaction_ids[0], store, results)

    return finish(results, "search")


def check_search_stops(record: MessageRecord, session_id: str, first_transaction_id: str,
                       store: CorrelationStore, results: ValidationResult) -> None:
    """Every stop of the second search must be a stop returned by the first on_search."""
    stop_codes = store.fetch_data(session_id, first_transaction_id, STOP_CODES_KEY)
    if not stop_codes:
        logger.warning(f"No stop codes stored for transaction {first_transaction_id}, skipping stop check")
        return

    stops = dig(record.message, "intent", "fulfillment", "stops", default=[])
    if not stops:
        return

    unknown = [dig(stop, "location", "descriptor", "code") for stop in stops]
    unknown = [code for code in unknown if code not in stop_codes]
    for code in unknown:
        logger.error(f"Stop code {code} is not present in on_search_1.")
        results.failed.append(f"Stop code {code} is not present in on_search_1.")

    if not unknown:
        results.passed.append("START AND END are valid stops")


def _collect_stop_codes(fulfillments: List[dict], codes: List[str]) -> None:
    for fulfillment in fulfillments:
        for stop in fulfillment.get("stops") or []:
            code = dig(stop, "location", "descriptor", "code")
            if code is not None and code not in codes:
                codes.append(code)


def _counts_ordered(item: dict) -> bool:
    minimum = as_count(dig(item, "quantity", "minimum", "count"))
    maximum = as_count(dig(item, "quantity", "maximum", "count"))
    if minimum is None or maximum is None:
        return False
    return minimum < maximum


@PLUGINS.register(DOMAIN, DEFAULT_VERSION, "on_search")
def check_on_search(record: MessageRecord, session_id: str, flow_id: str,
                    store: CorrelationStore) -> ValidationResult:
    results = start_result(record)
    check_context(record, results)

    transaction_id = record.transaction_id
    transaction_ids = store.get_transaction_ids(session_id, flow_id)
    # A reused transaction id is the second round once both searches are recorded
    is_second = len(transaction_ids) > 1 and transaction_id == transaction_ids[1]
    is_first = not is_second and bool(transaction_ids) and transaction_id == transaction_ids[0]

    stop_codes: List[str] = []
    catalog_items: List[dict] = []
    providers = dig(record.message, "catalog", "providers", default=[])

    for provider in providers:
        if not isinstance(provider, dict):
            continue
        fulfillments = [f for f in provider.get("fulfillments") or [] if isinstance(f, dict)]
        items = [i for i in provider.get("items") or [] if isinstance(i, dict)]

        if is_first:
            routes = all(f.get("type") == ROUTE for f in fulfillments)
            if expect(results, routes, "Fulfillments.type is ROUTE", "Fulfillments.type should be ROUTE"):
                _collect_stop_codes(fulfillments, stop_codes)
        elif is_second:
            trips = all(f.get("type") == TRIP for f in fulfillments)
            expect(results, trips, "Fulfillments.type is TRIP", "Fulfillments.type should be TRIP")

        catalog_items.extend(items)
        expect(results, all(_counts_ordered(item) for item in items),
               "Valid items/quantity maximum and minimum count",
               "Quantity.minimum.count can't be greater than quantity.maximum.count at items.")

    if transaction_id:
        if is_first and stop_codes:
            store.save_data(session_id, transaction_id, STOP_CODES_KEY, stop_codes)
        store.save_data(session_id, transaction_id, CATALOG_ITEMS_KEY, {"value": catalog_items})

    return finish(results, "on_search")


@PLUGINS.register(DOMAIN, DEFAULT_VERSION, "select")
def check_select(record: MessageRecord, session_id: str, flow_id: str,
                 store: CorrelationStore) -> ValidationResult:
    results = start_result(record)
    check_context(record, results)

    transaction_id = record.transaction_id
    catalog = store.fetch_data(session_id, transaction_id, CATALOG_ITEMS_KEY) if transaction_id else None
    if not isinstance(catalog, dict) or not catalog.get("value"):
        logger.info(f"No on_search items stored for transaction {transaction_id}, skipping quantity check")
        return finish(results, "select")

    offered = {item.get("id"): item for item in catalog["value"] if isinstance(item, dict)}
    for item in dig(record.message, "order", "items", default=[]):
        item_id = dig(item, "id")
        catalog_item = offered.get(item_id)
        if catalog_item is None:
            logger.warning(f"Item {item_id} not found in on_search catalog")
            continue

        maximum_raw = dig(catalog_item, "quantity", "maximum", "count")
        maximum = as_count(maximum_raw)
        if maximum is None:
            continue

        selected_raw = dig(item, "quantity", "selected", "count")
        selected = as_count(selected_raw)
        expect(results, selected is not None and selected <= maximum,
               f"Valid item quantity for item id: {item_id}",
               f"Item {item_id}: Selected count ({selected_raw}) exceeds the maximum count "
               f"({maximum_raw}) in the catalog.")

    return finish(results, "select")


@PLUGINS.register(DOMAIN, DEFAULT_VERSION,
                  "on_select", "init", "on_init", "confirm", "on_confirm",
                  "cancel", "on_cancel", "update", "on_update", "status", "on_status")
def check_generic(record: MessageRecord, session_id: str, flow_id: str,
                  store: CorrelationStore) -> ValidationResult:
    """Context and shared order checks for actions without dedicated rules."""
    results = start_result(record)
    check_context(record, results)
    results.merge(check_common(record))
    action = record.action.lower() if record.action else "message"
    return finish(results, action)
