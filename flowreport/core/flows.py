"""
Action vocabulary and expected action sequences.
"""

from typing import Dict, Tuple

ACTIONS: Tuple[str, ...] = (
    "search",
    "on_search",
    "select",
    "on_select",
    "init",
    "on_init",
    "confirm",
    "on_confirm",
    "cancel",
    "on_cancel",
    "update",
    "on_update",
    "status",
    "on_status",
)

_BASE_SEQUENCE: Tuple[str, ...] = (
    "search",
    "on_search",
    "search",
    "on_search",
    "select",
    "on_select",
    "init",
    "on_init",
    "confirm",
    "on_confirm",
)

FLOW_TEMPLATES: Dict[str, Tuple[str, ...]] = {
    "default": _BASE_SEQUENCE,
    "STATION_CODE_FLOW": _BASE_SEQUENCE + ("status", "on_status"),
    "CANCEL_FLOW": _BASE_SEQUENCE + ("cancel", "on_cancel"),
}

DEFAULT_TEMPLATE = "default"

BUYER_CANCEL_CODES: Tuple[str, ...] = ("001", "002", "003", "004", "005")
SELLER_CANCEL_CODES: Tuple[str, ...] = ("011", "012", "013", "014")


def is_valid_action(action: str) -> bool:
    return action in ACTIONS


def get_template(name: str = DEFAULT_TEMPLATE) -> Tuple[str, ...]:
    """Get a named expected sequence."""
    if name not in FLOW_TEMPLATES:
        raise ValueError(f"Unknown flow template: {name}")
    return FLOW_TEMPLATES[name]
