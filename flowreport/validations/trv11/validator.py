"""
Entry point resolved for ONDC:TRV11 messages.
"""

from ...core.correlation import CorrelationStore
from ...core.schema import MessageRecord, ValidationResult
from ..registry import PLUGINS
from .constants import DOMAIN


def validate(record: MessageRecord, action: str, session_id: str, flow_id: str,
             store: CorrelationStore) -> ValidationResult:
    """Run the plugin registered for the action and the message's protocol version."""
    plugin = PLUGINS.resolve(DOMAIN, record.protocol_version, action)
    return plugin(record, session_id, flow_id, store)
