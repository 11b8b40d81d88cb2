"""
Core data shapes passed between the grouper, sequence validator, dispatcher and validators.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

DEFAULT_VERSION = "default"


def dig(data: Any, *path: Any, default: Any = None) -> Any:
    """Walk nested dicts/lists, returning default as soon as a step is missing."""
    current = data
    for step in path:
        if isinstance(current, dict):
            if step not in current:
                return default
            current = current[step]
        elif isinstance(current, list) and isinstance(step, int):
            if step >= len(current) or step < -len(current):
                return default
            current = current[step]
        else:
            return default
    return default if current is None else current


@dataclass
class MessageRecord:
    flow_id: str
    action: str
    created_at: datetime
    request: Dict[str, Any]
    response: Optional[Dict[str, Any]] = None

    @property
    def context(self) -> Dict[str, Any]:
        context = self.request.get("context") if isinstance(self.request, dict) else None
        return context if isinstance(context, dict) else {}

    @property
    def domain(self) -> Optional[str]:
        return self.context.get("domain")

    @property
    def protocol_version(self) -> str:
        return self.context.get("version") or DEFAULT_VERSION

    @property
    def transaction_id(self) -> Optional[str]:
        return self.context.get("transaction_id")

    @property
    def message(self) -> Dict[str, Any]:
        message = self.request.get("message") if isinstance(self.request, dict) else None
        return message if isinstance(message, dict) else {}

    @property
    def sync_response(self) -> Optional[Any]:
        """Inner 'response' payload of the response envelope, if any."""
        if not isinstance(self.response, dict):
            return None
        return self.response.get("response")


@dataclass
class ValidationResult:
    response: Dict[str, Any] = field(default_factory=dict)
    passed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        """Fold another result into this one, keeping execution order."""
        self.passed.extend(other.passed)
        self.failed.extend(other.failed)
        if other.response:
            self.response = other.response
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "response": self.response,
            "passed": list(self.passed),
            "failed": list(self.failed),
        }


@dataclass
class FlowReport:
    flow_id: str
    valid_sequence: bool = True
    errors: List[str] = field(default_factory=list)
    messages: Dict[str, ValidationResult] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "flowId": self.flow_id,
            "validSequence": self.valid_sequence,
            "errors": list(self.errors),
            "messages": {key: result.to_dict() for key, result in self.messages.items()},
        }
