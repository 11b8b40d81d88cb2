"""
Structural check of synchronous ACK/NACK responses.
"""

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .schema import ValidationResult, dig

NACK = "NACK"

_MESSAGES = {
    "missing": "is required",
    "string_type": "must be a string",
    "string_too_short": "is not allowed to be empty",
    "dict_type": "must be of type object",
    "model_type": "must be of type object",
}


class Ack(BaseModel):
    model_config = ConfigDict(extra="allow")

    status: str = Field(min_length=1)


class AckMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    ack: Ack


class AckEnvelope(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: AckMessage
    error: Optional[Any] = None


class NackError(BaseModel):
    model_config = ConfigDict(extra="allow")

    code: str = Field(min_length=1)
    message: str = Field(min_length=1)


def _format_errors(exc: ValidationError, prefix: str = "") -> List[str]:
    errors = []
    for err in exc.errors():
        path = ".".join(str(part) for part in (prefix,) + tuple(err["loc"]) if part != "")
        text = _MESSAGES.get(err["type"], err["msg"])
        errors.append(f'"{path}" {text}' if path else f'"value" {text}')
    return errors


def validate_json_response(payload: Any) -> Tuple[bool, List[str]]:
    """
    Validate the inner 'response' of a response envelope.

    message.ack.status must be a non-empty string. A NACK must carry
    error.code and error.message; any other status must not carry an error.
    All violations are collected.

    Returns:
        (is_valid, errors)
    """
    errors: List[str] = []

    try:
        AckEnvelope.model_validate(payload)
    except ValidationError as e:
        errors.extend(_format_errors(e))

    status = dig(payload, "message", "ack", "status")
    error = payload.get("error") if isinstance(payload, dict) else None

    if status == NACK:
        if error is None:
            errors.append('"error" is required')
        else:
            try:
                NackError.model_validate(error)
            except ValidationError as e:
                errors.extend(_format_errors(e, prefix="error"))
    elif isinstance(payload, dict) and "error" in payload:
        errors.append('"error" is not allowed')

    return not errors, errors


def check_json_response(response_envelope: Dict[str, Any], results: ValidationResult) -> None:
    """Fold the sync-response check of an envelope into results."""
    inner = response_envelope.get("response") if isinstance(response_envelope, dict) else None
    is_valid, errors = validate_json_response(inner)
    if not is_valid:
        results.failed.append(f"Issue with sync response: {', '.join(errors)}")
