"""
Raw record retrieval and parsing.
Records are fetched per session from the storage backend and turned into MessageRecords.
"""

import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

import requests
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .config import STORAGE_TIMEOUT_SEC, get_storage_url
from .errors import InvalidRecordError, UpstreamError
from .schema import MessageRecord
from ..util.logging import logger


class RawPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    flowId: str
    action: str
    createdAt: Union[datetime, float, str]
    jsonRequest: Dict[str, Any]
    jsonResponse: Optional[Dict[str, Any]] = None

    @field_validator('flowId', 'action')
    @classmethod
    def must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('cannot be empty')
        return v


class RawRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    payload: RawPayload


def parse_timestamp(value: Union[datetime, float, int, str]) -> datetime:
    """Normalize ISO strings, epoch milliseconds and datetimes to aware UTC datetimes."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        parsed = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    else:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise InvalidRecordError(f"Invalid createdAt timestamp: {value}") from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_records(raw_records: List[Dict[str, Any]]) -> List[MessageRecord]:
    """Turn raw storage records into MessageRecords, canonicalizing action labels."""
    if not isinstance(raw_records, list):
        raise InvalidRecordError("Expected a list of records")

    records = []
    for index, raw in enumerate(raw_records):
        try:
            payload = RawRecord.model_validate(raw).payload
        except ValidationError as e:
            raise InvalidRecordError(f"Invalid record at index {index}: {e}") from e

        records.append(MessageRecord(
            flow_id=payload.flowId,
            action=payload.action.lower(),
            created_at=parse_timestamp(payload.createdAt),
            request=payload.jsonRequest,
            response=payload.jsonResponse,
        ))

    return records


def fetch_payloads(session_id: str, storage_url: str = None, timeout: float = None) -> List[Dict[str, Any]]:
    """
    Fetch the raw records captured for a session.

    Raises:
        UpstreamError: If the storage backend is unreachable or answers non-2xx
    """
    base_url = (storage_url or get_storage_url()).rstrip("/")
    if not base_url:
        raise UpstreamError("STORAGE_URL is not configured")

    url = f"{base_url}/{session_id}"
    start_time = time.time()
    try:
        response = requests.get(url, timeout=timeout or STORAGE_TIMEOUT_SEC)
    except requests.RequestException as e:
        logger.log_upstream_call("storage", url, "failed")
        raise UpstreamError(f"Failed to fetch payloads for session ID: {session_id}", details=str(e)) from e

    duration_ms = (time.time() - start_time) * 1000
    if not response.ok:
        logger.log_upstream_call("storage", url, "failed", response.status_code, duration_ms)
        raise UpstreamError(
            f"Failed to fetch payloads for session ID: {session_id}",
            status_code=response.status_code,
            details=response.text[:500],
        )

    logger.log_upstream_call("storage", url, "success", response.status_code, duration_ms)
    try:
        return response.json()
    except ValueError as e:
        raise UpstreamError(f"Storage returned invalid JSON for session ID: {session_id}") from e
