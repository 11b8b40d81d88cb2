"""
Shared fixtures: a temporary correlation store, a resolver with the bundled
validators registered, and builders for captured messages.
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone

import pytest

# Set up test environment with temporary database
TEST_DB_PATH = tempfile.mkstemp(suffix='.db')[1]
os.environ['DB_PATH'] = TEST_DB_PATH
os.environ['ENABLED_RULES'] = ""
os.environ['UTILITY'] = "false"
os.environ['STORAGE_URL'] = "http://storage.test/payloads"
os.environ['API_SERVICE_KEY'] = "test-api-key"

from flowreport.core.correlation import CorrelationStore
from flowreport.core.resolver import ValidatorResolver
from flowreport.core.schema import MessageRecord
from flowreport.validations import register_builtin_validators

BASE_TIME = datetime(2024, 11, 5, 10, 0, 0, tzinfo=timezone.utc)
DOMAIN = "ONDC:TRV11"

# Expected action order of a complete default flow
DEFAULT_FLOW = [
    "search", "on_search", "search", "on_search", "select",
    "on_select", "init", "on_init", "confirm", "on_confirm",
]


def make_request(action, transaction_id="txn-1", message=None, version="2.0.1",
                 domain=DOMAIN, timestamp="2024-11-05T10:00:00.000Z"):
    """Build a protocol request envelope."""
    return {
        "context": {
            "domain": domain,
            "action": action,
            "version": version,
            "transaction_id": transaction_id,
            "message_id": f"msg-{action}",
            "timestamp": timestamp,
        },
        "message": message if message is not None else {},
    }


def ack_response(status="ACK", error=None):
    """Build a stored response envelope wrapping a sync ACK/NACK."""
    inner = {"message": {"ack": {"status": status}}}
    if error is not None:
        inner["error"] = error
    return {"response": inner}


def make_record(action, flow_id="flow-1", offset=0, transaction_id="txn-1", message=None,
                version="2.0.1", domain=DOMAIN, response=None):
    """Build a MessageRecord created `offset` seconds after BASE_TIME."""
    return MessageRecord(
        flow_id=flow_id,
        action=action,
        created_at=BASE_TIME + timedelta(seconds=offset),
        request=make_request(action, transaction_id, message, version, domain),
        response=response,
    )


def make_raw(action, flow_id="flow-1", offset=0, transaction_id="txn-1", message=None,
             version="2.0.1", response=None):
    """Build a raw storage record as returned by the storage backend."""
    created_at = BASE_TIME + timedelta(seconds=offset)
    payload = {
        "flowId": flow_id,
        "action": action,
        "createdAt": created_at.isoformat().replace("+00:00", "Z"),
        "jsonRequest": make_request(action, transaction_id, message, version),
    }
    if response is not None:
        payload["jsonResponse"] = response
    return {"payload": payload}


def default_flow_raw(flow_id="flow-1"):
    """Raw records for a complete default flow with two discovery transactions."""
    transaction_ids = ["txn-1", "txn-1", "txn-2", "txn-2"] + ["txn-2"] * 6
    return [
        make_raw(action, flow_id=flow_id, offset=index, transaction_id=transaction_ids[index],
                 response=ack_response())
        for index, action in enumerate(DEFAULT_FLOW)
    ]


@pytest.fixture
def store(tmp_path):
    """Correlation store on a fresh database file."""
    return CorrelationStore(db_path=str(tmp_path / "correlation.db"))


@pytest.fixture
def resolver():
    """Resolver over the bundled configuration with built-in entry points registered."""
    register_builtin_validators()
    return ValidatorResolver()


@pytest.fixture
def enable_rules(monkeypatch):
    """Switch on optional rules for a single test."""
    def _enable(*names):
        monkeypatch.setenv("ENABLED_RULES", ",".join(names))
    return _enable
