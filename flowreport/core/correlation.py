"""
Correlation store.
TTL-bound JSON values shared between message validations of one session: offered
catalog items, stop codes, and the ordered transaction ids seen per flow.
"""

import json
import sqlite3
import time
from typing import Any, List, Optional

from .config import CACHE_TTL_SEC, get_db_path
from .db import get_db, init_db
from ..util.logging import logger


def data_key(session_id: str, transaction_id: str, key: str) -> str:
    """Key for a value scoped to one transaction of a session."""
    return f"{session_id}:{transaction_id}:{key}"


def transaction_history_key(session_id: str, flow_id: str) -> str:
    """Key for the ordered transaction ids observed in one flow."""
    return f"{session_id}:{flow_id}:transactionIds"


class CorrelationStore:
    """
    Key-value cache with per-entry expiry, backed by SQLite.

    Every call opens its own connection, so a store can be shared by the
    threads validating different flows.
    """

    def __init__(self, db_path: str = None, ttl_seconds: int = None):
        self.db_path = db_path or get_db_path()
        self.ttl_seconds = ttl_seconds or CACHE_TTL_SEC
        init_db(self.db_path)

    def get(self, key: str) -> Optional[Any]:
        """Return the JSON value stored under key, or None if missing or expired."""
        with get_db(self.db_path) as conn:
            row = conn.execute(
                "SELECT value FROM correlation WHERE key = ? AND expires_at > ?",
                (key, time.time())
            ).fetchone()

        if row is None:
            logger.debug(f"No correlation data found for key: {key}")
            return None

        try:
            return json.loads(row[0])
        except ValueError as e:
            logger.log_cache_operation("get", key, "failed", {"error": str(e)})
            return None

    def set(self, key: str, value: Any, ttl_seconds: int = None) -> None:
        """Store a JSON-serializable value under key."""
        expires_at = time.time() + (ttl_seconds or self.ttl_seconds)
        with get_db(self.db_path) as conn:
            conn.execute(
                "INSERT OR REPLACE INTO correlation (key, value, expires_at) VALUES (?, ?, ?)",
                (key, json.dumps(value), expires_at)
            )
        logger.log_cache_operation("set", key)

    def append(self, key: str, value: Any, ttl_seconds: int = None) -> List[Any]:
        """
        Atomically append value to the list stored under key.

        The read and the write happen inside one immediate transaction, so
        concurrent appenders never overwrite each other.

        Returns:
            The list after the append
        """
        now = time.time()
        expires_at = now + (ttl_seconds or self.ttl_seconds)
        with get_db(self.db_path) as conn:
            try:
                conn.execute("BEGIN IMMEDIATE")
                row = conn.execute(
                    "SELECT value FROM correlation WHERE key = ? AND expires_at > ?",
                    (key, now)
                ).fetchone()
                items = json.loads(row[0]) if row else []
                if not isinstance(items, list):
                    items = [items]
                items.append(value)
                conn.execute(
                    "INSERT OR REPLACE INTO correlation (key, value, expires_at) VALUES (?, ?, ?)",
                    (key, json.dumps(items), expires_at)
                )
                conn.execute("COMMIT")
            except (sqlite3.Error, ValueError):
                conn.execute("ROLLBACK")
                raise

        logger.log_cache_operation("append", key, details={"length": len(items)})
        return items

    def delete(self, key: str) -> bool:
        """Delete a key. Returns True if something was removed."""
        with get_db(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM correlation WHERE key = ?", (key,))
            return cursor.rowcount > 0

    def purge_expired(self) -> int:
        """Remove expired entries and return how many were removed."""
        with get_db(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM correlation WHERE expires_at <= ?", (time.time(),))
            return cursor.rowcount

    def clear(self) -> None:
        """Remove every entry."""
        with get_db(self.db_path) as conn:
            conn.execute("DELETE FROM correlation")

    # Session-scoped helpers used by leaf validators

    def save_data(self, session_id: str, transaction_id: str, key: str, value: Any) -> None:
        self.set(data_key(session_id, transaction_id, key), value)

    def fetch_data(self, session_id: str, transaction_id: str, key: str) -> Optional[Any]:
        return self.get(data_key(session_id, transaction_id, key))

    def add_transaction_id(self, session_id: str, flow_id: str, transaction_id: str) -> List[str]:
        """Record a transaction id for a flow and return the flow's history."""
        return self.append(transaction_history_key(session_id, flow_id), transaction_id)

    def get_transaction_ids(self, session_id: str, flow_id: str) -> List[str]:
        """Transaction ids recorded for a flow, in the order they were seen."""
        transaction_ids = self.get(transaction_history_key(session_id, flow_id))
        if not transaction_ids:
            logger.debug(f"No transactions found for flow '{flow_id}' in session '{session_id}'")
            return []
        return list(transaction_ids)
