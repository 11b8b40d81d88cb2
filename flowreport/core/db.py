"""
SQLite storage for the correlation cache.
"""

import sqlite3
from contextlib import contextmanager
from typing import Generator

from .config import get_db_path, ensure_db_directory


@contextmanager
def get_db(db_path: str = None) -> Generator[sqlite3.Connection, None, None]:
    """Get a SQLite database connection."""
    conn = sqlite3.connect(db_path or get_db_path(), timeout=30, isolation_level=None)
    try:
        yield conn
    finally:
        conn.close()


def init_db(db_path: str = None):
    """Initialize the database with required tables."""
    ensure_db_directory(db_path)
    with get_db(db_path) as conn:
        cursor = conn.cursor()

        # JSON values keyed by "<session>:<transaction>:<key>" or "<session>:<flow>:transactionIds"
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS correlation (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                expires_at REAL NOT NULL
            )
        ''')

        cursor.execute('CREATE INDEX IF NOT EXISTS idx_correlation_expires_at ON correlation(expires_at)')


def health_check(db_path: str = None):
    """Check database health."""
    try:
        with get_db(db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT name FROM sqlite_master WHERE type='table';")
            table_names = [table[0] for table in cursor.fetchall()]
            return 'correlation' in table_names
    except sqlite3.Error:
        return False
