"""
SQLite connection handling and table layout.

Connections run in autocommit mode; writers open explicit transactions
with BEGIN so that one import commits or rolls back as a unit.
"""

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from statimport.config.settings import DatabaseConfig
from statimport.errors import PersistenceError
from statimport.utils.logging import get_logger

log = get_logger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS indicator (
    id INTEGER PRIMARY KEY,
    key TEXT NOT NULL UNIQUE,
    label TEXT NOT NULL,
    theme TEXT,
    measure_type TEXT NOT NULL DEFAULT 'indicator',
    polarity TEXT,
    unit TEXT,
    description TEXT,
    sort_order INTEGER
);

CREATE TABLE IF NOT EXISTS time_period (
    id INTEGER PRIMARY KEY,
    period INTEGER NOT NULL,
    granularity TEXT NOT NULL DEFAULT 'year',
    label TEXT,
    UNIQUE (period, granularity)
);

CREATE TABLE IF NOT EXISTS scenario (
    id INTEGER PRIMARY KEY,
    key TEXT NOT NULL UNIQUE,
    label TEXT
);

CREATE TABLE IF NOT EXISTS region (
    code TEXT PRIMARY KEY,
    name TEXT
);

CREATE TABLE IF NOT EXISTS indicator_value (
    id INTEGER PRIMARY KEY,
    indicator_id INTEGER NOT NULL REFERENCES indicator (id),
    time_id INTEGER NOT NULL REFERENCES time_period (id),
    scenario_id INTEGER NOT NULL REFERENCES scenario (id),
    region_code TEXT NOT NULL REFERENCES region (code),
    raw_value REAL,
    value_0_100 REAL,
    UNIQUE (indicator_id, time_id, scenario_id, region_code)
);
"""

TABLES = ("indicator", "time_period", "scenario", "region", "indicator_value")


def connect(path: Path, timeout: float = 30.0) -> sqlite3.Connection:
    """
    Open a connection to the store.

    Args:
        path: SQLite database file. Parent directories are created.
        timeout: Seconds to wait on a locked database.

    Returns:
        Connection with dict-like rows and foreign keys enforced.

    Raises:
        PersistenceError: If the database cannot be opened.
    """
    if str(path) != ":memory:":
        path.parent.mkdir(parents=True, exist_ok=True)
    try:
        conn = sqlite3.connect(str(path), timeout=timeout, isolation_level=None)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
    except sqlite3.Error as e:
        msg = f"Cannot open database {path}: {e}"
        raise PersistenceError(msg) from e
    return conn


@contextmanager
def open_connection(config: DatabaseConfig) -> Iterator[sqlite3.Connection]:
    """Open a connection for the duration of a block and always close it."""
    conn = connect(config.path, timeout=config.timeout)
    try:
        yield conn
    finally:
        conn.close()


def ensure_schema(conn: sqlite3.Connection) -> None:
    """Create all tables if they do not exist yet."""
    try:
        conn.executescript(SCHEMA_SQL)
    except sqlite3.Error as e:
        msg = f"Failed to create schema: {e}"
        raise PersistenceError(msg) from e
    log.info("Database schema ready", tables=list(TABLES))


def table_counts(conn: sqlite3.Connection) -> dict[str, int]:
    """Row count per table, -1 for tables that do not exist."""
    counts: dict[str, int] = {}
    for table in TABLES:
        try:
            row = conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()
            counts[table] = int(row[0])
        except sqlite3.OperationalError:
            counts[table] = -1
    return counts
