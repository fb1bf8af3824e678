"""
Read-only queries for catalog and dimension listings.

Used by theme listing and template generation. Validation uses the
reduced maps from statimport.store.lookups instead.
"""

import sqlite3

from statimport.errors import PersistenceError
from statimport.models import Indicator, Region, TimePeriod
from statimport.utils.logging import get_logger

log = get_logger(__name__)


def fetch_indicator_catalog(conn: sqlite3.Connection) -> list[Indicator]:
    """
    Load the full indicator catalog, derived measures included.

    Filtering to importable indicators is the theme mapper's job.
    """
    try:
        rows = conn.execute(
            """
            SELECT id, key, label, theme, measure_type, polarity, unit,
                   description, sort_order
            FROM indicator
            ORDER BY id
            """
        ).fetchall()
    except sqlite3.Error as e:
        msg = f"Failed to load indicator catalog: {e}"
        raise PersistenceError(msg) from e

    catalog = [
        Indicator(
            id=row["id"],
            key=row["key"],
            label=row["label"],
            theme=row["theme"],
            measure_type=row["measure_type"],
            polarity=row["polarity"],
            unit=row["unit"],
            description=row["description"],
            sort_order=row["sort_order"],
        )
        for row in rows
    ]
    log.debug("Loaded indicator catalog", n_indicators=len(catalog))
    return catalog


def fetch_year_periods(conn: sqlite3.Connection) -> list[TimePeriod]:
    """Yearly periods, most recent first."""
    try:
        rows = conn.execute(
            """
            SELECT id, period, label
            FROM time_period
            WHERE granularity = 'year'
            ORDER BY period DESC
            """
        ).fetchall()
    except sqlite3.Error as e:
        msg = f"Failed to load time periods: {e}"
        raise PersistenceError(msg) from e
    return [TimePeriod(id=row["id"], period=row["period"], label=row["label"]) for row in rows]


def fetch_regions(conn: sqlite3.Connection) -> list[Region]:
    """All regions ordered by code."""
    try:
        rows = conn.execute("SELECT code, name FROM region ORDER BY code").fetchall()
    except sqlite3.Error as e:
        msg = f"Failed to load regions: {e}"
        raise PersistenceError(msg) from e
    return [Region(code=row["code"], name=row["name"]) for row in rows]


def fetch_scenario_keys(conn: sqlite3.Connection) -> list[str]:
    """All scenario keys ordered by id."""
    try:
        rows = conn.execute("SELECT key FROM scenario ORDER BY id").fetchall()
    except sqlite3.Error as e:
        msg = f"Failed to load scenarios: {e}"
        raise PersistenceError(msg) from e
    return [row["key"] for row in rows]
