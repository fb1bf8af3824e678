"""
Reference lookups for row validation.

Reduces the current dimension tables to key->id maps (and a membership set
for regions). A ReferenceLookups value is built for one import call and
passed explicitly to the validator; nothing is cached between calls.
"""

import sqlite3
from dataclasses import dataclass

from statimport.errors import PersistenceError
from statimport.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class ReferenceLookups:
    """
    Snapshot of reference data at the moment of an import.

    Attributes:
        indicators: Importable indicator key -> indicator id.
        periods: Year -> time period id (yearly granularity only).
        scenarios: Scenario key -> scenario id.
        regions: Known region codes.
    """

    indicators: dict[str, int]
    periods: dict[int, int]
    scenarios: dict[str, int]
    regions: frozenset[str]

    @property
    def valid_years(self) -> list[int]:
        """Sorted list of years accepted by the import."""
        return sorted(self.periods)


def _query(conn: sqlite3.Connection, sql: str, what: str) -> list[sqlite3.Row]:
    """Run one lookup query, turning store failures into PersistenceError."""
    try:
        return conn.execute(sql).fetchall()
    except sqlite3.Error as e:
        msg = f"Failed to load {what}: {e}"
        raise PersistenceError(msg) from e


def load_lookups(conn: sqlite3.Connection) -> ReferenceLookups:
    """
    Load the four reference lookups.

    Args:
        conn: Open store connection.

    Returns:
        ReferenceLookups for a single import.

    Raises:
        PersistenceError: If any of the queries fails. The import must
            abort before evaluating rows.
    """
    indicator_rows = _query(
        conn,
        "SELECT id, key FROM indicator WHERE measure_type = 'indicator'",
        "indicators",
    )
    period_rows = _query(
        conn,
        "SELECT id, period FROM time_period WHERE granularity = 'year'",
        "time periods",
    )
    scenario_rows = _query(conn, "SELECT id, key FROM scenario", "scenarios")
    region_rows = _query(conn, "SELECT code FROM region", "regions")

    lookups = ReferenceLookups(
        indicators={row["key"]: row["id"] for row in indicator_rows},
        periods={int(row["period"]): row["id"] for row in period_rows},
        scenarios={row["key"]: row["id"] for row in scenario_rows},
        regions=frozenset(row["code"] for row in region_rows),
    )

    log.info(
        "Loaded reference lookups",
        indicators=len(lookups.indicators),
        periods=len(lookups.periods),
        scenarios=len(lookups.scenarios),
        regions=len(lookups.regions),
    )
    return lookups
