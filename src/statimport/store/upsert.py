"""
Transactional upsert of observation records.

All records of one import are written in a single transaction keyed by the
natural key (indicator, period, scenario, region). A failure on any record
rolls back the whole batch.
"""

import sqlite3
from collections.abc import Sequence
from dataclasses import asdict, dataclass

import pandas as pd
from pandera.errors import SchemaError

from statimport.errors import PersistenceError
from statimport.models import ObservationRecord
from statimport.schemas.observation import NATURAL_KEY, ObservationRecordSchema
from statimport.utils.logging import get_logger

log = get_logger(__name__)

_EXISTS_SQL = """
SELECT 1 FROM indicator_value
WHERE indicator_id = ? AND time_id = ? AND scenario_id = ? AND region_code = ?
"""

_UPSERT_SQL = """
INSERT INTO indicator_value
    (indicator_id, time_id, scenario_id, region_code, raw_value, value_0_100)
VALUES (?, ?, ?, ?, ?, ?)
ON CONFLICT (indicator_id, time_id, scenario_id, region_code)
DO UPDATE SET
    raw_value = excluded.raw_value,
    value_0_100 = excluded.value_0_100
"""


@dataclass(frozen=True)
class UpsertResult:
    """Number of fact rows created and overwritten by one import."""

    inserted: int
    updated: int

    @property
    def total(self) -> int:
        """Total rows written."""
        return self.inserted + self.updated


def records_frame(records: Sequence[ObservationRecord]) -> pd.DataFrame:
    """
    Build a validated DataFrame from observation records, in input order.

    A natural key may occur more than once; each occurrence is written in
    turn and the last one wins in the store.

    Raises:
        pandera.errors.SchemaError: If a record violates the record schema.
    """
    df = pd.DataFrame([asdict(record) for record in records])
    return ObservationRecordSchema.validate(df)


def upsert_records(
    conn: sqlite3.Connection, records: Sequence[ObservationRecord]
) -> UpsertResult:
    """
    Insert or update observation records in one transaction.

    Args:
        conn: Connection in autocommit mode (see statimport.store.database).
        records: Validated observation records.

    Returns:
        Counts of inserted and updated rows.

    Raises:
        PersistenceError: If the batch is malformed or any write fails.
            Nothing is committed in that case.
    """
    if not records:
        return UpsertResult(inserted=0, updated=0)

    try:
        df = records_frame(records)
    except SchemaError as e:
        msg = f"Refusing to persist invalid records: {e}"
        raise PersistenceError(msg) from e

    n_repeated = int(df.duplicated(subset=NATURAL_KEY).sum())
    if n_repeated:
        log.info(
            "Batch repeats natural keys; later records overwrite earlier ones",
            n_records=len(df),
            n_repeated=n_repeated,
        )

    inserted = 0
    updated = 0

    try:
        conn.execute("BEGIN")
        for row in df.itertuples(index=False):
            value_0_100 = None if pd.isna(row.value_0_100) else float(row.value_0_100)
            params = (
                int(row.indicator_id),
                int(row.time_id),
                int(row.scenario_id),
                str(row.region_code),
            )
            existed = conn.execute(_EXISTS_SQL, params).fetchone() is not None
            conn.execute(_UPSERT_SQL, (*params, float(row.raw_value), value_0_100))
            if existed:
                updated += 1
            else:
                inserted += 1
        conn.execute("COMMIT")
    except sqlite3.Error as e:
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        log.error("Upsert failed, transaction rolled back", error=str(e))
        msg = f"Failed to persist records: {e}"
        raise PersistenceError(msg) from e

    log.info("Persisted observation records", inserted=inserted, updated=updated)
    return UpsertResult(inserted=inserted, updated=updated)


def fetch_observation(
    conn: sqlite3.Connection,
    indicator_key: str,
    year: int,
    scenario_key: str,
    region_code: str,
) -> dict[str, object] | None:
    """
    Re-query one fact row by its natural key, expressed with reference keys.

    Returns:
        Dict with indicator, year, scenario, region_code, raw_value and
        value_0_100, or None if no such row exists.
    """
    try:
        row = conn.execute(
            """
            SELECT i.key AS indicator, t.period AS year, s.key AS scenario,
                   v.region_code, v.raw_value, v.value_0_100
            FROM indicator_value v
            JOIN indicator i ON i.id = v.indicator_id
            JOIN time_period t ON t.id = v.time_id
            JOIN scenario s ON s.id = v.scenario_id
            WHERE i.key = ? AND t.period = ? AND t.granularity = 'year'
              AND s.key = ? AND v.region_code = ?
            """,
            (indicator_key, year, scenario_key, region_code),
        ).fetchone()
    except sqlite3.Error as e:
        msg = f"Failed to query observation: {e}"
        raise PersistenceError(msg) from e
    return dict(row) if row is not None else None
