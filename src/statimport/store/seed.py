"""
Reference-data seeding from CSV files.

Loads indicator, time period, scenario and region tables. A table that
already holds rows is left untouched; truncate it first to reseed.
"""

import sqlite3
from dataclasses import dataclass
from pathlib import Path

import pandas as pd
import pandera.pandas as pa

from statimport.errors import PersistenceError
from statimport.schemas.reference import (
    IndicatorSchema,
    RegionSchema,
    ScenarioSchema,
    TimePeriodSchema,
)
from statimport.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class SeedSource:
    """One reference table and the CSV file that fills it."""

    table: str
    filename: str
    schema: type[pa.DataFrameModel]
    columns: tuple[str, ...]


# Insertion order respects foreign keys of indicator_value
SEED_SOURCES: tuple[SeedSource, ...] = (
    SeedSource(
        table="indicator",
        filename="indicators.csv",
        schema=IndicatorSchema,
        columns=(
            "id",
            "key",
            "label",
            "theme",
            "measure_type",
            "polarity",
            "unit",
            "description",
            "sort_order",
        ),
    ),
    SeedSource(
        table="time_period",
        filename="time_periods.csv",
        schema=TimePeriodSchema,
        columns=("id", "period", "granularity", "label"),
    ),
    SeedSource(
        table="scenario",
        filename="scenarios.csv",
        schema=ScenarioSchema,
        columns=("id", "key", "label"),
    ),
    SeedSource(
        table="region",
        filename="regions.csv",
        schema=RegionSchema,
        columns=("code", "name"),
    ),
)


@dataclass(frozen=True)
class SeedResult:
    """Outcome for one reference table."""

    table: str
    status: str  # "imported", "skipped" (already populated) or "missing"
    rows: int


def _to_sql_value(value: object) -> object:
    """Convert pandas scalars to values sqlite3 accepts."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    if hasattr(value, "item"):
        value = value.item()
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _read_source(path: Path, source: SeedSource) -> pd.DataFrame:
    """Read and validate one reference CSV."""
    df = pd.read_csv(path, dtype={"code": str, "key": str})
    df = source.schema.validate(df)
    present = [col for col in source.columns if col in df.columns]
    return df[present]


def seed_reference_data(conn: sqlite3.Connection, directory: Path) -> list[SeedResult]:
    """
    Seed empty reference tables from CSV files in a directory.

    Args:
        conn: Open store connection with the schema in place.
        directory: Directory containing indicators.csv, time_periods.csv,
            scenarios.csv and regions.csv. Missing files are skipped.

    Returns:
        One SeedResult per reference table.

    Raises:
        pandera.errors.SchemaError: If a CSV violates its schema.
        PersistenceError: If writing fails; the table being written is
            rolled back.
    """
    results: list[SeedResult] = []

    for source in SEED_SOURCES:
        path = directory / source.filename
        if not path.exists():
            log.warning("Reference file not found, skipping", path=str(path))
            results.append(SeedResult(table=source.table, status="missing", rows=0))
            continue

        try:
            current = conn.execute(f"SELECT COUNT(*) FROM {source.table}").fetchone()[0]
        except sqlite3.Error as e:
            msg = f"Cannot read table {source.table}: {e}"
            raise PersistenceError(msg) from e
        if current > 0:
            log.info(
                "Table already has data, skipping",
                table=source.table,
                rows=current,
            )
            results.append(SeedResult(table=source.table, status="skipped", rows=current))
            continue

        df = _read_source(path, source)
        columns = list(df.columns)
        placeholders = ", ".join("?" for _ in columns)
        sql = f"INSERT INTO {source.table} ({', '.join(columns)}) VALUES ({placeholders})"
        rows = [
            tuple(_to_sql_value(value) for value in record)
            for record in df.itertuples(index=False, name=None)
        ]

        try:
            conn.execute("BEGIN")
            conn.executemany(sql, rows)
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            msg = f"Failed to seed {source.table}: {e}"
            raise PersistenceError(msg) from e

        log.info("Seeded reference table", table=source.table, rows=len(rows))
        results.append(SeedResult(table=source.table, status="imported", rows=len(rows)))

    return results
