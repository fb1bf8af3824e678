"""Pytest configuration and shared fixtures."""

import io
import sqlite3
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from statimport.config import AppConfig, DatabaseConfig
from statimport.models import Indicator
from statimport.service import ImportService
from statimport.store.database import connect, ensure_schema
from statimport.store.lookups import ReferenceLookups


INDICATOR_ROWS = [
    # id, key, label, theme, measure_type, polarity, unit, description, sort_order
    (1, "crime_murder", "Murder", "Contact crimes", "indicator", "negative", "per 100k", None, 1),
    (2, "crime_assault_gbh", "Assault GBH", "Contact crimes", "indicator", "negative", "per 100k", None, 2),
    (3, "crime_common_assault", "Common assault", "Contact crimes", "indicator", "negative", None, None, None),
    (4, "crime_contact_total", "Contact crimes total", "Contact crimes", "indicator", "negative", None, None, 4),
    (5, "crime_contact_index", "Contact crime index", "Contact crimes", "sub_index", "negative", None, None, 5),
    (6, "crime_burglary_residential", "Residential burglary", "Property crimes", "indicator", "negative", "count", None, 1),
    (7, "crime_shoplifting", "Shoplifting", None, "indicator", "negative", "count", None, 3),
]

PERIOD_ROWS = [
    (1, 2023, "year", "2023"),
    (2, 2024, "year", "2024"),
    (3, 2022, "quarter", "2022 Q1"),
]

SCENARIO_ROWS = [
    (1, "baseline", "Baseline"),
    (2, "saps_actual", "SAPS actual"),
]

REGION_ROWS = [
    ("JHB", "City of Johannesburg"),
    ("CPT", "City of Cape Town"),
    ("799", "Numeric district"),
]


def seed_test_reference(conn: sqlite3.Connection) -> None:
    """Insert the reference rows used across tests."""
    conn.executemany(
        "INSERT INTO indicator (id, key, label, theme, measure_type, polarity, unit, "
        "description, sort_order) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
        INDICATOR_ROWS,
    )
    conn.executemany(
        "INSERT INTO time_period (id, period, granularity, label) VALUES (?, ?, ?, ?)",
        PERIOD_ROWS,
    )
    conn.executemany("INSERT INTO scenario (id, key, label) VALUES (?, ?, ?)", SCENARIO_ROWS)
    conn.executemany("INSERT INTO region (code, name) VALUES (?, ?)", REGION_ROWS)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Create a SQLite store with schema and reference data."""
    path = tmp_path / "stats.sqlite"
    conn = connect(path)
    try:
        ensure_schema(conn)
        seed_test_reference(conn)
    finally:
        conn.close()
    return path


@pytest.fixture
def conn(db_path: Path) -> Iterator[sqlite3.Connection]:
    """Open connection to the seeded store."""
    connection = connect(db_path)
    yield connection
    connection.close()


@pytest.fixture
def app_config(db_path: Path) -> AppConfig:
    """Default configuration pointing at the seeded store."""
    return AppConfig(database=DatabaseConfig(path=db_path))


@pytest.fixture
def service(app_config: AppConfig) -> ImportService:
    """Import service backed by the seeded store."""
    return ImportService(app_config)


@pytest.fixture
def lookups() -> ReferenceLookups:
    """Reference lookups matching the seeded store."""
    return ReferenceLookups(
        indicators={
            "crime_murder": 1,
            "crime_assault_gbh": 2,
            "crime_common_assault": 3,
            "crime_contact_total": 4,
            "crime_burglary_residential": 6,
            "crime_shoplifting": 7,
        },
        periods={2023: 1, 2024: 2},
        scenarios={"baseline": 1, "saps_actual": 2},
        regions=frozenset({"JHB", "CPT", "799"}),
    )


@pytest.fixture
def sample_catalog() -> list[Indicator]:
    """Indicator catalog matching the seeded store."""
    return [
        Indicator(
            id=row[0],
            key=row[1],
            label=row[2],
            theme=row[3],
            measure_type=row[4],
            polarity=row[5],
            unit=row[6],
            description=row[7],
            sort_order=row[8],
        )
        for row in INDICATOR_ROWS
    ]


def build_workbook(
    rows: list[dict[str, Any]],
    sheet_name: str = "Crime_Data",
    columns: list[str] | None = None,
    extra_sheets: dict[str, pd.DataFrame] | None = None,
) -> bytes:
    """Write rows to an in-memory .xlsx workbook."""
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        pd.DataFrame(rows, columns=columns).to_excel(writer, sheet_name=sheet_name, index=False)
        for name, frame in (extra_sheets or {}).items():
            frame.to_excel(writer, sheet_name=name, index=False)
    return buffer.getvalue()


@pytest.fixture
def make_workbook() -> Callable[..., bytes]:
    """Factory for in-memory upload workbooks."""
    return build_workbook


@pytest.fixture
def value_count(db_path: Path) -> Callable[[], int]:
    """Return a function counting stored fact rows with a fresh connection."""

    def count() -> int:
        connection = connect(db_path)
        try:
            return int(connection.execute("SELECT COUNT(*) FROM indicator_value").fetchone()[0])
        finally:
            connection.close()

    return count
