"""
Row and cell validation for uploaded observations.

Rows are checked in two stages. Row dimensions (region, year, scenario) are
fail-fast: the first problem produces one error and the row's cells are not
looked at. Value cells are then checked independently, so one row can yield
several cell errors next to valid records.

Empty cells and zeros are skipped without an error: zero means "no data
collected", not "zero observed".
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from statimport.catalog.themes import column_to_key
from statimport.config.settings import ImportConfig
from statimport.models import ObservationRecord
from statimport.store.lookups import ReferenceLookups
from statimport.utils.logging import get_logger

log = get_logger(__name__)

# Header row occupies sheet row 1
FIRST_DATA_ROW = 2


class ErrorKind(str, Enum):
    """Category of a collected validation error."""

    MISSING = "missing"  # required field absent
    REFERENCE = "reference"  # unknown region, year, scenario or indicator
    VALUE = "value"  # malformed or negative value


@dataclass(frozen=True)
class RowError:
    """One validation problem, located by sheet row and column."""

    row: int
    column: str
    value: Any
    error: str
    kind: ErrorKind

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation used in API responses."""
        return {
            "row": self.row,
            "column": self.column,
            "value": _json_value(self.value),
            "error": self.error,
        }


@dataclass
class ValidationOutcome:
    """Candidate records and collected errors for a whole batch."""

    records: list[ObservationRecord] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)
    scenarios: set[str] = field(default_factory=set)

    @property
    def is_valid(self) -> bool:
        """True when the batch has no errors at all."""
        return not self.errors


class CellStatus(str, Enum):
    """Result of checking one value cell."""

    IMPORT = "import"
    EMPTY = "empty"
    ZERO = "zero"
    NOT_NUMERIC = "not_numeric"
    NEGATIVE = "negative"


def _json_value(value: Any) -> Any:
    """Values as they can appear in a JSON body."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_number(value: Any) -> float | None:
    """
    Parse a cell value as a finite number.

    Accepts numbers and numeric text (surrounding whitespace allowed).
    Returns None for anything else, booleans included, and for text that
    overflows or underflows a float ("1e400", "1e-400").
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, int):
        number = Decimal(value)
    elif isinstance(value, str):
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None

    if not number.is_finite():
        return None
    result = float(number)
    # Non-zero text must not round to zero
    if not math.isfinite(result) or (result == 0) != number.is_zero():
        return None
    return result


def parse_year(value: Any) -> int | None:
    """Parse a year cell; whole-number floats such as 2024.0 are accepted."""
    number = parse_number(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def check_cell(value: Any) -> tuple[CellStatus, float | None]:
    """
    Classify one value cell.

    Returns:
        Status and, for IMPORT, the parsed positive value.
    """
    if _is_blank(value):
        return CellStatus.EMPTY, None
    number = parse_number(value)
    if number is None:
        return CellStatus.NOT_NUMERIC, None
    if number == 0:
        return CellStatus.ZERO, None
    if number < 0:
        return CellStatus.NEGATIVE, None
    return CellStatus.IMPORT, number


def _region_code(value: Any) -> str:
    # Numeric codes come back from the workbook as numbers
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _validate_row_dimensions(
    row: dict[str, Any],
    row_num: int,
    lookups: ReferenceLookups,
    columns: ImportConfig,
) -> tuple[str, int, str] | RowError:
    """
    Check region, year and scenario of one row.

    Returns:
        (region_code, year, scenario_key) or the first error found.
    """
    region_value = row.get(columns.region_column)
    if _is_blank(region_value):
        return RowError(
            row_num,
            columns.region_column,
            region_value,
            "Municipality code is required",
            ErrorKind.MISSING,
        )

    year_value = row.get(columns.year_column)
    if _is_blank(year_value):
        return RowError(
            row_num, columns.year_column, year_value, "Year is required", ErrorKind.MISSING
        )

    region_code = _region_code(region_value)
    if region_code not in lookups.regions:
        return RowError(
            row_num,
            columns.region_column,
            region_value,
            f"Municipality code '{region_code}' not found in database",
            ErrorKind.REFERENCE,
        )

    year = parse_year(year_value)
    if year is None:
        return RowError(
            row_num,
            columns.year_column,
            year_value,
            "Year must be a valid number",
            ErrorKind.VALUE,
        )
    if year not in lookups.periods:
        valid_years = ", ".join(str(y) for y in lookups.valid_years)
        return RowError(
            row_num,
            columns.year_column,
            year_value,
            f"Year '{year}' is not available in the system. Valid years: {valid_years}",
            ErrorKind.REFERENCE,
        )

    scenario_value = row.get(columns.scenario_column)
    scenario = (
        columns.default_scenario if _is_blank(scenario_value) else str(scenario_value).strip()
    )
    if scenario not in lookups.scenarios:
        return RowError(
            row_num,
            columns.scenario_column,
            scenario,
            f"Scenario '{scenario}' not found in database",
            ErrorKind.REFERENCE,
        )

    return region_code, year, scenario


def validate_rows(
    rows: Sequence[dict[str, Any]],
    value_columns: Sequence[str],
    lookups: ReferenceLookups,
    columns: ImportConfig | None = None,
) -> ValidationOutcome:
    """
    Validate all rows of an upload.

    Errors are collected over the whole batch; validation never stops at
    the first error. Whether any records may be persisted despite errors is
    the caller's decision.

    Args:
        rows: Decoded rows in sheet order.
        value_columns: Recognized indicator value columns.
        lookups: Reference data snapshot for this import.
        columns: Sheet layout (header names, default scenario).

    Returns:
        Candidate records, errors, and the scenario keys used by valid rows.
    """
    columns = columns or ImportConfig()
    outcome = ValidationOutcome()

    for index, row in enumerate(rows):
        row_num = index + FIRST_DATA_ROW

        dimensions = _validate_row_dimensions(row, row_num, lookups, columns)
        if isinstance(dimensions, RowError):
            outcome.errors.append(dimensions)
            continue

        region_code, year, scenario = dimensions
        outcome.scenarios.add(scenario)

        for column in value_columns:
            value = row.get(column)
            status, number = check_cell(value)

            if status in (CellStatus.EMPTY, CellStatus.ZERO):
                continue
            if status is CellStatus.NOT_NUMERIC:
                outcome.errors.append(
                    RowError(
                        row_num,
                        column,
                        value,
                        "Value must be numeric or left empty",
                        ErrorKind.VALUE,
                    )
                )
                continue
            if status is CellStatus.NEGATIVE:
                outcome.errors.append(
                    RowError(
                        row_num,
                        column,
                        value,
                        "Value cannot be negative. Values must be positive numbers.",
                        ErrorKind.VALUE,
                    )
                )
                continue

            indicator_key = column_to_key(column)
            indicator_id = lookups.indicators.get(indicator_key)
            if indicator_id is None:
                outcome.errors.append(
                    RowError(
                        row_num,
                        column,
                        value,
                        f"Unknown indicator '{indicator_key}'",
                        ErrorKind.REFERENCE,
                    )
                )
                continue

            outcome.records.append(
                ObservationRecord(
                    indicator_id=indicator_id,
                    time_id=lookups.periods[year],
                    scenario_id=lookups.scenarios[scenario],
                    region_code=region_code,
                    raw_value=number,
                    value_0_100=None,
                )
            )

    log.info(
        "Validated rows",
        rows=len(rows),
        value_columns=len(value_columns),
        records=len(outcome.records),
        errors=len(outcome.errors),
    )
    return outcome
