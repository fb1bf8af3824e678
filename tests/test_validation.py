"""Tests for row and cell validation."""

from typing import Any

import pytest

from statimport.config import ImportConfig
from statimport.store.lookups import ReferenceLookups
from statimport.validation.rows import (
    CellStatus,
    ErrorKind,
    RowError,
    check_cell,
    parse_number,
    parse_year,
    validate_rows,
)

VALUE_COLUMNS = ["Crime_Murder", "Crime_Assault_Gbh"]


def _row(**values: Any) -> dict[str, Any]:
    row: dict[str, Any] = {
        "Municipality_Code": "JHB",
        "Municipality_Name": "City of Johannesburg",
        "Year": 2024,
        "Crime_Murder": None,
        "Crime_Assault_Gbh": None,
        "Scenario": None,
    }
    row.update(values)
    return row


class TestParsing:
    """Tests for number, year and cell parsing."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (12, 12.0),
            (12.5, 12.5),
            ("12.5", 12.5),
            ("  7 ", 7.0),
            ("1e3", 1000.0),
            ("-3", -3.0),
        ],
    )
    def test_parse_number_accepts(self, value: Any, expected: float) -> None:
        """Test numeric values and numeric text."""
        assert parse_number(value) == expected

    @pytest.mark.parametrize(
        "value",
        ["abc", "12abc", "N/A", "", "nan", "inf", float("nan"), True, None, 10**400],
    )
    def test_parse_number_rejects(self, value: Any) -> None:
        """Test that text, non-finite numbers and booleans are rejected."""
        assert parse_number(value) is None

    @pytest.mark.parametrize("value", ["1e400", "-1e400", "1e-400"])
    def test_parse_number_rejects_out_of_float_range(self, value: str) -> None:
        """Test that text overflowing to inf or underflowing to zero is rejected."""
        assert parse_number(value) is None
        assert check_cell(value) == (CellStatus.NOT_NUMERIC, None)

    def test_parse_number_keeps_explicit_zero(self) -> None:
        """Test that zero written in exponent form is still zero."""
        assert parse_number("0e-400") == 0.0
        assert check_cell("0e-400") == (CellStatus.ZERO, None)

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(2024, 2024), (2024.0, 2024), ("2024", 2024), ("2024.5", None), ("twenty", None)],
    )
    def test_parse_year(self, value: Any, expected: int | None) -> None:
        """Test that only whole numbers are years."""
        assert parse_year(value) == expected

    @pytest.mark.parametrize(
        ("value", "status", "number"),
        [
            (None, CellStatus.EMPTY, None),
            ("   ", CellStatus.EMPTY, None),
            (0, CellStatus.ZERO, None),
            ("0.0", CellStatus.ZERO, None),
            (-1, CellStatus.NEGATIVE, None),
            ("abc", CellStatus.NOT_NUMERIC, None),
            (42, CellStatus.IMPORT, 42.0),
            ("0.5", CellStatus.IMPORT, 0.5),
        ],
    )
    def test_check_cell(self, value: Any, status: CellStatus, number: float | None) -> None:
        """Test cell classification."""
        assert check_cell(value) == (status, number)


class TestRowDimensions:
    """Tests for fail-fast region, year and scenario checks."""

    def test_missing_region_reported_first(self, lookups: ReferenceLookups) -> None:
        """Test that a row missing region and year yields one region error."""
        outcome = validate_rows(
            [_row(Municipality_Code=None, Year=None, Crime_Murder=-5)], VALUE_COLUMNS, lookups
        )

        assert len(outcome.errors) == 1
        error = outcome.errors[0]
        assert error.column == "Municipality_Code"
        assert error.error == "Municipality code is required"
        assert error.kind is ErrorKind.MISSING
        assert error.row == 2

    def test_missing_year(self, lookups: ReferenceLookups) -> None:
        """Test that a missing year is reported."""
        outcome = validate_rows([_row(Year=None)], VALUE_COLUMNS, lookups)
        assert [e.error for e in outcome.errors] == ["Year is required"]

    def test_unknown_region(self, lookups: ReferenceLookups) -> None:
        """Test that an unknown region code is reported."""
        outcome = validate_rows([_row(Municipality_Code="XYZ")], VALUE_COLUMNS, lookups)
        assert outcome.errors[0].error == "Municipality code 'XYZ' not found in database"
        assert outcome.errors[0].kind is ErrorKind.REFERENCE

    def test_numeric_region_code(self, lookups: ReferenceLookups) -> None:
        """Test that region codes stored as numbers match their text form."""
        outcome = validate_rows(
            [_row(Municipality_Code=799.0, Crime_Murder=3)], VALUE_COLUMNS, lookups
        )
        assert outcome.is_valid
        assert outcome.records[0].region_code == "799"

    def test_non_numeric_year(self, lookups: ReferenceLookups) -> None:
        """Test that a non-numeric year is a value error."""
        outcome = validate_rows([_row(Year="last year")], VALUE_COLUMNS, lookups)
        assert outcome.errors[0].error == "Year must be a valid number"
        assert outcome.errors[0].kind is ErrorKind.VALUE

    def test_fractional_year(self, lookups: ReferenceLookups) -> None:
        """Test that a fractional year is a value error."""
        outcome = validate_rows([_row(Year=2024.5)], VALUE_COLUMNS, lookups)
        assert outcome.errors[0].error == "Year must be a valid number"

    def test_year_not_available(self, lookups: ReferenceLookups) -> None:
        """Test that unknown years list the valid ones."""
        outcome = validate_rows([_row(Year=2030)], VALUE_COLUMNS, lookups)
        assert outcome.errors[0].error == (
            "Year '2030' is not available in the system. Valid years: 2023, 2024"
        )

    def test_default_scenario(self, lookups: ReferenceLookups) -> None:
        """Test that an empty scenario falls back to the default."""
        outcome = validate_rows([_row(Crime_Murder=1)], VALUE_COLUMNS, lookups)
        assert outcome.scenarios == {"saps_actual"}
        assert outcome.records[0].scenario_id == 2

    def test_explicit_scenario(self, lookups: ReferenceLookups) -> None:
        """Test that a given scenario is used."""
        outcome = validate_rows(
            [_row(Scenario=" baseline ", Crime_Murder=1)], VALUE_COLUMNS, lookups
        )
        assert outcome.records[0].scenario_id == 1

    def test_unknown_scenario(self, lookups: ReferenceLookups) -> None:
        """Test that an unknown scenario is reported."""
        outcome = validate_rows([_row(Scenario="forecast")], VALUE_COLUMNS, lookups)
        assert outcome.errors[0].error == "Scenario 'forecast' not found in database"
        assert outcome.errors[0].column == "Scenario"

    def test_row_error_skips_cells(self, lookups: ReferenceLookups) -> None:
        """Test that a rejected row contributes no cell errors or records."""
        outcome = validate_rows(
            [_row(Municipality_Code="XYZ", Crime_Murder=-1, Crime_Assault_Gbh=5)],
            VALUE_COLUMNS,
            lookups,
        )
        assert len(outcome.errors) == 1
        assert outcome.records == []

    def test_custom_column_layout(self, lookups: ReferenceLookups) -> None:
        """Test that header names come from configuration."""
        columns = ImportConfig(region_column="Region", year_column="Jahr")
        outcome = validate_rows(
            [{"Region": "CPT", "Jahr": 2023, "Crime_Murder": 4}],
            ["Crime_Murder"],
            lookups,
            columns,
        )
        assert outcome.is_valid
        assert outcome.records[0].time_id == 1


class TestCells:
    """Tests for per-cell validation."""

    def test_valid_record(self, lookups: ReferenceLookups) -> None:
        """Test that a positive value becomes a record."""
        outcome = validate_rows([_row(Crime_Murder=12.5)], VALUE_COLUMNS, lookups)

        assert outcome.is_valid
        record = outcome.records[0]
        assert record.indicator_id == 1
        assert record.time_id == 2
        assert record.region_code == "JHB"
        assert record.raw_value == 12.5
        assert record.value_0_100 is None

    def test_empty_and_zero_skipped(self, lookups: ReferenceLookups) -> None:
        """Test that empty and zero cells are neither records nor errors."""
        outcome = validate_rows(
            [_row(Crime_Murder=0, Crime_Assault_Gbh=None)], VALUE_COLUMNS, lookups
        )
        assert outcome.is_valid
        assert outcome.records == []

    def test_cell_errors_collected_per_cell(self, lookups: ReferenceLookups) -> None:
        """Test that one row can yield several cell errors and a record."""
        outcome = validate_rows(
            [
                _row(Crime_Murder="abc", Crime_Assault_Gbh=-2, Crime_Common_Assault=3),
            ],
            [*VALUE_COLUMNS, "Crime_Common_Assault"],
            lookups,
        )

        assert [(e.column, e.error) for e in outcome.errors] == [
            ("Crime_Murder", "Value must be numeric or left empty"),
            (
                "Crime_Assault_Gbh",
                "Value cannot be negative. Values must be positive numbers.",
            ),
        ]
        assert len(outcome.records) == 1
        assert outcome.records[0].indicator_id == 3

    def test_unknown_indicator(self, lookups: ReferenceLookups) -> None:
        """Test that a filled cell of an unknown indicator column is reported."""
        outcome = validate_rows(
            [_row(Crime_Arson=5)], [*VALUE_COLUMNS, "Crime_Arson"], lookups
        )
        assert outcome.errors[0].error == "Unknown indicator 'crime_arson'"
        assert outcome.errors[0].kind is ErrorKind.REFERENCE

    def test_unknown_indicator_empty_cell_ignored(self, lookups: ReferenceLookups) -> None:
        """Test that an empty cell of an unknown indicator is skipped."""
        outcome = validate_rows(
            [_row(Crime_Arson=None)], [*VALUE_COLUMNS, "Crime_Arson"], lookups
        )
        assert outcome.is_valid

    def test_lowercase_header_maps_to_key(self, lookups: ReferenceLookups) -> None:
        """Test that value columns are matched case-insensitively."""
        outcome = validate_rows([_row(crime_murder=8)], ["crime_murder"], lookups)
        assert outcome.records[0].indicator_id == 1

    def test_row_numbers_follow_sheet(self, lookups: ReferenceLookups) -> None:
        """Test that error rows are 1-based sheet rows below the header."""
        outcome = validate_rows(
            [_row(Crime_Murder=1), _row(Crime_Murder=1), _row(Crime_Murder=-1)],
            VALUE_COLUMNS,
            lookups,
        )
        assert outcome.errors[0].row == 4

    def test_errors_across_rows_not_fail_fast(self, lookups: ReferenceLookups) -> None:
        """Test that every row is validated even after errors."""
        rows = [_row(Municipality_Code="BAD") for _ in range(5)]
        outcome = validate_rows(rows, VALUE_COLUMNS, lookups)
        assert [e.row for e in outcome.errors] == [2, 3, 4, 5, 6]


class TestRowError:
    """Tests for RowError serialization."""

    def test_to_dict(self) -> None:
        """Test the JSON form of an error."""
        error = RowError(3, "Crime_Murder", "abc", "Value must be numeric", ErrorKind.VALUE)
        assert error.to_dict() == {
            "row": 3,
            "column": "Crime_Murder",
            "value": "abc",
            "error": "Value must be numeric",
        }
