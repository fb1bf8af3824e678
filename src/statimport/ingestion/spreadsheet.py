"""
Spreadsheet decoding for uploads.

Turns workbook bytes into an ordered list of row dicts keyed by header text.
Values keep the type the workbook stores (numbers stay numbers, text stays
text); numeric interpretation belongs to the validator.
"""

import io
from typing import Any

import pandas as pd

from statimport.errors import FormatError
from statimport.utils.logging import get_logger

log = get_logger(__name__)

Row = dict[str, Any]


def _clean_value(value: Any) -> Any:
    """Map empty cells to None; everything else passes through."""
    if value is None:
        return None
    if isinstance(value, str):
        return value if value.strip() else None
    if pd.isna(value):
        return None
    return value


def decode_workbook(content: bytes, sheet_name: str) -> list[Row]:
    """
    Decode one sheet of a workbook into row dicts.

    Args:
        content: Raw workbook bytes (.xlsx, or .xls when xlrd is installed).
        sheet_name: Exact name of the sheet holding the data.

    Returns:
        Rows in sheet order, keyed by header text. Empty cells are None.
        Fully blank rows are dropped.

    Raises:
        FormatError: If the bytes are not a readable workbook, the sheet is
            missing, or the sheet has no data rows.
    """
    try:
        workbook = pd.ExcelFile(io.BytesIO(content))
    except Exception as e:
        msg = f"Failed to parse Excel file: {e}"
        raise FormatError(msg) from e

    with workbook:
        if sheet_name not in workbook.sheet_names:
            msg = f'Sheet "{sheet_name}" not found in Excel file'
            raise FormatError(msg)

        # Only "" counts as empty; text like "N/A" must reach the validator
        df = workbook.parse(
            sheet_name,
            dtype=object,
            keep_default_na=False,
            na_values=[""],
        )

    df.columns = [str(col) for col in df.columns]
    df = df.dropna(how="all")

    rows = [
        {column: _clean_value(value) for column, value in record.items()}
        for record in df.to_dict(orient="records")
    ]
    rows = [row for row in rows if any(value is not None for value in row.values())]

    if not rows:
        msg = "Excel file is empty or has no data rows"
        raise FormatError(msg)

    log.info(
        "Decoded spreadsheet",
        sheet=sheet_name,
        rows=len(rows),
        columns=len(df.columns),
    )
    return rows


def recognize_value_columns(rows: list[Row], prefix: str) -> list[str]:
    """
    Header names of indicator value columns, in sheet order.

    A header is a value column when it starts with the prefix, compared
    case-insensitively (so 'Crime_' also matches 'crime_murder').
    """
    if not rows:
        return []
    folded = prefix.lower()
    return [column for column in rows[0] if column.lower().startswith(folded)]
