"""Row and cell validation module."""

from statimport.validation.reporter import ConsoleReporter
from statimport.validation.rows import (
    ErrorKind,
    RowError,
    ValidationOutcome,
    validate_rows,
)

__all__ = ["ConsoleReporter", "ErrorKind", "RowError", "ValidationOutcome", "validate_rows"]
