"""
Exception hierarchy for the import pipeline.

Raised errors terminate a request: FormatError and RequestError before any
row is evaluated, PersistenceError when the store fails. Per-row and per-cell
problems are not raised; they are collected as RowError values by the
validator (see statimport.validation.rows).
"""


class StatImportError(Exception):
    """Base exception for all statimport errors."""


class ConfigurationError(StatImportError):
    """Raised when a configuration file is missing required values or invalid."""


class FormatError(StatImportError):
    """
    Raised when an uploaded spreadsheet cannot be used.

    Covers unreadable workbooks, a missing data sheet and sheets
    without data rows.
    """


class RequestError(StatImportError):
    """
    Raised for request-level problems independent of row content.

    Covers a missing upload, an oversized or wrongly typed file, a sheet
    without recognized value columns and unknown theme names.
    """

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class PersistenceError(StatImportError):
    """
    Raised when the relational store fails.

    Reference lookups and the upsert transaction both surface store
    failures through this exception. The open transaction is rolled back
    before it is raised.
    """
