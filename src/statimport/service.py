"""
Import orchestration.

Composes decoding, column recognition, reference lookups, validation and
persistence for uploads, and serves theme listings and templates.

Responses are transport-neutral: a status code in HTTP terms plus a
JSON-ready body, or workbook bytes for templates.
"""

import sqlite3
import time
import uuid
from collections.abc import Callable
from contextlib import AbstractContextManager
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any

from statimport.catalog.themes import (
    build_themes,
    indicators_for_themes,
    theme_listing,
    theme_names,
)
from statimport.config.settings import AppConfig
from statimport.errors import FormatError, PersistenceError, RequestError
from statimport.ingestion.spreadsheet import decode_workbook, recognize_value_columns
from statimport.ingestion.template import build_template, template_filename
from statimport.store.catalog import (
    fetch_indicator_catalog,
    fetch_regions,
    fetch_scenario_keys,
    fetch_year_periods,
)
from statimport.store.database import open_connection
from statimport.store.lookups import ReferenceLookups, load_lookups
from statimport.store.upsert import UpsertResult, upsert_records
from statimport.utils.logging import get_logger, log_context
from statimport.validation.rows import ValidationOutcome, validate_rows

log = get_logger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

ConnectionFactory = Callable[[], AbstractContextManager[sqlite3.Connection]]


@dataclass(frozen=True)
class ServiceResponse:
    """
    Result of a service call.

    Attributes:
        status_code: HTTP-style status (200, 400 or 500).
        body: JSON-ready body; None for file downloads.
        content: File bytes for downloads.
        filename: Suggested download file name.
        media_type: MIME type of content.
    """

    status_code: int
    body: dict[str, Any] | None = None
    content: bytes | None = None
    filename: str | None = None
    media_type: str | None = None

    @property
    def ok(self) -> bool:
        """True for 2xx responses."""
        return 200 <= self.status_code < 300

    def json_body(self) -> dict[str, Any]:
        """
        The JSON body of the response.

        Raises:
            ValueError: If the response is a file download.
        """
        if self.body is None:
            msg = f"Response {self.status_code} is a file download, not JSON"
            raise ValueError(msg)
        return self.body


def _error(status_code: int, message: str, **extra: Any) -> ServiceResponse:
    body: dict[str, Any] = {"error": message}
    body.update({k: v for k, v in extra.items() if v is not None})
    return ServiceResponse(status_code=status_code, body=body)


class ImportService:
    """
    Entry point for uploads, theme listings and template downloads.

    Each call opens its own connection and builds its own reference
    lookups; nothing is shared between calls.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        connection_factory: ConnectionFactory | None = None,
    ) -> None:
        """
        Initialize the service.

        Args:
            config: Application configuration (defaults when None).
            connection_factory: Returns a context manager yielding a store
                connection. Defaults to the configured SQLite database.
        """
        self.config = config or AppConfig()
        self._connection_factory = connection_factory or (
            lambda: open_connection(self.config.database)
        )

    # Upload

    def upload(self, content: bytes | None, filename: str | None = None) -> ServiceResponse:
        """
        Validate and import one spreadsheet.

        All-or-nothing: when any row or cell has an error, nothing is
        persisted and the errors (capped) are returned.

        Args:
            content: Uploaded file bytes.
            filename: Uploaded file name, used for the extension check.

        Returns:
            200 with summary and details, 400 for request, format and
            validation errors, 500 for store failures.
        """
        started = time.perf_counter()
        import_id = uuid.uuid4().hex[:8]

        with log_context(import_id=import_id, filename=filename):
            try:
                data = self._check_upload(content, filename)
                rows = decode_workbook(data, self.config.importer.sheet_name)

                value_columns = recognize_value_columns(
                    rows, self.config.importer.value_column_prefix
                )
                if not value_columns:
                    prefix = self.config.importer.value_column_prefix
                    msg = "No indicator columns found in Excel file"
                    raise RequestError(
                        msg,
                        hint=f'Columns should start with "{prefix}" (e.g., {prefix}Murder, {prefix}Assault)',
                    )

                with self._connection_factory() as conn:
                    lookups = load_lookups(conn)
                    outcome = validate_rows(
                        rows, value_columns, lookups, self.config.importer
                    )

                    if outcome.errors:
                        log.warning(
                            "Import rejected, validation errors",
                            errors=len(outcome.errors),
                            valid_records=len(outcome.records),
                        )
                        return self._validation_failure(rows, outcome)

                    if not outcome.records:
                        return _error(
                            400,
                            "No valid data to import. All cells were empty or zero.",
                            success=False,
                            hint="Make sure to enter positive numbers for the indicators you want to import.",
                        )

                    result = upsert_records(conn, outcome.records)

            except FormatError as e:
                log.warning("Upload rejected, unreadable spreadsheet", error=str(e))
                return _error(400, str(e))
            except RequestError as e:
                log.warning("Upload rejected", error=str(e))
                return _error(400, str(e), hint=e.hint)
            except PersistenceError as e:
                log.error("Import failed", error=str(e))
                return ServiceResponse(
                    status_code=500, body={"success": False, "error": str(e)}
                )

            elapsed = time.perf_counter() - started
            log.info(
                "Import completed",
                inserted=result.inserted,
                updated=result.updated,
                seconds=round(elapsed, 3),
            )
            return ServiceResponse(
                status_code=200,
                body=self._success_body(
                    rows, value_columns, outcome, lookups, result, elapsed
                ),
            )

    def _check_upload(self, content: bytes | None, filename: str | None) -> bytes:
        """Request-level checks that need no decoding. Returns the content."""
        if not content:
            msg = "No file uploaded. Please attach an Excel file."
            raise RequestError(msg, hint="Send the workbook as the 'file' attachment.")

        limit = self.config.importer.max_upload_bytes
        if len(content) > limit:
            msg = f"File too large: {len(content)} bytes (limit {limit} bytes)"
            raise RequestError(msg)

        if filename:
            suffix = PurePath(filename).suffix.lower()
            allowed = self.config.importer.allowed_extensions
            if suffix not in allowed:
                msg = "Invalid file type. Please upload an Excel file (.xlsx or .xls)"
                raise RequestError(msg, hint=f"Accepted extensions: {', '.join(allowed)}")
        return content

    def _validation_failure(
        self, rows: list[dict[str, Any]], outcome: ValidationOutcome
    ) -> ServiceResponse:
        max_errors = self.config.importer.max_errors
        return ServiceResponse(
            status_code=400,
            body={
                "success": False,
                "summary": {
                    "totalRows": len(rows),
                    "validRecords": len(outcome.records),
                    "failed": len(outcome.errors),
                },
                "errors": [error.to_dict() for error in outcome.errors[:max_errors]],
            },
        )

    def _success_body(
        self,
        rows: list[dict[str, Any]],
        value_columns: list[str],
        outcome: ValidationOutcome,
        lookups: ReferenceLookups,
        result: UpsertResult,
        elapsed: float,
    ) -> dict[str, Any]:
        total_cells = len(rows) * len(value_columns)
        processed = len(outcome.records)

        keys_by_id = {v: k for k, v in lookups.indicators.items()}
        years_by_id = {v: k for k, v in lookups.periods.items()}
        indicator_ids = dict.fromkeys(r.indicator_id for r in outcome.records)

        scenarios = sorted(outcome.scenarios)
        scenario: str | list[str] = scenarios[0] if len(scenarios) == 1 else scenarios

        return {
            "success": True,
            "summary": {
                "totalRows": len(rows),
                "totalCells": total_cells,
                "cellsProcessed": processed,
                "inserted": result.inserted,
                "updated": result.updated,
                "skipped": total_cells - processed,
                "failed": 0,
                "processingTime": f"{elapsed:.2f}s",
            },
            "details": {
                "affectedMunicipalities": sorted({r.region_code for r in outcome.records}),
                "affectedIndicators": [keys_by_id[i] for i in indicator_ids],
                "affectedYears": sorted({years_by_id[r.time_id] for r in outcome.records}),
                "scenario": scenario,
            },
        }

    # Themes and templates

    def list_themes(self) -> ServiceResponse:
        """List importable themes with their indicators and column names."""
        try:
            with self._connection_factory() as conn:
                themes = build_themes(fetch_indicator_catalog(conn))
        except PersistenceError as e:
            log.error("Theme listing failed", error=str(e))
            return _error(500, str(e))
        return ServiceResponse(status_code=200, body=theme_listing(themes))

    def template(self, themes_param: str | None, year: int | None = None) -> ServiceResponse:
        """
        Build a blank import template for comma-separated theme names.

        Args:
            themes_param: Comma-separated theme names, e.g. "Contact crimes,Property".
            year: Year to pre-fill in the sample row.

        Returns:
            200 with workbook bytes, 400 when themes are missing or unknown,
            500 for store failures.
        """
        requested = [t.strip() for t in (themes_param or "").split(",") if t.strip()]
        if not requested:
            return _error(
                400,
                "themes parameter is required",
                example="themes=Contact crimes",
            )

        try:
            with self._connection_factory() as conn:
                themes = build_themes(fetch_indicator_catalog(conn))
                available = theme_names(themes)
                invalid = [t for t in requested if t not in available]
                if invalid:
                    return _error(
                        400,
                        f"Invalid theme(s): {', '.join(invalid)}",
                        availableThemes=available,
                    )

                content = build_template(
                    theme_names=requested,
                    indicators=indicators_for_themes(themes, requested),
                    periods=fetch_year_periods(conn),
                    regions=fetch_regions(conn),
                    scenario_keys=fetch_scenario_keys(conn),
                    year=year,
                    importer=self.config.importer,
                    template=self.config.template,
                )
        except PersistenceError as e:
            log.error("Template generation failed", error=str(e))
            return _error(500, str(e))

        filename = template_filename(
            self.config.template.filename_prefix, requested, int(time.time() * 1000)
        )
        return ServiceResponse(
            status_code=200,
            content=content,
            filename=filename,
            media_type=XLSX_MEDIA_TYPE,
        )
