"""
Typed configuration models using Pydantic.

All configuration is defined here with explicit typing and validation.
Column names, sheet names and defaults are never hardcoded in processing code.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DatabaseConfig(BaseModel):
    """Relational store configuration."""

    model_config = ConfigDict(frozen=True)

    path: Path = Field(
        default=Path("./data/statimport.sqlite"),
        description="Path to the SQLite database file",
    )
    timeout: float = Field(
        default=30.0, gt=0, description="Seconds to wait for a locked database"
    )


class ImportConfig(BaseModel):
    """Spreadsheet import configuration.

    Describes the layout of the upload sheet: which sheet holds the data,
    which headers carry the row dimensions and how value columns are
    recognized.
    """

    model_config = ConfigDict(frozen=True)

    sheet_name: str = Field(default="Crime_Data", description="Required data sheet")
    value_column_prefix: str = Field(
        default="Crime_",
        description="Header prefix marking indicator value columns (case-insensitive)",
    )
    region_column: str = Field(default="Municipality_Code")
    region_name_column: str = Field(default="Municipality_Name")
    year_column: str = Field(default="Year")
    scenario_column: str = Field(default="Scenario")
    default_scenario: str = Field(
        default="saps_actual", description="Scenario used when a row leaves it empty"
    )
    max_errors: int = Field(
        default=50, ge=1, description="Maximum number of errors returned to the caller"
    )
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024, gt=0, description="Upload size limit (10 MB)"
    )
    allowed_extensions: tuple[str, ...] = Field(default=(".xlsx", ".xls"))

    @field_validator("value_column_prefix", "sheet_name")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Ensure names used for matching are not blank."""
        if not v.strip():
            msg = "must not be blank"
            raise ValueError(msg)
        return v


class TemplateConfig(BaseModel):
    """Blank template generation configuration."""

    model_config = ConfigDict(frozen=True)

    default_year: int = Field(default=2024, ge=1900, le=2100)
    sample_region_code: str = Field(default="JHB")
    sample_region_name: str = Field(default="City of Johannesburg")
    filename_prefix: str = Field(default="crime_stats")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(frozen=True)

    level: str = Field(default="INFO")
    json_output: bool = Field(default=False)


class AppConfig(BaseModel):
    """Complete application configuration.

    Every section has defaults, so AppConfig() is a working configuration
    for a local database at ./data/statimport.sqlite.
    """

    model_config = ConfigDict(frozen=True)

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    importer: ImportConfig = Field(default_factory=ImportConfig)
    template: TemplateConfig = Field(default_factory=TemplateConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def database_path(self) -> Path:
        """Convenience accessor for the database file."""
        return self.database.path
