"""
Pandera schemas for reference dimension data.

Reference tables are read-only to the import pipeline. These schemas guard
the CSV files used to seed them.
"""

from typing import Optional

import pandera.pandas as pa
from pandera.typing import Series

MEASURE_TYPES = ["indicator", "sub_index", "index"]


class IndicatorSchema(pa.DataFrameModel):
    """
    Schema for the indicator catalog.

    Only measure_type 'indicator' rows are importable; sub-indexes and
    indexes are derived aggregates.
    """

    key: Series[str] = pa.Field(
        unique=True,
        str_matches=r"^[a-z0-9]+(_[a-z0-9]+)*$",
        description="Stable lowercase snake_case identifier",
    )
    label: Series[str] = pa.Field(description="Human-readable label")
    theme: Series[str] | None = pa.Field(nullable=True, description="Theme grouping")
    measure_type: Series[str] = pa.Field(isin=MEASURE_TYPES)
    polarity: Series[str] | None = pa.Field(nullable=True)
    unit: Series[str] | None = pa.Field(nullable=True)
    description: Series[str] | None = pa.Field(nullable=True)
    sort_order: Optional[Series[float]] = pa.Field(
        nullable=True, description="Position within the theme"
    )

    class Config:
        """Schema configuration."""

        name = "IndicatorSchema"
        strict = False
        coerce = True


class TimePeriodSchema(pa.DataFrameModel):
    """Schema for time periods. Imports only accept yearly granularity."""

    period: Series[int] = pa.Field(ge=1900, le=2100, description="Year")
    granularity: Series[str] = pa.Field(description="Granularity tag, e.g. 'year'")
    label: Optional[Series[str]] = pa.Field(nullable=True)

    class Config:
        """Schema configuration."""

        name = "TimePeriodSchema"
        strict = False
        coerce = True
        unique = ["period", "granularity"]


class ScenarioSchema(pa.DataFrameModel):
    """Schema for scenarios (data provenance/version tags)."""

    key: Series[str] = pa.Field(unique=True)
    label: Optional[Series[str]] = pa.Field(nullable=True)

    class Config:
        """Schema configuration."""

        name = "ScenarioSchema"
        strict = False
        coerce = True


class RegionSchema(pa.DataFrameModel):
    """Schema for administrative regions."""

    code: Series[str] = pa.Field(unique=True, str_length={"min_value": 1})
    name: Series[str] | None = pa.Field(nullable=True)

    class Config:
        """Schema configuration."""

        name = "RegionSchema"
        strict = False
        coerce = True
