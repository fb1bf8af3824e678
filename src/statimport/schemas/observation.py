"""
Pandera schema for validated observation records.

The store holds one row per (indicator, period, scenario, region) natural
key; a batch may repeat a key and is written in order.
"""

import pandera.pandas as pa
from pandera.typing import Series

NATURAL_KEY = ["indicator_id", "time_id", "scenario_id", "region_code"]


class ObservationRecordSchema(pa.DataFrameModel):
    """
    Schema for observation records ready for persistence.

    Raw values are strictly positive: zero means "no data" and never reaches
    this stage. value_0_100 is a derived score and is always null on import.
    """

    indicator_id: Series[int] = pa.Field(ge=1)
    time_id: Series[int] = pa.Field(ge=1)
    scenario_id: Series[int] = pa.Field(ge=1)
    region_code: Series[str] = pa.Field(str_length={"min_value": 1})
    raw_value: Series[float] = pa.Field(gt=0.0, description="Observed raw value")
    value_0_100: Series[float] = pa.Field(
        nullable=True, description="Normalized 0-100 score (not set on import)"
    )

    class Config:
        """Schema configuration."""

        name = "ObservationRecordSchema"
        strict = True
        coerce = True
