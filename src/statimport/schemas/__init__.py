"""
Schema definitions using Pandera for data validation.

All tabular data contracts are defined here: reference dimension files
and the observation records handed to the store.
"""

from statimport.schemas.observation import NATURAL_KEY, ObservationRecordSchema
from statimport.schemas.reference import (
    MEASURE_TYPES,
    IndicatorSchema,
    RegionSchema,
    ScenarioSchema,
    TimePeriodSchema,
)

__all__ = [
    "MEASURE_TYPES",
    "NATURAL_KEY",
    "IndicatorSchema",
    "ObservationRecordSchema",
    "RegionSchema",
    "ScenarioSchema",
    "TimePeriodSchema",
]
