"""
Domain records shared across the import pipeline.

Indicator, TimePeriod and Region mirror read-only reference tables.
ObservationRecord is the fact row produced by validation and written by
the upserter.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Indicator:
    """
    Catalog entry for a statistical measure.

    Attributes:
        id: Numeric database id.
        key: Stable lowercase snake_case identifier (e.g. 'crime_murder').
        label: Human-readable label.
        theme: Theme grouping, None when unset.
        measure_type: 'indicator' for raw measures, 'sub_index' or 'index'
            for derived aggregates.
        polarity: Whether higher values are better or worse.
        unit: Unit of the raw value.
        description: Free-text description.
        sort_order: Position within the theme, None when unset.
    """

    id: int
    key: str
    label: str
    theme: str | None
    measure_type: str
    polarity: str | None = None
    unit: str | None = None
    description: str | None = None
    sort_order: int | None = None


@dataclass(frozen=True)
class TimePeriod:
    """A yearly reporting period."""

    id: int
    period: int
    label: str | None = None


@dataclass(frozen=True)
class Region:
    """An administrative region."""

    code: str
    name: str | None = None


@dataclass(frozen=True)
class ObservationRecord:
    """
    One validated fact row.

    The natural key is (indicator_id, time_id, scenario_id, region_code).
    value_0_100 is a derived score and is always None on import.
    """

    indicator_id: int
    time_id: int
    scenario_id: int
    region_code: str
    raw_value: float
    value_0_100: float | None = None

    @property
    def natural_key(self) -> tuple[int, int, int, str]:
        """The (indicator, period, scenario, region) tuple."""
        return (self.indicator_id, self.time_id, self.scenario_id, self.region_code)
