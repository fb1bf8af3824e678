"""
Importable indicator themes and the column-name mapping.

key_to_column and column_to_key are the only link between spreadsheet
headers and catalog keys. For lowercase snake_case keys they are exact
inverses.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from statimport.models import Indicator

DEFAULT_THEME = "Other"
MISSING_SORT_ORDER = 999


@dataclass(frozen=True)
class Theme:
    """A theme with its importable indicators, sorted by sort_order."""

    theme: str
    indicators: tuple[Indicator, ...] = field(default_factory=tuple)

    @property
    def count(self) -> int:
        """Number of indicators in the theme."""
        return len(self.indicators)


def key_to_column(key: str) -> str:
    """
    Convert an indicator key to its spreadsheet column name.

    Example: crime_murder -> Crime_Murder
    """
    return "_".join(segment[:1].upper() + segment[1:] for segment in key.split("_"))


def column_to_key(column: str) -> str:
    """
    Convert a spreadsheet column name to an indicator key.

    Example: Crime_Murder -> crime_murder
    """
    return column.lower()


def is_importable(indicator: Indicator) -> bool:
    """Raw indicators only; totals are derived and never hand-imported."""
    return (
        indicator.measure_type == "indicator"
        and "_total" not in indicator.key
        and "total" not in indicator.label.lower()
    )


def importable_indicators(catalog: Iterable[Indicator]) -> list[Indicator]:
    """Filter a catalog to the indicators that may be imported."""
    return [indicator for indicator in catalog if is_importable(indicator)]


def _sort_key(indicator: Indicator) -> int:
    # sort_order 0 counts as unset
    return indicator.sort_order or MISSING_SORT_ORDER


def build_themes(catalog: Iterable[Indicator]) -> list[Theme]:
    """
    Group importable indicators by theme.

    Unset themes fall back to 'Other'. Indicators are sorted by sort_order
    within a theme (missing sorts last) and themes alphabetically, ignoring
    case.
    """
    grouped: dict[str, list[Indicator]] = {}
    for indicator in importable_indicators(catalog):
        theme = (indicator.theme or "").strip() or DEFAULT_THEME
        grouped.setdefault(theme, []).append(indicator)

    return [
        Theme(theme=name, indicators=tuple(sorted(grouped[name], key=_sort_key)))
        for name in sorted(grouped, key=str.casefold)
    ]


def theme_names(themes: Sequence[Theme]) -> list[str]:
    """Names of the given themes, in order."""
    return [theme.theme for theme in themes]


def indicators_for_themes(themes: Sequence[Theme], names: Sequence[str]) -> list[Indicator]:
    """
    Indicators of the selected themes, sorted by sort_order.

    The sort runs across all selected themes, so template columns follow
    sort_order rather than theme grouping. Indicators with equal sort_order
    keep theme order.

    Args:
        themes: Output of build_themes.
        names: Theme names to include. Unknown names are ignored.
    """
    selected = set(names)
    indicators = [
        indicator
        for theme in themes
        if theme.theme in selected
        for indicator in theme.indicators
    ]
    return sorted(indicators, key=_sort_key)


def theme_listing(themes: Sequence[Theme]) -> dict[str, Any]:
    """JSON-ready theme listing with the spreadsheet column of each indicator."""
    return {
        "themes": [
            {
                "theme": theme.theme,
                "count": theme.count,
                "indicators": [
                    {
                        "id": indicator.id,
                        "key": indicator.key,
                        "label": indicator.label,
                        "unit": indicator.unit,
                        "polarity": indicator.polarity,
                        "description": indicator.description,
                        "sort_order": indicator.sort_order,
                        "excelColumn": key_to_column(indicator.key),
                    }
                    for indicator in theme.indicators
                ],
            }
            for theme in themes
        ],
        "totalThemes": len(themes),
        "totalIndicators": sum(theme.count for theme in themes),
    }
