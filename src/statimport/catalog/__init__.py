"""Indicator catalog: importable themes and spreadsheet column mapping."""

from statimport.catalog.themes import (
    Theme,
    build_themes,
    column_to_key,
    importable_indicators,
    indicators_for_themes,
    key_to_column,
    theme_listing,
)

__all__ = [
    "Theme",
    "build_themes",
    "column_to_key",
    "importable_indicators",
    "indicators_for_themes",
    "key_to_column",
    "theme_listing",
]
