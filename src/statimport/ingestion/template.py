"""
Blank import template generation.

Produces an .xlsx workbook with the data sheet to fill in plus reference
sheets listing valid years and regions and an instructions sheet.
"""

import io
from collections.abc import Sequence

import pandas as pd
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from statimport.catalog.themes import key_to_column
from statimport.config.settings import ImportConfig, TemplateConfig
from statimport.models import Indicator, Region, TimePeriod
from statimport.utils.logging import get_logger

log = get_logger(__name__)

YEARS_SHEET = "Available_Years"
REGIONS_SHEET = "Available_Municipalities"
INSTRUCTIONS_SHEET = "Instructions"


def _instructions(
    theme_names: Sequence[str],
    indicators: Sequence[Indicator],
    periods: Sequence[TimePeriod],
    scenario_keys: Sequence[str],
    importer: ImportConfig,
    template: TemplateConfig,
) -> list[str]:
    """Lines of the instructions sheet."""
    years = ", ".join(str(p.period) for p in periods)
    example_column = key_to_column(indicators[0].key) if indicators else "Crime_Murder"
    lines = [
        "STATISTICS IMPORT TEMPLATE - INSTRUCTIONS",
        "",
        f"THEME(S): {', '.join(theme_names)}",
        f"NUMBER OF INDICATORS: {len(indicators)}",
        "",
        "HOW TO USE:",
        f"1. Fill in the {importer.sheet_name} sheet with your statistics",
        f"2. {importer.region_column} and {importer.year_column} are REQUIRED for each row",
        "3. Fill only the indicator columns you have data for",
        "4. Leave cells EMPTY or enter 0 if you don't have data for that indicator",
        "5. Enter only POSITIVE numbers (raw counts or rates)",
        f'6. {importer.scenario_column} defaults to "{importer.default_scenario}" if left empty',
        "",
        "IMPORTANT - VALID YEARS:",
        f"You MUST use one of the following years (see {YEARS_SHEET} sheet):",
        years,
        "Using any other year will cause validation errors.",
        "",
        "IMPORTANT - SCENARIO:",
        f'If you leave {importer.scenario_column} empty, it defaults to "{importer.default_scenario}".',
        f"Available scenarios: {', '.join(scenario_keys)}",
        "",
        "VALIDATION RULES:",
        f"- Region codes must exist (see {REGIONS_SHEET} sheet)",
        "- Year must be one of the valid years listed above",
        "- Values must be numeric (no text)",
        "- Negative numbers cause errors (values must be positive)",
        "- Empty cells and zeros are skipped (not imported, not an error)",
        "- Any error anywhere in the file means nothing is imported",
        "",
        "EXAMPLE:",
        f"{importer.region_column}: {template.sample_region_code}",
        f"{importer.year_column}: {template.default_year}",
        f"{example_column}: 210  (will be imported)",
        f"{example_column}: 0  (will be skipped - zero means no data)",
        f"{importer.scenario_column}: {importer.default_scenario}  (or leave empty for default)",
        "",
        "INDICATORS IN THIS TEMPLATE:",
    ]
    lines.extend(
        f"{key_to_column(ind.key)}: {ind.label} ({ind.unit or '-'})" for ind in indicators
    )
    return lines


def _set_widths(worksheet: Worksheet, widths: Sequence[int]) -> None:
    """Set column widths on an openpyxl worksheet."""
    for idx, width in enumerate(widths, start=1):
        worksheet.column_dimensions[get_column_letter(idx)].width = width


def build_template(
    theme_names: Sequence[str],
    indicators: Sequence[Indicator],
    periods: Sequence[TimePeriod],
    regions: Sequence[Region],
    scenario_keys: Sequence[str],
    year: int | None,
    importer: ImportConfig,
    template: TemplateConfig,
) -> bytes:
    """
    Build the template workbook.

    Args:
        theme_names: Selected theme names (for the instructions sheet).
        indicators: Indicators whose columns the data sheet gets, in order.
        periods: Yearly periods, most recent first.
        regions: Known regions.
        scenario_keys: Known scenario keys.
        year: Year to pre-fill in the sample row; the configured default if None.
        importer: Sheet layout.
        template: Template defaults.

    Returns:
        Workbook bytes (.xlsx).
    """
    value_columns = [key_to_column(ind.key) for ind in indicators]
    headers = [
        importer.region_column,
        importer.region_name_column,
        importer.year_column,
        *value_columns,
        importer.scenario_column,
    ]
    sample_row = [
        template.sample_region_code,
        template.sample_region_name,
        year or template.default_year,
        *([None] * len(value_columns)),
        importer.default_scenario,
    ]
    data = pd.DataFrame([sample_row], columns=headers)

    years = pd.DataFrame(
        {
            "Year": [p.period for p in periods],
            "Label": [p.label or str(p.period) for p in periods],
        }
    )
    region_frame = pd.DataFrame(
        {
            "Municipality Code": [r.code for r in regions],
            "Municipality Name": [r.name for r in regions],
        }
    )
    instructions = pd.DataFrame(
        {
            "Instructions": _instructions(
                theme_names, indicators, periods, scenario_keys, importer, template
            )
        }
    )

    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        data.to_excel(writer, sheet_name=importer.sheet_name, index=False)
        years.to_excel(writer, sheet_name=YEARS_SHEET, index=False)
        region_frame.to_excel(writer, sheet_name=REGIONS_SHEET, index=False)
        instructions.to_excel(writer, sheet_name=INSTRUCTIONS_SHEET, index=False)

        _set_widths(writer.sheets[importer.sheet_name], [20, 30, 10, *[15] * len(value_columns), 15])
        _set_widths(writer.sheets[YEARS_SHEET], [10, 20])
        _set_widths(writer.sheets[REGIONS_SHEET], [20, 35])
        _set_widths(writer.sheets[INSTRUCTIONS_SHEET], [80])

    log.info(
        "Built import template",
        themes=list(theme_names),
        indicators=len(indicators),
        years=len(periods),
        regions=len(regions),
    )
    return buffer.getvalue()


def template_filename(prefix: str, theme_names: Sequence[str], timestamp_ms: int) -> str:
    """Download file name, e.g. crime_stats_Contact_crimes_1700000000000.xlsx."""
    joined = "_".join("_".join(name.split()) for name in theme_names)
    return f"{prefix}_{joined}_{timestamp_ms}.xlsx"
