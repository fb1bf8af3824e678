"""
Statimport: Regional Statistics Spreadsheet Import.

This package validates spreadsheet uploads of indicator observations per
region and year against reference dimensions, and persists them as
normalized fact records.
"""

from importlib.metadata import version

__version__ = version("statimport")

__all__ = ["__version__"]
