"""
Spreadsheet ingestion layer.

All workbook reading and writing happens through this package so that
sheet layout rules live in one place.
"""
