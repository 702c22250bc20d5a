"""
Export module for order CSV generation.
"""
from app.export.csv_emitter import CSV_COLUMNS, csv_filename, flatten_orders, render_csv

__all__ = [
    "CSV_COLUMNS",
    "csv_filename",
    "flatten_orders",
    "render_csv",
]
