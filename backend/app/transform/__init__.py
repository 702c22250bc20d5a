"""
Transform module for order normalization and filter presets.
"""
from app.transform.normalizers import (
    normalize_order,
    format_address,
    NormalizeError,
)
from app.transform.date_ranges import resolve_date_range, DATE_RANGES

__all__ = [
    "normalize_order",
    "format_address",
    "NormalizeError",
    "resolve_date_range",
    "DATE_RANGES",
]
