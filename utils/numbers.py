"""
Numeric Input Coercion

Form fields, JSON bodies and spreadsheet cells all funnel through these
helpers. Bad input never fails the calling operation: it falls back to the
default (zero for prices and amounts).
"""

import math


def safe_float(value, default=0.0, min_val=None, max_val=None):
    """Safely parse a float value with optional bounds.

    Accepts comma decimal separators ("6,60") and treats NaN/inf cells
    coming from spreadsheets as missing.
    """
    if isinstance(value, bool):
        return default
    try:
        if isinstance(value, str):
            value = value.strip().replace(',', '.')
        result = float(value) if value not in (None, '') else default
        if result is None or math.isnan(result) or math.isinf(result):
            return default
        if min_val is not None:
            result = max(min_val, result)
        if max_val is not None:
            result = min(max_val, result)
        return result
    except (ValueError, TypeError):
        return default


def safe_int(value, default=1, min_val=None, max_val=None):
    """Safely parse an integer value with optional bounds."""
    parsed = safe_float(value, default=None)
    if parsed is None:
        return default
    result = int(parsed)
    if min_val is not None:
        result = max(min_val, result)
    if max_val is not None:
        result = min(max_val, result)
    return result


def safe_bool(value, default=False):
    """Interpret checkbox/JSON/spreadsheet truthiness ('1', 'true', 'SI', True)."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return not math.isnan(value) and value != 0
    if isinstance(value, int):
        return value != 0
    text = str(value).strip().lower()
    if text in ('1', 'true', 'yes', 'si', 'sí', 'on'):
        return True
    if text in ('0', 'false', 'no', 'off', ''):
        return False
    return default
