"""
Settings Service

Reads and writes the user settings (display decimals, currency symbol,
delivery commission) kept in the Settings key-value table.
"""

import logging

from constants import DEFAULT_SETTINGS, MAX_DECIMALS, MAX_LENGTHS
from utils import safe_float, safe_int, sanitize_text

logger = logging.getLogger(__name__)


def coerce_settings(values, base=None):
    """
    Merge raw values over base (defaults when omitted), coercing types.

    Unknown keys are ignored; bad numbers fall back to the current value.
    """
    current = dict(DEFAULT_SETTINGS if base is None else base)
    values = values or {}
    if 'decimals' in values:
        current['decimals'] = safe_int(values['decimals'], default=current['decimals'],
                                       min_val=0, max_val=MAX_DECIMALS)
    if 'currency' in values:
        currency = sanitize_text(values['currency'], max_length=MAX_LENGTHS['currency'])
        current['currency'] = currency or current['currency']
    if 'glovoCommission' in values:
        current['glovoCommission'] = safe_float(values['glovoCommission'], default=current['glovoCommission'],
                                                min_val=0.0, max_val=100.0)
    return current


def get_setting(Settings, key, default=None):
    row = Settings.query.filter_by(key=key).first()
    return row.value if row is not None else default


def set_setting(db, Settings, key, value):
    """Stage a key-value write; the caller commits."""
    row = Settings.query.filter_by(key=key).first()
    if row is None:
        row = Settings(key=key)
        db.session.add(row)
    row.value = None if value is None else str(value)
    return row


def get_app_settings(Settings):
    """User settings with defaults filled in."""
    stored = {key: get_setting(Settings, key) for key in DEFAULT_SETTINGS}
    return coerce_settings({k: v for k, v in stored.items() if v is not None})


def update_app_settings(db, Settings, values, commit=True):
    """Apply a partial update and return the resulting settings."""
    merged = coerce_settings(values, base=get_app_settings(Settings))
    for key, value in merged.items():
        set_setting(db, Settings, key, value)
    if commit:
        db.session.commit()
        logger.info("Settings updated: %s", merged)
    return merged
