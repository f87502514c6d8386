"""
Constants Package

Shared constant tables for units, validation and business rules.
"""

from .units import (
    UNIT_KG,
    UNIT_L,
    UNIT_UD,
    VALID_UNITS,
    DEFAULT_UNIT,
    USAGE_DECIMALS,
)

from .validation import (
    VALID_PERIODS,
    MAX_LENGTHS,
    MAX_PRICE,
    MAX_AMOUNT,
    MAX_QUANTITY,
    MAX_DECIMALS,
    ALLOWED_WORKBOOK_EXTENSIONS,
    ALLOWED_BACKUP_EXTENSIONS,
)

from .business import (
    VAT_RATE,
    VAT_FACTOR,
    DEFAULT_SETTINGS,
    LAST_TICKET_NUMBER_KEY,
    RECEIPT_DECIMALS,
    INGREDIENT_SHEET,
    RECIPE_SHEET,
    INGREDIENT_COLUMNS,
    RECIPE_COLUMNS,
    YES,
    NO,
    BACKUP_VERSION,
    BACKUP_SECTIONS,
    TOP_PRODUCTS_LIMIT,
    TRAILING_DAYS,
)
