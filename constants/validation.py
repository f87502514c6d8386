"""
Validation Constants

Whitelists and limits applied to user input before it is stored.
"""

# Report periods accepted by the reporting endpoints
VALID_PERIODS = ('daily', 'weekly', 'monthly', 'annual')

# Maximum field lengths
MAX_LENGTHS = {
    'ingredient_name': 120,
    'pizza_name': 120,
    'currency': 8,
}

# Bounds for numeric input
MAX_PRICE = 99999.99
MAX_AMOUNT = 9999.0
MAX_QUANTITY = 999
MAX_DECIMALS = 6

# Upload extensions accepted by the import endpoints
ALLOWED_WORKBOOK_EXTENSIONS = {'xlsx'}
ALLOWED_BACKUP_EXTENSIONS = {'json'}
