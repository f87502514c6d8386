"""
Business Constants

Fixed tax convention, default user settings and interchange layout names.
"""

# VAT is always included in sale prices at this single rate
VAT_RATE = 0.10
VAT_FACTOR = 1 + VAT_RATE

# Defaults for the user-editable settings stored in the Settings table
DEFAULT_SETTINGS = {
    'decimals': 3,
    'currency': '€',
    'glovoCommission': 20.0,
}

# Settings key holding the last ticket number handed out
LAST_TICKET_NUMBER_KEY = 'last_ticket_number'

# Decimals printed on receipts and report sheets, independent of the setting
RECEIPT_DECIMALS = 2

# Bulk interchange workbook layout
INGREDIENT_SHEET = '1-COSTES_BASE'
RECIPE_SHEET = '2-RECETAS_PIZZAS'
INGREDIENT_COLUMNS = ['INGREDIENTE', 'UNIDAD', 'PRECIO_COMPRA', 'PVP_VENTA_EXTRA', 'VENTA_ACTIVA']
RECIPE_COLUMNS = ['PIZZA_NOMBRE', 'PVP_PIZZA', 'INGREDIENTE', 'CANTIDAD', 'UNIDAD_AUTO']
YES = 'SI'
NO = 'NO'

# Full backup document
BACKUP_VERSION = '2.5'
BACKUP_SECTIONS = ('ingredients', 'pizzas', 'tickets', 'settings')

# Report rollups
TOP_PRODUCTS_LIMIT = 6
TRAILING_DAYS = 7
