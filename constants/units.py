"""
Unit Constants

Units of measure an ingredient can be bought and used in.
"""

# Canonical units (mass, volume, count)
UNIT_KG = 'Kg'
UNIT_L = 'L'
UNIT_UD = 'Ud'

VALID_UNITS = {UNIT_KG, UNIT_L, UNIT_UD}

DEFAULT_UNIT = UNIT_KG

# Decimal places used when printing consumed quantities
USAGE_DECIMALS = 3
