"""
Bulk Interchange Service

Excel workbook with two sheets: base ingredient costs and pizza recipes.
The recipe sheet is run-length encoded: a pizza's name and price appear on
its first ingredient row only, the following rows leave them blank.
"""

import io
import logging
import math

import pandas as pd

from constants import (
    INGREDIENT_SHEET, RECIPE_SHEET, INGREDIENT_COLUMNS, RECIPE_COLUMNS,
    YES, NO, MAX_LENGTHS,
)
from models.base import new_id
from .catalog import normalize_unit
from utils import safe_float, sanitize_name

logger = logging.getLogger(__name__)


class ImportFormatError(Exception):
    """Raised when an uploaded workbook cannot be read."""
    pass


def _cell_text(value):
    """Cell value as stripped text; empty/NaN cells become ''."""
    if value is None:
        return ''
    if isinstance(value, float) and math.isnan(value):
        return ''
    return str(value).strip()


def _normalize_row(row):
    """Upper-case and trim header names so 'Ingrediente ' matches INGREDIENTE."""
    return {str(key).strip().upper(): value for key, value in row.items()}


def _first(row, *keys):
    """First non-empty cell among alternative column names."""
    for key in keys:
        if _cell_text(row.get(key)):
            return row.get(key)
    return None


# ============================================
# EXPORT
# ============================================

def ingredient_rows(ingredients):
    """Rows of the base-costs sheet."""
    return [
        [
            ing.name.upper(),
            ing.unit,
            ing.price_per_unit,
            ing.default_sale_price or 0,
            YES if ing.show_in_sales else NO,
        ]
        for ing in ingredients
    ]


def recipe_rows(pizzas):
    """Rows of the recipes sheet, name and price only on each pizza's first line."""
    rows = []
    for pizza in pizzas:
        for idx, line in enumerate(pizza.ingredients):
            first = idx == 0
            rows.append([
                pizza.name if first else None,
                pizza.sale_price if first else None,
                line.name,
                line.amount,
                line.unit,
            ])
    return rows


def export_workbook(ingredients, pizzas):
    """Write both sheets to an .xlsx file and return its bytes."""
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        pd.DataFrame(ingredient_rows(ingredients), columns=INGREDIENT_COLUMNS).to_excel(
            writer, sheet_name=INGREDIENT_SHEET, index=False)
        pd.DataFrame(recipe_rows(pizzas), columns=RECIPE_COLUMNS).to_excel(
            writer, sheet_name=RECIPE_SHEET, index=False)
    return buffer.getvalue()


# ============================================
# IMPORT
# ============================================

def read_workbook(stream):
    """
    Read every sheet of a workbook into lists of row dicts.

    Raises:
        ImportFormatError: the file is not a readable workbook
    """
    try:
        frames = pd.read_excel(stream, sheet_name=None, dtype=object, engine='openpyxl')
    except Exception as e:
        raise ImportFormatError(f'Could not read workbook: {e}') from e
    return {name: frame.to_dict('records') for name, frame in frames.items()}


def pick_sheet(sheets, keyword, number, fallback_index):
    """Find a sheet by keyword or ordinal in its name, else by position."""
    names = list(sheets)
    for name in names:
        if keyword in name.upper() or str(number) in name:
            return sheets[name]
    if len(names) > fallback_index:
        return sheets[names[fallback_index]]
    return None


def parse_ingredient_rows(rows):
    """Ingredient records from base-costs rows. Rows without a name are skipped."""
    records = []
    seen = set()
    for raw in rows or []:
        row = _normalize_row(raw)
        name = sanitize_name(_cell_text(_first(row, 'INGREDIENTE', 'NOMBRE')),
                             max_length=MAX_LENGTHS['ingredient_name'])
        if not name:
            continue
        if name in seen:
            logger.warning("Duplicate ingredient %s in workbook, keeping the first row", name)
            continue
        seen.add(name)
        records.append({
            'id': new_id(),
            'name': name,
            'unit': normalize_unit(_cell_text(row.get('UNIDAD'))),
            'price_per_unit': safe_float(_first(row, 'PRECIO_COMPRA', 'PRECIO')),
            'default_sale_price': safe_float(_first(row, 'PVP_VENTA_EXTRA', 'PVP')),
            'show_in_sales': _cell_text(row.get('VENTA_ACTIVA')).upper() == YES,
        })
    return records


def parse_recipe_rows(rows):
    """
    Rebuild pizzas from run-length encoded recipe rows.

    A row with a pizza name starts a new pizza; rows with a blank name add
    lines to the pizza above. Lines before the first named row are dropped.
    """
    pizzas = []
    current = None
    for raw in rows or []:
        row = _normalize_row(raw)
        pizza_name = sanitize_name(_cell_text(_first(row, 'PIZZA_NOMBRE', 'PIZZA')),
                                   max_length=MAX_LENGTHS['pizza_name'])
        ing_name = sanitize_name(_cell_text(row.get('INGREDIENTE')),
                                 max_length=MAX_LENGTHS['ingredient_name'])

        if pizza_name:
            current = {
                'id': new_id(),
                'name': pizza_name,
                'sale_price': safe_float(_first(row, 'PVP_PIZZA', 'PVP')),
                'is_active': True,
                'ingredients': [],
            }
            pizzas.append(current)

        if current is not None and ing_name:
            current['ingredients'].append({
                'id': new_id(),
                'name': ing_name,
                'amount': safe_float(row.get('CANTIDAD')),
                'unit': normalize_unit(_cell_text(row.get('UNIDAD_AUTO'))),
            })
    return pizzas


def import_workbook(stream):
    """
    Parse an uploaded workbook.

    Returns:
        (ingredient_records, pizza_records); either list may be empty,
        meaning that catalog is left as it is
    """
    sheets = read_workbook(stream)
    try:
        ingredients = parse_ingredient_rows(pick_sheet(sheets, 'COSTES', 1, 0))
        pizzas = parse_recipe_rows(pick_sheet(sheets, 'RECETAS', 2, 1))
    except (AttributeError, TypeError, KeyError) as e:
        raise ImportFormatError(f'Unexpected workbook layout: {e}') from e
    logger.info("Workbook parsed: %d ingredients, %d pizzas", len(ingredients), len(pizzas))
    return ingredients, pizzas
