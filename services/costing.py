"""
Costing Service

Functions for calculating pizza material cost, VAT-exclusive price, profit
and margin. Nothing is rounded here; rounding belongs to presentation.
"""

import logging

from constants import VAT_FACTOR
from .catalog import canonical_name, ensure_index
from utils import safe_float

logger = logging.getLogger(__name__)


def vat_split(gross):
    """Split a VAT-inclusive amount into (base, vat)."""
    gross = safe_float(gross)
    base = gross / VAT_FACTOR
    return base, gross - base


def calculate_line_cost(line, catalog):
    """
    Calculate the cost of a single recipe line.

    Returns (cost, ingredient). A line whose name has no match in the catalog
    costs zero and comes back with ingredient None.
    """
    index = ensure_index(catalog)
    ing = index.get(canonical_name(line.name))
    if ing is None:
        return 0.0, None
    return safe_float(line.amount) * safe_float(ing.price_per_unit), ing


def calculate_material_cost(lines, catalog):
    """Sum of amount x current unit price over every line."""
    index = ensure_index(catalog)
    return sum(calculate_line_cost(line, index)[0] for line in lines)


def margin_figures(sale_price, material_cost):
    """
    Derive base price, profit and margin from a VAT-inclusive sale price.

    Without a sale price, profit and margin are both 0.
    """
    sale_price = safe_float(sale_price)
    base_price = sale_price / VAT_FACTOR
    if sale_price > 0:
        profit = base_price - material_cost
    else:
        profit = 0.0
    margin_percent = 100 * profit / base_price if base_price > 0 else 0.0
    return {
        'sale_price': sale_price,
        'base_price': base_price,
        'vat': sale_price - base_price,
        'profit': profit,
        'margin_percent': margin_percent,
    }


def calculate_pizza_cost(pizza, catalog):
    """
    Cost a pizza against the ingredient catalog.

    Args:
        pizza: object with name, sale_price and ingredients (lines with
               name, amount and unit)
        catalog: list of ingredients or an index from index_ingredients()

    Returns:
        Breakdown dict with material_cost, sale_price, base_price, vat,
        profit, margin_percent, per-line detail and the missing names
    """
    index = ensure_index(catalog)
    lines = []
    missing = []
    material_cost = 0.0

    for line in pizza.ingredients:
        cost, ing = calculate_line_cost(line, index)
        name = canonical_name(line.name)
        is_missing = bool(name) and ing is None
        if is_missing and name not in missing:
            missing.append(name)
        material_cost += cost
        lines.append({
            'name': name,
            'amount': safe_float(line.amount),
            'unit': line.unit,
            'unit_price': safe_float(ing.price_per_unit) if ing is not None else 0.0,
            'cost': cost,
            'missing': is_missing,
        })

    if missing:
        logger.debug("Pizza %s has ingredients missing from the catalog: %s",
                     pizza.name, ', '.join(missing))

    breakdown = margin_figures(pizza.sale_price, material_cost)
    breakdown.update({
        'material_cost': material_cost,
        'lines': lines,
        'missing': missing,
    })
    return breakdown


def delivery_profit(breakdown, commission_percent):
    """Profit of one unit sold through the delivery platform."""
    if breakdown['sale_price'] <= 0:
        return 0.0
    fee = breakdown['sale_price'] * (safe_float(commission_percent) / 100)
    return breakdown['base_price'] - fee - breakdown['material_cost']


def profitability(pizzas, catalog, commission_percent=0.0, delivery=False):
    """
    Profitability table for the dashboard, best margin first.

    In delivery mode profit and margin include the platform commission.
    """
    index = ensure_index(catalog)
    rows = []
    for pizza in pizzas:
        breakdown = calculate_pizza_cost(pizza, index)
        profit = breakdown['profit']
        if delivery:
            profit = delivery_profit(breakdown, commission_percent)
        base = breakdown['base_price']
        rows.append({
            'id': pizza.id,
            'number': pizza.number,
            'name': pizza.name,
            'is_active': pizza.is_active is not False,
            'sale_price': breakdown['sale_price'],
            'material_cost': breakdown['material_cost'],
            'profit': profit,
            'margin_percent': 100 * profit / base if base > 0 else 0.0,
            'missing': breakdown['missing'],
        })
    rows.sort(key=lambda r: r['margin_percent'], reverse=True)
    return rows
