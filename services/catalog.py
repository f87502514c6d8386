"""
Catalog Service

Name canonicalization and lookups shared by the ingredient and pizza
catalogs. Names are the only link between recipe lines, catalog entries and
ticket snapshots, so matching is exact equality after upper-casing, never
fuzzy or partial.
"""

import re

from constants import UNIT_L, UNIT_UD, DEFAULT_UNIT


def canonical_name(name):
    """Canonical form of an ingredient or pizza name (trimmed, upper-case)."""
    if name is None:
        return ''
    return re.sub(r'\s+', ' ', str(name)).strip().upper()


def normalize_unit(value):
    """Map free unit text ('kg', 'Litros', 'UD', 'ud.') to Kg, L or Ud."""
    text = str(value or '').strip().upper()
    if not text:
        return DEFAULT_UNIT
    if 'L' in text:
        return UNIT_L
    if 'UD' in text:
        return UNIT_UD
    return DEFAULT_UNIT


def index_ingredients(ingredients):
    """Build a {canonical name: ingredient} lookup for a catalog list."""
    index = {}
    for ing in ingredients:
        key = canonical_name(ing.name)
        # First entry wins if the catalog somehow holds duplicates
        index.setdefault(key, ing)
    return index


def find_ingredient(catalog, name):
    """
    Find an ingredient by case-insensitive name.

    Args:
        catalog: dict built by index_ingredients() or a plain list
        name: name as written on the recipe line or ticket snapshot

    Returns:
        The matching ingredient, or None when it is missing
    """
    key = canonical_name(name)
    if not key:
        return None
    if isinstance(catalog, dict):
        return catalog.get(key)
    for ing in catalog:
        if canonical_name(ing.name) == key:
            return ing
    return None


def ensure_index(catalog):
    """Accept either a list of ingredients or an existing index."""
    if isinstance(catalog, dict):
        return catalog
    return index_ingredients(catalog)


def sort_and_renumber(pizzas):
    """
    Sort pizzas by name and reassign display numbers densely from 1.

    Mutates each pizza's number and returns the sorted list. Running it on
    an already sorted catalog leaves every number unchanged.
    """
    ordered = sorted(pizzas, key=lambda p: (canonical_name(p.name), p.id or ''))
    for idx, pizza in enumerate(ordered, start=1):
        pizza.number = idx
    return ordered


def missing_ingredient_names(pizza, catalog):
    """Names on the pizza's lines that have no match in the catalog."""
    index = ensure_index(catalog)
    missing = []
    for line in pizza.ingredients:
        key = canonical_name(line.name)
        if key and key not in index and key not in missing:
            missing.append(key)
    return missing


def search(items, term):
    """Case-insensitive substring filter on item names, for list screens."""
    term = (term or '').strip().lower()
    if not term:
        return list(items)
    return [item for item in items if term in (item.name or '').lower()]


def active_pizzas(pizzas):
    """Pizzas offered on the sales screen (switched-off recipes are hidden)."""
    return [p for p in pizzas if p.is_active is not False]


def sellable_ingredients(ingredients):
    """Ingredients sold standalone as extras or drinks."""
    return [ing for ing in ingredients if ing.show_in_sales]
