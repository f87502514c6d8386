"""
Tests for the Excel interchange layout.
"""

import io
import math

import pytest

from conftest import make_ingredient, make_pizza
from services.interchange import (
    ImportFormatError, ingredient_rows, recipe_rows, parse_ingredient_rows,
    parse_recipe_rows, export_workbook, import_workbook,
)


def test_recipe_rows_are_run_length_encoded():
    pizza = make_pizza('MARGARITA', 6.6, [('MOZZARELLA', 0.2, 'Kg'), ('TOMATE', 0.1, 'Kg')])
    assert recipe_rows([pizza]) == [
        ['MARGARITA', 6.6, 'MOZZARELLA', 0.2, 'Kg'],
        [None, None, 'TOMATE', 0.1, 'Kg'],
    ]


def test_ingredient_rows():
    rows = ingredient_rows([make_ingredient('AGUA', 0.2, unit='Ud', sale_price=1.5, show_in_sales=True),
                            make_ingredient('Tomate', 2.5)])
    assert rows == [['AGUA', 'Ud', 0.2, 1.5, 'SI'], ['TOMATE', 'Kg', 2.5, 0, 'NO']]


def test_parse_recipe_rows_rebuilds_pizzas():
    nan = math.nan
    rows = [
        {'PIZZA_NOMBRE': 'margarita', 'PVP_PIZZA': 6.6, 'INGREDIENTE': 'mozzarella', 'CANTIDAD': 0.2, 'UNIDAD_AUTO': 'Kg'},
        {'PIZZA_NOMBRE': nan, 'PVP_PIZZA': nan, 'INGREDIENTE': 'tomate', 'CANTIDAD': '0,1', 'UNIDAD_AUTO': 'kg'},
        {'PIZZA_NOMBRE': 'Bebida', 'PVP_PIZZA': 'n/a', 'INGREDIENTE': 'agua', 'CANTIDAD': 1, 'UNIDAD_AUTO': 'UD'},
    ]
    pizzas = parse_recipe_rows(rows)
    assert [p['name'] for p in pizzas] == ['MARGARITA', 'BEBIDA']
    assert pizzas[0]['sale_price'] == 6.6
    assert [(l['name'], l['amount'], l['unit']) for l in pizzas[0]['ingredients']] == [
        ('MOZZARELLA', 0.2, 'Kg'), ('TOMATE', 0.1, 'Kg'),
    ]
    # Bad numbers coerce to zero
    assert pizzas[1]['sale_price'] == 0
    assert pizzas[1]['ingredients'][0]['unit'] == 'Ud'


def test_parse_recipe_rows_drops_lines_before_first_pizza():
    rows = [{'PIZZA_NOMBRE': None, 'INGREDIENTE': 'TOMATE', 'CANTIDAD': 1}]
    assert parse_recipe_rows(rows) == []


def test_parse_ingredient_rows_accepts_aliases_and_messy_headers():
    rows = [
        {' Nombre ': 'queso', 'unidad': 'KG', 'Precio': '8,5'},
        {'INGREDIENTE': 'AGUA', 'UNIDAD': 'Ud', 'PRECIO_COMPRA': 0.2, 'PVP_VENTA_EXTRA': 1.5, 'VENTA_ACTIVA': 'si'},
        {'INGREDIENTE': '', 'PRECIO_COMPRA': 3},
        {'INGREDIENTE': 'Queso', 'PRECIO_COMPRA': 99},
    ]
    records = parse_ingredient_rows(rows)
    assert [(r['name'], r['unit'], r['price_per_unit'], r['show_in_sales']) for r in records] == [
        ('QUESO', 'Kg', 8.5, False),
        ('AGUA', 'Ud', 0.2, True),
    ]
    assert records[1]['default_sale_price'] == 1.5


def test_workbook_round_trip():
    ingredients = [make_ingredient('MOZZARELLA', 10.0), make_ingredient('AGUA', 0.2, unit='Ud', sale_price=1.5, show_in_sales=True)]
    pizzas = [make_pizza('MARGARITA', 6.6, [('MOZZARELLA', 0.2, 'Kg'), ('AGUA', 1, 'Ud')]),
              make_pizza('BLANCA', 8.0, [('MOZZARELLA', 0.3, 'Kg')])]

    content = export_workbook(ingredients, pizzas)
    parsed_ingredients, parsed_pizzas = import_workbook(io.BytesIO(content))

    assert [(i['name'], i['price_per_unit'], i['show_in_sales']) for i in parsed_ingredients] == [
        ('MOZZARELLA', 10.0, False), ('AGUA', 0.2, True),
    ]
    assert [(p['name'], p['sale_price'], len(p['ingredients'])) for p in parsed_pizzas] == [
        ('MARGARITA', 6.6, 2), ('BLANCA', 8.0, 1),
    ]


def test_garbage_is_rejected():
    with pytest.raises(ImportFormatError):
        import_workbook(io.BytesIO(b'not a workbook'))
