"""
Shared fixtures: an app bound to an in-memory database and small catalogs.
"""

import os
import sys
from datetime import datetime
from types import SimpleNamespace

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
os.environ['FLASK_ENV'] = 'testing'

from app import app as flask_app  # noqa: E402
from models import db, Ingredient, Pizza, PizzaIngredient  # noqa: E402


@pytest.fixture
def app():
    with flask_app.app_context():
        db.drop_all()
        db.create_all()
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def make_ingredient(name, price, unit='Kg', id=None, sale_price=None, show_in_sales=False):
    return Ingredient(
        id=id or f'ing-{name.lower()}',
        name=name,
        unit=unit,
        price_per_unit=price,
        default_sale_price=sale_price,
        show_in_sales=show_in_sales,
    )


def make_pizza(name, sale_price, lines, id=None, is_active=True):
    pizza = Pizza(
        id=id or f'pizza-{name.lower()}',
        number=0,
        name=name,
        sale_price=sale_price,
        is_active=is_active,
    )
    pizza.ingredients = [
        PizzaIngredient(id=f'{pizza.id}-{pos}', position=pos, name=n, amount=a, unit=u)
        for pos, (n, a, u) in enumerate(lines)
    ]
    return pizza


def make_ticket(date, items, total_venta, total_costo, total_profit, is_glovo=False, number=1):
    return SimpleNamespace(
        id=f'ticket-{number}',
        ticket_number=number,
        date=date,
        is_glovo=is_glovo,
        total_venta=total_venta,
        total_costo=total_costo,
        total_profit=total_profit,
        items=[SimpleNamespace(**item) for item in items],
    )


@pytest.fixture
def catalog():
    return [
        make_ingredient('MOZZARELLA', 10.0),
        make_ingredient('TOMATE', 2.5),
        make_ingredient('ALBAHACA', 0.05, unit='Ud'),
        make_ingredient('COCA-COLA', 0.45, unit='Ud', sale_price=2.5, show_in_sales=True),
    ]


@pytest.fixture
def margarita():
    return make_pizza('MARGARITA', 6.60, [('MOZZARELLA', 0.2, 'Kg')])


@pytest.fixture
def now():
    return datetime(2026, 10, 19, 1, 30)
