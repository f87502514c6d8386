"""
Models Package

Exports all database models and the db instance for use throughout the application.
"""

from .base import db, new_id

from .ingredient import Ingredient
from .recipe import Pizza, PizzaIngredient
from .ticket import Ticket, TicketItem
from .settings import Settings

__all__ = [
    'db',
    'new_id',
    'Ingredient',
    'Pizza',
    'PizzaIngredient',
    'Ticket',
    'TicketItem',
    'Settings',
]
