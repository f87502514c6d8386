"""
Pizza Models

Contains the Pizza and PizzaIngredient models. A pizza is a priced list of
ingredient lines; lines reference ingredients by name only.
"""

from .base import db, new_id


class Pizza(db.Model):
    """Recipe with sale price (VAT included) and derived display number."""
    id = db.Column(db.String(36), primary_key=True, default=new_id)

    # Position in name order, reassigned 1..N after every catalog change
    number = db.Column(db.Integer, default=0, nullable=False)

    name = db.Column(db.String(120), nullable=False, index=True)
    sale_price = db.Column(db.Float, nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    ingredients = db.relationship(
        'PizzaIngredient', backref='pizza', lazy=True,
        cascade='all, delete-orphan', order_by='PizzaIngredient.position'
    )

    def __repr__(self):
        return f'<Pizza #{self.number} {self.name}>'


class PizzaIngredient(db.Model):
    """Recipe line: ingredient name, amount and the unit copied at edit time."""
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    pizza_id = db.Column(db.String(36), db.ForeignKey('pizza.id', ondelete='CASCADE'), nullable=False, index=True)
    position = db.Column(db.Integer, default=0, nullable=False)
    name = db.Column(db.String(120), nullable=False)
    amount = db.Column(db.Float, default=0.0, nullable=False)
    unit = db.Column(db.String(4), default='Kg', nullable=False)
