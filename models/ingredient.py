"""
Ingredient Model

Contains the Ingredient model: the purchase-cost catalog that recipes and
tickets refer to by name.
"""

from .base import db, new_id


class Ingredient(db.Model):
    """
    Ingredient with its purchase price per unit.

    Units:
    - Kg: sold and used by mass
    - L:  sold and used by volume
    - Ud: sold and used by count

    Ingredients flagged show_in_sales can also be sold on their own
    (drinks, extras) at default_sale_price.
    """
    id = db.Column(db.String(36), primary_key=True, default=new_id)

    # Upper-case canonical name, the join key used by recipes and tickets
    name = db.Column(db.String(120), unique=True, nullable=False, index=True)

    unit = db.Column(db.String(4), default='Kg', nullable=False)

    # Purchase cost per ONE unit
    price_per_unit = db.Column(db.Float, default=0.0, nullable=False)

    # Direct-sale price (VAT included) for extras sold standalone
    default_sale_price = db.Column(db.Float, nullable=True)
    show_in_sales = db.Column(db.Boolean, default=False, nullable=False)

    # Stock levels are recorded but not used by any calculation
    current_stock = db.Column(db.Float, nullable=True)
    min_stock = db.Column(db.Float, nullable=True)

    def __repr__(self):
        return f'<Ingredient {self.name} {self.price_per_unit}/{self.unit}>'
