"""
Catalog Store Service

Writes catalog records (from forms, workbooks or backups) into the
Ingredient and Pizza tables. Functions stage changes on the session and
leave the commit to the caller, so a whole import lands in one transaction.
"""

from .catalog import sort_and_renumber


def build_ingredient(Ingredient, record):
    return Ingredient(
        id=record['id'],
        name=record['name'],
        unit=record['unit'],
        price_per_unit=record.get('price_per_unit', 0.0),
        default_sale_price=record.get('default_sale_price'),
        show_in_sales=bool(record.get('show_in_sales')),
        current_stock=record.get('current_stock'),
        min_stock=record.get('min_stock'),
    )


def set_pizza_lines(pizza, PizzaIngredient, lines):
    """Replace a pizza's ingredient lines, keeping their given order."""
    pizza.ingredients = [
        PizzaIngredient(
            id=line['id'],
            position=position,
            name=line['name'],
            amount=line['amount'],
            unit=line['unit'],
        )
        for position, line in enumerate(lines)
    ]


def build_pizza(Pizza, PizzaIngredient, record):
    pizza = Pizza(
        id=record['id'],
        number=0,
        name=record['name'],
        sale_price=record.get('sale_price'),
        is_active=record.get('is_active', True) is not False,
    )
    set_pizza_lines(pizza, PizzaIngredient, record['ingredients'])
    return pizza


def renumber_pizzas(Pizza):
    """Re-sort the recipe catalog by name and reassign numbers 1..N."""
    return sort_and_renumber(Pizza.query.all())


def replace_ingredients(db, Ingredient, records):
    """Swap the whole ingredient catalog for the given records."""
    for ing in Ingredient.query.all():
        db.session.delete(ing)
    db.session.flush()
    for record in records:
        db.session.add(build_ingredient(Ingredient, record))
    db.session.flush()


def replace_pizzas(db, Pizza, PizzaIngredient, records):
    """Swap the whole recipe catalog for the given records."""
    for pizza in Pizza.query.all():
        db.session.delete(pizza)
    db.session.flush()
    for record in records:
        db.session.add(build_pizza(Pizza, PizzaIngredient, record))
    db.session.flush()
    renumber_pizzas(Pizza)
