"""
Order Service

The in-progress sale: accumulates pizzas and extras, keeps running totals
and turns into a ticket draft when the sale is completed.
"""

import copy
import logging
from datetime import datetime

from constants import VAT_FACTOR, MAX_QUANTITY
from models.base import new_id
from .catalog import canonical_name
from .costing import calculate_pizza_cost
from utils import safe_float, safe_int

logger = logging.getLogger(__name__)


def snapshot_lines(lines):
    """Copy recipe lines by value so later catalog edits never reach a ticket."""
    snapshot = []
    for line in lines:
        if isinstance(line, dict):
            snapshot.append({
                'id': line.get('id') or new_id(),
                'name': canonical_name(line.get('name')),
                'amount': safe_float(line.get('amount')),
                'unit': line.get('unit'),
            })
        else:
            snapshot.append({
                'id': line.id or new_id(),
                'name': canonical_name(line.name),
                'amount': safe_float(line.amount),
                'unit': line.unit,
            })
    return snapshot


def order_totals(lines, delivery=False, commission_percent=0.0):
    """
    Totals of an order or ticket.

    totalVenta includes VAT; the delivery commission is charged on the
    VAT-inclusive total, profit is measured against the base.
    """
    total_venta = sum(line['sale_price'] * line['quantity'] for line in lines)
    total_costo = sum(line['cost_price'] * line['quantity'] for line in lines)
    base_imponible = total_venta / VAT_FACTOR
    commission = total_venta * (safe_float(commission_percent) / 100) if delivery else 0.0
    return {
        'total_venta': total_venta,
        'total_costo': total_costo,
        'base_imponible': base_imponible,
        'iva': total_venta - base_imponible,
        'commission': commission,
        'profit': base_imponible - commission - total_costo,
    }


def next_ticket_number(existing_numbers, last_issued=0):
    """
    Number for the next ticket.

    Strictly above every number ever handed out, so deleting tickets never
    makes a number come back.
    """
    highest = max((n for n in existing_numbers if n is not None), default=0)
    return max(highest, safe_int(last_issued, default=0)) + 1


class OrderBuilder:
    """
    Lines of the sale being rung up.

    Each line is keyed by the id of the pizza or extra it was added from;
    adding the same item again bumps its quantity.
    """

    def __init__(self, commission_percent=0.0, delivery=False, lines=None):
        self.commission_percent = safe_float(commission_percent)
        self.delivery = bool(delivery)
        self.lines = lines or []

    def __len__(self):
        return len(self.lines)

    @property
    def is_empty(self):
        return not self.lines

    def add_item(self, item):
        """
        Add one unit of an item.

        Args:
            item: dict with id, name, sale_price, cost_price and optionally
                  ingredients (recipe lines to snapshot)

        Returns:
            Index of the line that received the unit
        """
        for idx, line in enumerate(self.lines):
            if line['id'] == item['id']:
                self.set_quantity(idx, line['quantity'] + 1)
                return idx

        self.lines.append({
            'id': item['id'],
            'name': canonical_name(item['name']),
            'quantity': 1,
            'sale_price': safe_float(item.get('sale_price')),
            'cost_price': safe_float(item.get('cost_price')),
            'ingredients': snapshot_lines(item.get('ingredients') or []),
        })
        return len(self.lines) - 1

    def add_pizza(self, pizza, catalog):
        """Add a pizza at its current price and current material cost."""
        breakdown = calculate_pizza_cost(pizza, catalog)
        return self.add_item({
            'id': pizza.id,
            'name': pizza.name,
            'sale_price': breakdown['sale_price'],
            'cost_price': breakdown['material_cost'],
            'ingredients': pizza.ingredients,
        })

    def add_extra(self, ingredient):
        """Add an ingredient sold standalone (drink, extra topping)."""
        return self.add_item({
            'id': ingredient.id,
            'name': ingredient.name,
            'sale_price': ingredient.default_sale_price or 0.0,
            'cost_price': ingredient.price_per_unit,
        })

    def set_quantity(self, index, quantity):
        """Set a line's quantity; zero or less removes the line."""
        if index < 0 or index >= len(self.lines):
            raise IndexError(f'No order line at position {index}')
        quantity = safe_int(quantity, default=0, max_val=MAX_QUANTITY)
        if quantity <= 0:
            self.lines.pop(index)
            return
        self.lines[index]['quantity'] = quantity

    def remove_line(self, index):
        self.set_quantity(index, 0)

    def attach_snapshots(self, pizzas):
        """
        Fill in recipe snapshots for pizza lines that have none.

        The session copy of an order leaves snapshots out, so they are taken
        from the current recipes when the sale is closed.
        """
        by_id = {pizza.id: pizza for pizza in pizzas}
        for line in self.lines:
            pizza = by_id.get(line['id'])
            if pizza is not None and not line.get('ingredients'):
                line['ingredients'] = snapshot_lines(pizza.ingredients)

    def set_delivery(self, delivery, commission_percent=None):
        self.delivery = bool(delivery)
        if commission_percent is not None:
            self.commission_percent = safe_float(commission_percent)

    def totals(self):
        return order_totals(self.lines, self.delivery, self.commission_percent)

    def clear(self):
        self.lines = []

    def finalize(self, ticket_number, now=None):
        """
        Turn the order into a ticket draft and clear it.

        Returns None when the order has no lines.
        """
        if self.is_empty:
            return None

        totals = self.totals()
        draft = {
            'id': new_id(),
            'ticket_number': ticket_number,
            'date': now or datetime.now(),
            'is_glovo': self.delivery,
            'items': copy.deepcopy(self.lines),
            'total_venta': totals['total_venta'],
            'total_costo': totals['total_costo'],
            'total_profit': totals['profit'],
        }
        self.clear()
        logger.debug("Order finalized as ticket #%s with %d lines", ticket_number, len(draft['items']))
        return draft

    def to_dict(self):
        """
        Serializable state, kept in the session between requests.

        Recipe snapshots are left out to keep the session cookie under the
        browser size limit; attach_snapshots() restores them at finalize.
        """
        return {
            'commission_percent': self.commission_percent,
            'delivery': self.delivery,
            'lines': [
                {key: value for key, value in line.items() if key != 'ingredients'}
                for line in self.lines
            ],
        }

    @classmethod
    def from_dict(cls, data, commission_percent=None):
        data = data or {}
        commission = data.get('commission_percent', 0.0) if commission_percent is None else commission_percent
        return cls(
            commission_percent=commission,
            delivery=data.get('delivery', False),
            lines=[{'ingredients': [], **copy.deepcopy(line)} for line in data.get('lines') or []],
        )
