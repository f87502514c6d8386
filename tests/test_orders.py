"""
Tests for the order builder and ticket numbering.
"""

from datetime import datetime

import pytest

from conftest import make_pizza
from services.orders import OrderBuilder, order_totals, next_ticket_number


MARGARITA_ITEM = {'id': 'p1', 'name': 'MARGARITA', 'sale_price': 6.60, 'cost_price': 2.00}


class TestOrderLines:

    def test_adding_same_item_twice_merges_lines(self):
        order = OrderBuilder()
        order.add_item(MARGARITA_ITEM)
        order.add_item(MARGARITA_ITEM)
        assert len(order.lines) == 1
        assert order.lines[0]['quantity'] == 2

    def test_quantity_zero_removes_line(self):
        order = OrderBuilder()
        order.add_item(MARGARITA_ITEM)
        order.add_item({'id': 'x', 'name': 'AGUA', 'sale_price': 1.5, 'cost_price': 0.2})
        order.set_quantity(0, 0)
        assert [line['name'] for line in order.lines] == ['AGUA']

    def test_negative_quantity_removes_line(self):
        order = OrderBuilder()
        order.add_item(MARGARITA_ITEM)
        order.set_quantity(0, -3)
        assert order.is_empty

    def test_remove_line(self):
        order = OrderBuilder()
        order.add_item(MARGARITA_ITEM)
        order.add_item({'id': 'x', 'name': 'AGUA', 'sale_price': 1.5, 'cost_price': 0.2})
        order.remove_line(1)
        assert [line['name'] for line in order.lines] == ['MARGARITA']
        with pytest.raises(IndexError):
            order.remove_line(1)

    def test_set_quantity_bad_index(self):
        with pytest.raises(IndexError):
            OrderBuilder().set_quantity(0, 2)

    def test_add_pizza_snapshots_price_cost_and_recipe(self, catalog, margarita):
        order = OrderBuilder()
        order.add_pizza(margarita, catalog)

        # Later catalog and recipe edits must not reach the line
        margarita.ingredients[0].amount = 5
        catalog[0].price_per_unit = 99

        line = order.lines[0]
        assert line['sale_price'] == pytest.approx(6.6)
        assert line['cost_price'] == pytest.approx(2.0)
        assert line['ingredients'][0]['amount'] == 0.2
        assert line['ingredients'][0]['name'] == 'MOZZARELLA'

    def test_add_extra_uses_direct_sale_price(self, catalog):
        order = OrderBuilder()
        order.add_extra(catalog[3])
        line = order.lines[0]
        assert (line['name'], line['sale_price'], line['cost_price']) == ('COCA-COLA', 2.5, 0.45)
        assert line['ingredients'] == []


class TestTotals:

    def test_normal_mode(self):
        """Three margaritas at 6.60, cost 2.00 each."""
        order = OrderBuilder()
        order.add_item(MARGARITA_ITEM)
        order.set_quantity(0, 3)
        totals = order.totals()
        assert totals['total_venta'] == pytest.approx(19.80)
        assert totals['total_costo'] == pytest.approx(6.00)
        assert totals['base_imponible'] == pytest.approx(18.00)
        assert totals['profit'] == pytest.approx(12.00)

    def test_delivery_mode_with_commission(self):
        order = OrderBuilder(commission_percent=20, delivery=True)
        order.add_item(MARGARITA_ITEM)
        order.set_quantity(0, 3)
        totals = order.totals()
        assert totals['commission'] == pytest.approx(3.96)
        assert totals['profit'] == pytest.approx(8.04)

    def test_switching_mode_recomputes(self):
        order = OrderBuilder(commission_percent=20)
        order.add_item(MARGARITA_ITEM)
        assert order.totals()['profit'] == pytest.approx(4.0)
        order.set_delivery(True)
        assert order.totals()['profit'] == pytest.approx(4.0 - 1.32)

    def test_empty_totals(self):
        assert order_totals([])['profit'] == 0


class TestFinalize:

    def test_finalize_empty_order_is_a_no_op(self):
        assert OrderBuilder().finalize(1) is None

    def test_finalize_produces_draft_and_clears(self):
        order = OrderBuilder(commission_percent=20, delivery=True)
        order.add_item(MARGARITA_ITEM)
        when = datetime(2026, 10, 19, 21, 0)
        draft = order.finalize(7, now=when)

        assert order.is_empty
        assert draft['ticket_number'] == 7
        assert draft['date'] == when
        assert draft['is_glovo'] is True
        assert draft['total_venta'] == pytest.approx(6.6)
        assert draft['total_profit'] == pytest.approx(2.68)
        assert draft['items'][0]['quantity'] == 1

    def test_session_round_trip(self, catalog):
        pizza = make_pizza('M', 6.6, [('MOZZARELLA', 0.2, 'Kg')])
        order = OrderBuilder(commission_percent=15, delivery=True)
        order.add_pizza(pizza, catalog)
        order.add_extra(catalog[3])

        state = order.to_dict()
        assert all('ingredients' not in line for line in state['lines'])

        restored = OrderBuilder.from_dict(state)
        assert restored.lines[0]['ingredients'] == []
        restored.attach_snapshots([pizza])
        assert restored.lines == order.lines
        assert restored.delivery is True
        assert restored.totals() == order.totals()

    def test_attach_snapshots_keeps_existing_snapshot(self, catalog, margarita):
        order = OrderBuilder()
        order.add_pizza(margarita, catalog)
        margarita.ingredients[0].amount = 5
        order.attach_snapshots([margarita])
        assert order.lines[0]['ingredients'][0]['amount'] == 0.2

    def test_from_dict_takes_current_commission(self):
        restored = OrderBuilder.from_dict({'commission_percent': 15, 'lines': []}, commission_percent=25)
        assert restored.commission_percent == 25


class TestTicketNumbers:

    def test_first_ticket(self):
        assert next_ticket_number([], 0) == 1

    def test_never_reuses_a_deleted_number(self):
        # Tickets 1..5 issued, 2 and 5 deleted
        assert next_ticket_number([1, 3, 4], last_issued=5) == 6

    def test_counter_behind_existing_numbers(self):
        assert next_ticket_number([4, 9], last_issued=0) == 10
