"""
Tests for the JSON backup document.
"""

import json
from datetime import datetime, timezone

import pytest

from conftest import make_ticket
from models import db
from services.backup import BackupFormatError, export_backup, parse_backup, parse_date


def test_malformed_documents_are_rejected():
    for text in ('{not json', '[1, 2]', '"text"', '{}', '{"version": "2.5"}'):
        with pytest.raises(BackupFormatError):
            parse_backup(text)


def test_bad_section_rejects_whole_document():
    text = json.dumps({
        'ingredients': [{'name': 'queso', 'unit': 'kg', 'pricePerUnit': 8}],
        'tickets': [{'ticketNumber': 1, 'date': 'yesterday', 'items': []}],
    })
    with pytest.raises(BackupFormatError):
        parse_backup(text)


def test_partial_document_restores_only_present_sections():
    sections = parse_backup(json.dumps({
        'ingredients': [
            {'id': 'a', 'name': ' queso ', 'unit': 'kg', 'pricePerUnit': '8,5'},
            {'id': 'b', 'name': 'QUESO', 'unit': 'Kg', 'pricePerUnit': 1},
        ],
        'pizzas': None,
    }))

    assert list(sections) == ['ingredients']
    [queso] = sections['ingredients']
    assert queso['id'] == 'a'
    assert queso['name'] == 'QUESO'
    assert queso['unit'] == 'Kg'
    assert queso['price_per_unit'] == 8.5
    assert queso['default_sale_price'] is None


def test_pizza_defaults():
    sections = parse_backup(json.dumps({
        'pizzas': [{'name': 'Margarita', 'salePrice': 6.6,
                    'ingredients': [{'name': 'mozzarella', 'amount': 0.2, 'unit': 'KG'}]}],
    }))
    [pizza] = sections['pizzas']
    assert pizza['is_active'] is True
    assert pizza['id']
    assert pizza['ingredients'][0]['name'] == 'MOZZARELLA'
    assert pizza['ingredients'][0]['unit'] == 'Kg'


def test_bad_ticket_numbers_coerce_to_zero():
    sections = parse_backup(json.dumps({
        'tickets': [{
            'ticketNumber': 4, 'date': '2025-03-01T20:15:00', 'totalVenta': 'n/a',
            'items': [
                {'name': 'margarita', 'quantity': 'two', 'salePrice': 6.6},
                {'name': 'agua', 'salePrice': 1.5},
            ],
        }],
    }))
    [ticket] = sections['tickets']
    assert ticket['total_venta'] == 0.0
    assert [item['quantity'] for item in ticket['items']] == [0, 0]
    assert ticket['items'][0]['cost_price'] == 0.0


def test_utc_dates_become_local():
    parsed = parse_date('2025-03-01T20:15:00.000Z')
    assert parsed.tzinfo is None
    expected = datetime(2025, 3, 1, 20, 15, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    assert parsed == expected
    assert parse_date('2025-03-01T20:15:00') == datetime(2025, 3, 1, 20, 15)


def test_export_document_shape(catalog, margarita, now):
    ticket = make_ticket(now, [{
        'item_id': 'pizza-margarita', 'name': 'MARGARITA', 'quantity': 1,
        'sale_price': 6.6, 'cost_price': 2.0,
        'ingredients': [{'id': 'l1', 'name': 'MOZZARELLA', 'amount': 0.2, 'unit': 'Kg'}],
    }], 6.6, 2.0, 4.0)

    document = export_backup(catalog, [margarita], [ticket],
                             {'decimals': 3, 'currency': '€', 'glovoCommission': 20.0}, now=now)

    assert document['version'] == '2.5'
    assert document['exportDate'] == '2026-10-19T01:30:00'
    assert document['ingredients'][3]['defaultSalePrice'] == 2.5
    assert 'defaultSalePrice' not in document['ingredients'][0]
    assert document['pizzas'][0]['isActive'] is True
    assert document['tickets'][0]['ticketNumber'] == 1
    assert document['tickets'][0]['items'][0]['id'] == 'pizza-margarita'


def populate(client):
    client.post('/ingredient/add', json={'name': 'mozzarella', 'unit': 'Kg', 'price_per_unit': 10})
    client.post('/ingredient/add', json={'name': 'Coca-Cola', 'unit': 'Ud', 'price_per_unit': 0.45,
                                         'default_sale_price': 2.5, 'show_in_sales': True})
    pizza = client.post('/pizza/add', json={
        'name': 'Margarita', 'sale_price': 6.6,
        'ingredients': [{'name': 'MOZZARELLA', 'amount': 0.2}],
    }).get_json()
    client.post('/sales/order/add', json={'kind': 'pizza', 'id': pizza['id']})
    client.post('/sales/finalize')
    client.post('/settings', json={'currency': '$', 'glovoCommission': 25})


def test_backup_round_trip(app, client):
    populate(client)
    first = json.loads(client.get('/export/json').data)

    db.session.remove()
    db.drop_all()
    db.create_all()

    response = client.post('/import/json', data=json.dumps(first), content_type='application/json')
    assert response.status_code == 200
    assert response.get_json()['restored'] == ['ingredients', 'pizzas', 'settings', 'tickets']

    second = json.loads(client.get('/export/json').data)
    first.pop('exportDate')
    second.pop('exportDate')
    assert second == first


def test_corrupt_backup_leaves_data_untouched(app, client):
    populate(client)
    before = json.loads(client.get('/export/json').data)

    response = client.post('/import/json', data='{"ingredients": [{"unit": "Kg"}]}',
                           content_type='application/json')
    assert response.status_code == 400

    after = json.loads(client.get('/export/json').data)
    before.pop('exportDate')
    after.pop('exportDate')
    assert after == before
