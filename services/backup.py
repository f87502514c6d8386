"""
Full Backup Service

Single JSON document holding both catalogs, the ticket log and the user
settings. Field names follow the camelCase records of the exported file so
backups move between installations unchanged.
"""

import json
import logging
from datetime import datetime

from constants import BACKUP_VERSION, BACKUP_SECTIONS, MAX_LENGTHS
from models.base import new_id
from .catalog import normalize_unit
from .settings import coerce_settings
from utils import safe_float, safe_int, safe_bool, sanitize_name

logger = logging.getLogger(__name__)


class BackupFormatError(Exception):
    """Raised when a backup document is malformed. Nothing is applied."""
    pass


def _optional(record, key, value):
    if value is not None:
        record[key] = value


# ============================================
# EXPORT
# ============================================

def ingredient_to_dict(ing):
    record = {
        'id': ing.id,
        'name': ing.name,
        'unit': ing.unit,
        'pricePerUnit': ing.price_per_unit,
    }
    _optional(record, 'defaultSalePrice', ing.default_sale_price)
    record['showInSales'] = bool(ing.show_in_sales)
    _optional(record, 'currentStock', ing.current_stock)
    _optional(record, 'minStock', ing.min_stock)
    return record


def pizza_to_dict(pizza):
    record = {
        'id': pizza.id,
        'number': pizza.number,
        'name': pizza.name,
        'ingredients': [
            {'id': line.id, 'name': line.name, 'amount': line.amount, 'unit': line.unit}
            for line in pizza.ingredients
        ],
    }
    _optional(record, 'salePrice', pizza.sale_price)
    record['isActive'] = pizza.is_active is not False
    return record


def ticket_to_dict(ticket):
    return {
        'id': ticket.id,
        'ticketNumber': ticket.ticket_number,
        'date': ticket.date.isoformat(),
        'items': [
            {
                'id': item.item_id,
                'name': item.name,
                'quantity': item.quantity,
                'salePrice': item.sale_price,
                'costPrice': item.cost_price,
                'ingredients': list(item.ingredients or []),
            }
            for item in ticket.items
        ],
        'totalVenta': ticket.total_venta,
        'totalCosto': ticket.total_costo,
        'totalProfit': ticket.total_profit,
        'isGlovo': bool(ticket.is_glovo),
    }


def export_backup(ingredients, pizzas, tickets, settings, now=None):
    """Build the backup document (a plain dict ready for json)."""
    return {
        'ingredients': [ingredient_to_dict(ing) for ing in ingredients],
        'pizzas': [pizza_to_dict(p) for p in pizzas],
        'tickets': [ticket_to_dict(t) for t in tickets],
        'settings': dict(settings),
        'version': BACKUP_VERSION,
        'exportDate': (now or datetime.now()).isoformat(),
    }


def dumps_backup(document):
    return json.dumps(document, ensure_ascii=False, indent=2)


# ============================================
# IMPORT
# ============================================

def _require_list(document, section):
    value = document[section]
    if not isinstance(value, list):
        raise BackupFormatError(f'Section "{section}" must be a list')
    for entry in value:
        if not isinstance(entry, dict):
            raise BackupFormatError(f'Section "{section}" contains a non-object entry')
    return value


def _require_name(entry, section, max_length):
    name = sanitize_name(entry.get('name'), max_length=max_length)
    if not name:
        raise BackupFormatError(f'Entry without a name in "{section}"')
    return name


def parse_date(value):
    """
    Parse an ISO timestamp into a naive local datetime.

    UTC stamps such as '2025-03-01T20:15:00.000Z' are converted to local time.
    """
    if not isinstance(value, str) or not value:
        raise BackupFormatError(f'Invalid ticket date: {value!r}')
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError as e:
        raise BackupFormatError(f'Invalid ticket date: {value!r}') from e
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def parse_lines(lines, section):
    if lines is None:
        return []
    if not isinstance(lines, list) or not all(isinstance(line, dict) for line in lines):
        raise BackupFormatError(f'Invalid ingredient lines in "{section}"')
    return [
        {
            'id': line.get('id') or new_id(),
            'name': sanitize_name(line.get('name'), max_length=MAX_LENGTHS['ingredient_name']),
            'amount': safe_float(line.get('amount')),
            'unit': normalize_unit(line.get('unit')),
        }
        for line in lines
    ]


def parse_ingredients(entries):
    records = []
    seen = set()
    for entry in entries:
        name = _require_name(entry, 'ingredients', MAX_LENGTHS['ingredient_name'])
        if name in seen:
            logger.warning("Duplicate ingredient %s in backup, keeping the first entry", name)
            continue
        seen.add(name)
        records.append({
            'id': entry.get('id') or new_id(),
            'name': name,
            'unit': normalize_unit(entry.get('unit')),
            'price_per_unit': safe_float(entry.get('pricePerUnit')),
            'default_sale_price': safe_float(entry['defaultSalePrice']) if entry.get('defaultSalePrice') is not None else None,
            'show_in_sales': safe_bool(entry.get('showInSales')),
            'current_stock': safe_float(entry['currentStock']) if entry.get('currentStock') is not None else None,
            'min_stock': safe_float(entry['minStock']) if entry.get('minStock') is not None else None,
        })
    return records


def parse_pizzas(entries):
    return [
        {
            'id': entry.get('id') or new_id(),
            'name': _require_name(entry, 'pizzas', MAX_LENGTHS['pizza_name']),
            'sale_price': safe_float(entry['salePrice']) if entry.get('salePrice') is not None else None,
            'is_active': entry.get('isActive') is not False,
            'ingredients': parse_lines(entry.get('ingredients'), 'pizzas'),
        }
        for entry in entries
    ]


def parse_tickets(entries):
    records = []
    for entry in entries:
        items = entry.get('items')
        if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
            raise BackupFormatError('Ticket without a valid item list')
        number = safe_int(entry.get('ticketNumber'), default=None)
        if number is None:
            raise BackupFormatError('Ticket without a ticket number')
        records.append({
            'id': entry.get('id') or new_id(),
            'ticket_number': number,
            'date': parse_date(entry.get('date')),
            'is_glovo': safe_bool(entry.get('isGlovo')),
            'items': [
                {
                    'id': item.get('id') or new_id(),
                    'name': _require_name(item, 'tickets', MAX_LENGTHS['pizza_name']),
                    'quantity': safe_int(item.get('quantity'), default=0, min_val=0),
                    'sale_price': safe_float(item.get('salePrice')),
                    'cost_price': safe_float(item.get('costPrice')),
                    'ingredients': parse_lines(item.get('ingredients'), 'tickets'),
                }
                for item in items
            ],
            'total_venta': safe_float(entry.get('totalVenta')),
            'total_costo': safe_float(entry.get('totalCosto')),
            'total_profit': safe_float(entry.get('totalProfit')),
        })
    return records


def parse_backup(text):
    """
    Parse and validate a backup document.

    Every present section is validated before anything is returned, so a
    corrupt file never gets partially applied. Absent or null sections are
    left out of the result.

    Returns:
        dict with any of 'ingredients', 'pizzas', 'tickets' (lists of
        records) and 'settings' (dict)

    Raises:
        BackupFormatError: the document cannot be used
    """
    try:
        document = json.loads(text)
    except (TypeError, ValueError) as e:
        raise BackupFormatError(f'Not a JSON document: {e}') from e
    if not isinstance(document, dict):
        raise BackupFormatError('Backup must be a JSON object')

    present = [s for s in BACKUP_SECTIONS if document.get(s) is not None]
    if not present:
        raise BackupFormatError('Backup contains no known sections')

    sections = {}
    if 'ingredients' in present:
        sections['ingredients'] = parse_ingredients(_require_list(document, 'ingredients'))
    if 'pizzas' in present:
        sections['pizzas'] = parse_pizzas(_require_list(document, 'pizzas'))
    if 'tickets' in present:
        sections['tickets'] = parse_tickets(_require_list(document, 'tickets'))
    if 'settings' in present:
        if not isinstance(document['settings'], dict):
            raise BackupFormatError('Section "settings" must be an object')
        sections['settings'] = coerce_settings(document['settings'])

    logger.info("Backup version %s parsed, sections: %s",
                document.get('version', '?'), ', '.join(sections))
    return sections
