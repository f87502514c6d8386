"""
Receipt and Report Sheet Service

Pre-computes every figure a printed receipt or report sheet shows, so the
rendering side only lays values out.
"""

from constants import RECEIPT_DECIMALS, USAGE_DECIMALS, TRAILING_DAYS, TOP_PRODUCTS_LIMIT
from .costing import vat_split
from .reports import top_products, trailing_days, usage_by_cost


def format_amount(value, decimals=RECEIPT_DECIMALS, currency=''):
    """Format a money amount: format_amount(6.6, 2, '€') -> '6.60€'."""
    return f"{value or 0.0:.{decimals}f}{currency}"


def build_receipt(ticket, settings, business=None):
    """
    Receipt data for a stored ticket.

    Args:
        ticket: Ticket (or anything with the same attributes)
        settings: user settings dict (currency is used)
        business: optional header dict (name, address, tax_id, phone, email)

    Returns:
        dict with header, lines and the base/VAT/total split, each value
        both as a number and as printed text
    """
    currency = settings.get('currency', '')
    base, iva = vat_split(ticket.total_venta)

    lines = []
    for item in ticket.items:
        line_total = item.quantity * item.sale_price
        lines.append({
            'name': item.name,
            'quantity': item.quantity,
            'unit_price': item.sale_price,
            'line_total': line_total,
            'unit_price_text': format_amount(item.sale_price, currency=currency),
            'line_total_text': format_amount(line_total, currency=currency),
        })

    return {
        'business': dict(business or {}),
        'ticket_number': ticket.ticket_number,
        'date': ticket.date.isoformat(),
        'date_text': ticket.date.strftime('%d/%m/%Y %H:%M'),
        'is_glovo': bool(ticket.is_glovo),
        'lines': lines,
        'base_imponible': base,
        'iva': iva,
        'total': ticket.total_venta,
        'base_imponible_text': format_amount(base, currency=currency),
        'iva_text': format_amount(iva, currency=currency),
        'total_text': format_amount(ticket.total_venta, currency=currency),
    }


def build_report_sheet(report, settings):
    """Printable summary of a report produced by generate_report()."""
    currency = settings.get('currency', '')

    usage_rows = []
    for row in usage_by_cost(report['ingredient_usage']):
        usage_rows.append(dict(
            row,
            total_amount_text=f"{row['total_amount']:.{USAGE_DECIMALS}f} {row['unit'] or ''}".rstrip(),
            total_cost_text=format_amount(row['total_cost'], currency=currency),
        ))

    return {
        'period': report['period'],
        'ticket_count': report['ticket_count'],
        'glovo_count': report['glovo_count'],
        'normal_count': report['normal_count'],
        'total_venta_text': format_amount(report['total_venta'], currency=currency),
        'total_costo_text': format_amount(report['total_costo'], currency=currency),
        'total_profit_text': format_amount(report['total_profit'], currency=currency),
        'top_products': [
            {'name': name, 'units': units}
            for name, units in top_products(report['product_sales'], TOP_PRODUCTS_LIMIT)
        ],
        'days': [
            {'date': day, 'venta': stats['venta'], 'costo': stats['costo']}
            for day, stats in trailing_days(report['daily_stats'], TRAILING_DAYS)
        ],
        'ingredient_usage': usage_rows,
    }
