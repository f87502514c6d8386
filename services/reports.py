"""
Reporting Service

Aggregates the ticket log over a period: revenue, cost and profit totals,
delivery/normal split, units sold per product, per-day series and
per-ingredient consumption.
"""

from datetime import datetime, timedelta

from constants import VALID_PERIODS, TOP_PRODUCTS_LIMIT, TRAILING_DAYS
from .catalog import canonical_name, ensure_index
from utils import safe_float


def in_period(ticket_date, period, now):
    """
    Check whether a ticket date falls in the period as seen from now.

    daily, monthly and annual compare calendar fields; weekly is a rolling
    7x24h window.
    """
    if period == 'daily':
        return ticket_date.date() == now.date()
    if period == 'weekly':
        return now - ticket_date < timedelta(days=7)
    if period == 'monthly':
        return ticket_date.year == now.year and ticket_date.month == now.month
    if period == 'annual':
        return ticket_date.year == now.year
    raise ValueError(f'Unknown report period: {period}')


def filter_tickets(tickets, period, now=None):
    """Tickets inside the period, in log order."""
    if period not in VALID_PERIODS:
        raise ValueError(f'Unknown report period: {period}')
    now = now or datetime.now()
    return [t for t in tickets if in_period(t.date, period, now)]


def _snapshot_value(line, field):
    if isinstance(line, dict):
        return line.get(field)
    return getattr(line, field, None)


def generate_report(tickets, period, catalog, now=None):
    """
    Build the report for one period in a single pass over the tickets.

    Revenue, cost and profit are the totals stored on each ticket.
    Ingredient usage is priced at today's catalog price; ingredients no
    longer in the catalog contribute quantity but no cost.

    Returns:
        dict with totals, glovo/normal counts, product_sales,
        daily_stats ({'YYYY-MM-DD': {'venta', 'costo'}}) and
        ingredient_usage ({name: {'total_amount', 'unit', 'total_cost', 'missing'}})
    """
    index = ensure_index(catalog)
    selected = filter_tickets(tickets, period, now)

    report = {
        'period': period,
        'ticket_count': len(selected),
        'total_venta': 0.0,
        'total_costo': 0.0,
        'total_profit': 0.0,
        'glovo_count': 0,
        'normal_count': 0,
        'product_sales': {},
        'daily_stats': {},
        'ingredient_usage': {},
    }
    product_sales = report['product_sales']
    daily_stats = report['daily_stats']
    usage = report['ingredient_usage']

    for ticket in selected:
        report['total_venta'] += ticket.total_venta
        report['total_costo'] += ticket.total_costo
        report['total_profit'] += ticket.total_profit
        if ticket.is_glovo:
            report['glovo_count'] += 1
        else:
            report['normal_count'] += 1

        day = ticket.date.date().isoformat()
        stats = daily_stats.setdefault(day, {'venta': 0.0, 'costo': 0.0})
        stats['venta'] += ticket.total_venta
        stats['costo'] += ticket.total_costo

        for item in ticket.items:
            product_sales[item.name] = product_sales.get(item.name, 0) + item.quantity

            for line in item.ingredients or []:
                name = canonical_name(_snapshot_value(line, 'name'))
                if not name:
                    continue
                amount_used = safe_float(_snapshot_value(line, 'amount')) * item.quantity
                entry = usage.get(name)
                if entry is None:
                    entry = usage[name] = {
                        'total_amount': 0.0,
                        'unit': _snapshot_value(line, 'unit'),
                        'total_cost': 0.0,
                        'missing': name not in index,
                    }
                entry['total_amount'] += amount_used
                ing = index.get(name)
                if ing is not None:
                    entry['total_cost'] += amount_used * safe_float(ing.price_per_unit)

    # Days in calendar order regardless of log order
    report['daily_stats'] = dict(sorted(daily_stats.items()))
    return report


def top_products(product_sales, limit=TOP_PRODUCTS_LIMIT):
    """Best sellers as (name, units) pairs, most units first."""
    ranked = sorted(product_sales.items(), key=lambda kv: (-kv[1], kv[0]))
    return ranked[:limit]


def trailing_days(daily_stats, days=TRAILING_DAYS):
    """The last N distinct dates present, oldest first."""
    dates = sorted(daily_stats)[-days:] if days else []
    return [(d, daily_stats[d]) for d in dates]


def usage_by_cost(ingredient_usage):
    """Ingredient usage rows sorted by restock cost, highest first."""
    rows = [dict(name=name, **entry) for name, entry in ingredient_usage.items()]
    rows.sort(key=lambda r: (-r['total_cost'], r['name']))
    return rows


def recent_first(tickets):
    """Tickets newest first, as listed on the cash-up screen."""
    return list(reversed(list(tickets)))
