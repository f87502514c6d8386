"""
Services Package

Business logic modules for the pizzeria application.
"""

from .catalog import (
    canonical_name,
    normalize_unit,
    index_ingredients,
    find_ingredient,
    sort_and_renumber,
    missing_ingredient_names,
    search,
    active_pizzas,
    sellable_ingredients,
)

from .costing import (
    vat_split,
    calculate_line_cost,
    calculate_material_cost,
    calculate_pizza_cost,
    delivery_profit,
    profitability,
)

from .orders import (
    OrderBuilder,
    order_totals,
    next_ticket_number,
)

from .tickets import TicketLog

from .reports import (
    filter_tickets,
    generate_report,
    top_products,
    trailing_days,
    usage_by_cost,
    recent_first,
)

from .receipt import (
    format_amount,
    build_receipt,
    build_report_sheet,
)

from .settings import (
    get_app_settings,
    update_app_settings,
)

from .interchange import (
    ImportFormatError,
    export_workbook,
    import_workbook,
)

from .backup import (
    BackupFormatError,
    export_backup,
    dumps_backup,
    parse_backup,
)

from .advice import (
    AdviceError,
    AdviceProvider,
    NullAdvice,
    StaticAdvice,
    GeminiAdvice,
    build_advice_context,
    request_advice,
    get_provider,
)

__all__ = [
    # Catalog
    'canonical_name',
    'normalize_unit',
    'index_ingredients',
    'find_ingredient',
    'sort_and_renumber',
    'missing_ingredient_names',
    'search',
    'active_pizzas',
    'sellable_ingredients',
    # Costing
    'vat_split',
    'calculate_line_cost',
    'calculate_material_cost',
    'calculate_pizza_cost',
    'delivery_profit',
    'profitability',
    # Orders and tickets
    'OrderBuilder',
    'order_totals',
    'next_ticket_number',
    'TicketLog',
    # Reports
    'filter_tickets',
    'generate_report',
    'top_products',
    'trailing_days',
    'usage_by_cost',
    'recent_first',
    'format_amount',
    'build_receipt',
    'build_report_sheet',
    # Settings
    'get_app_settings',
    'update_app_settings',
    # Import / export
    'ImportFormatError',
    'export_workbook',
    'import_workbook',
    'BackupFormatError',
    'export_backup',
    'dumps_backup',
    'parse_backup',
    # Advice
    'AdviceError',
    'AdviceProvider',
    'NullAdvice',
    'StaticAdvice',
    'GeminiAdvice',
    'build_advice_context',
    'request_advice',
    'get_provider',
]
