from flask import Flask, request, jsonify, session, send_file
from flask_migrate import Migrate
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime
import io
import logging

from config import get_config, configure_logging
from constants import (
    VALID_UNITS, DEFAULT_UNIT, VALID_PERIODS, MAX_LENGTHS, MAX_PRICE, MAX_AMOUNT,
    ALLOWED_WORKBOOK_EXTENSIONS, ALLOWED_BACKUP_EXTENSIONS,
)
from models import db, new_id, Ingredient, Pizza, PizzaIngredient, Ticket, TicketItem, Settings
from services import (
    normalize_unit, index_ingredients, find_ingredient, search,
    active_pizzas, sellable_ingredients,
    calculate_pizza_cost, delivery_profit, profitability,
    OrderBuilder, TicketLog,
    generate_report, recent_first, build_receipt, build_report_sheet,
    get_app_settings, update_app_settings,
    ImportFormatError, export_workbook, import_workbook,
    BackupFormatError, export_backup, dumps_backup, parse_backup,
    build_advice_context, request_advice, get_provider,
)
from services.catalog_store import (
    build_pizza, set_pizza_lines, renumber_pizzas, replace_ingredients, replace_pizzas,
)
from utils import safe_float, safe_bool, sanitize_name, allowed_file

app = Flask(__name__)
app.config.from_object(get_config())

configure_logging(app.config.get('LOG_LEVEL', 'INFO'))
logger = logging.getLogger(__name__)

db.init_app(app)
migrate = Migrate(app, db)

ticket_log = TicketLog(db, Ticket, TicketItem, Settings)


# ============================================
# HELPERS
# ============================================

def request_data():
    """JSON body if there is one, otherwise the submitted form."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def error(message, status=400):
    return jsonify({'error': message}), status


def all_ingredients():
    return Ingredient.query.order_by(Ingredient.name).all()


def all_pizzas():
    return Pizza.query.order_by(Pizza.number, Pizza.name).all()


def ingredient_json(ing):
    return {
        'id': ing.id,
        'name': ing.name,
        'unit': ing.unit,
        'price_per_unit': ing.price_per_unit,
        'default_sale_price': ing.default_sale_price,
        'show_in_sales': bool(ing.show_in_sales),
        'current_stock': ing.current_stock,
        'min_stock': ing.min_stock,
    }


def pizza_json(pizza, index, settings):
    breakdown = calculate_pizza_cost(pizza, index)
    return {
        'id': pizza.id,
        'number': pizza.number,
        'name': pizza.name,
        'is_active': pizza.is_active is not False,
        'costing': breakdown,
        'delivery_profit': delivery_profit(breakdown, settings['glovoCommission']),
    }


def ticket_json(ticket):
    return {
        'id': ticket.id,
        'ticket_number': ticket.ticket_number,
        'date': ticket.date.isoformat(),
        'is_glovo': bool(ticket.is_glovo),
        'total_venta': ticket.total_venta,
        'total_costo': ticket.total_costo,
        'total_profit': ticket.total_profit,
        'items': [
            {
                'item_id': item.item_id,
                'name': item.name,
                'quantity': item.quantity,
                'sale_price': item.sale_price,
                'cost_price': item.cost_price,
                'ingredients': item.ingredients,
            }
            for item in ticket.items
        ],
    }


def parse_pizza_lines(raw_lines, index):
    """
    Recipe lines from the submitted form.

    Blank names are dropped. The unit is copied from the catalog when the
    ingredient exists, otherwise the submitted unit is kept.
    """
    lines = []
    for raw in raw_lines or []:
        if not isinstance(raw, dict):
            continue
        name = sanitize_name(raw.get('name'), max_length=MAX_LENGTHS['ingredient_name'])
        if not name:
            continue
        ing = find_ingredient(index, name)
        lines.append({
            'id': new_id(),
            'name': name,
            'amount': safe_float(raw.get('amount'), min_val=0.0, max_val=MAX_AMOUNT),
            'unit': ing.unit if ing is not None else normalize_unit(raw.get('unit')),
        })
    return lines


def load_order(settings=None):
    settings = settings or get_app_settings(Settings)
    return OrderBuilder.from_dict(session.get('order'), commission_percent=settings['glovoCommission'])


def save_order(builder):
    session['order'] = builder.to_dict()


def order_json(builder):
    return {
        'delivery': builder.delivery,
        'commission_percent': builder.commission_percent,
        'lines': builder.lines,
        'totals': builder.totals(),
    }


@app.errorhandler(404)
def not_found(e):
    return error('Not found', 404)


@app.errorhandler(413)
def too_large(e):
    return error('Upload too large', 413)


# ============================================
# HOME
# ============================================

@app.route('/')
def index():
    settings = get_app_settings(Settings)
    return jsonify({
        'ingredients': Ingredient.query.count(),
        'pizzas': Pizza.query.count(),
        'tickets': Ticket.query.count(),
        'settings': settings,
    })


# ============================================
# INGREDIENTS
# ============================================

@app.route('/ingredients')
def ingredients_list():
    ingredients = search(all_ingredients(), request.args.get('q'))
    return jsonify([ingredient_json(ing) for ing in ingredients])


def apply_ingredient_form(ingredient, data):
    """Apply submitted fields; fields left out keep their current value."""
    unit = normalize_unit(data.get('unit', ingredient.unit or DEFAULT_UNIT))
    if unit not in VALID_UNITS:
        unit = DEFAULT_UNIT
    ingredient.unit = unit
    ingredient.price_per_unit = safe_float(
        data.get('price_per_unit', ingredient.price_per_unit), min_val=0.0, max_val=MAX_PRICE
    )

    if 'default_sale_price' in data:
        sale_price = data.get('default_sale_price')
        ingredient.default_sale_price = (
            safe_float(sale_price, min_val=0.0, max_val=MAX_PRICE) if sale_price not in (None, '') else None
        )
    if 'show_in_sales' in data:
        ingredient.show_in_sales = safe_bool(data.get('show_in_sales'))

    # Stock is recorded only
    for field in ('current_stock', 'min_stock'):
        if field in data:
            value = data.get(field)
            setattr(ingredient, field, safe_float(value, default=None) if value not in (None, '') else None)


@app.route('/ingredient/add', methods=['POST'])
def ingredient_add():
    data = request_data()
    name = sanitize_name(data.get('name'), max_length=MAX_LENGTHS['ingredient_name'])
    if not name:
        return error('Ingredient name is required')

    if Ingredient.query.filter_by(name=name).first():
        return error(f'"{name}" already exists in Ingredients')

    ingredient = Ingredient(id=new_id(), name=name, unit=DEFAULT_UNIT, price_per_unit=0.0, show_in_sales=False)
    apply_ingredient_form(ingredient, data)
    db.session.add(ingredient)
    db.session.commit()
    logger.info("Ingredient %s added at %.4f/%s", ingredient.name, ingredient.price_per_unit, ingredient.unit)
    return jsonify(ingredient_json(ingredient)), 201


@app.route('/ingredient/<id>/edit', methods=['POST'])
def ingredient_edit(id):
    ingredient = Ingredient.query.get_or_404(id)
    data = request_data()

    name = sanitize_name(data.get('name', ingredient.name), max_length=MAX_LENGTHS['ingredient_name'])
    if not name:
        return error('Ingredient name is required')

    # Check if new name conflicts with another ingredient
    if name != ingredient.name:
        existing = Ingredient.query.filter(Ingredient.name == name, Ingredient.id != id).first()
        if existing:
            return error(f'An ingredient named "{name}" already exists')

    # Renaming orphans recipe lines that still use the old name
    ingredient.name = name
    apply_ingredient_form(ingredient, data)

    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to save ingredient %s", id)
        return error('Failed to save')
    return jsonify(ingredient_json(ingredient))


@app.route('/ingredient/<id>/delete', methods=['POST'])
def ingredient_delete(id):
    ingredient = Ingredient.query.get_or_404(id)
    name = ingredient.name

    # Recipe lines keep the name and show up as missing from now on
    db.session.delete(ingredient)
    db.session.commit()
    logger.info("Ingredient %s deleted", name)
    return jsonify({'deleted': name})


# ============================================
# PIZZAS
# ============================================

@app.route('/pizzas')
def pizzas_list():
    settings = get_app_settings(Settings)
    index = index_ingredients(all_ingredients())
    pizzas = search(all_pizzas(), request.args.get('q'))
    return jsonify([pizza_json(p, index, settings) for p in pizzas])


@app.route('/pizza/<id>')
def pizza_view(id):
    pizza = Pizza.query.get_or_404(id)
    settings = get_app_settings(Settings)
    return jsonify(pizza_json(pizza, index_ingredients(all_ingredients()), settings))


def read_pizza_form(data, index, pizza=None):
    """
    Pizza fields from the submitted form.

    When editing, fields left out of the form keep the pizza's current
    values; 'ingredients' is None when the lines were not submitted.
    """
    name = data.get('name', pizza.name if pizza is not None else None)
    record = {
        'name': sanitize_name(name, max_length=MAX_LENGTHS['pizza_name']),
        'sale_price': pizza.sale_price if pizza is not None else None,
        'is_active': pizza.is_active is not False if pizza is not None else True,
        'ingredients': None,
    }
    if 'sale_price' in data:
        sale_price = data.get('sale_price')
        record['sale_price'] = (
            safe_float(sale_price, min_val=0.0, max_val=MAX_PRICE) if sale_price not in (None, '') else None
        )
    if 'is_active' in data:
        record['is_active'] = safe_bool(data.get('is_active'), default=True)
    if 'ingredients' in data or pizza is None:
        record['ingredients'] = parse_pizza_lines(data.get('ingredients'), index)
    return record


@app.route('/pizza/add', methods=['POST'])
def pizza_add():
    index = index_ingredients(all_ingredients())
    record = read_pizza_form(request_data(), index)
    if not record['name'] or not record['ingredients']:
        return error('A pizza needs a name and at least one ingredient')

    record['id'] = new_id()
    pizza = build_pizza(Pizza, PizzaIngredient, record)
    db.session.add(pizza)
    db.session.flush()
    renumber_pizzas(Pizza)
    db.session.commit()
    logger.info("Pizza %s added as #%s", pizza.name, pizza.number)
    return jsonify(pizza_json(pizza, index, get_app_settings(Settings))), 201


@app.route('/pizza/<id>/edit', methods=['POST'])
def pizza_edit(id):
    pizza = Pizza.query.get_or_404(id)
    index = index_ingredients(all_ingredients())
    record = read_pizza_form(request_data(), index, pizza)
    if not record['name'] or record['ingredients'] == []:
        return error('A pizza needs a name and at least one ingredient')

    pizza.name = record['name']
    pizza.sale_price = record['sale_price']
    pizza.is_active = record['is_active']
    if record['ingredients'] is not None:
        set_pizza_lines(pizza, PizzaIngredient, record['ingredients'])
    db.session.flush()
    renumber_pizzas(Pizza)
    db.session.commit()
    return jsonify(pizza_json(pizza, index, get_app_settings(Settings)))


@app.route('/pizza/<id>/delete', methods=['POST'])
def pizza_delete(id):
    pizza = Pizza.query.get_or_404(id)
    name = pizza.name
    db.session.delete(pizza)
    db.session.flush()
    renumber_pizzas(Pizza)
    db.session.commit()
    logger.info("Pizza %s deleted", name)
    return jsonify({'deleted': name})


@app.route('/pizza/<id>/advice', methods=['POST'])
def pizza_advice(id):
    pizza = Pizza.query.get_or_404(id)
    breakdown = calculate_pizza_cost(pizza, all_ingredients())
    context = build_advice_context(pizza, breakdown)
    text, problem = request_advice(get_provider(app.config), context)
    return jsonify({'advice': text, 'error': problem})


@app.route('/dashboard')
def dashboard():
    settings = get_app_settings(Settings)
    delivery = safe_bool(request.args.get('delivery'))
    rows = profitability(all_pizzas(), all_ingredients(), settings['glovoCommission'], delivery)
    return jsonify({'delivery': delivery, 'pizzas': rows})


# ============================================
# SALES
# ============================================

@app.route('/sales/catalog')
def sales_catalog():
    ingredients = all_ingredients()
    index = index_ingredients(ingredients)
    pizzas = []
    for pizza in active_pizzas(all_pizzas()):
        breakdown = calculate_pizza_cost(pizza, index)
        pizzas.append({
            'id': pizza.id,
            'number': pizza.number,
            'name': pizza.name,
            'sale_price': breakdown['sale_price'],
            'cost_price': breakdown['material_cost'],
        })
    extras = [
        {
            'id': ing.id,
            'name': ing.name,
            'sale_price': ing.default_sale_price or 0.0,
            'cost_price': ing.price_per_unit,
        }
        for ing in sellable_ingredients(ingredients)
    ]
    return jsonify({'pizzas': pizzas, 'extras': extras})


@app.route('/sales/order')
def sales_order():
    return jsonify(order_json(load_order()))


@app.route('/sales/order/add', methods=['POST'])
def sales_order_add():
    data = request_data()
    kind = data.get('kind', 'pizza')
    builder = load_order()

    if kind == 'pizza':
        pizza = Pizza.query.get_or_404(data.get('id'))
        if pizza.is_active is False:
            return error(f'"{pizza.name}" is switched off')
        builder.add_pizza(pizza, all_ingredients())
    elif kind == 'extra':
        ingredient = Ingredient.query.get_or_404(data.get('id'))
        if not ingredient.show_in_sales:
            return error(f'"{ingredient.name}" is not sold on its own')
        builder.add_extra(ingredient)
    else:
        return error(f'Unknown item kind: {kind}')

    save_order(builder)
    return jsonify(order_json(builder))


@app.route('/sales/order/<int:idx>/quantity', methods=['POST'])
def sales_order_quantity(idx):
    data = request_data()
    if 'quantity' not in data:
        return error('quantity is required')
    builder = load_order()
    try:
        builder.set_quantity(idx, data['quantity'])
    except IndexError as e:
        return error(str(e), 404)
    save_order(builder)
    return jsonify(order_json(builder))


@app.route('/sales/order/<int:idx>/remove', methods=['POST'])
def sales_order_remove(idx):
    builder = load_order()
    try:
        builder.remove_line(idx)
    except IndexError as e:
        return error(str(e), 404)
    save_order(builder)
    return jsonify(order_json(builder))


@app.route('/sales/order/mode', methods=['POST'])
def sales_order_mode():
    builder = load_order()
    builder.set_delivery(safe_bool(request_data().get('delivery')))
    save_order(builder)
    return jsonify(order_json(builder))


@app.route('/sales/order/clear', methods=['POST'])
def sales_order_clear():
    builder = load_order()
    builder.clear()
    save_order(builder)
    return jsonify(order_json(builder))


@app.route('/sales/finalize', methods=['POST'])
def sales_finalize():
    settings = get_app_settings(Settings)
    builder = load_order(settings)
    if builder.is_empty:
        return error('The order is empty')

    builder.attach_snapshots(all_pizzas())
    try:
        ticket = ticket_log.finalize_order(builder)
    except SQLAlchemyError:
        # Order stays in the session untouched
        return error('Could not store the ticket', 500)

    save_order(builder)
    return jsonify({
        'ticket': ticket_json(ticket),
        'receipt': build_receipt(ticket, settings, app.config.get('BUSINESS')),
    }), 201


# ============================================
# TICKETS AND REPORTS
# ============================================

@app.route('/tickets')
def tickets_list():
    return jsonify([ticket_json(t) for t in recent_first(ticket_log.all())])


@app.route('/ticket/<id>')
def ticket_view(id):
    ticket = ticket_log.get(id)
    if ticket is None:
        return error('Not found', 404)
    return jsonify(ticket_json(ticket))


@app.route('/ticket/<id>/receipt')
def ticket_receipt(id):
    ticket = ticket_log.get(id)
    if ticket is None:
        return error('Not found', 404)
    return jsonify(build_receipt(ticket, get_app_settings(Settings), app.config.get('BUSINESS')))


@app.route('/ticket/<id>/delete', methods=['POST'])
def ticket_delete(id):
    if not ticket_log.delete(id):
        return error('Not found', 404)
    return jsonify({'deleted': id})


def period_report(period):
    return generate_report(ticket_log.all(), period, all_ingredients())


@app.route('/reports/<period>')
def report_view(period):
    if period not in VALID_PERIODS:
        return error(f'Unknown report period: {period}')
    return jsonify(period_report(period))


@app.route('/reports/<period>/sheet')
def report_sheet(period):
    if period not in VALID_PERIODS:
        return error(f'Unknown report period: {period}')
    return jsonify(build_report_sheet(period_report(period), get_app_settings(Settings)))


# ============================================
# SETTINGS
# ============================================

@app.route('/settings', methods=['GET', 'POST'])
def settings_view():
    if request.method == 'POST':
        return jsonify(update_app_settings(db, Settings, request_data()))
    return jsonify(get_app_settings(Settings))


# ============================================
# IMPORT / EXPORT
# ============================================

def uploaded_bytes(extensions):
    """Bytes of the uploaded file, or None when the upload is unusable."""
    upload = request.files.get('file')
    if upload is None:
        return request.get_data() or None
    if not allowed_file(upload.filename, extensions):
        return None
    return upload.read()


@app.route('/export/excel')
def export_excel():
    content = export_workbook(all_ingredients(), all_pizzas())
    return send_file(
        io.BytesIO(content),
        mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        as_attachment=True,
        download_name=f'Noctambula_Data_{datetime.now():%Y-%m-%d}.xlsx',
    )


@app.route('/import/excel', methods=['POST'])
def import_excel():
    content = uploaded_bytes(ALLOWED_WORKBOOK_EXTENSIONS)
    if not content:
        return error('Upload an .xlsx workbook')

    try:
        ingredients, pizzas = import_workbook(io.BytesIO(content))
    except ImportFormatError as e:
        logger.warning("Workbook import rejected: %s", e)
        return error('Could not import the workbook')

    if not ingredients and not pizzas:
        return error('The workbook has no ingredients or recipes')

    try:
        if ingredients:
            replace_ingredients(db, Ingredient, ingredients)
        if pizzas:
            replace_pizzas(db, Pizza, PizzaIngredient, pizzas)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Workbook import failed while saving")
        return error('Could not import the workbook')

    logger.info("Workbook imported: %d ingredients, %d pizzas", len(ingredients), len(pizzas))
    return jsonify({'ingredients': len(ingredients), 'pizzas': len(pizzas)})


@app.route('/export/json')
def export_json():
    document = export_backup(
        all_ingredients(), all_pizzas(), ticket_log.all(), get_app_settings(Settings)
    )
    return send_file(
        io.BytesIO(dumps_backup(document).encode('utf-8')),
        mimetype='application/json',
        as_attachment=True,
        download_name=f'Noctambula_FullBackup_{datetime.now():%Y-%m-%d}.json',
    )


@app.route('/import/json', methods=['POST'])
def import_json():
    content = uploaded_bytes(ALLOWED_BACKUP_EXTENSIONS)
    if not content:
        return error('Upload a .json backup')

    try:
        sections = parse_backup(content.decode('utf-8'))
    except (BackupFormatError, UnicodeDecodeError) as e:
        logger.warning("Backup import rejected: %s", e)
        return error('Could not read the backup file')

    try:
        if 'ingredients' in sections:
            replace_ingredients(db, Ingredient, sections['ingredients'])
        if 'pizzas' in sections:
            replace_pizzas(db, Pizza, PizzaIngredient, sections['pizzas'])
        if 'tickets' in sections:
            ticket_log.replace_all(sections['tickets'], commit=False)
        if 'settings' in sections:
            update_app_settings(db, Settings, sections['settings'], commit=False)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Backup restore failed while saving")
        return error('Could not restore the backup')

    logger.info("Backup restored: %s", ', '.join(sections))
    return jsonify({'restored': sorted(sections)})


# ============================================
# INITIALIZE DATABASE
# ============================================

def init_db():
    with app.app_context():
        db.create_all()


if __name__ == '__main__':
    init_db()
    # host='0.0.0.0' allows access from other devices on the network
    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0', port=5000, use_reloader=False)
