"""
Ticket Models

Contains the Ticket and TicketItem models. Tickets are written once when a
sale is completed and only ever deleted whole afterwards.
"""

from .base import db, new_id


class Ticket(db.Model):
    """Completed sale with the totals captured at sale time."""
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    ticket_number = db.Column(db.Integer, nullable=False, index=True)
    date = db.Column(db.DateTime, nullable=False, index=True)

    # Third-party delivery sale, commission was deducted from profit
    is_glovo = db.Column(db.Boolean, default=False, nullable=False)

    total_venta = db.Column(db.Float, default=0.0, nullable=False)
    total_costo = db.Column(db.Float, default=0.0, nullable=False)
    total_profit = db.Column(db.Float, default=0.0, nullable=False)
    items = db.relationship(
        'TicketItem', backref='ticket', lazy=True,
        cascade='all, delete-orphan', order_by='TicketItem.position'
    )

    def __repr__(self):
        return f'<Ticket #{self.ticket_number} {self.date:%Y-%m-%d %H:%M}>'


class TicketItem(db.Model):
    """Sold line, a by-value snapshot of the pizza or extra at sale time."""
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    ticket_id = db.Column(db.String(36), db.ForeignKey('ticket.id', ondelete='CASCADE'), nullable=False, index=True)
    position = db.Column(db.Integer, default=0, nullable=False)

    # Id of the pizza or ingredient the line was sold from
    item_id = db.Column(db.String(36), nullable=False)

    name = db.Column(db.String(120), nullable=False)
    quantity = db.Column(db.Integer, default=1, nullable=False)
    sale_price = db.Column(db.Float, default=0.0, nullable=False)
    cost_price = db.Column(db.Float, default=0.0, nullable=False)

    # [{"id", "name", "amount", "unit"}, ...] copied from the recipe
    ingredients = db.Column(db.JSON, default=list, nullable=False)
