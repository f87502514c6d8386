"""
Ticket Log Service

Append/delete-only store of completed sales. Ticket rows are never updated
in place.
"""

import logging

from constants import LAST_TICKET_NUMBER_KEY
from .orders import next_ticket_number
from .settings import get_setting, set_setting

logger = logging.getLogger(__name__)


class TicketLog:
    """Ticket log over the Ticket/TicketItem tables."""

    def __init__(self, db, Ticket, TicketItem, Settings):
        self.db = db
        self.Ticket = Ticket
        self.TicketItem = TicketItem
        self.Settings = Settings

    def all(self):
        """Every ticket, oldest first."""
        return self.Ticket.query.order_by(self.Ticket.date, self.Ticket.ticket_number).all()

    def get(self, ticket_id):
        return self.db.session.get(self.Ticket, ticket_id)

    def last_issued(self):
        return int(get_setting(self.Settings, LAST_TICKET_NUMBER_KEY, 0) or 0)

    def next_number(self):
        highest = self.db.session.query(self.db.func.max(self.Ticket.ticket_number)).scalar()
        return next_ticket_number([highest], self.last_issued())

    def _build(self, record):
        ticket = self.Ticket(
            id=record['id'],
            ticket_number=record['ticket_number'],
            date=record['date'],
            is_glovo=bool(record.get('is_glovo')),
            total_venta=record['total_venta'],
            total_costo=record['total_costo'],
            total_profit=record['total_profit'],
        )
        for position, item in enumerate(record['items']):
            ticket.items.append(self.TicketItem(
                position=position,
                item_id=item['id'],
                name=item['name'],
                quantity=item['quantity'],
                sale_price=item['sale_price'],
                cost_price=item['cost_price'],
                ingredients=list(item.get('ingredients') or []),
            ))
        return ticket

    def append(self, draft):
        """
        Store a ticket draft and advance the number counter in one commit.

        On failure nothing is stored and the error propagates.
        """
        try:
            ticket = self._build(draft)
            self.db.session.add(ticket)
            set_setting(self.db, self.Settings, LAST_TICKET_NUMBER_KEY,
                        max(self.last_issued(), draft['ticket_number']))
            self.db.session.commit()
        except Exception:
            self.db.session.rollback()
            logger.exception("Could not store ticket #%s", draft.get('ticket_number'))
            raise
        logger.info("Stored ticket #%s (%.2f)", ticket.ticket_number, ticket.total_venta)
        return ticket

    def finalize_order(self, builder, now=None):
        """
        Close the builder's order as the next ticket.

        Returns the stored ticket, or None for an empty order. If storing
        fails the builder keeps its lines.
        """
        if builder.is_empty:
            return None
        saved_lines = [dict(line) for line in builder.lines]
        draft = builder.finalize(self.next_number(), now)
        try:
            return self.append(draft)
        except Exception:
            builder.lines = saved_lines
            raise

    def delete(self, ticket_id):
        """Delete a whole ticket. Other tickets keep their numbers."""
        ticket = self.get(ticket_id)
        if ticket is None:
            return False
        number = ticket.ticket_number
        self.db.session.delete(ticket)
        self.db.session.commit()
        logger.info("Deleted ticket #%s", number)
        return True

    def replace_all(self, records, commit=True):
        """Swap the whole log for restored records (backup import)."""
        for ticket in self.Ticket.query.all():
            self.db.session.delete(ticket)
        self.db.session.flush()
        highest = 0
        for record in records:
            self.db.session.add(self._build(record))
            highest = max(highest, record['ticket_number'])
        set_setting(self.db, self.Settings, LAST_TICKET_NUMBER_KEY, highest)
        if commit:
            self.db.session.commit()
        return len(records)
