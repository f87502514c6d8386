"""Pizzeria schema: ingredients, pizzas, tickets and settings

Revision ID: 3b7d2c91a4e0
Revises:
Create Date: 2026-10-19 10:12:41.118204

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3b7d2c91a4e0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'ingredient',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('unit', sa.String(length=4), nullable=False),
        sa.Column('price_per_unit', sa.Float(), nullable=False),
        sa.Column('default_sale_price', sa.Float(), nullable=True),
        sa.Column('show_in_sales', sa.Boolean(), nullable=False),
        sa.Column('current_stock', sa.Float(), nullable=True),
        sa.Column('min_stock', sa.Float(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_ingredient_name', 'ingredient', ['name'], unique=True)

    op.create_table(
        'pizza',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('number', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('sale_price', sa.Float(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_pizza_name', 'pizza', ['name'], unique=False)

    op.create_table(
        'pizza_ingredient',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('pizza_id', sa.String(length=36), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('unit', sa.String(length=4), nullable=False),
        sa.ForeignKeyConstraint(['pizza_id'], ['pizza.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_pizza_ingredient_pizza_id', 'pizza_ingredient', ['pizza_id'], unique=False)

    op.create_table(
        'ticket',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('ticket_number', sa.Integer(), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('is_glovo', sa.Boolean(), nullable=False),
        sa.Column('total_venta', sa.Float(), nullable=False),
        sa.Column('total_costo', sa.Float(), nullable=False),
        sa.Column('total_profit', sa.Float(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_ticket_ticket_number', 'ticket', ['ticket_number'], unique=False)
    op.create_index('ix_ticket_date', 'ticket', ['date'], unique=False)

    op.create_table(
        'ticket_item',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('ticket_id', sa.String(length=36), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('sale_price', sa.Float(), nullable=False),
        sa.Column('cost_price', sa.Float(), nullable=False),
        sa.Column('ingredients', sa.JSON(), nullable=False),
        sa.ForeignKeyConstraint(['ticket_id'], ['ticket.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_ticket_item_ticket_id', 'ticket_item', ['ticket_id'], unique=False)

    op.create_table(
        'settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('key', sa.String(length=50), nullable=False),
        sa.Column('value', sa.String(length=200), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('key'),
    )


def downgrade():
    op.drop_table('settings')
    op.drop_index('ix_ticket_item_ticket_id', table_name='ticket_item')
    op.drop_table('ticket_item')
    op.drop_index('ix_ticket_date', table_name='ticket')
    op.drop_index('ix_ticket_ticket_number', table_name='ticket')
    op.drop_table('ticket')
    op.drop_index('ix_pizza_ingredient_pizza_id', table_name='pizza_ingredient')
    op.drop_table('pizza_ingredient')
    op.drop_index('ix_pizza_name', table_name='pizza')
    op.drop_table('pizza')
    op.drop_index('ix_ingredient_name', table_name='ingredient')
    op.drop_table('ingredient')
