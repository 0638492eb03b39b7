"""Reservation pricing schema: purchase contexts, reservations, line items, discounts

Revision ID: 20261019_pricing
Revises:
Create Date: 2026-10-19

This migration adds:
1. Purchase contexts (events, subscription_descriptors) and ticket_categories
2. promo_code_discounts (promo codes and dynamic discounts)
3. tickets_reservations and subscriptions
4. tickets
5. additional_services, additional_service_texts, additional_service_items
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261019_pricing'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ==========================================================================
    # 1. PURCHASE CONTEXTS
    # ==========================================================================
    op.create_table('events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('short_name', sa.String(length=128), nullable=False),
        sa.Column('display_name', sa.String(length=255), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('vat', sa.Numeric(precision=7, scale=3), nullable=True),
        sa.Column('vat_status', sa.String(length=32), nullable=False, server_default='NONE'),
        sa.Column('locales', sa.JSON(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('short_name'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_events_organization_id', 'events', ['organization_id'])

    op.create_table('subscription_descriptors',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.JSON(), nullable=False),
        sa.Column('price_cts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('vat', sa.Numeric(precision=7, scale=3), nullable=True),
        sa.Column('vat_status', sa.String(length=32), nullable=False, server_default='NONE'),
        sa.Column('organization_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_subscription_descriptors_organization_id', 'subscription_descriptors', ['organization_id'])

    op.create_table('ticket_categories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('src_price_cts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        sa.ForeignKeyConstraint(['event_id'], ['events.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_ticket_categories_event_id', 'ticket_categories', ['event_id'])

    # ==========================================================================
    # 2. DISCOUNTS
    # ==========================================================================
    op.create_table('promo_code_discounts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=True),
        sa.Column('subscription_descriptor_id', sa.String(length=36), nullable=True),
        sa.Column('organization_id', sa.Integer(), nullable=True),
        sa.Column('promo_code', sa.String(length=64), nullable=False),
        sa.Column('discount_type', sa.String(length=32), nullable=False),
        sa.Column('discount_amount', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('code_type', sa.String(length=16), nullable=False, server_default='PROMO_CODE'),
        sa.Column('category_ids', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['event_id'], ['events.id']),
        sa.ForeignKeyConstraint(['subscription_descriptor_id'], ['subscription_descriptors.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_promo_code_discounts_event_id', 'promo_code_discounts', ['event_id'])
    op.create_index('ix_promo_code_discounts_subscription_descriptor_id', 'promo_code_discounts', ['subscription_descriptor_id'])
    op.create_index('ix_promo_code_discounts_organization_id', 'promo_code_discounts', ['organization_id'])

    # ==========================================================================
    # 3. RESERVATIONS AND SUBSCRIPTIONS
    # ==========================================================================
    op.create_table('tickets_reservations',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='PENDING'),
        sa.Column('event_id', sa.Integer(), nullable=True),
        sa.Column('subscription_descriptor_id', sa.String(length=36), nullable=True),
        sa.Column('currency_code', sa.String(length=3), nullable=False),
        sa.Column('vat_status', sa.String(length=32), nullable=True),
        sa.Column('used_vat_percent', sa.Numeric(precision=7, scale=3), nullable=True),
        sa.Column('promo_code_discount_id', sa.Integer(), nullable=True),
        sa.Column('payment_method', sa.String(length=32), nullable=True),
        sa.Column('user_language', sa.String(length=8), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['event_id'], ['events.id']),
        sa.ForeignKeyConstraint(['subscription_descriptor_id'], ['subscription_descriptors.id']),
        sa.ForeignKeyConstraint(['promo_code_discount_id'], ['promo_code_discounts.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_tickets_reservations_status', 'tickets_reservations', ['status'])
    op.create_index('ix_tickets_reservations_event_id', 'tickets_reservations', ['event_id'])
    op.create_index('ix_tickets_reservations_subscription_descriptor_id', 'tickets_reservations', ['subscription_descriptor_id'])

    op.create_table('subscriptions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('subscription_descriptor_id', sa.String(length=36), nullable=False),
        sa.Column('reservation_id', sa.String(length=36), nullable=True),
        sa.Column('organization_id', sa.Integer(), nullable=True),
        sa.Column('src_price_cts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('currency', sa.String(length=3), nullable=True),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='PENDING'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['subscription_descriptor_id'], ['subscription_descriptors.id']),
        sa.ForeignKeyConstraint(['reservation_id'], ['tickets_reservations.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_subscriptions_subscription_descriptor_id', 'subscriptions', ['subscription_descriptor_id'])
    op.create_index('ix_subscriptions_reservation_id', 'subscriptions', ['reservation_id'])

    # ==========================================================================
    # 4. TICKETS
    # ==========================================================================
    op.create_table('tickets',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('uuid', sa.String(length=36), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=True),
        sa.Column('reservation_id', sa.String(length=36), nullable=True),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='PENDING'),
        sa.Column('src_price_cts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('currency_code', sa.String(length=3), nullable=True),
        sa.Column('vat_status', sa.String(length=32), nullable=True),
        sa.Column('subscription_id', sa.String(length=36), nullable=True),
        sa.ForeignKeyConstraint(['event_id'], ['events.id']),
        sa.ForeignKeyConstraint(['category_id'], ['ticket_categories.id']),
        sa.ForeignKeyConstraint(['reservation_id'], ['tickets_reservations.id']),
        sa.ForeignKeyConstraint(['subscription_id'], ['subscriptions.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('uuid'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_tickets_event_id', 'tickets', ['event_id'])
    op.create_index('ix_tickets_category_id', 'tickets', ['category_id'])
    op.create_index('ix_tickets_reservation_id', 'tickets', ['reservation_id'])
    op.create_index('ix_tickets_subscription_id', 'tickets', ['subscription_id'])

    # ==========================================================================
    # 5. ADDITIONAL SERVICES
    # ==========================================================================
    op.create_table('additional_services',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('service_type', sa.String(length=16), nullable=False, server_default='SUPPLEMENT'),
        sa.Column('vat_type', sa.String(length=16), nullable=False, server_default='INHERITED'),
        sa.Column('vat', sa.Numeric(precision=7, scale=3), nullable=True),
        sa.Column('src_price_cts', sa.Integer(), nullable=True),
        sa.Column('currency_code', sa.String(length=3), nullable=True),
        sa.Column('ordinal', sa.Integer(), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['event_id'], ['events.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_additional_services_event_id', 'additional_services', ['event_id'])

    op.create_table('additional_service_texts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('additional_service_id', sa.Integer(), nullable=False),
        sa.Column('locale', sa.String(length=8), nullable=False),
        sa.Column('text_type', sa.String(length=16), nullable=False, server_default='TITLE'),
        sa.Column('value', sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(['additional_service_id'], ['additional_services.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('additional_service_id', 'locale', 'text_type', name='uq_additional_service_text'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_additional_service_texts_additional_service_id', 'additional_service_texts', ['additional_service_id'])

    op.create_table('additional_service_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('uuid', sa.String(length=36), nullable=False),
        sa.Column('reservation_id', sa.String(length=36), nullable=False),
        sa.Column('additional_service_id', sa.Integer(), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='PENDING'),
        sa.Column('src_price_cts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('currency_code', sa.String(length=3), nullable=True),
        sa.ForeignKeyConstraint(['reservation_id'], ['tickets_reservations.id']),
        sa.ForeignKeyConstraint(['additional_service_id'], ['additional_services.id']),
        sa.ForeignKeyConstraint(['event_id'], ['events.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('uuid'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_additional_service_items_reservation_id', 'additional_service_items', ['reservation_id'])
    op.create_index('ix_additional_service_items_additional_service_id', 'additional_service_items', ['additional_service_id'])
    op.create_index('ix_additional_service_items_event_id', 'additional_service_items', ['event_id'])


def downgrade():
    op.drop_table('additional_service_items')
    op.drop_table('additional_service_texts')
    op.drop_table('additional_services')
    op.drop_table('tickets')
    op.drop_table('subscriptions')
    op.drop_table('tickets_reservations')
    op.drop_table('promo_code_discounts')
    op.drop_table('ticket_categories')
    op.drop_table('subscription_descriptors')
    op.drop_table('events')
