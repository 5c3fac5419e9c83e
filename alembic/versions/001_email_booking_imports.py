"""Email booking import schema

Revision ID: 001_email_booking_imports
Revises:
Create Date: 2026-10-19

This migration creates:
1. properties, guest_profiles, bookings - the booking store
2. email_messages - ingested OTA emails with their processed flag
3. email_booking_imports - the import ledger, unique per email message
4. notifications - property notifications raised by imports
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001_email_booking_imports'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()
    is_postgres = bind.dialect.name == 'postgresql'

    json_type = postgresql.JSON if is_postgres else sa.JSON

    # ===========================================
    # 1. BOOKING STORE
    # ===========================================
    op.create_table(
        'properties',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('address', sa.Text, nullable=True),
        sa.Column('is_active', sa.Boolean, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index('ix_properties_is_active', 'properties', ['is_active'])

    op.create_table(
        'guest_profiles',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('address', sa.Text, nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('state', sa.String(100), nullable=True),
        sa.Column('country', sa.String(100), nullable=True),
        sa.Column('email_marketing_consent', sa.Boolean, server_default=sa.true()),
        sa.Column('sms_marketing_consent', sa.Boolean, server_default=sa.true()),
        sa.Column('data_retention_consent', sa.Boolean, server_default=sa.true()),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index('ix_guest_profiles_email', 'guest_profiles', ['email'])
    op.create_index('ix_guest_profiles_phone', 'guest_profiles', ['phone'])

    op.create_table(
        'bookings',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('property_id', sa.String(36), sa.ForeignKey('properties.id', ondelete='SET NULL'), nullable=True),
        sa.Column('guest_profile_id', sa.String(36), sa.ForeignKey('guest_profiles.id', ondelete='SET NULL'), nullable=True),
        sa.Column('guest_name', sa.String(200), nullable=False),
        sa.Column('room_no', sa.String(50), nullable=True),
        sa.Column('number_of_rooms', sa.Integer, server_default='1'),
        sa.Column('check_in', sa.Date, nullable=False),
        sa.Column('check_out', sa.Date, nullable=False),
        sa.Column('no_of_pax', sa.Integer, nullable=True),
        sa.Column('adult_child', sa.String(50), nullable=True),
        sa.Column('status', sa.String(30), server_default='confirmed'),
        sa.Column('cancelled', sa.Boolean, server_default=sa.false()),
        sa.Column('total_amount', sa.Numeric(12, 2), server_default='0'),
        sa.Column('payment_status', sa.String(20), nullable=True),
        sa.Column('contact_phone', sa.String(50), nullable=True),
        sa.Column('contact_email', sa.String(255), nullable=True),
        sa.Column('special_requests', sa.Text, nullable=True),
        sa.Column('source', sa.String(30), server_default='direct'),
        sa.Column('source_details', json_type, nullable=True),
        sa.Column('booking_date', sa.Date, nullable=True),
        sa.Column('folio_number', sa.String(50), nullable=True),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index('ix_booking_property_dates', 'bookings', ['property_id', 'check_in', 'check_out'])
    op.create_index('ix_booking_guest_name', 'bookings', ['guest_name'])
    op.create_index('ix_booking_source', 'bookings', ['source'])
    op.create_index('ix_bookings_cancelled', 'bookings', ['cancelled'])
    op.create_index('ix_bookings_folio_number', 'bookings', ['folio_number'])

    # ===========================================
    # 2. EMAIL MESSAGES
    # ===========================================
    op.create_table(
        'email_messages',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('external_message_id', sa.String(255), nullable=False, unique=True),
        sa.Column('thread_id', sa.String(255), nullable=True),
        sa.Column('sender', sa.String(255), nullable=True),
        sa.Column('subject', sa.Text, nullable=True),
        sa.Column('snippet', sa.Text, nullable=True),
        sa.Column('received_at', sa.DateTime, nullable=True),
        sa.Column('processed', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index('ix_email_messages_thread_id', 'email_messages', ['thread_id'])
    op.create_index('ix_email_messages_processed_received', 'email_messages', ['processed', 'received_at'])

    # ===========================================
    # 3. IMPORT LEDGER
    # ===========================================
    op.create_table(
        'email_booking_imports',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email_message_id', sa.String(36), sa.ForeignKey('email_messages.id', ondelete='CASCADE'), nullable=False),
        sa.Column('extraction_id', sa.String(36), nullable=True),
        sa.Column('property_id', sa.String(36), sa.ForeignKey('properties.id', ondelete='SET NULL'), nullable=True),
        sa.Column('event_type', sa.String(50), nullable=False),
        sa.Column('decision', sa.String(20), nullable=False, server_default='auto'),
        sa.Column('requires_approval', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('booking_id', sa.String(36), sa.ForeignKey('bookings.id', ondelete='SET NULL'), nullable=True),
        sa.Column('import_errors', json_type, nullable=True),
        sa.Column('processed_at', sa.DateTime, nullable=True),
        sa.Column('processed_by', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
    )
    # One ledger row per email, reprocessing overwrites it
    op.create_index('uq_email_import_per_message', 'email_booking_imports', ['email_message_id'], unique=True)
    op.create_index('ix_email_booking_imports_property', 'email_booking_imports', ['property_id'])
    op.create_index('ix_email_booking_imports_booking', 'email_booking_imports', ['booking_id'])

    # ===========================================
    # 4. NOTIFICATIONS
    # ===========================================
    op.create_table(
        'notifications',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('property_id', sa.String(36), nullable=False),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('message', sa.Text, nullable=True),
        sa.Column('priority', sa.String(20), server_default='medium'),
        sa.Column('platform', sa.String(50), nullable=True),
        sa.Column('data', json_type, nullable=True),
        sa.Column('is_read', sa.Boolean, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index('ix_notifications_property_id', 'notifications', ['property_id'])
    op.create_index('ix_notifications_type', 'notifications', ['type'])
    op.create_index('ix_notifications_is_read', 'notifications', ['is_read'])
    op.create_index('ix_notifications_created_at', 'notifications', ['created_at'])


def downgrade() -> None:
    op.drop_table('notifications')
    op.drop_table('email_booking_imports')
    op.drop_table('email_messages')
    op.drop_table('bookings')
    op.drop_table('guest_profiles')
    op.drop_table('properties')
