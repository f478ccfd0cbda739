"""Initial migration

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


GENERATE_CONFIRMATION_CODE = """
CREATE OR REPLACE FUNCTION generate_confirmation_code() RETURNS text AS $$
DECLARE
  alphabet text := 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789';
  candidate text;
BEGIN
  LOOP
    candidate := 'RES-';
    FOR i IN 1..6 LOOP
      candidate := candidate || substr(alphabet, 1 + floor(random() * length(alphabet))::int, 1);
    END LOOP;
    EXIT WHEN NOT EXISTS (
      SELECT 1 FROM reservations WHERE confirmation_code = candidate
    );
  END LOOP;
  RETURN candidate;
END;
$$ LANGUAGE plpgsql;
"""


def upgrade() -> None:
    # Create locations table
    op.create_table(
        'locations',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('address', sa.Text()),
        sa.Column('timezone', sa.String(50), default='America/New_York'),
        sa.Column('ordering_enabled', sa.Boolean(), default=False),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create reservation_settings table
    op.create_table(
        'reservation_settings',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('location_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('locations.id'), unique=True, nullable=False),
        sa.Column('online_reservations_enabled', sa.Boolean(), default=False),
        sa.Column('max_party_size_online', sa.Integer(), default=8),
        sa.Column('default_duration_minutes', sa.Integer(), default=120),
        sa.Column('time_slot_interval', sa.Integer(), default=15),
        sa.Column('min_advance_hours', sa.Integer(), default=1),
        sa.Column('max_advance_days', sa.Integer(), default=30),
        sa.Column('confirmation_message', sa.Text()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create operating_hours table
    op.create_table(
        'operating_hours',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('location_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('locations.id'), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('is_open', sa.Boolean(), default=True),
        sa.Column('open_time', sa.Time()),
        sa.Column('close_time', sa.Time()),
    )

    # Create blackout_dates table
    op.create_table(
        'blackout_dates',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('location_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('locations.id'), nullable=False),
        sa.Column('blackout_date', sa.Date(), nullable=False),
        sa.Column('reason', sa.String(255)),
    )

    # Create seating_maps table
    op.create_table(
        'seating_maps',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('location_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('locations.id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create seating_tables table
    op.create_table(
        'seating_tables',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('seating_map_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('seating_maps.id'), nullable=False),
        sa.Column('label', sa.String(50), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create reservations table
    op.create_table(
        'reservations',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('location_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('locations.id'), nullable=False),
        sa.Column('customer_name', sa.String(255), nullable=False),
        sa.Column('customer_phone', sa.String(32), nullable=False),
        sa.Column('customer_email', sa.String(255)),
        sa.Column('wants_loyalty_enrollment', sa.Boolean(), default=False),
        sa.Column('reservation_date', sa.Date(), nullable=False),
        sa.Column('reservation_time', sa.Time(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('party_size', sa.Integer(), nullable=False),
        sa.Column('special_accommodations', postgresql.JSON(), default={}),
        sa.Column('status', sa.String(50), default='confirmed'),
        sa.Column('source', sa.String(20), default='online'),
        sa.Column('confirmation_code', sa.String(32), unique=True, nullable=False),
        sa.Column('created_by', postgresql.UUID(as_uuid=True)),
        sa.Column('confirmation_sent_at', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create reservation_tables table
    op.create_table(
        'reservation_tables',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('reservation_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('reservations.id', ondelete='CASCADE'), unique=True, nullable=False),
        sa.Column('table_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('seating_tables.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create customers table
    op.create_table(
        'customers',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('location_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('locations.id'), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), default=''),
        sa.Column('phone', sa.String(32), nullable=False),
        sa.Column('email', sa.String(255)),
        sa.Column('is_loyalty_member', sa.Boolean(), default=False),
        sa.Column('loyalty_points', sa.Integer(), default=0),
        sa.Column('total_spent_cents', sa.Integer(), default=0),
        sa.Column('total_visits', sa.Integer(), default=0),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
        sa.UniqueConstraint('location_id', 'phone', name='uq_customers_location_phone'),
    )

    # Create indexes
    op.create_index('ix_seating_maps_location_id', 'seating_maps', ['location_id'])
    op.create_index('ix_seating_tables_seating_map_id', 'seating_tables', ['seating_map_id'])
    op.create_index('ix_reservations_location_date', 'reservations', ['location_id', 'reservation_date'])
    op.create_index('ix_reservation_tables_table_id', 'reservation_tables', ['table_id'])
    op.create_index('ix_operating_hours_location_day', 'operating_hours', ['location_id', 'day_of_week'])

    op.execute(GENERATE_CONFIRMATION_CODE)


def downgrade() -> None:
    op.execute("DROP FUNCTION IF EXISTS generate_confirmation_code();")
    op.drop_table('customers')
    op.drop_table('reservation_tables')
    op.drop_table('reservations')
    op.drop_table('seating_tables')
    op.drop_table('seating_maps')
    op.drop_table('blackout_dates')
    op.drop_table('operating_hours')
    op.drop_table('reservation_settings')
    op.drop_table('locations')
