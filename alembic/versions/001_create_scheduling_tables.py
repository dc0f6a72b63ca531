"""create scheduling tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000
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

UUID = postgresql.UUID(as_uuid=True)

appointment_status = postgresql.ENUM('PENDING', 'CONFIRMED', 'IN_SERVICE', 'DONE', 'CANCELLED', name='appointment_status', create_type=False)
booking_source = postgresql.ENUM('STAFF', 'CLIENT_ONLINE', 'CLIENT_PHONE', 'WALK_IN', 'WAITING_LIST', name='booking_source', create_type=False)
cancelled_by = postgresql.ENUM('CLIENT', 'STAFF', 'SYSTEM', name='cancelled_by', create_type=False)
member_role = postgresql.ENUM('OWNER', 'MANAGER', 'STAFF', 'RECEPTIONIST', name='member_role', create_type=False)
time_block_type = postgresql.ENUM('VACATION', 'BREAK', 'MEETING', 'PERSONAL', 'HOLIDAY', 'OTHER', name='time_block_type', create_type=False)
waiting_list_status = postgresql.ENUM('WAITING', 'NOTIFIED', 'ACCEPTED', 'EXPIRED', 'CANCELLED', name='waiting_list_status', create_type=False)

ENUMS = (appointment_status, booking_source, cancelled_by, member_role, time_block_type, waiting_list_status)


def upgrade() -> None:
    # gist index over (uuid =, tsrange &&) for the overlap exclusion constraint
    op.execute('CREATE EXTENSION IF NOT EXISTS btree_gist')
    for enum_type in ENUMS:
        enum_type.create(op.get_bind(), checkfirst=True)

    op.create_table(
        'salons',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('timezone', sa.String(64), nullable=False, server_default='America/Sao_Paulo'),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'users',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('email', sa.String(), nullable=False, unique=True, index=True),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('full_name', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True, server_default='true'),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'salon_members',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('salon_id', UUID, sa.ForeignKey('salons.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('user_id', UUID, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('role', member_role, nullable=False, server_default='STAFF'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.UniqueConstraint('salon_id', 'user_id', name='uq_salon_member'),
    )

    op.create_table(
        'employees',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('salon_id', UUID, sa.ForeignKey('salons.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('user_id', UUID, sa.ForeignKey('users.id'), nullable=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('color', sa.String(16), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('accepts_online_booking', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'employee_schedules',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('employee_id', UUID, sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.String(5), nullable=False),
        sa.Column('end_time', sa.String(5), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.CheckConstraint('day_of_week BETWEEN 0 AND 6', name='ck_employee_schedules_day_of_week'),
    )

    op.create_table(
        'services',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('salon_id', UUID, sa.ForeignKey('salons.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
    )

    op.create_table(
        'employee_services',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('employee_id', UUID, sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('service_id', UUID, sa.ForeignKey('services.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('custom_duration', sa.Integer(), nullable=True),
        sa.Column('custom_price', sa.Numeric(10, 2), nullable=True),
        sa.UniqueConstraint('employee_id', 'service_id', name='uq_employee_service'),
    )

    op.create_table(
        'clients',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('salon_id', UUID, sa.ForeignKey('salons.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True, index=True),
        sa.Column('email', sa.String(255), nullable=True, index=True),
        sa.Column('source', sa.String(50), nullable=False, server_default='STAFF'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'appointments',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('salon_id', UUID, sa.ForeignKey('salons.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('client_id', UUID, sa.ForeignKey('clients.id'), nullable=False, index=True),
        sa.Column('employee_id', UUID, sa.ForeignKey('employees.id'), nullable=False, index=True),
        sa.Column('start_at', sa.DateTime(), nullable=False),
        sa.Column('end_at', sa.DateTime(), nullable=False),
        sa.Column('status', appointment_status, nullable=False, server_default='PENDING', index=True),
        sa.Column('total_price', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('booking_source', booking_source, nullable=False, server_default='STAFF'),
        sa.Column('confirmation_code', sa.String(8), nullable=False, index=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('reschedule_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('cancelled_by', cancelled_by, nullable=True),
        sa.Column('cancellation_reason', sa.Text(), nullable=True),
        sa.Column('cancellation_fee', sa.Numeric(10, 2), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('start_at < end_at', name='ck_appointments_positive_duration'),
    )
    op.create_index('ix_appointments_employee_window', 'appointments', ['employee_id', 'start_at', 'end_at'])
    # Last line of defence against double booking: two live appointments of
    # the same employee may never overlap, whatever the application does.
    op.execute(
        "ALTER TABLE appointments ADD CONSTRAINT ex_appointments_employee_no_overlap "
        "EXCLUDE USING gist (employee_id WITH =, tsrange(start_at, end_at) WITH &&) "
        "WHERE (status <> 'CANCELLED')"
    )

    op.create_table(
        'appointment_services',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('appointment_id', UUID, sa.ForeignKey('appointments.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('service_id', UUID, sa.ForeignKey('services.id'), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False, server_default='0'),
    )

    op.create_table(
        'appointment_assistants',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('appointment_id', UUID, sa.ForeignKey('appointments.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('employee_id', UUID, sa.ForeignKey('employees.id'), nullable=False, index=True),
    )

    op.create_table(
        'appointment_repetitions',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('appointment_id', UUID, sa.ForeignKey('appointments.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('rule', sa.String(255), nullable=False),
        sa.Column('repeat_until', sa.Date(), nullable=True),
    )

    op.create_table(
        'time_blocks',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('salon_id', UUID, sa.ForeignKey('salons.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('employee_id', UUID, sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=True, index=True),
        sa.Column('start_time', sa.DateTime(), nullable=False, index=True),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('type', time_block_type, nullable=False, server_default='OTHER'),
        sa.Column('is_recurring', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('recurrence_rule', sa.String(255), nullable=True),
        sa.Column('parent_id', UUID, sa.ForeignKey('time_blocks.id', ondelete='CASCADE'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('start_time < end_time', name='ck_time_blocks_positive_duration'),
    )

    op.create_table(
        'booking_configs',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('salon_id', UUID, sa.ForeignKey('salons.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('min_advance_hours', sa.Integer(), nullable=False, server_default='2'),
        sa.Column('max_advance_days', sa.Integer(), nullable=False, server_default='90'),
        sa.Column('allow_same_day_booking', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('slot_interval', sa.Integer(), nullable=False, server_default='15'),
        sa.Column('buffer_time_minutes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('free_cancellation_hours', sa.Integer(), nullable=False, server_default='24'),
        sa.Column('late_cancellation_hours', sa.Integer(), nullable=False, server_default='12'),
        sa.Column('late_cancellation_fee', sa.Integer(), nullable=False, server_default='50'),
        sa.Column('allow_rescheduling', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('max_reschedule_count', sa.Integer(), nullable=False, server_default='2'),
        sa.Column('min_reschedule_hours', sa.Integer(), nullable=False, server_default='24'),
        sa.Column('no_show_fee_percent', sa.Integer(), nullable=False, server_default='100'),
        sa.Column('auto_mark_no_show_minutes', sa.Integer(), nullable=False, server_default='15'),
        sa.Column('enable_reminders', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('reminder_24h', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('reminder_2h', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('reminder_channels', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default='["EMAIL", "SMS"]'),
        sa.Column('booking_slug', sa.String(100), nullable=True, unique=True, index=True),
        sa.Column('enable_online_booking', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('auto_approve_bookings', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('collect_client_phone', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('collect_client_email', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('require_terms_acceptance', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('booking_page_title', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'waiting_list_entries',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('salon_id', UUID, sa.ForeignKey('salons.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('client_id', UUID, sa.ForeignKey('clients.id'), nullable=False, index=True),
        sa.Column('employee_id', UUID, sa.ForeignKey('employees.id'), nullable=True),
        sa.Column('service_ids', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default='[]'),
        sa.Column('preferred_date', sa.Date(), nullable=True),
        sa.Column('preferred_start_time', sa.String(5), nullable=True),
        sa.Column('preferred_end_time', sa.String(5), nullable=True),
        sa.Column('flexible_timing', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('priority', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', waiting_list_status, nullable=False, server_default='WAITING', index=True),
        sa.Column('notified_at', sa.DateTime(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        sa.Column('offered_start', sa.DateTime(), nullable=True),
        sa.Column('offered_end', sa.DateTime(), nullable=True),
        sa.Column('appointment_id', UUID, sa.ForeignKey('appointments.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index(
        'uq_waiting_list_one_waiting_per_client',
        'waiting_list_entries',
        ['salon_id', 'client_id'],
        unique=True,
        postgresql_where=sa.text("status = 'WAITING'"),
    )


def downgrade() -> None:
    op.drop_index('uq_waiting_list_one_waiting_per_client', table_name='waiting_list_entries')
    op.drop_table('waiting_list_entries')
    op.drop_table('booking_configs')
    op.drop_table('time_blocks')
    op.drop_table('appointment_repetitions')
    op.drop_table('appointment_assistants')
    op.drop_table('appointment_services')
    op.execute('ALTER TABLE appointments DROP CONSTRAINT IF EXISTS ex_appointments_employee_no_overlap')
    op.drop_index('ix_appointments_employee_window', table_name='appointments')
    op.drop_table('appointments')
    op.drop_table('clients')
    op.drop_table('employee_services')
    op.drop_table('services')
    op.drop_table('employee_schedules')
    op.drop_table('employees')
    op.drop_table('salon_members')
    op.drop_table('users')
    op.drop_table('salons')
    for enum_type in reversed(ENUMS):
        enum_type.drop(op.get_bind(), checkfirst=True)
