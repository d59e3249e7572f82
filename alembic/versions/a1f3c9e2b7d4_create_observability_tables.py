"""create observability tables

Revision ID: a1f3c9e2b7d4
Revises:
Create Date: 2026-10-19 09:12:41.518220

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'a1f3c9e2b7d4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'service_health',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('service_name', sa.String(length=255), nullable=False),
        sa.Column('service_url', sa.String(length=2048), nullable=False),
        sa.Column('service_type', sa.String(length=50), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('status_code', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('response_time_ms', sa.Integer(), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('checked_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('last_healthy_at', sa.DateTime(), nullable=True),
        sa.Column('last_unhealthy_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_service_health_id', 'service_health', ['id'])
    op.create_index('ix_service_health_checked_at', 'service_health', ['checked_at'])
    op.create_index('ix_service_health_service_checked', 'service_health', ['service_name', 'checked_at'])

    op.create_table(
        'error_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('service_name', sa.String(length=255), nullable=False),
        sa.Column('error_type', sa.String(length=255), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=False),
        sa.Column('stack_trace', sa.Text(), nullable=True),
        sa.Column('endpoint', sa.String(length=1024), nullable=True),
        sa.Column('user_id', sa.String(length=255), nullable=True),
        sa.Column('request_id', sa.String(length=255), nullable=True),
        sa.Column('error_hash', sa.String(length=64), nullable=False),
        sa.Column('user_impact', sa.String(length=20), nullable=False, server_default='minor'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_error_logs_id', 'error_logs', ['id'])
    op.create_index('ix_error_logs_error_hash', 'error_logs', ['error_hash'])
    op.create_index('ix_error_logs_created_at', 'error_logs', ['created_at'])
    op.create_index('ix_error_logs_service_created', 'error_logs', ['service_name', 'created_at'])

    op.create_table(
        'performance_metrics',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('metric_name', sa.String(length=255), nullable=False),
        sa.Column('metric_type', sa.String(length=20), nullable=False, server_default='gauge'),
        sa.Column('value', sa.Float(), nullable=False),
        sa.Column('unit', sa.String(length=50), nullable=True),
        sa.Column('service_name', sa.String(length=255), nullable=False),
        sa.Column('endpoint', sa.String(length=1024), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('recorded_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_performance_metrics_id', 'performance_metrics', ['id'])
    op.create_index('ix_performance_metrics_recorded_at', 'performance_metrics', ['recorded_at'])
    op.create_index('ix_performance_metrics_name_recorded', 'performance_metrics', ['metric_name', 'recorded_at'])

    op.create_table(
        'alert_rules',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('metric_name', sa.String(length=255), nullable=True),
        sa.Column('service_name', sa.String(length=255), nullable=True),
        sa.Column('condition', sa.String(length=10), nullable=True),
        sa.Column('threshold_value', sa.Float(), nullable=True),
        sa.Column('severity', sa.String(length=20), nullable=False, server_default='warning'),
        sa.Column('evaluation_window', sa.String(length=10), nullable=False, server_default='1h'),
        sa.Column('last_triggered_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_alert_rules_id', 'alert_rules', ['id'])

    op.create_table(
        'alert_incidents',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('rule_id', sa.Integer(), sa.ForeignKey('alert_rules.id', ondelete='SET NULL'), nullable=True),
        sa.Column('rule_name', sa.String(length=255), nullable=False),
        sa.Column('severity', sa.String(length=20), nullable=False),
        sa.Column('triggered_value', sa.Float(), nullable=True),
        sa.Column('threshold_value', sa.Float(), nullable=True),
        sa.Column('condition', sa.String(length=255), nullable=True),
        sa.Column('service_name', sa.String(length=255), nullable=True),
        sa.Column('endpoint', sa.String(length=1024), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='open'),
        sa.Column('triggered_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('acknowledged_at', sa.DateTime(), nullable=True),
        sa.Column('acknowledged_by', sa.String(length=255), nullable=True),
        sa.Column('resolved_at', sa.DateTime(), nullable=True),
        sa.Column('resolved_by', sa.String(length=255), nullable=True),
        sa.Column('resolution_notes', sa.Text(), nullable=True),
    )
    op.create_index('ix_alert_incidents_id', 'alert_incidents', ['id'])
    op.create_index('ix_alert_incidents_status_triggered', 'alert_incidents', ['status', 'triggered_at'])
    op.create_index('ix_alert_incidents_rule_status', 'alert_incidents', ['rule_id', 'status'])

    op.create_table(
        'uptime_daily',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('service_name', sa.String(length=255), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('uptime_percent', sa.Float(), nullable=True),
        sa.UniqueConstraint('service_name', 'date', name='uq_uptime_daily_service_date'),
    )
    op.create_index('ix_uptime_daily_id', 'uptime_daily', ['id'])
    op.create_index('ix_uptime_daily_date', 'uptime_daily', ['date'])


def downgrade() -> None:
    op.drop_table('uptime_daily')
    op.drop_table('alert_incidents')
    op.drop_table('alert_rules')
    op.drop_table('performance_metrics')
    op.drop_table('error_logs')
    op.drop_table('service_health')
