# alembic/versions/001_initial_migration.py
"""Initial migration

Revision ID: 001
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('external_id', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('first_name', sa.String(100)),
        sa.Column('last_name', sa.String(100)),
        sa.Column('image_url', sa.Text),
        sa.Column('inspection_count', sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column('monthly_inspection_count', sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column('last_reset_date', sa.DateTime),
        sa.Column('status', sa.String(20), server_default=sa.text("'active'"), nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False),
        sa.CheckConstraint("status IN ('active', 'inactive')", name='users_status_check'),
    )
    op.create_index('ix_users_external_id', 'users', ['external_id'], unique=True)
    op.create_index('ix_users_status', 'users', ['status'])
    op.create_index('ix_users_created_at', 'users', ['created_at'])

    # Create inspections table
    op.create_table(
        'inspections',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('image_url', sa.Text, nullable=False),
        sa.Column('original_image_url', sa.Text),
        sa.Column('hazard_count', sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column('risk_score', sa.Integer()),
        sa.Column('safety_grade', sa.String(2)),
        sa.Column('analysis_results', postgresql.JSON),
        sa.Column('processing_status', sa.String(20), server_default=sa.text("'pending'"), nullable=False),
        sa.Column('error_message', sa.Text),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False),
        sa.CheckConstraint(
            "processing_status IN ('pending', 'processing', 'completed', 'failed')",
            name='inspections_status_check',
        ),
        sa.CheckConstraint(
            "safety_grade IS NULL OR safety_grade IN ('A', 'B', 'C', 'D', 'F')",
            name='inspections_grade_check',
        ),
        sa.CheckConstraint(
            "risk_score IS NULL OR (risk_score >= 0 AND risk_score <= 100)",
            name='inspections_risk_score_check',
        ),
        sa.CheckConstraint(
            "safety_grade IS NULL OR processing_status = 'completed'",
            name='inspections_grade_completed_check',
        ),
    )
    op.create_index('ix_inspections_user_id', 'inspections', ['user_id'])
    op.create_index('ix_inspections_safety_grade', 'inspections', ['safety_grade'])
    op.create_index('ix_inspections_processing_status', 'inspections', ['processing_status'])
    op.create_index('ix_inspections_created_at', 'inspections', ['created_at'])

    # Create usage_logs table
    op.create_table(
        'usage_logs',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id')),
        sa.Column('endpoint', sa.String(100), nullable=False),
        sa.Column('tokens_used', sa.Integer()),
        sa.Column('api_cost', sa.Numeric(10, 6)),
        sa.Column('response_time', sa.Integer()),
        sa.Column('success', sa.Boolean, server_default=sa.true(), nullable=False),
        sa.Column('error_type', sa.String(50)),
        sa.Column('created_at', sa.DateTime, nullable=False),
    )
    op.create_index('ix_usage_logs_user_id', 'usage_logs', ['user_id'])
    op.create_index('ix_usage_logs_created_at', 'usage_logs', ['created_at'])

    # Create settings table
    op.create_table(
        'settings',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('key', sa.String(100), nullable=False),
        sa.Column('value', sa.Text, nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('updated_at', sa.DateTime, nullable=False),
    )
    op.create_index('ix_settings_key', 'settings', ['key'], unique=True)


def downgrade() -> None:
    op.drop_table('settings')
    op.drop_table('usage_logs')
    op.drop_table('inspections')
    op.drop_table('users')
