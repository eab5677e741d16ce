"""
Initial migration - Create report and profile tables

Revision ID: 001_initial
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

# Revision identifiers
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create all tables."""

    # Create mangrove_reports table
    op.create_table(
        'mangrove_reports',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(100), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('incident_type', sa.String(50), nullable=False, server_default='other'),
        sa.Column('severity', sa.String(20), nullable=False, server_default='medium'),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('photos_json', sa.Text(), nullable=False, server_default='[]'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_index('ix_mangrove_reports_user_id', 'mangrove_reports', ['user_id'])
    op.create_index('idx_report_created_at', 'mangrove_reports', ['created_at'])
    op.create_index('idx_report_status', 'mangrove_reports', ['status'])

    # Create profiles table
    op.create_table(
        'profiles',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(100), nullable=False),
        sa.Column('display_name', sa.String(100), nullable=False),
        sa.Column('user_role', sa.String(50), nullable=False, server_default='community_member'),
        sa.Column('points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_reports', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('verified_reports', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_index('ix_profiles_user_id', 'profiles', ['user_id'], unique=True)


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('profiles')
    op.drop_table('mangrove_reports')
