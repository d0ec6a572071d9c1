"""CivicWire initial schema

Revision ID: 001_civicwire_schema
Revises:
Create Date: 2026-10-19

Creates stories and the ingest_runs ledger, including the partial unique
index that admits at most one running ingest at a time.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001_civicwire_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'stories',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('url', sa.Text, unique=True, nullable=False),
        sa.Column('title', sa.Text, nullable=False),
        sa.Column('image_url', sa.Text, nullable=True),
        sa.Column('source', sa.String(255), nullable=False),
        sa.Column('topic', sa.String(128), nullable=False),
        sa.Column('bias_label', sa.String(16), nullable=False),
        sa.Column('published_at', sa.DateTime, nullable=False),
        sa.Column('raw_description', sa.Text, nullable=False, server_default=''),
        sa.Column('summary', sa.Text, nullable=False),
        sa.Column('just_facts', sa.Text, nullable=False),
        sa.Column('left_perspective', sa.Text, nullable=False),
        sa.Column('right_perspective', sa.Text, nullable=False),
        sa.Column('history_analysis', sa.Text, nullable=True),
        sa.Column('historical_comparisons', sa.JSON, nullable=False),
        sa.Column('factual_points', sa.JSON, nullable=False),
        sa.Column('confidence', sa.Integer, nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False),
    )
    op.create_index('ix_stories_published_at', 'stories', ['published_at'])

    op.create_table(
        'ingest_runs',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('status', sa.String(16), nullable=False),
        sa.Column('provider', sa.String(32), nullable=False),
        sa.Column('triggered_by', sa.String(16), nullable=False),
        sa.Column('actor_id', sa.String(255), nullable=True),
        sa.Column('started_at', sa.DateTime, nullable=False),
        sa.Column('finished_at', sa.DateTime, nullable=True),
        sa.Column('processed', sa.Integer, nullable=False, server_default='0'),
        sa.Column('created', sa.Integer, nullable=False, server_default='0'),
        sa.Column('skipped', sa.Integer, nullable=False, server_default='0'),
        sa.Column('pruned', sa.Integer, nullable=False, server_default='0'),
        sa.Column('error_message', sa.Text, nullable=True),
        sa.Column('source_errors', sa.JSON, nullable=True),
    )
    op.create_index('ix_ingest_runs_started_at', 'ingest_runs', ['started_at'])
    op.create_index(
        'uq_ingest_runs_single_running',
        'ingest_runs',
        ['status'],
        unique=True,
        postgresql_where=sa.text("status = 'running'"),
    )


def downgrade() -> None:
    op.drop_index('uq_ingest_runs_single_running', table_name='ingest_runs')
    op.drop_index('ix_ingest_runs_started_at', table_name='ingest_runs')
    op.drop_table('ingest_runs')
    op.drop_index('ix_stories_published_at', table_name='stories')
    op.drop_table('stories')
