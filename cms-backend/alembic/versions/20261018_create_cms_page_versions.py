"""Create CmsPages, CmsPageVersions and CmsActivityLog tables

Creates the page anchor table with its per-page version sequence, the
append-only snapshot table with a unique (page_id, version_number)
constraint, and the activity log written alongside every snapshot.

Revision ID: c1a2b3d4e5f6
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = 'c1a2b3d4e5f6'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create version history tables."""
    # ========================================================================
    # 1. CmsPages
    # ========================================================================
    op.create_table(
        'CmsPages',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('page_key', sa.String(length=255), nullable=False),
        sa.Column('latest_version', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_CmsPages_page_key'), 'CmsPages', ['page_key'], unique=True)

    # ========================================================================
    # 2. CmsPageVersions
    # ========================================================================
    op.create_table(
        'CmsPageVersions',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('page_id', sa.UUID(), nullable=False),
        sa.Column('version_number', sa.Integer(), nullable=False),
        sa.Column('page_snapshot', postgresql.JSONB(), nullable=False),
        sa.Column('sections_snapshot', postgresql.JSONB(), nullable=False),
        sa.Column('change_description', sa.Text(), nullable=True),
        sa.Column('is_published', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('published_at', sa.DateTime(), nullable=True),
        sa.Column('tags', postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('created_by', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['page_id'], ['CmsPages.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('page_id', 'version_number', name='uq_cms_page_versions_page_number'),
    )
    op.create_index(op.f('ix_CmsPageVersions_page_id'), 'CmsPageVersions', ['page_id'])
    op.create_index(
        'ix_cms_page_versions_page_published',
        'CmsPageVersions',
        ['page_id', 'is_published'],
    )

    # ========================================================================
    # 3. CmsActivityLog
    # ========================================================================
    op.create_table(
        'CmsActivityLog',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=True),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('entity_type', sa.String(length=50), nullable=False),
        sa.Column('entity_id', sa.UUID(), nullable=False),
        sa.Column('changes', postgresql.JSONB(), nullable=True),
        sa.Column('details', postgresql.JSONB(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_CmsActivityLog_action'), 'CmsActivityLog', ['action'])
    op.create_index(op.f('ix_CmsActivityLog_entity_id'), 'CmsActivityLog', ['entity_id'])


def downgrade() -> None:
    """Drop version history tables."""
    op.drop_index(op.f('ix_CmsActivityLog_entity_id'), table_name='CmsActivityLog')
    op.drop_index(op.f('ix_CmsActivityLog_action'), table_name='CmsActivityLog')
    op.drop_table('CmsActivityLog')

    op.drop_index('ix_cms_page_versions_page_published', table_name='CmsPageVersions')
    op.drop_index(op.f('ix_CmsPageVersions_page_id'), table_name='CmsPageVersions')
    op.drop_table('CmsPageVersions')

    op.drop_index(op.f('ix_CmsPages_page_key'), table_name='CmsPages')
    op.drop_table('CmsPages')
