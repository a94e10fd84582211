"""add video labels, label assignments, and retention columns on videos

Revision ID: 001_video_labels
Revises:
Create Date: 2026-10-18

videos, comments, space_videos and shared_videos belong to the platform
schema and already exist; this revision only extends videos.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '001_video_labels'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create label tables and add retention / RAG columns to videos."""
    op.create_table(
        'video_labels',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('organization_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('display_name', sa.String(100), nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('color', sa.String(7), nullable=False, server_default='#6B7280'),
        sa.Column('icon', sa.String(50), nullable=True),
        sa.Column('category', sa.String(20), nullable=False, server_default='content_type'),
        sa.Column('retention_days', sa.Integer, nullable=True),
        sa.Column('rag_default', sa.String(10), nullable=False, server_default='pending'),
        sa.Column('is_system', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.UniqueConstraint('organization_id', 'name', name='uq_video_labels_org_name'),
    )
    op.create_index('ix_video_labels_organization_id', 'video_labels', ['organization_id'])
    op.create_index('ix_video_labels_category', 'video_labels', ['category'])
    op.create_index('ix_video_labels_is_system', 'video_labels', ['is_system'])

    op.create_table(
        'video_label_assignments',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('video_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('videos.id'), nullable=False),
        sa.Column('label_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('video_labels.id'), nullable=False),
        sa.Column('assigned_by_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('assigned_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('is_ai_suggested', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('ai_confidence', sa.Float, nullable=True),
        sa.UniqueConstraint('video_id', 'label_id', name='uq_video_label_assignments_video_label'),
    )
    op.create_index('ix_video_label_assignments_video_id', 'video_label_assignments', ['video_id'])
    op.create_index('ix_video_label_assignments_label_id', 'video_label_assignments', ['label_id'])

    # Retention and knowledge-base columns on videos
    op.add_column('videos', sa.Column('rag_status', sa.String(10), nullable=False, server_default='pending'))
    op.add_column('videos', sa.Column('rag_status_updated_at', sa.DateTime(timezone=True), nullable=True))
    op.add_column('videos', sa.Column('rag_status_updated_by_id', postgresql.UUID(as_uuid=True), nullable=True))
    op.add_column('videos', sa.Column('keep_permanently', sa.Boolean, nullable=False, server_default=sa.false()))
    op.add_column('videos', sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True))
    op.add_column('videos', sa.Column('ai_suggested_labels', postgresql.JSONB, nullable=True))
    op.add_column('videos', sa.Column('ai_classified_at', sa.DateTime(timezone=True), nullable=True))

    op.create_index('ix_videos_expires_at', 'videos', ['expires_at'])
    op.create_index('ix_videos_rag_status', 'videos', ['rag_status'])
    op.create_index('ix_videos_ai_classified_at', 'videos', ['ai_classified_at'])


def downgrade() -> None:
    """Drop label tables and retention columns."""
    op.drop_index('ix_videos_ai_classified_at', table_name='videos')
    op.drop_index('ix_videos_rag_status', table_name='videos')
    op.drop_index('ix_videos_expires_at', table_name='videos')

    op.drop_column('videos', 'ai_classified_at')
    op.drop_column('videos', 'ai_suggested_labels')
    op.drop_column('videos', 'expires_at')
    op.drop_column('videos', 'keep_permanently')
    op.drop_column('videos', 'rag_status_updated_by_id')
    op.drop_column('videos', 'rag_status_updated_at')
    op.drop_column('videos', 'rag_status')

    op.drop_index('ix_video_label_assignments_label_id', table_name='video_label_assignments')
    op.drop_index('ix_video_label_assignments_video_id', table_name='video_label_assignments')
    op.drop_table('video_label_assignments')

    op.drop_index('ix_video_labels_is_system', table_name='video_labels')
    op.drop_index('ix_video_labels_category', table_name='video_labels')
    op.drop_index('ix_video_labels_organization_id', table_name='video_labels')
    op.drop_table('video_labels')
