"""
Video label & retention database models

Tables:
- Label: label definitions per organization (system-seeded or user-created)
- LabelAssignment: many-to-many link between videos and labels, with provenance
- Video: recorded videos (only the columns this engine reads or writes)
- Comment, SpaceVideo, SharedVideo: rows that depend on a video and are
  removed before it during cleanup
"""

from datetime import UTC, datetime
from enum import Enum
import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import relationship

from label_lifecycle.database import Base


def _utcnow() -> datetime:
    return datetime.now(UTC)


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class LabelCategory(str, Enum):
    """Label families. Listing order follows the enum value (alphabetical)."""
    CONTENT_TYPE = "content_type"
    DEPARTMENT = "department"


class RagStatus(str, Enum):
    """Knowledge-base eligibility of a video (or default hint of a label)."""
    ELIGIBLE = "eligible"
    EXCLUDED = "excluded"
    PENDING = "pending"


class TranscriptionStatus(str, Enum):
    """
    Transcription state machine, owned by the transcription worker.

    pending -> processing -> complete | skipped | no_audio
    A hard failure clears the status back to NULL so the video can be retried.
    """
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETE = "complete"
    SKIPPED = "skipped"
    NO_AUDIO = "no_audio"


DEFAULT_LABEL_COLOR = "#6B7280"


# -----------------------------------------------------------------------------
# Label
# -----------------------------------------------------------------------------

class Label(Base):
    """Label definition scoped to an organization."""
    __tablename__ = "video_labels"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organization_id = Column(UUID(as_uuid=True), nullable=False)

    name = Column(String(100), nullable=False)  # e.g. "TROUBLESHOOTING", machine key
    display_name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    color = Column(String(7), default=DEFAULT_LABEL_COLOR, nullable=False)
    icon = Column(String(50), nullable=True)
    category = Column(String(20), default=LabelCategory.CONTENT_TYPE.value, nullable=False)

    # NULL = does not expire
    retention_days = Column(Integer, nullable=True)
    rag_default = Column(String(10), default=RagStatus.PENDING.value, nullable=False)

    is_system = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)  # soft delete

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    assignments = relationship("LabelAssignment", back_populates="label")

    __table_args__ = (
        UniqueConstraint("organization_id", "name", name="uq_video_labels_org_name"),
        Index("ix_video_labels_organization_id", "organization_id"),
        Index("ix_video_labels_category", "category"),
        Index("ix_video_labels_is_system", "is_system"),
    )


# -----------------------------------------------------------------------------
# LabelAssignment
# -----------------------------------------------------------------------------

class LabelAssignment(Base):
    """A label applied to a video, with who/what applied it."""
    __tablename__ = "video_label_assignments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    video_id = Column(UUID(as_uuid=True), ForeignKey("videos.id"), nullable=False)
    label_id = Column(UUID(as_uuid=True), ForeignKey("video_labels.id"), nullable=False)

    assigned_by_id = Column(UUID(as_uuid=True), nullable=False)  # user or system actor
    assigned_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    is_ai_suggested = Column(Boolean, default=False, nullable=False)
    ai_confidence = Column(Float, nullable=True)  # 0-1, only for AI assignments

    label = relationship("Label", back_populates="assignments")
    video = relationship("Video", back_populates="label_assignments")

    __table_args__ = (
        UniqueConstraint("video_id", "label_id", name="uq_video_label_assignments_video_label"),
        Index("ix_video_label_assignments_video_id", "video_id"),
        Index("ix_video_label_assignments_label_id", "label_id"),
    )


# -----------------------------------------------------------------------------
# Video
# -----------------------------------------------------------------------------

class Video(Base):
    """
    Recorded video. Binary assets live in object storage under
    {owner_id}/{video_id}/, only metadata is kept here.

    expires_at is derived: it is recomputed from keep_permanently, the
    retention_days of the assigned labels and created_at whenever one of
    those changes. Never write it directly.
    """
    __tablename__ = "videos"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organization_id = Column(UUID(as_uuid=True), nullable=False)
    owner_id = Column(UUID(as_uuid=True), nullable=False)
    name = Column(String(255), nullable=False, default="My Video")
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    duration_seconds = Column(Float, nullable=True)
    ai_summary = Column(Text, nullable=True)

    # Transcription (TranscriptionStatus, NULL = never attempted or failed)
    transcription_status = Column(String(16), nullable=True)

    # Knowledge-base eligibility
    rag_status = Column(String(10), default=RagStatus.PENDING.value, nullable=False)
    rag_status_updated_at = Column(DateTime(timezone=True), nullable=True)
    rag_status_updated_by_id = Column(UUID(as_uuid=True), nullable=True)

    # Retention
    keep_permanently = Column(Boolean, default=False, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=True)

    # Last classification run: [{"label_name": "DEMO", "confidence": 0.9}, ...]
    ai_suggested_labels = Column(JSONB, nullable=True)
    ai_classified_at = Column(DateTime(timezone=True), nullable=True)

    label_assignments = relationship("LabelAssignment", back_populates="video")

    __table_args__ = (
        Index("ix_videos_organization_id", "organization_id"),
        Index("ix_videos_expires_at", "expires_at"),
        Index("ix_videos_rag_status", "rag_status"),
        Index("ix_videos_ai_classified_at", "ai_classified_at"),
    )


# -----------------------------------------------------------------------------
# Rows that depend on a video
# -----------------------------------------------------------------------------

class Comment(Base):
    """Viewer comment on a video."""
    __tablename__ = "comments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    video_id = Column(UUID(as_uuid=True), ForeignKey("videos.id"), nullable=False)
    author_id = Column(UUID(as_uuid=True), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_comments_video_id", "video_id"),
    )


class SpaceVideo(Base):
    """Video shared into a space or folder."""
    __tablename__ = "space_videos"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    space_id = Column(UUID(as_uuid=True), nullable=False)
    video_id = Column(UUID(as_uuid=True), ForeignKey("videos.id"), nullable=False)
    added_by_id = Column(UUID(as_uuid=True), nullable=False)
    added_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_space_videos_video_id", "video_id"),
    )


class SharedVideo(Base):
    """Video shared directly with an organization or user."""
    __tablename__ = "shared_videos"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    video_id = Column(UUID(as_uuid=True), ForeignKey("videos.id"), nullable=False)
    shared_with_id = Column(UUID(as_uuid=True), nullable=False)
    shared_by_id = Column(UUID(as_uuid=True), nullable=False)
    shared_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_shared_videos_video_id", "video_id"),
    )
