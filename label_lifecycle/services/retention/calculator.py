# label_lifecycle/services/retention/calculator.py
"""
Retention calculator.

expires_at is a pure function of three inputs:
- video.keep_permanently (overrides everything)
- retention_days of every label currently assigned to the video
- video.created_at

The shortest non-null retention wins. Labels without retention_days never
expire and do not contribute.
"""

import logging
import uuid
from datetime import UTC, datetime, timedelta
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from label_lifecycle.errors import NotFoundError
from label_lifecycle.models import Label, LabelAssignment, Video

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    """Naive datetimes from the database are stored in UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def compute_expiration(video: Video, labels: Iterable[Label]) -> Optional[datetime]:
    """
    Compute when a video expires.

    Adds whole calendar days to created_at, so the time of day is kept.

    Returns:
        Expiration timestamp, or None if the video never expires
    """
    if video.keep_permanently:
        return None

    retention = [label.retention_days for label in labels if label.retention_days is not None]
    if not retention:
        return None

    return _as_utc(video.created_at) + timedelta(days=min(retention))


def assigned_labels(db: Session, video_id: uuid.UUID) -> list[Label]:
    """Labels currently assigned to a video."""
    return (
        db.query(Label)
        .join(LabelAssignment, LabelAssignment.label_id == Label.id)
        .filter(LabelAssignment.video_id == video_id)
        .all()
    )


def update_video_expiration(db: Session, video_id: uuid.UUID) -> Optional[datetime]:
    """
    Recompute and store expires_at for a video.

    The caller owns the transaction and commits.

    Raises:
        NotFoundError: video does not exist
    """
    video = db.query(Video).filter(Video.id == video_id).first()
    if not video:
        raise NotFoundError(f"Video {video_id} not found")

    expires_at = compute_expiration(video, assigned_labels(db, video_id))
    video.expires_at = expires_at
    db.add(video)

    logger.debug(
        f"[RETENTION] Video {video_id} expires_at={expires_at.isoformat() if expires_at else None}",
        extra={"video_id": str(video_id)},
    )
    return expires_at


def is_expired(video: Video, now: Optional[datetime] = None) -> bool:
    """Eligibility predicate used by the cleanup job."""
    if video.keep_permanently or video.expires_at is None:
        return False
    now = now or datetime.now(UTC)
    return _as_utc(video.expires_at) <= _as_utc(now)
