# label_lifecycle/services/video_labels.py
"""
Manual label management on a video.

Every write path here ends with an expiration recompute, in the same
commit as the change it follows.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from label_lifecycle.config import get_settings
from label_lifecycle.errors import NotFoundError, PermissionDenied, ValidationError
from label_lifecycle.models import Label, LabelAssignment, RagStatus, Video
from label_lifecycle.services.retention.calculator import update_video_expiration

logger = logging.getLogger(__name__)


@dataclass
class AssignedLabel:
    """A label on a video, with provenance."""
    label: Label
    assigned_by_id: uuid.UUID
    assigned_at: datetime
    is_ai_suggested: bool
    ai_confidence: Optional[float]


@dataclass
class VideoLabelsView:
    video: Video
    labels: list[AssignedLabel]


@dataclass
class LabelUpdateResult:
    added: int
    removed: int
    expires_at: Optional[datetime]
    keep_permanently: bool


def _get_video(db: Session, video_id: uuid.UUID, organization_id: Optional[uuid.UUID] = None) -> Video:
    video = db.query(Video).filter(Video.id == video_id).first()
    # Videos of another organization look the same as missing ones
    if not video or (organization_id is not None and video.organization_id != organization_id):
        raise NotFoundError(f"Video {video_id} not found")
    return video


def can_modify_video(video: Video, actor_id, admin_ids: Optional[set[str]] = None) -> bool:
    """Owners may edit their videos; allowlisted admins may edit any video."""
    if admin_ids is None:
        admin_ids = get_settings().admin_user_ids
    return str(video.owner_id) == str(actor_id) or str(actor_id) in admin_ids


def get_video_labels(db: Session, video_id: uuid.UUID) -> VideoLabelsView:
    """Retention fields of a video plus its assigned labels."""
    video = _get_video(db, video_id)
    rows = (
        db.query(LabelAssignment, Label)
        .join(Label, LabelAssignment.label_id == Label.id)
        .filter(LabelAssignment.video_id == video_id)
        .order_by(Label.category, Label.display_name)
        .all()
    )
    labels = [
        AssignedLabel(
            label=label,
            assigned_by_id=assignment.assigned_by_id,
            assigned_at=assignment.assigned_at,
            is_ai_suggested=assignment.is_ai_suggested,
            ai_confidence=assignment.ai_confidence,
        )
        for assignment, label in rows
    ]
    return VideoLabelsView(video=video, labels=labels)


def update_video_labels(
    db: Session,
    video_id: uuid.UUID,
    label_ids: Iterable[uuid.UUID],
    actor_id: uuid.UUID,
    keep_permanently: Optional[bool] = None,
    admin_ids: Optional[set[str]] = None,
    organization_id: Optional[uuid.UUID] = None,
) -> LabelUpdateResult:
    """
    Replace the label set of a video.

    Labels present in label_ids but not on the video are added as manual
    assignments; labels on the video but absent from label_ids are removed.

    Raises:
        NotFoundError: video does not exist or belongs to another organization
        PermissionDenied: actor is neither the owner nor an admin
        ValidationError: unknown, inactive or foreign label ids
    """
    video = _get_video(db, video_id, organization_id)
    if not can_modify_video(video, actor_id, admin_ids):
        raise PermissionDenied("Only the video owner can change its labels")

    wanted = set(label_ids)
    if wanted:
        valid = {
            row.id
            for row in db.query(Label.id)
            .filter(
                Label.id.in_(wanted),
                Label.organization_id == video.organization_id,
                Label.is_active == True,
            )
            .all()
        }
        unknown = wanted - valid
        if unknown:
            raise ValidationError(f"Unknown labels for this organization: {sorted(str(i) for i in unknown)}")

    current = {
        row.label_id
        for row in db.query(LabelAssignment.label_id).filter(LabelAssignment.video_id == video_id).all()
    }
    to_add = wanted - current
    to_remove = current - wanted

    if to_remove:
        (
            db.query(LabelAssignment)
            .filter(LabelAssignment.video_id == video_id, LabelAssignment.label_id.in_(to_remove))
            .delete(synchronize_session=False)
        )

    now = datetime.now(UTC)
    for label_id in to_add:
        db.add(
            LabelAssignment(
                id=uuid.uuid4(),
                video_id=video_id,
                label_id=label_id,
                assigned_by_id=actor_id,
                assigned_at=now,
                is_ai_suggested=False,
                ai_confidence=None,
            )
        )

    if keep_permanently is not None:
        video.keep_permanently = keep_permanently
        db.add(video)

    db.flush()
    expires_at = update_video_expiration(db, video_id)
    db.commit()

    logger.info(
        f"[LABELS] Video {video_id}: +{len(to_add)} -{len(to_remove)} labels, expires_at={expires_at}",
        extra={"video_id": str(video_id)},
    )
    return LabelUpdateResult(
        added=len(to_add),
        removed=len(to_remove),
        expires_at=expires_at,
        keep_permanently=bool(video.keep_permanently),
    )


def set_rag_status(
    db: Session,
    video_id: uuid.UUID,
    rag_status: str,
    actor_id: uuid.UUID,
    admin_ids: Optional[set[str]] = None,
    organization_id: Optional[uuid.UUID] = None,
) -> Video:
    """
    Manually override knowledge-base eligibility.

    Raises:
        NotFoundError, PermissionDenied, ValidationError
    """
    if rag_status not in {r.value for r in RagStatus}:
        raise ValidationError(f"Unknown rag status: {rag_status}")

    video = _get_video(db, video_id, organization_id)
    if not can_modify_video(video, actor_id, admin_ids):
        raise PermissionDenied("Only the video owner can change its knowledge-base status")

    video.rag_status = rag_status
    video.rag_status_updated_at = datetime.now(UTC)
    video.rag_status_updated_by_id = actor_id
    db.add(video)
    db.commit()
    return video
