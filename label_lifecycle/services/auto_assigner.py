# label_lifecycle/services/auto_assigner.py
"""
Auto-assigner: turns classification suggestions into label assignments.

A suggestion becomes an assignment only when its confidence reaches the
threshold, its name resolves to an active label of the organization, and
the video does not already carry that label. Existing assignments are left
untouched, so running the assigner twice assigns nothing the second time.

The video's expiration is recomputed afterwards in every case.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Optional

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.orm import Session

from label_lifecycle.config import get_settings
from label_lifecycle.models import LabelAssignment
from label_lifecycle.services.label_catalog import get_labels_by_name
from label_lifecycle.services.label_classifier import ClassificationResult
from label_lifecycle.services.retention.calculator import update_video_expiration

logger = logging.getLogger(__name__)


@dataclass
class AutoAssignResult:
    """Label names assigned and skipped, in suggestion order."""
    assigned: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    expires_at: Optional[datetime] = None


def _get_assigned_label_ids(db: Session, video_id: uuid.UUID) -> set[uuid.UUID]:
    rows = db.query(LabelAssignment.label_id).filter(LabelAssignment.video_id == video_id).all()
    return {row.label_id for row in rows}


def _insert_assignment(
    db: Session,
    video_id: uuid.UUID,
    label_id: uuid.UUID,
    actor_id: uuid.UUID,
    confidence: float,
) -> bool:
    """Insert an AI assignment. Returns False if the pair already existed."""
    stmt = (
        pg_insert(LabelAssignment)
        .values(
            id=uuid.uuid4(),
            video_id=video_id,
            label_id=label_id,
            assigned_by_id=actor_id,
            assigned_at=datetime.now(UTC),
            is_ai_suggested=True,
            ai_confidence=confidence,
        )
        .on_conflict_do_nothing(index_elements=["video_id", "label_id"])
    )
    result = db.execute(stmt)
    return bool(result.rowcount)


def auto_assign(
    db: Session,
    video_id: uuid.UUID,
    organization_id: uuid.UUID,
    classification: ClassificationResult,
    actor_id: uuid.UUID,
    threshold: Optional[float] = None,
) -> AutoAssignResult:
    """
    Assign suggested labels to a video.

    Args:
        db: Database session
        video_id: Target video
        organization_id: Organization whose labels the names resolve against
        classification: Output of the classifier
        actor_id: Recorded as assigned_by_id (system actor or video owner)
        threshold: Minimum confidence (default: AUTO_ASSIGN_CONFIDENCE_THRESHOLD)

    Returns:
        AutoAssignResult with assigned and skipped names

    Raises:
        NotFoundError: video does not exist (from the expiration recompute)
    """
    if threshold is None:
        threshold = get_settings().AUTO_ASSIGN_CONFIDENCE_THRESHOLD

    result = AutoAssignResult()
    labels = get_labels_by_name(db, organization_id)
    already_assigned = _get_assigned_label_ids(db, video_id)

    for suggestion in classification.labels:
        name = suggestion.label_name

        if suggestion.confidence < threshold:
            result.skipped.append(name)
            continue

        label = labels.get(name)
        if label is None:
            logger.debug(f"[ASSIGN] No active label {name} in org {organization_id}")
            result.skipped.append(name)
            continue

        if label.id in already_assigned:
            result.skipped.append(name)
            continue

        if _insert_assignment(db, video_id, label.id, actor_id, suggestion.confidence):
            already_assigned.add(label.id)
            result.assigned.append(name)
        else:
            # Concurrent writer got there first
            result.skipped.append(name)

    result.expires_at = update_video_expiration(db, video_id)
    db.commit()

    logger.info(
        f"[ASSIGN] Video {video_id}: assigned={result.assigned} skipped={result.skipped}",
        extra={"video_id": str(video_id), "organization_id": str(organization_id)},
    )
    return result
