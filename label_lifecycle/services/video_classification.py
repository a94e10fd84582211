# label_lifecycle/services/video_classification.py
"""
Classify-and-assign flow for one video.

Shared by the per-video endpoint and the batch job: seed the organization's
system labels, classify the transcript, auto-assign confident suggestions.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from label_lifecycle.errors import NotFoundError, PermissionDenied, ValidationError
from label_lifecycle.models import Video
from label_lifecycle.services.auto_assigner import AutoAssignResult, auto_assign
from label_lifecycle.services.label_catalog import seed_system_labels
from label_lifecycle.services.label_classifier import (
    ClassificationContext,
    ClassificationResult,
    LabelClassifier,
    can_classify,
)
from label_lifecycle.services.transcripts import fetch_transcript
from label_lifecycle.services.video_labels import can_modify_video
from label_lifecycle.storage import AssetStore, get_asset_store

logger = logging.getLogger(__name__)


@dataclass
class VideoClassificationOutcome:
    classification: ClassificationResult
    assignment: Optional[AutoAssignResult] = None


def build_context(video: Video, shared_space_names: Optional[list[str]] = None) -> ClassificationContext:
    return ClassificationContext(
        title=video.name,
        duration_seconds=video.duration_seconds,
        ai_summary=video.ai_summary,
        shared_space_names=list(shared_space_names or []),
    )


def classify_and_assign(
    db: Session,
    video: Video,
    transcript: str,
    actor_id: uuid.UUID,
    classifier: Optional[LabelClassifier] = None,
    shared_space_names: Optional[list[str]] = None,
) -> VideoClassificationOutcome:
    """
    Classify a video and assign the confident suggestions.

    Auto-assignment only runs when classification succeeded.
    """
    classifier = classifier or LabelClassifier()
    seed_system_labels(db, video.organization_id)

    classification = classifier.classify(
        db, video.id, transcript, build_context(video, shared_space_names)
    )
    if not classification.success:
        return VideoClassificationOutcome(classification=classification)

    assignment = auto_assign(db, video.id, video.organization_id, classification, actor_id)
    return VideoClassificationOutcome(classification=classification, assignment=assignment)


def classify_video_by_id(
    db: Session,
    video_id: uuid.UUID,
    actor_id: uuid.UUID,
    organization_id: Optional[uuid.UUID] = None,
    classifier: Optional[LabelClassifier] = None,
    asset_store: Optional[AssetStore] = None,
) -> VideoClassificationOutcome:
    """
    Load a video and its transcript, then classify and assign.

    Raises:
        NotFoundError: video missing or outside the caller's organization
        PermissionDenied: actor is neither the owner nor an admin
        ValidationError: transcription not complete, or transcript unreadable
    """
    video = db.query(Video).filter(Video.id == video_id).first()
    if not video or (organization_id is not None and video.organization_id != organization_id):
        raise NotFoundError(f"Video {video_id} not found")

    if not can_modify_video(video, actor_id):
        raise PermissionDenied("Not authorized to classify this video")

    if not can_classify(video):
        raise ValidationError(
            f"Video transcription is not complete (status: {video.transcription_status})"
        )

    transcript = fetch_transcript(video, asset_store or get_asset_store())
    if not transcript:
        raise ValidationError(f"Could not fetch transcript for video {video_id}")

    return classify_and_assign(db, video, transcript, actor_id, classifier=classifier)
