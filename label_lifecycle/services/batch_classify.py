# label_lifecycle/services/batch_classify.py
"""
Batch classification of videos that were never classified.

Candidates: ai_classified_at IS NULL and transcription_status = complete.
Each video is handled on its own; a failure is recorded and the batch
moves on. The owner of each video is recorded as the assigner.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from label_lifecycle.config import get_settings
from label_lifecycle.errors import LifecycleError
from label_lifecycle.logging_config import ProgressTracker
from label_lifecycle.models import TranscriptionStatus, Video
from label_lifecycle.services.label_classifier import LabelClassifier
from label_lifecycle.services.transcripts import fetch_transcript
from label_lifecycle.services.video_classification import classify_and_assign
from label_lifecycle.storage import AssetStore, get_asset_store

logger = logging.getLogger(__name__)


@dataclass
class BatchClassifyDetail:
    video_id: str
    name: str
    status: str  # "classified", "skipped", "error", "would_classify"
    labels: list[str] = field(default_factory=list)
    reason: Optional[str] = None


@dataclass
class BatchClassifyReport:
    processed: int = 0
    classified: int = 0
    skipped: int = 0
    errors: int = 0
    skipped_for_budget: int = 0
    dry_run: bool = False
    details: list[BatchClassifyDetail] = field(default_factory=list)


def find_unclassified_videos(db: Session, limit: Optional[int] = None) -> list[Video]:
    query = (
        db.query(Video)
        .filter(
            Video.ai_classified_at.is_(None),
            Video.transcription_status == TranscriptionStatus.COMPLETE.value,
        )
        .order_by(Video.created_at)
    )
    if limit:
        query = query.limit(limit)
    return query.all()


def _classify_one(
    db: Session,
    video: Video,
    store: AssetStore,
    classifier: LabelClassifier,
    min_chars: int,
) -> BatchClassifyDetail:
    video_id = str(video.id)
    detail = BatchClassifyDetail(video_id=video_id, name=video.name, status="classified")

    transcript = fetch_transcript(video, store)
    if not transcript or len(transcript) < min_chars:
        detail.status = "skipped"
        detail.reason = "No transcript" if not transcript else "Transcript too short"
        return detail

    try:
        outcome = classify_and_assign(db, video, transcript, video.owner_id, classifier=classifier)
    except (LifecycleError, SQLAlchemyError) as e:
        db.rollback()
        detail.status = "error"
        detail.reason = str(e)
        logger.error(f"[CLASSIFY] Batch failed for video {video_id}: {e}", extra={"video_id": video_id})
        return detail

    if not outcome.classification.success:
        detail.status = "error"
        detail.reason = outcome.classification.error or outcome.classification.reasoning
        return detail

    detail.labels = outcome.assignment.assigned if outcome.assignment else []
    return detail


def classify_all_videos(
    db: Session,
    dry_run: bool = False,
    limit: Optional[int] = None,
    classifier: Optional[LabelClassifier] = None,
    asset_store: Optional[AssetStore] = None,
    budget_seconds: Optional[float] = None,
) -> BatchClassifyReport:
    """
    Classify and auto-assign every unclassified video.

    With dry_run nothing is written: no seeding, no oracle calls, no
    assignments. The report lists what would be processed.
    """
    settings = get_settings()
    budget = settings.CLASSIFY_BUDGET_SECONDS if budget_seconds is None else budget_seconds
    deadline = time.monotonic() + budget

    report = BatchClassifyReport(dry_run=dry_run)
    videos = find_unclassified_videos(db, limit)
    logger.info(f"[CLASSIFY] Found {len(videos)} unclassified videos (dry_run={dry_run})")

    if dry_run:
        for video in videos:
            report.details.append(
                BatchClassifyDetail(video_id=str(video.id), name=video.name, status="would_classify")
            )
        report.processed = len(videos)
        return report

    if not videos:
        return report

    store = asset_store or get_asset_store()
    classifier = classifier or LabelClassifier()
    tracker = ProgressTracker(total=len(videos), stage="classify_all")

    for index, video in enumerate(videos):
        if time.monotonic() >= deadline:
            report.skipped_for_budget = len(videos) - index
            logger.warning(
                f"[CLASSIFY] Budget of {budget}s spent, leaving {report.skipped_for_budget} videos for next run"
            )
            break

        detail = _classify_one(db, video, store, classifier, settings.MIN_TRANSCRIPT_CHARS)
        report.details.append(detail)
        report.processed += 1
        if detail.status == "classified":
            report.classified += 1
        elif detail.status == "skipped":
            report.skipped += 1
        else:
            report.errors += 1
        tracker.increment(success=detail.status != "error")

    tracker.finish()
    return report
