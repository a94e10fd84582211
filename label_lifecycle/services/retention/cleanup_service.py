# label_lifecycle/services/retention/cleanup_service.py
"""
Cleanup job: permanent deletion of expired videos.

Handles:
- Selection of videos past expires_at that are not kept permanently
- Best-effort removal of stored assets under {owner_id}/{video_id}/
- Deletion of dependent rows in a fixed order, then the video row
- Per-video isolation: one failure never aborts the batch
- A wall-clock budget so a scheduled invocation ends before its timeout
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Optional

from sqlalchemy.orm import Session

from label_lifecycle.config import get_settings
from label_lifecycle.errors import LifecycleError
from label_lifecycle.logging_config import ProgressTracker
from label_lifecycle.models import Comment, LabelAssignment, SharedVideo, SpaceVideo, Video
from label_lifecycle.services.retention.calculator import is_expired
from label_lifecycle.storage import AssetStore, get_asset_store, video_prefix

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeletionStep:
    """One table removed during the cascade, keyed by its video column."""
    name: str
    model: type
    column: str


# Leaf-to-root: every row referencing the video goes before the video itself
DELETION_STEPS: tuple[DeletionStep, ...] = (
    DeletionStep("comments", Comment, "video_id"),
    DeletionStep("label_assignments", LabelAssignment, "video_id"),
    DeletionStep("space_videos", SpaceVideo, "video_id"),
    DeletionStep("shared_videos", SharedVideo, "video_id"),
    DeletionStep("videos", Video, "id"),
)


@dataclass(frozen=True)
class ExpiredVideo:
    """Column snapshot of a cleanup candidate. Stays readable after commits and concurrent deletes."""
    id: uuid.UUID
    owner_id: uuid.UUID
    name: str
    expires_at: Optional[datetime]
    keep_permanently: bool = False


@dataclass
class CleanupDetail:
    """Outcome for one video."""
    video_id: str
    name: str
    expires_at: Optional[str]
    status: str  # "deleted", "error" or "would_delete"
    error: Optional[str] = None
    assets_deleted: int = 0
    asset_error: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "video_id": self.video_id,
            "name": self.name,
            "expires_at": self.expires_at,
            "status": self.status,
        }
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class CleanupReport:
    """Result of a cleanup run."""
    deleted: int = 0
    errors: int = 0
    skipped_for_budget: int = 0
    dry_run: bool = False
    details: list[CleanupDetail] = field(default_factory=list)
    related_records_deleted: dict = field(default_factory=dict)


def find_expired_videos(db: Session, now: datetime) -> list[ExpiredVideo]:
    """Videos with expires_at <= now that are not kept permanently."""
    rows = (
        db.query(Video.id, Video.owner_id, Video.name, Video.expires_at, Video.keep_permanently)
        .filter(
            Video.expires_at.isnot(None),
            Video.expires_at <= now,
            Video.keep_permanently == False,
        )
        .order_by(Video.expires_at)
        .all()
    )
    return [ExpiredVideo(*row) for row in rows]


def delete_video_assets(store: AssetStore, owner_id, video_id) -> int:
    """Remove every stored object of a video. An empty listing deletes nothing."""
    prefix = video_prefix(owner_id, video_id)
    keys = store.list_keys(prefix)
    if not keys:
        logger.debug(f"[CLEANUP] No stored assets under {prefix}")
        return 0
    return store.delete_keys(keys)


def delete_video_cascade(db: Session, video_id: uuid.UUID) -> dict:
    """
    Delete a video and every row referencing it, in DELETION_STEPS order.

    Does not commit. Returns counts of deleted records by table.
    """
    counts = {}
    for step in DELETION_STEPS:
        column = getattr(step.model, step.column)
        counts[step.name] = (
            db.query(step.model).filter(column == video_id).delete(synchronize_session=False)
        )
    return counts


def _cleanup_one(
    db: Session,
    video: ExpiredVideo,
    store: Optional[AssetStore],
    report: CleanupReport,
) -> CleanupDetail:
    video_id = video.id
    owner_id = video.owner_id
    detail = CleanupDetail(
        video_id=str(video_id),
        name=video.name,
        expires_at=video.expires_at.isoformat() if video.expires_at else None,
        status="deleted",
    )

    if store is not None:
        try:
            detail.assets_deleted = delete_video_assets(store, owner_id, video_id)
        except (LifecycleError, ValueError) as e:
            detail.asset_error = str(e)
            logger.warning(
                f"[CLEANUP] Asset deletion failed for video {video_id}, continuing: {e}",
                extra={"video_id": str(video_id)},
            )

    try:
        counts = delete_video_cascade(db, video_id)
        db.commit()
    except Exception as e:
        db.rollback()
        detail.status = "error"
        detail.error = str(e)
        logger.error(
            f"[CLEANUP] Failed to delete video {video_id}: {e}",
            extra={"video_id": str(video_id)},
        )
        return detail

    for table, count in counts.items():
        report.related_records_deleted[table] = report.related_records_deleted.get(table, 0) + count

    logger.info(
        f"[CLEANUP] Deleted video {video_id} ({detail.assets_deleted} assets)",
        extra={"video_id": str(video_id)},
    )
    return detail


def run_cleanup(
    db: Session,
    now: Optional[datetime] = None,
    asset_store: Optional[AssetStore] = None,
    budget_seconds: Optional[float] = None,
    dry_run: bool = False,
) -> CleanupReport:
    """
    Delete every expired video.

    Videos are processed one at a time. Once the budget is spent no new
    video is started; the remaining candidates are counted in
    skipped_for_budget and picked up by the next run.

    Args:
        db: Database session
        now: Reference time (default: current UTC time)
        asset_store: Store holding video files (default: configured store)
        budget_seconds: Wall-clock budget (default: CLEANUP_BUDGET_SECONDS)
        dry_run: List candidates without deleting anything

    Returns:
        CleanupReport with per-video details
    """
    settings = get_settings()
    now = now or datetime.now(UTC)
    budget = settings.CLEANUP_BUDGET_SECONDS if budget_seconds is None else budget_seconds
    deadline = time.monotonic() + budget

    report = CleanupReport(dry_run=dry_run)
    candidates = [v for v in find_expired_videos(db, now) if is_expired(v, now)]

    logger.info(f"[CLEANUP] Found {len(candidates)} expired videos (dry_run={dry_run})")
    if not candidates:
        return report

    if dry_run:
        for video in candidates:
            report.details.append(
                CleanupDetail(
                    video_id=str(video.id),
                    name=video.name,
                    expires_at=video.expires_at.isoformat() if video.expires_at else None,
                    status="would_delete",
                )
            )
        return report

    if asset_store is None:
        try:
            asset_store = get_asset_store()
        except (LifecycleError, ValueError) as e:
            logger.warning(f"[CLEANUP] Asset store unavailable, deleting rows only: {e}")

    tracker = ProgressTracker(total=len(candidates), stage="cleanup")

    for index, video in enumerate(candidates):
        if time.monotonic() >= deadline:
            report.skipped_for_budget = len(candidates) - index
            logger.warning(
                f"[CLEANUP] Budget of {budget}s spent, leaving {report.skipped_for_budget} videos for next run"
            )
            break

        try:
            detail = _cleanup_one(db, video, asset_store, report)
        except Exception as e:
            db.rollback()
            detail = CleanupDetail(
                video_id=str(video.id),
                name=video.name,
                expires_at=video.expires_at.isoformat() if video.expires_at else None,
                status="error",
                error=str(e),
            )
            logger.error(
                f"[CLEANUP] Unexpected failure on video {video.id}: {e}",
                extra={"video_id": str(video.id)},
                exc_info=True,
            )
        report.details.append(detail)
        if detail.status == "deleted":
            report.deleted += 1
        else:
            report.errors += 1
        tracker.increment(success=detail.status == "deleted")

    tracker.finish()
    logger.info(
        f"[CLEANUP] Complete: {report.deleted} deleted, {report.errors} errors, "
        f"{report.skipped_for_budget} deferred"
    )
    return report
