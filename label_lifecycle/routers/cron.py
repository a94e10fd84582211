# label_lifecycle/routers/cron.py
"""
Scheduled job endpoints, called by the platform scheduler.

GET /v1/cron/cleanup-expired-videos - Delete videos past their expiration
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from label_lifecycle.auth import require_cron_secret
from label_lifecycle.database import get_db
from label_lifecycle.errors import LifecycleError
from label_lifecycle.logging_config import log_job
from label_lifecycle.schemas.jobs import CleanupDetailResponse, CleanupResponse
from label_lifecycle.services.retention import CleanupReport, run_cleanup

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/cron", tags=["cron"])


def cleanup_response(report: CleanupReport) -> CleanupResponse:
    return CleanupResponse(
        deleted=report.deleted,
        errors=report.errors,
        skipped_for_budget=report.skipped_for_budget,
        dry_run=report.dry_run,
        details=[CleanupDetailResponse(**d.to_dict()) for d in report.details],
    )


@router.get("/cleanup-expired-videos", response_model=CleanupResponse)
def cleanup_expired_videos(
    dry_run: bool = Query(False, alias="dryRun", description="List candidates without deleting"),
    db: Session = Depends(get_db),
    _: None = Depends(require_cron_secret),
) -> CleanupResponse:
    """
    Permanently delete every video whose expiration has passed.

    Requires `Authorization: Bearer <CRON_SECRET>`. Per-video failures are
    reported in the response and do not fail the run.
    """
    try:
        with log_job("cleanup_expired_videos"):
            report = run_cleanup(db, dry_run=dry_run)
    except LifecycleError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    return cleanup_response(report)
