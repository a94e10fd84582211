# label_lifecycle/routers/admin.py
"""
Admin batch endpoints.

POST /v1/admin/classify-all-videos - Classify every video that was never classified
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from label_lifecycle.auth import require_cron_secret
from label_lifecycle.database import get_db
from label_lifecycle.errors import LifecycleError
from label_lifecycle.logging_config import log_job
from label_lifecycle.schemas.jobs import BatchClassifyDetailResponse, BatchClassifyResponse
from label_lifecycle.services.batch_classify import classify_all_videos

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin", tags=["admin"])


@router.post("/classify-all-videos", response_model=BatchClassifyResponse)
def classify_all(
    dry_run: bool = Query(False, alias="dryRun", description="List candidates without any writes"),
    limit: int | None = Query(None, ge=1, le=1000, description="Max videos to process"),
    db: Session = Depends(get_db),
    _: None = Depends(require_cron_secret),
) -> BatchClassifyResponse:
    """
    Classify and auto-assign labels for unclassified videos.

    Requires `Authorization: Bearer <CRON_SECRET>`.
    """
    try:
        with log_job("classify_all_videos"):
            report = classify_all_videos(db, dry_run=dry_run, limit=limit)
    except LifecycleError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    return BatchClassifyResponse(
        dry_run=report.dry_run,
        processed=report.processed,
        classified=report.classified,
        skipped=report.skipped,
        errors=report.errors,
        skipped_for_budget=report.skipped_for_budget,
        details=[
            BatchClassifyDetailResponse(
                video_id=d.video_id,
                name=d.name,
                status=d.status,
                labels=d.labels,
                reason=d.reason,
            )
            for d in report.details
        ],
    )
