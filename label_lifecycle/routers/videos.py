# label_lifecycle/routers/videos.py
"""
Per-video label endpoints.

POST /v1/videos/{video_id}/classify - Classify the transcript and auto-assign labels
GET  /v1/videos/{video_id}/labels   - Labels and retention state of a video
POST /v1/videos/{video_id}/labels   - Replace the label set, toggle keep-permanently, override RAG status
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from label_lifecycle.auth import Actor, get_current_actor
from label_lifecycle.database import get_db
from label_lifecycle.errors import LifecycleError, NotFoundError, ParseError, UpstreamError
from label_lifecycle.schemas.labels import LabelResponse
from label_lifecycle.schemas.videos import (
    AssignedLabelResponse,
    ClassifyResponse,
    LabelSuggestionResponse,
    VideoLabelsResponse,
    VideoLabelsUpdateRequest,
    VideoLabelsUpdateResponse,
)
from label_lifecycle.services.video_classification import classify_video_by_id
from label_lifecycle.services.video_labels import get_video_labels, set_rag_status, update_video_labels

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/videos", tags=["videos"])

# Failed classification -> HTTP status
_CLASSIFY_ERROR_STATUS = {
    "configuration_error": 500,
    "upstream_error": UpstreamError.status_code,
    "parse_error": ParseError.status_code,
}


@router.post("/{video_id}/classify", response_model=ClassifyResponse)
def classify_video(
    video_id: UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> ClassifyResponse:
    """
    Classify a video from its transcript and auto-assign confident labels.

    Requires a completed transcription. Only the owner (or an admin) may
    classify.
    """
    try:
        outcome = classify_video_by_id(
            db,
            video_id,
            actor_id=actor.user_id,
            organization_id=actor.organization_id,
        )
    except LifecycleError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    classification = outcome.classification
    if not classification.success:
        raise HTTPException(
            status_code=_CLASSIFY_ERROR_STATUS.get(classification.error_type, 500),
            detail={
                "error": "Classification failed",
                "error_type": classification.error_type,
                "details": classification.error,
            },
        )

    assignment = outcome.assignment
    return ClassifyResponse(
        success=True,
        labels=[LabelSuggestionResponse(**s.to_dict()) for s in classification.labels],
        rag_eligibility=classification.rag_eligibility,
        reasoning=classification.reasoning,
        assigned=assignment.assigned if assignment else [],
        skipped=assignment.skipped if assignment else [],
        expires_at=assignment.expires_at if assignment else None,
    )


@router.get("/{video_id}/labels", response_model=VideoLabelsResponse)
def read_video_labels(
    video_id: UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> VideoLabelsResponse:
    """Labels on a video with provenance, plus its retention state."""
    try:
        view = get_video_labels(db, video_id)
        if view.video.organization_id != actor.organization_id:
            raise NotFoundError(f"Video {video_id} not found")
    except LifecycleError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    video = view.video
    return VideoLabelsResponse(
        video_id=video.id,
        keep_permanently=bool(video.keep_permanently),
        expires_at=video.expires_at,
        rag_status=video.rag_status,
        ai_suggested_labels=video.ai_suggested_labels,
        labels=[
            AssignedLabelResponse(
                label=LabelResponse.model_validate(item.label),
                assigned_by_id=item.assigned_by_id,
                assigned_at=item.assigned_at,
                is_ai_suggested=item.is_ai_suggested,
                ai_confidence=item.ai_confidence,
            )
            for item in view.labels
        ],
    )


@router.post("/{video_id}/labels", response_model=VideoLabelsUpdateResponse)
def write_video_labels(
    video_id: UUID,
    request: VideoLabelsUpdateRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> VideoLabelsUpdateResponse:
    """
    Replace the label set of a video.

    Expiration is recomputed from the new labels in the same transaction.
    A rag_status in the request is applied afterwards as a manual override.
    """
    rag_status = None
    try:
        result = update_video_labels(
            db,
            video_id,
            label_ids=request.label_ids,
            actor_id=actor.user_id,
            keep_permanently=request.keep_permanently,
            organization_id=actor.organization_id,
        )
        if request.rag_status is not None:
            video = set_rag_status(
                db,
                video_id,
                request.rag_status,
                actor_id=actor.user_id,
                organization_id=actor.organization_id,
            )
            rag_status = video.rag_status
    except LifecycleError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    return VideoLabelsUpdateResponse(
        added=result.added,
        removed=result.removed,
        keep_permanently=result.keep_permanently,
        expires_at=result.expires_at,
        rag_status=rag_status,
    )
