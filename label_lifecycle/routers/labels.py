# label_lifecycle/routers/labels.py
"""
Label catalog endpoints.

GET  /v1/labels - Active labels of the caller's organization (seeds system labels)
POST /v1/labels - Create a custom label; promotion is evaluated in the background
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy.orm import Session

from label_lifecycle.auth import Actor, get_current_actor
from label_lifecycle.database import get_db
from label_lifecycle.errors import LifecycleError
from label_lifecycle.schemas.labels import LabelCreateRequest, LabelListResponse, LabelResponse
from label_lifecycle.services.label_catalog import (
    create_custom_label,
    list_active_labels,
    seed_system_labels,
)
from label_lifecycle.services.promotion import run_promotion_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/labels", tags=["labels"])


@router.get("", response_model=LabelListResponse)
def get_labels(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> LabelListResponse:
    """
    List active labels ordered by category, then display name.

    System labels are seeded on first access for the organization.
    """
    seed_system_labels(db, actor.organization_id)
    labels = list_active_labels(db, actor.organization_id)
    return LabelListResponse(
        labels=[LabelResponse.model_validate(label) for label in labels],
        total=len(labels),
    )


@router.post("", response_model=LabelResponse, status_code=201)
def create_label(
    request: LabelCreateRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> LabelResponse:
    """
    Create a custom label for the caller's organization.

    The name must be UPPER_SNAKE_CASE. After the response is sent the label
    is evaluated for promotion into the shared system vocabulary.
    """
    try:
        label = create_custom_label(
            db,
            actor.organization_id,
            name=request.name,
            display_name=request.display_name,
            description=request.description,
            color=request.color,
            category=request.category,
            retention_days=request.retention_days,
        )
    except LifecycleError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    background_tasks.add_task(
        run_promotion_pipeline,
        label.name,
        label.display_name,
        label.description,
        label.category,
        label.color,
        label.retention_days,
    )

    return LabelResponse.model_validate(label)
