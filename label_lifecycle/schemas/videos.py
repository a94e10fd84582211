# label_lifecycle/schemas/videos.py
"""
Schemas for per-video label and classification endpoints.
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from label_lifecycle.schemas.labels import LabelResponse

# -----------------------------------------------------------------------------
# Labels on a video
# -----------------------------------------------------------------------------


class AssignedLabelResponse(BaseModel):
    """A label on a video, with who or what assigned it."""

    label: LabelResponse
    assigned_by_id: UUID
    assigned_at: datetime
    is_ai_suggested: bool
    ai_confidence: float | None = None


class VideoLabelsResponse(BaseModel):
    video_id: UUID
    keep_permanently: bool
    expires_at: datetime | None = None
    rag_status: str
    ai_suggested_labels: list[dict] | None = None
    labels: list[AssignedLabelResponse] = Field(default_factory=list)


class VideoLabelsUpdateRequest(BaseModel):
    """Replace the label set of a video."""

    label_ids: list[UUID] = Field(default_factory=list, description="Full desired label set")
    keep_permanently: bool | None = Field(None, description="Toggle the keep-forever override")
    rag_status: Literal["eligible", "excluded", "pending"] | None = Field(
        None, description="Manual knowledge-base eligibility override"
    )


class VideoLabelsUpdateResponse(BaseModel):
    success: bool = True
    added: int
    removed: int
    keep_permanently: bool
    expires_at: datetime | None = None
    rag_status: str | None = None


# -----------------------------------------------------------------------------
# Classification
# -----------------------------------------------------------------------------


class LabelSuggestionResponse(BaseModel):
    label_name: str
    confidence: float


class ClassifyResponse(BaseModel):
    """Classification plus auto-assignment outcome."""

    success: bool
    labels: list[LabelSuggestionResponse] = Field(default_factory=list)
    rag_eligibility: str
    reasoning: str
    error: str | None = None
    error_type: str | None = None
    assigned: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    expires_at: datetime | None = None
