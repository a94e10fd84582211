# label_lifecycle/schemas/labels.py
"""
Schemas for label catalog endpoints.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class LabelResponse(BaseModel):
    """A label definition."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    display_name: str
    description: str | None = None
    color: str
    icon: str | None = None
    category: str
    retention_days: int | None = None
    rag_default: str
    is_system: bool
    is_active: bool
    created_at: datetime | None = None


class LabelListResponse(BaseModel):
    """Active labels of the caller's organization."""

    labels: list[LabelResponse]
    total: int


class LabelCreateRequest(BaseModel):
    """Request to create a custom label."""

    name: str = Field(..., min_length=1, max_length=100, description="UPPER_SNAKE_CASE machine key")
    display_name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    color: str | None = Field(None, description="#RRGGBB (default #6B7280)")
    category: str | None = Field(None, description="content_type (default) or department")
    retention_days: int | None = Field(None, ge=1, description="Days before auto-deletion (null = keep)")
