# label_lifecycle/schemas/jobs.py
"""
Schemas for scheduled and batch job endpoints.
"""

from pydantic import BaseModel, Field

# -----------------------------------------------------------------------------
# Cleanup
# -----------------------------------------------------------------------------


class CleanupDetailResponse(BaseModel):
    video_id: str
    name: str
    expires_at: str | None = None
    status: str = Field(..., description="deleted|error|would_delete")
    error: str | None = None


class CleanupResponse(BaseModel):
    """Result of a cleanup run."""

    success: bool = True
    deleted: int
    errors: int
    skipped_for_budget: int = 0
    dry_run: bool = False
    details: list[CleanupDetailResponse] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Batch classification
# -----------------------------------------------------------------------------


class BatchClassifyDetailResponse(BaseModel):
    video_id: str
    name: str
    status: str = Field(..., description="classified|skipped|error|would_classify")
    labels: list[str] = Field(default_factory=list)
    reason: str | None = None


class BatchClassifyResponse(BaseModel):
    """Result of a batch classification run."""

    success: bool = True
    dry_run: bool
    processed: int
    classified: int
    skipped: int
    errors: int
    skipped_for_budget: int = 0
    details: list[BatchClassifyDetailResponse] = Field(default_factory=list)
