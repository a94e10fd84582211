# label_lifecycle/schemas/__init__.py
"""
Pydantic schemas for API request/response validation.
"""

from label_lifecycle.schemas.jobs import (
    BatchClassifyDetailResponse,
    BatchClassifyResponse,
    CleanupDetailResponse,
    CleanupResponse,
)
from label_lifecycle.schemas.labels import (
    LabelCreateRequest,
    LabelListResponse,
    LabelResponse,
)
from label_lifecycle.schemas.videos import (
    AssignedLabelResponse,
    ClassifyResponse,
    LabelSuggestionResponse,
    VideoLabelsResponse,
    VideoLabelsUpdateRequest,
    VideoLabelsUpdateResponse,
)

__all__ = [
    # Jobs
    "CleanupResponse",
    "CleanupDetailResponse",
    "BatchClassifyResponse",
    "BatchClassifyDetailResponse",
    # Labels
    "LabelResponse",
    "LabelListResponse",
    "LabelCreateRequest",
    # Videos
    "AssignedLabelResponse",
    "VideoLabelsResponse",
    "VideoLabelsUpdateRequest",
    "VideoLabelsUpdateResponse",
    "LabelSuggestionResponse",
    "ClassifyResponse",
]
