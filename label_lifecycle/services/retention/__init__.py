# label_lifecycle/services/retention/__init__.py
"""
Retention management for recorded videos.

Labels carry retention_days; a video expires after the shortest retention
among its labels unless it is kept permanently.

Services:
- calculator: expires_at derivation and recompute
- cleanup_service: deletion of expired videos and their assets
"""

from label_lifecycle.services.retention.calculator import (
    compute_expiration,
    is_expired,
    update_video_expiration,
)
from label_lifecycle.services.retention.cleanup_service import (
    DELETION_STEPS,
    CleanupDetail,
    CleanupReport,
    run_cleanup,
)

__all__ = [
    # Calculator
    "compute_expiration",
    "update_video_expiration",
    "is_expired",
    # Cleanup
    "run_cleanup",
    "CleanupReport",
    "CleanupDetail",
    "DELETION_STEPS",
]
