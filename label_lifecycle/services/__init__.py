# label_lifecycle/services/__init__.py
"""
Business logic services.
"""

from label_lifecycle.services.auto_assigner import AutoAssignResult, auto_assign
from label_lifecycle.services.label_classifier import (
    ClassificationContext,
    ClassificationResult,
    LabelClassifier,
    LabelSuggestion,
)

__all__ = [
    "LabelClassifier",
    "ClassificationContext",
    "ClassificationResult",
    "LabelSuggestion",
    "auto_assign",
    "AutoAssignResult",
]
