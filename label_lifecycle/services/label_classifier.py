# label_lifecycle/services/label_classifier.py
"""
Oracle-based video classifier.

Turns a transcript (plus title, duration, summary and shared-space names)
into an ordered list of label suggestions and a knowledge-base eligibility
verdict, and records both on the video.

Suggestion order:
1. primary content type (oracle confidence, 0.8 when missing)
2. secondary content type (primary confidence x SECONDARY_CONFIDENCE_FACTOR)
3. department (oracle confidence, 0.7 when missing)

Failures never propagate: missing configuration, transport errors and
unparsable responses all become a result with success=False and
rag_eligibility "pending", and nothing is written.

Precondition: the video's transcription_status is "complete". Entry points
check it with can_classify(); the classifier itself does not.
"""

import json
import logging
import re
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from label_lifecycle.config import get_settings
from label_lifecycle.errors import ConfigurationError, NotFoundError, ParseError, UpstreamError
from label_lifecycle.llm import OracleRequest, TextOracle, get_oracle
from label_lifecycle.llm.prompts import (
    build_classification_system_prompt,
    build_classification_user_prompt,
)
from label_lifecycle.models import RagStatus, TranscriptionStatus, Video
from label_lifecycle.vocabulary import DEFAULT_VOCABULARY, LabelVocabulary

logger = logging.getLogger(__name__)

DEFAULT_PRIMARY_CONFIDENCE = 0.8
DEFAULT_DEPARTMENT_CONFIDENCE = 0.7

VALID_RAG_VALUES = {r.value for r in RagStatus}

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class LabelSuggestion:
    """A label the oracle proposes, with its confidence."""
    label_name: str
    confidence: float  # 0.0-1.0

    def to_dict(self) -> dict:
        return {"label_name": self.label_name, "confidence": self.confidence}


@dataclass
class ClassificationContext:
    """Video metadata sent alongside the transcript."""
    title: Optional[str] = None
    duration_seconds: Optional[float] = None
    ai_summary: Optional[str] = None
    shared_space_names: list[str] = field(default_factory=list)


@dataclass
class ClassificationResult:
    """Result of classifying one video."""
    success: bool
    labels: list[LabelSuggestion] = field(default_factory=list)
    rag_eligibility: str = RagStatus.PENDING.value
    reasoning: str = ""
    error: Optional[str] = None
    error_type: Optional[str] = None  # "configuration_error", "upstream_error", "parse_error"

    @classmethod
    def failure(cls, reasoning: str, error: str, error_type: str) -> "ClassificationResult":
        return cls(
            success=False,
            rag_eligibility=RagStatus.PENDING.value,
            reasoning=reasoning,
            error=error,
            error_type=error_type,
        )


def can_classify(video: Video) -> bool:
    """Only videos with a finished transcript are classified."""
    return video.transcription_status == TranscriptionStatus.COMPLETE.value


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------

def _clamp(value, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return max(0.0, min(1.0, float(value)))


def _label_name(value) -> Optional[str]:
    if not isinstance(value, str):
        return None
    name = value.strip().upper()
    return name or None


def parse_classification_response(content: str, secondary_factor: float = 0.7) -> ClassificationResult:
    """
    Parse the oracle's JSON into a ClassificationResult.

    Tolerates markdown code fences around the JSON.

    Raises:
        ParseError: content is not a JSON object
    """
    text = content.strip()
    fence = _FENCE_RE.search(text)
    if fence:
        text = fence.group(1).strip()

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Classification response is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ParseError("Classification response is not a JSON object")

    labels: list[LabelSuggestion] = []

    content_type = data.get("content_type")
    if isinstance(content_type, dict):
        primary_conf = content_type.get("confidence")
        # A zero/missing confidence falls back to the default
        primary_conf = _clamp(primary_conf, DEFAULT_PRIMARY_CONFIDENCE) if primary_conf else DEFAULT_PRIMARY_CONFIDENCE

        primary = _label_name(content_type.get("primary"))
        if primary:
            labels.append(LabelSuggestion(primary, primary_conf))

        secondary = _label_name(content_type.get("secondary"))
        if secondary and secondary != primary:
            labels.append(LabelSuggestion(secondary, _clamp(primary_conf * secondary_factor, 0.0)))

    department = data.get("department")
    if isinstance(department, dict):
        dept_name = _label_name(department.get("label"))
        if dept_name:
            dept_conf = department.get("confidence")
            dept_conf = _clamp(dept_conf, DEFAULT_DEPARTMENT_CONFIDENCE) if dept_conf else DEFAULT_DEPARTMENT_CONFIDENCE
            labels.append(LabelSuggestion(dept_name, dept_conf))

    rag = data.get("rag_eligibility")
    if not isinstance(rag, str) or rag.strip().lower() not in VALID_RAG_VALUES:
        if rag is not None:
            logger.warning(f"[CLASSIFY] Unknown rag_eligibility from oracle: {rag!r}, using pending")
        rag = RagStatus.PENDING.value
    else:
        rag = rag.strip().lower()

    reasoning = data.get("reasoning")
    if not isinstance(reasoning, str) or not reasoning.strip():
        reasoning = "Classification complete"

    return ClassificationResult(
        success=True,
        labels=labels,
        rag_eligibility=rag,
        reasoning=reasoning.strip(),
    )


# ---------------------------------------------------------------------------
# Main classifier
# ---------------------------------------------------------------------------

class LabelClassifier:
    """Classifies videos into system labels through a text oracle."""

    def __init__(
        self,
        oracle: Optional[TextOracle] = None,
        vocabulary: Optional[LabelVocabulary] = None,
    ):
        self._oracle = oracle
        self._vocabulary = vocabulary or DEFAULT_VOCABULARY
        self._system_prompt = build_classification_system_prompt(self._vocabulary)

    def _get_oracle(self) -> TextOracle:
        if self._oracle is None:
            self._oracle = get_oracle()
        return self._oracle

    def classify(
        self,
        db: Session,
        video_id: uuid.UUID,
        transcript: str,
        context: Optional[ClassificationContext] = None,
    ) -> ClassificationResult:
        """
        Classify a video and record the suggestions on it.

        Raises:
            NotFoundError: video does not exist
        """
        video = db.query(Video).filter(Video.id == video_id).first()
        if not video:
            raise NotFoundError(f"Video {video_id} not found")

        settings = get_settings()
        context = context or ClassificationContext()

        try:
            oracle = self._get_oracle()
            response = oracle.complete(
                OracleRequest(
                    system_instruction=self._system_prompt,
                    user_prompt=build_classification_user_prompt(
                        transcript,
                        title=context.title,
                        duration_seconds=context.duration_seconds,
                        ai_summary=context.ai_summary,
                        shared_space_names=context.shared_space_names,
                        max_chars=settings.CLASSIFICATION_TRANSCRIPT_CHARS,
                    ),
                    temperature=0.1,
                    max_tokens=500,
                    call_type="classify_video",
                )
            )
            result = parse_classification_response(
                response.content,
                secondary_factor=settings.SECONDARY_CONFIDENCE_FACTOR,
            )
        except ConfigurationError as e:
            logger.error(f"[CLASSIFY] Oracle not configured: {e}", extra={"video_id": str(video_id)})
            return ClassificationResult.failure("Classification oracle not configured", str(e), "configuration_error")
        except UpstreamError as e:
            logger.warning(f"[CLASSIFY] Oracle call failed for video {video_id}: {e}", extra={"video_id": str(video_id)})
            return ClassificationResult.failure("Classification failed", str(e), "upstream_error")
        except ParseError as e:
            logger.warning(f"[CLASSIFY] Unparsable response for video {video_id}: {e}", extra={"video_id": str(video_id)})
            return ClassificationResult.failure(
                "Failed to parse classification response", str(e), "parse_error"
            )

        now = datetime.now(UTC)
        try:
            video.ai_suggested_labels = [s.to_dict() for s in result.labels]
            video.ai_classified_at = now
            video.rag_status = result.rag_eligibility
            video.rag_status_updated_at = now
            db.add(video)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"[CLASSIFY] Failed to store classification for video {video_id}: {e}")
            return ClassificationResult.failure("Failed to store classification", str(e), "upstream_error")

        logger.info(
            f"[CLASSIFY] Video {video_id}: {[s.label_name for s in result.labels]} rag={result.rag_eligibility}",
            extra={"video_id": str(video_id)},
        )
        return result
