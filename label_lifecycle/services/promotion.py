# label_lifecycle/services/promotion.py
"""
Promotion of user-created labels into the shared system vocabulary.

Flow (runs after a custom label is created, outside the request):
1. evaluate_label_for_promotion asks the oracle whether the label is a
   novel, general category and for its normalized English form
2. promote_label_to_system adds the normalized label as a system label to
   every organization that has system labels, unless that name is already
   a system label anywhere

Evaluation never raises. Promotion skips organizations that fail and keeps
going.
"""

import json
import logging
import re
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Optional

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from label_lifecycle.errors import ConfigurationError, LifecycleError
from label_lifecycle.llm import OracleRequest, TextOracle, get_oracle
from label_lifecycle.llm.prompts import EVALUATION_SYSTEM_PROMPT, build_evaluation_prompt
from label_lifecycle.models import DEFAULT_LABEL_COLOR, Label, LabelCategory, RagStatus
from label_lifecycle.services.label_catalog import is_valid_label_name
from label_lifecycle.vocabulary import DEFAULT_VOCABULARY, LabelVocabulary

logger = logging.getLogger(__name__)

PROMOTED_NAME_MAX_LENGTH = 30

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


@dataclass
class PromotionEvaluation:
    """Oracle verdict on a custom label."""
    should_promote: bool
    reason: str
    english_name: Optional[str] = None
    english_display_name: Optional[str] = None
    english_description: Optional[str] = None
    duplicate_of: Optional[str] = None
    suggested_category: str = LabelCategory.CONTENT_TYPE.value

    @classmethod
    def rejected(cls, reason: str, category: str) -> "PromotionEvaluation":
        return cls(should_promote=False, reason=reason, suggested_category=category)


@dataclass
class PromotionResult:
    """Outcome of a promotion attempt."""
    promoted: bool
    reason: str
    organizations: int = 0
    failed_organizations: list[str] = field(default_factory=list)


def _optional_str(value) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _parse_evaluation(content: str, category: str) -> PromotionEvaluation:
    text = content.strip()
    fence = _FENCE_RE.search(text)
    if fence:
        text = fence.group(1).strip()

    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("evaluation response is not a JSON object")

    english_name = _optional_str(data.get("english_name"))
    if english_name:
        english_name = english_name.upper()

    suggested = data.get("suggested_category")
    if suggested not in {c.value for c in LabelCategory}:
        suggested = category

    evaluation = PromotionEvaluation(
        should_promote=data.get("should_promote") is True,
        reason=_optional_str(data.get("reason")) or "No reason provided",
        english_name=english_name,
        english_display_name=_optional_str(data.get("english_display_name")),
        english_description=_optional_str(data.get("english_description")),
        duplicate_of=_optional_str(data.get("duplicate_of")),
        suggested_category=suggested,
    )

    if evaluation.should_promote and not (
        english_name
        and is_valid_label_name(english_name)
        and len(english_name) <= PROMOTED_NAME_MAX_LENGTH
    ):
        evaluation.should_promote = False
        evaluation.reason = f"Invalid normalized name: {english_name!r}"

    return evaluation


def evaluate_label_for_promotion(
    name: str,
    display_name: str,
    description: Optional[str],
    category: str,
    oracle: Optional[TextOracle] = None,
    vocabulary: Optional[LabelVocabulary] = None,
) -> PromotionEvaluation:
    """
    Ask the oracle whether a custom label should become a system label.

    Never raises: configuration problems, oracle failures and bad responses
    all return should_promote=False with the cause as reason.
    """
    vocabulary = vocabulary or DEFAULT_VOCABULARY
    try:
        oracle = oracle or get_oracle()
    except ConfigurationError as e:
        logger.warning(f"[PROMOTE] Oracle not configured: {e}")
        return PromotionEvaluation.rejected("Oracle not configured", category)

    try:
        response = oracle.complete(
            OracleRequest(
                system_instruction=EVALUATION_SYSTEM_PROMPT,
                user_prompt=build_evaluation_prompt(vocabulary, name, display_name, description, category),
                temperature=0.1,
                max_tokens=500,
                call_type="evaluate_label",
            )
        )
    except LifecycleError as e:
        logger.error(f"[PROMOTE] Oracle call failed for {name}: {e}")
        return PromotionEvaluation.rejected("API error", category)

    if not response.content.strip():
        return PromotionEvaluation.rejected("Empty response", category)

    try:
        evaluation = _parse_evaluation(response.content, category)
    except (json.JSONDecodeError, ValueError) as e:
        logger.warning(f"[PROMOTE] Unparsable evaluation for {name}: {e}")
        return PromotionEvaluation.rejected("Evaluation failed", category)

    logger.info(
        f"[PROMOTE] Evaluated {display_name!r}: promote={evaluation.should_promote} "
        f"reason={evaluation.reason!r} duplicate_of={evaluation.duplicate_of}",
        extra={"label_name": name},
    )
    return evaluation


def _organizations_with_system_labels(db: Session) -> list[uuid.UUID]:
    rows = db.query(Label.organization_id).filter(Label.is_system == True).distinct().all()
    return [row.organization_id for row in rows]


def promote_label_to_system(
    db: Session,
    evaluation: PromotionEvaluation,
    original_color: Optional[str] = None,
    retention_days: Optional[int] = None,
) -> PromotionResult:
    """
    Add an approved label to every organization's system vocabulary.

    The name must not already be a system label in any organization. Each
    organization gets an idempotent insert inside its own savepoint.
    """
    if not evaluation.should_promote or not evaluation.english_name:
        return PromotionResult(promoted=False, reason=evaluation.reason)

    name = evaluation.english_name
    existing = (
        db.query(Label.id)
        .filter(Label.name == name, Label.is_system == True)
        .first()
    )
    if existing:
        return PromotionResult(
            promoted=False,
            reason=f"Label {name!r} already exists as system label",
        )

    display_name = evaluation.english_display_name or name.replace("_", " ").title()
    now = datetime.now(UTC)
    result = PromotionResult(promoted=True, reason="")

    for organization_id in _organizations_with_system_labels(db):
        try:
            with db.begin_nested():
                stmt = (
                    pg_insert(Label)
                    .values(
                        id=uuid.uuid4(),
                        organization_id=organization_id,
                        name=name,
                        display_name=display_name,
                        description=evaluation.english_description,
                        color=original_color or DEFAULT_LABEL_COLOR,
                        category=evaluation.suggested_category,
                        retention_days=retention_days,
                        rag_default=RagStatus.PENDING.value,
                        is_system=True,
                        is_active=True,
                        created_at=now,
                        updated_at=now,
                    )
                    .on_conflict_do_nothing(index_elements=["organization_id", "name"])
                )
                inserted = db.execute(stmt).rowcount
            # 0 when the organization already had a label of that name
            result.organizations += inserted
        except SQLAlchemyError as e:
            result.failed_organizations.append(str(organization_id))
            logger.error(
                f"[PROMOTE] Failed to add {name} to org {organization_id}: {e}",
                extra={"organization_id": str(organization_id), "label_name": name},
            )

    db.commit()
    result.reason = f"Label {display_name!r} promoted to system labels"
    logger.info(
        f"[PROMOTE] Promoted {name} to {result.organizations} organizations "
        f"({len(result.failed_organizations)} failed)",
        extra={"label_name": name},
    )
    return result


def run_promotion_pipeline(
    name: str,
    display_name: str,
    description: Optional[str],
    category: str,
    color: Optional[str],
    retention_days: Optional[int],
) -> None:
    """
    Evaluate and promote a freshly created custom label.

    Runs as a background task after the response is sent, so it opens its
    own session. Errors end up in the log only.
    """
    from label_lifecycle.database import session_scope

    try:
        evaluation = evaluate_label_for_promotion(name, display_name, description, category)
        if not evaluation.should_promote:
            logger.info(f"[PROMOTE] {name} not promoted: {evaluation.reason}", extra={"label_name": name})
            return

        with session_scope() as db:
            promote_label_to_system(db, evaluation, color, retention_days)
    except Exception as e:
        logger.error(f"[PROMOTE] Promotion pipeline failed for {name}: {e}", exc_info=True)
