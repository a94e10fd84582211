# label_lifecycle/services/label_catalog.py
"""
Label catalog: per-organization label definitions.

Handles:
- Idempotent seeding of the system vocabulary for an organization
- Creation of custom (user) labels with name validation
- Listing active labels in the user-facing order
"""

import logging
import re
import uuid
from datetime import UTC, datetime

from cachetools import TTLCache
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from label_lifecycle.errors import DuplicateError, ValidationError
from label_lifecycle.models import DEFAULT_LABEL_COLOR, Label, LabelCategory, RagStatus
from label_lifecycle.vocabulary import DEFAULT_VOCABULARY, LabelVocabulary

logger = logging.getLogger(__name__)

LABEL_NAME_PATTERN = re.compile(r"[A-Z][A-Z0-9_]*")
LABEL_NAME_MAX_LENGTH = 100
HEX_COLOR_PATTERN = re.compile(r"#[0-9A-Fa-f]{6}")

VALID_CATEGORIES = {c.value for c in LabelCategory}

# Organizations known to be seeded: key = organization_id
_seeded_orgs: TTLCache = TTLCache(maxsize=1000, ttl=600)


def is_valid_label_name(name: str | None) -> bool:
    """Uppercase snake-case machine key: starts with A-Z, then A-Z, 0-9 or _."""
    if not name or len(name) > LABEL_NAME_MAX_LENGTH:
        return False
    return LABEL_NAME_PATTERN.fullmatch(name) is not None


def invalidate_seed_cache() -> None:
    """Forget which organizations were seeded (tests, manual cleanup)."""
    _seeded_orgs.clear()


def _has_system_labels(db: Session, organization_id: uuid.UUID) -> bool:
    existing = (
        db.query(Label.id)
        .filter(
            Label.organization_id == organization_id,
            Label.is_system == True,
            Label.is_active == True,
        )
        .first()
    )
    return existing is not None


def seed_system_labels(
    db: Session,
    organization_id: uuid.UUID,
    vocabulary: LabelVocabulary | None = None,
) -> int:
    """
    Insert the system vocabulary for an organization.

    No-op when any active system label already exists. Each row is an
    INSERT ... ON CONFLICT DO NOTHING on (organization_id, name), so two
    concurrent seeders both succeed and the catalog ends up seeded once.

    Returns:
        Number of labels inserted (0 when already seeded)
    """
    if organization_id in _seeded_orgs:
        return 0

    if _has_system_labels(db, organization_id):
        _seeded_orgs[organization_id] = True
        logger.debug(f"[LABELS] System labels already seeded for org {organization_id}")
        return 0

    vocabulary = vocabulary or DEFAULT_VOCABULARY
    now = datetime.now(UTC)
    inserted = 0

    for spec in vocabulary:
        stmt = (
            pg_insert(Label)
            .values(
                id=uuid.uuid4(),
                organization_id=organization_id,
                name=spec.name,
                display_name=spec.display_name,
                description=spec.description,
                color=spec.color,
                category=spec.category,
                retention_days=spec.retention_days,
                rag_default=spec.rag_default,
                is_system=True,
                is_active=True,
                created_at=now,
                updated_at=now,
            )
            .on_conflict_do_nothing(index_elements=["organization_id", "name"])
        )
        result = db.execute(stmt)
        if result.rowcount:
            inserted += 1

    db.commit()
    _seeded_orgs[organization_id] = True

    logger.info(
        f"[LABELS] Seeded {inserted}/{len(vocabulary)} system labels for org {organization_id}",
        extra={"organization_id": str(organization_id)},
    )
    return inserted


def create_custom_label(
    db: Session,
    organization_id: uuid.UUID,
    name: str,
    display_name: str,
    description: str | None = None,
    color: str | None = None,
    category: str | None = None,
    retention_days: int | None = None,
) -> Label:
    """
    Create a user label for an organization.

    Raises:
        ValidationError: malformed name, empty display name, bad category,
            bad color or non-positive retention
        DuplicateError: (organization_id, name) already taken
    """
    if not is_valid_label_name(name):
        raise ValidationError(
            "Label name must be uppercase letters, digits and underscores, starting with a letter"
        )
    if not display_name or not display_name.strip():
        raise ValidationError("Display name is required")

    category = category or LabelCategory.CONTENT_TYPE.value
    if category not in VALID_CATEGORIES:
        raise ValidationError(f"Unknown label category: {category}")

    color = color or DEFAULT_LABEL_COLOR
    if not HEX_COLOR_PATTERN.fullmatch(color):
        raise ValidationError(f"Color must be a #RRGGBB hex value: {color}")

    if retention_days is not None and retention_days <= 0:
        raise ValidationError("retention_days must be a positive number of days")

    existing = (
        db.query(Label.id)
        .filter(Label.organization_id == organization_id, Label.name == name)
        .first()
    )
    if existing:
        raise DuplicateError(f"A label named {name} already exists")

    label = Label(
        id=uuid.uuid4(),
        organization_id=organization_id,
        name=name,
        display_name=display_name.strip(),
        description=description,
        color=color,
        category=category,
        retention_days=retention_days,
        rag_default=RagStatus.PENDING.value,
        is_system=False,
        is_active=True,
    )
    db.add(label)
    try:
        db.commit()
    except IntegrityError as e:
        # Lost a race against a concurrent insert of the same name
        db.rollback()
        raise DuplicateError(f"A label named {name} already exists") from e

    db.refresh(label)
    logger.info(
        f"[LABELS] Created custom label {name} for org {organization_id}",
        extra={"organization_id": str(organization_id), "label_name": name},
    )
    return label


def list_active_labels(db: Session, organization_id: uuid.UUID) -> list[Label]:
    """Active labels ordered by (category, display_name)."""
    return (
        db.query(Label)
        .filter(Label.organization_id == organization_id, Label.is_active == True)
        .order_by(Label.category, Label.display_name)
        .all()
    )


def get_labels_by_name(db: Session, organization_id: uuid.UUID) -> dict[str, Label]:
    """Active labels of an organization keyed by machine name."""
    labels = (
        db.query(Label)
        .filter(Label.organization_id == organization_id, Label.is_active == True)
        .all()
    )
    return {label.name: label for label in labels}
