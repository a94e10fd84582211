# label_lifecycle/vocabulary.py
"""
System label vocabulary.

The fixed set of labels every organization is seeded with. Content-type
labels carry the retention policy (retention_days) and a default
knowledge-base hint (rag_default); department labels never expire.

The vocabulary is passed explicitly to the catalog, the classifier and the
prompt builders so deployments and tests can swap it out.
"""

from dataclasses import dataclass
from typing import Iterator

from label_lifecycle.models import DEFAULT_LABEL_COLOR, LabelCategory, RagStatus


@dataclass(frozen=True)
class LabelSpec:
    """Definition of one system label."""
    name: str
    display_name: str
    category: str
    description: str | None = None
    color: str = DEFAULT_LABEL_COLOR
    retention_days: int | None = None
    rag_default: str = RagStatus.PENDING.value
    prompt_hint: str | None = None  # one-line gloss used in the classification prompt


@dataclass(frozen=True)
class LabelVocabulary:
    """Closed set of system labels, split by category."""
    content_types: tuple[LabelSpec, ...]
    departments: tuple[LabelSpec, ...]

    def __iter__(self) -> Iterator[LabelSpec]:
        yield from self.content_types
        yield from self.departments

    def __len__(self) -> int:
        return len(self.content_types) + len(self.departments)

    @property
    def content_type_names(self) -> list[str]:
        return [spec.name for spec in self.content_types]

    @property
    def department_names(self) -> list[str]:
        return [spec.name for spec in self.departments]


def _content_type(
    name: str,
    display_name: str,
    description: str,
    color: str,
    retention_days: int | None,
    rag_default: RagStatus,
    prompt_hint: str,
) -> LabelSpec:
    return LabelSpec(
        name=name,
        display_name=display_name,
        category=LabelCategory.CONTENT_TYPE.value,
        description=description,
        color=color,
        retention_days=retention_days,
        rag_default=rag_default.value,
        prompt_hint=prompt_hint,
    )


def _department(name: str, display_name: str, color: str) -> LabelSpec:
    return LabelSpec(
        name=name,
        display_name=display_name,
        category=LabelCategory.DEPARTMENT.value,
        color=color,
    )


DEFAULT_VOCABULARY = LabelVocabulary(
    content_types=(
        _content_type(
            "TUTORIAL", "Tutorial",
            "How to do something in a tool, practical guide",
            "#10B981", None, RagStatus.ELIGIBLE,
            "How-to guides, step-by-step instructions, tool explanations",
        ),
        _content_type(
            "ONBOARDING", "Onboarding",
            "New employee training, team introduction",
            "#10B981", None, RagStatus.ELIGIBLE,
            "New employee training, team introductions, company orientation",
        ),
        _content_type(
            "PROCESS", "Process",
            "Explanation of an internal workflow or procedure",
            "#10B981", None, RagStatus.ELIGIBLE,
            "Internal workflows, procedures, standard operating procedures",
        ),
        _content_type(
            "DEMO", "Demo",
            "Official product or feature demonstration",
            "#3B82F6", None, RagStatus.ELIGIBLE,
            "Product demonstrations, feature showcases, official demos",
        ),
        _content_type(
            "TROUBLESHOOTING", "Troubleshooting",
            "Problem solving, debugging",
            "#F59E0B", 14, RagStatus.PENDING,
            "Problem solving, debugging, technical support",
        ),
        _content_type(
            "QUICK_ANSWER", "Quick Answer",
            "Quick reply to a colleague, one-off explanation",
            "#EF4444", 14, RagStatus.EXCLUDED,
            "Quick replies to colleagues, one-off explanations",
        ),
        _content_type(
            "MEETING_RECORDING", "Meeting Recording",
            "Meeting recording, team call",
            "#8B5CF6", 30, RagStatus.PENDING,
            "Team meetings, standups, planning sessions",
        ),
        _content_type(
            "CLIENT_CALL", "Client Call",
            "Customer call recording, client demo",
            "#EC4899", 30, RagStatus.PENDING,
            "Customer calls, client demos, sales calls",
        ),
        _content_type(
            "ANNOUNCEMENT", "Announcement",
            "Internal communication, announcement",
            "#6366F1", 90, RagStatus.PENDING,
            "Internal communications, company updates",
        ),
    ),
    departments=(
        _department("SALES", "Sales", "#3B82F6"),
        _department("TECH", "Tech", "#10B981"),
        _department("PRODUCT", "Product", "#8B5CF6"),
        _department("COMPLIANCE", "Compliance", "#F59E0B"),
        _department("FINANCE", "Finance", "#6366F1"),
        _department("HR", "HR", "#EC4899"),
        _department("SUPPORT", "Support", "#14B8A6"),
        _department("MARKETING", "Marketing", "#F97316"),
    ),
)
