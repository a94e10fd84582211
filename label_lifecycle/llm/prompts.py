# label_lifecycle/llm/prompts.py
"""
Prompts for video classification and label promotion evaluation.

Both prompts enumerate the closed system vocabulary, so they are built from
a LabelVocabulary rather than kept as literals.
"""

from __future__ import annotations

from typing import Optional

from label_lifecycle.vocabulary import LabelVocabulary


CLASSIFICATION_SYSTEM_TEMPLATE = """TASK: Classify a video recording based on its transcription and AI summary.

INPUT FORMAT:
- VIDEO_TITLE: Title of the video
- VIDEO_DURATION: Duration in seconds
- TRANSCRIPTION: Full or partial transcription text
- AI_SUMMARY: AI-generated summary (if available)
- SHARED_IN_SPACES: List of folders/spaces where the video is shared

OUTPUT FORMAT (strict JSON):
{{
  "content_type": {{
    "primary": "LABEL_NAME",
    "confidence": 0.0-1.0,
    "secondary": "LABEL_NAME" | null
  }},
  "department": {{
    "label": "LABEL_NAME" | null,
    "confidence": 0.0-1.0
  }},
  "rag_eligibility": "eligible" | "excluded" | "pending",
  "reasoning": "1-2 sentences explaining classification"
}}

CONTENT TYPE LABELS:
{content_type_lines}

DEPARTMENT LABELS:
{department_names}

RAG ELIGIBILITY RULES:
- "eligible": Durable knowledge content (tutorials, onboarding, demos, processes)
- "excluded": Ephemeral content (quick answers, troubleshooting for specific person)
- "pending": Uncertain - needs human review (meeting recordings, client calls)

CLASSIFICATION SIGNALS:
- Duration < 2 min + informal tone -> likely QUICK_ANSWER
- Mentions "let me show you how" + step-by-step -> TUTORIAL
- Multiple speakers + agenda mentions -> MEETING_RECORDING
- Mentions client name + sales context -> CLIENT_CALL
- Mentions "new joiners" or "welcome" -> ONBOARDING
- Discusses specific bug/error + one person -> TROUBLESHOOTING
- Official product walkthrough -> DEMO

IMPORTANT:
- Return ONLY valid JSON, no markdown or explanation outside JSON
- confidence must be between 0.0 and 1.0
- If uncertain about department, set department.label to null
- Default to "pending" for rag_eligibility if unsure"""


EVALUATION_SYSTEM_PROMPT = "You are a label taxonomy expert. Output valid JSON only, no markdown."

EVALUATION_USER_TEMPLATE = """TASK: Evaluate if a user-created video label should be added to the system's predefined label list.

EXISTING_SYSTEM_LABELS:
Content Types: {content_type_names}
Departments: {department_names}

EVALUATION_CRITERIA:
1. RELEVANCE: Is this a meaningful category for classifying corporate video recordings?
2. UNIQUENESS: Is it semantically distinct from existing labels? (not a synonym, subset, or near-duplicate)
3. GENERALITY: Would this category apply across different organizations? (not company-specific)
4. CLARITY: Is the concept clear and unambiguous?

INPUT:
- LABEL_NAME: {label_name}
- LABEL_DISPLAY_NAME: {label_display_name}
- LABEL_DESCRIPTION: {label_description}
- LABEL_CATEGORY: {label_category}

OUTPUT_FORMAT (JSON only, no markdown):
{{
  "should_promote": boolean,
  "reason": "brief explanation (1 sentence)",
  "english_name": "UPPERCASE_SNAKE_CASE or null if rejected",
  "english_display_name": "Title Case or null if rejected",
  "english_description": "Brief description in English or null if rejected",
  "duplicate_of": "existing label name if duplicate/near-duplicate, null otherwise",
  "suggested_category": "content_type or department"
}}

RULES:
- Return should_promote=false if label is a synonym of existing (e.g., "Formation" = TUTORIAL/ONBOARDING)
- Return should_promote=false if label is too specific (e.g., "JIRA_TUTORIAL" -> use TUTORIAL)
- Return should_promote=false if label is company-specific (e.g., "ACME_ONBOARDING")
- english_name must be UPPERCASE with underscores, max 30 chars
- Translate non-English labels to English
- Be strict: only promote truly novel, useful categories"""


def _content_type_line(spec) -> str:
    line = f"- {spec.name}: {spec.prompt_hint or spec.description or spec.display_name}"
    if spec.retention_days is not None:
        line += f" (EPHEMERAL: {spec.retention_days} days)"
    return line


def build_classification_system_prompt(vocabulary: LabelVocabulary) -> str:
    """System prompt listing the closed vocabulary and the strict output shape."""
    return CLASSIFICATION_SYSTEM_TEMPLATE.format(
        content_type_lines="\n".join(_content_type_line(s) for s in vocabulary.content_types),
        department_names=", ".join(vocabulary.department_names),
    )


def build_classification_user_prompt(
    transcript: str,
    title: Optional[str] = None,
    duration_seconds: Optional[float] = None,
    ai_summary: Optional[str] = None,
    shared_space_names: Optional[list[str]] = None,
    max_chars: int = 4000,
) -> str:
    """User prompt for one video. Transcript is cut to max_chars."""
    parts = [
        f"VIDEO_TITLE: {title or 'Untitled'}",
        f"VIDEO_DURATION: {int(duration_seconds or 0)} seconds",
        "TRANSCRIPTION:",
        transcript[:max_chars],
    ]
    if ai_summary:
        parts.append(f"\nAI_SUMMARY:\n{ai_summary}")
    if shared_space_names:
        parts.append(f"\nSHARED_IN_SPACES: {', '.join(shared_space_names)}")
    return "\n".join(parts)


def build_evaluation_prompt(
    vocabulary: LabelVocabulary,
    name: str,
    display_name: str,
    description: Optional[str],
    category: str,
) -> str:
    """User prompt asking whether a custom label deserves system status."""
    return EVALUATION_USER_TEMPLATE.format(
        content_type_names=", ".join(vocabulary.content_type_names),
        department_names=", ".join(vocabulary.department_names),
        label_name=name,
        label_display_name=display_name,
        label_description=description or "No description provided",
        label_category=category,
    )
