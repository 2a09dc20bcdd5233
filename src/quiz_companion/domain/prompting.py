"""
Prompt construction and model-output parsing (Strategy pattern).

The explanation service holds a `PromptStrategy` and calls `build()`; a
different tone or language only needs a new strategy, not a service change.

Everything here is pure: no I/O, no clock, no randomness.
"""

import json
import re
from typing import Protocol

from quiz_companion.domain.models import Question, normalize_explanations

_FENCE_RE = re.compile(r"```(?:json)?")


class PromptStrategy(Protocol):
    """Anything with `build(exam_title, questions) -> str`."""

    def build(self, exam_title: str | None, questions: list[Question]) -> str: ...


class TutorPromptStrategy:
    """Asks for a short "why is this right" explanation per question.

    The model receives the TEXT of the correct option rather than its index,
    so a reordered or off-by-one option list cannot confuse it.
    """

    INSTRUCTIONS = (
        "You are an expert tutor. I will provide a list of quiz questions.\n"
        "For EACH question, provide a concise but clear explanation (2-3 sentences max) "
        "of WHY the correct option is the right answer."
    )
    OUTPUT_RULES = (
        "INSTRUCTIONS:\n"
        "- Return ONLY a valid JSON object.\n"
        "- The keys of the object MUST be the question IDs provided in the payload.\n"
        "- The values MUST be the explanation strings.\n"
        "- Do not include markdown formatting like ```json. Just the raw JSON string."
    )

    def build(self, exam_title: str | None, questions: list[Question]) -> str:
        payload = [
            {
                "id": q.id,
                "text": q.text,
                "options": q.options,
                "correctOption": q.correct_option,
            }
            for q in questions
        ]
        return (
            f"{self.INSTRUCTIONS}\n\n"
            f"Exam Title: {exam_title}\n\n"
            f"Questions Payload:\n{json.dumps(payload, ensure_ascii=False)}\n\n"
            f"{self.OUTPUT_RULES}\n"
        )


def strip_code_fences(text: str) -> str:
    """Drop ```json / ``` markers anywhere in the text and trim whitespace."""
    return _FENCE_RE.sub("", text).strip()


def parse_explanations(text: str) -> dict[str, str]:
    """Parse raw model output into {question id: explanation}.

    Raises ValueError (json.JSONDecodeError included) if the cleaned text is
    not a JSON object.
    """
    data = json.loads(strip_code_fences(text))
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return normalize_explanations(data)
