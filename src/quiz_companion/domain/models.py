"""
Domain models for exam explanations and PayPal checkout.

All models use Pydantic v2 BaseModel. The HTTP API speaks camelCase JSON
(examId, correctIndex, orderID, ...), so fields carry aliases and accept
either spelling (`populate_by_name=True`). Request models keep required
fields optional at the type level: the orchestrators decide what "missing"
means and raise InvalidRequest with the message the client expects.
"""

import json
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNKNOWN_EXAM_TITLE = "Unknown"


def normalize_explanations(data: dict[Any, Any]) -> dict[str, str]:
    """String keys and string values; anything else is JSON-encoded."""
    return {str(key): value if isinstance(value, str) else json.dumps(value) for key, value in data.items()}


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ── Explanations ─────────────────────────────────────────────────────


class Question(_Model):
    """One multiple-choice question as sent by the quiz frontend."""

    id: str | int
    text: str = ""
    options: list[str] = Field(default_factory=list)
    correct_index: int | None = Field(default=None, alias="correctIndex")

    @property
    def correct_option(self) -> str | None:
        """Text of the correct option, or None if the index is out of range."""
        if self.correct_index is None:
            return None
        if 0 <= self.correct_index < len(self.options):
            return self.options[self.correct_index]
        return None


class ExplanationRequest(_Model):
    """Body of POST /api/explain-exam."""

    exam_id: str | None = Field(default=None, alias="examId")
    exam_title: str | None = Field(default=None, alias="examTitle")
    questions: list[Question] | None = None


class ExplanationRecord(_Model):
    """Cached explanations for one exam, stored under its examId.

    Written once on a cache miss and never updated afterwards.
    `created_at` is assigned by the document store on write, so it is only
    populated on records read back from it.
    """

    exam_id: str = Field(alias="examId")
    exam_title: str = Field(default=UNKNOWN_EXAM_TITLE, alias="examTitle")
    explanations: dict[str, str]
    created_at: datetime | None = Field(default=None, alias="createdAt")

    @field_validator("explanations", mode="before")
    @classmethod
    def _stringify_explanations(cls, value: Any) -> Any:
        # Older documents hold the model output verbatim, values included.
        if isinstance(value, dict):
            return normalize_explanations(value)
        return value

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude={"created_at"})


class ExplanationResponse(_Model):
    explanations: dict[str, str]


# ── Payments ─────────────────────────────────────────────────────────


class CreateOrderRequest(_Model):
    """Body of POST /api/paypal/create-order."""

    amount: str | int | float | None = None
    currency: str | None = None


class CaptureOrderRequest(_Model):
    """Body of POST /api/paypal/capture-order."""

    order_id: str | None = Field(default=None, alias="orderID")


class OrderCreated(_Model):
    id: str


class OrderCaptured(_Model):
    """Capture result, passed through from PayPal unchanged."""

    status: str | None = None
    id: str | None = None
    payer: dict[str, Any] | None = None


# ── Misc ─────────────────────────────────────────────────────────────


class HealthStatus(_Model):
    status: str = "ok"
    timestamp: str
