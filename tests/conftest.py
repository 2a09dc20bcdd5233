"""
Shared fixtures: in-memory stand-ins for Firestore and Gemini.
"""

import pytest

from quiz_companion.domain.models import ExplanationRecord, ExplanationRequest
from quiz_companion.services.factory import ServiceFactory


class InMemoryStore:
    def __init__(self, records=None):
        self.records = dict(records or {})
        self.reads = []
        self.writes = []

    async def get(self, exam_id):
        self.reads.append(exam_id)
        return self.records.get(exam_id)

    async def save(self, record):
        self.writes.append(record)
        self.records[record.exam_id] = record


class ScriptedGenerator:
    """Replies per model: a string is returned, an exception is raised."""

    def __init__(self, replies):
        self.replies = replies
        self.calls = []

    async def generate(self, model, prompt):
        self.calls.append((model, prompt))
        reply = self.replies[model]
        if isinstance(reply, Exception):
            raise reply
        return reply


MODELS = ("model-a", "model-b", "model-c")


@pytest.fixture
def exam_request():
    return ExplanationRequest.model_validate(
        {
            "examId": "exam-42",
            "examTitle": "Capitals",
            "questions": [
                {"id": "q1", "text": "Capital of France?", "options": ["Berlin", "Paris"], "correctIndex": 1},
                {"id": "q2", "text": "Capital of Japan?", "options": ["Tokyo", "Kyoto"], "correctIndex": 0},
            ],
        }
    )


@pytest.fixture
def cached_record():
    return ExplanationRecord(
        exam_id="exam-42",
        exam_title="Capitals",
        explanations={"q1": "Paris is the capital.", "q2": "Tokyo is the capital."},
    )


@pytest.fixture(autouse=True)
def clean_factory():
    ServiceFactory.reset()
    yield
    ServiceFactory.reset()
