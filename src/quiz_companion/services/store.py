"""
Explanation cache backed by Firestore.

One document per exam in the `exam_explanations` collection, keyed by
examId. Documents are written once and never updated, so there is no
read-modify-write cycle to protect. Two concurrent misses for the same exam
both write; the later write wins.
"""

import logging
from typing import Protocol

from google.cloud import firestore

from quiz_companion.domain.models import ExplanationRecord

logger = logging.getLogger(__name__)

COLLECTION = "exam_explanations"


class ExplanationStore(Protocol):
    async def get(self, exam_id: str) -> ExplanationRecord | None: ...

    async def save(self, record: ExplanationRecord) -> None: ...


class FirestoreExplanationStore:
    def __init__(self, client: firestore.AsyncClient, collection: str = COLLECTION) -> None:
        self._client = client
        self._collection = collection

    def _ref(self, exam_id: str):
        return self._client.collection(self._collection).document(exam_id)

    async def get(self, exam_id: str) -> ExplanationRecord | None:
        snapshot = await self._ref(exam_id).get()
        if not snapshot.exists:
            return None
        data = snapshot.to_dict() or {}
        return ExplanationRecord.model_validate({"examId": exam_id, **data})

    async def save(self, record: ExplanationRecord) -> None:
        document = record.to_document()
        # Timestamp is assigned by the Firestore server, not this process.
        document["createdAt"] = firestore.SERVER_TIMESTAMP
        await self._ref(record.exam_id).set(document)
        logger.debug("Stored explanations for exam %s", record.exam_id)
