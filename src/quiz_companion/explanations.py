"""
Exam explanations: cache-first lookup with a model fallback chain.

Execution flow of `ExplanationService.create_or_generate`:
    1. Validate the request (examId + questions list)
    2. Firestore lookup by examId      → hit: return cached explanations
    3. Build one prompt for all questions
    4. Try each Gemini model in order  → first parseable answer wins
    5. Persist the new record, then return it

There is no retry within a model and no second pass over the list; the
fallback chain is the only retry mechanism.
"""

import logging

from quiz_companion.domain.models import UNKNOWN_EXAM_TITLE, ExplanationRecord, ExplanationRequest
from quiz_companion.domain.prompting import PromptStrategy, TutorPromptStrategy, parse_explanations
from quiz_companion.errors import AllModelsFailed, InvalidRequest, ProviderError
from quiz_companion.services.generator import TextGenerator
from quiz_companion.services.store import ExplanationStore

logger = logging.getLogger(__name__)


class ExplanationService:
    def __init__(
        self,
        store: ExplanationStore | None,
        generator: TextGenerator,
        models: tuple[str, ...] | list[str],
        prompts: PromptStrategy | None = None,
    ) -> None:
        self.store = store
        self.generator = generator
        self.models = tuple(models)
        self.prompts: PromptStrategy = prompts or TutorPromptStrategy()

    async def generate(self, prompt: str) -> dict[str, str]:
        """Run the fallback chain once and return the first parsed result."""
        last_error: Exception | None = None
        for model in self.models:
            # Provider errors, timeouts and unparseable output all count as a
            # failed attempt; the next model in the list gets its turn.
            try:
                logger.info("Trying model: %s...", model)
                text = await self.generator.generate(model, prompt)
                explanations = parse_explanations(text)
            except Exception as exc:
                logger.warning("Failed with model %s: %s", model, exc)
                last_error = exc
                continue
            logger.info("Success with model: %s", model)
            return explanations
        raise AllModelsFailed(last_error)

    async def create_or_generate(self, request: ExplanationRequest) -> dict[str, str]:
        if not request.exam_id or request.questions is None:
            logger.warning("Invalid request data for explain-exam")
            raise InvalidRequest("Invalid request data")

        # Absent when credential bootstrap failed at startup.
        if self.store is None:
            raise ProviderError("Document store is not available")

        # Step 1: cache lookup. A hit never touches Gemini.
        cached = await self.store.get(request.exam_id)
        if cached is not None:
            logger.info("[Cache Hit] Serving explanations for exam: %s", request.exam_id)
            return cached.explanations

        logger.info(
            "[Cache Miss] Generating AI explanations for exam: %s (%d questions)",
            request.exam_id,
            len(request.questions),
        )
        # Step 2: one prompt for the whole exam, then the fallback chain.
        prompt = self.prompts.build(request.exam_title, request.questions)
        explanations = await self.generate(prompt)

        # Step 3: persist before answering so the next request is a cache hit.
        # A failed write propagates; the caller gets a 500, not unsaved output.
        await self.store.save(
            ExplanationRecord(
                exam_id=request.exam_id,
                exam_title=request.exam_title or UNKNOWN_EXAM_TITLE,
                explanations=explanations,
            )
        )
        return explanations
