"""
Gemini text generation facade.

Wraps the google-genai SDK behind a single coroutine,
`generate(model, prompt) -> str`. The explanation service only depends on
the `TextGenerator` protocol, so tests swap in a scripted fake.
"""

import logging
from typing import Protocol

from google import genai

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    async def generate(self, model: str, prompt: str) -> str: ...


class GeminiGenerator:
    """Calls Gemini through the SDK's async surface (`client.aio`).

    The SDK client is created on first use. A missing API key therefore
    surfaces as a failed model attempt instead of a startup crash.
    """

    def __init__(self, api_key: str | None) -> None:
        self._api_key = api_key
        self._client: genai.Client | None = None

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self._api_key:
                raise RuntimeError("GEMINI_API_KEY is not set")
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    async def generate(self, model: str, prompt: str) -> str:
        response = await self._get_client().aio.models.generate_content(model=model, contents=prompt)
        text = response.text
        if not text:
            raise RuntimeError(f"Empty response from {model}")
        logger.debug("Model %s returned %d characters", model, len(text))
        return text
