"""
Simple factory for process-wide collaborators.

Routes never construct services themselves; they ask `ServiceFactory` for
them through FastAPI dependencies (see api.py). Instances are created on
first use and cached at class level, after which they are only read.

The document store is an explicit optional collaborator: `get_store()`
returns None when credential bootstrap failed, and callers check for that.
"""

from quiz_companion.config import Settings
from quiz_companion.services.credentials import bootstrap_store
from quiz_companion.services.generator import GeminiGenerator
from quiz_companion.services.paypal import PayPalClient
from quiz_companion.services.store import ExplanationStore


class ServiceFactory:
    """Lazily creates and caches collaborators (class-level singletons)."""

    _settings: Settings | None = None
    _store: ExplanationStore | None = None
    _store_ready: bool = False
    _generator: GeminiGenerator | None = None

    @classmethod
    def configure(cls, settings: Settings) -> None:
        """Install settings explicitly (startup); drops anything built from older ones."""
        cls.reset()
        cls._settings = settings

    @classmethod
    def reset(cls) -> None:
        cls._settings = None
        cls._store = None
        cls._store_ready = False
        cls._generator = None

    @classmethod
    def get_settings(cls) -> Settings:
        if cls._settings is None:
            cls._settings = Settings.from_env()
        return cls._settings

    @classmethod
    def get_store(cls) -> ExplanationStore | None:
        # Bootstrap is attempted once; a failure is remembered as None.
        if not cls._store_ready:
            cls._store = bootstrap_store(cls.get_settings())
            cls._store_ready = True
        return cls._store

    @classmethod
    def get_generator(cls) -> GeminiGenerator:
        if cls._generator is None:
            cls._generator = GeminiGenerator(cls.get_settings().gemini_api_key)
        return cls._generator

    @classmethod
    def get_paypal_client(cls) -> PayPalClient:
        # New client per call; the environment is fixed by settings.
        settings = cls.get_settings()
        return PayPalClient(
            settings.paypal_client_id,
            settings.paypal_client_secret,
            base_url=settings.paypal_base_url,
            timeout=settings.paypal_timeout_seconds,
        )
