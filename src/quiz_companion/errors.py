"""
Error kinds raised by the orchestrators and services.

The HTTP layer (api.py) maps them to status codes:
  - InvalidRequest         → 400
  - AllModelsFailed        → 500 (message of the last model failure)
  - ProviderError          → 500 (Firestore / PayPal failure)
  - UnreachableCredential  → never reaches a request; logged at startup
"""


class QuizCompanionError(Exception):
    """Base class for every error this service raises on purpose."""

    @property
    def message(self) -> str:
        return str(self)


class InvalidRequest(QuizCompanionError):
    """A required request field is missing or malformed."""


class AllModelsFailed(QuizCompanionError):
    """Every model in the fallback list failed for one request."""

    def __init__(self, last_error: BaseException | None) -> None:
        self.last_error = last_error
        detail = str(last_error) if last_error is not None else "Unknown error"
        super().__init__(f"All models failed. Last error: {detail}")


class ProviderError(QuizCompanionError):
    """An external collaborator (document store, payment provider) failed."""


class UnreachableCredential(QuizCompanionError):
    """Service account credentials could not be loaded at startup."""
