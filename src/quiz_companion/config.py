"""
Process-wide settings, read once from the environment at startup.

`Settings.from_env()` loads a local `.env` file first (python-dotenv) and then
reads plain environment variables, so deployments that inject variables
directly (Render, Cloud Run, ...) work without a file.

The resulting model is frozen: after startup nothing mutates configuration.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

# Ordered fallback list: the first model that answers wins.
DEFAULT_GEMINI_MODELS: tuple[str, ...] = (
    "gemini-2.5-flash",
    "gemini-3-flash",
    "gemini-2.5-flash-lite",
)

PAYPAL_SANDBOX_URL = "https://api-m.sandbox.paypal.com"
PAYPAL_LIVE_URL = "https://api-m.paypal.com"


def _split_csv(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(part.strip() for part in raw.split(",") if part.strip())


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    log_level: str = "info"
    log_dir: str | None = None

    # Credential sources, tried in this order by services/credentials.py
    firebase_service_account_json: str | None = None
    firebase_service_account_path: str | None = None
    google_cloud_project: str | None = None

    gemini_api_key: str | None = None
    gemini_models: tuple[str, ...] = DEFAULT_GEMINI_MODELS

    host: str = "0.0.0.0"
    port: int = Field(default=5000, gt=0, lt=65536)

    app_env: str = "development"
    paypal_client_id: str | None = None
    paypal_client_secret: str | None = None
    paypal_timeout_seconds: float = Field(default=30.0, gt=0)

    @property
    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    @property
    def paypal_base_url(self) -> str:
        """Live PayPal in production, sandbox everywhere else."""
        return PAYPAL_LIVE_URL if self.is_production else PAYPAL_SANDBOX_URL

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "Settings":
        if load_env_file:
            load_dotenv()
        env = os.environ
        return cls(
            log_level=env.get("LOG_LEVEL", "info"),
            log_dir=env.get("LOG_DIR") or None,
            firebase_service_account_json=env.get("FIREBASE_SERVICE_ACCOUNT_JSON") or None,
            firebase_service_account_path=env.get("FIREBASE_SERVICE_ACCOUNT_PATH") or None,
            google_cloud_project=env.get("GOOGLE_CLOUD_PROJECT") or None,
            gemini_api_key=env.get("GEMINI_API_KEY") or None,
            gemini_models=_split_csv(env.get("GEMINI_MODELS")) or DEFAULT_GEMINI_MODELS,
            host=env.get("HOST", "0.0.0.0"),
            port=int(env.get("PORT", "5000")),
            app_env=env.get("APP_ENV", "development"),
            paypal_client_id=env.get("PAYPAL_CLIENT_ID") or None,
            paypal_client_secret=env.get("PAYPAL_CLIENT_SECRET") or None,
            paypal_timeout_seconds=float(env.get("PAYPAL_TIMEOUT_SECONDS", "30")),
        )
