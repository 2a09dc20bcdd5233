"""
Firestore credential bootstrap.

Credentials are looked up in priority order:

  1. FIREBASE_SERVICE_ACCOUNT_JSON: the key file's JSON inline
     (the usual choice on Render / Heroku style hosts)
  2. FIREBASE_SERVICE_ACCOUNT_PATH: path to the key file on disk
  3. Application default credentials (Cloud Run, GCE, gcloud auth)

A failure here is not fatal. `bootstrap_store()` logs a warning and returns
None; the explanation endpoint then reports the store as unavailable while
health and payment endpoints keep working.
"""

import json
import logging
from typing import Any

from google.cloud import firestore
from google.oauth2 import service_account

from quiz_companion.config import Settings
from quiz_companion.errors import UnreachableCredential
from quiz_companion.services.store import FirestoreExplanationStore

logger = logging.getLogger(__name__)


def _load_inline_account(raw: str) -> dict[str, Any]:
    info = json.loads(raw)
    # Env vars often carry the PEM with escaped newlines.
    if info.get("private_key"):
        info["private_key"] = info["private_key"].replace("\\n", "\n")
    return info


def create_firestore_client(settings: Settings) -> tuple[firestore.AsyncClient, str]:
    """Build an AsyncClient from the first configured credential source.

    Returns the client and a short label for the source that was used.
    Raises UnreachableCredential if that source cannot be loaded.
    """
    try:
        if settings.firebase_service_account_json:
            info = _load_inline_account(settings.firebase_service_account_json)
            creds = service_account.Credentials.from_service_account_info(info)
            project = info.get("project_id") or settings.google_cloud_project
            return firestore.AsyncClient(project=project, credentials=creds), "inline service account"

        if settings.firebase_service_account_path:
            path = settings.firebase_service_account_path
            creds = service_account.Credentials.from_service_account_file(path)
            project = creds.project_id or settings.google_cloud_project
            return firestore.AsyncClient(project=project, credentials=creds), "service account file"

        if settings.google_cloud_project:
            return firestore.AsyncClient(project=settings.google_cloud_project), "application default"
        return firestore.AsyncClient(), "application default"
    except Exception as exc:
        raise UnreachableCredential(str(exc)) from exc


def bootstrap_store(settings: Settings) -> FirestoreExplanationStore | None:
    try:
        client, source = create_firestore_client(settings)
    except UnreachableCredential as exc:
        logger.warning("Firestore initialization warning: %s", exc)
        return None
    logger.info("Firestore client initialized (%s)", source)
    return FirestoreExplanationStore(client)
