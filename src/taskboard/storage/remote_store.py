# src/taskboard/storage/remote_store.py

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from google.cloud import firestore
from google.oauth2 import service_account

from ..core.ports import Record

logger = logging.getLogger(__name__)


class FirestoreRemoteStore:
    """
    Firestore-backed RemoteStore.

    The client is created lazily on first use so that importing the app
    (or running it without cloud sync) never needs credentials.
    """

    def __init__(
        self,
        *,
        project: str | None,
        credentials_path: str | Path | None = None,
    ) -> None:
        self._project = (project or "").strip() or None
        self._credentials_path = Path(credentials_path) if credentials_path else None
        self._client: firestore.AsyncClient | None = None

    def is_configured(self) -> bool:
        if not self._project:
            return False
        if self._credentials_path is not None and not self._credentials_path.exists():
            logger.warning("Firestore credentials file not found: %s", self._credentials_path)
            return False
        return True

    def _get_client(self) -> firestore.AsyncClient:
        if self._client is not None:
            return self._client
        if not self.is_configured():
            raise RuntimeError("Firestore is not configured (set TASKBOARD_FIRESTORE_PROJECT).")

        credentials = None
        if self._credentials_path is not None:
            credentials = service_account.Credentials.from_service_account_file(
                str(self._credentials_path)
            )

        self._client = firestore.AsyncClient(project=self._project, credentials=credentials)
        logger.info("Firestore client ready project=%s", self._project)
        return self._client

    async def fetch_all(self, collection: str) -> list[Record]:
        client = self._get_client()
        out: list[Record] = []
        async for snap in client.collection(collection).stream():
            data = snap.to_dict() or {}
            out.append({**data, "id": snap.id})
        logger.debug("Firestore fetched %d docs from %s", len(out), collection)
        return out

    async def upsert(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        client = self._get_client()
        await client.collection(collection).document(doc_id).set(dict(data), merge=True)

    def close(self) -> None:
        """Drop the cached client; the next call reconnects."""
        self._client = None
