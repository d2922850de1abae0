from __future__ import annotations

from typing import Callable

from study_assistant.config import AppSettings
from study_assistant.models import CollectionRef

FIRESTORE_URL = "https://firestore.googleapis.com/v1"


class DocumentStore:
    """Per-user namespace in the Firestore document store.

    Only path construction lives here; the panels that will read and write
    these collections do not exist yet.
    """

    def __init__(self, settings: AppSettings, current_user_id: Callable[[], str | None]):
        self._settings = settings
        self._current_user_id = current_user_id

    @property
    def documents_url(self) -> str | None:
        project_id = self._settings.project_id
        if not project_id:
            return None
        return f"{FIRESTORE_URL}/projects/{project_id}/databases/(default)/documents"

    def private_collection(self, collection_name: str) -> CollectionRef | None:
        user_id = self._current_user_id()
        if not user_id:
            return None

        name = collection_name.strip().strip("/")
        if not name:
            raise ValueError("Collection name is required")

        path = f"artifacts/{self._settings.app_id}/users/{user_id}/{name}"
        base_url = self.documents_url
        return CollectionRef(path=path, url=f"{base_url}/{path}" if base_url else None)
