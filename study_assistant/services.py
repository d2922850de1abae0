from __future__ import annotations

from study_assistant.bootstrap import ChangeCallback, IdentityBootstrap
from study_assistant.config import AppSettings
from study_assistant.models import BootstrapSnapshot, CollectionRef


class StudyAssistantService:
    def __init__(self, settings: AppSettings, bootstrap: IdentityBootstrap):
        self._settings = settings
        self._bootstrap = bootstrap

    @property
    def app_id(self) -> str:
        return self._settings.app_id

    def start(self, on_change: ChangeCallback | None = None) -> BootstrapSnapshot:
        return self._bootstrap.start(on_change=on_change)

    def snapshot(self) -> BootstrapSnapshot:
        return self._bootstrap.snapshot()

    def sign_out(self) -> None:
        auth = self._bootstrap.auth
        if auth is None:
            return
        auth.sign_out()

    def private_collection(self, collection_name: str) -> CollectionRef | None:
        store = self._bootstrap.store
        if store is None:
            return None
        return store.private_collection(collection_name)

    def close(self) -> None:
        self._bootstrap.close()
