from __future__ import annotations

from study_assistant.auth import IDENTITY_TOOLKIT_URL, FirebaseAuth
from study_assistant.bootstrap import IdentityBootstrap
from study_assistant.config import AppSettings
from study_assistant.services import StudyAssistantService


class FakeHttpClient:
    def __init__(self) -> None:
        self.urls: list[str] = []
        self.closed = False

    def post_json(self, url, payload, params=None):
        self.urls.append(url)
        return {"localId": "svc-uid-42", "idToken": "id", "refreshToken": "r", "expiresIn": "3600"}

    def close(self) -> None:
        self.closed = True


def _service(config: dict) -> tuple[StudyAssistantService, FakeHttpClient]:
    settings = AppSettings(app_id="svc-app", firebase_config=config)
    http = FakeHttpClient()
    bootstrap = IdentityBootstrap(
        settings,
        auth_factory=lambda s: FirebaseAuth(s, http),
        runner=lambda task: task(),
    )
    return StudyAssistantService(settings, bootstrap), http


def test_service_runs_bootstrap_and_exposes_collections() -> None:
    service, http = _service({"apiKey": "k"})

    snapshot = service.start()

    assert service.app_id == "svc-app"
    assert snapshot.is_auth_ready is True
    assert http.urls == [f"{IDENTITY_TOOLKIT_URL}/accounts:signUp"]
    ref = service.private_collection("chat")
    assert ref is not None
    assert ref.path == "artifacts/svc-app/users/svc-uid-42/chat"


def test_sign_out_clears_collections() -> None:
    service, http = _service({"apiKey": "k"})
    service.start()

    service.sign_out()

    assert service.snapshot().user_id is None
    assert service.private_collection("chat") is None
    service.close()
    assert http.closed is True


def test_blocked_service_is_inert() -> None:
    service, http = _service({})

    snapshot = service.start()
    service.sign_out()

    assert snapshot.is_blocked is True
    assert service.private_collection("chat") is None
    assert http.urls == []
