from __future__ import annotations

from dataclasses import replace
import logging
import threading
from typing import Callable

from study_assistant.auth import FirebaseAuth, Subscription
from study_assistant.config import AppSettings
from study_assistant.http import HttpClient
from study_assistant.models import BootstrapSnapshot, User
from study_assistant.store import DocumentStore

logger = logging.getLogger(__name__)

MISSING_CONFIG_MESSAGE = "Firebase configuration missing. Cannot proceed with data storage."
SIGNED_IN_MESSAGE = "Authentication successful. Ready to load data."
SIGNED_OUT_MESSAGE = "Authentication established."
SIGNED_OUT_STATUS = "Authentication failed or not started."

AuthFactory = Callable[[AppSettings], FirebaseAuth]
Runner = Callable[[Callable[[], None]], None]
ChangeCallback = Callable[[BootstrapSnapshot], None]


def default_auth_factory(settings: AppSettings) -> FirebaseAuth:
    return FirebaseAuth(settings, HttpClient(settings))


def run_in_thread(task: Callable[[], None]) -> None:
    threading.Thread(target=task, name="auth-bootstrap", daemon=True).start()


class IdentityBootstrap:
    """One-shot sign-in sequence that gates the shell.

    ``start()`` registers the auth-state listener before the first sign-in
    attempt so the outcome is always observed. The custom token, when given,
    is tried first; any failure of the first attempt falls back to a single
    anonymous sign-in.
    Errors never propagate out of ``start()``; they end up in the snapshot's
    loading message and in the log.
    """

    def __init__(
        self,
        settings: AppSettings,
        auth_factory: AuthFactory = default_auth_factory,
        runner: Runner = run_in_thread,
        on_change: ChangeCallback | None = None,
    ):
        self._settings = settings
        self._auth_factory = auth_factory
        self._runner = runner
        self._on_change = on_change
        self._lock = threading.Lock()
        self._snapshot = BootstrapSnapshot()
        self._auth: FirebaseAuth | None = None
        self._store: DocumentStore | None = None
        self._subscription: Subscription | None = None
        self._started = False

    @property
    def auth(self) -> FirebaseAuth | None:
        return self._auth

    @property
    def store(self) -> DocumentStore | None:
        return self._store

    def snapshot(self) -> BootstrapSnapshot:
        with self._lock:
            return self._snapshot

    def start(self, on_change: ChangeCallback | None = None) -> BootstrapSnapshot:
        with self._lock:
            if on_change is not None:
                self._on_change = on_change
            if self._started:
                return self._snapshot
            self._started = True

        if not self._settings.has_firebase_config:
            logger.warning(MISSING_CONFIG_MESSAGE)
            self._update(is_blocked=True, loading_message=MISSING_CONFIG_MESSAGE)
            return self.snapshot()

        try:
            auth = self._auth_factory(self._settings)
            self._auth = auth
            self._store = DocumentStore(self._settings, lambda: self.snapshot().user_id)
            self._subscription = auth.on_auth_state_changed(self._handle_auth_state)
        except Exception as exc:
            logger.exception("Firebase initialization error")
            self._update(is_failed=True, loading_message=f"Failed to initialize Firebase: {exc}")
            return self.snapshot()

        self._runner(self._attempt_sign_in)
        return self.snapshot()

    def close(self) -> None:
        with self._lock:
            self._on_change = None
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            subscription.dispose()
        auth, self._auth = self._auth, None
        if auth is not None:
            auth.close()

    def __enter__(self) -> "IdentityBootstrap":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _attempt_sign_in(self) -> None:
        auth = self._auth
        if auth is None:
            return

        token = self._settings.initial_auth_token
        try:
            if token:
                auth.sign_in_with_custom_token(token)
            else:
                auth.sign_in_anonymously()
            return
        except Exception:
            logger.exception("Authentication error")

        try:
            auth.sign_in_anonymously()
        except Exception as exc:
            logger.exception("Anonymous sign-in fallback failed")
            self._update(is_failed=True, loading_message=f"Sign-in failed: {exc}")

    def _handle_auth_state(self, user: User | None) -> None:
        if user is not None:
            self._update(
                user_id=user.uid,
                user_status=f"Logged in as: {user.short_uid()}...",
                is_auth_ready=True,
                loading_message=SIGNED_IN_MESSAGE,
            )
        else:
            self._update(
                user_id=None,
                user_status=SIGNED_OUT_STATUS,
                is_auth_ready=True,
                loading_message=SIGNED_OUT_MESSAGE,
            )

    def _update(self, **changes) -> None:
        with self._lock:
            self._snapshot = replace(self._snapshot, **changes)
            snapshot = self._snapshot
            on_change = self._on_change

        if on_change is not None:
            on_change(snapshot)
