from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable

from study_assistant.config import AppSettings
from study_assistant.http import ApiHttpError, HttpClient
from study_assistant.models import User

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"
SECURE_TOKEN_URL = "https://securetoken.googleapis.com/v1/token"

# Refresh this many seconds before the provider-reported expiry.
TOKEN_EXPIRY_MARGIN_SECONDS = 60

AuthListener = Callable[[User | None], None]


class AuthenticationError(RuntimeError):
    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.code = code


class Subscription:
    """Handle returned by ``FirebaseAuth.on_auth_state_changed``.

    Calling it, calling ``dispose()`` or leaving a ``with`` block detaches the
    listener. Disposal is idempotent.
    """

    def __init__(self, dispose: Callable[[], None]):
        self._dispose = dispose
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def dispose(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._dispose()

    def __call__(self) -> None:
        self.dispose()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()


class FirebaseAuth:
    def __init__(self, settings: AppSettings, http_client: HttpClient):
        if not settings.api_key:
            raise AuthenticationError("Firebase configuration is missing 'apiKey'")

        self._settings = settings
        self._http_client = http_client
        self._lock = threading.Lock()
        self._listeners: list[AuthListener] = []
        self._current_user: User | None = None

    @property
    def current_user(self) -> User | None:
        with self._lock:
            return self._current_user

    def on_auth_state_changed(self, listener: AuthListener) -> Subscription:
        """Register ``listener`` and call it once with the current user.

        At startup the current user is ``None``, so every listener gets a
        definitive first report even if no sign-in ever succeeds.
        """
        with self._lock:
            self._listeners.append(listener)
            current = self._current_user

        def remove() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        self._notify(listener, current)
        return Subscription(remove)

    def sign_in_anonymously(self) -> User:
        body = self._identity_request("accounts:signUp", {"returnSecureToken": True})
        user = self._user_from_tokens(
            uid=str(body.get("localId", "")).strip(),
            is_anonymous=True,
            id_token=body.get("idToken"),
            refresh_token=body.get("refreshToken"),
            expires_in=body.get("expiresIn"),
        )
        logger.info("Signed in anonymously as %s...", user.short_uid())
        self._set_current_user(user)
        return user

    def sign_in_with_custom_token(self, token: str) -> User:
        token = (token or "").strip()
        if not token:
            raise AuthenticationError("Custom token is required", code="MISSING_CUSTOM_TOKEN")

        body = self._identity_request(
            "accounts:signInWithCustomToken",
            {"token": token, "returnSecureToken": True},
        )
        id_token = str(body.get("idToken", ""))
        user = self._user_from_tokens(
            uid=self._lookup_uid(id_token),
            is_anonymous=False,
            id_token=id_token,
            refresh_token=body.get("refreshToken"),
            expires_in=body.get("expiresIn"),
        )
        logger.info("Signed in with custom token as %s...", user.short_uid())
        self._set_current_user(user)
        return user

    def get_id_token(self, force_refresh: bool = False) -> str:
        user = self.current_user
        if user is None:
            raise AuthenticationError("No user is signed in", code="USER_NOT_SIGNED_IN")

        if not force_refresh and time.time() < user.expires_at - TOKEN_EXPIRY_MARGIN_SECONDS:
            return user.id_token

        try:
            body = self._http_client.post_form(
                SECURE_TOKEN_URL,
                {"grant_type": "refresh_token", "refresh_token": user.refresh_token},
                params={"key": self._settings.api_key},
            )
        except ApiHttpError as exc:
            raise AuthenticationError(f"Token refresh failed: {exc}", code=exc.error_code) from exc

        refreshed = self._user_from_tokens(
            uid=str(body.get("user_id") or user.uid),
            is_anonymous=user.is_anonymous,
            id_token=body.get("id_token"),
            refresh_token=body.get("refresh_token") or user.refresh_token,
            expires_in=body.get("expires_in"),
        )
        with self._lock:
            # Token refresh is not an auth state change; listeners are not notified.
            if self._current_user is not None and self._current_user.uid == refreshed.uid:
                self._current_user = refreshed
        logger.debug("Refreshed id token for %s...", refreshed.short_uid())
        return refreshed.id_token

    def sign_out(self) -> None:
        if self.current_user is None:
            return
        logger.info("Signing out")
        self._set_current_user(None)

    def close(self) -> None:
        with self._lock:
            self._listeners.clear()
        self._http_client.close()

    def _identity_request(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{IDENTITY_TOOLKIT_URL}/{endpoint}"
        try:
            return self._http_client.post_json(url, payload, params={"key": self._settings.api_key})
        except ApiHttpError as exc:
            code = exc.error_code or "UNKNOWN"
            raise AuthenticationError(f"{endpoint} failed ({code}): {exc}", code=exc.error_code) from exc

    def _lookup_uid(self, id_token: str) -> str:
        body = self._identity_request("accounts:lookup", {"idToken": id_token})
        users = body.get("users")
        if isinstance(users, list) and users and isinstance(users[0], dict):
            return str(users[0].get("localId", "")).strip()
        return ""

    @staticmethod
    def _user_from_tokens(
        uid: str,
        is_anonymous: bool,
        id_token: Any,
        refresh_token: Any,
        expires_in: Any,
    ) -> User:
        if not uid or not id_token:
            raise AuthenticationError("Identity provider response is missing user id or token")

        try:
            lifetime = int(expires_in)
        except (TypeError, ValueError):
            lifetime = 3600

        return User(
            uid=uid,
            is_anonymous=is_anonymous,
            id_token=str(id_token),
            refresh_token=str(refresh_token or ""),
            expires_at=time.time() + lifetime,
        )

    def _set_current_user(self, user: User | None) -> None:
        with self._lock:
            self._current_user = user
            listeners = list(self._listeners)

        for listener in listeners:
            self._notify(listener, user)

    @staticmethod
    def _notify(listener: AuthListener, user: User | None) -> None:
        try:
            listener(user)
        except Exception:
            logger.exception("Auth state listener raised")
