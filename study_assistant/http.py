from __future__ import annotations

import time
from typing import Any

import requests

from study_assistant.config import AppSettings

RETRYABLE_STATUS_CODES = (429, 500, 502, 503, 504)


class ApiHttpError(RuntimeError):
    def __init__(self, status_code: int, message: str, error_code: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code


class HttpClient:
    def __init__(self, settings: AppSettings, session: requests.Session | None = None):
        self._settings = settings
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})

    def post_json(
        self,
        url: str,
        payload: dict[str, Any],
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        return self._post(url, params=params, json=payload)

    def post_form(
        self,
        url: str,
        data: dict[str, Any],
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        return self._post(url, params=params, data=data)

    def close(self) -> None:
        self._session.close()

    def _post(self, url: str, params: dict[str, Any] | None, **body: Any) -> dict[str, Any]:
        last_error: ApiHttpError | None = None
        attempts = self._settings.retry_attempts + 1
        for attempt in range(1, attempts + 1):
            response = self._session.post(
                url,
                params=params,
                timeout=self._settings.timeout_seconds,
                **body,
            )

            if response.ok:
                if not response.content:
                    return {}
                return response.json()

            last_error = self._build_error(response)
            if response.status_code in RETRYABLE_STATUS_CODES and attempt < attempts:
                time.sleep(1.5 * attempt)
                continue
            raise last_error

        if last_error is None:
            raise ApiHttpError(status_code=0, message="Request failed")
        raise last_error

    @staticmethod
    def _build_error(response: requests.Response) -> ApiHttpError:
        error_code = None
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            raw_message = str(body["error"].get("message", "")).strip()
            # Provider messages look like "INVALID_CUSTOM_TOKEN : detail".
            error_code = raw_message.split(":", 1)[0].strip() or None

        message = response.text[:500]
        return ApiHttpError(
            status_code=response.status_code,
            message=f"HTTP {response.status_code}: {message}",
            error_code=error_code,
        )
