from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
import os
from pathlib import Path
import sys
from typing import Any


class ConfigurationError(ValueError):
    pass


@dataclass(frozen=True)
class AppSettings:
    app_id: str
    firebase_config: dict[str, Any] = field(default_factory=dict)
    initial_auth_token: str | None = None
    timeout_seconds: int = 30
    retry_attempts: int = 2
    log_level: str = "INFO"
    log_dir: str = ""

    @property
    def has_firebase_config(self) -> bool:
        return bool(self.firebase_config)

    @property
    def api_key(self) -> str:
        return str(self.firebase_config.get("apiKey", "")).strip()

    @property
    def project_id(self) -> str:
        return str(self.firebase_config.get("projectId", "")).strip()

    @staticmethod
    def from_env() -> "AppSettings":
        load_env_files()

        app_id = os.getenv("STUDY_APP_ID", "").strip() or "default-app-id"
        firebase_config = parse_firebase_config(os.getenv("STUDY_FIREBASE_CONFIG", "{}"))
        initial_auth_token = os.getenv("STUDY_INITIAL_AUTH_TOKEN", "").strip() or None

        timeout_seconds = _parse_int_env("STUDY_TIMEOUT_SECONDS", 30)
        retry_attempts = _parse_int_env("STUDY_RETRY_ATTEMPTS", 2)
        log_level = os.getenv("STUDY_LOG_LEVEL", "INFO").strip().upper()

        default_log_dir = os.path.join(
            os.getenv("LOCALAPPDATA", os.getcwd()),
            "StudyAssistant",
            "logs",
        )
        log_dir = os.getenv("STUDY_LOG_DIR", "").strip() or default_log_dir

        settings = AppSettings(
            app_id=app_id,
            firebase_config=firebase_config,
            initial_auth_token=initial_auth_token,
            timeout_seconds=timeout_seconds,
            retry_attempts=retry_attempts,
            log_level=log_level,
            log_dir=log_dir,
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        if not self.app_id:
            raise ConfigurationError("STUDY_APP_ID must not be empty")

        if self.timeout_seconds <= 0:
            raise ConfigurationError("STUDY_TIMEOUT_SECONDS must be greater than 0")

        if self.retry_attempts < 0:
            raise ConfigurationError("STUDY_RETRY_ATTEMPTS must be 0 or greater")

        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ConfigurationError(
                "STUDY_LOG_LEVEL must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL"
            )


def parse_firebase_config(raw: str | None) -> dict[str, Any]:
    """Parse the serialized provider configuration.

    A blank value is treated as an empty configuration, which the bootstrap
    reports as missing rather than as an error.
    """
    text = (raw or "").strip()
    if not text:
        return {}

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"STUDY_FIREBASE_CONFIG is not valid JSON: {exc}") from exc

    if not isinstance(parsed, dict):
        raise ConfigurationError("STUDY_FIREBASE_CONFIG must be a JSON object")
    return parsed


def _parse_int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer") from exc


def load_env_files(file_name: str = ".env") -> list[Path]:
    """Apply ``KEY=VALUE`` lines from known ``.env`` locations.

    Locations are ``STUDY_ENV_FILE``, the working directory, then the install
    root. Values already in the environment win, so the first file that
    defines a key wins over later ones. Returns the files that were read.
    """
    loaded: list[Path] = []
    for path in _env_file_locations(file_name):
        try:
            text = path.read_text(encoding="utf-8")
        except OSError:
            continue
        for key, value in filter(None, map(_parse_env_line, text.splitlines())):
            os.environ.setdefault(key, value)
        loaded.append(path)
    return loaded


def _env_file_locations(file_name: str) -> list[Path]:
    explicit = os.getenv("STUDY_ENV_FILE", "").strip()
    install_root = (
        Path(sys.executable).resolve().parent
        if getattr(sys, "frozen", False)
        else Path(__file__).resolve().parent.parent
    )
    locations = [Path(explicit).expanduser()] if explicit else []
    locations += [Path.cwd() / file_name, install_root / file_name]

    # cwd and install root are often the same directory.
    unique: dict[Path, Path] = {}
    for path in locations:
        unique.setdefault(path.resolve(), path)
    return [path for path in unique.values() if path.is_file()]


def _parse_env_line(raw_line: str) -> tuple[str, str] | None:
    line = raw_line.strip()
    if line.startswith("export "):
        line = line[len("export "):].lstrip()
    if not line or line.startswith("#") or "=" not in line:
        return None

    key, value = (part.strip() for part in line.split("=", 1))
    if not key:
        return None
    # Only a matching outer pair is stripped; JSON values keep their inner quotes.
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
        value = value[1:-1]
    return key, value
