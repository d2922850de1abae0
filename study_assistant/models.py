from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Panel(str, Enum):
    CHAT = "Chat"
    SCHEDULE = "Schedule"
    NOTES = "Notes"


@dataclass(frozen=True)
class User:
    uid: str
    is_anonymous: bool
    id_token: str
    refresh_token: str
    expires_at: float

    def short_uid(self, length: int = 8) -> str:
        return self.uid[:length]


@dataclass(frozen=True)
class BootstrapSnapshot:
    user_id: str | None = None
    is_auth_ready: bool = False
    is_blocked: bool = False
    is_failed: bool = False
    loading_message: str = "Initializing application..."
    user_status: str | None = None


@dataclass(frozen=True)
class CollectionRef:
    path: str
    url: str | None = None
