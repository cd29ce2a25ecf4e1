"""Profile snapshot and upstream outcome types."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Optional, Union


def _count(value: Any) -> int:
    try:
        return max(0, int(value or 0))
    except (TypeError, ValueError):
        return 0


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


@dataclass(frozen=True)
class UserRecord:
    """Normalized snapshot of a public GitHub profile."""

    login: str
    display_name: Optional[str] = None
    bio: Optional[str] = None
    public_repos: int = 0
    followers: int = 0
    following: int = 0
    avatar_url: str = ""
    profile_url: str = ""
    created_at: str = ""

    @classmethod
    def from_github(cls, payload: dict) -> "UserRecord":
        """Build a record from a `GET /users/{login}` response body."""
        login = payload.get("login")
        if not isinstance(login, str) or not login:
            raise ValueError("upstream payload has no login")
        return cls(
            login=login,
            display_name=_text(payload.get("name")),
            bio=_text(payload.get("bio")),
            public_repos=_count(payload.get("public_repos")),
            followers=_count(payload.get("followers")),
            following=_count(payload.get("following")),
            avatar_url=str(payload.get("avatar_url") or ""),
            profile_url=str(payload.get("html_url") or ""),
            created_at=str(payload.get("created_at") or ""),
        )

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "UserRecord":
        """Inverse of `to_dict`, used when reading cached entries."""
        if not isinstance(data, dict) or not data.get("login"):
            raise ValueError("cached payload has no login")
        return cls(
            login=str(data["login"]),
            display_name=_text(data.get("display_name")),
            bio=_text(data.get("bio")),
            public_repos=_count(data.get("public_repos")),
            followers=_count(data.get("followers")),
            following=_count(data.get("following")),
            avatar_url=str(data.get("avatar_url") or ""),
            profile_url=str(data.get("profile_url") or ""),
            created_at=str(data.get("created_at") or ""),
        )


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    UPSTREAM_ERROR = "upstream_error"
    INVALID_USERNAME = "invalid_username"


@dataclass(frozen=True)
class Ok:
    record: UserRecord


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    http_status: Optional[int] = None


FetchOutcome = Union[Ok, Err]
