"""
Record types persisted by the stores.

A User is created on signup and an Event on post. Neither is updated or
deleted afterwards, so both are frozen.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class User:
    id: int
    email: str
    password_hash: str  # argon2, never plaintext
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "User":
        return cls(
            id=row["id"],
            email=row["email"],
            password_hash=row["password_hash"],
            created_at=row.get("created_at"),
        )


@dataclass(frozen=True)
class Event:
    id: int
    name: str
    organization: str
    location: str
    time: datetime
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Event":
        return cls(
            id=row["id"],
            name=row["name"],
            organization=row["organization"],
            location=row["location"],
            time=row["time"],
            created_by=row.get("created_by"),
            created_at=row.get("created_at"),
        )


@dataclass(frozen=True)
class SessionRecord:
    """Server-side half of a login session; deleting it ends the session."""

    id: str
    user_id: int
    expires_at: datetime
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "SessionRecord":
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            expires_at=row["expires_at"],
            created_at=row.get("created_at"),
        )
