"""Database models using SQLModel."""

import enum
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """Naive UTC timestamp (SQLite drops tzinfo anyway)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class MatchStatus(str, enum.Enum):
    """Broadcast state of a match. Declaration order is the status sort order."""

    UPCOMING = "Upcoming"
    LIVE = "Live"
    ON_DEMAND = "OnDemand"
    CANCELED = "Canceled"

    @property
    def sort_rank(self) -> int:
        return _STATUS_RANK[self]

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["MatchStatus"]:
        """Case-insensitive lookup by name or value. Unknown or blank -> None."""
        if raw is None:
            return None
        key = raw.strip().casefold()
        if not key:
            return None
        for status in cls:
            if key in (status.value.casefold(), status.name.casefold()):
                return status
        return None


_STATUS_RANK = {status: rank for rank, status in enumerate(MatchStatus)}


class MatchAvailability(str, enum.Enum):
    AVAILABLE = "Available"
    UNAVAILABLE = "Unavailable"


class User(SQLModel, table=True):
    """Registered SPA user."""

    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    username: str = Field(max_length=50, unique=True, index=True)
    password_hash: str = Field(max_length=255)
    created_at: datetime = Field(default_factory=utcnow)


class Match(SQLModel, table=True):
    """A streamable match."""

    __tablename__ = "matches"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    title: str = Field(max_length=255, description="e.g. 'Cup Final: Reds vs Blues'")
    competition: str = Field(max_length=255, index=True)
    date: datetime = Field(index=True, description="Kick-off time (UTC)")
    status: MatchStatus = Field(default=MatchStatus.UPCOMING)
    availability: MatchAvailability = Field(default=MatchAvailability.AVAILABLE)
    stream_url: str = Field(default="", max_length=500, description="Empty means 'generate on read'")


class PlaylistEntry(SQLModel, table=True):
    """A match saved to a user's playlist (composite key user_id + match_id)."""

    __tablename__ = "playlist_entries"

    user_id: uuid.UUID = Field(foreign_key="users.id", primary_key=True)
    match_id: uuid.UUID = Field(foreign_key="matches.id", primary_key=True)
    date_added: datetime = Field(default_factory=utcnow)
