"""Request/response models (camelCase on the wire)."""

import uuid
from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from clubber.models import Match, MatchAvailability, MatchStatus
from clubber.search import PageResult

T = TypeVar("T")


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MatchRead(ApiModel):
    id: uuid.UUID
    title: str
    competition: str
    date: datetime
    status: MatchStatus
    availability: MatchAvailability = MatchAvailability.AVAILABLE
    stream_url: str = Field(default="", alias="streamURL")

    @classmethod
    def from_match(cls, match: Match, stream_url: Optional[str] = None) -> "MatchRead":
        return cls(
            id=match.id,
            title=match.title,
            competition=match.competition,
            date=match.date,
            status=match.status,
            availability=match.availability,
            stream_url=match.stream_url if stream_url is None else stream_url,
        )


class MatchCreate(ApiModel):
    title: str = Field(min_length=1, max_length=255)
    competition: str = Field(min_length=1, max_length=255)
    date: datetime
    status: MatchStatus = MatchStatus.UPCOMING
    availability: MatchAvailability = MatchAvailability.AVAILABLE
    stream_url: str = Field(default="", max_length=500, alias="streamURL")


class MatchUpdate(ApiModel):
    """Partial update; omitted fields keep their stored value."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    competition: Optional[str] = Field(default=None, min_length=1, max_length=255)
    date: Optional[datetime] = None
    status: Optional[MatchStatus] = None
    availability: Optional[MatchAvailability] = None
    stream_url: Optional[str] = Field(default=None, max_length=500, alias="streamURL")


class PageEnvelope(ApiModel, Generic[T]):
    """`{data, page, pageSize, totalCount}`"""

    data: List[T]
    page: int
    page_size: int
    total_count: int

    @classmethod
    def from_result(cls, result: PageResult) -> "PageEnvelope":
        return cls(
            data=list(result.items),
            page=result.page,
            page_size=result.page_size,
            total_count=result.total_count,
        )


# =============================================================================
# AUTH
# =============================================================================


class RegisterRequest(ApiModel):
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=6, max_length=100)


class LoginRequest(ApiModel):
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=6, max_length=100)


class UserRead(ApiModel):
    id: uuid.UUID
    username: str


class AuthResponse(ApiModel):
    succeeded: bool
    message: str = ""
    token: Optional[str] = None
    user: Optional[UserRead] = None


# =============================================================================
# PLAYLIST
# =============================================================================


class PlaylistRead(ApiModel):
    matches: List[MatchRead] = Field(default_factory=list)


class PlaylistActionResult(ApiModel):
    succeeded: bool
    message: str = ""
    playlist: Optional[PlaylistRead] = None


# =============================================================================
# EVENTS
# =============================================================================


class BroadcastResponse(ApiModel):
    delivered: int
    dropped: int
    open_connections: int
