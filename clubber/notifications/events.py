"""Match event payloads and Server-Sent-Events framing."""

import dataclasses
import json
import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from clubber.models import utcnow

# Event type constants
MATCH_CREATED = "match_created"
MATCH_STATUS_CHANGED = "match_status_changed"
MATCH_DELETED = "match_deleted"

KEEPALIVE_FRAME = ": keep-alive\n\n"


class MatchEvent(BaseModel):
    """A match state change, pushed to every open stream."""

    type: str
    match_id: uuid.UUID = Field(serialization_alias="matchId")
    status: Optional[str] = None
    previous_status: Optional[str] = Field(default=None, serialization_alias="previousStatus")
    title: Optional[str] = None
    timestamp: datetime = Field(default_factory=utcnow)


def serialize_event(event: Any) -> str:
    """Compact JSON for any broadcastable object (pydantic model, dataclass, or plain JSON data)."""
    if isinstance(event, BaseModel):
        return event.model_dump_json(by_alias=True)
    if dataclasses.is_dataclass(event) and not isinstance(event, type):
        event = dataclasses.asdict(event)
    return json.dumps(event, default=str, separators=(",", ":"))


def format_sse(data: str) -> str:
    """
    Frame one payload as `data: <payload>\\n\\n`, one data line per payload line.

    Only "\\n" separates lines: JSON keeps U+2028 and friends raw inside
    strings, and those must stay on the same data line.
    """
    lines = data.replace("\r\n", "\n").split("\n")
    return "".join(f"data: {line}\n" for line in lines) + "\n"
