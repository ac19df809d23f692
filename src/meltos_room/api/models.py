"""
Pydantic models for meltos room API requests and responses.

These mirror the server's JSON shapes on a best-effort basis. The server's
schema is authoritative: response models allow unknown fields, and the client
returns the raw parsed JSON to callers rather than these models.

Models are organized into three categories:
1. Session identity: the identifiers echoed back on every room request
2. Request models: data sent FROM the client TO the server
3. Response models: data sent FROM the server that the client itself reads
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict

# ============================================================================
# SESSION IDENTITY
# ============================================================================


@dataclass(frozen=True)
class SessionConfigs:
    """
    Identifiers the server assigned when a room was opened or joined.

    Attributes:
        room_id: Server-assigned room identifier
        session_id: Server-assigned session credential for this room
        user_id: User id inside the room ("owner" for the opener), if known
    """

    room_id: str
    session_id: str
    user_id: str | None = None

    @classmethod
    def from_opened(cls, opened: Opened) -> SessionConfigs:
        return cls(room_id=opened.room_id, session_id=opened.session_id, user_id=opened.user_id)

    @classmethod
    def from_joined(cls, room_id: str, joined: Joined) -> SessionConfigs:
        return cls(room_id=room_id, session_id=joined.session_id, user_id=joined.user_id)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SessionConfigs:
        """
        Rebuild identifiers from their JSON form.

        Raises:
            KeyError: If room_id or session_id is missing.
            TypeError: If an identifier has the wrong type (e.g. null).
        """
        room_id = data["room_id"]
        session_id = data["session_id"]
        user_id = data.get("user_id")
        if not isinstance(room_id, str) or not isinstance(session_id, str):
            raise TypeError("room_id and session_id must be strings")
        if user_id is not None and not isinstance(user_id, str):
            raise TypeError("user_id must be a string or null")
        return cls(room_id=room_id, session_id=session_id, user_id=user_id)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# ============================================================================
# REQUEST MODELS (Client → Server)
# ============================================================================


class OpenRequest(BaseModel):
    """
    Body of POST /room/open.

    Attributes:
        lifetime_secs: Requested room lifetime; the server caps it at its own limit
        user_limits: Requested room capacity; the server caps it at its own limit
    """

    lifetime_secs: int | None = None
    user_limits: int | None = None


class JoinRequest(BaseModel):
    """Body of POST /room/{room_id}/join. The server assigns a user id if omitted."""

    user_id: str | None = None


class CreateRequest(BaseModel):
    """Body of POST /room/{room_id}/discussion/global/create."""

    title: str


class SpeakRequest(BaseModel):
    """Body of POST /room/{room_id}/discussion/global/speak."""

    discussion_id: str
    text: str


class ReplyRequest(BaseModel):
    """
    Body of POST /room/{room_id}/discussion/global/reply.

    Attributes:
        discussion_id: Discussion holding the message being replied to
        to: Id of the message being replied to
        text: Reply body
    """

    discussion_id: str
    to: str
    text: str


# ============================================================================
# RESPONSE MODELS (Server → Client)
# ============================================================================


class Opened(BaseModel):
    """Successful response of POST /room/open."""

    model_config = ConfigDict(extra="allow")

    room_id: str
    session_id: str
    user_id: str | None = None
    capacity: int | None = None


class Joined(BaseModel):
    """Successful response of POST /room/{room_id}/join."""

    model_config = ConfigDict(extra="allow")

    user_id: str
    session_id: str


class ErrorBody(BaseModel):
    """
    Common error body returned by the server on failed requests.

    Some error kinds carry additional fields (e.g. bundle size limits), which
    are kept as extras.
    """

    model_config = ConfigDict(extra="allow")

    error_type: str
    message: str
