"""
Room API client package.

Re-exports the client, its exceptions and the request/response models so
callers can import everything from ``meltos_room.api``.
"""

from meltos_room.api.client import (
    APIError,
    RoomClient,
    SessionError,
    open_room,
    session_headers,
)
from meltos_room.api.models import (
    CreateRequest,
    ErrorBody,
    Joined,
    JoinRequest,
    Opened,
    OpenRequest,
    ReplyRequest,
    SessionConfigs,
    SpeakRequest,
)

__all__ = [
    "APIError",
    "CreateRequest",
    "ErrorBody",
    "JoinRequest",
    "Joined",
    "OpenRequest",
    "Opened",
    "ReplyRequest",
    "RoomClient",
    "SessionConfigs",
    "SessionError",
    "SpeakRequest",
    "open_room",
    "session_headers",
]
