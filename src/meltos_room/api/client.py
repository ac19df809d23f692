"""
HTTP API client for meltos rooms.

This module provides an async HTTP client for the room/discussion REST API of
a meltos server. Each method issues exactly one request and hands the parsed
JSON body back to the caller unchanged; the only local state is the session
identity the server assigned when the room was opened or joined.

The client is designed to be used as an async context manager to ensure
proper resource cleanup:

    client = await RoomClient.open(config)
    async with client:
        created = await client.create("Design review")
        await client.speak(created["meta"]["id"], "hello")
        await client.leave()

Key Features:
    - Async HTTP requests using httpx
    - Session identifiers echoed back on every room request
    - Non-2xx responses raised as APIError instead of parsed as success
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx
from pydantic import BaseModel

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
from meltos_room.config import Config

logger = logging.getLogger(__name__)

# The server reads the session from a request header literally named
# "set-cookie"; it must be sent as-is to stay wire compatible.
SESSION_HEADER = "set-cookie"
CONTENT_TYPE_HEADERS = {"content-type": "application/json"}


def session_headers(session_id: str) -> dict[str, str]:
    """Return the header pair attached to every session-scoped request."""
    return {**CONTENT_TYPE_HEADERS, SESSION_HEADER: f"session_id={session_id}"}


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================


@dataclass
class APIError(Exception):
    """
    Exception raised when a room API request fails.

    Raised for transport failures (status_code 0), for any non-2xx response,
    and for 2xx responses whose body is not valid JSON.

    Attributes:
        message: Human-readable summary of the failed operation.
        status_code: HTTP status code from the response, 0 if none was received.
        detail: Server-provided message, or the raw body / transport error.
        error_type: The server's error_type, if the body carried one.

    Example:
        try:
            await client.sync()
        except APIError as e:
            print(f"API error {e.status_code}: {e}")
    """

    message: str
    status_code: int = 0
    detail: str = ""
    error_type: str = ""

    def __str__(self) -> str:
        """Return a formatted error message."""
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message


class SessionError(APIError):
    """
    Exception raised when the server rejects the session.

    This covers an invalid or expired session id (401) and requests the
    session is not permitted to make (403).
    """

    pass


# =============================================================================
# REQUEST HELPERS
# =============================================================================


def _encode_body(body: Any) -> str:
    """Serialize a request body; strings are assumed to be JSON already."""
    if body is None:
        return "{}"
    if isinstance(body, str):
        return body
    if isinstance(body, BaseModel):
        return body.model_dump_json(exclude_none=True)
    return json.dumps(body)


def _raise_for_status(response: httpx.Response, action: str) -> None:
    """
    Raise APIError (or SessionError) for a non-2xx response.

    The body is only read on failure, to recover the server's error detail.
    """
    if response.is_success:
        return

    error_type = ""
    try:
        error = ErrorBody.model_validate(response.json())
        detail = error.message
        error_type = error.error_type
    except ValueError:
        detail = response.text or response.reason_phrase

    logger.warning("%s failed: HTTP %s %s", action, response.status_code, error_type)

    error_class = SessionError if response.status_code in (401, 403) else APIError
    raise error_class(
        message=f"{action} failed",
        status_code=response.status_code,
        detail=detail,
        error_type=error_type,
    )


def _parse_json(response: httpx.Response, action: str) -> Any:
    """Parse a successful response body, raising APIError if it is not JSON."""
    try:
        return response.json()
    except ValueError as e:
        raise APIError(
            message=f"{action} failed",
            status_code=response.status_code,
            detail=f"Server returned invalid JSON (status {response.status_code})",
        ) from e


async def _send(
    http_client: httpx.AsyncClient,
    method: str,
    url: str,
    action: str,
    **kwargs: Any,
) -> httpx.Response:
    """Issue one request, wrapping transport failures and checking the status."""
    logger.debug("%s %s", method, url)
    try:
        response = await http_client.request(method, url, **kwargs)
    except httpx.HTTPError as e:
        raise APIError(
            message=f"{action} failed",
            status_code=0,
            detail=f"Cannot reach server at {url}: {e}",
        ) from e

    _raise_for_status(response, action)
    return response


# =============================================================================
# BOOTSTRAP
# =============================================================================


async def open_room(body: Any = None, *, config: Config | None = None) -> str:
    """
    Ask the server to open a new room and return the raw response text.

    This is the bootstrap call usable without a client. The response is not
    parsed; use RoomClient.open to get a ready client instead.

    Args:
        body: Opening payload: an OpenRequest, a dict, a pre-encoded JSON
              string, or None for an empty object.
        config: Connection settings; defaults to the environment.

    Returns:
        str: The response body, expected to hold room_id and session_id.

    Raises:
        APIError: If the server cannot be reached or rejects the request.
    """
    config = config or Config.from_env()
    async with httpx.AsyncClient(timeout=config.timeout) as http_client:
        response = await _send(
            http_client,
            "POST",
            f"{config.server_url}/room/open",
            "Open room",
            content=_encode_body(body),
            headers=CONTENT_TYPE_HEADERS,
        )
    return response.text


# =============================================================================
# API CLIENT
# =============================================================================


@dataclass
class RoomClient:
    """
    Async HTTP client bound to one room session.

    The session identifiers are fixed for the lifetime of the client. Calling
    leave() ends the session on the server but does not invalidate the object.

    Attributes:
        config: Connection settings (server URL, timeout).
        session: Identifiers assigned by the server on open or join.

    Example:
        client = await RoomClient.join(config, "room-123")
        async with client:
            state = await client.sync()
    """

    config: Config
    session: SessionConfigs

    # Private attributes for the HTTP client
    _http_client: httpx.AsyncClient | None = field(default=None, repr=False)

    # -------------------------------------------------------------------------
    # Context Manager Protocol
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> RoomClient:
        """Create the underlying httpx.AsyncClient with the configured timeout."""
        self._http_client = httpx.AsyncClient(timeout=self.config.timeout)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Close the underlying HTTP client connection pool."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    @property
    def http_client(self) -> httpx.AsyncClient:
        """
        Get the HTTP client, ensuring it's been initialized.

        Raises:
            RuntimeError: If accessed outside of async context manager.
        """
        if self._http_client is None:
            raise RuntimeError(
                "RoomClient must be used as an async context manager. "
                "Use 'async with client:' before issuing requests"
            )
        return self._http_client

    @property
    def room_id(self) -> str:
        return self.session.room_id

    @property
    def session_id(self) -> str:
        return self.session.session_id

    # -------------------------------------------------------------------------
    # Session Bootstrap
    # -------------------------------------------------------------------------

    @classmethod
    async def open(
        cls,
        config: Config,
        body: OpenRequest | dict[str, Any] | None = None,
    ) -> RoomClient:
        """
        Open a new room and return a client bound to its owner session.

        Args:
            config: Connection settings.
            body: Optional opening payload (lifetime, capacity).

        Raises:
            APIError: If the request fails or the response lacks room/session ids.
        """
        text = await open_room(body, config=config)
        try:
            opened = Opened.model_validate_json(text)
        except ValueError as e:
            raise APIError(
                message="Open room failed",
                detail="Server response did not contain room_id and session_id",
            ) from e

        logger.info("Opened room %s", opened.room_id)
        return cls(config=config, session=SessionConfigs.from_opened(opened))

    @classmethod
    async def join(cls, config: Config, room_id: str, user_id: str | None = None) -> RoomClient:
        """
        Join an existing room and return a client bound to the new session.

        Args:
            config: Connection settings.
            room_id: Room to join.
            user_id: Requested user id; the server assigns one if omitted.

        Raises:
            APIError: If the request fails or the response lacks a session id.
        """
        async with httpx.AsyncClient(timeout=config.timeout) as http_client:
            response = await _send(
                http_client,
                "POST",
                f"{config.server_url}/room/{room_id}/join",
                "Join room",
                content=_encode_body(JoinRequest(user_id=user_id)),
                headers=CONTENT_TYPE_HEADERS,
            )
        data = _parse_json(response, "Join room")
        try:
            joined = Joined.model_validate(data)
        except ValueError as e:
            raise APIError(
                message="Join room failed",
                status_code=response.status_code,
                detail="Server response did not contain user_id and session_id",
            ) from e

        logger.info("Joined room %s as %s", room_id, joined.user_id)
        return cls(config=config, session=SessionConfigs.from_joined(room_id, joined))

    # -------------------------------------------------------------------------
    # Room Operations
    # -------------------------------------------------------------------------

    def api_uri(self, subpath: str | None = None) -> str:
        """
        Build the URL of the room resource or one of its sub-resources.

        Example:
            client.api_uri()         # {base}/room/{room_id}
            client.api_uri("join")   # {base}/room/{room_id}/join
        """
        base = f"{self.config.server_url}/room/{self.room_id}"
        if subpath:
            return f"{base}/{subpath}"
        return base

    async def _request_json(
        self,
        method: str,
        subpath: str | None,
        action: str,
        body: BaseModel | None = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        response = await _send(
            self.http_client,
            method,
            self.api_uri(subpath),
            action,
            content=_encode_body(body) if body is not None else None,
            params=params,
            headers=session_headers(self.session_id),
        )
        return _parse_json(response, action)

    async def sync(self) -> Any:
        """
        Fetch the current room state.

        Returns:
            The parsed JSON body, as the server sent it.

        Raises:
            SessionError: If the session is rejected.
            APIError: If the request fails or the body is not JSON.
        """
        return await self._request_json("GET", None, "Sync room")

    async def create(self, title: str) -> Any:
        """
        Create a global discussion in the room.

        Returns:
            The parsed JSON body, normally describing the new discussion.
        """
        return await self._request_json(
            "POST",
            "discussion/global/create",
            "Create discussion",
            body=CreateRequest(title=title),
        )

    async def speak(self, discussion_id: str, message: str) -> Any:
        """Post a message to a discussion and return the parsed JSON body."""
        return await self._request_json(
            "POST",
            "discussion/global/speak",
            "Speak",
            body=SpeakRequest(discussion_id=discussion_id, text=message),
        )

    async def reply(self, discussion_id: str, to: str, message: str) -> Any:
        """
        Reply to a message in a discussion.

        Args:
            discussion_id: Discussion holding the target message.
            to: Id of the message being replied to.
            message: Reply text.
        """
        return await self._request_json(
            "POST",
            "discussion/global/reply",
            "Reply",
            body=ReplyRequest(discussion_id=discussion_id, to=to, text=message),
        )

    async def close(self, discussion_id: str) -> Any:
        """Close a discussion and return the parsed JSON body."""
        return await self._request_json(
            "DELETE",
            "discussion/global/close",
            "Close discussion",
            params={"discussion_id": discussion_id},
        )

    async def leave(self) -> None:
        """
        Leave the room.

        The response body is never read on success. The client stays usable
        afterwards; the server decides what later requests get.
        """
        await _send(
            self.http_client,
            "DELETE",
            self.api_uri(),
            "Leave room",
            headers=session_headers(self.session_id),
        )
        logger.info("Left room %s", self.room_id)
