"""
Shared pytest fixtures for the meltos room client test suite.

This module provides fixtures that are automatically available to all test files:
- A Config pointing at the mocked test server
- A SessionConfigs for an already-opened room
- A RoomClient entered as an async context manager
"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from meltos_room.api.client import RoomClient
from meltos_room.api.models import SessionConfigs
from meltos_room.config import Config
from tests.constants import ROOM_ID, SERVER_URL, SESSION_ID, USER_ID


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Create a test configuration with the session file under tmp_path."""
    return Config(server_url=SERVER_URL, timeout=5.0, session_file=tmp_path / "room_configs.json")


@pytest.fixture
def session() -> SessionConfigs:
    """Session identifiers of an opened room."""
    return SessionConfigs(room_id=ROOM_ID, session_id=SESSION_ID, user_id=USER_ID)


@pytest.fixture
async def client(config: Config, session: SessionConfigs) -> AsyncGenerator[RoomClient, None]:
    """Create a room client bound to the test session."""
    async with RoomClient(config=config, session=session) as client:
        yield client
