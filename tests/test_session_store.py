"""
Tests for the session store module.
"""

import json
import os
import sys
from pathlib import Path

import pytest

from meltos_room.api.models import SessionConfigs
from meltos_room.session_store import (
    SessionStoreError,
    clear_session,
    load_session,
    save_session,
)


@pytest.mark.unit
def test_save_then_load(tmp_path: Path, session: SessionConfigs):
    """Test a saved session is read back unchanged."""
    path = tmp_path / "configs.json"

    written = save_session(session, path)

    assert written == path
    assert load_session(path) == session


@pytest.mark.unit
def test_save_writes_json(tmp_path: Path, session: SessionConfigs):
    path = tmp_path / "configs.json"

    save_session(session, path)

    assert json.loads(path.read_text(encoding="utf-8")) == session.to_dict()


@pytest.mark.unit
def test_save_creates_parent_directories(tmp_path: Path, session: SessionConfigs):
    path = tmp_path / "nested" / "dir" / "configs.json"

    save_session(session, path)

    assert path.exists()


@pytest.mark.unit
@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
def test_save_restricts_permissions(tmp_path: Path, session: SessionConfigs):
    path = tmp_path / "configs.json"

    save_session(session, path)

    assert os.stat(path).st_mode & 0o777 == 0o600


@pytest.mark.unit
@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
def test_save_tightens_existing_file_permissions(tmp_path: Path, session: SessionConfigs):
    """Test overwriting a world-readable file leaves it owner-only."""
    path = tmp_path / "configs.json"
    path.write_text("{}", encoding="utf-8")
    os.chmod(path, 0o644)

    save_session(session, path)

    assert os.stat(path).st_mode & 0o777 == 0o600
    assert load_session(path) == session


@pytest.mark.unit
def test_save_to_directory_raises(tmp_path: Path, session: SessionConfigs):
    with pytest.raises(SessionStoreError, match="Cannot write session file"):
        save_session(session, tmp_path)


@pytest.mark.unit
def test_load_missing_file(tmp_path: Path):
    with pytest.raises(SessionStoreError, match="No session file"):
        load_session(tmp_path / "missing.json")


@pytest.mark.unit
def test_load_directory_raises(tmp_path: Path):
    with pytest.raises(SessionStoreError, match="Cannot read session file"):
        load_session(tmp_path)


@pytest.mark.unit
@pytest.mark.parametrize(
    "content",
    [
        "not json",
        "[1, 2]",
        '{"room_id": "r"}',
        '"just a string"',
        '{"room_id": null, "session_id": "s"}',
        '{"room_id": "r", "session_id": 42}',
        '{"room_id": "r", "session_id": "s", "user_id": 5}',
    ],
)
def test_load_malformed_file(tmp_path: Path, content: str):
    path = tmp_path / "configs.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(SessionStoreError, match="Malformed session file"):
        load_session(path)


@pytest.mark.unit
def test_clear_session(tmp_path: Path, session: SessionConfigs):
    path = save_session(session, tmp_path / "configs.json")

    assert clear_session(path) is True
    assert not path.exists()
    assert clear_session(path) is False
