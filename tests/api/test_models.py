"""
Tests for the room API request/response models.
"""

import json

import pytest
from pydantic import ValidationError

from meltos_room.api.models import (
    ErrorBody,
    Joined,
    JoinRequest,
    Opened,
    OpenRequest,
    ReplyRequest,
    SessionConfigs,
)
from tests.constants import ROOM_ID, SESSION_ID


@pytest.mark.unit
class TestSessionConfigs:
    """Tests for the SessionConfigs dataclass."""

    def test_from_opened(self):
        opened = Opened(room_id=ROOM_ID, session_id=SESSION_ID, user_id="owner", capacity=10)

        configs = SessionConfigs.from_opened(opened)

        assert configs == SessionConfigs(room_id=ROOM_ID, session_id=SESSION_ID, user_id="owner")

    def test_from_joined(self):
        joined = Joined(user_id="guest1", session_id="s-2")

        configs = SessionConfigs.from_joined(ROOM_ID, joined)

        assert configs.room_id == ROOM_ID
        assert configs.session_id == "s-2"
        assert configs.user_id == "guest1"

    def test_dict_conversion(self):
        configs = SessionConfigs(room_id=ROOM_ID, session_id=SESSION_ID, user_id="owner")

        assert configs.to_dict() == {
            "room_id": ROOM_ID,
            "session_id": SESSION_ID,
            "user_id": "owner",
        }
        assert SessionConfigs.from_dict(configs.to_dict()) == configs

    def test_from_dict_without_user_id(self):
        configs = SessionConfigs.from_dict({"room_id": ROOM_ID, "session_id": SESSION_ID})

        assert configs.user_id is None

    @pytest.mark.parametrize(
        "data",
        [
            {"room_id": None, "session_id": SESSION_ID},
            {"room_id": ROOM_ID, "session_id": None},
            {"room_id": ROOM_ID, "session_id": SESSION_ID, "user_id": 7},
        ],
    )
    def test_from_dict_rejects_non_string_identifiers(self, data: dict):
        """Test null or numeric ids are rejected rather than stringified."""
        with pytest.raises(TypeError):
            SessionConfigs.from_dict(data)

    def test_is_frozen(self):
        configs = SessionConfigs(room_id=ROOM_ID, session_id=SESSION_ID)

        with pytest.raises(AttributeError):
            configs.room_id = "other"  # type: ignore[misc]


@pytest.mark.unit
class TestRequestModels:
    """Tests for request body serialization."""

    def test_open_request_omits_unset_fields(self):
        body = OpenRequest(user_limits=5)

        assert json.loads(body.model_dump_json(exclude_none=True)) == {"user_limits": 5}

    def test_join_request_defaults_to_server_assigned_user(self):
        assert JoinRequest().user_id is None

    def test_reply_request_field_names(self):
        body = ReplyRequest(discussion_id="d-1", to="m-3", text="agreed")

        assert body.model_dump() == {"discussion_id": "d-1", "to": "m-3", "text": "agreed"}


@pytest.mark.unit
class TestResponseModels:
    """Tests for response parsing."""

    def test_opened_keeps_unknown_fields(self):
        opened = Opened.model_validate(
            {"room_id": ROOM_ID, "session_id": SESSION_ID, "region": "ap-northeast-1"}
        )

        assert opened.user_id is None
        assert opened.model_extra == {"region": "ap-northeast-1"}

    def test_opened_requires_identifiers(self):
        with pytest.raises(ValidationError):
            Opened.model_validate({"room_id": ROOM_ID})

    def test_error_body_with_extra_fields(self):
        error = ErrorBody.model_validate(
            {
                "error_type": "ExceedBundleSize",
                "message": "bundle too large",
                "limit_bundle_size": 100,
                "actual_bundle_size": 200,
            }
        )

        assert error.error_type == "ExceedBundleSize"
        assert error.model_extra == {"limit_bundle_size": 100, "actual_bundle_size": 200}
