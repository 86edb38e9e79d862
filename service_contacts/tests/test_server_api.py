"""
Unit tests for the server API client.
"""

import json

import httpx
import pytest

from service_contacts.app.models import UserInfo
from service_contacts.app.server_api import ServerAPI, ServerAPIError, get_server_endpoint, validate_user_info
from shared.errors import ValidationError


CREATE_RESPONSE = {
    "status": "success",
    "data": {
        "token": {"token": "server-token", "expires_at": 1700086400},
        "user": {
            "id": "contact-1",
            "organizationId": "test-org-id",
            "organizationUserId": "user-1",
            "email": "user@example.com",
            "fullName": "Test User",
            "isActive": True,
        },
        "created": True,
    },
}

DELETE_RESPONSE = {
    "status": "success",
    "message": "User deleted",
    "data": {"deleted_contact_id": "contact-1"},
}


class RecordingTransport:
    """Collects requests and replies with a fixed response."""

    def __init__(self, status_code=200, json_body=None, text=None, error=None):
        self.requests = []
        self.status_code = status_code
        self.json_body = json_body
        self.text = text
        self.error = error
        self.transport = httpx.MockTransport(self._handler)

    def _handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.json_body)


@pytest.fixture
def user_info():
    return UserInfo(user_id="user-1", full_name="Test User", email="user@example.com")


class TestEndpoints:
    """Test cases for endpoint formatting."""

    def test_create_user_endpoint(self):
        assert get_server_endpoint("create_user", uid="user-1") == (
            "https://api.contactsmanager.io/api/v1/server/users/user-1"
        )

    def test_uid_is_quoted(self):
        url = get_server_endpoint("delete_user", "http://localhost:9000/", uid="a/b c")
        assert url == "http://localhost:9000/api/v1/server/users/a%2Fb%20c"

    def test_unknown_endpoint(self):
        with pytest.raises(ValueError):
            get_server_endpoint("list_users")


class TestValidateUserInfo:
    """Test cases for user info validation."""

    def test_accepts_camel_case_mapping(self):
        info = validate_user_info({"userId": "u", "fullName": "Name", "phone": "+1555"})
        assert info.user_id == "u"
        assert info.phone == "+1555"

    def test_accepts_snake_case_mapping(self):
        info = validate_user_info({"user_id": "u", "full_name": "Name", "email": "a@b.c"})
        assert info.full_name == "Name"

    @pytest.mark.parametrize(
        "data, message",
        [
            ({"userId": " ", "fullName": "Name", "email": "a@b.c"}, "user_id is required"),
            ({"userId": "u", "fullName": "", "email": "a@b.c"}, "full_name is required"),
            ({"userId": "u", "fullName": "Name"}, "At least one of email or phone"),
        ],
    )
    def test_rejects_invalid(self, data, message):
        with pytest.raises(ValidationError) as exc_info:
            validate_user_info(data)
        assert message in exc_info.value.message

    def test_rejects_missing_fields(self):
        with pytest.raises(ValidationError):
            validate_user_info({"email": "a@b.c"})

    def test_rejects_non_mapping(self):
        with pytest.raises(ValidationError):
            validate_user_info("user-1")


class TestServerAPI:
    """Test cases for ServerAPI."""

    @pytest.mark.asyncio
    async def test_create_user_request(self, user_info):
        recorder = RecordingTransport(json_body=CREATE_RESPONSE)
        api = ServerAPI("jwt-token", transport=recorder.transport)

        result = await api.create_user("user-1", user_info, {"os": "iOS"}, 3600)

        request = recorder.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.contactsmanager.io/api/v1/server/users/user-1"
        assert request.headers["Authorization"] == "Bearer jwt-token"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {
            "expiry_seconds": 3600,
            "user_info": {"userId": "user-1", "fullName": "Test User", "email": "user@example.com"},
            "device_info": {"os": "iOS"},
        }

        assert result.status == "success"
        assert result.data.created is True
        assert result.data.token.token == "server-token"
        assert result.data.user.organization_id == "test-org-id"

    @pytest.mark.asyncio
    async def test_create_user_omits_empty_device_info(self, user_info):
        recorder = RecordingTransport(json_body=CREATE_RESPONSE)
        api = ServerAPI("jwt-token", transport=recorder.transport)

        await api.create_user("user-1", user_info)

        body = json.loads(recorder.requests[0].content)
        assert "device_info" not in body
        assert body["expiry_seconds"] == 86400

    @pytest.mark.asyncio
    async def test_create_user_validates_before_request(self):
        recorder = RecordingTransport(json_body=CREATE_RESPONSE)
        api = ServerAPI("jwt-token", transport=recorder.transport)

        with pytest.raises(ValidationError):
            await api.create_user("user-1", {"userId": "user-1", "fullName": "Name"})
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_delete_user(self):
        recorder = RecordingTransport(json_body=DELETE_RESPONSE)
        api = ServerAPI("jwt-token", base_url="http://localhost:9000", transport=recorder.transport)

        result = await api.delete_user("user-1")

        request = recorder.requests[0]
        assert request.method == "DELETE"
        assert str(request.url) == "http://localhost:9000/api/v1/server/users/user-1"
        assert request.headers["Authorization"] == "Bearer jwt-token"
        assert result.data.deleted_contact_id == "contact-1"
        assert result.message == "User deleted"

    @pytest.mark.asyncio
    async def test_error_with_json_body(self, user_info):
        recorder = RecordingTransport(status_code=403, json_body={"detail": "forbidden"})
        api = ServerAPI("jwt-token", transport=recorder.transport)

        with pytest.raises(ServerAPIError) as exc_info:
            await api.create_user("user-1", user_info)

        assert exc_info.value.status_code == 403
        assert exc_info.value.response_data == {"detail": "forbidden"}
        assert "Failed to create user: 403" in exc_info.value.message
        assert exc_info.value.code == "EXTERNAL_SERVICE_ERROR"

    @pytest.mark.asyncio
    async def test_error_with_raw_body(self):
        recorder = RecordingTransport(status_code=500, text="upstream exploded")
        api = ServerAPI("jwt-token", transport=recorder.transport)

        with pytest.raises(ServerAPIError) as exc_info:
            await api.delete_user("user-1")

        assert exc_info.value.status_code == 500
        assert exc_info.value.response_data == "upstream exploded"

    @pytest.mark.asyncio
    async def test_network_error(self):
        recorder = RecordingTransport(error=httpx.ConnectError("connection refused"))
        api = ServerAPI("jwt-token", transport=recorder.transport)

        with pytest.raises(ServerAPIError) as exc_info:
            await api.delete_user("user-1")

        assert exc_info.value.status_code is None
        assert "Network error" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_unexpected_response_shape(self):
        recorder = RecordingTransport(json_body={"status": "success"})
        api = ServerAPI("jwt-token", transport=recorder.transport)

        with pytest.raises(ServerAPIError) as exc_info:
            await api.delete_user("user-1")

        assert exc_info.value.response_data == {"status": "success"}
