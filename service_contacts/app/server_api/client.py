"""
HTTP client for the ContactsManager server API.
"""

from typing import Any, Dict, Mapping, Optional, Union

import httpx
from pydantic import ValidationError as PydanticValidationError

from shared.config import DEFAULT_TIMEOUT, DEFAULT_TOKEN_TTL, SERVER_BASE_URL
from shared.errors import ExternalServiceError, ValidationError
from shared.logging import get_logger
from ..models import CreateUserResponse, DeleteUserResponse, UserInfo, normalize_device_info
from .endpoints import get_server_endpoint


class ServerAPIError(ExternalServiceError):
    """Non-2xx response or network failure from the server API."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_data: Any = None,
    ):
        self.status_code = status_code
        self.response_data = response_data
        details: Dict[str, Any] = {"status_code": status_code}
        if response_data is not None:
            details["response"] = response_data
        super().__init__("contactsmanager", message, details)


def validate_user_info(user_info: Union[UserInfo, Mapping[str, Any]]) -> UserInfo:
    """Coerce ``user_info`` into a :class:`UserInfo` and enforce required fields."""
    if isinstance(user_info, Mapping):
        try:
            user_info = UserInfo.model_validate(dict(user_info))
        except PydanticValidationError as e:
            raise ValidationError(
                "user_info is invalid",
                details={"errors": [err["msg"] for err in e.errors()]}
            ) from e
    elif not isinstance(user_info, UserInfo):
        raise ValidationError("user_info is required and must be a UserInfo object")

    if not user_info.user_id or not user_info.user_id.strip():
        raise ValidationError("user_id is required and must be a non-empty string")
    if not user_info.full_name or not user_info.full_name.strip():
        raise ValidationError("full_name is required and must be a non-empty string")
    if not user_info.email and not user_info.phone:
        raise ValidationError("At least one of email or phone must be provided")

    return user_info


class ServerAPI:
    """Bearer-authenticated client for the server user endpoints."""

    def __init__(
        self,
        token: str,
        base_url: str = SERVER_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._transport = transport
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        self.logger = get_logger("contacts.server_api")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            headers=self.headers,
            transport=self._transport
        )

    async def create_user(
        self,
        uid: str,
        user_info: Union[UserInfo, Mapping[str, Any]],
        device_info: Optional[Mapping[str, Any]] = None,
        expiry_seconds: int = DEFAULT_TOKEN_TTL,
    ) -> CreateUserResponse:
        """Create or update a user; returns the server's token and user record."""
        user_info = validate_user_info(user_info)
        url = get_server_endpoint("create_user", self.base_url, uid=uid)

        payload: Dict[str, Any] = {
            "expiry_seconds": expiry_seconds,
            "user_info": user_info.model_dump(by_alias=True, exclude_none=True),
        }
        if device_info:
            payload["device_info"] = normalize_device_info(device_info)

        data = await self._request("POST", url, "create user", json=payload)
        result = self._parse(CreateUserResponse, data, "create user")
        self.logger.info("User created", user_id=uid, created=result.data.created)
        return result

    async def delete_user(self, uid: str) -> DeleteUserResponse:
        """Delete a user from the server."""
        url = get_server_endpoint("delete_user", self.base_url, uid=uid)
        data = await self._request("DELETE", url, "delete user")
        result = self._parse(DeleteUserResponse, data, "delete user")
        self.logger.info("User deleted", user_id=uid, deleted_contact_id=result.data.deleted_contact_id)
        return result

    @staticmethod
    def _parse(model, data: Any, action: str):
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            raise ServerAPIError(f"Unexpected response while trying to {action}", response_data=data) from e

    async def _request(self, method: str, url: str, action: str, **kwargs) -> Dict[str, Any]:
        try:
            async with self._client() as client:
                response = await client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            self.logger.error("Server API request error", action=action, error=str(e))
            raise ServerAPIError(f"Network error while trying to {action}: {e}") from e

        if response.is_success:
            try:
                return response.json()
            except ValueError as e:
                raise ServerAPIError(
                    f"Invalid response while trying to {action}",
                    response.status_code,
                    response.text
                ) from e

        try:
            error_data = response.json()
        except ValueError:
            error_data = response.text or None

        self.logger.warning(
            "Server API request failed",
            action=action,
            status_code=response.status_code
        )
        raise ServerAPIError(
            f"Failed to {action}: {response.status_code}",
            response.status_code,
            error_data
        )
