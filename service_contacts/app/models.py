"""
Data models for the ContactsManager server SDK.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, SecretStr
from pydantic.alias_generators import to_camel

from shared.errors import ConfigurationError, ValidationError

# Device info maps string keys to JSON-compatible values; order is preserved.
DeviceInfo = Dict[str, Any]

_SCALAR_TYPES = (str, int, float, bool, type(None))


def _check_device_value(value: Any, path: str) -> None:
    if isinstance(value, _SCALAR_TYPES):
        return
    if isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            _check_device_value(item, f"{path}[{index}]")
        return
    if isinstance(value, Mapping):
        for key, item in value.items():
            if not isinstance(key, str):
                raise ValidationError(
                    "device_info keys must be strings",
                    details={"path": path}
                )
            _check_device_value(item, f"{path}.{key}")
        return
    raise ValidationError(
        f"Unsupported device_info value at {path}: {type(value).__name__}",
        details={"path": path}
    )


def normalize_device_info(device_info: Optional[Mapping[str, Any]]) -> DeviceInfo:
    """Validate device info and return it as a plain ordered dict."""
    if device_info is None:
        return {}
    if not isinstance(device_info, Mapping):
        raise ValidationError("device_info must be a mapping")
    _check_device_value(device_info, "device_info")
    return dict(device_info)


class ClientCredentials(BaseModel):
    """API credentials held for the lifetime of a client."""

    model_config = ConfigDict(frozen=True)

    api_key: str
    api_secret: SecretStr
    org_id: str

    def __init__(self, api_key: str, api_secret: Any, org_id: str, **kwargs):
        raw_secret = api_secret.get_secret_value() if isinstance(api_secret, SecretStr) else api_secret
        missing = [
            name
            for name, value in (("api_key", api_key), ("api_secret", raw_secret), ("org_id", org_id))
            if not isinstance(value, str) or not value
        ]
        if missing:
            raise ConfigurationError(
                "Missing required configuration: api_key, api_secret, and org_id are required",
                details={"missing": missing}
            )
        super().__init__(api_key=api_key, api_secret=api_secret, org_id=org_id, **kwargs)


class SignedToken(BaseModel):
    """A signed JWT and its absolute expiry in Unix seconds."""

    model_config = ConfigDict(frozen=True)

    token: str
    expires_at: int

    @property
    def expires_at_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.expires_at, tz=timezone.utc)


class VerifierConfig(BaseModel):
    """Immutable webhook verification settings."""

    model_config = ConfigDict(frozen=True)

    secret: SecretStr

    def __init__(self, secret: Any, **kwargs):
        raw_secret = secret.get_secret_value() if isinstance(secret, SecretStr) else secret
        if not isinstance(raw_secret, str) or not raw_secret:
            raise ValidationError("Webhook secret is required and must be a string")
        super().__init__(secret=secret, **kwargs)


class CamelModel(BaseModel):
    """Base for wire models that use camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class UserInfo(CamelModel):
    """User information sent when creating or updating a user."""

    user_id: str
    full_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class CMUser(CamelModel):
    """ContactsManager user as returned by the server API."""

    id: str
    organization_id: str
    organization_user_id: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    contact_metadata: Optional[Dict[str, Any]] = None
    is_active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class UserToken(BaseModel):
    model_config = ConfigDict(extra="allow")

    token: str
    expires_at: int


class CreateUserData(BaseModel):
    model_config = ConfigDict(extra="allow")

    token: UserToken
    user: CMUser
    created: bool


class CreateUserResponse(BaseModel):
    """Response of the create-user endpoint."""

    model_config = ConfigDict(extra="allow")

    status: str
    data: CreateUserData


class DeleteUserData(BaseModel):
    model_config = ConfigDict(extra="allow")

    deleted_contact_id: str


class DeleteUserResponse(BaseModel):
    """Response of the delete-user endpoint."""

    model_config = ConfigDict(extra="allow")

    status: str
    message: str
    data: DeleteUserData
