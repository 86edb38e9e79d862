"""
ContactsManager server SDK.

Server-side helpers for integrating with the ContactsManager API:

- app.client: ContactsManagerClient, the entrypoint most callers need.
- app.tokens: HS256 token issuance for end users.
- app.webhooks: Webhook signature verification.
- app.server_api: Async client for the server user endpoints.
- app.main: FastAPI service exposing token issuance and a webhook receiver.

Design notes:
- Keep the package import side-effects minimal; module import must not
  perform network calls.
- Token issuance and webhook verification are pure; only server_api
  performs IO.
- Use the shared/ utilities for logging, configuration, and errors.
"""

from .client import ContactsManagerClient
from .models import (
    ClientCredentials,
    CMUser,
    CreateUserResponse,
    DeleteUserResponse,
    DeviceInfo,
    SignedToken,
    UserInfo,
    VerifierConfig,
)
from .server_api import ServerAPI, ServerAPIError

__all__ = [
    "ClientCredentials",
    "CMUser",
    "ContactsManagerClient",
    "CreateUserResponse",
    "DeleteUserResponse",
    "DeviceInfo",
    "ServerAPI",
    "ServerAPIError",
    "SignedToken",
    "UserInfo",
    "VerifierConfig",
]
