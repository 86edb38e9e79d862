"""
ContactsManager client for server-side token generation and webhook checks.
"""

from typing import Any, Mapping, Optional, Union

import httpx

from shared.config import DEFAULT_TIMEOUT, DEFAULT_TOKEN_TTL, SERVER_BASE_URL, ContactsSettings
from shared.errors import ValidationError, WebhookSecretNotSetError
from shared.logging import get_logger
from .models import (
    ClientCredentials,
    CreateUserResponse,
    DeleteUserResponse,
    SignedToken,
    UserInfo,
    VerifierConfig,
)
from .server_api import ServerAPI, validate_user_info
from .tokens import TokenIssuer
from .webhooks import WebhookVerifier


class ContactsManagerClient:
    """Issues user tokens, proxies user management, and verifies webhooks.

    Credentials are fixed at construction. The webhook secret is optional
    and can be set later with :meth:`set_webhook_secret`; replacing it
    while another thread is verifying a webhook is not supported.
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        org_id: str,
        *,
        base_url: str = SERVER_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        default_expiration_seconds: int = DEFAULT_TOKEN_TTL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.credentials = ClientCredentials(api_key=api_key, api_secret=api_secret, org_id=org_id)
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport
        self.issuer = TokenIssuer(self.credentials, default_expiration_seconds)
        self._verifier: Optional[WebhookVerifier] = None
        self.logger = get_logger("contacts.client")

    @classmethod
    def from_settings(
        cls,
        settings: ContactsSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ContactsManagerClient":
        """Build a client from environment-backed settings."""
        client = cls(
            settings.api_key,
            settings.api_secret.get_secret_value(),
            settings.org_id,
            base_url=settings.base_url,
            timeout=settings.timeout,
            default_expiration_seconds=settings.token_ttl,
            transport=transport,
        )
        if settings.webhook_secret is not None and settings.webhook_secret.get_secret_value():
            client.set_webhook_secret(settings.webhook_secret.get_secret_value())
        return client

    def __repr__(self) -> str:
        return f"ContactsManagerClient(api_key={self.credentials.api_key!r}, org_id={self.credentials.org_id!r})"

    def generate_token(
        self,
        user_id: str,
        device_info: Optional[Mapping[str, Any]] = None,
        expiration_seconds: Optional[int] = None,
    ) -> SignedToken:
        """Generate a signed token for a user."""
        return self.issuer.issue_token(user_id, device_info, expiration_seconds)

    def _server_api(self, token: SignedToken) -> ServerAPI:
        return ServerAPI(
            token.token,
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport
        )

    async def create_user(
        self,
        user_info: Union[UserInfo, Mapping[str, Any]],
        device_info: Optional[Mapping[str, Any]] = None,
        expiry_seconds: int = DEFAULT_TOKEN_TTL,
    ) -> CreateUserResponse:
        """Create or update a user on the server.

        A token for the user is minted first and used as the bearer
        credential for the call.
        """
        user_info = validate_user_info(user_info)
        token = self.generate_token(
            user_info.user_id,
            device_info=device_info,
            expiration_seconds=expiry_seconds
        )
        return await self._server_api(token).create_user(
            user_info.user_id,
            user_info,
            device_info,
            expiry_seconds
        )

    async def delete_user(self, uid: str) -> DeleteUserResponse:
        """Delete a user from the server."""
        if not isinstance(uid, str) or not uid:
            raise ValidationError("User ID is required and must be a string")

        token = self.generate_token(uid)
        return await self._server_api(token).delete_user(uid)

    def set_webhook_secret(self, secret: str) -> None:
        """Set the webhook secret from the dashboard."""
        if self._verifier is not None:
            self.logger.warning("Replacing webhook secret")
        self._verifier = WebhookVerifier(VerifierConfig(secret=secret))

    @property
    def webhook_verifier(self) -> WebhookVerifier:
        if self._verifier is None:
            raise WebhookSecretNotSetError()
        return self._verifier

    def verify_webhook_signature(self, payload: Any, signature: str) -> bool:
        """Verify the ``X-Webhook-Signature`` header of a webhook request."""
        return self.webhook_verifier.verify(payload, signature)
