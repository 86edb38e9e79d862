"""
Webhook receiver and token service for ContactsManager integrations.
"""

import hmac
import json
from typing import Any, Dict, Optional

from fastapi import Header, Request
from pydantic import BaseModel, Field

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import AuthenticationError, ValidationError
from shared.logging import set_user_context
from .client import ContactsManagerClient
from .webhooks import SIGNATURE_HEADER

SERVICE_TOKEN_HEADER = "X-Service-Token"


class TokenRequest(BaseModel):
    """Request model for token issuance."""
    user_id: str
    device_info: Dict[str, Any] = Field(default_factory=dict)
    expiration_seconds: Optional[int] = None


class TokenResponse(BaseModel):
    """Response model for token issuance."""
    token: str
    expires_at: int
    token_type: str = "Bearer"


class ContactsService(BaseService):
    """Issues user tokens and accepts signed ContactsManager webhooks."""

    def __init__(self, config: Optional[ServiceConfig] = None, client: Optional[ContactsManagerClient] = None):
        super().__init__("contacts", 8020, config)
        self.client = client or ContactsManagerClient.from_settings(self.config)
        self._setup_contacts_routes()

    def _setup_contacts_routes(self):
        """Set up token and webhook routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "contacts",
                "message": "ContactsManager - Token and Webhook Service",
                "version": "1.0.0"
            }

        @self.app.post("/tokens", response_model=TokenResponse)
        async def issue_token(
            request: TokenRequest,
            service_token: Optional[str] = Header(default=None, alias=SERVICE_TOKEN_HEADER),
        ):
            """Mint a token for an end user. Only trusted backends may call this."""
            self._authenticate_caller(service_token)

            max_ttl = self.config.max_token_ttl
            if request.expiration_seconds is not None and request.expiration_seconds > max_ttl:
                raise ValidationError(
                    "expiration_seconds exceeds the allowed maximum",
                    details={"max_token_ttl": max_ttl}
                )

            set_user_context(user_id=request.user_id, org_id=self.client.credentials.org_id)
            signed = self.client.generate_token(
                request.user_id,
                device_info=request.device_info,
                expiration_seconds=request.expiration_seconds
            )
            return TokenResponse(token=signed.token, expires_at=signed.expires_at)

        @self.app.post("/webhooks")
        async def receive_webhook(
            request: Request,
            signature: Optional[str] = Header(default=None, alias=SIGNATURE_HEADER),
        ):
            """Accept a webhook only if its signature verifies."""
            if not signature:
                raise AuthenticationError("Missing webhook signature")

            body = await request.body()
            try:
                raw_payload = body.decode("utf-8")
            except UnicodeDecodeError:
                raise ValidationError("Webhook body must be UTF-8") from None

            if not self.client.verify_webhook_signature(raw_payload, signature):
                raise AuthenticationError("Invalid webhook signature")

            try:
                event = json.loads(raw_payload) if raw_payload else {}
            except ValueError:
                raise ValidationError("Webhook body must be JSON") from None

            event_type = event.get("event") if isinstance(event, dict) else None
            self.logger.info("Webhook accepted", event_type=event_type)
            return {"received": True, "event": event_type}

    def _authenticate_caller(self, presented: Optional[str]):
        """Require the configured service token on token issuance."""
        expected = self.config.service_token
        if expected is None or not expected.get_secret_value():
            self.logger.warning("Token issuance refused: no service token configured")
            raise AuthenticationError("Token issuance is disabled")

        if not presented or not hmac.compare_digest(
            presented.encode("utf-8"),
            expected.get_secret_value().encode("utf-8")
        ):
            raise AuthenticationError("Invalid service token")


def create_app(config: Optional[ServiceConfig] = None, client: Optional[ContactsManagerClient] = None):
    """Create the FastAPI application."""
    return ContactsService(config, client).app


if __name__ == "__main__":  # pragma: no cover - cli entry point
    ContactsService().run()
