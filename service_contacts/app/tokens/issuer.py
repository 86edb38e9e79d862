"""
Token issuance for ContactsManager end users.
"""

import time
import uuid
from typing import Any, Callable, Dict, Mapping, Optional

import jwt

from shared.config import DEFAULT_TOKEN_TTL
from shared.errors import SigningError, ValidationError
from shared.logging import get_logger
from ..models import ClientCredentials, SignedToken, normalize_device_info

ALGORITHM = "HS256"


class TokenIssuer:
    """Mints HS256 tokens that authorize a single user against the API."""

    def __init__(
        self,
        credentials: ClientCredentials,
        default_expiration_seconds: int = DEFAULT_TOKEN_TTL,
        clock: Callable[[], float] = time.time,
    ):
        self.credentials = credentials
        self.default_expiration_seconds = default_expiration_seconds
        self._clock = clock
        self.logger = get_logger("contacts.tokens")

    def build_claims(
        self,
        user_id: str,
        device_info: Optional[Mapping[str, Any]] = None,
        expiration_seconds: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Assemble the claim set for a user; a fresh jti is drawn on every call."""
        if not isinstance(user_id, str) or not user_id:
            raise ValidationError("user_id is required")

        if expiration_seconds is None:
            expiration_seconds = self.default_expiration_seconds
        if (
            isinstance(expiration_seconds, bool)
            or not isinstance(expiration_seconds, int)
            or expiration_seconds <= 0
        ):
            raise ValidationError(
                "expiration_seconds must be a positive integer",
                details={"expiration_seconds": repr(expiration_seconds)}
            )

        device = normalize_device_info(device_info)
        now = int(self._clock())

        return {
            "user_id": user_id,
            "api_key": self.credentials.api_key,
            "org_id": self.credentials.org_id,
            "device": device,
            "jti": str(uuid.uuid4()),
            "iat": now,
            "exp": now + expiration_seconds,
        }

    def issue_token(
        self,
        user_id: str,
        device_info: Optional[Mapping[str, Any]] = None,
        expiration_seconds: Optional[int] = None,
    ) -> SignedToken:
        """Sign a token for ``user_id`` and return it with its absolute expiry."""
        claims = self.build_claims(user_id, device_info, expiration_seconds)

        try:
            token = jwt.encode(
                claims,
                self.credentials.api_secret.get_secret_value(),
                algorithm=ALGORITHM
            )
        except Exception as e:
            self.logger.error("Token signing failed", user_id=user_id, error=str(e))
            raise SigningError(
                f"Failed to generate token: {e}",
                details={"user_id": user_id}
            ) from e

        self.logger.debug(
            "Token issued",
            user_id=user_id,
            jti=claims["jti"],
            exp=claims["exp"]
        )
        return SignedToken(token=token, expires_at=claims["exp"])


def decode_token(token: str, secret: str, verify_exp: bool = True) -> Dict[str, Any]:
    """Decode and validate a token minted by :class:`TokenIssuer`."""
    return jwt.decode(
        token,
        secret,
        algorithms=[ALGORITHM],
        options={"verify_exp": verify_exp, "require": ["exp", "iat", "jti"]}
    )
