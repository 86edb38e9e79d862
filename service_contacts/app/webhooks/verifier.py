"""
Webhook signature verification.

Webhooks sent by ContactsManager carry an ``X-Webhook-Signature`` header of
the form ``t=<unix_seconds>,v1=<hex_hmac_sha256>``. The signature is the
HMAC-SHA256 of ``"{t}.{payload}"`` keyed with the webhook secret, where the
payload is the raw body, or its compact JSON form when a parsed object is
supplied.

Verification fails closed: every problem (malformed header, stale
timestamp, mismatch, unexpected error) yields ``False``. The internal
:class:`VerificationOutcome` only feeds logging and is never returned to
callers, so rejected requests learn nothing about why. A missing secret is
the one exception: it is a configuration fault and raises
:class:`~shared.errors.WebhookSecretNotSetError`.
"""

import hashlib
import hmac
import json
import time
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from shared.errors import WebhookSecretNotSetError
from shared.logging import get_logger
from ..models import VerifierConfig

SIGNATURE_HEADER = "X-Webhook-Signature"
TOLERANCE_SECONDS = 900  # 15 minutes

logger = get_logger("contacts.webhooks")


class VerificationOutcome(str, Enum):
    VALID = "valid"
    MALFORMED_HEADER = "malformed_header"
    STALE = "stale"
    MISMATCH = "mismatch"
    ERROR = "error"


class MalformedSignatureHeader(ValueError):
    """Signature header is missing ``t`` or ``v1``."""


def parse_signature_header(signature_header: str) -> Tuple[str, int, str]:
    """Return ``(raw_timestamp, timestamp, v1)`` from a signature header.

    The raw ``t`` text is what the sender signed; the integer is only used
    for the freshness check.
    """
    components: Dict[str, str] = {}
    for part in signature_header.split(","):
        key, sep, value = part.strip().partition("=")
        if sep:
            components[key] = value

    timestamp = components.get("t")
    provided = components.get("v1")
    if not timestamp or not provided:
        raise MalformedSignatureHeader("signature header requires t and v1")

    if not (timestamp.isascii() and timestamp.isdigit()):
        raise MalformedSignatureHeader("timestamp is not an integer")

    return timestamp, int(timestamp), provided


def canonical_payload(payload: Any) -> str:
    """Strings pass through verbatim; other values become compact JSON.

    Prefer the raw request body: a parsed object only reproduces the
    sender's bytes when serialization agrees, and floats do not (``1.0``
    stays ``1.0`` here). NaN and infinities are rejected.
    """
    if isinstance(payload, str):
        return payload
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload).decode("utf-8")
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def compute_signature(secret: str, payload: Any, timestamp: Union[int, str]) -> str:
    """Hex HMAC-SHA256 of ``"{timestamp}.{payload}"``."""
    signed_payload = f"{timestamp}.{canonical_payload(payload)}"
    return hmac.new(
        secret.encode("utf-8"),
        signed_payload.encode("utf-8"),
        hashlib.sha256
    ).hexdigest()


def build_signature_header(secret: str, payload: Any, timestamp: Optional[int] = None) -> str:
    """Produce a signature header as the sending side would."""
    if timestamp is None:
        timestamp = int(time.time())
    return f"t={timestamp},v1={compute_signature(secret, payload, timestamp)}"


def check_signature(
    secret: str,
    payload: Any,
    signature_header: str,
    now: Optional[int] = None,
) -> VerificationOutcome:
    """Classify a signature.

    Raises :class:`WebhookSecretNotSetError` when no secret is configured;
    every other problem is reported as an outcome.
    """
    if not isinstance(secret, str) or not secret:
        raise WebhookSecretNotSetError()

    try:
        raw_timestamp, timestamp, provided = parse_signature_header(signature_header)

        current_time = int(time.time()) if now is None else int(now)
        # Only the past is bounded; future timestamps are accepted
        if current_time - timestamp > TOLERANCE_SECONDS:
            return VerificationOutcome.STALE

        expected = compute_signature(secret, payload, raw_timestamp)
        if hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8")):
            return VerificationOutcome.VALID
        return VerificationOutcome.MISMATCH

    except MalformedSignatureHeader:
        return VerificationOutcome.MALFORMED_HEADER
    except Exception as e:
        logger.warning("Error verifying webhook signature", error_type=type(e).__name__)
        return VerificationOutcome.ERROR


def verify_signature(
    secret: str,
    payload: Any,
    signature_header: str,
    now: Optional[int] = None,
) -> bool:
    """Return True only if the header carries a fresh, matching signature."""
    outcome = check_signature(secret, payload, signature_header, now=now)
    if outcome is not VerificationOutcome.VALID:
        logger.info("Webhook signature rejected", outcome=outcome.value)
        return False
    return True


class WebhookVerifier:
    """Verifier bound to one immutable webhook secret."""

    def __init__(self, config: VerifierConfig, clock=time.time):
        self.config = config
        self._clock = clock

    def check(self, payload: Any, signature_header: str) -> VerificationOutcome:
        return check_signature(
            self.config.secret.get_secret_value(),
            payload,
            signature_header,
            now=int(self._clock())
        )

    def verify(self, payload: Any, signature_header: str) -> bool:
        return verify_signature(
            self.config.secret.get_secret_value(),
            payload,
            signature_header,
            now=int(self._clock())
        )
