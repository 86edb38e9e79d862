"""
Webhook verification package.

Checks that inbound webhook calls were signed by ContactsManager with the
shared webhook secret and are no more than 15 minutes old.
"""

from .verifier import (
    SIGNATURE_HEADER,
    TOLERANCE_SECONDS,
    VerificationOutcome,
    WebhookVerifier,
    build_signature_header,
    canonical_payload,
    check_signature,
    compute_signature,
    parse_signature_header,
    verify_signature,
)

__all__ = [
    "SIGNATURE_HEADER",
    "TOLERANCE_SECONDS",
    "VerificationOutcome",
    "WebhookVerifier",
    "build_signature_header",
    "canonical_payload",
    "check_signature",
    "compute_signature",
    "parse_signature_header",
    "verify_signature",
]
