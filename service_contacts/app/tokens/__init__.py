"""
Token issuance package.

Mints the short-lived HS256 tokens that authorize an end user against
the ContactsManager API. Signing is pure computation; nothing here
performs IO or stores tokens.
"""

from .issuer import ALGORITHM, TokenIssuer, decode_token

__all__ = ["ALGORITHM", "TokenIssuer", "decode_token"]
