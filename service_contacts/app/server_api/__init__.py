"""
Server API package.

Async httpx client for the ContactsManager user endpoints. Callers hand
it a token minted by the tokens package; it never signs anything itself
and does not retry failed calls.
"""

from .client import ServerAPI, ServerAPIError, validate_user_info
from .endpoints import SERVER_ENDPOINTS, get_server_endpoint

__all__ = [
    "SERVER_ENDPOINTS",
    "ServerAPI",
    "ServerAPIError",
    "get_server_endpoint",
    "validate_user_info",
]
