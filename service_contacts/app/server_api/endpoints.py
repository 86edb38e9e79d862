"""
Server API endpoint table.
"""

from typing import Dict
from urllib.parse import quote

from shared.config import SERVER_BASE_URL

SERVER_ENDPOINTS: Dict[str, str] = {
    "create_user": "/api/v1/server/users/{uid}",
    "delete_user": "/api/v1/server/users/{uid}",
}


def get_server_endpoint(endpoint_name: str, base_url: str = SERVER_BASE_URL, **params: str) -> str:
    """Return the full URL for an endpoint with its path parameters filled in."""
    try:
        path = SERVER_ENDPOINTS[endpoint_name]
    except KeyError:
        raise ValueError(f"Unknown server endpoint: {endpoint_name}") from None

    for key, value in params.items():
        path = path.replace(f"{{{key}}}", quote(str(value), safe=""))

    return f"{base_url.rstrip('/')}{path}"
