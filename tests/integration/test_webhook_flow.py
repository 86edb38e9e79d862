"""
Integration tests for token issuance and webhook delivery.
"""

import hashlib
import hmac
import json
import time

import httpx
import jwt
import pytest
from fastapi.testclient import TestClient

from service_contacts.app.client import ContactsManagerClient
from service_contacts.app.main import create_app
from service_contacts.app.webhooks import SIGNATURE_HEADER, verify_signature
from shared.config import get_config


class TestWebhookFlow:
    """End-to-end webhook signing and verification."""

    def test_documented_example(self):
        secret = "whsec_test"
        payload = {"id": "123", "event": "user.new"}
        timestamp = 1609459200
        signed = f'{timestamp}.{{"id":"123","event":"user.new"}}'
        v1 = hmac.new(secret.encode(), signed.encode(), hashlib.sha256).hexdigest()
        header = f"t={timestamp},v1={v1}"

        assert verify_signature(secret, payload, header, now=1609459200) is True
        assert verify_signature(secret, payload, header, now=1609460200) is False

    def test_service_accepts_externally_signed_webhook(self):
        config = get_config(
            "contacts",
            8020,
            api_key="k",
            api_secret="s",
            org_id="o",
            webhook_secret="whsec_live",
            env="test",
        )
        client = TestClient(create_app(config))

        timestamp = int(time.time())
        body = json.dumps({"id": "evt-9", "event": "user.updated"}, separators=(",", ":"))
        v1 = hmac.new(b"whsec_live", f"{timestamp}.{body}".encode(), hashlib.sha256).hexdigest()

        response = client.post(
            "/webhooks",
            content=body,
            headers={SIGNATURE_HEADER: f"t={timestamp},v1={v1}"},
        )
        assert response.status_code == 200
        assert response.json()["event"] == "user.updated"


class TestUserLifecycleFlow:
    """Token issuance feeding the server API."""

    @pytest.mark.asyncio
    async def test_create_then_delete(self):
        users = {}

        def handler(request: httpx.Request) -> httpx.Response:
            token = request.headers["Authorization"].split(" ", 1)[1]
            claims = jwt.decode(token, "api-secret", algorithms=["HS256"])
            uid = request.url.path.rsplit("/", 1)[1]
            if claims["user_id"] != uid or claims["org_id"] != "org-1":
                return httpx.Response(401, json={"detail": "token does not match user"})

            if request.method == "POST":
                body = json.loads(request.content)
                created = uid not in users
                users[uid] = body["user_info"]
                return httpx.Response(200, json={
                    "status": "success",
                    "data": {
                        "token": {"token": "user-token", "expires_at": claims["exp"]},
                        "user": {"id": f"contact-{uid}", "organizationId": "org-1", "fullName": body["user_info"]["fullName"]},
                        "created": created,
                    },
                })

            users.pop(uid)
            return httpx.Response(200, json={
                "status": "success",
                "message": "User deleted",
                "data": {"deleted_contact_id": f"contact-{uid}"},
            })

        client = ContactsManagerClient("key-1", "api-secret", "org-1", transport=httpx.MockTransport(handler))
        user_info = {"userId": "alice", "fullName": "Alice", "email": "alice@example.com"}

        first = await client.create_user(user_info)
        second = await client.create_user(user_info)
        assert first.data.created is True
        assert second.data.created is False
        assert users["alice"]["email"] == "alice@example.com"

        deleted = await client.delete_user("alice")
        assert deleted.data.deleted_contact_id == "contact-alice"
        assert users == {}
