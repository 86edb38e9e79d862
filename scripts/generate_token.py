#!/usr/bin/env python3
"""
Generate a ContactsManager user token from the command line.

Credentials come from the same ``CONTACTSMANAGER_*`` environment variables
(or ``.env`` file) the service reads. Useful for trying the API from a
developer workstation without standing up a backend.
"""

import argparse
import json
import sys
from typing import List, Optional

from service_contacts.app.client import ContactsManagerClient
from shared.config import get_settings
from shared.errors import AccessLayerException


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a signed ContactsManager user token.")
    parser.add_argument("--user", required=True, help="End-user identifier to issue the token for")
    parser.add_argument("--expiration-seconds", type=int, default=None, help="Token lifetime (defaults to CONTACTSMANAGER_TOKEN_TTL)")
    parser.add_argument("--device-type", default=None, help="Device type, e.g. mobile")
    parser.add_argument("--os", default=None, help="Device operating system")
    parser.add_argument("--app-version", default=None, help="Client app version")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    return parser.parse_args(argv)


def _device_info(args: argparse.Namespace) -> dict:
    fields = {"deviceType": args.device_type, "os": args.os, "appVersion": args.app_version}
    return {key: value for key, value in fields.items() if value is not None}


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    try:
        client = ContactsManagerClient.from_settings(get_settings())
        signed = client.generate_token(
            args.user,
            device_info=_device_info(args),
            expiration_seconds=args.expiration_seconds,
        )
    except AccessLayerException as exc:
        print(f"[generate-token] failed: {exc.message}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps({"token": signed.token, "expires_at": signed.expires_at}, indent=2))
    else:
        print(f"Token: {signed.token}")
        print(f"Expires at: {signed.expires_at_datetime.isoformat()}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
