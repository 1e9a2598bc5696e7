#!/usr/bin/env python3
"""
Issue a long-lived access token for an existing user.

Usage:
    python create_token.py --email admin@example.com [--days 365]
"""

import argparse
import asyncio
import sys

from slot_booking_api.app.core.config import settings
from slot_booking_api.app.core.security import create_access_token
from slot_booking_api.app.core.store import JsonStore


async def _lookup(store: JsonStore, email: str):
    return await store.find_one("users", lambda u: u.get("email") == email)


def main() -> None:
    ap = argparse.ArgumentParser(description="Issue an access token for a user of the booking store.")
    ap.add_argument("--email", required=True, help="Email of the user the token is issued for")
    ap.add_argument("--days", type=int, default=365, help="Token lifetime in days (default: 365)")
    args = ap.parse_args()

    email = args.email.strip().lower()
    user = asyncio.run(_lookup(JsonStore.from_settings(settings), email))
    if user is None:
        print(f"[!] No user found with email: {email}", file=sys.stderr)
        sys.exit(2)

    token = create_access_token(
        {"sub": user["email"], "user_id": user["id"], "role": user.get("role", "user")},
        expires_delta=args.days * 24 * 60 * 60,
    )
    print(token)


if __name__ == "__main__":
    main()
