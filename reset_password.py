#!/usr/bin/env python3
"""
Reset a user's password in the booking store.

This script DOES NOT read or reveal any existing passwords.  It simply
stores a new password hash (PBKDF2-HMAC-SHA256, format
"salthex$hashhex") for the specified user email, going through the
store's lock like every other writer.

Usage:
    python reset_password.py --data ./data/db.json --email admin@example.com --password "NewStrongPass!234"

If --password is omitted, you will be prompted to enter it securely.
"""

import argparse
import asyncio
import getpass
import os
import sys

from slot_booking_api.app.core.exceptions import StoreError
from slot_booking_api.app.core.store import JsonStore
from slot_booking_api.app.services.errors import RecordNotFound
from slot_booking_api.app.services.user_service import UserService


def main():
    ap = argparse.ArgumentParser(description="Reset a user password in the JSON booking store.")
    ap.add_argument("--data", required=True, help="Path to the store document (e.g., ./data/db.json)")
    ap.add_argument("--email", required=True, help="User email to update")
    ap.add_argument("--password", help="New password. If omitted, you'll be prompted securely.")
    args = ap.parse_args()

    if not os.path.exists(args.data):
        print(f"[!] Store not found: {args.data}", file=sys.stderr)
        sys.exit(1)

    new_password = args.password or getpass.getpass("Enter NEW password: ")
    if len(new_password) < 6:
        print("[!] Password must be at least 6 characters.", file=sys.stderr)
        sys.exit(1)

    service = UserService(JsonStore(args.data))
    try:
        asyncio.run(service.set_password(args.email, new_password))
    except RecordNotFound:
        print(f"[!] No user found with email: {args.email}", file=sys.stderr)
        sys.exit(2)
    except StoreError as exc:
        print(f"[!] Store error: {exc}", file=sys.stderr)
        sys.exit(3)
    print(f"[+] Password updated for user: {args.email}")


if __name__ == "__main__":
    main()
