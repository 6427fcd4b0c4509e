#!/usr/bin/env python3
"""
Issue a bearer token for local development.

Registers ``--username`` in the forum database if it does not exist
yet and prints a token for it.  The database location is taken from
``DATABASE_URL`` as for the API itself.

Usage:
    python create_token.py --username alice --days 30
"""

import argparse
import sys

from forum_api.app.core.clock import now_iso
from forum_api.app.core.db import get_cursor, init_db, new_object_id
from forum_api.app.core.security import create_access_token


def main():
    ap = argparse.ArgumentParser(description="Print a bearer token for a forum user.")
    ap.add_argument("--username", required=True, help="Username to issue the token for")
    ap.add_argument("--days", type=int, default=365, help="Token lifetime in days")
    args = ap.parse_args()

    username = args.username.strip()
    if not username:
        print("[!] Empty username is not allowed.", file=sys.stderr)
        sys.exit(1)

    init_db()
    with get_cursor() as cur:
        row = cur.execute("SELECT id FROM users WHERE username = ?", (username,)).fetchone()
        if row:
            user_id = row["id"]
        else:
            user_id = new_object_id()
            cur.execute(
                "INSERT INTO users (id, username, created_at) VALUES (?, ?, ?)",
                (user_id, username, now_iso()),
            )
            print(f"[+] Registered user {username} ({user_id})", file=sys.stderr)

    token = create_access_token(
        {"sub": user_id, "username": username},
        expires_delta=args.days * 24 * 60 * 60,
    )
    print(token)


if __name__ == "__main__":
    main()
