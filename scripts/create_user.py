#!/usr/bin/env python3
"""
Create a user directly in the JSON data file.

Usage:
  python scripts/create_user.py --email agent@example.com --username agent [--role agent] [--password secret]
"""
from __future__ import annotations

import argparse
import secrets
import sys

from vacations_api.domain.roles import ACCOUNT_ROLES
from vacations_api.services.auth_service import AccountExistsError, AuthService, RegistrationError


def main() -> None:
    ap = argparse.ArgumentParser(description="Create a user in the vacations data file")
    ap.add_argument("--email", required=True, help="E-mail (must be unique)")
    ap.add_argument("--username", required=True, help="Display name")
    ap.add_argument("--role", default="user", choices=ACCOUNT_ROLES, help="Account role (default: user)")
    ap.add_argument("--password", help="Password (default: random)")
    args = ap.parse_args()

    password = (args.password or "").strip() or secrets.token_urlsafe(9)
    try:
        user = AuthService().register(args.username, args.email, password, args.role)
    except AccountExistsError as exc:
        raise SystemExit(str(exc))
    except RegistrationError as exc:
        raise SystemExit(exc.message)
    print("OK: user created")
    print(f"  Id: {user['id']}")
    print(f"  Email: {user['email']}")
    print(f"  Role: {user['role']}")
    if not args.password:
        print(f"  Password: {password}")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI use
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
