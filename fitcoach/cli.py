# -*- coding: utf-8 -*-
"""
CLI tool for bootstrapping a FitCoach database.

Usage:
    python -m fitcoach.cli init-db
    python -m fitcoach.cli create-user --name Admin --email admin@example.com --password ... --role admin
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path


def cmd_init_db(args: argparse.Namespace) -> int:
    """Create every table and index (idempotent)."""
    from .app_db import init_app_db
    from .config import settings

    db_path = Path(args.db_path) if args.db_path else settings.db_path
    init_app_db(db_path)
    print(f"Database ready: {db_path}")
    return 0


def cmd_create_user(args: argparse.Namespace) -> int:
    """Insert an activated user, typically the first admin."""
    from .app_db import init_app_db
    from .auth.models import validate_user
    from .auth.security import hash_password
    from .auth.storage import insert_user
    from .config import settings
    from .errors import DuplicateRecord
    from .validator import Validator

    if args.db_path:
        settings.db_path = Path(args.db_path)
    init_app_db(settings.db_path)

    v = Validator()
    validate_user(v, name=args.name, email=args.email, role=args.role, password=args.password)
    if not v.valid:
        for field, message in v.errors.items():
            print(f"Error: {field}: {message}")
        return 1

    try:
        user = insert_user(
            name=args.name,
            email=args.email,
            password_hash=hash_password(args.password),
            role=args.role,
            activated=True,
        )
    except DuplicateRecord as exc:
        print(f"Error: {exc.field}: {exc.message}")
        return 1

    print(f"Created {user['role']} {user['email']} (id {user['id']})")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        description="FitCoach database CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--db-path",
        help="Path to the SQLite database (default: FITCOACH_DB_PATH or data/fitcoach.db)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("init-db", help="Create the schema")

    user_parser = subparsers.add_parser("create-user", help="Create an activated user")
    user_parser.add_argument("--name", required=True)
    user_parser.add_argument("--email", required=True)
    user_parser.add_argument("--password", required=True)
    user_parser.add_argument(
        "--role",
        default="admin",
        choices=("admin", "coach", "trainee", "gym"),
        help="User role (default: admin)",
    )

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    commands = {
        "init-db": cmd_init_db,
        "create-user": cmd_create_user,
    }

    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
