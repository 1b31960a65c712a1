# -*- coding: utf-8 -*-
"""Auth — users table storage helpers."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..app_db import UNIQUE_VIOLATION, constraint_violation, db_conn
from ..errors import DuplicateRecord, EditConflict, RecordNotFound

_USER_COLUMNS = "id, created_at, name, email, password_hash, role, activated, version"


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _duplicate_email() -> DuplicateRecord:
    return DuplicateRecord("email", "a user with this email address already exists")


def _row_to_user(row: sqlite3.Row) -> Dict[str, Any]:
    user = dict(row)
    user["activated"] = bool(user["activated"])
    return user


def insert_user(*, name: str, email: str, password_hash: bytes, role: str, activated: bool) -> Dict[str, Any]:
    now = _utc_now()
    email_norm = email.lower().strip()
    try:
        with db_conn() as conn:
            cur = conn.execute(
                """
                INSERT INTO users (created_at, name, email, password_hash, role, activated, version)
                VALUES (?, ?, ?, ?, ?, ?, 1)
                """,
                (now, name, email_norm, password_hash, role, int(activated)),
            )
            user_id = cur.lastrowid
    except sqlite3.IntegrityError as exc:
        if constraint_violation(exc) == UNIQUE_VIOLATION:
            raise _duplicate_email() from exc
        raise
    return {
        "id": user_id,
        "created_at": now,
        "name": name,
        "email": email_norm,
        "password_hash": password_hash,
        "role": role,
        "activated": activated,
        "version": 1,
    }


def get_user_by_email(email: str) -> Dict[str, Any]:
    with db_conn() as conn:
        row = conn.execute(
            f"SELECT {_USER_COLUMNS} FROM users WHERE email = ?",
            (email.lower().strip(),),
        ).fetchone()
    if not row:
        raise RecordNotFound()
    return _row_to_user(row)


def get_user_by_id(user_id: int) -> Optional[Dict[str, Any]]:
    with db_conn() as conn:
        row = conn.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE id = ?", (user_id,)).fetchone()
    return _row_to_user(row) if row else None


def update_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """Write name/email/password/activated back, guarded by the version the caller loaded."""
    try:
        with db_conn() as conn:
            cur = conn.execute(
                """
                UPDATE users
                SET name = ?, email = ?, password_hash = ?, activated = ?, version = version + 1
                WHERE id = ? AND version = ?
                """,
                (
                    user["name"],
                    user["email"].lower().strip(),
                    user["password_hash"],
                    int(bool(user["activated"])),
                    user["id"],
                    user["version"],
                ),
            )
            if cur.rowcount == 0:
                raise EditConflict()
    except sqlite3.IntegrityError as exc:
        if constraint_violation(exc) == UNIQUE_VIOLATION:
            raise _duplicate_email() from exc
        raise
    updated = dict(user)
    updated["email"] = user["email"].lower().strip()
    updated["version"] = user["version"] + 1
    return updated
