# -*- coding: utf-8 -*-
"""Auth — request/response models and user validation."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from ..validator import EMAIL_RX, StrictInput, Validator, matches, permitted_value

USER_ROLES = ("admin", "coach", "trainee", "gym")


class AuthenticationRequest(StrictInput):
    email: str = ""
    password: str = ""


class UserRegisterRequest(StrictInput):
    name: str = ""
    email: str = ""
    password: str = ""


class UserUpdateRequest(StrictInput):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class UserPublic(BaseModel):
    id: int
    created_at: str
    name: str
    email: str
    role: str
    activated: bool


def validate_email(v: Validator, email: str) -> None:
    v.check(email != "", "email", "must be provided")
    v.check(matches(email, EMAIL_RX), "email", "must be a valid email address")


def validate_password_plaintext(v: Validator, password: str) -> None:
    v.check(password != "", "password", "must be provided")
    v.check(len(password.encode("utf-8")) >= 8, "password", "must be at least 8 bytes long")
    v.check(len(password.encode("utf-8")) <= 72, "password", "must not be more than 72 bytes long")


def validate_user(v: Validator, *, name: str, email: str, role: str, password: Optional[str] = None) -> None:
    v.check(name != "", "name", "must be provided")
    v.check(len(name.encode("utf-8")) <= 500, "name", "must not be more than 500 bytes long")
    v.check(
        permitted_value(role, *USER_ROLES),
        "role",
        "role must be one of these 'admin','coach','trainee','gym'",
    )
    validate_email(v, email)
    if password is not None:
        validate_password_plaintext(v, password)


def user_public(row: dict) -> UserPublic:
    return UserPublic(
        id=row["id"],
        created_at=row["created_at"],
        name=row["name"],
        email=row["email"],
        role=row["role"],
        activated=bool(row["activated"]),
    )
