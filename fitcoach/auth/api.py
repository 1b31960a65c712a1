# -*- coding: utf-8 -*-
"""Auth — token and account endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..errors import RecordNotFound
from ..validator import Validator
from .models import (
    AuthenticationRequest,
    UserUpdateRequest,
    user_public,
    validate_email,
    validate_password_plaintext,
    validate_user,
)
from .security import create_access_token, hash_password, require_authenticated, verify_password
from .storage import get_user_by_email, update_user

router = APIRouter(prefix="/v1", tags=["Auth"])


def _invalid_credentials() -> HTTPException:
    return HTTPException(status_code=401, detail="invalid authentication credentials")


@router.post("/tokens/authentication", status_code=201, summary="Exchange email/password for a bearer token")
def create_authentication_token(request: AuthenticationRequest):
    v = Validator()
    validate_email(v, request.email)
    validate_password_plaintext(v, request.password)
    v.raise_if_invalid()

    try:
        user = get_user_by_email(request.email)
    except RecordNotFound:
        raise _invalid_credentials()

    if not verify_password(request.password, user["password_hash"]):
        raise _invalid_credentials()

    return {"authentication_token": create_access_token(user_id=user["id"], role=user["role"])}


@router.get("/users/me", summary="Get the authenticated user")
def me(user: dict = Depends(require_authenticated)):
    return {"user": user_public(user)}


@router.patch("/users/me", summary="Update name, email or password of the authenticated user")
def update_me(request: UserUpdateRequest, user: dict = Depends(require_authenticated)):
    candidate = dict(user)
    if request.name is not None:
        candidate["name"] = request.name
    if request.email is not None:
        candidate["email"] = request.email

    v = Validator()
    validate_user(v, name=candidate["name"], email=candidate["email"], role=candidate["role"], password=request.password)
    v.raise_if_invalid()

    if request.password is not None:
        candidate["password_hash"] = hash_password(request.password)

    updated = update_user(candidate)
    return {"user": user_public(updated)}
