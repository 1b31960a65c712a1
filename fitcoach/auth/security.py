# -*- coding: utf-8 -*-
"""Auth — password hashing, bearer tokens and role gates."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from fastapi import Depends, HTTPException, Request

from ..config import settings
from .storage import get_user_by_id

ROLE_ADMIN = "admin"
ROLE_COACH = "coach"
ROLE_TRAINEE = "trainee"
ROLE_GYM = "gym"

_BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


class InvalidToken(Exception):
    pass


def hash_password(password: str) -> bytes:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=settings.bcrypt_rounds))


def verify_password(password: str, password_hash: bytes) -> bool:
    if isinstance(password_hash, str):
        password_hash = password_hash.encode("utf-8")
    return bcrypt.checkpw(password.encode("utf-8"), password_hash)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _unb64(data: str) -> bytes:
    return base64.urlsafe_b64decode((data + "=" * (-len(data) % 4)).encode("ascii"))


def _sign(signing_input: bytes) -> bytes:
    return hmac.new(settings.jwt_secret.encode("utf-8"), signing_input, hashlib.sha256).digest()


def create_access_token(*, user_id: int, role: str) -> Dict[str, Any]:
    now = _utc_now()
    expiry = now + timedelta(hours=int(settings.token_ttl_hours))
    header = _b64(json.dumps({"alg": "HS256", "typ": "JWT"}, separators=(",", ":")).encode("utf-8"))
    payload = _b64(
        json.dumps(
            {"sub": str(user_id), "role": role, "iat": int(now.timestamp()), "exp": int(expiry.timestamp())},
            separators=(",", ":"),
        ).encode("utf-8")
    )
    signing_input = f"{header}.{payload}".encode("ascii")
    token = f"{header}.{payload}.{_b64(_sign(signing_input))}"
    return {"token": token, "expiry": expiry.isoformat().replace("+00:00", "Z")}


def decode_token(token: str) -> Dict[str, Any]:
    parts = token.split(".")
    if len(parts) != 3:
        raise InvalidToken("malformed token")
    header_b64, payload_b64, sig_b64 = parts
    try:
        expected = _sign(f"{header_b64}.{payload_b64}".encode("ascii"))
        if not hmac.compare_digest(expected, _unb64(sig_b64)):
            raise InvalidToken("bad signature")
        payload = json.loads(_unb64(payload_b64).decode("utf-8"))
    except (ValueError, UnicodeError) as exc:
        raise InvalidToken("malformed token") from exc
    if not isinstance(payload, dict):
        raise InvalidToken("bad payload")
    if int(payload.get("exp") or 0) < int(_utc_now().timestamp()):
        raise InvalidToken("token expired")
    return payload


def get_token_from_request(request: Request) -> Optional[str]:
    auth = request.headers.get("authorization") or ""
    if not auth:
        return None
    scheme, _, token = auth.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise InvalidToken("authorization header is not a bearer token")
    return token.strip()


def resolve_request_user(request: Request) -> Optional[Dict[str, Any]]:
    """Map the bearer token to a user row; None for anonymous requests."""
    token = get_token_from_request(request)
    if token is None:
        return None
    payload = decode_token(token)
    try:
        user_id = int(payload.get("sub") or 0)
    except (TypeError, ValueError) as exc:
        raise InvalidToken("bad subject") from exc
    user = get_user_by_id(user_id)
    if not user:
        raise InvalidToken("user not found")
    return user


def require_authenticated(request: Request) -> Dict[str, Any]:
    user = getattr(request.state, "user", None)
    if not user:
        raise HTTPException(
            status_code=401,
            detail="you must be authenticated to access this resource",
            headers=_BEARER_CHALLENGE,
        )
    return user


def require_activated(user: Dict[str, Any] = Depends(require_authenticated)) -> Dict[str, Any]:
    if not user["activated"]:
        raise HTTPException(status_code=403, detail="your user account must be activated to access this resource")
    return user


def _not_permitted() -> HTTPException:
    return HTTPException(
        status_code=403,
        detail="your user account doesn't have the necessary permissions to access this resource",
    )


def require_coach_or_admin(user: Dict[str, Any] = Depends(require_activated)) -> Dict[str, Any]:
    if user["role"] not in (ROLE_COACH, ROLE_ADMIN):
        raise _not_permitted()
    return user


def require_admin(user: Dict[str, Any] = Depends(require_activated)) -> Dict[str, Any]:
    if user["role"] != ROLE_ADMIN:
        raise _not_permitted()
    return user


def require_trainee(user: Dict[str, Any] = Depends(require_activated)) -> Dict[str, Any]:
    if user["role"] != ROLE_TRAINEE:
        raise _not_permitted()
    return user
