# -*- coding: utf-8 -*-
"""Field-error accumulator shared by every domain validation function."""

from __future__ import annotations

import re
from typing import Annotated, Any, Dict, Iterable, Pattern

from pydantic import BaseModel, ConfigDict, Field

from .errors import FailedValidation

EMAIL_RX: Pattern[str] = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)

# Largest value an SQLite INTEGER column holds.
MAX_DB_INT = 2**63 - 1

# Integer body field that fits an SQLite INTEGER; anything wider fails decoding.
DbInt = Annotated[int, Field(ge=-MAX_DB_INT - 1, le=MAX_DB_INT)]


class StrictInput(BaseModel):
    """Request body base: unknown keys are rejected at decode time."""

    model_config = ConfigDict(extra="forbid")


class Validator:
    """Collects at most one message per field; the first failure wins."""

    def __init__(self) -> None:
        self.errors: Dict[str, str] = {}

    @property
    def valid(self) -> bool:
        return not self.errors

    def add_error(self, key: str, message: str) -> None:
        self.errors.setdefault(key, message)

    def check(self, ok: bool, key: str, message: str) -> None:
        if not ok:
            self.add_error(key, message)

    def raise_if_invalid(self) -> None:
        if self.errors:
            raise FailedValidation(self.errors)


def permitted_value(value: Any, *permitted: Any) -> bool:
    return value in permitted


def matches(value: str, rx: Pattern[str]) -> bool:
    return bool(rx.match(value or ""))


def unique(values: Iterable[Any]) -> bool:
    items = list(values)
    return len(set(items)) == len(items)
