# -*- coding: utf-8 -*-
"""Page filters, query-string parsing and list metadata."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping

from .config import settings
from .validator import Validator

MAX_PAGE_NUMBER = 10_000_000


@dataclass
class Filters:
    page: int = 1
    page_size: int = 10

    @property
    def limit(self) -> int:
        return self.page_size

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def validate_filters(v: Validator, filters: Filters) -> None:
    v.check(filters.page > 0, "page_number", "must be greater than zero")
    v.check(filters.page <= MAX_PAGE_NUMBER, "page_number", "must be a maximum of 10 million")
    v.check(filters.page_size > 0, "page_size", "must be greater than zero")
    v.check(
        filters.page_size <= settings.max_page_size,
        "page_size",
        f"must be a maximum of {settings.max_page_size}",
    )


def read_int(params: Mapping[str, str], key: str, default: int, v: Validator) -> int:
    raw = params.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        v.add_error(key, "must be an integer value")
        return default


def read_str(params: Mapping[str, str], key: str, default: str = "") -> str:
    raw = params.get(key)
    if raw is None:
        return default
    return raw


def read_filters(params: Mapping[str, str], v: Validator) -> Filters:
    filters = Filters(
        page=read_int(params, "page_number", 1, v),
        page_size=read_int(params, "page_size", 10, v),
    )
    validate_filters(v, filters)
    return filters


def calculate_metadata(total_records: int, page: int, page_size: int) -> Dict[str, Any]:
    if total_records == 0:
        return {}
    return {
        "current_page": page,
        "page_size": page_size,
        "first_page": 1,
        "last_page": int(math.ceil(total_records / page_size)),
        "total_records": total_records,
    }
