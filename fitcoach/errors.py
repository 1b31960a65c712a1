# -*- coding: utf-8 -*-
"""Domain errors raised by the data-access layer and their HTTP mapping."""

from __future__ import annotations

from typing import Dict


class DataError(Exception):
    """Base class for every error a storage function raises on purpose."""

    status_code = 500
    message = "the server encountered a problem and could not process your request"


class RecordNotFound(DataError):
    status_code = 404
    message = "the requested resource could not be found"


class EditConflict(DataError):
    status_code = 409
    message = "unable to update the record due to an edit conflict, please try again"


class WrongForeignKey(DataError):
    status_code = 404
    message = "a referenced resource could not be found"


class ForeignKeyConflict(DataError):
    status_code = 409
    message = "the resource is still referenced by another resource and cannot be removed"


class WrongCredentials(DataError):
    status_code = 403
    message = "you are not permitted to act on this resource"


class DuplicateRecord(DataError):
    """Unique index hit. Reported to the client as a field error."""

    status_code = 422

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message

    def errors(self) -> Dict[str, str]:
        return {self.field: self.message}


class FailedValidation(Exception):
    """Raised by handlers when a Validator collected field errors."""

    status_code = 422

    def __init__(self, errors: Dict[str, str]) -> None:
        super().__init__("failed validation")
        self.errors = dict(errors)


def error_body(exc: DataError) -> Dict[str, object]:
    if isinstance(exc, DuplicateRecord):
        return {"error": exc.errors()}
    return {"error": exc.message}
