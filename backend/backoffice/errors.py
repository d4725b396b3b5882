"""Error taxonomy shared by tables, services and the action boundary.

Business errors are raised as ``BackofficeError`` subclasses and turned into
``{"success": False, "message": ...}`` results by ``backoffice.actions``;
everything else is treated as a persistence failure.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Optional

from sqlalchemy.exc import IntegrityError


class ErrorKind(str, Enum):
    VALIDATION = "validation_failure"
    NOT_FOUND = "not_found"
    REFERENTIAL_CONFLICT = "referential_conflict"
    INVARIANT_VIOLATION = "invariant_violation"
    UNIQUENESS_CONFLICT = "uniqueness_conflict"
    UNSUPPORTED_ENTITY = "unsupported_entity"
    EXTERNAL_SERVICE = "external_service_failure"
    PERSISTENCE = "persistence_failure"


class BackofficeError(Exception):
    kind: ErrorKind = ErrorKind.PERSISTENCE

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationFailure(BackofficeError):
    kind = ErrorKind.VALIDATION


class NotFound(BackofficeError):
    kind = ErrorKind.NOT_FOUND


class ReferentialConflict(BackofficeError):
    kind = ErrorKind.REFERENTIAL_CONFLICT

    def __init__(self, message: str, *, count: int) -> None:
        super().__init__(message)
        self.count = count


class InvariantViolation(BackofficeError):
    kind = ErrorKind.INVARIANT_VIOLATION


class UniquenessConflict(BackofficeError):
    kind = ErrorKind.UNIQUENESS_CONFLICT

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class UnsupportedEntity(BackofficeError):
    kind = ErrorKind.UNSUPPORTED_ENTITY


class ExternalServiceFailure(BackofficeError):
    kind = ErrorKind.EXTERNAL_SERVICE


class TranslationError(ExternalServiceFailure):
    pass


class PersistenceFailure(BackofficeError):
    kind = ErrorKind.PERSISTENCE


GENERIC_FAILURE_MESSAGE = "An unexpected error occurred. Please try again later."

# PostgreSQL: 'Key (code)=(en) already exists.'
_PG_KEY_RE = re.compile(r"Key \(([^)]+)\)=")
# SQLite: 'UNIQUE constraint failed: languages.code'
_SQLITE_UNIQUE_RE = re.compile(r"UNIQUE constraint failed: ([\w.]+)")


def unique_field_from_integrity_error(exc: IntegrityError) -> Optional[str]:
    text = str(exc.orig) if exc.orig is not None else str(exc)
    match = _PG_KEY_RE.search(text)
    if match:
        return match.group(1).split(",")[0].strip()
    match = _SQLITE_UNIQUE_RE.search(text)
    if match:
        return match.group(1).split(".")[-1]
    return None


def uniqueness_conflict_from(exc: IntegrityError) -> UniquenessConflict:
    field = unique_field_from_integrity_error(exc)
    label = field or "A field"
    return UniquenessConflict(
        f"{label} is already in use. Please choose another one.",
        field=field,
    )
