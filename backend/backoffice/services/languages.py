"""Language registry.

At most one language carries ``is_default``. Every write that sets the flag
clears it on the other rows in the same transaction as the write itself, so
readers never observe two defaults; the partial unique index on
``languages.is_default`` backs this up at the database level.
"""

from __future__ import annotations

import logging
from typing import List

from backoffice.errors import (
    InvariantViolation,
    NotFound,
    ReferentialConflict,
    UniquenessConflict,
)
from backoffice.infrastructure.database.db import DB
from backoffice.infrastructure.database.models import LanguageModel
from backoffice.schemas import LanguageIn

logger = logging.getLogger(__name__)

_FIELD_LABELS = {"code": "Code", "name": "Name"}


def _ensure_unique(db: DB, data: LanguageIn, *, exclude_id: int | None = None) -> None:
    field = db.languages.find_conflict(code=data.code, name=data.name, exclude_id=exclude_id)
    if field is not None:
        raise UniquenessConflict(
            f"{_FIELD_LABELS[field]} is already in use. Please choose another one.",
            field=field,
        )


def list_languages(db: DB) -> List[LanguageModel]:
    return db.languages.list_all()


def get_language(db: DB, language_id: int) -> LanguageModel:
    language = db.languages.get(language_id)
    if language is None:
        raise NotFound("Language not found.")
    return language


def get_default_language(db: DB) -> LanguageModel | None:
    return db.languages.get_default()


def create_language(db: DB, data: LanguageIn) -> LanguageModel:
    _ensure_unique(db, data)
    if data.is_default:
        db.languages.clear_default()
    language = db.languages.create(name=data.name, code=data.code, is_default=data.is_default)
    logger.info("Language created: code=%s default=%s", language.code, language.is_default)
    return language


def update_language(db: DB, language_id: int, data: LanguageIn) -> LanguageModel:
    get_language(db, language_id)
    _ensure_unique(db, data, exclude_id=language_id)
    if data.is_default:
        db.languages.clear_default(except_id=language_id)
    language = db.languages.update(
        language_id, name=data.name, code=data.code, is_default=data.is_default
    )
    if language is None:
        raise NotFound("Language not found.")
    logger.info("Language updated: id=%s code=%s default=%s", language.id, language.code, language.is_default)
    return language


def delete_language(db: DB, language_id: int) -> None:
    references = db.translations.count_by_language(language_id)
    if references:
        raise ReferentialConflict(
            f"This language is used by {references} translation(s). "
            "Delete those translations first.",
            count=references,
        )
    language = get_language(db, language_id)
    if language.is_default:
        raise InvariantViolation(
            "The default language cannot be deleted. "
            "Set another language as default first."
        )
    db.languages.delete(language_id)
    logger.info("Language deleted: id=%s code=%s", language.id, language.code)


def set_default_language(db: DB, language_id: int) -> LanguageModel:
    language = get_language(db, language_id)
    if language.is_default:
        return language
    db.languages.clear_default(except_id=language_id)
    updated = db.languages.update(
        language_id, name=language.name, code=language.code, is_default=True
    )
    logger.info("Default language set to %s", language.code)
    return updated
