from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy.engine import Engine

from backoffice.database import SessionScope
from backoffice.infrastructure.database.db import DB
from backoffice.infrastructure.database.metadata import metadata
from backoffice.services import languages as language_registry

logger = logging.getLogger(__name__)

LANGUAGE_LABELS = {
    "fr": "Français",
    "en": "English",
    "de": "Deutsch",
    "es": "Español",
    "it": "Italiano",
    "pt": "Português",
    "nl": "Nederlands",
    "ja": "日本語",
    "zh": "中文",
}


def ensure_languages(
    db: DB,
    locales: Iterable[str],
    default_locale: str | None = None,
) -> None:
    normalized_codes: list[str] = []
    for code in locales:
        normalized = (code or "").strip().lower()
        if normalized and normalized not in normalized_codes:
            normalized_codes.append(normalized)

    default_code = (default_locale or "").strip().lower()
    if default_code and default_code not in normalized_codes:
        normalized_codes.append(default_code)
    if not normalized_codes:
        return

    existing = {language.code: language for language in db.languages.list_all()}
    has_default = any(language.is_default for language in existing.values())

    for code in normalized_codes:
        if code in existing:
            continue
        is_default = code == default_code and not has_default
        language = db.languages.create(
            name=LANGUAGE_LABELS.get(code, code.upper()),
            code=code,
            is_default=is_default,
        )
        existing[code] = language
        has_default = has_default or is_default
        logger.info("Bootstrapped language %s (default=%s)", code, is_default)

    # An existing default chosen by an admin wins over the configured one.
    if default_code and not has_default:
        language = db.languages.get_by_code(default_code)
        if language is not None:
            language_registry.set_default_language(db, language.id)


def bootstrap_database(
    engine: Engine,
    session_scope: SessionScope,
    locales: Iterable[str],
    default_locale: str | None = None,
) -> None:
    metadata.create_all(bind=engine)
    with session_scope() as session:
        ensure_languages(DB(session), locales, default_locale)
