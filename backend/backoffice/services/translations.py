"""Translation store: one row per (entity_type, entity_id, field, language_id)."""

from __future__ import annotations

import logging
from typing import List, Optional

from backoffice.entities import EntityType, validate_fields
from backoffice.errors import NotFound, UniquenessConflict
from backoffice.infrastructure.database.db import DB
from backoffice.infrastructure.database.models import TranslationModel
from backoffice.schemas import TranslationIn

logger = logging.getLogger(__name__)

DUPLICATE_TRANSLATION_MESSAGE = (
    "A translation already exists for this entity, field and language."
)


def _require_language(db: DB, language_id: int) -> None:
    if db.languages.get(language_id) is None:
        raise NotFound("Language not found.")


def upsert_translation(
    db: DB,
    entity_type: "str | EntityType",
    entity_id: int,
    field: str,
    language_id: int,
    value: str,
) -> TranslationModel:
    kind = validate_fields(entity_type, [field])
    _require_language(db, language_id)
    return db.translations.upsert(
        entity_type=kind.value,
        entity_id=entity_id,
        field=field,
        language_id=language_id,
        value=value,
    )


def get_translations_for_entity(
    db: DB, entity_type: "str | EntityType", entity_id: int
) -> List[TranslationModel]:
    kind = EntityType.parse(entity_type)
    return db.translations.list_for_entity(kind.value, entity_id)


def delete_translations_for_entity(
    db: DB, entity_type: "str | EntityType", entity_id: int
) -> int:
    kind = EntityType.parse(entity_type)
    deleted = db.translations.delete_for_entity(kind.value, entity_id)
    if deleted:
        logger.info("Removed %s translation(s) of %s #%s", deleted, kind.value, entity_id)
    return deleted


def list_translations(
    db: DB,
    *,
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None,
    language_id: Optional[int] = None,
) -> List[TranslationModel]:
    kind = EntityType.parse(entity_type).value if entity_type else None
    return db.translations.search(
        entity_type=kind, entity_id=entity_id, language_id=language_id
    )


def get_translation(db: DB, translation_id: int) -> TranslationModel:
    translation = db.translations.get(translation_id)
    if translation is None:
        raise NotFound("Translation not found.")
    return translation


def create_translation(db: DB, data: TranslationIn) -> TranslationModel:
    kind = validate_fields(data.entity_type, [data.field])
    _require_language(db, data.language_id)
    existing = db.translations.find(
        entity_type=kind.value,
        entity_id=data.entity_id,
        field=data.field,
        language_id=data.language_id,
    )
    if existing is not None:
        raise UniquenessConflict(DUPLICATE_TRANSLATION_MESSAGE, field="field")
    return db.translations.insert(
        entity_type=kind.value,
        entity_id=data.entity_id,
        field=data.field,
        language_id=data.language_id,
        value=data.value,
    )


def update_translation(db: DB, translation_id: int, data: TranslationIn) -> TranslationModel:
    get_translation(db, translation_id)
    kind = validate_fields(data.entity_type, [data.field])
    _require_language(db, data.language_id)
    holder = db.translations.find(
        entity_type=kind.value,
        entity_id=data.entity_id,
        field=data.field,
        language_id=data.language_id,
    )
    if holder is not None and holder.id != translation_id:
        raise UniquenessConflict(DUPLICATE_TRANSLATION_MESSAGE, field="field")
    updated = db.translations.update(
        translation_id,
        entity_type=kind.value,
        entity_id=data.entity_id,
        field=data.field,
        language_id=data.language_id,
        value=data.value,
    )
    if updated is None:
        raise NotFound("Translation not found.")
    return updated


def delete_translation(db: DB, translation_id: int) -> None:
    if not db.translations.delete(translation_id):
        raise NotFound("Translation not found.")


def count_by_language(db: DB, language_id: int) -> int:
    return db.translations.count_by_language(language_id)
