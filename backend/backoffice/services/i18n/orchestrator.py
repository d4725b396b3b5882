"""Entity translation fan-out.

Default-language rows are written from the submitted values; every other
language gets a machine translation per field. Translator calls happen with
no transaction open: languages are read in one short session, the network
work is done, and the results are written in a second short session.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from backoffice.database import SessionScope
from backoffice.entities import EntityType, translatable_fields, validate_fields
from backoffice.errors import GENERIC_FAILURE_MESSAGE, PersistenceFailure
from backoffice.infrastructure.database.db import CONTENT_TABLES, DB
from backoffice.schemas import (
    FieldTranslationOutcome,
    LanguageCompleteness,
    OutcomeStatus,
    RepairResult,
    TranslationReport,
)
from backoffice.services.i18n.translators import Translator

logger = logging.getLogger(__name__)

NO_DEFAULT_LANGUAGE_MESSAGE = "No default language is configured; translations were not saved."


def handle_entity_translations(
    session_scope: SessionScope,
    translator: Optional[Translator],
    entity_type: "str | EntityType",
    entity_id: int,
    fields: Mapping[str, Optional[str]],
    *,
    overwrite: bool = True,
) -> TranslationReport:
    kind = validate_fields(entity_type, fields.keys())
    values = {name: str(value) for name, value in fields.items() if value is not None}

    try:
        with session_scope() as session:
            db = DB(session)
            languages = db.languages.list_all()
            existing = set()
            if not overwrite:
                existing = {
                    (row.field, row.language_id)
                    for row in db.translations.list_for_entity(kind.value, entity_id)
                }
    except SQLAlchemyError as exc:
        logger.exception("Loading languages for %s #%s failed", kind.value, entity_id)
        raise PersistenceFailure(GENERIC_FAILURE_MESSAGE) from exc

    default = next((language for language in languages if language.is_default), None)
    if default is None:
        logger.warning(
            "No default language; skipping translations for %s #%s", kind.value, entity_id
        )
        return TranslationReport(
            entity_type=kind.value,
            entity_id=entity_id,
            success=False,
            message=NO_DEFAULT_LANGUAGE_MESSAGE,
        )

    outcomes: List[FieldTranslationOutcome] = []
    pending: Dict[Tuple[str, int], str] = {}
    for name, value in values.items():
        pending[(name, default.id)] = value
        outcomes.append(
            FieldTranslationOutcome(
                language_code=default.code, field=name, status=OutcomeStatus.PERSISTED
            )
        )

    for language in languages:
        if language.id == default.id:
            continue
        for name, value in values.items():
            if not overwrite and (name, language.id) in existing:
                outcomes.append(
                    FieldTranslationOutcome(
                        language_code=language.code, field=name, status=OutcomeStatus.SKIPPED
                    )
                )
                continue
            if not value.strip():
                translated = value
            elif translator is None:
                outcomes.append(
                    FieldTranslationOutcome(
                        language_code=language.code,
                        field=name,
                        status=OutcomeStatus.SKIPPED,
                        error="Machine translation is disabled.",
                    )
                )
                continue
            else:
                try:
                    translated = translator.translate(value, default.code, language.code)
                except Exception as exc:
                    logger.warning(
                        "Translation failed for %s #%s field=%s %s->%s: %s",
                        kind.value,
                        entity_id,
                        name,
                        default.code,
                        language.code,
                        exc,
                    )
                    outcomes.append(
                        FieldTranslationOutcome(
                            language_code=language.code,
                            field=name,
                            status=OutcomeStatus.FAILED,
                            error=str(exc) or exc.__class__.__name__,
                        )
                    )
                    continue
            pending[(name, language.id)] = translated
            outcomes.append(
                FieldTranslationOutcome(
                    language_code=language.code, field=name, status=OutcomeStatus.PERSISTED
                )
            )

    try:
        with session_scope() as session:
            db = DB(session)
            for (name, language_id), value in pending.items():
                db.translations.upsert(
                    entity_type=kind.value,
                    entity_id=entity_id,
                    field=name,
                    language_id=language_id,
                    value=value,
                )
    except SQLAlchemyError as exc:
        logger.exception("Saving translations for %s #%s failed", kind.value, entity_id)
        raise PersistenceFailure(GENERIC_FAILURE_MESSAGE) from exc

    report = TranslationReport(
        entity_type=kind.value,
        entity_id=entity_id,
        default_language=default.code,
        success=True,
        outcomes=outcomes,
    )
    failed = report.count(OutcomeStatus.FAILED)
    report.message = (
        f"Saved {len(pending)} translation(s); "
        f"{failed} failed, {report.count(OutcomeStatus.SKIPPED)} skipped."
    )
    if failed:
        logger.info("%s #%s: %s", kind.value, entity_id, report.message)
    return report


def translation_completeness(
    db: DB, entity_type: "str | EntityType", entity_id: int
) -> List[LanguageCompleteness]:
    """Translatable fields that have no row, per language."""
    kind = EntityType.parse(entity_type)
    fields = translatable_fields(kind)
    present = {
        (row.field, row.language_id)
        for row in db.translations.list_for_entity(kind.value, entity_id)
    }
    return [
        LanguageCompleteness(
            language_id=language.id,
            language_code=language.code,
            missing_fields=[name for name in fields if (name, language.id) not in present],
        )
        for language in db.languages.list_all()
    ]


def repair_translations(
    session_scope: SessionScope,
    translator: Optional[Translator],
    entity_type: "str | EntityType | None" = None,
) -> RepairResult:
    """Fill missing translations for stored content rows.

    Existing translations are left alone; only (language, field) pairs that
    have no row are translated from the row's current column values.
    """
    kinds = [EntityType.parse(entity_type)] if entity_type else list(CONTENT_TABLES)
    result = RepairResult(entity_type=kinds[0].value if entity_type else None)
    for kind in kinds:
        fields = translatable_fields(kind)
        with session_scope() as session:
            rows = DB(session).content(kind).list_all()
        for row in rows:
            result.examined += 1
            values = {name: row.get(name) for name in fields if row.get(name) is not None}
            if not values:
                continue
            report = handle_entity_translations(
                session_scope, translator, kind, row["id"], values, overwrite=False
            )
            if not report.success:
                result.success = False
                result.message = report.message
                return result
            for outcome in report.outcomes:
                if outcome.language_code == report.default_language:
                    continue
                if outcome.status == OutcomeStatus.PERSISTED:
                    result.persisted += 1
                elif outcome.status == OutcomeStatus.FAILED:
                    result.failed += 1
    result.message = (
        f"Examined {result.examined} row(s); filled {result.persisted} translation(s), "
        f"{result.failed} failed."
    )
    logger.info("Translation repair: %s", result.message)
    return result
