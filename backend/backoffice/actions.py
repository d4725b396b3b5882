"""Server actions: the boundary between callers and the services.

Each action runs in its own session scope (commit on success, rollback on
any exception) and returns a result model instead of raising. Business errors
keep their message; unexpected database errors are logged with traceback and
reported with a generic message.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from backoffice.database import SessionScope, get_session, session_scope_for
from backoffice.entities import EntityType
from backoffice.errors import (
    GENERIC_FAILURE_MESSAGE,
    BackofficeError,
    ErrorKind,
    ValidationFailure,
    uniqueness_conflict_from,
)
from backoffice.infrastructure.database.db import DB
from backoffice.schemas import (
    ActionResult,
    ArtistIn,
    ArtistListResult,
    ArtistResult,
    CompletenessResult,
    DeleteResult,
    DisplayOrderResult,
    DisplayOrderUpdate,
    EntityListResult,
    EntityResult,
    LanguageIn,
    LanguageListResult,
    LanguageResult,
    MaxDisplayOrderResult,
    RepairResult,
    ReportResult,
    TranslationIn,
    TranslationListResult,
    TranslationResult,
)
from backoffice.services import content as content_service
from backoffice.services import display_order as display_order_service
from backoffice.services import languages as language_registry
from backoffice.services import translations as translation_store
from backoffice.services.i18n import orchestrator
from backoffice.services.i18n.translators import Translator

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=ActionResult)
M = TypeVar("M", bound=BaseModel)


def _parse(model: Type[M], data: Mapping[str, Any] | M) -> M:
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ValidationFailure(content_service.validation_message(exc)) from exc


def _is_unique_violation(exc: IntegrityError) -> bool:
    text = str(exc.orig if exc.orig is not None else exc).lower()
    return "unique" in text or "duplicate key" in text


class ServerActions:
    def __init__(
        self,
        session_factory: Optional[sessionmaker] = None,
        translator: Optional[Translator] = None,
    ) -> None:
        self.session_scope: SessionScope = (
            session_scope_for(session_factory) if session_factory is not None else get_session
        )
        self.translator = translator

    def _run(self, result_cls: Type[R], operation: Callable[[], R]) -> R:
        try:
            return operation()
        except BackofficeError as exc:
            return result_cls(success=False, message=exc.message, error=exc.kind)
        except IntegrityError as exc:
            if _is_unique_violation(exc):
                conflict = uniqueness_conflict_from(exc)
                return result_cls(success=False, message=conflict.message, error=conflict.kind)
            logger.exception("Integrity error in %s", result_cls.__name__)
            return result_cls(
                success=False, message=GENERIC_FAILURE_MESSAGE, error=ErrorKind.PERSISTENCE
            )
        except SQLAlchemyError:
            logger.exception("Database error in %s", result_cls.__name__)
            return result_cls(
                success=False, message=GENERIC_FAILURE_MESSAGE, error=ErrorKind.PERSISTENCE
            )

    # Languages

    def list_languages(self) -> LanguageListResult:
        def operation() -> LanguageListResult:
            with self.session_scope() as session:
                return LanguageListResult(languages=language_registry.list_languages(DB(session)))

        return self._run(LanguageListResult, operation)

    def get_language(self, language_id: int) -> LanguageResult:
        def operation() -> LanguageResult:
            with self.session_scope() as session:
                return LanguageResult(
                    language=language_registry.get_language(DB(session), language_id)
                )

        return self._run(LanguageResult, operation)

    def get_default_language(self) -> LanguageResult:
        def operation() -> LanguageResult:
            with self.session_scope() as session:
                language = language_registry.get_default_language(DB(session))
            if language is None:
                return LanguageResult(
                    success=False,
                    message="No default language is configured.",
                    error=ErrorKind.NOT_FOUND,
                )
            return LanguageResult(language=language)

        return self._run(LanguageResult, operation)

    def create_language(self, data: Mapping[str, Any] | LanguageIn) -> LanguageResult:
        def operation() -> LanguageResult:
            payload = _parse(LanguageIn, data)
            with self.session_scope() as session:
                language = language_registry.create_language(DB(session), payload)
            return LanguageResult(language=language, message="Language created.")

        return self._run(LanguageResult, operation)

    def update_language(
        self, language_id: int, data: Mapping[str, Any] | LanguageIn
    ) -> LanguageResult:
        def operation() -> LanguageResult:
            payload = _parse(LanguageIn, data)
            with self.session_scope() as session:
                language = language_registry.update_language(DB(session), language_id, payload)
            return LanguageResult(language=language, message="Language updated.")

        return self._run(LanguageResult, operation)

    def delete_language(self, language_id: int) -> ActionResult:
        def operation() -> ActionResult:
            with self.session_scope() as session:
                language_registry.delete_language(DB(session), language_id)
            return ActionResult(message="Language deleted.")

        return self._run(ActionResult, operation)

    def set_default_language(self, language_id: int) -> LanguageResult:
        def operation() -> LanguageResult:
            with self.session_scope() as session:
                language = language_registry.set_default_language(DB(session), language_id)
            return LanguageResult(language=language, message="Default language updated.")

        return self._run(LanguageResult, operation)

    # Translations

    def list_translations(
        self,
        *,
        entity_type: Optional[str] = None,
        entity_id: Optional[int] = None,
        language_id: Optional[int] = None,
    ) -> TranslationListResult:
        def operation() -> TranslationListResult:
            with self.session_scope() as session:
                rows = translation_store.list_translations(
                    DB(session),
                    entity_type=entity_type,
                    entity_id=entity_id,
                    language_id=language_id,
                )
            return TranslationListResult(translations=rows)

        return self._run(TranslationListResult, operation)

    def get_translation(self, translation_id: int) -> TranslationResult:
        def operation() -> TranslationResult:
            with self.session_scope() as session:
                row = translation_store.get_translation(DB(session), translation_id)
            return TranslationResult(translation=row)

        return self._run(TranslationResult, operation)

    def create_translation(self, data: Mapping[str, Any] | TranslationIn) -> TranslationResult:
        def operation() -> TranslationResult:
            payload = _parse(TranslationIn, data)
            with self.session_scope() as session:
                row = translation_store.create_translation(DB(session), payload)
            return TranslationResult(translation=row, message="Translation created.")

        return self._run(TranslationResult, operation)

    def update_translation(
        self, translation_id: int, data: Mapping[str, Any] | TranslationIn
    ) -> TranslationResult:
        def operation() -> TranslationResult:
            payload = _parse(TranslationIn, data)
            with self.session_scope() as session:
                row = translation_store.update_translation(DB(session), translation_id, payload)
            return TranslationResult(translation=row, message="Translation updated.")

        return self._run(TranslationResult, operation)

    def delete_translation(self, translation_id: int) -> ActionResult:
        def operation() -> ActionResult:
            with self.session_scope() as session:
                translation_store.delete_translation(DB(session), translation_id)
            return ActionResult(message="Translation deleted.")

        return self._run(ActionResult, operation)

    def upsert_translation(self, data: Mapping[str, Any] | TranslationIn) -> TranslationResult:
        def operation() -> TranslationResult:
            payload = _parse(TranslationIn, data)
            with self.session_scope() as session:
                row = translation_store.upsert_translation(
                    DB(session),
                    payload.entity_type,
                    payload.entity_id,
                    payload.field,
                    payload.language_id,
                    payload.value,
                )
            return TranslationResult(translation=row)

        return self._run(TranslationResult, operation)

    def get_translations_for_entity(
        self, entity_type: str, entity_id: int
    ) -> TranslationListResult:
        def operation() -> TranslationListResult:
            with self.session_scope() as session:
                rows = translation_store.get_translations_for_entity(
                    DB(session), entity_type, entity_id
                )
            return TranslationListResult(translations=rows)

        return self._run(TranslationListResult, operation)

    def delete_translations_for_entity(self, entity_type: str, entity_id: int) -> DeleteResult:
        def operation() -> DeleteResult:
            with self.session_scope() as session:
                deleted = translation_store.delete_translations_for_entity(
                    DB(session), entity_type, entity_id
                )
            return DeleteResult(deleted=deleted, message=f"{deleted} translation(s) deleted.")

        return self._run(DeleteResult, operation)

    def handle_entity_translations(
        self,
        entity_type: str,
        entity_id: int,
        fields: Mapping[str, Optional[str]],
        *,
        overwrite: bool = True,
    ) -> ReportResult:
        def operation() -> ReportResult:
            report = orchestrator.handle_entity_translations(
                self.session_scope,
                self.translator,
                entity_type,
                entity_id,
                fields,
                overwrite=overwrite,
            )
            return ReportResult(success=report.success, message=report.message, report=report)

        return self._run(ReportResult, operation)

    def translation_completeness(self, entity_type: str, entity_id: int) -> CompletenessResult:
        def operation() -> CompletenessResult:
            kind = EntityType.parse(entity_type)
            with self.session_scope() as session:
                languages = orchestrator.translation_completeness(DB(session), kind, entity_id)
            return CompletenessResult(
                entity_type=kind.value,
                entity_id=entity_id,
                complete=all(not item.missing_fields for item in languages),
                languages=languages,
            )

        return self._run(CompletenessResult, operation)

    def repair_translations(self, entity_type: Optional[str] = None) -> RepairResult:
        return self._run(
            RepairResult,
            lambda: orchestrator.repair_translations(
                self.session_scope, self.translator, entity_type
            ),
        )

    # Content entities

    def list_entities(self, entity_type: str) -> EntityListResult:
        def operation() -> EntityListResult:
            with self.session_scope() as session:
                rows = content_service.list_entities(DB(session), entity_type)
            return EntityListResult(entities=rows)

        return self._run(EntityListResult, operation)

    def get_entity(self, entity_type: str, entity_id: int) -> EntityResult:
        def operation() -> EntityResult:
            with self.session_scope() as session:
                entity = content_service.get_entity(DB(session), entity_type, entity_id)
            return EntityResult(entity=entity)

        return self._run(EntityResult, operation)

    def _fan_out(self, kind: EntityType, entity_id: int, values: Mapping[str, Any]):
        if not values:
            return None
        try:
            return orchestrator.handle_entity_translations(
                self.session_scope, self.translator, kind, entity_id, values
            )
        except BackofficeError as exc:
            # The entity row is already committed; translations are best-effort.
            logger.warning("Translations for %s #%s were not saved: %s", kind.value, entity_id, exc.message)
            return None

    def create_entity(self, entity_type: str, data: Mapping[str, Any] | BaseModel) -> EntityResult:
        def operation() -> EntityResult:
            kind = EntityType.parse(entity_type)
            payload = content_service.parse_payload(kind, data)
            with self.session_scope() as session:
                entity = content_service.create_entity(DB(session), kind, payload)
            report = self._fan_out(
                kind, entity["id"], content_service.translatable_values(kind, payload.model_dump())
            )
            return EntityResult(
                entity=entity, translations=report, message=f"{kind.value} created."
            )

        return self._run(EntityResult, operation)

    def update_entity(
        self, entity_type: str, entity_id: int, data: Mapping[str, Any] | BaseModel
    ) -> EntityResult:
        def operation() -> EntityResult:
            kind = EntityType.parse(entity_type)
            payload = content_service.parse_payload(kind, data, partial=True)
            with self.session_scope() as session:
                entity = content_service.update_entity(DB(session), kind, entity_id, payload)
            report = self._fan_out(
                kind,
                entity_id,
                content_service.translatable_values(
                    kind, payload.model_dump(exclude_unset=True)
                ),
            )
            return EntityResult(
                entity=entity, translations=report, message=f"{kind.value} updated."
            )

        return self._run(EntityResult, operation)

    def delete_entity(self, entity_type: str, entity_id: int) -> DeleteResult:
        def operation() -> DeleteResult:
            kind = EntityType.parse(entity_type)
            with self.session_scope() as session:
                removed = content_service.delete_entity(DB(session), kind, entity_id)
            return DeleteResult(deleted=removed, message=f"{kind.value} deleted.")

        return self._run(DeleteResult, operation)

    # Artists and display order

    def list_artists(self) -> ArtistListResult:
        def operation() -> ArtistListResult:
            with self.session_scope() as session:
                return ArtistListResult(artists=content_service.list_artists(DB(session)))

        return self._run(ArtistListResult, operation)

    def get_artist(self, artist_id: int) -> ArtistResult:
        def operation() -> ArtistResult:
            with self.session_scope() as session:
                return ArtistResult(artist=content_service.get_artist(DB(session), artist_id))

        return self._run(ArtistResult, operation)

    def create_artist(self, data: Mapping[str, Any] | ArtistIn) -> ArtistResult:
        def operation() -> ArtistResult:
            payload = _parse(ArtistIn, data)
            with self.session_scope() as session:
                artist = content_service.create_artist(DB(session), payload)
            return ArtistResult(artist=artist, message="Artist created.")

        return self._run(ArtistResult, operation)

    def update_display_order(
        self,
        entity_type: str,
        updates: Iterable[Mapping[str, Any] | DisplayOrderUpdate],
    ) -> DisplayOrderResult:
        def operation() -> DisplayOrderResult:
            items = [_parse(DisplayOrderUpdate, item) for item in updates]
            with self.session_scope() as session:
                updated = display_order_service.update_display_order(
                    DB(session), entity_type, items
                )
            return DisplayOrderResult(updated=updated, message="Display order updated.")

        return self._run(DisplayOrderResult, operation)

    def get_max_display_order_by_artist(self, artist_id: int) -> MaxDisplayOrderResult:
        def operation() -> MaxDisplayOrderResult:
            with self.session_scope() as session:
                value = display_order_service.get_max_display_order_by_artist(
                    DB(session), artist_id
                )
            return MaxDisplayOrderResult(artist_id=artist_id, max_display_order=value)

        return self._run(MaxDisplayOrderResult, operation)

    def reset_display_order_for_artist(self, artist_id: int) -> DisplayOrderResult:
        def operation() -> DisplayOrderResult:
            with self.session_scope() as session:
                updated = display_order_service.reset_display_order_for_artist(
                    DB(session), artist_id
                )
            return DisplayOrderResult(updated=updated, message="Display order reset.")

        return self._run(DisplayOrderResult, operation)
