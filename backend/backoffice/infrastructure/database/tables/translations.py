import logging

from sqlalchemy import and_, delete, func, insert, select, update
from sqlalchemy.dialects import postgresql, sqlite

from backoffice.infrastructure.database.metadata import translations_table
from backoffice.infrastructure.database.models.translation import TranslationModel
from backoffice.infrastructure.database.tables.base import BaseTable
from backoffice.infrastructure.database.tables.enums.translations import (
    TranslationsTableAction,
)

logger = logging.getLogger(__name__)

# Dialects with INSERT ... ON CONFLICT DO UPDATE.
_UPSERT_DIALECTS = {"postgresql": postgresql.insert, "sqlite": sqlite.insert}

_COLUMNS = (
    translations_table.c.id,
    translations_table.c.entity_type,
    translations_table.c.entity_id,
    translations_table.c.field,
    translations_table.c.language_id,
    translations_table.c.value,
)


def _tuple_clause(entity_type: str, entity_id: int, field: str, language_id: int):
    return and_(
        translations_table.c.entity_type == entity_type,
        translations_table.c.entity_id == entity_id,
        translations_table.c.field == field,
        translations_table.c.language_id == language_id,
    )


class TranslationsTable(BaseTable):
    __tablename__ = "translations"

    def get(self, translation_id: int) -> TranslationModel | None:
        row = self.session.execute(
            select(*_COLUMNS).where(translations_table.c.id == translation_id)
        ).mappings().one_or_none()
        self._log(TranslationsTableAction.GET, translation_id=translation_id, exists=row is not None)
        return TranslationModel(**row) if row else None

    def find(
        self, *, entity_type: str, entity_id: int, field: str, language_id: int
    ) -> TranslationModel | None:
        row = self.session.execute(
            select(*_COLUMNS).where(_tuple_clause(entity_type, entity_id, field, language_id))
        ).mappings().one_or_none()
        self._log(
            TranslationsTableAction.FIND,
            entity_type=entity_type,
            entity_id=entity_id,
            field=field,
            language_id=language_id,
            exists=row is not None,
        )
        return TranslationModel(**row) if row else None

    def insert(
        self, *, entity_type: str, entity_id: int, field: str, language_id: int, value: str
    ) -> TranslationModel:
        row = self.session.execute(
            insert(translations_table)
            .values(
                entity_type=entity_type,
                entity_id=entity_id,
                field=field,
                language_id=language_id,
                value=value,
            )
            .returning(*_COLUMNS)
        ).mappings().one()
        self._log(
            TranslationsTableAction.INSERT,
            entity_type=entity_type,
            entity_id=entity_id,
            field=field,
            language_id=language_id,
        )
        return TranslationModel(**row)

    def upsert(
        self, *, entity_type: str, entity_id: int, field: str, language_id: int, value: str
    ) -> TranslationModel:
        values = dict(
            entity_type=entity_type,
            entity_id=entity_id,
            field=field,
            language_id=language_id,
            value=value,
        )
        dialect_insert = _UPSERT_DIALECTS.get(self.session.get_bind().dialect.name)
        if dialect_insert is not None:
            stmt = dialect_insert(translations_table).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=[
                    translations_table.c.entity_type,
                    translations_table.c.entity_id,
                    translations_table.c.field,
                    translations_table.c.language_id,
                ],
                set_={"value": stmt.excluded["value"]},
            )
            row = self.session.execute(stmt.returning(*_COLUMNS)).mappings().one()
        else:
            existing = self.find(
                entity_type=entity_type,
                entity_id=entity_id,
                field=field,
                language_id=language_id,
            )
            if existing is None:
                return self.insert(**values)
            row = self.session.execute(
                update(translations_table)
                .where(translations_table.c.id == existing.id)
                .values(value=value)
                .returning(*_COLUMNS)
            ).mappings().one()
        self._log(
            TranslationsTableAction.UPSERT,
            entity_type=entity_type,
            entity_id=entity_id,
            field=field,
            language_id=language_id,
        )
        return TranslationModel(**row)

    def update(self, translation_id: int, **values: object) -> TranslationModel | None:
        row = self.session.execute(
            update(translations_table)
            .where(translations_table.c.id == translation_id)
            .values(**values)
            .returning(*_COLUMNS)
        ).mappings().one_or_none()
        self._log(TranslationsTableAction.UPDATE, translation_id=translation_id)
        return TranslationModel(**row) if row else None

    def delete(self, translation_id: int) -> bool:
        result = self.session.execute(
            delete(translations_table).where(translations_table.c.id == translation_id)
        )
        self._log(TranslationsTableAction.DELETE, translation_id=translation_id)
        return result.rowcount > 0

    def search(
        self,
        *,
        entity_type: str | None = None,
        entity_id: int | None = None,
        language_id: int | None = None,
    ) -> list[TranslationModel]:
        stmt = select(*_COLUMNS)
        if entity_type is not None:
            stmt = stmt.where(translations_table.c.entity_type == entity_type)
        if entity_id is not None:
            stmt = stmt.where(translations_table.c.entity_id == entity_id)
        if language_id is not None:
            stmt = stmt.where(translations_table.c.language_id == language_id)
        stmt = stmt.order_by(
            translations_table.c.entity_type,
            translations_table.c.entity_id,
            translations_table.c.field,
            translations_table.c.language_id,
        )
        rows = self.session.execute(stmt).mappings().all()
        self._log(TranslationsTableAction.SEARCH, entity_type=entity_type, count=len(rows))
        return [TranslationModel(**row) for row in rows]

    def list_for_entity(self, entity_type: str, entity_id: int) -> list[TranslationModel]:
        rows = self.session.execute(
            select(*_COLUMNS)
            .where(
                translations_table.c.entity_type == entity_type,
                translations_table.c.entity_id == entity_id,
            )
            .order_by(translations_table.c.field, translations_table.c.language_id)
        ).mappings().all()
        self._log(
            TranslationsTableAction.LIST_FOR_ENTITY,
            entity_type=entity_type,
            entity_id=entity_id,
            count=len(rows),
        )
        return [TranslationModel(**row) for row in rows]

    def delete_for_entity(self, entity_type: str, entity_id: int) -> int:
        result = self.session.execute(
            delete(translations_table).where(
                translations_table.c.entity_type == entity_type,
                translations_table.c.entity_id == entity_id,
            )
        )
        self._log(
            TranslationsTableAction.DELETE_FOR_ENTITY,
            entity_type=entity_type,
            entity_id=entity_id,
            deleted=result.rowcount,
        )
        return result.rowcount

    def count_by_language(self, language_id: int) -> int:
        count = self.session.execute(
            select(func.count())
            .select_from(translations_table)
            .where(translations_table.c.language_id == language_id)
        ).scalar_one()
        self._log(TranslationsTableAction.COUNT_BY_LANGUAGE, language_id=language_id, count=count)
        return count
