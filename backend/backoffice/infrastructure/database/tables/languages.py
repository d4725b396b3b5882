import logging

from sqlalchemy import delete, func, insert, or_, select, update

from backoffice.infrastructure.database.metadata import languages_table
from backoffice.infrastructure.database.models.language import LanguageModel
from backoffice.infrastructure.database.tables.base import BaseTable
from backoffice.infrastructure.database.tables.enums.languages import LanguagesTableAction

logger = logging.getLogger(__name__)

_COLUMNS = (
    languages_table.c.id,
    languages_table.c.name,
    languages_table.c.code,
    languages_table.c.is_default,
)


class LanguagesTable(BaseTable):
    __tablename__ = "languages"

    def list_all(self) -> list[LanguageModel]:
        rows = self.session.execute(
            select(*_COLUMNS).order_by(languages_table.c.name, languages_table.c.id)
        ).mappings().all()
        self._log(LanguagesTableAction.LIST_ALL, count=len(rows))
        return [LanguageModel(**row) for row in rows]

    def get(self, language_id: int) -> LanguageModel | None:
        row = self.session.execute(
            select(*_COLUMNS).where(languages_table.c.id == language_id)
        ).mappings().one_or_none()
        self._log(LanguagesTableAction.GET, language_id=language_id, exists=row is not None)
        return LanguageModel(**row) if row else None

    def get_by_code(self, code: str) -> LanguageModel | None:
        row = self.session.execute(
            select(*_COLUMNS).where(languages_table.c.code == code)
        ).mappings().one_or_none()
        self._log(LanguagesTableAction.GET_BY_CODE, code=code, exists=row is not None)
        return LanguageModel(**row) if row else None

    def get_default(self) -> LanguageModel | None:
        row = self.session.execute(
            select(*_COLUMNS)
            .where(languages_table.c.is_default.is_(True))
            .order_by(languages_table.c.id)
            .limit(1)
        ).mappings().one_or_none()
        self._log(LanguagesTableAction.GET_DEFAULT, exists=row is not None)
        return LanguageModel(**row) if row else None

    def find_conflict(
        self, *, code: str, name: str, exclude_id: int | None = None
    ) -> str | None:
        """Return the first of ``code``/``name`` already held by another row."""
        stmt = select(languages_table.c.code, languages_table.c.name).where(
            or_(languages_table.c.code == code, languages_table.c.name == name)
        )
        if exclude_id is not None:
            stmt = stmt.where(languages_table.c.id != exclude_id)
        rows = self.session.execute(stmt).mappings().all()
        conflict = None
        if any(row["code"] == code for row in rows):
            conflict = "code"
        elif rows:
            conflict = "name"
        self._log(LanguagesTableAction.FIND_CONFLICT, code=code, name=name, conflict=conflict)
        return conflict

    def clear_default(self, *, except_id: int | None = None) -> int:
        stmt = (
            update(languages_table)
            .where(languages_table.c.is_default.is_(True))
            .values(is_default=False)
        )
        if except_id is not None:
            stmt = stmt.where(languages_table.c.id != except_id)
        result = self.session.execute(stmt)
        self._log(LanguagesTableAction.CLEAR_DEFAULT, except_id=except_id, cleared=result.rowcount)
        return result.rowcount

    def create(self, *, name: str, code: str, is_default: bool = False) -> LanguageModel:
        row = self.session.execute(
            insert(languages_table)
            .values(name=name, code=code, is_default=is_default)
            .returning(*_COLUMNS)
        ).mappings().one()
        self._log(LanguagesTableAction.CREATE, code=code, is_default=is_default)
        return LanguageModel(**row)

    def update(
        self, language_id: int, *, name: str, code: str, is_default: bool
    ) -> LanguageModel | None:
        row = self.session.execute(
            update(languages_table)
            .where(languages_table.c.id == language_id)
            .values(name=name, code=code, is_default=is_default)
            .returning(*_COLUMNS)
        ).mappings().one_or_none()
        self._log(LanguagesTableAction.UPDATE, language_id=language_id, is_default=is_default)
        return LanguageModel(**row) if row else None

    def delete(self, language_id: int) -> bool:
        result = self.session.execute(
            delete(languages_table).where(languages_table.c.id == language_id)
        )
        self._log(LanguagesTableAction.DELETE, language_id=language_id)
        return result.rowcount > 0
