import logging
from typing import Any

from sqlalchemy import Table, delete, insert, select, update

from backoffice.infrastructure.database.tables.base import BaseTable
from backoffice.infrastructure.database.tables.enums.content import ContentTableAction

logger = logging.getLogger(__name__)


class ContentTable(BaseTable):
    """Plain CRUD over one landing/data-administration table."""

    def __init__(self, session, table: Table, order_by: str = "id"):
        super().__init__(session)
        self.table = table
        self.order_by = order_by
        self.__tablename__ = table.name

    def list_all(self) -> list[dict[str, Any]]:
        rows = self.session.execute(
            select(self.table).order_by(self.table.c[self.order_by], self.table.c.id)
        ).mappings().all()
        self._log(ContentTableAction.LIST_ALL, count=len(rows))
        return [dict(row) for row in rows]

    def get(self, row_id: int) -> dict[str, Any] | None:
        row = self.session.execute(
            select(self.table).where(self.table.c.id == row_id)
        ).mappings().one_or_none()
        self._log(ContentTableAction.GET, row_id=row_id, exists=row is not None)
        return dict(row) if row else None

    def create(self, values: dict[str, Any]) -> dict[str, Any]:
        row = self.session.execute(
            insert(self.table).values(**values).returning(*self.table.c)
        ).mappings().one()
        self._log(ContentTableAction.CREATE, row_id=row["id"])
        return dict(row)

    def update(self, row_id: int, values: dict[str, Any]) -> dict[str, Any] | None:
        row = self.session.execute(
            update(self.table)
            .where(self.table.c.id == row_id)
            .values(**values)
            .returning(*self.table.c)
        ).mappings().one_or_none()
        self._log(ContentTableAction.UPDATE, row_id=row_id, exists=row is not None)
        return dict(row) if row else None

    def delete(self, row_id: int) -> bool:
        result = self.session.execute(
            delete(self.table).where(self.table.c.id == row_id)
        )
        self._log(ContentTableAction.DELETE, row_id=row_id)
        return result.rowcount > 0
