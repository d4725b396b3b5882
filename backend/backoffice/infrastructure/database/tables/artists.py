import logging

from sqlalchemy import insert, select

from backoffice.infrastructure.database.metadata import artists_table
from backoffice.infrastructure.database.models.artist import ArtistModel
from backoffice.infrastructure.database.tables.base import BaseTable
from backoffice.infrastructure.database.tables.enums.artists import ArtistsTableAction

logger = logging.getLogger(__name__)


class ArtistsTable(BaseTable):
    __tablename__ = "artists"

    def list_all(self) -> list[ArtistModel]:
        rows = self.session.execute(
            select(artists_table).order_by(artists_table.c.name, artists_table.c.id)
        ).mappings().all()
        self._log(ArtistsTableAction.LIST_ALL, count=len(rows))
        return [ArtistModel(**row) for row in rows]

    def get(self, artist_id: int) -> ArtistModel | None:
        row = self.session.execute(
            select(artists_table).where(artists_table.c.id == artist_id)
        ).mappings().one_or_none()
        self._log(ArtistsTableAction.GET, artist_id=artist_id, exists=row is not None)
        return ArtistModel(**row) if row else None

    def create(self, *, name: str) -> ArtistModel:
        row = self.session.execute(
            insert(artists_table).values(name=name).returning(*artists_table.c)
        ).mappings().one()
        self._log(ArtistsTableAction.CREATE, name=name)
        return ArtistModel(**row)
