import logging

from sqlalchemy import func, nulls_last, select, update

from backoffice.infrastructure.database.metadata import presale_artworks_table
from backoffice.infrastructure.database.models.presale_artwork import PresaleArtworkModel
from backoffice.infrastructure.database.tables.base import BaseTable
from backoffice.infrastructure.database.tables.enums.presale_artworks import (
    PresaleArtworksTableAction,
)

logger = logging.getLogger(__name__)


class PresaleArtworksTable(BaseTable):
    __tablename__ = "presale_artworks"

    def list_by_artist(self, artist_id: int) -> list[PresaleArtworkModel]:
        """Artworks of one artist, legacy ``order`` first (nulls last), then id."""
        rows = self.session.execute(
            select(presale_artworks_table)
            .where(presale_artworks_table.c.artist_id == artist_id)
            .order_by(
                nulls_last(presale_artworks_table.c["order"].asc()),
                presale_artworks_table.c.id,
            )
        ).mappings().all()
        self._log(PresaleArtworksTableAction.LIST_BY_ARTIST, artist_id=artist_id, count=len(rows))
        return [PresaleArtworkModel(**row) for row in rows]

    def max_display_order(self, artist_id: int) -> int:
        value = self.session.execute(
            select(func.max(presale_artworks_table.c.display_order)).where(
                presale_artworks_table.c.artist_id == artist_id
            )
        ).scalar_one_or_none()
        self._log(PresaleArtworksTableAction.MAX_DISPLAY_ORDER, artist_id=artist_id, value=value)
        return value or 0

    def set_display_order(self, artwork_id: int, display_order: int | None) -> bool:
        result = self.session.execute(
            update(presale_artworks_table)
            .where(presale_artworks_table.c.id == artwork_id)
            .values(display_order=display_order)
        )
        self._log(
            PresaleArtworksTableAction.SET_DISPLAY_ORDER,
            artwork_id=artwork_id,
            display_order=display_order,
            updated=result.rowcount,
        )
        return result.rowcount > 0
