from sqlalchemy.orm import Session

from backoffice.entities import EntityType
from backoffice.errors import UnsupportedEntity
from backoffice.infrastructure.database.metadata import (
    artist_categories_table,
    artwork_styles_table,
    faqs_table,
    presale_artworks_table,
)
from backoffice.infrastructure.database.tables.artists import ArtistsTable
from backoffice.infrastructure.database.tables.content import ContentTable
from backoffice.infrastructure.database.tables.languages import LanguagesTable
from backoffice.infrastructure.database.tables.presale_artworks import PresaleArtworksTable
from backoffice.infrastructure.database.tables.translations import TranslationsTable

# Entity kinds whose rows live in this service's database.
CONTENT_TABLES = {
    EntityType.FAQ: (faqs_table, "id"),
    EntityType.ARTWORK_STYLE: (artwork_styles_table, "name"),
    EntityType.ARTIST_CATEGORY: (artist_categories_table, "name"),
    EntityType.PRESALE_ARTWORK: (presale_artworks_table, "display_order"),
}


class DB:
    def __init__(self, session: Session) -> None:
        self.session = session
        self.languages = LanguagesTable(session=session)
        self.translations = TranslationsTable(session=session)
        self.artists = ArtistsTable(session=session)
        self.presale_artworks = PresaleArtworksTable(session=session)

    def content(self, entity_type: EntityType) -> ContentTable:
        try:
            table, order_by = CONTENT_TABLES[entity_type]
        except KeyError:
            raise UnsupportedEntity(
                f"{entity_type.value} is not stored by this service"
            ) from None
        return ContentTable(self.session, table, order_by=order_by)
