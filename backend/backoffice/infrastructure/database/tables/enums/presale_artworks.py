from backoffice.infrastructure.database.tables.enums.base import BaseTableActionEnum


class PresaleArtworksTableAction(BaseTableActionEnum):
    LIST_BY_ARTIST = "list_by_artist"
    MAX_DISPLAY_ORDER = "max_display_order"
    SET_DISPLAY_ORDER = "set_display_order"
