from backoffice.infrastructure.database.tables.enums.base import BaseTableActionEnum


class ArtistsTableAction(BaseTableActionEnum):
    CREATE = "create"
    GET = "get"
    LIST_ALL = "list_all"
