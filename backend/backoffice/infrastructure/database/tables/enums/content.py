from backoffice.infrastructure.database.tables.enums.base import BaseTableActionEnum


class ContentTableAction(BaseTableActionEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    GET = "get"
    LIST_ALL = "list_all"
