from backoffice.infrastructure.database.tables.enums.base import BaseTableActionEnum


class LanguagesTableAction(BaseTableActionEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    GET = "get"
    LIST_ALL = "list_all"
    GET_BY_CODE = "get_by_code"
    GET_DEFAULT = "get_default"
    CLEAR_DEFAULT = "clear_default"
    FIND_CONFLICT = "find_conflict"
