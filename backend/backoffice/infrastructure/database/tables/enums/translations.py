from backoffice.infrastructure.database.tables.enums.base import BaseTableActionEnum


class TranslationsTableAction(BaseTableActionEnum):
    GET = "get"
    FIND = "find"
    INSERT = "insert"
    UPSERT = "upsert"
    UPDATE = "update"
    DELETE = "delete"
    SEARCH = "search"
    LIST_FOR_ENTITY = "list_for_entity"
    DELETE_FOR_ENTITY = "delete_for_entity"
    COUNT_BY_LANGUAGE = "count_by_language"
