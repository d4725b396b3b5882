import logging
from typing import Any

from sqlalchemy.orm import Session

from backoffice.infrastructure.database.tables.enums.base import BaseTableActionEnum

logger = logging.getLogger(__name__)


class BaseTable:
    __tablename__: str = ""

    def __init__(self, session: Session):
        self.session = session

    def _log(self, action: BaseTableActionEnum, **kwargs: Any) -> None:
        logger.debug("table=%s action=%s %s", self.__tablename__, action.value, kwargs)
