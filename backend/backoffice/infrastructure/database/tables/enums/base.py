from enum import Enum


class BaseTableActionEnum(str, Enum):
    pass
