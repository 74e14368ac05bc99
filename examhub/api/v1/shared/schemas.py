# -*- coding: utf-8 -*-
"""
Общие Pydantic схемы API.

Поля моделей объявляются в snake_case, в JSON выводятся в camelCase.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class PaginationRead(CamelModel):
    total: int
    page: int
    limit: int
    pages: int


class MessageRead(CamelModel):
    message: str
