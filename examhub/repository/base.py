# -*- coding: utf-8 -*-
"""
examhub/repository/base.py
~~~~~~~~~~~~~~~~~~~~~~~~~~
Base repository operations for generic CRUD functionality.

This module provides reusable asynchronous CRUD helpers using SQLAlchemy 2.0
async ORM, with logging and basic validation. It is designed to be stateless
for unit testing simplicity.
"""

from __future__ import annotations

from typing import Any, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from examhub.config.logger import configure_logger
from examhub.domain.models import Base
from examhub.utils.exceptions import NotFoundError, PersistenceError

T = TypeVar("T", bound=Base)

logger = configure_logger(__name__)

# ---------------------------------------------------------------------------
# Generic helpers
# ---------------------------------------------------------------------------


async def get_item(session: AsyncSession, model: Type[T], item_id: int) -> T:
    """Retrieve a single item by ID or raise NotFoundError."""
    item = await session.get(model, item_id)
    if item is None:
        raise NotFoundError(resource_type=model.__name__, resource_id=item_id)
    return item


async def create_item(session: AsyncSession, model: Type[T], **kwargs: Any) -> T:
    """Create a new item in the database."""
    instance = model(**kwargs)
    session.add(instance)
    try:
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Ошибка создания {model.__name__}: {type(e).__name__}: {e}")
        raise PersistenceError(f"Не удалось сохранить {model.__name__}") from e
    await session.refresh(instance)
    return instance


async def update_item(
    session: AsyncSession, model: Type[T], item_id: int, **kwargs: Any
) -> T:
    """Update an existing item in the database."""
    instance = await get_item(session, model, item_id)
    for key, value in kwargs.items():
        setattr(instance, key, value)
    try:
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(
            f"Ошибка обновления {model.__name__} с ID {item_id}: {type(e).__name__}: {e}"
        )
        raise PersistenceError(f"Не удалось обновить {model.__name__}") from e
    await session.refresh(instance)
    return instance
