# -*- coding: utf-8 -*-
"""
Каталог спецификаций тестов компаний и GATE.
"""

from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from examhub.config.logger import configure_logger
from examhub.domain.enums import CatalogKind
from examhub.domain.models import CatalogEntry
from examhub.repository.topics import normalize_name
from examhub.utils.exceptions import PersistenceError

logger = configure_logger(__name__)


async def get_entry(
    session: AsyncSession, name: str, kind: Optional[CatalogKind] = None
) -> Optional[CatalogEntry]:
    stmt = select(CatalogEntry).where(CatalogEntry.name == normalize_name(name))
    if kind is not None:
        stmt = stmt.where(CatalogEntry.kind == kind)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def list_entries(
    session: AsyncSession, kind: Optional[CatalogKind] = None
) -> List[CatalogEntry]:
    stmt = select(CatalogEntry).order_by(CatalogEntry.name)
    if kind is not None:
        stmt = stmt.where(CatalogEntry.kind == kind)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def upsert_entry(session: AsyncSession, **fields: Any) -> CatalogEntry:
    """Создать запись каталога или перезаписать существующую с тем же именем."""
    name = normalize_name(fields.pop("name"))
    entry = await get_entry(session, name)
    if entry is None:
        entry = CatalogEntry(name=name, **fields)
        session.add(entry)
    else:
        for key, value in fields.items():
            setattr(entry, key, value)

    try:
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Ошибка сохранения записи каталога '{name}': {type(e).__name__}: {e}")
        raise PersistenceError("Не удалось сохранить запись каталога") from e

    await session.refresh(entry)
    return entry
