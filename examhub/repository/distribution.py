# -*- coding: utf-8 -*-
"""
Хранилище версий распределения CET.
"""

from typing import Any, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from examhub.config.logger import configure_logger
from examhub.domain.models import DistributionConfig
from examhub.utils.exceptions import PersistenceError

logger = configure_logger(__name__)


async def get_active_config(session: AsyncSession) -> Optional[DistributionConfig]:
    """Активная версия распределения или None."""
    result = await session.execute(
        select(DistributionConfig)
        .where(DistributionConfig.is_active.is_(True))
        .order_by(DistributionConfig.version.desc())
    )
    return result.scalars().first()


async def save_new_version(
    session: AsyncSession, document: dict[str, Any], created_by: Optional[int] = None
) -> DistributionConfig:
    """
    Сохранить документ как новую активную версию.

    Предыдущие версии остаются в истории, но деактивируются в той же транзакции.
    """
    current_max = (
        await session.execute(select(func.max(DistributionConfig.version)))
    ).scalar()
    version = (current_max or 0) + 1

    config = DistributionConfig(
        version=version, is_active=True, document=document, created_by=created_by
    )
    try:
        await session.execute(
            update(DistributionConfig)
            .where(DistributionConfig.is_active.is_(True))
            .values(is_active=False)
        )
        session.add(config)
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Ошибка сохранения распределения: {type(e).__name__}: {e}")
        raise PersistenceError("Не удалось сохранить распределение") from e

    await session.refresh(config)
    logger.info(f"Сохранена версия распределения {version}")
    return config
