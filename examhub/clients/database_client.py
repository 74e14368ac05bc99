# -*- coding: utf-8 -*-
"""
Клиент для работы с хранилищем документов сервиса (PostgreSQL через SQLAlchemy).
"""
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (AsyncSession, async_sessionmaker,
                                    create_async_engine)

from examhub.config.settings import settings
from examhub.domain.models import Base

async_engine = create_async_engine(
    settings.database_url,
    echo=False,
    pool_pre_ping=True,  # Проверяем соединение перед использованием
    pool_recycle=3600,  # Переподключаемся каждый час
)

AsyncSessionLocal = async_sessionmaker(
    bind=async_engine, class_=AsyncSession, expire_on_commit=False
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Предоставляет асинхронную сессию базы данных для внедрения зависимостей в FastAPI.

    Yields:
        AsyncSession: Активная сессия базы данных
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db() -> None:
    """
    Создаёт все таблицы, определённые в моделях.

    Raises:
        SQLAlchemyError: Ошибки при создании таблиц
    """
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def ping_db() -> None:
    """Проверяет доступность базы данных простым запросом."""
    async with async_engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
