# -*- coding: utf-8 -*-
"""
Общие фикстуры для тестирования
"""

import os

# Настройки должны быть заданы до импорта приложения
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("ADMIN_EMAIL", "admin@examhub.io")
os.environ.setdefault("ADMIN_PASSWORD", "admin-password")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (AsyncSession, async_sessionmaker,
                                    create_async_engine)
from sqlalchemy.pool import StaticPool

from examhub.clients.database_client import get_db
from examhub.domain.models import Base
from examhub.main import app
from examhub.service.cache_service import cache_service

# Тестовая база данных в памяти
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def test_engine():
    """Создать тестовый движок БД."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def test_session(test_engine):
    """Создать тестовую сессию БД."""
    session_maker = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with session_maker() as session:
        yield session


@pytest.fixture(autouse=True)
def fake_cache():
    """Redis в тестах не используется: кэш всегда пуст."""
    with patch.object(cache_service, "get", AsyncMock(return_value=None)) as get_mock, \
            patch.object(cache_service, "set", AsyncMock(return_value=True)) as set_mock, \
            patch.object(cache_service, "delete", AsyncMock(return_value=True)) as delete_mock:
        yield {"get": get_mock, "set": set_mock, "delete": delete_mock}


@pytest.fixture
async def async_client(test_session):
    """Создать асинхронный тестовый клиент для API."""

    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    app.dependency_overrides.clear()
