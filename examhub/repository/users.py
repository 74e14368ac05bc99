# -*- coding: utf-8 -*-
"""
examhub/repository/users.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~
Репозиторные функции для работы с пользователями.
"""

from datetime import datetime
from typing import List, Optional, Tuple

from loguru import logger
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from examhub.domain.enums import Role
from examhub.domain.models import User
from examhub.utils.exceptions import ConflictError


async def get_user_by_id(session: AsyncSession, user_id: int) -> Optional[User]:
    return await session.get(User, user_id)


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    stmt = select(User).where(func.lower(User.email) == email.strip().lower())
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_user_by_login(session: AsyncSession, login: str) -> Optional[User]:
    """
    Найти пользователя по email или URN.

    Args:
        session: Сессия базы данных
        login: Email или URN (строка из цифр)

    Returns:
        Пользователь или None
    """
    login = login.strip()
    conditions = [func.lower(User.email) == login.lower()]
    if login.isdigit():
        conditions.append(User.urn == int(login))
    result = await session.execute(select(User).where(or_(*conditions)))
    return result.scalars().first()


async def create_user_repo(session: AsyncSession, **fields) -> User:
    """
    Создать пользователя.

    Raises:
        ConflictError: Email или URN уже заняты
    """
    user = User(**fields)
    session.add(user)
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        logger.warning(f"Пользователь {fields.get('email')} уже существует: {e.orig}")
        raise ConflictError("Пользователь с таким email или URN уже существует") from e
    await session.refresh(user)
    logger.debug(f"Пользователь {user.email} создан с ID {user.id}")
    return user


async def save_user(session: AsyncSession, user: User) -> User:
    await session.commit()
    await session.refresh(user)
    return user


async def list_students(
    session: AsyncSession,
    *,
    page: int,
    limit: int,
    city: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    search: Optional[str] = None,
) -> Tuple[List[User], int]:
    """
    Страница студентов, новые первыми.

    Returns:
        (студенты страницы, общее количество под фильтром)
    """
    conditions = [User.role == Role.STUDENT]
    if city:
        conditions.append(func.lower(User.city) == city.strip().lower())
    if start_date:
        conditions.append(User.created_at >= start_date)
    if end_date:
        conditions.append(User.created_at <= end_date)
    if search:
        conditions.append(User.full_name.ilike(f"%{search.strip()}%"))

    total = (
        await session.execute(select(func.count(User.id)).where(*conditions))
    ).scalar_one()

    stmt = (
        select(User)
        .where(*conditions)
        .order_by(User.created_at.desc(), User.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all()), total
