# -*- coding: utf-8 -*-
"""
examhub/service/users.py
~~~~~~~~~~~~~~~~~~~~~~~~
Сервисный слой для учётных записей: регистрация и вход студентов,
список студентов для администратора и создание администраторов.
"""

from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from fastapi import HTTPException, status
from loguru import logger
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from examhub.config.settings import settings
from examhub.domain.enums import Role
from examhub.domain.models import User
from examhub.repository.users import (create_user_repo, get_user_by_email,
                                      get_user_by_id, get_user_by_login,
                                      list_students, save_user)
from examhub.security.security import (create_access_token,
                                       create_refresh_token, verify_token)
from examhub.service.analytics import PerformanceAggregator
from examhub.utils.exceptions import ConflictError, NotFoundError, ValidationError

# Контекст для хэширования паролей
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    """
    Хэшировать пароль.

    Args:
        password: Пароль в открытом виде

    Returns:
        Хэшированный пароль
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def generate_admin_urn(now: Optional[datetime] = None) -> int:
    """URN администратора: ``99`` и последние 8 цифр метки времени в миллисекундах."""
    now = now or datetime.now()
    millis = str(int(now.timestamp() * 1000))
    return int(f"99{millis[-8:]}")


def _issue_tokens(user: User) -> Dict[str, str]:
    claims = {"sub": str(user.id), "role": user.role.value}
    return {
        "access_token": create_access_token(claims),
        "refresh_token": create_refresh_token(claims),
        "token_type": "bearer",
    }


def _invalid_credentials() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Недействительные учётные данные",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def register_student(
    session: AsyncSession,
    *,
    full_name: str,
    urn: int,
    email: str,
    password: str,
    city: Optional[str] = None,
    contact_number: Optional[str] = None,
) -> User:
    """
    Зарегистрировать студента.

    Raises:
        ConflictError: Email или URN уже заняты
    """
    if await get_user_by_email(session, email):
        raise ConflictError("Пользователь с таким email уже существует")

    user = await create_user_repo(
        session,
        full_name=full_name.strip(),
        urn=urn,
        email=email.strip().lower(),
        password=hash_password(password),
        role=Role.STUDENT,
        city=city,
        contact_number=contact_number,
    )
    logger.info(f"Зарегистрирован студент {user.email} (ID: {user.id})")
    return user


async def login(
    session: AsyncSession, login_value: str, password: str
) -> Tuple[User, Dict[str, str]]:
    """
    Войти по email или URN.

    Raises:
        HTTPException: 401 при неверных учётных данных, 403 для неактивного пользователя
    """
    user = await get_user_by_login(session, login_value)
    if not user or not verify_password(password, user.password):
        logger.warning(f"Неудачная попытка входа: {login_value}")
        raise _invalid_credentials()
    if not user.is_active:
        logger.warning(f"Неудачная попытка входа: пользователь {login_value} неактивен")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Пользователь неактивен"
        )

    tokens = _issue_tokens(user)
    user.refresh_token = tokens["refresh_token"]
    user.last_login = datetime.now()
    await save_user(session, user)

    logger.info(
        f"Пользователь {user.email} (ID: {user.id}, роль: {user.role.value}) успешно авторизовался"
    )
    return user, tokens


async def refresh_tokens(session: AsyncSession, refresh_token: str) -> Dict[str, str]:
    """Выдать новую пару токенов по действующему refresh токену."""
    payload = verify_token(refresh_token, "refresh")
    user = await get_user_by_id(session, int(payload.get("sub", 0)))
    if not user or user.refresh_token != refresh_token:
        logger.warning(f"Недействительный refresh токен для пользователя {payload.get('sub')}")
        raise _invalid_credentials()

    tokens = _issue_tokens(user)
    user.refresh_token = tokens["refresh_token"]
    await save_user(session, user)
    return tokens


async def get_current_user(session: AsyncSession, user_id: int) -> User:
    user = await get_user_by_id(session, user_id)
    if user is None:
        raise NotFoundError("Пользователь", user_id)
    return user


async def list_students_page(
    session: AsyncSession,
    *,
    page: int = 1,
    limit: int = 10,
    city: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    search: Optional[str] = None,
) -> Dict[str, Any]:
    """Страница студентов с фильтрами и пагинацией."""
    if start_date and end_date and start_date > end_date:
        raise ValidationError("startDate не может быть позже endDate")

    students, total = await list_students(
        session,
        page=page,
        limit=limit,
        city=city,
        start_date=start_date,
        end_date=end_date,
        search=search,
    )
    logger.info(f"Список студентов: страница {page}, найдено {total}")
    return {
        "students": students,
        "pagination": {
            "total": total,
            "page": page,
            "limit": limit,
            "pages": PerformanceAggregator.total_pages(total, limit),
        },
    }


async def get_student_details(session: AsyncSession, student_id: int) -> User:
    user = await get_user_by_id(session, student_id)
    if user is None:
        raise NotFoundError("Студент", student_id)
    if user.role != Role.STUDENT:
        raise ValidationError(f"Пользователь {student_id} не является студентом")
    return user


async def create_admin(
    session: AsyncSession, *, full_name: str, email: str, password: str, created_by: int
) -> User:
    """
    Создать администратора.

    Raises:
        ConflictError: Email уже занят
    """
    if await get_user_by_email(session, email):
        raise ConflictError("Пользователь с таким email уже существует")

    admin = await create_user_repo(
        session,
        full_name=full_name.strip(),
        email=email.strip().lower(),
        password=hash_password(password),
        urn=generate_admin_urn(),
        role=Role.ADMIN,
    )
    logger.info(f"Администратор {admin.email} создан пользователем {created_by}")
    return admin


async def ensure_default_admin(session: AsyncSession) -> bool:
    """
    Создать администратора по умолчанию из настроек, если его нет.

    Returns:
        True если администратор был создан
    """
    if await get_user_by_email(session, settings.admin_email):
        logger.info(f"✅ Администратор {settings.admin_email} уже существует")
        return False

    await create_user_repo(
        session,
        full_name=settings.admin_full_name,
        email=settings.admin_email.strip().lower(),
        password=hash_password(settings.admin_password),
        urn=generate_admin_urn(),
        role=Role.ADMIN,
    )
    logger.info(f"✅ Администратор по умолчанию {settings.admin_email} создан")
    return True
