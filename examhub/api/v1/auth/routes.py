# -*- coding: utf-8 -*-
"""
Маршруты FastAPI для аутентификации.
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from examhub.clients.database_client import get_db
from examhub.config.logger import configure_logger
from examhub.security.security import (Identity, extract_bearer_token,
                                       get_identity)
from examhub.service import users as users_service

from .schemas import LoginSchema, RegisterSchema, TokenSchema, UserReadSchema

router = APIRouter()
logger = configure_logger(__name__)


@router.post(
    "/register", response_model=UserReadSchema, status_code=status.HTTP_201_CREATED
)
async def register(payload: RegisterSchema, session: AsyncSession = Depends(get_db)):
    """
    Регистрирует студента.

    Исключения:
        * 409 ― email или URN уже заняты.
    """
    return await users_service.register_student(
        session,
        full_name=payload.full_name,
        urn=payload.urn,
        email=str(payload.email),
        password=payload.password,
        city=payload.city,
        contact_number=payload.contact_number,
    )


@router.post("/login", response_model=TokenSchema, status_code=status.HTTP_200_OK)
async def login(credentials: LoginSchema, session: AsyncSession = Depends(get_db)):
    """
    Аутентифицирует пользователя по email или URN и возвращает JWT-токены.

    Исключения:
        * 401 ― неверные учётные данные.
        * 403 ― пользователь неактивен.
    """
    _, tokens = await users_service.login(session, credentials.login, credentials.password)
    return tokens


@router.post("/refresh", response_model=TokenSchema, status_code=status.HTTP_200_OK)
async def refresh_token(request: Request, session: AsyncSession = Depends(get_db)):
    """
    Обновляет пару токенов; refresh токен передаётся в заголовке Authorization.

    Исключения:
        * 401 ― недействительный или истёкший refresh токен.
    """
    token = extract_bearer_token(request)
    return await users_service.refresh_tokens(session, token)


@router.get("/me", response_model=UserReadSchema)
async def read_me(
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(get_db),
):
    """Возвращает профиль текущего пользователя."""
    return await users_service.get_current_user(session, identity.user_id)
