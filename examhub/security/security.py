# -*- coding: utf-8 -*-
"""examhub.security.security
~~~~~~~~~~~~~~~~~~~~~~~~~~~~
JWT помощники и проверки доступа на основе ролей.

Ключевые моменты
================
* Использует *python‑jose* для компактной обработки JWS.
* Экспортирует **create_access_token**, **verify_token** и **require_roles**
  (фабрика зависимостей FastAPI).
* Сервисный слой не читает запрос: маршрут получает :class:`Identity` через
  зависимость :func:`get_identity` и передаёт её явно.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt

from examhub.config.logger import configure_logger
from examhub.config.settings import settings
from examhub.domain.enums import Role

logger = configure_logger(__name__)

# ---------------------------------------------------------------------------
# JWT помощники
# ---------------------------------------------------------------------------

# Отдельные секреты для access и refresh токенов
ACCESS_TOKEN_SECRET = settings.jwt_secret
REFRESH_TOKEN_SECRET = settings.jwt_secret + "_refresh"


def _encode(data: dict, secret: str, token_type: str, lifetime: timedelta) -> str:
    to_encode = data.copy()
    to_encode.update(
        {"exp": datetime.now(timezone.utc) + lifetime, "token_type": token_type}
    )
    if "sub" in to_encode and not isinstance(to_encode["sub"], str):
        to_encode["sub"] = str(to_encode["sub"])
    return jwt.encode(to_encode, secret, algorithm=settings.jwt_algorithm)


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    return _encode(data, ACCESS_TOKEN_SECRET, "access", lifetime)


def create_refresh_token(data: dict, expires_delta: timedelta | None = None) -> str:
    lifetime = expires_delta or timedelta(days=settings.refresh_token_expire_days)
    return _encode(data, REFRESH_TOKEN_SECRET, "refresh", lifetime)


def verify_token(token: str, expected_type: str = "access") -> dict:
    secret = ACCESS_TOKEN_SECRET if expected_type == "access" else REFRESH_TOKEN_SECRET
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        logger.warning(f"Ошибка проверки JWT: {str(exc)}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Недействительный или истекший токен",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc

    token_type = payload.get("token_type")
    if token_type != expected_type:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Неверный тип токена. Ожидался {expected_type}, получен {token_type}",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload


# ---------------------------------------------------------------------------
# Проверка на основе ролей
# ---------------------------------------------------------------------------


def extract_bearer_token(request: Request) -> str:
    auth: str | None = request.headers.get("Authorization")
    if not auth or not auth.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Отсутствует bearer токен",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return auth.split(" ", 1)[1]


def require_roles(*allowed_roles: Role) -> Callable[[Request], dict]:
    allowed: set[Role] = set(allowed_roles)

    async def checker(request: Request) -> dict:
        token = extract_bearer_token(request)
        payload = verify_token(token, "access")
        try:
            role = Role(payload["role"])
            int(payload["sub"])
        except (KeyError, ValueError) as exc:
            logger.error(f"Неверный payload токена: {payload}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Неверный payload токена",
            ) from exc

        if role not in allowed:
            logger.warning(
                f"Доступ запрещен: Пользователь {payload.get('sub')} с ролью {role.value} "
                f"пытался получить доступ к {request.url.path}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Недостаточно прав"
            )

        return payload

    return checker


# Удобные предустановки --------------------------------------------------------

admin_only = require_roles(Role.ADMIN)

student_only = require_roles(Role.STUDENT)

authenticated = require_roles(Role.ADMIN, Role.STUDENT)


@dataclass(frozen=True)
class Identity:
    """Проверенная личность вызывающего, передаётся в сервисы явно."""

    user_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def get_identity(payload: dict = Depends(authenticated)) -> Identity:
    """Преобразовать проверенные claims токена в :class:`Identity`."""
    return Identity(user_id=int(payload["sub"]), role=Role(payload["role"]))
