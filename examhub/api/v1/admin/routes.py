# -*- coding: utf-8 -*-
"""
Административные маршруты: распределение CET, каталог тестов, студенты и
администраторы. Все операции доступны только роли admin.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from examhub.api.v1.auth.schemas import AdminCreateSchema, UserReadSchema
from examhub.clients.database_client import get_db
from examhub.config.logger import configure_logger
from examhub.config.settings import settings
from examhub.domain.enums import CatalogKind
from examhub.security.security import Identity, admin_only, get_identity
from examhub.service import catalog as catalog_service
from examhub.service import distribution as distribution_service
from examhub.service import users as users_service

from .schemas import (CatalogEntryRead, CatalogEntrySchema,
                      DistributionDocument, DistributionRead, StudentPageRead)

router = APIRouter(dependencies=[Depends(admin_only)])
logger = configure_logger(__name__)


# ----------------------------- РАСПРЕДЕЛЕНИЕ ---------------------------------


@router.get("/distribution", response_model=DistributionRead)
async def get_distribution_endpoint(session: AsyncSession = Depends(get_db)):
    """Активная версия распределения; 500 CONFIGURATION_MISSING если не настроено."""
    return await distribution_service.get_active_distribution(session)


@router.put("/distribution", response_model=DistributionRead)
async def save_distribution_endpoint(
    payload: DistributionDocument,
    session: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    """
    Сохранить новую активную версию распределения.

    Исключения:
        * 422 ― отрицательные квоты или темы вне своего предмета.
    """
    return await distribution_service.save_distribution(
        session, payload.model_dump(by_alias=True), created_by=identity.user_id
    )


# ----------------------------- КАТАЛОГ ---------------------------------------


@router.get("/catalog", response_model=List[CatalogEntryRead])
async def list_catalog_endpoint(
    kind: Optional[CatalogKind] = Query(None),
    session: AsyncSession = Depends(get_db),
):
    return await catalog_service.list_catalog_entries(session, kind)


@router.put("/catalog", response_model=CatalogEntryRead)
async def upsert_catalog_endpoint(
    payload: CatalogEntrySchema, session: AsyncSession = Depends(get_db)
):
    """Создать или обновить спецификацию теста компании или GATE."""
    return await catalog_service.upsert_catalog_entry(
        session,
        name=payload.name,
        kind=payload.kind,
        duration=payload.duration,
        number_of_questions=payload.number_of_questions,
        topic_list=payload.topic_list.as_groups(),
        education_level=payload.education_level,
    )


# ----------------------------- ПОЛЬЗОВАТЕЛИ ----------------------------------


@router.get("/students", response_model=StudentPageRead)
async def list_students_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.history_page_size, ge=1, le=settings.history_max_page_size),
    city: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    search: Optional[str] = Query(None),
    session: AsyncSession = Depends(get_db),
):
    """Студенты с фильтрами по городу, дате регистрации и строке поиска."""
    return await users_service.list_students_page(
        session,
        page=page,
        limit=limit,
        city=city,
        start_date=start_date,
        end_date=end_date,
        search=search,
    )


@router.get("/students/{student_id}", response_model=UserReadSchema)
async def get_student_endpoint(student_id: int, session: AsyncSession = Depends(get_db)):
    return await users_service.get_student_details(session, student_id)


@router.post("/admins", response_model=UserReadSchema, status_code=status.HTTP_201_CREATED)
async def create_admin_endpoint(
    payload: AdminCreateSchema,
    session: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    """
    Создать администратора.

    Исключения:
        * 409 ― email уже занят.
    """
    logger.info(f"Запрос на создание администратора {payload.email}")
    return await users_service.create_admin(
        session,
        full_name=payload.full_name,
        email=str(payload.email),
        password=payload.password,
        created_by=identity.user_id,
    )
