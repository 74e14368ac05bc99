# -*- coding: utf-8 -*-
"""
Результаты тестов: поответный разбор и рекомендации по темам.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from examhub.clients.database_client import get_db
from examhub.security.security import Identity, get_identity
from examhub.service import analytics

from .schemas import ResultWithRecommendationsRead, TestResultDetailRead

router = APIRouter()


@router.get("/{result_id}", response_model=TestResultDetailRead)
async def get_test_result_endpoint(
    result_id: int,
    session: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    """Поответный разбор результата (виден владельцу и администратору)."""
    return await analytics.get_test_result(session, identity, result_id)


@router.get(
    "/{result_id}/recommendations", response_model=ResultWithRecommendationsRead
)
async def get_result_recommendations_endpoint(
    result_id: int,
    session: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    """Результат с успеваемостью по темам и до трёх тем для повторения."""
    return await analytics.get_result_with_recommendations(session, identity, result_id)
