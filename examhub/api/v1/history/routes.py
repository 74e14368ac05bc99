# -*- coding: utf-8 -*-
"""
История прохождения тестов и сводная аналитика студента.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from examhub.clients.database_client import get_db
from examhub.security.security import Identity, get_identity
from examhub.service import analytics

from .schemas import HistoryPageRead, UserAnalyticsRead

router = APIRouter()


@router.get("/analytics", response_model=UserAnalyticsRead)
async def get_user_analytics_endpoint(
    session: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    """Средний балл, слабые темы и последние тесты; пустая сводка без истории."""
    return await analytics.get_user_analytics(session, identity)


@router.get("", response_model=HistoryPageRead)
async def get_user_history_endpoint(
    page: int = Query(1),
    limit: Optional[int] = Query(None),
    session: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    """Результаты студента постранично, новые первыми."""
    return await analytics.get_user_history(session, identity, page=page, limit=limit)
