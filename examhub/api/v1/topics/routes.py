# -*- coding: utf-8 -*-
"""
Чтение таксономии тем.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from examhub.clients.database_client import get_db
from examhub.security.security import authenticated
from examhub.service import topics as topics_service

from .schemas import CetTopicRead, DomainTreeRead, SubjectTopicsRead

router = APIRouter(dependencies=[Depends(authenticated)])


@router.get("", response_model=List[DomainTreeRead])
async def list_topic_tree_endpoint(session: AsyncSession = Depends(get_db)):
    return await topics_service.list_topic_tree(session)


@router.get("/subjects/{subject_name}", response_model=SubjectTopicsRead)
async def list_subject_topics_endpoint(
    subject_name: str, session: AsyncSession = Depends(get_db)
):
    """Темы предмета; 404 для неизвестного предмета."""
    return await topics_service.list_topics_by_subject(session, subject_name)


@router.get("/cet", response_model=List[CetTopicRead])
async def list_cet_topics_endpoint(session: AsyncSession = Depends(get_db)):
    """Темы CET с квотами из активного распределения."""
    return await topics_service.get_cet_topics(session)
