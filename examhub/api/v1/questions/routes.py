# -*- coding: utf-8 -*-
"""
Банк вопросов: импорт из CSV-выгрузки и правка вопросов администратором.
"""

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from examhub.clients.database_client import get_db
from examhub.config.logger import configure_logger
from examhub.security.security import Identity, admin_only, get_identity
from examhub.service import question_import

from .schemas import QuestionAdminRead, QuestionImportRead, QuestionUpdateSchema

router = APIRouter(dependencies=[Depends(admin_only)])
logger = configure_logger(__name__)


@router.post(
    "/import", response_model=QuestionImportRead, status_code=status.HTTP_201_CREATED
)
async def import_questions_endpoint(
    file: UploadFile = File(...),
    session: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    """
    Импортировать вопросы из CSV.

    Исключения:
        * 422 ― строка таблицы не прошла проверку.
        * 404 ― тема строки не найдена.
    """
    content = await file.read()
    logger.info(f"Импорт вопросов из '{file.filename}' ({len(content)} байт)")
    created = await question_import.import_questions(
        session, content, created_by=identity.user_id
    )
    return {"created": created}


@router.patch("/{question_id}", response_model=QuestionAdminRead)
async def update_question_endpoint(
    question_id: int,
    payload: QuestionUpdateSchema,
    session: AsyncSession = Depends(get_db),
):
    """Исправить текст, варианты, правильный ответ или пояснение вопроса."""
    return await question_import.update_question(
        session,
        question_id,
        text=payload.text,
        options=payload.options,
        correct_option=payload.correct_option,
        explanation=payload.explanation,
    )
