# -*- coding: utf-8 -*-
"""
Репозиторий банка вопросов.

Случайная выборка выполняется на стороне БД (``ORDER BY random() LIMIT n``),
пул темы целиком в память не загружается.
"""

from typing import Collection, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from examhub.config.logger import configure_logger
from examhub.domain.models import Question, question_topics
from examhub.utils.exceptions import PersistenceError

logger = configure_logger(__name__)


async def sample_by_topic(
    session: AsyncSession,
    topic_id: int,
    n: int,
    standard: Optional[int] = None,
    exclude_ids: Collection[int] = (),
) -> List[int]:
    """
    Случайно выбрать до ``n`` вопросов темы без повторений.

    Args:
        session: Сессия базы данных
        topic_id: ID темы
        n: Сколько вопросов нужно
        standard: Ограничить выборку классом (для CET)
        exclude_ids: ID вопросов, уже выбранных в этой сборке

    Returns:
        Список ID вопросов; он короче ``n``, если пул меньше квоты
    """
    if n <= 0:
        return []

    stmt = (
        select(Question.id)
        .join(question_topics, question_topics.c.question_id == Question.id)
        .where(question_topics.c.topic_id == topic_id)
    )
    if standard is not None:
        stmt = stmt.where(Question.standard == standard)
    if exclude_ids:
        stmt = stmt.where(Question.id.not_in(list(exclude_ids)))

    result = await session.execute(stmt.order_by(func.random()).limit(n))
    return list(result.scalars().all())


async def sample_from_topics(
    session: AsyncSession,
    topic_ids: Collection[int],
    n: int,
    exclude_ids: Collection[int] = (),
) -> List[int]:
    """Случайно выбрать до ``n`` вопросов из объединения тем (без повторов)."""
    if n <= 0 or not topic_ids:
        return []

    pool = (
        select(question_topics.c.question_id)
        .where(question_topics.c.topic_id.in_(list(topic_ids)))
        .scalar_subquery()
    )
    stmt = select(Question.id).where(Question.id.in_(pool))
    if exclude_ids:
        stmt = stmt.where(Question.id.not_in(list(exclude_ids)))

    result = await session.execute(stmt.order_by(func.random()).limit(n))
    return list(result.scalars().all())


async def find_many_by_id(
    session: AsyncSession, question_ids: Collection[int]
) -> Dict[int, Question]:
    """
    Загрузить вопросы по ID.

    Returns:
        Словарь {id: Question}; удалённые вопросы в нём отсутствуют
    """
    if not question_ids:
        return {}
    result = await session.execute(
        select(Question).where(Question.id.in_(set(question_ids)))
    )
    return {question.id: question for question in result.scalars().all()}


async def get_answer_key(
    session: AsyncSession, question_ids: Collection[int]
) -> Dict[int, int]:
    """Правильные варианты ответа {question_id: correct_option}."""
    if not question_ids:
        return {}
    result = await session.execute(
        select(Question.id, Question.correct_option).where(
            Question.id.in_(set(question_ids))
        )
    )
    return {row.id: row.correct_option for row in result.all()}


async def bulk_create_questions(
    session: AsyncSession, questions: List[Question]
) -> List[Question]:
    """Сохранить вопросы одной транзакцией."""
    session.add_all(questions)
    try:
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Ошибка массового создания вопросов: {type(e).__name__}: {e}")
        raise PersistenceError("Не удалось сохранить вопросы") from e

    logger.info(f"Создано вопросов: {len(questions)}")
    return questions
