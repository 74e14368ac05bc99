# -*- coding: utf-8 -*-
"""
Репозиторий собранных тестов.

Тест, его секции и ссылки на вопросы записываются одним коммитом;
после создания тест не изменяется.
"""

from typing import Any, List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from examhub.config.logger import configure_logger
from examhub.domain.models import Test, TestQuestion, TestSection
from examhub.utils.exceptions import CreationFailedError

logger = configure_logger(__name__)

# (имя секции, длительность в минутах, ID вопросов)
SectionLayout = Tuple[str, int, Sequence[int]]


async def create_test(
    session: AsyncSession,
    *,
    question_ids: Sequence[int] = (),
    sections: Optional[Sequence[SectionLayout]] = None,
    **fields: Any,
) -> Test:
    """
    Создать тест с плоским списком вопросов или с секциями.

    Args:
        session: Сессия базы данных
        question_ids: Вопросы плоского теста (игнорируется, если заданы секции)
        sections: Раскладка секций
        **fields: Поля модели Test

    Raises:
        CreationFailedError: Хранилище не подтвердило запись
    """
    test = Test(sections=[], question_links=[], **fields)
    position = 0

    if sections:
        for index, (name, duration, ids) in enumerate(sections):
            section = TestSection(
                name=name, duration=duration, position=index, total_questions=len(ids)
            )
            test.sections.append(section)
            for question_id in ids:
                test.question_links.append(
                    TestQuestion(question_id=question_id, position=position, section=section)
                )
                position += 1
    else:
        for question_id in question_ids:
            test.question_links.append(
                TestQuestion(question_id=question_id, position=position)
            )
            position += 1

    session.add(test)
    try:
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Ошибка создания теста '{test.name}': {type(e).__name__}: {e}")
        raise CreationFailedError() from e

    logger.debug(f"Тест {test.id} сохранён: {position} вопросов")
    return test


async def get_test_by_id(session: AsyncSession, test_id: int) -> Optional[Test]:
    """Получить тест по ID (секции и ссылки на вопросы подгружаются selectin)."""
    test = await session.get(Test, test_id)
    if test is None:
        logger.debug(f"Тест {test_id} не найден")
    return test


async def get_tests_by_ids(session: AsyncSession, test_ids: Sequence[int]) -> List[Test]:
    if not test_ids:
        return []
    result = await session.execute(select(Test).where(Test.id.in_(set(test_ids))))
    return list(result.scalars().all())
