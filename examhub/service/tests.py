# -*- coding: utf-8 -*-
"""
Сервис для работы с тестами.

Связывает выбор вопросов, сборку и представление теста для каждого вида
теста: пользовательского, компании, GATE и CET.
"""

from __future__ import annotations

from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from examhub.config.logger import configure_logger
from examhub.domain.enums import CatalogKind, EducationLevel, TestKind
from examhub.repository.tests import get_test_by_id
from examhub.repository.topics import resolve_topic_list
from examhub.security.security import Identity
from examhub.service import selector
from examhub.service.assembler import assemble_test, build_test_view
from examhub.service.distribution import get_active_distribution
from examhub.service.scoring import check_not_expired
from examhub.utils.exceptions import NotFoundError, ValidationError

logger = configure_logger(__name__)

GATE_CATALOG_NAME = "gate"


async def create_custom_test(
    session: AsyncSession,
    identity: Identity,
    *,
    education_level: EducationLevel,
    duration: int,
    question_count: int,
    topic_list: List[Dict[str, Any]],
) -> Dict[str, Any]:
    """
    Собрать пользовательский тест по выбранным темам.

    Raises:
        ValidationError: Неизвестные темы, пустой список или неверные числа
        InsufficientQuestionsError: Пул тем не покрывает запрос
    """
    logger.debug(
        f"Пользовательский тест от {identity.user_id}: {question_count} вопросов, "
        f"уровень {education_level.value}"
    )
    if duration <= 0:
        raise ValidationError("Длительность теста должна быть положительной")

    topics, missing = await resolve_topic_list(session, topic_list, education_level)
    if missing:
        raise ValidationError(f"Темы не найдены: {', '.join(missing)}")

    question_ids = await selector.select_uniform(session, topics, question_count)
    test = await assemble_test(
        session,
        kind=TestKind.CUSTOM,
        label="Custom Test",
        creator_id=identity.user_id,
        education_level=education_level,
        duration=duration,
        question_ids=question_ids,
    )
    return await build_test_view(session, test, include_answers=True)


async def create_company_test(
    session: AsyncSession, identity: Identity, company_name: str
) -> Dict[str, Any]:
    """
    Собрать тест по спецификации компании из каталога.

    Raises:
        NotFoundError: Спецификации компании нет
        InsufficientQuestionsError: Пул тем не покрывает спецификацию
    """
    entry, question_ids = await selector.select_from_catalog(
        session, company_name, CatalogKind.COMPANY
    )
    test = await assemble_test(
        session,
        kind=TestKind.COMPANY,
        label=f"{entry.name.upper()} Assessment",
        creator_id=identity.user_id,
        education_level=entry.education_level,
        duration=entry.duration,
        question_ids=question_ids,
    )
    return await build_test_view(session, test, include_answers=True)


async def create_gate_test(
    session: AsyncSession, identity: Identity, education_level: EducationLevel
) -> Dict[str, Any]:
    """Собрать тест GATE; доступен только для уровня undergraduate."""
    if education_level != EducationLevel.UNDERGRADUATE:
        raise ValidationError("Тест GATE доступен только для уровня undergraduate")

    entry, question_ids = await selector.select_from_catalog(
        session, GATE_CATALOG_NAME, CatalogKind.GATE
    )
    test = await assemble_test(
        session,
        kind=TestKind.GATE,
        label="GATE Test",
        creator_id=identity.user_id,
        education_level=education_level,
        duration=entry.duration,
        question_ids=question_ids,
    )
    return await build_test_view(session, test, include_answers=True)


async def create_cet_test(session: AsyncSession, identity: Identity) -> Dict[str, Any]:
    """
    Собрать секционный тест CET по активному распределению.

    Raises:
        ConfigurationMissingError: Нет активного распределения
        InsufficientQuestionsError: Квота темы не покрывается пулом
    """
    config = await get_active_distribution(session)
    selection = await selector.select_by_quota(session, config.document)
    sections = selector.build_sections(config.document, selection.by_subject)
    if not sections:
        raise ValidationError("Распределение CET не содержит ни одного вопроса")

    test = await assemble_test(
        session,
        kind=TestKind.CET,
        label="CET Test",
        creator_id=identity.user_id,
        education_level=EducationLevel.JUNIOR_COLLEGE,
        sections=sections,
        total_marks=selection.total_marks,
    )
    view = await build_test_view(session, test, include_answers=True)
    view["summary"] = selection.summary
    logger.info(
        f"CET тест {test.id}: версия распределения {config.version}, "
        f"секций {len(sections)}, баллов {selection.total_marks}"
    )
    return view


async def get_test(session: AsyncSession, test_id: int) -> Dict[str, Any]:
    """Тест для прохождения: вопросы без ключей ответов."""
    test = await get_test_by_id(session, test_id)
    if test is None:
        raise NotFoundError("Тест", test_id)
    check_not_expired(test)
    return await build_test_view(session, test, include_answers=False)
