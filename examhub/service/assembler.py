# -*- coding: utf-8 -*-
"""
Сборка и сохранение теста из выбранных вопросов.

Также формирует представление теста для ответа: создатель получает ключи
ответов, проходящий тест студент получает вопросы без них.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from examhub.config.logger import configure_logger
from examhub.config.settings import settings
from examhub.domain.enums import EducationLevel, TestKind
from examhub.domain.models import Question, Test
from examhub.repository import tests as tests_repo
from examhub.repository.questions import find_many_by_id
from examhub.repository.tests import SectionLayout

logger = configure_logger(__name__)


def build_test_name(label: str, created_at: datetime) -> str:
    """Человекочитаемое имя: ``"<метка> YYYY-MM-DD HH:MM:SS"``."""
    return f"{label} {created_at:%Y-%m-%d %H:%M:%S}"


def expiry_for(kind: TestKind, created_at: datetime) -> datetime:
    hours = {
        TestKind.CUSTOM: settings.custom_test_expiry_hours,
        TestKind.COMPANY: settings.company_test_expiry_hours,
        TestKind.CET: settings.cet_test_expiry_hours,
        TestKind.GATE: settings.gate_test_expiry_hours,
    }[kind]
    return created_at + timedelta(hours=hours)


async def assemble_test(
    session: AsyncSession,
    *,
    kind: TestKind,
    label: str,
    creator_id: int,
    education_level: Optional[EducationLevel] = None,
    duration: Optional[int] = None,
    question_ids: Sequence[int] = (),
    sections: Optional[Sequence[SectionLayout]] = None,
    total_marks: Optional[int] = None,
) -> Test:
    """
    Сохранить новый тест.

    Для секционного теста длительность и число вопросов считаются как сумма
    по секциям, ``duration`` при этом не используется.

    Raises:
        CreationFailedError: Хранилище не подтвердило запись
    """
    now = datetime.now()

    if sections:
        total_duration = sum(section_duration for _, section_duration, _ in sections)
        total_questions = sum(len(ids) for _, _, ids in sections)
    else:
        total_duration = duration or 0
        total_questions = len(question_ids)

    test = await tests_repo.create_test(
        session,
        question_ids=question_ids,
        sections=sections,
        name=build_test_name(label, now),
        kind=kind,
        education_level=education_level,
        total_duration=total_duration,
        total_questions=total_questions,
        total_marks=total_marks,
        max_attempts=settings.max_attempts_per_test,
        expires_at=expiry_for(kind, now),
        created_by=creator_id,
        created_at=now,
    )

    logger.info(
        f"✅ Тест {test.id} '{test.name}' создан: вид {kind.value}, "
        f"вопросов {total_questions}, длительность {total_duration} мин"
    )
    return test


def question_view(question: Question, include_answers: bool) -> Dict[str, Any]:
    view: Dict[str, Any] = {
        "id": question.id,
        "question": question.text,
        "options": list(question.options),
        "topics": [topic.name for topic in question.topics],
        "standard": question.standard,
    }
    if include_answers:
        view["correct_option"] = question.correct_option
        view["explanation"] = question.explanation
    return view


async def build_test_view(
    session: AsyncSession, test: Test, include_answers: bool = False
) -> Dict[str, Any]:
    """
    Представление теста с вопросами в авторитетном порядке.

    Args:
        session: Сессия базы данных
        test: Тест
        include_answers: Включать ``correct_option``/``explanation``
            (только для создателя теста)
    """
    questions = await find_many_by_id(session, test.question_ids)
    question_list: List[Dict[str, Any]] = [
        question_view(questions[qid], include_answers)
        for qid in test.question_ids
        if qid in questions
    ]

    return {
        "id": test.id,
        "name": test.name,
        "kind": test.kind,
        "education_level": test.education_level,
        "total_duration": test.total_duration,
        "total_questions": test.total_questions,
        "total_marks": test.total_marks,
        "expires_at": test.expires_at,
        "created_at": test.created_at,
        "sections": [
            {
                "id": section.id,
                "name": section.name,
                "duration": section.duration,
                "total_questions": section.total_questions,
                "question_ids": [link.question_id for link in section.question_links],
            }
            for section in test.sections
        ],
        "questions": question_list,
    }
