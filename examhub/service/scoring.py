# -*- coding: utf-8 -*-
"""
Проверка отправленных ответов и сохранение результата.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from examhub.config.logger import configure_logger
from examhub.config.settings import settings
from examhub.domain.models import Test, TestResult
from examhub.repository import test_results as results_repo
from examhub.repository.questions import get_answer_key
from examhub.repository.tests import get_test_by_id
from examhub.security.security import Identity
from examhub.service.cache_service import invalidate_student_analytics
from examhub.utils.exceptions import (AnswerCountMismatchError, ConflictError,
                                      NotFoundError, ValidationError)

logger = configure_logger(__name__)


def compute_score(
    answer_key: Mapping[int, int], answers: Iterable[Tuple[int, Optional[int]]]
) -> int:
    """
    Количество ответов, совпавших с правильным вариантом.

    Неизвестный вопрос или пропущенный ответ дают 0, а не ошибку.
    """
    score = 0
    for question_id, selected_option in answers:
        if selected_option is None:
            continue
        if answer_key.get(question_id) == selected_option:
            score += 1
    return score


def check_submitted_ids(expected: List[int], submitted: List[int]) -> None:
    """
    Проверить, что отправлен ровно набор вопросов теста.

    Raises:
        ValidationError: Повторы или чужие/пропущенные вопросы
    """
    duplicates = sorted(qid for qid, count in Counter(submitted).items() if count > 1)
    if duplicates:
        raise ValidationError(f"Повторяющиеся вопросы в ответах: {duplicates}")

    unexpected = sorted(set(submitted) - set(expected))
    missing = sorted(set(expected) - set(submitted))
    if unexpected or missing:
        raise ValidationError(
            f"Набор вопросов не совпадает с тестом: лишние {unexpected}, пропущенные {missing}"
        )


def check_not_expired(test: Test, now: Optional[datetime] = None) -> None:
    """Тест с истёкшим expires_at нельзя открыть или отправить."""
    now = now or datetime.now()
    if test.expires_at is not None and test.expires_at < now:
        logger.warning(f"⏰ Тест {test.id} истёк {test.expires_at:%Y-%m-%d %H:%M}")
        raise ConflictError(f"Срок действия теста {test.id} истёк")


async def submit_test(
    session: AsyncSession,
    identity: Identity,
    test_id: int,
    answers: List[Dict[str, Any]],
    time_taken: int,
    is_auto_submitted: bool = False,
    tab_switches: int = 0,
) -> TestResult:
    """
    Оценить отправку и сохранить результат.

    Args:
        session: Сессия базы данных
        identity: Отправляющий студент
        test_id: ID теста
        answers: ``[{"question_id": int, "selected_option": int | None}, ...]``
        time_taken: Затраченное время в секундах
        is_auto_submitted: Тест отправлен принудительно
        tab_switches: Количество потерь фокуса

    Returns:
        Сохранённый результат

    Raises:
        NotFoundError: Теста нет
        ConflictError: Срок действия теста истёк
        AnswerCountMismatchError: Число ответов не равно числу вопросов
        ValidationError: Набор вопросов не совпадает (при строгой проверке)
        ConflictError: Превышен лимит попыток
    """
    logger.debug(
        f"Отправка теста {test_id} студентом {identity.user_id}: ответов {len(answers)}"
    )

    test = await get_test_by_id(session, test_id)
    if test is None:
        raise NotFoundError("Тест", test_id)
    check_not_expired(test)

    expected_ids = test.question_ids
    submitted_ids = [answer["question_id"] for answer in answers]

    if len(submitted_ids) != len(expected_ids):
        logger.warning(
            f"⚠️ Тест {test_id}: ожидалось {len(expected_ids)} ответов, получено {len(submitted_ids)}"
        )
        raise AnswerCountMismatchError(len(expected_ids), len(submitted_ids))

    if settings.strict_submission_ids:
        check_submitted_ids(expected_ids, submitted_ids)

    if test.max_attempts is not None:
        attempts = await results_repo.count_attempts(session, test_id, identity.user_id)
        if attempts >= test.max_attempts:
            logger.warning(
                f"⚠️ Превышен лимит попыток ({test.max_attempts}) для студента "
                f"{identity.user_id}, тест {test_id}"
            )
            raise ConflictError("Превышено максимальное количество попыток")

    answer_key = await get_answer_key(session, submitted_ids)
    score = compute_score(
        answer_key,
        ((answer["question_id"], answer.get("selected_option")) for answer in answers),
    )

    result = await results_repo.create_result(
        session,
        test_id=test_id,
        student_id=identity.user_id,
        selected_answers=[
            {
                "question_id": answer["question_id"],
                "selected_option": answer.get("selected_option"),
            }
            for answer in answers
        ],
        time_taken=time_taken,
        is_auto_submitted=is_auto_submitted,
        tab_switches=tab_switches,
        score=score,
    )
    await invalidate_student_analytics(identity.user_id)

    logger.info(
        f"📝 Тест {test_id} отправлен студентом {identity.user_id}: "
        f"результат {result.id}, балл {score}/{len(expected_ids)}"
    )
    return result
