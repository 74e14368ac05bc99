# -*- coding: utf-8 -*-
"""
Аналитика результатов: разбор одного результата, рекомендации по темам,
историческая сводка и постраничная история студента.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from fastapi.encoders import jsonable_encoder
from sqlalchemy.ext.asyncio import AsyncSession

from examhub.config.logger import configure_logger
from examhub.config.redis_settings import redis_settings
from examhub.config.settings import settings
from examhub.domain.models import Question, Test, TestResult
from examhub.repository import test_results as results_repo
from examhub.repository.questions import find_many_by_id
from examhub.repository.tests import get_test_by_id, get_tests_by_ids
from examhub.security.security import Identity
from examhub.service.cache_service import analytics_cache_key, cache_service
from examhub.utils.exceptions import NotFoundError

logger = configure_logger(__name__)

NO_RECOMMENDATIONS_MESSAGE = "Рекомендаций нет: ошибок по темам не найдено"


@dataclass
class TopicStats:
    """Счётчики правильных ответов по одной теме."""

    topic_id: int
    topic: str
    subject: str
    total: int = 0
    correct: int = 0

    @property
    def incorrect(self) -> int:
        return self.total - self.correct

    @property
    def percentage_correct(self) -> float:
        return PerformanceAggregator.percentage(self.correct, self.total)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "topic_id": self.topic_id,
            "topic": self.topic,
            "subject": self.subject,
            "total": self.total,
            "correct": self.correct,
            "incorrect": self.incorrect,
            "percentage_correct": self.percentage_correct,
        }


class PerformanceAggregator:
    """Чистые вычисления поверх уже загруженных данных."""

    @staticmethod
    def percentage(part: int, total: int) -> float:
        """``part / total * 100`` с округлением до сотых; 0 при ``total == 0``."""
        if total <= 0:
            return 0.0
        return round(part / total * 100, 2)

    @staticmethod
    def total_pages(total: int, limit: int) -> int:
        return math.ceil(total / limit) if limit > 0 else 0

    @staticmethod
    def aggregate_topics(
        answered: Iterable[Tuple[Question, bool]],
    ) -> List[TopicStats]:
        """
        Сгруппировать ответы по темам вопросов.

        Вопрос с несколькими темами учитывается в каждой. Порядок тем
        соответствует первому появлению.
        """
        stats: Dict[int, TopicStats] = {}
        for question, is_correct in answered:
            for topic in question.topics:
                entry = stats.get(topic.id)
                if entry is None:
                    entry = stats[topic.id] = TopicStats(
                        topic_id=topic.id, topic=topic.name, subject=topic.subject.name
                    )
                entry.total += 1
                if is_correct:
                    entry.correct += 1
        return list(stats.values())

    @staticmethod
    def rank_by_incorrect(stats: List[TopicStats], limit: int) -> List[TopicStats]:
        """Темы с ошибками, больше всего ошибок первыми."""
        weak = [entry for entry in stats if entry.incorrect > 0]
        return sorted(weak, key=lambda entry: entry.incorrect, reverse=True)[:limit]

    @staticmethod
    def rank_by_percentage(stats: List[TopicStats], limit: int) -> List[TopicStats]:
        """Худший процент правильных ответов первым."""
        return sorted(stats, key=lambda entry: entry.percentage_correct)[:limit]


def _answered_pairs(
    result: TestResult, questions: Dict[int, Question]
) -> List[Tuple[Question, bool]]:
    """Пары (вопрос, верно ли) для ответов результата; удалённые вопросы пропускаются."""
    pairs = []
    for answer in result.selected_answers:
        question = questions.get(answer["question_id"])
        if question is None:
            continue
        pairs.append((question, answer.get("selected_option") == question.correct_option))
    return pairs


async def _load_owned_result(
    session: AsyncSession, identity: Identity, result_id: int
) -> TestResult:
    result = await results_repo.get_result(session, result_id)
    if result is None or (
        result.student_id != identity.user_id and not identity.is_admin
    ):
        raise NotFoundError("Результат теста", result_id)
    return result


# ---------------------------------------------------------------------------
# Разбор одного результата
# ---------------------------------------------------------------------------


async def get_test_result(
    session: AsyncSession, identity: Identity, result_id: int
) -> Dict[str, Any]:
    """Поответный разбор результата."""
    result = await _load_owned_result(session, identity, result_id)
    test = await get_test_by_id(session, result.test_id)
    question_ids = [answer["question_id"] for answer in result.selected_answers]
    questions = await find_many_by_id(session, question_ids)

    analysis = []
    for answer in result.selected_answers:
        question = questions.get(answer["question_id"])
        selected = answer.get("selected_option")
        analysis.append(
            {
                "question_id": answer["question_id"],
                "question": question.text if question else None,
                "options": list(question.options) if question else [],
                "selected_option": selected,
                "correct_option": question.correct_option if question else None,
                "is_correct": question is not None and selected == question.correct_option,
                "explanation": question.explanation if question else None,
            }
        )

    return {
        "id": result.id,
        "test_id": result.test_id,
        "total_questions": test.total_questions if test else len(analysis),
        "correct_answers": result.score,
        "time_spent": result.time_taken,
        "invalid": result.is_auto_submitted,
        "tab_switches": result.tab_switches,
        "question_analysis": analysis,
    }


async def get_result_with_recommendations(
    session: AsyncSession, identity: Identity, result_id: int
) -> Dict[str, Any]:
    """Результат, успеваемость по темам и до трёх тем с наибольшим числом ошибок."""
    result = await _load_owned_result(session, identity, result_id)
    test = await get_test_by_id(session, result.test_id)
    questions = await find_many_by_id(
        session, [answer["question_id"] for answer in result.selected_answers]
    )

    stats = PerformanceAggregator.aggregate_topics(_answered_pairs(result, questions))
    weak = PerformanceAggregator.rank_by_incorrect(stats, settings.recommendations_limit)
    total_questions = test.total_questions if test else len(result.selected_answers)

    logger.debug(
        f"Рекомендации для результата {result_id}: тем {len(stats)}, слабых {len(weak)}"
    )
    return {
        "test_result": {
            "id": result.id,
            "test_id": result.test_id,
            "test_name": test.name if test else None,
            "score": result.score,
            "total_questions": total_questions,
            "percentage_score": PerformanceAggregator.percentage(
                result.score, total_questions
            ),
            "time_taken": result.time_taken,
            "created_at": result.created_at,
        },
        "topic_performance": [entry.as_dict() for entry in stats],
        "recommendations": (
            [entry.as_dict() for entry in weak]
            if weak
            else [{"message": NO_RECOMMENDATIONS_MESSAGE}]
        ),
    }


# ---------------------------------------------------------------------------
# История студента
# ---------------------------------------------------------------------------


def empty_analytics() -> Dict[str, Any]:
    return {
        "total_tests": 0,
        "average_score": 0,
        "topic_recommendations": [],
        "recent_tests": [],
    }


def _result_summary(result: TestResult, test: Optional[Test]) -> Dict[str, Any]:
    total_questions = test.total_questions if test else 0
    return {
        "id": result.id,
        "test_id": result.test_id,
        "test_name": test.name if test else None,
        "score": result.score,
        "total_questions": total_questions,
        "percentage_score": PerformanceAggregator.percentage(result.score, total_questions),
        "created_at": result.created_at,
    }


async def compute_user_analytics(
    session: AsyncSession, student_id: int
) -> Dict[str, Any]:
    """Сводка по всем результатам студента без кэша."""
    results = await results_repo.list_results_for_student(session, student_id)
    if not results:
        return empty_analytics()

    tests = {
        test.id: test
        for test in await get_tests_by_ids(session, {r.test_id for r in results})
    }
    total_correct = sum(result.score for result in results)
    total_questions = sum(
        tests[result.test_id].total_questions
        for result in results
        if result.test_id in tests
    )

    question_ids = {
        answer["question_id"] for result in results for answer in result.selected_answers
    }
    questions = await find_many_by_id(session, question_ids)
    answered: List[Tuple[Question, bool]] = []
    for result in results:
        answered.extend(_answered_pairs(result, questions))

    stats = PerformanceAggregator.aggregate_topics(answered)
    weakest = PerformanceAggregator.rank_by_percentage(
        stats, settings.recommendations_limit
    )

    return {
        "total_tests": len(results),
        "average_score": PerformanceAggregator.percentage(total_correct, total_questions),
        "topic_recommendations": [entry.as_dict() for entry in weakest],
        "recent_tests": [
            _result_summary(result, tests.get(result.test_id))
            for result in results[: settings.recent_tests_limit]
        ],
    }


async def get_user_analytics(session: AsyncSession, identity: Identity) -> Dict[str, Any]:
    """
    Историческая аналитика студента.

    Кэшируется в Redis до следующей отправки теста этим студентом.
    """
    cache_key = analytics_cache_key(identity.user_id)
    cached = await cache_service.get(cache_key)
    if cached is not None:
        logger.debug(f"Аналитика студента {identity.user_id} взята из кэша")
        return cached

    payload = jsonable_encoder(await compute_user_analytics(session, identity.user_id))
    await cache_service.set(cache_key, payload, redis_settings.cache_ttl_analytics)
    return payload


async def get_user_history(
    session: AsyncSession, identity: Identity, page: int = 1, limit: Optional[int] = None
) -> Dict[str, Any]:
    """
    Страница истории результатов, новые первыми.

    Параметры страницы не вызывают ошибок: page приводится к 1 и выше,
    limit к диапазону 1..history_max_page_size.
    """
    if limit is None:
        limit = settings.history_page_size
    page = max(page, 1)
    limit = min(max(limit, 1), settings.history_max_page_size)

    results, total = await results_repo.page_results_for_student(
        session, identity.user_id, page, limit
    )
    tests = {
        test.id: test
        for test in await get_tests_by_ids(session, {r.test_id for r in results})
    }

    items = []
    for result in results:
        test = tests.get(result.test_id)
        total_questions = test.total_questions if test else 0
        items.append(
            {
                "id": result.id,
                "test_id": result.test_id,
                "test_name": test.name if test else None,
                "total_questions": total_questions,
                "total_duration": test.total_duration if test else None,
                "score": result.score,
                "time_taken": result.time_taken,
                "percentage_score": PerformanceAggregator.percentage(
                    result.score, total_questions
                ),
                "created_at": result.created_at,
            }
        )

    return {
        "test_results": items,
        "pagination": {
            "total": total,
            "page": page,
            "limit": limit,
            "pages": PerformanceAggregator.total_pages(total, limit),
        },
    }
