# -*- coding: utf-8 -*-
"""
Unit тесты аналитики результатов
"""

from types import SimpleNamespace

import pytest
from sqlalchemy import delete

from examhub.config.settings import settings
from examhub.domain import enums
from examhub.domain.enums import EducationLevel, Role
from examhub.domain.models import Question
from examhub.service import analytics
from examhub.service.analytics import (NO_RECOMMENDATIONS_MESSAGE,
                                       PerformanceAggregator, TopicStats)
from examhub.service.assembler import assemble_test
from examhub.service.scoring import submit_test
from examhub.utils.exceptions import NotFoundError
from tests.fixtures import (create_test_questions, create_test_topics,
                            create_test_user, identity_for)


def _stats(topic: str, total: int, correct: int) -> TopicStats:
    return TopicStats(
        topic_id=hash(topic), topic=topic, subject="physics", total=total, correct=correct
    )


def _question(*topics):
    return SimpleNamespace(
        topics=[
            SimpleNamespace(id=topic_id, name=name, subject=SimpleNamespace(name="physics"))
            for topic_id, name in topics
        ]
    )


class TestPerformanceAggregator:
    """Чистые вычисления аналитики"""

    def test_percentage_rounds_to_hundredths(self):
        assert PerformanceAggregator.percentage(1, 3) == 33.33

    def test_percentage_of_empty_total(self):
        assert PerformanceAggregator.percentage(0, 0) == 0.0

    def test_total_pages(self):
        assert PerformanceAggregator.total_pages(21, 10) == 3
        assert PerformanceAggregator.total_pages(20, 10) == 2
        assert PerformanceAggregator.total_pages(0, 10) == 0

    def test_rank_by_incorrect(self):
        """Больше ошибок первым, темы без ошибок не рекомендуются"""
        stats = [
            _stats("a", 5, 3),
            _stats("b", 5, 4),
            _stats("c", 5, 2),
            _stats("d", 5, 5),
            _stats("e", 3, 2),
        ]

        ranked = PerformanceAggregator.rank_by_incorrect(stats, 3)

        assert [entry.topic for entry in ranked] == ["c", "a", "b"]

    def test_rank_by_percentage(self):
        stats = [_stats("a", 4, 3), _stats("b", 4, 1), _stats("c", 4, 4)]

        ranked = PerformanceAggregator.rank_by_percentage(stats, 2)

        assert [entry.topic for entry in ranked] == ["b", "a"]

    def test_aggregate_topics_counts_every_topic(self):
        """Вопрос с двумя темами учитывается в обеих"""
        answered = [
            (_question((1, "optics"), (2, "waves")), True),
            (_question((1, "optics")), False),
        ]

        stats = PerformanceAggregator.aggregate_topics(answered)

        assert [(s.topic, s.total, s.correct, s.incorrect) for s in stats] == [
            ("optics", 2, 1, 1),
            ("waves", 1, 1, 0),
        ]
        assert stats[0].percentage_correct == 50.0


async def _submitted_result(session, student, selected):
    topics = await create_test_topics(session, "physics", ["optics", "sound"])
    optics = await create_test_questions(session, topics["optics"], 2, correct_option=0)
    sound = await create_test_questions(session, topics["sound"], 1, correct_option=0)
    questions = optics + sound
    test = await assemble_test(
        session,
        kind=enums.TestKind.CUSTOM,
        label="Custom Test",
        creator_id=student.id,
        education_level=EducationLevel.UNDERGRADUATE,
        duration=20,
        question_ids=[q.id for q in questions],
    )
    result = await submit_test(
        session,
        identity_for(student),
        test.id,
        [
            {"question_id": q.id, "selected_option": option}
            for q, option in zip(questions, selected)
        ],
        time_taken=60,
    )
    return test, result


class TestResultAnalytics:
    """Разбор одного результата"""

    @pytest.mark.asyncio
    async def test_recommendations_for_weak_topics(self, test_session):
        # Arrange
        student = await create_test_user(test_session)
        test, result = await _submitted_result(test_session, student, [0, 1, 1])

        # Act
        data = await analytics.get_result_with_recommendations(
            test_session, identity_for(student), result.id
        )

        # Assert
        assert data["test_result"]["score"] == 1
        assert data["test_result"]["percentage_score"] == 33.33
        assert data["test_result"]["test_name"] == test.name
        assert [r["topic"] for r in data["recommendations"]] == ["optics", "sound"]
        assert data["recommendations"][0]["incorrect"] == 1

    @pytest.mark.asyncio
    async def test_all_correct_gives_placeholder(self, test_session):
        # Arrange
        student = await create_test_user(test_session)
        _, result = await _submitted_result(test_session, student, [0, 0, 0])

        # Act
        data = await analytics.get_result_with_recommendations(
            test_session, identity_for(student), result.id
        )

        # Assert
        assert data["recommendations"] == [{"message": NO_RECOMMENDATIONS_MESSAGE}]
        assert all(row["incorrect"] == 0 for row in data["topic_performance"])

    @pytest.mark.asyncio
    async def test_result_detail(self, test_session):
        # Arrange
        student = await create_test_user(test_session)
        _, result = await _submitted_result(test_session, student, [0, None, 2])

        # Act
        data = await analytics.get_test_result(
            test_session, identity_for(student), result.id
        )

        # Assert
        assert data["correct_answers"] == 1
        assert data["total_questions"] == 3
        assert [row["is_correct"] for row in data["question_analysis"]] == [
            True,
            False,
            False,
        ]
        assert data["question_analysis"][1]["selected_option"] is None

    @pytest.mark.asyncio
    async def test_foreign_result_is_hidden(self, test_session):
        """Чужой результат студенту не виден, администратору виден"""
        # Arrange
        owner = await create_test_user(test_session)
        other = await create_test_user(test_session)
        admin = await create_test_user(test_session, role=Role.ADMIN)
        _, result = await _submitted_result(test_session, owner, [0, 0, 0])

        # Act / Assert
        with pytest.raises(NotFoundError):
            await analytics.get_test_result(test_session, identity_for(other), result.id)
        data = await analytics.get_test_result(test_session, identity_for(admin), result.id)
        assert data["id"] == result.id


class TestStudentHistory:
    """История и сводная аналитика студента"""

    @pytest.mark.asyncio
    async def test_no_history_gives_empty_analytics(self, test_session):
        student = await create_test_user(test_session)

        data = await analytics.compute_user_analytics(test_session, student.id)

        assert data == analytics.empty_analytics()

    @pytest.mark.asyncio
    async def test_analytics_summary(self, test_session, fake_cache):
        # Arrange
        student = await create_test_user(test_session)
        await _submitted_result(test_session, student, [0, 1, 0])

        # Act
        data = await analytics.get_user_analytics(test_session, identity_for(student))

        # Assert
        assert data["total_tests"] == 1
        assert data["average_score"] == 66.67
        assert data["topic_recommendations"][0]["topic"] == "optics"
        assert len(data["recent_tests"]) == 1
        fake_cache["set"].assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cached_analytics_is_returned(self, test_session, fake_cache):
        student = await create_test_user(test_session)
        fake_cache["get"].return_value = {"total_tests": 7}

        data = await analytics.get_user_analytics(test_session, identity_for(student))

        assert data == {"total_tests": 7}
        fake_cache["set"].assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_history_page(self, test_session):
        student = await create_test_user(test_session)

        data = await analytics.get_user_history(test_session, identity_for(student))

        assert data["test_results"] == []
        assert data["pagination"] == {"total": 0, "page": 1, "limit": 10, "pages": 0}

    @pytest.mark.asyncio
    async def test_history_page(self, test_session):
        # Arrange
        student = await create_test_user(test_session)
        test, _ = await _submitted_result(test_session, student, [0, 0, 1])

        # Act
        data = await analytics.get_user_history(
            test_session, identity_for(student), page=1, limit=5
        )

        # Assert
        item = data["test_results"][0]
        assert item["score"] == 2
        assert item["total_duration"] == 20
        assert item["percentage_score"] == 66.67
        assert data["pagination"]["pages"] == 1


    @pytest.mark.asyncio
    async def test_page_parameters_are_clamped(self, test_session):
        """Некорректные page и limit приводятся к допустимым значениям"""
        # Arrange
        student = await create_test_user(test_session)
        await _submitted_result(test_session, student, [0, 0, 0])

        # Act
        oversized = await analytics.get_user_history(
            test_session, identity_for(student), page=1, limit=1000
        )
        undersized = await analytics.get_user_history(
            test_session, identity_for(student), page=-3, limit=0
        )

        # Assert
        assert oversized["pagination"]["limit"] == settings.history_max_page_size
        assert len(oversized["test_results"]) == 1
        assert undersized["pagination"]["page"] == 1
        assert undersized["pagination"]["limit"] == 1
        assert len(undersized["test_results"]) == 1

    @pytest.mark.asyncio
    async def test_last_page_is_partial(self, test_session):
        """Семь результатов по три на страницу: три страницы, на последней один"""
        # Arrange
        student = await create_test_user(test_session)
        test, first = await _submitted_result(test_session, student, [0, 0, 0])
        for _ in range(6):
            await submit_test(
                test_session,
                identity_for(student),
                test.id,
                first.selected_answers,
                time_taken=30,
            )

        # Act
        pages = [
            await analytics.get_user_history(
                test_session, identity_for(student), page=page, limit=3
            )
            for page in (1, 2, 3, 4)
        ]

        # Assert
        assert pages[0]["pagination"] == {"total": 7, "page": 1, "limit": 3, "pages": 3}
        assert [len(p["test_results"]) for p in pages] == [3, 3, 1, 0]
        ids = [item["id"] for p in pages for item in p["test_results"]]
        assert len(set(ids)) == 7


class TestDeletedQuestions:
    """Результаты переживают удаление вопросов из банка"""

    @pytest.mark.asyncio
    async def test_analytics_skip_deleted_question(self, test_session):
        # Arrange
        student = await create_test_user(test_session)
        _, result = await _submitted_result(test_session, student, [0, 1, 0])
        removed_id = result.selected_answers[1]["question_id"]
        await test_session.execute(delete(Question).where(Question.id == removed_id))
        await test_session.commit()

        # Act
        detail = await analytics.get_test_result(
            test_session, identity_for(student), result.id
        )
        recommended = await analytics.get_result_with_recommendations(
            test_session, identity_for(student), result.id
        )
        summary = await analytics.compute_user_analytics(test_session, student.id)

        # Assert
        removed = detail["question_analysis"][1]
        assert removed["question"] is None
        assert removed["is_correct"] is False
        assert detail["correct_answers"] == 2
        assert recommended["test_result"]["score"] == 2
        assert recommended["recommendations"] == [{"message": NO_RECOMMENDATIONS_MESSAGE}]
        assert summary["total_tests"] == 1
        assert summary["topic_recommendations"][0]["total"] == 1

    @pytest.mark.asyncio
    async def test_result_detail_is_stable(self, test_session):
        """Повторное чтение результата даёт тот же разбор"""
        # Arrange
        student = await create_test_user(test_session)
        _, result = await _submitted_result(test_session, student, [2, None, 0])

        # Act
        first = await analytics.get_test_result(test_session, identity_for(student), result.id)
        second = await analytics.get_test_result(test_session, identity_for(student), result.id)

        # Assert
        assert first == second
