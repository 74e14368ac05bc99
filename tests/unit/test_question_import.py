# -*- coding: utf-8 -*-
"""
Unit тесты импорта банка вопросов
"""

import pytest
from sqlalchemy import func, select

from examhub.domain.enums import EducationLevel
from examhub.domain.models import Question
from examhub.service.question_import import (import_questions, parse_rows,
                                             update_question)
from examhub.utils.exceptions import NotFoundError, ValidationError
from tests.fixtures import create_test_questions, create_test_topics

HEADER = "question,option_1,option_2,option_3,option_4,answer,subject,topics,standard,explanation\n"


def _csv(*rows: str) -> bytes:
    return (HEADER + "\n".join(rows) + "\n").encode("utf-8")


class TestParseRows:
    """Разбор CSV-выгрузки"""

    def test_valid_rows(self):
        content = _csv(
            'What is 2+2?,3,4,5,6,2,Mathematics,"Algebra, Arithmetic",11,',
            "Speed of light?,c,v,g,h,1,Physics,Optics,12,Constant",
        )

        rows = parse_rows(content)

        assert len(rows) == 2
        assert rows[0].correct_option == 1
        assert rows[0].options == ["3", "4", "5", "6"]
        assert rows[0].topics == ["algebra", "arithmetic"]
        assert rows[0].explanation is None
        assert rows[1].explanation == "Constant"

    def test_utf8_bom_is_accepted(self):
        content = b"\xef\xbb\xbf" + _csv("Q,a,b,c,d,4,Physics,Optics,11,")

        rows = parse_rows(content)

        assert rows[0].correct_option == 3

    def test_invalid_answer_names_the_row(self):
        content = _csv(
            "Q1,a,b,c,d,1,Physics,Optics,11,",
            "Q2,a,b,c,d,5,Physics,Optics,11,",
        )

        with pytest.raises(ValidationError) as exc_info:
            parse_rows(content)
        assert "Строка 3" in exc_info.value.detail

    def test_row_without_topics(self):
        with pytest.raises(ValidationError):
            parse_rows(_csv("Q1,a,b,c,d,1,Physics,,11,"))

    def test_empty_file(self):
        with pytest.raises(ValidationError):
            parse_rows(HEADER.encode("utf-8"))

    def test_non_utf8_file_rejected(self):
        """Файл в другой кодировке даёт ошибку проверки, а не падение"""
        content = HEADER.encode("utf-8") + "Вопрос,а,б,в,г,1,Physics,Optics,11,\n".encode("cp1251")

        with pytest.raises(ValidationError) as exc_info:
            parse_rows(content)
        assert "UTF-8" in exc_info.value.detail

    def test_level_column(self):
        content = (
            HEADER.rstrip("\n") + ",level\n"
            "Q1,a,b,c,d,1,Physics,Optics,11,,juniorCollege\n"
            "Q2,a,b,c,d,1,Physics,Optics,11,,\n"
        ).encode("utf-8")

        rows = parse_rows(content)

        assert rows[0].level == EducationLevel.JUNIOR_COLLEGE
        assert rows[1].level is None


class TestImportQuestions:
    """Импорт в банк вопросов"""

    @pytest.mark.asyncio
    async def test_import_creates_questions(self, test_session):
        # Arrange
        await create_test_topics(test_session, "physics", ["optics", "sound"])
        content = _csv(
            'Q1,a,b,c,d,1,Physics,"Optics, Sound",11,',
            "Q2,a,b,c,d,3,physics,sound,12,Because",
        )

        # Act
        created = await import_questions(test_session, content, created_by=None)

        # Assert
        assert created == 2
        questions = (
            await test_session.execute(select(Question).order_by(Question.id))
        ).scalars().all()
        assert [q.correct_option for q in questions] == [0, 2]
        assert sorted(t.name for t in questions[0].topics) == ["optics", "sound"]

    @pytest.mark.asyncio
    async def test_unknown_topic_aborts_import(self, test_session):
        """Неизвестная тема прерывает импорт целиком"""
        # Arrange
        await create_test_topics(test_session, "physics", ["optics"])
        content = _csv(
            "Q1,a,b,c,d,1,Physics,Optics,11,",
            "Q2,a,b,c,d,1,Physics,Acoustics,11,",
        )

        # Act
        with pytest.raises(NotFoundError) as exc_info:
            await import_questions(test_session, content)

        # Assert
        assert "строка 3" in exc_info.value.detail
        count = (await test_session.execute(select(func.count(Question.id)))).scalar_one()
        assert count == 0

    @pytest.mark.asyncio
    async def test_ambiguous_subject_requires_level(self, test_session):
        """Предмет есть на двух уровнях: без колонки level импорт отклоняется"""
        # Arrange
        await create_test_topics(test_session, "physics", ["optics"])
        await create_test_topics(
            test_session, "physics", ["optics"], EducationLevel.JUNIOR_COLLEGE
        )
        content = _csv("Q1,a,b,c,d,1,Physics,Optics,11,")

        # Act
        with pytest.raises(ValidationError) as exc_info:
            await import_questions(test_session, content)

        # Assert
        assert "Строка 2" in exc_info.value.detail
        count = (await test_session.execute(select(func.count(Question.id)))).scalar_one()
        assert count == 0

    @pytest.mark.asyncio
    async def test_level_column_picks_domain(self, test_session):
        """Колонка level привязывает вопрос к теме нужного уровня"""
        # Arrange
        undergraduate = await create_test_topics(test_session, "physics", ["optics"])
        junior = await create_test_topics(
            test_session, "physics", ["optics"], EducationLevel.JUNIOR_COLLEGE
        )
        content = (
            HEADER.rstrip("\n") + ",level\n"
            "Q1,a,b,c,d,1,Physics,Optics,11,,juniorCollege\n"
            "Q2,a,b,c,d,2,Physics,Optics,12,,undergraduate\n"
        ).encode("utf-8")

        # Act
        created = await import_questions(test_session, content)

        # Assert
        assert created == 2
        questions = (
            await test_session.execute(select(Question).order_by(Question.id))
        ).scalars().all()
        assert [t.id for t in questions[0].topics] == [junior["optics"].id]
        assert [t.id for t in questions[1].topics] == [undergraduate["optics"].id]


class TestUpdateQuestion:
    """Правка вопроса администратором"""

    @pytest.mark.asyncio
    async def test_update_fields(self, test_session):
        # Arrange
        topics = await create_test_topics(test_session, "physics", ["optics"])
        question = (await create_test_questions(test_session, topics["optics"], 1))[0]

        # Act
        updated = await update_question(
            test_session, question.id, text="Fixed text", correct_option=3
        )

        # Assert
        assert updated.text == "Fixed text"
        assert updated.correct_option == 3
        assert updated.options == ["A", "B", "C", "D"]

    @pytest.mark.asyncio
    async def test_correct_option_out_of_range(self, test_session):
        topics = await create_test_topics(test_session, "physics", ["optics"])
        question = (
            await create_test_questions(test_session, topics["optics"], 1, correct_option=3)
        )[0]

        with pytest.raises(ValidationError):
            await update_question(test_session, question.id, options=["A", "B"])

    @pytest.mark.asyncio
    async def test_unknown_question(self, test_session):
        with pytest.raises(NotFoundError):
            await update_question(test_session, 999, text="x")
