# -*- coding: utf-8 -*-
"""
Импорт банка вопросов из CSV-выгрузки таблицы и правка отдельных вопросов.

Колонки: ``question, option_1..option_4, answer (с 1), subject,
topics (через запятую), standard, explanation``. Необязательная колонка
``level`` (``juniorCollege`` или ``undergraduate``) выбирает уровень образования,
если предмет с таким именем есть в нескольких доменах.
"""

from __future__ import annotations

import csv
import io
from typing import Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic import field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from examhub.config.logger import configure_logger
from examhub.domain.enums import EducationLevel
from examhub.domain.models import Question, Topic
from examhub.repository.base import get_item, update_item
from examhub.repository.questions import bulk_create_questions
from examhub.repository.topics import (find_topics_in_subject, normalize_name,
                                       subject_levels)
from examhub.utils.exceptions import NotFoundError, ValidationError

logger = configure_logger(__name__)

OPTION_COLUMNS = ("option_1", "option_2", "option_3", "option_4")


class QuestionRow(BaseModel):
    """Одна строка таблицы вопросов."""

    question: str = Field(min_length=1)
    option_1: str = Field(min_length=1)
    option_2: str = Field(min_length=1)
    option_3: str = Field(min_length=1)
    option_4: str = Field(min_length=1)
    answer: int = Field(ge=1, le=len(OPTION_COLUMNS))
    subject: str = Field(min_length=1)
    topics: List[str]
    standard: int
    explanation: Optional[str] = None
    level: Optional[EducationLevel] = None

    @field_validator("topics", mode="before")
    @classmethod
    def split_topics(cls, value):
        if isinstance(value, str):
            value = value.split(",")
        names = [normalize_name(name) for name in value if name and name.strip()]
        if not names:
            raise ValueError("не указано ни одной темы")
        return names

    @field_validator("explanation", "level", mode="before")
    @classmethod
    def empty_to_none(cls, value):
        return value or None

    @property
    def options(self) -> List[str]:
        return [getattr(self, column) for column in OPTION_COLUMNS]

    @property
    def correct_option(self) -> int:
        return self.answer - 1


def parse_rows(content: bytes) -> List[QuestionRow]:
    """
    Разобрать CSV в строки вопросов.

    Raises:
        ValidationError: Пустой файл или строка с ошибкой (номер строки как в таблице)
    """
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ValidationError("Файл должен быть в кодировке UTF-8") from e
    reader = csv.DictReader(io.StringIO(text))
    rows: List[QuestionRow] = []
    for index, raw in enumerate(reader):
        cleaned = {
            key.strip().lower(): value.strip()
            for key, value in raw.items()
            if key and value is not None
        }
        try:
            rows.append(QuestionRow.model_validate(cleaned))
        except PydanticValidationError as e:
            errors = "; ".join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise ValidationError(f"Строка {index + 2}: {errors}") from e

    if not rows:
        raise ValidationError("Файл не содержит вопросов")
    return rows


async def import_questions(
    session: AsyncSession, content: bytes, created_by: Optional[int] = None
) -> int:
    """
    Импортировать вопросы одной транзакцией.

    Returns:
        Количество созданных вопросов

    Raises:
        ValidationError: Ошибка формата строки или неоднозначный предмет без level
        NotFoundError: Тема строки отсутствует в своём предмете
    """
    rows = parse_rows(content)
    topic_cache: Dict[tuple, Topic] = {}
    level_cache: Dict[str, List[EducationLevel]] = {}
    questions: List[Question] = []

    for index, row in enumerate(rows):
        subject = normalize_name(row.subject)
        if row.level is None:
            if subject not in level_cache:
                level_cache[subject] = await subject_levels(session, subject)
            if len(level_cache[subject]) > 1:
                raise ValidationError(
                    f"Строка {index + 2}: предмет '{subject}' есть на нескольких "
                    "уровнях образования, укажите колонку level"
                )

        key = (row.level, subject)
        uncached = [name for name in row.topics if (*key, name) not in topic_cache]
        if uncached:
            found = await find_topics_in_subject(session, subject, uncached, row.level)
            for name in uncached:
                if name not in found:
                    raise NotFoundError(
                        "Тема", f"{subject}/{name}", details=f"строка {index + 2}"
                    )
                topic_cache[(*key, name)] = found[name]

        questions.append(
            Question(
                text=row.question,
                options=row.options,
                correct_option=row.correct_option,
                standard=row.standard,
                explanation=row.explanation,
                created_by=created_by,
                topics=[topic_cache[(*key, name)] for name in dict.fromkeys(row.topics)],
            )
        )

    await bulk_create_questions(session, questions)
    logger.info(f"📥 Импортировано вопросов: {len(questions)}")
    return len(questions)


async def update_question(
    session: AsyncSession,
    question_id: int,
    *,
    text: Optional[str] = None,
    options: Optional[List[str]] = None,
    correct_option: Optional[int] = None,
    explanation: Optional[str] = None,
) -> Question:
    """
    Административная правка вопроса.

    Raises:
        NotFoundError: Вопроса нет
        ValidationError: Правильный вариант вне списка вариантов
    """
    question = await get_item(session, Question, question_id)
    new_options = options if options is not None else question.options
    new_correct = correct_option if correct_option is not None else question.correct_option

    if len(new_options) < 2:
        raise ValidationError("Вопрос должен содержать хотя бы два варианта")
    if not 0 <= new_correct < len(new_options):
        raise ValidationError(
            f"Правильный вариант {new_correct} вне диапазона 0..{len(new_options) - 1}"
        )

    changes = {"options": list(new_options), "correct_option": new_correct}
    if text is not None:
        changes["text"] = text
    if explanation is not None:
        changes["explanation"] = explanation

    updated = await update_item(session, Question, question_id, **changes)
    logger.info(f"Вопрос {question_id} обновлён")
    return updated
