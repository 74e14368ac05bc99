# -*- coding: utf-8 -*-
"""
Выбор вопросов для сборки теста.

Три стратегии:

* **равномерная** (пользовательский тест): ``N // K`` вопросов из каждой темы
  и остаток из объединения тем;
* **по квотам** (CET): ровно ``questionCount`` вопросов из каждой темы
  активного распределения с учётом класса;
* **по каталогу** (компании, GATE): параметры берутся из сохранённой
  спецификации, дальше равномерная выборка.

Модуль ничего не записывает в БД. Внутри одной сборки ID вопроса
не повторяется.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from examhub.config.logger import configure_logger
from examhub.config.settings import settings
from examhub.domain.enums import CatalogKind, EducationLevel
from examhub.domain.models import CatalogEntry, Topic
from examhub.repository import catalog as catalog_repo
from examhub.repository.questions import sample_by_topic, sample_from_topics
from examhub.repository.tests import SectionLayout
from examhub.repository.topics import (find_topics_in_subject, normalize_name,
                                       resolve_topic_list)
from examhub.utils.exceptions import (ConfigurationMissingError,
                                      InsufficientQuestionsError, NotFoundError,
                                      ValidationError)

logger = configure_logger(__name__)


def topic_label(topic: Topic) -> str:
    return f"{topic.subject.name}/{topic.name}"


# ---------------------------------------------------------------------------
# Равномерная выборка
# ---------------------------------------------------------------------------


def split_evenly(total: int, topic_count: int) -> Tuple[int, int]:
    """Вернуть (вопросов на тему, остаток)."""
    if topic_count <= 0:
        raise ValidationError("Не указано ни одной темы")
    if total <= 0:
        raise ValidationError("Количество вопросов должно быть положительным")
    return divmod(total, topic_count)


async def select_uniform(
    session: AsyncSession, topics: Sequence[Topic], total: int
) -> List[int]:
    """
    Выбрать ``total`` вопросов равномерно по темам.

    Raises:
        ValidationError: Пустой список тем или неположительное количество
        InsufficientQuestionsError: Тема или объединение тем не покрывают квоту
    """
    per_topic, remainder = split_evenly(total, len(topics))
    logger.debug(
        f"Равномерная выборка: {total} вопросов, тем {len(topics)}, "
        f"по {per_topic} на тему, остаток {remainder}"
    )

    selected: List[int] = []
    for topic in topics:
        ids = await sample_by_topic(session, topic.id, per_topic, exclude_ids=selected)
        if len(ids) < per_topic:
            raise InsufficientQuestionsError(topic_label(topic), per_topic, len(ids))
        selected.extend(ids)

    if remainder:
        extra = await sample_from_topics(
            session, [topic.id for topic in topics], remainder, exclude_ids=selected
        )
        if len(extra) < remainder:
            raise InsufficientQuestionsError(
                ", ".join(topic_label(topic) for topic in topics),
                remainder,
                len(extra),
            )
        selected.extend(extra)

    return selected


# ---------------------------------------------------------------------------
# Выборка по квотам распределения
# ---------------------------------------------------------------------------


@dataclass
class QuotaSelection:
    """Результат выборки по распределению."""

    # нормализованный предмет -> ID вопросов в порядке записей распределения
    by_subject: "OrderedDict[str, List[int]]" = field(default_factory=OrderedDict)
    total_marks: int = 0
    summary: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def question_ids(self) -> List[int]:
        return [qid for ids in self.by_subject.values() for qid in ids]


async def select_by_quota(
    session: AsyncSession, document: Dict[str, Any]
) -> QuotaSelection:
    """
    Заполнить квоты каждой темы распределения.

    Raises:
        ConfigurationMissingError: Тема распределения отсутствует в таксономии
        InsufficientQuestionsError: Пул темы меньше квоты
    """
    selection = QuotaSelection()
    selected: List[int] = []

    for distribution in document.get("distributions", []):
        subject = normalize_name(distribution["subject"])
        standard: Optional[int] = distribution.get("standard")
        bucket = selection.by_subject.setdefault(subject, [])

        for entry in distribution.get("topics", []):
            count = int(entry.get("questionCount", 0))
            if count <= 0:
                continue

            topic_name = normalize_name(entry["topicName"])
            found = await find_topics_in_subject(
                session, subject, [topic_name], EducationLevel.JUNIOR_COLLEGE
            )
            topic = found.get(topic_name)
            if topic is None:
                raise ConfigurationMissingError(
                    f"Тема '{subject}/{topic_name}' из распределения отсутствует в таксономии"
                )

            ids = await sample_by_topic(
                session, topic.id, count, standard=standard, exclude_ids=selected
            )
            if len(ids) < count:
                raise InsufficientQuestionsError(
                    f"{subject}/{topic_name} (класс {standard})", count, len(ids)
                )

            selected.extend(ids)
            bucket.extend(ids)
            selection.total_marks += count * int(entry.get("marksPerQuestion", 1))
            selection.summary.append(
                {
                    "subject": subject,
                    "standard": standard,
                    "topic": topic_name,
                    "question_count": count,
                }
            )

    logger.debug(
        f"Выборка по квотам: {len(selected)} вопросов, {selection.total_marks} баллов"
    )
    return selection


def build_sections(
    document: Dict[str, Any],
    by_subject: "OrderedDict[str, List[int]]",
    default_duration: Optional[int] = None,
) -> List[SectionLayout]:
    """
    Разложить выбранные вопросы по секциям распределения.

    Предмет, не указанный ни в одной секции, образует собственную секцию
    с длительностью по умолчанию. Пустые секции не создаются.
    """
    if default_duration is None:
        default_duration = settings.default_section_duration

    layout: List[SectionLayout] = []
    claimed: set[str] = set()

    for section in document.get("sections", []):
        subjects = [normalize_name(name) for name in section.get("subjects", [])]
        ids = [qid for subject in subjects for qid in by_subject.get(subject, [])]
        claimed.update(subjects)
        if ids:
            layout.append((section["name"], int(section["duration"]), ids))

    for subject, ids in by_subject.items():
        if subject not in claimed and ids:
            layout.append((subject.title(), default_duration, list(ids)))

    return layout


# ---------------------------------------------------------------------------
# Выборка по каталогу
# ---------------------------------------------------------------------------


async def select_from_catalog(
    session: AsyncSession, name: str, kind: CatalogKind
) -> Tuple[CatalogEntry, List[int]]:
    """
    Найти спецификацию в каталоге и выполнить по ней равномерную выборку.

    Raises:
        NotFoundError: Спецификации с таким именем нет
    """
    entry = await catalog_repo.get_entry(session, name, kind)
    if entry is None:
        raise NotFoundError("Спецификация теста", normalize_name(name))

    topics, missing = await resolve_topic_list(
        session, entry.topic_list, entry.education_level
    )
    if missing:
        raise ConfigurationMissingError(
            f"Темы спецификации '{entry.name}' отсутствуют в таксономии: {', '.join(missing)}"
        )

    question_ids = await select_uniform(session, topics, entry.number_of_questions)
    return entry, question_ids
