# -*- coding: utf-8 -*-
"""
Управление распределением вопросов CET.

Документ распределения::

    {
      "sections": [{"name": str, "duration": int, "subjects": [str, ...]}],
      "distributions": [
        {"subject": str, "standard": int,
         "topics": [{"topicName": str, "questionCount": int, "marksPerQuestion": int}]}
      ]
    }
"""

from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from examhub.config.logger import configure_logger
from examhub.domain.enums import EducationLevel
from examhub.domain.models import DistributionConfig
from examhub.repository import distribution as distribution_repo
from examhub.repository.topics import find_topics_in_subject, normalize_name
from examhub.utils.exceptions import ConfigurationMissingError, ValidationError

logger = configure_logger(__name__)


async def get_active_distribution(session: AsyncSession) -> DistributionConfig:
    config = await distribution_repo.get_active_config(session)
    if config is None:
        raise ConfigurationMissingError("Активное распределение CET не настроено")
    return config


async def validate_distribution(session: AsyncSession, document: Dict[str, Any]) -> None:
    """
    Проверить документ распределения.

    Raises:
        ValidationError: Отрицательные количества или темы вне своего предмета
    """
    problems: List[str] = []

    for distribution in document.get("distributions", []):
        subject = normalize_name(distribution["subject"])
        entries = distribution.get("topics", [])
        for entry in entries:
            if entry.get("questionCount", 0) < 0 or entry.get("marksPerQuestion", 1) < 0:
                problems.append(f"{subject}/{entry['topicName']}: отрицательное значение")

        found = await find_topics_in_subject(
            session,
            subject,
            [entry["topicName"] for entry in entries],
            EducationLevel.JUNIOR_COLLEGE,
        )
        for entry in entries:
            if normalize_name(entry["topicName"]) not in found:
                problems.append(f"{subject}/{normalize_name(entry['topicName'])}: тема не найдена")

    for section in document.get("sections", []):
        if section.get("duration", 0) <= 0:
            problems.append(f"секция '{section.get('name')}': длительность должна быть положительной")

    if problems:
        raise ValidationError("Ошибки в распределении: " + "; ".join(problems))


async def save_distribution(
    session: AsyncSession, document: Dict[str, Any], created_by: Optional[int] = None
) -> DistributionConfig:
    """Проверить и сохранить новую активную версию распределения."""
    await validate_distribution(session, document)
    config = await distribution_repo.save_new_version(session, document, created_by)
    logger.info(f"Распределение CET обновлено до версии {config.version}")
    return config


def flatten_distribution(document: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Плоский вид распределения: предмет, класс, тема, количество и баллы."""
    rows = []
    for distribution in document.get("distributions", []):
        for entry in distribution.get("topics", []):
            rows.append(
                {
                    "subject": normalize_name(distribution["subject"]),
                    "standard": distribution.get("standard"),
                    "topic": normalize_name(entry["topicName"]),
                    "question_count": entry.get("questionCount", 0),
                    "marks_per_question": entry.get("marksPerQuestion", 1),
                }
            )
    return rows
