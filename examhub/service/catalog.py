# -*- coding: utf-8 -*-
"""
Каталог спецификаций тестов компаний и GATE.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from examhub.config.logger import configure_logger
from examhub.domain.enums import CatalogKind, EducationLevel
from examhub.domain.models import CatalogEntry
from examhub.repository import catalog as catalog_repo
from examhub.repository.topics import normalize_name, resolve_topic_list
from examhub.utils.exceptions import ValidationError

logger = configure_logger(__name__)


async def upsert_catalog_entry(
    session: AsyncSession,
    *,
    name: str,
    kind: CatalogKind,
    duration: int,
    number_of_questions: int,
    topic_list: List[Dict[str, Any]],
    education_level: EducationLevel,
) -> CatalogEntry:
    """
    Создать или обновить спецификацию.

    Raises:
        ValidationError: Неверные числа или темы, которых нет на уровне образования
    """
    if duration <= 0 or number_of_questions <= 0:
        raise ValidationError("Длительность и количество вопросов должны быть положительными")

    topics, missing = await resolve_topic_list(session, topic_list, education_level)
    if missing:
        raise ValidationError(f"Темы не найдены: {', '.join(missing)}")
    if not topics:
        raise ValidationError("Спецификация должна содержать хотя бы одну тему")

    normalized_topics = [
        {
            "subject": normalize_name(group["subject"]),
            "topics": [normalize_name(name) for name in group.get("topics", [])],
        }
        for group in topic_list
    ]
    entry = await catalog_repo.upsert_entry(
        session,
        name=name,
        kind=kind,
        duration=duration,
        number_of_questions=number_of_questions,
        topic_list=normalized_topics,
        education_level=education_level,
    )
    logger.info(f"Спецификация каталога '{entry.name}' ({kind.value}) сохранена")
    return entry


async def list_catalog_entries(
    session: AsyncSession, kind: Optional[CatalogKind] = None
) -> List[CatalogEntry]:
    return await catalog_repo.list_entries(session, kind)
