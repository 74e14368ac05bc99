# -*- coding: utf-8 -*-
"""
examhub/repository/topics.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Поиск по таксономии Domain -> Subject -> Topic.

Все имена хранятся и сравниваются в нормализованном виде; нормализация
выполняется только функцией :func:`normalize_name`.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from examhub.config.logger import configure_logger
from examhub.domain.enums import EducationLevel
from examhub.domain.models import Domain, Subject, Topic

logger = configure_logger(__name__)


def normalize_name(name: str) -> str:
    """Привести имя темы/предмета к виду для поиска: нижний регистр, без пробелов по краям."""
    return name.strip().lower()


async def get_subject_by_name(
    session: AsyncSession,
    subject_name: str,
    education_level: Optional[EducationLevel] = None,
) -> Optional[Subject]:
    """Найти предмет по имени (опционально внутри уровня образования)."""
    stmt = select(Subject).where(Subject.name == normalize_name(subject_name))
    if education_level is not None:
        stmt = stmt.join(Domain, Subject.domain_id == Domain.id).where(
            Domain.education_level == education_level
        )
    result = await session.execute(stmt.order_by(Subject.id))
    return result.scalars().first()


async def subject_levels(session: AsyncSession, subject_name: str) -> List[EducationLevel]:
    """Уровни образования, в доменах которых есть предмет с таким именем."""
    result = await session.execute(
        select(Domain.education_level)
        .join(Subject, Subject.domain_id == Domain.id)
        .where(Subject.name == normalize_name(subject_name))
        .distinct()
    )
    return list(result.scalars().all())


async def find_topics_in_subject(
    session: AsyncSession,
    subject_name: str,
    topic_names: Iterable[str],
    education_level: Optional[EducationLevel] = None,
) -> Dict[str, Topic]:
    """
    Найти темы предмета по именам.

    Returns:
        Словарь {нормализованное имя темы: Topic}; ненайденные имена отсутствуют.
    """
    names = {normalize_name(name) for name in topic_names}
    if not names:
        return {}

    stmt = (
        select(Topic)
        .join(Subject, Topic.subject_id == Subject.id)
        .where(Subject.name == normalize_name(subject_name), Topic.name.in_(names))
    )
    if education_level is not None:
        stmt = stmt.join(Domain, Subject.domain_id == Domain.id).where(
            Domain.education_level == education_level
        )

    result = await session.execute(stmt.order_by(Topic.id))
    found: Dict[str, Topic] = {}
    for topic in result.scalars().all():
        found.setdefault(topic.name, topic)
    return found


async def resolve_topic_list(
    session: AsyncSession,
    topic_list: List[dict],
    education_level: Optional[EducationLevel] = None,
) -> Tuple[List[Topic], List[str]]:
    """
    Разрешить список вида ``[{"subject": ..., "topics": [...]}]`` в темы.

    Дубликаты схлопываются, порядок первого появления сохраняется.

    Returns:
        (найденные темы, список "предмет/тема" для ненайденных)
    """
    resolved: List[Topic] = []
    missing: List[str] = []
    seen_ids: set[int] = set()

    for group in topic_list:
        subject_name = group["subject"]
        names = [normalize_name(name) for name in group.get("topics", [])]
        found = await find_topics_in_subject(
            session, subject_name, names, education_level
        )
        for name in names:
            topic = found.get(name)
            if topic is None:
                missing.append(f"{normalize_name(subject_name)}/{name}")
            elif topic.id not in seen_ids:
                seen_ids.add(topic.id)
                resolved.append(topic)

    logger.debug(
        f"Разрешено тем: {len(resolved)}, не найдено: {len(missing)} (уровень {education_level})"
    )
    return resolved, missing


async def list_topic_tree(session: AsyncSession) -> List[Domain]:
    """Все домены с предметами и темами (отношения загружаются selectin)."""
    result = await session.execute(select(Domain).order_by(Domain.name))
    return list(result.scalars().all())


async def list_topics_for_subject(session: AsyncSession, subject: Subject) -> List[Topic]:
    result = await session.execute(
        select(Topic).where(Topic.subject_id == subject.id).order_by(Topic.name)
    )
    return list(result.scalars().all())


async def ensure_topic(
    session: AsyncSession,
    *,
    domain_name: str,
    education_level: EducationLevel,
    subject_name: str,
    topic_name: str,
) -> Topic:
    """Найти или создать цепочку Domain/Subject/Topic. Коммит остаётся за вызывающим."""
    domain = (
        await session.execute(select(Domain).where(Domain.name == domain_name))
    ).scalars().first()
    if domain is None:
        domain = Domain(name=domain_name, education_level=education_level, subjects=[])
        session.add(domain)
        await session.flush()

    subject = (
        await session.execute(
            select(Subject).where(
                Subject.name == normalize_name(subject_name),
                Subject.domain_id == domain.id,
            )
        )
    ).scalars().first()
    if subject is None:
        subject = Subject(name=normalize_name(subject_name), domain=domain, topics=[])
        session.add(subject)
        await session.flush()

    topic = (
        await session.execute(
            select(Topic).where(
                Topic.name == normalize_name(topic_name),
                Topic.subject_id == subject.id,
            )
        )
    ).scalars().first()
    if topic is None:
        topic = Topic(name=normalize_name(topic_name), subject=subject)
        session.add(topic)
        await session.flush()

    return topic
