# -*- coding: utf-8 -*-
"""
Чтение таксономии тем.
"""

from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from examhub.repository import topics as topics_repo
from examhub.service.distribution import (flatten_distribution,
                                          get_active_distribution)
from examhub.utils.exceptions import NotFoundError


async def list_topic_tree(session: AsyncSession) -> List[Dict[str, Any]]:
    """Домены -> предметы -> темы."""
    domains = await topics_repo.list_topic_tree(session)
    return [
        {
            "id": domain.id,
            "name": domain.name,
            "education_level": domain.education_level,
            "subjects": [
                {
                    "id": subject.id,
                    "name": subject.name,
                    "topics": [
                        {"id": topic.id, "name": topic.name}
                        for topic in sorted(subject.topics, key=lambda t: t.name)
                    ],
                }
                for subject in sorted(domain.subjects, key=lambda s: s.name)
            ],
        }
        for domain in domains
    ]


async def list_topics_by_subject(
    session: AsyncSession, subject_name: str
) -> Dict[str, Any]:
    subject = await topics_repo.get_subject_by_name(session, subject_name)
    if subject is None:
        raise NotFoundError("Предмет", topics_repo.normalize_name(subject_name))
    topics = await topics_repo.list_topics_for_subject(session, subject)
    return {
        "subject": subject.name,
        "topics": [{"id": topic.id, "name": topic.name} for topic in topics],
    }


async def get_cet_topics(session: AsyncSession) -> List[Dict[str, Any]]:
    """Темы CET с квотами из активного распределения."""
    config = await get_active_distribution(session)
    return flatten_distribution(config.document)
