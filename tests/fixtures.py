# -*- coding: utf-8 -*-
"""
Фикстуры для тестирования сборки, прохождения и анализа тестов
"""

from itertools import count
from typing import Dict, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from examhub.domain.enums import CatalogKind, EducationLevel, Role
from examhub.domain.models import CatalogEntry, Question, Topic, User
from examhub.repository.base import create_item
from examhub.repository.topics import ensure_topic
from examhub.security.security import Identity, create_access_token
from examhub.service.users import hash_password

DEFAULT_PASSWORD = "password123"

_urns = count(10000001)


async def create_test_user(
    session: AsyncSession,
    role: Role = Role.STUDENT,
    email: Optional[str] = None,
    full_name: str = "Test Student",
    city: Optional[str] = None,
) -> User:
    """Создать тестового пользователя"""
    urn = next(_urns)
    return await create_item(
        session,
        User,
        full_name=full_name,
        email=email or f"user{urn}@examhub.io",
        urn=urn,
        password=hash_password(DEFAULT_PASSWORD),
        role=role,
        city=city,
        is_active=True,
    )


def identity_for(user: User) -> Identity:
    return Identity(user_id=user.id, role=user.role)


def auth_headers(user: User) -> Dict[str, str]:
    """Заголовок Authorization с access токеном пользователя"""
    token = create_access_token({"sub": user.id, "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


async def create_test_topics(
    session: AsyncSession,
    subject: str,
    topics: Sequence[str],
    education_level: EducationLevel = EducationLevel.UNDERGRADUATE,
) -> Dict[str, Topic]:
    """Создать темы предмета; ключи словаря совпадают с переданными именами"""
    created = {}
    for name in topics:
        created[name] = await ensure_topic(
            session,
            domain_name=education_level.value,
            education_level=education_level,
            subject_name=subject,
            topic_name=name,
        )
    await session.commit()
    return created


async def create_test_questions(
    session: AsyncSession,
    topic: Topic,
    count: int = 3,
    standard: Optional[int] = None,
    correct_option: int = 0,
) -> List[Question]:
    """Создать вопросы темы с четырьмя вариантами ответа"""
    questions = [
        Question(
            text=f"{topic.name} question {i + 1}",
            options=["A", "B", "C", "D"],
            correct_option=correct_option,
            standard=standard,
            explanation=f"Explanation {i + 1}",
            topics=[topic],
        )
        for i in range(count)
    ]
    session.add_all(questions)
    await session.commit()
    return questions


async def create_test_catalog_entry(
    session: AsyncSession,
    name: str,
    topic_list: List[dict],
    kind: CatalogKind = CatalogKind.COMPANY,
    duration: int = 60,
    number_of_questions: int = 4,
    education_level: EducationLevel = EducationLevel.UNDERGRADUATE,
) -> CatalogEntry:
    """Создать спецификацию каталога без проверки тем"""
    return await create_item(
        session,
        CatalogEntry,
        name=name,
        kind=kind,
        duration=duration,
        number_of_questions=number_of_questions,
        topic_list=topic_list,
        education_level=education_level,
    )


def cet_document(
    physics: int = 2, chemistry: int = 1, mathematics: int = 2, with_sections: bool = True
) -> dict:
    """Небольшое распределение CET из трёх предметов"""
    document = {
        "distributions": [
            {
                "subject": "Physics",
                "standard": 12,
                "topics": [{"topicName": "Optics", "questionCount": physics, "marksPerQuestion": 1}],
            },
            {
                "subject": "Chemistry",
                "standard": 11,
                "topics": [
                    {"topicName": "Hydrogen", "questionCount": chemistry, "marksPerQuestion": 1},
                    {"topicName": "Metallurgy", "questionCount": 0, "marksPerQuestion": 1},
                ],
            },
            {
                "subject": "Mathematics",
                "standard": 12,
                "topics": [{"topicName": "Vectors", "questionCount": mathematics, "marksPerQuestion": 2}],
            },
        ],
        "sections": [],
    }
    if with_sections:
        document["sections"] = [
            {"name": "Paper I", "duration": 90, "subjects": ["mathematics"]},
            {"name": "Paper II", "duration": 90, "subjects": ["physics", "chemistry"]},
        ]
    return document


async def create_cet_taxonomy(session: AsyncSession, per_topic: int = 3) -> Dict[str, Topic]:
    """Таксономия для :func:`cet_document` с вопросами 11 и 12 класса"""
    level = EducationLevel.JUNIOR_COLLEGE
    physics = await create_test_topics(session, "physics", ["optics"], level)
    chemistry = await create_test_topics(session, "chemistry", ["hydrogen", "metallurgy"], level)
    maths = await create_test_topics(session, "mathematics", ["vectors"], level)

    await create_test_questions(session, physics["optics"], per_topic, standard=12)
    await create_test_questions(session, physics["optics"], per_topic, standard=11)
    await create_test_questions(session, chemistry["hydrogen"], per_topic, standard=11)
    await create_test_questions(session, maths["vectors"], per_topic, standard=12)
    return {**physics, **chemistry, **maths}
