# -*- coding: utf-8 -*-
"""
examhub/domain/models.py
~~~~~~~~~~~~~~~~~~~~~~~~
ORM-модели SQLAlchemy 2.0 для сервиса тестирования.

Таксономия: Domain -> Subject -> Topic. Вопросы связаны с темами через
many-to-many таблицу ``question_topics`` и переживают тесты, которые на них
ссылаются. Test и TestResult создаются один раз и после этого не изменяются
(кроме ``Test.expires_at``).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import (JSON, BigInteger, Boolean, Column, DateTime, Enum,
                        ForeignKey, Integer, String, Table, Text,
                        UniqueConstraint)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from examhub.domain.enums import CatalogKind, EducationLevel, Role, TestKind


class Base(DeclarativeBase):
    """Базовый класс всех моделей."""


# ---------------------------------------------------------------------------
# Пользователи
# ---------------------------------------------------------------------------


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    full_name: Mapped[str] = mapped_column(String(255))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    urn: Mapped[Optional[int]] = mapped_column(BigInteger, unique=True, nullable=True)
    password: Mapped[str] = mapped_column(String(255))
    role: Mapped[Role] = mapped_column(Enum(Role), default=Role.STUDENT)
    city: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    contact_number: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    refresh_token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)


# ---------------------------------------------------------------------------
# Таксономия
# ---------------------------------------------------------------------------


class Domain(Base):
    __tablename__ = "domains"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(128), unique=True)
    education_level: Mapped[EducationLevel] = mapped_column(Enum(EducationLevel))

    subjects: Mapped[List["Subject"]] = relationship(
        back_populates="domain", lazy="selectin"
    )


class Subject(Base):
    __tablename__ = "subjects"
    __table_args__ = (UniqueConstraint("name", "domain_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(128), index=True)
    domain_id: Mapped[int] = mapped_column(ForeignKey("domains.id"))

    domain: Mapped[Domain] = relationship(back_populates="subjects", lazy="selectin")
    topics: Mapped[List["Topic"]] = relationship(
        back_populates="subject", lazy="selectin"
    )


class Topic(Base):
    __tablename__ = "topics"
    __table_args__ = (UniqueConstraint("name", "subject_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    subject_id: Mapped[int] = mapped_column(ForeignKey("subjects.id"))

    subject: Mapped[Subject] = relationship(back_populates="topics", lazy="selectin")


question_topics = Table(
    "question_topics",
    Base.metadata,
    Column("question_id", ForeignKey("questions.id", ondelete="CASCADE"), primary_key=True),
    Column("topic_id", ForeignKey("topics.id", ondelete="CASCADE"), primary_key=True),
)


class Question(Base):
    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    text: Mapped[str] = mapped_column(Text)
    options: Mapped[List[str]] = mapped_column(JSON)
    correct_option: Mapped[int] = mapped_column(Integer)
    # Класс (standard) 11/12 для CET, используется как уровень сложности
    standard: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    explanation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True, onupdate=datetime.now
    )

    topics: Mapped[List[Topic]] = relationship(
        secondary=question_topics, lazy="selectin"
    )


# ---------------------------------------------------------------------------
# Конфигурация сборки
# ---------------------------------------------------------------------------


class DistributionConfig(Base):
    """Версионированный документ квот для структурированного экзамена (CET)."""

    __tablename__ = "distribution_configs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    version: Mapped[int] = mapped_column(Integer, unique=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    document: Mapped[dict[str, Any]] = mapped_column(JSON)
    created_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)


class CatalogEntry(Base):
    """Заранее сохранённая спецификация теста компании или GATE."""

    __tablename__ = "test_catalog"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    kind: Mapped[CatalogKind] = mapped_column(Enum(CatalogKind))
    duration: Mapped[int] = mapped_column(Integer)
    number_of_questions: Mapped[int] = mapped_column(Integer)
    # [{"subject": str, "topics": [str, ...]}, ...] как в запросе пользовательского теста
    topic_list: Mapped[List[dict[str, Any]]] = mapped_column(JSON)
    education_level: Mapped[EducationLevel] = mapped_column(Enum(EducationLevel))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now, onupdate=datetime.now
    )


# ---------------------------------------------------------------------------
# Тесты и результаты
# ---------------------------------------------------------------------------


class Test(Base):
    __tablename__ = "tests"
    __test__ = False  # pytest не должен собирать модель как тест-класс

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    kind: Mapped[TestKind] = mapped_column(Enum(TestKind))
    education_level: Mapped[Optional[EducationLevel]] = mapped_column(
        Enum(EducationLevel), nullable=True
    )
    total_duration: Mapped[int] = mapped_column(Integer)  # в минутах
    total_questions: Mapped[int] = mapped_column(Integer)
    total_marks: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    max_attempts: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    sections: Mapped[List["TestSection"]] = relationship(
        back_populates="test",
        order_by="TestSection.position",
        lazy="selectin",
        cascade="all, delete-orphan",
    )
    question_links: Mapped[List["TestQuestion"]] = relationship(
        back_populates="test",
        order_by="TestQuestion.position",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    @property
    def question_ids(self) -> List[int]:
        """Авторитетный порядок вопросов (секции уже развёрнуты позициями)."""
        return [link.question_id for link in self.question_links]


class TestSection(Base):
    __tablename__ = "test_sections"
    __test__ = False

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    test_id: Mapped[int] = mapped_column(ForeignKey("tests.id", ondelete="CASCADE"))
    name: Mapped[str] = mapped_column(String(255))
    duration: Mapped[int] = mapped_column(Integer)  # в минутах
    position: Mapped[int] = mapped_column(Integer)
    total_questions: Mapped[int] = mapped_column(Integer)

    test: Mapped[Test] = relationship(back_populates="sections")
    question_links: Mapped[List["TestQuestion"]] = relationship(
        back_populates="section",
        order_by="TestQuestion.position",
        lazy="selectin",
    )


class TestQuestion(Base):
    """Ссылка теста на вопрос (вопрос теста не принадлежит)."""

    __tablename__ = "test_questions"
    __test__ = False

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    test_id: Mapped[int] = mapped_column(ForeignKey("tests.id", ondelete="CASCADE"))
    section_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("test_sections.id", ondelete="CASCADE"), nullable=True
    )
    question_id: Mapped[int] = mapped_column(ForeignKey("questions.id"))
    position: Mapped[int] = mapped_column(Integer)

    test: Mapped[Test] = relationship(back_populates="question_links")
    section: Mapped[Optional[TestSection]] = relationship(
        back_populates="question_links"
    )


class TestResult(Base):
    __tablename__ = "test_results"
    __test__ = False

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    test_id: Mapped[int] = mapped_column(ForeignKey("tests.id"), index=True)
    student_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    # [{"question_id": int, "selected_option": int | None}, ...] в порядке отправки
    selected_answers: Mapped[List[dict[str, Any]]] = mapped_column(JSON)
    time_taken: Mapped[int] = mapped_column(Integer)  # в секундах
    is_auto_submitted: Mapped[bool] = mapped_column(Boolean, default=False)
    tab_switches: Mapped[int] = mapped_column(Integer, default=0)
    score: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now, index=True
    )
