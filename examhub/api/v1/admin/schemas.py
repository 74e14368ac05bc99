# -*- coding: utf-8 -*-
"""
Схемы административных операций: распределение CET, каталог и студенты.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from examhub.api.v1.auth.schemas import UserReadSchema
from examhub.api.v1.shared.schemas import CamelModel, PaginationRead
from examhub.api.v1.tests.schemas import TopicList
from examhub.domain.enums import CatalogKind, EducationLevel

# ----------------------------- РАСПРЕДЕЛЕНИЕ ---------------------------------


class TopicQuota(CamelModel):
    topic_name: str = Field(min_length=1)
    question_count: int = Field(ge=0)
    marks_per_question: int = Field(default=1, ge=0)


class SubjectDistribution(CamelModel):
    subject: str = Field(min_length=1)
    standard: Optional[int] = None
    topics: List[TopicQuota]


class SectionLayoutSchema(CamelModel):
    name: str = Field(min_length=1)
    duration: int = Field(gt=0)
    subjects: List[str] = Field(min_length=1)


class DistributionDocument(CamelModel):
    sections: List[SectionLayoutSchema] = []
    distributions: List[SubjectDistribution] = Field(min_length=1)


class DistributionRead(CamelModel):
    id: int
    version: int
    is_active: bool
    document: DistributionDocument
    created_by: Optional[int] = None
    created_at: datetime


# ----------------------------- КАТАЛОГ ---------------------------------------


class CatalogEntrySchema(CamelModel):
    name: str = Field(min_length=1)
    kind: CatalogKind = CatalogKind.COMPANY
    duration: int = Field(gt=0)
    number_of_questions: int = Field(gt=0)
    topic_list: TopicList
    education_level: EducationLevel = EducationLevel.UNDERGRADUATE


class CatalogTopicGroup(CamelModel):
    subject: str
    topics: List[str]


class CatalogEntryRead(CamelModel):
    id: int
    name: str
    kind: CatalogKind
    duration: int
    number_of_questions: int
    topic_list: List[CatalogTopicGroup]
    education_level: EducationLevel
    updated_at: Optional[datetime] = None


# ----------------------------- СТУДЕНТЫ --------------------------------------


class StudentPageRead(CamelModel):
    students: List[UserReadSchema]
    pagination: PaginationRead
