# -*- coding: utf-8 -*-
"""
Схемы таксономии тем.
"""

from typing import List, Optional

from examhub.api.v1.shared.schemas import CamelModel
from examhub.domain.enums import EducationLevel


class TopicRead(CamelModel):
    id: int
    name: str


class SubjectTreeRead(CamelModel):
    id: int
    name: str
    topics: List[TopicRead]


class DomainTreeRead(CamelModel):
    id: int
    name: str
    education_level: EducationLevel
    subjects: List[SubjectTreeRead]


class SubjectTopicsRead(CamelModel):
    subject: str
    topics: List[TopicRead]


class CetTopicRead(CamelModel):
    subject: str
    standard: Optional[int] = None
    topic: str
    question_count: int
    marks_per_question: int
