# -*- coding: utf-8 -*-
"""
Схемы банка вопросов.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from examhub.api.v1.shared.schemas import CamelModel


class QuestionImportRead(CamelModel):
    created: int


class QuestionUpdateSchema(CamelModel):
    text: Optional[str] = Field(default=None, min_length=1)
    options: Optional[List[str]] = Field(default=None, min_length=2)
    correct_option: Optional[int] = Field(default=None, ge=0)
    explanation: Optional[str] = None


class QuestionAdminRead(CamelModel):
    id: int
    text: str
    options: List[str]
    correct_option: int
    standard: Optional[int] = None
    explanation: Optional[str] = None
    updated_at: Optional[datetime] = None
