# -*- coding: utf-8 -*-
"""
Схемы истории и аналитики студента.
"""

from datetime import datetime
from typing import List, Optional

from examhub.api.v1.results.schemas import TopicPerformanceRead
from examhub.api.v1.shared.schemas import CamelModel, PaginationRead


class RecentTestRead(CamelModel):
    id: int
    test_id: int
    test_name: Optional[str] = None
    score: int
    total_questions: int
    percentage_score: float
    created_at: datetime


class UserAnalyticsRead(CamelModel):
    total_tests: int
    average_score: float
    topic_recommendations: List[TopicPerformanceRead]
    recent_tests: List[RecentTestRead]


class HistoryItemRead(CamelModel):
    id: int
    test_id: int
    test_name: Optional[str] = None
    total_questions: int
    total_duration: Optional[int] = None
    score: int
    time_taken: int
    percentage_score: float
    created_at: datetime


class HistoryPageRead(CamelModel):
    test_results: List[HistoryItemRead]
    pagination: PaginationRead
