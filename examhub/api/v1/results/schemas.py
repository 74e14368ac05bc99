# -*- coding: utf-8 -*-
"""
Схемы разбора результатов и рекомендаций.
"""

from datetime import datetime
from typing import List, Optional, Union

from examhub.api.v1.shared.schemas import CamelModel, MessageRead


class QuestionAnalysisRead(CamelModel):
    question_id: int
    question: Optional[str] = None
    options: List[str] = []
    selected_option: Optional[int] = None
    correct_option: Optional[int] = None
    is_correct: bool
    explanation: Optional[str] = None


class TestResultDetailRead(CamelModel):
    id: int
    test_id: int
    total_questions: int
    correct_answers: int
    time_spent: int
    invalid: bool
    tab_switches: int
    question_analysis: List[QuestionAnalysisRead]


class TopicPerformanceRead(CamelModel):
    topic_id: int
    topic: str
    subject: str
    total: int
    correct: int
    incorrect: int
    percentage_correct: float


class ResultSummaryRead(CamelModel):
    id: int
    test_id: int
    test_name: Optional[str] = None
    score: int
    total_questions: int
    percentage_score: float
    time_taken: int
    created_at: datetime


class ResultWithRecommendationsRead(CamelModel):
    test_result: ResultSummaryRead
    topic_performance: List[TopicPerformanceRead]
    recommendations: List[Union[TopicPerformanceRead, MessageRead]]
