# -*- coding: utf-8 -*-
"""
examhub/domain/enums.py
~~~~~~~~~~~~~~~~~~~~~~~
Определение классов перечислений для домена тестирования.

Этот модуль содержит все определения перечислений, используемые в приложении, такие как
роли, уровни образования и виды тестов.
"""

import enum


class Role(str, enum.Enum):
    """Роли, доступные в системе."""

    ADMIN = "admin"
    STUDENT = "student"


class EducationLevel(str, enum.Enum):
    """Уровни образования, к которым относятся домены тем."""

    JUNIOR_COLLEGE = "juniorCollege"
    UNDERGRADUATE = "undergraduate"


class TestKind(str, enum.Enum):
    """Способ, которым был собран тест."""

    CUSTOM = "custom"  # Равномерная выборка по выбранным темам
    COMPANY = "company"  # Спецификация компании из каталога
    CET = "cet"  # Квоты из распределения CET
    GATE = "gate"  # Спецификация GATE из каталога


class CatalogKind(str, enum.Enum):
    """Виды записей каталога тестов."""

    COMPANY = "company"
    GATE = "gate"
