#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Скрипт заполнения таксономии и распределения MHT-CET.

Создаёт домен juniorCollege, предметы physics, chemistry, mathematics и их темы
для 11 и 12 класса, затем сохраняет новую активную версию распределения.
Запуск: ``python scripts/seed_cet_distribution.py``.
"""

import asyncio
import sys
from pathlib import Path

# Добавляем корень проекта в sys.path
sys.path.append(str(Path(__file__).parent.parent))

from examhub.clients.database_client import AsyncSessionLocal, init_db
from examhub.config.logger import get_logger
from examhub.domain.enums import EducationLevel
from examhub.repository.topics import ensure_topic
from examhub.service.distribution import save_distribution

logger = get_logger("seed_cet_distribution")

DOMAIN_NAME = "juniorCollege"


def _quota(names_and_counts, marks=1):
    return [
        {"topicName": name, "questionCount": count, "marksPerQuestion": marks}
        for name, count in names_and_counts
    ]


PHYSICS_12 = _quota(
    [
        ("Rotational Dynamics", 3),
        ("Mechanical Properties of Fluids", 3),
        ("Kinetic Theory of Gases and Radiation", 3),
        ("Thermodynamics", 3),
        ("Oscillations", 2),
        ("Superposition of Waves", 3),
        ("Wave Optics", 3),
        ("Electrostatics", 3),
        ("Current Electricity", 2),
        ("Magnetic Fields due to Electric Current", 3),
        ("Magnetic Materials", 1),
        ("Electromagnetic Induction", 2),
        ("AC Circuits", 2),
        ("Dual Nature of Radiation and Matter", 2),
        ("Structure of Atoms and Nuclei", 3),
        ("Semiconductor Devices", 2),
    ]
)

PHYSICS_11 = _quota(
    [
        ("Error Analysis", 1),
        ("Vectors", 1),
        ("Motion in a Plane", 1),
        ("Laws of Motion", 1),
        ("Gravitation", 1),
        ("Thermal Property of Matter", 1),
        ("Sound", 1),
        ("Optics", 1),
        ("Electrostatics", 1),
        ("Semiconductors", 1),
        ("Measures of Dispersion", 1),
    ]
)

CHEMISTRY_12 = _quota(
    [
        ("Solid State", 3),
        ("Solutions", 3),
        ("Ionic Equilibria", 2),
        ("Chemical Thermodynamics", 3),
        ("Electrochemistry", 3),
        ("Chemical Kinetics", 2),
        ("Elements of Groups 16, 17 and 18", 3),
        ("Transition and Inner Transition Elements", 2),
        ("Coordination Compounds", 2),
        ("Halogen Derivatives", 2),
        ("Alcohols, Phenols, and Ethers", 3),
        ("Aldehydes, Ketones and Carboxylic Acids", 3),
        ("Amines", 3),
        ("Biomolecules", 2),
        ("Introduction to Polymer Chemistry", 2),
        ("Green Chemistry and Nanochemistry", 2),
        ("Metallurgy", 0),
    ]
)

CHEMISTRY_11 = _quota(
    [
        ("Some Basic Concepts of Chemistry", 1),
        ("Structure of Atom", 1),
        ("Chemical Bonding", 1),
        ("Redox Reactions", 1),
        ("Elements of Group 1 and 2", 1),
        ("States of Matter", 1),
        ("Basic Principles of Organic Chemistry", 1),
        ("Hydrocarbons", 1),
        ("Chemistry in Everyday Life", 1),
        ("Surface Chemistry", 0),
        ("Hydrogen", 1),
    ]
)

MATHEMATICS_12 = _quota(
    [
        ("Mathematical Logic", 2),
        ("Matrices", 2),
        ("Trigonometric Functions", 3),
        ("Pair of Straight Lines", 2),
        ("Vectors", 4),
        ("Line and Plane", 4),
        ("Linear Programming", 1),
        ("Differentiation", 4),
        ("Applications of Derivatives", 3),
        ("Indefinite Integration", 3),
        ("Definite Integration", 3),
        ("Application of Definite Integration", 2),
        ("Differential Equations", 3),
        ("Probability Distributions", 2),
        ("Binomial Distribution", 2),
    ],
    marks=2,
)

MATHEMATICS_11 = _quota(
    [
        ("Trigonometry-2", 1),
        ("Straight Line", 1),
        ("Circle", 1),
        ("Probability", 1),
        ("Complex Numbers", 1),
        ("Permutation Combination", 1),
        ("Functions", 1),
        ("Limits", 1),
        ("Continuity", 1),
        ("Conic Section", 1),
        ("Determinants and Matrices", 0),
        ("Sequences and Series", 0),
    ],
    marks=2,
)

CET_DOCUMENT = {
    "sections": [
        {"name": "Paper I: Mathematics", "duration": 90, "subjects": ["mathematics"]},
        {
            "name": "Paper II: Physics & Chemistry",
            "duration": 90,
            "subjects": ["physics", "chemistry"],
        },
    ],
    "distributions": [
        {"subject": "Mathematics", "standard": 12, "topics": MATHEMATICS_12},
        {"subject": "Mathematics", "standard": 11, "topics": MATHEMATICS_11},
        {"subject": "Physics", "standard": 12, "topics": PHYSICS_12},
        {"subject": "Physics", "standard": 11, "topics": PHYSICS_11},
        {"subject": "Chemistry", "standard": 12, "topics": CHEMISTRY_12},
        {"subject": "Chemistry", "standard": 11, "topics": CHEMISTRY_11},
    ],
}


async def seed_cet_distribution() -> None:
    await init_db()

    async with AsyncSessionLocal() as session:
        created = 0
        for distribution in CET_DOCUMENT["distributions"]:
            for entry in distribution["topics"]:
                await ensure_topic(
                    session,
                    domain_name=DOMAIN_NAME,
                    education_level=EducationLevel.JUNIOR_COLLEGE,
                    subject_name=distribution["subject"],
                    topic_name=entry["topicName"],
                )
                created += 1
        await session.commit()
        logger.info(f"✅ Таксономия CET готова: {created} записей тем проверено")

        config = await save_distribution(session, CET_DOCUMENT)
        logger.info(f"✅ Распределение CET сохранено, версия {config.version}")


if __name__ == "__main__":
    asyncio.run(seed_cet_distribution())
