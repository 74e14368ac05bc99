# -*- coding: utf-8 -*-
"""
Integration тесты административного API, таксономии и банка вопросов
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from examhub.domain.enums import Role
from tests.fixtures import (auth_headers, cet_document, create_cet_taxonomy,
                            create_test_questions, create_test_topics,
                            create_test_user)

CATALOG_ENTRY = {
    "name": "TCS",
    "kind": "company",
    "duration": 60,
    "numberOfQuestions": 4,
    "topicList": {
        "subjects": [{"subjectName": "Aptitude", "topics": ["Ratios", "Series"]}]
    },
    "educationLevel": "undergraduate",
}


class TestAdminAccess:
    """Разграничение доступа к административным маршрутам"""

    @pytest.mark.asyncio
    async def test_student_is_forbidden(self, async_client: AsyncClient, test_session: AsyncSession):
        student = await create_test_user(test_session)

        response = await async_client.get("/api/v1/admin/students", headers=auth_headers(student))

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_anonymous_is_unauthorized(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/admin/catalog")

        assert response.status_code == 401


class TestDistributionAPI:
    """Распределение CET"""

    @pytest.mark.asyncio
    async def test_missing_distribution(self, async_client: AsyncClient, test_session: AsyncSession):
        admin = await create_test_user(test_session, role=Role.ADMIN)

        response = await async_client.get(
            "/api/v1/admin/distribution", headers=auth_headers(admin)
        )

        assert response.status_code == 500
        assert response.json()["error_code"] == "CONFIGURATION_MISSING"

    @pytest.mark.asyncio
    async def test_save_and_read(self, async_client: AsyncClient, test_session: AsyncSession):
        # Arrange
        admin = await create_test_user(test_session, role=Role.ADMIN)
        await create_cet_taxonomy(test_session)
        headers = auth_headers(admin)

        # Act
        saved = await async_client.put(
            "/api/v1/admin/distribution", json=cet_document(), headers=headers
        )
        active = await async_client.get("/api/v1/admin/distribution", headers=headers)
        cet_topics = await async_client.get("/api/v1/topics/cet", headers=headers)

        # Assert
        assert saved.status_code == 200
        assert saved.json()["version"] == 1
        assert saved.json()["createdBy"] == admin.id
        assert active.json()["isActive"] is True
        assert active.json()["document"]["sections"][0]["name"] == "Paper I"
        assert len(cet_topics.json()) == 4
        assert cet_topics.json()[0]["questionCount"] == 2

    @pytest.mark.asyncio
    async def test_negative_quota_rejected(
        self, async_client: AsyncClient, test_session: AsyncSession
    ):
        admin = await create_test_user(test_session, role=Role.ADMIN)
        await create_cet_taxonomy(test_session)

        response = await async_client.put(
            "/api/v1/admin/distribution",
            json=cet_document(physics=-1),
            headers=auth_headers(admin),
        )

        assert response.status_code == 422


class TestCatalogAPI:
    """Каталог тестов компаний"""

    @pytest.mark.asyncio
    async def test_catalog_and_company_test(
        self, async_client: AsyncClient, test_session: AsyncSession
    ):
        # Arrange
        admin = await create_test_user(test_session, role=Role.ADMIN)
        student = await create_test_user(test_session)
        topics = await create_test_topics(test_session, "aptitude", ["ratios", "series"])
        await create_test_questions(test_session, topics["ratios"], 3)
        await create_test_questions(test_session, topics["series"], 3)

        # Act
        saved = await async_client.put(
            "/api/v1/admin/catalog", json=CATALOG_ENTRY, headers=auth_headers(admin)
        )
        listed = await async_client.get(
            "/api/v1/admin/catalog?kind=company", headers=auth_headers(admin)
        )
        created = await async_client.post(
            "/api/v1/tests/undergraduate/company",
            json={"company": "tcs"},
            headers=auth_headers(student),
        )

        # Assert
        assert saved.status_code == 200
        assert saved.json()["name"] == "tcs"
        assert saved.json()["topicList"] == [
            {"subject": "aptitude", "topics": ["ratios", "series"]}
        ]
        assert [entry["name"] for entry in listed.json()] == ["tcs"]
        assert created.status_code == 201
        assert created.json()["name"].startswith("TCS Assessment")
        assert created.json()["totalQuestions"] == 4
        assert created.json()["totalDuration"] == 60


class TestStudentsAPI:
    """Список студентов и создание администраторов"""

    @pytest.mark.asyncio
    async def test_students_filtered_by_city(
        self, async_client: AsyncClient, test_session: AsyncSession
    ):
        # Arrange
        admin = await create_test_user(test_session, role=Role.ADMIN)
        pune = await create_test_user(test_session, city="Pune")
        await create_test_user(test_session, city="Mumbai")

        # Act
        page = await async_client.get(
            "/api/v1/admin/students?city=Pune", headers=auth_headers(admin)
        )
        details = await async_client.get(
            f"/api/v1/admin/students/{pune.id}", headers=auth_headers(admin)
        )

        # Assert
        assert page.status_code == 200
        assert [s["id"] for s in page.json()["students"]] == [pune.id]
        assert page.json()["pagination"]["total"] == 1
        assert details.json()["city"] == "Pune"

    @pytest.mark.asyncio
    async def test_create_admin(self, async_client: AsyncClient, test_session: AsyncSession):
        admin = await create_test_user(test_session, role=Role.ADMIN)
        payload = {
            "fullName": "Second Admin",
            "email": "second@examhub.io",
            "password": "admin-pass-2",
        }

        created = await async_client.post(
            "/api/v1/admin/admins", json=payload, headers=auth_headers(admin)
        )
        duplicate = await async_client.post(
            "/api/v1/admin/admins", json=payload, headers=auth_headers(admin)
        )

        assert created.status_code == 201
        assert created.json()["role"] == "admin"
        assert duplicate.status_code == 409


class TestTopicsAPI:
    """Чтение таксономии"""

    @pytest.mark.asyncio
    async def test_topic_tree_and_subject(
        self, async_client: AsyncClient, test_session: AsyncSession
    ):
        # Arrange
        student = await create_test_user(test_session)
        await create_test_topics(test_session, "physics", ["sound", "optics"])

        # Act
        tree = await async_client.get("/api/v1/topics", headers=auth_headers(student))
        physics = await async_client.get(
            "/api/v1/topics/subjects/Physics", headers=auth_headers(student)
        )
        unknown = await async_client.get(
            "/api/v1/topics/subjects/astrology", headers=auth_headers(student)
        )

        # Assert
        assert tree.json()[0]["name"] == "undergraduate"
        assert [t["name"] for t in physics.json()["topics"]] == ["optics", "sound"]
        assert unknown.status_code == 404
        assert unknown.json()["error_code"] == "NOT_FOUND"


class TestQuestionsAPI:
    """Импорт и правка вопросов"""

    @pytest.mark.asyncio
    async def test_import_csv(self, async_client: AsyncClient, test_session: AsyncSession):
        # Arrange
        admin = await create_test_user(test_session, role=Role.ADMIN)
        await create_test_topics(test_session, "physics", ["optics"])
        content = (
            "question,option_1,option_2,option_3,option_4,answer,subject,topics,standard,explanation\n"
            "Q1,a,b,c,d,1,Physics,Optics,11,\n"
            "Q2,a,b,c,d,2,Physics,Optics,12,Because\n"
        ).encode("utf-8")

        # Act
        response = await async_client.post(
            "/api/v1/questions/import",
            files={"file": ("questions.csv", content, "text/csv")},
            headers=auth_headers(admin),
        )

        # Assert
        assert response.status_code == 201
        assert response.json() == {"created": 2}

    @pytest.mark.asyncio
    async def test_import_is_admin_only(
        self, async_client: AsyncClient, test_session: AsyncSession
    ):
        student = await create_test_user(test_session)

        response = await async_client.post(
            "/api/v1/questions/import",
            files={"file": ("questions.csv", b"", "text/csv")},
            headers=auth_headers(student),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_update_question(self, async_client: AsyncClient, test_session: AsyncSession):
        # Arrange
        admin = await create_test_user(test_session, role=Role.ADMIN)
        topics = await create_test_topics(test_session, "physics", ["optics"])
        question = (await create_test_questions(test_session, topics["optics"], 1))[0]

        # Act
        updated = await async_client.patch(
            f"/api/v1/questions/{question.id}",
            json={"correctOption": 2},
            headers=auth_headers(admin),
        )
        out_of_range = await async_client.patch(
            f"/api/v1/questions/{question.id}",
            json={"correctOption": 7},
            headers=auth_headers(admin),
        )

        # Assert
        assert updated.status_code == 200
        assert updated.json()["correctOption"] == 2
        assert out_of_range.status_code == 422
