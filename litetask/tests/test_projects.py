"""
Project endpoint tests.
Covers: scoped listing, creation with self-grant, duplicate names, deletion rules.
"""
from __future__ import annotations

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio

USER_PASSWORD = "UserPass1"


class TestListProjects:
    async def test_admin_sees_all_newest_first(
        self, client: AsyncClient, admin_headers: dict, make_project
    ) -> None:
        alpha = await make_project("Alpha")
        beta = await make_project("Beta")
        response = await client.get("/api/projects", headers=admin_headers)
        assert response.status_code == 200
        ids = [p["id"] for p in response.json()]
        assert ids[:2] == [beta["id"], alpha["id"]]
        assert 1 in ids

    async def test_restricted_user_sees_granted_only(
        self, client: AsyncClient, make_project, make_user, login_as
    ) -> None:
        visible = await make_project("Visible")
        hidden = await make_project("Hidden")
        await make_user("limited@example.com", project_ids=[visible["id"]])
        headers = await login_as("limited@example.com", USER_PASSWORD)

        response = await client.get("/api/projects", headers=headers)
        ids = [p["id"] for p in response.json()]
        assert ids == [visible["id"]]
        assert hidden["id"] not in ids

    async def test_no_grants_means_no_projects(
        self, client: AsyncClient, make_user, login_as
    ) -> None:
        await make_user("empty@example.com", project_ids=[])
        headers = await login_as("empty@example.com", USER_PASSWORD)
        response = await client.get("/api/projects", headers=headers)
        assert response.json() == []

    async def test_unauthenticated(self, client: AsyncClient) -> None:
        response = await client.get("/api/projects")
        assert response.status_code == 401


class TestCreateProject:
    async def test_create_project(self, client: AsyncClient, admin_headers: dict) -> None:
        response = await client.post(
            "/api/projects", json={"name": "  Launch  "}, headers=admin_headers
        )
        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Launch"
        assert data["createdAt"]

    async def test_duplicate_name(
        self, client: AsyncClient, admin_headers: dict, make_project
    ) -> None:
        await make_project("Twice")
        response = await client.post(
            "/api/projects", json={"name": "Twice"}, headers=admin_headers
        )
        assert response.status_code == 409

    async def test_blank_name(self, client: AsyncClient, admin_headers: dict) -> None:
        response = await client.post("/api/projects", json={"name": "  "}, headers=admin_headers)
        assert response.status_code == 422

    async def test_restricted_creator_is_granted_access(
        self, client: AsyncClient, user_headers: dict
    ) -> None:
        response = await client.post(
            "/api/projects", json={"name": "Mine"}, headers=user_headers
        )
        assert response.status_code == 201
        project_id = response.json()["id"]

        listed = await client.get("/api/projects", headers=user_headers)
        assert project_id in [p["id"] for p in listed.json()]

        me = await client.get("/api/auth/me", headers=user_headers)
        assert project_id in me.json()["projectIds"]

        task = await client.post(
            "/api/tasks", json={"title": "in mine", "projectId": project_id}, headers=user_headers
        )
        assert task.status_code == 201


class TestDeleteProject:
    async def test_delete_cascades_tasks(
        self, client: AsyncClient, admin_headers: dict, make_project, make_task
    ) -> None:
        project = await make_project("Doomed")
        task = await make_task(admin_headers, "goes too", projectId=project["id"])
        await client.post(
            f"/api/tasks/{task['id']}/comments", json={"body": "bye"}, headers=admin_headers
        )

        response = await client.delete(f"/api/projects/{project['id']}", headers=admin_headers)
        assert response.status_code == 204

        assert (await client.get(f"/api/tasks/{task['id']}", headers=admin_headers)).status_code == 404
        listed = await client.get("/api/projects", headers=admin_headers)
        assert project["id"] not in [p["id"] for p in listed.json()]

    async def test_default_project_cannot_be_deleted(
        self, client: AsyncClient, admin_headers: dict
    ) -> None:
        response = await client.delete("/api/projects/1", headers=admin_headers)
        assert response.status_code == 400

    async def test_missing_project(self, client: AsyncClient, admin_headers: dict) -> None:
        response = await client.delete("/api/projects/999", headers=admin_headers)
        assert response.status_code == 404

    async def test_non_admin_forbidden(
        self, client: AsyncClient, user_headers: dict, make_project
    ) -> None:
        project = await make_project("Protected")
        response = await client.delete(f"/api/projects/{project['id']}", headers=user_headers)
        assert response.status_code == 403
