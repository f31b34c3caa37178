"""
DevCamper API — User Administration Tests
==========================================
"""

import uuid

import pytest

API = "/api/v1"

NEW_USER = {"name": "Sam Admin-Made", "email": "sam@example.com", "password": "123456", "role": "publisher"}


class TestUsersAdmin:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", ["user", "publisher"])
    async def test_non_admin_forbidden(self, client, make_user, role):
        caller = await make_user(role)

        response = await client.get(f"{API}/users", headers=caller.headers)

        assert response.status_code == 403
        assert response.json()["error"] == f"User role {role} is not authorized to access this route"

    @pytest.mark.asyncio
    async def test_anonymous_unauthorized(self, client):
        response = await client.get(f"{API}/users")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_create_get_update_delete(self, client, make_user):
        admin = await make_user("admin")

        created = await client.post(f"{API}/users", json=NEW_USER, headers=admin.headers)
        assert created.status_code == 201
        user = created.json()["data"]
        assert user["role"] == "publisher"
        assert "password_hash" not in user

        fetched = await client.get(f"{API}/users/{user['id']}", headers=admin.headers)
        assert fetched.json()["data"]["email"] == "sam@example.com"

        updated = await client.put(
            f"{API}/users/{user['id']}", json={"role": "admin"}, headers=admin.headers
        )
        assert updated.json()["data"]["role"] == "admin"

        deleted = await client.delete(f"{API}/users/{user['id']}", headers=admin.headers)
        assert deleted.json() == {"success": True, "data": {}}
        missing = await client.get(f"{API}/users/{user['id']}", headers=admin.headers)
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_created_user_can_log_in(self, client, make_user):
        admin = await make_user("admin")
        await client.post(f"{API}/users", json=NEW_USER, headers=admin.headers)

        login = await client.post(
            f"{API}/auth/login", json={"email": NEW_USER["email"], "password": NEW_USER["password"]}
        )

        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_list_is_paginated_and_filterable(self, client, make_user):
        admin = await make_user("admin")
        for _ in range(3):
            await make_user("publisher")

        page = await client.get(f"{API}/users", params={"limit": 2}, headers=admin.headers)
        publishers = await client.get(f"{API}/users", params={"role": "publisher"}, headers=admin.headers)

        assert page.json()["count"] == 2
        assert page.json()["pagination"]["next"] == {"page": 2, "limit": 2}
        assert page.headers["X-Total-Count"] == "4"
        assert publishers.json()["count"] == 3

    @pytest.mark.asyncio
    async def test_password_hash_is_not_filterable(self, client, make_user):
        admin = await make_user("admin")

        response = await client.get(
            f"{API}/users", params={"select": "name,password_hash"}, headers=admin.headers
        )

        assert response.status_code == 200
        assert all("password_hash" not in row for row in response.json()["data"])

    @pytest.mark.asyncio
    async def test_duplicate_email(self, client, make_user):
        admin = await make_user("admin")
        await client.post(f"{API}/users", json=NEW_USER, headers=admin.headers)

        response = await client.post(f"{API}/users", json=NEW_USER, headers=admin.headers)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_missing_user(self, client, make_user):
        admin = await make_user("admin")
        missing = uuid.uuid4()

        response = await client.put(f"{API}/users/{missing}", json={"name": "x"}, headers=admin.headers)

        assert response.status_code == 404
        assert response.json()["error"] == f"User not found with id of {missing}"
