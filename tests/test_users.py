"""API tests for /users."""

from conftest import PASSWORD


class TestSetupAdmin:

    def test_first_admin_can_be_created_once(self, client):
        payload = {"name": "Root", "email": "root@example.com", "password": PASSWORD}
        first = client.post("/api/v1/users/setup-admin", json=payload)
        assert first.status_code == 201
        assert first.json()["data"]["role"] == "admin"

        second = client.post("/api/v1/users/setup-admin",
                             json={**payload, "email": "root2@example.com"})
        assert second.status_code == 400


class TestUserAdministration:
    """Admin-only user CRUD."""

    def test_list_users_is_paginated(self, client, admin_headers, make_user):
        for _ in range(3):
            make_user()
        response = client.get("/api/v1/users/?page=1&limit=2", headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        assert len(body["data"]) == 2
        assert body["pagination"]["total_items"] == 4
        assert body["pagination"]["total_pages"] == 2

    def test_list_users_forbidden_for_customer(self, client, customer_headers):
        assert client.get("/api/v1/users/", headers=customer_headers).status_code == 403

    def test_profile(self, client, customer, customer_headers):
        response = client.get("/api/v1/users/profile", headers=customer_headers)
        assert response.json()["data"]["email"] == customer.email

    def test_create_update_delete_user(self, client, admin_headers):
        created = client.post("/api/v1/users/", headers=admin_headers, json={
            "name": "Gate Keeper", "email": "gate@example.com", "password": PASSWORD, "role": "staff",
        })
        assert created.status_code == 201
        user_id = created.json()["data"]["id"]

        updated = client.put(f"/api/v1/users/{user_id}", headers=admin_headers, json={"status": "inactive"})
        assert updated.json()["data"]["status"] == "inactive"

        assert client.delete(f"/api/v1/users/{user_id}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/v1/users/{user_id}", headers=admin_headers).status_code == 404

    def test_missing_user(self, client, admin_headers):
        assert client.get("/api/v1/users/4040", headers=admin_headers).status_code == 404
        assert client.put("/api/v1/users/4040", headers=admin_headers, json={"name": "x"}).status_code == 404
        assert client.delete("/api/v1/users/4040", headers=admin_headers).status_code == 404
