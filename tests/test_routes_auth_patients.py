"""Tests for /api/v1/auth and /api/v1/patients routes."""
import pytest


class TestAuthRoutes:
    @pytest.mark.asyncio
    async def test_login_and_me(self, client, make_user):
        await make_user("doctor", email="doc@hospital.org", password="long-enough-pw")
        response = await client.post(
            "/api/v1/auth/login", json={"email": "doc@hospital.org", "password": "long-enough-pw"}
        )
        assert response.status_code == 200
        token = response.json()["access_token"]

        me = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["role"] == "doctor"

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client, make_user):
        await make_user("admin", password="right-password")
        response = await client.post(
            "/api/v1/auth/login", json={"email": "admin@hospital.org", "password": "wrong-password"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token(self, client):
        response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_admin_creates_staff_user(self, client, admin_headers):
        body = {"email": "frontdesk@hospital.org", "password": "reception-pw", "role": "reception"}
        created = await client.post("/api/v1/auth/users", json=body, headers=admin_headers)
        assert created.status_code == 201
        assert created.json()["role"] == "reception"

        duplicate = await client.post("/api/v1/auth/users", json=body, headers=admin_headers)
        assert duplicate.status_code == 409

    @pytest.mark.asyncio
    async def test_non_admin_cannot_create_users(self, client, reception_headers):
        response = await client.post(
            "/api/v1/auth/users",
            json={"email": "x@hospital.org", "password": "password-123"},
            headers=reception_headers,
        )
        assert response.status_code == 403


class TestPatientRoutes:
    @pytest.mark.asyncio
    async def test_create_list_get(self, client, reception_headers, new_patient_payload):
        created = await client.post("/api/v1/patients", json=new_patient_payload, headers=reception_headers)
        assert created.status_code == 201
        patient_id = created.json()["id"]

        listing = await client.get("/api/v1/patients", headers=reception_headers)
        assert [p["id"] for p in listing.json()] == [patient_id]

        one = await client.get(f"/api/v1/patients/{patient_id}", headers=reception_headers)
        assert one.json()["name"] == new_patient_payload["name"]

    @pytest.mark.asyncio
    async def test_missing_patient(self, client, reception_headers):
        response = await client.get("/api/v1/patients/999", headers=reception_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_invalid_patient(self, client, reception_headers):
        response = await client.post(
            "/api/v1/patients", json={"name": "", "age": -1, "gender": "f", "phone": "1"}, headers=reception_headers
        )
        assert response.status_code == 422
