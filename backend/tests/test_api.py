"""Tests for API endpoints."""

import pytest

from conftest import make_token


class TestHealthEndpoint:
    """Tests for health check endpoint."""

    @pytest.mark.asyncio
    async def test_health_endpoint(self, client):
        """Test health endpoint returns status."""
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["emergencies"]["total"] == 0
        assert data["patient_count"] == 0
        assert data["websocket_connections"] == 0

    @pytest.mark.asyncio
    async def test_health_counts_by_status(self, client, seeded_emergencies):
        response = await client.get("/health")

        data = response.json()
        assert data["emergencies"]["total"] == 3
        assert data["emergencies"]["by_status"] == {"pending": 3}
        assert data["emergencies"]["newest_report"] is not None

    @pytest.mark.asyncio
    async def test_probes(self, client):
        assert (await client.get("/ready")).json() == {"status": "ready"}
        assert (await client.get("/live")).json() == {"status": "alive"}


class TestRootEndpoint:
    """Tests for root endpoint."""

    @pytest.mark.asyncio
    async def test_root_endpoint(self, client):
        """Test root endpoint returns API info."""
        response = await client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "CareLink API"
        assert "version" in data
        assert "docs" in data


class TestReportEmergency:
    """Tests for emergency submission."""

    @pytest.mark.asyncio
    async def test_anonymous_report(self, client, sample_emergency_payload):
        response = await client.post("/api/v1/emergencies", json=sample_emergency_payload)

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["user_id"] is None
        assert data["emergency_type"] == "Medical Emergency"

    @pytest.mark.asyncio
    async def test_signed_in_report_is_linked(
        self, client, patient_headers, sample_emergency_payload
    ):
        response = await client.post(
            "/api/v1/emergencies", json=sample_emergency_payload, headers=patient_headers
        )

        assert response.status_code == 201
        assert response.json()["user_id"] == "patient-1"

    @pytest.mark.asyncio
    async def test_missing_fields_rejected(self, client):
        response = await client.post(
            "/api/v1/emergencies", json={"emergency_type": "Fire", "location": "Park Street"}
        )

        assert response.status_code == 400
        assert "required" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_test_report_rejected(self, client, sample_emergency_payload):
        payload = {**sample_emergency_payload, "description": "just a test"}

        response = await client.post("/api/v1/emergencies", json=payload)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_invalid_latitude(self, client, sample_emergency_payload):
        payload = {**sample_emergency_payload, "latitude": 123.0}

        response = await client.post("/api/v1/emergencies", json=payload)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_overlong_fields_rejected(self, client, sample_emergency_payload):
        payload = {**sample_emergency_payload, "emergency_type": "M" * 101}

        response = await client.post("/api/v1/emergencies", json=payload)

        assert response.status_code == 422


class TestListEmergencies:
    """Tests for the provider emergency list."""

    @pytest.mark.asyncio
    async def test_requires_session(self, client):
        response = await client.get("/api/v1/emergencies")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_patients_forbidden(self, client, patient_headers):
        response = await client.get("/api/v1/emergencies", headers=patient_headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_expired_token(self, client):
        headers = {"Authorization": f"Bearer {make_token('provider-1', 'healthcare', -60)}"}
        response = await client.get("/api/v1/emergencies", headers=headers)
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_cookie_session(self, client):
        headers = {"Cookie": f"access_token={make_token('provider-1', 'healthcare')}"}
        response = await client.get("/api/v1/emergencies", headers=headers)

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_list_empty(self, client, provider_headers):
        response = await client.get("/api/v1/emergencies", headers=provider_headers)

        assert response.status_code == 200
        assert response.json() == {"emergencies": [], "total": 0, "duplicates_hidden": 0}

    @pytest.mark.asyncio
    async def test_duplicates_collapsed(self, client, provider_headers, seeded_emergencies):
        response = await client.get("/api/v1/emergencies", headers=provider_headers)

        data = response.json()
        assert [e["id"] for e in data["emergencies"]] == ["b", "c"]
        assert data["total"] == 3
        assert data["duplicates_hidden"] == 1

    @pytest.mark.asyncio
    async def test_dedupe_disabled(self, client, provider_headers, seeded_emergencies):
        response = await client.get(
            "/api/v1/emergencies", params={"dedupe": "false"}, headers=provider_headers
        )

        data = response.json()
        assert [e["id"] for e in data["emergencies"]] == ["b", "c", "a"]
        assert data["duplicates_hidden"] == 0

    @pytest.mark.asyncio
    async def test_mine(self, client, patient_headers, seeded_emergencies):
        response = await client.get("/api/v1/emergencies/mine", headers=patient_headers)

        assert response.status_code == 200
        assert [e["id"] for e in response.json()] == ["c"]

    @pytest.mark.asyncio
    async def test_by_patient(self, client, provider_headers, seeded_emergencies):
        response = await client.get(
            "/api/v1/emergencies/patient/PT-ABCD-1234", headers=provider_headers
        )

        assert [e["id"] for e in response.json()] == ["c"]


class TestManageEmergencies:
    """Tests for status changes and deletion."""

    @pytest.mark.asyncio
    async def test_get_emergency(self, client, provider_headers, seeded_emergencies):
        response = await client.get("/api/v1/emergencies/c", headers=provider_headers)

        assert response.status_code == 200
        assert response.json()["emergency_type"] == "Fire"

    @pytest.mark.asyncio
    async def test_get_emergency_not_found(self, client, provider_headers):
        response = await client.get("/api/v1/emergencies/nope", headers=provider_headers)

        assert response.status_code == 404
        assert response.json()["detail"] == "Emergency not found"

    @pytest.mark.asyncio
    async def test_update_status(self, client, provider_headers, seeded_emergencies):
        response = await client.patch(
            "/api/v1/emergencies/a/status", json={"status": "in_progress"}, headers=provider_headers
        )

        assert response.status_code == 200
        assert response.json()["status"] == "in_progress"

    @pytest.mark.asyncio
    async def test_update_status_invalid_value(self, client, provider_headers, seeded_emergencies):
        response = await client.patch(
            "/api/v1/emergencies/a/status", json={"status": "archived"}, headers=provider_headers
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_update_status_not_found(self, client, provider_headers):
        response = await client.patch(
            "/api/v1/emergencies/nope/status", json={"status": "completed"}, headers=provider_headers
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete(self, client, provider_headers, seeded_emergencies):
        response = await client.delete("/api/v1/emergencies/a", headers=provider_headers)
        assert response.status_code == 204

        response = await client.delete("/api/v1/emergencies/a", headers=provider_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_bulk_delete(self, client, provider_headers, seeded_emergencies):
        response = await client.post(
            "/api/v1/emergencies/delete", json={"ids": ["a", "b"]}, headers=provider_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["deleted"] == 2
        assert data["failed_ids"] == []

        remaining = await client.get(
            "/api/v1/emergencies", params={"dedupe": "false"}, headers=provider_headers
        )
        assert [e["id"] for e in remaining.json()["emergencies"]] == ["c"]

    @pytest.mark.asyncio
    async def test_bulk_delete_requires_ids(self, client, provider_headers):
        response = await client.post(
            "/api/v1/emergencies/delete", json={"ids": []}, headers=provider_headers
        )

        assert response.status_code == 422


class TestPatientEndpoints:
    """Tests for patient record endpoints."""

    @pytest.mark.asyncio
    async def test_my_record_missing(self, client, patient_headers):
        response = await client.get("/api/v1/patients/me", headers=patient_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_my_record_creates_then_merges(self, client, patient_headers):
        response = await client.patch(
            "/api/v1/patients/me",
            json={"name": "Arjun", "health_metrics": {"heart_rate": 72}},
            headers=patient_headers,
        )
        assert response.status_code == 200
        assert response.json()["id"] == "patient-1"

        response = await client.patch(
            "/api/v1/patients/me",
            json={"health_metrics": {"blood_pressure": "120/80"}},
            headers=patient_headers,
        )
        assert response.status_code == 200

        record = (await client.get("/api/v1/patients/me", headers=patient_headers)).json()
        assert record["name"] == "Arjun"
        assert record["health_metrics"]["heart_rate"] == 72
        assert record["health_metrics"]["blood_pressure"] == "120/80"

    @pytest.mark.asyncio
    async def test_patient_list_forbidden_for_patients(self, client, patient_headers):
        response = await client.get("/api/v1/patients", headers=patient_headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_provider_crud(self, client, provider_headers):
        created = await client.post(
            "/api/v1/patients",
            json={"name": "Meera Iyer", "email": "meera@example.com", "blood_type": "O+"},
            headers=provider_headers,
        )
        assert created.status_code == 201
        patient = created.json()
        assert patient["patient_unique_id"].startswith("PT-")

        duplicate = await client.post(
            "/api/v1/patients",
            json={"name": "Someone Else", "email": "meera@example.com"},
            headers=provider_headers,
        )
        assert duplicate.status_code == 409

        replaced = await client.put(
            f"/api/v1/patients/{patient['id']}",
            json={"name": "Meera R. Iyer", "allergies": ["latex"]},
            headers=provider_headers,
        )
        assert replaced.status_code == 200
        assert replaced.json()["allergies"] == ["latex"]
        assert replaced.json()["blood_type"] == ""

        listing = await client.get("/api/v1/patients", headers=provider_headers)
        assert [p["name"] for p in listing.json()] == ["Meera R. Iyer"]

        deleted = await client.delete(f"/api/v1/patients/{patient['id']}", headers=provider_headers)
        assert deleted.status_code == 204

        missing = await client.get(f"/api/v1/patients/{patient['id']}", headers=provider_headers)
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_replace_missing_patient(self, client, provider_headers):
        response = await client.put(
            "/api/v1/patients/nope", json={"name": "Ghost"}, headers=provider_headers
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_create_requires_name(self, client, provider_headers):
        response = await client.post("/api/v1/patients", json={"name": ""}, headers=provider_headers)
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_blood_type_longer_than_column(self, client, provider_headers, patient_headers):
        created = await client.post(
            "/api/v1/patients",
            json={"name": "Meera", "blood_type": "O positive"},
            headers=provider_headers,
        )
        assert created.status_code == 422

        updated = await client.patch(
            "/api/v1/patients/me", json={"blood_type": "AB negative"}, headers=patient_headers
        )
        assert updated.status_code == 422

        accepted = await client.patch(
            "/api/v1/patients/me", json={"blood_type": "AB-"}, headers=patient_headers
        )
        assert accepted.status_code == 200
        assert accepted.json()["blood_type"] == "AB-"


class TestSessionEndpoints:
    """Tests for session and page routing endpoints."""

    @pytest.mark.asyncio
    async def test_anonymous_session(self, client):
        response = await client.get("/api/v1/session")

        assert response.status_code == 200
        assert response.json()["authenticated"] is False

    @pytest.mark.asyncio
    async def test_provider_session(self, client, provider_headers):
        response = await client.get("/api/v1/session", headers=provider_headers)

        data = response.json()
        assert data["authenticated"] is True
        assert data["user_id"] == "provider-1"
        assert data["role"] == "healthcare_provider"
        assert data["dashboard_path"] == "/dashboard/healthcare"

    @pytest.mark.asyncio
    async def test_route_anonymous_dashboard(self, client):
        response = await client.get("/api/v1/session/route", params={"path": "/dashboard"})

        assert response.json() == {"path": "/dashboard", "redirect": "/login?from=%2Fdashboard"}

    @pytest.mark.asyncio
    async def test_route_patient_on_provider_dashboard(self, client, patient_headers):
        response = await client.get(
            "/api/v1/session/route",
            params={"path": "/dashboard/healthcare"},
            headers=patient_headers,
        )

        assert response.json()["redirect"] == "/dashboard/patient"

    @pytest.mark.asyncio
    async def test_route_login_loop_guard(self, client, provider_headers):
        response = await client.get(
            "/api/v1/session/route",
            params={"path": "/login", "from": "/dashboard/healthcare"},
            headers=provider_headers,
        )

        assert response.json()["redirect"] == "/"
