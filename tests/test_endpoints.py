"""Tests for API endpoints."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from clinic import __version__
from clinic.config import Settings
from clinic.errors import StoreUnavailableError
from clinic.main import create_app
from clinic.services.records import RecordsService
from clinic.stores import InMemoryRecordStore


def _create_patient(client, name="John Doe", phone="1234567890", address="123 Main St"):
    response = client.post("/patients", json={"name": name, "phone": phone, "address": address})
    assert response.status_code == 201
    return response.json()


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_check_returns_200(self, api_client):
        """Test that health check returns 200 status."""
        response = api_client.get("/health")
        assert response.status_code == 200

    def test_health_check_response_structure(self, api_client):
        """Test that health check returns expected JSON structure."""
        data = api_client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["version"] == __version__
        assert data["store"] == "memory"
        assert "timestamp" in data

    def test_health_check_degraded_store(self):
        """Test that an unreachable store reports degraded status."""
        store = InMemoryRecordStore()
        store.ping = AsyncMock(return_value=False)
        client = TestClient(create_app(Settings(store="memory"), RecordsService(store)))

        assert client.get("/health").json()["status"] == "degraded"


class TestCreatePatientEndpoint:
    """Tests for POST /patients."""

    def test_create_patient_returns_201(self, api_client):
        """Test that a valid patient is created."""
        data = _create_patient(api_client)

        assert data["id"]
        assert data["name"] == "John Doe"
        assert data["phone"] == "1234567890"
        assert data["address"] == "123 Main St"
        assert "created_at" in data

    @pytest.mark.parametrize(
        "body",
        [
            {"name": "", "phone": "1234567890"},
            {"name": "John Doe", "phone": ""},
            {"phone": "1234567890"},
            {},
        ],
    )
    def test_create_patient_missing_fields_returns_400(self, api_client, body):
        """Test that missing required fields return 400 with an error message."""
        response = api_client.post("/patients", json=body)

        assert response.status_code == 400
        assert "is required" in response.json()["error"]

    def test_create_patient_malformed_body_returns_400(self, api_client):
        """Test that non-JSON-object bodies are reported as 400."""
        response = api_client.post("/patients", json=["John Doe"])

        assert response.status_code == 400
        assert "error" in response.json()

    def test_create_patient_duplicate_phone_returns_409(self, api_client):
        """Test that duplicate phone numbers are rejected."""
        _create_patient(api_client)
        response = api_client.post("/patients", json={"name": "Johnny", "phone": "1234567890"})

        assert response.status_code == 409
        assert "already exists" in response.json()["error"]


class TestListPatientsEndpoint:
    """Tests for GET /patients."""

    def test_list_patients(self, api_client):
        """Test that every patient is listed in creation order."""
        _create_patient(api_client, "John Doe", "1234567890")
        _create_patient(api_client, "Jane Smith", "0987654321")

        response = api_client.get("/patients")

        assert response.status_code == 200
        assert [patient["name"] for patient in response.json()] == ["John Doe", "Jane Smith"]

    def test_search_patients(self, api_client):
        """Test that the q parameter filters by name or phone."""
        _create_patient(api_client, "John Doe", "1234567890")
        _create_patient(api_client, "Jane Smith", "0987654321")

        assert [p["name"] for p in api_client.get("/patients", params={"q": "smith"}).json()] == ["Jane Smith"]
        assert [p["name"] for p in api_client.get("/patients", params={"q": "12345"}).json()] == ["John Doe"]
        assert len(api_client.get("/patients", params={"q": ""}).json()) == 2

    def test_list_patients_store_unavailable_returns_503(self):
        """Test that store failures keep their kind in the response."""
        store = InMemoryRecordStore()
        store.find_patients = AsyncMock(side_effect=StoreUnavailableError("Record store unavailable"))
        client = TestClient(create_app(Settings(store="memory"), RecordsService(store)))

        response = client.get("/patients")

        assert response.status_code == 503
        assert response.json() == {"error": "Record store unavailable"}


class TestPatientDetailsEndpoint:
    """Tests for GET /patients/{id} and visits."""

    def test_get_patient_with_visits(self, api_client):
        """Test that details include the patient and its visits."""
        patient = _create_patient(api_client)
        visit = api_client.post(
            f"/patients/{patient['id']}/visits",
            json={"disease": "Flu", "medication": "Tamiflu", "date": "2024-01-10"},
        )
        assert visit.status_code == 201

        response = api_client.get(f"/patients/{patient['id']}")

        assert response.status_code == 200
        data = response.json()
        assert data["patient"]["id"] == patient["id"]
        assert len(data["visits"]) == 1
        assert data["visits"][0]["id"] == visit.json()["id"]
        assert data["visits"][0]["patient_id"] == patient["id"]
        assert data["visits"][0]["disease"] == "Flu"
        assert data["visits"][0]["medication"] == "Tamiflu"
        assert data["visits"][0]["date"] == "2024-01-10"

    def test_get_unknown_patient_returns_404(self, api_client):
        """Test that unknown ids return 404."""
        response = api_client.get("/patients/missing")

        assert response.status_code == 404
        assert response.json() == {"error": "Patient not found"}

    @pytest.mark.parametrize(
        ("body", "message"),
        [
            ({"medication": "Tamiflu", "date": "2024-01-10"}, "disease is required"),
            ({"disease": "Flu", "medication": "Tamiflu"}, "date is required"),
            ({"disease": "Flu", "date": "yesterday"}, "YYYY-MM-DD"),
        ],
    )
    def test_add_visit_validation_returns_400(self, api_client, body, message):
        """Test that invalid visits return 400."""
        patient = _create_patient(api_client)
        response = api_client.post(f"/patients/{patient['id']}/visits", json=body)

        assert response.status_code == 400
        assert message in response.json()["error"]

    def test_add_visit_unknown_patient_returns_404(self, api_client):
        """Test that visits for unknown patients return 404."""
        response = api_client.post("/patients/missing/visits", json={"disease": "Flu", "date": "2024-01-10"})
        assert response.status_code == 404

    def test_delete_visit(self, api_client):
        """Test that a single visit can be deleted."""
        patient = _create_patient(api_client)
        visit = api_client.post(
            f"/patients/{patient['id']}/visits", json={"disease": "Flu", "date": "2024-01-10"}
        ).json()

        response = api_client.delete(f"/patients/{patient['id']}/visits/{visit['id']}")
        assert response.status_code == 200
        assert api_client.get(f"/patients/{patient['id']}").json()["visits"] == []

        again = api_client.delete(f"/patients/{patient['id']}/visits/{visit['id']}")
        assert again.status_code == 404
        assert again.json() == {"error": "Visit not found"}


class TestDeletePatientEndpoint:
    """Tests for DELETE /patients/{id}."""

    def test_delete_patient_scenario(self, api_client):
        """Test create, add visit, delete and lookup of a patient."""
        patient = _create_patient(api_client)
        api_client.post(
            f"/patients/{patient['id']}/visits",
            json={"disease": "Flu", "medication": "Tamiflu", "date": "2024-01-10"},
        )

        response = api_client.delete(f"/patients/{patient['id']}")

        assert response.status_code == 200
        assert response.json() == {
            "message": "Patient and associated visits deleted successfully",
            "deleted_visits": 1,
        }
        assert api_client.get(f"/patients/{patient['id']}").status_code == 404
        assert api_client.get("/patients").json() == []

    def test_delete_unknown_patient_returns_404(self, api_client):
        """Test that deleting an unknown patient returns 404."""
        response = api_client.delete("/patients/missing")

        assert response.status_code == 404
        assert response.json() == {"error": "Patient not found"}


class TestExportEndpoint:
    """Tests for GET /patients/export."""

    def test_export_patients(self, api_client):
        """Test that the export is a text attachment with every patient."""
        _create_patient(api_client, "John Doe", "1234567890", None)

        response = api_client.get("/patients/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert 'filename="patient_details_' in response.headers["content-disposition"]
        assert "Name: John Doe" in response.text
        assert "Address: Not provided" in response.text


class TestLifespan:
    """Tests for application startup."""

    def test_seed_samples_on_startup(self):
        """Test that sample patients are seeded when enabled."""
        app = create_app(Settings(store="memory", seed_samples=True), RecordsService(InMemoryRecordStore()))

        with TestClient(app) as client:
            names = [patient["name"] for patient in client.get("/patients").json()]

        assert names == ["John Doe", "Jane Smith"]

    def test_no_seed_by_default(self, api_client):
        """Test that the store starts empty without seeding."""
        with api_client:
            assert api_client.get("/patients").json() == []


class TestAPIDocumentation:
    """Tests for API documentation endpoints."""

    def test_openapi_json_available(self, api_client):
        """Test that OpenAPI JSON specification is available."""
        response = api_client.get("/openapi.json")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        assert "/patients/{patient_id}/visits" in response.json()["paths"]

    def test_swagger_ui_available(self, api_client):
        """Test that Swagger UI is available."""
        response = api_client.get("/docs")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
