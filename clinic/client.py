"""HTTP client for the clinic records API."""

from datetime import date, datetime
from typing import Any

import httpx

from clinic.errors import (
    ClinicError,
    ConflictError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from clinic.models.patient import Patient, PatientDetails, Visit

ERRORS_BY_STATUS: dict[int, type[ClinicError]] = {
    400: ValidationError,
    404: NotFoundError,
    409: ConflictError,
    503: StoreUnavailableError,
}


def _patient_from_json(data: dict[str, Any]) -> Patient:
    return Patient(
        id=data["id"],
        name=data["name"],
        phone=data["phone"],
        address=data.get("address"),
        created_at=datetime.fromisoformat(data["created_at"]),
    )


def _visit_from_json(data: dict[str, Any]) -> Visit:
    return Visit(
        id=data["id"],
        patient_id=data["patient_id"],
        disease=data["disease"],
        medication=data.get("medication"),
        date=date.fromisoformat(data["date"]),
        created_at=datetime.fromisoformat(data["created_at"]),
    )


class ClinicClient:
    """Client for the clinic records HTTP API.

    Error responses are raised as the same exception kinds the records
    service raises, so callers handle local and remote failures alike.
    """

    def __init__(self, base_url: str = "http://localhost:5000", client: httpx.Client | None = None):
        """Initialize the client.

        Args:
            base_url: Root URL of the API
            client: Preconfigured httpx client; created when omitted
        """
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.Client(base_url=self.base_url, timeout=30.0)

    def close(self) -> None:
        self.client.close()

    def health(self) -> dict[str, Any]:
        return self._request("GET", "/health").json()

    def create_patient(self, name: str, phone: str, address: str | None = None) -> Patient:
        response = self._request("POST", "/patients", json={"name": name, "phone": phone, "address": address})
        return _patient_from_json(response.json())

    def list_patients(self, search: str | None = None) -> list[Patient]:
        params = {"q": search} if search else None
        response = self._request("GET", "/patients", params=params)
        return [_patient_from_json(item) for item in response.json()]

    def get_patient_with_visits(self, patient_id: str) -> PatientDetails:
        data = self._request("GET", f"/patients/{patient_id}").json()
        return PatientDetails(
            patient=_patient_from_json(data["patient"]),
            visits=[_visit_from_json(item) for item in data["visits"]],
        )

    def delete_patient(self, patient_id: str) -> int:
        data = self._request("DELETE", f"/patients/{patient_id}").json()
        return data.get("deleted_visits") or 0

    def add_visit(
        self, patient_id: str, disease: str, medication: str | None = None, visit_date: date | str | None = None
    ) -> Visit:
        payload = {
            "disease": disease,
            "medication": medication,
            "date": visit_date.isoformat() if isinstance(visit_date, date) else visit_date,
        }
        response = self._request("POST", f"/patients/{patient_id}/visits", json=payload)
        return _visit_from_json(response.json())

    def delete_visit(self, patient_id: str, visit_id: str) -> None:
        self._request("DELETE", f"/patients/{patient_id}/visits/{visit_id}")

    def export_patients(self) -> str:
        return self._request("GET", "/patients/export").text

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request and raise the matching ClinicError on failure."""
        try:
            response = self.client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            raise StoreUnavailableError(f"Cannot reach clinic API at {self.base_url}: {e}") from e

        if response.is_success:
            return response

        try:
            message = response.json().get("error") or response.text
        except ValueError:
            message = response.text
        error_class = ERRORS_BY_STATUS.get(response.status_code, ClinicError)
        raise error_class(message)
