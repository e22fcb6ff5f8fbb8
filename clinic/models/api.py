"""Request and response models for the HTTP API."""

from datetime import date, datetime

from pydantic import BaseModel

from clinic.models.patient import Patient, PatientDetails, Visit


class PatientCreateRequest(BaseModel):
    """Request model for creating a patient."""

    name: str = ""
    phone: str = ""
    address: str | None = None


class VisitCreateRequest(BaseModel):
    """Request model for adding a visit.

    The date is kept as text so that empty or malformed values are reported
    by the records service with the same error as every other field.
    """

    disease: str = ""
    medication: str | None = None
    date: str | None = None


class PatientResponse(BaseModel):
    """Response model for a single patient."""

    id: str
    name: str
    phone: str
    address: str | None = None
    created_at: datetime

    @classmethod
    def from_patient(cls, patient: Patient) -> "PatientResponse":
        return cls(
            id=patient.id,
            name=patient.name,
            phone=patient.phone,
            address=patient.address,
            created_at=patient.created_at,
        )


class VisitResponse(BaseModel):
    """Response model for a single visit."""

    id: str
    patient_id: str
    disease: str
    medication: str | None = None
    date: date
    created_at: datetime

    @classmethod
    def from_visit(cls, visit: Visit) -> "VisitResponse":
        return cls(
            id=visit.id,
            patient_id=visit.patient_id,
            disease=visit.disease,
            medication=visit.medication,
            date=visit.date,
            created_at=visit.created_at,
        )


class PatientDetailsResponse(BaseModel):
    """Response model for a patient with its visit history."""

    patient: PatientResponse
    visits: list[VisitResponse]

    @classmethod
    def from_details(cls, details: PatientDetails) -> "PatientDetailsResponse":
        return cls(
            patient=PatientResponse.from_patient(details.patient),
            visits=[VisitResponse.from_visit(visit) for visit in details.visits],
        )


class MessageResponse(BaseModel):
    """Response model for delete operations."""

    message: str
    deleted_visits: int | None = None


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""

    error: str


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    timestamp: datetime
    version: str
    store: str
