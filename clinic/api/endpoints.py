"""API endpoints for the clinic records service."""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from clinic import __version__
from clinic.models.api import (
    ErrorResponse,
    HealthResponse,
    MessageResponse,
    PatientCreateRequest,
    PatientDetailsResponse,
    PatientResponse,
    VisitCreateRequest,
    VisitResponse,
)
from clinic.services.records import RecordsService
from clinic.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


def get_records_service(request: Request) -> RecordsService:
    """Return the records service attached to the running application."""
    return request.app.state.records_service


RecordsDep = Annotated[RecordsService, Depends(get_records_service)]


@router.post(
    "/patients", status_code=201, response_model=PatientResponse, responses=ERROR_RESPONSES, tags=["Patients"]
)
async def create_patient(request: PatientCreateRequest, service: RecordsDep) -> PatientResponse:
    """Register a new patient."""
    patient = await service.create_patient(request.name, request.phone, request.address)
    return PatientResponse.from_patient(patient)


@router.get("/patients", response_model=list[PatientResponse], responses=ERROR_RESPONSES, tags=["Patients"])
async def list_patients(service: RecordsDep, q: str | None = None) -> list[PatientResponse]:
    """List all patients, or those whose name or phone contains ``q``."""
    patients = await service.list_patients(q)
    logger.info(f"Listed {len(patients)} patients for search {q!r}")
    return [PatientResponse.from_patient(patient) for patient in patients]


@router.get("/patients/export", response_class=PlainTextResponse, responses=ERROR_RESPONSES, tags=["Patients"])
async def export_patients(service: RecordsDep) -> PlainTextResponse:
    """Download every patient's details as a text file."""
    report = await service.export_patients()
    filename = f"patient_details_{datetime.now(UTC).date().isoformat()}.txt"
    return PlainTextResponse(report, headers={"Content-Disposition": f'attachment; filename="{filename}"'})


@router.get(
    "/patients/{patient_id}", response_model=PatientDetailsResponse, responses=ERROR_RESPONSES, tags=["Patients"]
)
async def get_patient(patient_id: str, service: RecordsDep) -> PatientDetailsResponse:
    """Get a patient together with its visit history."""
    details = await service.get_patient_with_visits(patient_id)
    return PatientDetailsResponse.from_details(details)


@router.delete(
    "/patients/{patient_id}", response_model=MessageResponse, responses=ERROR_RESPONSES, tags=["Patients"]
)
async def delete_patient(patient_id: str, service: RecordsDep) -> MessageResponse:
    """Delete a patient and all of its visits."""
    deleted_visits = await service.delete_patient(patient_id)
    return MessageResponse(
        message="Patient and associated visits deleted successfully",
        deleted_visits=deleted_visits,
    )


@router.post(
    "/patients/{patient_id}/visits",
    status_code=201,
    response_model=VisitResponse,
    responses=ERROR_RESPONSES,
    tags=["Visits"],
)
async def add_visit(patient_id: str, request: VisitCreateRequest, service: RecordsDep) -> VisitResponse:
    """Record a visit for a patient."""
    visit = await service.add_visit(patient_id, request.disease, request.medication, request.date)
    return VisitResponse.from_visit(visit)


@router.delete(
    "/patients/{patient_id}/visits/{visit_id}",
    response_model=MessageResponse,
    responses=ERROR_RESPONSES,
    tags=["Visits"],
)
async def delete_visit(patient_id: str, visit_id: str, service: RecordsDep) -> MessageResponse:
    """Delete one visit of a patient."""
    await service.delete_visit(patient_id, visit_id)
    return MessageResponse(message="Visit deleted successfully")


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(service: RecordsDep) -> HealthResponse:
    """Health check endpoint."""
    store_ok = await service.check_health()
    return HealthResponse(
        status="healthy" if store_ok else "degraded",
        timestamp=datetime.now(UTC),
        version=__version__,
        store=service.store.name,
    )
