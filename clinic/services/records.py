"""Patient and visit records service."""

from datetime import date, datetime

from clinic.errors import ConflictError, NotFoundError, StoreUnavailableError, ValidationError
from clinic.models.patient import Patient, PatientDetails, Visit
from clinic.stores.base import RecordStore
from clinic.utils.logging import get_logger

logger = get_logger(__name__)

SAMPLE_PATIENTS = [
    {"name": "John Doe", "phone": "1234567890", "address": "123 Main St"},
    {"name": "Jane Smith", "phone": "0987654321", "address": "456 Oak Ave"},
]

EXPORT_SEPARATOR = "-" * 40


def _require(value: str | None, field_name: str) -> str:
    """Return value unchanged if it holds non-whitespace text."""
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return value


def _parse_visit_date(value: date | str | None) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = _require(value, "date").strip()
    day, rest = text[:10], text[10:]
    # Browser date inputs may carry a time component
    if rest and rest[0] not in "T ":
        raise ValidationError(f"date must be in YYYY-MM-DD format, got {text!r}")
    try:
        return date.fromisoformat(day)
    except ValueError as e:
        raise ValidationError(f"date must be in YYYY-MM-DD format, got {text!r}") from e


class RecordsService:
    """Create, search and delete patients and their visits.

    The service holds all validation and cascade rules; the injected record
    store only persists. Store errors propagate to the caller unchanged.
    """

    def __init__(self, store: RecordStore):
        """Initialize with the record store to operate on."""
        self.store = store

    async def create_patient(self, name: str, phone: str, address: str | None = None) -> Patient:
        """Register a new patient.

        Args:
            name: Patient's full name
            phone: Patient's phone number, unique across patients
            address: Optional postal address

        Returns:
            The stored patient with its generated id

        Raises:
            ValidationError: If name or phone is empty
            ConflictError: If another patient already uses the phone number
        """
        name = _require(name, "name")
        phone = _require(phone, "phone")
        address = address if address and address.strip() else None

        if await self.store.find_patient_by_phone(phone):
            logger.info(f"Rejected duplicate phone {phone}")
            raise ConflictError(f"A patient with phone {phone} already exists")

        patient = await self.store.insert_patient(name, phone, address)
        logger.info(f"Created patient {patient.id}")
        return patient

    async def list_patients(self, search: str | None = None) -> list[Patient]:
        """List patients in creation order, optionally filtered by name or phone."""
        return await self.store.find_patients(search)

    async def get_patient(self, patient_id: str) -> Patient:
        patient = await self.store.find_patient(patient_id)
        if patient is None:
            raise NotFoundError("Patient not found")
        return patient

    async def get_patient_with_visits(self, patient_id: str) -> PatientDetails:
        """Get a patient and its full visit history.

        Raises:
            NotFoundError: If no patient has this id
        """
        patient = await self.get_patient(patient_id)
        visits = await self.store.find_visits(patient_id)
        return PatientDetails(patient=patient, visits=visits)

    async def delete_patient(self, patient_id: str) -> int:
        """Delete a patient and every visit belonging to it.

        Visits are removed first, then the patient. The two steps are not a
        transaction: if the second fails the visits are already gone and the
        patient remains, and the error is re-raised.

        Returns:
            Number of visits deleted along with the patient

        Raises:
            NotFoundError: If no patient has this id
        """
        deleted_visits = await self.store.delete_visits(patient_id)

        try:
            deleted = await self.store.delete_patient(patient_id)
        except StoreUnavailableError:
            if deleted_visits:
                logger.warning(
                    f"Deleted {deleted_visits} visits of patient {patient_id} but failed to delete the patient"
                )
            raise

        if not deleted:
            raise NotFoundError("Patient not found")

        logger.info(f"Deleted patient {patient_id} with {deleted_visits} visits")
        return deleted_visits

    async def add_visit(
        self,
        patient_id: str,
        disease: str,
        medication: str | None = None,
        visit_date: date | str | None = None,
    ) -> Visit:
        """Record a visit for an existing patient.

        Args:
            patient_id: Owning patient's id
            disease: Diagnosis for the visit
            medication: Optional prescription
            visit_date: Calendar date, as a date or YYYY-MM-DD text

        Raises:
            ValidationError: If disease or date is missing or malformed
            NotFoundError: If no patient has this id
        """
        disease = _require(disease, "disease")
        parsed_date = _parse_visit_date(visit_date)
        medication = medication if medication and medication.strip() else None

        await self.get_patient(patient_id)

        visit = await self.store.insert_visit(patient_id, disease, medication, parsed_date)
        logger.info(f"Added visit {visit.id} to patient {patient_id}")
        return visit

    async def delete_visit(self, patient_id: str, visit_id: str) -> None:
        """Delete one visit of a patient.

        Raises:
            NotFoundError: If the patient or the visit does not exist
        """
        await self.get_patient(patient_id)

        if not await self.store.delete_visit(patient_id, visit_id):
            raise NotFoundError("Visit not found")

        logger.info(f"Deleted visit {visit_id} of patient {patient_id}")

    async def export_patients(self) -> str:
        """Render every patient as a plain-text report."""
        patients = await self.store.find_patients()
        return "\n\n".join(
            "Patient Details:\n"
            f"Name: {patient.name}\n"
            f"Phone: {patient.phone}\n"
            f"Address: {patient.address or 'Not provided'}\n"
            f"ID: {patient.id}\n"
            f"{EXPORT_SEPARATOR}"
            for patient in patients
        )

    async def seed_sample_patients(self) -> list[Patient]:
        """Create the sample patients if the store holds no patients yet."""
        if await self.store.find_patients():
            return []

        created = [await self.create_patient(**sample) for sample in SAMPLE_PATIENTS]
        logger.info(f"Seeded {len(created)} sample patients")
        return created

    async def check_health(self) -> bool:
        return await self.store.ping()
