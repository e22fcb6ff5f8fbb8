"""In-memory record store."""

from datetime import date

from cuid2 import cuid_wrapper

from clinic.errors import ConflictError, NotFoundError
from clinic.models.patient import Patient, Visit

cuid = cuid_wrapper()


class InMemoryRecordStore:
    """In-memory record store for development and testing.

    Patients and visits live in separate dictionaries keyed by id, mirroring
    the separate collections of the database store. Insertion order is
    creation order.
    """

    name = "memory"

    def __init__(self):
        """Initialize empty patient and visit collections."""
        self.patients: dict[str, Patient] = {}
        self.visits: dict[str, Visit] = {}

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        pass

    async def insert_patient(self, name: str, phone: str, address: str | None) -> Patient:
        if any(patient.phone == phone for patient in self.patients.values()):
            raise ConflictError(f"A patient with phone {phone} already exists")

        patient = Patient(id=cuid(), name=name, phone=phone, address=address)
        self.patients[patient.id] = patient
        return patient

    async def find_patients(self, search: str | None = None) -> list[Patient]:
        return [patient for patient in self.patients.values() if patient.matches(search)]

    async def find_patient(self, patient_id: str) -> Patient | None:
        return self.patients.get(patient_id)

    async def find_patient_by_phone(self, phone: str) -> Patient | None:
        for patient in self.patients.values():
            if patient.phone == phone:
                return patient
        return None

    async def delete_patient(self, patient_id: str) -> bool:
        return self.patients.pop(patient_id, None) is not None

    async def insert_visit(
        self, patient_id: str, disease: str, medication: str | None, visit_date: date
    ) -> Visit:
        if patient_id not in self.patients:
            raise NotFoundError("Patient not found")

        visit = Visit(id=cuid(), patient_id=patient_id, disease=disease, medication=medication, date=visit_date)
        self.visits[visit.id] = visit
        return visit

    async def find_visits(self, patient_id: str) -> list[Visit]:
        return [visit for visit in self.visits.values() if visit.patient_id == patient_id]

    async def delete_visits(self, patient_id: str) -> int:
        visit_ids = [visit.id for visit in self.visits.values() if visit.patient_id == patient_id]
        for visit_id in visit_ids:
            del self.visits[visit_id]
        return len(visit_ids)

    async def delete_visit(self, patient_id: str, visit_id: str) -> bool:
        visit = self.visits.get(visit_id)
        if visit and visit.patient_id == patient_id:
            del self.visits[visit_id]
            return True
        return False
