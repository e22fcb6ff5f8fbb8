"""Record store interface shared by every storage backing."""

from datetime import date
from typing import Protocol

from clinic.models.patient import Patient, Visit


class RecordStore(Protocol):
    """Interface for patient and visit persistence.

    This allows pluggable storage implementations:
    - In-memory dictionaries for development and tests
    - A local key-value blob holding patients with embedded visits
    - A MongoDB database with separate patient and visit collections

    Stores do not validate field contents; that is the records service's job.
    Lookups by an id the backing cannot parse return None rather than raising.
    """

    name: str

    async def ping(self) -> bool:
        """Return True if the backing storage is reachable."""
        ...

    async def close(self) -> None:
        """Release connections or handles held by the store."""
        ...

    async def insert_patient(self, name: str, phone: str, address: str | None) -> Patient:
        """Persist a new patient and return it with its generated id."""
        ...

    async def find_patients(self, search: str | None = None) -> list[Patient]:
        """Find patients whose name or phone contains the search term.

        Args:
            search: Case-insensitive substring; None or blank matches everyone

        Returns:
            Matching patients in creation order
        """
        ...

    async def find_patient(self, patient_id: str) -> Patient | None:
        """Get a patient by id."""
        ...

    async def find_patient_by_phone(self, phone: str) -> Patient | None:
        """Get the patient registered with an exact phone number."""
        ...

    async def delete_patient(self, patient_id: str) -> bool:
        """Delete a patient record.

        Returns:
            True if the patient was deleted, False if not found
        """
        ...

    async def insert_visit(
        self, patient_id: str, disease: str, medication: str | None, visit_date: date
    ) -> Visit:
        """Persist a new visit for a patient and return it with its generated id."""
        ...

    async def find_visits(self, patient_id: str) -> list[Visit]:
        """Get every visit of a patient in creation order."""
        ...

    async def delete_visits(self, patient_id: str) -> int:
        """Delete every visit of a patient.

        Returns:
            Number of visits deleted (zero for an unknown patient)
        """
        ...

    async def delete_visit(self, patient_id: str, visit_id: str) -> bool:
        """Delete one visit of a patient.

        Returns:
            True if the visit was deleted, False if not found
        """
        ...
