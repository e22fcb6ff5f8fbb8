"""Patient and visit data models."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Any


@dataclass
class Visit:
    """A single clinic visit belonging to one patient."""

    id: str
    patient_id: str
    disease: str
    date: date
    medication: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def as_dict(self) -> dict[str, Any]:
        """Return the visit as a JSON-compatible dictionary."""
        return {
            "id": self.id,
            "patient_id": self.patient_id,
            "disease": self.disease,
            "medication": self.medication,
            "date": self.date.isoformat(),
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class Patient:
    """Patient business model."""

    id: str
    name: str
    phone: str
    address: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def as_dict(self) -> dict[str, Any]:
        """Return the patient as a JSON-compatible dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "address": self.address,
            "created_at": self.created_at.isoformat(),
        }

    def matches(self, search: str | None) -> bool:
        """Check whether name or phone contains the search term, ignoring case."""
        if not search:
            return True
        term = search.casefold()
        return term in self.name.casefold() or term in self.phone.casefold()


@dataclass
class PatientDetails:
    """A patient together with its full visit history."""

    patient: Patient
    visits: list[Visit] = field(default_factory=list)
