"""Local key-value record store.

Patients are kept as a single JSON array under one storage key, each patient
carrying its visits inline. Every mutation reads the whole blob, changes it
and writes it back, the way a browser page treats ``localStorage``.
"""

import json
import os
import tempfile
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any, Protocol

from cuid2 import cuid_wrapper

from clinic.errors import NotFoundError, StoreUnavailableError
from clinic.models.patient import Patient, Visit
from clinic.utils.logging import get_logger

logger = get_logger(__name__)

cuid = cuid_wrapper()

PATIENTS_KEY = "patients"

_EPOCH = datetime.fromtimestamp(0, UTC)


class KeyValueStorage(Protocol):
    """Storage handle with ``localStorage`` semantics."""

    def get_item(self, key: str) -> str | None:
        """Return the stored value for key, or None if unset."""
        ...

    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        ...


class MemoryStorage:
    """Key-value storage held in a dictionary."""

    def __init__(self, items: dict[str, str] | None = None):
        self.items: dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value


class JsonFileStorage:
    """Key-value storage persisted as one JSON object file.

    Writes go to a temporary file in the same directory which then replaces
    the original, so readers never see a half-written file.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def get_item(self, key: str) -> str | None:
        try:
            items = self._read()
        except (OSError, ValueError) as e:
            raise StoreUnavailableError(f"Cannot read local data file {self.path}: {e}") from e
        value = items.get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        try:
            items = self._read()
            items[key] = value
            self._write(items)
        except (OSError, ValueError) as e:
            raise StoreUnavailableError(f"Cannot write local data file {self.path}: {e}") from e

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        items = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        if not isinstance(items, dict):
            raise ValueError("expected a JSON object at the top level")
        return items

    def _write(self, items: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                json.dump(items, tmp, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class LocalRecordStore:
    """Record store over a key-value storage handle.

    Phone uniqueness is not enforced here; the records service checks it
    before inserting.
    """

    name = "local"

    def __init__(self, storage: KeyValueStorage, key: str = PATIENTS_KEY):
        """Initialize with the storage handle to read and rewrite.

        Args:
            storage: Key-value storage holding the serialized patient list
            key: Storage key of the patient list
        """
        self.storage = storage
        self.key = key

    async def ping(self) -> bool:
        try:
            self._load()
        except StoreUnavailableError as e:
            logger.warning(f"Local store unavailable: {e}")
            return False
        return True

    async def close(self) -> None:
        pass

    async def insert_patient(self, name: str, phone: str, address: str | None) -> Patient:
        records = self._load()
        patient = Patient(id=cuid(), name=name, phone=phone, address=address)
        records.append({**patient.as_dict(), "visits": []})
        self._save(records)
        return patient

    async def find_patients(self, search: str | None = None) -> list[Patient]:
        patients = [_patient_from_record(record) for record in self._load()]
        return [patient for patient in patients if patient.matches(search)]

    async def find_patient(self, patient_id: str) -> Patient | None:
        record = _find_record(self._load(), patient_id)
        return _patient_from_record(record) if record else None

    async def find_patient_by_phone(self, phone: str) -> Patient | None:
        for record in self._load():
            if record.get("phone") == phone:
                return _patient_from_record(record)
        return None

    async def delete_patient(self, patient_id: str) -> bool:
        records = self._load()
        remaining = [record for record in records if _record_id(record) != patient_id]
        if len(remaining) == len(records):
            return False
        self._save(remaining)
        return True

    async def insert_visit(
        self, patient_id: str, disease: str, medication: str | None, visit_date: date
    ) -> Visit:
        records = self._load()
        record = _find_record(records, patient_id)
        if record is None:
            raise NotFoundError("Patient not found")

        visit = Visit(id=cuid(), patient_id=patient_id, disease=disease, medication=medication, date=visit_date)
        record.setdefault("visits", []).append(visit.as_dict())
        self._save(records)
        return visit

    async def find_visits(self, patient_id: str) -> list[Visit]:
        record = _find_record(self._load(), patient_id)
        if record is None:
            return []
        return [_visit_from_record(patient_id, raw) for raw in record.get("visits", [])]

    async def delete_visits(self, patient_id: str) -> int:
        records = self._load()
        record = _find_record(records, patient_id)
        if record is None or not record.get("visits"):
            return 0
        deleted = len(record["visits"])
        record["visits"] = []
        self._save(records)
        return deleted

    async def delete_visit(self, patient_id: str, visit_id: str) -> bool:
        records = self._load()
        record = _find_record(records, patient_id)
        if record is None:
            return False
        visits = record.get("visits", [])
        remaining = [raw for raw in visits if _record_id(raw) != visit_id]
        if len(remaining) == len(visits):
            return False
        record["visits"] = remaining
        self._save(records)
        return True

    def _load(self) -> list[dict[str, Any]]:
        """Read and decode the whole patient list."""
        raw = self.storage.get_item(self.key)
        if not raw:
            return []
        try:
            records = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StoreUnavailableError(f"Stored patient list is not valid JSON: {e}") from e
        if not isinstance(records, list):
            raise StoreUnavailableError("Stored patient list is not a JSON array")
        return records

    def _save(self, records: list[dict[str, Any]]) -> None:
        """Encode and write back the whole patient list."""
        self.storage.set_item(self.key, json.dumps(records))


def _record_id(record: dict[str, Any]) -> str | None:
    # Lists exported from the browser page key records by "_id".
    return record.get("id", record.get("_id"))


def _find_record(records: list[dict[str, Any]], record_id: str) -> dict[str, Any] | None:
    for record in records:
        if _record_id(record) == record_id:
            return record
    return None


def _parse_timestamp(value: str | None) -> datetime:
    return datetime.fromisoformat(value) if value else _EPOCH


def _patient_from_record(record: dict[str, Any]) -> Patient:
    try:
        created_at = _parse_timestamp(record.get("created_at"))
    except (TypeError, ValueError) as e:
        raise StoreUnavailableError(f"Stored patient {_record_id(record)!r} is malformed: {e}") from e
    return Patient(
        id=_record_id(record),
        name=record.get("name", ""),
        phone=record.get("phone", ""),
        address=record.get("address") or None,
        created_at=created_at,
    )


def _visit_from_record(patient_id: str, record: dict[str, Any]) -> Visit:
    raw_date = record.get("date")
    if not isinstance(raw_date, str):
        raise StoreUnavailableError(f"Stored visit {_record_id(record)!r} has no date")
    try:
        # Browser dates may carry a time component
        visit_date = date.fromisoformat(raw_date[:10])
        created_at = _parse_timestamp(record.get("created_at"))
    except (TypeError, ValueError) as e:
        raise StoreUnavailableError(f"Stored visit {_record_id(record)!r} is malformed: {e}") from e
    return Visit(
        id=_record_id(record),
        patient_id=patient_id,
        disease=record.get("disease", ""),
        medication=record.get("medication"),
        date=visit_date,
        created_at=created_at,
    )
