"""MongoDB record store."""

import re
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, date, datetime, time
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, AsyncMongoClient
from pymongo.errors import DuplicateKeyError, PyMongoError

from clinic.errors import ConflictError, NotFoundError, StoreUnavailableError
from clinic.models.patient import Patient, Visit
from clinic.utils.logging import get_logger

logger = get_logger(__name__)


def _object_id(value: str) -> ObjectId | None:
    """Parse a hex id, returning None for anything MongoDB would reject."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    """Re-raise driver errors as record store errors."""
    try:
        yield
    except DuplicateKeyError as e:
        phone = (e.details or {}).get("keyValue", {}).get("phone")
        message = f"A patient with phone {phone} already exists" if phone else "Duplicate patient record"
        raise ConflictError(message) from e
    except PyMongoError as e:
        logger.error(f"MongoDB {operation} failed: {e}")
        raise StoreUnavailableError(f"Record store unavailable during {operation}") from e


class MongoRecordStore:
    """Record store backed by MongoDB.

    Patients and visits are separate collections; each visit holds the
    ObjectId of its patient. A unique index on ``patients.phone`` rejects
    duplicate phone numbers.
    """

    name = "mongo"

    def __init__(self, client: AsyncMongoClient, database: str = "clinic"):
        """Initialize with a MongoDB client.

        Args:
            client: Async MongoDB client; connections are opened lazily
            database: Name of the database holding the collections
        """
        self.client = client
        self.db = client[database]
        self.patients = self.db["patients"]
        self.visits = self.db["visits"]
        self._indexes_ready = False

    @classmethod
    def from_uri(cls, uri: str, database: str = "clinic", timeout_ms: int = 5000) -> "MongoRecordStore":
        """Create a store from a connection string."""
        client = AsyncMongoClient(uri, serverSelectionTimeoutMS=timeout_ms, tz_aware=True)
        return cls(client, database)

    async def ping(self) -> bool:
        try:
            await self.client.admin.command("ping")
        except PyMongoError as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False
        return True

    async def close(self) -> None:
        await self.client.close()

    async def insert_patient(self, name: str, phone: str, address: str | None) -> Patient:
        await self._ensure_indexes()
        document = {"name": name, "phone": phone, "address": address, "created_at": datetime.now(UTC)}
        with _translate_errors("insert patient"):
            result = await self.patients.insert_one(document)
        document["_id"] = result.inserted_id
        return _patient_from_document(document)

    async def find_patients(self, search: str | None = None) -> list[Patient]:
        query: dict[str, Any] = {}
        if search:
            pattern = {"$regex": re.escape(search), "$options": "i"}
            query = {"$or": [{"name": pattern}, {"phone": pattern}]}

        with _translate_errors("find patients"):
            cursor = self.patients.find(query).sort([("created_at", ASCENDING), ("_id", ASCENDING)])
            documents = await cursor.to_list()
        return [_patient_from_document(document) for document in documents]

    async def find_patient(self, patient_id: str) -> Patient | None:
        oid = _object_id(patient_id)
        if oid is None:
            return None
        with _translate_errors("find patient"):
            document = await self.patients.find_one({"_id": oid})
        return _patient_from_document(document) if document else None

    async def find_patient_by_phone(self, phone: str) -> Patient | None:
        with _translate_errors("find patient by phone"):
            document = await self.patients.find_one({"phone": phone})
        return _patient_from_document(document) if document else None

    async def delete_patient(self, patient_id: str) -> bool:
        oid = _object_id(patient_id)
        if oid is None:
            return False
        with _translate_errors("delete patient"):
            result = await self.patients.delete_one({"_id": oid})
        return result.deleted_count > 0

    async def insert_visit(
        self, patient_id: str, disease: str, medication: str | None, visit_date: date
    ) -> Visit:
        patient_oid = _object_id(patient_id)
        if patient_oid is None:
            raise NotFoundError("Patient not found")

        await self._ensure_indexes()
        document = {
            "patient_id": patient_oid,
            "disease": disease,
            "medication": medication,
            # BSON has no date-only type
            "date": datetime.combine(visit_date, time.min, tzinfo=UTC),
            "created_at": datetime.now(UTC),
        }
        with _translate_errors("insert visit"):
            result = await self.visits.insert_one(document)
        document["_id"] = result.inserted_id
        return _visit_from_document(document)

    async def find_visits(self, patient_id: str) -> list[Visit]:
        oid = _object_id(patient_id)
        if oid is None:
            return []
        with _translate_errors("find visits"):
            cursor = self.visits.find({"patient_id": oid}).sort([("created_at", ASCENDING), ("_id", ASCENDING)])
            documents = await cursor.to_list()
        return [_visit_from_document(document) for document in documents]

    async def delete_visits(self, patient_id: str) -> int:
        oid = _object_id(patient_id)
        if oid is None:
            return 0
        with _translate_errors("delete visits"):
            result = await self.visits.delete_many({"patient_id": oid})
        return result.deleted_count

    async def delete_visit(self, patient_id: str, visit_id: str) -> bool:
        patient_oid = _object_id(patient_id)
        visit_oid = _object_id(visit_id)
        if patient_oid is None or visit_oid is None:
            return False
        with _translate_errors("delete visit"):
            result = await self.visits.delete_one({"_id": visit_oid, "patient_id": patient_oid})
        return result.deleted_count > 0

    async def _ensure_indexes(self) -> None:
        """Create collection indexes once per store instance."""
        if self._indexes_ready:
            return
        with _translate_errors("create indexes"):
            await self.patients.create_index("phone", unique=True)
            await self.visits.create_index("patient_id")
        self._indexes_ready = True
        logger.info("MongoDB indexes ensured")


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def _patient_from_document(document: dict[str, Any]) -> Patient:
    return Patient(
        id=str(document["_id"]),
        name=document["name"],
        phone=document["phone"],
        address=document.get("address"),
        created_at=_as_utc(document.get("created_at") or document["_id"].generation_time),
    )


def _visit_from_document(document: dict[str, Any]) -> Visit:
    return Visit(
        id=str(document["_id"]),
        patient_id=str(document["patient_id"]),
        disease=document.get("disease") or "",
        medication=document.get("medication"),
        date=document["date"].date(),
        created_at=_as_utc(document.get("created_at") or document["_id"].generation_time),
    )
