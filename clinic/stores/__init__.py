"""Record store backings for patients and visits."""

from clinic.config import Settings
from clinic.errors import ConfigurationError
from clinic.stores.base import RecordStore
from clinic.stores.local import JsonFileStorage, LocalRecordStore, MemoryStorage
from clinic.stores.memory import InMemoryRecordStore
from clinic.stores.mongo import MongoRecordStore


def build_store(settings: Settings) -> RecordStore:
    """Create the record store selected by the settings.

    Raises:
        ConfigurationError: If the MongoDB backing is selected without a connection string
    """
    if settings.store == "mongo":
        if not settings.mongo_uri:
            raise ConfigurationError("MONGO_URI is required when CLINIC_STORE is 'mongo'")
        return MongoRecordStore.from_uri(settings.mongo_uri, settings.mongo_db, settings.mongo_timeout_ms)

    if settings.store == "local":
        return LocalRecordStore(JsonFileStorage(settings.data_file))

    if settings.store == "memory":
        return InMemoryRecordStore()

    raise ConfigurationError(f"Unknown record store backing: {settings.store}")


__all__ = [
    "InMemoryRecordStore",
    "JsonFileStorage",
    "LocalRecordStore",
    "MemoryStorage",
    "MongoRecordStore",
    "RecordStore",
    "build_store",
]
