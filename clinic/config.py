"""Application settings loaded from the environment."""

import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from clinic.errors import ConfigurationError

StoreBackend = Literal["mongo", "local", "memory"]

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Runtime settings for the clinic records service."""

    store: StoreBackend = "local"
    mongo_uri: str | None = None
    mongo_db: str = "clinic"
    mongo_timeout_ms: int = 5000
    data_file: str = "clinic_data.json"
    seed_samples: bool = False
    host: str = "0.0.0.0"
    port: int = 5000
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables and an optional .env file.

        The store backend defaults to MongoDB when MONGO_URI is set and to the
        local data file otherwise.
        """
        load_dotenv()

        mongo_uri = os.getenv("MONGO_URI") or None
        default_store = "mongo" if mongo_uri else "local"
        origins = os.getenv("CORS_ORIGINS", "http://localhost:3000")

        try:
            return cls(
                store=os.getenv("CLINIC_STORE", default_store).lower(),
                mongo_uri=mongo_uri,
                mongo_db=os.getenv("MONGO_DB", "clinic"),
                mongo_timeout_ms=os.getenv("MONGO_TIMEOUT_MS", "5000"),
                data_file=os.getenv("CLINIC_DATA_FILE", "clinic_data.json"),
                seed_samples=os.getenv("CLINIC_SEED_SAMPLES", "false").lower() in _TRUTHY,
                host=os.getenv("HOST", "0.0.0.0"),
                port=os.getenv("PORT", "5000"),
                cors_origins=[origin.strip() for origin in origins.split(",") if origin.strip()],
                log_level=os.getenv("LOG_LEVEL", "INFO"),
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid settings: {e}") from e
