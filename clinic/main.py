"""Main FastAPI application."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from clinic import __version__
from clinic.api.endpoints import router
from clinic.config import Settings
from clinic.errors import ClinicError, StoreUnavailableError
from clinic.services.records import RecordsService
from clinic.stores import build_store
from clinic.utils.logging import LogConfig, get_logger, setup_logging

logger = get_logger(__name__)


async def handle_clinic_error(request: Request, exc: ClinicError) -> JSONResponse:
    """Translate records service errors into JSON error bodies."""
    if isinstance(exc, StoreUnavailableError):
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as 400 with an error message."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    logger.warning(f"{request.method} {request.url.path} malformed request: {details}")
    return JSONResponse(status_code=400, content={"error": details or "Malformed request"})


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} unexpected error: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(settings: Settings | None = None, service: RecordsService | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Runtime settings; read from the environment when omitted
        service: Records service to serve; built from the settings when omitted

    Returns:
        Configured application with the records service on ``app.state``
    """
    if settings is None:
        settings = Settings.from_env()
    if service is None:
        service = RecordsService(build_store(settings))

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(f"Starting clinic records service with {service.store.name} store")
        if settings.seed_samples:
            await service.seed_sample_patients()
        yield
        await service.store.close()

    app = FastAPI(
        title="Clinic Records",
        description="Patient registration, visit history and search for a small clinic.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=[
            {
                "name": "Patients",
                "description": "Register, search, view and delete patients.",
            },
            {
                "name": "Visits",
                "description": "Record and remove visits of a patient.",
            },
            {
                "name": "Health",
                "description": "Service health monitoring and status checks.",
            },
        ],
    )
    app.state.settings = settings
    app.state.records_service = service

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.add_exception_handler(ClinicError, handle_clinic_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    # Include routers
    app.include_router(router)

    return app


settings = Settings.from_env()
setup_logging(LogConfig(level=settings.log_level))

app = create_app(settings)


def run() -> None:
    """Run the API server with uvicorn."""
    import uvicorn

    uvicorn.run("clinic.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
