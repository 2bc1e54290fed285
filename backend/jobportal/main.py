import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from jobportal.api.api import api_router
from jobportal.core.config import settings, split_csv
from jobportal.core.identity import IdentityProvider, build_identity_provider
from jobportal.core.telemetry import configure_logging, init_sentry
from jobportal.seed import seed_demo_data
from jobportal.services.file_intake import FileIntake, build_remote_storage
from jobportal.storage import Storage, select_storage

logger = logging.getLogger("jobportal")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Check configuration and pick the storage on startup."""
    configure_logging(settings.DEBUG)
    if not settings.JWT_SECRET:
        raise RuntimeError("JWT_SECRET must be set")

    init_sentry(settings)

    if app.state.storage is None:
        app.state.storage = select_storage(settings.DATABASE_URL)
    logger.info("🚀 %s started with %s storage", settings.APP_NAME, app.state.storage.label)

    if settings.SEED_DEMO_DATA:
        seed_demo_data(app.state.storage)

    yield


def error_body(message: str, **extra) -> dict:
    return {"success": False, "message": message, **extra}


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail
    if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
        message = f"Route {request.url.path} not found"

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message, **getattr(exc, "extra", {})),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(message),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("❌ Unhandled error on %s %s", request.method, request.url.path)
    extra = {"error": str(exc)} if settings.DEBUG else {}
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal Server Error", **extra),
    )


def create_app(
    storage: Optional[Storage] = None,
    identity_provider: Optional[IdentityProvider] = None,
    file_intake: Optional[FileIntake] = None,
) -> FastAPI:
    """
    Build the API application.

    Without an injected storage the lifespan selects one from DATABASE_URL;
    the identity provider and file intake default to the configured ones.
    """
    app = FastAPI(
        title=settings.APP_NAME,
        description="Job board API for applicants and recruiters",
        version="1.0.0",
        lifespan=lifespan,
    )

    if identity_provider is None:
        identity_provider = build_identity_provider(settings)
    if file_intake is None:
        file_intake = FileIntake(Path(settings.UPLOAD_DIR), build_remote_storage(settings))

    app.state.storage = storage
    app.state.identity_provider = identity_provider
    app.state.file_intake = file_intake

    # CORS Middleware - allowlist from env (comma-separated)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=split_csv(settings.BACKEND_CORS_ORIGINS),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint."""
        return {"success": True, "message": f"Welcome to {settings.APP_NAME} API"}

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """Health check endpoint, reporting which storage is in use."""
        current = request.app.state.storage
        return {
            "success": True,
            "status": "healthy",
            "storage": current.label if current is not None else None,
        }

    app.include_router(api_router, prefix="/api")
    app.mount("/uploads", StaticFiles(directory=file_intake.upload_dir), name="uploads")

    return app


app = create_app()
