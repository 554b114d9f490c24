"""
FastAPI main application.

REST API for the Udyam registration flow.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import time
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from modules.registration.core.exceptions import RegistrationError
from modules.registration.core.strategies import IdIssuer, OtpVerifier
from modules.registration.orchestrator import StepOrchestrator
from modules.registration.schema import FormSchema, load_form_schema
from modules.registration.validation import compile_step_validators
from shared.utils.config import Settings, get_settings
from shared.utils.logger import setup_logger
from src.api.config import APISettings, get_api_settings
from src.api.v1.dependencies.rate_limit import RateLimiter
from src.api.v1.router import api_router
from src.database.connection import close_connections, create_tables, get_session_maker

logger = setup_logger(__name__)


def _request_errors(exc: RequestValidationError):
    details = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        details.append({
            "field": ".".join(location) or "body",
            "message": error.get("msg", "Invalid value"),
        })
    return details


def create_application(
    settings: Optional[Settings] = None,
    api_settings: Optional[APISettings] = None,
    session_maker: Optional[async_sessionmaker[AsyncSession]] = None,
    form_schema: Optional[FormSchema] = None,
    otp_verifier: Optional[OtpVerifier] = None,
    id_issuer: Optional[IdIssuer] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    The form schema is loaded and compiled here, before the app exists:
    a malformed schema raises SchemaCompilationError and no app is served.

    Args:
        settings: Application settings (defaults to environment)
        api_settings: API settings (defaults to environment)
        session_maker: Registration store sessions (defaults to the global engine)
        form_schema: Pre-loaded form schema (defaults to FORM_SCHEMA_PATH)
        otp_verifier: Verification code strategy
        id_issuer: Udyam number strategy

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    api_settings = api_settings or get_api_settings()

    form_schema = form_schema or load_form_schema(settings.form_schema_path)
    validators = compile_step_validators(form_schema)

    app = FastAPI(
        title=api_settings.API_TITLE,
        description=api_settings.API_DESCRIPTION,
        version=api_settings.API_VERSION,
        docs_url="/docs" if api_settings.ENABLE_DOCS else None,
        redoc_url="/redoc" if api_settings.ENABLE_DOCS else None,
        openapi_url="/openapi.json" if api_settings.ENABLE_DOCS else None,
    )

    app.state.settings = settings
    app.state.api_settings = api_settings
    app.state.form_schema = form_schema
    app.state.orchestrator = StepOrchestrator(
        session_maker=session_maker or get_session_maker(),
        validators=validators,
        otp_verifier=otp_verifier,
        id_issuer=id_issuer,
        demo_mode=settings.DEMO_MODE,
    )
    app.state.rate_limiter = RateLimiter(
        max_requests=api_settings.RATE_LIMIT_REQUESTS,
        window_seconds=api_settings.RATE_LIMIT_WINDOW,
        enabled=api_settings.ENABLE_RATE_LIMIT,
        trust_proxy_headers=api_settings.TRUST_PROXY_HEADERS,
    )

    # Configure CORS
    if api_settings.ENABLE_CORS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=api_settings.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=api_settings.CORS_METHODS,
            allow_headers=api_settings.CORS_HEADERS,
        )

    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Request logging and timing
    @app.middleware("http")
    async def log_requests(request: Request, call_next: Callable):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"({process_time * 1000:.1f} ms)"
        )
        return response

    app.include_router(api_router, prefix=api_settings.API_PREFIX)

    @app.get("/health", tags=["health"])
    async def health_check():
        """
        Health check endpoint.

        Returns:
            Health status of the API
        """
        return {
            "status": "OK",
            "version": api_settings.API_VERSION,
            "environment": api_settings.ENVIRONMENT,
        }

    @app.get("/", tags=["root"])
    async def root():
        """
        Root endpoint with API information.
        """
        return {
            "name": api_settings.API_TITLE,
            "version": api_settings.API_VERSION,
            "docs": "/docs" if api_settings.ENABLE_DOCS else "disabled",
            "health": "/health",
            "api": api_settings.API_PREFIX,
        }

    @app.exception_handler(RegistrationError)
    async def registration_error_handler(_request: Request, exc: RegistrationError):
        """Render registration failures as structured JSON."""
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(_request: Request, exc: RequestValidationError):
        """Malformed bodies are reported like validator rejections."""
        return JSONResponse(
            status_code=400,
            content={"error": "Validation failed", "details": _request_errors(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException):
        error = "Route not found" if exc.status_code == 404 and exc.detail == "Not Found" else exc.detail
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": error},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(_request: Request, exc: Exception):
        """
        Global exception handler for unhandled errors.

        The traceback is logged; the client gets no internal detail.
        """
        logger.error(f"Unhandled exception: {exc}", exc_info=True)

        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
        )

    @app.on_event("startup")
    async def startup_event():
        """Initialize services on startup."""
        logger.info(f"Starting {api_settings.API_TITLE} v{api_settings.API_VERSION}")
        logger.info(f"Environment: {api_settings.ENVIRONMENT}")
        if settings.DEMO_MODE:
            logger.warning("DEMO_MODE is on: verification codes are returned in API responses")
        if api_settings.AUTO_CREATE_TABLES:
            await create_tables()

    @app.on_event("shutdown")
    async def shutdown_event():
        """Cleanup on shutdown."""
        logger.info(f"Shutting down {api_settings.API_TITLE}")
        await close_connections()

    return app


def get_application() -> FastAPI:
    """Application factory for uvicorn (``--factory``)."""
    return create_application()


if __name__ == "__main__":
    import uvicorn

    api_settings = get_api_settings()
    uvicorn.run(
        "src.api.main:get_application",
        factory=True,
        host=api_settings.API_HOST,
        port=api_settings.API_PORT,
        reload=api_settings.DEBUG,
        log_level=api_settings.LOG_LEVEL.lower(),
    )
