"""Workshop Pay API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, ORJSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from workshop_pay.attendees.router import router as attendees_router
from workshop_pay.config import get_settings
from workshop_pay.core.context import get_request_id
from workshop_pay.core.database import init_async_cassandra, shutdown_async_cassandra
from workshop_pay.core.exceptions import ServiceError
from workshop_pay.core.logging import configure_structlog, get_logger
from workshop_pay.core.middleware import RequestContextMiddleware
from workshop_pay.email import EmailService, NotificationDispatcher
from workshop_pay.gateway import RazorpayClient
from workshop_pay.health.router import router as health_router
from workshop_pay.orders.router import router as orders_router
from workshop_pay.orders.service import OrderService
from workshop_pay.registrants import RegistrantService
from workshop_pay.webhooks.router import router as webhooks_router
from workshop_pay.webhooks.service import WebhookService


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(
    settings, log_dir=None if settings.is_testing else Path(settings.log_dir)
)

logger = get_logger(__name__)

GENERIC_ERROR = "server error"


# Application state for dependency injection
class AppState:
    """Application state container."""

    cassandra_session: Any = None
    registrant_service: RegistrantService | None = None
    order_service: OrderService | None = None
    webhook_service: WebhookService | None = None
    email_service: EmailService | None = None
    dispatcher: NotificationDispatcher | None = None


app_state = AppState()


def get_registrant_service() -> RegistrantService:
    """Get RegistrantService instance from app state."""
    if app_state.registrant_service is None:
        msg = "Registrant store not initialized"
        raise RuntimeError(msg)
    return app_state.registrant_service


def get_order_service() -> OrderService:
    """Get OrderService instance from app state."""
    if app_state.order_service is None:
        msg = "Order service not initialized"
        raise RuntimeError(msg)
    return app_state.order_service


def get_webhook_service() -> WebhookService:
    """Get WebhookService instance from app state."""
    if app_state.webhook_service is None:
        msg = "Webhook service not initialized"
        raise RuntimeError(msg)
    return app_state.webhook_service


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    # Email is optional; without it the dispatcher silently drops notifications
    if settings.email_configured:
        try:
            app_state.email_service = EmailService(
                credentials_path=settings.email_credentials_path,
                sender_address=settings.email_sender_address,
                sender_name=settings.email_sender_name,
            )
            logger.info(
                "email_service_initialized",
                sender=settings.email_sender_address,
            )
        except Exception as e:
            logger.warning(
                "email_service_init_skipped",
                error=str(e),
                message="Running without email service",
            )
    else:
        logger.info("email_service_disabled")

    app_state.dispatcher = NotificationDispatcher(
        email_service=app_state.email_service,
        queue_size=settings.notification_queue_size,
    )
    await app_state.dispatcher.start()

    # Missing store is not fatal; handlers fail individually with 500
    try:
        app_state.cassandra_session = await init_async_cassandra(settings)
        app_state.registrant_service = RegistrantService(
            session=app_state.cassandra_session,
            keyspace=settings.cassandra_keyspace,
        )
        logger.info("cassandra_initialized")
    except Exception as e:
        logger.warning(
            "database_init_skipped",
            error=str(e),
            message="Running without database connection",
        )

    if app_state.registrant_service is not None:
        app_state.order_service = OrderService(
            gateway=RazorpayClient(settings),
            registrants=app_state.registrant_service,
            settings=settings,
        )
        app_state.webhook_service = WebhookService(
            registrants=app_state.registrant_service,
            dispatcher=app_state.dispatcher,
            settings=settings,
        )

    if not settings.razorpay_configured:
        logger.warning("razorpay_credentials_missing")
    if not settings.webhook_verification_enabled:
        logger.warning(
            "webhook_secret_missing",
            message="Webhook signatures will NOT be verified",
        )

    yield

    # Shutdown
    logger.info("shutting_down_application")
    await app_state.dispatcher.stop()
    await shutdown_async_cassandra()


def _error(status_code: int, message: str) -> ORJSONResponse:
    return ORJSONResponse(
        status_code=status_code,
        content={"ok": False, "error": message},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # Keep debug off so Starlette never renders stack traces in responses
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Workshop registration payments - API",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    # Request context middleware (must be added first - outermost)
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        max_age=settings.cors_max_age,
    )

    def _get_request_id_safe(request: Request) -> str | None:
        """Get request_id from request state or context."""
        if hasattr(request.state, "request_id"):
            return request.state.request_id
        return get_request_id()

    @app.exception_handler(ServiceError)
    async def service_exception_handler(
        request: Request, exc: ServiceError
    ) -> ORJSONResponse:
        """Render service-layer errors as {ok: false, error}."""
        log = (
            logger.error
            if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR
            else logger.warning
        )
        log(
            "service_error",
            error_type=type(exc).__name__,
            error_message=exc.message,
            original_error=str(exc.original_error) if exc.original_error else None,
            status_code=exc.status_code,
            path=request.url.path,
            method=request.method,
            request_id=_get_request_id_safe(request),
        )
        return _error(exc.status_code, exc.client_message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        """Handle HTTP exceptions with safe error messages."""
        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )

        if exc.status_code == status.HTTP_404_NOT_FOUND:
            message = "not found"
        elif exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            message = GENERIC_ERROR
        else:
            message = str(exc.detail)
        return _error(exc.status_code, message)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Malformed request bodies are client errors."""
        errors = exc.errors()
        logger.warning(
            "validation_error",
            errors=errors,
            path=request.url.path,
            method=request.method,
        )

        fields = sorted(
            {
                ".".join(str(loc) for loc in err.get("loc", []) if loc != "body")
                for err in errors
            }
            - {""}
        )
        message = f"Invalid fields: {','.join(fields)}" if fields else "Invalid body"
        return _error(status.HTTP_400_BAD_REQUEST, message)

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Catch-all handler for unhandled exceptions.

        Details are logged internally; the caller only sees a generic message.
        """
        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
            method=request.method,
            request_id=_get_request_id_safe(request),
        )
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_ERROR)

    # Include routers
    app.include_router(health_router)
    app.include_router(orders_router)
    app.include_router(webhooks_router)
    app.include_router(attendees_router)

    # Optional static checkout page
    static_dir = Path(settings.static_dir)
    index_file = static_dir / "index.html"
    assets_dir = static_dir / "assets"

    if assets_dir.is_dir():
        app.mount("/assets", StaticFiles(directory=assets_dir), name="assets")

    @app.get("/", include_in_schema=False, response_model=None)
    async def root() -> FileResponse | dict[str, str | bool]:
        """Serve the checkout page, or a banner when none is deployed."""
        if index_file.is_file():
            return FileResponse(index_file)
        return {
            "ok": True,
            "service": settings.app_name,
            "version": settings.app_version,
        }

    return app


# Configure router dependencies before creating app
from workshop_pay.orders.dependencies import set_order_service_getter  # noqa: E402
from workshop_pay.registrants.dependencies import (  # noqa: E402
    set_registrant_service_getter,
)
from workshop_pay.webhooks.dependencies import set_webhook_service_getter  # noqa: E402


set_registrant_service_getter(get_registrant_service)
set_order_service_getter(get_order_service)
set_webhook_service_getter(get_webhook_service)


app = create_app()
