import logging
from collections.abc import AsyncGenerator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from pythonjsonlogger.json import JsonFormatter
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware

from app.core.database_manager import DatabaseManager, db_manager
from app.core.errors import STATUS_CODES, AppError, ErrorKind, status_code_for
from app.core.settings import get_settings
from app.middleware.monitoring import MonitoringMiddleware, get_prometheus_metrics
from app.repositories.event import SqlAlchemyEventRepository
from app.repositories.ticket import SqlAlchemyTicketRepository
from app.services.event_service import EventService
from app.services.ticket_service import TicketService

from .api.api import api_router

settings = get_settings()

# Configure structured logging
log_handler = logging.StreamHandler()
formatter = JsonFormatter(
    "%(levelname)s %(asctime)s %(message)s %(name)s %(filename)s %(lineno)d",
    rename_fields={"levelname": "level", "asctime": "time", "name": "loggerName"},
)
log_handler.setFormatter(formatter)
logging.basicConfig(handlers=[log_handler], level=settings.monitoring.LOG_LEVEL)
logger = logging.getLogger(__name__)

HEALTH_MESSAGE = "I'm okay!"


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        message = error.get("msg", "Invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


async def app_error_handler(request: Request, exc: AppError) -> PlainTextResponse:
    status_code = status_code_for(exc)
    logger.error(
        "Request failed: %s",
        exc.message,
        extra={
            "error_kind": getattr(exc, "kind", None),
            "status_code": status_code,
            "path": request.url.path,
        },
    )
    return PlainTextResponse(exc.message, status_code=status_code)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> PlainTextResponse:
    message = _validation_message(exc)
    logger.error(
        "Request validation failed: %s",
        message,
        extra={
            "status_code": STATUS_CODES[ErrorKind.UNPROCESSABLE_ENTITY],
            "path": request.url.path,
        },
    )
    return PlainTextResponse(
        message, status_code=STATUS_CODES[ErrorKind.UNPROCESSABLE_ENTITY]
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> PlainTextResponse:
    logger.error(
        "HTTPException occurred: %s",
        exc.detail,
        extra={"status_code": exc.status_code, "path": request.url.path},
    )
    return PlainTextResponse(
        str(exc.detail), status_code=exc.status_code, headers=exc.headers
    )


async def general_exception_handler(
    request: Request, exc: Exception
) -> PlainTextResponse:
    logger.exception("Unhandled exception occurred: %s", exc)
    return PlainTextResponse(
        str(exc), status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def build_lifespan(
    db: DatabaseManager,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info(
            "Starting %s (%s)...", settings.PROJECT_NAME, settings.ENVIRONMENT
        )

        db_health = await db.health_check()
        if db_health.get("status") == "healthy":
            logger.info("Database connection verified")
        else:
            logger.warning("Database health check failed: %s", db_health)

        if settings.database.DB_AUTO_CREATE:
            await db.create_all()

        try:
            yield
        finally:
            logger.info("Shutting down %s...", settings.PROJECT_NAME)
            await db.close()

    return lifespan


def create_app(db: Optional[DatabaseManager] = None) -> FastAPI:
    """Build the application around one database manager.

    Repositories and services are created here once and shared by all requests.
    """
    db = db or db_manager

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Events and the tickets sold for them.",
        version=settings.VERSION,
        lifespan=build_lifespan(db),
    )

    events = SqlAlchemyEventRepository(db)
    tickets = SqlAlchemyTicketRepository(db)
    app.state.event_service = EventService(events)
    app.state.ticket_service = TicketService(tickets, events)

    app.add_middleware(MonitoringMiddleware)

    if settings.BACKEND_CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(
        RequestValidationError, validation_exception_handler  # type: ignore[arg-type]
    )
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(api_router)

    @app.get(
        "/health",
        tags=["Health"],
        summary="Health Check",
        response_class=PlainTextResponse,
    )  # type: ignore[misc]
    async def health_check() -> str:
        return HEALTH_MESSAGE

    @app.get(
        settings.monitoring.PROMETHEUS_PATH,
        tags=["Monitoring"],
        summary="Prometheus Metrics",
    )  # type: ignore[misc]
    async def prometheus_metrics() -> PlainTextResponse:
        """
        Prometheus metrics endpoint for monitoring and alerting.
        """
        if not settings.monitoring.ENABLE_PROMETHEUS:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Metrics endpoint is disabled",
            )

        metrics_data = await get_prometheus_metrics()
        return PlainTextResponse(
            content=metrics_data, media_type="text/plain; version=0.0.4; charset=utf-8"
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app", host=settings.SERVER_HOST, port=settings.SERVER_PORT
    )
