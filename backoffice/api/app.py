"""FastAPI application factory.

Creates and configures the FastAPI application with middleware,
exception handlers, and route registration.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from backoffice import __version__
from backoffice.api.exceptions import BackofficeAPIError
from backoffice.api.middleware.context import RequestContextMiddleware
from backoffice.api.models.errors import ErrorBody, ErrorCode, ErrorDetail, ErrorResponse
from backoffice.api.routes import register_routes
from backoffice.config import get_settings
from backoffice.config.settings import Settings
from backoffice.context import AppContext, create_context
from backoffice.db.errors import ConflictError, NotFoundError, StoreError
from backoffice.db.errors import ValidationError as StoreValidationError
from backoffice.history.errors import NoDataToRestoreError, VersionNotFoundError
from backoffice.observability.logging import get_logger, setup_logging_from_config

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    context: AppContext | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    When ``context`` is given it is used as is and left open on shutdown;
    otherwise one is built from ``settings`` at startup and closed on exit.
    """
    settings = settings or (context.settings if context else get_settings())
    setup_logging_from_config(settings.observability.logging)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if context is not None:
            app.state.context = context
            yield
            return

        app.state.context = await create_context(settings)
        try:
            yield
        finally:
            await app.state.context.close()

    app = FastAPI(
        title="Backoffice API",
        description="Site settings, data change history and audit trail for the admin console",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    if context is not None:
        app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=settings.api.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Cache", "X-Settings-Last-Updated", "X-Request-ID"],
    )
    app.add_middleware(RequestContextMiddleware)

    _register_exception_handlers(app)
    register_routes(app)

    if settings.observability.tracing.enabled:
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

        FastAPIInstrumentor.instrument_app(app)
        logger.info("opentelemetry_instrumentation_enabled")

    logger.info(
        "app_created",
        debug=settings.debug,
        backend=settings.storage.backend,
        cors_origins=settings.api.cors_origins,
    )
    return app


def _error_response(status_code: int, body: ErrorBody) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=body).model_dump(mode="json", exclude_none=True),
    )


def _store_error_status(exc: StoreError) -> tuple[int, ErrorCode]:
    if isinstance(exc, VersionNotFoundError):
        return 404, ErrorCode.VERSION_NOT_FOUND
    if isinstance(exc, NotFoundError):
        return 404, ErrorCode.NOT_FOUND
    if isinstance(exc, NoDataToRestoreError):
        return 400, ErrorCode.NO_DATA_TO_RESTORE
    if isinstance(exc, StoreValidationError):
        return 400, ErrorCode.INVALID_REQUEST
    if isinstance(exc, ConflictError):
        return 409, ErrorCode.CONFLICT
    return 500, ErrorCode.INTERNAL_ERROR


def _register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(BackofficeAPIError)
    async def api_error_handler(request: Request, exc: BackofficeAPIError) -> JSONResponse:
        logger.warning(
            "api_error",
            error_code=exc.error_code.value,
            message=exc.message,
            path=request.url.path,
        )
        return _error_response(exc.status_code, ErrorBody(code=exc.error_code, message=exc.message))

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        status_code, code = _store_error_status(exc)
        if status_code >= 500:
            logger.error(
                "store_error",
                error=str(exc),
                error_type=type(exc).__name__,
                path=request.url.path,
            )
            message = "A storage error occurred"
        else:
            logger.warning("store_error", error=str(exc), code=code.value, path=request.url.path)
            message = str(exc)
        return _error_response(status_code, ErrorBody(code=code, message=message))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning("validation_error", errors=exc.errors(), path=request.url.path)
        details = [
            ErrorDetail(field=".".join(str(loc) for loc in error["loc"]), message=error["msg"])
            for error in exc.errors()
        ]
        return _error_response(
            400,
            ErrorBody(
                code=ErrorCode.INVALID_REQUEST,
                message="Request validation failed",
                details=details,
            ),
        )

    @app.exception_handler(ValidationError)
    async def pydantic_validation_error_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        logger.warning("pydantic_validation_error", errors=exc.errors(), path=request.url.path)
        details = [
            ErrorDetail(field=".".join(str(loc) for loc in error["loc"]), message=error["msg"])
            for error in exc.errors()
        ]
        return _error_response(
            400,
            ErrorBody(
                code=ErrorCode.INVALID_REQUEST,
                message="Data validation failed",
                details=details,
            ),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "unexpected_error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return _error_response(
            500,
            ErrorBody(code=ErrorCode.INTERNAL_ERROR, message="An unexpected error occurred"),
        )

    logger.debug("exception_handlers_registered")
