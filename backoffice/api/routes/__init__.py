"""API route registration."""

from fastapi import APIRouter, FastAPI

from backoffice.observability.logging import get_logger

logger = get_logger(__name__)


def create_v1_router() -> APIRouter:
    """Create the v1 API router with all routes."""
    router = APIRouter(prefix="/v1")

    from backoffice.api.routes.audit_logs import router as audit_logs_router
    from backoffice.api.routes.history import router as history_router
    from backoffice.api.routes.settings import router as settings_router

    router.include_router(settings_router, tags=["Settings"])
    router.include_router(audit_logs_router, tags=["Audit Logs"])
    router.include_router(history_router, tags=["Data History"])

    logger.debug("v1_router_created", routes=["settings", "audit-logs", "data-history"])
    return router


def register_routes(app: FastAPI) -> None:
    """Register the v1 API and the root-level health routes."""
    app.include_router(create_v1_router())

    from backoffice.api.routes.health import router as health_router

    app.include_router(health_router, tags=["Health"])

    logger.info("routes_registered")
