"""Dependency injection for API routes.

Every dependency reads from the AppContext attached to ``app.state.context``
at startup. Tests override ``get_app_context`` or any single dependency
through ``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends, Request

from backoffice.audit.logger import AuditLogger
from backoffice.config.settings import Settings
from backoffice.context import AppContext
from backoffice.history.gateway import RecordGateway
from backoffice.history.revert import RevertEngine
from backoffice.history.store import HistoryStore
from backoffice.site_settings.service import SettingsService


def get_app_context(request: Request) -> AppContext:
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise RuntimeError("Application context not initialised")
    return context


AppContextDep = Annotated[AppContext, Depends(get_app_context)]


def get_settings(context: AppContextDep) -> Settings:
    return context.settings


def get_settings_service(context: AppContextDep) -> SettingsService:
    return context.settings_service


def get_history_store(context: AppContextDep) -> HistoryStore:
    return context.history_store


def get_record_gateway(context: AppContextDep) -> RecordGateway:
    return context.record_gateway


def get_revert_engine(context: AppContextDep) -> RevertEngine:
    return context.revert_engine


def get_audit_logger(context: AppContextDep) -> AuditLogger:
    return context.audit_logger


SettingsDep = Annotated[Settings, Depends(get_settings)]
SettingsServiceDep = Annotated[SettingsService, Depends(get_settings_service)]
HistoryStoreDep = Annotated[HistoryStore, Depends(get_history_store)]
RecordGatewayDep = Annotated[RecordGateway, Depends(get_record_gateway)]
RevertEngineDep = Annotated[RevertEngine, Depends(get_revert_engine)]
AuditLoggerDep = Annotated[AuditLogger, Depends(get_audit_logger)]
