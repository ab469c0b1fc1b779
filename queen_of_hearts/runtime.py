from __future__ import annotations

from functools import lru_cache

from queen_of_hearts.config import Settings, get_settings
from queen_of_hearts.service import LedgerService
from queen_of_hearts.services.audit_service import AuditReporter, AuditSink, InMemoryAuditSink
from queen_of_hearts.storage.audit_log import SqlAuditSink
from queen_of_hearts.storage.database import SessionLocal
from queen_of_hearts.storage.repository import LedgerRepository


def build_audit_sink(settings: Settings) -> AuditSink:
    if settings.audit_sink == "database":
        return SqlAuditSink(SessionLocal, limit=settings.audit_log_limit)
    if settings.audit_sink == "memory":
        return InMemoryAuditSink(limit=settings.audit_log_limit)
    raise ValueError(f"Unsupported audit sink: {settings.audit_sink}")


@lru_cache
def get_service() -> LedgerService:
    settings = get_settings()
    reporter = AuditReporter(sink=build_audit_sink(settings), user_id=settings.audit_user)
    return LedgerService(LedgerRepository(SessionLocal), reporter)
