from __future__ import annotations

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session, sessionmaker

from queen_of_hearts.services.audit_service import DEFAULT_AUDIT_LIMIT, AuditFilters, AuditLogEntry, normalize_timestamp
from queen_of_hearts.storage.models import AuditLog


class SqlAuditSink:
    """Audit sink backed by the ``audit_log`` table, trimmed to the newest ``limit`` rows."""

    def __init__(self, session_factory: sessionmaker[Session], limit: int = DEFAULT_AUDIT_LIMIT) -> None:
        self._session_factory = session_factory
        self._limit = limit

    def append(self, entry: AuditLogEntry) -> None:
        with self._session_factory() as db:
            db.add(
                AuditLog(
                    operation=entry.operation,
                    inputs=entry.inputs,
                    outputs=entry.outputs,
                    timestamp=entry.timestamp,
                    user_id=entry.user_id,
                    game_id=entry.game_id,
                    week_id=entry.week_id,
                )
            )
            db.flush()

            count = db.execute(select(func.count(AuditLog.id))).scalar() or 0
            if count > self._limit:
                stale_ids = select(AuditLog.id).order_by(AuditLog.id).limit(count - self._limit)
                db.execute(delete(AuditLog).where(AuditLog.id.in_(stale_ids.scalar_subquery())))
            db.commit()

    def query(self, filters: AuditFilters | None = None) -> list[AuditLogEntry]:
        filters = filters or AuditFilters()
        with self._session_factory() as db:
            query = select(AuditLog)
            if filters.operation is not None:
                query = query.where(AuditLog.operation == filters.operation)
            if filters.game_id is not None:
                query = query.where(AuditLog.game_id == filters.game_id)
            if filters.week_id is not None:
                query = query.where(AuditLog.week_id == filters.week_id)
            start = normalize_timestamp(filters.start)
            if start is not None:
                query = query.where(AuditLog.timestamp >= start)
            end = normalize_timestamp(filters.end)
            if end is not None:
                query = query.where(AuditLog.timestamp <= end)

            rows = db.scalars(query.order_by(AuditLog.id)).all()
            return [
                AuditLogEntry(
                    operation=row.operation,
                    inputs=row.inputs,
                    outputs=row.outputs,
                    timestamp=row.timestamp,
                    user_id=row.user_id,
                    game_id=row.game_id,
                    week_id=row.week_id,
                )
                for row in rows
            ]
