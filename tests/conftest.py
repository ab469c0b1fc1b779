from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from queen_of_hearts.service import LedgerService
from queen_of_hearts.services.audit_service import AuditReporter, InMemoryAuditSink
from queen_of_hearts.storage.database import Base
from queen_of_hearts.storage.repository import LedgerRepository


class TickingClock:
    def __init__(self) -> None:
        self.now = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def session_factory() -> sessionmaker[Session]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


@pytest.fixture
def audit_sink() -> InMemoryAuditSink:
    return InMemoryAuditSink()


@pytest.fixture
def service(session_factory: sessionmaker[Session], audit_sink: InMemoryAuditSink) -> LedgerService:
    reporter = AuditReporter(sink=audit_sink, clock=TickingClock())
    return LedgerService(LedgerRepository(session_factory), reporter)
