from datetime import datetime, timezone

from queen_of_hearts.services.audit_service import AuditFilters, AuditLogEntry
from queen_of_hearts.storage.audit_log import SqlAuditSink


def _entry(index: int, operation: str = "game_totals", game_id: int | None = 1) -> AuditLogEntry:
    return AuditLogEntry(
        operation=operation,
        inputs={"index": index},
        outputs={"value": index},
        timestamp=datetime(2024, 1, index + 1, tzinfo=timezone.utc).isoformat(),
        user_id="system",
        game_id=game_id,
    )


def test_entries_round_trip(session_factory) -> None:
    sink = SqlAuditSink(session_factory)
    sink.append(_entry(0))

    (stored,) = sink.query()

    assert stored == _entry(0)


def test_oldest_rows_are_trimmed(session_factory) -> None:
    sink = SqlAuditSink(session_factory, limit=2)

    for index in range(4):
        sink.append(_entry(index))

    assert [entry.inputs["index"] for entry in sink.query()] == [2, 3]


def test_query_filters(session_factory) -> None:
    sink = SqlAuditSink(session_factory)
    sink.append(_entry(0, "displayed_jackpot", game_id=1))
    sink.append(_entry(1, "game_totals", game_id=2))
    sink.append(_entry(2, "displayed_jackpot", game_id=2))

    assert len(sink.query(AuditFilters(operation="displayed_jackpot"))) == 2
    assert [entry.inputs["index"] for entry in sink.query(AuditFilters(game_id=2))] == [1, 2]
    assert [entry.inputs["index"] for entry in sink.query(AuditFilters(start=datetime(2024, 1, 2)))] == [1, 2]
