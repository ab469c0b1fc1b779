from __future__ import annotations

import json
import logging
import time
from collections import deque
from collections.abc import Callable
from dataclasses import asdict, dataclass, field, is_dataclass
from datetime import datetime, timezone
from typing import Any, Generic, Protocol, TypeVar

from queen_of_hearts.domain import CalculationResult

logger = logging.getLogger(__name__)

DEFAULT_AUDIT_LIMIT = 1000

T = TypeVar("T")


@dataclass(slots=True)
class AuditLogEntry:
    operation: str
    inputs: dict[str, Any]
    outputs: dict[str, Any]
    timestamp: str
    user_id: str
    game_id: int | None = None
    week_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "inputs": self.inputs,
            "outputs": self.outputs,
            "timestamp": self.timestamp,
            "user_id": self.user_id,
            "game_id": self.game_id,
            "week_id": self.week_id,
        }


@dataclass(slots=True)
class AuditFilters:
    operation: str | None = None
    game_id: int | None = None
    week_id: int | None = None
    start: datetime | str | None = None
    end: datetime | str | None = None

    def matches(self, entry: AuditLogEntry) -> bool:
        if self.operation is not None and entry.operation != self.operation:
            return False
        if self.game_id is not None and entry.game_id != self.game_id:
            return False
        if self.week_id is not None and entry.week_id != self.week_id:
            return False
        start = normalize_timestamp(self.start)
        if start is not None and entry.timestamp < start:
            return False
        end = normalize_timestamp(self.end)
        if end is not None and entry.timestamp > end:
            return False
        return True


class AuditSink(Protocol):
    def append(self, entry: AuditLogEntry) -> None: ...

    def query(self, filters: AuditFilters | None = None) -> list[AuditLogEntry]: ...


class InMemoryAuditSink:
    """Append-only log keeping only the most recent ``limit`` entries."""

    def __init__(self, limit: int = DEFAULT_AUDIT_LIMIT) -> None:
        self._entries: deque[AuditLogEntry] = deque(maxlen=limit)

    def append(self, entry: AuditLogEntry) -> None:
        self._entries.append(entry)

    def query(self, filters: AuditFilters | None = None) -> list[AuditLogEntry]:
        if filters is None:
            return list(self._entries)
        return [entry for entry in self._entries if filters.matches(entry)]


@dataclass
class AuditedCalculation(Generic[T]):
    result: T
    validation: CalculationResult | None = None


@dataclass
class AuditReporter:
    sink: AuditSink
    user_id: str = "system"
    clock: Callable[[], datetime] = field(default=lambda: datetime.now(timezone.utc))

    def run(
        self,
        operation: str,
        inputs: dict[str, Any],
        calculation: Callable[[], T],
        validation: Callable[[T], CalculationResult] | None = None,
        *,
        game_id: int | None = None,
        week_id: int | None = None,
    ) -> AuditedCalculation[T]:
        """Run a calculation and record exactly one audit entry for it.

        A failed validation is reported and logged but the result is still
        returned; deciding whether to persist it is up to the caller.
        Exceptions are recorded with their elapsed time and re-raised.
        """
        started = time.perf_counter()
        try:
            result = calculation()
            checked = validation(result) if validation is not None else None
        except Exception as exc:
            logger.exception("calculation %s failed", operation)
            self._record(
                operation,
                inputs,
                {"error": str(exc), "execution_time_ms": _elapsed_ms(started)},
                game_id=game_id,
                week_id=week_id,
            )
            raise

        if checked is not None:
            if not checked.is_valid:
                logger.error("validation failed for %s: %s", operation, "; ".join(checked.errors))
            if checked.warnings:
                logger.warning("warnings for %s: %s", operation, "; ".join(checked.warnings))

        outputs = _as_outputs(result)
        outputs["execution_time_ms"] = _elapsed_ms(started)
        outputs["validation_result"] = (
            {
                "is_valid": checked.is_valid,
                "error_count": len(checked.errors),
                "warning_count": len(checked.warnings),
            }
            if checked is not None
            else None
        )
        self._record(operation, inputs, outputs, game_id=game_id, week_id=week_id)
        return AuditedCalculation(result=result, validation=checked)

    def _record(
        self,
        operation: str,
        inputs: dict[str, Any],
        outputs: dict[str, Any],
        *,
        game_id: int | None,
        week_id: int | None,
    ) -> None:
        entry = AuditLogEntry(
            operation=operation,
            inputs=_jsonable(inputs),
            outputs=_jsonable(outputs),
            timestamp=self.clock().isoformat(),
            user_id=self.user_id,
            game_id=game_id,
            week_id=week_id,
        )
        logger.info(
            "audit %s game=%s week=%s inputs=%s outputs=%s",
            operation,
            game_id,
            week_id,
            json.dumps(entry.inputs, sort_keys=True),
            json.dumps(entry.outputs, sort_keys=True),
        )
        self.sink.append(entry)


def export_audit_log(sink: AuditSink, filters: AuditFilters | None = None) -> str:
    entries = sink.query(filters)
    document = {
        "exported_at": datetime.now(timezone.utc).isoformat(),
        "count": len(entries),
        "entries": [entry.to_dict() for entry in entries],
    }
    return json.dumps(document, indent=2, ensure_ascii=False)


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


def _as_outputs(result: Any) -> dict[str, Any]:
    if isinstance(result, CalculationResult):
        return result.to_dict()
    if is_dataclass(result) and not isinstance(result, type):
        return asdict(result)
    if isinstance(result, dict):
        return dict(result)
    return {"value": result}


def _jsonable(value: Any) -> Any:
    return json.loads(json.dumps(value, default=str))


def normalize_timestamp(value: datetime | str | None) -> str | None:
    """Render a filter bound in the UTC ISO-8601 form entries are stored with."""
    if value is None:
        return None
    if isinstance(value, str):
        # "Z" is not accepted by fromisoformat before 3.11
        value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()
