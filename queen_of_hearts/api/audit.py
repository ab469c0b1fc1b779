from datetime import datetime

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from queen_of_hearts.api.schemas import AuditEntryResponse
from queen_of_hearts.runtime import get_service
from queen_of_hearts.service import LedgerService
from queen_of_hearts.services.audit_service import AuditFilters, export_audit_log

router = APIRouter(prefix="/audit", tags=["audit"])


def _filters(
    operation: str | None = None,
    game_id: int | None = Query(default=None, ge=1),
    week_id: int | None = Query(default=None, ge=1),
    start: datetime | None = None,
    end: datetime | None = None,
) -> AuditFilters:
    return AuditFilters(operation=operation, game_id=game_id, week_id=week_id, start=start, end=end)


@router.get("", response_model=list[AuditEntryResponse])
def list_audit_entries(
    filters: AuditFilters = Depends(_filters),
    service: LedgerService = Depends(get_service),
) -> list[AuditEntryResponse]:
    return [AuditEntryResponse.model_validate(entry) for entry in service.reporter.sink.query(filters)]


@router.get("/export")
def export_audit_entries(
    filters: AuditFilters = Depends(_filters),
    service: LedgerService = Depends(get_service),
) -> Response:
    return Response(
        content=export_audit_log(service.reporter.sink, filters),
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="calculation-audit-log.json"'},
    )
