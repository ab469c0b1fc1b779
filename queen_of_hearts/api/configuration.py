from __future__ import annotations

from fastapi import APIRouter, Depends

from queen_of_hearts.api.errors import ledger_errors
from queen_of_hearts.api.schemas import ConfigurationResponse, ConfigurationUpdateRequest
from queen_of_hearts.runtime import get_service
from queen_of_hearts.service import LedgerService

router = APIRouter(prefix="/configuration", tags=["configuration"])


@router.get("", response_model=ConfigurationResponse)
def get_configuration(service: LedgerService = Depends(get_service)) -> ConfigurationResponse:
    return ConfigurationResponse.model_validate(service.get_configuration())


@router.put("", response_model=ConfigurationResponse)
def update_configuration(
    payload: ConfigurationUpdateRequest,
    service: LedgerService = Depends(get_service),
) -> ConfigurationResponse:
    with ledger_errors():
        configuration = service.update_configuration(**payload.model_dump(exclude_none=True))
    return ConfigurationResponse.model_validate(configuration)
