from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query, status

from queen_of_hearts.api.errors import ledger_errors
from queen_of_hearts.api.schemas import (
    CalculationResultResponse,
    CompleteGameRequest,
    CreateGameRequest,
    CreateWeekRequest,
    DailyEntryRequest,
    DailyEntryResponse,
    DisplayedJackpotResponse,
    EndingJackpotResponse,
    ExpenseRequest,
    ExpenseResponse,
    GameResponse,
    JackpotLossResponse,
    WeekResponse,
    WinnerRequest,
    WinnerResponse,
)
from queen_of_hearts.domain import Game
from queen_of_hearts.runtime import get_service
from queen_of_hearts.service import LedgerService

router = APIRouter(prefix="/games", tags=["games"])


def _game_response(game: Game, service: LedgerService) -> GameResponse:
    return GameResponse(
        **asdict(game),
        is_completed=game.is_completed,
        totals=service.get_game_totals(game.id),
    )


@router.post(
    "",
    response_model=GameResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start a new game",
)
def create_game(payload: CreateGameRequest, service: LedgerService = Depends(get_service)) -> GameResponse:
    with ledger_errors():
        game = service.start_game(
            payload.name,
            ticket_price=payload.ticket_price,
            organization_percentage=payload.organization_percentage,
            jackpot_percentage=payload.jackpot_percentage,
            minimum_starting_jackpot=payload.minimum_starting_jackpot,
            carryover_jackpot=payload.carryover_jackpot,
            start_date=payload.start_date,
        )
        return _game_response(game, service)


@router.get("/{game_id}", response_model=GameResponse, summary="Game settings and derived totals")
def get_game(game_id: int, service: LedgerService = Depends(get_service)) -> GameResponse:
    with ledger_errors(game_id=game_id):
        return _game_response(service.get_game(game_id), service)


@router.get("/{game_id}/weeks", response_model=list[WeekResponse], summary="Weeks in week-number order")
def list_weeks(game_id: int, service: LedgerService = Depends(get_service)) -> list[WeekResponse]:
    with ledger_errors(game_id=game_id):
        return [WeekResponse.model_validate(week) for week in service.list_weeks(game_id)]


@router.post(
    "/{game_id}/weeks",
    response_model=WeekResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Append the next week",
)
def create_week(
    game_id: int,
    payload: CreateWeekRequest,
    service: LedgerService = Depends(get_service),
) -> WeekResponse:
    with ledger_errors(game_id=game_id):
        week = service.add_week(game_id, payload.start_date, payload.end_date)
    return WeekResponse.model_validate(week)


@router.post(
    "/{game_id}/weeks/{week_id}/entries",
    response_model=DailyEntryResponse,
    summary="Record or correct a day's ticket sales",
)
def record_entry(
    game_id: int,
    week_id: int,
    payload: DailyEntryRequest,
    service: LedgerService = Depends(get_service),
) -> DailyEntryResponse:
    with ledger_errors(game_id=game_id, week_id=week_id):
        result = service.record_daily_entry(game_id, week_id, payload.sale_date, payload.tickets_sold)
    return DailyEntryResponse.model_validate(result)


@router.get(
    "/{game_id}/weeks/{week_id}/ending-jackpot",
    response_model=EndingJackpotResponse,
    summary="Jackpot left after paying a week's winner",
)
def ending_jackpot(
    game_id: int,
    week_id: int,
    weekly_payout: float = Query(default=0, ge=0),
    service: LedgerService = Depends(get_service),
) -> EndingJackpotResponse:
    with ledger_errors(game_id=game_id, week_id=week_id):
        value = service.calculate_week_ending_jackpot(game_id, week_id, weekly_payout)
    return EndingJackpotResponse(
        game_id=game_id,
        week_id=week_id,
        weekly_payout=weekly_payout,
        ending_jackpot=value,
    )


@router.post(
    "/{game_id}/weeks/{week_id}/winner",
    response_model=WinnerResponse,
    summary="Record the week's drawing",
)
def declare_winner(
    game_id: int,
    week_id: int,
    payload: WinnerRequest,
    service: LedgerService = Depends(get_service),
) -> WinnerResponse:
    with ledger_errors(game_id=game_id, week_id=week_id):
        result = service.declare_winner(
            game_id,
            week_id,
            winner_name=payload.winner_name,
            card_selected=payload.card_selected,
            slot_chosen=payload.slot_chosen,
            winner_present=payload.winner_present,
            authorized_signature_name=payload.authorized_signature_name,
        )
    return WinnerResponse.model_validate(result)


@router.get(
    "/{game_id}/displayed-jackpot",
    response_model=DisplayedJackpotResponse,
    summary="Jackpot shown to players, including the guaranteed minimum",
)
def displayed_jackpot(game_id: int, service: LedgerService = Depends(get_service)) -> DisplayedJackpotResponse:
    with ledger_errors(game_id=game_id):
        return DisplayedJackpotResponse.model_validate(service.displayed_jackpot(game_id))


@router.get(
    "/{game_id}/jackpot-loss",
    response_model=JackpotLossResponse,
    summary="Organization exposure from the minimum jackpot guarantee",
)
def jackpot_loss(
    game_id: int,
    minimum_starting_jackpot: float | None = Query(default=None, ge=0),
    service: LedgerService = Depends(get_service),
) -> JackpotLossResponse:
    with ledger_errors(game_id=game_id):
        result = service.calculate_game_jackpot_loss(game_id, minimum_starting_jackpot)
    return JackpotLossResponse.model_validate(result)


@router.get(
    "/{game_id}/totals",
    response_model=CalculationResultResponse,
    summary="Reconcile sales, expenses and payouts",
)
def game_totals(game_id: int, service: LedgerService = Depends(get_service)) -> CalculationResultResponse:
    with ledger_errors(game_id=game_id):
        return CalculationResultResponse.model_validate(service.reconcile_game(game_id))


@router.post(
    "/{game_id}/expenses",
    response_model=ExpenseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record an expense or donation",
)
def add_expense(
    game_id: int,
    payload: ExpenseRequest,
    service: LedgerService = Depends(get_service),
) -> ExpenseResponse:
    with ledger_errors(game_id=game_id):
        expense = service.add_expense(
            game_id,
            payload.amount,
            is_donation=payload.is_donation,
            description=payload.description,
            expense_date=payload.expense_date,
        )
    return ExpenseResponse.model_validate(expense)


@router.post("/{game_id}/complete", response_model=GameResponse, summary="Close the game")
def complete_game(
    game_id: int,
    payload: CompleteGameRequest,
    service: LedgerService = Depends(get_service),
) -> GameResponse:
    with ledger_errors(game_id=game_id):
        game = service.complete_game(game_id, payload.contribution_to_next_game, payload.end_date)
        return _game_response(game, service)
