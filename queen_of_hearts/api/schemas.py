from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, Field, model_validator

from queen_of_hearts.domain import TERMINAL_CARD


class CalculationResultResponse(BaseModel):
    is_valid: bool
    errors: list[str]
    warnings: list[str]
    calculated_values: dict[str, float]

    model_config = {"from_attributes": True}


class CreateGameRequest(BaseModel):
    name: str = Field(..., min_length=1, description="Display name of the game", examples=["Game 9"])
    ticket_price: float | None = Field(default=None, gt=0, description="Price of one ticket")
    organization_percentage: float | None = Field(default=None, ge=0, le=100)
    jackpot_percentage: float | None = Field(default=None, ge=0, le=100)
    minimum_starting_jackpot: float | None = Field(default=None, ge=0)
    carryover_jackpot: float | None = Field(
        default=None,
        ge=0,
        description="Defaults to the last completed game's contribution to the next game",
    )
    start_date: date | None = None

    @model_validator(mode="after")
    def validate_percentages(self) -> "CreateGameRequest":
        if (self.organization_percentage is None) != (self.jackpot_percentage is None):
            raise ValueError("organization_percentage and jackpot_percentage must be given together")
        if self.organization_percentage is not None and self.jackpot_percentage is not None:
            if abs(self.organization_percentage + self.jackpot_percentage - 100) > 0.01:
                raise ValueError("organization and jackpot percentages must sum to 100")
        return self

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Game 9",
                    "ticket_price": 2,
                    "organization_percentage": 40,
                    "jackpot_percentage": 60,
                    "minimum_starting_jackpot": 500,
                }
            ]
        }
    }


class GameResponse(BaseModel):
    id: int
    name: str
    game_number: int
    start_date: date | None = None
    end_date: date | None = None
    ticket_price: float
    organization_percentage: float
    jackpot_percentage: float
    carryover_jackpot: float
    minimum_starting_jackpot: float
    jackpot_contribution_to_next_game: float
    is_completed: bool
    totals: dict[str, float | int | None] = Field(default_factory=dict)

    model_config = {"from_attributes": True}


class CreateWeekRequest(BaseModel):
    start_date: date
    end_date: date | None = None

    @model_validator(mode="after")
    def validate_range(self) -> "CreateWeekRequest":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class WeekResponse(BaseModel):
    id: int
    game_id: int
    week_number: int
    start_date: date | None = None
    end_date: date | None = None
    weekly_sales: float
    weekly_tickets_sold: int
    weekly_payout: float
    ending_jackpot: float | None = None
    winner_name: str | None = None
    card_selected: str | None = None
    slot_chosen: int | None = None
    winner_present: bool | None = None
    authorized_signature_name: str | None = None

    model_config = {"from_attributes": True}


class DailyEntryRequest(BaseModel):
    sale_date: date
    tickets_sold: int = Field(..., ge=0, examples=[120])


class TicketSaleResponse(BaseModel):
    id: int
    game_id: int
    week_id: int
    sale_date: date
    tickets_sold: int
    ticket_price: float
    amount_collected: float
    organization_total: float
    jackpot_total: float
    cumulative_collected: float
    ending_jackpot_total: float

    model_config = {"from_attributes": True}


class DailyEntryResponse(BaseModel):
    sale: TicketSaleResponse
    validation: CalculationResultResponse

    model_config = {"from_attributes": True}


class ExpenseRequest(BaseModel):
    amount: float = Field(..., gt=0)
    is_donation: bool = False
    description: str = ""
    expense_date: date | None = None


class ExpenseResponse(BaseModel):
    id: int
    game_id: int
    amount: float
    is_donation: bool
    description: str
    expense_date: date | None = None

    model_config = {"from_attributes": True}


class WinnerRequest(BaseModel):
    winner_name: str = Field(..., min_length=1, examples=["Jane Doe"])
    card_selected: str = Field(..., min_length=1, examples=[TERMINAL_CARD])
    slot_chosen: int | None = Field(default=None, ge=1, le=54)
    winner_present: bool = True
    authorized_signature_name: str | None = None


class WinnerResponse(BaseModel):
    week: WeekResponse
    payout: float
    ending_jackpot: float
    game_completed: bool

    model_config = {"from_attributes": True}


class EndingJackpotResponse(BaseModel):
    game_id: int
    week_id: int
    weekly_payout: float
    ending_jackpot: float


class DisplayedJackpotResponse(BaseModel):
    displayed_jackpot: float
    validation: CalculationResultResponse

    model_config = {"from_attributes": True}


class WeekBreakdownResponse(BaseModel):
    week_number: int
    starting_jackpot: float
    contributions: float
    payout: float
    ending_jackpot: float
    is_terminal_card: bool
    minimum_shortfall: float

    model_config = {"from_attributes": True}


class JackpotLossResponse(BaseModel):
    total_jackpot_loss: float
    weekly_breakdown: list[WeekBreakdownResponse]

    model_config = {"from_attributes": True}


class CompleteGameRequest(BaseModel):
    contribution_to_next_game: float = Field(default=0, ge=0)
    end_date: date | None = None


class ConfigurationResponse(BaseModel):
    ticket_price: float
    organization_percentage: float
    jackpot_percentage: float
    minimum_starting_jackpot: float
    penalty_percentage: float
    penalty_to_organization: bool
    card_payouts: dict[str, float | str]
    version: int

    model_config = {"from_attributes": True}


class ConfigurationUpdateRequest(BaseModel):
    ticket_price: float | None = Field(default=None, gt=0)
    organization_percentage: float | None = Field(default=None, ge=0, le=100)
    jackpot_percentage: float | None = Field(default=None, ge=0, le=100)
    minimum_starting_jackpot: float | None = Field(default=None, ge=0)
    penalty_percentage: float | None = Field(default=None, ge=0, le=100)
    penalty_to_organization: bool | None = None
    card_payouts: dict[str, float | str] | None = None


class AuditEntryResponse(BaseModel):
    operation: str
    inputs: dict[str, Any]
    outputs: dict[str, Any]
    timestamp: str
    user_id: str
    game_id: int | None = None
    week_id: int | None = None

    model_config = {"from_attributes": True}
