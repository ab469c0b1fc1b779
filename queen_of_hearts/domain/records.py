from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

TOLERANCE = 0.01
TERMINAL_CARD = "Queen of Hearts"
JACKPOT_PAYOUT = "jackpot"
DEFAULT_MINIMUM_STARTING_JACKPOT = 500.0


class DomainValidationError(ValueError):
    """Raised when a record violates a ledger rule."""


def _default_card_payouts() -> dict[str, float | str]:
    payouts: dict[str, float | str] = {}
    for suit in ("Hearts", "Diamonds", "Clubs", "Spades"):
        for rank in range(2, 11):
            payouts[f"{rank} of {suit}"] = 25.0
        payouts[f"Jack of {suit}"] = 30.0
        payouts[f"Queen of {suit}"] = 40.0
        payouts[f"King of {suit}"] = 30.0
        payouts[f"Ace of {suit}"] = 35.0
    payouts[TERMINAL_CARD] = JACKPOT_PAYOUT
    payouts["Joker"] = 50.0
    return payouts


def _ensure_percentages(organization_percentage: float, jackpot_percentage: float) -> None:
    for name, value in (
        ("organization_percentage", organization_percentage),
        ("jackpot_percentage", jackpot_percentage),
    ):
        if value < 0 or value > 100:
            raise DomainValidationError(f"{name} must be between 0 and 100")
    if abs(organization_percentage + jackpot_percentage - 100) > TOLERANCE:
        raise DomainValidationError("organization and jackpot percentages must sum to 100")


@dataclass(frozen=True)
class Game:
    organization_percentage: float
    jackpot_percentage: float
    ticket_price: float
    carryover_jackpot: float = 0.0
    minimum_starting_jackpot: float = DEFAULT_MINIMUM_STARTING_JACKPOT
    id: int | None = None
    name: str = ""
    game_number: int = 1
    start_date: date | None = None
    end_date: date | None = None
    jackpot_contribution_to_next_game: float = 0.0

    def __post_init__(self) -> None:
        _ensure_percentages(self.organization_percentage, self.jackpot_percentage)
        if self.ticket_price <= 0:
            raise DomainValidationError("ticket_price must be positive")
        if self.carryover_jackpot < 0:
            raise DomainValidationError("carryover_jackpot cannot be negative")
        if self.minimum_starting_jackpot < 0:
            raise DomainValidationError("minimum_starting_jackpot cannot be negative")
        if self.jackpot_contribution_to_next_game < 0:
            raise DomainValidationError("jackpot_contribution_to_next_game cannot be negative")

    @property
    def is_completed(self) -> bool:
        return self.end_date is not None


@dataclass(frozen=True)
class Week:
    week_number: int
    id: int | None = None
    game_id: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    weekly_sales: float = 0.0
    weekly_tickets_sold: int = 0
    weekly_payout: float = 0.0
    ending_jackpot: float | None = None
    winner_name: str | None = None
    card_selected: str | None = None
    slot_chosen: int | None = None
    winner_present: bool | None = None
    authorized_signature_name: str | None = None

    def __post_init__(self) -> None:
        if self.week_number < 1:
            raise DomainValidationError("week_number must start at 1")
        if self.weekly_payout < 0:
            raise DomainValidationError("weekly_payout cannot be negative")

    @property
    def has_winner(self) -> bool:
        return self.winner_name is not None

    @property
    def is_terminal(self) -> bool:
        return self.card_selected == TERMINAL_CARD


@dataclass(frozen=True)
class TicketSale:
    amount_collected: float
    organization_total: float
    jackpot_total: float
    tickets_sold: int = 0
    ticket_price: float = 0.0
    sale_date: date | None = None
    id: int | None = None
    game_id: int | None = None
    week_id: int | None = None
    cumulative_collected: float = 0.0
    ending_jackpot_total: float = 0.0

    def __post_init__(self) -> None:
        if self.tickets_sold < 0:
            raise DomainValidationError("tickets_sold cannot be negative")
        if self.ticket_price < 0:
            raise DomainValidationError("ticket_price cannot be negative")
        if min(self.amount_collected, self.organization_total, self.jackpot_total) < 0:
            raise DomainValidationError("sale amounts cannot be negative")


@dataclass(frozen=True)
class Expense:
    amount: float
    is_donation: bool = False
    id: int | None = None
    game_id: int | None = None
    expense_date: date | None = None
    description: str = ""

    def __post_init__(self) -> None:
        if self.amount <= 0:
            raise DomainValidationError("expense amount must be positive")


@dataclass(frozen=True)
class Payout:
    weekly_payout: float
    week_id: int | None = None

    def __post_init__(self) -> None:
        if self.weekly_payout < 0:
            raise DomainValidationError("weekly_payout cannot be negative")


@dataclass(frozen=True)
class Configuration:
    ticket_price: float = 2.0
    organization_percentage: float = 40.0
    jackpot_percentage: float = 60.0
    minimum_starting_jackpot: float = DEFAULT_MINIMUM_STARTING_JACKPOT
    penalty_percentage: float = 10.0
    penalty_to_organization: bool = False
    card_payouts: dict[str, float | str] = field(default_factory=_default_card_payouts)
    version: int = 1

    def __post_init__(self) -> None:
        _ensure_percentages(self.organization_percentage, self.jackpot_percentage)
        if self.ticket_price <= 0:
            raise DomainValidationError("ticket_price must be positive")
        if self.minimum_starting_jackpot < 0:
            raise DomainValidationError("minimum_starting_jackpot cannot be negative")
        if self.penalty_percentage < 0 or self.penalty_percentage > 100:
            raise DomainValidationError("penalty_percentage must be between 0 and 100")
        for card, payout in self.card_payouts.items():
            if payout == JACKPOT_PAYOUT:
                continue
            if not isinstance(payout, (int, float)) or payout < 0:
                raise DomainValidationError(f"invalid payout for card: {card}")


@dataclass
class CalculationResult:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    calculated_values: dict[str, float] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "calculated_values": dict(self.calculated_values),
        }


def ensure_contiguous_weeks(weeks: Iterable[Week]) -> list[Week]:
    """Return weeks ordered by number, rejecting gaps and duplicates."""
    ordered = sorted(weeks, key=lambda week: week.week_number)
    for expected, week in enumerate(ordered, start=1):
        if week.week_number != expected:
            raise DomainValidationError(
                f"week numbers must be contiguous from 1, got {week.week_number} at position {expected}"
            )
    return ordered
