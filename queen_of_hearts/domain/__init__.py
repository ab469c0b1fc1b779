from .jackpot import (
    calculate_displayed_jackpot,
    calculate_ending_jackpot_total,
    calculate_week_ending_jackpot,
    resolve_winner_payout,
    validate_jackpot_calculation,
)
from .records import (
    DEFAULT_MINIMUM_STARTING_JACKPOT,
    JACKPOT_PAYOUT,
    TERMINAL_CARD,
    TOLERANCE,
    CalculationResult,
    Configuration,
    DomainValidationError,
    Expense,
    Game,
    Payout,
    TicketSale,
    Week,
    ensure_contiguous_weeks,
)
from .shortfall import JackpotLossResult, WeekBreakdown, calculate_game_jackpot_loss
from .splits import (
    SaleSplit,
    calculate_split,
    cumulative_collected,
    validate_ticket_sales_calculation,
)
from .totals import GameSummary, WeekTotals, summarize_game, summarize_week, validate_game_totals

__all__ = [
    "DEFAULT_MINIMUM_STARTING_JACKPOT",
    "JACKPOT_PAYOUT",
    "TERMINAL_CARD",
    "TOLERANCE",
    "CalculationResult",
    "Configuration",
    "DomainValidationError",
    "Expense",
    "Game",
    "GameSummary",
    "JackpotLossResult",
    "Payout",
    "SaleSplit",
    "TicketSale",
    "Week",
    "WeekBreakdown",
    "WeekTotals",
    "calculate_displayed_jackpot",
    "calculate_ending_jackpot_total",
    "calculate_game_jackpot_loss",
    "calculate_split",
    "calculate_week_ending_jackpot",
    "cumulative_collected",
    "ensure_contiguous_weeks",
    "resolve_winner_payout",
    "summarize_game",
    "summarize_week",
    "validate_game_totals",
    "validate_jackpot_calculation",
    "validate_ticket_sales_calculation",
]
