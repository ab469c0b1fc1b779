"""Minimum jackpot shortfall covered by the organization."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from .records import DEFAULT_MINIMUM_STARTING_JACKPOT, TicketSale, Week


@dataclass(frozen=True)
class WeekBreakdown:
    week_number: int
    starting_jackpot: float
    contributions: float
    payout: float
    ending_jackpot: float
    is_terminal_card: bool
    minimum_shortfall: float


@dataclass
class JackpotLossResult:
    total_jackpot_loss: float = 0.0
    weekly_breakdown: list[WeekBreakdown] = field(default_factory=list)


def calculate_game_jackpot_loss(
    weeks: Sequence[Week],
    sales: Iterable[TicketSale],
    carryover_jackpot: float = 0.0,
    minimum_starting_jackpot: float = DEFAULT_MINIMUM_STARTING_JACKPOT,
) -> JackpotLossResult:
    """Replay a game's weeks and quantify the guaranteed-minimum exposure.

    When the terminal card is drawn with a payout and the accrued jackpot is
    below the minimum, the winner is paid the minimum and the difference is
    the organization's loss. Non-terminal weeks never get the guarantee.
    Nothing is persisted here.
    """
    contributions_by_week: dict[int | None, float] = defaultdict(float)
    for sale in sales:
        contributions_by_week[sale.week_id] += sale.jackpot_total

    result = JackpotLossResult()
    running_jackpot = carryover_jackpot

    for week in sorted(weeks, key=lambda item: item.week_number):
        starting_jackpot = running_jackpot
        contributions = contributions_by_week.get(week.id, 0.0)
        total_available = starting_jackpot + contributions

        payout = week.weekly_payout
        shortfall = 0.0
        if week.is_terminal and week.weekly_payout > 0:
            if total_available < minimum_starting_jackpot:
                shortfall = minimum_starting_jackpot - total_available
                payout = minimum_starting_jackpot
                result.total_jackpot_loss += shortfall
            running_jackpot = 0.0
        else:
            running_jackpot = total_available - week.weekly_payout

        result.weekly_breakdown.append(
            WeekBreakdown(
                week_number=week.week_number,
                starting_jackpot=starting_jackpot,
                contributions=contributions,
                payout=payout,
                ending_jackpot=running_jackpot,
                is_terminal_card=week.is_terminal,
                minimum_shortfall=shortfall,
            )
        )

    return result
