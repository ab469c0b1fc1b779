"""Game and week roll-ups and end-of-game reconciliation."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass

from .records import TOLERANCE, CalculationResult, Expense, Game, Payout, TicketSale, Week


@dataclass(frozen=True)
class WeekTotals:
    weekly_sales: float
    weekly_tickets_sold: int


@dataclass(frozen=True)
class GameSummary:
    total_sales: float
    total_organization: float
    total_jackpot_contributions: float
    total_expenses: float
    total_donations: float
    total_payouts: float
    weekly_payouts_distributed: float
    final_jackpot_payout: float
    net_available_for_final_winner: float
    jackpot_shortfall_covered: float
    organization_net_profit: float
    actual_organization_net_profit: float
    game_duration_weeks: int

    def to_dict(self) -> dict[str, float | int]:
        return asdict(self)


def validate_game_totals(
    ticket_sales: Sequence[TicketSale],
    expenses: Sequence[Expense],
    payouts: Sequence[Payout],
) -> CalculationResult:
    """Reconcile a game's records into organization net profit.

    Errors flag sale records whose portions do not add up to the amount
    collected, and payouts larger than everything ever contributed to the
    jackpot. A negative net profit is only a warning.
    """
    result = CalculationResult()

    total_sales = sum(sale.amount_collected for sale in ticket_sales)
    total_org_portion = sum(sale.organization_total for sale in ticket_sales)
    total_jackpot_portion = sum(sale.jackpot_total for sale in ticket_sales)
    total_expenses = sum(expense.amount for expense in expenses if not expense.is_donation)
    total_donations = sum(expense.amount for expense in expenses if expense.is_donation)
    total_payouts = sum(payout.weekly_payout for payout in payouts)

    if abs(total_org_portion + total_jackpot_portion - total_sales) > TOLERANCE:
        result.errors.append("Organization and jackpot portions don't sum to total sales")

    organization_net_profit = total_org_portion - total_expenses - total_donations
    if organization_net_profit < 0:
        result.warnings.append("Organization net profit is negative")

    if total_payouts > total_jackpot_portion:
        result.errors.append("Total payouts exceed total jackpot portion")

    result.calculated_values = {
        "total_sales": total_sales,
        "total_org_portion": total_org_portion,
        "total_jackpot_portion": total_jackpot_portion,
        "total_expenses": total_expenses,
        "total_donations": total_donations,
        "total_payouts": total_payouts,
        "organization_net_profit": organization_net_profit,
    }
    return result


def summarize_week(sales: Iterable[TicketSale]) -> WeekTotals:
    weekly_sales = 0.0
    weekly_tickets_sold = 0
    for sale in sales:
        weekly_sales += sale.amount_collected
        weekly_tickets_sold += sale.tickets_sold
    return WeekTotals(weekly_sales=weekly_sales, weekly_tickets_sold=weekly_tickets_sold)


def summarize_game(
    game: Game,
    weeks: Sequence[Week],
    sales: Sequence[TicketSale],
    expenses: Sequence[Expense],
) -> GameSummary:
    total_sales = sum(sale.amount_collected for sale in sales)
    total_organization = sum(sale.organization_total for sale in sales)
    total_jackpot_contributions = sum(sale.jackpot_total for sale in sales)
    total_expenses = sum(expense.amount for expense in expenses if not expense.is_donation)
    total_donations = sum(expense.amount for expense in expenses if expense.is_donation)
    total_payouts = sum(week.weekly_payout for week in weeks)

    terminal_weeks = [week for week in weeks if week.is_terminal]
    weekly_payouts_distributed = sum(week.weekly_payout for week in weeks if not week.is_terminal)
    net_available = (
        game.carryover_jackpot
        + total_jackpot_contributions
        - weekly_payouts_distributed
        - game.jackpot_contribution_to_next_game
    )

    # the guarantee only costs the organization once the terminal card is drawn
    shortfall = 0.0
    final_jackpot_payout = 0.0
    if terminal_weeks:
        shortfall = max(0.0, game.minimum_starting_jackpot - net_available)
        if shortfall > 0:
            final_jackpot_payout = game.minimum_starting_jackpot
        else:
            final_jackpot_payout = sum(week.weekly_payout for week in terminal_weeks)

    organization_net_profit = total_organization - total_expenses - total_donations
    return GameSummary(
        total_sales=total_sales,
        total_organization=total_organization,
        total_jackpot_contributions=total_jackpot_contributions,
        total_expenses=total_expenses,
        total_donations=total_donations,
        total_payouts=total_payouts,
        weekly_payouts_distributed=weekly_payouts_distributed,
        final_jackpot_payout=final_jackpot_payout,
        net_available_for_final_winner=net_available,
        jackpot_shortfall_covered=shortfall,
        organization_net_profit=organization_net_profit,
        actual_organization_net_profit=organization_net_profit - shortfall,
        game_duration_weeks=len(weeks),
    )
