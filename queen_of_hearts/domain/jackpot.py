"""Jackpot accumulation, displayed jackpot and winner payout rules."""

from __future__ import annotations

import warnings
from collections.abc import Iterable

from .records import (
    JACKPOT_PAYOUT,
    TERMINAL_CARD,
    CalculationResult,
    Configuration,
    DomainValidationError,
    TicketSale,
    Week,
)


def calculate_week_ending_jackpot(
    sales: Iterable[TicketSale],
    weeks: Iterable[Week],
    carryover_jackpot: float,
    week_id: int | None,
    weekly_payout: float,
) -> float:
    """Lifetime jackpot balance after paying ``weekly_payout`` for ``week_id``.

    The balance is replayed from the full sale history on every call so that
    corrections to past entries are always reflected. Payouts of every other
    week with a declared winner are subtracted, then the current payout.
    The result never drops below zero.
    """
    total = carryover_jackpot
    for sale in sorted(sales, key=_sale_order):
        total += sale.jackpot_total

    for week in weeks:
        if week.id == week_id or not week.has_winner:
            continue
        if week.weekly_payout > 0:
            total -= week.weekly_payout

    total -= weekly_payout
    return max(0.0, total)


def calculate_ending_jackpot_total(
    sales: Iterable[TicketSale],
    weeks: Iterable[Week],
    carryover_jackpot: float,
    week_id: int | None,
    weekly_payout: float,
) -> float:
    """Backward-compatible alias."""
    warnings.warn(
        "calculate_ending_jackpot_total is deprecated, use calculate_week_ending_jackpot",
        DeprecationWarning,
        stacklevel=2,
    )
    return calculate_week_ending_jackpot(sales, weeks, carryover_jackpot, week_id, weekly_payout)


def calculate_displayed_jackpot(
    jackpot_contributions: float,
    minimum_jackpot: float,
    carryover_jackpot: float = 0.0,
) -> float:
    # what a viewer is told the jackpot is worth, including the guaranteed floor
    if jackpot_contributions < minimum_jackpot:
        return minimum_jackpot + carryover_jackpot
    return jackpot_contributions + carryover_jackpot


def validate_jackpot_calculation(
    jackpot_contributions: float,
    minimum_jackpot: float,
    carryover_jackpot: float = 0.0,
) -> CalculationResult:
    result = CalculationResult()

    if jackpot_contributions < 0:
        result.errors.append("Jackpot contributions cannot be negative")
    if minimum_jackpot < 0:
        result.errors.append("Minimum jackpot cannot be negative")
    if carryover_jackpot < 0:
        result.errors.append("Carryover jackpot cannot be negative")

    if jackpot_contributions < minimum_jackpot:
        result.warnings.append("Jackpot contributions below minimum threshold")
    if carryover_jackpot > jackpot_contributions * 2:
        result.warnings.append("Carryover jackpot seems unusually high compared to contributions")

    result.calculated_values = {
        "displayed_jackpot": calculate_displayed_jackpot(
            jackpot_contributions, minimum_jackpot, carryover_jackpot
        ),
        "jackpot_contributions": jackpot_contributions,
        "minimum_jackpot": minimum_jackpot,
        "carryover_jackpot": carryover_jackpot,
    }
    return result


def resolve_winner_payout(
    card_selected: str,
    configuration: Configuration,
    displayed_jackpot: float,
    winner_present: bool,
) -> float:
    if card_selected == TERMINAL_CARD:
        payout = displayed_jackpot
        if not winner_present:
            payout -= payout * (configuration.penalty_percentage / 100)
        return payout

    configured = configuration.card_payouts.get(card_selected)
    if configured is None or configured == JACKPOT_PAYOUT:
        raise DomainValidationError(f"no payout configured for card: {card_selected}")
    return float(configured)


def _sale_order(sale: TicketSale) -> tuple:
    return (sale.sale_date is None, sale.sale_date or 0, sale.id or 0)
