"""Ticket sale splitting between the organization and the jackpot."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from .records import TOLERANCE, CalculationResult, TicketSale

HIGH_TICKET_COUNT = 10000
HIGH_TICKET_PRICE = 50


@dataclass(frozen=True)
class SaleSplit:
    amount_collected: float
    organization_total: float
    jackpot_total: float


def calculate_split(
    tickets_sold: int,
    ticket_price: float,
    organization_percentage: float,
    jackpot_percentage: float,
) -> SaleSplit:
    amount_collected = tickets_sold * ticket_price
    return SaleSplit(
        amount_collected=amount_collected,
        organization_total=amount_collected * (organization_percentage / 100),
        jackpot_total=amount_collected * (jackpot_percentage / 100),
    )


def validate_ticket_sales_calculation(
    tickets_sold: int,
    ticket_price: float,
    organization_percentage: float,
    jackpot_percentage: float,
) -> CalculationResult:
    """Compute a sale split and report problems with its inputs.

    Input problems are collected as error strings, never raised. Unusually
    large ticket counts and prices are reported as warnings only.
    """
    result = CalculationResult()

    if tickets_sold <= 0:
        result.errors.append("Tickets sold must be greater than 0")
    if ticket_price <= 0:
        result.errors.append("Ticket price must be greater than 0")
    if organization_percentage < 0 or organization_percentage > 100:
        result.errors.append("Organization percentage must be between 0 and 100")
    if jackpot_percentage < 0 or jackpot_percentage > 100:
        result.errors.append("Jackpot percentage must be between 0 and 100")
    if abs(organization_percentage + jackpot_percentage - 100) > TOLERANCE:
        result.errors.append("Organization and jackpot percentages must sum to 100%")

    split = calculate_split(tickets_sold, ticket_price, organization_percentage, jackpot_percentage)
    if abs(split.organization_total + split.jackpot_total - split.amount_collected) > TOLERANCE:
        result.errors.append("Organization and jackpot totals don't sum to amount collected")

    if tickets_sold > HIGH_TICKET_COUNT:
        result.warnings.append("Unusually high number of tickets sold")
    if ticket_price > HIGH_TICKET_PRICE:
        result.warnings.append("Unusually high ticket price")

    result.calculated_values = {
        "amount_collected": split.amount_collected,
        "organization_total": split.organization_total,
        "jackpot_total": split.jackpot_total,
    }
    return result


def cumulative_collected(
    prior_sales: Iterable[TicketSale],
    sale_date: date,
    amount_collected: float,
    carryover_jackpot: float = 0.0,
    exclude_sale_id: int | None = None,
) -> float:
    # same-day entries count unless they are the entry being replaced
    total = carryover_jackpot
    for sale in prior_sales:
        if sale.sale_date is None:
            continue
        if sale.sale_date < sale_date or (sale.sale_date == sale_date and sale.id != exclude_sale_id):
            total += sale.amount_collected
    return total + amount_collected
