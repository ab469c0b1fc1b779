from datetime import date

import pytest

from queen_of_hearts.domain import (
    TOLERANCE,
    TicketSale,
    calculate_split,
    cumulative_collected,
    validate_ticket_sales_calculation,
)


@pytest.mark.parametrize(
    "tickets_sold, ticket_price, organization_percentage, jackpot_percentage",
    [
        (100, 2.0, 40, 60),
        (1, 5.0, 50, 50),
        (333, 1.0, 33.3, 66.7),
        (7, 3.5, 0, 100),
    ],
    ids=["default_split", "even_split", "fractional_percentages", "all_to_jackpot"],
)
def test_split_portions_sum_to_amount_collected(tickets_sold, ticket_price, organization_percentage, jackpot_percentage):
    result = validate_ticket_sales_calculation(tickets_sold, ticket_price, organization_percentage, jackpot_percentage)

    assert result.is_valid
    values = result.calculated_values
    assert values["amount_collected"] == pytest.approx(tickets_sold * ticket_price)
    assert abs(values["organization_total"] + values["jackpot_total"] - values["amount_collected"]) <= TOLERANCE


def test_default_split_values() -> None:
    split = calculate_split(100, 2.0, 40, 60)

    assert split.amount_collected == 200.0
    assert split.organization_total == pytest.approx(80.0)
    assert split.jackpot_total == pytest.approx(120.0)


def test_percentages_not_summing_to_hundred_are_reported() -> None:
    result = validate_ticket_sales_calculation(100, 2.0, 40, 55)

    assert not result.is_valid
    assert "Organization and jackpot percentages must sum to 100%" in result.errors
    assert "Organization and jackpot totals don't sum to amount collected" in result.errors


@pytest.mark.parametrize(
    "tickets_sold, ticket_price, organization_percentage, jackpot_percentage, expected",
    [
        (0, 2.0, 40, 60, "Tickets sold must be greater than 0"),
        (10, 0.0, 40, 60, "Ticket price must be greater than 0"),
        (10, 2.0, -10, 110, "Organization percentage must be between 0 and 100"),
        (10, 2.0, 110, -10, "Jackpot percentage must be between 0 and 100"),
    ],
)
def test_invalid_inputs_are_collected_not_raised(
    tickets_sold, ticket_price, organization_percentage, jackpot_percentage, expected
):
    result = validate_ticket_sales_calculation(tickets_sold, ticket_price, organization_percentage, jackpot_percentage)

    assert expected in result.errors
    assert set(result.calculated_values) == {"amount_collected", "organization_total", "jackpot_total"}


def test_unusual_values_only_warn() -> None:
    result = validate_ticket_sales_calculation(10001, 51.0, 40, 60)

    assert result.is_valid
    assert result.warnings == ["Unusually high number of tickets sold", "Unusually high ticket price"]


def _sale(sale_id: int, day: int, amount: float) -> TicketSale:
    return TicketSale(
        id=sale_id,
        sale_date=date(2024, 3, day),
        amount_collected=amount,
        organization_total=amount * 0.4,
        jackpot_total=amount * 0.6,
    )


def test_cumulative_collected_includes_carryover_and_earlier_days() -> None:
    history = [_sale(1, 1, 100.0), _sale(2, 2, 50.0), _sale(3, 5, 999.0)]

    total = cumulative_collected(history, date(2024, 3, 3), 20.0, carryover_jackpot=30.0)

    assert total == pytest.approx(200.0)


def test_cumulative_collected_skips_the_entry_being_replaced() -> None:
    history = [_sale(1, 1, 100.0), _sale(2, 2, 50.0)]

    total = cumulative_collected(history, date(2024, 3, 2), 80.0, exclude_sale_id=2)

    assert total == pytest.approx(180.0)
