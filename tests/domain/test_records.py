from datetime import date

import pytest

from queen_of_hearts.domain import (
    JACKPOT_PAYOUT,
    TERMINAL_CARD,
    CalculationResult,
    Configuration,
    DomainValidationError,
    Expense,
    Game,
    TicketSale,
    Week,
    ensure_contiguous_weeks,
)


@pytest.mark.parametrize(
    "organization_percentage, jackpot_percentage",
    [(40, 55), (-5, 105), (101, -1)],
)
def test_game_rejects_bad_percentages(organization_percentage, jackpot_percentage) -> None:
    with pytest.raises(DomainValidationError):
        Game(organization_percentage=organization_percentage, jackpot_percentage=jackpot_percentage, ticket_price=2)


def test_game_completion_follows_end_date() -> None:
    game = Game(organization_percentage=40, jackpot_percentage=60, ticket_price=2)

    assert not game.is_completed
    assert Game(organization_percentage=40, jackpot_percentage=60, ticket_price=2, end_date=date(2024, 5, 1)).is_completed


def test_records_reject_negative_amounts() -> None:
    with pytest.raises(DomainValidationError):
        TicketSale(tickets_sold=-1, amount_collected=0, organization_total=0, jackpot_total=0)
    with pytest.raises(DomainValidationError):
        Expense(amount=0)
    with pytest.raises(DomainValidationError):
        Week(week_number=0)


def test_week_winner_flags() -> None:
    week = Week(week_number=3, winner_name="Ann", card_selected=TERMINAL_CARD)

    assert week.has_winner
    assert week.is_terminal
    assert not Week(week_number=1).has_winner


def test_default_card_payouts() -> None:
    payouts = Configuration().card_payouts

    assert payouts[TERMINAL_CARD] == JACKPOT_PAYOUT
    assert payouts["10 of Diamonds"] == 25.0
    assert payouts["Queen of Spades"] == 40.0
    assert len(payouts) == 53


def test_configuration_rejects_bad_card_payout() -> None:
    with pytest.raises(DomainValidationError):
        Configuration(card_payouts={"Joker": -5})


def test_calculation_result_to_dict() -> None:
    result = CalculationResult(errors=["bad"], calculated_values={"x": 1.0})

    assert result.to_dict() == {
        "is_valid": False,
        "errors": ["bad"],
        "warnings": [],
        "calculated_values": {"x": 1.0},
    }


def test_contiguous_weeks_are_ordered() -> None:
    ordered = ensure_contiguous_weeks([Week(week_number=2), Week(week_number=1)])

    assert [week.week_number for week in ordered] == [1, 2]


def test_week_gaps_are_rejected() -> None:
    with pytest.raises(DomainValidationError):
        ensure_contiguous_weeks([Week(week_number=1), Week(week_number=3)])
