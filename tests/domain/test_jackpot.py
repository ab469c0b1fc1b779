from datetime import date

import pytest

from queen_of_hearts.domain import (
    TERMINAL_CARD,
    Configuration,
    DomainValidationError,
    TicketSale,
    Week,
    calculate_displayed_jackpot,
    calculate_ending_jackpot_total,
    calculate_week_ending_jackpot,
    resolve_winner_payout,
    validate_jackpot_calculation,
)


def _sale(sale_id: int, week_id: int, jackpot_total: float) -> TicketSale:
    return TicketSale(
        id=sale_id,
        week_id=week_id,
        sale_date=date(2024, 3, sale_id),
        amount_collected=jackpot_total / 0.6,
        organization_total=jackpot_total / 0.6 * 0.4,
        jackpot_total=jackpot_total,
    )


@pytest.fixture
def sales() -> list[TicketSale]:
    return [_sale(1, 1, 120.0), _sale(2, 1, 60.0), _sale(3, 2, 90.0)]


@pytest.fixture
def weeks() -> list[Week]:
    return [
        Week(id=1, week_number=1, winner_name="Ann", card_selected="5 of Clubs", weekly_payout=25.0),
        Week(id=2, week_number=2),
    ]


def test_week_ending_jackpot_replays_full_history(sales, weeks) -> None:
    ending = calculate_week_ending_jackpot(sales, weeks, 50.0, week_id=2, weekly_payout=30.0)

    # 50 carryover + 270 contributions - 25 week one - 30 current
    assert ending == pytest.approx(265.0)


def test_week_ending_jackpot_is_idempotent(sales, weeks) -> None:
    first = calculate_week_ending_jackpot(sales, weeks, 50.0, 2, 30.0)
    second = calculate_week_ending_jackpot(sales, weeks, 50.0, 2, 30.0)

    assert first == second


def test_week_ending_jackpot_ignores_its_own_stored_payout(sales) -> None:
    weeks = [Week(id=1, week_number=1, winner_name="Ann", card_selected="5 of Clubs", weekly_payout=25.0)]

    ending = calculate_week_ending_jackpot(sales, weeks, 0.0, week_id=1, weekly_payout=40.0)

    assert ending == pytest.approx(230.0)


def test_week_ending_jackpot_never_negative(sales, weeks) -> None:
    assert calculate_week_ending_jackpot(sales, weeks, 0.0, 2, 10_000.0) == 0.0


def test_deprecated_alias_warns_and_delegates(sales, weeks) -> None:
    with pytest.warns(DeprecationWarning):
        ending = calculate_ending_jackpot_total(sales, weeks, 50.0, 2, 30.0)

    assert ending == calculate_week_ending_jackpot(sales, weeks, 50.0, 2, 30.0)


@pytest.mark.parametrize(
    "contributions, minimum, carryover, expected",
    [
        (300.0, 500.0, 0.0, 500.0),
        (300.0, 500.0, 100.0, 600.0),
        (800.0, 500.0, 0.0, 800.0),
        (800.0, 500.0, 200.0, 1000.0),
    ],
)
def test_displayed_jackpot(contributions, minimum, carryover, expected) -> None:
    assert calculate_displayed_jackpot(contributions, minimum, carryover) == pytest.approx(expected)


def test_jackpot_validation_warnings() -> None:
    result = validate_jackpot_calculation(100.0, 500.0, 300.0)

    assert result.is_valid
    assert result.warnings == [
        "Jackpot contributions below minimum threshold",
        "Carryover jackpot seems unusually high compared to contributions",
    ]
    assert result.calculated_values["displayed_jackpot"] == pytest.approx(800.0)


def test_jackpot_validation_rejects_negative_inputs() -> None:
    result = validate_jackpot_calculation(-1.0, -1.0, -1.0)

    assert len(result.errors) == 3


def test_terminal_card_pays_displayed_jackpot() -> None:
    assert resolve_winner_payout(TERMINAL_CARD, Configuration(), 1200.0, True) == pytest.approx(1200.0)


def test_absent_terminal_winner_pays_penalty() -> None:
    payout = resolve_winner_payout(TERMINAL_CARD, Configuration(penalty_percentage=10), 1000.0, False)

    assert payout == pytest.approx(900.0)


def test_other_cards_use_the_payout_table() -> None:
    configuration = Configuration()

    assert resolve_winner_payout("7 of Spades", configuration, 1000.0, True) == 25.0
    assert resolve_winner_payout("Joker", configuration, 1000.0, False) == 50.0


def test_unknown_card_is_rejected() -> None:
    with pytest.raises(DomainValidationError):
        resolve_winner_payout("Eleven of Cups", Configuration(), 1000.0, True)
