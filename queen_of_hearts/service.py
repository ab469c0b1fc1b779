from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, replace
from datetime import date

from queen_of_hearts.domain import (
    CalculationResult,
    Configuration,
    DomainValidationError,
    Expense,
    Game,
    GameSummary,
    JackpotLossResult,
    Payout,
    TicketSale,
    Week,
    calculate_game_jackpot_loss,
    calculate_split,
    calculate_week_ending_jackpot,
    cumulative_collected,
    ensure_contiguous_weeks,
    resolve_winner_payout,
    summarize_game,
    summarize_week,
    validate_game_totals,
    validate_jackpot_calculation,
    validate_ticket_sales_calculation,
)
from queen_of_hearts.services.audit_service import AuditReporter
from queen_of_hearts.storage.repository import LedgerRepository

logger = logging.getLogger(__name__)


class GameNotFoundError(LookupError):
    """Raised when a game id does not resolve to a stored game."""


class WeekNotFoundError(LookupError):
    """Raised when a week id does not resolve to a week of the game."""


class GameCompletedError(DomainValidationError):
    """Raised when a completed game would receive new weeks or winners."""


@dataclass
class DailyEntryResult:
    sale: TicketSale
    validation: CalculationResult


@dataclass
class WinnerResult:
    week: Week
    payout: float
    ending_jackpot: float
    game_completed: bool


@dataclass
class DisplayedJackpot:
    displayed_jackpot: float
    validation: CalculationResult


class LedgerService:
    def __init__(self, repo: LedgerRepository, reporter: AuditReporter) -> None:
        self.repo = repo
        self.reporter = reporter

    # --- configuration --------------------------------------------------------
    def get_configuration(self) -> Configuration:
        return self.repo.get_configuration()

    def update_configuration(self, **changes: object) -> Configuration:
        current = self.repo.get_configuration()
        return self.repo.save_configuration(replace(current, **changes))

    # --- games and weeks ------------------------------------------------------
    def start_game(
        self,
        name: str,
        *,
        ticket_price: float | None = None,
        organization_percentage: float | None = None,
        jackpot_percentage: float | None = None,
        minimum_starting_jackpot: float | None = None,
        carryover_jackpot: float | None = None,
        start_date: date | None = None,
    ) -> Game:
        config = self.repo.get_configuration()
        if carryover_jackpot is None:
            previous = self.repo.get_latest_completed_game()
            carryover_jackpot = previous.jackpot_contribution_to_next_game if previous else 0.0

        game = Game(
            name=name,
            game_number=self.repo.get_last_game_number() + 1,
            start_date=start_date or date.today(),
            ticket_price=ticket_price if ticket_price is not None else config.ticket_price,
            organization_percentage=(
                organization_percentage if organization_percentage is not None else config.organization_percentage
            ),
            jackpot_percentage=jackpot_percentage if jackpot_percentage is not None else config.jackpot_percentage,
            minimum_starting_jackpot=(
                minimum_starting_jackpot if minimum_starting_jackpot is not None else config.minimum_starting_jackpot
            ),
            carryover_jackpot=carryover_jackpot,
        )
        game_id = self.repo.create_game(game)
        logger.info("started game %s (#%s) with carryover %.2f", game_id, game.game_number, carryover_jackpot)
        return self._game_or_raise(game_id)

    def get_game(self, game_id: int) -> Game:
        return self._game_or_raise(game_id)

    def get_game_totals(self, game_id: int) -> dict[str, float | int | None]:
        self._game_or_raise(game_id)
        return self.repo.get_game_totals(game_id)

    def list_weeks(self, game_id: int) -> list[Week]:
        self._game_or_raise(game_id)
        return self.repo.list_weeks(game_id)

    def add_week(self, game_id: int, start_date: date, end_date: date | None = None) -> Week:
        game = self._game_or_raise(game_id)
        if game.is_completed:
            raise GameCompletedError(f"game {game_id} is already completed")
        week = self.repo.create_week(game_id, start_date, end_date)
        logger.info("game %s: created week %s", game_id, week.week_number)
        return week

    # --- entries --------------------------------------------------------------
    def record_daily_entry(
        self,
        game_id: int,
        week_id: int,
        sale_date: date,
        tickets_sold: int,
    ) -> DailyEntryResult:
        """Split a day's sales and store them, replacing any entry for that day.

        The split is validated and audited; a failed validation is returned
        alongside the stored entry rather than blocking the write.
        """
        game = self._game_or_raise(game_id)
        week = self._week_or_raise(game_id, week_id)

        audited = self.reporter.run(
            "ticket_sales_calculation",
            {
                "tickets_sold": tickets_sold,
                "ticket_price": game.ticket_price,
                "organization_percentage": game.organization_percentage,
                "jackpot_percentage": game.jackpot_percentage,
            },
            lambda: calculate_split(
                tickets_sold, game.ticket_price, game.organization_percentage, game.jackpot_percentage
            ),
            lambda split: validate_ticket_sales_calculation(
                tickets_sold, game.ticket_price, game.organization_percentage, game.jackpot_percentage
            ),
            game_id=game_id,
            week_id=week_id,
        )
        split = audited.result

        history = self.repo.list_sales(game_id)
        existing = next(
            (sale for sale in history if sale.week_id == week.id and sale.sale_date == sale_date),
            None,
        )
        sale = TicketSale(
            game_id=game_id,
            week_id=week.id,
            sale_date=sale_date,
            tickets_sold=tickets_sold,
            ticket_price=game.ticket_price,
            amount_collected=split.amount_collected,
            organization_total=split.organization_total,
            jackpot_total=split.jackpot_total,
            cumulative_collected=cumulative_collected(
                history,
                sale_date,
                split.amount_collected,
                carryover_jackpot=game.carryover_jackpot,
                exclude_sale_id=existing.id if existing else None,
            ),
        )
        stored = self.repo.save_sale(sale)

        self.update_week_totals(game_id, week.id)
        self.update_game_totals(game_id)
        return DailyEntryResult(sale=stored, validation=audited.validation)

    def add_expense(
        self,
        game_id: int,
        amount: float,
        *,
        is_donation: bool = False,
        description: str = "",
        expense_date: date | None = None,
    ) -> Expense:
        self._game_or_raise(game_id)
        expense = self.repo.add_expense(
            Expense(
                game_id=game_id,
                amount=amount,
                is_donation=is_donation,
                description=description,
                expense_date=expense_date,
            )
        )
        self.update_game_totals(game_id)
        return expense

    # --- jackpot --------------------------------------------------------------
    def calculate_week_ending_jackpot(self, game_id: int, week_id: int, weekly_payout: float) -> float:
        game = self._game_or_raise(game_id)
        self._week_or_raise(game_id, week_id)

        audited = self.reporter.run(
            "week_ending_jackpot",
            {
                "carryover_jackpot": game.carryover_jackpot,
                "weekly_payout": weekly_payout,
            },
            lambda: calculate_week_ending_jackpot(
                self.repo.list_sales(game_id),
                self.repo.list_weeks(game_id, with_winner=True),
                game.carryover_jackpot,
                week_id,
                weekly_payout,
            ),
            game_id=game_id,
            week_id=week_id,
        )
        return audited.result

    def calculate_ending_jackpot_total(self, game_id: int, week_id: int, weekly_payout: float) -> float:
        """Backward-compatible alias."""
        warnings.warn(
            "calculate_ending_jackpot_total is deprecated, use calculate_week_ending_jackpot",
            DeprecationWarning,
            stacklevel=2,
        )
        return self.calculate_week_ending_jackpot(game_id, week_id, weekly_payout)

    def displayed_jackpot(self, game_id: int, *, exclude_week_id: int | None = None) -> DisplayedJackpot:
        """Jackpot a viewer is told about: accrued contributions net of paid winners, floored at the minimum."""
        game = self._game_or_raise(game_id)

        def evaluate() -> CalculationResult:
            paid = sum(
                week.weekly_payout
                for week in self.repo.list_weeks(game_id, with_winner=True)
                if week.id != exclude_week_id
            )
            contributions = max(0.0, sum(sale.jackpot_total for sale in self.repo.list_sales(game_id)) - paid)
            return validate_jackpot_calculation(contributions, game.minimum_starting_jackpot, game.carryover_jackpot)

        audited = self.reporter.run(
            "displayed_jackpot",
            {
                "minimum_jackpot": game.minimum_starting_jackpot,
                "carryover_jackpot": game.carryover_jackpot,
                "exclude_week_id": exclude_week_id,
            },
            evaluate,
            lambda result: result,
            game_id=game_id,
        )
        return DisplayedJackpot(
            displayed_jackpot=audited.result.calculated_values["displayed_jackpot"],
            validation=audited.validation,
        )

    def declare_winner(
        self,
        game_id: int,
        week_id: int,
        *,
        winner_name: str,
        card_selected: str,
        slot_chosen: int | None = None,
        winner_present: bool = True,
        authorized_signature_name: str | None = None,
    ) -> WinnerResult:
        game = self._game_or_raise(game_id)
        if game.is_completed:
            raise GameCompletedError(f"game {game_id} is already completed")
        week = self._week_or_raise(game_id, week_id)
        if not winner_name.strip():
            raise DomainValidationError("winner_name must be non-empty")

        payout = resolve_winner_payout(
            card_selected,
            self.repo.get_configuration(),
            self.displayed_jackpot(game_id, exclude_week_id=week_id).displayed_jackpot,
            winner_present,
        )
        ending_jackpot = self.calculate_week_ending_jackpot(game_id, week_id, payout)

        updated = replace(
            week,
            winner_name=winner_name.strip(),
            card_selected=card_selected,
            slot_chosen=slot_chosen,
            winner_present=winner_present,
            authorized_signature_name=authorized_signature_name,
            weekly_payout=payout,
            ending_jackpot=ending_jackpot,
        )
        self.repo.save_winner(updated)
        self.repo.save_week_ending_on_last_sale(week_id, payout, ending_jackpot)

        if updated.is_terminal:
            self.repo.set_game_end_date(game_id, date.today())
            logger.info("game %s: terminal card drawn in week %s", game_id, week.week_number)
        self.update_game_totals(game_id, force=True)
        return WinnerResult(
            week=updated,
            payout=payout,
            ending_jackpot=ending_jackpot,
            game_completed=updated.is_terminal,
        )

    def calculate_game_jackpot_loss(
        self,
        game_id: int,
        minimum_starting_jackpot: float | None = None,
    ) -> JackpotLossResult:
        game = self._game_or_raise(game_id)
        minimum = game.minimum_starting_jackpot if minimum_starting_jackpot is None else minimum_starting_jackpot

        audited = self.reporter.run(
            "game_jackpot_loss",
            {
                "carryover_jackpot": game.carryover_jackpot,
                "minimum_starting_jackpot": minimum,
            },
            lambda: calculate_game_jackpot_loss(
                ensure_contiguous_weeks(self.repo.list_weeks(game_id)),
                self.repo.list_sales(game_id),
                game.carryover_jackpot,
                minimum,
            ),
            game_id=game_id,
        )
        return audited.result

    # --- totals ---------------------------------------------------------------
    def reconcile_game(self, game_id: int) -> CalculationResult:
        """Validate a game's totals, keeping organization-funded payouts out of the check.

        The terminal winner may be paid from carryover and the guaranteed
        minimum as well as from contributions. Only the part drawn from what
        is left of this game's contributions counts as a payout here; the
        rest is reported as ``organization_covered_payout`` next to
        ``jackpot_shortfall_covered``.
        """
        game = self._game_or_raise(game_id)

        def reconcile() -> CalculationResult:
            weeks = ensure_contiguous_weeks(self.repo.list_weeks(game_id))
            sales = self.repo.list_sales(game_id)
            expenses = self.repo.list_expenses(game_id)
            loss = calculate_game_jackpot_loss(weeks, sales, game.carryover_jackpot, game.minimum_starting_jackpot)

            contributions = sum(sale.jackpot_total for sale in sales)
            remaining = contributions - sum(week.weekly_payout for week in weeks if not week.is_terminal)
            payouts = []
            covered = 0.0
            for week in weeks:
                if week.weekly_payout <= 0:
                    continue
                funded = week.weekly_payout
                if week.is_terminal:
                    funded = min(week.weekly_payout, max(0.0, remaining))
                    covered += week.weekly_payout - funded
                payouts.append(Payout(week_id=week.id, weekly_payout=funded))

            result = validate_game_totals(sales, expenses, payouts)
            result.calculated_values["jackpot_shortfall_covered"] = loss.total_jackpot_loss
            result.calculated_values["organization_covered_payout"] = covered
            return result

        audited = self.reporter.run(
            "game_totals",
            {
                "carryover_jackpot": game.carryover_jackpot,
                "minimum_starting_jackpot": game.minimum_starting_jackpot,
            },
            reconcile,
            lambda result: result,
            game_id=game_id,
        )
        return audited.result

    def update_week_totals(self, game_id: int, week_id: int) -> None:
        totals = summarize_week(self.repo.list_sales(game_id, week_id=week_id))
        self.repo.save_week_totals(week_id, totals)

    def update_game_totals(self, game_id: int, *, force: bool = False) -> GameSummary | None:
        game = self._game_or_raise(game_id)
        if game.is_completed and not force:
            logger.info("skipping totals update for completed game %s", game_id)
            return None

        summary = summarize_game(
            game,
            self.repo.list_weeks(game_id),
            self.repo.list_sales(game_id),
            self.repo.list_expenses(game_id),
        )
        self.repo.save_game_totals(game_id, summary)
        return summary

    def complete_game(
        self,
        game_id: int,
        contribution_to_next_game: float = 0.0,
        end_date: date | None = None,
    ) -> Game:
        """Close a game and carry its contribution into the next game, if one exists.

        When the next game has not been created yet, ``start_game`` picks the
        contribution up as its default carryover.
        """
        game = self._game_or_raise(game_id)
        if contribution_to_next_game < 0:
            raise DomainValidationError("contribution_to_next_game cannot be negative")

        self.repo.complete_game(game_id, end_date or game.end_date or date.today(), contribution_to_next_game)
        if contribution_to_next_game > 0:
            next_game = self.repo.get_game_by_number(game.game_number + 1)
            if next_game is not None and next_game.id is not None:
                self.repo.add_carryover(next_game.id, contribution_to_next_game)
                logger.info(
                    "game %s: carried %.2f into game %s", game_id, contribution_to_next_game, next_game.id
                )
        self.update_game_totals(game_id, force=True)
        return self._game_or_raise(game_id)

    # --- helpers --------------------------------------------------------------
    def _game_or_raise(self, game_id: int) -> Game:
        game = self.repo.get_game(game_id)
        if game is None:
            raise GameNotFoundError(f"game {game_id} not found")
        return game

    def _week_or_raise(self, game_id: int, week_id: int) -> Week:
        week = self.repo.get_week(week_id)
        if week is None or week.game_id != game_id:
            raise WeekNotFoundError(f"week {week_id} not found in game {game_id}")
        return week
