from __future__ import annotations

from datetime import date, datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from queen_of_hearts import domain
from queen_of_hearts.storage import models


class LedgerRepository:
    """Reads and writes ledger rows, handing domain records to the service."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    # --- configuration --------------------------------------------------------
    def get_configuration(self) -> domain.Configuration:
        with self._session_factory() as db:
            row = db.scalars(select(models.Configuration).order_by(models.Configuration.id).limit(1)).first()
            if row is None:
                return domain.Configuration()
            return _configuration_record(row)

    def save_configuration(self, configuration: domain.Configuration) -> domain.Configuration:
        with self._session_factory() as db:
            row = db.scalars(select(models.Configuration).order_by(models.Configuration.id).limit(1)).first()
            if row is None:
                row = models.Configuration(version=configuration.version + 1)
                db.add(row)
            else:
                row.version = (row.version or 1) + 1
            row.ticket_price = configuration.ticket_price
            row.organization_percentage = configuration.organization_percentage
            row.jackpot_percentage = configuration.jackpot_percentage
            row.minimum_starting_jackpot = configuration.minimum_starting_jackpot
            row.penalty_percentage = configuration.penalty_percentage
            row.penalty_to_organization = configuration.penalty_to_organization
            row.card_payouts = dict(configuration.card_payouts)
            row.updated_at = datetime.utcnow()
            db.commit()
            db.refresh(row)
            return _configuration_record(row)

    # --- games ----------------------------------------------------------------
    def create_game(self, game: domain.Game) -> int:
        with self._session_factory() as db:
            row = models.Game(
                name=game.name,
                game_number=game.game_number,
                start_date=game.start_date or date.today(),
                ticket_price=game.ticket_price,
                organization_percentage=game.organization_percentage,
                jackpot_percentage=game.jackpot_percentage,
                carryover_jackpot=game.carryover_jackpot,
                minimum_starting_jackpot=game.minimum_starting_jackpot,
            )
            db.add(row)
            db.commit()
            return row.id

    def get_game(self, game_id: int) -> domain.Game | None:
        with self._session_factory() as db:
            row = db.get(models.Game, game_id)
            return _game_record(row) if row is not None else None

    def get_game_by_number(self, game_number: int) -> domain.Game | None:
        with self._session_factory() as db:
            row = db.scalars(select(models.Game).where(models.Game.game_number == game_number)).first()
            return _game_record(row) if row is not None else None

    def get_last_game_number(self) -> int:
        with self._session_factory() as db:
            value = db.execute(select(func.max(models.Game.game_number))).scalar()
            return int(value or 0)

    def get_latest_completed_game(self) -> domain.Game | None:
        with self._session_factory() as db:
            row = db.scalars(
                select(models.Game)
                .where(models.Game.end_date.is_not(None))
                .order_by(models.Game.game_number.desc())
                .limit(1)
            ).first()
            return _game_record(row) if row is not None else None

    def get_game_totals(self, game_id: int) -> dict[str, float | int | None]:
        with self._session_factory() as db:
            row = db.get(models.Game, game_id)
            if row is None:
                raise ValueError("game not found")
            return {name: getattr(row, name) for name in _GAME_TOTAL_FIELDS}

    def save_game_totals(self, game_id: int, summary: domain.GameSummary) -> None:
        with self._session_factory() as db:
            row = db.get(models.Game, game_id)
            if row is None:
                raise ValueError("game not found")
            values = summary.to_dict()
            for name in _GAME_TOTAL_FIELDS:
                setattr(row, name, values[name])
            db.commit()

    def complete_game(self, game_id: int, end_date: date, contribution_to_next_game: float) -> None:
        with self._session_factory() as db:
            row = db.get(models.Game, game_id)
            if row is None:
                raise ValueError("game not found")
            row.end_date = end_date
            row.jackpot_contribution_to_next_game = contribution_to_next_game
            db.commit()

    def set_game_end_date(self, game_id: int, end_date: date) -> None:
        with self._session_factory() as db:
            row = db.get(models.Game, game_id)
            if row is None:
                raise ValueError("game not found")
            row.end_date = end_date
            db.commit()

    def add_carryover(self, game_id: int, amount: float) -> None:
        with self._session_factory() as db:
            row = db.get(models.Game, game_id)
            if row is None:
                raise ValueError("game not found")
            row.carryover_jackpot = (row.carryover_jackpot or 0) + amount
            db.commit()

    # --- weeks ----------------------------------------------------------------
    def create_week(self, game_id: int, start_date: date, end_date: date | None = None) -> domain.Week:
        with self._session_factory() as db:
            last_number = db.execute(
                select(func.max(models.Week.week_number)).where(models.Week.game_id == game_id)
            ).scalar()
            row = models.Week(
                game_id=game_id,
                week_number=int(last_number or 0) + 1,
                start_date=start_date,
                end_date=end_date or start_date + timedelta(days=6),
            )
            db.add(row)
            db.commit()
            db.refresh(row)
            return _week_record(row)

    def get_week(self, week_id: int) -> domain.Week | None:
        with self._session_factory() as db:
            row = db.get(models.Week, week_id)
            return _week_record(row) if row is not None else None

    def list_weeks(self, game_id: int, *, with_winner: bool = False) -> list[domain.Week]:
        with self._session_factory() as db:
            query = select(models.Week).where(models.Week.game_id == game_id)
            if with_winner:
                query = query.where(models.Week.winner_name.is_not(None))
            rows = db.scalars(query.order_by(models.Week.week_number)).all()
            return [_week_record(row) for row in rows]

    def save_week_totals(self, week_id: int, totals: domain.WeekTotals) -> None:
        with self._session_factory() as db:
            row = db.get(models.Week, week_id)
            if row is None:
                raise ValueError("week not found")
            row.weekly_sales = totals.weekly_sales
            row.weekly_tickets_sold = totals.weekly_tickets_sold
            db.commit()

    def save_winner(self, week: domain.Week) -> None:
        with self._session_factory() as db:
            row = db.get(models.Week, week.id)
            if row is None:
                raise ValueError("week not found")
            row.winner_name = week.winner_name
            row.card_selected = week.card_selected
            row.slot_chosen = week.slot_chosen
            row.winner_present = week.winner_present
            row.authorized_signature_name = week.authorized_signature_name
            row.weekly_payout = week.weekly_payout
            row.ending_jackpot = week.ending_jackpot
            db.commit()

    # --- ticket sales ---------------------------------------------------------
    def list_sales(self, game_id: int, *, week_id: int | None = None) -> list[domain.TicketSale]:
        with self._session_factory() as db:
            query = select(models.TicketSale).where(models.TicketSale.game_id == game_id)
            if week_id is not None:
                query = query.where(models.TicketSale.week_id == week_id)
            rows = db.scalars(query.order_by(models.TicketSale.sale_date, models.TicketSale.id)).all()
            return [_sale_record(row) for row in rows]

    def save_sale(self, sale: domain.TicketSale) -> domain.TicketSale:
        """Insert the entry, or overwrite the one already recorded for that day."""
        with self._session_factory() as db:
            row = db.scalars(
                select(models.TicketSale).where(
                    models.TicketSale.week_id == sale.week_id,
                    models.TicketSale.sale_date == sale.sale_date,
                )
            ).first()
            if row is None:
                row = models.TicketSale(game_id=sale.game_id, week_id=sale.week_id, sale_date=sale.sale_date)
                db.add(row)
            row.tickets_sold = sale.tickets_sold
            row.ticket_price = sale.ticket_price
            row.amount_collected = sale.amount_collected
            row.organization_total = sale.organization_total
            row.jackpot_total = sale.jackpot_total
            row.cumulative_collected = sale.cumulative_collected
            row.ending_jackpot_total = sale.ending_jackpot_total
            db.commit()
            db.refresh(row)
            return _sale_record(row)

    def save_week_ending_on_last_sale(self, week_id: int, payout: float, ending_jackpot: float) -> None:
        with self._session_factory() as db:
            row = db.scalars(
                select(models.TicketSale)
                .where(models.TicketSale.week_id == week_id)
                .order_by(models.TicketSale.sale_date.desc(), models.TicketSale.id.desc())
                .limit(1)
            ).first()
            if row is None:
                return
            row.weekly_payout_amount = payout
            row.ending_jackpot_total = ending_jackpot
            db.commit()

    # --- expenses -------------------------------------------------------------
    def add_expense(self, expense: domain.Expense) -> domain.Expense:
        with self._session_factory() as db:
            row = models.Expense(
                game_id=expense.game_id,
                expense_date=expense.expense_date or date.today(),
                amount=expense.amount,
                is_donation=expense.is_donation,
                memo=expense.description,
            )
            db.add(row)
            db.commit()
            db.refresh(row)
            return _expense_record(row)

    def list_expenses(self, game_id: int) -> list[domain.Expense]:
        with self._session_factory() as db:
            rows = db.scalars(
                select(models.Expense).where(models.Expense.game_id == game_id).order_by(models.Expense.id)
            ).all()
            return [_expense_record(row) for row in rows]


_GAME_TOTAL_FIELDS = (
    "total_sales",
    "total_payouts",
    "total_expenses",
    "total_donations",
    "organization_net_profit",
    "actual_organization_net_profit",
    "weekly_payouts_distributed",
    "final_jackpot_payout",
    "total_jackpot_contributions",
    "net_available_for_final_winner",
    "jackpot_shortfall_covered",
    "game_duration_weeks",
)


def _configuration_record(row: models.Configuration) -> domain.Configuration:
    return domain.Configuration(
        ticket_price=row.ticket_price,
        organization_percentage=row.organization_percentage,
        jackpot_percentage=row.jackpot_percentage,
        minimum_starting_jackpot=row.minimum_starting_jackpot,
        penalty_percentage=row.penalty_percentage,
        penalty_to_organization=row.penalty_to_organization,
        card_payouts=dict(row.card_payouts or {}),
        version=row.version or 1,
    )


def _game_record(row: models.Game) -> domain.Game:
    return domain.Game(
        id=row.id,
        name=row.name,
        game_number=row.game_number,
        start_date=row.start_date,
        end_date=row.end_date,
        ticket_price=row.ticket_price,
        organization_percentage=row.organization_percentage,
        jackpot_percentage=row.jackpot_percentage,
        carryover_jackpot=row.carryover_jackpot or 0.0,
        minimum_starting_jackpot=(
            row.minimum_starting_jackpot
            if row.minimum_starting_jackpot is not None
            else domain.DEFAULT_MINIMUM_STARTING_JACKPOT
        ),
        jackpot_contribution_to_next_game=row.jackpot_contribution_to_next_game or 0.0,
    )


def _week_record(row: models.Week) -> domain.Week:
    return domain.Week(
        id=row.id,
        game_id=row.game_id,
        week_number=row.week_number,
        start_date=row.start_date,
        end_date=row.end_date,
        weekly_sales=row.weekly_sales or 0.0,
        weekly_tickets_sold=row.weekly_tickets_sold or 0,
        weekly_payout=row.weekly_payout or 0.0,
        ending_jackpot=row.ending_jackpot,
        winner_name=row.winner_name,
        card_selected=row.card_selected,
        slot_chosen=row.slot_chosen,
        winner_present=row.winner_present,
        authorized_signature_name=row.authorized_signature_name,
    )


def _sale_record(row: models.TicketSale) -> domain.TicketSale:
    return domain.TicketSale(
        id=row.id,
        game_id=row.game_id,
        week_id=row.week_id,
        sale_date=row.sale_date,
        tickets_sold=row.tickets_sold,
        ticket_price=row.ticket_price,
        amount_collected=row.amount_collected,
        organization_total=row.organization_total,
        jackpot_total=row.jackpot_total,
        cumulative_collected=row.cumulative_collected,
        ending_jackpot_total=row.ending_jackpot_total,
    )


def _expense_record(row: models.Expense) -> domain.Expense:
    return domain.Expense(
        id=row.id,
        game_id=row.game_id,
        expense_date=row.expense_date,
        amount=row.amount,
        is_donation=row.is_donation,
        description=row.memo,
    )
