from datetime import date, datetime

from sqlalchemy import JSON, Boolean, Date, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from queen_of_hearts.storage.database import Base


class Game(Base):
    __tablename__ = "games"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    game_number: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)
    ticket_price: Mapped[float] = mapped_column(Float, nullable=False)
    organization_percentage: Mapped[float] = mapped_column(Float, nullable=False, default=40)
    jackpot_percentage: Mapped[float] = mapped_column(Float, nullable=False, default=60)
    carryover_jackpot: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    minimum_starting_jackpot: Mapped[float] = mapped_column(Float, nullable=False, default=500)
    jackpot_contribution_to_next_game: Mapped[float] = mapped_column(Float, nullable=False, default=0)

    total_sales: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    total_payouts: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    total_expenses: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    total_donations: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    organization_net_profit: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    actual_organization_net_profit: Mapped[float | None] = mapped_column(Float, nullable=True)
    weekly_payouts_distributed: Mapped[float | None] = mapped_column(Float, nullable=True)
    final_jackpot_payout: Mapped[float | None] = mapped_column(Float, nullable=True)
    total_jackpot_contributions: Mapped[float | None] = mapped_column(Float, nullable=True)
    net_available_for_final_winner: Mapped[float | None] = mapped_column(Float, nullable=True)
    jackpot_shortfall_covered: Mapped[float | None] = mapped_column(Float, nullable=True)
    game_duration_weeks: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    weeks: Mapped[list["Week"]] = relationship(back_populates="game", cascade="all, delete-orphan")
    ticket_sales: Mapped[list["TicketSale"]] = relationship(back_populates="game", cascade="all, delete-orphan")
    expenses: Mapped[list["Expense"]] = relationship(back_populates="game", cascade="all, delete-orphan")


class Week(Base):
    __tablename__ = "weeks"
    __table_args__ = (UniqueConstraint("game_id", "week_number", name="uq_weeks_game_week_number"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id"), nullable=False, index=True)
    week_number: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    weekly_sales: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    weekly_tickets_sold: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    weekly_payout: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    ending_jackpot: Mapped[float | None] = mapped_column(Float, nullable=True)
    winner_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    card_selected: Mapped[str | None] = mapped_column(String(64), nullable=True)
    slot_chosen: Mapped[int | None] = mapped_column(Integer, nullable=True)
    winner_present: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    authorized_signature_name: Mapped[str | None] = mapped_column(String(128), nullable=True)

    game: Mapped[Game] = relationship(back_populates="weeks")
    ticket_sales: Mapped[list["TicketSale"]] = relationship(back_populates="week")


class TicketSale(Base):
    __tablename__ = "ticket_sales"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id"), nullable=False, index=True)
    week_id: Mapped[int] = mapped_column(ForeignKey("weeks.id"), nullable=False, index=True)
    sale_date: Mapped[date] = mapped_column("date", Date, nullable=False, index=True)
    tickets_sold: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ticket_price: Mapped[float] = mapped_column(Float, nullable=False)
    amount_collected: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    cumulative_collected: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    organization_total: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    jackpot_total: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    ending_jackpot_total: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    weekly_payout_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0)

    game: Mapped[Game] = relationship(back_populates="ticket_sales")
    week: Mapped[Week] = relationship(back_populates="ticket_sales")


class Expense(Base):
    __tablename__ = "expenses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id"), nullable=False, index=True)
    expense_date: Mapped[date] = mapped_column("date", Date, nullable=False, default=date.today)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    is_donation: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    memo: Mapped[str] = mapped_column(Text, nullable=False, default="")

    game: Mapped[Game] = relationship(back_populates="expenses")


class Configuration(Base):
    __tablename__ = "configurations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    ticket_price: Mapped[float] = mapped_column(Float, nullable=False)
    organization_percentage: Mapped[float] = mapped_column(Float, nullable=False)
    jackpot_percentage: Mapped[float] = mapped_column(Float, nullable=False)
    minimum_starting_jackpot: Mapped[float] = mapped_column(Float, nullable=False)
    penalty_percentage: Mapped[float] = mapped_column(Float, nullable=False)
    penalty_to_organization: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    card_payouts: Mapped[dict] = mapped_column(JSON, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class AuditLog(Base):
    __tablename__ = "audit_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    operation: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    inputs: Mapped[dict] = mapped_column(JSON, nullable=False)
    outputs: Mapped[dict] = mapped_column(JSON, nullable=False)
    timestamp: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    game_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    week_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
