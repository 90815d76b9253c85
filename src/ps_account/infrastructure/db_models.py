"""SQLAlchemy ORM models for portfolios, holdings and trades.

These map to tables created by Alembic migrations.
DO NOT add/remove columns here without a corresponding migration.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, DateTime, Integer, Numeric, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from src.ps_common.database import Base


class PortfolioORM(Base):
    __tablename__ = "portfolios"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    available_balance: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    trades_remaining: Mapped[int] = mapped_column(Integer, nullable=False)
    total_value: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    season_pl: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    live_pl: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    todays_pl: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class HoldingORM(Base):
    __tablename__ = "holdings"
    __table_args__ = (UniqueConstraint("user_id", "account_book", "player_id"),)

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    account_book: Mapped[str] = mapped_column(String(10), nullable=False)
    player_id: Mapped[str] = mapped_column(String(64), nullable=False)
    player_name: Mapped[str] = mapped_column(String(128), nullable=False)
    shares: Mapped[int] = mapped_column(Integer, nullable=False)
    average_price: Mapped[Decimal] = mapped_column(Numeric(14, 6), nullable=False)
    current_price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    purchase_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class TradeORM(Base):
    __tablename__ = "trades"

    id: Mapped[str] = mapped_column(String(40), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    player_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    player_name: Mapped[str] = mapped_column(String(128), nullable=False)
    direction: Mapped[str] = mapped_column(String(4), nullable=False)
    order_kind: Mapped[str] = mapped_column(String(6), nullable=False)
    shares: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    account_book: Mapped[str] = mapped_column(String(10), nullable=False)
    status: Mapped[str] = mapped_column(String(10), nullable=False)
    multiplier: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    limit_order_id: Mapped[str | None] = mapped_column(String(40), nullable=True)
    executed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
