# backend/holdings_ledger/models.py
import enum
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Date, DateTime, ForeignKey, Enum, Numeric, Boolean, Text, Index
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    # Persist the wire value ("RealEstate"), not the member name ("REAL_ESTATE")
    return [member.value for member in enum_cls]


# Closed enumerations. Strings are decoded only in schemas/validators.py.
class HoldingCategory(str, enum.Enum):
    STOCKS = "Stocks"
    BONDS = "Bonds"
    REAL_ESTATE = "RealEstate"
    CRYPTO = "Crypto"
    MUTUAL_FUNDS = "MutualFunds"
    OTHER = "Other"


class HoldingStatus(str, enum.Enum):
    ACTIVE = "Active"
    SOLD = "Sold"
    ON_HOLD = "OnHold"


class TransactionType(str, enum.Enum):
    """
    Ledger event kinds and how replay applies them:

        BUY    value += amount
        SELL   value -= amount
        UPDATE value  = amount (absolute reset)
    """
    BUY = "Buy"
    SELL = "Sell"
    UPDATE = "Update"


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    display_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    portfolios: Mapped[list["Portfolio"]] = relationship(back_populates="owner")
    holdings: Mapped[list["Holding"]] = relationship(back_populates="owner")


class Portfolio(Base):
    __tablename__ = "portfolios"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    name: Mapped[str] = mapped_column(String(100), default="Default Portfolio")
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    owner: Mapped["User"] = relationship(back_populates="portfolios")
    holdings: Mapped[list["Holding"]] = relationship(back_populates="portfolio")


class Holding(Base):
    """
    One investable position.

    `current_value` is a cached projection of the ledger: the transaction
    service recomputes it by full replay whenever a transaction is posted.
    Rows are soft-deleted so historical replay keeps working.
    """
    __tablename__ = "holdings"
    __table_args__ = (
        Index('ix_holding_user_status', 'user_id', 'status'),
        Index('ix_holding_user_purchase_date', 'user_id', 'purchase_date'),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    portfolio_id: Mapped[int | None] = mapped_column(ForeignKey("portfolios.id"), nullable=True, index=True)

    name: Mapped[str] = mapped_column(String(200))
    category: Mapped[HoldingCategory] = mapped_column(
        Enum(HoldingCategory, name="holding_category", values_callable=_enum_values)
    )
    status: Mapped[HoldingStatus] = mapped_column(
        Enum(HoldingStatus, name="holding_status", values_callable=_enum_values),
        default=HoldingStatus.ACTIVE,
    )

    initial_amount: Mapped[Decimal] = mapped_column(Numeric(18, 4))
    current_value: Mapped[Decimal] = mapped_column(Numeric(18, 4))
    quantity: Mapped[Decimal | None] = mapped_column(Numeric(18, 8), nullable=True)
    average_price_per_unit: Mapped[Decimal | None] = mapped_column(Numeric(18, 8), nullable=True)

    purchase_date: Mapped[date] = mapped_column(Date)
    broker_platform: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    owner: Mapped["User"] = relationship(back_populates="holdings")
    portfolio: Mapped["Portfolio | None"] = relationship(back_populates="holdings")
    transactions: Mapped[list["Transaction"]] = relationship(back_populates="holding")


class Transaction(Base):
    """Append-only ledger entry. Never updated or deleted once posted."""
    __tablename__ = "transactions"
    __table_args__ = (
        Index('ix_transaction_holding_date', 'holding_id', 'transaction_date'),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    holding_id: Mapped[int] = mapped_column(ForeignKey("holdings.id"), index=True)
    transaction_type: Mapped[TransactionType] = mapped_column(
        Enum(TransactionType, name="transaction_type", values_callable=_enum_values)
    )

    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 8))
    price_per_unit: Mapped[Decimal] = mapped_column(Numeric(18, 8))
    # quantity * price_per_unit; for UPDATE this is the new absolute value
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 4))

    transaction_date: Mapped[date] = mapped_column(Date, index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)  # When it was recorded

    holding: Mapped["Holding"] = relationship(back_populates="transactions")
