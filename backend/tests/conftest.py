# backend/tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Database session fixtures (in-memory SQLite)
- API client with the database dependency overridden
- Sample data factories (users, portfolios, holdings, ledger entries)
- Plain record types for engine tests that need no database
"""

import os

# Test mode: SQLite, test JWT secret, rate limiting off. Must precede app imports.
os.environ.setdefault("ENVIRONMENT", "test")

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from holdings_ledger.database import get_db
from holdings_ledger.main import app
from holdings_ledger.models import (
    Base,
    Holding,
    HoldingCategory,
    HoldingStatus,
    Portfolio,
    Transaction,
    TransactionType,
    User,
)
from holdings_ledger.services.auth.jwt_handler import JWTHandler


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def db(db_engine) -> Iterator[Session]:
    """Create a database session for testing."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(scope="function")
def client(db: Session) -> Iterator[TestClient]:
    """TestClient sharing the test session through the get_db override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


# =============================================================================
# PLAIN RECORDS (engine tests, no database)
# =============================================================================

@dataclass
class HoldingRec:
    """Minimal holding shape read by the valuation and analytics engines."""
    id: int
    initial_amount: Decimal
    purchase_date: date
    current_value: Decimal | None = None
    name: str = "Holding"
    category: HoldingCategory = HoldingCategory.STOCKS
    status: HoldingStatus = HoldingStatus.ACTIVE
    is_deleted: bool = False

    def __post_init__(self):
        if self.current_value is None:
            self.current_value = self.initial_amount


@dataclass
class TxnRec:
    """Minimal ledger entry shape."""
    id: int
    holding_id: int
    transaction_type: TransactionType
    amount: Decimal
    transaction_date: date


# =============================================================================
# SAMPLE DATA FACTORIES
# =============================================================================

def create_user(
        db: Session,
        email: str = "test@example.com",
        is_active: bool = True,
) -> User:
    """Factory function for creating User entities in the database."""
    user = User(email=email, is_active=is_active)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_portfolio(
        db: Session,
        user: User,
        name: str = "Test Portfolio",
        is_default: bool = False,
) -> Portfolio:
    """Factory function for creating Portfolio entities in the database."""
    portfolio = Portfolio(user_id=user.id, name=name, is_default=is_default)
    db.add(portfolio)
    db.commit()
    db.refresh(portfolio)
    return portfolio


def create_holding(
        db: Session,
        user: User,
        name: str = "Index Fund",
        initial_amount: Decimal | str = "1000",
        purchase_date: date = date(2024, 1, 1),
        category: HoldingCategory = HoldingCategory.STOCKS,
        status: HoldingStatus = HoldingStatus.ACTIVE,
        current_value: Decimal | str | None = None,
        portfolio: Portfolio | None = None,
) -> Holding:
    """
    Factory function for creating Holding entities in the database.

    current_value defaults to initial_amount, as for a freshly opened holding.
    """
    initial = Decimal(initial_amount)
    holding = Holding(
        user_id=user.id,
        portfolio_id=portfolio.id if portfolio else None,
        name=name,
        category=category,
        status=status,
        initial_amount=initial,
        current_value=Decimal(current_value) if current_value is not None else initial,
        purchase_date=purchase_date,
    )
    db.add(holding)
    db.commit()
    db.refresh(holding)
    return holding


def add_transaction(
        db: Session,
        holding: Holding,
        transaction_type: TransactionType,
        amount: Decimal | str,
        transaction_date: date,
        notes: str | None = None,
) -> Transaction:
    """
    Insert a ledger row directly (quantity 1 at price `amount`).

    Bypasses TransactionService, so holding.current_value is NOT updated.
    """
    value = Decimal(amount)
    transaction = Transaction(
        holding_id=holding.id,
        transaction_type=transaction_type,
        quantity=Decimal("1"),
        price_per_unit=value,
        amount=value,
        transaction_date=transaction_date,
        notes=notes,
    )
    db.add(transaction)
    db.commit()
    db.refresh(transaction)
    return transaction


def seed_reporting_ledger(db: Session, user: User) -> dict[str, Holding]:
    """
    Three holdings with a small ledger, as used by the dashboard and report tests.

        Growth Fund  Stocks  Active  1000 on 2024-01-15, Buy 500 02-10, Update 1800 03-05
        Bond Ladder  Bonds   Active  2000 on 2024-02-01, Sell 200 03-20
        Old Coin     Crypto  Sold     500 on 2023-06-01, Update 250 2023-12-01

    current_value is set to the replayed value at 2024-03-31.
    """
    growth = create_holding(db, user, name="Growth Fund", initial_amount="1000",
                            current_value="1800", purchase_date=date(2024, 1, 15))
    bonds = create_holding(db, user, name="Bond Ladder", initial_amount="2000",
                           current_value="1800", purchase_date=date(2024, 2, 1),
                           category=HoldingCategory.BONDS)
    coin = create_holding(db, user, name="Old Coin", initial_amount="500",
                          current_value="250", purchase_date=date(2023, 6, 1),
                          category=HoldingCategory.CRYPTO, status=HoldingStatus.SOLD)

    add_transaction(db, growth, TransactionType.BUY, "500", date(2024, 2, 10))
    add_transaction(db, growth, TransactionType.UPDATE, "1800", date(2024, 3, 5))
    add_transaction(db, bonds, TransactionType.SELL, "200", date(2024, 3, 20), notes="rebalance")
    add_transaction(db, coin, TransactionType.UPDATE, "250", date(2023, 12, 1))

    return {"growth": growth, "bonds": bonds, "coin": coin}


def get_auth_headers(user: User) -> dict[str, str]:
    """Bearer header with a fresh access token for `user`."""
    token = JWTHandler.create_access_token(user_id=user.id, email=user.email)
    return {"Authorization": f"Bearer {token}"}


# =============================================================================
# FIXTURE EXPORTS
# =============================================================================

@pytest.fixture
def sample_user(db: Session) -> User:
    """Provide a sample User for tests."""
    return create_user(db)


@pytest.fixture
def other_user(db: Session) -> User:
    """A second user, for ownership checks."""
    return create_user(db, email="other@example.com")


@pytest.fixture
def auth_headers(sample_user: User) -> dict[str, str]:
    return get_auth_headers(sample_user)
