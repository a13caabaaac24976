"""Pytest fixtures for testing"""

import pytest
from datetime import date, datetime
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from bnpl_tracker.api.main import create_app
from bnpl_tracker.domain.allocation import build_transaction
from bnpl_tracker.domain.models import Share, Transaction, TransactionDraft
from bnpl_tracker.infrastructure.database.models import Base
from bnpl_tracker.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


def make_transaction(
    product_name: str = "Headphones",
    amount: float = 3000.0,
    order_date: date = date(2025, 1, 20),
    payment_plan: str = "bnpl",
    monthly_payment: float | None = None,
    borrower: str | None = None,
    shares: list[Share] | None = None,
    created_at: datetime = datetime(2025, 1, 20, 12, 0, 0),
) -> Transaction:
    """Build a normalized transaction the way the API does"""
    draft = TransactionDraft(
        product_name=product_name,
        amount=amount,
        order_date=order_date,
        payment_plan=payment_plan,
        monthly_payment=monthly_payment,
        mode="shared" if shares else "single",
        borrower=borrower,
        shares=shares or [],
    )
    return build_transaction(draft, now=created_at)


@pytest.fixture
def sample_transactions() -> list[Transaction]:
    """
    A mixed ledger anchored around the Dec 25 2024 - Jan 25 2025 cycle:
    - single-pay phone case for Personal
    - 6-month laptop for Alice
    - 3-month shared TV split between Alice and Bob
    """
    return [
        make_transaction("Phone case", 500.0, date(2025, 1, 10), borrower="Personal"),
        make_transaction(
            "Laptop",
            6000.0,
            date(2025, 1, 5),
            payment_plan="6months",
            monthly_payment=1000.0,
            borrower="Alice",
            created_at=datetime(2025, 1, 5, 9, 0, 0),
        ),
        make_transaction(
            "TV",
            3000.0,
            date(2024, 12, 28),
            payment_plan="3months",
            monthly_payment=1000.0,
            shares=[Share("Alice", 500.0), Share("Bob", 500.0)],
            created_at=datetime(2024, 12, 28, 18, 30, 0),
        ),
    ]


@pytest.fixture
def transaction_factory():
    """Builder for one-off transactions in individual tests"""
    return make_transaction
