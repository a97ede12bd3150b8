"""Pytest fixtures for testing"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from dropdebt.api.main import create_app
from dropdebt.domain.consequences import ShutoffConsequence
from dropdebt.domain.models import Bill, BillType
from dropdebt.infrastructure.database.models import Base
from dropdebt.infrastructure.database.session import get_db

# Test database
TEST_DATABASE_URL = "sqlite:///./test_dropdebt.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Every test runs against the same clock
NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)
TODAY = NOW.date()


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


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_bill() -> Callable[..., Bill]:
    """Factory for bills due in 10 days with no consequences; override any field"""

    def _make(**overrides) -> Bill:
        fields = {
            "bill_id": "bill_1",
            "user_id": "user_1",
            "name": "Test Bill",
            "current_balance": 100.0,
            "original_amount": 100.0,
            "due_date": TODAY + timedelta(days=10),
        }
        fields.update(overrides)
        return Bill(**fields)

    return _make


@pytest.fixture
def electric_bill(make_bill) -> Bill:
    """Essential utility three days from shutoff"""
    return make_bill(
        bill_id="electric",
        name="City Electric",
        bill_type=BillType.ELECTRIC,
        current_balance=150.0,
        original_amount=150.0,
        due_date=TODAY + timedelta(days=2),
        is_essential=True,
        consequences=[
            ShutoffConsequence(
                severity=95,
                estimated_days=3,
                utility_type="electric",
                description="Power shutoff in 3 days",
            )
        ],
    )

