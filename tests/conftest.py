"""
Shared test fixtures.

Sets up an isolated test database so tests never touch
the real database. Tables are created before each test and
dropped after it, so no test data persists.
"""

import os

# Must be set before the application modules build their engine
TEST_DATABASE_URL = "sqlite:///./test.db"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from entity_ledger.main import app
from entity_ledger.models import Base
from entity_ledger.models.base import get_db
from entity_ledger.models.enums import AccountType
from entity_ledger.schemas.chart import AccountCreate, EntityCreate
from entity_ledger.services.entity_service import EntityService


# SQLite keeps the suite free of database infrastructure.
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)

# The chart every test entity starts with: code -> (name, type)
STANDARD_CHART = {
    "1000": ("Bank", AccountType.ASSET),
    "1100": ("Accounts Receivable", AccountType.ASSET),
    "1500": ("Loan to Subsidiary", AccountType.ASSET),
    "2000": ("Customer Deposits Held", AccountType.LIABILITY),
    "2100": ("GST on Income", AccountType.LIABILITY),
    "2500": ("Loan from Parent", AccountType.LIABILITY),
    "3000": ("Owner Equity", AccountType.EQUITY),
    "4000": ("Sales Revenue", AccountType.REVENUE),
    "4100": ("Marketplace Margin Revenue", AccountType.REVENUE),
    "5000": ("Supplier Payouts", AccountType.EXPENSE),
    "6000": ("Operating Expenses", AccountType.EXPENSE),
}


@pytest.fixture(autouse=True)
def setup_database():
    """
    Create all tables before each test, drop them after.

    autouse=True means every test gets this automatically.
    """
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(db_session):
    """
    Provide a test client with the test database.

    The get_db dependency is overridden so the app uses the
    test session instead of the real database.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _create_entity(db_session, name):
    service = EntityService(db_session)
    entity = service.create_entity(EntityCreate(name=name))
    accounts = {
        code: service.create_account(
            entity.id,
            AccountCreate(
                code=code,
                name=account_name,
                account_type=account_type,
                is_bank_account=code == "1000",
            ),
        )
        for code, (account_name, account_type) in STANDARD_CHART.items()
    }
    db_session.commit()
    return entity, accounts


@pytest.fixture
def make_entity(db_session):
    """
    Factory for entities with the standard chart of accounts.

    Returns (entity, accounts) where accounts maps code -> Account.
    """
    def factory(name="Parent Pty Ltd"):
        return _create_entity(db_session, name)
    return factory


@pytest.fixture
def entity_with_chart(make_entity):
    return make_entity()
