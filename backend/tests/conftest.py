"""Shared test fixtures."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
from decimal import Decimal

from caixa.config import Settings
from caixa.database import Base, get_db
from caixa.main import create_app
from caixa.models import (
    Category,
    CategoryType,
    Company,
    RecurringTransaction,
    Transaction,
    TransactionStatus,
    User,
)
from caixa.services.quote_service import QuoteNumberLocks

TEST_SECRET = "test-secret-key-for-the-suite-0123456789abcdef"
PASSWORD = "secret1"


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test using in-memory SQLite."""
    # Use StaticPool to ensure all connections use the same in-memory database
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    Base.metadata.create_all(bind=engine)

    # Create session
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def test_settings():
    """Settings isolated from the environment and any .env file.

    Rate limiting is off here; tests that exercise it turn it back on.
    """
    return Settings(
        _env_file=None,
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=10,
        database_url="sqlite:///:memory:",
        cnpj_api_url="https://cnpj.test/api/cnpj/v1",
        rate_limit_enabled=False,
    )


@pytest.fixture
def app(test_settings):
    return create_app(test_settings, create_schema=False)


@pytest.fixture(scope="function")
def client(app, db_session):
    """Create a test client with database override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def register_user(client):
    """Register through the API; returns (auth headers, response body)."""
    def _register(email, name="Test User", password=PASSWORD):
        response = client.post("/api/auth/register", json={
            "name": name,
            "email": email,
            "password": password,
        })
        assert response.status_code == 201, response.text
        body = response.json()
        return {"Authorization": f"Bearer {body['token']}"}, body
    return _register


@pytest.fixture
def alice(register_user):
    """Auth headers for alice@example.com."""
    headers, _ = register_user("alice@example.com", name="Alice")
    return headers


@pytest.fixture
def bob(register_user):
    """Auth headers for a second, unrelated user."""
    headers, _ = register_user("bob@example.com", name="Bob")
    return headers


@pytest.fixture
def alice_company(client, alice):
    """A company owned by alice, created through the API."""
    response = client.post("/api/companies", json={"name": "Alice Co"}, headers=alice)
    assert response.status_code == 201, response.text
    return response.json()


# Direct database fixtures for service-level tests

@pytest.fixture
def owner(db_session):
    user = User(name="Owner", email="owner@example.com", password_hash="not-a-real-hash")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def intruder(db_session):
    user = User(name="Intruder", email="intruder@example.com", password_hash="not-a-real-hash")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def company(db_session, owner):
    company = Company(user_id=owner.id, name="Owner Co")
    db_session.add(company)
    db_session.commit()
    db_session.refresh(company)
    return company


@pytest.fixture
def sample_category(db_session, company):
    category = Category(
        company_id=company.id,
        name="Moradia",
        type=CategoryType.EXPENSE,
        color="#8b5cf6",
        budget=Decimal("2000.00"),
    )
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture
def sample_transaction(db_session, company):
    txn = Transaction(
        company_id=company.id,
        month="Janeiro",
        year=2025,
        amount=Decimal("1500.00"),
        category="Moradia",
        status=TransactionStatus.ABERTO,
        description="Aluguel",
    )
    db_session.add(txn)
    db_session.commit()
    db_session.refresh(txn)
    return txn


@pytest.fixture
def sample_rules(db_session, company):
    """Three recurring rules for the company."""
    rules = [
        RecurringTransaction(company_id=company.id, description="Aluguel", amount=Decimal("1500.00"),
                             category="Moradia", day_of_month=5),
        RecurringTransaction(company_id=company.id, description="Internet", amount=Decimal("99.90"),
                             category="Moradia", day_of_month=10),
        RecurringTransaction(company_id=company.id, description="Academia", amount=Decimal("120.00"),
                             category="Lazer", day_of_month=10),
    ]
    db_session.add_all(rules)
    db_session.commit()
    for rule in rules:
        db_session.refresh(rule)
    return rules


@pytest.fixture
def quote_locks():
    return QuoteNumberLocks()
