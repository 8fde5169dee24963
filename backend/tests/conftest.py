from datetime import timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import billing.models  # noqa: F401  registers the tables on Base.metadata
from billing.database import Base, get_db
from billing.models.enums import PaymentMethod
from billing.repositories.sql_repository import SqlBillingRepository
from billing.schemas.customer import CustomerCreate
from billing.schemas.invoice import InvoiceCreate, InvoiceItemCreate
from billing.services.customer_service import create_customer
from billing.services.invoice_service import create_invoice
from billing.utils.timeutils import utcnow


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def repo(db):
    return SqlBillingRepository(db)


@pytest.fixture
def customer(repo):
    return create_customer(repo, CustomerCreate(name="Globex Corporation", email="ap@globex.example"))


def build_invoice_in(customer_id, items=None, tax_rate=Decimal("0"), discount_rate=Decimal("0"), due_in_days=30,
                     due_date=None):
    """InvoiceCreate with sensible defaults. items are (description, quantity, unit_price) tuples."""
    items = items or [("Consulting", "1", "1100")]
    return InvoiceCreate(
        customer_id=customer_id,
        due_date=due_date or utcnow() + timedelta(days=due_in_days),
        tax_rate=tax_rate,
        discount_rate=discount_rate,
        payment_method=PaymentMethod.BANK_TRANSFER,
        seller_name="Initech Billing",
        items=[
            InvoiceItemCreate(description=description, quantity=Decimal(quantity), unit_price=Decimal(unit_price))
            for description, quantity, unit_price in items
        ],
    )


@pytest.fixture
def make_invoice(repo, customer):
    def _make(**kwargs):
        return create_invoice(repo, build_invoice_in(customer.id, **kwargs))
    return _make


@pytest.fixture
def client(session_factory):
    from billing.main import app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
