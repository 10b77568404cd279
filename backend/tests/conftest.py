import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-the-tourdesk-suite-0123456789")
os.environ["RATE_LIMIT_ENABLED"] = "false"

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tourdesk.core.database import Base, get_db
from tourdesk.core.security import create_access_token, get_password_hash
from tourdesk.main import app
from tourdesk.services import document_service
from tourdesk.models import (
    User, UserRole, Location, Hotel, RoomType, OccupancyType, MealPlan, VehicleType,
    PricingAttribute, TaxSlab, ExpenseCategory, IncomeCategory, Customer, Supplier,
    BankAccount, CashAccount, TourPackageQuery
)


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_user(db, username: str, role: str, password: str = "secret123", is_active: bool = True) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        full_name=username.title(),
        hashed_password=get_password_hash(password),
        role=role,
        is_active=is_active,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def headers_for(user: User) -> dict:
    token = create_access_token({"sub": user.username, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin(db):
    return make_user(db, "admin", UserRole.ADMIN.value)


@pytest.fixture
def admin_headers(admin):
    return headers_for(admin)


@pytest.fixture
def accounts_headers(db):
    return headers_for(make_user(db, "accountant", UserRole.ACCOUNTS.value))


@pytest.fixture
def operations_headers(db):
    return headers_for(make_user(db, "operator", UserRole.OPERATIONS.value))


@pytest.fixture
def associate_headers(db):
    return headers_for(make_user(db, "associate", UserRole.ASSOCIATE.value))


@pytest.fixture
def masters(db):
    """A small catalogue of lookups, a destination and a hotel"""
    location = Location(label="Goa")
    db.add(location)
    db.flush()
    records = {
        'location': location,
        'hotel': Hotel(name="Sea Breeze", location_id=location.id),
        'other_hotel': Hotel(name="Palm Grove", location_id=location.id),
        'room_type': RoomType(name="Deluxe"),
        'occupancy': OccupancyType(name="Double", max_persons=2),
        'meal_plan': MealPlan(name="CP", code="CP"),
        'vehicle': VehicleType(name="Innova"),
        'double_attribute': PricingAttribute(name="Per Person Double Sharing"),
        'extra_bed': PricingAttribute(name="Extra Bed"),
        'gst': TaxSlab(name="GST 5%", percentage=Decimal("5")),
        'expense_category': ExpenseCategory(name="Office"),
        'income_category': IncomeCategory(name="Commission"),
        'customer': Customer(name="Asha Rao", contact="9800000001"),
        'supplier': Supplier(name="Sea Breeze Hotels", contact="9800000002"),
        'bank': BankAccount(account_name="HDFC Current", opening_balance=Decimal("1000"),
                            current_balance=Decimal("1000")),
        'cash': CashAccount(account_name="Petty Cash", opening_balance=Decimal("200"),
                            current_balance=Decimal("200")),
    }
    for name, record in records.items():
        if name != 'location':
            db.add(record)
    db.commit()
    return records


@pytest.fixture
def tour_query(db, masters):
    query = TourPackageQuery(
        tour_package_query_number="TPQ-0001",
        tour_package_query_name="Goa Getaway",
        customer_name="Asha Rao",
        customer_id=masters['customer'].id,
        location_id=masters['location'].id,
        tour_starts_from=date(2024, 3, 10),
        tour_ends_on=date(2024, 3, 13),
    )
    db.add(query)
    db.commit()
    db.refresh(query)
    return query


@pytest.fixture
def rendered(monkeypatch):
    """Capture the HTML handed to the PDF renderer instead of running WeasyPrint"""
    pages = []

    def fake_pdf(html):
        pages.append(html)
        return b"%PDF-1.7 test"

    monkeypatch.setattr(document_service, "html_to_pdf", fake_pdf)
    return pages
