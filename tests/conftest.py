"""
Pytest fixtures for the payroll test suite.

Provides:
- An in-memory SQLite engine and session factory per test
- A PayrollLedger bound to that factory
- Seed employee and payroll records
- A FastAPI TestClient with the database dependencies overridden
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hr_backend.fastapi.dependencies.database import Base, get_sync_db
from hr_backend.fastapi.models import Employee
from hr_backend.fastapi.services.payroll_ledger import PayrollLedger, get_payroll_ledger
from hr_backend.security.auth import create_access_token


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
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def ledger(session_factory):
    return PayrollLedger(session_factory)


def make_employee(session_factory, **overrides):
    values = {
        "first_name": "Ana",
        "last_name": "Lopez",
        "email": f"{uuid4().hex[:8]}@example.com",
    }
    values.update(overrides)

    session = session_factory()
    try:
        employee = Employee(**values)
        session.add(employee)
        session.commit()
        return employee
    finally:
        session.close()


@pytest.fixture
def employee(session_factory):
    return make_employee(session_factory)


@pytest.fixture
def payroll(ledger, employee):
    """Payroll record with base_salary=5000 and tax=500."""
    return ledger.create_payroll({
        "employee_id": employee.id,
        "pay_period_start": date(2025, 11, 1),
        "pay_period_end": date(2025, 11, 30),
        "base_salary": Decimal("5000.00"),
        "tax": Decimal("500.00"),
    })


@pytest.fixture
def approver_id():
    return uuid4()


@pytest.fixture
def client(session_factory):
    from hr_backend.fastapi.main import app

    def override_get_sync_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_sync_db] = override_get_sync_db
    app.dependency_overrides[get_payroll_ledger] = lambda: PayrollLedger(session_factory)

    # No context manager: the lifespan would bind the configured database
    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Build bearer headers for a caller with the given role."""
    def build(role="HR", user_id=None):
        token = create_access_token({"sub": str(user_id or uuid4()), "role": role})
        return {"Authorization": f"Bearer {token}"}
    return build
