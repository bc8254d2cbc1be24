"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SCHEDULER_ENABLED", "false")

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import gold_finance.models  # noqa: F401  registers every table
from gold_finance.models import Customer, Installment, Loan, Scheme, SchemeSlab
from gold_finance.utils.database import Base
from gold_finance.utils.loan_calculations import add_month, money, prorated_interest


@pytest.fixture
def now() -> datetime:
    """Fixed wall-clock time for reproducible accrual runs."""
    return datetime(2025, 6, 15, 10, 0, 0)


@pytest.fixture
def engine():
    """Fresh in-memory database shared by every session of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory) -> Session:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def customer(db: Session) -> Customer:
    c = Customer(customer_name="Test Customer", phone_number="9876543210")
    db.add(c)
    db.commit()
    return c


@pytest.fixture
def make_scheme(db: Session):
    """Create a scheme from (start_day, end_day, rate) tuples."""

    def _make(slabs, name: str = "Standard") -> Scheme:
        scheme = Scheme(
            scheme_name=name,
            slabs=[
                SchemeSlab(start_day=s, end_day=e, interest_rate=Decimal(str(r)))
                for s, e, r in slabs
            ],
        )
        db.add(scheme)
        db.commit()
        return scheme

    return _make


@pytest.fixture
def make_loan(db: Session, customer: Customer):
    """Create a pending loan plus its first installment, as origination does."""

    def _make(
            loan_datetime: datetime,
            net="100000.00",
            rate="12",
            due_date: date | None = None,
            scheme: Scheme | None = None,
            principal_paid="0",
            first_payment_month: date | None = None,
    ) -> Loan:
        net = money(net)
        rate = Decimal(str(rate))
        loan = Loan(
            customer_id=customer.customer_id,
            scheme_id=scheme.scheme_id if scheme else None,
            eligible_amount=net,
            amount_issued=net,
            processing_fee=money(0),
            net_amount_issued=net,
            principal_amount_paid=money(principal_paid),
            interest_rate=rate,
            current_interest_rate=rate,
            loan_datetime=loan_datetime,
            due_date=due_date or (loan_datetime.date() + timedelta(days=365)),
            completion_status="Pending",
        )
        db.add(loan)
        db.flush()

        first = Installment(
            loan_id=loan.loan_id,
            payment_month=first_payment_month or add_month(loan_datetime.date()),
            loan_balance=money(net - money(principal_paid)),
            principal_amount_paid=money(0),
            interest_amount_due=prorated_interest(net, rate, 15),
            interest_amount_paid=money(0),
            payment_status="Pending",
            is_active=True,
            remarks="Initial 15-day interest",
        )
        db.add(first)
        db.flush()
        loan.current_installment_id = first.payment_id
        db.commit()
        return loan

    return _make


@pytest.fixture
def add_installment(db: Session):
    """Attach an extra installment to an existing loan."""

    def _add(
            loan: Loan,
            payment_month: date,
            loan_balance="0",
            interest_due="0",
            status: str = "Pending",
            is_active: bool = True,
            payment_date: datetime | None = None,
    ) -> Installment:
        inst = Installment(
            loan_id=loan.loan_id,
            payment_month=payment_month,
            loan_balance=money(loan_balance),
            principal_amount_paid=money(0),
            interest_amount_due=money(interest_due),
            interest_amount_paid=money(0),
            payment_status=status,
            is_active=is_active,
            payment_date=payment_date,
        )
        db.add(inst)
        db.commit()
        return inst

    return _add
