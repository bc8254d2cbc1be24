"""
Typed query helpers shared by the payment recorder and the two jobs.

Every loan-mutating unit of work starts with ``lock_loan`` so that a job run
and a payment against the same loan serialize on the loan row.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from gold_finance.models.loan_model import Loan
from gold_finance.models.loan_installment_model import Installment
from gold_finance.models.scheme_model import SchemeSlab
from gold_finance.models.statuses import (
    LOAN_PENDING,
    PAYMENT_PAID,
    PAYMENT_PENDING,
    PAYABLE_STATUSES,
)


def lock_loan(db: Session, loan_id: int) -> Optional[Loan]:
    """SELECT ... FOR UPDATE on the loan row."""
    return (
        db.query(Loan)
        .filter(Loan.loan_id == loan_id)
        .with_for_update()
        .populate_existing()
        .first()
    )


def pending_loan_ids(db: Session, with_scheme_only: bool = False) -> list[int]:
    q = db.query(Loan.loan_id).filter(Loan.completion_status == LOAN_PENDING)
    if with_scheme_only:
        q = q.filter(Loan.scheme_id.isnot(None))
    return [row.loan_id for row in q.order_by(Loan.loan_id.asc()).all()]


def current_installment(db: Session, loan: Loan) -> Optional[Installment]:
    """The installment the loan points at, if it is still active and Pending."""
    if loan.current_installment_id is None:
        return None
    inst = db.get(Installment, loan.current_installment_id)
    if not inst or inst.loan_id != loan.loan_id:
        return None
    if not inst.is_active or inst.payment_status != PAYMENT_PENDING:
        return None
    return inst


def payable_installment(db: Session, loan_id: int, payment_id: int) -> Optional[Installment]:
    return (
        db.query(Installment)
        .filter(
            Installment.payment_id == payment_id,
            Installment.loan_id == loan_id,
            Installment.is_active.is_(True),
            Installment.payment_status.in_(PAYABLE_STATUSES),
        )
        .first()
    )


def other_open_installments(db: Session, loan_id: int, exclude_payment_id: int) -> list[Installment]:
    """Active Pending/Overdue installments of the loan other than the given one."""
    return (
        db.query(Installment)
        .filter(
            Installment.loan_id == loan_id,
            Installment.payment_id != exclude_payment_id,
            Installment.is_active.is_(True),
            Installment.payment_status.in_(PAYABLE_STATUSES),
        )
        .all()
    )


def last_paid_date(db: Session, loan_id: int) -> Optional[datetime]:
    row = (
        db.query(Installment.payment_date)
        .filter(
            Installment.loan_id == loan_id,
            Installment.payment_status == PAYMENT_PAID,
            Installment.payment_date.isnot(None),
        )
        .order_by(Installment.payment_date.desc())
        .first()
    )
    return row.payment_date if row else None


def first_default(db: Session, loan_id: int, today: date) -> Optional[Installment]:
    """Earliest active Pending installment already past its due month."""
    return (
        db.query(Installment)
        .filter(
            Installment.loan_id == loan_id,
            Installment.payment_status == PAYMENT_PENDING,
            Installment.is_active.is_(True),
            Installment.payment_month < today,
        )
        .order_by(Installment.payment_month.asc(), Installment.payment_id.asc())
        .first()
    )


def future_active_installments(db: Session, loan_id: int, today: date) -> list[Installment]:
    return (
        db.query(Installment)
        .filter(
            Installment.loan_id == loan_id,
            Installment.is_active.is_(True),
            Installment.payment_month >= today,
        )
        .order_by(Installment.payment_month.asc(), Installment.payment_id.asc())
        .all()
    )


def past_active_installments(db: Session, loan_id: int, today: date) -> list[Installment]:
    return (
        db.query(Installment)
        .filter(
            Installment.loan_id == loan_id,
            Installment.is_active.is_(True),
            Installment.payment_month < today,
        )
        .all()
    )


def find_slab_rate(db: Session, scheme_id: Optional[int], days_overdue: int) -> Optional[Decimal]:
    """Rate of the slab whose [start_day, end_day] holds days_overdue, else None."""
    if scheme_id is None:
        return None
    slab = (
        db.query(SchemeSlab)
        .filter(
            SchemeSlab.scheme_id == scheme_id,
            SchemeSlab.start_day <= days_overdue,
            SchemeSlab.end_day >= days_overdue,
        )
        .order_by(SchemeSlab.start_day.asc())
        .first()
    )
    return slab.interest_rate if slab else None
