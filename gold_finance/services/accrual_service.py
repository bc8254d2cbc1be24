"""
Accrual job: refresh interest on each pending loan according to its age.

  0-15 days   the 15-day interest written at origination stands
  16-30 days  pro-rata interest for the days elapsed
  > 30 days   once the current installment is due, finalize it as Overdue
              at the scheme's penalty rate and open the next month's
              installment (unless that would pass the loan's due date)

Each loan is handled in its own transaction with the loan row locked; a
failure on one loan is rolled back and logged, and the run moves on.
"""
import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session

from gold_finance.models.loan_installment_model import Installment
from gold_finance.models.statuses import LOAN_PENDING, PAYMENT_OVERDUE, PAYMENT_PENDING
from gold_finance.services import ledger_queries as q
from gold_finance.services.job_report import FAILED, JobRunReport
from gold_finance.utils import clock
from gold_finance.utils.database import SessionLocal
from gold_finance.utils.loan_calculations import (
    INITIAL_INTEREST_DAYS,
    add_month,
    monthly_interest,
    prorated_interest,
    remaining_principal,
    whole_days_between,
)

logger = logging.getLogger(__name__)

PRORATA_LAST_DAY = 30

UNCHANGED = "unchanged"
PRORATED = "prorated"
FINALIZED = "finalized"
FINALIZED_LAST = "finalized_last"
NOT_DUE = "not_due"
NO_SLAB = "no_slab"
NO_INSTALLMENT = "no_installment"
NOT_STARTED = "not_started"
NOT_PENDING = "not_pending"

MUTATING = frozenset({PRORATED, FINALIZED, FINALIZED_LAST})


def accrue_loan(db: Session, loan_id: int, now: datetime) -> str:
    """Apply one accrual step to a loan and commit it. Returns the outcome name."""
    loan = q.lock_loan(db, loan_id)
    if not loan or loan.completion_status != LOAN_PENDING:
        db.rollback()
        return NOT_PENDING

    days_since_start = whole_days_between(loan.loan_datetime, now)
    if days_since_start < 0:
        logger.warning("[ACCRUAL] Loan #%s starts in the future (%s). Skipping.", loan_id, loan.loan_datetime)
        db.rollback()
        return NOT_STARTED

    current = q.current_installment(db, loan)
    if not current:
        logger.warning("[ACCRUAL] Loan #%s: No active pending installment found. Skipping.", loan_id)
        db.rollback()
        return NO_INSTALLMENT

    if days_since_start <= INITIAL_INTEREST_DAYS:
        logger.info(
            "[ACCRUAL] Loan #%s (0-15 days): no change, interest stays %s.",
            loan_id, current.interest_amount_due,
        )
        db.rollback()
        return UNCHANGED

    if days_since_start <= PRORATA_LAST_DAY:
        interest = prorated_interest(loan.net_amount_issued, loan.interest_rate, days_since_start)
        current.interest_amount_due = interest
        db.commit()
        logger.info(
            "[ACCRUAL] Loan #%s (16-30 days): payment #%s interest for %d days set to %s.",
            loan_id, current.payment_id, days_since_start, interest,
        )
        return PRORATED

    if current.payment_month > now.date():
        logger.debug(
            "[ACCRUAL] Loan #%s: installment #%s not due until %s.",
            loan_id, current.payment_id, current.payment_month,
        )
        db.rollback()
        return NOT_DUE

    return _finalize_overdue(db, loan, current, now)


def _finalize_overdue(db: Session, loan, current: Installment, now: datetime) -> str:
    anchor = q.last_paid_date(db, loan.loan_id) or loan.loan_datetime
    days_overdue = whole_days_between(anchor, now)

    penalty_rate = q.find_slab_rate(db, loan.scheme_id, days_overdue)
    if penalty_rate is None:
        logger.warning(
            "[ACCRUAL] Loan #%s: No penalty slab found for %d days. No action taken.",
            loan.loan_id, days_overdue,
        )
        db.rollback()
        return NO_SLAB

    remaining = remaining_principal(loan.net_amount_issued, loan.principal_amount_paid)
    interest = monthly_interest(remaining, penalty_rate)

    loan.current_interest_rate = penalty_rate
    current.interest_amount_due = interest
    current.payment_status = PAYMENT_OVERDUE
    current.remarks = "Overdue interest finalized"

    next_due = add_month(current.payment_month)
    if next_due > loan.due_date:
        db.commit()
        logger.warning(
            "[ACCRUAL] Loan #%s: finalized installment #%s; not creating another past due date %s.",
            loan.loan_id, current.payment_id, loan.due_date,
        )
        return FINALIZED_LAST

    nxt = Installment(
        loan_id=loan.loan_id,
        payment_month=next_due,
        loan_balance=remaining,
        interest_amount_due=interest,
        payment_status=PAYMENT_PENDING,
        is_active=True,
        remarks="Generated after overdue",
    )
    db.add(nxt)
    db.flush()
    loan.current_installment_id = nxt.payment_id
    db.commit()

    logger.info(
        "[ACCRUAL] Loan #%s: installment #%s finalized as Overdue at %s%%; opened #%s due %s.",
        loan.loan_id, current.payment_id, penalty_rate, nxt.payment_id, next_due,
    )
    return FINALIZED


def run_accrual(
        session_factory: Callable[[], Session] = SessionLocal,
        now: Optional[datetime] = None,
) -> JobRunReport:
    now = now or clock.now()
    report = JobRunReport(job="accrual", started_at=now, mutating_outcomes=MUTATING)
    logger.info("[ACCRUAL] Starting interest update for all pending loans...")

    with session_factory() as db:
        loan_ids = q.pending_loan_ids(db)

    for loan_id in loan_ids:
        with session_factory() as db:
            try:
                outcome = accrue_loan(db, loan_id, now)
            except Exception:
                db.rollback()
                logger.exception("[ACCRUAL] Failed to update Loan #%s; rolled back.", loan_id)
                outcome = FAILED
        report.record(loan_id, outcome)

    logger.info(
        "[ACCRUAL] Interest update finished: %d loans, %d updated, %d skipped, %d failed.",
        report.processed, report.updated, report.skipped, report.failed,
    )
    return report
