"""
Penalty job: move defaulted loans onto their scheme's penalty rate.

A loan has defaulted when an active Pending installment is past its due
month. The days since the earliest such installment select a slab; the loan
takes the slab rate, past installments are deactivated, every future active
installment is re-priced at the new monthly interest, and the whole remaining
principal is consolidated onto the next future installment.
"""
import logging
from datetime import date, datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session

from gold_finance.models.statuses import LOAN_PENDING
from gold_finance.services import ledger_queries as q
from gold_finance.services.job_report import FAILED, JobRunReport
from gold_finance.utils import clock
from gold_finance.utils.database import SessionLocal
from gold_finance.utils.loan_calculations import (
    money,
    monthly_interest,
    remaining_principal,
    whole_days_between,
)

logger = logging.getLogger(__name__)

PENALIZED = "penalized"
NO_DEFAULT = "no_default"
NO_SLAB = "no_slab"
NO_ANCHOR = "no_anchor"
NOT_ELIGIBLE = "not_eligible"

MUTATING = frozenset({PENALIZED})


def apply_penalty(db: Session, loan_id: int, today: date) -> str:
    """Check one loan for a default and re-price it. Returns the outcome name."""
    loan = q.lock_loan(db, loan_id)
    if not loan or loan.completion_status != LOAN_PENDING or loan.scheme_id is None:
        db.rollback()
        return NOT_ELIGIBLE

    default = q.first_default(db, loan_id, today)
    if not default:
        db.rollback()
        return NO_DEFAULT

    days_overdue = whole_days_between(default.payment_month, today)
    if days_overdue <= 0:
        db.rollback()
        return NO_DEFAULT

    rate = q.find_slab_rate(db, loan.scheme_id, days_overdue)
    if rate is None:
        logger.info(
            "[PENALTY] Loan #%s: No penalty slab found for %d days overdue. No action taken.",
            loan_id, days_overdue,
        )
        db.rollback()
        return NO_SLAB

    logger.info("[PENALTY] Loan #%s: Matched slab. New rate: %s%%. Applying penalty.", loan_id, rate)

    for inst in q.past_active_installments(db, loan_id, today):
        inst.is_active = False

    loan.current_interest_rate = rate
    loan.penalty_applied_on = today
    db.flush()

    future = q.future_active_installments(db, loan_id, today)
    if not future:
        logger.warning(
            "[PENALTY] Loan #%s: Has defaults but no future installments to update. Rolling back.",
            loan_id,
        )
        db.rollback()
        return NO_ANCHOR

    anchor = future[0]
    remaining = remaining_principal(loan.net_amount_issued, loan.principal_amount_paid)
    interest = monthly_interest(remaining, rate)

    for inst in future:
        inst.interest_amount_due = interest
        inst.remarks = "Recalculated-Penalty"
        inst.loan_balance = remaining if inst is anchor else money(0)

    loan.current_installment_id = anchor.payment_id
    db.commit()

    logger.info(
        "[PENALTY] Loan #%s: %d future installment(s) at %s interest; balance %s consolidated onto #%s.",
        loan_id, len(future), interest, remaining, anchor.payment_id,
    )
    return PENALIZED


def run_penalty_check(
        session_factory: Callable[[], Session] = SessionLocal,
        now: Optional[datetime] = None,
) -> JobRunReport:
    now = now or clock.now()
    today = now.date()
    report = JobRunReport(job="penalty", started_at=now, mutating_outcomes=MUTATING)
    logger.info("[PENALTY] Starting penalty check for defaulted loans...")

    with session_factory() as db:
        loan_ids = q.pending_loan_ids(db, with_scheme_only=True)

    for loan_id in loan_ids:
        with session_factory() as db:
            try:
                outcome = apply_penalty(db, loan_id, today)
            except Exception:
                db.rollback()
                logger.exception("[PENALTY] Failed to process penalty for Loan #%s; rolled back.", loan_id)
                outcome = FAILED
        report.record(loan_id, outcome)

    logger.info(
        "[PENALTY] Penalty check finished: %d loans, %d penalized, %d skipped, %d failed.",
        report.processed, report.updated, report.skipped, report.failed,
    )
    return report
