import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gold_finance.core.exceptions import (
    GoldFinanceError,
    InvalidAmountError,
    NotFoundError,
    TransactionFailure,
)
from gold_finance.models.statuses import LOAN_COMPLETED, LOAN_PENDING, PAYMENT_PAID
from gold_finance.services.ledger_queries import (
    lock_loan,
    other_open_installments,
    payable_installment,
)
from gold_finance.utils import clock
from gold_finance.utils.loan_calculations import is_fully_paid, money, remaining_principal

logger = logging.getLogger(__name__)


@dataclass
class PaymentOutcome:
    loan_id: int
    payment_id: int
    new_loan_balance: Decimal
    principal_amount_paid: Decimal
    completion_status: str
    installments_updated: int


def record_payment(
        db: Session,
        loan_id: int,
        payment_id: int,
        principal_payment,
        interest_payment,
        payment_mode: Optional[str] = None,
        remarks: Optional[str] = None,
        now: Optional[datetime] = None,
) -> PaymentOutcome:
    """
    Record a payment against one installment of a loan, atomically.

    The installment becomes Paid and its balance drops by the principal part.
    If that clears the loan's remaining principal, the loan is Completed and
    every other open installment is deactivated; otherwise the new balance is
    copied onto the other open installments. Paying interest on a row that
    carries no balance leaves the other rows as they are.

    Raises NotFoundError, InvalidAmountError or TransactionFailure; on any of
    them the session has been rolled back.
    """
    now = now or clock.now()
    principal = money(principal_payment)
    interest = money(interest_payment)

    try:
        loan = lock_loan(db, loan_id)
        if not loan:
            raise NotFoundError(f"Loan {loan_id} not found")

        inst = payable_installment(db, loan_id, payment_id)
        if not inst:
            raise NotFoundError(
                f"Installment {payment_id} is not an open, active installment of loan {loan_id}"
            )

        if principal < 0 or interest < 0:
            raise InvalidAmountError("Payment amounts cannot be negative.")
        if principal <= 0 and interest <= 0:
            raise InvalidAmountError("A positive principal or interest payment is required.")

        balance = money(inst.loan_balance)
        if principal > balance:
            raise InvalidAmountError(
                f"Principal payment {principal} exceeds the outstanding balance {balance}."
            )

        loan_paid = money(loan.principal_amount_paid) + principal
        if loan_paid > money(loan.net_amount_issued):
            raise InvalidAmountError(
                f"Principal payment {principal} exceeds the loan's remaining principal."
            )

        new_balance = money(balance - principal)

        inst.principal_amount_paid = money(inst.principal_amount_paid) + principal
        inst.interest_amount_paid = money(inst.interest_amount_paid) + interest
        inst.payment_status = PAYMENT_PAID
        inst.payment_date = now
        inst.loan_balance = new_balance
        inst.payment_mode = payment_mode
        inst.remarks = remarks

        loan.principal_amount_paid = loan_paid

        others = other_open_installments(db, loan_id, payment_id)
        touched = others

        # a zero-balance row left by penalty consolidation does not close the loan
        remaining = remaining_principal(loan.net_amount_issued, loan_paid)
        if is_fully_paid(new_balance) and is_fully_paid(remaining):
            loan.completion_status = LOAN_COMPLETED
            loan.current_installment_id = None
            for other in others:
                other.is_active = False
                other.remarks = "Loan Closed"
        elif not is_fully_paid(balance):
            for other in others:
                other.loan_balance = new_balance
        else:
            touched = []

        db.commit()

    except GoldFinanceError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("[PAYMENT] Loan #%s payment #%s rolled back: %s", loan_id, payment_id, e)
        raise TransactionFailure("Server error while recording payment.") from e

    if loan.completion_status == LOAN_COMPLETED:
        logger.info(
            "[PAYMENT] Loan #%s closed by payment #%s; %d open installment(s) deactivated.",
            loan_id, payment_id, len(others),
        )
    else:
        logger.info(
            "[PAYMENT] Loan #%s payment #%s: principal %s, interest %s, balance now %s.",
            loan_id, payment_id, principal, interest, new_balance,
        )

    return PaymentOutcome(
        loan_id=loan_id,
        payment_id=payment_id,
        new_loan_balance=new_balance,
        principal_amount_paid=money(loan.principal_amount_paid),
        completion_status=loan.completion_status or LOAN_PENDING,
        installments_updated=len(touched),
    )
