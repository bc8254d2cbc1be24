import logging
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gold_finance.core.exceptions import InvalidAmountError, NotFoundError, TransactionFailure
from gold_finance.models.customer_model import Customer
from gold_finance.models.loan_installment_model import Installment
from gold_finance.models.loan_model import Loan
from gold_finance.models.ornament_model import Ornament
from gold_finance.models.scheme_model import Scheme
from gold_finance.models.statuses import LOAN_PENDING, PAYMENT_PENDING
from gold_finance.schemas.loan_schema import LoanCreate
from gold_finance.utils.loan_calculations import (
    INITIAL_INTEREST_DAYS,
    add_month,
    money,
    prorated_interest,
)

logger = logging.getLogger(__name__)


def create_loan(db: Session, payload: LoanCreate) -> Loan:
    """
    Create a loan with its pledged ornaments and the first installment.

    The first installment falls due one month after the loan date and carries
    15 days of pro-rated interest on the net amount issued. The accrual job
    takes it from there.
    """
    customer = db.query(Customer).filter(Customer.customer_id == payload.customer_id).first()
    if not customer:
        raise NotFoundError(f"Customer {payload.customer_id} not found")

    if payload.scheme_id is not None:
        scheme = db.query(Scheme).filter(Scheme.scheme_id == payload.scheme_id).first()
        if not scheme:
            raise NotFoundError(f"Scheme {payload.scheme_id} not found")

    loan_dt = payload.loan_datetime.replace(tzinfo=None)
    if payload.due_date <= loan_dt.date():
        raise InvalidAmountError("due_date must be after the loan date")

    amount_issued = money(payload.amount_issued)
    processing_fee = money(payload.processing_fee)
    net = money(amount_issued - processing_fee)
    if net <= 0:
        raise InvalidAmountError("Processing fee must be less than the amount issued")

    rate = Decimal(str(payload.interest_rate))

    loan = Loan(
        customer_id=payload.customer_id,
        scheme_id=payload.scheme_id,
        eligible_amount=money(payload.eligible_amount),
        amount_issued=amount_issued,
        processing_fee=processing_fee,
        net_amount_issued=net,
        principal_amount_paid=money(0),
        interest_rate=rate,
        current_interest_rate=rate,
        loan_datetime=loan_dt,
        due_date=payload.due_date,
        completion_status=LOAN_PENDING,
    )

    try:
        db.add(loan)
        db.flush()

        for o in payload.ornaments:
            db.add(
                Ornament(
                    loan_id=loan.loan_id,
                    ornament_id=o.ornament_id,
                    ornament_type=o.ornament_type,
                    ornament_name=o.ornament_name,
                    grams=Decimal(str(o.grams)),
                    karat=o.karat,
                )
            )

        first = Installment(
            loan_id=loan.loan_id,
            payment_month=add_month(loan_dt.date()),
            loan_balance=net,
            principal_amount_paid=money(0),
            interest_amount_due=prorated_interest(net, rate, INITIAL_INTEREST_DAYS),
            interest_amount_paid=money(0),
            payment_status=PAYMENT_PENDING,
            is_active=True,
            remarks="Initial 15-day interest",
        )
        db.add(first)
        db.flush()

        loan.current_installment_id = first.payment_id

        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("[LOAN] Failed to create loan for customer #%s: %s", payload.customer_id, e)
        raise TransactionFailure("Unable to create loan due to a database error.") from e

    db.refresh(loan)
    logger.info(
        "[LOAN] Created loan #%s for customer #%s: net %s at %s%%, first installment #%s due %s",
        loan.loan_id, loan.customer_id, net, rate, first.payment_id, first.payment_month,
    )
    return loan
