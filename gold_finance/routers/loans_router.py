from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import Optional
from starlette import status

from gold_finance.core.exceptions import InvalidAmountError, NotFoundError, TransactionFailure
from gold_finance.utils.database import get_db
from gold_finance.models.loan_model import Loan
from gold_finance.models.loan_installment_model import Installment
from gold_finance.services.loan_origination import create_loan
from gold_finance.services.payment_recorder import record_payment

from gold_finance.schemas.loan_schema import (
    LoanCreate,
    LoanOut,
    LoanListOut,
    InstallmentOut,
    PaymentCreate,
    PaymentResult,
)

router = APIRouter(prefix="/loans", tags=["Loans"])


def to_http(e: Exception) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status.HTTP_404_NOT_FOUND, str(e))
    if isinstance(e, InvalidAmountError):
        return HTTPException(status.HTTP_400_BAD_REQUEST, str(e))
    return HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))


# =================================================
# 🔹 STATIC ROUTES (ALWAYS FIRST)
# =================================================
@router.get("", response_model=list[LoanListOut])
def list_loans(
        completion_status: Optional[str] = Query(None, alias="status"),
        customer_id: Optional[int] = None,
        db: Session = Depends(get_db),
):
    q = db.query(Loan)
    if completion_status:
        q = q.filter(Loan.completion_status == completion_status)
    if customer_id is not None:
        q = q.filter(Loan.customer_id == customer_id)
    return q.order_by(Loan.loan_datetime.desc()).all()


# =================================================
# 🔹 LOAN CREATION
# =================================================
@router.post("", response_model=LoanOut, status_code=status.HTTP_201_CREATED)
def create_loan_route(payload: LoanCreate, db: Session = Depends(get_db)):
    try:
        return create_loan(db, payload)
    except (NotFoundError, InvalidAmountError, TransactionFailure) as e:
        raise to_http(e)


# =================================================
# 🔹 DYNAMIC ROUTES (LAST)
# =================================================
@router.get("/{loan_id}", response_model=LoanOut)
def get_loan(loan_id: int, db: Session = Depends(get_db)):
    loan = db.query(Loan).filter(Loan.loan_id == loan_id).first()
    if not loan:
        raise HTTPException(404, "Loan not found")
    return loan


@router.get("/{loan_id}/schedule", response_model=list[InstallmentOut])
def get_schedule(loan_id: int, db: Session = Depends(get_db)):
    return (
        db.query(Installment)
        .filter(Installment.loan_id == loan_id)
        .order_by(Installment.payment_month.asc(), Installment.payment_id.asc())
        .all()
    )


# =================================================
# ✅ PAYMENTS
# =================================================
@router.post("/{loan_id}/payments", response_model=PaymentResult)
def create_payment(loan_id: int, payload: PaymentCreate, db: Session = Depends(get_db)):
    try:
        outcome = record_payment(
            db,
            loan_id=loan_id,
            payment_id=payload.payment_id,
            principal_payment=payload.principal_payment,
            interest_payment=payload.interest_payment,
            payment_mode=payload.payment_mode,
            remarks=payload.remarks,
        )
    except (NotFoundError, InvalidAmountError, TransactionFailure) as e:
        raise to_http(e)

    return PaymentResult(
        loan_id=outcome.loan_id,
        payment_id=outcome.payment_id,
        new_loan_balance=float(outcome.new_loan_balance),
        principal_amount_paid=float(outcome.principal_amount_paid),
        completion_status=outcome.completion_status,
        installments_updated=outcome.installments_updated,
    )
