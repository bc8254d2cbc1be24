from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import Boolean, Date, bindparam, text
from datetime import date
from typing import Optional

from gold_finance.utils import clock
from gold_finance.utils.database import get_db
from gold_finance.schemas.loan_schema import OverdueRowOut

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/overdue", response_model=list[OverdueRowOut])
def overdue_report(as_on: Optional[date] = None, db: Session = Depends(get_db)):
    as_on = as_on or clock.today()
    rows = db.execute(
        text("""
             select l.loan_id,
                    l.customer_id,
                    c.customer_name,
                    i.payment_id,
                    i.payment_month,
                    i.payment_status,
                    i.loan_balance,
                    (i.interest_amount_due - i.interest_amount_paid) as interest_due_left,
                    l.current_interest_rate
             from loan_payments i
                      join loan_details l on l.loan_id = i.loan_id
                      join customers c on c.customer_id = l.customer_id
             where i.is_active = :active
               and i.payment_status in ('Pending', 'Overdue')
               and i.payment_month < :as_on
               and l.completion_status = 'Pending'
             order by i.payment_month asc, i.payment_id asc
             """).bindparams(bindparam("as_on", type_=Date), bindparam("active", type_=Boolean)),
        {"as_on": as_on, "active": True},
    ).mappings().all()

    return [
        OverdueRowOut(
            loan_id=r["loan_id"],
            customer_id=r["customer_id"],
            customer_name=r["customer_name"],
            payment_id=r["payment_id"],
            payment_month=r["payment_month"],
            payment_status=r["payment_status"],
            loan_balance=float(r["loan_balance"]),
            interest_due_left=float(r["interest_due_left"]),
            current_interest_rate=float(r["current_interest_rate"]),
        )
        for r in rows
    ]
