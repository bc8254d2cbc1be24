import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from gold_finance.utils.database import get_db
from gold_finance.models.customer_model import Customer
from gold_finance.schemas.customer_schema import CustomerCreate, CustomerOut, CustomerUpdate

router = APIRouter(prefix="/customers", tags=["Customers"])

logger = logging.getLogger(__name__)


def _phone_taken(db: Session, phone: Optional[str], exclude_id: Optional[int] = None) -> bool:
    if not phone:
        return False
    q = db.query(Customer).filter(Customer.phone_number == phone)
    if exclude_id is not None:
        q = q.filter(Customer.customer_id != exclude_id)
    return q.first() is not None


# CREATE
@router.post("", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
def create_customer(payload: CustomerCreate, db: Session = Depends(get_db)):
    if _phone_taken(db, payload.phone_number):
        raise HTTPException(409, "Phone number already registered")

    customer = Customer(
        customer_name=payload.customer_name,
        phone_number=payload.phone_number,
        address=payload.address,
    )
    db.add(customer)
    db.commit()
    db.refresh(customer)

    logger.info("[CUSTOMER] Created customer #%s '%s'.", customer.customer_id, customer.customer_name)
    return customer


# READ ALL
@router.get("", response_model=list[CustomerOut])
def list_customers(
        search: Optional[str] = Query(
            default=None,
            description="Match on name or phone number"
        ),
        db: Session = Depends(get_db),
):
    query = db.query(Customer)

    if search:
        like = f"%{search.strip()}%"
        query = query.filter(
            (Customer.customer_name.ilike(like)) | (Customer.phone_number.ilike(like))
        )

    return query.order_by(Customer.customer_name.asc()).all()


# READ ONE
@router.get("/{customer_id}", response_model=CustomerOut)
def get_customer(customer_id: int, db: Session = Depends(get_db)):
    customer = db.query(Customer).filter(Customer.customer_id == customer_id).first()
    if not customer:
        raise HTTPException(404, "Customer not found")

    return customer


# UPDATE
@router.put("/{customer_id}", response_model=CustomerOut)
def update_customer(customer_id: int, payload: CustomerUpdate, db: Session = Depends(get_db)):
    customer = db.query(Customer).filter(Customer.customer_id == customer_id).first()
    if not customer:
        raise HTTPException(404, "Customer not found")

    if _phone_taken(db, payload.phone_number, exclude_id=customer_id):
        raise HTTPException(409, "Phone number already registered")

    customer.customer_name = payload.customer_name
    customer.phone_number = payload.phone_number
    customer.address = payload.address
    db.commit()
    db.refresh(customer)
    return customer
