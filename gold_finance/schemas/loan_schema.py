from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from typing import Optional, List, Literal


class OrnamentIn(BaseModel):
    ornament_id: Optional[int] = None
    ornament_type: Optional[str] = None
    ornament_name: str = Field(min_length=1)
    grams: float = Field(gt=0)
    karat: Optional[int] = Field(default=None, gt=0, le=24)


class LoanCreate(BaseModel):
    customer_id: int
    scheme_id: Optional[int] = None

    interest_rate: float = Field(gt=0)
    loan_datetime: datetime
    due_date: date

    eligible_amount: float = Field(ge=0)
    amount_issued: float = Field(gt=0)
    processing_fee: float = Field(default=0, ge=0)

    ornaments: List[OrnamentIn] = Field(min_length=1)


class OrnamentOut(BaseModel):
    loan_ornament_id: int
    ornament_id: Optional[int] = None
    ornament_type: Optional[str] = None
    ornament_name: str
    grams: float
    karat: Optional[int] = None

    class Config:
        from_attributes = True


class InstallmentOut(BaseModel):
    payment_id: int
    payment_month: date

    loan_balance: float
    principal_amount_paid: float
    interest_amount_due: float
    interest_amount_paid: float

    payment_status: str
    is_active: bool
    payment_date: Optional[datetime] = None
    payment_mode: Optional[str] = None
    remarks: Optional[str] = None

    class Config:
        from_attributes = True


class LoanListOut(BaseModel):
    loan_id: int
    customer_id: int
    scheme_id: Optional[int] = None

    net_amount_issued: float
    principal_amount_paid: float
    interest_rate: float
    current_interest_rate: float

    loan_datetime: datetime
    due_date: date
    completion_status: str

    class Config:
        from_attributes = True


class LoanOut(LoanListOut):
    eligible_amount: float
    amount_issued: float
    processing_fee: float
    penalty_applied_on: Optional[date] = None
    current_installment_id: Optional[int] = None

    installments: List[InstallmentOut] = []
    ornaments: List[OrnamentOut] = []


class PaymentCreate(BaseModel):
    payment_id: int
    principal_payment: float = Field(default=0, ge=0)
    interest_payment: float = Field(default=0, ge=0)
    payment_mode: Literal["CASH", "UPI", "BANK", "CARD", "OTHER"] = "CASH"
    remarks: Optional[str] = None

    @field_validator("remarks", mode="before")
    def empty_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None


class PaymentResult(BaseModel):
    loan_id: int
    payment_id: int
    new_loan_balance: float
    principal_amount_paid: float
    completion_status: str
    installments_updated: int


class OverdueRowOut(BaseModel):
    loan_id: int
    customer_id: int
    customer_name: str
    payment_id: int
    payment_month: date
    payment_status: str
    loan_balance: float
    interest_due_left: float
    current_interest_rate: float
