from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Numeric, Boolean, Text, ForeignKey, Index
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from gold_finance.utils.database import Base


class Installment(Base):
    __tablename__ = "loan_payments"
    __table_args__ = (
        Index("ix_loan_payments_loan_active", "loan_id", "is_active", "payment_status"),
    )

    payment_id = Column(Integer, primary_key=True, index=True)
    loan_id = Column(Integer, ForeignKey("loan_details.loan_id", ondelete="CASCADE"), nullable=False, index=True)

    payment_month = Column(Date, nullable=False, index=True)

    # principal outstanding as of this installment
    loan_balance = Column(Numeric(12, 2), nullable=False, default=0)

    principal_amount_paid = Column(Numeric(12, 2), nullable=False, default=0)
    interest_amount_due = Column(Numeric(12, 2), nullable=False, default=0)
    interest_amount_paid = Column(Numeric(12, 2), nullable=False, default=0)

    # Pending / Paid / Overdue / Skipped
    payment_status = Column(String(20), nullable=False, default="Pending")
    is_active = Column(Boolean, nullable=False, default=True)

    payment_date = Column(DateTime, nullable=True)
    payment_mode = Column(String(20), nullable=True)
    remarks = Column(Text, nullable=True)

    created_on = Column(DateTime, server_default=func.now())
    updated_on = Column(DateTime, server_default=func.now(), onupdate=func.now())

    loan = relationship("Loan", back_populates="installments")
