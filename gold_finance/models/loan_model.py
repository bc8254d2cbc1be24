# gold_finance/models/loan_model.py

from sqlalchemy import (
    Column,
    Integer,
    String,
    Date,
    DateTime,
    Numeric,
    ForeignKey,
    Index,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from gold_finance.utils.database import Base


class Loan(Base):
    __tablename__ = "loan_details"

    __table_args__ = (
        Index("ix_loan_details_status", "completion_status"),
        Index("ix_loan_details_customer_status", "customer_id", "completion_status"),
    )

    loan_id = Column(Integer, primary_key=True, index=True)

    customer_id = Column(Integer, ForeignKey("customers.customer_id", ondelete="RESTRICT"), nullable=False, index=True)
    scheme_id = Column(Integer, ForeignKey("scheme_details.scheme_id", ondelete="SET NULL"), nullable=True)

    eligible_amount = Column(Numeric(12, 2), nullable=False, server_default="0")
    amount_issued = Column(Numeric(12, 2), nullable=False)
    processing_fee = Column(Numeric(12, 2), nullable=False, server_default="0")

    # principal actually handed over (amount_issued - processing_fee)
    net_amount_issued = Column(Numeric(12, 2), nullable=False)
    principal_amount_paid = Column(Numeric(12, 2), nullable=False, default=0)

    # annual %
    interest_rate = Column(Numeric(5, 2), nullable=False)
    current_interest_rate = Column(Numeric(5, 2), nullable=False)

    loan_datetime = Column(DateTime, nullable=False)
    due_date = Column(Date, nullable=False)
    penalty_applied_on = Column(Date, nullable=True)

    # Pending / Completed
    completion_status = Column(String(20), nullable=False, default="Pending")

    # installment the accrual engine works on; moved in the same
    # transaction as whatever opens or re-anchors an installment
    current_installment_id = Column(Integer, nullable=True)

    created_on = Column(DateTime, server_default=func.now(), nullable=True)
    updated_on = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=True)

    customer = relationship("Customer", back_populates="loans")
    scheme = relationship("Scheme")

    installments = relationship(
        "Installment",
        back_populates="loan",
        cascade="all, delete-orphan",
        order_by="Installment.payment_month",
        lazy="selectin",
        passive_deletes=True,
    )
    ornaments = relationship(
        "Ornament",
        back_populates="loan",
        cascade="all, delete-orphan",
        lazy="selectin",
        passive_deletes=True,
    )
