from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from gold_finance.utils.database import Base


class Customer(Base):
    __tablename__ = "customers"

    customer_id = Column(Integer, primary_key=True, index=True)
    customer_name = Column(String(150), nullable=False)
    phone_number = Column(String(20), nullable=True, index=True)
    address = Column(Text, nullable=True)

    created_on = Column(DateTime, server_default=func.now())

    loans = relationship("Loan", back_populates="customer")
