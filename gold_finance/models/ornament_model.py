from sqlalchemy import Column, Integer, String, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from gold_finance.utils.database import Base


class Ornament(Base):
    __tablename__ = "loan_ornament_details"

    loan_ornament_id = Column(Integer, primary_key=True, index=True)
    loan_id = Column(Integer, ForeignKey("loan_details.loan_id", ondelete="CASCADE"), nullable=False, index=True)

    # catalog reference, not enforced here
    ornament_id = Column(Integer, nullable=True)
    ornament_type = Column(String(50), nullable=True)
    ornament_name = Column(String(100), nullable=False)
    grams = Column(Numeric(10, 3), nullable=False)
    karat = Column(Integer, nullable=True)

    loan = relationship("Loan", back_populates="ornaments")
