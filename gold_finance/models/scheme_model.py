from sqlalchemy import (
    Column, Integer, String, Text, DateTime, Numeric, ForeignKey, UniqueConstraint
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from gold_finance.utils.database import Base


class Scheme(Base):
    __tablename__ = "scheme_details"

    scheme_id = Column(Integer, primary_key=True, index=True)
    scheme_name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)

    created_by = Column(String(100), nullable=True)
    created_on = Column(DateTime, server_default=func.now())
    updated_by = Column(String(100), nullable=True)
    updated_on = Column(DateTime, server_default=func.now(), onupdate=func.now())

    slabs = relationship(
        "SchemeSlab",
        back_populates="scheme",
        cascade="all, delete-orphan",
        order_by="SchemeSlab.start_day",
        lazy="selectin",
    )


class SchemeSlab(Base):
    """Penalty rate applying to loans overdue between start_day and end_day (inclusive)."""

    __tablename__ = "loan_scheme_slab"
    __table_args__ = (
        UniqueConstraint("scheme_id", "start_day", name="uq_scheme_slab_start"),
    )

    slab_id = Column(Integer, primary_key=True, index=True)
    scheme_id = Column(
        Integer, ForeignKey("scheme_details.scheme_id", ondelete="CASCADE"), nullable=False, index=True
    )

    start_day = Column(Integer, nullable=False)
    end_day = Column(Integer, nullable=False)
    interest_rate = Column(Numeric(5, 2), nullable=False)

    scheme = relationship("Scheme", back_populates="slabs")
