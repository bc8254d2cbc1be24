from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional


class CustomerCreate(BaseModel):
    customer_name: str = Field(..., min_length=1, max_length=150)
    phone_number: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None

    @field_validator("customer_name", mode="before")
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("phone_number", "address", mode="before")
    def empty_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None


class CustomerUpdate(CustomerCreate):
    pass


class CustomerOut(BaseModel):
    customer_id: int
    customer_name: str
    phone_number: Optional[str] = None
    address: Optional[str] = None
    created_on: Optional[datetime] = None

    class Config:
        from_attributes = True
