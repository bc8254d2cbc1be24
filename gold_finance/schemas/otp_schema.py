from pydantic import BaseModel, Field


class OtpSend(BaseModel):
    phone: str = Field(..., min_length=10)
    name: str = Field(..., min_length=1)


class OtpVerify(BaseModel):
    phone: str = Field(..., min_length=10)
    otp: str = Field(..., min_length=1)
