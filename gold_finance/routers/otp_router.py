import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from gold_finance.services.otp_store import (
    EXPIRED,
    MISMATCH,
    MISSING,
    OtpStore,
    normalize_phone,
)
from gold_finance.schemas.otp_schema import OtpSend, OtpVerify

router = APIRouter(prefix="/otp", tags=["OTP"])

logger = logging.getLogger(__name__)

_FAILURES = {
    MISSING: "Invalid or expired OTP. Please try again.",
    EXPIRED: "OTP has expired. Please request a new one.",
    MISMATCH: "Incorrect OTP entered.",
}


def get_otp_store(request: Request) -> OtpStore:
    return request.app.state.otp_store


@router.post("/send")
def send_otp(payload: OtpSend, store: OtpStore = Depends(get_otp_store)):
    store.issue(payload.phone)
    # SMS delivery is handled outside this service
    logger.info("[OTP] Generated OTP for %s (%s).", payload.name, normalize_phone(payload.phone))
    return {"message": "OTP sent successfully."}


@router.post("/verify")
def verify_otp(payload: OtpVerify, store: OtpStore = Depends(get_otp_store)):
    mobile = normalize_phone(payload.phone)
    result = store.verify(payload.phone, payload.otp)
    if result in _FAILURES:
        logger.warning("[OTP] Verification failed for %s: %s.", mobile, result)
        raise HTTPException(400, _FAILURES[result])

    logger.info("[OTP] Successfully verified OTP for %s.", mobile)
    return {"message": "OTP verified successfully."}
