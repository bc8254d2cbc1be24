from fastapi import APIRouter, Depends

from gold_finance.utils.database import SessionLocal
from gold_finance.services.accrual_service import run_accrual
from gold_finance.services.penalty_service import run_penalty_check
from gold_finance.schemas.job_schema import JobRunOut

router = APIRouter(prefix="/jobs", tags=["Jobs"])


def get_session_factory():
    return SessionLocal


# Manual triggers for the scheduled jobs; same code path as the cron runs.
@router.post("/accrual/run", response_model=JobRunOut)
def trigger_accrual(session_factory=Depends(get_session_factory)):
    return run_accrual(session_factory=session_factory).to_dict()


@router.post("/penalty/run", response_model=JobRunOut)
def trigger_penalty(session_factory=Depends(get_session_factory)):
    return run_penalty_check(session_factory=session_factory).to_dict()
