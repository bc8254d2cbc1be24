import logging
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.orm import Session

from gold_finance.core.config import ACCRUAL_CRON, APP_TIMEZONE, PENALTY_CRON
from gold_finance.services.accrual_service import run_accrual
from gold_finance.services.penalty_service import run_penalty_check
from gold_finance.utils.database import SessionLocal

logger = logging.getLogger(__name__)

ACCRUAL_JOB_ID = "interest_update"
PENALTY_JOB_ID = "penalty_check"


def build_scheduler(
        session_factory: Callable[[], Session] = SessionLocal,
        accrual_cron: str = ACCRUAL_CRON,
        penalty_cron: str = PENALTY_CRON,
        timezone: str = APP_TIMEZONE,
) -> BackgroundScheduler:
    """
    Register both loan jobs on a (not yet started) background scheduler.

    max_instances=1 keeps a slow run from overlapping the next one of the
    same job; coalesce folds missed runs into a single catch-up run.
    """
    scheduler = BackgroundScheduler(timezone=timezone)

    scheduler.add_job(
        run_accrual,
        trigger=CronTrigger.from_crontab(accrual_cron, timezone=timezone),
        kwargs={"session_factory": session_factory},
        id=ACCRUAL_JOB_ID,
        name="Daily interest update",
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    scheduler.add_job(
        run_penalty_check,
        trigger=CronTrigger.from_crontab(penalty_cron, timezone=timezone),
        kwargs={"session_factory": session_factory},
        id=PENALTY_JOB_ID,
        name="Penalty check",
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )

    logger.info(
        "[CRON] Scheduled interest update (%s) and penalty check (%s) in %s.",
        accrual_cron, penalty_cron, timezone,
    )
    return scheduler
