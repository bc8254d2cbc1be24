from datetime import date, datetime
from zoneinfo import ZoneInfo

from gold_finance.core.config import APP_TIMEZONE


def now() -> datetime:
    """Wall-clock time in the business timezone, naive like the DB columns."""
    return datetime.now(ZoneInfo(APP_TIMEZONE)).replace(tzinfo=None)


def today() -> date:
    return now().date()
