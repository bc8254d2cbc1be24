from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP

from dateutil.relativedelta import relativedelta

DAYS_IN_YEAR = Decimal("365")
MONTHS_IN_YEAR = Decimal("12")

# first installment always carries this many days of interest
INITIAL_INTEREST_DAYS = 15

# a balance at or below this counts as fully repaid
CLOSE_TOLERANCE = Decimal("0.01")


def money(x) -> Decimal:
    """Always return 2-decimal Decimal with HALF_UP rounding."""
    if x is None:
        x = 0
    if not isinstance(x, Decimal):
        x = Decimal(str(x))
    return x.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def daily_interest(principal: Decimal, annual_rate_percent: Decimal) -> Decimal:
    """
    Unrounded interest for one day:
      principal * rate% / 365
    """
    principal = Decimal(str(principal))
    rate = Decimal(str(annual_rate_percent))
    return principal * rate / Decimal("100") / DAYS_IN_YEAR


def prorated_interest(principal: Decimal, annual_rate_percent: Decimal, days: int) -> Decimal:
    """
    DAILY PRO-RATA:
      interest = principal * rate% / 365 * days

    Example:
      principal=100000, rate=12, days=15 => 493.15
      principal=100000, rate=12, days=20 => 657.53
    """
    return money(daily_interest(principal, annual_rate_percent) * Decimal(int(days)))


def monthly_interest(remaining_principal: Decimal, annual_rate_percent: Decimal) -> Decimal:
    """
    MONTHLY (used once a loan is on a penalty slab):
      interest = remaining * rate% / 12
    """
    remaining = Decimal(str(remaining_principal))
    rate = Decimal(str(annual_rate_percent))
    return money(remaining * rate / Decimal("100") / MONTHS_IN_YEAR)


def remaining_principal(net_amount_issued: Decimal, principal_amount_paid: Decimal) -> Decimal:
    return money(money(net_amount_issued) - money(principal_amount_paid))


def is_fully_paid(balance: Decimal) -> bool:
    return money(balance) <= CLOSE_TOLERANCE


def whole_days_between(start, end) -> int:
    """Whole days elapsed from start to end, floored (negative if end is earlier)."""
    if isinstance(start, datetime) and not isinstance(end, datetime):
        end = datetime.combine(end, datetime.min.time())
    elif isinstance(end, datetime) and not isinstance(start, datetime):
        start = datetime.combine(start, datetime.min.time())
    delta = end - start
    return delta.days


def add_month(d: date) -> date:
    """Same day next month, clamped to the month's last day (Jan 31 -> Feb 28)."""
    return d + relativedelta(months=1)
