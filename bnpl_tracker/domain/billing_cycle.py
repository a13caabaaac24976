"""Billing cycle calculator - maps calendar dates to 25th-to-25th billing windows"""

from datetime import date

from bnpl_tracker.domain.models import BillingCycle
from bnpl_tracker.utils.date_utils import DateLike, add_months, to_date

CYCLE_START_DAY = 25
DUE_DAY = 5

_MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def format_cycle_label(start: date, end: date) -> str:
    """Render "Dec 25 - Jan 25, 2025" style range labels"""
    return (
        f"{_MONTH_ABBR[start.month - 1]} {start.day} - "
        f"{_MONTH_ABBR[end.month - 1]} {end.day}, {end.year}"
    )


def get_billing_cycle(value: DateLike) -> BillingCycle:
    """
    Find the billing cycle containing a date.

    Rules:
    - day >= 25: cycle starts on the 25th of the same month
    - day < 25: cycle starts on the 25th of the previous month
    - cycle ends on the 25th of the following month
    - payment is due on the 5th of the month after the cycle ends

    Raises:
        InvalidDateError: if the input cannot be parsed
    """
    d = to_date(value)

    # Pin the day to 25 first so month arithmetic never overflows
    start = d.replace(day=CYCLE_START_DAY)
    if d.day < CYCLE_START_DAY:
        start = add_months(start, -1)

    end = add_months(start, 1)
    due = add_months(end, 1).replace(day=DUE_DAY)

    return BillingCycle(start=start, end=end, due=due, label=format_cycle_label(start, end))


def cycle_index(cycle: BillingCycle) -> int:
    """Integer key of a cycle: due year * 12 + zero-based due month"""
    return cycle.due.year * 12 + (cycle.due.month - 1)


def cycle_index_for(value: DateLike) -> int:
    return cycle_index(get_billing_cycle(value))


def billing_cycle_for_index(index: int) -> BillingCycle:
    """Inverse of cycle_index: the cycle whose due date falls in the indexed month"""
    year, month0 = divmod(index, 12)
    # Due month is two months after the cycle start month
    start = add_months(date(year, month0 + 1, CYCLE_START_DAY), -2)
    return get_billing_cycle(start)


def shift_anchor(anchor: DateLike, months: int) -> date:
    """Move a navigation anchor by whole months (previous/next cycle)"""
    return add_months(to_date(anchor), months)
