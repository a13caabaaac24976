"""Unit tests for billing cycle calculation"""

import pytest
from datetime import date, datetime, timedelta
from bnpl_tracker.domain.billing_cycle import (
    billing_cycle_for_index,
    cycle_index,
    cycle_index_for,
    get_billing_cycle,
    shift_anchor,
)
from bnpl_tracker.domain.exceptions import InvalidDateError
from bnpl_tracker.utils.date_utils import add_months


def test_order_before_25th_belongs_to_previous_month_cycle():
    """2025-01-20 falls in Dec 25 - Jan 25, due Feb 5"""
    cycle = get_billing_cycle(date(2025, 1, 20))

    assert cycle.start == date(2024, 12, 25)
    assert cycle.end == date(2025, 1, 25)
    assert cycle.due == date(2025, 2, 5)


def test_order_on_or_after_25th_starts_new_cycle():
    """2025-01-26 falls in Jan 25 - Feb 25, due Mar 5"""
    cycle = get_billing_cycle(date(2025, 1, 26))

    assert cycle.start == date(2025, 1, 25)
    assert cycle.end == date(2025, 2, 25)
    assert cycle.due == date(2025, 3, 5)

    # The 25th itself opens the cycle
    assert get_billing_cycle(date(2025, 1, 25)).start == date(2025, 1, 25)


def test_cycle_label():
    assert get_billing_cycle(date(2025, 1, 20)).label == "Dec 25 - Jan 25, 2025"
    assert get_billing_cycle(date(2025, 1, 26)).label == "Jan 25 - Feb 25, 2025"


def test_accepts_strings_and_datetimes():
    expected = get_billing_cycle(date(2025, 1, 20))

    assert get_billing_cycle("2025-01-20") == expected
    assert get_billing_cycle("2025-01-20T15:30:00.000Z") == expected
    assert get_billing_cycle(datetime(2025, 1, 20, 23, 59)) == expected


def test_invalid_date_raises():
    with pytest.raises(InvalidDateError):
        get_billing_cycle("not a date")
    with pytest.raises(InvalidDateError):
        get_billing_cycle("")


def test_month_end_dates_do_not_shift_cycles():
    """Short months never push the start off the 25th"""
    # March 1 (previous month is February)
    cycle = get_billing_cycle(date(2025, 3, 1))
    assert cycle.start == date(2025, 2, 25)
    assert cycle.end == date(2025, 3, 25)

    # January 31 of a year where February has 28 days
    cycle = get_billing_cycle(date(2025, 1, 31))
    assert cycle.start == date(2025, 1, 25)
    assert cycle.end == date(2025, 2, 25)
    assert cycle.due == date(2025, 3, 5)


def test_year_rollover():
    cycle = get_billing_cycle(date(2024, 12, 30))
    assert cycle.start == date(2024, 12, 25)
    assert cycle.end == date(2025, 1, 25)
    assert cycle.due == date(2025, 2, 5)

    cycle = get_billing_cycle(date(2025, 1, 3))
    assert cycle.start == date(2024, 12, 25)


def test_start_is_always_25th_and_end_one_month_later():
    """Check every day across two years"""
    day = date(2024, 1, 1)
    while day < date(2026, 1, 1):
        cycle = get_billing_cycle(day)
        assert cycle.start.day == 25
        assert cycle.end == add_months(cycle.start, 1)
        assert cycle.start <= day < cycle.end

        expected_month = day.month if day.day >= 25 else add_months(day.replace(day=1), -1).month
        assert cycle.start.month == expected_month
        day += timedelta(days=1)


def test_cycle_index_uses_zero_based_due_month():
    cycle = get_billing_cycle(date(2025, 1, 20))  # due 2025-02-05
    assert cycle_index(cycle) == 2025 * 12 + 1
    assert cycle_index_for("2025-01-20") == 2025 * 12 + 1


def test_cycle_index_strictly_increasing_by_month():
    anchor = date(2024, 1, 31)
    previous = cycle_index_for(anchor)
    for months in range(1, 30):
        current = cycle_index_for(shift_anchor(anchor, months))
        assert current == previous + 1
        previous = current


def test_billing_cycle_for_index_is_inverse():
    for index in range(2024 * 12, 2027 * 12):
        cycle = billing_cycle_for_index(index)
        assert cycle_index(cycle) == index
        assert cycle.start.day == 25


def test_shift_anchor_clamps_to_month_end():
    assert shift_anchor(date(2025, 1, 31), 1) == date(2025, 2, 28)
    assert shift_anchor(date(2025, 3, 31), -1) == date(2025, 2, 28)
    assert shift_anchor(date(2025, 1, 15), -1) == date(2024, 12, 15)
