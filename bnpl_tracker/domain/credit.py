"""Credit utilization derived from the configured limit and used credit"""

from typing import Optional


def has_limit(credit_limit: Optional[float]) -> bool:
    return bool(credit_limit) and credit_limit > 0


def remaining_credit(credit_limit: Optional[float], used_credit: float) -> Optional[float]:
    """Limit minus used credit; None when no limit is configured"""
    if not has_limit(credit_limit):
        return None
    return credit_limit - used_credit


def credit_utilization(credit_limit: Optional[float], used_credit: float) -> Optional[float]:
    """Used credit as a percentage of the limit; None when no limit is configured"""
    if not has_limit(credit_limit):
        return None
    if not used_credit or used_credit <= 0:
        return 0.0
    return used_credit / credit_limit * 100
