"""Dependency injection for FastAPI endpoints"""

from datetime import date
from typing import Optional

from fastapi import Query, Request

from bnpl_tracker.domain.billing_cycle import shift_anchor


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_anchor_date(
    anchor_date: Optional[date] = Query(None, description="Any date inside the wanted cycle (default: today)"),
    offset: int = Query(0, description="Whole months to move the anchor (previous/next cycle)"),
) -> date:
    """Resolve the navigation anchor used to pick the current cycle"""
    return shift_anchor(anchor_date or date.today(), offset)
