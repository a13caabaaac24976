"""/v1/plans - payment plan table and form helpers"""

from typing import List, Optional

from fastapi import APIRouter

from bnpl_tracker.api.v1.schemas import (
    InterestPreviewRequest,
    InterestPreviewResponse,
    PlanSchema,
    SplitRequest,
    SplitResponse,
)
from bnpl_tracker.domain.allocation import interest_preview, split_evenly
from bnpl_tracker.domain.models import PAYMENT_PLANS

router = APIRouter()


@router.get("/plans", response_model=List[PlanSchema])
def list_plans():
    return [PlanSchema(value=p.value, label=p.label, months=p.months) for p in PAYMENT_PLANS]


@router.post("/plans/interest-preview", response_model=Optional[InterestPreviewResponse])
def preview_interest(body: InterestPreviewRequest):
    """Total paid and implied interest of an installment plan (null for single-pay)"""
    preview = interest_preview(body.amount, body.monthly_payment, body.payment_plan)
    return InterestPreviewResponse(**preview) if preview else None


@router.post("/plans/split", response_model=SplitResponse)
def split_amount(body: SplitRequest):
    """Split a per-cycle amount evenly; the last row takes the rounding remainder"""
    return SplitResponse(amounts=split_evenly(body.amount, body.rows))
