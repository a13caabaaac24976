"""/v1/cycles - billing cycle summaries, listings and settled markers"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bnpl_tracker.api.dependencies import get_anchor_date, get_request_id
from bnpl_tracker.api.v1.schemas import (
    BorrowerTotalsSchema,
    CycleSchema,
    CycleSummaryResponse,
    CycleTransactionSchema,
    PaidToggleResponse,
    SnapshotSchema,
    TransactionPageResponse,
)
from bnpl_tracker.config import settings
from bnpl_tracker.domain.aggregation import aggregate, rank_borrowers, select_active
from bnpl_tracker.domain.billing_cycle import billing_cycle_for_index, get_billing_cycle
from bnpl_tracker.domain.listing import filter_transactions, paginate, search_transactions
from bnpl_tracker.domain.models import BillingCycle
from bnpl_tracker.infrastructure.database.repositories import (
    BorrowerRepository,
    PaymentRepository,
    SettingsRepository,
    TransactionRepository,
)
from bnpl_tracker.infrastructure.database.session import get_db
from bnpl_tracker.infrastructure.observability.logging import log_mutation
from bnpl_tracker.infrastructure.observability.metrics import mutation_counter, record_credit

router = APIRouter()


def _summarize(db: Session, cycle: BillingCycle) -> CycleSummaryResponse:
    credit = SettingsRepository(db).load()
    summary = aggregate(
        transactions=TransactionRepository(db).load(),
        payments=PaymentRepository(db).load(),
        borrowers=BorrowerRepository(db).load(),
        cycle=cycle,
        paid_cycles=credit.paid_cycles,
        credit_limit=credit.credit_limit,
    )
    record_credit(summary.used_credit, summary.credit_utilization)

    return CycleSummaryResponse(
        cycle=CycleSchema.from_domain(summary.cycle, summary.cycle_index),
        is_paid=summary.is_paid,
        current_cycle_total=summary.totals.total,
        current_cycle_bnpl_total=summary.totals.bnpl_total,
        current_cycle_installment_total=summary.totals.installment_total,
        borrowers=[
            BorrowerTotalsSchema.from_domain(name, summary.per_borrower[name])
            for name in rank_borrowers(summary.per_borrower)
        ],
        snapshot=SnapshotSchema(
            average_due_per_borrower=summary.snapshot.average_due_per_borrower,
            average_ticket_size=summary.snapshot.average_ticket_size,
            highest_borrower=summary.snapshot.highest_borrower,
            highest_borrower_due=summary.snapshot.highest_borrower_due,
        ),
        used_credit=summary.used_credit,
        credit_limit=summary.credit_limit,
        remaining_credit=summary.remaining_credit,
        credit_utilization=summary.credit_utilization,
        transactions=[CycleTransactionSchema.for_cycle(t, summary.cycle_index) for t in summary.active],
    )


@router.get("/cycles/current", response_model=CycleSummaryResponse)
def get_current_cycle(
    anchor: date = Depends(get_anchor_date),
    db: Session = Depends(get_db),
):
    """
    Summary of the cycle containing the anchor date.

    Returns:
        Cycle boundaries, totals due split by plan type,
        per-borrower due/paid/balance, and credit usage across all cycles
    """
    return _summarize(db, get_billing_cycle(anchor))


@router.get("/cycles/{cycle_index}", response_model=CycleSummaryResponse)
def get_cycle(cycle_index: int, db: Session = Depends(get_db)):
    return _summarize(db, billing_cycle_for_index(cycle_index))


@router.get("/cycles/{cycle_index}/transactions", response_model=TransactionPageResponse)
def list_cycle_transactions(
    cycle_index: int,
    borrower: Optional[str] = Query(None, description="Borrower name or 'all'"),
    plan: Optional[str] = Query(None, description="Payment plan value or 'all'"),
    q: Optional[str] = Query(None, description="Free-text search"),
    page: int = Query(1),
    db: Session = Depends(get_db),
):
    """Transactions due in a cycle, filtered, searched and paginated"""
    active = select_active(TransactionRepository(db).load(), billing_cycle_for_index(cycle_index))
    matches = search_transactions(filter_transactions(active, borrower=borrower, plan=plan), q)
    result = paginate(matches, page, settings.page_size)

    return TransactionPageResponse(
        cycle_index=cycle_index,
        page=result.page,
        total_pages=result.total_pages,
        total_items=result.total_items,
        transactions=[CycleTransactionSchema.for_cycle(t, cycle_index) for t in result.items],
    )


@router.post("/cycles/{cycle_index}/paid", response_model=PaidToggleResponse)
def toggle_cycle_paid(
    cycle_index: int,
    db: Session = Depends(get_db),
    request_id: str = Depends(get_request_id),
):
    """Flip the settled marker of a cycle"""
    is_paid = SettingsRepository(db).toggle_paid_cycle(cycle_index)
    db.commit()

    mutation_counter.labels(entity="settings", action="update").inc()
    log_mutation(request_id, "settings", "toggle_paid", str(cycle_index), is_paid=is_paid)
    return PaidToggleResponse(cycle_index=cycle_index, is_paid=is_paid)
