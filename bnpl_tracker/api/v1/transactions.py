"""/v1/transactions - record, edit and delete purchases"""

from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from bnpl_tracker.api.dependencies import get_request_id
from bnpl_tracker.api.v1.schemas import TransactionCreate, TransactionSchema, TransactionUpdate
from bnpl_tracker.domain.allocation import apply_edit, build_transaction
from bnpl_tracker.domain.models import Share, TransactionDraft
from bnpl_tracker.infrastructure.database.repositories import TransactionRepository
from bnpl_tracker.infrastructure.database.session import get_db
from bnpl_tracker.infrastructure.observability.logging import log_mutation
from bnpl_tracker.infrastructure.observability.metrics import mutation_counter, record_transaction_created

router = APIRouter()


@router.get("/transactions", response_model=List[TransactionSchema])
def list_transactions(db: Session = Depends(get_db)):
    """All transactions in the order they were recorded"""
    return [TransactionSchema.from_domain(t) for t in TransactionRepository(db).load()]


@router.post("/transactions", response_model=TransactionSchema, status_code=201)
def create_transaction(
    body: TransactionCreate,
    db: Session = Depends(get_db),
    request_id: str = Depends(get_request_id),
):
    """
    Record a purchase.

    The plan's month count and the starting cycle index are fixed here
    and never recomputed. Shared purchases must split the per-cycle
    amount exactly (within 0.01) across at least two borrowers.
    """
    draft = TransactionDraft(
        product_name=body.product_name,
        amount=body.amount,
        order_date=body.order_date,
        payment_plan=body.payment_plan,
        monthly_payment=body.monthly_payment,
        mode=body.mode,
        borrower=body.borrower,
        shares=[Share(borrower=s.borrower, amount_per_cycle=s.amount_per_cycle) for s in body.shares],
        description=body.description,
    )
    txn = build_transaction(draft)

    TransactionRepository(db).append(txn)
    db.commit()

    record_transaction_created(txn.payment_plan, txn.mode)
    log_mutation(
        request_id,
        "transaction",
        "create",
        txn.id,
        payment_plan=txn.payment_plan,
        start_cycle_index=txn.start_cycle_index,
        total_months=txn.total_months,
    )
    return TransactionSchema.from_domain(txn)


@router.patch("/transactions/{transaction_id}", response_model=TransactionSchema)
def edit_transaction(
    transaction_id: str,
    body: TransactionUpdate,
    db: Session = Depends(get_db),
    request_id: str = Depends(get_request_id),
):
    """Edit a transaction; its cycle anchor and month count stay as recorded"""
    repo = TransactionRepository(db)
    changes = body.model_dump(exclude_unset=True)
    if changes.get("shares") is not None:
        changes["shares"] = [Share(borrower=s.borrower, amount_per_cycle=s.amount_per_cycle) for s in body.shares]

    txn = apply_edit(repo.get(transaction_id), changes)
    repo.update(txn)
    db.commit()

    mutation_counter.labels(entity="transaction", action="update").inc()
    log_mutation(request_id, "transaction", "update", txn.id, fields=sorted(changes))
    return TransactionSchema.from_domain(txn)


@router.delete("/transactions/{transaction_id}", status_code=204)
def delete_transaction(
    transaction_id: str,
    db: Session = Depends(get_db),
    request_id: str = Depends(get_request_id),
):
    TransactionRepository(db).remove(transaction_id)
    db.commit()

    mutation_counter.labels(entity="transaction", action="delete").inc()
    log_mutation(request_id, "transaction", "delete", transaction_id)
    return Response(status_code=204)
