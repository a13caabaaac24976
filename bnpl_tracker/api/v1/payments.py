"""/v1/payments - borrower payments against billing cycles"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from bnpl_tracker.api.dependencies import get_request_id
from bnpl_tracker.api.v1.schemas import PaymentCreate, PaymentSchema, PaymentUpdate
from bnpl_tracker.domain.models import Payment
from bnpl_tracker.domain.payments import apply_payment_edit
from bnpl_tracker.infrastructure.database.repositories import PaymentRepository
from bnpl_tracker.infrastructure.database.session import get_db
from bnpl_tracker.infrastructure.observability.logging import log_mutation
from bnpl_tracker.infrastructure.observability.metrics import mutation_counter
from bnpl_tracker.utils.date_utils import utc_now

router = APIRouter()


@router.get("/payments", response_model=List[PaymentSchema])
def list_payments(
    borrower: Optional[str] = Query(None),
    cycle_index: Optional[int] = Query(None, alias="cycleIndex"),
    db: Session = Depends(get_db),
):
    payments = PaymentRepository(db).load(borrower=borrower, cycle_index=cycle_index)
    return [PaymentSchema.from_domain(p) for p in payments]


@router.post("/payments", response_model=PaymentSchema, status_code=201)
def record_payment(
    body: PaymentCreate,
    db: Session = Depends(get_db),
    request_id: str = Depends(get_request_id),
):
    """Record money received from a borrower for one cycle"""
    now = utc_now()
    payment = Payment(
        id=str(uuid.uuid4()),
        borrower=body.borrower,
        cycle_index=body.cycle_index,
        amount=body.amount,
        date=body.date,
        method=body.method,
        method_note=body.method_note,
        created_at=now,
        updated_at=now,
    )
    PaymentRepository(db).append(payment)
    db.commit()

    mutation_counter.labels(entity="payment", action="create").inc()
    log_mutation(request_id, "payment", "create", payment.id, borrower=payment.borrower, cycle_index=payment.cycle_index)
    return PaymentSchema.from_domain(payment)


@router.patch("/payments/{payment_id}", response_model=PaymentSchema)
def edit_payment(
    payment_id: str,
    body: PaymentUpdate,
    db: Session = Depends(get_db),
    request_id: str = Depends(get_request_id),
):
    """Edit a payment; moving it to another cycle happens only here"""
    repo = PaymentRepository(db)
    changes = body.model_dump(exclude_unset=True)

    payment = apply_payment_edit(repo.get(payment_id), changes)
    repo.update(payment)
    db.commit()

    mutation_counter.labels(entity="payment", action="update").inc()
    log_mutation(request_id, "payment", "update", payment.id, fields=sorted(changes))
    return PaymentSchema.from_domain(payment)


@router.delete("/payments/{payment_id}", status_code=204)
def delete_payment(
    payment_id: str,
    db: Session = Depends(get_db),
    request_id: str = Depends(get_request_id),
):
    PaymentRepository(db).remove(payment_id)
    db.commit()

    mutation_counter.labels(entity="payment", action="delete").inc()
    log_mutation(request_id, "payment", "delete", payment_id)
    return Response(status_code=204)
