"""/v1/data - full export and full-replace import"""

import logging
import time
from datetime import date
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bnpl_tracker.api.dependencies import get_anchor_date, get_request_id
from bnpl_tracker.api.v1.schemas import ImportResponse
from bnpl_tracker.domain.exceptions import ImportFormatError
from bnpl_tracker.domain.portability import build_export, parse_import
from bnpl_tracker.infrastructure.database.repositories import (
    BorrowerRepository,
    PaymentRepository,
    SettingsRepository,
    TransactionRepository,
)
from bnpl_tracker.infrastructure.database.session import get_db
from bnpl_tracker.infrastructure.observability.logging import log_import
from bnpl_tracker.infrastructure.observability.metrics import (
    import_counter,
    mutation_counter,
    storage_failures_counter,
    validation_failures_counter,
)

router = APIRouter()


@router.get("/data/export")
def export_data(
    anchor: date = Depends(get_anchor_date),
    db: Session = Depends(get_db),
):
    """Export every collection and setting as one JSON document"""
    credit = SettingsRepository(db).load()
    return build_export(
        borrowers=BorrowerRepository(db).load(),
        transactions=TransactionRepository(db).load(),
        payments=PaymentRepository(db).load(),
        credit_limit=credit.credit_limit,
        paid_cycles=credit.paid_cycles,
        cycle_anchor_date=anchor,
    )


@router.post("/data/import", response_model=ImportResponse)
def import_data(
    document: Any = Body(...),
    db: Session = Depends(get_db),
    request_id: str = Depends(get_request_id),
):
    """
    Replace all data with the contents of an export document.

    Flow:
    1. Validate the document (borrowers and transactions must be arrays)
    2. Replace borrowers, transactions, and payments/settings when present
    3. Commit everything at once, or roll back on any storage error
    """
    start_time = time.time()

    try:
        bundle = parse_import(document)
    except ImportFormatError as e:
        validation_failures_counter.labels(kind="import").inc()
        import_counter.labels(outcome="rejected").inc()
        logging.warning(f"Import rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail="Invalid file format. Please select a valid export file.")

    try:
        BorrowerRepository(db).replace_all(bundle.borrowers)
        TransactionRepository(db).replace_all(bundle.transactions)
        if bundle.payments is not None:
            PaymentRepository(db).replace_all(bundle.payments)

        settings_repo = SettingsRepository(db)
        if bundle.credit_limit is not None:
            settings_repo.set_credit_limit(bundle.credit_limit)
        if bundle.paid_cycles is not None:
            settings_repo.set_paid_cycles(bundle.paid_cycles)

        db.commit()

    except SQLAlchemyError as e:
        db.rollback()
        storage_failures_counter.inc()
        import_counter.labels(outcome="failed").inc()
        logging.error(f"Import failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Failed to import data. Please try again.")

    import_counter.labels(outcome="success").inc()
    mutation_counter.labels(entity="data", action="replace").inc()
    payment_count = len(bundle.payments) if bundle.payments is not None else None
    log_import(
        request_id,
        len(bundle.borrowers),
        len(bundle.transactions),
        payment_count,
        (time.time() - start_time) * 1000,
    )

    return ImportResponse(
        borrowers=len(bundle.borrowers),
        transactions=len(bundle.transactions),
        payments=payment_count,
        cycle_anchor_date=bundle.cycle_anchor_date,
    )
