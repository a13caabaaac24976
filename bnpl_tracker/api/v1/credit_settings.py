"""/v1/settings - credit limit and settled cycles"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bnpl_tracker.api.dependencies import get_request_id
from bnpl_tracker.api.v1.schemas import CreditLimitUpdate, SettingsResponse
from bnpl_tracker.infrastructure.database.repositories import SettingsRepository
from bnpl_tracker.infrastructure.database.session import get_db
from bnpl_tracker.infrastructure.observability.logging import log_mutation
from bnpl_tracker.infrastructure.observability.metrics import mutation_counter

router = APIRouter()


@router.get("/settings", response_model=SettingsResponse)
def get_settings(db: Session = Depends(get_db)):
    current = SettingsRepository(db).load()
    return SettingsResponse(credit_limit=current.credit_limit, paid_cycles=current.paid_cycles)


@router.put("/settings/credit-limit", response_model=SettingsResponse)
def update_credit_limit(
    body: CreditLimitUpdate,
    db: Session = Depends(get_db),
    request_id: str = Depends(get_request_id),
):
    """Set the global credit limit (0 = no limit)"""
    repo = SettingsRepository(db)
    repo.set_credit_limit(body.credit_limit)
    db.commit()

    mutation_counter.labels(entity="settings", action="update").inc()
    log_mutation(request_id, "settings", "update", "credit_limit", credit_limit=body.credit_limit)

    current = repo.load()
    return SettingsResponse(credit_limit=current.credit_limit, paid_cycles=current.paid_cycles)
