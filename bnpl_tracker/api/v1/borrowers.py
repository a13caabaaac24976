"""/v1/borrowers - people who owe part of the bill"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bnpl_tracker.api.dependencies import get_request_id
from bnpl_tracker.api.v1.schemas import BorrowerCreate, BorrowerListResponse
from bnpl_tracker.infrastructure.database.repositories import BorrowerRepository
from bnpl_tracker.infrastructure.database.session import get_db
from bnpl_tracker.infrastructure.observability.logging import log_mutation
from bnpl_tracker.infrastructure.observability.metrics import mutation_counter

router = APIRouter()


@router.get("/borrowers", response_model=BorrowerListResponse)
def list_borrowers(db: Session = Depends(get_db)):
    return BorrowerListResponse(borrowers=BorrowerRepository(db).load())


@router.post("/borrowers", response_model=BorrowerListResponse, status_code=201)
def add_borrower(
    body: BorrowerCreate,
    db: Session = Depends(get_db),
    request_id: str = Depends(get_request_id),
):
    """Add a borrower; existing names are left as they are"""
    repo = BorrowerRepository(db)
    if repo.append(body.name):
        db.commit()
        mutation_counter.labels(entity="borrower", action="create").inc()
        log_mutation(request_id, "borrower", "create", body.name.strip())
    return BorrowerListResponse(borrowers=repo.load())


@router.delete("/borrowers/{name}", response_model=BorrowerListResponse)
def remove_borrower(
    name: str,
    db: Session = Depends(get_db),
    request_id: str = Depends(get_request_id),
):
    """Remove a borrower. Personal cannot be removed"""
    repo = BorrowerRepository(db)
    repo.remove(name)
    db.commit()

    mutation_counter.labels(entity="borrower", action="delete").inc()
    log_mutation(request_id, "borrower", "delete", name)
    return BorrowerListResponse(borrowers=repo.load())
