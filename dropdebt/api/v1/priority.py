"""/v1/priority - score, persist, list and archive bill priorities"""

import logging
import time
from typing import List, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from dropdebt.api.dependencies import get_request_id, resolve_now
from dropdebt.api.v1.schemas import (
    PriorityCalculationSchema,
    PriorityRequest,
    PriorityResponse,
    StoredPriorityItem,
    StoredPriorityResponse,
)
from dropdebt.config import settings
from dropdebt.domain.exceptions import BillNotFoundError, DomainException
from dropdebt.domain.models import DEFAULT_PRIORITY_FACTORS, Bill, PriorityCalculation
from dropdebt.domain.priority import rescore_bill
from dropdebt.infrastructure.database.repositories import PriorityRepository
from dropdebt.infrastructure.database.session import get_db
from dropdebt.infrastructure.observability.logging import log_priority_calculated
from dropdebt.infrastructure.observability.metrics import priority_failure_counter, record_priority

router = APIRouter()


def _score_request(
    request_body: PriorityRequest,
    request_id: str,
) -> Tuple[List[Tuple[Bill, PriorityCalculation]], List[str]]:
    """
    Score every bill in the request against one clock.

    A bill that cannot be scored is reported by id and skipped; the rest of the
    batch still goes through. Invalid weights fail the whole request.
    """
    now = resolve_now(request_body.now)
    factors = request_body.weights.to_factors() if request_body.weights else DEFAULT_PRIORITY_FACTORS
    typical_amount = request_body.typical_bill_amount or settings.typical_bill_amount

    scored: List[Tuple[Bill, PriorityCalculation]] = []
    errors: List[str] = []
    for bill_schema in request_body.bills:
        try:
            bill = bill_schema.to_domain(request_body.user_id)
            scored.append(rescore_bill(bill, now, factors, typical_amount))
        except Exception as e:
            priority_failure_counter.inc()
            logging.warning(
                f"Priority calculation failed: {e}",
                extra={"request_id": request_id, "bill_id": bill_schema.bill_id},
            )
            errors.append(f"Unable to calculate priority for bill {bill_schema.bill_id}")

    scored.sort(key=lambda pair: pair[1].final_score, reverse=True)
    for _, calculation in scored:
        record_priority(calculation.tier.value)
    return scored, errors


def _to_response(user_id: str, scored: List[Tuple[Bill, PriorityCalculation]], errors: List[str]) -> PriorityResponse:
    return PriorityResponse(
        user_id=user_id,
        calculations=[PriorityCalculationSchema.model_validate(calc) for _, calc in scored],
        errors=errors,
    )


@router.post("/priority", response_model=PriorityResponse)
def calculate_priority_scores(request_body: PriorityRequest, request: Request):
    """
    Score a batch of bills, highest priority first.

    Nothing is stored; use /priority/recalculate to persist.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        scored, errors = _score_request(request_body, request_id)
    except DomainException as e:
        logging.warning(f"Invalid priority request: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    duration_ms = (time.time() - start_time) * 1000
    top_score = scored[0][1].final_score if scored else 0.0
    log_priority_calculated(request_id, request_body.user_id, len(scored), top_score, duration_ms)

    return _to_response(request_body.user_id, scored, errors)


@router.post("/priority/recalculate", response_model=PriorityResponse)
def recalculate_priorities(
    request_body: PriorityRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Score a batch of bills and store each result.

    Storage is last-write-wins per (user_id, bill_id); a stored bill that was
    archived becomes active again.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        scored, errors = _score_request(request_body, request_id)

        priority_repo = PriorityRepository(db)
        for bill, calculation in scored:
            priority_repo.upsert(bill, calculation)
        db.commit()

    except DomainException as e:
        db.rollback()
        logging.warning(f"Invalid priority request: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    top_score = scored[0][1].final_score if scored else 0.0
    log_priority_calculated(request_id, request_body.user_id, len(scored), top_score, duration_ms)

    return _to_response(request_body.user_id, scored, errors)


@router.get("/priority", response_model=StoredPriorityResponse)
def list_priorities(
    user_id: str = Query(..., description="User identifier"),
    critical_only: bool = Query(False, description="Only bills scoring 90 or more"),
    db: Session = Depends(get_db),
):
    """Stored priorities for a user, highest first; archived bills are left out"""
    priority_repo = PriorityRepository(db)
    records = priority_repo.list_by_priority(user_id, critical_only=critical_only)

    return StoredPriorityResponse(
        user_id=user_id,
        bills=[StoredPriorityItem.model_validate(r) for r in records],
    )


@router.delete("/priority/{user_id}/{bill_id}", status_code=204)
def archive_priority(user_id: str, bill_id: str, request: Request, db: Session = Depends(get_db)):
    """Archive a bill's stored priority (soft delete)"""
    request_id = get_request_id(request)

    try:
        PriorityRepository(db).archive(user_id, bill_id)
        db.commit()
    except BillNotFoundError as e:
        db.rollback()
        logging.info(f"Archive skipped: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail=str(e))
