"""POST /v1/progress - bills brought current and weeks left to stability"""

import logging

from fastapi import APIRouter, HTTPException, Request

from dropdebt.api.dependencies import get_request_id, resolve_now
from dropdebt.api.v1.schemas import ProgressRequest, ProgressResponse, bills_to_domain
from dropdebt.config import settings
from dropdebt.domain.exceptions import DomainException
from dropdebt.domain.priority import ensure_scored
from dropdebt.domain.progress import (
    calculate_bill_progress,
    estimate_weeks_to_stability,
    format_timeline_to_stability,
)

router = APIRouter()


@router.post("/progress", response_model=ProgressResponse)
def get_progress(request_body: ProgressRequest, request: Request):
    request_id = get_request_id(request)

    try:
        bills = ensure_scored(
            bills_to_domain(request_body.bills, request_body.user_id),
            resolve_now(request_body.now),
            typical_bill_amount=settings.typical_bill_amount,
        )
    except DomainException as e:
        logging.warning(f"Invalid progress request: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    progress = calculate_bill_progress(bills)
    total_debt = round(sum(max(0.0, b.current_balance) for b in bills), 2)
    weeks = estimate_weeks_to_stability(total_debt, request_body.weekly_available)

    return ProgressResponse(
        total_bills=progress.total_bills,
        current_bills=progress.current_bills,
        critical_bills=progress.critical_bills,
        critical_current=progress.critical_current,
        high_priority_bills=progress.high_priority_bills,
        high_priority_current=progress.high_priority_current,
        total_debt=total_debt,
        weeks_to_stability=weeks,
        timeline_to_stability=format_timeline_to_stability(weeks),
    )
