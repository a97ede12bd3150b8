"""POST /v1/timeline - when each unpaid bill's consequence lands"""

import logging

from fastapi import APIRouter, HTTPException, Request

from dropdebt.api.dependencies import get_request_id, resolve_now
from dropdebt.api.v1.schemas import TimelineRequest, TimelineResponse, bills_to_domain
from dropdebt.config import settings
from dropdebt.domain.exceptions import DomainException
from dropdebt.domain.priority import ensure_scored
from dropdebt.domain.timeline import create_timeline, get_urgent_actions

router = APIRouter()


@router.post("/timeline", response_model=TimelineResponse)
def build_timeline(request_body: TimelineRequest, request: Request):
    """Consequence timeline bucketed into urgent, this week, next week and this month"""
    request_id = get_request_id(request)

    try:
        now = resolve_now(request_body.now)
        bills = ensure_scored(
            bills_to_domain(request_body.bills, request_body.user_id),
            now,
            typical_bill_amount=settings.typical_bill_amount,
        )
        timeline = create_timeline(bills, now)
    except DomainException as e:
        logging.warning(f"Invalid timeline request: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    response = TimelineResponse.model_validate(timeline)
    response.urgent_actions = get_urgent_actions(timeline)
    return response
