"""POST /v1/triage - crisis allocation of limited cash across urgent bills"""

import logging
import time

from fastapi import APIRouter, HTTPException, Request

from dropdebt.api.dependencies import get_request_id, resolve_now
from dropdebt.api.v1.schemas import TriageRequest, TriageResponse, bills_to_domain
from dropdebt.config import settings
from dropdebt.domain.exceptions import DomainException
from dropdebt.domain.priority import ensure_scored
from dropdebt.domain.triage import triage_payments
from dropdebt.infrastructure.observability.logging import log_triage_completed
from dropdebt.infrastructure.observability.metrics import record_triage

router = APIRouter()


@router.post("/triage", response_model=TriageResponse)
def run_triage(request_body: TriageRequest, request: Request):
    """
    Decide what to pay right now.

    Flow:
    1. Convert bills and score any that arrive without a priority
    2. Apply the strategy multiplier to the available cash
    3. Walk urgent bills nearest-deadline-first: pay, part-pay, call or get help
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        now = resolve_now(request_body.now)
        bills = ensure_scored(
            bills_to_domain(request_body.bills, request_body.user_id),
            now,
            typical_bill_amount=settings.typical_bill_amount,
        )
        result = triage_payments(
            bills,
            request_body.available_amount,
            now,
            request_body.strategy or settings.default_triage_strategy,
        )

    except DomainException as e:
        logging.warning(f"Invalid triage request: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_triage(result.is_crisis, result.total_allocated)
    log_triage_completed(
        request_id,
        request_body.user_id,
        result.is_crisis,
        result.usable_amount,
        result.total_allocated,
        duration_ms,
    )

    return TriageResponse.model_validate(result)
