"""POST /v1/alerts - bill situations that need outside help today"""

import logging

from fastapi import APIRouter, HTTPException, Request

from dropdebt.api.dependencies import get_request_id, resolve_now
from dropdebt.api.v1.schemas import AlertsRequest, AlertsResponse, CrisisAlertSchema, bills_to_domain
from dropdebt.domain.alerts import AlertSeverity, detect_crisis_alerts
from dropdebt.domain.exceptions import DomainException
from dropdebt.infrastructure.observability.logging import log_alerts_detected
from dropdebt.infrastructure.observability.metrics import record_alert

router = APIRouter()


@router.post("/alerts", response_model=AlertsResponse)
def get_alerts(request_body: AlertsRequest, request: Request):
    request_id = get_request_id(request)

    try:
        bills = bills_to_domain(request_body.bills, request_body.user_id)
        alerts = detect_crisis_alerts(bills, resolve_now(request_body.now))
    except DomainException as e:
        logging.warning(f"Invalid alerts request: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    for alert in alerts:
        record_alert(alert.alert_type.value, alert.severity.value)
    emergency_count = sum(1 for a in alerts if a.severity == AlertSeverity.EMERGENCY)
    log_alerts_detected(request_id, request_body.user_id, [a.alert_type.value for a in alerts], emergency_count)

    return AlertsResponse(
        alerts=[CrisisAlertSchema.model_validate(alert) for alert in alerts],
        has_emergency=emergency_count > 0,
    )
