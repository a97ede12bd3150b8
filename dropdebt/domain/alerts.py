"""
Crisis alerts - bill situations that need outside help, not just a payment.

Three bill-based indicators:
- Utility shutoff imminent: 3 days or less to the deadline, or a shutoff notice on file
- Housing at risk: rent or mortgage more than 30 days overdue
- Transportation at risk: car loan or car insurance more than 30 days overdue
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Iterable, List, Optional

from dropdebt.domain.bill_types import HOUSING_CATEGORIES, UTILITY_CATEGORIES, infer_bill_category
from dropdebt.domain.consequences import ShutoffConsequence
from dropdebt.domain.models import Bill, BillStatus, BillType
from dropdebt.domain.priority import calculate_days_overdue
from dropdebt.domain.resources import (
    AUTO_LENDER,
    HOUSING_COUNSELOR,
    LEGAL_AID,
    LIHEAP,
    RENTAL_ASSISTANCE,
    TRANSPORTATION_AID,
    EmergencyResource,
    utility_hardship,
)
from dropdebt.utils.date_utils import days_between

OVERDUE_RISK_DAYS = 30
SHUTOFF_ALERT_DAYS = 3
DEFAULT_SHUTOFF_PAYMENT = 50.0

_CLOSED_STATUSES = {BillStatus.PAID, BillStatus.ARCHIVED, BillStatus.CANCELLED}


class AlertType(str, Enum):
    UTILITY_SHUTOFF = "UTILITY_SHUTOFF"
    HOUSING_RISK = "HOUSING_RISK"
    TRANSPORTATION_RISK = "TRANSPORTATION_RISK"


class AlertSeverity(str, Enum):
    EMERGENCY = "EMERGENCY"
    CRITICAL = "CRITICAL"
    WARNING = "WARNING"


_SEVERITY_RANK = {AlertSeverity.EMERGENCY: 0, AlertSeverity.CRITICAL: 1, AlertSeverity.WARNING: 2}


@dataclass
class CrisisAlert:
    alert_type: AlertType
    severity: AlertSeverity
    bill_id: str
    bill_name: str
    description: str
    immediate_action: str
    deadline: Optional[date] = None
    resources: List[EmergencyResource] = field(default_factory=list)

    @property
    def message(self) -> str:
        return format_alert(self)


def _has_shutoff_notice(bill: Bill) -> bool:
    return any(isinstance(c, ShutoffConsequence) and c.shutoff_date is not None for c in bill.consequences)


def _is_transportation(bill: Bill, category: str) -> bool:
    return category == "car" or bill.bill_type == BillType.CAR_INSURANCE


def utility_shutoff_alert(bill: Bill, now: datetime) -> Optional[CrisisAlert]:
    """Alert when an essential utility is about to be cut off"""
    deadline = bill.explicit_deadline() or bill.due_date
    days_until = max(0, days_between(now, deadline))
    if days_until > SHUTOFF_ALERT_DAYS and not _has_shutoff_notice(bill):
        return None

    name = bill.name or f"Bill {bill.bill_id}"
    payment = bill.minimum_payment or bill.payment_terms.minimum_payment or DEFAULT_SHUTOFF_PAYMENT
    return CrisisAlert(
        alert_type=AlertType.UTILITY_SHUTOFF,
        severity=AlertSeverity.EMERGENCY if days_until <= 1 else AlertSeverity.CRITICAL,
        bill_id=bill.bill_id,
        bill_name=name,
        description=f"{name} shutoff in {days_until} days - ${bill.current_balance:.2f} due",
        immediate_action=f"Pay ${min(payment, bill.current_balance):.2f} today to prevent shutoff",
        deadline=deadline,
        resources=[LIHEAP, utility_hardship(name)],
    )


def housing_risk_alert(bill: Bill, now: datetime, category: str) -> Optional[CrisisAlert]:
    days_overdue = calculate_days_overdue(bill, now)
    if days_overdue <= OVERDUE_RISK_DAYS:
        return None

    name = bill.name or f"Bill {bill.bill_id}"
    risk = "foreclosure" if category == "mortgage" else "eviction"
    return CrisisAlert(
        alert_type=AlertType.HOUSING_RISK,
        severity=AlertSeverity.CRITICAL,
        bill_id=bill.bill_id,
        bill_name=name,
        description=f"{name} is {days_overdue} days overdue - {risk} risk",
        immediate_action="Contact landlord/lender today to negotiate payment plan",
        deadline=bill.explicit_deadline(),
        resources=[RENTAL_ASSISTANCE, LEGAL_AID, HOUSING_COUNSELOR],
    )


def transportation_risk_alert(bill: Bill, now: datetime) -> Optional[CrisisAlert]:
    days_overdue = calculate_days_overdue(bill, now)
    if days_overdue <= OVERDUE_RISK_DAYS:
        return None

    name = bill.name or f"Bill {bill.bill_id}"
    if bill.bill_type == BillType.CAR_INSURANCE:
        risk, action = "coverage cancellation", "Call insurer today - ask for a grace period or lower coverage"
    else:
        risk, action = "repo", "Call lender today - partial payment may prevent repo"
    return CrisisAlert(
        alert_type=AlertType.TRANSPORTATION_RISK,
        severity=AlertSeverity.CRITICAL,
        bill_id=bill.bill_id,
        bill_name=name,
        description=f"{name} is {days_overdue} days overdue - {risk} risk",
        immediate_action=action,
        deadline=bill.explicit_deadline(),
        resources=[AUTO_LENDER, TRANSPORTATION_AID],
    )


def detect_crisis_alerts(bills: Iterable[Bill], now: datetime) -> List[CrisisAlert]:
    """
    Every crisis alert raised by the user's open bills, most severe first.

    Bills of equal severity keep their input order. Income-based alerts are
    not derived here; they need budget data the engine does not hold.
    """
    alerts: List[CrisisAlert] = []
    for bill in bills:
        if bill.status in _CLOSED_STATUSES or round(bill.current_balance, 2) <= 0:
            continue

        category = infer_bill_category(bill)
        if category in UTILITY_CATEGORIES:
            alert = utility_shutoff_alert(bill, now)
        elif category in HOUSING_CATEGORIES:
            alert = housing_risk_alert(bill, now, category)
        elif _is_transportation(bill, category):
            alert = transportation_risk_alert(bill, now)
        else:
            alert = None

        if alert is not None:
            alerts.append(alert)

    return sorted(alerts, key=lambda a: _SEVERITY_RANK[a.severity])


def format_alert(alert: CrisisAlert) -> str:
    """One-line message for display"""
    prefix = "EMERGENCY" if alert.severity == AlertSeverity.EMERGENCY else "URGENT"
    return f"{prefix}: {alert.description}. {alert.immediate_action}"
