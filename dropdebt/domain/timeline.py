"""Consequence timeline - which deadlines land this week, next week, this month"""

from datetime import date, datetime
from typing import Iterable, List, Optional

from dropdebt.domain.bill_types import infer_bill_category
from dropdebt.domain.models import (
    Bill,
    BillStatus,
    ConsequenceEvent,
    ConsequenceTimeline,
    PriorityTier,
    TimelineTotals,
)
from dropdebt.domain.priority import priority_tier
from dropdebt.utils.date_utils import add_days, days_between

# Beyond this a deadline is not actionable
MAX_HORIZON_DAYS = 90

# Days from last payment until the consequence typically starts
_DAYS_FROM_LAST_PAYMENT = {
    "electric": 45,
    "gas": 45,
    "water": 45,
    "rent": 30,
    "mortgage": 120,
    "car": 60,
}
_FLAT_DAYS = 30  # credit cards and anything unrecognised

_CONSEQUENCE_TEXT = {
    "electric": "Power will be shut off - reconnection fee required",
    "gas": "Gas service disconnected - no heating/cooking",
    "water": "Water service shut off - reconnection fee required",
    "rent": "Eviction notice posted - court proceedings begin",
    "mortgage": "Foreclosure process initiated - home at risk",
    "car": "Vehicle repossession - transportation lost",
    "insurance": "Coverage cancelled - no protection from claims",
    "credit_card": "Late fees added - credit score damage",
    "medical": "Account sent to collections - credit damage",
    "phone": "Service disconnected - communication lost",
}


def _tier(bill: Bill) -> PriorityTier:
    return priority_tier(bill.priority) if bill.priority is not None else PriorityTier.MEDIUM


def estimate_consequence_date(bill: Bill, now: datetime) -> date:
    """
    Rough date the consequence starts, by bill category.

    Utilities ~45 days, rent ~30, mortgage ~120 and car loans ~60 days after the
    last payment (or from now if none is recorded); credit cards and unknown
    bills 30 days flat. Never earlier than tomorrow.
    """
    category = infer_bill_category(bill)
    if category not in _DAYS_FROM_LAST_PAYMENT:
        return add_days(now, _FLAT_DAYS)

    last_payment = bill.last_payment_date or now
    days_since_payment = max(0, days_between(last_payment, now))
    return add_days(now, max(1, _DAYS_FROM_LAST_PAYMENT[category] - days_since_payment))


def describe_timeline_consequence(category: str, tier: PriorityTier) -> str:
    if category in _CONSEQUENCE_TEXT:
        return _CONSEQUENCE_TEXT[category]
    if tier == PriorityTier.CRITICAL:
        return "Service disconnection or legal action"
    return "Late fees and credit damage"


def create_consequence_event(bill: Bill, now: datetime) -> Optional[ConsequenceEvent]:
    """Event for one bill, or None when the deadline is too far out to act on"""
    event_date = bill.explicit_deadline() or estimate_consequence_date(bill, now)
    days_until = max(0, days_between(now, event_date))
    if days_until > MAX_HORIZON_DAYS:
        return None

    tier = _tier(bill)
    return ConsequenceEvent(
        bill_id=bill.bill_id,
        bill_name=bill.name,
        amount=bill.current_balance,
        date=event_date,
        days_until=days_until,
        consequence=describe_timeline_consequence(infer_bill_category(bill), tier),
        severity=tier,
        can_prevent=days_until > 0,
        prevention_cost=bill.current_balance,
    )


def _total(events: List[ConsequenceEvent]) -> float:
    return round(sum(e.amount for e in events), 2)


def create_timeline(bills: Iterable[Bill], now: datetime) -> ConsequenceTimeline:
    """
    Bucket unpaid bills by how soon their consequence lands.

    Buckets: urgent (3 days or less), this week (7 days or less, includes
    urgent), next week (8-14 days), this month (15-30 days).
    """
    events = []
    for bill in bills:
        if bill.status in (BillStatus.PAID, BillStatus.ARCHIVED, BillStatus.CANCELLED):
            continue
        if bill.current_balance <= 0:
            continue
        event = create_consequence_event(bill, now)
        if event is not None:
            events.append(event)

    events.sort(key=lambda e: e.days_until)

    urgent = [e for e in events if e.days_until <= 3]
    this_week = [e for e in events if e.days_until <= 7]
    next_week = [e for e in events if 7 < e.days_until <= 14]
    this_month = [e for e in events if 14 < e.days_until <= 30]

    return ConsequenceTimeline(
        urgent=urgent,
        this_week=this_week,
        next_week=next_week,
        this_month=this_month,
        totals=TimelineTotals(
            urgent=_total(urgent),
            this_week=_total(this_week),
            next_week=_total(next_week),
            this_month=_total(this_month),
        ),
    )


def get_urgent_actions(timeline: ConsequenceTimeline) -> List[str]:
    """One instruction per event landing this week"""
    actions = [
        f"URGENT: Pay {e.bill_name} ${e.amount:.2f} within {e.days_until} days to prevent {e.consequence}"
        for e in timeline.urgent
    ]
    urgent_ids = {e.bill_id for e in timeline.urgent}
    actions.extend(
        f"This week: Pay {e.bill_name} ${e.amount:.2f} by {e.date.isoformat()} to prevent {e.consequence}"
        for e in timeline.this_week
        if e.bill_id not in urgent_ids
    )

    if not actions:
        actions.append("No urgent payment deadlines this week")
    return actions
