"""Progress toward having every bill current, in counts and weeks rather than percentages"""

import math
from typing import Iterable, Optional

from dropdebt.domain.models import Bill, BillProgress, PriorityTier
from dropdebt.domain.priority import priority_tier


def calculate_bill_progress(bills: Iterable[Bill]) -> BillProgress:
    """Count bills brought to a zero balance, overall and for the critical/high tiers"""
    bills = list(bills)

    def tier_of(bill: Bill) -> Optional[PriorityTier]:
        return priority_tier(bill.priority) if bill.priority is not None else None

    critical = [b for b in bills if tier_of(b) == PriorityTier.CRITICAL]
    high = [b for b in bills if tier_of(b) == PriorityTier.HIGH]

    return BillProgress(
        total_bills=len(bills),
        current_bills=sum(1 for b in bills if b.current_balance <= 0),
        critical_bills=len(critical),
        critical_current=sum(1 for b in critical if b.current_balance <= 0),
        high_priority_bills=len(high),
        high_priority_current=sum(1 for b in high if b.current_balance <= 0),
    )


def estimate_weeks_to_stability(total_debt: float, weekly_available: float) -> Optional[int]:
    """
    Weeks until every balance reaches zero at a steady weekly payment.

    Returns 0 when nothing is owed and None when no progress is possible.
    """
    if total_debt <= 0:
        return 0
    if weekly_available <= 0:
        return None
    return math.ceil(total_debt / weekly_available)


def format_timeline_to_stability(weeks: Optional[int]) -> str:
    if weeks is None:
        return "Timeline unclear - need budget assistance"
    if weeks == 0:
        return "All bills current - maintain momentum"
    if weeks == 1:
        return "All bills current after this week"
    if weeks <= 4:
        return f"All bills current in {weeks} weeks"
    if weeks <= 52:
        return f"All bills current in {math.ceil(weeks / 4)} months with current plan"
    return "Timeline unclear - need budget assistance"
