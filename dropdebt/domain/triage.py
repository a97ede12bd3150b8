"""
Crisis triage - tells the user exactly what to pay right now.

Deliberately greedy: urgent bills are walked nearest-deadline-first and each
one is paid in full, paid partially, or escalated to a phone call. No global
optimization, so every instruction can be explained in one sentence.
"""

import logging
from datetime import datetime
from typing import Iterable, List

from dropdebt.domain.bill_types import infer_bill_category
from dropdebt.domain.exceptions import InvalidStrategyError
from dropdebt.domain.models import (
    ActionUrgency,
    Bill,
    BillDeadline,
    BillStatus,
    PriorityTier,
    TriageAction,
    TriageActionType,
    TriageResult,
    TriageStrategy,
)
from dropdebt.domain.priority import priority_tier
from dropdebt.domain.resources import select_help_resources
from dropdebt.utils.date_utils import add_days, days_between

logger = logging.getLogger(__name__)

# Share of available cash the allocator may spend; the rest is a safety buffer
STRATEGY_MULTIPLIERS = {
    TriageStrategy.CONSERVATIVE: 0.5,
    TriageStrategy.BALANCED: 0.7,
    TriageStrategy.AGGRESSIVE: 0.9,
}

MINIMUM_PARTIAL_PAYMENT = 25.0

# Days until the consequence lands when no explicit date is known
TIER_DEADLINE_DAYS = {
    PriorityTier.CRITICAL: 3,
    PriorityTier.HIGH: 7,
    PriorityTier.MEDIUM: 30,
    PriorityTier.LOW: 60,
}

_CLOSED_STATUSES = {BillStatus.PAID, BillStatus.ARCHIVED, BillStatus.CANCELLED}

_CRITICAL_CONSEQUENCES = {
    "electric": "power shutoff",
    "gas": "gas service shutoff",
    "water": "water service shutoff",
    "rent": "eviction process starts",
    "mortgage": "foreclosure process starts",
}

_HIGH_CONSEQUENCES = {
    "car": "vehicle repossession",
    "insurance": "coverage cancellation",
}


def resolve_strategy(strategy: TriageStrategy | str) -> TriageStrategy:
    """Accept enum members or their names"""
    try:
        return TriageStrategy(strategy)
    except ValueError as e:
        raise InvalidStrategyError(f"Unknown triage strategy: {strategy!r}") from e


def usable_amount_for(available_amount: float, strategy: TriageStrategy | str) -> float:
    """Cash the allocator may spend under a strategy, rounded to cents"""
    return round(available_amount * STRATEGY_MULTIPLIERS[resolve_strategy(strategy)], 2)


def describe_consequence(tier: PriorityTier, category: str) -> str:
    """Short phrase for what happens if this bill is not paid"""
    if tier == PriorityTier.CRITICAL:
        return _CRITICAL_CONSEQUENCES.get(category, "service disconnection")
    if tier == PriorityTier.HIGH:
        return _HIGH_CONSEQUENCES.get(category, "late fees and credit damage")
    return "late fees and credit damage"


def build_bill_deadline(bill: Bill, now: datetime) -> BillDeadline:
    """
    When this bill's consequence lands.

    Order of preference: an explicit shutoff/court date, then an estimate from
    the priority tier, then (bill never scored) the due date itself.
    """
    if bill.priority is not None:
        tier = priority_tier(bill.priority)
    else:
        tier = PriorityTier.MEDIUM
        logger.warning(
            "Bill has no priority score, triaging by due date",
            extra={"bill_id": bill.bill_id, "step": "triage_degraded"},
        )

    deadline = bill.explicit_deadline()
    if deadline is None:
        if bill.priority is not None:
            deadline = add_days(now, TIER_DEADLINE_DAYS[tier])
        else:
            deadline = bill.due_date

    days_until = max(0, days_between(now, deadline))
    return BillDeadline(
        bill_id=bill.bill_id,
        bill_name=bill.name or f"Bill {bill.bill_id}",
        amount=round(bill.current_balance, 2),
        consequence=describe_consequence(tier, infer_bill_category(bill)),
        deadline=deadline,
        days_until=days_until,
        priority=tier,
    )


def select_urgent_bills(deadlines: Iterable[BillDeadline]) -> List[BillDeadline]:
    """Critical or due within a week, nearest deadline first (ties keep input order)"""
    urgent = [d for d in deadlines if d.priority == PriorityTier.CRITICAL or d.days_until <= 7]
    return sorted(urgent, key=lambda d: d.days_until)


def _payment_urgency(deadline: BillDeadline) -> ActionUrgency:
    return ActionUrgency.IMMEDIATE if deadline.days_until <= 3 else ActionUrgency.THIS_WEEK


def _to_cents(amount: float) -> int:
    return int(round(amount * 100))


def allocate(urgent_bills: List[BillDeadline], usable_amount: float) -> List[TriageAction]:
    """
    Greedy walk over urgent bills, nearest deadline first.

    - Enough left: pay in full
    - At least $25 left: pay what remains, call about the rest
    - Otherwise: call the creditor, or get emergency help if 3 days or less remain
    """
    actions: List[TriageAction] = []
    # Whole cents so repeated payments cannot drift past the usable amount
    remaining_cents = _to_cents(usable_amount)

    for bill in urgent_bills:
        bill_cents = _to_cents(bill.amount)
        remaining = remaining_cents / 100

        if remaining_cents >= bill_cents:
            actions.append(
                TriageAction(
                    type=TriageActionType.PAY_NOW,
                    bill_id=bill.bill_id,
                    bill_name=bill.bill_name,
                    amount=bill.amount,
                    reason=f"Prevents {bill.consequence}",
                    instructions=(
                        f"PAY TODAY - {bill.consequence} in {bill.days_until} days"
                        if bill.days_until <= 3
                        else f"Pay by {bill.deadline.isoformat()}"
                    ),
                    urgency=_payment_urgency(bill),
                )
            )
            remaining_cents -= bill_cents

        elif remaining >= MINIMUM_PARTIAL_PAYMENT:
            unpaid = (bill_cents - remaining_cents) / 100
            actions.append(
                TriageAction(
                    type=TriageActionType.PARTIAL_PAYMENT,
                    bill_id=bill.bill_id,
                    bill_name=bill.bill_name,
                    amount=remaining,
                    reason=f"Partial payment to prevent {bill.consequence}",
                    instructions=(
                        f"Pay ${remaining:.2f} now, call creditor to arrange payment plan "
                        f"for remaining ${unpaid:.2f}"
                    ),
                    urgency=_payment_urgency(bill),
                )
            )
            remaining_cents = 0

        elif bill.days_until <= 3:
            actions.append(
                TriageAction(
                    type=TriageActionType.GET_HELP,
                    bill_id=bill.bill_id,
                    bill_name=bill.bill_name,
                    amount=bill.amount,
                    reason=f"Cannot pay {bill.bill_name} - {bill.consequence}",
                    instructions=(
                        f"EMERGENCY: {bill.consequence} in {bill.days_until} days - call 2-1-1 for "
                        "emergency assistance and call the creditor today"
                    ),
                    urgency=ActionUrgency.IMMEDIATE,
                )
            )

        else:
            actions.append(
                TriageAction(
                    type=TriageActionType.CALL_CREDITOR,
                    bill_id=bill.bill_id,
                    bill_name=bill.bill_name,
                    amount=bill.amount,
                    reason="Cannot afford payment - need payment arrangement",
                    instructions=(
                        f"Call creditor immediately - explain you can pay ${max(0.0, remaining):.2f} "
                        "now and need payment plan"
                    ),
                    urgency=ActionUrgency.IMMEDIATE,
                )
            )

    return actions


def allocated_amount(action: TriageAction) -> float:
    """Cash an action actually spends"""
    if action.type in (TriageActionType.PAY_NOW, TriageActionType.PARTIAL_PAYMENT):
        return action.amount
    return 0.0


def _no_urgent_action() -> TriageAction:
    return TriageAction(
        type=TriageActionType.PAY_NOW,
        bill_id="none",
        bill_name="No urgent bills",
        amount=0.0,
        reason="No critical bills requiring immediate payment",
        instructions="You have breathing room - consider building emergency fund",
        urgency=ActionUrgency.NEXT_PAYCHECK,
    )


def _unpaid_consequences(urgent_bills: List[BillDeadline], actions: List[TriageAction]) -> List[str]:
    paid_in_full = {a.bill_id for a in actions if a.type == TriageActionType.PAY_NOW}
    return [
        f"{bill.bill_name}: {bill.consequence} in {bill.days_until} days if not paid"
        for bill in urgent_bills
        if bill.bill_id not in paid_in_full
    ]


def _next_steps(actions: List[TriageAction], is_crisis: bool) -> List[str]:
    steps: List[str] = []

    immediate = [a for a in actions if a.urgency == ActionUrgency.IMMEDIATE]
    this_week = [a for a in actions if a.urgency == ActionUrgency.THIS_WEEK]
    if immediate:
        steps.append(f"TODAY: {immediate[0].instructions}")
    if this_week:
        steps.append(f"THIS WEEK: {this_week[0].instructions}")

    if is_crisis:
        steps.append("Call 2-1-1 for emergency assistance in your area")
        steps.append("Contact creditors to explain situation and request payment plans")
    else:
        steps.append("Set aside money for next paycheck payments")
        steps.append("Consider building small emergency fund if possible")

    return steps


def triage_payments(
    bills: Iterable[Bill],
    available_amount: float,
    now: datetime,
    strategy: TriageStrategy | str = TriageStrategy.BALANCED,
) -> TriageResult:
    """
    Main entry point: decide what to pay now with limited cash.

    Zero or negative cash is valid and routes every urgent bill to a call or
    emergency help. Paid, archived and cancelled bills are ignored.

    Raises:
        InvalidStrategyError: strategy is not CONSERVATIVE, BALANCED or AGGRESSIVE
    """
    strategy = resolve_strategy(strategy)
    usable = usable_amount_for(available_amount, strategy)

    # Sub-cent balances are treated as settled
    open_bills = [b for b in bills if b.status not in _CLOSED_STATUSES and round(b.current_balance, 2) > 0]
    deadlines = [build_bill_deadline(b, now) for b in open_bills]
    urgent_bills = select_urgent_bills(deadlines)

    total_urgent = round(sum(b.amount for b in urgent_bills), 2)
    is_crisis = total_urgent > usable

    if urgent_bills:
        actions = allocate(urgent_bills, usable)
    else:
        actions = [_no_urgent_action()]

    urgent_ids = {d.bill_id for d in urgent_bills}
    categories = [infer_bill_category(b) for b in open_bills if b.bill_id in urgent_ids]

    return TriageResult(
        is_crisis=is_crisis,
        available_amount=available_amount,
        usable_amount=usable,
        strategy=strategy,
        total_critical_bills=len(urgent_bills),
        can_pay_all=not is_crisis,
        total_allocated=round(sum(allocated_amount(a) for a in actions), 2),
        actions=actions,
        immediate_actions=[a for a in actions if a.urgency == ActionUrgency.IMMEDIATE],
        consequences=_unpaid_consequences(urgent_bills, actions),
        help_resources=select_help_resources(categories, is_crisis),
        next_steps=_next_steps(actions, is_crisis),
    )
