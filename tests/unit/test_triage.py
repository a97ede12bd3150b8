"""Unit tests for crisis triage allocation"""

from datetime import timedelta

import pytest

from dropdebt.domain.consequences import ShutoffConsequence
from dropdebt.domain.exceptions import InvalidStrategyError
from dropdebt.domain.models import (
    ActionUrgency,
    BillStatus,
    BillType,
    PriorityTier,
    TriageActionType,
    TriageStrategy,
)
from dropdebt.domain.resources import FOOD_BANKS, HOTLINE_211, LIHEAP
from dropdebt.domain.triage import (
    allocated_amount,
    build_bill_deadline,
    select_urgent_bills,
    triage_payments,
    usable_amount_for,
)


@pytest.fixture
def shutoff_bill(make_bill, now):
    """Scored utility bill with a creditor-given shutoff date `days` out"""

    def _make(bill_id: str, days: int, balance: float, priority: float = 95.0, **overrides):
        return make_bill(
            bill_id=bill_id,
            name=f"Utility {bill_id}",
            bill_type=BillType.ELECTRIC,
            current_balance=balance,
            original_amount=balance,
            priority=priority,
            consequences=[
                ShutoffConsequence(severity=90, shutoff_date=now.date() + timedelta(days=days), estimated_days=days)
            ],
            **overrides,
        )

    return _make


@pytest.mark.parametrize(
    "strategy, expected",
    [
        (TriageStrategy.CONSERVATIVE, 50.0),
        (TriageStrategy.BALANCED, 70.0),
        (TriageStrategy.AGGRESSIVE, 90.0),
        ("AGGRESSIVE", 90.0),
    ],
)
def test_usable_amount_by_strategy(strategy, expected):
    assert usable_amount_for(100.0, strategy) == expected


def test_unknown_strategy_rejected(make_bill, now):
    with pytest.raises(InvalidStrategyError):
        triage_payments([make_bill(priority=95.0)], 100.0, now, "RECKLESS")


def test_partial_payment_when_cash_falls_short(make_bill, now):
    bill = make_bill(name="Rent", current_balance=250.0, original_amount=250.0, priority=95.0)

    result = triage_payments([bill], 100.0, now, TriageStrategy.BALANCED)

    assert result.usable_amount == 70.0
    assert len(result.actions) == 1
    action = result.actions[0]
    assert action.type == TriageActionType.PARTIAL_PAYMENT
    assert action.amount == 70.0
    assert "remaining $180.00" in action.instructions
    assert result.is_crisis is True
    assert result.can_pay_all is False
    assert result.total_allocated == 70.0


def test_get_help_when_below_minimum_and_deadline_close(shutoff_bill, now):
    bill = shutoff_bill("power", days=2, balance=250.0)

    result = triage_payments([bill], 10.0, now, TriageStrategy.CONSERVATIVE)

    assert result.usable_amount == 5.0
    action = result.actions[0]
    assert action.type == TriageActionType.GET_HELP
    assert action.urgency == ActionUrgency.IMMEDIATE
    assert allocated_amount(action) == 0.0
    assert result.total_allocated == 0.0


def test_call_creditor_when_below_minimum_and_deadline_further(shutoff_bill, now):
    bill = shutoff_bill("power", days=6, balance=250.0)

    result = triage_payments([bill], 10.0, now, TriageStrategy.CONSERVATIVE)

    assert result.actions[0].type == TriageActionType.CALL_CREDITOR
    assert result.actions[0].amount == 250.0


def test_nearest_deadline_is_paid_first(shutoff_bill, now):
    later = shutoff_bill("later", days=5, balance=300.0, priority=75.0)
    sooner = shutoff_bill("sooner", days=1, balance=100.0)

    result = triage_payments([later, sooner], 200.0, now, TriageStrategy.BALANCED)

    assert [a.bill_id for a in result.actions] == ["sooner", "later"]
    assert result.actions[0].type == TriageActionType.PAY_NOW
    assert result.actions[0].amount == 100.0
    assert result.actions[0].urgency == ActionUrgency.IMMEDIATE
    assert result.actions[1].type == TriageActionType.PARTIAL_PAYMENT
    assert result.actions[1].amount == 40.0
    assert result.actions[1].urgency == ActionUrgency.THIS_WEEK


def test_second_bill_escalated_when_leftover_is_too_small(shutoff_bill, now):
    later = shutoff_bill("later", days=5, balance=300.0, priority=75.0)
    sooner = shutoff_bill("sooner", days=1, balance=100.0)

    result = triage_payments([later, sooner], 150.0, now, TriageStrategy.BALANCED)

    assert [a.type for a in result.actions] == [TriageActionType.PAY_NOW, TriageActionType.CALL_CREDITOR]
    assert "$5.00" in result.actions[1].instructions


def test_everything_paid_when_cash_suffices(shutoff_bill, now):
    bills = [shutoff_bill("a", days=2, balance=50.0), shutoff_bill("b", days=4, balance=60.0)]

    result = triage_payments(bills, 1000.0, now, TriageStrategy.BALANCED)

    assert all(a.type == TriageActionType.PAY_NOW for a in result.actions)
    assert result.is_crisis is False
    assert result.can_pay_all is True
    assert result.total_allocated == 110.0
    assert result.consequences == []


@pytest.mark.parametrize("available", [-20.0, 0.0, 10.0, 37.5, 137.35, 500.0, 5000.0])
@pytest.mark.parametrize("strategy", list(TriageStrategy))
def test_allocation_never_exceeds_usable_amount(shutoff_bill, make_bill, now, available, strategy):
    bills = [
        shutoff_bill("a", days=1, balance=120.55),
        shutoff_bill("b", days=3, balance=89.99),
        shutoff_bill("c", days=6, balance=410.0, priority=72.0),
        make_bill(bill_id="d", current_balance=75.0, priority=30.0),
    ]

    result = triage_payments(bills, available, now, strategy)

    allocated = sum(allocated_amount(a) for a in result.actions)
    assert round(allocated, 2) <= max(0.0, result.usable_amount)
    assert result.total_allocated <= max(0.0, result.usable_amount)


def test_many_one_cent_bills_stop_at_usable_amount(make_bill, now):
    bills = [make_bill(bill_id=f"tiny_{i}", current_balance=0.006, priority=95.0) for i in range(300)]

    result = triage_payments(bills, 2.0, now, TriageStrategy.CONSERVATIVE)

    paid = [a for a in result.actions if a.type == TriageActionType.PAY_NOW]
    assert len(paid) == 100
    assert all(a.amount == 0.01 for a in paid)
    assert round(sum(allocated_amount(a) for a in result.actions), 2) <= result.usable_amount
    assert result.total_allocated == 1.0


def test_sub_cent_balances_count_as_settled(make_bill, now):
    bills = [make_bill(bill_id=f"dust_{i}", current_balance=0.004, priority=95.0) for i in range(300)]

    result = triage_payments(bills, 2.0, now, TriageStrategy.CONSERVATIVE)

    assert result.total_critical_bills == 0
    assert result.total_allocated == 0.0


def test_every_urgent_bill_gets_exactly_one_action(shutoff_bill, make_bill, now):
    bills = [
        shutoff_bill("a", days=1, balance=120.0),
        shutoff_bill("b", days=3, balance=90.0),
        shutoff_bill("c", days=6, balance=410.0, priority=72.0),
        make_bill(bill_id="not_urgent", current_balance=75.0, priority=30.0),
    ]

    result = triage_payments(bills, 150.0, now)

    action_ids = [a.bill_id for a in result.actions]
    assert sorted(action_ids) == ["a", "b", "c"]
    assert result.total_critical_bills == 3


def test_no_urgent_bills_gives_breathing_room(make_bill, now):
    result = triage_payments([make_bill(priority=50.0)], 300.0, now)

    assert len(result.actions) == 1
    action = result.actions[0]
    assert action.bill_id == "none"
    assert action.amount == 0.0
    assert action.urgency == ActionUrgency.NEXT_PAYCHECK
    assert result.is_crisis is False
    assert result.total_critical_bills == 0


def test_closed_and_zero_balance_bills_are_ignored(shutoff_bill, now):
    bills = [
        shutoff_bill("paid", days=1, balance=100.0, status=BillStatus.PAID),
        shutoff_bill("archived", days=1, balance=100.0, status=BillStatus.ARCHIVED),
        shutoff_bill("settled", days=1, balance=0.0),
    ]

    result = triage_payments(bills, 100.0, now)

    assert result.total_critical_bills == 0
    assert result.actions[0].bill_id == "none"


def test_help_resources_in_a_utility_crisis(shutoff_bill, now):
    result = triage_payments([shutoff_bill("power", days=2, balance=400.0)], 50.0, now)

    assert result.is_crisis is True
    assert result.help_resources == [HOTLINE_211.contact, LIHEAP.contact, FOOD_BANKS.contact]
    assert "Call 2-1-1 for emergency assistance in your area" in result.next_steps
    assert result.next_steps[0].startswith("TODAY:")


def test_unpaid_urgent_bills_listed_as_consequences(shutoff_bill, now):
    result = triage_payments([shutoff_bill("power", days=2, balance=400.0)], 50.0, now)

    assert result.consequences == ["Utility power: power shutoff in 2 days if not paid"]


def test_deadline_uses_explicit_shutoff_date(shutoff_bill, now):
    deadline = build_bill_deadline(shutoff_bill("power", days=4, balance=100.0, priority=50.0), now)

    assert deadline.days_until == 4
    assert deadline.deadline == now.date() + timedelta(days=4)
    assert deadline.priority == PriorityTier.MEDIUM


def test_past_shutoff_date_counts_as_today(shutoff_bill, now):
    assert build_bill_deadline(shutoff_bill("power", days=-3, balance=100.0), now).days_until == 0


@pytest.mark.parametrize(
    "priority, expected_days",
    [(95.0, 3), (75.0, 7), (50.0, 30), (10.0, 60)],
)
def test_deadline_estimated_from_tier(make_bill, now, priority, expected_days):
    deadline = build_bill_deadline(make_bill(priority=priority), now)
    assert deadline.days_until == expected_days


def test_unscored_bill_falls_back_to_due_date(make_bill, now):
    bill = make_bill(due_date=now.date() + timedelta(days=2))

    deadline = build_bill_deadline(bill, now)

    assert deadline.days_until == 2
    assert deadline.priority == PriorityTier.MEDIUM
    assert deadline.consequence == "late fees and credit damage"


def test_ties_keep_input_order(make_bill, now):
    deadlines = [
        build_bill_deadline(make_bill(bill_id=bill_id, priority=95.0), now) for bill_id in ("x", "y", "z")
    ]
    assert [d.bill_id for d in select_urgent_bills(deadlines)] == ["x", "y", "z"]
