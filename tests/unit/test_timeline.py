"""Unit tests for the consequence timeline"""

from datetime import timedelta

import pytest

from dropdebt.domain.consequences import ShutoffConsequence
from dropdebt.domain.models import BillStatus, BillType, PriorityTier
from dropdebt.domain.timeline import (
    create_consequence_event,
    create_timeline,
    describe_timeline_consequence,
    estimate_consequence_date,
    get_urgent_actions,
)


@pytest.fixture
def household(make_bill, now):
    today = now.date()
    return [
        make_bill(
            bill_id="electric",
            name="City Electric",
            bill_type=BillType.ELECTRIC,
            current_balance=150.0,
            last_payment_date=today - timedelta(days=43),
        ),
        make_bill(
            bill_id="car",
            name="Auto Loan",
            current_balance=300.0,
            last_payment_date=today - timedelta(days=55),
        ),
        make_bill(
            bill_id="rent",
            name="Rent",
            current_balance=1200.0,
            last_payment_date=today - timedelta(days=20),
        ),
        make_bill(bill_id="card", name="Chase Credit Card", current_balance=80.0),
        make_bill(bill_id="mortgage", name="Home Mortgage", current_balance=1500.0),
        make_bill(bill_id="paid", name="Water", current_balance=60.0, status=BillStatus.PAID),
    ]


def test_timeline_buckets(household, now):
    timeline = create_timeline(household, now)

    assert [e.bill_id for e in timeline.urgent] == ["electric"]
    assert [e.bill_id for e in timeline.this_week] == ["electric", "car"]
    assert [e.bill_id for e in timeline.next_week] == ["rent"]
    assert [e.bill_id for e in timeline.this_month] == ["card"]


def test_timeline_totals(household, now):
    totals = create_timeline(household, now).totals

    assert totals.urgent == 150.0
    assert totals.this_week == 450.0
    assert totals.next_week == 1200.0
    assert totals.this_month == 80.0


def test_events_beyond_horizon_are_dropped(make_bill, now):
    mortgage = make_bill(name="Home Mortgage", current_balance=1500.0)
    assert create_consequence_event(mortgage, now) is None


def test_closed_bills_are_left_off(household, now):
    timeline = create_timeline(household, now)
    all_ids = {e.bill_id for bucket in (timeline.this_week, timeline.next_week, timeline.this_month) for e in bucket}
    assert "paid" not in all_ids


def test_explicit_shutoff_date_wins_over_estimate(make_bill, now):
    bill = make_bill(
        name="Gas Co",
        last_payment_date=now.date() - timedelta(days=5),
        consequences=[ShutoffConsequence(severity=80, shutoff_date=now.date() + timedelta(days=4), utility_type="gas")],
    )

    event = create_consequence_event(bill, now)

    assert event.days_until == 4
    assert event.consequence == "Gas service disconnected - no heating/cooking"


def test_estimate_never_earlier_than_tomorrow(make_bill, now):
    bill = make_bill(name="Water Utility", last_payment_date=now.date() - timedelta(days=100))
    assert estimate_consequence_date(bill, now) == now.date() + timedelta(days=1)


def test_unknown_category_uses_flat_estimate(make_bill, now):
    assert estimate_consequence_date(make_bill(name="Gym"), now) == now.date() + timedelta(days=30)


def test_event_severity_follows_priority(make_bill, now):
    event = create_consequence_event(make_bill(name="Gym", priority=92.0), now)

    assert event.severity == PriorityTier.CRITICAL
    assert event.consequence == "Service disconnection or legal action"
    assert event.prevention_cost == event.amount


def test_describe_timeline_consequence():
    assert describe_timeline_consequence("rent", PriorityTier.LOW) == "Eviction notice posted - court proceedings begin"
    assert describe_timeline_consequence("unknown", PriorityTier.HIGH) == "Late fees and credit damage"


def test_urgent_actions(household, now):
    actions = get_urgent_actions(create_timeline(household, now))

    assert actions[0] == (
        "URGENT: Pay City Electric $150.00 within 2 days to prevent "
        "Power will be shut off - reconnection fee required"
    )
    assert actions[1].startswith("This week: Pay Auto Loan $300.00 by ")
    assert len(actions) == 2


def test_urgent_actions_when_nothing_is_due(now):
    assert get_urgent_actions(create_timeline([], now)) == ["No urgent payment deadlines this week"]
