"""Unit tests for crisis alert detection"""

from datetime import timedelta

import pytest

from dropdebt.domain.alerts import (
    AlertSeverity,
    AlertType,
    detect_crisis_alerts,
    format_alert,
)
from dropdebt.domain.consequences import ShutoffConsequence
from dropdebt.domain.models import BillStatus, BillType
from dropdebt.domain.resources import (
    AUTO_LENDER,
    HOUSING_COUNSELOR,
    LEGAL_AID,
    LIHEAP,
    RENTAL_ASSISTANCE,
    TRANSPORTATION_AID,
)


def test_utility_due_tomorrow_is_an_emergency(make_bill, now):
    bill = make_bill(
        bill_id="power",
        name="City Electric",
        bill_type=BillType.ELECTRIC,
        current_balance=180.0,
        minimum_payment=60.0,
        due_date=now.date() + timedelta(days=1),
    )

    alerts = detect_crisis_alerts([bill], now)

    assert len(alerts) == 1
    alert = alerts[0]
    assert alert.alert_type == AlertType.UTILITY_SHUTOFF
    assert alert.severity == AlertSeverity.EMERGENCY
    assert alert.description == "City Electric shutoff in 1 days - $180.00 due"
    assert alert.immediate_action == "Pay $60.00 today to prevent shutoff"
    assert alert.deadline == now.date() + timedelta(days=1)
    assert alert.resources[0] == LIHEAP
    assert "City Electric" in alert.resources[1].name


def test_utility_three_days_out_is_critical(make_bill, now):
    bill = make_bill(name="Natural Gas", due_date=now.date() + timedelta(days=3))

    alert = detect_crisis_alerts([bill], now)[0]

    assert alert.severity == AlertSeverity.CRITICAL
    assert alert.immediate_action == "Pay $50.00 today to prevent shutoff"


def test_utility_with_distant_due_date_raises_nothing(make_bill, now):
    bill = make_bill(name="Water Utility", due_date=now.date() + timedelta(days=10))
    assert detect_crisis_alerts([bill], now) == []


def test_shutoff_notice_alerts_even_when_far_off(make_bill, now):
    shutoff = now.date() + timedelta(days=12)
    bill = make_bill(
        name="City Electric",
        bill_type=BillType.ELECTRIC,
        due_date=now.date() + timedelta(days=20),
        consequences=[ShutoffConsequence(severity=90, shutoff_date=shutoff, estimated_days=12)],
    )

    alert = detect_crisis_alerts([bill], now)[0]

    assert alert.severity == AlertSeverity.CRITICAL
    assert alert.deadline == shutoff
    assert "shutoff in 12 days" in alert.description


def test_small_utility_balance_caps_the_suggested_payment(make_bill, now):
    bill = make_bill(name="Water", current_balance=20.0, due_date=now.date())
    assert detect_crisis_alerts([bill], now)[0].immediate_action == "Pay $20.00 today to prevent shutoff"


@pytest.mark.parametrize(
    "bill_type, risk",
    [(BillType.RENT, "eviction risk"), (BillType.MORTGAGE, "foreclosure risk")],
)
def test_housing_overdue_past_a_month(make_bill, now, bill_type, risk):
    bill = make_bill(name="Home", bill_type=bill_type, due_date=now.date() - timedelta(days=35))

    alert = detect_crisis_alerts([bill], now)[0]

    assert alert.alert_type == AlertType.HOUSING_RISK
    assert alert.severity == AlertSeverity.CRITICAL
    assert alert.description == f"Home is 35 days overdue - {risk}"
    assert alert.resources == [RENTAL_ASSISTANCE, LEGAL_AID, HOUSING_COUNSELOR]


def test_housing_overdue_exactly_a_month_is_not_yet_at_risk(make_bill, now):
    bill = make_bill(name="Apartment Rent", due_date=now.date() - timedelta(days=30))
    assert detect_crisis_alerts([bill], now) == []


def test_car_loan_overdue_is_repo_risk(make_bill, now):
    bill = make_bill(name="Auto Loan", due_date=now.date() - timedelta(days=45))

    alert = detect_crisis_alerts([bill], now)[0]

    assert alert.alert_type == AlertType.TRANSPORTATION_RISK
    assert alert.description == "Auto Loan is 45 days overdue - repo risk"
    assert alert.resources == [AUTO_LENDER, TRANSPORTATION_AID]


def test_car_insurance_overdue_is_transportation_risk(make_bill, now):
    bill = make_bill(
        name="Geico",
        bill_type=BillType.CAR_INSURANCE,
        due_date=now.date() - timedelta(days=31),
    )

    alert = detect_crisis_alerts([bill], now)[0]

    assert alert.alert_type == AlertType.TRANSPORTATION_RISK
    assert "coverage cancellation" in alert.description


def test_other_bills_raise_nothing(make_bill, now):
    bills = [
        make_bill(name="Chase Credit Card", due_date=now.date() - timedelta(days=60)),
        make_bill(name="Hospital Visit", due_date=now.date() - timedelta(days=90)),
    ]
    assert detect_crisis_alerts(bills, now) == []


@pytest.mark.parametrize(
    "overrides",
    [
        {"status": BillStatus.PAID},
        {"status": BillStatus.ARCHIVED},
        {"status": BillStatus.CANCELLED},
        {"current_balance": 0.0},
        {"current_balance": 0.004},
    ],
)
def test_closed_or_settled_bills_raise_nothing(make_bill, now, overrides):
    bill = make_bill(name="City Electric", due_date=now.date(), **overrides)
    assert detect_crisis_alerts([bill], now) == []


def test_alerts_most_severe_first(make_bill, now):
    bills = [
        make_bill(bill_id="rent", name="Rent", due_date=now.date() - timedelta(days=40)),
        make_bill(bill_id="gas", name="Gas", due_date=now.date() + timedelta(days=3)),
        make_bill(bill_id="power", name="Power", due_date=now.date()),
    ]

    alerts = detect_crisis_alerts(bills, now)

    assert [a.bill_id for a in alerts] == ["power", "rent", "gas"]


def test_format_alert(make_bill, now):
    urgent = detect_crisis_alerts([make_bill(name="Power", due_date=now.date())], now)[0]
    overdue = detect_crisis_alerts([make_bill(name="Rent", due_date=now.date() - timedelta(days=40))], now)[0]

    assert format_alert(urgent) == "EMERGENCY: Power shutoff in 0 days - $100.00 due. Pay $50.00 today to prevent shutoff"
    assert format_alert(overdue).startswith("URGENT: Rent is 40 days overdue - eviction risk.")
    assert overdue.message == format_alert(overdue)
