"""Consequence-based priority scoring - core business logic for payment order"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Iterable, List, Tuple

from dropdebt.domain.consequences import (
    ESSENTIAL_UTILITIES,
    Consequence,
    ConsequenceType,
    ConsequenceUrgency,
    CreditDamageConsequence,
    HousingLossConsequence,
    LateFeeConsequence,
    LicenseSuspensionConsequence,
    ShutoffConsequence,
    VehicleRepoConsequence,
)
from dropdebt.domain.exceptions import InvalidPriorityFactorsError
from dropdebt.domain.models import (
    DEFAULT_PRIORITY_FACTORS,
    Bill,
    PriorityCalculation,
    PriorityFactors,
    PriorityReasoning,
    PriorityScores,
    PriorityTier,
)
from dropdebt.utils.date_utils import days_between

logger = logging.getLogger(__name__)

DEFAULT_TYPICAL_BILL_AMOUNT = 200.0

_GENERIC_URGENCY_BONUS = {
    ConsequenceUrgency.IMMEDIATE: 20,
    ConsequenceUrgency.SHORT_TERM: 15,
    ConsequenceUrgency.MEDIUM_TERM: 10,
    ConsequenceUrgency.LONG_TERM: 5,
}


def _data_quality_note(bill: Bill, missing: str) -> None:
    logger.debug(
        "Missing field scored as zero",
        extra={"bill_id": bill.bill_id, "step": "data_quality", "field": missing},
    )


def calculate_days_overdue(bill: Bill, now: datetime) -> int:
    """Days past due as of `now` (0 when not yet due)"""
    return max(0, days_between(bill.due_date, now))


# --- Immediate consequence -------------------------------------------------


def _shutoff_score(consequence: ShutoffConsequence) -> float:
    score = consequence.severity * 0.6

    if consequence.estimated_days <= 3:
        score += 40
    elif consequence.estimated_days <= 7:
        score += 30
    elif consequence.estimated_days <= 14:
        score += 20
    else:
        score += 10

    if consequence.utility_type in ESSENTIAL_UTILITIES:
        score += 20

    # Protected season: shutoff cannot legally happen yet
    if consequence.winter_moratorium:
        score *= 0.7

    return min(100.0, score)


def _housing_loss_score(consequence: HousingLossConsequence, now: datetime) -> float:
    score = 90.0
    if consequence.court_date is not None:
        days_to_court = days_between(now, consequence.court_date)
        if days_to_court <= 7:
            score = 100.0
        elif days_to_court <= 30:
            score = 95.0
    return score


def _repossession_score(consequence: VehicleRepoConsequence) -> float:
    score = 85.0
    if consequence.estimated_days <= 5:
        score = 100.0
    elif consequence.estimated_days <= 14:
        score = 90.0

    if consequence.deficiency_balance and consequence.vehicle_value:
        if consequence.deficiency_balance > consequence.vehicle_value * 0.5:
            score += 10

    return min(100.0, score)


def _license_suspension_score(consequence: LicenseSuspensionConsequence) -> float:
    if consequence.suspension_type == "professional_license":
        return 90.0
    if consequence.suspension_type == "drivers_license":
        return 85.0
    return 70.0


def _generic_consequence_score(consequence: Consequence) -> float:
    score = consequence.severity * 0.8 + _GENERIC_URGENCY_BONUS.get(consequence.urgency, 0)
    return min(100.0, score)


def score_consequence(consequence: Consequence, now: datetime) -> float:
    """Immediate-danger score (0-100) for a single consequence"""
    match consequence.type:
        case ConsequenceType.SHUTOFF:
            return _shutoff_score(consequence)
        case ConsequenceType.EVICTION | ConsequenceType.FORECLOSURE:
            return _housing_loss_score(consequence, now)
        case ConsequenceType.REPOSSESSION:
            return _repossession_score(consequence)
        case ConsequenceType.LICENSE_SUSPENSION:
            return _license_suspension_score(consequence)
        case _:
            return _generic_consequence_score(consequence)


def calculate_immediate_consequence_score(bill: Bill, now: datetime) -> float:
    """
    Worst single real-world outcome among the bill's consequences.

    The maximum is used rather than an average: one eviction outweighs any
    number of late fees.
    """
    if not bill.consequences:
        return 0.0
    return min(100.0, max(score_consequence(c, now) for c in bill.consequences))


# --- Financial impact ------------------------------------------------------


def _late_fee(bill: Bill) -> float:
    terms = bill.payment_terms
    if terms.late_fee_amount:
        return terms.late_fee_amount
    if terms.late_fee_percentage:
        return terms.late_fee_percentage * bill.current_balance
    return 0.0


def _interest_rate(bill: Bill) -> float:
    return bill.interest_rate or bill.payment_terms.interest_rate or 0.0


def calculate_financial_impact_score(bill: Bill) -> float:
    """
    Cost of waiting: late fees, interest and credit damage (0-100).

    Components:
    - Late fee as % of balance, x2, capped at 30
    - Monthly interest as % of balance, x3, capped at 25
    - Score drop of the worst credit-damage consequence, x0.5, capped at 30
    - +15 if any late fee compounds
    """
    score = 0.0

    late_fee = _late_fee(bill)
    if late_fee > 0:
        if bill.current_balance > 0:
            fee_percentage = late_fee / bill.current_balance * 100
            score += min(30.0, fee_percentage * 2)
    else:
        _data_quality_note(bill, "late_fee_amount")

    rate = _interest_rate(bill)
    if rate > 0:
        # monthly interest / balance reduces to the monthly rate
        monthly_interest_percentage = rate / 12 * 100
        score += min(25.0, monthly_interest_percentage * 3)

    credit_damage = [c for c in bill.consequences if isinstance(c, CreditDamageConsequence)]
    if credit_damage:
        worst = max(credit_damage, key=lambda c: c.severity)
        score += min(30.0, (worst.estimated_score_drop or 0) * 0.5)

    if any(isinstance(c, LateFeeConsequence) and c.is_compounding for c in bill.consequences):
        score += 15

    return min(100.0, score)


# --- Recovery difficulty ---------------------------------------------------


def calculate_recovery_difficulty_score(bill: Bill) -> float:
    """How hard and expensive it is to undo the damage after default (0-100)"""
    score = 0.0

    for consequence in bill.consequences:
        if consequence.recovery_cost:
            if bill.original_amount > 0:
                cost_percentage = consequence.recovery_cost / bill.original_amount * 100
            else:
                cost_percentage = 100.0
            score += min(40.0, cost_percentage)

        if consequence.recovery_time_months:
            score += min(30.0, consequence.recovery_time_months * 2)

        if not consequence.recoverable:
            score += 50
        if not consequence.preventable:
            score += 20

    return min(100.0, score)


# --- Due date and amount ---------------------------------------------------


def calculate_due_date_score(bill: Bill, now: datetime) -> float:
    """Traditional overdue / due-soon urgency (0-100)"""
    days_overdue = calculate_days_overdue(bill, now)
    if days_overdue > 0:
        if days_overdue >= 90:
            return 100.0
        elif days_overdue >= 60:
            return 90.0
        elif days_overdue >= 30:
            return 80.0
        elif days_overdue >= 14:
            return 70.0
        elif days_overdue >= 7:
            return 60.0
        return 50.0 + days_overdue

    days_until_due = days_between(now, bill.due_date)
    if days_until_due <= 3:
        return 40.0
    elif days_until_due <= 7:
        return 30.0
    elif days_until_due <= 14:
        return 20.0
    elif days_until_due <= 30:
        return 10.0
    return 5.0


def calculate_amount_score(bill: Bill, typical_bill_amount: float = DEFAULT_TYPICAL_BILL_AMOUNT) -> float:
    """Bill size relative to a typical bill (0-100)"""
    ratio = bill.current_balance / typical_bill_amount
    if ratio >= 10:
        return 100.0
    elif ratio >= 5:
        return 80.0
    elif ratio >= 2:
        return 60.0
    elif ratio >= 1:
        return 40.0
    return 20.0


# --- Reasoning -------------------------------------------------------------


def generate_reasoning(bill: Bill, scores: PriorityScores, days_overdue: int) -> PriorityReasoning:
    """
    Human-readable explanation of a score.

    Advisory only - nothing here feeds back into scoring.
    """
    risk_factors: List[str] = []
    recommendations: List[str] = []

    max_score = max(
        scores.immediate_consequence,
        scores.financial_impact,
        scores.recovery_difficulty,
        scores.due_date,
        scores.amount,
    )

    if max_score == scores.immediate_consequence and scores.immediate_consequence > 60:
        primary_reason = "Immediate service shutoff or legal action risk"
        for consequence in bill.consequences:
            if consequence.estimated_days <= 7 and consequence.description:
                risk_factors.append(consequence.description)
        recommendations.append("Contact creditor immediately to arrange payment or payment plan")
        recommendations.append("Prioritize this bill above all others")

    elif max_score == scores.financial_impact and scores.financial_impact > 50:
        primary_reason = "High financial impact from fees and interest"
        late_fee = _late_fee(bill)
        if late_fee:
            risk_factors.append(f"Late fee of ${late_fee:.2f} applies")
        rate = _interest_rate(bill)
        if rate > 0.15:
            risk_factors.append(f"High interest rate of {rate * 100:.1f}%")
        recommendations.append("Make at least minimum payment to avoid additional fees")

    elif max_score == scores.recovery_difficulty and scores.recovery_difficulty > 50:
        primary_reason = "Difficult and expensive to recover from default"
        for consequence in bill.consequences:
            if consequence.recovery_cost and consequence.recovery_cost > bill.original_amount * 0.2:
                risk_factors.append(f"Recovery would cost ${consequence.recovery_cost:.2f}")
        recommendations.append("Prevent default - recovery costs exceed current bill amount")

    elif days_overdue > 0:
        primary_reason = f"Bill is {days_overdue} days overdue"
        risk_factors.append("Overdue status may trigger additional consequences")
        recommendations.append("Contact creditor to discuss payment options")

    else:
        primary_reason = "Upcoming due date requires attention"
        recommendations.append("Schedule payment before due date")

    if bill.is_essential:
        risk_factors.append("Essential service - impacts daily life")

    opportunity = bill.negotiation_opportunity
    if opportunity is not None and opportunity.likelihood == "high":
        recommendations.append("Good opportunity for payment arrangement - contact creditor")

    return PriorityReasoning(
        primary_reason=primary_reason,
        risk_factors=risk_factors,
        recommendations=recommendations,
    )


# --- Public entry points ---------------------------------------------------


def priority_sort_key(score: float) -> str:
    """Zero-padded whole-point key so lexicographic order matches numeric order (95.7 -> "000095")

    Truncated rather than rounded: keys >= "000090" are exactly the CRITICAL tier.
    """
    return f"{int(score):06d}"


def priority_tier(score: float) -> PriorityTier:
    """Map a 0-100 priority score onto its action tier"""
    if score >= 90:
        return PriorityTier.CRITICAL
    elif score >= 70:
        return PriorityTier.HIGH
    elif score >= 40:
        return PriorityTier.MEDIUM
    return PriorityTier.LOW


def calculate_priority(
    bill: Bill,
    now: datetime,
    factors: PriorityFactors = DEFAULT_PRIORITY_FACTORS,
    typical_bill_amount: float = DEFAULT_TYPICAL_BILL_AMOUNT,
) -> PriorityCalculation:
    """
    Main entry point: score a bill 0-100 by the consequence of not paying it.

    Weights (defaults):
    - 40%: Immediate consequence (shutoff, eviction, repossession)
    - 25%: Financial impact (late fees, interest, credit damage)
    - 20%: Recovery difficulty (cost/time to undo default)
    - 10%: Due date urgency
    - 5%:  Amount relative to a typical bill

    Never mutates `bill`. The same bill and `now` always give the same result.

    Raises:
        InvalidPriorityFactorsError: typical_bill_amount is not positive
    """
    if typical_bill_amount <= 0:
        raise InvalidPriorityFactorsError(f"Typical bill amount must be positive, got {typical_bill_amount}")

    days_overdue = calculate_days_overdue(bill, now)
    scores = PriorityScores(
        immediate_consequence=calculate_immediate_consequence_score(bill, now),
        financial_impact=calculate_financial_impact_score(bill),
        recovery_difficulty=calculate_recovery_difficulty_score(bill),
        due_date=calculate_due_date_score(bill, now),
        amount=calculate_amount_score(bill, typical_bill_amount),
    )

    weighted = (
        scores.immediate_consequence * factors.immediate_consequence_weight
        + scores.financial_impact * factors.financial_impact_weight
        + scores.recovery_difficulty * factors.recovery_difficulty_weight
        + scores.due_date * factors.due_date_weight
        + scores.amount * factors.amount_weight
    )
    final_score = min(100.0, max(0.0, round(weighted, 2)))

    return PriorityCalculation(
        bill_id=bill.bill_id,
        calculated_at=now,
        final_score=final_score,
        factors=factors,
        scores=scores,
        reasoning=generate_reasoning(bill, scores, days_overdue),
        tier=priority_tier(final_score),
        sort_key=priority_sort_key(final_score),
        days_overdue=days_overdue,
    )


def rescore_bill(
    bill: Bill,
    now: datetime,
    factors: PriorityFactors = DEFAULT_PRIORITY_FACTORS,
    typical_bill_amount: float = DEFAULT_TYPICAL_BILL_AMOUNT,
) -> Tuple[Bill, PriorityCalculation]:
    """Score a bill and return a refreshed copy carrying the new priority"""
    calculation = calculate_priority(bill, now, factors, typical_bill_amount)
    updated = replace(
        bill,
        days_overdue=calculation.days_overdue,
        priority=calculation.final_score,
        priority_calculated_at=calculation.calculated_at,
    )
    return updated, calculation


def calculate_priorities(
    bills: Iterable[Bill],
    now: datetime,
    factors: PriorityFactors = DEFAULT_PRIORITY_FACTORS,
    typical_bill_amount: float = DEFAULT_TYPICAL_BILL_AMOUNT,
) -> List[Tuple[Bill, PriorityCalculation]]:
    """Rescore every bill against one `now`, highest priority first"""
    results = [rescore_bill(bill, now, factors, typical_bill_amount) for bill in bills]
    return sorted(results, key=lambda pair: pair[1].final_score, reverse=True)


def ensure_scored(
    bills: Iterable[Bill],
    now: datetime,
    factors: PriorityFactors = DEFAULT_PRIORITY_FACTORS,
    typical_bill_amount: float = DEFAULT_TYPICAL_BILL_AMOUNT,
) -> List[Bill]:
    """Score only the bills that arrive without a priority; order is preserved"""
    return [
        bill if bill.priority is not None else rescore_bill(bill, now, factors, typical_bill_amount)[0]
        for bill in bills
    ]
