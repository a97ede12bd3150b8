"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from dropdebt.domain.consequences import Consequence
from dropdebt.domain.exceptions import InvalidPriorityFactorsError


class BillType(str, Enum):
    # Housing
    RENT = "RENT"
    MORTGAGE = "MORTGAGE"
    HOME_INSURANCE = "HOME_INSURANCE"
    PROPERTY_TAX = "PROPERTY_TAX"
    HOA_FEES = "HOA_FEES"
    # Utilities
    ELECTRIC = "ELECTRIC"
    GAS = "GAS"
    WATER = "WATER"
    SEWER = "SEWER"
    TRASH = "TRASH"
    INTERNET = "INTERNET"
    CABLE_TV = "CABLE_TV"
    PHONE = "PHONE"
    # Transportation
    CAR_PAYMENT = "CAR_PAYMENT"
    CAR_INSURANCE = "CAR_INSURANCE"
    VEHICLE_REGISTRATION = "VEHICLE_REGISTRATION"
    # Financial
    CREDIT_CARD = "CREDIT_CARD"
    PERSONAL_LOAN = "PERSONAL_LOAN"
    STUDENT_LOAN = "STUDENT_LOAN"
    PAYDAY_LOAN = "PAYDAY_LOAN"
    # Healthcare
    HEALTH_INSURANCE = "HEALTH_INSURANCE"
    MEDICAL_BILL = "MEDICAL_BILL"
    PRESCRIPTION = "PRESCRIPTION"
    # Other
    SUBSCRIPTION = "SUBSCRIPTION"
    MEMBERSHIP = "MEMBERSHIP"
    OTHER = "OTHER"


class BillStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    IN_ARRANGEMENT = "IN_ARRANGEMENT"
    ARCHIVED = "ARCHIVED"
    CANCELLED = "CANCELLED"


class PriorityTier(str, Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class TriageStrategy(str, Enum):
    CONSERVATIVE = "CONSERVATIVE"
    BALANCED = "BALANCED"
    AGGRESSIVE = "AGGRESSIVE"


class TriageActionType(str, Enum):
    PAY_NOW = "PAY_NOW"
    PARTIAL_PAYMENT = "PARTIAL_PAYMENT"
    CALL_CREDITOR = "CALL_CREDITOR"
    GET_HELP = "GET_HELP"


class ActionUrgency(str, Enum):
    IMMEDIATE = "IMMEDIATE"
    THIS_WEEK = "THIS_WEEK"
    NEXT_PAYCHECK = "NEXT_PAYCHECK"


@dataclass
class PaymentTerms:
    """Creditor terms that drive fees and interest"""

    grace_period_days: int = 0
    minimum_payment: Optional[float] = None
    late_fee_amount: Optional[float] = None
    late_fee_percentage: Optional[float] = None  # decimal, 0.05 = 5% of balance
    interest_rate: Optional[float] = None  # APR as decimal
    compounding_frequency: Optional[str] = None  # daily | monthly | annually


@dataclass
class NegotiationOpportunity:
    """Window in which the creditor is likely to accept an arrangement"""

    window_days: int
    likelihood: str  # high | medium | low
    strategies: List[str] = field(default_factory=list)


@dataclass
class Bill:
    """A single obligation the user owes, with its non-payment consequences"""

    bill_id: str
    user_id: str
    name: str
    current_balance: float
    original_amount: float
    due_date: date
    bill_type: Optional[BillType] = None
    status: BillStatus = BillStatus.ACTIVE
    minimum_payment: Optional[float] = None
    interest_rate: Optional[float] = None  # APR as decimal
    original_due_date: Optional[date] = None
    last_payment_date: Optional[date] = None
    is_essential: bool = False
    consequences: List[Consequence] = field(default_factory=list)
    payment_terms: PaymentTerms = field(default_factory=PaymentTerms)
    negotiation_opportunity: Optional[NegotiationOpportunity] = None

    # Derived on every scoring pass
    days_overdue: int = 0
    priority: Optional[float] = None
    priority_calculated_at: Optional[datetime] = None

    def explicit_deadline(self) -> Optional[date]:
        """Earliest creditor-given shutoff or court date, if any"""
        dates = [d for d in (c.explicit_date() for c in self.consequences) if d is not None]
        return min(dates) if dates else None


@dataclass(frozen=True)
class PriorityFactors:
    """Weights for the five priority sub-scores; must sum to 1.0"""

    immediate_consequence_weight: float = 0.40  # shutoff, eviction, repo
    financial_impact_weight: float = 0.25  # late fees, credit damage
    recovery_difficulty_weight: float = 0.20  # time/cost to recover
    due_date_weight: float = 0.10
    amount_weight: float = 0.05

    def __post_init__(self) -> None:
        weights = (
            self.immediate_consequence_weight,
            self.financial_impact_weight,
            self.recovery_difficulty_weight,
            self.due_date_weight,
            self.amount_weight,
        )
        if any(w < 0 for w in weights):
            raise InvalidPriorityFactorsError(f"Priority factors must be non-negative, got {weights}")
        total = sum(weights)
        if abs(total - 1.0) > 0.01:
            raise InvalidPriorityFactorsError(f"Priority factors must sum to 1.0, got {total:.3f}")

    def with_overrides(self, **overrides: float) -> "PriorityFactors":
        """Validated copy with some weights replaced"""
        return replace(self, **overrides)


DEFAULT_PRIORITY_FACTORS = PriorityFactors()


@dataclass
class PriorityScores:
    """Individual 0-100 component scores"""

    immediate_consequence: float
    financial_impact: float
    recovery_difficulty: float
    due_date: float
    amount: float


@dataclass
class PriorityReasoning:
    """Advisory explanation shown to the user"""

    primary_reason: str
    risk_factors: List[str]
    recommendations: List[str]


@dataclass
class PriorityCalculation:
    """Output of the priority scorer for one bill"""

    bill_id: str
    calculated_at: datetime
    final_score: float
    factors: PriorityFactors
    scores: PriorityScores
    reasoning: PriorityReasoning
    tier: PriorityTier
    sort_key: str
    days_overdue: int


@dataclass
class BillDeadline:
    """When a bill's consequence lands, as seen by the triage allocator"""

    bill_id: str
    bill_name: str
    amount: float
    consequence: str
    deadline: date
    days_until: int
    priority: PriorityTier


@dataclass
class TriageAction:
    """One instruction for the user; a projection, never persisted"""

    type: TriageActionType
    bill_id: str
    bill_name: str
    amount: float
    reason: str
    instructions: str
    urgency: ActionUrgency


@dataclass
class TriageResult:
    """Output of crisis triage"""

    is_crisis: bool
    available_amount: float
    usable_amount: float
    strategy: TriageStrategy
    total_critical_bills: int
    can_pay_all: bool
    total_allocated: float
    actions: List[TriageAction]
    immediate_actions: List[TriageAction]
    consequences: List[str]
    help_resources: List[str]
    next_steps: List[str]


@dataclass
class ConsequenceEvent:
    """A dated consequence on the timeline"""

    bill_id: str
    bill_name: str
    amount: float
    date: date
    days_until: int
    consequence: str
    severity: PriorityTier
    can_prevent: bool
    prevention_cost: float


@dataclass
class TimelineTotals:
    urgent: float = 0.0
    this_week: float = 0.0
    next_week: float = 0.0
    this_month: float = 0.0


@dataclass
class ConsequenceTimeline:
    """Consequence events bucketed by how soon they land"""

    urgent: List[ConsequenceEvent]  # within 3 days
    this_week: List[ConsequenceEvent]  # within 7 days, includes urgent
    next_week: List[ConsequenceEvent]  # 8-14 days
    this_month: List[ConsequenceEvent]  # 15-30 days
    totals: TimelineTotals


@dataclass
class BillProgress:
    """Counts of bills brought current, overall and per tier"""

    total_bills: int
    current_bills: int
    critical_bills: int
    critical_current: int
    high_priority_bills: int
    high_priority_current: int
