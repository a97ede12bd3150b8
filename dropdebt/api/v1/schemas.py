"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from dropdebt.domain.alerts import AlertSeverity, AlertType
from dropdebt.domain.consequences import ConsequenceType, ConsequenceUrgency, consequence_from_dict
from dropdebt.domain.models import (
    ActionUrgency,
    Bill,
    BillStatus,
    BillType,
    NegotiationOpportunity,
    PaymentTerms,
    PriorityFactors,
    PriorityTier,
    TriageActionType,
    TriageStrategy,
)


class ConsequenceSchema(BaseModel):
    """Common consequence fields; variant fields (shutoff_date, court_date, ...) pass through"""

    model_config = ConfigDict(extra="allow")

    type: ConsequenceType
    severity: float = Field(..., ge=0, le=100)
    description: str = ""
    estimated_days: int = 0
    urgency: Optional[ConsequenceUrgency] = None
    preventable: bool = True
    recoverable: bool = True
    recovery_cost: Optional[float] = None
    recovery_time_months: Optional[float] = None


class PaymentTermsSchema(BaseModel):
    grace_period_days: int = 0
    minimum_payment: Optional[float] = None
    late_fee_amount: Optional[float] = None
    late_fee_percentage: Optional[float] = None
    interest_rate: Optional[float] = None
    compounding_frequency: Optional[str] = None


class NegotiationOpportunitySchema(BaseModel):
    window_days: int
    likelihood: str
    strategies: List[str] = []


class BillSchema(BaseModel):
    """Bill record as supplied by the bill-management service"""

    bill_id: str = Field(..., min_length=1)
    name: str = ""
    bill_type: Optional[BillType] = None
    status: BillStatus = BillStatus.ACTIVE
    current_balance: float
    original_amount: float
    minimum_payment: Optional[float] = None
    interest_rate: Optional[float] = None
    due_date: date
    original_due_date: Optional[date] = None
    last_payment_date: Optional[date] = None
    is_essential: bool = False
    consequences: List[ConsequenceSchema] = []
    payment_terms: PaymentTermsSchema = PaymentTermsSchema()
    negotiation_opportunity: Optional[NegotiationOpportunitySchema] = None
    priority: Optional[float] = Field(None, ge=0, le=100)

    def to_domain(self, user_id: str) -> Bill:
        """Convert to the domain entity

        Raises:
            InvalidBillDataError: a consequence cannot be built
        """
        negotiation = None
        if self.negotiation_opportunity is not None:
            negotiation = NegotiationOpportunity(**self.negotiation_opportunity.model_dump())

        return Bill(
            bill_id=self.bill_id,
            user_id=user_id,
            name=self.name,
            bill_type=self.bill_type,
            status=self.status,
            current_balance=self.current_balance,
            original_amount=self.original_amount,
            minimum_payment=self.minimum_payment,
            interest_rate=self.interest_rate,
            due_date=self.due_date,
            original_due_date=self.original_due_date or self.due_date,
            last_payment_date=self.last_payment_date,
            is_essential=self.is_essential,
            consequences=[consequence_from_dict(c.model_dump()) for c in self.consequences],
            payment_terms=PaymentTerms(**self.payment_terms.model_dump()),
            negotiation_opportunity=negotiation,
            priority=self.priority,
        )


def bills_to_domain(bills: List[BillSchema], user_id: str) -> List[Bill]:
    return [b.to_domain(user_id) for b in bills]


class WeightsSchema(BaseModel):
    """Optional weight overrides; the full set must still sum to 1.0"""

    immediate_consequence_weight: Optional[float] = None
    financial_impact_weight: Optional[float] = None
    recovery_difficulty_weight: Optional[float] = None
    due_date_weight: Optional[float] = None
    amount_weight: Optional[float] = None

    def to_factors(self) -> PriorityFactors:
        return PriorityFactors().with_overrides(**self.model_dump(exclude_none=True))


class PriorityRequest(BaseModel):
    """Request body for POST /v1/priority and /v1/priority/recalculate"""

    user_id: str = Field(..., min_length=1)
    bills: List[BillSchema]
    now: Optional[datetime] = None
    weights: Optional[WeightsSchema] = None
    typical_bill_amount: Optional[float] = Field(None, gt=0)


class PriorityScoresSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    immediate_consequence: float
    financial_impact: float
    recovery_difficulty: float
    due_date: float
    amount: float


class PriorityReasoningSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    primary_reason: str
    risk_factors: List[str]
    recommendations: List[str]


class PriorityCalculationSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    bill_id: str
    calculated_at: datetime
    final_score: float
    tier: PriorityTier
    sort_key: str
    days_overdue: int
    scores: PriorityScoresSchema
    reasoning: PriorityReasoningSchema


class PriorityResponse(BaseModel):
    """Response for POST /v1/priority"""

    user_id: str
    calculations: List[PriorityCalculationSchema]
    errors: List[str] = []


class StoredPriorityItem(BaseModel):
    """Single persisted priority"""

    model_config = ConfigDict(from_attributes=True)

    bill_id: str
    bill_name: str
    current_balance: float
    final_score: float
    sort_key: str
    tier: str
    calculated_at: datetime


class StoredPriorityResponse(BaseModel):
    """Response for GET /v1/priority"""

    user_id: str
    bills: List[StoredPriorityItem]


class TriageRequest(BaseModel):
    """Request body for POST /v1/triage"""

    user_id: str = Field(..., min_length=1)
    bills: List[BillSchema]
    available_amount: float
    strategy: Optional[str] = None
    now: Optional[datetime] = None


class TriageActionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    type: TriageActionType
    bill_id: str
    bill_name: str
    amount: float
    reason: str
    instructions: str
    urgency: ActionUrgency


class TriageResponse(BaseModel):
    """Response for POST /v1/triage"""

    model_config = ConfigDict(from_attributes=True)

    is_crisis: bool
    available_amount: float
    usable_amount: float
    strategy: TriageStrategy
    total_critical_bills: int
    can_pay_all: bool
    total_allocated: float
    actions: List[TriageActionSchema]
    immediate_actions: List[TriageActionSchema]
    consequences: List[str]
    help_resources: List[str]
    next_steps: List[str]


class TimelineRequest(BaseModel):
    """Request body for POST /v1/timeline"""

    user_id: str = Field(..., min_length=1)
    bills: List[BillSchema]
    now: Optional[datetime] = None


class ConsequenceEventSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    bill_id: str
    bill_name: str
    amount: float
    date: date
    days_until: int
    consequence: str
    severity: PriorityTier
    can_prevent: bool
    prevention_cost: float


class TimelineTotalsSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    urgent: float
    this_week: float
    next_week: float
    this_month: float


class TimelineResponse(BaseModel):
    """Response for POST /v1/timeline"""

    model_config = ConfigDict(from_attributes=True)

    urgent: List[ConsequenceEventSchema]
    this_week: List[ConsequenceEventSchema]
    next_week: List[ConsequenceEventSchema]
    this_month: List[ConsequenceEventSchema]
    totals: TimelineTotalsSchema
    urgent_actions: List[str] = []


class ProgressRequest(BaseModel):
    """Request body for POST /v1/progress"""

    user_id: str = Field(..., min_length=1)
    bills: List[BillSchema]
    weekly_available: float = 0.0
    now: Optional[datetime] = None


class ProgressResponse(BaseModel):
    """Response for POST /v1/progress"""

    total_bills: int
    current_bills: int
    critical_bills: int
    critical_current: int
    high_priority_bills: int
    high_priority_current: int
    total_debt: float
    weeks_to_stability: Optional[int] = None
    timeline_to_stability: str


class AlertsRequest(BaseModel):
    """Request body for POST /v1/alerts"""

    user_id: str = Field(..., min_length=1)
    bills: List[BillSchema]
    now: Optional[datetime] = None


class EmergencyResourceSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    contact: str
    assistance_type: str


class CrisisAlertSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    alert_type: AlertType
    severity: AlertSeverity
    bill_id: str
    bill_name: str
    description: str
    immediate_action: str
    deadline: Optional[date] = None
    resources: List[EmergencyResourceSchema] = []
    message: str


class AlertsResponse(BaseModel):
    """Response for POST /v1/alerts"""

    alerts: List[CrisisAlertSchema]
    has_emergency: bool
