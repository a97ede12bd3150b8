"""
Consequence model - what actually happens when a bill goes unpaid.

Each consequence kind is its own dataclass sharing the common fields of
`Consequence`; the `type` field is the discriminant the scorer matches on.
"""

from dataclasses import dataclass, field, fields
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from dropdebt.domain.exceptions import InvalidBillDataError


class ConsequenceType(str, Enum):
    SHUTOFF = "SHUTOFF"
    EVICTION = "EVICTION"
    FORECLOSURE = "FORECLOSURE"
    REPOSSESSION = "REPOSSESSION"
    LICENSE_SUSPENSION = "LICENSE_SUSPENSION"
    CREDIT_DAMAGE = "CREDIT_DAMAGE"
    LATE_FEES = "LATE_FEES"
    COLLECTION = "COLLECTION"
    LEGAL_ACTION = "LEGAL_ACTION"


class ConsequenceUrgency(str, Enum):
    IMMEDIATE = "IMMEDIATE"  # 0-7 days
    SHORT_TERM = "SHORT_TERM"  # 8-30 days
    MEDIUM_TERM = "MEDIUM_TERM"  # 31-90 days
    LONG_TERM = "LONG_TERM"  # 90+ days


ESSENTIAL_UTILITIES = {"electric", "gas", "water"}


def urgency_for_days(estimated_days: int) -> ConsequenceUrgency:
    """Bucket days-until-consequence into an urgency tier"""
    if estimated_days <= 7:
        return ConsequenceUrgency.IMMEDIATE
    elif estimated_days <= 30:
        return ConsequenceUrgency.SHORT_TERM
    elif estimated_days <= 90:
        return ConsequenceUrgency.MEDIUM_TERM
    return ConsequenceUrgency.LONG_TERM


@dataclass(kw_only=True)
class Consequence:
    """Fields shared by every consequence kind"""

    type: ConsequenceType
    severity: float  # 0-100
    description: str = ""
    estimated_days: int = 0  # days until the consequence occurs
    urgency: Optional[ConsequenceUrgency] = None  # derived from estimated_days when omitted
    preventable: bool = True
    recoverable: bool = True
    recovery_cost: Optional[float] = None
    recovery_time_months: Optional[float] = None

    def __post_init__(self) -> None:
        if not 0 <= self.severity <= 100:
            raise InvalidBillDataError(f"Consequence severity must be within 0-100, got {self.severity}")
        if self.urgency is None:
            self.urgency = urgency_for_days(self.estimated_days)

    def explicit_date(self) -> Optional[date]:
        """Known calendar date for this consequence, if the creditor gave one"""
        return None


@dataclass(kw_only=True)
class ShutoffConsequence(Consequence):
    type: ConsequenceType = ConsequenceType.SHUTOFF
    utility_type: str = "electric"  # electric | gas | water | internet | phone
    shutoff_date: Optional[date] = None
    reconnection_fee: float = 0.0
    deposit_required: Optional[float] = None
    grace_period_days: int = 0
    winter_moratorium: bool = False

    def explicit_date(self) -> Optional[date]:
        return self.shutoff_date


@dataclass(kw_only=True)
class HousingLossConsequence(Consequence):
    type: ConsequenceType = ConsequenceType.EVICTION
    notice_date: Optional[date] = None
    court_date: Optional[date] = None
    move_out_date: Optional[date] = None
    legal_fees: Optional[float] = None
    moving_costs: Optional[float] = None
    security_deposit_loss: Optional[float] = None

    def __post_init__(self) -> None:
        if self.type not in (ConsequenceType.EVICTION, ConsequenceType.FORECLOSURE):
            raise InvalidBillDataError(f"Housing loss must be EVICTION or FORECLOSURE, got {self.type}")
        super().__post_init__()

    def explicit_date(self) -> Optional[date]:
        return self.court_date


@dataclass(kw_only=True)
class VehicleRepoConsequence(Consequence):
    type: ConsequenceType = ConsequenceType.REPOSSESSION
    vehicle_value: float = 0.0
    deficiency_balance: Optional[float] = None
    repo_fees: Optional[float] = None
    storage_fees_per_day: Optional[float] = None
    redemption_period_days: Optional[int] = None


@dataclass(kw_only=True)
class LicenseSuspensionConsequence(Consequence):
    type: ConsequenceType = ConsequenceType.LICENSE_SUSPENSION
    suspension_type: str = "vehicle_registration"  # drivers_license | vehicle_registration | professional_license
    reinstatement_fee: float = 0.0
    additional_requirements: List[str] = field(default_factory=list)


@dataclass(kw_only=True)
class CreditDamageConsequence(Consequence):
    type: ConsequenceType = ConsequenceType.CREDIT_DAMAGE
    current_credit_score: Optional[int] = None
    estimated_score_drop: float = 0.0
    reporting_date: Optional[date] = None
    years_on_report: int = 7
    impact_on_borrowing: str = "moderate"  # severe | moderate | minimal


@dataclass(kw_only=True)
class LateFeeConsequence(Consequence):
    type: ConsequenceType = ConsequenceType.LATE_FEES
    late_fee_amount: float = 0.0
    is_compounding: bool = False
    compounding_frequency: Optional[str] = None  # daily | weekly | monthly
    max_fee_amount: Optional[float] = None
    fee_percentage: Optional[float] = None


@dataclass(kw_only=True)
class GenericConsequence(Consequence):
    """Collections and legal action carry only the common fields"""

    type: ConsequenceType = ConsequenceType.COLLECTION


CONSEQUENCE_CLASSES = {
    ConsequenceType.SHUTOFF: ShutoffConsequence,
    ConsequenceType.EVICTION: HousingLossConsequence,
    ConsequenceType.FORECLOSURE: HousingLossConsequence,
    ConsequenceType.REPOSSESSION: VehicleRepoConsequence,
    ConsequenceType.LICENSE_SUSPENSION: LicenseSuspensionConsequence,
    ConsequenceType.CREDIT_DAMAGE: CreditDamageConsequence,
    ConsequenceType.LATE_FEES: LateFeeConsequence,
    ConsequenceType.COLLECTION: GenericConsequence,
    ConsequenceType.LEGAL_ACTION: GenericConsequence,
}

_DATE_FIELDS = {"shutoff_date", "notice_date", "court_date", "move_out_date", "reporting_date"}


def consequence_from_dict(data: Dict[str, Any]) -> Consequence:
    """
    Build the matching consequence variant from a plain mapping.

    Unknown keys are ignored; ISO date strings and enum names are converted.

    Raises:
        InvalidBillDataError: Missing/unknown type, out-of-range severity, or a
            date or urgency that cannot be parsed
    """
    try:
        consequence_type = ConsequenceType(data["type"])
    except (KeyError, ValueError) as e:
        raise InvalidBillDataError(f"Unknown consequence type: {data.get('type')!r}") from e

    cls = CONSEQUENCE_CLASSES[consequence_type]
    allowed = {f.name for f in fields(cls)}
    kwargs: Dict[str, Any] = {k: v for k, v in data.items() if k in allowed and v is not None}
    kwargs["type"] = consequence_type

    if "severity" not in kwargs:
        raise InvalidBillDataError(f"{consequence_type.value} consequence is missing severity")

    try:
        for name in _DATE_FIELDS & kwargs.keys():
            if isinstance(kwargs[name], str):
                kwargs[name] = date.fromisoformat(kwargs[name][:10])
        if isinstance(kwargs.get("urgency"), str):
            kwargs["urgency"] = ConsequenceUrgency(kwargs["urgency"])
        return cls(**kwargs)
    except (ValueError, TypeError) as e:
        raise InvalidBillDataError(f"Invalid {consequence_type.value} consequence: {e}") from e
