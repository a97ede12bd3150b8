"""Coarse bill-category inference used by triage and the timeline"""

import re
from typing import Optional

from dropdebt.domain.models import Bill, BillType

# Explicit enum values collapse onto the categories the heuristics care about
_CATEGORY_BY_TYPE = {
    BillType.ELECTRIC: "electric",
    BillType.GAS: "gas",
    BillType.WATER: "water",
    BillType.SEWER: "water",
    BillType.RENT: "rent",
    BillType.MORTGAGE: "mortgage",
    BillType.CAR_PAYMENT: "car",
    BillType.CAR_INSURANCE: "insurance",
    BillType.HOME_INSURANCE: "insurance",
    BillType.HEALTH_INSURANCE: "insurance",
    BillType.CREDIT_CARD: "credit_card",
    BillType.MEDICAL_BILL: "medical",
    BillType.PRESCRIPTION: "medical",
    BillType.PHONE: "phone",
}

# Ordered: first match wins. Credit cards go before "car" because "card" starts with it.
# Keywords match at the start of a word, so "Electricity" is electric but "Parent" is not rent.
_NAME_KEYWORDS = (
    ("electric", ("electric", "power")),
    ("gas", ("gas",)),
    ("water", ("water", "sewer")),
    ("rent", ("rent",)),
    ("mortgage", ("mortgage",)),
    ("credit_card", ("credit", "card")),
    ("car", ("car", "auto", "vehicle")),
    ("insurance", ("insurance",)),
    ("medical", ("medical", "hospital", "doctor")),
    ("phone", ("phone", "cell", "mobile")),
)

_NAME_PATTERNS = [
    (category, re.compile(r"\b(?:" + "|".join(keywords) + ")"))
    for category, keywords in _NAME_KEYWORDS
]

UTILITY_CATEGORIES = {"electric", "gas", "water"}
HOUSING_CATEGORIES = {"rent", "mortgage"}


def category_from_name(name: Optional[str]) -> str:
    """Best-effort keyword match on a free-text bill name"""
    if not name:
        return "unknown"
    lowered = name.lower()
    for category, pattern in _NAME_PATTERNS:
        if pattern.search(lowered):
            return category
    return "unknown"


def infer_bill_category(bill: Bill) -> str:
    """
    Category for a bill: explicit bill_type when set, name keywords otherwise.

    Returns one of electric, gas, water, rent, mortgage, car, insurance,
    credit_card, medical, phone or unknown.
    """
    if bill.bill_type is not None and bill.bill_type in _CATEGORY_BY_TYPE:
        return _CATEGORY_BY_TYPE[bill.bill_type]
    return category_from_name(bill.name)
