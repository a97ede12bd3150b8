"""Curated emergency assistance resources, keyed by bill category"""

from dataclasses import dataclass
from typing import Iterable, List

from dropdebt.domain.bill_types import HOUSING_CATEGORIES, UTILITY_CATEGORIES


@dataclass(frozen=True)
class EmergencyResource:
    name: str
    contact: str
    assistance_type: str  # general | utility | housing | food | financial


HOTLINE_211 = EmergencyResource(
    name="2-1-1",
    contact="Call 2-1-1 immediately for emergency assistance programs",
    assistance_type="general",
)

LIHEAP = EmergencyResource(
    name="LIHEAP",
    contact="Apply for LIHEAP (utility assistance) at https://www.acf.hhs.gov/ocs/programs/liheap",
    assistance_type="utility",
)

RENTAL_ASSISTANCE = EmergencyResource(
    name="Emergency Rental Assistance",
    contact="Contact local housing assistance: call 2-1-1 or visit consumerfinance.gov/renthelp",
    assistance_type="housing",
)

FOOD_BANKS = EmergencyResource(
    name="Feeding America",
    contact="Food assistance: find food banks at https://www.feedingamerica.org/find-your-local-foodbank",
    assistance_type="food",
)

CREDIT_COUNSELING = EmergencyResource(
    name="NFCC",
    contact="Free credit counseling: National Foundation for Credit Counseling 1-800-388-2227",
    assistance_type="financial",
)

LEGAL_AID = EmergencyResource(
    name="Legal Aid",
    contact="Free legal help to prevent eviction: search \"legal aid near me\" or call 2-1-1",
    assistance_type="housing",
)

HOUSING_COUNSELOR = EmergencyResource(
    name="HUD Housing Counselor",
    contact="Free HUD-approved housing counseling: call 1-800-569-4287",
    assistance_type="housing",
)

AUTO_LENDER = EmergencyResource(
    name="Auto Lender",
    contact="Call the number on your loan statement to ask for forbearance or a payment plan",
    assistance_type="financial",
)

TRANSPORTATION_AID = EmergencyResource(
    name="Local Transportation Aid",
    contact="Bus passes or ride assistance: call 2-1-1 for local programs",
    assistance_type="general",
)


def utility_hardship(bill_name: str) -> EmergencyResource:
    """The utility's own hardship line; the number is printed on the bill"""
    return EmergencyResource(
        name=f"{bill_name} Hardship Program",
        contact=f"Call the number on your {bill_name} bill to ask for a payment plan or shutoff protection",
        assistance_type="utility",
    )


def select_help_resources(categories: Iterable[str], is_crisis: bool) -> List[str]:
    """
    Resources relevant to the given bill categories.

    The 2-1-1 hotline is always first. In a crisis, food assistance is added
    so cash can be freed for bills; otherwise credit counseling closes the list.
    """
    categories = set(categories)
    resources = [HOTLINE_211]

    if categories & UTILITY_CATEGORIES:
        resources.append(LIHEAP)
    if categories & HOUSING_CATEGORIES:
        resources.append(RENTAL_ASSISTANCE)

    resources.append(FOOD_BANKS if is_crisis else CREDIT_COUNSELING)
    return [r.contact for r in resources]
