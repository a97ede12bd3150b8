"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidPriorityFactorsError(DomainException):
    """Priority weights are structurally invalid (do not sum to 1.0)"""

    pass


class InvalidStrategyError(DomainException):
    """Unknown triage strategy requested"""

    pass


class InvalidBillDataError(DomainException):
    """Bill or consequence data is malformed beyond graceful degradation"""

    pass


class BillNotFoundError(DomainException):
    """Bill does not exist for the given user"""

    pass
