"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException, ValueError):
    """Input is malformed or out of range"""

    pass


class NotFoundError(DomainException):
    """Referenced affiliate or application does not exist"""

    pass


class InvalidStateError(DomainException):
    """Aggregate is not in the state the operation requires"""

    pass


class ConflictError(DomainException):
    """Duplicate document or a lost race on a status transition"""

    pass


class RiskBureauError(DomainException):
    """Risk bureau returned an error or is unavailable"""

    pass
