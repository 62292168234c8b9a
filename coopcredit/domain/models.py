"""Domain models - immutable dataclasses representing the credit aggregates

Instances validate themselves on construction: an invalid combination of
attributes raises ValidationError instead of producing a half-built object.
Changes are made with dataclasses.replace(), which validates again.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from coopcredit.domain import amortization
from coopcredit.domain.exceptions import InvalidStateError, ValidationError
from coopcredit.utils.date_utils import months_between, utc_now, utc_today

MIN_SCORE = 300
MAX_SCORE = 950
HIGH_RISK_MAX_SCORE = 500
MEDIUM_RISK_MAX_SCORE = 700

MINIMUM_SENIORITY_MONTHS = 6
MIN_TERM_MONTHS = 1
MAX_TERM_MONTHS = 360
MAX_INTEREST_RATE = Decimal(100)
MAX_PAYMENT_TO_INCOME_RATIO = Decimal("0.40")
MAX_AMOUNT_SALARY_MULTIPLIER = 10
MONEY_PLACES = 2
RATE_PLACES = 4
MINIMUM_INSTALLMENT = Decimal("0.01")


class AffiliateStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"


class ApplicationStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class RiskLevel(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @classmethod
    def from_label(cls, label: str) -> "RiskLevel":
        """Map a bureau label (English or Spanish) onto a risk level"""
        normalized = (label or "").strip().upper()
        if normalized not in _RISK_LABELS:
            raise ValidationError(f"Unknown risk level: {label!r}")
        return _RISK_LABELS[normalized]


_RISK_LABELS = {
    "LOW": RiskLevel.LOW,
    "BAJO": RiskLevel.LOW,
    "MEDIUM": RiskLevel.MEDIUM,
    "MEDIO": RiskLevel.MEDIUM,
    "HIGH": RiskLevel.HIGH,
    "ALTO": RiskLevel.HIGH,
}


def risk_level_for(score: int) -> RiskLevel:
    """
    Map a bureau score to its risk level.

    Bands:
    - 300 - 500: HIGH
    - 501 - 700: MEDIUM
    - 701 - 950: LOW

    Raises:
        ValidationError: score is not an integer in [300, 950]
    """
    if not _is_int(score) or score < MIN_SCORE or score > MAX_SCORE:
        raise ValidationError(f"Score must be between {MIN_SCORE} and {MAX_SCORE}, got {score!r}")

    if score <= HIGH_RISK_MAX_SCORE:
        return RiskLevel.HIGH
    elif score <= MEDIUM_RISK_MAX_SCORE:
        return RiskLevel.MEDIUM
    else:
        return RiskLevel.LOW


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_blank(value) -> bool:
    return not isinstance(value, str) or not value.strip()


def _require_decimal(value, name: str) -> None:
    # Binary floats are refused
    if not isinstance(value, Decimal) or not value.is_finite():
        raise ValidationError(f"{name} must be a finite Decimal, got {value!r}")


def _require_scale(value: Decimal, places: int, name: str) -> None:
    # Matches the NUMERIC scale of the stored column
    if -value.normalize().as_tuple().exponent > places:
        raise ValidationError(f"{name} must have at most {places} decimal places, got {value}")


def _require_aware(value, name: str) -> None:
    if not isinstance(value, datetime) or value.tzinfo is None:
        raise ValidationError(f"{name} must be a timezone-aware datetime")


@dataclass(frozen=True)
class Affiliate:
    """Cooperative member who may request credit"""

    document: str
    name: str
    salary: Decimal
    affiliation_date: date = field(default_factory=utc_today)
    status: AffiliateStatus = AffiliateStatus.ACTIVE
    id: Optional[int] = None

    def __post_init__(self) -> None:
        if _is_blank(self.document):
            raise ValidationError("Document cannot be null or empty")
        if _is_blank(self.name):
            raise ValidationError("Name cannot be null or empty")
        _require_decimal(self.salary, "Salary")
        _require_scale(self.salary, MONEY_PLACES, "Salary")
        if self.salary <= 0:
            raise ValidationError("Salary must be greater than zero")
        if not isinstance(self.affiliation_date, date) or isinstance(self.affiliation_date, datetime):
            raise ValidationError("Affiliation date must be a date")
        if self.affiliation_date > utc_today():
            raise ValidationError("Affiliation date cannot be in the future")
        if not isinstance(self.status, AffiliateStatus):
            raise ValidationError(f"Unknown affiliate status: {self.status!r}")

    def is_active(self) -> bool:
        return self.status is AffiliateStatus.ACTIVE

    def months_since_affiliation(self, as_of: date | None = None) -> int:
        return months_between(self.affiliation_date, as_of or utc_today())

    def has_minimum_seniority(self, as_of: date | None = None) -> bool:
        return self.months_since_affiliation(as_of) >= MINIMUM_SENIORITY_MONTHS

    def can_apply_for_credit(self, as_of: date | None = None) -> bool:
        return self.is_active() and self.has_minimum_seniority(as_of)

    def max_credit_amount(self, multiplier: int) -> Decimal:
        return self.salary * multiplier


@dataclass(frozen=True)
class RiskEvaluation:
    """
    Outcome of one bureau (or fallback) risk assessment.

    When risk_level is omitted it is derived from the score; an explicit level
    must agree with the score band.
    """

    score: int
    approved: bool
    detail: str = ""
    risk_level: Optional[RiskLevel] = None
    rejection_reason: Optional[str] = None
    evaluated_at: datetime = field(default_factory=utc_now)
    source: str = "bureau"
    id: Optional[int] = None

    def __post_init__(self) -> None:
        expected = risk_level_for(self.score)
        if self.risk_level is None:
            object.__setattr__(self, "risk_level", expected)
        elif self.risk_level is not expected:
            raise ValidationError(
                f"Score {self.score} does not match risk level {self.risk_level.value} "
                f"(expected {expected.value})"
            )
        _require_aware(self.evaluated_at, "Evaluation date")
        if self.evaluated_at > utc_now():
            raise ValidationError("Evaluation date cannot be in the future")
        if not isinstance(self.approved, bool):
            raise ValidationError("Approved flag must be a boolean")
        if not self.approved and _is_blank(self.rejection_reason):
            raise ValidationError("Rejection reason must be provided when not approved")
        if self.approved and not _is_blank(self.rejection_reason):
            raise ValidationError("Approved evaluations cannot carry a rejection reason")

    @classmethod
    def from_bureau(
        cls,
        score: int,
        detail: str,
        level: str | RiskLevel | None = None,
        source: str = "bureau",
    ) -> "RiskEvaluation":
        """Build from a bureau response; HIGH risk is marked not approved"""
        if level is None:
            risk_level = risk_level_for(score)
        elif isinstance(level, RiskLevel):
            risk_level = level
        else:
            risk_level = RiskLevel.from_label(level)
        high_risk = risk_level is RiskLevel.HIGH
        return cls(
            score=score,
            risk_level=risk_level,
            detail=detail or "",
            approved=not high_risk,
            rejection_reason="High risk level from credit bureau" if high_risk else None,
            source=source,
        )

    def is_high_risk(self) -> bool:
        return self.risk_level is RiskLevel.HIGH

    def is_acceptable_risk(self) -> bool:
        return self.risk_level in (RiskLevel.LOW, RiskLevel.MEDIUM)


@dataclass(frozen=True)
class CreditApplication:
    """Credit request of an affiliate; the aggregate root of a decision"""

    affiliate: Affiliate
    requested_amount: Decimal
    term_months: int
    interest_rate: Decimal
    application_date: datetime = field(default_factory=utc_now)
    status: ApplicationStatus = ApplicationStatus.PENDING
    risk_evaluation: Optional[RiskEvaluation] = None
    decision_reason: Optional[str] = None
    id: Optional[int] = None

    def __post_init__(self) -> None:
        if not isinstance(self.affiliate, Affiliate):
            raise ValidationError("Affiliate cannot be null")
        # New applications only; persisted ones keep their owner even if it was deactivated later
        if self.id is None and not self.affiliate.is_active():
            raise ValidationError("Affiliate must be ACTIVE to apply for credit")
        _require_decimal(self.requested_amount, "Requested amount")
        if self.requested_amount <= 0:
            raise ValidationError("Requested amount must be greater than zero")
        _require_scale(self.requested_amount, MONEY_PLACES, "Requested amount")
        if not _is_int(self.term_months) or not MIN_TERM_MONTHS <= self.term_months <= MAX_TERM_MONTHS:
            raise ValidationError(f"Term must be between {MIN_TERM_MONTHS} and {MAX_TERM_MONTHS} months")
        if self.requested_amount < MINIMUM_INSTALLMENT * self.term_months:
            raise ValidationError(
                f"Requested amount must cover at least {MINIMUM_INSTALLMENT} per month over {self.term_months} months"
            )
        _require_decimal(self.interest_rate, "Interest rate")
        _require_scale(self.interest_rate, RATE_PLACES, "Interest rate")
        if not 0 <= self.interest_rate <= MAX_INTEREST_RATE:
            raise ValidationError("Interest rate must be between 0 and 100")
        _require_aware(self.application_date, "Application date")
        if self.application_date > utc_now():
            raise ValidationError("Application date cannot be in the future")
        if not isinstance(self.status, ApplicationStatus):
            raise ValidationError(f"Unknown application status: {self.status!r}")
        if self.status is not ApplicationStatus.PENDING and _is_blank(self.decision_reason):
            raise ValidationError("Decision reason required for non-pending applications")
        if self.risk_evaluation is not None and not isinstance(self.risk_evaluation, RiskEvaluation):
            raise ValidationError("Risk evaluation has an unexpected type")

    # Affordability

    def monthly_payment(self) -> Decimal:
        return amortization.monthly_payment(self.requested_amount, self.term_months, self.interest_rate)

    def payment_to_income_ratio(self) -> Decimal:
        return amortization.payment_to_income_ratio(self.monthly_payment(), self.affiliate.salary)

    def has_acceptable_payment_to_income_ratio(self) -> bool:
        return self.payment_to_income_ratio() <= MAX_PAYMENT_TO_INCOME_RATIO

    def max_amount(self) -> Decimal:
        return self.affiliate.max_credit_amount(MAX_AMOUNT_SALARY_MULTIPLIER)

    def has_acceptable_amount(self) -> bool:
        return self.requested_amount <= self.max_amount()

    def total_payable(self) -> Decimal:
        return self.monthly_payment() * self.term_months

    def total_interest(self) -> Decimal:
        return self.total_payable() - self.requested_amount

    # State

    def is_pending(self) -> bool:
        return self.status is ApplicationStatus.PENDING

    def is_approved(self) -> bool:
        return self.status is ApplicationStatus.APPROVED

    def is_rejected(self) -> bool:
        return self.status is ApplicationStatus.REJECTED

    def is_cancelled(self) -> bool:
        return self.status is ApplicationStatus.CANCELLED

    def can_be_evaluated(self, as_of: date | None = None) -> bool:
        return self.is_pending() and self.affiliate.can_apply_for_credit(as_of)

    def meets_approval_criteria(self, as_of: date | None = None) -> bool:
        if not self.affiliate.can_apply_for_credit(as_of):
            return False
        if not self.has_acceptable_payment_to_income_ratio():
            return False
        if not self.has_acceptable_amount():
            return False
        if self.risk_evaluation is not None and not self.risk_evaluation.approved:
            return False
        return True

    # Transitions

    def decide(self, approved: bool, reason: str, risk_evaluation: RiskEvaluation) -> "CreditApplication":
        """Return the APPROVED/REJECTED copy of a pending application"""
        if not self.is_pending():
            raise InvalidStateError(f"Application {self.id} is already {self.status.value}")
        return replace(
            self,
            status=ApplicationStatus.APPROVED if approved else ApplicationStatus.REJECTED,
            risk_evaluation=risk_evaluation,
            decision_reason=reason,
        )

    def cancel(self, reason: str) -> "CreditApplication":
        """Administrative cancellation of a pending application"""
        if not self.is_pending():
            raise InvalidStateError(f"Only PENDING applications can be cancelled (status: {self.status.value})")
        return replace(self, status=ApplicationStatus.CANCELLED, decision_reason=reason)
