"""Credit evaluation use case - turns a pending application into a decision"""

import logging
import time
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional

from coopcredit.domain.amortization import as_percentage
from coopcredit.domain.exceptions import InvalidStateError, NotFoundError, ValidationError
from coopcredit.domain.models import (
    MAX_AMOUNT_SALARY_MULTIPLIER,
    ApplicationStatus,
    CreditApplication,
    RiskEvaluation,
)
from coopcredit.domain.ports import CreditApplicationRepository, RiskScoringService
from coopcredit.infrastructure.observability.logging import log_evaluation
from coopcredit.infrastructure.observability.metrics import record_evaluation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Decision:
    approved: bool
    reason: str


@dataclass(frozen=True)
class EvaluationResult:
    """Decided application plus the outcome that produced it"""

    application: CreditApplication
    approved: bool
    reason: str

    def to_summary(self) -> Dict[str, Any]:
        """Decision output for callers such as the HTTP layer"""
        application = self.application
        evaluation: Optional[RiskEvaluation] = application.risk_evaluation
        return {
            "application_id": application.id,
            "affiliate_document": application.affiliate.document,
            "affiliate_name": application.affiliate.name,
            "requested_amount": application.requested_amount,
            "term_months": application.term_months,
            "monthly_payment": application.monthly_payment(),
            "status": application.status.value,
            "approved": self.approved,
            "decision_reason": self.reason,
            "risk_score": evaluation.score if evaluation else None,
            "risk_level": evaluation.risk_level.value if evaluation else None,
            "risk_detail": evaluation.detail if evaluation else None,
            "payment_to_income_ratio": application.payment_to_income_ratio(),
            "evaluated_at": evaluation.evaluated_at if evaluation else None,
        }


def apply_policy(application: CreditApplication, evaluation: RiskEvaluation, as_of: date | None = None) -> Decision:
    """
    Internal credit policy, first failing rule wins.

    Rules:
    1. HIGH risk -> reject, whatever the other factors
    2. Affiliate no longer eligible -> reject
    3. Payment-to-income ratio above 40% -> reject
    4. Amount above 10x monthly salary -> reject
    5. Otherwise approve

    MEDIUM risk is not rejected by itself; it goes through rules 2-4 like LOW.
    """
    if evaluation.is_high_risk():
        return Decision(False, f"High risk level detected (score: {evaluation.score})")

    if not application.affiliate.can_apply_for_credit(as_of):
        return Decision(False, "Affiliate does not meet eligibility requirements")

    ratio_percent = as_percentage(application.payment_to_income_ratio())

    if not application.has_acceptable_payment_to_income_ratio():
        return Decision(False, f"Payment-to-income ratio ({ratio_percent}%) exceeds maximum (40%)")

    if not application.has_acceptable_amount():
        return Decision(
            False,
            f"Requested amount exceeds maximum allowed "
            f"({MAX_AMOUNT_SALARY_MULTIPLIER}x monthly salary: {application.max_amount()})",
        )

    return Decision(
        True,
        f"Approved - Risk level: {evaluation.risk_level.value}, "
        f"Score: {evaluation.score}, Payment ratio: {ratio_percent}%",
    )


class EvaluationOrchestrator:
    """
    Evaluate one pending application.

    Flow:
    1. Load the application (NotFoundError if absent)
    2. Check it can be evaluated (InvalidStateError otherwise)
    3. Score the affiliate through the risk scoring port
    4. Apply the internal policy
    5. Persist PENDING -> APPROVED | REJECTED as one conditional write
    6. Return the decided application with its outcome

    The transaction itself belongs to the caller.
    """

    def __init__(self, applications: CreditApplicationRepository, risk_scoring: RiskScoringService):
        if applications is None:
            raise ValidationError("Application repository cannot be None")
        if risk_scoring is None:
            raise ValidationError("Risk scoring service cannot be None")
        self.applications = applications
        self.risk_scoring = risk_scoring

    async def evaluate(self, application_id: int, request_id: str | None = None) -> EvaluationResult:
        if application_id is None:
            raise ValidationError("Application ID cannot be None")

        start_time = time.time()

        application = self.applications.find_by_id(application_id)
        if application is None:
            raise NotFoundError(f"Credit application with ID {application_id} not found")

        if not application.can_be_evaluated():
            raise InvalidStateError(
                f"Application cannot be evaluated. Status: {application.status.value}, "
                f"Affiliate can apply: {application.affiliate.can_apply_for_credit()}"
            )

        logger.info("Requesting risk score", extra={"application_id": application_id, "request_id": request_id})
        evaluation = await self.risk_scoring.score(
            application.affiliate.document,
            application.requested_amount,
            application.term_months,
        )

        decision = apply_policy(application, evaluation)
        decided = application.decide(decision.approved, decision.reason, evaluation)
        saved = self.applications.save(decided, expected_status=ApplicationStatus.PENDING)

        duration_ms = (time.time() - start_time) * 1000
        record_evaluation(decision.approved, evaluation.risk_level.value, evaluation.source)
        log_evaluation(
            application_id=saved.id,
            approved=decision.approved,
            score=evaluation.score,
            risk_level=evaluation.risk_level.value,
            source=evaluation.source,
            duration_ms=duration_ms,
            request_id=request_id,
        )

        return EvaluationResult(application=saved, approved=decision.approved, reason=decision.reason)
