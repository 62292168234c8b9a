"""POST /v1/evaluations/{application_id} - credit decision endpoint"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from coopcredit.api.dependencies import domain_errors, get_request_id, get_risk_scoring
from coopcredit.api.v1.schemas import EvaluationResponse
from coopcredit.domain.ports import RiskScoringService
from coopcredit.infrastructure.database.repositories import CreditApplicationRepository
from coopcredit.infrastructure.database.session import get_db
from coopcredit.services.evaluation import EvaluationOrchestrator

router = APIRouter()


@router.post("/evaluations/{application_id}", response_model=EvaluationResponse)
async def evaluate_application(
    application_id: int,
    request: Request,
    db: Session = Depends(get_db),
    risk_scoring: RiskScoringService = Depends(get_risk_scoring),
):
    """
    Approve or reject a PENDING application.

    Flow:
    1. Score the affiliate (bureau, or deterministic fallback on outage)
    2. Apply internal policy (risk, eligibility, payment ratio, amount)
    3. Persist the decision atomically and return it

    A second evaluation of the same application answers 409.
    """
    request_id = get_request_id(request)
    orchestrator = EvaluationOrchestrator(CreditApplicationRepository(db), risk_scoring)

    with domain_errors(db, request_id):
        result = await orchestrator.evaluate(application_id, request_id=request_id)

    return EvaluationResponse(**result.to_summary())
