"""/v1/applications - credit application submission and lookup"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from coopcredit.api.dependencies import domain_errors, get_request_id
from coopcredit.api.v1.schemas import (
    ApplicationListResponse,
    ApplicationRequest,
    ApplicationResponse,
    CancelRequest,
)
from coopcredit.domain.models import ApplicationStatus
from coopcredit.infrastructure.database.repositories import AffiliateRepository, CreditApplicationRepository
from coopcredit.infrastructure.database.session import get_db
from coopcredit.services.registration import cancel_application, submit_application

router = APIRouter()


def _list(applications) -> ApplicationListResponse:
    return ApplicationListResponse(applications=[ApplicationResponse.from_domain(a) for a in applications])


@router.post("/applications", response_model=ApplicationResponse, status_code=201)
def create_application(body: ApplicationRequest, request: Request, db: Session = Depends(get_db)):
    """
    Submit a credit application.

    Ineligible affiliates (not ACTIVE, or under six months of seniority) are
    refused here with 409, before any evaluation.
    """
    with domain_errors(db, get_request_id(request)):
        application = submit_application(
            CreditApplicationRepository(db),
            AffiliateRepository(db),
            affiliate_id=body.affiliate_id,
            requested_amount=body.requested_amount,
            term_months=body.term_months,
            interest_rate=body.interest_rate,
        )
    return ApplicationResponse.from_domain(application)


@router.get("/applications", response_model=ApplicationListResponse)
def list_applications(db: Session = Depends(get_db)):
    return _list(CreditApplicationRepository(db).find_all())


@router.get("/applications/{application_id}", response_model=ApplicationResponse)
def get_application(application_id: int, db: Session = Depends(get_db)):
    application = CreditApplicationRepository(db).find_by_id(application_id)
    if not application:
        raise HTTPException(status_code=404, detail="Credit application not found")
    return ApplicationResponse.from_domain(application)


@router.get("/applications/affiliate/{affiliate_id}", response_model=ApplicationListResponse)
def list_applications_by_affiliate(affiliate_id: int, db: Session = Depends(get_db)):
    return _list(CreditApplicationRepository(db).find_by_affiliate(affiliate_id))


@router.get("/applications/status/{status}", response_model=ApplicationListResponse)
def list_applications_by_status(status: ApplicationStatus, db: Session = Depends(get_db)):
    return _list(CreditApplicationRepository(db).find_by_status(status))


@router.post("/applications/{application_id}/cancel", response_model=ApplicationResponse)
def cancel(application_id: int, body: CancelRequest, request: Request, db: Session = Depends(get_db)):
    """Administrative cancellation of a PENDING application"""
    with domain_errors(db, get_request_id(request)):
        application = cancel_application(CreditApplicationRepository(db), application_id, body.reason)
    return ApplicationResponse.from_domain(application)
