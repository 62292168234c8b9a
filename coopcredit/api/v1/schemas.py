"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from coopcredit.domain.models import Affiliate, AffiliateStatus, ApplicationStatus, CreditApplication


class AffiliateRequest(BaseModel):
    """Request body for POST /v1/affiliates"""

    document: str = Field(..., min_length=1, max_length=20, description="Identification document")
    name: str = Field(..., min_length=1, max_length=100)
    salary: Decimal = Field(..., gt=0, decimal_places=2, description="Monthly salary")
    affiliation_date: Optional[date] = Field(None, description="Defaults to today (UTC)")
    status: Optional[AffiliateStatus] = None


class AffiliateUpdateRequest(BaseModel):
    """Request body for PUT /v1/affiliates/{id}; omitted fields are kept"""

    document: Optional[str] = Field(None, min_length=1, max_length=20)
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    salary: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    affiliation_date: Optional[date] = None
    status: Optional[AffiliateStatus] = None


class AffiliateResponse(BaseModel):
    id: int
    document: str
    name: str
    salary: Decimal
    affiliation_date: date
    status: AffiliateStatus
    months_since_affiliation: int
    can_apply_for_credit: bool

    @classmethod
    def from_domain(cls, affiliate: Affiliate) -> "AffiliateResponse":
        return cls(
            id=affiliate.id,
            document=affiliate.document,
            name=affiliate.name,
            salary=affiliate.salary,
            affiliation_date=affiliate.affiliation_date,
            status=affiliate.status,
            months_since_affiliation=affiliate.months_since_affiliation(),
            can_apply_for_credit=affiliate.can_apply_for_credit(),
        )


class ApplicationRequest(BaseModel):
    """Request body for POST /v1/applications"""

    affiliate_id: int = Field(..., gt=0)
    requested_amount: Decimal = Field(..., gt=0, decimal_places=2)
    term_months: int = Field(..., ge=1, le=360)
    interest_rate: Decimal = Field(..., ge=0, le=100, decimal_places=4, description="Nominal annual rate, percent")


class CancelRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


class ApplicationResponse(BaseModel):
    id: int
    affiliate_id: int
    affiliate_document: str
    affiliate_name: str
    requested_amount: Decimal
    term_months: int
    interest_rate: Decimal
    monthly_payment: Decimal
    application_date: datetime
    status: ApplicationStatus
    risk_score: Optional[int] = None
    risk_level: Optional[str] = None
    decision_reason: Optional[str] = None

    @classmethod
    def from_domain(cls, application: CreditApplication) -> "ApplicationResponse":
        evaluation = application.risk_evaluation
        return cls(
            id=application.id,
            affiliate_id=application.affiliate.id,
            affiliate_document=application.affiliate.document,
            affiliate_name=application.affiliate.name,
            requested_amount=application.requested_amount,
            term_months=application.term_months,
            interest_rate=application.interest_rate,
            monthly_payment=application.monthly_payment(),
            application_date=application.application_date,
            status=application.status,
            risk_score=evaluation.score if evaluation else None,
            risk_level=evaluation.risk_level.value if evaluation else None,
            decision_reason=application.decision_reason,
        )


class ApplicationListResponse(BaseModel):
    applications: List[ApplicationResponse]


class EvaluationResponse(BaseModel):
    """Response for POST /v1/evaluations/{application_id}"""

    application_id: int
    affiliate_document: str
    affiliate_name: str
    requested_amount: Decimal
    term_months: int
    monthly_payment: Decimal
    status: ApplicationStatus
    approved: bool
    decision_reason: str
    risk_score: Optional[int] = None
    risk_level: Optional[str] = None
    risk_detail: Optional[str] = None
    payment_to_income_ratio: Decimal
    evaluated_at: Optional[datetime] = None
