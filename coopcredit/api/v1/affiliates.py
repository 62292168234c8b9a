"""/v1/affiliates - affiliate registration and maintenance"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from coopcredit.api.dependencies import domain_errors, get_request_id
from coopcredit.api.v1.schemas import AffiliateRequest, AffiliateResponse, AffiliateUpdateRequest
from coopcredit.infrastructure.database.repositories import AffiliateRepository
from coopcredit.infrastructure.database.session import get_db
from coopcredit.services.registration import delete_affiliate, register_affiliate, update_affiliate

router = APIRouter()


@router.post("/affiliates", response_model=AffiliateResponse, status_code=201)
def create_affiliate(body: AffiliateRequest, request: Request, db: Session = Depends(get_db)):
    """Register a cooperative member (status defaults to ACTIVE)"""
    with domain_errors(db, get_request_id(request)):
        affiliate = register_affiliate(
            AffiliateRepository(db),
            document=body.document,
            name=body.name,
            salary=body.salary,
            affiliation_date=body.affiliation_date,
            status=body.status,
        )
    return AffiliateResponse.from_domain(affiliate)


@router.get("/affiliates/{affiliate_id}", response_model=AffiliateResponse)
def get_affiliate(affiliate_id: int, db: Session = Depends(get_db)):
    affiliate = AffiliateRepository(db).find_by_id(affiliate_id)
    if not affiliate:
        raise HTTPException(status_code=404, detail="Affiliate not found")
    return AffiliateResponse.from_domain(affiliate)


@router.get("/affiliates/document/{document}", response_model=AffiliateResponse)
def get_affiliate_by_document(document: str, db: Session = Depends(get_db)):
    affiliate = AffiliateRepository(db).find_by_document(document)
    if not affiliate:
        raise HTTPException(status_code=404, detail="Affiliate not found")
    return AffiliateResponse.from_domain(affiliate)


@router.put("/affiliates/{affiliate_id}", response_model=AffiliateResponse)
def put_affiliate(
    affiliate_id: int,
    body: AffiliateUpdateRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """Replace the supplied attributes; the affiliate is re-validated as a whole"""
    with domain_errors(db, get_request_id(request)):
        affiliate = update_affiliate(AffiliateRepository(db), affiliate_id, **body.model_dump(exclude_none=True))
    return AffiliateResponse.from_domain(affiliate)


@router.delete("/affiliates/{affiliate_id}", status_code=204)
def remove_affiliate(affiliate_id: int, request: Request, db: Session = Depends(get_db)):
    with domain_errors(db, get_request_id(request)):
        delete_affiliate(AffiliateRepository(db), affiliate_id)
    return Response(status_code=204)
