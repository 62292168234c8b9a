"""Affiliate registration and credit application submission use cases"""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from coopcredit.domain.amortization import as_percentage
from coopcredit.domain.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from coopcredit.domain.models import (
    MAX_AMOUNT_SALARY_MULTIPLIER,
    MINIMUM_SENIORITY_MONTHS,
    Affiliate,
    AffiliateStatus,
    CreditApplication,
)
from coopcredit.domain.ports import AffiliateRepository, CreditApplicationRepository

logger = logging.getLogger(__name__)

UPDATABLE_AFFILIATE_FIELDS = {"document", "name", "salary", "affiliation_date", "status"}


def register_affiliate(
    affiliates: AffiliateRepository,
    document: str,
    name: str,
    salary: Decimal,
    affiliation_date: Optional[date] = None,
    status: Optional[AffiliateStatus] = None,
) -> Affiliate:
    """
    Register a cooperative member.

    Defaults: status ACTIVE, affiliation date today (UTC).

    Raises:
        ValidationError: Invalid attributes
        ConflictError: Document already registered
    """
    if affiliates.exists_by_document(document):
        raise ConflictError(f"Affiliate with document {document} already exists")

    attributes: dict[str, Any] = {"document": document, "name": name, "salary": salary}
    if affiliation_date is not None:
        attributes["affiliation_date"] = affiliation_date
    if status is not None:
        attributes["status"] = status

    saved = affiliates.save(Affiliate(**attributes))
    logger.info("Affiliate registered", extra={"affiliate_id": saved.id})
    return saved


def update_affiliate(affiliates: AffiliateRepository, affiliate_id: int, **changes: Any) -> Affiliate:
    """Replace the given attributes of an affiliate; the result is validated as a whole"""
    unknown = set(changes) - UPDATABLE_AFFILIATE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown affiliate fields: {', '.join(sorted(unknown))}")

    current = affiliates.find_by_id(affiliate_id)
    if current is None:
        raise NotFoundError(f"Affiliate with ID {affiliate_id} not found")

    changes = {key: value for key, value in changes.items() if value is not None}
    new_document = changes.get("document")
    if new_document and new_document != current.document and affiliates.exists_by_document(new_document):
        raise ConflictError(f"Affiliate with document {new_document} already exists")

    return affiliates.save(replace(current, **changes))


def delete_affiliate(affiliates: AffiliateRepository, affiliate_id: int) -> None:
    """Administrative removal (soft delete)"""
    affiliates.delete_by_id(affiliate_id)
    logger.info("Affiliate deleted", extra={"affiliate_id": affiliate_id})


def submit_application(
    applications: CreditApplicationRepository,
    affiliates: AffiliateRepository,
    affiliate_id: int,
    requested_amount: Decimal,
    term_months: int,
    interest_rate: Decimal,
) -> CreditApplication:
    """
    Submit a PENDING credit application.

    Eligibility is checked here, at submission time: an affiliate that is not
    ACTIVE or has less than six months of seniority cannot submit at all.

    Raises:
        NotFoundError: Unknown affiliate
        InvalidStateError: Affiliate not eligible
        ValidationError: Invalid loan terms, or unaffordable at submission
    """
    if affiliate_id is None:
        raise ValidationError("Affiliate ID is required")

    affiliate = affiliates.find_by_id(affiliate_id)
    if affiliate is None:
        raise NotFoundError(f"Affiliate with ID {affiliate_id} not found")

    if not affiliate.is_active():
        raise InvalidStateError("Only ACTIVE affiliates can apply for credit")
    if not affiliate.has_minimum_seniority():
        raise InvalidStateError(f"Affiliate must have at least {MINIMUM_SENIORITY_MONTHS} months of seniority")

    application = CreditApplication(
        affiliate=affiliate,
        requested_amount=requested_amount,
        term_months=term_months,
        interest_rate=interest_rate,
    )

    if not application.has_acceptable_payment_to_income_ratio():
        raise ValidationError(
            f"Payment-to-income ratio ({as_percentage(application.payment_to_income_ratio())}%) "
            f"exceeds maximum allowed (40%)"
        )
    if not application.has_acceptable_amount():
        raise ValidationError(
            f"Requested amount exceeds maximum allowed "
            f"({MAX_AMOUNT_SALARY_MULTIPLIER}x salary: {application.max_amount()})"
        )

    saved = applications.save(application)
    logger.info("Credit application submitted", extra={"application_id": saved.id, "affiliate_id": affiliate_id})
    return saved


def cancel_application(
    applications: CreditApplicationRepository,
    application_id: int,
    reason: str,
) -> CreditApplication:
    """Administrative cancellation; only PENDING applications can be cancelled"""
    application = applications.find_by_id(application_id)
    if application is None:
        raise NotFoundError(f"Credit application with ID {application_id} not found")

    cancelled = application.cancel(reason)
    return applications.save(cancelled, expected_status=application.status)
