"""Data access layer for affiliates and credit applications

Repositories flush but never commit: the caller owns the transaction.
"""

from dataclasses import replace
from typing import List, Optional
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from coopcredit.infrastructure.database.models import AffiliateRecord, CreditApplicationRecord, RiskEvaluationRecord
from coopcredit.domain.exceptions import ConflictError, NotFoundError
from coopcredit.domain.models import (
    Affiliate,
    AffiliateStatus,
    ApplicationStatus,
    CreditApplication,
    RiskEvaluation,
    RiskLevel,
)
from coopcredit.utils.date_utils import as_utc, utc_now


def to_affiliate(record: AffiliateRecord) -> Affiliate:
    return Affiliate(
        id=record.id,
        document=record.document,
        name=record.full_name,
        salary=record.salary,
        affiliation_date=record.affiliation_date,
        status=AffiliateStatus(record.status),
    )


def to_risk_evaluation(record: RiskEvaluationRecord) -> RiskEvaluation:
    return RiskEvaluation(
        id=record.id,
        score=record.score,
        risk_level=RiskLevel(record.risk_level),
        detail=record.detail or "",
        approved=record.approved,
        rejection_reason=record.rejection_reason,
        evaluated_at=as_utc(record.evaluated_at),
        source=record.source,
    )


def to_application(record: CreditApplicationRecord) -> CreditApplication:
    return CreditApplication(
        id=record.id,
        affiliate=to_affiliate(record.affiliate),
        requested_amount=record.requested_amount,
        term_months=record.term_months,
        interest_rate=record.interest_rate,
        application_date=as_utc(record.application_date),
        status=ApplicationStatus(record.status),
        risk_evaluation=to_risk_evaluation(record.risk_evaluation) if record.risk_evaluation else None,
        decision_reason=record.decision_reason,
    )


class AffiliateRepository:
    """Repository for affiliates; deleted affiliates are kept as soft-deleted rows"""

    def __init__(self, db: Session):
        self.db = db

    def save(self, affiliate: Affiliate) -> Affiliate:
        """Insert a new affiliate or replace the stored attributes of an existing one"""
        if affiliate.id is None:
            record = AffiliateRecord()
            self.db.add(record)
        else:
            record = self._get_live(affiliate.id)
            if record is None:
                raise NotFoundError(f"Affiliate with ID {affiliate.id} not found")

        record.document = affiliate.document
        record.full_name = affiliate.name
        record.salary = affiliate.salary
        record.affiliation_date = affiliate.affiliation_date
        record.status = affiliate.status.value

        try:
            self.db.flush()
        except IntegrityError as e:
            raise ConflictError(f"Affiliate with document {affiliate.document} already exists") from e

        return replace(affiliate, id=record.id)

    def find_by_id(self, affiliate_id: int) -> Optional[Affiliate]:
        record = self._get_live(affiliate_id)
        return to_affiliate(record) if record else None

    def find_by_document(self, document: str) -> Optional[Affiliate]:
        record = (
            self.db.query(AffiliateRecord)
            .filter(AffiliateRecord.document == document, AffiliateRecord.deleted_at.is_(None))
            .first()
        )
        return to_affiliate(record) if record else None

    def exists_by_document(self, document: str) -> bool:
        """Soft-deleted affiliates still reserve their document"""
        return self.db.query(AffiliateRecord.id).filter(AffiliateRecord.document == document).first() is not None

    def delete_by_id(self, affiliate_id: int) -> None:
        """Administrative soft delete: the row becomes INACTIVE and hidden from lookups"""
        record = self._get_live(affiliate_id)
        if record is None:
            raise NotFoundError(f"Affiliate with ID {affiliate_id} not found")
        record.status = AffiliateStatus.INACTIVE.value
        record.deleted_at = utc_now()
        self.db.flush()

    def _get_live(self, affiliate_id: int) -> Optional[AffiliateRecord]:
        return (
            self.db.query(AffiliateRecord)
            .filter(AffiliateRecord.id == affiliate_id, AffiliateRecord.deleted_at.is_(None))
            .first()
        )


class CreditApplicationRepository:
    """Repository for credit applications and their risk evaluations"""

    def __init__(self, db: Session):
        self.db = db

    def save(
        self,
        application: CreditApplication,
        expected_status: Optional[ApplicationStatus] = None,
    ) -> CreditApplication:
        """
        Persist an application.

        With expected_status the status change is a conditional update
        (WHERE status = expected_status). If another writer moved the
        application first, nothing is written and ConflictError is raised.
        """
        if application.id is None:
            return self._insert(application)

        values = {
            "status": application.status.value,
            "decision_reason": application.decision_reason,
            "updated_at": utc_now(),
        }
        statement = update(CreditApplicationRecord).where(CreditApplicationRecord.id == application.id)
        if expected_status is not None:
            statement = statement.where(CreditApplicationRecord.status == expected_status.value)

        result = self.db.execute(statement.values(**values).execution_options(synchronize_session=False))
        if result.rowcount == 0:
            if expected_status is None or self.db.get(CreditApplicationRecord, application.id) is None:
                raise NotFoundError(f"Credit application with ID {application.id} not found")
            raise ConflictError(
                f"Credit application {application.id} is no longer {expected_status.value}; "
                "it was decided concurrently"
            )

        evaluation = application.risk_evaluation
        if evaluation is not None and evaluation.id is None:
            evaluation = self._insert_evaluation(application.id, evaluation)

        self.db.flush()
        self.db.expire_all()
        return replace(application, risk_evaluation=evaluation)

    def find_by_id(self, application_id: int) -> Optional[CreditApplication]:
        record = self.db.get(CreditApplicationRecord, application_id)
        return to_application(record) if record else None

    def find_by_affiliate(self, affiliate_id: int) -> List[CreditApplication]:
        records = (
            self.db.query(CreditApplicationRecord)
            .filter(CreditApplicationRecord.affiliate_id == affiliate_id)
            .order_by(CreditApplicationRecord.id)
            .all()
        )
        return [to_application(r) for r in records]

    def find_by_status(self, status: ApplicationStatus) -> List[CreditApplication]:
        records = (
            self.db.query(CreditApplicationRecord)
            .filter(CreditApplicationRecord.status == status.value)
            .order_by(CreditApplicationRecord.id)
            .all()
        )
        return [to_application(r) for r in records]

    def find_all(self) -> List[CreditApplication]:
        records = self.db.query(CreditApplicationRecord).order_by(CreditApplicationRecord.id).all()
        return [to_application(r) for r in records]

    def _insert(self, application: CreditApplication) -> CreditApplication:
        if application.affiliate.id is None:
            raise NotFoundError("Affiliate must be persisted before its applications")

        record = CreditApplicationRecord(
            affiliate_id=application.affiliate.id,
            requested_amount=application.requested_amount,
            term_months=application.term_months,
            interest_rate=application.interest_rate,
            application_date=application.application_date,
            status=application.status.value,
            decision_reason=application.decision_reason,
        )
        self.db.add(record)
        self.db.flush()

        evaluation = application.risk_evaluation
        if evaluation is not None and evaluation.id is None:
            evaluation = self._insert_evaluation(record.id, evaluation)
            self.db.flush()

        return replace(application, id=record.id, risk_evaluation=evaluation)

    def _insert_evaluation(self, application_id: int, evaluation: RiskEvaluation) -> RiskEvaluation:
        record = RiskEvaluationRecord(
            credit_application_id=application_id,
            score=evaluation.score,
            risk_level=evaluation.risk_level.value,
            detail=evaluation.detail,
            approved=evaluation.approved,
            rejection_reason=evaluation.rejection_reason,
            source=evaluation.source,
            evaluated_at=evaluation.evaluated_at,
        )
        self.db.add(record)
        self.db.flush()
        return replace(evaluation, id=record.id)
