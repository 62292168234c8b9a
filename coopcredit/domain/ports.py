"""Contracts the decision core consumes: persistence and risk scoring"""

from decimal import Decimal
from typing import List, Optional, Protocol

from coopcredit.domain.models import Affiliate, ApplicationStatus, CreditApplication, RiskEvaluation


class AffiliateRepository(Protocol):
    """Affiliate persistence. Duplicate documents raise ConflictError."""

    def save(self, affiliate: Affiliate) -> Affiliate: ...

    def find_by_id(self, affiliate_id: int) -> Optional[Affiliate]: ...

    def find_by_document(self, document: str) -> Optional[Affiliate]: ...

    def exists_by_document(self, document: str) -> bool: ...

    def delete_by_id(self, affiliate_id: int) -> None: ...


class CreditApplicationRepository(Protocol):
    """
    Application persistence.

    save() with expected_status performs a conditional write: it only succeeds
    while the stored status still equals expected_status, otherwise it raises
    ConflictError.
    """

    def save(
        self,
        application: CreditApplication,
        expected_status: Optional[ApplicationStatus] = None,
    ) -> CreditApplication: ...

    def find_by_id(self, application_id: int) -> Optional[CreditApplication]: ...

    def find_by_affiliate(self, affiliate_id: int) -> List[CreditApplication]: ...

    def find_by_status(self, status: ApplicationStatus) -> List[CreditApplication]: ...

    def find_all(self) -> List[CreditApplication]: ...


class RiskScoringService(Protocol):
    """
    Scores a document/amount/term triple.

    The score is deterministic per document. Invalid input raises
    ValidationError before any network activity.
    """

    async def score(self, document: str, requested_amount: Decimal, term_months: int) -> RiskEvaluation: ...
