"""Risk scoring implementations: deterministic fallback and the resilient selector"""

import asyncio
import logging
from decimal import Decimal

from coopcredit.config import settings
from coopcredit.domain.exceptions import RiskBureauError
from coopcredit.domain.models import RiskEvaluation
from coopcredit.domain.ports import RiskScoringService
from coopcredit.domain.scoring import fallback_score, validate_scoring_request
from coopcredit.infrastructure.observability.metrics import bureau_fallback_counter

logger = logging.getLogger(__name__)


class FallbackRiskScorer:
    """Scores from the document alone; pure and reproducible"""

    async def score(self, document: str, requested_amount: Decimal, term_months: int) -> RiskEvaluation:
        validate_scoring_request(document, requested_amount, term_months)
        score, level, detail = fallback_score(document)
        return RiskEvaluation.from_bureau(score=score, detail=detail, level=level, source="fallback")


class ResilientRiskScorer:
    """
    Selects between the live bureau and the fallback.

    Strategy:
    - Input is validated once, before any network activity
    - The primary call is bounded by `timeout` seconds
    - RiskBureauError or timeout -> fallback result (no retries)
    """

    def __init__(
        self,
        primary: RiskScoringService,
        fallback: RiskScoringService | None = None,
        timeout: float | None = None,
    ):
        self.primary = primary
        self.fallback = fallback or FallbackRiskScorer()
        self.timeout = timeout or settings.risk_bureau_timeout_seconds

    async def score(self, document: str, requested_amount: Decimal, term_months: int) -> RiskEvaluation:
        validate_scoring_request(document, requested_amount, term_months)

        try:
            return await asyncio.wait_for(
                self.primary.score(document, requested_amount, term_months),
                timeout=self.timeout,
            )
        except (RiskBureauError, asyncio.TimeoutError) as e:
            bureau_fallback_counter.inc()
            logger.warning(
                "Risk bureau unavailable, using deterministic fallback",
                extra={"error": str(e) or type(e).__name__},
            )
            return await self.fallback.score(document, requested_amount, term_months)
