"""Risk bureau HTTP client for scoring credit applicants"""

import logging
import httpx
from decimal import Decimal
from coopcredit.domain.models import RiskEvaluation
from coopcredit.domain.exceptions import RiskBureauError
from coopcredit.domain.scoring import validate_scoring_request
from coopcredit.infrastructure.observability.metrics import bureau_latency_histogram
from coopcredit.config import settings

logger = logging.getLogger(__name__)

RISK_EVALUATION_ENDPOINT = "/risk-evaluation"


class RiskBureauClient:
    """Client for the external risk-central bureau"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.risk_bureau_base_url
        self.timeout = timeout or settings.risk_bureau_timeout_seconds
        self.transport = transport

    async def score(self, document: str, requested_amount: Decimal, term_months: int) -> RiskEvaluation:
        """
        Request a score for the applicant's document.

        Raises:
            ValidationError: On malformed input (no request is sent)
            RiskBureauError: On timeout, HTTP errors, or invalid response
        """
        validate_scoring_request(document, requested_amount, term_months)

        payload = {
            "documento": document,
            "montoSolicitado": str(requested_amount),
            "plazoMeses": term_months,
        }
        url = f"{self.base_url}{RISK_EVALUATION_ENDPOINT}"
        logger.debug("Sending risk evaluation request", extra={"url": url, "term_months": term_months})

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                with bureau_latency_histogram.time():
                    response = await client.post(url, json=payload)
                response.raise_for_status()
                data = response.json()

                evaluation = RiskEvaluation.from_bureau(
                    score=data["score"],
                    detail=data.get("detail", ""),
                    level=data.get("riskLevel"),
                    source="bureau",
                )

            except httpx.TimeoutException as e:
                raise RiskBureauError(f"Risk bureau timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise RiskBureauError(f"Risk bureau error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise RiskBureauError(f"Risk bureau unreachable: {e}") from e
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                raise RiskBureauError(f"Risk bureau request failed: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                raise RiskBureauError(f"Invalid risk evaluation data from bureau: {e}") from e

        logger.info(
            "Risk evaluation received",
            extra={"score": evaluation.score, "risk_level": evaluation.risk_level.value},
        )
        return evaluation
