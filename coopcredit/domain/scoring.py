"""Deterministic offline risk scoring - used when the bureau is unreachable"""

import hashlib
from decimal import Decimal
from typing import Tuple

from coopcredit.domain.exceptions import ValidationError
from coopcredit.domain.models import RiskLevel, risk_level_for

FALLBACK_DETAILS = {
    RiskLevel.HIGH: "High credit risk detected in central database simulation.",
    RiskLevel.MEDIUM: "Medium credit risk history.",
    RiskLevel.LOW: "Excellent credit history (simulated).",
}


def validate_scoring_request(document: str, requested_amount: Decimal, term_months: int) -> None:
    """Fail fast on malformed scoring input, before any network activity"""
    if not isinstance(document, str) or not document.strip():
        raise ValidationError("Document cannot be null or blank")
    if not isinstance(requested_amount, Decimal) or not requested_amount.is_finite() or requested_amount <= 0:
        raise ValidationError("Requested amount must be positive")
    if not isinstance(term_months, int) or isinstance(term_months, bool) or term_months <= 0:
        raise ValidationError("Term must be positive")


def document_digest(document: str) -> int:
    """
    Stable non-negative integer for a document.

    SHA-256 rather than hash(): str hashing is salted per process.
    """
    digest = hashlib.sha256(document.strip().encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big")


def fallback_score(document: str) -> Tuple[int, RiskLevel, str]:
    """
    Map a document onto a score, its risk level and a fixed detail text.

    Bucket split on digest % 10:
    - 0-1 (20%): HIGH,   300 + digest % 201  -> 300-500
    - 2-4 (30%): MEDIUM, 501 + digest % 200  -> 501-700
    - 5-9 (50%): LOW,    701 + digest % 250  -> 701-950

    Same document -> same result, regardless of amount or term.
    """
    digest = document_digest(document)
    bucket = digest % 10

    if bucket < 2:
        score = 300 + digest % 201
    elif bucket < 5:
        score = 501 + digest % 200
    else:
        score = 701 + digest % 250

    level = risk_level_for(score)
    return score, level, FALLBACK_DETAILS[level]
