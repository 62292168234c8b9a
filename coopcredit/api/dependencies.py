"""Dependency injection for FastAPI endpoints"""

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException, Request
from sqlalchemy.orm import Session

from coopcredit.domain.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from coopcredit.domain.ports import RiskScoringService
from coopcredit.infrastructure.clients.risk_bureau import RiskBureauClient
from coopcredit.infrastructure.clients.risk_scoring import ResilientRiskScorer


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_risk_scoring() -> RiskScoringService:
    """Provide the bureau client wrapped with the deterministic fallback"""
    return ResilientRiskScorer(primary=RiskBureauClient())


@contextmanager
def domain_errors(db: Session, request_id: str) -> Iterator[None]:
    """
    Run a unit of work: commit on success, roll back and map errors otherwise.

    Mapping:
    - ValidationError -> 422
    - NotFoundError -> 404
    - InvalidStateError, ConflictError -> 409
    - anything else -> 500
    """
    try:
        yield
        db.commit()
    except ValidationError as e:
        db.rollback()
        logging.warning(f"Validation error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))
    except NotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))
    except (InvalidStateError, ConflictError) as e:
        db.rollback()
        logging.warning(f"Rejected by state: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))
    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")
