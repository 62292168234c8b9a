"""Pytest fixtures for testing"""

import pytest
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from coopcredit.api.main import create_app
from coopcredit.api.dependencies import get_risk_scoring
from coopcredit.infrastructure.database.models import Base
from coopcredit.infrastructure.database.session import get_db
from coopcredit.infrastructure.database.repositories import AffiliateRepository, CreditApplicationRepository
from coopcredit.domain.models import Affiliate
from factories import StubRiskScorer, make_affiliate


# Test database: one shared in-memory connection
TEST_DATABASE_URL = "sqlite://"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False}, poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def affiliate_repo(db: Session) -> AffiliateRepository:
    return AffiliateRepository(db)


@pytest.fixture
def application_repo(db: Session) -> CreditApplicationRepository:
    return CreditApplicationRepository(db)


@pytest.fixture
def risk_scorer() -> StubRiskScorer:
    """LOW risk (850) unless a test sets score_value"""
    return StubRiskScorer()


@pytest.fixture
def affiliate(affiliate_repo: AffiliateRepository) -> Affiliate:
    """Persisted ACTIVE affiliate with a year of seniority and a 3,000,000 salary"""
    return affiliate_repo.save(make_affiliate())


@pytest.fixture
def client(db: Session, risk_scorer: StubRiskScorer) -> TestClient:
    """Create FastAPI test client with test database and stub risk bureau"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_risk_scoring] = lambda: risk_scorer
    return TestClient(app)
