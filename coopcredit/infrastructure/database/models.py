"""SQLAlchemy ORM models for affiliates, applications and risk evaluations"""

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()

# BIGINT primary keys only autoincrement on SQLite when declared INTEGER
Identifier = BigInteger().with_variant(Integer, "sqlite")


class AffiliateRecord(Base):
    """Cooperative affiliate"""

    __tablename__ = "affiliates"

    id = Column(Identifier, primary_key=True, autoincrement=True)
    document = Column(Text, nullable=False, unique=True, index=True)
    full_name = Column(Text, nullable=False)
    salary = Column(Numeric(15, 2), nullable=False)
    affiliation_date = Column(Date, nullable=False)
    status = Column(Text, nullable=False, default="ACTIVE", index=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    applications = relationship("CreditApplicationRecord", back_populates="affiliate")


class CreditApplicationRecord(Base):
    """Credit application submitted by an affiliate"""

    __tablename__ = "credit_applications"

    id = Column(Identifier, primary_key=True, autoincrement=True)
    affiliate_id = Column(Identifier, ForeignKey("affiliates.id"), nullable=False, index=True)
    requested_amount = Column(Numeric(15, 2), nullable=False)
    term_months = Column(Integer, nullable=False)
    interest_rate = Column(Numeric(7, 4), nullable=False)
    application_date = Column(DateTime(timezone=True), nullable=False)
    status = Column(Text, nullable=False, default="PENDING", index=True)
    decision_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    affiliate = relationship("AffiliateRecord", back_populates="applications", lazy="joined")
    risk_evaluation = relationship(
        "RiskEvaluationRecord",
        back_populates="application",
        uselist=False,
        lazy="joined",
        cascade="all, delete-orphan",
    )


class RiskEvaluationRecord(Base):
    """Risk assessment owned by exactly one application"""

    __tablename__ = "risk_evaluations"

    id = Column(Identifier, primary_key=True, autoincrement=True)
    credit_application_id = Column(
        Identifier,
        ForeignKey("credit_applications.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    score = Column(Integer, nullable=False)
    risk_level = Column(Text, nullable=False)
    detail = Column(Text, nullable=True)
    approved = Column(Boolean, nullable=False)
    rejection_reason = Column(Text, nullable=True)
    source = Column(Text, nullable=False, default="bureau")
    evaluated_at = Column(DateTime(timezone=True), nullable=False)

    application = relationship("CreditApplicationRecord", back_populates="risk_evaluation")
