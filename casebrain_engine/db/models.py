"""
SQLAlchemy Models for Database
==============================

Case-side records the engine reads:
- Organizations (tenant scope)
- Cases with charges, hearings and documents
- Stored strategy (routes / recommendation / narrative) and commitments
- Versioned analysis runs

The engine never writes these during a request; writes happen in the
host application (and in tests).

Supports both PostgreSQL and SQLite via SQLAlchemy.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    Column, String, Text, Integer, DateTime, Enum, ForeignKey, Index, JSON, UniqueConstraint
)
from sqlalchemy.orm import relationship, declarative_base

# Use JSON for cross-database compatibility (works with both PostgreSQL and SQLite)
JSONB = JSON

Base = declarative_base()


def generate_uuid():
    return str(uuid.uuid4())


# =============================================================================
# ENUMS
# =============================================================================

class CaseStatus(str, enum.Enum):
    """Case lifecycle status"""
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    ARCHIVED = "archived"
    CLOSED = "closed"


class AnalysisModeColumn(str, enum.Enum):
    """Analysis level stored on a version row"""
    NONE = "none"
    PREVIEW = "preview"
    COMPLETE = "complete"


# =============================================================================
# ORGANIZATION
# =============================================================================

class Organization(Base):
    """Tenant (law firm)"""
    __tablename__ = "organizations"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    cases = relationship("Case", back_populates="org", cascade="all, delete-orphan")


# =============================================================================
# CASE MODELS
# =============================================================================

class Case(Base):
    """Legal case"""
    __tablename__ = "cases"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    org_id = Column(String(36), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(255), nullable=False)
    practice_area = Column(String(50), nullable=False, default="criminal")
    category = Column(String(255), nullable=True)  # offence / claim description, resolved at read time
    status = Column(Enum(CaseStatus), default=CaseStatus.ACTIVE, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    extra_data = Column(JSONB, default=dict)  # criminalMeta / civilMeta supplied by the host app

    __table_args__ = (
        Index("ix_case_org", "org_id"),
    )

    org = relationship("Organization", back_populates="cases")
    charges = relationship("Charge", back_populates="case", cascade="all, delete-orphan")
    documents = relationship("CaseDocument", back_populates="case", cascade="all, delete-orphan")
    hearings = relationship("Hearing", back_populates="case", cascade="all, delete-orphan")
    strategies = relationship("StrategyRecord", back_populates="case", cascade="all, delete-orphan")
    commitments = relationship("StrategyCommitment", back_populates="case", cascade="all, delete-orphan")
    analysis_versions = relationship("AnalysisVersion", back_populates="case", cascade="all, delete-orphan")


class Charge(Base):
    """Criminal charge / civil head of claim"""
    __tablename__ = "charges"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    case_id = Column(String(36), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False)
    offence = Column(String(255), nullable=False)
    section = Column(String(100), nullable=True)
    status = Column(String(50), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    case = relationship("Case", back_populates="charges")


class CaseDocument(Base):
    """Document with its extracted text"""
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    case_id = Column(String(36), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    raw_text = Column(Text, nullable=True)
    structured_extract = Column(JSONB, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_document_case", "case_id"),
    )

    case = relationship("Case", back_populates="documents")


class Hearing(Base):
    __tablename__ = "hearings"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    case_id = Column(String(36), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False)
    hearing_type = Column(String(100), nullable=False)
    hearing_date = Column(DateTime, nullable=False)
    court = Column(String(255), nullable=True)

    case = relationship("Case", back_populates="hearings")


# =============================================================================
# STRATEGY / ANALYSIS
# =============================================================================

class StrategyRecord(Base):
    """Stored strategy output (routes, recommendation, narrative)"""
    __tablename__ = "strategies"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    case_id = Column(String(36), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False)
    routes = Column(JSONB, default=list)
    recommendation = Column(JSONB, nullable=True)
    narrative = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    case = relationship("Case", back_populates="strategies")


class StrategyCommitment(Base):
    """Strategy the fee earner committed to"""
    __tablename__ = "strategy_commitments"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    case_id = Column(String(36), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False)
    primary_strategy = Column(String(255), nullable=False)
    secondary_strategies = Column(JSONB, default=list)
    committed_at = Column(DateTime, default=datetime.utcnow)

    case = relationship("Case", back_populates="commitments")


class AnalysisVersion(Base):
    """Versioned analysis run"""
    __tablename__ = "analysis_versions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    case_id = Column(String(36), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False)
    version_number = Column(Integer, nullable=False)
    analysis_mode = Column(Enum(AnalysisModeColumn), default=AnalysisModeColumn.PREVIEW, nullable=False)
    payload = Column(JSONB, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("case_id", "version_number", name="uq_analysis_version"),
    )

    case = relationship("Case", back_populates="analysis_versions")
