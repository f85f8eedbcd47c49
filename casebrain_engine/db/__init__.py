"""
Database Package - SQLAlchemy
=============================

Read-side persistence for the snapshot composer.
"""

from .models import (
    Base,
    Organization,
    Case, Charge, CaseDocument, Hearing,
    StrategyRecord, StrategyCommitment, AnalysisVersion,
    CaseStatus, AnalysisModeColumn,
)
from .session import get_db, get_db_session, init_db, get_engine, reset_engine
from .repository import SqlCaseRepository

__all__ = [
    # Base
    "Base",
    # Models
    "Organization",
    "Case", "Charge", "CaseDocument", "Hearing",
    "StrategyRecord", "StrategyCommitment", "AnalysisVersion",
    # Enums
    "CaseStatus", "AnalysisModeColumn",
    # Session
    "get_db", "get_db_session", "init_db", "get_engine", "reset_engine",
    # Repository
    "SqlCaseRepository",
]
