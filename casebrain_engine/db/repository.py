"""
SQL Case Repository
===================

Read-only, org-scoped CaseRepository over the SQLAlchemy models.

Each read opens its own session in a worker thread (asyncio.to_thread),
so the snapshot composer can issue them concurrently. A case outside the
repository's org scope behaves exactly like a missing case.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from ..schemas import Document
from .models import AnalysisVersion, Case, CaseDocument, Charge, Hearing, StrategyCommitment, StrategyRecord
from .session import get_db_session

logger = logging.getLogger(__name__)


class SqlCaseRepository:
    """CaseRepository backed by SQLAlchemy"""

    def __init__(self, org_id: str, session_factory: Callable = get_db_session):
        self.org_id = org_id
        self._session_factory = session_factory

    async def _run(self, fn: Callable[[Session], Any]) -> Any:
        def _call():
            with self._session_factory() as db:
                return fn(db)
        return await asyncio.to_thread(_call)

    def _scoped_case(self, db: Session, case_id: str) -> Optional[Case]:
        return (
            db.query(Case)
            .filter(Case.id == case_id, Case.org_id == self.org_id)
            .one_or_none()
        )

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_case(self, case_id: str) -> Optional[Dict[str, Any]]:
        def _q(db: Session):
            case = self._scoped_case(db, case_id)
            if case is None:
                return None
            return {
                "id": case.id,
                "org_id": case.org_id,
                "title": case.title,
                "practice_area": case.practice_area,
                "category": case.category,
                "status": case.status.value if case.status else None,
                "extra_data": dict(case.extra_data or {}),
            }
        return await self._run(_q)

    async def get_charges(self, case_id: str) -> List[Dict[str, Any]]:
        def _q(db: Session):
            if self._scoped_case(db, case_id) is None:
                return []
            rows = db.query(Charge).filter(Charge.case_id == case_id).order_by(Charge.created_at).all()
            return [
                {"id": c.id, "offence": c.offence, "section": c.section, "status": c.status}
                for c in rows
            ]
        return await self._run(_q)

    async def get_strategy(self, case_id: str) -> Optional[Dict[str, Any]]:
        def _q(db: Session):
            if self._scoped_case(db, case_id) is None:
                return None
            row = (
                db.query(StrategyRecord)
                .filter(StrategyRecord.case_id == case_id)
                .order_by(StrategyRecord.created_at.desc())
                .first()
            )
            if row is None:
                return None
            return {
                "routes": list(row.routes or []),
                "recommendation": row.recommendation,
                "narrative": row.narrative,
            }
        return await self._run(_q)

    async def get_commitment(self, case_id: str) -> Optional[Dict[str, Any]]:
        def _q(db: Session):
            if self._scoped_case(db, case_id) is None:
                return None
            row = (
                db.query(StrategyCommitment)
                .filter(StrategyCommitment.case_id == case_id)
                .order_by(StrategyCommitment.committed_at.desc())
                .first()
            )
            if row is None:
                return None
            return {
                "primary_strategy": row.primary_strategy,
                "secondary_strategies": list(row.secondary_strategies or []),
                "committed_at": row.committed_at.isoformat() if row.committed_at else None,
            }
        return await self._run(_q)

    async def get_hearings(self, case_id: str) -> List[Dict[str, Any]]:
        def _q(db: Session):
            if self._scoped_case(db, case_id) is None:
                return []
            rows = db.query(Hearing).filter(Hearing.case_id == case_id).order_by(Hearing.hearing_date).all()
            return [
                {"hearing_type": h.hearing_type, "hearing_date": h.hearing_date, "court": h.court}
                for h in rows
            ]
        return await self._run(_q)

    async def get_documents(self, case_id: str) -> List[Document]:
        def _q(db: Session):
            if self._scoped_case(db, case_id) is None:
                return []
            rows = db.query(CaseDocument).filter(CaseDocument.case_id == case_id).order_by(CaseDocument.created_at).all()
            return [
                Document(id=d.id, name=d.name, raw_text=d.raw_text, structured_extract=d.structured_extract)
                for d in rows
            ]
        return await self._run(_q)

    async def get_latest_analysis(self, case_id: str) -> Optional[Dict[str, Any]]:
        def _q(db: Session):
            if self._scoped_case(db, case_id) is None:
                return None
            row = (
                db.query(AnalysisVersion)
                .filter(AnalysisVersion.case_id == case_id)
                .order_by(AnalysisVersion.version_number.desc())
                .first()
            )
            if row is None:
                return None
            return {
                "version_number": row.version_number,
                "analysis_mode": row.analysis_mode.value,
                "payload": dict(row.payload or {}),
                "created_at": row.created_at,
            }
        return await self._run(_q)
