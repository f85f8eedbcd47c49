"""
Collaborator interfaces.

The engine depends on these protocols only; concrete adapters live in
db/repository.py, redaction.py, cache.py and llm/strategist.py.
"""

from typing import Any, Dict, List, Optional, Protocol

from .redaction import RedactionResult
from .schemas import Document


class CaseRepository(Protocol):
    """Read-only, org-scoped access to a case and its related records"""

    async def get_case(self, case_id: str) -> Optional[Dict[str, Any]]: ...

    async def get_charges(self, case_id: str) -> List[Dict[str, Any]]: ...

    async def get_strategy(self, case_id: str) -> Optional[Dict[str, Any]]: ...

    async def get_commitment(self, case_id: str) -> Optional[Dict[str, Any]]: ...

    async def get_hearings(self, case_id: str) -> List[Dict[str, Any]]: ...

    async def get_documents(self, case_id: str) -> List[Document]: ...

    async def get_latest_analysis(self, case_id: str) -> Optional[Dict[str, Any]]: ...


class Redactor(Protocol):
    def redact(self, text: str) -> RedactionResult: ...


class ResultCache(Protocol):
    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None: ...


class GenerativeService(Protocol):
    async def infer(self, structured_facts: Dict[str, Any], documents: List[Document]) -> Dict[str, Any]: ...
