"""
Generative Fallback
===================

Runs only when the catalogue produced no viable angle and the case has
at least one document.

Flow:
1. Fingerprint the document set (order independent, content sensitive)
2. Cache hit -> return the stored derivation verbatim (FallbackResult.cached=True)
3. Miss -> redact every document, call the generative service under a
   timeout, map every generated tag back into the closed catalogue, gate
   probabilities, store canonical JSON
4. Any failure -> log, cache nothing, return an empty-but-valid result

Two runs over an unchanged document set never diverge and never pay for
the generative call twice (unless two misses race, which only rewrites
the same entry).
"""

import json
import asyncio
import hashlib
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from redis.exceptions import RedisError

from .catalogue import (
    CATALOGUE_VERSION,
    DEFAULT_ANGLE_TYPE,
    DEFAULT_LOOPHOLE_TYPE,
    MAX_WIN_PROBABILITY,
    allowed_angle_types,
    practice_area_for,
)
from .config import get_settings, Settings
from .interfaces import GenerativeService, Redactor, ResultCache
from .probability_gate import gate_probability
from .redaction import get_redactor
from .schemas import (
    AngleSource,
    AngleType,
    CaseCategory,
    CaseFacts,
    DerivationSource,
    Document,
    GateDecision,
    Loophole,
    LoopholeType,
    Severity,
    StrategyAngle,
    StrategyDerivation,
)
from .strategy import CandidateAngle, StrategyEngine, exploitability_for, get_strategy_engine

logger = logging.getLogger(__name__)


DEFAULT_ANALYSIS_NAME = "loopholes"
DEFAULT_SEVERITY = Severity.MEDIUM


# =============================================================================
# Fingerprint + cache key
# =============================================================================

def _sha256(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def canonical_json(value: Any) -> str:
    """Stable JSON text: sorted keys, no whitespace"""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)


def document_set_fingerprint(documents: List[Document]) -> str:
    """
    sha256 over the sorted (id, sha256(raw_text), sha256(structured_extract)) tuples.

    Reordering documents does not change it; editing any document's text or
    structured extract does.
    """
    entries = sorted(
        (
            doc.id,
            _sha256(doc.raw_text or ""),
            _sha256(canonical_json(doc.structured_extract) if doc.structured_extract is not None else ""),
        )
        for doc in documents
    )
    return _sha256(canonical_json(entries))


@dataclass(frozen=True)
class CacheKey:
    org_id: str
    case_id: str
    analysis_name: str
    fingerprint: str
    prefix: str = "casebrain:llm"

    def render(self) -> str:
        return f"{self.prefix}:{self.org_id}:{self.case_id}:{self.analysis_name}:{self.fingerprint}"


@dataclass
class FallbackResult:
    """Derivation plus how it was obtained"""
    derivation: StrategyDerivation
    cached: bool = False
    cache_key: Optional[str] = None
    error: Optional[str] = None


# =============================================================================
# Tag normalization
# =============================================================================

def map_angle_type(value: Any, allowed: List[AngleType]) -> AngleType:
    """Generated angle tag -> closed catalogue (unknown -> default)"""
    try:
        angle_type = AngleType(str(value).strip().upper())
    except ValueError:
        return DEFAULT_ANGLE_TYPE
    return angle_type if angle_type in allowed else DEFAULT_ANGLE_TYPE


def map_loophole_type(value: Any) -> LoopholeType:
    """Generated loophole tag -> closed taxonomy (unknown -> procedural_error)"""
    text = str(value).strip()
    for candidate in (text, text.lower()):
        try:
            return LoopholeType(candidate)
        except ValueError:
            continue
    return DEFAULT_LOOPHOLE_TYPE


def map_severity(value: Any) -> Severity:
    try:
        return Severity(str(value).strip().upper())
    except ValueError:
        return DEFAULT_SEVERITY


def clamp_probability(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value != value:  # NaN
        return None
    return max(0, min(MAX_WIN_PROBABILITY, int(value)))


def _text(value: Any, default: str = "") -> str:
    return str(value).strip() if value is not None else default


def build_structured_facts(category: CaseCategory, facts: CaseFacts) -> Dict[str, Any]:
    """Facts handed to the generative service (no document text)"""
    return {
        "category": category.value,
        "practice_area": facts.practice_area.value,
        "document_count": facts.document_count,
        "charges": list(facts.charges),
        "signals": sorted(s.value for s in facts.signals),
        "evidence_status": {k: v.value for k, v in sorted(facts.evidence_status.items())},
        "allowed_angle_types": [t.value for t in allowed_angle_types(category)],
        "allowed_loophole_types": [t.value for t in LoopholeType],
    }


def empty_derivation(category: CaseCategory, gate: GateDecision, document_count: int) -> StrategyDerivation:
    """The empty-but-valid result: no angles, no loopholes"""
    return StrategyDerivation(
        category=category,
        practice_area=practice_area_for(category),
        catalogue_version=CATALOGUE_VERSION,
        gate=gate,
        source=DerivationSource.NONE,
        document_count=document_count,
    )


# =============================================================================
# Fallback
# =============================================================================

class GenerativeFallback:
    """
    Cached generative pass over redacted documents.

    Args:
        service: GenerativeService (None disables the generative call)
        cache: ResultCache for canonical JSON payloads
        redactor: Redactor applied to every document text before the call
        settings: Timeout, TTL and key prefix
    """

    def __init__(
        self,
        service: Optional[GenerativeService],
        cache: ResultCache,
        redactor: Optional[Redactor] = None,
        settings: Optional[Settings] = None,
        engine: Optional[StrategyEngine] = None
    ):
        self.service = service
        self.cache = cache
        self.redactor = redactor or get_redactor()
        self.settings = settings or get_settings()
        self.engine = engine or get_strategy_engine()

    async def run(
        self,
        org_id: str,
        case_id: str,
        category: CaseCategory,
        facts: CaseFacts,
        documents: List[Document],
        gate: GateDecision,
        analysis_name: str = DEFAULT_ANALYSIS_NAME
    ) -> FallbackResult:
        if not documents:
            return FallbackResult(derivation=empty_derivation(category, gate, 0))

        key = CacheKey(
            org_id=org_id,
            case_id=case_id,
            analysis_name=analysis_name,
            fingerprint=document_set_fingerprint(documents),
            prefix=self.settings.cache_prefix,
        ).render()

        hit = await self._read_cache(key)
        if hit is not None:
            logger.info(f"Fallback cache hit case={case_id} analysis={analysis_name}")
            return FallbackResult(derivation=hit, cached=True, cache_key=key)

        logger.info(f"Fallback cache miss case={case_id} analysis={analysis_name}")

        if self.service is None:
            logger.info("Generative service not configured; returning empty derivation")
            return FallbackResult(
                derivation=empty_derivation(category, gate, len(documents)),
                cache_key=key,
                error="generative service not configured",
            )

        redacted = [self._redact(doc) for doc in documents]

        try:
            payload = await asyncio.wait_for(
                self.service.infer(build_structured_facts(category, facts), redacted),
                timeout=self.settings.llm_timeout,
            )
            derivation = self.normalize(category, facts, payload, gate)
        except asyncio.TimeoutError:
            logger.warning(f"Generative fallback timed out after {self.settings.llm_timeout}s case={case_id}")
            return FallbackResult(
                derivation=empty_derivation(category, gate, len(documents)),
                cache_key=key,
                error="timeout",
            )
        except Exception as e:
            logger.error(f"Generative fallback failed case={case_id}: {type(e).__name__}: {e}")
            return FallbackResult(
                derivation=empty_derivation(category, gate, len(documents)),
                cache_key=key,
                error=str(e),
            )

        await self._write_cache(key, derivation)
        return FallbackResult(derivation=derivation, cached=False, cache_key=key)

    def _redact(self, doc: Document) -> Document:
        return Document(
            id=doc.id,
            name=doc.name,
            raw_text=self.redactor.redact(doc.raw_text or "").redacted_text,
        )

    async def _read_cache(self, key: str) -> Optional[StrategyDerivation]:
        try:
            raw = await self.cache.get(key)
        except (RedisError, OSError) as e:
            logger.warning(f"Result cache read failed, treating as miss: {e}")
            return None
        if raw is None:
            return None
        try:
            return StrategyDerivation.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Cached payload under {key} is invalid, recomputing: {e.error_count()} errors")
            return None

    async def _write_cache(self, key: str, derivation: StrategyDerivation) -> None:
        try:
            await self.cache.set(key, canonical_json(derivation.model_dump(mode="json")), self.settings.cache_ttl_seconds)
        except (RedisError, OSError) as e:
            logger.warning(f"Result cache write failed: {e}")

    def normalize(
        self,
        category: CaseCategory,
        facts: CaseFacts,
        payload: Any,
        gate: GateDecision
    ) -> StrategyDerivation:
        """Map generated output into the closed catalogue and gate it"""
        if not isinstance(payload, dict):
            raise ValueError("generative payload is not an object")

        allowed = allowed_angle_types(category)

        candidates: List[CandidateAngle] = []
        raw_angles = payload.get("angles")
        for order, raw in enumerate(raw_angles if isinstance(raw_angles, list) else []):
            if not isinstance(raw, dict):
                continue
            angle_type = map_angle_type(raw.get("angle_type"), allowed)
            probability = clamp_probability(raw.get("win_probability"))
            angle = StrategyAngle(
                id=f"gen-{order + 1}-{angle_type.value.lower()}",
                angle_type=angle_type,
                title=_text(raw.get("title"), angle_type.value.replace("_", " ").title()),
                severity=map_severity(raw.get("severity")),
                legal_basis=_text(raw.get("legal_basis")),
                how_to_exploit=_text(raw.get("how_to_exploit")),
                legal_test=_text(raw.get("legal_test")),
                source=AngleSource.GENERATIVE,
            )
            candidates.append(CandidateAngle(
                angle=angle,
                probability=probability,
                base_probability=probability or 0,
                order=order,
            ))

        derivation = self.engine.assemble(category, facts, candidates, gate, DerivationSource.GENERATIVE)

        raw_loopholes = payload.get("loopholes")
        if isinstance(raw_loopholes, list) and raw_loopholes:
            loopholes = []
            for i, raw in enumerate(raw_loopholes):
                if not isinstance(raw, dict):
                    continue
                severity = map_severity(raw.get("severity"))
                probability = gate_probability(clamp_probability(raw.get("success_probability")), gate)
                loopholes.append(Loophole(
                    id=f"gen-loophole-{i + 1}",
                    loophole_type=map_loophole_type(raw.get("loophole_type")),
                    title=_text(raw.get("title"), "Generated loophole"),
                    description=_text(raw.get("description")),
                    severity=severity,
                    exploitability=exploitability_for(severity, probability),
                    success_probability=probability,
                    suggested_action=_text(raw.get("suggested_action")),
                    legal_argument=_text(raw.get("legal_argument")),
                ))
            update: Dict[str, Any] = {"loopholes": loopholes}
            if loopholes:
                update["source"] = DerivationSource.GENERATIVE
            derivation = derivation.model_copy(update=update)

        logger.info(
            f"Normalized generative output: {len(derivation.angles)} angles, "
            f"{len(derivation.loopholes)} loopholes ({category.value})"
        )
        return derivation
