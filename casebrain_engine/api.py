"""
Evidence-Coverage & Strategy Engine API
=======================================

FastAPI endpoints over the pipeline.

Endpoints:
- GET  /health                          - Health check
- POST /api/v1/coverage                 - Evidence items + completeness
- POST /api/v1/admission                - Analysis admission (banner on denial)
- POST /api/v1/strategy                 - Angles, loopholes, options (gated)
- POST /api/v1/options                  - Rank nuclear options for given angles
- GET  /api/v1/cases/{case_id}/snapshot - Case snapshot (X-Org-Id scoped)

Gate denials are returned as 200 with ok=false plus banner/diagnostics.
Engine invariant failures are returned as 500 with an ErrorResponse body.

Run with:
    uvicorn casebrain_engine.api:app --host 0.0.0.0 --port 8000
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import FastAPI, Depends, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .analysis_guard import compute_diagnostics
from .cache import get_result_cache
from .catalogue import CATALOGUE_VERSION, resolve_category
from .config import get_settings, get_llm_mode
from .db.repository import SqlCaseRepository
from .errors import AnalysisGateSignal, EngineError
from .fallback import GenerativeFallback
from .llm import get_strategist
from .pipeline import (
    analyse,
    build_snapshot,
    check_analysis_admission,
    compute_coverage,
    evaluate_documents,
    rank_options,
)
from .schemas import (
    AdmissionRequest,
    CoverageRequest,
    CoverageResponse,
    ErrorDetail,
    ErrorResponse,
    GatedResponse,
    HealthResponse,
    LLMMode,
    OptionRanking,
    OptionsRequest,
    ReasonCode,
    StrategyRequest,
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# =============================================================================
# FastAPI App
# =============================================================================

app = FastAPI(
    title="Evidence-Coverage & Strategy Engine",
    description="Evidence coverage, probability gating and strategy inference for case bundles",
    version=get_settings().service_version,
    docs_url="/docs",
    redoc_url="/redoc",
)


def _parse_cors_origins(raw: str) -> List[str]:
    origins: List[str] = []
    for item in raw.split(","):
        origin = item.strip().strip('"').strip("'").rstrip("/")
        if origin:
            origins.append(origin)
    return origins


CORS_ALLOW_ORIGINS = _parse_cors_origins(get_settings().cors_allow_origins)
logger.info(f"CORS allow origins: {CORS_ALLOW_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

for warning in get_settings().validate_llm_config():
    logger.warning(warning)


# =============================================================================
# Dependencies
# =============================================================================

_fallback: Optional[GenerativeFallback] = None


def get_fallback() -> GenerativeFallback:
    """Shared fallback; the generative call is disabled unless LLM_MODE=openrouter"""
    global _fallback
    if _fallback is None:
        settings = get_settings()
        service = get_strategist() if settings.llm_mode == LLMMode.OPENROUTER else None
        _fallback = GenerativeFallback(service=service, cache=get_result_cache(settings), settings=settings)
    return _fallback


def get_repository(x_org_id: str = Header(..., alias="X-Org-Id")) -> SqlCaseRepository:
    return SqlCaseRepository(org_id=x_org_id)


# =============================================================================
# Error handlers
# =============================================================================

@app.exception_handler(AnalysisGateSignal)
async def gate_signal_handler(request: Request, exc: AnalysisGateSignal):
    body = GatedResponse(ok=False, banner=exc.banner, diagnostics=exc.diagnostics)
    return JSONResponse(status_code=200, content=body.model_dump(mode="json"))


@app.exception_handler(EngineError)
async def engine_error_handler(request: Request, exc: EngineError):
    logger.error(f"Engine error on {request.url.path}: {type(exc).__name__}: {exc}")
    body = ErrorResponse(error=ErrorDetail(code=type(exc).__name__, message=str(exc)))
    return JSONResponse(status_code=500, content=body.model_dump(mode="json"))


# =============================================================================
# Endpoints
# =============================================================================

@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint"""
    settings = get_settings()
    return HealthResponse(
        status="healthy",
        version=settings.service_version,
        llm_mode=get_llm_mode(),
        catalogue_version=CATALOGUE_VERSION,
        timestamp=datetime.now()
    )


@app.post("/api/v1/coverage", response_model=CoverageResponse, tags=["Coverage"])
async def coverage(request: CoverageRequest):
    """Per-category evidence status with audit trail, plus completeness"""
    result = compute_coverage(request.documents, request.practice_area, request.structured_meta)
    return CoverageResponse(items=result.items, completeness=result.completeness, bundle=result.bundle)


@app.post("/api/v1/admission", response_model=GatedResponse, tags=["Coverage"])
async def admission(request: AdmissionRequest):
    """Admission check; a denial comes back as ok=false with a banner"""
    diagnostics = compute_diagnostics(request.documents)
    admitted = check_analysis_admission(diagnostics)
    return GatedResponse(ok=True, data=admitted.model_dump(mode="json"), diagnostics=diagnostics)


@app.post(
    "/api/v1/strategy",
    response_model=GatedResponse,
    tags=["Strategy"],
    responses={500: {"model": ErrorResponse, "description": "Engine invariant failure"}},
)
async def strategy(request: StrategyRequest, fallback: GenerativeFallback = Depends(get_fallback)):
    """
    Full pipeline run for a document set.

    When admission is denied the response is ok=false with the banner; no
    probabilities are ever returned in that case, and the pipeline (with its
    generative fallback) is not run.
    """
    admitted = evaluate_documents(request.documents)
    if not admitted.can_generate_analysis:
        logger.info(f"Strategy request denied for case={request.case_id}: {admitted.diagnostics.reason_codes}")
        return GatedResponse(ok=False, banner=admitted.banner, diagnostics=admitted.diagnostics)

    result = await analyse(
        request.documents,
        practice_area=request.practice_area,
        category=request.category,
        structured_meta=request.structured_meta,
        org_id=request.org_id,
        case_id=request.case_id,
        fallback=fallback,
    )

    return GatedResponse(
        ok=True,
        data={
            "category": result.category.value,
            "completeness": result.coverage.completeness.model_dump(mode="json"),
            "gate": result.gate.model_dump(mode="json"),
            "strategy": result.strategy.model_dump(mode="json"),
            "options": result.options.model_dump(mode="json"),
        },
        diagnostics=result.admission.diagnostics,
    )


@app.post("/api/v1/options", response_model=OptionRanking, tags=["Strategy"])
async def options(request: OptionsRequest):
    """Viable nuclear options and the policy's recommendation"""
    category = resolve_category(request.category, request.practice_area)
    return rank_options(category, request.angles, request.policy)


@app.get("/api/v1/cases/{case_id}/snapshot", response_model=GatedResponse, tags=["Snapshot"])
async def case_snapshot(
    case_id: str,
    repository: SqlCaseRepository = Depends(get_repository),
    fallback: GenerativeFallback = Depends(get_fallback),
):
    """Read-only case snapshot; unknown or out-of-scope cases return ok=false"""
    snapshot = await build_snapshot(case_id, repository, fallback=fallback)
    admission = snapshot.admission
    if not admission.can_generate_analysis and ReasonCode.CASE_NOT_FOUND in admission.diagnostics.reason_codes:
        return GatedResponse(ok=False, banner=admission.banner, diagnostics=admission.diagnostics)
    return GatedResponse(ok=True, data=snapshot.model_dump(mode="json"), banner=admission.banner)
