"""
Analysis Guard
==============

Case-level admission control. Decides whether any analysis may run based
on document volume and extraction quality.

- evaluate_admission(): returns AnalysisAdmission (admitted or denied)
- check_analysis_admission(): raises AnalysisGateSignal on denial

A denial is not an error: callers render the banner in place of the
analysis panel.
"""

import json
import logging
from typing import List, Optional

from .config import get_settings, Settings
from .errors import AnalysisGateSignal
from .schemas import (
    AnalysisAdmission,
    AnalysisDiagnostics,
    Banner,
    BannerSeverity,
    Document,
    ReasonCode,
)

logger = logging.getLogger(__name__)


BANNERS = {
    ReasonCode.CASE_NOT_FOUND: Banner(
        severity=BannerSeverity.ERROR,
        title="Case not found",
        message="Case not found for your org scope. This may be due to an org_id mismatch. Re-upload or contact support.",
    ),
    ReasonCode.DOCS_NONE: Banner(
        severity=BannerSeverity.INFO,
        title="No documents found",
        message="No documents found for this case. Upload documents to generate full analysis.",
    ),
    ReasonCode.DOCS_TOO_FEW: Banner(
        severity=BannerSeverity.INFO,
        title="More documents needed",
        message="At least two documents are needed before analysis can be generated. Upload the rest of the bundle.",
    ),
    ReasonCode.SCANNED_SUSPECTED: Banner(
        severity=BannerSeverity.WARNING,
        title="No extractable text detected",
        message="This PDF appears scanned/image-only. Upload a text-based PDF or run OCR, then re-analyse.",
    ),
    ReasonCode.TEXT_THIN: Banner(
        severity=BannerSeverity.WARNING,
        title="Insufficient text extracted",
        message="Very little text was extracted from the documents. Upload text-based PDFs or run OCR for better analysis.",
    ),
}

DEFAULT_DENIAL_BANNER = Banner(
    severity=BannerSeverity.WARNING,
    title="Insufficient text extracted",
    message="Not enough extractable text to generate reliable analysis. Upload text-based PDFs or run OCR, then re-analyse.",
)

# Highest priority first
BANNER_PRIORITY = [
    ReasonCode.CASE_NOT_FOUND,
    ReasonCode.DOCS_NONE,
    ReasonCode.SCANNED_SUSPECTED,
    ReasonCode.TEXT_THIN,
    ReasonCode.DOCS_TOO_FEW,
]


def _json_chars(doc: Document) -> int:
    if not doc.structured_extract:
        return 0
    return len(json.dumps(doc.structured_extract, sort_keys=True, default=str))


def compute_diagnostics(
    documents: List[Document],
    settings: Optional[Settings] = None,
    case_found: bool = True
) -> AnalysisDiagnostics:
    """Aggregate document volume / extraction diagnostics for a case"""
    settings = settings or get_settings()

    doc_count = len(documents)
    raw_chars_total = sum(len(d.raw_text or "") for d in documents)
    json_chars_total = sum(_json_chars(d) for d in documents)
    avg_raw = raw_chars_total // doc_count if doc_count else 0

    suspected_scanned = (
        doc_count > 0
        and raw_chars_total < settings.scanned_raw_chars_threshold
        and json_chars_total < settings.scanned_json_chars_threshold
    )

    codes: List[ReasonCode] = []
    if not case_found:
        codes.append(ReasonCode.CASE_NOT_FOUND)
    if doc_count == 0:
        codes.append(ReasonCode.DOCS_NONE)
    elif doc_count < settings.analysis_min_documents:
        codes.append(ReasonCode.DOCS_TOO_FEW)

    if suspected_scanned:
        codes.append(ReasonCode.SCANNED_SUSPECTED)
    elif doc_count > 0 and raw_chars_total < settings.analysis_min_raw_chars:
        codes.append(ReasonCode.TEXT_THIN)

    if not codes:
        codes.append(ReasonCode.OK)

    return AnalysisDiagnostics(
        doc_count=doc_count,
        raw_chars_total=raw_chars_total,
        json_chars_total=json_chars_total,
        avg_raw_chars_per_doc=avg_raw,
        suspected_scanned=suspected_scanned,
        reason_codes=codes,
    )


def _banner_for(codes: List[ReasonCode]) -> Banner:
    for code in BANNER_PRIORITY:
        if code in codes:
            return BANNERS[code]
    return DEFAULT_DENIAL_BANNER


def evaluate_admission(
    diagnostics: AnalysisDiagnostics,
    settings: Optional[Settings] = None
) -> AnalysisAdmission:
    """
    canGenerateAnalysis = doc_count >= min_documents AND raw_chars_total >= min_raw_chars

    Returns the admission either way; never raises.
    """
    settings = settings or get_settings()

    admitted = (
        ReasonCode.CASE_NOT_FOUND not in diagnostics.reason_codes
        and diagnostics.doc_count >= settings.analysis_min_documents
        and diagnostics.raw_chars_total >= settings.analysis_min_raw_chars
    )

    if admitted:
        return AnalysisAdmission(can_generate_analysis=True, banner=None, diagnostics=diagnostics)

    return AnalysisAdmission(
        can_generate_analysis=False,
        banner=_banner_for(diagnostics.reason_codes),
        diagnostics=diagnostics,
    )


def check_analysis_admission(
    diagnostics: AnalysisDiagnostics,
    settings: Optional[Settings] = None,
    case_id: Optional[str] = None
) -> AnalysisAdmission:
    """
    Raising variant of evaluate_admission().

    Raises:
        AnalysisGateSignal: when analysis may not be generated
    """
    admission = evaluate_admission(diagnostics, settings)
    if not admission.can_generate_analysis:
        logger.info(
            f"Analysis gated case={case_id} reason_codes={[c.value for c in diagnostics.reason_codes]} "
            f"docs={diagnostics.doc_count} raw_chars={diagnostics.raw_chars_total}"
        )
        raise AnalysisGateSignal(admission.banner, diagnostics, case_id=case_id)
    return admission
