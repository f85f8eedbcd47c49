"""
Engine error types.

Gate denials are not errors: AnalysisGateSignal deliberately does not
derive from EngineError so callers can tell the two apart.
"""

from typing import Optional

from .schemas import Banner, AnalysisDiagnostics


class EngineError(Exception):
    """Base class for genuine engine failures."""


class CatalogueError(EngineError):
    """Raised when a closed-catalogue lookup is malformed."""


class ExtractionContractError(EngineError):
    """Raised when a structured extraction is missing required fields."""


class GenerativeServiceError(EngineError):
    """Raised by a generative service adapter when inference fails."""


class AnalysisGateSignal(Exception):
    """Analysis admission denied; render the banner instead of an analysis panel."""

    def __init__(self, banner: Banner, diagnostics: AnalysisDiagnostics, case_id: Optional[str] = None):
        super().__init__(banner.message)
        self.banner = banner
        self.diagnostics = diagnostics
        self.case_id = case_id
