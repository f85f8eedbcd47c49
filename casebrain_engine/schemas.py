"""
Pydantic Schemas for the Evidence-Coverage & Strategy Engine
============================================================

Stable, minimal schemas for input/output.
All outputs are plain structured records and serialize to valid JSON.

Catalogues (angle types, loophole types, risk tiers, reward categories)
are closed enums. Free-text from a generative pass is always mapped back
into these variants before it leaves the engine.
"""

from typing import List, Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field, model_validator
from enum import Enum
from datetime import datetime


MAX_SUPPORTING_EVIDENCE = 12


# =============================================================================
# ENUMS - Evidence coverage
# =============================================================================

class EvidenceStatus(str, Enum):
    """Per-category evidence status"""
    PRESENT = "present"
    PARTIAL = "partial"
    MISSING = "missing"
    UNKNOWN = "unknown"     # Absence is not informative (category may not apply)


class CapabilityTier(str, Enum):
    """How much evidentiary signal is available for a case"""
    THIN = "thin"
    PARTIAL = "partial"
    FULL = "full"


class PracticeArea(str, Enum):
    """Practice areas with their own decision tables and catalogues"""
    CRIMINAL = "criminal"
    HOUSING_DISREPAIR = "housing_disrepair"
    PERSONAL_INJURY = "personal_injury"
    CLINICAL_NEGLIGENCE = "clinical_negligence"
    FAMILY = "family"
    OTHER = "other"


class CaseCategory(str, Enum):
    """
    Closed, versioned case category taxonomy.

    Criminal matters resolve to an offence family, civil matters to their
    claim type. Anything unrecognized resolves to OTHER.
    """
    VIOLENCE = "violence"
    THEFT_DISHONESTY = "theft_dishonesty"
    DRUGS = "drugs"
    ROAD_TRAFFIC = "road_traffic"
    PUBLIC_ORDER = "public_order"
    SEXUAL_OFFENCE = "sexual_offence"
    CRIMINAL_GENERAL = "criminal_general"
    HOUSING_DISREPAIR = "housing_disrepair"
    PERSONAL_INJURY = "personal_injury"
    CLINICAL_NEGLIGENCE = "clinical_negligence"
    FAMILY = "family"
    OTHER = "other"


class BreachSignal(str, Enum):
    """Fact signals detected in case documents"""
    # Criminal - procedural breaches
    CAUTION_NOT_GIVEN = "caution_not_given"
    SOLICITOR_DENIED = "solicitor_denied"
    INTERVIEW_NOT_RECORDED = "interview_not_recorded"
    DETENTION_EXCEEDED = "detention_exceeded"
    DISCLOSURE_FAILURE = "disclosure_failure"
    CONTINUITY_BREAK = "continuity_break"
    # Criminal - evidential weaknesses
    IDENTIFICATION_WEAKNESS = "identification_weakness"
    WITNESS_INCONSISTENCY = "witness_inconsistency"
    HEARSAY_RELIANCE = "hearsay_reliance"
    BAD_CHARACTER_APPLICATION = "bad_character_application"
    PROCEDURAL_DEFECT = "procedural_defect"
    ALIBI_EVIDENCE = "alibi_evidence"
    MITIGATION_FACTORS = "mitigation_factors"
    # Civil
    LATE_RESPONSE = "late_response"
    DEFECTIVE_DEFENCE = "defective_defence"
    NO_PRE_ACTION_LETTER = "no_pre_action_letter"
    EXPERT_CONFLICT = "expert_conflict"
    WEAK_EXPERT = "weak_expert"
    CAUSATION_GAP = "causation_gap"
    PART_36_OFFER = "part_36_offer"
    FUTURE_LOSS = "future_loss"
    DAMP_MOULD = "damp_mould"
    SOCIAL_HOUSING = "social_housing"
    REPAIR_NOTICE_IGNORED = "repair_notice_ignored"
    HAZARD_CATEGORY_1 = "hazard_category_1"
    AGGRAVATING_CONDUCT = "aggravating_conduct"
    ORDER_BREACH = "order_breach"
    INCOMPLETE_DISCLOSURE = "incomplete_disclosure"
    LATE_APPLICATION = "late_application"
    DEFECTIVE_APPLICATION = "defective_application"


# Signals that count as procedural breaches (abuse of process needs two)
PROCEDURAL_BREACH_SIGNALS = (
    BreachSignal.CAUTION_NOT_GIVEN,
    BreachSignal.SOLICITOR_DENIED,
    BreachSignal.INTERVIEW_NOT_RECORDED,
    BreachSignal.DETENTION_EXCEEDED,
    BreachSignal.DISCLOSURE_FAILURE,
    BreachSignal.CONTINUITY_BREAK,
)


# =============================================================================
# ENUMS - Strategy catalogue
# =============================================================================

class Severity(str, Enum):
    """Declared evidence strength of an angle"""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


SEVERITY_RANK = {
    Severity.CRITICAL: 4,
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
}


class AngleType(str, Enum):
    """
    Closed catalogue of strategy angle types.

    Criminal angles are defence angles; civil angles are claimant/applicant
    attack angles.
    """
    # Criminal
    PACE_BREACH_EXCLUSION = "PACE_BREACH_EXCLUSION"
    DISCLOSURE_FAILURE_STAY = "DISCLOSURE_FAILURE_STAY"
    EVIDENCE_WEAKNESS_CHALLENGE = "EVIDENCE_WEAKNESS_CHALLENGE"
    ABUSE_OF_PROCESS = "ABUSE_OF_PROCESS"
    HUMAN_RIGHTS_BREACH = "HUMAN_RIGHTS_BREACH"
    TECHNICAL_DEFENSE = "TECHNICAL_DEFENSE"
    IDENTIFICATION_CHALLENGE = "IDENTIFICATION_CHALLENGE"
    ALIBI_DEFENSE = "ALIBI_DEFENSE"
    CONTRADICTION_EXPLOITATION = "CONTRADICTION_EXPLOITATION"
    CHAIN_OF_CUSTODY_BREAK = "CHAIN_OF_CUSTODY_BREAK"
    HEARSAY_CHALLENGE = "HEARSAY_CHALLENGE"
    BAD_CHARACTER_EXCLUSION = "BAD_CHARACTER_EXCLUSION"
    PROSECUTION_MISCONDUCT = "PROSECUTION_MISCONDUCT"
    NO_CASE_TO_ANSWER = "NO_CASE_TO_ANSWER"
    SENTENCING_MITIGATION = "SENTENCING_MITIGATION"
    # Civil
    LATE_RESPONSE_ATTACK = "LATE_RESPONSE_ATTACK"
    DEFECTIVE_DEFENSE_ATTACK = "DEFECTIVE_DEFENSE_ATTACK"
    MISSING_PRE_ACTION_ATTACK = "MISSING_PRE_ACTION_ATTACK"
    EXPERT_CONTRADICTION_ATTACK = "EXPERT_CONTRADICTION_ATTACK"
    WEAK_EXPERT_ATTACK = "WEAK_EXPERT_ATTACK"
    CAUSATION_GAP_ATTACK = "CAUSATION_GAP_ATTACK"
    PART_36_PRESSURE = "PART_36_PRESSURE"
    FUTURE_LOSS_MAXIMIZATION = "FUTURE_LOSS_MAXIMIZATION"
    AWAAB_LAW_BREACH = "AWAAB_LAW_BREACH"
    S11_LTA_BREACH = "S11_LTA_BREACH"
    HHSRS_CATEGORY_1 = "HHSRS_CATEGORY_1"
    DISCLOSURE_FAILURE_ATTACK = "DISCLOSURE_FAILURE_ATTACK"
    AGGRAVATED_DAMAGES_CLAIM = "AGGRAVATED_DAMAGES_CLAIM"
    NON_COMPLIANCE_ATTACK = "NON_COMPLIANCE_ATTACK"
    LATE_APPLICATION_ATTACK = "LATE_APPLICATION_ATTACK"
    DEFECTIVE_APPLICATION_ATTACK = "DEFECTIVE_APPLICATION_ATTACK"
    NON_DISCLOSURE_ATTACK = "NON_DISCLOSURE_ATTACK"
    INCOMPLETE_DISCLOSURE_ATTACK = "INCOMPLETE_DISCLOSURE_ATTACK"
    WEAK_EVIDENCE_ATTACK = "WEAK_EVIDENCE_ATTACK"
    ENFORCEMENT_OPPORTUNITY = "ENFORCEMENT_OPPORTUNITY"


class AngleSource(str, Enum):
    """Where an angle came from"""
    CATALOGUE = "catalogue"
    GENERATIVE = "generative"


class LoopholeType(str, Enum):
    """Display taxonomy for loopholes"""
    PACE_BREACH = "PACE_breach"
    PROCEDURAL_ERROR = "procedural_error"
    EVIDENCE_WEAKNESS = "evidence_weakness"
    DISCLOSURE_FAILURE = "disclosure_failure"
    IDENTIFICATION_ISSUE = "identification_issue"
    CONTRADICTION = "contradiction"
    MISSING_EVIDENCE = "missing_evidence"
    CHAIN_OF_CUSTODY = "chain_of_custody"
    HEARSAY = "hearsay"
    BAD_CHARACTER = "bad_character"


class Exploitability(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RiskLevel(str, Enum):
    """Risk tier of a nuclear option"""
    HIGH = "HIGH"
    VERY_HIGH = "VERY_HIGH"
    EXTREME = "EXTREME"


class RewardCategory(str, Enum):
    """What a nuclear option achieves if it succeeds"""
    CASE_DISMISSED = "CASE_DISMISSED"
    STAY_GRANTED = "STAY_GRANTED"
    EVIDENCE_EXCLUDED = "EVIDENCE_EXCLUDED"
    MAJOR_DAMAGE = "MAJOR_DAMAGE"
    OTHER = "OTHER"


class DerivationSource(str, Enum):
    """Which path produced a strategy derivation"""
    DETERMINISTIC = "deterministic"
    GENERATIVE = "generative"
    NONE = "none"


# =============================================================================
# ENUMS - Admission, snapshot, service
# =============================================================================

class ReasonCode(str, Enum):
    """Machine-readable admission reason codes"""
    CASE_NOT_FOUND = "CASE_NOT_FOUND"
    DOCS_NONE = "DOCS_NONE"
    DOCS_TOO_FEW = "DOCS_TOO_FEW"
    SCANNED_SUSPECTED = "SCANNED_SUSPECTED"
    TEXT_THIN = "TEXT_THIN"
    OK = "OK"


class BannerSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AnalysisMode(str, Enum):
    """Analysis level a case has reached"""
    NONE = "none"
    PREVIEW = "preview"
    COMPLETE = "complete"


class ConfidenceLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class LLMMode(str, Enum):
    """LLM usage mode"""
    NONE = "none"           # Deterministic only
    OPENROUTER = "openrouter"


class CacheBackend(str, Enum):
    MEMORY = "memory"
    REDIS = "redis"


# =============================================================================
# INPUT SCHEMAS - Documents
# =============================================================================

class Document(BaseModel):
    """A case document (read-only input)"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Document ID")
    name: str = Field("", description="File name or title")
    raw_text: Optional[str] = Field(None, description="Extracted raw text (None if not extracted)")
    structured_extract: Optional[Dict[str, Any]] = Field(
        None,
        description="Semi-structured extraction (parties, dates, criminalMeta, civilMeta)"
    )


# =============================================================================
# OUTPUT SCHEMAS - Coverage
# =============================================================================

class EvidenceItem(BaseModel):
    """Status of one evidence category, with its audit trail"""
    id: str = Field(..., description="Category key, e.g. 'charges'")
    label: str = Field(..., description="Human-readable label")
    status: EvidenceStatus
    supporting_evidence: List[str] = Field(
        default_factory=list,
        max_length=MAX_SUPPORTING_EVIDENCE,
        description="Matched phrases or extracted keys that justify the status"
    )
    source_documents: List[str] = Field(default_factory=list, description="Names of documents that matched")
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _status_needs_evidence(self):
        if self.status in (EvidenceStatus.PRESENT, EvidenceStatus.PARTIAL) and not self.supporting_evidence:
            raise ValueError(f"evidence item '{self.id}' is {self.status.value} without supporting evidence")
        return self


class BundleCompleteness(BaseModel):
    """Aggregated coverage over the evidence items"""
    score: int = Field(..., ge=0, le=100, description="round(100 * (present + partial) / total)")
    flags: List[str] = Field(default_factory=list, description="Sorted set of named indicators")
    capability_tier: CapabilityTier
    present_count: int = 0
    partial_count: int = 0
    missing_count: int = 0
    unknown_count: int = 0
    total: int = 0
    critical_missing: List[str] = Field(default_factory=list)
    critical_missing_count: int = 0


class BundleFlags(BaseModel):
    """Weighted bundle completeness from document metadata (names + content markers)"""
    score: int = Field(..., ge=0, le=100)
    capability_tier: CapabilityTier
    flags: Dict[str, bool] = Field(default_factory=dict)


class GateDecision(BaseModel):
    """Output of the probability gate"""
    show: bool
    reason: Optional[str] = None

    @model_validator(mode="after")
    def _reason_iff_hidden(self):
        if self.show and self.reason is not None:
            raise ValueError("reason must be None when show=True")
        if not self.show and not self.reason:
            raise ValueError("reason is required when show=False")
        return self


class Banner(BaseModel):
    """User-facing banner rendered instead of an analysis panel"""
    severity: BannerSeverity
    title: str
    message: str


class AnalysisDiagnostics(BaseModel):
    """Machine diagnostics for analysis admission"""
    doc_count: int = 0
    raw_chars_total: int = 0
    json_chars_total: int = 0
    avg_raw_chars_per_doc: int = 0
    suspected_scanned: bool = False
    reason_codes: List[ReasonCode] = Field(default_factory=list)


class AnalysisAdmission(BaseModel):
    """Admitted | Denied(banner, diagnostics)"""
    can_generate_analysis: bool
    banner: Optional[Banner] = None
    diagnostics: AnalysisDiagnostics


# =============================================================================
# OUTPUT SCHEMAS - Facts and strategy
# =============================================================================

class CaseFacts(BaseModel):
    """Fact signals and evidence statuses the angle predicates run over"""
    practice_area: PracticeArea = PracticeArea.OTHER
    signals: Dict[BreachSignal, List[str]] = Field(
        default_factory=dict,
        description="Signal -> matched phrases / extracted keys"
    )
    evidence_status: Dict[str, EvidenceStatus] = Field(default_factory=dict)
    document_count: int = 0
    charges: List[str] = Field(default_factory=list)

    def has(self, signal: BreachSignal) -> bool:
        return bool(self.signals.get(signal))

    def present(self, *signals: BreachSignal) -> List[BreachSignal]:
        return [s for s in signals if self.has(s)]

    def status_of(self, category: str) -> EvidenceStatus:
        return self.evidence_status.get(category, EvidenceStatus.UNKNOWN)


class StrategyAngle(BaseModel):
    """A candidate strategy argument drawn from the closed catalogue"""
    id: str
    angle_type: AngleType
    title: str
    severity: Severity
    win_probability: Optional[int] = Field(None, ge=0, le=100, description="None means not disclosed")
    legal_basis: str = ""
    how_to_exploit: str = ""
    legal_test: str = ""
    evidence_basis: List[str] = Field(default_factory=list)
    supporting_signals: List[str] = Field(default_factory=list)
    combined_with: List[AngleType] = Field(default_factory=list)
    source: AngleSource = AngleSource.CATALOGUE


class Loophole(BaseModel):
    """Display projection of a strategy angle"""
    id: str
    angle_id: Optional[str] = None
    loophole_type: LoopholeType
    title: str
    description: str = ""
    severity: Severity
    exploitability: Exploitability
    success_probability: Optional[int] = Field(None, ge=0, le=100)
    suggested_action: str = ""
    legal_argument: str = ""


class ProsecutionVulnerabilities(BaseModel):
    critical_weaknesses: List[str] = Field(default_factory=list)
    evidence_gaps: List[str] = Field(default_factory=list)
    procedural_errors: List[str] = Field(default_factory=list)


class RecommendedStrategy(BaseModel):
    primary: StrategyAngle
    supporting: List[StrategyAngle] = Field(default_factory=list)
    combined_probability: Optional[int] = Field(None, ge=0, le=100)
    reasoning: str = ""


class StrategyDerivation(BaseModel):
    """Result of angle derivation (deterministic or generative)"""
    category: CaseCategory
    practice_area: PracticeArea
    catalogue_version: str
    angles: List[StrategyAngle] = Field(default_factory=list)
    loopholes: List[Loophole] = Field(default_factory=list)
    gate: GateDecision
    overall_win_probability: Optional[int] = Field(None, ge=0, le=100)
    prosecution_vulnerabilities: ProsecutionVulnerabilities = Field(default_factory=ProsecutionVulnerabilities)
    recommended_strategy: Optional[RecommendedStrategy] = None
    source: DerivationSource = DerivationSource.DETERMINISTIC
    document_count: int = 0


class NuclearOption(BaseModel):
    """A catalogued high-risk procedural option"""
    id: str
    option: str
    risk: RiskLevel
    reward: RewardCategory
    when_to_use: str
    risk_reward_analysis: str = ""
    ready_to_use_text: str = ""
    authorities: List[str] = Field(default_factory=list)


class OptionRanking(BaseModel):
    viable: List[NuclearOption] = Field(default_factory=list)
    recommended: Optional[NuclearOption] = None
    warnings: List[str] = Field(default_factory=list)
    policy: str


# =============================================================================
# OUTPUT SCHEMAS - Snapshot
# =============================================================================

class ChargeSummary(BaseModel):
    id: Optional[str] = None
    offence: str
    section: Optional[str] = None
    status: Optional[str] = None


class HearingSummary(BaseModel):
    hearing_type: str
    hearing_date: datetime
    court: Optional[str] = None


class DisclosureItem(BaseModel):
    category: str
    label: str
    status: EvidenceStatus


class StrategySummary(BaseModel):
    status_label: str = Field(..., description="Complete | Preview (gated) | Not run")
    route_count: int = 0
    has_recommendation: bool = False
    confidence_cap: ConfidenceLevel = ConfidenceLevel.HIGH


class CaseSnapshot(BaseModel):
    """Read-only view-model over one case"""
    case_id: str
    title: Optional[str] = None
    practice_area: PracticeArea
    category: CaseCategory
    analysis_mode: AnalysisMode
    analysis_version: Optional[int] = None
    has_prior_analysis: bool = False
    strategy_data_exists: bool = False

    # Visibility (existence) and confidence are separate axes
    can_show_preview: bool = False
    can_show_full: bool = False
    extraction_ok: bool = False
    probabilities_suppressed: bool = True

    admission: AnalysisAdmission
    completeness: BundleCompleteness
    bundle: BundleFlags
    gate: GateDecision
    evidence_items: List[EvidenceItem] = Field(default_factory=list)
    strategy: Optional[StrategyDerivation] = None
    strategy_summary: StrategySummary
    options: Optional[OptionRanking] = None
    charges: List[ChargeSummary] = Field(default_factory=list)
    next_hearing: Optional[HearingSummary] = None
    disclosure_outstanding: List[DisclosureItem] = Field(default_factory=list)
    commitment: Optional[Dict[str, Any]] = None
    generated_at: datetime


# =============================================================================
# API SCHEMAS
# =============================================================================

class CoverageRequest(BaseModel):
    documents: List[Document] = Field(default_factory=list)
    practice_area: PracticeArea = PracticeArea.CRIMINAL
    structured_meta: Optional[Dict[str, Any]] = None


class CoverageResponse(BaseModel):
    items: List[EvidenceItem]
    completeness: BundleCompleteness
    bundle: BundleFlags


class AdmissionRequest(BaseModel):
    documents: List[Document] = Field(default_factory=list)


class GatedResponse(BaseModel):
    """Envelope used when a gate may deny: ok=False carries banner + diagnostics"""
    ok: bool
    data: Optional[Dict[str, Any]] = None
    banner: Optional[Banner] = None
    diagnostics: Optional[AnalysisDiagnostics] = None


class StrategyRequest(BaseModel):
    org_id: str = Field(..., description="Organization scope (part of the cache key)")
    case_id: str
    category: Optional[str] = Field(None, description="Offence or claim type; resolved against the catalogue")
    practice_area: PracticeArea = PracticeArea.CRIMINAL
    documents: List[Document] = Field(default_factory=list)
    structured_meta: Optional[Dict[str, Any]] = None


class OptionsRequest(BaseModel):
    category: Optional[str] = None
    practice_area: Optional[PracticeArea] = None
    angles: List[StrategyAngle] = Field(default_factory=list)
    policy: Optional[str] = Field(None, description="Risk policy name (default: catalogue_conservatism)")


class HealthResponse(BaseModel):
    """Health check response"""
    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Service version")
    llm_mode: LLMMode = Field(..., description="Current LLM mode")
    catalogue_version: str
    timestamp: datetime = Field(..., description="Current timestamp")


class ErrorDetail(BaseModel):
    """Structured error detail"""
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Any] = Field(None, description="Optional error details")


class ErrorResponse(BaseModel):
    """Structured error response"""
    error: ErrorDetail

