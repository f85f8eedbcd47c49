"""
Signal Extractor - Evidence coverage and fact signals from case documents
=========================================================================

For each evidence category of a practice area:
1. A structured signal (criminalMeta / civilMeta block) wins -> present
2. Otherwise phrase groups are matched over lowercased name + text
3. Categories that may not apply to a case (exhibits) default to unknown

Every item carries the literal matched phrases (capped) so a user can see
why a category was marked present.

The same pass produces CaseFacts: breach / weakness signals that the
strategy catalogue's viability predicates run over.

The extractor is pure: no I/O, no clock, no randomness.
"""

import re
import logging
from typing import List, Dict, Any, Optional, Tuple
from dataclasses import dataclass, field

from .errors import ExtractionContractError
from .schemas import (
    BreachSignal,
    CaseFacts,
    Document,
    EvidenceItem,
    EvidenceStatus,
    MAX_SUPPORTING_EVIDENCE,
    PracticeArea,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Phrase Groups - Evidence categories
# =============================================================================

CATEGORY_GROUPS: Dict[str, List[str]] = {
    # Charges / procedural posture
    "charge_strong": [
        r"charge\s*sheet",
        r"\bindictment\b",
        r"\bcount\s+\d+\b",
        r"\bcharged with\b",
    ],
    "charge_weak": [
        r"\boffen[cs]e\b",
        r"\bcontrary to (?:section|s\.)",
        r"\bsection\s+\d+\b",
        r"\bcharges?\b",
    ],
    # Witness / identification material
    "witness_marker": [
        r"\bmg\s?11\b",
        r"statement of witness",
        r"witness statement",
        r"statement of truth",
        r"witness details",
        r"\bviper\b",
        r"identification (?:procedure|parade)",
    ],
    "witness_first_person": [
        r"\bi (?:was|saw|witnessed|observed|noticed|heard|became|noted|remember(?:ed)?)\b",
        r"\bi (?:am|was) involved\b",
        r"\bi (?:told|said|stated|informed|reported)\b",
    ],
    "witness_mention": [
        r"\bwitness(?:es)?\b",
    ],
    # CCTV / digital evidence + continuity
    "cctv_footage": [
        r"\bcctv\b",
        r"closed\s*circuit",
        r"\bbwv\b",
        r"body[- ]?worn",
        r"(?:camera|video) footage",
        r"\bdvr\b",
    ],
    "cctv_continuity": [
        r"\bcontinuity\b",
        r"chain of custody",
        r"native (?:export|download)",
        r"(?:export|download) log",
    ],
    # PACE / interview / custody
    "pace": [
        r"custody record",
        r"custody log",
        r"detention log",
        r"record of (?:taped )?interview",
        r"interview (?:record|transcript|recording)",
        r"\bcaution(?:ed)?\b",
        r"\bpace\b",
        r"\bcode c\b",
        r"duty solicitor",
    ],
    # Disclosure schedules
    "disclosure_unused": [
        r"\bmg\s?6c\b",
        r"unused material",
        r"non[- ]sensitive (?:unused )?material",
    ],
    "disclosure_schedule": [
        r"\bmg\s?6[ad]\b",
        r"disclosure schedule",
        r"sensitive material schedule",
    ],
    "disclosure_mention": [
        r"\bdisclosure\b",
        r"\bcpia\b",
        r"initial details of (?:the )?prosecution case",
        r"\bidpc\b",
    ],
    # Medical
    "medical": [
        r"\bmedical\b",
        r"\binjur(?:y|ies)\b",
        r"\bhospital\b",
        r"\ba&e\b",
        r"\bambulance\b",
        r"\bparamedic\b",
        r"\bgp records?\b",
        r"\bdoctor\b",
        r"\bfracture[sd]?\b",
    ],
    # Exhibits / forensics
    "forensic": [
        r"\bexhibit(?:s|ed)?\b",
        r"\bforensic\b",
        r"\bdna\b",
        r"\bfingerprints?\b",
        r"\bweapon\b",
        r"\bswabs?\b",
    ],
    # Civil - pleadings
    "pleading_strong": [
        r"claim form",
        r"particulars of claim",
        r"\bdefen[cs]e\b",
        r"statement of case",
        r"reply to defen[cs]e",
    ],
    "pleading_weak": [
        r"\bclaimant\b",
        r"\bproceedings\b",
        r"\bapplicant\b",
    ],
    # Civil - experts
    "expert": [
        r"expert(?:'s)? report",
        r"\bcpr (?:part )?35\b",
        r"\bpart 35\b",
        r"\bsurveyor\b",
        r"\bconsultant\b",
        r"joint (?:expert )?statement",
        r"expert witness",
        r"single joint expert",
    ],
    # Civil - pre-action correspondence
    "pre_action_claim": [
        r"letter of claim",
        r"letter before (?:action|claim)",
        r"pre[- ]action protocol",
    ],
    "pre_action_response": [
        r"letter of response",
        r"response to (?:the |your )?letter of claim",
        r"(?:landlord|defendant)(?:'s)? response",
    ],
    # Civil - disclosure
    "civil_disclosure": [
        r"list of documents",
        r"\bn265\b",
        r"standard disclosure",
        r"\bform e\b",
        r"\binspection\b",
        r"\bdisclosure\b",
    ],
    # Civil - documentary exhibits
    "civil_exhibit": [
        r"\bphotograph(?:s)?\b",
        r"\bphotos?\b",
        r"\bexhibit(?:s|ed)?\b",
        r"\binvoices?\b",
        r"\breceipts?\b",
        r"schedule of (?:loss|special damages)",
    ],
}


# =============================================================================
# Phrase Groups - Fact signals
# =============================================================================

# A document matching any of these does not contribute the signal
SIGNAL_SUPPRESSORS: Dict[BreachSignal, List[str]] = {
    BreachSignal.SOLICITOR_DENIED: [
        r"declined (?:free )?(?:legal advice|(?:a |the )?solicitor|(?:the )?services of a solicitor)",
        r"waived (?:his|her|their|the) right to (?:a solicitor|legal advice)",
        r"did not (?:want|wish|request) (?:a solicitor|legal advice)",
        r"at (?:his|her|their) own request",
    ],
}

SIGNAL_PATTERNS: Dict[BreachSignal, List[str]] = {
    BreachSignal.CAUTION_NOT_GIVEN: [
        r"(?:was|were) not (?:been )?cautioned",
        r"no caution (?:was )?given",
        r"caution was not given",
        r"without (?:a |being )?caution(?:ed)?",
        r"questioned before (?:being )?caution(?:ed)?",
    ],
    BreachSignal.SOLICITOR_DENIED: [
        r"(?:refused|denied) (?:access to )?(?:a |his |her |their )?(?:solicitor|legal advice)",
        r"(?:solicitor|legal advice) (?:was )?(?:refused|denied|delayed)",
        r"no solicitor (?:was )?present",
        r"without (?:a )?solicitor",
    ],
    BreachSignal.INTERVIEW_NOT_RECORDED: [
        r"interview (?:was )?not (?:audio |video )?recorded",
        r"unrecorded interview",
        r"no recording of (?:the )?interview",
        r"recording equipment (?:failed|was not working|malfunctioned)",
    ],
    BreachSignal.DETENTION_EXCEEDED: [
        r"detained for (?:over|more than) (?:24|twenty[- ]four|36|thirty[- ]six) hours",
        r"detention (?:limit|clock) (?:was )?(?:exceeded|expired)",
        r"(?:detention )?review (?:was )?not (?:carried out|conducted)",
        r"no (?:detention|custody) review",
    ],
    BreachSignal.DISCLOSURE_FAILURE: [
        r"(?:disclosure|unused material) (?:has )?not (?:been )?(?:served|provided|disclosed)",
        r"fail(?:ed|ure) to disclose",
        r"outstanding disclosure",
        r"mg\s?6c (?:not|has not been) (?:served|provided)",
        r"non[- ]disclosure",
    ],
    BreachSignal.CONTINUITY_BREAK: [
        r"(?:gap|break) in (?:the )?(?:continuity|chain of custody)",
        r"continuity (?:is not|not|cannot be) (?:established|confirmed|evidenced)",
        r"exhibit (?:bag |seal )?(?:was )?(?:broken|unsealed|missing)",
        r"no continuity statement",
    ],
    BreachSignal.IDENTIFICATION_WEAKNESS: [
        r"fleeting glance",
        r"(?:poor|bad|dim) (?:lighting|visibility)",
        r"(?:from|at) a distance of",
        r"did not see (?:his|her|their|the) face",
        r"no (?:id|identification) (?:procedure|parade)",
        r"viper (?:was )?not (?:held|conducted)",
        r"(?:could not|unable to) identify",
    ],
    BreachSignal.WITNESS_INCONSISTENCY: [
        r"\binconsisten(?:t|cy|cies)\b",
        r"\bcontradict(?:s|ed|ory|ion|ions)\b",
        r"(?:changed|different) (?:account|version)",
    ],
    BreachSignal.HEARSAY_RELIANCE: [
        r"\bhearsay\b",
        r"absent witness",
        r"witness (?:will not|is unwilling to|refuses to) attend",
    ],
    BreachSignal.BAD_CHARACTER_APPLICATION: [
        r"bad character (?:application|notice)",
        r"(?<!no )(?<!without )(?<!any )\bprevious convictions\b",
        r"s\.?\s?101 (?:cja|criminal justice act)",
    ],
    BreachSignal.PROCEDURAL_DEFECT: [
        r"(?:laid|issued) out of time",
        r"time limit (?:has )?expired",
        r"defective (?:charge|summons|information)",
        r"\bduplicity\b",
    ],
    BreachSignal.ALIBI_EVIDENCE: [
        r"\balibi\b",
        r"was (?:at work|elsewhere|at home) at the time",
    ],
    BreachSignal.MITIGATION_FACTORS: [
        r"(?:no|without) previous convictions",
        r"previous good character",
        r"early guilty plea",
        r"\bremorse\b",
        r"mental health",
    ],
    BreachSignal.LATE_RESPONSE: [
        r"fail(?:ed|ure) to (?:respond|reply|acknowledge)",
        r"no (?:response|reply) (?:was |has been )?received",
        r"(?:response|defen[cs]e) (?:was |is )?(?:late|out of time|overdue)",
    ],
    BreachSignal.DEFECTIVE_DEFENCE: [
        r"bare denial",
        r"defen[cs]e (?:fails to|does not) (?:plead|particularise|respond)",
        r"not admitted without (?:giving )?reasons",
    ],
    BreachSignal.NO_PRE_ACTION_LETTER: [
        r"(?:no|without) (?:a )?(?:letter of claim|letter of response|pre[- ]action (?:letter|protocol))",
        r"pre[- ]action protocol (?:was )?not (?:followed|complied)",
    ],
    BreachSignal.EXPERT_CONFLICT: [
        r"experts? (?:disagree|differ)",
        r"(?:contrary|conflicting) expert",
        r"expert(?:'s)? (?:report )?contradicts",
    ],
    BreachSignal.WEAK_EXPERT: [
        r"expert (?:has |did )?not (?:examine|examined|inspect|inspected)",
        r"outside (?:his|her|their) (?:area of )?expertise",
        r"desktop report",
    ],
    BreachSignal.CAUSATION_GAP: [
        r"causation (?:is )?(?:disputed|denied|not established)",
        r"would have (?:happened|occurred) (?:in any event|anyway)",
    ],
    BreachSignal.PART_36_OFFER: [
        r"part 36 offer",
        r"\bpart 36\b",
    ],
    BreachSignal.FUTURE_LOSS: [
        r"future (?:loss|losses|care|earnings)",
        r"loss of earning capacity",
        r"ongoing (?:care|treatment)",
    ],
    BreachSignal.DAMP_MOULD: [
        r"\bdamp\b",
        r"\bmou?ld\b",
        r"\bcondensation\b",
        r"black spores",
    ],
    BreachSignal.SOCIAL_HOUSING: [
        r"social (?:landlord|housing)",
        r"housing association",
        r"council (?:tenant|tenancy|property|landlord)",
        r"local authority landlord",
    ],
    BreachSignal.REPAIR_NOTICE_IGNORED: [
        r"(?:repairs?|complaints?) (?:were |was )?(?:ignored|not (?:carried out|actioned|completed))",
        r"reported (?:the )?(?:problem|issue|disrepair) (?:on )?(?:several|multiple|numerous) occasions",
        r"no repairs",
    ],
    BreachSignal.HAZARD_CATEGORY_1: [
        r"category 1 hazard",
        r"\bhhsrs\b",
        r"(?:serious|imminent) (?:risk|hazard) to health",
    ],
    BreachSignal.AGGRAVATING_CONDUCT: [
        r"\bharass(?:ed|ment)\b",
        r"\bintimidat(?:ed|ion|ing)\b",
        r"unlawful eviction",
    ],
    BreachSignal.ORDER_BREACH: [
        r"breach(?:ed)? (?:of )?(?:the |a )?(?:court |contact |child arrangements )?order",
        r"fail(?:ed|ure) to comply with (?:the |a )?(?:court )?order",
    ],
    BreachSignal.INCOMPLETE_DISCLOSURE: [
        r"(?:incomplete|partial) (?:financial )?disclosure",
        r"form e (?:is )?incomplete",
    ],
    BreachSignal.LATE_APPLICATION: [
        r"application (?:was )?(?:made|filed|issued) (?:late|out of time)",
        r"delay in (?:making|bringing) (?:the )?application",
    ],
    BreachSignal.DEFECTIVE_APPLICATION: [
        r"application (?:is|was) defective",
        r"(?:no|without) (?:supporting )?(?:statement|evidence) (?:in support|filed)",
    ],
}


# Category sets per practice area: (key, label)
CRIMINAL_CATEGORIES: List[Tuple[str, str]] = [
    ("charges", "Charges / Procedural Posture"),
    ("witness_statements", "Witness Statements / Identification Material"),
    ("cctv", "CCTV / Digital Evidence + Continuity"),
    ("pace", "PACE / Interview / Custody Record"),
    ("disclosure", "Disclosure Schedules (MG6C/MG6D/Unused Material)"),
    ("medical", "Medical Evidence"),
    ("exhibits", "Exhibits / Forensics"),
]

CIVIL_CATEGORIES: List[Tuple[str, str]] = [
    ("pleadings", "Pleadings / Statements of Case"),
    ("witness_statements", "Witness Statements"),
    ("expert_evidence", "Expert Evidence"),
    ("pre_action", "Pre-Action Correspondence"),
    ("medical", "Medical Evidence"),
    ("disclosure", "Disclosure / Inspection"),
    ("exhibits", "Photographs / Documentary Exhibits"),
]


def categories_for(practice_area: PracticeArea) -> List[Tuple[str, str]]:
    if practice_area == PracticeArea.CRIMINAL:
        return CRIMINAL_CATEGORIES
    return CIVIL_CATEGORIES


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class _DocText:
    """Lowercased searchable text for one document"""
    name: str
    text: str


@dataclass
class PhraseMatch:
    """Result of matching one phrase group over the document set"""
    phrases: List[str] = field(default_factory=list)
    documents: List[str] = field(default_factory=list)
    pattern_hits: int = 0

    def __bool__(self) -> bool:
        return self.pattern_hits > 0

    def merge(self, other: "PhraseMatch") -> "PhraseMatch":
        return PhraseMatch(
            phrases=_unique(self.phrases + other.phrases),
            documents=_unique(self.documents + other.documents),
            pattern_hits=self.pattern_hits + other.pattern_hits,
        )


@dataclass
class _Assessment:
    status: EvidenceStatus
    evidence: List[str] = field(default_factory=list)
    documents: List[str] = field(default_factory=list)
    notes: Optional[str] = None


@dataclass
class ExtractionResult:
    """Result from extraction"""
    items: List[EvidenceItem]
    facts: CaseFacts
    structured_meta: Dict[str, Any] = field(default_factory=dict)


def _unique(values: List[str]) -> List[str]:
    seen = set()
    out = []
    for v in values:
        if v not in seen:
            seen.add(v)
            out.append(v)
    return out


def _cap(values: List[str]) -> List[str]:
    return _unique(values)[:MAX_SUPPORTING_EVIDENCE]


# =============================================================================
# Structured meta
# =============================================================================

STRUCTURED_BLOCKS = ("criminalMeta", "civilMeta")


def merge_structured_meta(
    documents: List[Document],
    structured_meta: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Merge criminalMeta / civilMeta blocks from every document.

    Later documents extend earlier lists; other fields are overwritten.
    Raises ExtractionContractError when a block is not a record.
    """
    merged: Dict[str, Any] = {}

    sources: List[Tuple[str, Dict[str, Any]]] = []
    if structured_meta:
        sources.append(("structured_meta", structured_meta))
    for doc in documents:
        if doc.structured_extract:
            sources.append((doc.id, doc.structured_extract))

    for source, extract in sources:
        if not isinstance(extract, dict):
            raise ExtractionContractError(f"structured extract for {source} is not a record")
        for block_name in STRUCTURED_BLOCKS:
            block = extract.get(block_name)
            if block is None:
                continue
            if not isinstance(block, dict):
                raise ExtractionContractError(f"{block_name} in {source} must be a record, got {type(block).__name__}")
            target = merged.setdefault(block_name, {})
            for key, value in block.items():
                if isinstance(value, list) and isinstance(target.get(key), list):
                    target[key] = target[key] + value
                elif isinstance(value, dict) and isinstance(target.get(key), dict):
                    target[key] = {**target[key], **value}
                else:
                    target[key] = value

    _validate_meta(merged)
    return merged


def _validate_meta(meta: Dict[str, Any]) -> None:
    criminal = meta.get("criminalMeta") or {}

    charges = criminal.get("charges")
    if charges is not None:
        if not isinstance(charges, list):
            raise ExtractionContractError("criminalMeta.charges must be a list")
        for i, charge in enumerate(charges):
            if isinstance(charge, str):
                continue
            if not isinstance(charge, dict) or not _charge_label(charge):
                raise ExtractionContractError(f"criminalMeta.charges[{i}] has no offence/description")

    evidence = criminal.get("prosecutionEvidence")
    if evidence is not None:
        if not isinstance(evidence, list):
            raise ExtractionContractError("criminalMeta.prosecutionEvidence must be a list")
        for i, entry in enumerate(evidence):
            if not isinstance(entry, dict) or not entry.get("type"):
                raise ExtractionContractError(f"criminalMeta.prosecutionEvidence[{i}] is missing 'type'")

    pace = criminal.get("paceCompliance")
    if pace is not None and not isinstance(pace, dict):
        raise ExtractionContractError("criminalMeta.paceCompliance must be a record")


def _charge_label(charge: Dict[str, Any]) -> Optional[str]:
    for key in ("offence", "offense", "description", "charge"):
        value = charge.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _evidence_of_type(meta: Dict[str, Any], *types: str) -> List[Dict[str, Any]]:
    entries = (meta.get("criminalMeta") or {}).get("prosecutionEvidence") or []
    wanted = {t.lower() for t in types}
    return [e for e in entries if str(e.get("type", "")).lower() in wanted]


# =============================================================================
# Signal Extractor
# =============================================================================

class SignalExtractor:
    """
    Rule-based evidence coverage + fact signal extractor.

    Patterns are compiled once per instance; extract() keeps no state
    between calls.
    """

    def __init__(self):
        self._groups: Dict[str, List[re.Pattern]] = {
            name: [re.compile(p) for p in patterns]
            for name, patterns in CATEGORY_GROUPS.items()
        }
        self._signals: Dict[BreachSignal, List[re.Pattern]] = {
            signal: [re.compile(p) for p in patterns]
            for signal, patterns in SIGNAL_PATTERNS.items()
        }
        self._suppressors: Dict[BreachSignal, List[re.Pattern]] = {
            signal: [re.compile(p) for p in patterns]
            for signal, patterns in SIGNAL_SUPPRESSORS.items()
        }

        self._assessors = {
            "charges": self._assess_charges,
            "witness_statements": self._assess_witness_statements,
            "cctv": self._assess_cctv,
            "pace": self._assess_pace,
            "disclosure": self._assess_disclosure,
            "medical": self._assess_medical,
            "exhibits": self._assess_exhibits,
            "pleadings": self._assess_pleadings,
            "expert_evidence": self._assess_expert_evidence,
            "pre_action": self._assess_pre_action,
        }

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def extract(
        self,
        documents: List[Document],
        practice_area: PracticeArea = PracticeArea.CRIMINAL,
        structured_meta: Optional[Dict[str, Any]] = None
    ) -> ExtractionResult:
        """
        Extract evidence items and fact signals.

        Args:
            documents: Case documents (raw text + structured extracts)
            practice_area: Selects the evidence category set
            structured_meta: Optional externally supplied criminalMeta/civilMeta

        Returns:
            ExtractionResult with ordered items and CaseFacts
        """
        meta = merge_structured_meta(documents, structured_meta)
        docs = [self._doc_text(d) for d in documents]

        items = []
        for key, label in categories_for(practice_area):
            assessment = self._assessors[key](docs, meta, practice_area)
            items.append(EvidenceItem(
                id=key,
                label=label,
                status=assessment.status,
                supporting_evidence=_cap(assessment.evidence),
                source_documents=_unique(assessment.documents),
                notes=assessment.notes,
            ))

        facts = CaseFacts(
            practice_area=practice_area,
            signals=self.detect_signals(docs, meta),
            evidence_status={item.id: item.status for item in items},
            document_count=len(documents),
            charges=self._charges(meta),
        )

        logger.info(
            f"Extracted {len(items)} evidence items from {len(documents)} documents "
            f"({practice_area.value}); signals={sorted(s.value for s in facts.signals)}"
        )
        return ExtractionResult(items=items, facts=facts, structured_meta=meta)

    def detect_signals(self, docs: List[_DocText], meta: Dict[str, Any]) -> Dict[BreachSignal, List[str]]:
        """Fact signals from structured meta first, then phrase patterns"""
        signals: Dict[BreachSignal, List[str]] = {}

        for signal, keys in self._structured_signals(meta).items():
            signals.setdefault(signal, []).extend(keys)

        for signal, patterns in self._signals.items():
            suppressors = self._suppressors.get(signal)
            candidates = docs
            if suppressors:
                candidates = [d for d in docs if not any(p.search(d.text) for p in suppressors)]
            match = self._match_patterns(candidates, patterns)
            if match:
                signals.setdefault(signal, []).extend(match.phrases)

        return {signal: _cap(values) for signal, values in signals.items()}

    # -------------------------------------------------------------------------
    # Matching
    # -------------------------------------------------------------------------

    @staticmethod
    def _doc_text(doc: Document) -> _DocText:
        parts = [doc.name or "", doc.raw_text or ""]
        extract = doc.structured_extract if isinstance(doc.structured_extract, dict) else {}
        for key in ("summary", "text", "raw_text"):
            value = extract.get(key)
            if isinstance(value, str):
                parts.append(value)
        return _DocText(name=doc.name or doc.id, text="\n".join(parts).lower())

    @staticmethod
    def _match_patterns(docs: List[_DocText], patterns: List[re.Pattern]) -> PhraseMatch:
        result = PhraseMatch()
        for pattern in patterns:
            hit = False
            for doc in docs:
                for m in pattern.finditer(doc.text):
                    phrase = " ".join(m.group(0).split())
                    result.phrases.append(phrase)
                    result.documents.append(doc.name)
                    hit = True
            if hit:
                result.pattern_hits += 1
        result.phrases = _unique(result.phrases)
        result.documents = _unique(result.documents)
        return result

    def _match(self, docs: List[_DocText], group: str) -> PhraseMatch:
        return self._match_patterns(docs, self._groups[group])

    # -------------------------------------------------------------------------
    # Structured signals
    # -------------------------------------------------------------------------

    @staticmethod
    def _structured_signals(meta: Dict[str, Any]) -> Dict[BreachSignal, List[str]]:
        found: Dict[BreachSignal, List[str]] = {}
        criminal = meta.get("criminalMeta") or {}
        pace = criminal.get("paceCompliance") or {}

        if pace.get("cautionGiven") is False:
            found[BreachSignal.CAUTION_NOT_GIVEN] = ["criminalMeta.paceCompliance.cautionGiven=false"]
        elif pace.get("cautionGiven") is True and pace.get("cautionGivenBeforeQuestioning") is False:
            found[BreachSignal.CAUTION_NOT_GIVEN] = ["criminalMeta.paceCompliance.cautionGivenBeforeQuestioning=false"]

        if pace.get("rightToSolicitor") is False:
            found[BreachSignal.SOLICITOR_DENIED] = ["criminalMeta.paceCompliance.rightToSolicitor=false"]

        if pace.get("interviewRecorded") is False:
            found[BreachSignal.INTERVIEW_NOT_RECORDED] = ["criminalMeta.paceCompliance.interviewRecorded=false"]

        hours = pace.get("detentionHours")
        if pace.get("detentionTimeExceeded") is True or (isinstance(hours, (int, float)) and hours > 24):
            found[BreachSignal.DETENTION_EXCEEDED] = ["criminalMeta.paceCompliance.detentionTimeExceeded"]

        witnesses = _evidence_of_type(meta, "witness_statement")
        weak_id_issues = {"distance", "lighting", "time", "brief"}
        for w in witnesses:
            issues = {str(i).lower() for i in (w.get("issues") or [])}
            if issues & weak_id_issues:
                found[BreachSignal.IDENTIFICATION_WEAKNESS] = [
                    f"criminalMeta.prosecutionEvidence.issues={sorted(issues & weak_id_issues)}"
                ]
                break

        contents = [str(w.get("content")).strip().lower() for w in witnesses if w.get("content")]
        if len(set(contents)) > 1:
            found[BreachSignal.WITNESS_INCONSISTENCY] = [
                f"criminalMeta.prosecutionEvidence: {len(contents)} differing witness accounts"
            ]

        civil = meta.get("civilMeta") or {}
        if civil.get("defenceServed") is False:
            found[BreachSignal.LATE_RESPONSE] = ["civilMeta.defenceServed=false"]
        if civil.get("letterOfClaimSent") is False:
            found[BreachSignal.NO_PRE_ACTION_LETTER] = ["civilMeta.letterOfClaimSent=false"]
        if civil.get("part36Offer"):
            found[BreachSignal.PART_36_OFFER] = ["civilMeta.part36Offer"]
        if civil.get("socialLandlord") is True:
            found[BreachSignal.SOCIAL_HOUSING] = ["civilMeta.socialLandlord=true"]

        return found

    @staticmethod
    def _charges(meta: Dict[str, Any]) -> List[str]:
        charges = (meta.get("criminalMeta") or {}).get("charges") or []
        out = []
        for charge in charges:
            if isinstance(charge, str):
                out.append(charge.strip())
            else:
                out.append(_charge_label(charge))
        return [c for c in out if c]

    # -------------------------------------------------------------------------
    # Category assessors (criminal)
    # -------------------------------------------------------------------------

    def _assess_charges(self, docs, meta, practice_area) -> _Assessment:
        charges = (meta.get("criminalMeta") or {}).get("charges") or []
        if charges:
            return _Assessment(EvidenceStatus.PRESENT, [f"criminalMeta.charges ({len(charges)})"])

        strong = self._match(docs, "charge_strong")
        if strong:
            return _Assessment(EvidenceStatus.PRESENT, strong.phrases, strong.documents)

        weak = self._match(docs, "charge_weak")
        if weak:
            return _Assessment(
                EvidenceStatus.PARTIAL, weak.phrases, weak.documents,
                notes="Charges mentioned but not fully structured"
            )

        return _Assessment(EvidenceStatus.MISSING)

    def _assess_witness_statements(self, docs, meta, practice_area) -> _Assessment:
        structured = _evidence_of_type(meta, "witness_statement")
        civil_statements = (meta.get("civilMeta") or {}).get("witnessStatements") or []
        if structured or civil_statements:
            count = len(structured) + len(civil_statements)
            key = "criminalMeta.prosecutionEvidence" if structured else "civilMeta.witnessStatements"
            return _Assessment(EvidenceStatus.PRESENT, [f"{key} witness statements ({count})"])

        markers = self._match(docs, "witness_marker")
        first_person = self._match(docs, "witness_first_person")

        # Explicit markers, or >= 2 distinct first-person narrative patterns
        if markers or first_person.pattern_hits >= 2:
            combined = markers.merge(first_person)
            return _Assessment(EvidenceStatus.PRESENT, combined.phrases, combined.documents)

        weak = first_person.merge(self._match(docs, "witness_mention"))
        if weak:
            return _Assessment(
                EvidenceStatus.PARTIAL, weak.phrases, weak.documents,
                notes="Witness material mentioned but no statement confirmed"
            )

        return _Assessment(EvidenceStatus.MISSING)

    def _assess_cctv(self, docs, meta, practice_area) -> _Assessment:
        continuity = self._match(docs, "cctv_continuity")

        structured = _evidence_of_type(meta, "cctv")
        footage = self._match(docs, "cctv_footage")
        if structured:
            footage = PhraseMatch(
                phrases=[f"criminalMeta.prosecutionEvidence CCTV ({len(structured)})"] + footage.phrases,
                documents=footage.documents,
                pattern_hits=footage.pattern_hits + 1,
            )

        if footage and continuity:
            combined = footage.merge(continuity)
            return _Assessment(EvidenceStatus.PRESENT, combined.phrases, combined.documents)

        if footage:
            return _Assessment(
                EvidenceStatus.PARTIAL, footage.phrases, footage.documents,
                notes="CCTV detected but continuity not confirmed"
            )

        return _Assessment(EvidenceStatus.MISSING)

    def _assess_pace(self, docs, meta, practice_area) -> _Assessment:
        pace = (meta.get("criminalMeta") or {}).get("paceCompliance") or {}
        known = [k for k in ("cautionGiven", "interviewRecorded", "rightToSolicitor") if pace.get(k) is not None]
        if known:
            return _Assessment(
                EvidenceStatus.PRESENT,
                [f"criminalMeta.paceCompliance.{k}" for k in known]
            )

        match = self._match(docs, "pace")
        if match.pattern_hits >= 2:
            return _Assessment(EvidenceStatus.PRESENT, match.phrases, match.documents)
        if match:
            return _Assessment(
                EvidenceStatus.PARTIAL, match.phrases, match.documents,
                notes="Single PACE reference; custody record or interview record not confirmed"
            )

        return _Assessment(EvidenceStatus.MISSING)

    def _assess_disclosure(self, docs, meta, practice_area) -> _Assessment:
        if practice_area != PracticeArea.CRIMINAL:
            return self._assess_civil_disclosure(docs, meta)

        schedules = (meta.get("criminalMeta") or {}).get("disclosureSchedules") or []
        if schedules:
            return _Assessment(EvidenceStatus.PRESENT, [f"criminalMeta.disclosureSchedules ({len(schedules)})"])

        unused = self._match(docs, "disclosure_unused")
        schedule = self._match(docs, "disclosure_schedule")

        if unused and schedule:
            combined = unused.merge(schedule)
            return _Assessment(EvidenceStatus.PRESENT, combined.phrases, combined.documents)

        if unused or schedule:
            single = unused if unused else schedule
            return _Assessment(
                EvidenceStatus.PARTIAL, single.phrases, single.documents,
                notes="Partial disclosure schedules detected"
            )

        mention = self._match(docs, "disclosure_mention")
        if mention:
            return _Assessment(
                EvidenceStatus.PARTIAL, mention.phrases, mention.documents,
                notes="Disclosure mentioned but schedules not confirmed"
            )

        return _Assessment(EvidenceStatus.MISSING)

    def _assess_medical(self, docs, meta, practice_area) -> _Assessment:
        structured = _evidence_of_type(meta, "medical")
        civil_medical = (meta.get("civilMeta") or {}).get("medicalReports") or []
        if structured or civil_medical:
            return _Assessment(
                EvidenceStatus.PRESENT,
                [f"structured medical evidence ({len(structured) + len(civil_medical)})"]
            )

        match = self._match(docs, "medical")
        if match.pattern_hits >= 2:
            return _Assessment(EvidenceStatus.PRESENT, match.phrases, match.documents)
        if match:
            return _Assessment(
                EvidenceStatus.PARTIAL, match.phrases, match.documents,
                notes="Medical reference found but no report confirmed"
            )

        return _Assessment(EvidenceStatus.MISSING)

    def _assess_exhibits(self, docs, meta, practice_area) -> _Assessment:
        structured = _evidence_of_type(meta, "forensic")
        if structured:
            return _Assessment(EvidenceStatus.PRESENT, [f"criminalMeta.prosecutionEvidence forensic ({len(structured)})"])

        group = "forensic" if practice_area == PracticeArea.CRIMINAL else "civil_exhibit"
        match = self._match(docs, group)
        if match:
            return _Assessment(EvidenceStatus.PRESENT, match.phrases, match.documents)

        return _Assessment(
            EvidenceStatus.UNKNOWN,
            notes="Not referenced - may not be applicable to this case"
        )

    # -------------------------------------------------------------------------
    # Category assessors (civil)
    # -------------------------------------------------------------------------

    def _assess_pleadings(self, docs, meta, practice_area) -> _Assessment:
        pleadings = (meta.get("civilMeta") or {}).get("pleadings") or []
        if pleadings:
            return _Assessment(EvidenceStatus.PRESENT, [f"civilMeta.pleadings ({len(pleadings)})"])

        strong = self._match(docs, "pleading_strong")
        if strong.pattern_hits >= 2:
            return _Assessment(EvidenceStatus.PRESENT, strong.phrases, strong.documents)

        weak = strong.merge(self._match(docs, "pleading_weak"))
        if weak:
            return _Assessment(
                EvidenceStatus.PARTIAL, weak.phrases, weak.documents,
                notes="Proceedings referenced but statements of case not confirmed"
            )

        return _Assessment(EvidenceStatus.MISSING)

    def _assess_expert_evidence(self, docs, meta, practice_area) -> _Assessment:
        experts = (meta.get("civilMeta") or {}).get("experts") or []
        if experts:
            return _Assessment(EvidenceStatus.PRESENT, [f"civilMeta.experts ({len(experts)})"])

        match = self._match(docs, "expert")
        if match.pattern_hits >= 2:
            return _Assessment(EvidenceStatus.PRESENT, match.phrases, match.documents)
        if match:
            return _Assessment(
                EvidenceStatus.PARTIAL, match.phrases, match.documents,
                notes="Expert referenced but no report confirmed"
            )

        return _Assessment(EvidenceStatus.MISSING)

    def _assess_pre_action(self, docs, meta, practice_area) -> _Assessment:
        civil = meta.get("civilMeta") or {}
        if civil.get("letterOfClaimSent") is True and civil.get("letterOfResponse"):
            return _Assessment(EvidenceStatus.PRESENT, ["civilMeta.letterOfClaimSent", "civilMeta.letterOfResponse"])

        claim = self._match(docs, "pre_action_claim")
        response = self._match(docs, "pre_action_response")

        if claim and response:
            combined = claim.merge(response)
            return _Assessment(EvidenceStatus.PRESENT, combined.phrases, combined.documents)

        if claim or response:
            single = claim if claim else response
            return _Assessment(
                EvidenceStatus.PARTIAL, single.phrases, single.documents,
                notes="Only one side of pre-action correspondence found"
            )

        return _Assessment(EvidenceStatus.MISSING)

    def _assess_civil_disclosure(self, docs, meta) -> _Assessment:
        match = self._match(docs, "civil_disclosure")
        if match.pattern_hits >= 2:
            return _Assessment(EvidenceStatus.PRESENT, match.phrases, match.documents)
        if match:
            return _Assessment(
                EvidenceStatus.PARTIAL, match.phrases, match.documents,
                notes="Disclosure mentioned but no list of documents confirmed"
            )
        return _Assessment(EvidenceStatus.MISSING)


# Singleton instance (patterns compiled once)
_extractor: Optional[SignalExtractor] = None


def get_extractor() -> SignalExtractor:
    """Get or create the extractor singleton"""
    global _extractor
    if _extractor is None:
        _extractor = SignalExtractor()
    return _extractor


def extract_signals(
    documents: List[Document],
    practice_area: PracticeArea = PracticeArea.CRIMINAL,
    structured_meta: Optional[Dict[str, Any]] = None
) -> ExtractionResult:
    """Convenience wrapper around the singleton extractor"""
    return get_extractor().extract(documents, practice_area, structured_meta)
