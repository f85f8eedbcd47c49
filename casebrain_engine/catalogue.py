"""
Strategy Catalogue
==================

Fixed, versioned tables of strategy angles and nuclear options.
Nothing here is generated: every angle the engine can emit is declared
below with its legal test, evidence basis, declared severity, base
probability and a viability predicate over CaseFacts.

Layout:
- GENERIC_ANGLES: apply to every category
- PRACTICE_AREA_ANGLES: criminal / housing / PI / clin-neg / family
- CATEGORY_ANGLES: offence-specific extensions
- ANGLE_TO_LOOPHOLE: display projection (lossy, default procedural_error)
- NUCLEAR_OPTIONS: per practice area, with viability over derived angles
"""

import re
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .errors import CatalogueError
from .schemas import (
    AngleType,
    BreachSignal,
    CaseCategory,
    CaseFacts,
    EvidenceStatus,
    LoopholeType,
    NuclearOption,
    PracticeArea,
    PROCEDURAL_BREACH_SIGNALS,
    RewardCategory,
    RiskLevel,
    Severity,
    StrategyAngle,
)

logger = logging.getLogger(__name__)

CATALOGUE_VERSION = "2026.10.1"

# Unrecognized generated angle tags collapse to this (part of GENERIC_ANGLES)
DEFAULT_ANGLE_TYPE = AngleType.EVIDENCE_WEAKNESS_CHALLENGE
DEFAULT_LOOPHOLE_TYPE = LoopholeType.PROCEDURAL_ERROR

MAX_WIN_PROBABILITY = 95
SIGNAL_BONUS = 5


# =============================================================================
# Predicates
# =============================================================================

# A predicate returns the supporting signals it found; empty means not viable
Predicate = Callable[[CaseFacts], List[str]]


def any_signal(*signals: BreachSignal) -> Predicate:
    def _pred(facts: CaseFacts) -> List[str]:
        return [s.value for s in facts.present(*signals)]
    return _pred


def signals_at_least(n: int, *signals: BreachSignal) -> Predicate:
    def _pred(facts: CaseFacts) -> List[str]:
        hits = [s.value for s in facts.present(*signals)]
        return hits if len(hits) >= n else []
    return _pred


def status_in(category: str, *statuses: EvidenceStatus) -> Predicate:
    # A status is only evidence of a gap when there are documents to have a gap in
    def _pred(facts: CaseFacts) -> List[str]:
        if facts.document_count <= 0:
            return []
        status = facts.status_of(category)
        return [f"{category}:{status.value}"] if status in statuses else []
    return _pred


def all_of(*predicates: Predicate) -> Predicate:
    def _pred(facts: CaseFacts) -> List[str]:
        hits: List[str] = []
        for predicate in predicates:
            found = predicate(facts)
            if not found:
                return []
            hits.extend(found)
        return hits
    return _pred


def any_of(*predicates: Predicate) -> Predicate:
    def _pred(facts: CaseFacts) -> List[str]:
        hits: List[str] = []
        for predicate in predicates:
            for h in predicate(facts):
                if h not in hits:
                    hits.append(h)
        return hits
    return _pred


# =============================================================================
# Angle specs
# =============================================================================

@dataclass(frozen=True)
class AngleSpec:
    """One catalogue entry"""
    key: str
    angle_type: AngleType
    title: str
    severity: Severity
    base_probability: int
    legal_test: str
    legal_basis: str
    evidence_basis: Tuple[str, ...]
    how_to_exploit: str
    predicate: Predicate
    combined_with: Tuple[AngleType, ...] = ()

    def supporting_signals(self, facts: CaseFacts) -> List[str]:
        return self.predicate(facts)

    def probability_for(self, supporting: Sequence[str]) -> int:
        """Base probability + bonus per extra supporting signal, capped"""
        bonus = SIGNAL_BONUS * max(0, len(supporting) - 1)
        return min(MAX_WIN_PROBABILITY, self.base_probability + bonus)


GENERIC_ANGLES: List[AngleSpec] = [
    AngleSpec(
        key="evidence-weakness",
        angle_type=AngleType.EVIDENCE_WEAKNESS_CHALLENGE,
        title="Core Evidence Incomplete - Challenge Weight and Sufficiency",
        severity=Severity.MEDIUM,
        base_probability=50,
        legal_test="Is the evidence relied on complete and reliable enough to prove the case to the required standard?",
        legal_basis="The party bringing the case bears the burden of proof. Incomplete or unconfirmed core evidence goes to weight and sufficiency.",
        evidence_basis=("Witness statements missing or unconfirmed", "CCTV without continuity"),
        how_to_exploit="Step 1: List every core item that is missing or only partly evidenced. Step 2: Request it in writing with a deadline. Step 3: At hearing, put the gaps to the court as going to weight and sufficiency.",
        predicate=any_of(
            status_in("witness_statements", EvidenceStatus.MISSING, EvidenceStatus.PARTIAL),
            status_in("cctv", EvidenceStatus.PARTIAL),
        ),
        combined_with=(AngleType.NO_CASE_TO_ANSWER,),
    ),
    AngleSpec(
        key="contradiction",
        angle_type=AngleType.CONTRADICTION_EXPLOITATION,
        title="Contradictory Evidence - Case Unreliable",
        severity=Severity.HIGH,
        base_probability=70,
        legal_test="Do the accounts relied on contradict each other on material points?",
        legal_basis="Contradictory evidence is unreliable and creates reasonable doubt; a tribunal cannot safely rely on irreconcilable accounts.",
        evidence_basis=("Inconsistent witness accounts", "Changed versions of events"),
        how_to_exploit="Step 1: Build a side-by-side table of the inconsistent passages. Step 2: Cross-examine each witness on the conflict. Step 3: Submit that neither account can be relied on.",
        predicate=any_signal(BreachSignal.WITNESS_INCONSISTENCY),
        combined_with=(AngleType.EVIDENCE_WEAKNESS_CHALLENGE, AngleType.NO_CASE_TO_ANSWER),
    ),
]


CRIMINAL_ANGLES: List[AngleSpec] = [
    AngleSpec(
        key="pace-caution",
        angle_type=AngleType.PACE_BREACH_EXCLUSION,
        title="PACE Breach - Caution Not Given",
        severity=Severity.CRITICAL,
        base_probability=85,
        legal_test="Was the suspect cautioned before questioning, and would admitting the answers adversely affect the fairness of proceedings?",
        legal_basis="Police and Criminal Evidence Act 1984, s.78. PACE Code C requires a caution before questioning. R v Keenan [1990] 2 QB 54.",
        evidence_basis=("Custody record", "Interview recording", "Officer notes"),
        how_to_exploit="Step 1: Apply under s.78 PACE to exclude everything said before the caution. Step 2: Seek a voir dire. Step 3: If excluded, submit no case to answer.",
        predicate=any_signal(BreachSignal.CAUTION_NOT_GIVEN),
        combined_with=(AngleType.DISCLOSURE_FAILURE_STAY, AngleType.ABUSE_OF_PROCESS, AngleType.HUMAN_RIGHTS_BREACH),
    ),
    AngleSpec(
        key="pace-solicitor",
        angle_type=AngleType.PACE_BREACH_EXCLUSION,
        title="PACE Breach - Right to Solicitor Denied",
        severity=Severity.CRITICAL,
        base_probability=90,
        legal_test="Was access to legal advice refused or delayed without lawful authority under s.58 PACE?",
        legal_basis="PACE s.58 and Code C para 6.1. Article 6 ECHR. R v Samuel [1988] QB 615.",
        evidence_basis=("Custody record entries on legal advice", "Duty solicitor call log"),
        how_to_exploit="Step 1: Obtain the custody record and legal advice log. Step 2: Apply under s.78 PACE to exclude the interview. Step 3: Combine with Article 6 fair trial submissions.",
        predicate=any_signal(BreachSignal.SOLICITOR_DENIED),
        combined_with=(AngleType.HUMAN_RIGHTS_BREACH, AngleType.ABUSE_OF_PROCESS),
    ),
    AngleSpec(
        key="pace-recording",
        angle_type=AngleType.PACE_BREACH_EXCLUSION,
        title="PACE Breach - Interview Not Recorded",
        severity=Severity.HIGH,
        base_probability=75,
        legal_test="Was the interview recorded as PACE Code E requires?",
        legal_basis="PACE Code E requires interviews to be audio recorded. Breach renders the account unreliable; s.78 PACE permits exclusion.",
        evidence_basis=("Interview record", "Recording media log"),
        how_to_exploit="Step 1: Request the recording and media log. Step 2: Challenge the accuracy of any note of the interview. Step 3: Apply to exclude under s.78 PACE.",
        predicate=any_signal(BreachSignal.INTERVIEW_NOT_RECORDED),
        combined_with=(AngleType.ABUSE_OF_PROCESS,),
    ),
    AngleSpec(
        key="pace-detention",
        angle_type=AngleType.PACE_BREACH_EXCLUSION,
        title="PACE Breach - Detention Time Limits Exceeded",
        severity=Severity.HIGH,
        base_probability=60,
        legal_test="Was the suspect held beyond the PACE detention limits or without the required reviews?",
        legal_basis="PACE ss.40-44 (reviews and detention limits). Evidence obtained during unlawful detention may be excluded under s.78.",
        evidence_basis=("Custody record timings", "Review entries"),
        how_to_exploit="Step 1: Reconstruct the detention clock from the custody record. Step 2: Identify missing reviews or overrun. Step 3: Apply to exclude evidence obtained after the breach.",
        predicate=any_signal(BreachSignal.DETENTION_EXCEEDED),
        combined_with=(AngleType.HUMAN_RIGHTS_BREACH,),
    ),
    AngleSpec(
        key="disclosure-stay",
        angle_type=AngleType.DISCLOSURE_FAILURE_STAY,
        title="Disclosure Failure - Consider Stay/Abuse of Process Application",
        severity=Severity.HIGH,
        base_probability=70,
        legal_test="Has the prosecution failed to disclose material that might undermine its case or assist the defence?",
        legal_basis="CPIA 1996 s.3 and s.7A. R v H [2004] UKHL 3. Article 6 ECHR.",
        evidence_basis=("MG6C / MG6D schedules", "Disclosure correspondence"),
        how_to_exploit="Step 1: Serve a defence statement and a s.8 CPIA application. Step 2: Chase with a dated disclosure request. Step 3: If material remains outstanding, apply to stay.",
        predicate=any_of(
            any_signal(BreachSignal.DISCLOSURE_FAILURE),
            status_in("disclosure", EvidenceStatus.MISSING),
        ),
        combined_with=(AngleType.ABUSE_OF_PROCESS, AngleType.PROSECUTION_MISCONDUCT),
    ),
    AngleSpec(
        key="abuse-of-process",
        angle_type=AngleType.ABUSE_OF_PROCESS,
        title="Abuse of Process - Multiple Procedural Breaches",
        severity=Severity.CRITICAL,
        base_probability=85,
        legal_test="Taken together, do the breaches make a fair trial impossible, or offend the court's sense of justice?",
        legal_basis="R v Latif [1996] 1 WLR 104. R v Horseferry Road Magistrates, ex p Bennett [1994] AC 42. Article 6 ECHR.",
        evidence_basis=("At least two distinct procedural breaches",),
        how_to_exploit="Step 1: Schedule every breach with its evidential source. Step 2: Serve a skeleton argument for a stay. Step 3: Argue the cumulative effect rather than each breach alone.",
        predicate=signals_at_least(2, *PROCEDURAL_BREACH_SIGNALS),
        combined_with=(AngleType.PACE_BREACH_EXCLUSION, AngleType.DISCLOSURE_FAILURE_STAY, AngleType.HUMAN_RIGHTS_BREACH),
    ),
    AngleSpec(
        key="human-rights",
        angle_type=AngleType.HUMAN_RIGHTS_BREACH,
        title="Human Rights Breach - Article 6 ECHR",
        severity=Severity.CRITICAL,
        base_probability=80,
        legal_test="Has the defendant's right to a fair trial, including access to legal advice, been breached?",
        legal_basis="Article 6 ECHR. Human Rights Act 1998. Salduz v Turkey (2008) 49 EHRR 19.",
        evidence_basis=("Legal advice refusal", "Detention overrun"),
        how_to_exploit="Step 1: Identify the Article 6 (or Article 5) breach. Step 2: Raise it alongside the s.78 application. Step 3: Ask for exclusion or a stay as the only effective remedy.",
        predicate=any_signal(BreachSignal.SOLICITOR_DENIED, BreachSignal.DETENTION_EXCEEDED),
        combined_with=(AngleType.ABUSE_OF_PROCESS,),
    ),
    AngleSpec(
        key="identification",
        angle_type=AngleType.IDENTIFICATION_CHALLENGE,
        title="Weak Identification Evidence - Turnbull Challenge",
        severity=Severity.HIGH,
        base_probability=75,
        legal_test="Is the identification evidence poor quality (distance, lighting, duration, no formal procedure)?",
        legal_basis="R v Turnbull [1977] QB 224. PACE Code D.",
        evidence_basis=("Witness statements", "VIPER / ID procedure records"),
        how_to_exploit="Step 1: Map each Turnbull factor (ADVOKATE) against the statements. Step 2: Challenge any missing Code D procedure. Step 3: Submit the identification should be withdrawn from the jury.",
        predicate=any_signal(BreachSignal.IDENTIFICATION_WEAKNESS),
        combined_with=(AngleType.NO_CASE_TO_ANSWER,),
    ),
    AngleSpec(
        key="chain-of-custody",
        angle_type=AngleType.CHAIN_OF_CUSTODY_BREAK,
        title="Chain of Custody Broken - Exhibit Integrity",
        severity=Severity.HIGH,
        base_probability=65,
        legal_test="Can the prosecution prove continuity of each exhibit from seizure to analysis?",
        legal_basis="The prosecution must prove continuity; unexplained gaps go to admissibility under s.78 PACE and to weight.",
        evidence_basis=("Continuity statements", "Exhibit labels and seals"),
        how_to_exploit="Step 1: Request every continuity statement and exhibit log. Step 2: Identify the break. Step 3: Apply to exclude the exhibit and any analysis of it.",
        predicate=any_signal(BreachSignal.CONTINUITY_BREAK),
        combined_with=(AngleType.EVIDENCE_WEAKNESS_CHALLENGE,),
    ),
    AngleSpec(
        key="hearsay",
        angle_type=AngleType.HEARSAY_CHALLENGE,
        title="Hearsay Reliance - Oppose Admission",
        severity=Severity.MEDIUM,
        base_probability=55,
        legal_test="Is the prosecution relying on hearsay that does not meet a statutory gateway?",
        legal_basis="Criminal Justice Act 2003 ss.114-116 and s.78 PACE. R v Riat [2012] EWCA Crim 1509.",
        evidence_basis=("Absent witness material", "Second-hand accounts"),
        how_to_exploit="Step 1: Serve a notice opposing the hearsay application. Step 2: Test the reason for the witness's absence. Step 3: Argue unfairness under s.78.",
        predicate=any_signal(BreachSignal.HEARSAY_RELIANCE),
    ),
    AngleSpec(
        key="bad-character",
        angle_type=AngleType.BAD_CHARACTER_EXCLUSION,
        title="Bad Character Application - Oppose Admission",
        severity=Severity.MEDIUM,
        base_probability=50,
        legal_test="Would admitting the previous convictions have such an adverse effect on fairness that they ought not to be admitted?",
        legal_basis="Criminal Justice Act 2003 s.101(3). R v Hanson [2005] EWCA Crim 824.",
        evidence_basis=("Bad character notice", "PNC print"),
        how_to_exploit="Step 1: Serve a response to the bad character notice. Step 2: Argue age, dissimilarity and prejudice. Step 3: Invite exclusion under s.101(3).",
        predicate=any_signal(BreachSignal.BAD_CHARACTER_APPLICATION),
    ),
    AngleSpec(
        key="technical",
        angle_type=AngleType.TECHNICAL_DEFENSE,
        title="Technical Defence - Defective or Out-of-Time Proceedings",
        severity=Severity.MEDIUM,
        base_probability=50,
        legal_test="Were proceedings commenced in time and on a valid charge or information?",
        legal_basis="Magistrates' Courts Act 1980 s.127 (six-month limit for summary offences). Rules against duplicity.",
        evidence_basis=("Charge sheet", "Date of offence and date proceedings issued"),
        how_to_exploit="Step 1: Check dates of offence and of charge. Step 2: Raise the defect at the first hearing. Step 3: Invite dismissal.",
        predicate=any_signal(BreachSignal.PROCEDURAL_DEFECT),
    ),
    AngleSpec(
        key="alibi",
        angle_type=AngleType.ALIBI_DEFENSE,
        title="Alibi - Serve Notice and Secure Supporting Evidence",
        severity=Severity.MEDIUM,
        base_probability=55,
        legal_test="Is there evidence the defendant was elsewhere at the material time?",
        legal_basis="CPIA 1996 s.6A(2) (alibi particulars in the defence statement).",
        evidence_basis=("Alibi witness details", "Phone, work or travel records"),
        how_to_exploit="Step 1: Serve alibi particulars in the defence statement. Step 2: Secure records corroborating location. Step 3: Ask the prosecution to investigate the alibi.",
        predicate=any_signal(BreachSignal.ALIBI_EVIDENCE),
    ),
    AngleSpec(
        key="misconduct",
        angle_type=AngleType.PROSECUTION_MISCONDUCT,
        title="Prosecution Misconduct - Disclosure and Exhibit Handling",
        severity=Severity.HIGH,
        base_probability=60,
        legal_test="Do the prosecution's disclosure and exhibit-handling failures amount to misconduct warranting a remedy?",
        legal_basis="CPIA 1996 Code of Practice. R v Grant [2005] EWCA Crim 1089.",
        evidence_basis=("Disclosure correspondence", "Continuity gaps"),
        how_to_exploit="Step 1: Evidence each failure with dates. Step 2: Seek wasted costs or exclusion. Step 3: Feed into any abuse of process application.",
        predicate=all_of(
            any_signal(BreachSignal.DISCLOSURE_FAILURE),
            any_signal(BreachSignal.CONTINUITY_BREAK),
        ),
        combined_with=(AngleType.ABUSE_OF_PROCESS,),
    ),
    AngleSpec(
        key="no-case",
        angle_type=AngleType.NO_CASE_TO_ANSWER,
        title="No Case to Answer - Submission at Close of Prosecution",
        severity=Severity.HIGH,
        base_probability=60,
        legal_test="Taken at its highest, could a properly directed jury convict on the prosecution evidence?",
        legal_basis="R v Galbraith [1981] 1 WLR 1039. Criminal Procedure Rules.",
        evidence_basis=("Witness statements", "Identification and exhibit evidence"),
        how_to_exploit="Step 1: Track which elements remain unproved as the prosecution closes. Step 2: Make a Galbraith submission. Step 3: Rely on excluded or contradictory evidence.",
        predicate=any_of(
            status_in("witness_statements", EvidenceStatus.MISSING),
            signals_at_least(
                2,
                BreachSignal.IDENTIFICATION_WEAKNESS,
                BreachSignal.WITNESS_INCONSISTENCY,
                BreachSignal.HEARSAY_RELIANCE,
                BreachSignal.CONTINUITY_BREAK,
            ),
        ),
    ),
    AngleSpec(
        key="mitigation",
        angle_type=AngleType.SENTENCING_MITIGATION,
        title="Sentencing Mitigation - Build the Personal Mitigation Case",
        severity=Severity.LOW,
        base_probability=40,
        legal_test="Which mitigating factors reduce seriousness or culpability under the guidelines?",
        legal_basis="Sentencing Act 2020 and Sentencing Council guidelines (step two mitigation).",
        evidence_basis=("Character references", "Medical or mental health reports"),
        how_to_exploit="Step 1: Gather references and reports. Step 2: Map factors onto the guideline. Step 3: Present mitigation in writing before sentence.",
        predicate=any_signal(BreachSignal.MITIGATION_FACTORS),
    ),
]


_CIVIL_LATE_RESPONSE = AngleSpec(
    key="late-response",
    angle_type=AngleType.LATE_RESPONSE_ATTACK,
    title="Late or Missing Response - Seek Default Judgment or Sanctions",
    severity=Severity.HIGH,
    base_probability=70,
    legal_test="Has the opponent missed a protocol or CPR deadline to respond?",
    legal_basis="CPR 12 (default judgment), CPR 3.4 and the relevant pre-action protocol.",
    evidence_basis=("Chronology of correspondence", "Deadlines served"),
    how_to_exploit="Step 1: Build a dated chronology of missed deadlines. Step 2: Write with a final deadline. Step 3: Apply for default judgment or an unless order.",
    predicate=any_signal(BreachSignal.LATE_RESPONSE),
    combined_with=(AngleType.DEFECTIVE_DEFENSE_ATTACK,),
)

_CIVIL_DEFECTIVE_DEFENCE = AngleSpec(
    key="defective-defence",
    angle_type=AngleType.DEFECTIVE_DEFENSE_ATTACK,
    title="Defective Defence - Strike Out or Summary Judgment",
    severity=Severity.HIGH,
    base_probability=65,
    legal_test="Does the defence fail to comply with CPR 16.5 (reasons for denial, own version)?",
    legal_basis="CPR 16.5, CPR 3.4(2)(a), CPR 24.",
    evidence_basis=("Defence", "Particulars of claim"),
    how_to_exploit="Step 1: Schedule every bare denial. Step 2: Send a CPR 18 request. Step 3: Apply to strike out or for summary judgment.",
    predicate=any_signal(BreachSignal.DEFECTIVE_DEFENCE),
)

_CIVIL_PRE_ACTION = AngleSpec(
    key="pre-action",
    angle_type=AngleType.MISSING_PRE_ACTION_ATTACK,
    title="Pre-Action Protocol Non-Compliance - Costs and Case Management Sanctions",
    severity=Severity.MEDIUM,
    base_probability=55,
    legal_test="Has the opponent failed to engage with the pre-action protocol?",
    legal_basis="Practice Direction Pre-Action Conduct paras 13-16. CPR 44.2(5)(a).",
    evidence_basis=("Letter of claim", "Absence of letter of response"),
    how_to_exploit="Step 1: Record every protocol step missed. Step 2: Ask the court to reflect it in costs. Step 3: Seek directions sanctioning the non-compliance.",
    predicate=any_of(
        any_signal(BreachSignal.NO_PRE_ACTION_LETTER),
        status_in("pre_action", EvidenceStatus.PARTIAL),
    ),
)

_CIVIL_WEAK_EXPERT = AngleSpec(
    key="weak-expert",
    angle_type=AngleType.WEAK_EXPERT_ATTACK,
    title="Weak Expert Evidence - Challenge Methodology and Expertise",
    severity=Severity.MEDIUM,
    base_probability=55,
    legal_test="Does the opponent's expert lack the relevant expertise or a proper factual basis?",
    legal_basis="CPR 35.3 and PD 35. The Ikarian Reefer [1993] 2 Lloyd's Rep 68.",
    evidence_basis=("Expert report", "Letter of instruction"),
    how_to_exploit="Step 1: Put CPR 35.6 written questions. Step 2: Highlight any missing inspection or examination. Step 3: Invite the court to prefer your expert.",
    predicate=any_signal(BreachSignal.WEAK_EXPERT),
)

_CIVIL_EXPERT_CONTRADICTION = AngleSpec(
    key="expert-contradiction",
    angle_type=AngleType.EXPERT_CONTRADICTION_ATTACK,
    title="Expert Contradiction - Exploit Conflicting Opinions",
    severity=Severity.HIGH,
    base_probability=60,
    legal_test="Do the expert opinions conflict on a point the case turns on?",
    legal_basis="CPR 35.12 (discussions between experts). Court may reject an expert whose reasoning is internally inconsistent.",
    evidence_basis=("Expert reports", "Joint statement"),
    how_to_exploit="Step 1: Request an expert discussion and joint statement. Step 2: Isolate the inconsistency. Step 3: Cross-examine on the conflict at trial.",
    predicate=any_signal(BreachSignal.EXPERT_CONFLICT),
)

_CIVIL_CAUSATION = AngleSpec(
    key="causation",
    angle_type=AngleType.CAUSATION_GAP_ATTACK,
    title="Causation Gap - Close the Defendant's Causation Argument",
    severity=Severity.MEDIUM,
    base_probability=50,
    legal_test="Can causation be established on the balance of probabilities (but for / material contribution)?",
    legal_basis="Bailey v Ministry of Defence [2008] EWCA Civ 883. Barnett v Chelsea & Kensington HMC [1969] 1 QB 428.",
    evidence_basis=("Medical expert evidence", "Chronology of treatment"),
    how_to_exploit="Step 1: Ask the expert to address causation expressly. Step 2: Consider the material contribution route. Step 3: Narrow the dispute through a joint statement.",
    predicate=any_signal(BreachSignal.CAUSATION_GAP),
)

_CIVIL_PART_36 = AngleSpec(
    key="part-36",
    angle_type=AngleType.PART_36_PRESSURE,
    title="Part 36 Pressure - Enhanced Costs and Interest",
    severity=Severity.MEDIUM,
    base_probability=60,
    legal_test="Is there a claimant Part 36 offer the defendant risks failing to beat?",
    legal_basis="CPR 36.17(4): enhanced interest, indemnity costs and an additional amount.",
    evidence_basis=("Part 36 offer letter", "Quantum schedule"),
    how_to_exploit="Step 1: Make or renew a realistic Part 36 offer. Step 2: Remind the opponent of CPR 36.17 consequences. Step 3: Use it in settlement negotiations.",
    predicate=any_signal(BreachSignal.PART_36_OFFER),
)

_CIVIL_FUTURE_LOSS = AngleSpec(
    key="future-loss",
    angle_type=AngleType.FUTURE_LOSS_MAXIMIZATION,
    title="Future Loss - Quantify Care, Earnings and Treatment",
    severity=Severity.LOW,
    base_probability=45,
    legal_test="Are future losses properly evidenced and multiplied?",
    legal_basis="Ogden Tables. Wells v Wells [1999] 1 AC 345.",
    evidence_basis=("Care report", "Employment evidence"),
    how_to_exploit="Step 1: Instruct care and employment experts. Step 2: Apply the Ogden multipliers. Step 3: Serve an updated schedule of loss.",
    predicate=any_signal(BreachSignal.FUTURE_LOSS),
)


HOUSING_ANGLES: List[AngleSpec] = [
    AngleSpec(
        key="s11-lta",
        angle_type=AngleType.S11_LTA_BREACH,
        title="Section 11 LTA 1985 - Repairing Covenant Breached After Notice",
        severity=Severity.HIGH,
        base_probability=70,
        legal_test="Was the landlord on notice of disrepair within s.11 and did it fail to repair within a reasonable time?",
        legal_basis="Landlord and Tenant Act 1985 s.11. O'Brien v Robinson [1973] AC 912 (notice).",
        evidence_basis=("Repair reports and complaints", "Surveyor's report"),
        how_to_exploit="Step 1: Evidence each report of disrepair with dates. Step 2: Obtain a surveyor's schedule of works. Step 3: Seek specific performance and damages.",
        predicate=any_signal(BreachSignal.REPAIR_NOTICE_IGNORED),
        combined_with=(AngleType.HHSRS_CATEGORY_1, AngleType.AWAAB_LAW_BREACH),
    ),
    AngleSpec(
        key="awaab",
        angle_type=AngleType.AWAAB_LAW_BREACH,
        title="Awaab's Law - Damp and Mould Hazard in Social Housing",
        severity=Severity.CRITICAL,
        base_probability=75,
        legal_test="Has a social landlord failed to investigate and remedy a damp and mould hazard within the prescribed timescales?",
        legal_basis="Social Housing (Regulation) Act 2023 s.42 (Awaab's Law), implied into social tenancies.",
        evidence_basis=("Damp/mould reports", "Landlord's inspection records"),
        how_to_exploit="Step 1: Establish the social landlord and the report date. Step 2: Show missed investigation or repair deadlines. Step 3: Plead the statutory term and seek urgent injunctive relief.",
        predicate=all_of(
            any_signal(BreachSignal.DAMP_MOULD),
            any_signal(BreachSignal.SOCIAL_HOUSING),
        ),
        combined_with=(AngleType.S11_LTA_BREACH, AngleType.HHSRS_CATEGORY_1),
    ),
    AngleSpec(
        key="hhsrs",
        angle_type=AngleType.HHSRS_CATEGORY_1,
        title="HHSRS Category 1 Hazard - Fitness for Habitation",
        severity=Severity.HIGH,
        base_probability=65,
        legal_test="Does the property contain a Category 1 hazard making it unfit for human habitation?",
        legal_basis="Homes (Fitness for Human Habitation) Act 2018. Housing Act 2004 Part 1 (HHSRS).",
        evidence_basis=("Environmental health report", "Expert HHSRS assessment"),
        how_to_exploit="Step 1: Commission an HHSRS assessment. Step 2: Involve environmental health. Step 3: Plead breach of the fitness covenant.",
        predicate=any_signal(BreachSignal.HAZARD_CATEGORY_1),
    ),
    AngleSpec(
        key="aggravated-damages",
        angle_type=AngleType.AGGRAVATED_DAMAGES_CLAIM,
        title="Aggravated Damages - Landlord Conduct",
        severity=Severity.MEDIUM,
        base_probability=45,
        legal_test="Has the landlord's conduct (harassment, threats, unlawful eviction) aggravated the tenant's injury to feelings?",
        legal_basis="Protection from Eviction Act 1977. Housing Act 1988 ss.27-28.",
        evidence_basis=("Tenant's witness statement", "Messages from the landlord"),
        how_to_exploit="Step 1: Evidence the conduct chronologically. Step 2: Plead aggravated damages expressly. Step 3: Use it to lift the settlement range.",
        predicate=any_signal(BreachSignal.AGGRAVATING_CONDUCT),
    ),
    _CIVIL_LATE_RESPONSE,
    _CIVIL_DEFECTIVE_DEFENCE,
    _CIVIL_PRE_ACTION,
    _CIVIL_WEAK_EXPERT,
]


PERSONAL_INJURY_ANGLES: List[AngleSpec] = [
    _CIVIL_LATE_RESPONSE,
    _CIVIL_DEFECTIVE_DEFENCE,
    _CIVIL_PRE_ACTION,
    _CIVIL_EXPERT_CONTRADICTION,
    _CIVIL_WEAK_EXPERT,
    _CIVIL_CAUSATION,
    _CIVIL_PART_36,
    _CIVIL_FUTURE_LOSS,
]


CLINICAL_NEGLIGENCE_ANGLES: List[AngleSpec] = PERSONAL_INJURY_ANGLES + [
    AngleSpec(
        key="records-disclosure",
        angle_type=AngleType.DISCLOSURE_FAILURE_ATTACK,
        title="Medical Records Not Disclosed - Pre-Action Disclosure Application",
        severity=Severity.HIGH,
        base_probability=65,
        legal_test="Has the trust failed to disclose medical records within the protocol period?",
        legal_basis="Pre-Action Protocol for the Resolution of Clinical Disputes. CPR 31.16. Data Protection Act 2018.",
        evidence_basis=("Records request", "Trust correspondence"),
        how_to_exploit="Step 1: Serve a subject access / protocol request. Step 2: Chase once with a deadline. Step 3: Apply under CPR 31.16.",
        predicate=any_signal(BreachSignal.DISCLOSURE_FAILURE),
    ),
]


FAMILY_ANGLES: List[AngleSpec] = [
    AngleSpec(
        key="non-compliance",
        angle_type=AngleType.NON_COMPLIANCE_ATTACK,
        title="Non-Compliance With Court Order",
        severity=Severity.HIGH,
        base_probability=65,
        legal_test="Has the respondent failed to comply with a court order?",
        legal_basis="Children Act 1989 s.11J (enforcement orders). FPR 2010 Part 4.",
        evidence_basis=("The order", "Record of breaches"),
        how_to_exploit="Step 1: Log each breach against the order. Step 2: Write requiring compliance. Step 3: Apply for enforcement or variation.",
        predicate=any_signal(BreachSignal.ORDER_BREACH),
        combined_with=(AngleType.ENFORCEMENT_OPPORTUNITY,),
    ),
    AngleSpec(
        key="enforcement",
        angle_type=AngleType.ENFORCEMENT_OPPORTUNITY,
        title="Enforcement Opportunity - Committal or Enforcement Order",
        severity=Severity.MEDIUM,
        base_probability=50,
        legal_test="Are the breaches repeated and proven to the criminal standard for committal?",
        legal_basis="FPR 2010 Part 37. Children Act 1989 s.11J.",
        evidence_basis=("Penal notice", "Breach chronology"),
        how_to_exploit="Step 1: Check the order carries a penal notice. Step 2: Prepare the breach schedule. Step 3: Issue a committal or enforcement application.",
        predicate=all_of(
            any_signal(BreachSignal.ORDER_BREACH),
            any_signal(BreachSignal.AGGRAVATING_CONDUCT, BreachSignal.LATE_RESPONSE),
        ),
    ),
    AngleSpec(
        key="late-application",
        angle_type=AngleType.LATE_APPLICATION_ATTACK,
        title="Late Application - Oppose on Delay",
        severity=Severity.MEDIUM,
        base_probability=45,
        legal_test="Has the applicant delayed unreasonably, prejudicing the respondent or the child?",
        legal_basis="FPR 2010 r.1.1 (overriding objective). Children Act 1989 s.1(2) (delay is likely to prejudice welfare).",
        evidence_basis=("Application date", "Chronology"),
        how_to_exploit="Step 1: Chronicle the delay. Step 2: Identify the prejudice. Step 3: Invite dismissal or adverse directions.",
        predicate=any_signal(BreachSignal.LATE_APPLICATION),
    ),
    AngleSpec(
        key="defective-application",
        angle_type=AngleType.DEFECTIVE_APPLICATION_ATTACK,
        title="Defective Application - Missing Supporting Evidence",
        severity=Severity.MEDIUM,
        base_probability=45,
        legal_test="Is the application unsupported by the evidence the rules require?",
        legal_basis="FPR 2010 Part 18 and PD 18A.",
        evidence_basis=("Application form", "Supporting statement"),
        how_to_exploit="Step 1: Identify what the rules require. Step 2: Raise the defect in writing. Step 3: Ask the court to refuse or adjourn.",
        predicate=any_signal(BreachSignal.DEFECTIVE_APPLICATION),
    ),
    AngleSpec(
        key="non-disclosure",
        angle_type=AngleType.NON_DISCLOSURE_ATTACK,
        title="Non-Disclosure - Adverse Inferences",
        severity=Severity.HIGH,
        base_probability=60,
        legal_test="Has a party failed to give full and frank disclosure?",
        legal_basis="Sharland v Sharland [2015] UKSC 60. FPR 2010 Part 9.",
        evidence_basis=("Form E", "Questionnaire replies"),
        how_to_exploit="Step 1: Serve a questionnaire targeting the gaps. Step 2: Seek specific disclosure. Step 3: Invite adverse inferences.",
        predicate=any_signal(BreachSignal.DISCLOSURE_FAILURE),
    ),
    AngleSpec(
        key="incomplete-disclosure",
        angle_type=AngleType.INCOMPLETE_DISCLOSURE_ATTACK,
        title="Incomplete Financial Disclosure - Specific Disclosure",
        severity=Severity.MEDIUM,
        base_probability=50,
        legal_test="Is the financial disclosure incomplete on material points?",
        legal_basis="FPR 2010 r.9.14 and Part 21.",
        evidence_basis=("Form E", "Bank statements"),
        how_to_exploit="Step 1: List the missing documents. Step 2: Seek an order for specific disclosure. Step 3: Reserve costs of the exercise.",
        predicate=any_signal(BreachSignal.INCOMPLETE_DISCLOSURE),
    ),
    AngleSpec(
        key="weak-evidence",
        angle_type=AngleType.WEAK_EVIDENCE_ATTACK,
        title="Weak Evidence - Allegations Unsupported",
        severity=Severity.MEDIUM,
        base_probability=45,
        legal_test="Are the allegations supported by evidence capable of meeting the balance of probabilities?",
        legal_basis="Re B (Children) [2008] UKHL 35 (single civil standard).",
        evidence_basis=("Statements", "Contemporaneous records"),
        how_to_exploit="Step 1: Identify each allegation and its evidential support. Step 2: Seek a Scott schedule. Step 3: Argue unsupported findings cannot be made.",
        predicate=status_in("witness_statements", EvidenceStatus.MISSING, EvidenceStatus.PARTIAL),
    ),
]


PRACTICE_AREA_ANGLES: Dict[PracticeArea, List[AngleSpec]] = {
    PracticeArea.CRIMINAL: CRIMINAL_ANGLES,
    PracticeArea.HOUSING_DISREPAIR: HOUSING_ANGLES,
    PracticeArea.PERSONAL_INJURY: PERSONAL_INJURY_ANGLES,
    PracticeArea.CLINICAL_NEGLIGENCE: CLINICAL_NEGLIGENCE_ANGLES,
    PracticeArea.FAMILY: FAMILY_ANGLES,
    PracticeArea.OTHER: [],
}


CATEGORY_ANGLES: Dict[CaseCategory, List[AngleSpec]] = {
    CaseCategory.VIOLENCE: [
        AngleSpec(
            key="violence-injury",
            angle_type=AngleType.EVIDENCE_WEAKNESS_CHALLENGE,
            title="Injury Evidence Does Not Support the Level of Charge",
            severity=Severity.MEDIUM,
            base_probability=55,
            legal_test="Does the medical evidence establish the level of harm the charge requires (ABH / GBH)?",
            legal_basis="CPS Charging Standard (Offences Against the Person). R v Brown [1994] 1 AC 212.",
            evidence_basis=("Medical records", "Photographs of injury"),
            how_to_exploit="Step 1: Request full medical records. Step 2: Compare injuries with the charging standard. Step 3: Seek a reduced charge or acquittal on the higher count.",
            predicate=status_in("medical", EvidenceStatus.MISSING, EvidenceStatus.PARTIAL),
        ),
        AngleSpec(
            key="violence-identification",
            angle_type=AngleType.IDENTIFICATION_CHALLENGE,
            title="Identification in a Fast-Moving Incident",
            severity=Severity.HIGH,
            base_probability=65,
            legal_test="Could witnesses reliably identify the defendant in a confused, fast-moving incident without footage?",
            legal_basis="R v Turnbull [1977] QB 224. PACE Code D.",
            evidence_basis=("Witness statements", "CCTV / BWV"),
            how_to_exploit="Step 1: Show the absence of footage confirming identity. Step 2: Cross-examine on duration and obstruction. Step 3: Request a Turnbull direction.",
            predicate=all_of(
                status_in("cctv", EvidenceStatus.MISSING, EvidenceStatus.PARTIAL),
                any_signal(BreachSignal.IDENTIFICATION_WEAKNESS, BreachSignal.WITNESS_INCONSISTENCY),
            ),
        ),
    ],
    CaseCategory.THEFT_DISHONESTY: [
        AngleSpec(
            key="dishonesty-element",
            angle_type=AngleType.EVIDENCE_WEAKNESS_CHALLENGE,
            title="Dishonesty Not Proved - Ivey Test",
            severity=Severity.MEDIUM,
            base_probability=50,
            legal_test="Was the conduct dishonest by the standards of ordinary decent people, given the defendant's actual state of mind?",
            legal_basis="Ivey v Genting Casinos [2017] UKSC 67. R v Barton and Booth [2020] EWCA Crim 575.",
            evidence_basis=("Interview account", "Witness statements"),
            how_to_exploit="Step 1: Establish the defendant's genuine belief. Step 2: Highlight inconsistencies in the prosecution narrative. Step 3: Argue the dishonesty element is unproved.",
            predicate=any_of(
                any_signal(BreachSignal.WITNESS_INCONSISTENCY),
                status_in("witness_statements", EvidenceStatus.PARTIAL, EvidenceStatus.MISSING),
            ),
        ),
        AngleSpec(
            key="property-continuity",
            angle_type=AngleType.CHAIN_OF_CUSTODY_BREAK,
            title="CCTV Continuity - Property and Suspect Not Linked",
            severity=Severity.MEDIUM,
            base_probability=55,
            legal_test="Can the footage relied on be proved authentic and continuous from capture to court?",
            legal_basis="R v Murphy [1990] NI 306 (authenticity of recordings). s.78 PACE.",
            evidence_basis=("CCTV export log", "Continuity statements"),
            how_to_exploit="Step 1: Request native exports and export logs. Step 2: Identify the continuity gap. Step 3: Challenge admissibility of the footage.",
            predicate=any_of(
                any_signal(BreachSignal.CONTINUITY_BREAK),
                status_in("cctv", EvidenceStatus.PARTIAL),
            ),
        ),
    ],
    CaseCategory.DRUGS: [
        AngleSpec(
            key="drugs-continuity",
            angle_type=AngleType.CHAIN_OF_CUSTODY_BREAK,
            title="Drugs Exhibit Continuity Break",
            severity=Severity.HIGH,
            base_probability=65,
            legal_test="Can the prosecution prove the substance analysed is the substance seized?",
            legal_basis="Misuse of Drugs Act 1971. Continuity must be proved to the criminal standard.",
            evidence_basis=("Exhibit bag numbers", "Lab submission forms"),
            how_to_exploit="Step 1: Compare seal numbers across seizure, storage and lab. Step 2: Identify the gap. Step 3: Apply to exclude the analysis.",
            predicate=any_signal(BreachSignal.CONTINUITY_BREAK),
        ),
        AngleSpec(
            key="drugs-possession",
            angle_type=AngleType.EVIDENCE_WEAKNESS_CHALLENGE,
            title="Possession and Knowledge Not Proved",
            severity=Severity.MEDIUM,
            base_probability=50,
            legal_test="Is there evidence of knowledge and control as well as proximity?",
            legal_basis="Warner v Metropolitan Police Commissioner [1969] 2 AC 256. Misuse of Drugs Act 1971 s.28.",
            evidence_basis=("Forensic reports", "Search record"),
            how_to_exploit="Step 1: Show absence of forensic linkage. Step 2: Raise the s.28 defence where available. Step 3: Submit knowledge is unproved.",
            predicate=status_in("exhibits", EvidenceStatus.UNKNOWN, EvidenceStatus.MISSING),
        ),
    ],
    CaseCategory.ROAD_TRAFFIC: [
        AngleSpec(
            key="nip-time-limit",
            angle_type=AngleType.TECHNICAL_DEFENSE,
            title="Notice of Intended Prosecution / Time Limit Defence",
            severity=Severity.HIGH,
            base_probability=60,
            legal_test="Was the NIP served within 14 days and were proceedings issued within time?",
            legal_basis="Road Traffic Offenders Act 1988 s.1 and s.6. Magistrates' Courts Act 1980 s.127.",
            evidence_basis=("NIP", "Summons date"),
            how_to_exploit="Step 1: Establish service dates. Step 2: Raise non-compliance at first appearance. Step 3: Invite dismissal.",
            predicate=any_signal(BreachSignal.PROCEDURAL_DEFECT),
        ),
        AngleSpec(
            key="device-continuity",
            angle_type=AngleType.CHAIN_OF_CUSTODY_BREAK,
            title="Device Calibration / Sample Continuity",
            severity=Severity.MEDIUM,
            base_probability=55,
            legal_test="Was the device calibrated and the sample handled in a way that supports the reading?",
            legal_basis="Road Traffic Act 1988 ss.7-8. DPP v Wood [2006] EWHC 32 (Admin).",
            evidence_basis=("Calibration certificates", "Sample labels"),
            how_to_exploit="Step 1: Request calibration and maintenance records. Step 2: Identify the gap. Step 3: Challenge reliability of the reading.",
            predicate=any_signal(BreachSignal.CONTINUITY_BREAK),
        ),
    ],
    CaseCategory.PUBLIC_ORDER: [
        AngleSpec(
            key="bwv-contradiction",
            angle_type=AngleType.CONTRADICTION_EXPLOITATION,
            title="Body-Worn Video Contradicts Officer Account",
            severity=Severity.HIGH,
            base_probability=65,
            legal_test="Does the footage contradict the officers' written accounts of the words or behaviour alleged?",
            legal_basis="Public Order Act 1986 ss.4-5 require proof of the specific words/behaviour and the mental element.",
            evidence_basis=("BWV footage", "Officer statements"),
            how_to_exploit="Step 1: Obtain all BWV with audio. Step 2: Transcribe and compare with statements. Step 3: Cross-examine on each discrepancy.",
            predicate=all_of(
                status_in("cctv", EvidenceStatus.PRESENT, EvidenceStatus.PARTIAL),
                any_signal(BreachSignal.WITNESS_INCONSISTENCY),
            ),
        ),
    ],
    CaseCategory.SEXUAL_OFFENCE: [
        AngleSpec(
            key="third-party-material",
            angle_type=AngleType.DISCLOSURE_FAILURE_STAY,
            title="Third-Party Material Not Disclosed",
            severity=Severity.HIGH,
            base_probability=65,
            legal_test="Has relevant third-party material (phone downloads, records) been sought and disclosed?",
            legal_basis="CPIA 1996 Code of Practice para 3.5. R v Alibhai [2004] EWCA Crim 681. Attorney General's Guidelines on Disclosure.",
            evidence_basis=("Digital download reports", "Third-party records requests"),
            how_to_exploit="Step 1: Identify the third-party material. Step 2: Request it with reasons. Step 3: Apply for a witness summons or a stay.",
            predicate=any_signal(BreachSignal.DISCLOSURE_FAILURE),
        ),
    ],
    CaseCategory.CRIMINAL_GENERAL: [],
    CaseCategory.HOUSING_DISREPAIR: [],
    CaseCategory.PERSONAL_INJURY: [],
    CaseCategory.CLINICAL_NEGLIGENCE: [],
    CaseCategory.FAMILY: [],
    CaseCategory.OTHER: [],
}


CATEGORY_PRACTICE_AREA: Dict[CaseCategory, PracticeArea] = {
    CaseCategory.VIOLENCE: PracticeArea.CRIMINAL,
    CaseCategory.THEFT_DISHONESTY: PracticeArea.CRIMINAL,
    CaseCategory.DRUGS: PracticeArea.CRIMINAL,
    CaseCategory.ROAD_TRAFFIC: PracticeArea.CRIMINAL,
    CaseCategory.PUBLIC_ORDER: PracticeArea.CRIMINAL,
    CaseCategory.SEXUAL_OFFENCE: PracticeArea.CRIMINAL,
    CaseCategory.CRIMINAL_GENERAL: PracticeArea.CRIMINAL,
    CaseCategory.HOUSING_DISREPAIR: PracticeArea.HOUSING_DISREPAIR,
    CaseCategory.PERSONAL_INJURY: PracticeArea.PERSONAL_INJURY,
    CaseCategory.CLINICAL_NEGLIGENCE: PracticeArea.CLINICAL_NEGLIGENCE,
    CaseCategory.FAMILY: PracticeArea.FAMILY,
    CaseCategory.OTHER: PracticeArea.OTHER,
}

DEFAULT_CATEGORY_FOR_AREA: Dict[PracticeArea, CaseCategory] = {
    PracticeArea.CRIMINAL: CaseCategory.CRIMINAL_GENERAL,
    PracticeArea.HOUSING_DISREPAIR: CaseCategory.HOUSING_DISREPAIR,
    PracticeArea.PERSONAL_INJURY: CaseCategory.PERSONAL_INJURY,
    PracticeArea.CLINICAL_NEGLIGENCE: CaseCategory.CLINICAL_NEGLIGENCE,
    PracticeArea.FAMILY: CaseCategory.FAMILY,
    PracticeArea.OTHER: CaseCategory.OTHER,
}


# =============================================================================
# Category resolution
# =============================================================================

# Ordered: first match wins
CATEGORY_KEYWORDS: List[Tuple[CaseCategory, List[str]]] = [
    (CaseCategory.SEXUAL_OFFENCE, [r"\brape\b", r"sexual (?:assault|offen[cs]e|activity)", r"\bindecen"]),
    (CaseCategory.ROAD_TRAFFIC, [r"drink[- ]driv", r"drug[- ]driv", r"dangerous driving", r"careless driving", r"\bspeeding\b", r"road traffic(?! accident)", r"excess alcohol", r"driving while disqualified"]),
    (CaseCategory.DRUGS, [r"\bdrugs?\b", r"controlled drug", r"misuse of drugs", r"intent to supply", r"\bcannabis\b", r"\bcocaine\b", r"\bheroin\b"]),
    (CaseCategory.PUBLIC_ORDER, [r"public order", r"\baffray\b", r"\bviolent disorder\b", r"\briot\b", r"section [45]a? public order"]),
    (CaseCategory.VIOLENCE, [r"\bassault\b", r"\babh\b", r"\bgbh\b", r"actual bodily harm", r"grievous bodily harm", r"\bwounding\b", r"\bmurder\b", r"\bmanslaughter\b", r"\bbattery\b", r"\bviolence\b"]),
    (CaseCategory.THEFT_DISHONESTY, [r"\btheft\b", r"\bburglary\b", r"\brobbery\b", r"\bfraud\b", r"\bhandling stolen\b", r"\bshoplifting\b", r"\bdishonest"]),
    (CaseCategory.HOUSING_DISREPAIR, [r"disrepair", r"housing", r"damp", r"mou?ld"]),
    (CaseCategory.CLINICAL_NEGLIGENCE, [r"clinical negligence", r"medical negligence", r"clin[- ]?neg"]),
    (CaseCategory.PERSONAL_INJURY, [r"personal injury", r"road traffic accident", r"\brta\b", r"accident at work", r"slip(?:ping)? and trip", r"public liability"]),
    (CaseCategory.FAMILY, [r"\bfamily\b", r"child arrangements", r"\bdivorce\b", r"financial remedy", r"\bcustody of\b", r"non[- ]molestation"]),
]

_COMPILED_CATEGORY_KEYWORDS = [
    (category, [re.compile(p) for p in patterns])
    for category, patterns in CATEGORY_KEYWORDS
]


def resolve_category(raw: Optional[object], practice_area: Optional[PracticeArea] = None) -> CaseCategory:
    """
    Resolve an offence / claim description onto the closed category taxonomy.

    - A CaseCategory or its exact value is returned as-is
    - Free text is matched against CATEGORY_KEYWORDS
    - No category at all falls back to the practice area's default
    - Anything unrecognized resolves to OTHER

    Never raises.
    """
    if isinstance(raw, CaseCategory):
        return raw

    if raw is None or (isinstance(raw, str) and not raw.strip()):
        if practice_area is not None:
            try:
                return DEFAULT_CATEGORY_FOR_AREA[PracticeArea(practice_area)]
            except (ValueError, KeyError):
                return CaseCategory.OTHER
        return CaseCategory.OTHER

    if not isinstance(raw, str):
        return CaseCategory.OTHER

    text = raw.strip().lower()
    try:
        return CaseCategory(text)
    except ValueError:
        pass

    for category, patterns in _COMPILED_CATEGORY_KEYWORDS:
        if any(p.search(text) for p in patterns):
            return category

    logger.info(f"Unrecognized case category '{raw[:60]}' - using generic catalogue")
    return CaseCategory.OTHER


def practice_area_for(category: CaseCategory) -> PracticeArea:
    try:
        return CATEGORY_PRACTICE_AREA[CaseCategory(category)]
    except (ValueError, KeyError):
        raise CatalogueError(f"category {category!r} is not in catalogue {CATALOGUE_VERSION}")


def catalogue_for(category: CaseCategory) -> List[AngleSpec]:
    """
    Candidate angles for a category: generic + practice area + category.

    Raises:
        CatalogueError: category is not part of the closed catalogue
    """
    area = practice_area_for(category)
    specs = GENERIC_ANGLES + PRACTICE_AREA_ANGLES[area] + CATEGORY_ANGLES[CaseCategory(category)]

    seen = set()
    unique = []
    for spec in specs:
        if spec.key not in seen:
            seen.add(spec.key)
            unique.append(spec)
    return unique


def allowed_angle_types(category: CaseCategory) -> List[AngleType]:
    """Angle types the category's catalogue can emit (order of first appearance)"""
    types: List[AngleType] = []
    for spec in catalogue_for(category):
        if spec.angle_type not in types:
            types.append(spec.angle_type)
    return types


# =============================================================================
# Angle -> loophole projection
# =============================================================================

ANGLE_TO_LOOPHOLE: Dict[AngleType, LoopholeType] = {
    AngleType.PACE_BREACH_EXCLUSION: LoopholeType.PACE_BREACH,
    AngleType.DISCLOSURE_FAILURE_STAY: LoopholeType.DISCLOSURE_FAILURE,
    AngleType.EVIDENCE_WEAKNESS_CHALLENGE: LoopholeType.EVIDENCE_WEAKNESS,
    AngleType.IDENTIFICATION_CHALLENGE: LoopholeType.IDENTIFICATION_ISSUE,
    AngleType.CHAIN_OF_CUSTODY_BREAK: LoopholeType.CHAIN_OF_CUSTODY,
    AngleType.HEARSAY_CHALLENGE: LoopholeType.HEARSAY,
    AngleType.BAD_CHARACTER_EXCLUSION: LoopholeType.BAD_CHARACTER,
    AngleType.NO_CASE_TO_ANSWER: LoopholeType.PROCEDURAL_ERROR,
    AngleType.CONTRADICTION_EXPLOITATION: LoopholeType.CONTRADICTION,
    AngleType.EXPERT_CONTRADICTION_ATTACK: LoopholeType.CONTRADICTION,
    AngleType.WEAK_EXPERT_ATTACK: LoopholeType.EVIDENCE_WEAKNESS,
    AngleType.CAUSATION_GAP_ATTACK: LoopholeType.EVIDENCE_WEAKNESS,
    AngleType.WEAK_EVIDENCE_ATTACK: LoopholeType.EVIDENCE_WEAKNESS,
    AngleType.DISCLOSURE_FAILURE_ATTACK: LoopholeType.DISCLOSURE_FAILURE,
    AngleType.NON_DISCLOSURE_ATTACK: LoopholeType.DISCLOSURE_FAILURE,
    AngleType.INCOMPLETE_DISCLOSURE_ATTACK: LoopholeType.DISCLOSURE_FAILURE,
}


def loophole_type_for(angle_type: AngleType) -> LoopholeType:
    """Unmapped angle types collapse to procedural_error"""
    return ANGLE_TO_LOOPHOLE.get(angle_type, DEFAULT_LOOPHOLE_TYPE)


# =============================================================================
# Nuclear options
# =============================================================================

OptionPredicate = Callable[[List[StrategyAngle]], bool]


def angles_of_type_at_least(n: int, *types: AngleType) -> OptionPredicate:
    """At least n distinct angles (by id) of the given types"""
    def _pred(angles: List[StrategyAngle]) -> bool:
        return len({a.id for a in angles if a.angle_type in types}) >= n
    return _pred


def any_angle(*types: AngleType) -> OptionPredicate:
    def _pred(angles: List[StrategyAngle]) -> bool:
        return any(a.angle_type in types for a in angles)
    return _pred


def any_critical_angle() -> OptionPredicate:
    def _pred(angles: List[StrategyAngle]) -> bool:
        return any(a.severity == Severity.CRITICAL for a in angles)
    return _pred


def either(*predicates: OptionPredicate) -> OptionPredicate:
    def _pred(angles: List[StrategyAngle]) -> bool:
        return any(p(angles) for p in predicates)
    return _pred


@dataclass(frozen=True)
class NuclearOptionSpec:
    option: NuclearOption
    is_viable: OptionPredicate


def _option(
    key: str,
    option: str,
    risk: RiskLevel,
    reward: RewardCategory,
    when_to_use: str,
    risk_reward_analysis: str,
    ready_to_use_text: str,
    authorities: List[str],
    is_viable: OptionPredicate,
) -> NuclearOptionSpec:
    return NuclearOptionSpec(
        option=NuclearOption(
            id=key,
            option=option,
            risk=risk,
            reward=reward,
            when_to_use=when_to_use,
            risk_reward_analysis=risk_reward_analysis,
            ready_to_use_text=ready_to_use_text,
            authorities=authorities,
        ),
        is_viable=is_viable,
    )


_BREACH_ANGLES = (AngleType.PACE_BREACH_EXCLUSION, AngleType.DISCLOSURE_FAILURE_STAY)
_EXCLUSION_ANGLES = (
    AngleType.PACE_BREACH_EXCLUSION,
    AngleType.IDENTIFICATION_CHALLENGE,
    AngleType.CHAIN_OF_CUSTODY_BREAK,
    AngleType.HEARSAY_CHALLENGE,
)

NUCLEAR_OPTIONS: Dict[PracticeArea, List[NuclearOptionSpec]] = {
    PracticeArea.CRIMINAL: [
        _option(
            key="abuse-of-process-stay",
            option="Abuse of Process - Stay Proceedings",
            risk=RiskLevel.VERY_HIGH,
            reward=RewardCategory.STAY_GRANTED,
            when_to_use="Multiple PACE breaches + disclosure failures + evidence issues",
            risk_reward_analysis="High risk (judge may reject), but if successful case dismissed entirely",
            ready_to_use_text=(
                "Your Honour, I submit this prosecution is an abuse of process and should be stayed "
                "under the court's inherent jurisdiction.\n\n"
                "The prosecution has committed multiple serious breaches:\n"
                "- PACE Code breaches (interviews, searches, detention)\n"
                "- Serious disclosure failures (material evidence not provided)\n"
                "- Evidence obtained unfairly\n\n"
                "Taken together, these failures mean a fair trial is impossible.\n\n"
                "I submit the case should be stayed as an abuse of process."
            ),
            authorities=["R v Horseferry Road Magistrates [1994] AC 42", "R v H [2004] UKHL 3"],
            is_viable=angles_of_type_at_least(2, *_BREACH_ANGLES),
        ),
        _option(
            key="no-case-to-answer",
            option="No Case to Answer - Half-Time Submission",
            risk=RiskLevel.HIGH,
            reward=RewardCategory.CASE_DISMISSED,
            when_to_use="Prosecution evidence is weak/inadmissible at close of prosecution case",
            risk_reward_analysis="Medium risk (if fails, defence still runs), but if successful no defence needed",
            ready_to_use_text=(
                "Your Honour, I submit there is no case to answer at the close of the prosecution case.\n\n"
                "The prosecution evidence is insufficient. No reasonable jury, properly directed, "
                "could convict on this evidence.\n\n"
                "[Specific weaknesses to be inserted]\n\n"
                "I submit the case should be dismissed."
            ),
            authorities=["R v Galbraith [1981] 1 WLR 1039"],
            is_viable=either(any_critical_angle(), any_angle(AngleType.NO_CASE_TO_ANSWER)),
        ),
        _option(
            key="exclusion-chain-reaction",
            option="Evidence Exclusion Chain Reaction",
            risk=RiskLevel.HIGH,
            reward=RewardCategory.EVIDENCE_EXCLUDED,
            when_to_use="Multiple PACE breaches affecting multiple evidence types",
            risk_reward_analysis="Exclude interview, then identification, then forensics: no evidence left",
            ready_to_use_text=(
                "Your Honour, I make multiple applications under section 78 PACE to exclude evidence:\n\n"
                "1. Interview evidence - obtained in breach of Code C\n"
                "2. Identification evidence - obtained in breach of Code D\n"
                "3. Forensic evidence - chain of custody broken\n\n"
                "If excluded, I will immediately submit there is no case to answer."
            ),
            authorities=["R v Keenan [1990] 2 QB 54", "R v Turnbull [1977] QB 224"],
            is_viable=angles_of_type_at_least(2, *_EXCLUSION_ANGLES),
        ),
        _option(
            key="disclosure-stay",
            option="Disclosure Stay - Last Resort",
            risk=RiskLevel.VERY_HIGH,
            reward=RewardCategory.STAY_GRANTED,
            when_to_use="Critical evidence missing, requested multiple times",
            risk_reward_analysis="High risk (judge may order disclosure instead), but if successful case stayed",
            ready_to_use_text=(
                "Your Honour, I submit these proceedings should be stayed due to serious disclosure failures.\n\n"
                "Critical evidence has been requested [X] times and not provided:\n"
                "- [List missing evidence]\n\n"
                "The defence cannot properly prepare. I submit the case should be stayed."
            ),
            authorities=["R v H [2004] UKHL 3"],
            is_viable=any_angle(AngleType.DISCLOSURE_FAILURE_STAY),
        ),
        _option(
            key="article-6-challenge",
            option="Human Rights Challenge - Article 6 ECHR",
            risk=RiskLevel.EXTREME,
            reward=RewardCategory.STAY_GRANTED,
            when_to_use="Multiple procedural failures + disclosure gaps",
            risk_reward_analysis="Very high risk (rarely succeeds alone), but if successful case stayed",
            ready_to_use_text=(
                "Your Honour, I submit the defendant's right to a fair trial under Article 6 ECHR has been breached.\n\n"
                "The prosecution has:\n"
                "- Failed to provide material disclosure\n"
                "- Obtained evidence in breach of PACE\n"
                "- Committed multiple procedural errors\n\n"
                "A fair trial is impossible. I submit the case should be stayed."
            ),
            authorities=["R v H [2004] UKHL 3", "Article 6 ECHR"],
            is_viable=either(
                any_angle(AngleType.HUMAN_RIGHTS_BREACH),
                angles_of_type_at_least(2, *_BREACH_ANGLES),
            ),
        ),
    ],
    PracticeArea.HOUSING_DISREPAIR: [
        _option(
            key="unless-order",
            option="Strike Out Defence - Unless Order",
            risk=RiskLevel.HIGH,
            reward=RewardCategory.MAJOR_DAMAGE,
            when_to_use="Landlord failed to serve defence or respond to pre-action protocol",
            risk_reward_analysis="High risk, but if successful defence struck out, judgment entered",
            ready_to_use_text=(
                "I apply for an unless order striking out the defence under CPR 3.4.\n\n"
                "The defendant has failed to comply with [deadline/direction] despite reminders.\n\n"
                "I ask that unless the defendant complies within 7 days, the defence be struck out."
            ),
            authorities=["CPR 3.4", "Biguzzi v Rank Leisure [1999] 1 WLR 1926"],
            is_viable=any_angle(
                AngleType.LATE_RESPONSE_ATTACK,
                AngleType.DEFECTIVE_DEFENSE_ATTACK,
                AngleType.MISSING_PRE_ACTION_ATTACK,
            ),
        ),
        _option(
            key="awaab-statutory-breach",
            option="Awaab's Law Violation - Statutory Breach",
            risk=RiskLevel.HIGH,
            reward=RewardCategory.MAJOR_DAMAGE,
            when_to_use="Damp/mould in social housing, landlord failed to act",
            risk_reward_analysis="Medium risk, but statutory breach supports liability",
            ready_to_use_text=(
                "The defendant has breached the Awaab's Law term implied into the tenancy.\n\n"
                "The hazard was reported on [date]; the landlord failed to investigate and repair "
                "within the prescribed periods.\n\n"
                "I seek an injunction requiring works and damages for the breach."
            ),
            authorities=["Social Housing (Regulation) Act 2023 s.42"],
            is_viable=any_angle(AngleType.AWAAB_LAW_BREACH),
        ),
    ],
    PracticeArea.PERSONAL_INJURY: [
        _option(
            key="part-36-strike-out",
            option="Strike Out Defence - Part 36 Pressure",
            risk=RiskLevel.HIGH,
            reward=RewardCategory.MAJOR_DAMAGE,
            when_to_use="Defendant failed to beat Part 36 offer, defence is weak",
            risk_reward_analysis="High risk, but if successful defence struck out, enhanced costs",
            ready_to_use_text=(
                "I apply to strike out the defence under CPR 3.4.\n\n"
                "The defence discloses no reasonable grounds for defending the claim, and the "
                "claimant's Part 36 offer remains open.\n\n"
                "I ask for judgment and CPR 36.17 consequences."
            ),
            authorities=["CPR 3.4", "CPR Part 36"],
            is_viable=any_angle(
                AngleType.PART_36_PRESSURE,
                AngleType.DEFECTIVE_DEFENSE_ATTACK,
                AngleType.LATE_RESPONSE_ATTACK,
            ),
        ),
        _option(
            key="exclude-expert",
            option="Expert Contradiction - Exclude Expert",
            risk=RiskLevel.HIGH,
            reward=RewardCategory.EVIDENCE_EXCLUDED,
            when_to_use="Defendant's expert contradicts their own report or is unreliable",
            risk_reward_analysis="Medium risk, but if successful expert excluded, defence weakened",
            ready_to_use_text=(
                "I apply to exclude the defendant's expert evidence.\n\n"
                "The expert's opinion is internally inconsistent and falls outside the expert's "
                "area of expertise.\n\n"
                "I ask that permission under CPR 35.4 be revoked."
            ),
            authorities=["CPR 35", "Ikarian Reefer [1993] 2 Lloyd's Rep 68"],
            is_viable=any_angle(AngleType.EXPERT_CONTRADICTION_ATTACK, AngleType.WEAK_EXPERT_ATTACK),
        ),
    ],
    PracticeArea.FAMILY: [
        _option(
            key="committal",
            option="Enforcement - Committal Application",
            risk=RiskLevel.HIGH,
            reward=RewardCategory.MAJOR_DAMAGE,
            when_to_use="Opponent has repeatedly breached court orders",
            risk_reward_analysis="High risk, but if successful opponent in contempt, sanctions",
            ready_to_use_text=(
                "I apply for committal for breach of court orders.\n\n"
                "The respondent has:\n"
                "- Breached [specific orders] on [X] occasions\n"
                "- Failed to comply despite warnings\n\n"
                "I submit committal is appropriate."
            ),
            authorities=["Family Procedure Rules 2010, Part 37"],
            is_viable=any_angle(AngleType.NON_COMPLIANCE_ATTACK, AngleType.ENFORCEMENT_OPPORTUNITY),
        ),
    ],
    PracticeArea.OTHER: [],
}
NUCLEAR_OPTIONS[PracticeArea.CLINICAL_NEGLIGENCE] = NUCLEAR_OPTIONS[PracticeArea.PERSONAL_INJURY]


NUCLEAR_WARNINGS = [
    "Nuclear options are extreme tactics - use only when normal tactics won't work",
    "High risk of failure - have fallback strategy ready",
    "May damage relationship with court/prosecution if unsuccessful",
    "Use only when case is desperate or prosecution is pushing hard",
]


def nuclear_options_for(category: CaseCategory) -> List[NuclearOptionSpec]:
    """Nuclear option catalogue for the category's practice area"""
    return NUCLEAR_OPTIONS[practice_area_for(category)]


# =============================================================================
# Catalogue validation (runs at import)
# =============================================================================

def validate_catalogue() -> None:
    """
    Check the closed-catalogue invariants.

    Raises:
        CatalogueError: on any malformed table
    """
    for category in CaseCategory:
        if category not in CATEGORY_PRACTICE_AREA or category not in CATEGORY_ANGLES:
            raise CatalogueError(f"category {category.value} has no catalogue entry")
        if DEFAULT_ANGLE_TYPE not in allowed_angle_types(category):
            raise CatalogueError(f"default angle type missing from {category.value} catalogue")

    for area in PracticeArea:
        if area not in PRACTICE_AREA_ANGLES or area not in NUCLEAR_OPTIONS:
            raise CatalogueError(f"practice area {area.value} has no catalogue entry")

    # Civil specs are shared between areas; a key must always name the same spec
    by_key: Dict[str, AngleSpec] = {}
    tables = [GENERIC_ANGLES] + list(PRACTICE_AREA_ANGLES.values()) + list(CATEGORY_ANGLES.values())
    for spec in (s for table in tables for s in table):
        if by_key.setdefault(spec.key, spec) is not spec:
            raise CatalogueError(f"duplicate angle key: {spec.key}")
        if not 0 <= spec.base_probability <= MAX_WIN_PROBABILITY:
            raise CatalogueError(f"angle {spec.key} base probability out of range")


validate_catalogue()
