"""
Redaction - Strip personal data and engine output before generative calls
=========================================================================

Document text leaves the process only after redaction. Each match is
replaced with a stable numbered placeholder ([EMAIL_1], [PHONE_2], ...)
and the mapping is returned so callers can restore values locally.

Engine output pasted back into a document (angle dumps, cache payloads)
is dropped as well, so a previous analysis is never re-analysed as input.

Usage:
    from casebrain_engine.redaction import get_redactor
    result = get_redactor().redact(raw_text)
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple


# =============================================================================
# System Markers - Indicate engine output (not case material)
# =============================================================================

SYSTEM_MARKERS: Set[str] = {
    "win_probability",
    "success_probability",
    "catalogue_version",
    "supporting_signals",
    "loophole_type",
    "angle_type",
    "casebrain:llm:",
    "can_generate_analysis",
    "reason_codes",
}


# =============================================================================
# PII Patterns (order matters: earlier patterns claim text first)
# =============================================================================

PII_PATTERNS: List[Tuple[str, re.Pattern]] = [
    ("EMAIL", re.compile(r"\b[\w.+-]+@[\w-]+(?:\.[\w-]+)+\b")),
    ("NI_NUMBER", re.compile(r"\b[A-CEGHJ-PR-TW-Z]{2}\s?\d{2}\s?\d{2}\s?\d{2}\s?[A-D]\b", re.I)),
    ("NHS_NUMBER", re.compile(r"\b\d{3}\s?\d{3}\s?\d{4}\b")),
    ("PHONE", re.compile(r"(?:\+44\s?\(?0?\)?\s?|\b0)\d{2,4}[\s-]?\d{3,4}[\s-]?\d{3,4}\b")),
    ("DOB", re.compile(
        r"\b(?:dob|d\.o\.b\.?|date of birth)[:\s]*\d{1,2}[/.-]\d{1,2}[/.-]\d{2,4}\b", re.I
    )),
    ("POSTCODE", re.compile(r"\b[A-Z]{1,2}\d[A-Z\d]?\s?\d[A-Z]{2}\b", re.I)),
    ("NAME", re.compile(r"\b(?:Mr|Mrs|Ms|Miss|Dr)\.?\s+[A-Z][a-z]+(?:\s+[A-Z][a-z]+)?")),
]


@dataclass
class RedactionResult:
    """Redacted text plus placeholder -> original mapping"""
    redacted_text: str
    mapping: Dict[str, str] = field(default_factory=dict)

    @property
    def redaction_count(self) -> int:
        return len(self.mapping)


def contains_system_text(text: str) -> bool:
    """True if text contains engine-output markers"""
    if not text:
        return False
    return any(marker in text for marker in SYSTEM_MARKERS)


def strip_system_lines(text: str) -> str:
    """Drop every line carrying an engine-output marker"""
    if not text:
        return ""
    lines = [line for line in text.split("\n") if not contains_system_text(line)]
    return "\n".join(lines).strip()


class PatternRedactor:
    """
    Regex redactor for UK case material.

    Placeholders are numbered per kind and reused for repeated values, so
    the same email always maps to the same [EMAIL_n] within one call.
    """

    def __init__(self, patterns: Optional[List[Tuple[str, re.Pattern]]] = None):
        self.patterns = patterns or PII_PATTERNS

    def redact(self, text: str) -> RedactionResult:
        if not text:
            return RedactionResult(redacted_text="")

        mapping: Dict[str, str] = {}
        reverse: Dict[str, str] = {}
        counters: Dict[str, int] = {}

        def _sub(kind: str):
            def _replace(match: re.Match) -> str:
                value = match.group(0)
                if value in reverse:
                    return reverse[value]
                counters[kind] = counters.get(kind, 0) + 1
                placeholder = f"[{kind}_{counters[kind]}]"
                reverse[value] = placeholder
                mapping[placeholder] = value
                return placeholder
            return _replace

        clean = strip_system_lines(text)
        for kind, pattern in self.patterns:
            clean = pattern.sub(_sub(kind), clean)

        return RedactionResult(redacted_text=clean, mapping=mapping)


def restore(text: str, mapping: Dict[str, str]) -> str:
    """Put original values back in place of placeholders"""
    for placeholder, value in mapping.items():
        text = text.replace(placeholder, value)
    return text


_redactor: Optional[PatternRedactor] = None


def get_redactor() -> PatternRedactor:
    global _redactor
    if _redactor is None:
        _redactor = PatternRedactor()
    return _redactor
