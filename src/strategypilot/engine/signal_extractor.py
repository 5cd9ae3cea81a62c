"""
StrategyPilot Evidence Signal Extractor

Derives the categorical EvidenceSignals vector from case documents by
keyword rules over each document's name, raw text and extracted JSON.

Key features:
- CCTV sequence, identification sources and strength, observation conditions
- Medical injury pattern and weapon use
- Disclosure completeness with a list of commonly missing items
- PACE compliance from interview and custody material
- Prosecution strength from counts of strong and weak indicators

A closed analysis gate, or no documents, yields all-unknown signals.
Structured signals supplied by the caller take precedence over extraction.
"""
from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Optional

from ..models import (
    AnalysisGate,
    CaseDocument,
    CctvSequence,
    DisclosureCompleteness,
    EvidenceSignals,
    IdConditions,
    IdStrength,
    MedicalPattern,
    PaceCompliance,
    ProsecutionStrength,
    WeaponUse,
)

logger = logging.getLogger(__name__)


@lru_cache(maxsize=128)
def _term(term: str) -> re.Pattern:
    return re.compile(r"\b" + re.escape(term))


def _has(text: str, *terms: str) -> bool:
    """True if any term starts a word in the text."""
    return any(_term(term).search(text) for term in terms)


def document_corpus(documents: list[CaseDocument]) -> str:
    """Lowercased name, raw text and extracted JSON of every document."""
    return " ".join(doc.text() for doc in documents)


def extract_evidence_signals(
    gate: Optional[AnalysisGate],
    documents: Optional[list[CaseDocument]],
) -> EvidenceSignals:
    """
    Extract evidence signals from case documents.

    Args:
        gate: Analysis gate; a closed gate yields all-unknown signals
        documents: Case documents to scan

    Returns:
        EvidenceSignals with every field set
    """
    if gate is None or not gate.is_open or not documents:
        return EvidenceSignals.unknown()

    text = document_corpus(documents)

    if _has(text, "cctv", "camera", "footage"):
        if _has(text, "prolonged", "sustained"):
            cctv = CctvSequence.PROLONGED
        elif _has(text, "brief", "single"):
            cctv = CctvSequence.BRIEF
        else:
            cctv = CctvSequence.UNKNOWN
    else:
        cctv = CctvSequence.MISSING

    id_sources = sum([
        _has(text, "witness"),
        _has(text, "identification"),
        _has(text, "viper"),
        _has(text, "line-up"),
        cctv != CctvSequence.MISSING,
    ])
    if id_sources >= 3:
        id_strength = IdStrength.STRONG
    elif id_sources >= 1:
        id_strength = IdStrength.WEAK
    else:
        id_strength = IdStrength.UNKNOWN

    if _has(text, "poor lighting", "dark", "glimpse"):
        id_conditions = IdConditions.POOR
    elif _has(text, "well lit", "good lighting", "clear view"):
        id_conditions = IdConditions.GOOD
    else:
        id_conditions = IdConditions.UNKNOWN

    medical = MedicalPattern.UNKNOWN
    if _has(text, "medical", "injury", "hospital"):
        if _has(text, "sustained", "multiple", "repeated"):
            medical = MedicalPattern.SUSTAINED
        elif _has(text, "single", "brief", "one"):
            medical = MedicalPattern.SINGLE_BRIEF

    if _has(text, "weapon", "knife", "blade"):
        if _has(text, "sustained", "targeted", "repeated"):
            weapon = WeaponUse.SUSTAINED_TARGETED
        elif _has(text, "brief", "incidental"):
            weapon = WeaponUse.BRIEF_INCIDENTAL
        else:
            weapon = WeaponUse.UNKNOWN
    else:
        weapon = WeaponUse.NONE

    if _has(text, "mg6", "disclosure", "schedule", "unused material"):
        disclosure = DisclosureCompleteness.COMPLETE
    else:
        disclosure = DisclosureCompleteness.GAPS

    gaps = []
    if not _has(text, "cctv", "camera"):
        gaps.append("CCTV footage")
    if not _has(text, "mg6", "disclosure schedule"):
        gaps.append("MG6 schedules")
    if not _has(text, "interview", "caution"):
        gaps.append("Interview recording")
    if not _has(text, "custody", "pace"):
        gaps.append("Custody record")

    interview = _has(text, "interview", "caution")
    custody = _has(text, "custody", "pace")
    if _has(text, "breach", "non-compliant"):
        pace = PaceCompliance.BREACHES
    elif interview or custody:
        pace = PaceCompliance.COMPLIANT
    else:
        pace = PaceCompliance.UNKNOWN

    strong = sum([
        id_strength == IdStrength.STRONG,
        medical == MedicalPattern.SUSTAINED,
        cctv == CctvSequence.PROLONGED,
        weapon == WeaponUse.SUSTAINED_TARGETED,
    ])
    weak = sum([
        id_strength == IdStrength.WEAK,
        disclosure == DisclosureCompleteness.GAPS,
        pace == PaceCompliance.BREACHES,
    ])
    if strong >= 2:
        prosecution = ProsecutionStrength.STRONG
    elif weak >= 2:
        prosecution = ProsecutionStrength.WEAK
    else:
        prosecution = ProsecutionStrength.MODERATE

    return EvidenceSignals(
        id_strength=id_strength,
        id_sources=id_sources,
        id_conditions=id_conditions,
        medical_evidence=medical,
        cctv_sequence=cctv,
        weapon_use=weapon,
        disclosure_completeness=disclosure,
        disclosure_gaps=gaps,
        pace_compliance=pace,
        interview_evidence=interview,
        custody_evidence=custody,
        prosecution_strength=prosecution,
    )


def resolve_signals(
    gate: Optional[AnalysisGate],
    documents: Optional[list[CaseDocument]],
    supplied: Optional[EvidenceSignals] = None,
) -> EvidenceSignals:
    """
    Signals the engine should reason from.

    A closed gate always wins (all unknown); otherwise caller-supplied
    signals are used as given, falling back to extraction.
    """
    if gate is None or not gate.is_open:
        return EvidenceSignals.unknown()
    if supplied is not None:
        return supplied
    signals = extract_evidence_signals(gate, documents)
    logger.debug("Extracted signals from %d documents", len(documents or []))
    return signals
