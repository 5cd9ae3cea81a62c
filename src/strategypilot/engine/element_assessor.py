"""
StrategyPilot Element Assessor

Assigns a support level to each element of the matched offence.

Key features:
- Relevance of impact-map items by element id or catalogue keywords
- Text indicators (identification uncertainty, injury severity, weapon
  uncertainty, intent and recklessness wording)
- Fixed decision table combining coverage and text; ties go to the lower level
- Document references with short quotes, and gap lists of outstanding items
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Mapping, Optional

from ..models import (
    CaseDocument,
    EvidenceRef,
    ImpactMapEntry,
    OffenceDefinition,
    OffenceElementState,
    SupportLevel,
)
from .matching import names_overlap


MAX_REFS = 3
MAX_QUOTE_WORDS = 20

INJURY_ELEMENTS = ("injury_threshold", "injury", "injury_classification")

IDENTIFICATION_UNCERTAINTY = (
    "poor lighting", "dark", "uncertain", "not sure", "couldn't see", "fast", "brief",
)
INJURY_SEVERITY = ("laceration", "fracture", "gbh", "grievous", "serious harm", "wound")
WEAPON_UNCERTAINTY = ("believes", "thinks", "not sure", "unclear", "didn't see")
INTENT_INDICATORS = ("targeted", "sustained", "deliberate")
RECKLESSNESS_INDICATORS = ("reckless", "aware")

_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")


# =============================================================================
# Text Indicators
# =============================================================================

def text_support(element_id: str, text: str) -> Optional[SupportLevel]:
    """
    Support suggested by the extracted text alone.

    Returns None when the text says nothing about the element. An empty
    text never suggests anything.
    """
    if not text:
        return None

    support: Optional[SupportLevel] = None

    if element_id == "identification":
        if any(indicator in text for indicator in IDENTIFICATION_UNCERTAINTY):
            support = SupportLevel.WEAK

    if element_id in INJURY_ELEMENTS:
        if any(indicator in text for indicator in INJURY_SEVERITY):
            support = SupportLevel.STRONG
        elif "injury" in text or "harm" in text:
            support = SupportLevel.SOME

    if "weapon" in element_id:
        if any(indicator in text for indicator in WEAPON_UNCERTAINTY):
            support = SupportLevel.WEAK
        elif "weapon" in text:
            support = SupportLevel.SOME

    if element_id == "specific_intent":
        # Weak unless the text is explicit about targeting
        if any(indicator in text for indicator in INTENT_INDICATORS):
            support = SupportLevel.SOME
        else:
            support = SupportLevel.WEAK

    if element_id == "recklessness":
        if any(indicator in text for indicator in RECKLESSNESS_INDICATORS):
            support = SupportLevel.SOME

    return support


def combine_support(
    relevant: int,
    outstanding: int,
    from_text: Optional[SupportLevel],
) -> SupportLevel:
    """
    Decision table combining impact-map coverage with text support.

    | coverage                 | result                           |
    |--------------------------|----------------------------------|
    | covered, none outstanding| strong, or some if text is weak  |
    | partially outstanding    | lowest(text, some)               |
    | all outstanding          | lowest(text, weak)               |
    | no coverage              | text, else none                  |
    """
    if relevant > 0 and outstanding == 0:
        return SupportLevel.SOME if from_text == SupportLevel.WEAK else SupportLevel.STRONG
    if 0 < outstanding < relevant:
        return SupportLevel.lowest(from_text, SupportLevel.SOME) if from_text else SupportLevel.SOME
    if relevant > 0 and outstanding == relevant:
        return SupportLevel.lowest(from_text, SupportLevel.WEAK) if from_text else SupportLevel.WEAK
    return from_text or SupportLevel.NONE


# =============================================================================
# Element Assessor
# =============================================================================

@dataclass
class ElementAssessor:
    """
    Assesses offence elements against the impact map and extracted text.

    Usage:
        assessor = ElementAssessor(keywords=catalogue.element_keywords)
        states = assessor.assess(offence, text, documents, impact_map)
    """
    keywords: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    def is_relevant(self, element_id: str, item_name: str) -> bool:
        """True if an impact-map item bears on the element."""
        name = item_name.lower()
        if names_overlap(name, element_id.replace("_", " ")):
            return True
        return any(
            re.search(r"\b" + re.escape(keyword), name)
            for keyword in self.keywords.get(element_id, ())
        )

    def assess(
        self,
        offence: OffenceDefinition,
        extracted_text: str,
        documents: Optional[list[CaseDocument]],
        impact_map: Optional[list[ImpactMapEntry]],
    ) -> list[OffenceElementState]:
        """One state per offence element, in the offence's element order."""
        text = (extracted_text or "").lower()
        entries = impact_map or []
        states = []

        for element in offence.elements:
            relevant = [e for e in entries if self.is_relevant(element.id, e.name)]
            outstanding = [e for e in relevant if e.is_outstanding]
            support = combine_support(
                len(relevant), len(outstanding), text_support(element.id, text)
            )
            states.append(OffenceElementState(
                id=element.id,
                label=element.label,
                support=support,
                refs=self._refs(element.id, documents or []),
                gaps=[e.name for e in outstanding],
            ))

        return states

    def _refs(self, element_id: str, documents: list[CaseDocument]) -> list[EvidenceRef]:
        refs = []
        for doc in documents[:MAX_REFS]:
            refs.append(EvidenceRef(
                doc_type=doc.doc_type or doc.name or "document",
                note=f"Relevant to {element_id}",
                quote=self._quote(element_id, doc.raw_text),
            ))
        return refs

    def _quote(self, element_id: str, raw_text: str) -> Optional[str]:
        """First sentence naming the element's keywords, cut to 20 words."""
        keywords = self.keywords.get(element_id, ())
        if not raw_text or not keywords:
            return None
        for sentence in _SENTENCE_SPLIT.split(raw_text):
            lowered = sentence.lower()
            if any(re.search(r"\b" + re.escape(k), lowered) for k in keywords):
                words = sentence.split()
                return " ".join(words[:MAX_QUOTE_WORDS]) or None
        return None


# =============================================================================
# Convenience Functions
# =============================================================================

def assess_elements(
    offence: OffenceDefinition,
    extracted_text: str,
    documents: Optional[list[CaseDocument]],
    impact_map: Optional[list[ImpactMapEntry]],
    keywords: Optional[Mapping[str, tuple[str, ...]]] = None,
) -> list[OffenceElementState]:
    """Assess every element of an offence."""
    return ElementAssessor(keywords=keywords or {}).assess(
        offence, extracted_text, documents, impact_map
    )
