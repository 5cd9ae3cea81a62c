"""
StrategyPilot Strategy Packs

Optional collaborators that contribute named plugin constraints to an
assessment. The coordinator calls each injected pack in order and merges the
returned dict into plugin_constraints; a pack that raises is recorded in the
audit trace and skipped.

The pack system is pluggable: a practice area can add its own packs
without touching the coordinator.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, runtime_checkable

from ..models import (
    CaseDocument,
    CaseInput,
    DependencyState,
    ImpactMapEntry,
    IncidentShape,
    OffenceDefinition,
    OffenceElementState,
    ProceduralSafety,
)

logger = logging.getLogger(__name__)


@dataclass
class PackContext:
    """What the coordinator has established by the time packs run."""
    offence: OffenceDefinition
    elements: list[OffenceElementState] = field(default_factory=list)
    dependencies: list[DependencyState] = field(default_factory=list)
    procedural_safety: Optional[ProceduralSafety] = None
    gate_open: bool = True


@runtime_checkable
class StrategyPack(Protocol):
    """
    Protocol for strategy packs.

    Implementations expose a name (used in the audit trace) and return a
    dict of plugin constraints keyed by constraint name. Returning an empty
    dict contributes nothing.
    """

    name: str

    def constraints(self, case_input: CaseInput, context: PackContext) -> dict[str, Any]:
        """
        Compute plugin constraints for a case.

        Args:
            case_input: The case snapshot being assessed
            context: Offence, elements, dependencies and safety so far

        Returns:
            Mapping of constraint name to a JSON-compatible value
        """
        ...


@dataclass
class NullStrategyPack:
    """Pack that contributes nothing. The coordinator's default."""
    name: str = "null"

    def constraints(self, case_input: CaseInput, context: PackContext) -> dict[str, Any]:
        return {}


# =============================================================================
# Incident Shape
# =============================================================================

SINGLE_STRIKE_PATTERNS = (
    r"\b(?:single|once)\b",
    r"\bone\s*(?:blow|strike|punch)\b",
    r"\b(?:struck|hit|punched)\s*once\b",
    r"\bstruck\s*one\s*time\b",
)
SUSTAINED_PATTERNS = (
    r"\b(?:multiple|repeated|several|numerous|many)\s*(?:blows|strikes|punches|hits|attacks)\b",
    r"\b(?:continued|ongoing|sustained|prolonged)\s*(?:attack|assault|violence)\b",
    r"\b(?:repeatedly|again\s*and\s*again|over\s*and\s*over)\b",
)
SCUFFLE_PATTERNS = (
    r"\b(?:scuffle|struggle|altercation|melee|chaotic|unclear\s*sequence)\b",
    r"\b(?:both\s*parties|mutual|exchanged|back\s*and\s*forth)\b",
)
TARGETED_PATTERNS = (
    r"\b(?:targeted|deliberate|intentional|premeditated|planned)\b",
    r"\b(?:aimed\s*at|directed\s*towards|specifically)\b",
)
DURATION_PATTERN = r"\b(?:duration|lasted|continued\s*for|over\s*the\s*course\s*of)\b"
SEQUENCE_PATTERN = r"\b(?:sequence|timeline|order\s*of\s*events|chronology)\b"
SEQUENCE_BEARING_ITEMS = ("cctv", "sequence", "timeline", "duration")


def _any(patterns: tuple[str, ...], text: str) -> bool:
    return any(re.search(pattern, text) for pattern in patterns)


def classify_incident_shape(
    documents: Optional[list[CaseDocument]],
    position_text: Optional[str] = None,
    impact_map: Optional[list[ImpactMapEntry]] = None,
) -> dict[str, Any]:
    """
    Classify the shape of the alleged incident from what the material says.

    Without sequence evidence the shape stays unclear and disclosure
    dependent; it describes the evidence, it does not predict.

    Returns:
        Dict with shape, explanation and evidence_basis
    """
    parts = [doc.text() for doc in documents or []]
    if position_text:
        parts.append(position_text.lower())
    text = " ".join(parts)

    has_duration = re.search(DURATION_PATTERN, text) is not None
    has_sequence = re.search(SEQUENCE_PATTERN, text) is not None

    if not has_sequence:
        basis = ["Sequence evidence not present"]
        pending = [
            entry.name for entry in impact_map or []
            if entry.is_outstanding
            and any(term in entry.name.lower() for term in SEQUENCE_BEARING_ITEMS)
        ]
        if pending:
            basis.append(f"Outstanding: {', '.join(pending)}")
        basis.append("CCTV or timeline data may clarify incident shape")
        return _shape(
            IncidentShape.UNCLEAR_DISCLOSURE_DEPENDENT,
            "Insufficient evidence to classify incident shape. Classification depends on "
            "disclosure of sequence evidence, CCTV, or timeline data.",
            basis,
        )

    if _any(SINGLE_STRIKE_PATTERNS, text) and not has_duration:
        return _shape(
            IncidentShape.SINGLE_IMPULSIVE_BLOW,
            "Evidence indicates a single impulsive blow. No evidence of multiple strikes "
            "or sustained attack.",
            [
                "Single strike mentioned in evidence",
                "No duration evidence contradicts single strike",
            ],
        )

    if _any(SUSTAINED_PATTERNS, text) or has_duration:
        basis = ["Multiple strikes or duration evidence present"]
        if _any(TARGETED_PATTERNS, text):
            basis.append("Targeted or intentional indicators present")
            return _shape(
                IncidentShape.SUSTAINED_TARGETED_ATTACK,
                "Evidence indicates a sustained, targeted attack with multiple strikes or "
                "prolonged duration.",
                basis,
            )
        return _shape(
            IncidentShape.BRIEF_CHAOTIC_SCUFFLE,
            "Evidence indicates multiple strikes or chaotic sequence, but not clearly "
            "targeted or sustained.",
            basis,
        )

    if _any(SCUFFLE_PATTERNS, text):
        return _shape(
            IncidentShape.BRIEF_CHAOTIC_SCUFFLE,
            "Evidence indicates a brief chaotic scuffle or altercation.",
            ["Scuffle or chaotic sequence indicators present"],
        )

    return _shape(
        IncidentShape.UNCLEAR_DISCLOSURE_DEPENDENT,
        "Insufficient evidence to classify incident shape. Requires further disclosure "
        "or evidence.",
        ["Insufficient sequence or duration evidence"],
    )


def _shape(shape: IncidentShape, explanation: str, basis: list[str]) -> dict[str, Any]:
    return {"shape": shape.value, "explanation": explanation, "evidence_basis": basis}


@dataclass
class IncidentShapePack:
    """
    Contributes an incident_shape constraint.

    Runs only when there is something to read: a recorded position text or
    at least one document. With the analysis gate closed the material is
    not usable, so the shape is left out.
    """
    name: str = "incident_shape"

    def constraints(self, case_input: CaseInput, context: PackContext) -> dict[str, Any]:
        if not context.gate_open:
            return {}
        position = case_input.recorded_position
        position_text = position.position_text if position else None
        if not position_text and not case_input.documents:
            return {}
        shape = classify_incident_shape(
            case_input.documents,
            position_text,
            case_input.evidence_impact_map,
        )
        logger.debug("Incident shape %s", shape["shape"])
        return {"incident_shape": shape}


def default_packs() -> list[StrategyPack]:
    """Packs used when the caller injects none."""
    return [NullStrategyPack()]
