"""
StrategyPilot Assessment State Models

Per-assessment state produced by the core evaluators:
- OffenceElementState: support level for one legal element
- DependencyState: reconciled disclosure status of one dependency
- ProceduralSafety: case-wide safety posture
- AngleAssessment, RouteAssessment: viability of a line of argument and of a
  canonical route

Each assessment creates new instances; none are mutated afterwards.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from .enums import DependencyStatus, RouteId, RouteStatus, SafetyStatus, SupportLevel


@dataclass
class EvidenceRef:
    """Pointer to a document relevant to an element."""
    doc_type: str
    note: str
    quote: Optional[str] = None  # at most 20 words


@dataclass
class OffenceElementState:
    """
    Support for one element of the matched offence.

    Attributes:
        id: Element identifier
        label: Element label
        support: strong / some / weak / none
        refs: Documents relevant to the element
        gaps: Outstanding evidence items bearing on the element
    """
    id: str
    label: str
    support: SupportLevel
    refs: list[EvidenceRef] = field(default_factory=list)
    gaps: list[str] = field(default_factory=list)

    @property
    def is_weak(self) -> bool:
        return self.support.is_weak_or_none()


@dataclass
class DependencyState:
    """
    Canonical dependency with its reconciled disclosure status.

    last_action_date is the date of the most recent matching timeline entry.
    """
    id: str
    label: str
    status: DependencyStatus
    why_it_matters: str
    last_action_date: Optional[date] = None
    critical: Optional[str] = None

    @property
    def is_outstanding(self) -> bool:
        return self.status == DependencyStatus.OUTSTANDING


@dataclass
class ProceduralSafety:
    """Case-wide procedural safety status with its explanation."""
    status: SafetyStatus
    explanation: str
    outstanding_items: list[str] = field(default_factory=list)
    reasons: list[str] = field(default_factory=list)


@dataclass
class AngleAssessment:
    """A granular line of argument evaluated as part of a route."""
    id: str
    label: str
    status: RouteStatus
    reasons: list[str] = field(default_factory=list)
    required_dependencies: list[str] = field(default_factory=list)
    constraints: list[str] = field(default_factory=list)

    @property
    def is_viable(self) -> bool:
        return self.status == RouteStatus.VIABLE


@dataclass
class RouteAssessment:
    """
    Viability of one canonical route.

    Attributes:
        id: Route identifier
        status: viable / risky / blocked
        reasons: Human-readable facts behind the status
        required_dependencies: Dependency ids (or gap names) the route needs
        constraints: Limits on how the route may be pursued
        angles: The lines of argument the route was composed from
        evidence_backed: False when produced as a procedural template
    """
    id: RouteId
    status: RouteStatus
    reasons: list[str] = field(default_factory=list)
    required_dependencies: list[str] = field(default_factory=list)
    constraints: list[str] = field(default_factory=list)
    angles: list[AngleAssessment] = field(default_factory=list)
    evidence_backed: bool = True

    def viable_angles(self) -> list[AngleAssessment]:
        return [angle for angle in self.angles if angle.is_viable]

    def angle(self, angle_id: str) -> Optional[AngleAssessment]:
        for candidate in self.angles:
            if candidate.id == angle_id:
                return candidate
        return None

    @property
    def label(self) -> str:
        return " ".join(word.capitalize() for word in self.id.value.split("_"))
