"""
StrategyPilot Residual Attack Models

Residual attack angles not covered by existing attack paths, the exhaustion
status, and the last-resort leverage plan.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .enums import (
    AngleCategory,
    EvidenceBasis,
    ExhaustionStatus,
    JudicialOptics,
    PlanTiming,
    RouteId,
)


@dataclass
class ResidualAngle:
    """
    An attack angle not yet covered by existing attack paths.

    Attributes:
        id: Angle identifier
        title: Display title
        description: What the angle involves
        category: Subject area
        evidence_basis: EVIDENCE_BACKED or HYPOTHESIS
        required_evidence: Disclosure needed before the angle can be used
        judicial_optics: How the court tends to receive it
        why_optics: Reason for the optics rating
        how_to_use: Concrete steps
        stop_if: Condition under which the angle should be dropped
    """
    id: str
    title: str
    description: str
    category: AngleCategory
    evidence_basis: EvidenceBasis
    judicial_optics: JudicialOptics
    why_optics: str
    how_to_use: list[str] = field(default_factory=list)
    stop_if: str = ""
    required_evidence: Optional[list[str]] = None


@dataclass
class LastResortPlanItem:
    """One item of the last-resort leverage plan."""
    title: str
    actions: list[str]
    timing: PlanTiming
    judicial_optics: JudicialOptics = JudicialOptics.ATTRACTIVE


@dataclass
class ResidualAttackScan:
    """Residual attack scan for one route."""
    route: RouteId
    status: ExhaustionStatus
    summary: str
    angles: list[ResidualAngle] = field(default_factory=list)
    triggers: list[str] = field(default_factory=list)
    plan: list[LastResortPlanItem] = field(default_factory=list)
