"""
StrategyPilot Result Models

The root aggregate returned by the coordinator and the condensed view built
from it for the solicitor.

Core Principle: "The solicitor decides. StrategyPilot classifies and explains."
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from .confidence import ConfidenceState
from .judge import JudgeAnalysis, JudgeConstraintLens
from .pressure import LeverageAdjustment, TimePressureState
from .residual import ResidualAttackScan
from .signals import EvidenceSignals
from .state import DependencyState, OffenceElementState, RouteAssessment


@dataclass
class OffenceSummary:
    """Code and label of the matched offence."""
    code: str = ""
    label: str = ""


@dataclass
class StrategyCoordinatorResult:
    """
    Canonical, audit-traceable strategy assessment for one case.

    Produced fresh per call with no identity beyond it. Every field is
    always present; optional analyses are None only when they could not be
    produced, and the audit trace says why.

    Attributes:
        case_id: Case identifier from the input
        input_hash: Hash of the input snapshot (cache key for callers)
        offence: Matched offence
        elements: Support per offence element
        dependencies: Reconciled dependency states
        plugin_constraints: Procedural safety and strategy-pack constraints
        routes: One assessment per canonical route
        next_actions: Deterministic next actions (at most 8)
        audit_trace: One line per coordinator step
        signals: Evidence signals the confidence work was based on
        route_confidence: Confidence state per route
        leverage: Time-aware leverage guidance per route
        time_pressure: Pressure windows and current leverage
        residual_scans: Residual attack scan per route
        judge_analysis: Legal tests and evidential requirements
        judge_constraint_lens: Doctrine constraints
        evidence_backed: False when the analysis gate was closed
    """
    case_id: str
    input_hash: str = ""
    offence: OffenceSummary = field(default_factory=OffenceSummary)
    elements: list[OffenceElementState] = field(default_factory=list)
    dependencies: list[DependencyState] = field(default_factory=list)
    plugin_constraints: dict[str, Any] = field(default_factory=dict)
    routes: list[RouteAssessment] = field(default_factory=list)
    next_actions: list[str] = field(default_factory=list)
    audit_trace: list[str] = field(default_factory=list)
    signals: EvidenceSignals = field(default_factory=EvidenceSignals)
    route_confidence: list[ConfidenceState] = field(default_factory=list)
    leverage: list[LeverageAdjustment] = field(default_factory=list)
    time_pressure: Optional[TimePressureState] = None
    residual_scans: list[ResidualAttackScan] = field(default_factory=list)
    judge_analysis: Optional[JudgeAnalysis] = None
    judge_constraint_lens: Optional[JudgeConstraintLens] = None
    evidence_backed: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form for canonical JSON and API responses."""
        return asdict(self)


@dataclass
class TopRoute:
    """A route surfaced in the solicitor view."""
    id: str
    label: str
    why: list[str] = field(default_factory=list)


@dataclass
class SolicitorView:
    """
    Bounded, human-scannable digest of a coordinator result.

    Bounds: dispute points 5, decisive missing items 6, top routes 2,
    next actions 6.
    """
    headline: str
    dispute_points: list[str] = field(default_factory=list)
    decisive_missing_items: list[str] = field(default_factory=list)
    top_routes: list[TopRoute] = field(default_factory=list)
    worst_case_cap: Optional[str] = None
    next_actions: list[str] = field(default_factory=list)
