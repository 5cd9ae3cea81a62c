"""
StrategyPilot Engine

Core evaluators and the coordinator that runs them.

Services:
- classify_offence: Match charges and text to a catalogue offence
- ElementAssessor: Support level per offence element
- track_dependencies: Reconcile dependencies against the disclosure timeline
- evaluate_procedural_safety: Case-wide safety posture
- evaluate_routes: Compose canonical routes from lines of argument
- ConfidenceCalculator: Route confidence and drift
- build_time_pressure_state: Pressure windows and leverage
- scan_residual_attacks: Residual attack angles and exhaustion
- build_judge_constraint_lens / build_judge_analysis: Doctrine constraints
- generate_next_actions: Deterministic next steps
- StrategyCoordinator: Run everything with an audit trace
- build_solicitor_view: One-page view of a result

Usage:
    from strategypilot.engine import (
        StrategyCoordinator,
        build_solicitor_view,
    )
"""
from __future__ import annotations

from .confidence_drift import (
    ConfidenceCalculator,
    assess_base_confidence,
    calculate_confidence_state,
    detect_confidence_drift,
    resolve_route_id,
)
from .coordinator import StrategyCoordinator, build_strategy_coordinator
from .dependency_tracker import status_from_entries, track_dependencies
from .element_assessor import ElementAssessor, assess_elements, combine_support, text_support
from .judge_lens import build_judge_analysis, build_judge_constraint_lens
from .matching import AliasTable, contains_phrase, names_overlap, normalize
from .next_actions import generate_next_actions
from .offence_classifier import classify_offence, matches_offence
from .plugins import (
    IncidentShapePack,
    NullStrategyPack,
    PackContext,
    StrategyPack,
    classify_incident_shape,
)
from .procedural_safety import evaluate_procedural_safety, outstanding_critical_items
from .residual_scanner import compute_exhaustion_status, covered_targets, scan_residual_attacks
from .route_evaluator import RouteContext, compose_route, evaluate_routes
from .signal_extractor import extract_evidence_signals, resolve_signals
from .solicitor_view import build_solicitor_view
from .time_pressure import adjust_strategy_leverage, build_time_pressure_state


__all__ = [
    # Classification and assessment
    "classify_offence",
    "matches_offence",
    "ElementAssessor",
    "assess_elements",
    "combine_support",
    "text_support",
    # Dependencies and safety
    "AliasTable",
    "contains_phrase",
    "names_overlap",
    "normalize",
    "status_from_entries",
    "track_dependencies",
    "evaluate_procedural_safety",
    "outstanding_critical_items",
    # Routes
    "RouteContext",
    "compose_route",
    "evaluate_routes",
    # Signals and confidence
    "extract_evidence_signals",
    "resolve_signals",
    "ConfidenceCalculator",
    "assess_base_confidence",
    "calculate_confidence_state",
    "detect_confidence_drift",
    "resolve_route_id",
    # Time pressure
    "adjust_strategy_leverage",
    "build_time_pressure_state",
    # Residual attacks
    "compute_exhaustion_status",
    "covered_targets",
    "scan_residual_attacks",
    # Judge
    "build_judge_analysis",
    "build_judge_constraint_lens",
    # Actions and packs
    "generate_next_actions",
    "IncidentShapePack",
    "NullStrategyPack",
    "PackContext",
    "StrategyPack",
    "classify_incident_shape",
    # Coordinator and view
    "StrategyCoordinator",
    "build_strategy_coordinator",
    "build_solicitor_view",
]
