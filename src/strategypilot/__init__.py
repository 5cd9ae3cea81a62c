"""
StrategyPilot - Deterministic Criminal Defence Strategy Reasoning

StrategyPilot classifies the state of a criminal case and explains it.
It produces CLASSIFICATIONS, not predictions: the solicitor decides.

Core Principle: "The solicitor decides. StrategyPilot classifies and explains."

Key Features:
- Offence classification from charges and case text
- Support level per legal element of the offence
- Disclosure dependency tracking against the disclosure timeline
- Procedural safety posture
- Canonical routes (fight charge / charge reduction / outcome management)
  composed from granular lines of argument
- Route confidence bands and drift between evidence snapshots
- Time-pressure windows and leverage
- Residual attack scanning with an exhaustion guard
- Doctrine-based judge constraints
- Full audit trace; the coordinator never raises

Quick Start:
    from strategypilot import CaseInput, StrategyCoordinator, build_solicitor_view

    case = CaseInput.from_dict(payload)
    result = StrategyCoordinator().build(case)
    view = build_solicitor_view(result)

Version: 0.1.0
"""
from __future__ import annotations

__version__ = "0.1.0"
__author__ = "StrategyPilot Team"

# =============================================================================
# Core Models (Re-exported for convenience)
# =============================================================================
from .models import (
    # Enums
    ConfidenceLevel,
    DependencyStatus,
    ExhaustionStatus,
    LeverageLevel,
    RouteId,
    RouteStatus,
    SafetyStatus,
    SupportLevel,
    # Inputs
    AnalysisGate,
    CaseDocument,
    CaseInput,
    ChargeRecord,
    DeclaredDependency,
    ImpactMapEntry,
    IrreversibleDecision,
    RecordedPosition,
    TimelineEntry,
    # Signals
    EvidenceSignals,
    # Catalogue
    Catalogue,
    # Results
    RouteAssessment,
    SolicitorView,
    StrategyCoordinatorResult,
)

# =============================================================================
# Engine
# =============================================================================
from .engine import (
    IncidentShapePack,
    NullStrategyPack,
    StrategyCoordinator,
    StrategyPack,
    build_solicitor_view,
    build_strategy_coordinator,
)

# =============================================================================
# Catalogue, Serialization, Errors
# =============================================================================
from .canon import canonical_json, content_hash, input_hash
from .config import EngineSettings, configure_logging
from .exceptions import (
    CatalogueLoadError,
    CatalogueValidationError,
    CatalogueVersionMismatch,
    StrategyPackError,
    StrategyPilotError,
    UnknownRouteError,
)
from .packs import default_catalogue, load_catalogue


__all__ = [
    "__version__",
    # Enums
    "ConfidenceLevel",
    "DependencyStatus",
    "ExhaustionStatus",
    "LeverageLevel",
    "RouteId",
    "RouteStatus",
    "SafetyStatus",
    "SupportLevel",
    # Inputs
    "AnalysisGate",
    "CaseDocument",
    "CaseInput",
    "ChargeRecord",
    "DeclaredDependency",
    "ImpactMapEntry",
    "IrreversibleDecision",
    "RecordedPosition",
    "TimelineEntry",
    "EvidenceSignals",
    "Catalogue",
    # Results
    "RouteAssessment",
    "SolicitorView",
    "StrategyCoordinatorResult",
    # Engine
    "IncidentShapePack",
    "NullStrategyPack",
    "StrategyCoordinator",
    "StrategyPack",
    "build_solicitor_view",
    "build_strategy_coordinator",
    # Catalogue loading
    "default_catalogue",
    "load_catalogue",
    # Serialization
    "canonical_json",
    "content_hash",
    "input_hash",
    # Config
    "EngineSettings",
    "configure_logging",
    # Errors
    "StrategyPilotError",
    "CatalogueLoadError",
    "CatalogueValidationError",
    "CatalogueVersionMismatch",
    "UnknownRouteError",
    "StrategyPackError",
]
