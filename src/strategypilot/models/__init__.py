"""
StrategyPilot Models

All domain models for the StrategyPilot criminal strategy reasoning engine.

Exports all models organized by category for convenient imports:

    from strategypilot.models import (
        # Enums
        SupportLevel, RouteId, RouteStatus, SafetyStatus,
        # Inputs
        CaseInput, ChargeRecord, TimelineEntry, AnalysisGate,
        # Signals
        EvidenceSignals,
        # Catalogue
        Catalogue, OffenceDefinition, RouteDefinition,
        # State
        OffenceElementState, DependencyState, RouteAssessment,
        # Results
        StrategyCoordinatorResult, SolicitorView,
    )
"""
from __future__ import annotations

# =============================================================================
# Enums
# =============================================================================
from .enums import (
    AngleCategory,
    CctvSequence,
    ConfidenceLevel,
    DecisionStatus,
    DeclaredDependencyStatus,
    DependencyStatus,
    DisclosureCompleteness,
    DriftDirection,
    EvidenceBasis,
    ExhaustionStatus,
    IdConditions,
    IdStrength,
    IncidentShape,
    JudicialOptics,
    LeverageLevel,
    MedicalPattern,
    PaceCompliance,
    PlanTiming,
    ProsecutionStrength,
    RouteId,
    RouteStatus,
    SafetyStatus,
    SupportLevel,
    WeaponUse,
    WindowType,
)

# =============================================================================
# Evidence Signals
# =============================================================================
from .signals import SIGNAL_FIELDS, EvidenceSignals, parse_bool

# =============================================================================
# Inputs
# =============================================================================
from .inputs import (
    AnalysisGate,
    CaseDocument,
    CaseInput,
    ChargeRecord,
    DeclaredDependency,
    ImpactMapEntry,
    IrreversibleDecision,
    RecordedPosition,
    TimelineEntry,
    parse_date,
)

# =============================================================================
# Catalogue
# =============================================================================
from .catalogue import (
    Catalogue,
    ConfidenceRule,
    CriticalItem,
    DependencyDefinition,
    Doctrine,
    OffenceDefinition,
    OffenceElement,
    PolicyThresholds,
    RouteDefinition,
)

# =============================================================================
# Assessment State
# =============================================================================
from .state import (
    AngleAssessment,
    DependencyState,
    EvidenceRef,
    OffenceElementState,
    ProceduralSafety,
    RouteAssessment,
)

# =============================================================================
# Confidence, Time Pressure, Residual Attacks, Judge
# =============================================================================
from .confidence import ConfidenceChange, ConfidenceState
from .pressure import LeverageAdjustment, PressureWindow, TimePressureState
from .residual import LastResortPlanItem, ResidualAngle, ResidualAttackScan
from .judge import JudgeAnalysis, JudgeConstraint, JudgeConstraintLens

# =============================================================================
# Results
# =============================================================================
from .result import OffenceSummary, SolicitorView, StrategyCoordinatorResult, TopRoute


__all__ = [
    # Enums
    "AngleCategory",
    "CctvSequence",
    "ConfidenceLevel",
    "DecisionStatus",
    "DeclaredDependencyStatus",
    "DependencyStatus",
    "DisclosureCompleteness",
    "DriftDirection",
    "EvidenceBasis",
    "ExhaustionStatus",
    "IdConditions",
    "IdStrength",
    "IncidentShape",
    "JudicialOptics",
    "LeverageLevel",
    "MedicalPattern",
    "PaceCompliance",
    "PlanTiming",
    "ProsecutionStrength",
    "RouteId",
    "RouteStatus",
    "SafetyStatus",
    "SupportLevel",
    "WeaponUse",
    "WindowType",
    # Signals
    "SIGNAL_FIELDS",
    "EvidenceSignals",
    "parse_bool",
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
    "parse_date",
    # Catalogue
    "Catalogue",
    "ConfidenceRule",
    "CriticalItem",
    "DependencyDefinition",
    "Doctrine",
    "OffenceDefinition",
    "OffenceElement",
    "PolicyThresholds",
    "RouteDefinition",
    # State
    "AngleAssessment",
    "DependencyState",
    "EvidenceRef",
    "OffenceElementState",
    "ProceduralSafety",
    "RouteAssessment",
    # Confidence
    "ConfidenceChange",
    "ConfidenceState",
    # Time pressure
    "LeverageAdjustment",
    "PressureWindow",
    "TimePressureState",
    # Residual
    "LastResortPlanItem",
    "ResidualAngle",
    "ResidualAttackScan",
    # Judge
    "JudgeAnalysis",
    "JudgeConstraint",
    "JudgeConstraintLens",
    # Results
    "OffenceSummary",
    "SolicitorView",
    "StrategyCoordinatorResult",
    "TopRoute",
]
