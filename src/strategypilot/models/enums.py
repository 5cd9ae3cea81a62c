"""
StrategyPilot Enumerations

All enumeration types used throughout the engine, organized by domain area.

All enums inherit from (str, Enum) for JSON serialization compatibility.
"""
from __future__ import annotations

from enum import Enum


# =============================================================================
# Element Support
# =============================================================================

class SupportLevel(str, Enum):
    """
    Categorical strength of evidence for an offence element.

    This is a classification, not a probability.
    """
    STRONG = "strong"
    SOME = "some"
    WEAK = "weak"
    NONE = "none"

    @property
    def rank(self) -> int:
        return _SUPPORT_RANK[self]

    def is_weak_or_none(self) -> bool:
        return self in (SupportLevel.WEAK, SupportLevel.NONE)

    @classmethod
    def lowest(cls, *levels: "SupportLevel") -> "SupportLevel":
        """Most conservative of the given levels."""
        return min(levels, key=lambda level: level.rank)


_SUPPORT_RANK = {
    SupportLevel.NONE: 0,
    SupportLevel.WEAK: 1,
    SupportLevel.SOME: 2,
    SupportLevel.STRONG: 3,
}


# =============================================================================
# Dependencies and Disclosure
# =============================================================================

class DependencyStatus(str, Enum):
    """Disclosure status of an evidentiary dependency."""
    OUTSTANDING = "outstanding"
    SERVED = "served"
    UNKNOWN = "unknown"


class DeclaredDependencyStatus(str, Enum):
    """How the solicitor has classified a dependency."""
    REQUIRED = "required"
    HELPFUL = "helpful"
    NOT_NEEDED = "not_needed"


class DecisionStatus(str, Enum):
    """Progress of an irreversible decision (plea, election, etc.)."""
    NOT_YET = "not_yet"
    PLANNED = "planned"
    COMPLETED = "completed"


class SafetyStatus(str, Enum):
    """Case-wide procedural safety posture."""
    SAFE = "SAFE"
    CONDITIONALLY_UNSAFE = "CONDITIONALLY_UNSAFE"
    UNSAFE_TO_PROCEED = "UNSAFE_TO_PROCEED"

    @property
    def severity(self) -> int:
        return _SAFETY_SEVERITY[self]

    @classmethod
    def worst(cls, *statuses: "SafetyStatus") -> "SafetyStatus":
        return max(statuses, key=lambda status: status.severity)


_SAFETY_SEVERITY = {
    SafetyStatus.SAFE: 0,
    SafetyStatus.CONDITIONALLY_UNSAFE: 1,
    SafetyStatus.UNSAFE_TO_PROCEED: 2,
}


# =============================================================================
# Routes
# =============================================================================

class RouteId(str, Enum):
    """The three canonical defence strategies."""
    FIGHT_CHARGE = "fight_charge"                  # Contest the charge
    CHARGE_REDUCTION = "charge_reduction"          # Negotiate a lesser charge
    OUTCOME_MANAGEMENT = "outcome_management"      # Manage sentencing outcome


class RouteStatus(str, Enum):
    """Viability of a route on the current evidence."""
    VIABLE = "viable"
    RISKY = "risky"
    BLOCKED = "blocked"


# =============================================================================
# Confidence and Time Pressure
# =============================================================================

class ConfidenceLevel(str, Enum):
    """Route confidence band derived from the evidence-signal score."""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        return {"LOW": 0, "MEDIUM": 1, "HIGH": 2}[self.value]


class DriftDirection(str, Enum):
    """Direction of a confidence change between two signal snapshots."""
    INCREASE = "increase"
    DECREASE = "decrease"
    COLLAPSE = "collapse"  # HIGH straight to LOW


class LeverageLevel(str, Enum):
    """Leverage impact of a pressure window, or overall time leverage."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class WindowType(str, Enum):
    """Kinds of time-pressure window."""
    PTPH = "ptph"
    DISCLOSURE_DEADLINE = "disclosure_deadline"
    PLEA_CREDIT_DROP = "plea_credit_drop"
    PIVOT_MOMENT = "pivot_moment"


# =============================================================================
# Residual Attacks
# =============================================================================

class ExhaustionStatus(str, Enum):
    """Whether further evidential/procedural attack remains."""
    ATTACKS_REMAIN = "ATTACKS_REMAIN"
    EXHAUSTED = "EXHAUSTED"


class EvidenceBasis(str, Enum):
    """Whether an angle rests on evidence or awaits disclosure."""
    EVIDENCE_BACKED = "EVIDENCE_BACKED"
    HYPOTHESIS = "HYPOTHESIS"


class JudicialOptics(str, Enum):
    """How a line of argument tends to be received by the court."""
    ATTRACTIVE = "ATTRACTIVE"
    NEUTRAL = "NEUTRAL"
    RISKY = "RISKY"


class AngleCategory(str, Enum):
    """Subject area of a residual attack angle."""
    CREDIBILITY = "credibility"
    SEQUENCE = "sequence"
    MEDICAL = "medical"
    IDENTIFICATION = "identification"
    PROCEDURE = "procedure"
    CONTEXT = "context"


class PlanTiming(str, Enum):
    """When a last-resort plan item should be worked."""
    BEFORE_PTPH = "before_PTPH"
    AFTER_DISCLOSURE = "after_disclosure"
    ANYTIME = "anytime"


# =============================================================================
# Evidence Signals
# =============================================================================

class IdStrength(str, Enum):
    STRONG = "strong"
    WEAK = "weak"
    UNKNOWN = "unknown"


class IdConditions(str, Enum):
    GOOD = "good"
    POOR = "poor"
    UNKNOWN = "unknown"


class MedicalPattern(str, Enum):
    SUSTAINED = "sustained"
    SINGLE_BRIEF = "single_brief"
    UNKNOWN = "unknown"


class CctvSequence(str, Enum):
    PROLONGED = "prolonged"
    BRIEF = "brief"
    MISSING = "missing"
    UNKNOWN = "unknown"


class WeaponUse(str, Enum):
    SUSTAINED_TARGETED = "sustained_targeted"
    BRIEF_INCIDENTAL = "brief_incidental"
    NONE = "none"
    UNKNOWN = "unknown"


class DisclosureCompleteness(str, Enum):
    COMPLETE = "complete"
    GAPS = "gaps"
    UNKNOWN = "unknown"


class PaceCompliance(str, Enum):
    COMPLIANT = "compliant"
    BREACHES = "breaches"
    UNKNOWN = "unknown"


class ProsecutionStrength(str, Enum):
    STRONG = "strong"
    MODERATE = "moderate"
    WEAK = "weak"
    UNKNOWN = "unknown"


# =============================================================================
# Incident Shape
# =============================================================================

class IncidentShape(str, Enum):
    """Shape of the alleged incident, used by the incident-shape pack."""
    SINGLE_IMPULSIVE_BLOW = "single_impulsive_blow"
    BRIEF_CHAOTIC_SCUFFLE = "brief_chaotic_scuffle"
    SUSTAINED_TARGETED_ATTACK = "sustained_targeted_attack"
    UNCLEAR_DISCLOSURE_DEPENDENT = "unclear_disclosure_dependent"
