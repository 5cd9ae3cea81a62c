"""
StrategyPilot Confidence Models

Route confidence and its drift between two evidence-signal snapshots.
Confidence is a band derived from a fixed additive rule table, never a
probability.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .enums import ConfidenceLevel, DriftDirection, RouteId


@dataclass
class ConfidenceChange:
    """
    A directional confidence change.

    Attributes:
        from_level: Confidence under the previous signals
        to_level: Confidence under the current signals
        trigger: Named signal transitions, joined with "; "
        explanation: Sentence describing the change
        evidence_backed: True only when at least one named trigger was found
        direction: increase / decrease / collapse
    """
    from_level: ConfidenceLevel
    to_level: ConfidenceLevel
    trigger: str
    explanation: str
    evidence_backed: bool
    direction: DriftDirection


@dataclass
class ConfidenceState:
    """Current confidence for a route with any detected change."""
    route: RouteId
    current: ConfidenceLevel
    previous: Optional[ConfidenceLevel] = None
    changes: list[ConfidenceChange] = field(default_factory=list)
    explanation: str = ""
