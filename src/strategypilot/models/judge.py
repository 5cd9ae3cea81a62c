"""
StrategyPilot Judge Models

Doctrine-based statements about what the court must require evidence of.
Strictly non-probabilistic: nothing here says what a court is likely to do.
"""
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class JudgeConstraint:
    """A doctrine constraint and the elements or issues it applies to."""
    title: str
    detail: str
    applies_to: list[str] = field(default_factory=list)


@dataclass
class JudgeConstraintLens:
    """
    Constraints the court must apply on the current state.

    Caps: constraints 10, required findings 8, intolerances 6, red flags 6.
    """
    constraints: list[JudgeConstraint] = field(default_factory=list)
    required_findings: list[str] = field(default_factory=list)
    intolerances: list[str] = field(default_factory=list)
    red_flags: list[str] = field(default_factory=list)


@dataclass
class JudgeAnalysis:
    """
    Condensed legal tests and evidential requirements.

    Caps: legal tests, constraints and evidential requirements 8;
    tolerances and red flags 6.
    """
    legal_tests: list[str] = field(default_factory=list)
    constraints: list[str] = field(default_factory=list)
    tolerances: list[str] = field(default_factory=list)
    red_flags: list[str] = field(default_factory=list)
    evidential_requirements: list[str] = field(default_factory=list)
