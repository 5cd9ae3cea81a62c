"""
StrategyPilot Catalogue Models

Immutable reference data loaded from a catalogue pack: offence definitions,
the canonical dependency list, critical disclosure items, canonical routes,
confidence scoring rules, doctrine texts and policy thresholds.

These replace constants scattered across the engine. A Catalogue is built
once by strategypilot.packs.loader and shared read-only between calls.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .enums import RouteId


# =============================================================================
# Offences
# =============================================================================

@dataclass(frozen=True)
class OffenceElement:
    """A legal element the prosecution must prove."""
    id: str
    label: str


@dataclass(frozen=True)
class OffenceDefinition:
    """
    A canonical offence with its ordered legal elements.

    Attributes:
        code: Canonical offence code (e.g. "s18_oapa")
        label: Human-readable offence label
        elements: Ordered legal elements
        patterns: Regex lexicon matched against charges and text
    """
    code: str
    label: str
    elements: tuple[OffenceElement, ...] = ()
    patterns: tuple[str, ...] = ()

    def element_ids(self) -> list[str]:
        return [e.id for e in self.elements]

    def has_element(self, element_id: str) -> bool:
        return any(e.id == element_id for e in self.elements)


# =============================================================================
# Dependencies
# =============================================================================

@dataclass(frozen=True)
class DependencyDefinition:
    """
    A canonical evidentiary dependency.

    aliases and excludes form the declarative alias table used to match
    free-text timeline items and impact-map names to this dependency.
    key_disclosure marks items whose absence gives procedural leverage.
    """
    id: str
    label: str
    why: str
    aliases: tuple[str, ...] = ()
    excludes: tuple[str, ...] = ()
    critical: Optional[str] = None  # critical item id, if any
    key_disclosure: bool = False


@dataclass(frozen=True)
class CriticalItem:
    """A disclosure item whose absence makes progression unsafe."""
    id: str
    label: str
    labels: tuple[str, ...] = ()


# =============================================================================
# Routes and Confidence
# =============================================================================

@dataclass(frozen=True)
class RouteDefinition:
    """
    A canonical strategy route.

    Attributes:
        id: Route identifier
        label: Display label
        required_dependencies: Dependency ids the route relies on
        key_elements: Elements whose partial support makes the route risky
        angles: Granular lines of argument evaluated for this route
    """
    id: RouteId
    label: str
    required_dependencies: tuple[str, ...] = ()
    key_elements: tuple[str, ...] = ()
    angles: tuple[str, ...] = ()


@dataclass(frozen=True)
class ConfidenceRule:
    """One additive row of a route's confidence table."""
    signal: str
    value: str
    weight: int
    min_gaps: int = 0  # only for disclosure_completeness == gaps


@dataclass(frozen=True)
class PolicyThresholds:
    """
    Tunable policy parameters.

    The confidence cut-offs and the unsafe critical count have no documented
    derivation; they are kept as data so they can be tuned per catalogue.
    """
    confidence_high_min: int = 3
    confidence_medium_min: int = 0
    unknown_penalty: int = 1
    unsafe_critical_threshold: int = 2
    max_next_actions: int = 8
    max_chased_dependencies: int = 3
    follow_up_after_days: int = 7
    chase_after_days: int = 14
    max_residual_angles: int = 6


# =============================================================================
# Doctrine
# =============================================================================

@dataclass(frozen=True)
class Doctrine:
    """
    Doctrine statements for one legal principle.

    The lens fields feed the judge constraint lens; the analysis fields feed
    the shorter judge analysis. Any field may be absent.
    """
    id: str
    title: str
    detail: str
    applies_to: tuple[str, ...] = ()
    required_finding: Optional[str] = None
    intolerance: Optional[str] = None
    lens_red_flag: Optional[str] = None
    legal_test: Optional[str] = None
    constraint: Optional[str] = None
    tolerance: Optional[str] = None
    evidential_requirement: Optional[str] = None
    analysis_red_flag: Optional[str] = None


# =============================================================================
# Catalogue
# =============================================================================

@dataclass(frozen=True)
class Catalogue:
    """A loaded, validated catalogue pack."""
    id: str
    name: str
    version: str
    jurisdiction: str
    offences: tuple[OffenceDefinition, ...]
    default_offence: OffenceDefinition
    element_keywords: dict[str, tuple[str, ...]] = field(default_factory=dict)
    dependencies: tuple[DependencyDefinition, ...] = ()
    critical_items: tuple[CriticalItem, ...] = ()
    routes: tuple[RouteDefinition, ...] = ()
    confidence_rules: dict[RouteId, tuple[ConfidenceRule, ...]] = field(default_factory=dict)
    doctrines: dict[str, Doctrine] = field(default_factory=dict)
    policy: PolicyThresholds = field(default_factory=PolicyThresholds)

    def get_route(self, route_id: RouteId) -> Optional[RouteDefinition]:
        for route in self.routes:
            if route.id == route_id:
                return route
        return None

    def get_dependency(self, dependency_id: str) -> Optional[DependencyDefinition]:
        for dependency in self.dependencies:
            if dependency.id == dependency_id:
                return dependency
        return None

    def doctrine(self, doctrine_id: str) -> Optional[Doctrine]:
        return self.doctrines.get(doctrine_id)

    def keywords_for(self, element_id: str) -> tuple[str, ...]:
        return self.element_keywords.get(element_id, ())
