"""
StrategyPilot Confidence Drift Calculator

Route confidence from an additive rule table, and how it moves when the
evidence signals change.

Key features:
- Per-route rule tables loaded from the catalogue (signal, value, weight)
- Every referenced signal that is "unknown" costs the unknown penalty once
- Bands: HIGH >= high_min, MEDIUM >= medium_min, else LOW
- Drift between two snapshots with named triggers and a direction
  (increase, decrease, or collapse from HIGH straight to LOW)
- Closed analysis gate holds confidence at LOW

Confidence is a band, never a probability.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from ..exceptions import UnknownRouteError
from ..models import (
    Catalogue,
    ConfidenceChange,
    ConfidenceLevel,
    ConfidenceRule,
    ConfidenceState,
    DriftDirection,
    EvidenceSignals,
    RouteId,
)

logger = logging.getLogger(__name__)


FALLBACK_TRIGGER = "Evidence signals changed"
GATED_EXPLANATION = (
    "Confidence: LOW. Analysis gated: extracted text is not usable, so "
    "confidence is held at LOW until evidence can be assessed."
)

# (signal, from value, to value, trigger text) per route
TRANSITION_TRIGGERS: dict[RouteId, tuple[tuple[str, str, str, str], ...]] = {
    RouteId.FIGHT_CHARGE: (
        ("id_strength", "weak", "strong", "Identification evidence strengthened"),
        ("id_strength", "strong", "weak", "Identification evidence weakened"),
        ("disclosure_completeness", "gaps", "complete", "Full disclosure provided"),
        ("disclosure_completeness", "complete", "gaps", "Disclosure gaps identified"),
        ("pace_compliance", "compliant", "breaches", "PACE breaches identified"),
        ("pace_compliance", "breaches", "compliant", "PACE compliance confirmed"),
    ),
    RouteId.CHARGE_REDUCTION: (
        ("medical_evidence", "single_brief", "sustained", "Medical evidence shows sustained injuries"),
        ("medical_evidence", "sustained", "single_brief", "Medical evidence shows single/brief injuries"),
        ("cctv_sequence", "brief", "prolonged", "CCTV shows prolonged sequence"),
        ("cctv_sequence", "prolonged", "brief", "CCTV shows brief sequence"),
    ),
    RouteId.OUTCOME_MANAGEMENT: (),
}


def resolve_route_id(route: Union[RouteId, str]) -> RouteId:
    """Coerce a route id, raising UnknownRouteError for anything non-canonical."""
    try:
        return RouteId(route)
    except ValueError:
        raise UnknownRouteError(
            message=f"Unknown route: {route}",
            details={"route": str(route), "known": [r.value for r in RouteId]},
        )


# =============================================================================
# Calculator
# =============================================================================

@dataclass
class ConfidenceCalculator:
    """
    Scores route confidence against a catalogue's rule tables.

    Usage:
        calculator = ConfidenceCalculator(catalogue)
        level = calculator.base_confidence(RouteId.FIGHT_CHARGE, signals)
        state = calculator.state(RouteId.FIGHT_CHARGE, signals, previous)
    """
    catalogue: Catalogue

    def rules(self, route: Union[RouteId, str]) -> tuple[ConfidenceRule, ...]:
        route_id = resolve_route_id(route)
        if route_id not in self.catalogue.confidence_rules:
            raise UnknownRouteError(
                message=f"No confidence rules for route: {route_id.value}",
                details={"route": route_id.value, "catalogue": self.catalogue.id},
            )
        return self.catalogue.confidence_rules[route_id]

    def score(self, route: Union[RouteId, str], signals: EvidenceSignals) -> int:
        """Additive score before banding."""
        rules = self.rules(route)
        score = 0
        for rule in rules:
            if signals.value_of(rule.signal) != rule.value:
                continue
            if rule.min_gaps and len(signals.disclosure_gaps) < rule.min_gaps:
                continue
            score += rule.weight

        referenced = dict.fromkeys(rule.signal for rule in rules)
        unknown = [signal for signal in referenced if signals.is_unknown(signal)]
        score -= self.catalogue.policy.unknown_penalty * len(unknown)
        return score

    def base_confidence(
        self,
        route: Union[RouteId, str],
        signals: EvidenceSignals,
    ) -> ConfidenceLevel:
        policy = self.catalogue.policy
        score = self.score(route, signals)
        if score >= policy.confidence_high_min:
            return ConfidenceLevel.HIGH
        if score >= policy.confidence_medium_min:
            return ConfidenceLevel.MEDIUM
        return ConfidenceLevel.LOW

    def drift(
        self,
        route: Union[RouteId, str],
        previous: EvidenceSignals,
        current: EvidenceSignals,
    ) -> Optional[ConfidenceChange]:
        """The confidence change between two snapshots, or None if unchanged."""
        route_id = resolve_route_id(route)
        before = self.base_confidence(route_id, previous)
        after = self.base_confidence(route_id, current)
        if before == after:
            return None

        triggers = [
            text
            for signal, old, new, text in TRANSITION_TRIGGERS.get(route_id, ())
            if previous.value_of(signal) == old and current.value_of(signal) == new
        ]
        trigger = "; ".join(triggers) if triggers else FALLBACK_TRIGGER

        if before == ConfidenceLevel.HIGH and after == ConfidenceLevel.LOW:
            direction = DriftDirection.COLLAPSE
        elif after.rank > before.rank:
            direction = DriftDirection.INCREASE
        else:
            direction = DriftDirection.DECREASE

        verb = {
            DriftDirection.INCREASE: "increased",
            DriftDirection.DECREASE: "decreased",
            DriftDirection.COLLAPSE: "collapsed",
        }[direction]

        return ConfidenceChange(
            from_level=before,
            to_level=after,
            trigger=trigger,
            explanation=f"Confidence {verb} from {before.value} to {after.value} because: {trigger}.",
            evidence_backed=bool(triggers),
            direction=direction,
        )

    def state(
        self,
        route: Union[RouteId, str],
        current: EvidenceSignals,
        previous: Optional[EvidenceSignals] = None,
        gate_open: bool = True,
    ) -> ConfidenceState:
        """Current confidence for a route, with drift when previous signals are given."""
        route_id = resolve_route_id(route)
        if not gate_open:
            return ConfidenceState(
                route=route_id,
                current=ConfidenceLevel.LOW,
                explanation=GATED_EXPLANATION,
            )

        level = self.base_confidence(route_id, current)
        changes = []
        previous_level = None
        if previous is not None:
            previous_level = self.base_confidence(route_id, previous)
            change = self.drift(route_id, previous, current)
            if change is not None:
                changes.append(change)

        return ConfidenceState(
            route=route_id,
            current=level,
            previous=previous_level,
            changes=changes,
            explanation=confidence_explanation(route_id, level, current, changes),
        )


def confidence_explanation(
    route: RouteId,
    level: ConfidenceLevel,
    signals: EvidenceSignals,
    changes: list[ConfidenceChange],
) -> str:
    """Sentence naming the confidence, its latest change and the signals behind it."""
    explanation = f"Confidence: {level.value}. "
    if changes:
        latest = changes[-1]
        explanation += (
            f"Confidence {latest.from_level.value} → {latest.to_level.value} "
            f"due to: {latest.trigger}. "
        )

    reasons = []
    if route == RouteId.FIGHT_CHARGE:
        if signals.value_of("id_strength") == "weak":
            reasons.append("weak identification evidence")
        if signals.value_of("disclosure_completeness") == "gaps":
            reasons.append("disclosure gaps")
        if signals.value_of("pace_compliance") == "breaches":
            reasons.append("PACE breaches")
        if signals.is_unknown("id_strength") or signals.is_unknown("disclosure_completeness"):
            reasons.append("key evidence signals unknown")
    elif route == RouteId.CHARGE_REDUCTION:
        if signals.value_of("medical_evidence") == "single_brief":
            reasons.append("single/brief injury pattern")
        if signals.value_of("cctv_sequence") == "brief":
            reasons.append("brief CCTV sequence")
        if signals.is_unknown("medical_evidence") or signals.is_unknown("cctv_sequence"):
            reasons.append("key evidence signals unknown")
    elif route == RouteId.OUTCOME_MANAGEMENT:
        if signals.value_of("prosecution_strength") == "strong":
            reasons.append("strong prosecution case")
        if signals.is_unknown("prosecution_strength"):
            reasons.append("prosecution strength uncertain")

    if reasons:
        explanation += f"Based on: {', '.join(reasons)}."
    return explanation.strip()


# =============================================================================
# Convenience Functions
# =============================================================================

def _calculator(catalogue: Optional[Catalogue]) -> ConfidenceCalculator:
    if catalogue is None:
        from ..packs import default_catalogue
        catalogue = default_catalogue()
    return ConfidenceCalculator(catalogue)


def assess_base_confidence(
    route: Union[RouteId, str],
    signals: EvidenceSignals,
    catalogue: Optional[Catalogue] = None,
) -> ConfidenceLevel:
    """Confidence band for a route under the given signals."""
    return _calculator(catalogue).base_confidence(route, signals)


def detect_confidence_drift(
    route: Union[RouteId, str],
    previous: EvidenceSignals,
    current: EvidenceSignals,
    catalogue: Optional[Catalogue] = None,
) -> Optional[ConfidenceChange]:
    """Confidence change between two snapshots, None when unchanged."""
    return _calculator(catalogue).drift(route, previous, current)


def calculate_confidence_state(
    route: Union[RouteId, str],
    current: EvidenceSignals,
    previous: Optional[EvidenceSignals] = None,
    gate_open: bool = True,
    catalogue: Optional[Catalogue] = None,
) -> ConfidenceState:
    """Confidence state for a route; LOW when the gate is closed."""
    return _calculator(catalogue).state(route, current, previous, gate_open)
