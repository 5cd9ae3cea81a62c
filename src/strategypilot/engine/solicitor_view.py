"""
StrategyPilot Solicitor View

Condenses a StrategyCoordinatorResult into a one-page view: headline,
dispute points, decisive missing items, top routes, worst-case cap and next
actions.

Pure aggregation of what the result already says. Bounds:
- dispute points: 5 (3 from weak elements, then up to 2 from viable routes)
- decisive missing items: 6
- top routes: 2 (first viable, then first risky)
- next actions: 6
"""
from __future__ import annotations

from typing import Any, Optional

from ..models import (
    DependencyState,
    OffenceElementState,
    RouteAssessment,
    RouteStatus,
    SafetyStatus,
    SolicitorView,
    StrategyCoordinatorResult,
    TopRoute,
)


MAX_DISPUTE_POINTS = 5
MAX_ELEMENT_DISPUTES = 3
MAX_MISSING_ITEMS = 6
MAX_TOP_ROUTES = 2
MAX_NEXT_ACTIONS = 6

POSTURE = {
    SafetyStatus.UNSAFE_TO_PROCEED.value: "Case cannot safely progress",
    SafetyStatus.CONDITIONALLY_UNSAFE.value: "Case conditionally unsafe",
}


def _weak(elements: list[OffenceElementState]) -> list[OffenceElementState]:
    # none before weak; sorted() is stable so ties keep their order
    weak = [e for e in elements if e.is_weak]
    return sorted(weak, key=lambda e: e.support.rank)


def _viable(routes: list[RouteAssessment]) -> list[RouteAssessment]:
    return [r for r in routes if r.status == RouteStatus.VIABLE]


def build_headline(result: StrategyCoordinatorResult) -> str:
    parts = []
    safety = result.plugin_constraints.get("procedural_safety")
    if isinstance(safety, dict) and safety.get("status") in POSTURE:
        parts.append(POSTURE[safety["status"]])

    weak = [e for e in result.elements if e.is_weak]
    if weak:
        parts.append(f"dispute on {weak[0].label.lower()}")
    else:
        parts.append("case under review")

    headline = ": ".join(parts)
    if result.offence.label and result.offence.code != "unknown":
        headline = f"{headline} ({result.offence.label})"
    return headline


def build_dispute_points(
    elements: list[OffenceElementState],
    routes: list[RouteAssessment],
) -> list[str]:
    points = []
    for element in _weak(elements)[:MAX_ELEMENT_DISPUTES]:
        if element.gaps:
            points.append(f"{element.label}: evidence gaps ({', '.join(element.gaps[:2])})")
        else:
            points.append(f"{element.label}: insufficient evidence support")

    for route in _viable(routes)[:2]:
        if route.reasons:
            points.append(f"{route.id.value.replace('_', ' ')}: {route.reasons[0]}")

    return points[:MAX_DISPUTE_POINTS]


def _gap_matches(gap: str, dependency: DependencyState) -> bool:
    gap = gap.lower()
    label = dependency.label.lower()
    return gap in label or label in gap


def build_decisive_missing_items(
    elements: list[OffenceElementState],
    dependencies: list[DependencyState],
    routes: list[RouteAssessment],
) -> list[str]:
    """
    Outstanding dependencies ranked by importance.

    Needed by a viable route first, then bearing on a weak element, then
    anything else outstanding.
    """
    outstanding = [d for d in dependencies if d.is_outstanding]
    ranked: dict[str, str] = {}

    for route in _viable(routes):
        for required in route.required_dependencies:
            for dependency in outstanding:
                if dependency.id == required or required in dependency.id:
                    ranked.setdefault(dependency.id, dependency.label)
                    break

    for element in _weak(elements):
        for gap in element.gaps:
            for dependency in outstanding:
                if _gap_matches(gap, dependency):
                    ranked.setdefault(dependency.id, dependency.label)
                    break

    for dependency in outstanding:
        ranked.setdefault(dependency.id, dependency.label)

    return list(ranked.values())[:MAX_MISSING_ITEMS]


def build_top_routes(routes: list[RouteAssessment]) -> list[TopRoute]:
    top = []
    for status in (RouteStatus.VIABLE, RouteStatus.RISKY):
        candidate = next((r for r in routes if r.status == status), None)
        if candidate is not None:
            top.append(TopRoute(
                id=candidate.id.value,
                label=candidate.label,
                why=candidate.reasons[:2],
            ))
    return top[:MAX_TOP_ROUTES]


def worst_case_cap(plugin_constraints: dict[str, Any]) -> Optional[str]:
    """Worst-case statement contributed by a strategy pack, if any."""
    cap = plugin_constraints.get("worst_case_cap")
    if isinstance(cap, dict) and cap.get("statement"):
        return str(cap["statement"])
    if isinstance(cap, str) and cap:
        return cap
    return None


def build_solicitor_view(result: StrategyCoordinatorResult) -> SolicitorView:
    """
    Build the one-page solicitor view of a coordinator result.

    Args:
        result: A StrategyCoordinatorResult (partial results are fine)

    Returns:
        SolicitorView within the documented bounds
    """
    return SolicitorView(
        headline=build_headline(result),
        dispute_points=build_dispute_points(result.elements, result.routes),
        decisive_missing_items=build_decisive_missing_items(
            result.elements, result.dependencies, result.routes
        ),
        top_routes=build_top_routes(result.routes),
        worst_case_cap=worst_case_cap(result.plugin_constraints),
        next_actions=result.next_actions[:MAX_NEXT_ACTIONS],
    )
