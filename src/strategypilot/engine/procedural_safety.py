"""
StrategyPilot Procedural Safety Evaluator

Classifies whether the case can safely progress given the state of
disclosure.

Status rules:
- No evidence-impact map: CONDITIONALLY_UNSAFE (disclosure status unknown)
- Count critical items (CCTV, BWV, 999, CAD, interview recording) that are
  outstanding in the impact map or the dependency states and not served:
  0 -> SAFE, 1 -> CONDITIONALLY_UNSAFE, >= threshold -> UNSAFE_TO_PROCEED
- A required declared dependency with no timeline entry raises the status to
  at least CONDITIONALLY_UNSAFE

Recording a served item can only remove outstanding items, so it never
worsens the status.
"""
from __future__ import annotations

import logging
from typing import Optional

from ..models import (
    Catalogue,
    CriticalItem,
    DeclaredDependency,
    DeclaredDependencyStatus,
    DependencyState,
    DependencyStatus,
    ImpactMapEntry,
    ProceduralSafety,
    SafetyStatus,
    TimelineEntry,
)
from .matching import contains_phrase, names_overlap

logger = logging.getLogger(__name__)


NO_MAP_EXPLANATION = (
    "Evidence impact map not available. Cannot assess procedural safety "
    "without disclosure status."
)
SAFE_EXPLANATION = (
    "All critical disclosure items appear to be present or not applicable to this case."
)
UNSAFE_EXPLANATION = (
    "This case cannot safely progress beyond a holding position until disclosure "
    "obligations are met. Multiple critical disclosure items are outstanding."
)
CONDITIONAL_EXPLANATION = (
    "This case may be conditionally unsafe to proceed. At least one critical "
    "disclosure item is outstanding."
)
UNTRACKED_EXPLANATION = (
    "Required disclosure items not yet recorded in timeline. This case may be "
    "conditionally unsafe to proceed until disclosure tracking is established."
)


def _names_critical_item(name: str, item: CriticalItem) -> bool:
    return any(contains_phrase(name, label) for label in item.labels + (item.label,))


def outstanding_critical_items(
    impact_map: list[ImpactMapEntry],
    dependencies: list[DependencyState],
    catalogue: Catalogue,
) -> list[CriticalItem]:
    """Critical items outstanding in the impact map or dependency states, minus served ones."""
    served = {
        d.critical for d in dependencies
        if d.critical and d.status == DependencyStatus.SERVED
    }
    outstanding_deps = {d.critical for d in dependencies if d.critical and d.is_outstanding}

    items = []
    for item in catalogue.critical_items:
        if item.id in served:
            continue
        in_map = any(
            entry.is_outstanding and _names_critical_item(entry.name, item)
            for entry in impact_map
        )
        if in_map or item.id in outstanding_deps:
            items.append(item)
    return items


def untracked_required_dependencies(
    declared: list[DeclaredDependency],
    timeline: list[TimelineEntry],
) -> list[DeclaredDependency]:
    """Required declared dependencies with no matching timeline entry."""
    return [
        dep for dep in declared
        if dep.status == DeclaredDependencyStatus.REQUIRED
        and not any(names_overlap(entry.item, dep.id, dep.label) for entry in timeline)
    ]


def evaluate_procedural_safety(
    impact_map: Optional[list[ImpactMapEntry]],
    dependencies: Optional[list[DependencyState]],
    declared: Optional[list[DeclaredDependency]],
    timeline: Optional[list[TimelineEntry]],
    catalogue: Catalogue,
) -> ProceduralSafety:
    """
    Evaluate case-wide procedural safety.

    Args:
        impact_map: Evidence-impact map, None when not supplied
        dependencies: Tracked dependency states
        declared: Declared dependencies
        timeline: Disclosure timeline entries
        catalogue: Supplies critical items and the unsafe threshold

    Returns:
        ProceduralSafety with status, explanation and outstanding items
    """
    dependencies = dependencies or []
    declared = declared or []
    timeline = timeline or []

    if not impact_map:
        status = SafetyStatus.CONDITIONALLY_UNSAFE
        explanation = NO_MAP_EXPLANATION
        outstanding: list[str] = []
        reasons: list[str] = []
    else:
        critical = outstanding_critical_items(impact_map, dependencies, catalogue)
        outstanding = [item.label for item in critical]
        reasons = [f"Critical disclosure outstanding: {label}" for label in outstanding]
        if not critical:
            status, explanation = SafetyStatus.SAFE, SAFE_EXPLANATION
        elif len(critical) >= catalogue.policy.unsafe_critical_threshold:
            status, explanation = SafetyStatus.UNSAFE_TO_PROCEED, UNSAFE_EXPLANATION
        else:
            status, explanation = SafetyStatus.CONDITIONALLY_UNSAFE, CONDITIONAL_EXPLANATION

    untracked = untracked_required_dependencies(declared, timeline)
    if untracked:
        raised = SafetyStatus.worst(status, SafetyStatus.CONDITIONALLY_UNSAFE)
        if raised != status:
            explanation = UNTRACKED_EXPLANATION
        status = raised
        count = len(untracked)
        noun = "dependency" if count == 1 else "dependencies"
        reasons.extend([
            "Required disclosure items not yet recorded in timeline",
            f"{count} required {noun} without timeline entries",
        ])
        for dep in untracked:
            if dep.label not in outstanding:
                outstanding.append(dep.label)

    logger.debug("Procedural safety %s (%d outstanding)", status.value, len(outstanding))
    return ProceduralSafety(
        status=status,
        explanation=explanation,
        outstanding_items=outstanding,
        reasons=reasons,
    )
