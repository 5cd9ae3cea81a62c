"""
StrategyPilot Dependency Tracker

Reconciles the canonical dependency list with the solicitor's declared
dependencies, the disclosure timeline and the evidence-impact map.

Inclusion:
- Canonical dependencies that are declared, or named in the impact map
- Then any other declared dependency marked required or helpful

Status comes from the most recent matching timeline entry:
served/reviewed -> served, outstanding/overdue -> outstanding, anything else
(or no entry) -> unknown.
"""
from __future__ import annotations

import logging
from typing import Optional

from ..models import (
    Catalogue,
    DeclaredDependency,
    DeclaredDependencyStatus,
    DependencyDefinition,
    DependencyState,
    DependencyStatus,
    ImpactMapEntry,
    TimelineEntry,
)
from .matching import AliasTable, entries_for_names, latest_entry, normalize

logger = logging.getLogger(__name__)


SERVED_ACTIONS = frozenset({"served", "reviewed"})
OUTSTANDING_ACTIONS = frozenset({"outstanding", "overdue"})


def status_from_entries(entries: list[TimelineEntry]) -> tuple[DependencyStatus, Optional[TimelineEntry]]:
    """Dependency status implied by the latest of the given entries."""
    latest = latest_entry(entries)
    if latest is None:
        return DependencyStatus.UNKNOWN, None
    action = latest.action.lower().strip()
    if action in SERVED_ACTIONS:
        return DependencyStatus.SERVED, latest
    if action in OUTSTANDING_ACTIONS:
        return DependencyStatus.OUTSTANDING, latest
    return DependencyStatus.UNKNOWN, latest


def _declared_match(
    declared: list[DeclaredDependency],
    dependency: DependencyDefinition,
    table: AliasTable,
) -> Optional[DeclaredDependency]:
    canonical = normalize(dependency.id)
    for item in declared:
        declared_id = normalize(item.id)
        if declared_id and (declared_id in canonical or canonical in declared_id):
            return item
        if table.names(item.label, dependency.id):
            return item
    return None


def track_dependencies(
    catalogue: Catalogue,
    declared: Optional[list[DeclaredDependency]],
    timeline: Optional[list[TimelineEntry]],
    impact_map: Optional[list[ImpactMapEntry]],
) -> list[DependencyState]:
    """
    Build dependency states for a case.

    Args:
        catalogue: Supplies the canonical dependencies and their aliases
        declared: Dependencies declared by the solicitor
        timeline: Disclosure timeline entries
        impact_map: Evidence-impact map entries (may be None)

    Returns:
        Canonical dependency states in catalogue order, followed by other
        declared required/helpful dependencies in declaration order
    """
    declared = declared or []
    timeline = timeline or []
    impact_map = impact_map or []

    states: list[DependencyState] = []
    matched_declared: set[int] = set()

    table = AliasTable.from_catalogue(catalogue)
    by_dependency = table.index(timeline)
    mapped = {dep_id for entry in impact_map for dep_id in table.match(entry.name)}

    for dependency in table.dependencies:
        declared_item = _declared_match(declared, dependency, table)
        if declared_item is None and dependency.id not in mapped:
            continue
        if declared_item is not None:
            matched_declared.add(id(declared_item))

        status, latest = status_from_entries(by_dependency[dependency.id])
        why = (declared_item.note if declared_item is not None else None) or dependency.why
        states.append(DependencyState(
            id=dependency.id,
            label=dependency.label,
            status=status,
            why_it_matters=why,
            last_action_date=latest.date if latest is not None else None,
            critical=dependency.critical,
        ))

    for item in declared:
        if id(item) in matched_declared:
            continue
        if item.status == DeclaredDependencyStatus.NOT_NEEDED:
            continue
        status, latest = status_from_entries(entries_for_names(timeline, item.id, item.label))
        states.append(DependencyState(
            id=item.id,
            label=item.label,
            status=status,
            why_it_matters=item.note or "Required for strategy",
            last_action_date=latest.date if latest is not None else None,
        ))

    logger.debug(
        "Tracked %d dependencies (%d outstanding)",
        len(states), sum(1 for s in states if s.is_outstanding),
    )
    return states
