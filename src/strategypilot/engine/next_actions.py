"""
StrategyPilot Next Actions Generator

Deterministic, procedural next steps derived from dependency states, route
assessments, the recorded position and irreversible decisions.

Order:
1. Chase outstanding dependencies (request / follow up / chase by age)
2. Verify CCTV continuity when it is outstanding
3. Confirm medical mechanism when the causation line of argument is not viable
4. Record the defence position when none is recorded
5. Factual reminder when irreversible decisions coexist with outstanding
   key disclosure
6. Review blocked routes
7. Assess risky routes

Day counts are relative to the caller's reference date, never the clock.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..models import (
    DependencyState,
    IrreversibleDecision,
    PolicyThresholds,
    RecordedPosition,
    RouteAssessment,
    RouteStatus,
)

logger = logging.getLogger(__name__)


CONTINUITY_ACTION = "Verify CCTV continuity and date/time consistency"
MEDICAL_ACTION = "Confirm medical mechanism and fracture/injury causation"
RECORD_POSITION_ACTION = "Record defence position if strategy commitment made"
IRREVERSIBLE_REMINDER = (
    "Factual reminder: Key required dependencies remain outstanding; ensure "
    "rationale recorded for any irreversible decisions"
)


def chase_action(
    dependency: DependencyState,
    reference_date: date,
    policy: PolicyThresholds,
) -> Optional[str]:
    """
    Chase wording for one outstanding dependency.

    Never requested → request; chased recently → nothing yet.
    """
    if dependency.last_action_date is None:
        return f"Request {dependency.label}"
    days = (reference_date - dependency.last_action_date).days
    if days >= policy.chase_after_days:
        return f"Chase {dependency.label} (last action {days} days ago)"
    if days >= policy.follow_up_after_days:
        return f"Follow up on {dependency.label} (requested {days} days ago)"
    return None


def _causation_in_doubt(routes: list[RouteAssessment]) -> bool:
    for route in routes:
        angle = route.angle("weapon_uncertainty_causation")
        if angle is not None and angle.status in (RouteStatus.RISKY, RouteStatus.BLOCKED):
            return True
    return False


def generate_next_actions(
    dependencies: list[DependencyState],
    routes: list[RouteAssessment],
    recorded_position: Optional[RecordedPosition],
    irreversible: Optional[list[IrreversibleDecision]],
    reference_date: date,
    policy: Optional[PolicyThresholds] = None,
) -> list[str]:
    """
    Generate the ordered next actions for a case.

    Args:
        dependencies: Tracked dependency states
        routes: Route assessments
        recorded_position: Recorded defence position, if any
        irreversible: Irreversible decisions on the case
        reference_date: The date treated as today
        policy: Output caps and chase thresholds (catalogue defaults if None)

    Returns:
        At most policy.max_next_actions procedural actions
    """
    policy = policy or PolicyThresholds()
    limit = policy.max_next_actions
    actions: list[str] = []

    outstanding = [d for d in dependencies if d.is_outstanding]
    chased = 0
    for dependency in outstanding:
        if chased >= policy.max_chased_dependencies:
            break
        action = chase_action(dependency, reference_date, policy)
        if action:
            actions.append(action)
            chased += 1

    continuity = next((d for d in dependencies if "continuity" in d.id), None)
    if continuity is not None and continuity.is_outstanding:
        actions.append(CONTINUITY_ACTION)

    if _causation_in_doubt(routes):
        actions.append(MEDICAL_ACTION)

    if recorded_position is None or not (
        recorded_position.primary or recorded_position.position_type
    ):
        actions.append(RECORD_POSITION_ACTION)

    key_outstanding = [d for d in outstanding if d.critical]
    if key_outstanding and any(d.is_active for d in irreversible or []):
        actions.append(IRREVERSIBLE_REMINDER)

    blocked = [r for r in routes if r.status == RouteStatus.BLOCKED]
    if blocked:
        actions.append(
            f"Review {len(blocked)} blocked route(s) - disclosure or evidence required"
        )

    risky = [r for r in routes if r.status == RouteStatus.RISKY]
    if risky:
        actions.append(f"Assess {len(risky)} risky route(s) - evidence gaps present")

    actions = list(dict.fromkeys(actions))[:limit]
    logger.debug("Generated %d next actions", len(actions))
    return actions
