"""
StrategyPilot Time-Pressure Engine

Tracks the PTPH, the disclosure deadline, the plea credit drop point and the
last safe pivot moment, and turns them into a leverage level.

Windows:
- ptph: the Plea and Trial Preparation Hearing
- disclosure: the disclosure deadline
- plea_credit: estimated as PTPH + 90 days (trial) - 7 days
- pivot: PTPH - 7 days

A missing source date produces a placeholder window with an explicit
warning; nothing is silently omitted. Day counts are relative to the
caller's reference date.
"""
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Optional, Union

from ..models import (
    LeverageAdjustment,
    LeverageLevel,
    PressureWindow,
    RouteId,
    TimePressureState,
    WindowType,
)
from .confidence_drift import resolve_route_id

logger = logging.getLogger(__name__)


ESTIMATED_TRIAL_AFTER_PTPH = timedelta(days=90)
PLEA_CREDIT_BEFORE_TRIAL = timedelta(days=7)
PIVOT_BEFORE_PTPH = timedelta(days=7)
LEVERAGE_LOST_BEFORE_PTPH = timedelta(days=3)

PTPH_LABEL = "PTPH (Plea and Trial Preparation Hearing)"
PTPH_ACTIONS = [
    "Finalise disclosure requests",
    "Prepare case management submissions",
    "Confirm strategy commitment",
    "Negotiate charge reduction if applicable",
]
DISCLOSURE_ACTIONS = [
    "Chase outstanding disclosure",
    "Document chase trail",
    "Prepare abuse application if failures persist",
]
PLEA_CREDIT_ACTIONS = [
    "Assess plea position before credit drops",
    "Consider early plea if case is strong",
]
PIVOT_ACTIONS = [
    "Reassess strategy based on disclosure",
    "Pivot if evidence supports different route",
    "Commit to strategy before PTPH",
]

LEVERAGE_EXPLANATIONS = {
    LeverageLevel.HIGH: "High time pressure - critical deadlines approaching. Leverage windows closing.",
    LeverageLevel.MEDIUM: "Moderate time pressure - deadlines within 2 weeks. Monitor leverage windows.",
    LeverageLevel.LOW: "Low time pressure - deadlines are distant. Leverage windows open.",
}


# =============================================================================
# Windows
# =============================================================================

def _ptph_window(ptph: Optional[date], today: date) -> PressureWindow:
    if ptph is None:
        return PressureWindow(
            id="ptph",
            type=WindowType.PTPH,
            label=PTPH_LABEL,
            date=None,
            is_placeholder=True,
            days_until=None,
            leverage_impact=LeverageLevel.MEDIUM,
            actions=[
                "Add PTPH date to activate pressure calendar",
                "Request disclosure before PTPH",
                "Prepare case management submissions",
            ],
            warning="PTPH date unknown - add date to track leverage windows",
        )
    days = (ptph - today).days
    if days <= 7:
        impact = LeverageLevel.HIGH
    elif days <= 14:
        impact = LeverageLevel.MEDIUM
    else:
        impact = LeverageLevel.LOW
    return PressureWindow(
        id="ptph",
        type=WindowType.PTPH,
        label=PTPH_LABEL,
        date=ptph,
        is_placeholder=False,
        days_until=days,
        leverage_impact=impact,
        actions=list(PTPH_ACTIONS),
        warning="PTPH approaching - leverage window closing" if days <= 7 else None,
    )


def _disclosure_window(deadline: Optional[date], today: date) -> PressureWindow:
    if deadline is None:
        return PressureWindow(
            id="disclosure",
            type=WindowType.DISCLOSURE_DEADLINE,
            label="Disclosure Deadline",
            date=None,
            is_placeholder=True,
            days_until=None,
            leverage_impact=LeverageLevel.MEDIUM,
            actions=["Add disclosure deadline to track disclosure pressure"] + DISCLOSURE_ACTIONS[:2],
            warning="Disclosure deadline unknown - add date to track disclosure pressure",
        )
    days = (deadline - today).days
    return PressureWindow(
        id="disclosure",
        type=WindowType.DISCLOSURE_DEADLINE,
        label="Disclosure Deadline",
        date=deadline,
        is_placeholder=False,
        days_until=days,
        leverage_impact=LeverageLevel.HIGH if days <= 14 else LeverageLevel.MEDIUM,
        actions=list(DISCLOSURE_ACTIONS),
        warning="Disclosure deadline approaching" if days <= 7 else None,
    )


def _plea_credit_window(ptph: Optional[date], today: date) -> PressureWindow:
    if ptph is None:
        return PressureWindow(
            id="plea_credit",
            type=WindowType.PLEA_CREDIT_DROP,
            label="Plea Credit Drop Point (estimated)",
            date=None,
            is_placeholder=True,
            days_until=None,
            leverage_impact=LeverageLevel.MEDIUM,
            actions=list(PLEA_CREDIT_ACTIONS),
            warning="Plea credit drop point unknown - depends on PTPH date",
        )
    drop = ptph + ESTIMATED_TRIAL_AFTER_PTPH - PLEA_CREDIT_BEFORE_TRIAL
    days = (drop - today).days
    # Always an estimate, so always flagged as a placeholder
    return PressureWindow(
        id="plea_credit",
        type=WindowType.PLEA_CREDIT_DROP,
        label="Plea Credit Drop Point (estimated)",
        date=drop,
        is_placeholder=True,
        days_until=days,
        leverage_impact=LeverageLevel.HIGH if days <= 14 else LeverageLevel.MEDIUM,
        actions=list(PLEA_CREDIT_ACTIONS),
        warning="Plea credit window closing" if days <= 7 else None,
    )


def _pivot_window(ptph: Optional[date], today: date) -> PressureWindow:
    if ptph is None:
        return PressureWindow(
            id="pivot",
            type=WindowType.PIVOT_MOMENT,
            label="Last Safe Pivot Moment",
            date=None,
            is_placeholder=True,
            days_until=None,
            leverage_impact=LeverageLevel.MEDIUM,
            actions=list(PIVOT_ACTIONS),
            warning="Last safe pivot moment unknown - depends on PTPH date",
        )
    pivot = ptph - PIVOT_BEFORE_PTPH
    days = (pivot - today).days
    return PressureWindow(
        id="pivot",
        type=WindowType.PIVOT_MOMENT,
        label="Last Safe Pivot Moment",
        date=pivot,
        is_placeholder=False,
        days_until=days,
        leverage_impact=LeverageLevel.HIGH if days <= 7 else LeverageLevel.MEDIUM,
        actions=list(PIVOT_ACTIONS),
        warning="Last safe pivot moment approaching" if days <= 3 else None,
    )


def _within(window: PressureWindow, days: int) -> bool:
    return window.days_until is not None and window.days_until <= days


# =============================================================================
# Time-Pressure State
# =============================================================================

def build_time_pressure_state(
    hearing_date: Optional[date],
    disclosure_deadline: Optional[date],
    reference_date: date,
) -> TimePressureState:
    """
    Build pressure windows and the leverage they imply.

    Args:
        hearing_date: PTPH date, None if unknown
        disclosure_deadline: Disclosure deadline, None if unknown
        reference_date: The date treated as today

    Returns:
        TimePressureState with windows in ptph, disclosure, plea_credit,
        pivot order
    """
    windows = [
        _ptph_window(hearing_date, reference_date),
        _disclosure_window(disclosure_deadline, reference_date),
        _plea_credit_window(hearing_date, reference_date),
        _pivot_window(hearing_date, reference_date),
    ]

    if any(w.leverage_impact == LeverageLevel.HIGH and _within(w, 7) for w in windows):
        leverage = LeverageLevel.HIGH
    elif any(w.leverage_impact == LeverageLevel.MEDIUM and _within(w, 14) for w in windows):
        leverage = LeverageLevel.MEDIUM
    else:
        leverage = LeverageLevel.LOW

    critical: list[str] = []
    for window in windows:
        if _within(window, 7):
            critical.extend(window.actions)

    losing = []
    no_longer = []
    if hearing_date is not None:
        if reference_date > hearing_date - LEVERAGE_LOST_BEFORE_PTPH:
            losing = [
                "Strategy pivot (leverage lost after PTPH)",
                "Charge reduction negotiation (less effective after PTPH)",
            ]
        if reference_date > hearing_date:
            no_longer = [
                "Late disclosure requests (should have been made before PTPH)",
                "Premature abuse applications (without proper chase trail)",
            ]

    logger.debug("Time pressure %s across %d windows", leverage.value, len(windows))
    return TimePressureState(
        windows=windows,
        current_leverage=leverage,
        leverage_explanation=LEVERAGE_EXPLANATIONS[leverage],
        time_critical_actions=list(dict.fromkeys(critical)),
        losing_leverage_actions=losing,
        no_longer_attractive_actions=no_longer,
    )


# =============================================================================
# Route Leverage
# =============================================================================

# route -> (high-pressure explanation, actions, otherwise explanation)
_ROUTE_LEVERAGE = {
    RouteId.FIGHT_CHARGE: (
        "High time pressure increases urgency for disclosure requests and challenge "
        "preparation. Leverage window closing.",
        ["Request disclosure immediately - time critical", "Document chase trail urgently"],
        "Time pressure is moderate. Proceed with disclosure requests and challenge preparation.",
    ),
    RouteId.CHARGE_REDUCTION: (
        "High time pressure - negotiate charge reduction before PTPH to preserve leverage.",
        [
            "Negotiate charge reduction urgently - before PTPH",
            "Prepare written submissions on intent distinction",
        ],
        "Time pressure allows negotiation window. Prepare charge reduction case before PTPH.",
    ),
    RouteId.OUTCOME_MANAGEMENT: (
        "High time pressure - assess plea position before credit drops. Early plea credit "
        "window closing.",
        ["Assess plea position urgently - credit window closing", "Prepare mitigation package"],
        "Time pressure allows assessment window. Consider early plea if case is strong.",
    ),
}


def adjust_strategy_leverage(
    route: Union[RouteId, str],
    state: TimePressureState,
) -> LeverageAdjustment:
    """
    Route-specific leverage guidance.

    High overall pressure makes the route's leverage high with urgent
    actions; anything else leaves it at medium.

    Raises:
        UnknownRouteError: If route is not a canonical route
    """
    route_id = resolve_route_id(route)
    high_explanation, urgent_actions, normal_explanation = _ROUTE_LEVERAGE[route_id]
    if state.current_leverage == LeverageLevel.HIGH:
        return LeverageAdjustment(
            route=route_id,
            adjusted_leverage=LeverageLevel.HIGH,
            explanation=high_explanation,
            time_aware_actions=list(urgent_actions),
        )
    return LeverageAdjustment(
        route=route_id,
        adjusted_leverage=LeverageLevel.MEDIUM,
        explanation=normal_explanation,
    )
