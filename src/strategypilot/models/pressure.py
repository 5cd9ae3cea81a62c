"""
StrategyPilot Time-Pressure Models

Pressure windows around the hearing and disclosure dates, the overall
leverage level they imply, and per-route leverage guidance.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from .enums import LeverageLevel, RouteId, WindowType


@dataclass
class PressureWindow:
    """
    A time window that affects strategic leverage.

    Attributes:
        id: Window identifier
        type: Kind of window
        label: Display label
        date: Window date, None if the source date is unknown
        is_placeholder: Date unknown or only estimated
        days_until: Days from the reference date, None if date unknown
        leverage_impact: high / medium / low
        actions: Actions tied to this window
        warning: Explicit warning (always present for unknown dates)
    """
    id: str
    type: WindowType
    label: str
    date: Optional[date]
    is_placeholder: bool
    days_until: Optional[int]
    leverage_impact: LeverageLevel
    actions: list[str] = field(default_factory=list)
    warning: Optional[str] = None


@dataclass
class TimePressureState:
    """All pressure windows and the leverage they imply."""
    windows: list[PressureWindow] = field(default_factory=list)
    current_leverage: LeverageLevel = LeverageLevel.LOW
    leverage_explanation: str = ""
    time_critical_actions: list[str] = field(default_factory=list)
    losing_leverage_actions: list[str] = field(default_factory=list)
    no_longer_attractive_actions: list[str] = field(default_factory=list)


@dataclass
class LeverageAdjustment:
    """Route-specific leverage guidance under the current time pressure."""
    route: RouteId
    adjusted_leverage: LeverageLevel
    explanation: str
    time_aware_actions: list[str] = field(default_factory=list)
