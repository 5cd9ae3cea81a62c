"""
StrategyPilot Exception Hierarchy

Domain-specific exceptions for the strategy reasoning engine.
All exceptions include error codes for tracking and logging.

Exception codes follow the pattern: SP_<CATEGORY>_<SPECIFIC>

The coordinator never lets these escape to its caller; they surface from
direct library calls (catalogue loading, single-module helpers) and are
converted into audit-trace entries inside the coordinator.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class StrategyPilotError(Exception):
    """
    Base exception for all StrategyPilot errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (SP_*)
        details: Additional context about the error
        case_id: Associated case ID if applicable
    """
    message: str
    code: str = "SP_INTERNAL_ERROR"
    details: dict[str, Any] = field(default_factory=dict)
    case_id: Optional[str] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.case_id:
            parts.append(f"(case: {self.case_id})")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception for logging/audit output."""
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.case_id:
            result["case_id"] = self.case_id
        return result


# =============================================================================
# Catalogue Errors
# =============================================================================

@dataclass
class CatalogueLoadError(StrategyPilotError):
    """Failed to read a catalogue pack from file."""
    code: str = "SP_CATALOGUE_LOAD_ERROR"


@dataclass
class CatalogueValidationError(StrategyPilotError):
    """Catalogue pack failed schema or reference validation."""
    code: str = "SP_CATALOGUE_VALIDATION_ERROR"


@dataclass
class CatalogueVersionMismatch(StrategyPilotError):
    """Catalogue schema version is incompatible with this engine."""
    code: str = "SP_CATALOGUE_VERSION_MISMATCH"


# =============================================================================
# Engine Errors
# =============================================================================

@dataclass
class UnknownRouteError(StrategyPilotError):
    """Requested route is not one of the canonical routes."""
    code: str = "SP_UNKNOWN_ROUTE"


@dataclass
class StrategyPackError(StrategyPilotError):
    """An injected strategy pack failed to produce constraints."""
    code: str = "SP_STRATEGY_PACK_ERROR"
