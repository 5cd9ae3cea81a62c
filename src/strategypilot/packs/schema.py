"""
StrategyPilot Catalogue Pack Schemas

Pydantic models for validating catalogue pack YAML/JSON files.

These schemas define the structure of catalogue packs loaded at runtime.
They map to the frozen domain models in strategypilot.models.catalogue.

Schema versioning:
- schema_version field tracks breaking changes
- Loaders check the major version for compatibility
"""
from __future__ import annotations

import re
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


# =============================================================================
# Schema Version
# =============================================================================

SCHEMA_VERSION = "1.0.0"


# =============================================================================
# Enums as Literals (for YAML validation)
# =============================================================================

RouteIdValue = Literal["fight_charge", "charge_reduction", "outcome_management"]

AngleIdValue = Literal[
    "identification_challenge",
    "act_denial",
    "weapon_uncertainty_causation",
    "self_defence",
    "procedural_disclosure_leverage",
    "intent_denial",
    "alternative_mental_state_offence",
    "mitigation_early_resolution",
]

SignalNameValue = Literal[
    "id_strength",
    "id_conditions",
    "medical_evidence",
    "cctv_sequence",
    "weapon_use",
    "disclosure_completeness",
    "pace_compliance",
    "prosecution_strength",
]


# =============================================================================
# Offence Schemas
# =============================================================================

class OffenceElementSchema(BaseModel):
    """Schema for a legal element."""
    id: str = Field(..., description="Element identifier")
    label: str = Field(..., description="Human-readable label")


class OffenceSchema(BaseModel):
    """Schema for an offence definition."""
    code: str = Field(..., description="Canonical offence code (e.g., 's18_oapa')")
    label: str = Field(..., description="Human-readable offence label")
    patterns: list[str] = Field(default_factory=list, description="Regex lexicon")
    elements: list[OffenceElementSchema] = Field(..., min_length=1)

    @field_validator("patterns")
    @classmethod
    def validate_patterns(cls, v: list[str]) -> list[str]:
        """Reject patterns that do not compile."""
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"Invalid pattern {pattern!r}: {e}")
        return v


# =============================================================================
# Dependency Schemas
# =============================================================================

class DependencySchema(BaseModel):
    """Schema for a canonical dependency and its alias table row."""
    id: str
    label: str
    why: str = Field("", description="Why the item matters to strategy")
    aliases: list[str] = Field(default_factory=list)
    excludes: list[str] = Field(default_factory=list)
    critical: Optional[str] = Field(None, description="Critical item id")
    key_disclosure: bool = Field(False, description="Outstanding item gives disclosure leverage")


class CriticalItemSchema(BaseModel):
    """Schema for a critical disclosure item."""
    id: str
    label: str
    labels: list[str] = Field(..., min_length=1)


# =============================================================================
# Route and Confidence Schemas
# =============================================================================

class RouteSchema(BaseModel):
    """Schema for a canonical route."""
    id: RouteIdValue
    label: str
    required_dependencies: list[str] = Field(default_factory=list)
    key_elements: list[str] = Field(default_factory=list)
    angles: list[AngleIdValue] = Field(..., min_length=1)


class ConfidenceRuleSchema(BaseModel):
    """Schema for one additive confidence rule."""
    signal: SignalNameValue
    value: str
    weight: int
    min_gaps: int = Field(0, ge=0)


class PolicySchema(BaseModel):
    """Schema for tunable policy thresholds."""
    confidence_high_min: int = 3
    confidence_medium_min: int = 0
    unknown_penalty: int = Field(1, ge=0)
    unsafe_critical_threshold: int = Field(2, ge=1)
    max_next_actions: int = Field(8, ge=1, le=8)
    max_chased_dependencies: int = Field(3, ge=0)
    follow_up_after_days: int = Field(7, ge=0)
    chase_after_days: int = Field(14, ge=0)
    max_residual_angles: int = Field(6, ge=1)

    @model_validator(mode="after")
    def validate_ordering(self) -> "PolicySchema":
        """HIGH must need a higher score than MEDIUM."""
        if self.confidence_high_min <= self.confidence_medium_min:
            raise ValueError("confidence_high_min must exceed confidence_medium_min")
        if self.chase_after_days < self.follow_up_after_days:
            raise ValueError("chase_after_days must not be below follow_up_after_days")
        return self


# =============================================================================
# Doctrine Schema
# =============================================================================

class DoctrineSchema(BaseModel):
    """Schema for a doctrine entry."""
    id: str
    title: str
    detail: str
    applies_to: list[str] = Field(default_factory=list)
    required_finding: Optional[str] = None
    intolerance: Optional[str] = None
    lens_red_flag: Optional[str] = None
    legal_test: Optional[str] = None
    constraint: Optional[str] = None
    tolerance: Optional[str] = None
    evidential_requirement: Optional[str] = None
    analysis_red_flag: Optional[str] = None


# =============================================================================
# Catalogue Pack Schema (Top-Level)
# =============================================================================

class CataloguePackSchema(BaseModel):
    """
    Top-level schema for a catalogue pack YAML/JSON file.

    A catalogue pack holds all static reference data for one jurisdiction
    and offence family.
    """
    schema_version: str = Field(SCHEMA_VERSION, description="Schema version for compatibility")
    id: str = Field(..., description="Unique identifier (e.g., 'UK-EW-OAPA-2024')")
    name: str
    version: str
    jurisdiction: str

    policy: PolicySchema = Field(default_factory=PolicySchema)
    offences: list[OffenceSchema] = Field(default_factory=list)
    default_offence: OffenceSchema
    element_keywords: dict[str, list[str]] = Field(default_factory=dict)
    dependencies: list[DependencySchema] = Field(default_factory=list)
    critical_items: list[CriticalItemSchema] = Field(default_factory=list)
    routes: list[RouteSchema] = Field(..., min_length=1)
    confidence_rules: dict[RouteIdValue, list[ConfidenceRuleSchema]] = Field(default_factory=dict)
    doctrines: list[DoctrineSchema] = Field(default_factory=list)

    @field_validator("jurisdiction")
    @classmethod
    def validate_jurisdiction(cls, v: str) -> str:
        return v.upper()

    model_config = {
        "extra": "forbid",  # Reject unknown fields
    }


# =============================================================================
# Validation Helpers
# =============================================================================

def validate_catalogue_pack(data: dict[str, Any]) -> CataloguePackSchema:
    """
    Validate a catalogue pack dictionary against the schema.

    Raises:
        pydantic.ValidationError: If validation fails
    """
    return CataloguePackSchema.model_validate(data)


def check_schema_version(data: dict[str, Any]) -> bool:
    """True if the pack's major schema version matches this engine's."""
    pack_version = str(data.get("schema_version", "1.0.0"))
    return pack_version.split(".")[0] == SCHEMA_VERSION.split(".")[0]
