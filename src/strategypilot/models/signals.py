"""
StrategyPilot Evidence Signals

The categorical evidence-signal vector compared across time for
confidence drift. Every categorical signal has an "unknown" value; an
all-unknown vector is what the engine works from when the analysis gate is
closed.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Optional

from .enums import (
    CctvSequence,
    DisclosureCompleteness,
    IdConditions,
    IdStrength,
    MedicalPattern,
    PaceCompliance,
    ProsecutionStrength,
    WeaponUse,
)


# Field name -> enum type, for tolerant parsing and rule validation
SIGNAL_FIELDS: dict[str, type[Enum]] = {
    "id_strength": IdStrength,
    "id_conditions": IdConditions,
    "medical_evidence": MedicalPattern,
    "cctv_sequence": CctvSequence,
    "weapon_use": WeaponUse,
    "disclosure_completeness": DisclosureCompleteness,
    "pace_compliance": PaceCompliance,
    "prosecution_strength": ProsecutionStrength,
}

# camelCase aliases accepted from upstream JSON payloads
_CAMEL_ALIASES = {
    "idStrength": "id_strength",
    "idSources": "id_sources",
    "idConditions": "id_conditions",
    "medicalEvidence": "medical_evidence",
    "cctvSequence": "cctv_sequence",
    "weaponUse": "weapon_use",
    "disclosureCompleteness": "disclosure_completeness",
    "disclosureGaps": "disclosure_gaps",
    "paceCompliance": "pace_compliance",
    "interviewEvidence": "interview_evidence",
    "custodyEvidence": "custody_evidence",
    "prosecutionStrength": "prosecution_strength",
}

_FALSE_WORDS = frozenset({"false", "0", "no", "n", "off", ""})


def parse_bool(value: Any, default: bool = False) -> bool:
    """
    Read a flag from JSON-ish input.

    Strings are read by word ("false", "no", "0" are False), so a flag
    serialised as text is not truthy just for being non-empty.
    """
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_WORDS
    return bool(value)


@dataclass
class EvidenceSignals:
    """
    Snapshot of categorical evidence signals for a case.

    Attributes:
        id_strength: Identification evidence strength
        id_sources: Count of independent identification indicators
        id_conditions: Observation conditions for identification
        medical_evidence: Injury pattern in the medical evidence
        cctv_sequence: Length of the sequence shown on CCTV
        weapon_use: Pattern of weapon use
        disclosure_completeness: Whether disclosure appears complete
        disclosure_gaps: Named gaps in disclosure
        pace_compliance: PACE compliance of custody/interview
        interview_evidence: Interview material is present
        custody_evidence: Custody material is present
        prosecution_strength: Overall strength of the prosecution case
    """
    id_strength: IdStrength = IdStrength.UNKNOWN
    id_sources: int = 0
    id_conditions: IdConditions = IdConditions.UNKNOWN
    medical_evidence: MedicalPattern = MedicalPattern.UNKNOWN
    cctv_sequence: CctvSequence = CctvSequence.UNKNOWN
    weapon_use: WeaponUse = WeaponUse.UNKNOWN
    disclosure_completeness: DisclosureCompleteness = DisclosureCompleteness.UNKNOWN
    disclosure_gaps: list[str] = field(default_factory=list)
    pace_compliance: PaceCompliance = PaceCompliance.UNKNOWN
    interview_evidence: bool = False
    custody_evidence: bool = False
    prosecution_strength: ProsecutionStrength = ProsecutionStrength.UNKNOWN

    @classmethod
    def unknown(cls) -> "EvidenceSignals":
        """All-unknown signals (gate closed or nothing extracted)."""
        return cls()

    def value_of(self, signal: str) -> str:
        """String value of a categorical signal by field name."""
        value = getattr(self, signal)
        return value.value if isinstance(value, Enum) else str(value)

    def is_unknown(self, signal: str) -> bool:
        return self.value_of(signal) == "unknown"

    def with_changes(self, **changes: Any) -> "EvidenceSignals":
        """Copy with some signals replaced."""
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "EvidenceSignals":
        """
        Build signals from a loosely-typed dictionary.

        Accepts snake_case or camelCase keys. Unrecognized keys are ignored
        and unrecognized values fall back to "unknown".
        """
        if not isinstance(data, dict):
            return cls()

        normalized = {_CAMEL_ALIASES.get(k, k): v for k, v in data.items()}
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}

        for name, value in normalized.items():
            if name not in known:
                continue
            if name in SIGNAL_FIELDS:
                enum_type = SIGNAL_FIELDS[name]
                try:
                    kwargs[name] = enum_type(str(value).lower())
                except ValueError:
                    kwargs[name] = enum_type("unknown")
            elif name == "disclosure_gaps":
                if isinstance(value, (list, tuple)):
                    kwargs[name] = [str(v) for v in value if v is not None]
            elif name == "id_sources":
                try:
                    kwargs[name] = max(0, int(value))
                except (TypeError, ValueError, OverflowError):
                    pass
            else:
                kwargs[name] = parse_bool(value)

        return cls(**kwargs)
