"""
StrategyPilot Input Models

The materialized input contract assembled by the caller from storage and
extraction layers. The engine never fetches data itself.

Key components:
- ChargeRecord, TimelineEntry, DeclaredDependency, IrreversibleDecision
- RecordedPosition, ImpactMapEntry, CaseDocument
- AnalysisGate: whether extracted text supports evidence-backed reasoning
- CaseInput: the full snapshot, with a tolerant from_dict() constructor

Malformed entries are dropped or defaulted by from_dict(); nothing in this
module raises on bad caller data.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterable, Optional

from .enums import DecisionStatus, DeclaredDependencyStatus, RouteId
from .signals import EvidenceSignals, parse_bool


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a date from a date, datetime or ISO 8601 string.

    Returns None for anything unparseable.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and len(value) >= 10:
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _dicts(value: Any) -> Iterable[dict[str, Any]]:
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, dict)]


# =============================================================================
# Case Records
# =============================================================================

@dataclass
class ChargeRecord:
    """A charge on the indictment or charge sheet."""
    offence: str = ""
    section: str = ""
    count: int = 1


@dataclass
class TimelineEntry:
    """
    A disclosure timeline event.

    Attributes:
        item: Free-text name of the disclosure item
        action: requested, outstanding, overdue, served, reviewed, ...
        date: When the action happened (None if unparseable)
        note: Optional solicitor note
    """
    item: str
    action: str
    date: Optional[date] = None
    note: Optional[str] = None


@dataclass
class DeclaredDependency:
    """An evidentiary dependency declared by the solicitor."""
    id: str
    label: str
    status: DeclaredDependencyStatus = DeclaredDependencyStatus.HELPFUL
    note: Optional[str] = None


@dataclass
class IrreversibleDecision:
    """A decision that cannot be undone (plea entered, election made)."""
    id: str
    label: str
    status: DecisionStatus = DecisionStatus.NOT_YET
    updated_at: Optional[date] = None

    @property
    def is_active(self) -> bool:
        return self.status in (DecisionStatus.PLANNED, DecisionStatus.COMPLETED)


@dataclass
class RecordedPosition:
    """The defence position recorded on the case."""
    position_type: Optional[str] = None
    position_text: Optional[str] = None
    primary: Optional[RouteId] = None


@dataclass
class ImpactMapEntry:
    """An evidence-impact map item with its urgency annotation."""
    name: str
    urgency: str = ""

    @property
    def is_outstanding(self) -> bool:
        urgency = self.urgency.lower()
        return any(
            marker in urgency
            for marker in ("missing", "outstanding", "not received", "not disclosed")
        )


@dataclass
class CaseDocument:
    """An extracted case document."""
    name: str = ""
    doc_type: str = "document"
    raw_text: str = ""
    extracted: Any = None

    def text(self) -> str:
        """Lowercased searchable text of the document."""
        extracted = ""
        if self.extracted is not None:
            extracted = json.dumps(self.extracted, sort_keys=True, default=str)
        return f"{self.name} {self.raw_text} {extracted}".lower()


@dataclass
class AnalysisGate:
    """
    Precondition flag plus diagnostics about extracted text quality.

    When can_generate_analysis is False every module emits labelled
    procedural templates instead of evidence-backed conclusions.
    """
    can_generate_analysis: bool = True
    doc_count: int = 0
    raw_chars_total: int = 0
    suspected_scanned: bool = False
    text_thin: bool = False

    @property
    def is_open(self) -> bool:
        return bool(self.can_generate_analysis)


# =============================================================================
# Case Input
# =============================================================================

@dataclass
class CaseInput:
    """
    Complete input snapshot for one strategy assessment.

    evidence_impact_map is None when no map was supplied; an empty list is
    treated the same way by procedural safety (no disclosure status known).

    reference_date stands in for "today" in every date calculation so that
    identical snapshots produce identical results.
    """
    case_id: str
    charges: list[ChargeRecord] = field(default_factory=list)
    extracted_text: str = ""
    documents: list[CaseDocument] = field(default_factory=list)
    disclosure_timeline: list[TimelineEntry] = field(default_factory=list)
    declared_dependencies: list[DeclaredDependency] = field(default_factory=list)
    irreversible_decisions: list[IrreversibleDecision] = field(default_factory=list)
    recorded_position: Optional[RecordedPosition] = None
    evidence_impact_map: Optional[list[ImpactMapEntry]] = None
    gate: AnalysisGate = field(default_factory=AnalysisGate)
    signals: Optional[EvidenceSignals] = None
    previous_signals: Optional[EvidenceSignals] = None
    hearing_date: Optional[date] = None
    disclosure_deadline: Optional[date] = None
    existing_attack_targets: list[str] = field(default_factory=list)
    reference_date: date = field(default_factory=date.today)

    def text_corpus(self) -> str:
        """Lowercased extracted text plus every document's text."""
        parts = [self.extracted_text.lower()]
        parts.extend(doc.text() for doc in self.documents)
        return " ".join(p for p in parts if p).strip()

    @property
    def impact_map(self) -> list[ImpactMapEntry]:
        return self.evidence_impact_map or []

    @classmethod
    def from_dict(cls, data: Any) -> "CaseInput":
        """
        Build a CaseInput from a raw payload.

        Accepts snake_case keys (and the camelCase keys used by the web
        layer for the top-level collections). Never raises: missing or
        malformed sections become empty defaults.
        """
        if not isinstance(data, dict):
            data = {}

        def pick(*keys: str) -> Any:
            for key in keys:
                if key in data and data[key] is not None:
                    return data[key]
            return None

        charges = [
            ChargeRecord(
                offence=_text(c.get("offence")),
                section=_text(c.get("section")),
                count=_int(c.get("count"), 1),
            )
            for c in _dicts(pick("charges"))
        ]

        timeline = [
            TimelineEntry(
                item=_text(t.get("item")),
                action=_text(t.get("action")).lower(),
                date=parse_date(t.get("date")),
                note=t.get("note"),
            )
            for t in _dicts(pick("disclosure_timeline", "disclosureTimeline"))
            if t.get("item")
        ]

        declared = []
        for d in _dicts(pick("declared_dependencies", "declaredDependencies")):
            if not d.get("id"):
                continue
            try:
                status = DeclaredDependencyStatus(_text(d.get("status")).lower())
            except ValueError:
                status = DeclaredDependencyStatus.HELPFUL
            declared.append(DeclaredDependency(
                id=_text(d.get("id")),
                label=_text(d.get("label")) or _text(d.get("id")),
                status=status,
                note=d.get("note"),
            ))

        decisions = []
        for d in _dicts(pick("irreversible_decisions", "irreversibleDecisions")):
            if not d.get("id"):
                continue
            try:
                decision_status = DecisionStatus(_text(d.get("status")).lower())
            except ValueError:
                decision_status = DecisionStatus.NOT_YET
            decisions.append(IrreversibleDecision(
                id=_text(d.get("id")),
                label=_text(d.get("label")) or _text(d.get("id")),
                status=decision_status,
                updated_at=parse_date(d.get("updated_at")),
            ))

        position = None
        raw_position = pick("recorded_position", "recordedPosition")
        if isinstance(raw_position, dict):
            try:
                primary = RouteId(_text(raw_position.get("primary")))
            except ValueError:
                primary = None
            position = RecordedPosition(
                position_type=raw_position.get("position_type"),
                position_text=raw_position.get("position_text"),
                primary=primary,
            )

        impact_map = None
        raw_map = pick("evidence_impact_map", "evidenceImpactMap")
        if isinstance(raw_map, (list, tuple)):
            impact_map = []
            for entry in _dicts(raw_map):
                item = entry.get("evidence_item") or entry.get("evidenceItem") or entry
                if isinstance(item, dict) and item.get("name"):
                    impact_map.append(ImpactMapEntry(
                        name=_text(item.get("name")),
                        urgency=_text(item.get("urgency")),
                    ))

        documents = []
        for doc in _dicts(pick("documents")):
            documents.append(CaseDocument(
                name=_text(doc.get("name")),
                doc_type=_text(doc.get("doc_type") or doc.get("type")) or "document",
                raw_text=_text(doc.get("raw_text")),
                extracted=doc.get("extracted") or doc.get("extracted_json"),
            ))

        gate = AnalysisGate()
        raw_gate = pick("gate", "diagnostics")
        if isinstance(raw_gate, dict):
            # an absent flag leaves the gate open; any present value is read as a flag
            flag_key = next(
                (k for k in ("can_generate_analysis", "canGenerateAnalysis") if k in raw_gate),
                None,
            )
            gate = AnalysisGate(
                can_generate_analysis=parse_bool(raw_gate[flag_key]) if flag_key else True,
                doc_count=_int(raw_gate.get("doc_count", raw_gate.get("docCount")), 0),
                raw_chars_total=_int(
                    raw_gate.get("raw_chars_total", raw_gate.get("rawCharsTotal")), 0
                ),
                suspected_scanned=parse_bool(
                    raw_gate.get("suspected_scanned", raw_gate.get("suspectedScanned"))
                ),
                text_thin=parse_bool(raw_gate.get("text_thin", raw_gate.get("textThin"))),
            )

        raw_signals = pick("signals")
        raw_previous = pick("previous_signals", "previousSignals")
        extracted = pick("extracted_text", "extracted")
        if extracted is not None and not isinstance(extracted, str):
            extracted = json.dumps(extracted, sort_keys=True, default=str)

        targets = pick("existing_attack_targets")
        if not isinstance(targets, (list, tuple)):
            targets = []

        kwargs: dict[str, Any] = {}
        reference = parse_date(pick("reference_date"))
        if reference is not None:
            kwargs["reference_date"] = reference

        return cls(
            case_id=_text(pick("case_id", "caseId")) or "unknown",
            charges=charges,
            extracted_text=extracted or "",
            documents=documents,
            disclosure_timeline=timeline,
            declared_dependencies=declared,
            irreversible_decisions=decisions,
            recorded_position=position,
            evidence_impact_map=impact_map,
            gate=gate,
            signals=EvidenceSignals.from_dict(raw_signals) if isinstance(raw_signals, dict) else None,
            previous_signals=(
                EvidenceSignals.from_dict(raw_previous) if isinstance(raw_previous, dict) else None
            ),
            hearing_date=parse_date(pick("hearing_date", "ptph_date")),
            disclosure_deadline=parse_date(pick("disclosure_deadline")),
            existing_attack_targets=[_text(t).lower() for t in targets if t],
            **kwargs,
        )


def _int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default
