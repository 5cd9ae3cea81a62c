"""
Pytest configuration and fixtures for StrategyPilot tests.

Provides helper factories and common fixtures matching actual model definitions.
"""
import pytest
from datetime import date

from strategypilot.models import (
    AngleAssessment,
    CaseDocument,
    DeclaredDependency,
    DeclaredDependencyStatus,
    DependencyState,
    DependencyStatus,
    EvidenceRef,
    EvidenceSignals,
    ImpactMapEntry,
    OffenceElementState,
    RouteAssessment,
    RouteId,
    RouteStatus,
    SupportLevel,
    TimelineEntry,
)
from strategypilot.packs import default_catalogue


REFERENCE_DATE = date(2024, 6, 1)


# =============================================================================
# Factory Helpers
# =============================================================================

def make_timeline_entry(
    item: str,
    action: str = "requested",
    on: date = None,
    note: str = None,
) -> TimelineEntry:
    """Create a TimelineEntry."""
    return TimelineEntry(item=item, action=action, date=on, note=note)


def make_declared(
    dep_id: str,
    label: str = None,
    status: DeclaredDependencyStatus = DeclaredDependencyStatus.REQUIRED,
    note: str = None,
) -> DeclaredDependency:
    """Create a DeclaredDependency."""
    return DeclaredDependency(id=dep_id, label=label or dep_id, status=status, note=note)


def make_impact(name: str, urgency: str = "outstanding") -> ImpactMapEntry:
    """Create an ImpactMapEntry (outstanding by default)."""
    return ImpactMapEntry(name=name, urgency=urgency)


def make_document(
    raw_text: str,
    name: str = "MG5 Case Summary",
    doc_type: str = "mg5",
    extracted=None,
) -> CaseDocument:
    """Create a CaseDocument."""
    return CaseDocument(name=name, doc_type=doc_type, raw_text=raw_text, extracted=extracted)


def make_element(
    element_id: str,
    support: SupportLevel,
    label: str = None,
    gaps: list[str] = None,
    refs: list[EvidenceRef] = None,
) -> OffenceElementState:
    """Create an OffenceElementState."""
    return OffenceElementState(
        id=element_id,
        label=label or element_id.replace("_", " ").capitalize(),
        support=support,
        refs=refs or [],
        gaps=gaps or [],
    )


def make_dependency(
    dep_id: str,
    status: DependencyStatus = DependencyStatus.OUTSTANDING,
    label: str = None,
    last_action: date = None,
    critical: str = None,
) -> DependencyState:
    """Create a DependencyState."""
    return DependencyState(
        id=dep_id,
        label=label or dep_id,
        status=status,
        why_it_matters="clarifies sequence/ID",
        last_action_date=last_action,
        critical=critical,
    )


def make_angle(
    angle_id: str,
    status: RouteStatus,
    reasons: list[str] = None,
) -> AngleAssessment:
    """Create an AngleAssessment."""
    return AngleAssessment(
        id=angle_id,
        label=angle_id.replace("_", " ").title(),
        status=status,
        reasons=reasons or [f"{angle_id} is {status.value}"],
    )


def make_route(
    route_id: RouteId,
    status: RouteStatus,
    reasons: list[str] = None,
    angles: list[AngleAssessment] = None,
    required: list[str] = None,
) -> RouteAssessment:
    """Create a RouteAssessment."""
    return RouteAssessment(
        id=route_id,
        status=status,
        reasons=reasons if reasons is not None else [f"{route_id.value} is {status.value}"],
        required_dependencies=required or [],
        angles=angles or [],
    )


def make_signals(**changes) -> EvidenceSignals:
    """Create EvidenceSignals from loosely-typed values (all unknown by default)."""
    return EvidenceSignals.from_dict(changes)


def make_case_payload(**overrides) -> dict:
    """
    Raw payload for a contested s18 case with outstanding key disclosure.

    Identification rests on a fast, poorly lit observation; CCTV and BWV are
    outstanding in both the impact map and the timeline.
    """
    payload = {
        "case_id": "CASE-001",
        "reference_date": "2024-06-01",
        "charges": [{"offence": "Wounding with intent", "section": "18"}],
        "extracted_text": (
            "The complainant says it was dark and the attack was fast. "
            "A laceration to the head was recorded at hospital."
        ),
        "documents": [
            {
                "name": "MG5 Case Summary",
                "doc_type": "mg5",
                "raw_text": (
                    "Witness saw a brief incident under poor lighting. "
                    "CCTV requested from Aroma Kebab. Medical notes record a single injury."
                ),
            },
        ],
        "disclosure_timeline": [
            {"item": "CCTV footage", "action": "requested", "date": "2024-05-01"},
            {"item": "CCTV footage", "action": "outstanding", "date": "2024-05-10"},
            {"item": "BWV arresting officers", "action": "outstanding", "date": "2024-05-28"},
            {"item": "999 call audio", "action": "served", "date": "2024-05-20"},
        ],
        "declared_dependencies": [
            {"id": "cctv_window", "label": "CCTV", "status": "required"},
            {"id": "bwv_arrest", "label": "BWV", "status": "required"},
        ],
        "evidence_impact_map": [
            {"evidence_item": {"name": "CCTV footage", "urgency": "Missing - chase"}},
            {"evidence_item": {"name": "BWV footage", "urgency": "outstanding"}},
            {"evidence_item": {"name": "Medical report", "urgency": "received"}},
        ],
        "recorded_position": {"primary": "fight_charge", "position_type": "not_guilty"},
        "hearing_date": "2024-06-20",
    }
    payload.update(overrides)
    return payload


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def catalogue():
    """The packaged UK catalogue."""
    return default_catalogue()


@pytest.fixture
def s18_offence(catalogue):
    """The s18 OAPA offence definition."""
    return next(o for o in catalogue.offences if o.code == "s18_oapa")


@pytest.fixture
def s20_offence(catalogue):
    """The s20 OAPA offence definition."""
    return next(o for o in catalogue.offences if o.code == "s20_oapa")


@pytest.fixture
def case_payload():
    """Raw payload for the contested s18 case."""
    return make_case_payload()
