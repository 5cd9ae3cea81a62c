"""
StrategyPilot Judge Constraint Lens / Judge Reasoning

Doctrine statements describing what the court must require evidence of,
keyed off weak elements, outstanding dependencies, the recorded position and
the viable lines of argument.

Two views over the same catalogue doctrines:
- JudgeConstraintLens: titled constraints, required findings, intolerances
  and red flags
- JudgeAnalysis: legal tests, short constraints, tolerances, red flags and
  evidential requirements

Wording is doctrinal ("The court must...", "Absent X..."). Nothing here says
what a court is likely to do. All lists are de-duplicated in order and
capped.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from ..models import (
    Catalogue,
    DeclaredDependency,
    DeclaredDependencyStatus,
    DependencyState,
    Doctrine,
    JudgeAnalysis,
    JudgeConstraint,
    JudgeConstraintLens,
    OffenceDefinition,
    OffenceElementState,
    RecordedPosition,
    RouteAssessment,
    RouteId,
    SupportLevel,
    TimelineEntry,
)
from .procedural_safety import untracked_required_dependencies

logger = logging.getLogger(__name__)


LENS_CAPS = {"constraints": 10, "required_findings": 8, "intolerances": 6, "red_flags": 6}
ANALYSIS_CAPS = {
    "legal_tests": 8,
    "constraints": 8,
    "tolerances": 6,
    "red_flags": 6,
    "evidential_requirements": 8,
}

OAPA_CODES = ("s18_oapa", "s20_oapa")
INJURY_ELEMENTS = ("injury_threshold", "injury_classification", "injury")
ACT_ELEMENTS = ("act_causation", "actus_reus", "causation")
KEY_DISCLOSURE_TERMS = ("cctv", "bwv", "999", "interview", "cad")

# Viable angle -> route doctrine
ANGLE_DOCTRINES = {
    "identification_challenge": "route_identification",
    "intent_denial": "route_intent",
    "weapon_uncertainty_causation": "route_weapon",
}


def _dedupe(items: list, cap: int) -> list:
    return list(dict.fromkeys(items))[:cap]


def _mentions(dependency: DependencyState, *terms: str) -> bool:
    text = f"{dependency.id} {dependency.label}".lower()
    return any(term in text for term in terms)


def _self_defence_evidence(elements: list[OffenceElementState]) -> bool:
    for element in elements:
        for ref in element.refs:
            text = f"{ref.note} {ref.quote or ''}".lower()
            if "self-defence" in text or "self defence" in text:
                return True
    return False


# =============================================================================
# Shared Case Facts
# =============================================================================

@dataclass
class CaseFacts:
    """The element and dependency facts both views key off."""
    offence: OffenceDefinition
    elements: list[OffenceElementState]
    dependencies: list[DependencyState]

    def element(self, *element_ids: str) -> Optional[OffenceElementState]:
        for state in self.elements:
            if state.id in element_ids:
                return state
        return None

    def weapon_element(self) -> Optional[OffenceElementState]:
        for state in self.elements:
            if "weapon" in state.id:
                return state
        return None

    def is_weak(self, *element_ids: str) -> bool:
        state = self.element(*element_ids)
        return state is not None and state.is_weak

    @property
    def is_s18(self) -> bool:
        return self.offence.code == "s18_oapa"

    @property
    def is_s20(self) -> bool:
        return self.offence.code == "s20_oapa"

    @property
    def weak_elements(self) -> list[OffenceElementState]:
        return [e for e in self.elements if e.is_weak]

    @property
    def outstanding(self) -> list[DependencyState]:
        return [d for d in self.dependencies if d.is_outstanding]

    def outstanding_mentioning(self, *terms: str) -> list[DependencyState]:
        return [d for d in self.outstanding if _mentions(d, *terms)]

    def continuity_outstanding(self) -> bool:
        for dependency in self.dependencies:
            if _mentions(dependency, "continuity"):
                return dependency.is_outstanding
        return False

    def id_strong_intent_weak(self) -> bool:
        identification = self.element("identification")
        return (
            self.is_s18
            and identification is not None
            and identification.support == SupportLevel.STRONG
            and self.is_weak("specific_intent")
        )


# =============================================================================
# Judge Constraint Lens
# =============================================================================

@dataclass
class _LensBuilder:
    catalogue: Catalogue
    constraints: list[JudgeConstraint] = field(default_factory=list)
    required_findings: list[str] = field(default_factory=list)
    intolerances: list[str] = field(default_factory=list)
    red_flags: list[str] = field(default_factory=list)

    def apply(
        self,
        doctrine_id: str,
        applies_to: Optional[list[str]] = None,
        red_flag: bool = False,
    ) -> Optional[Doctrine]:
        doctrine = self.catalogue.doctrine(doctrine_id)
        if doctrine is None:
            logger.debug("Doctrine %s not in catalogue", doctrine_id)
            return None
        self.constraints.append(JudgeConstraint(
            title=doctrine.title,
            detail=doctrine.detail,
            applies_to=list(applies_to if applies_to is not None else doctrine.applies_to),
        ))
        if doctrine.required_finding:
            self.required_findings.append(doctrine.required_finding)
        if doctrine.intolerance:
            self.intolerances.append(doctrine.intolerance)
        if red_flag and doctrine.lens_red_flag:
            self.red_flags.append(doctrine.lens_red_flag)
        return doctrine

    def build(self) -> JudgeConstraintLens:
        unique: dict[str, JudgeConstraint] = {}
        for constraint in self.constraints:
            unique.setdefault(constraint.title, constraint)
        return JudgeConstraintLens(
            constraints=list(unique.values())[:LENS_CAPS["constraints"]],
            required_findings=_dedupe(self.required_findings, LENS_CAPS["required_findings"]),
            intolerances=_dedupe(self.intolerances, LENS_CAPS["intolerances"]),
            red_flags=_dedupe(self.red_flags, LENS_CAPS["red_flags"]),
        )


def build_judge_constraint_lens(
    offence: OffenceDefinition,
    elements: list[OffenceElementState],
    routes: list[RouteAssessment],
    dependencies: list[DependencyState],
    recorded_position: Optional[RecordedPosition],
    catalogue: Catalogue,
    declared: Optional[list[DeclaredDependency]] = None,
    timeline: Optional[list[TimelineEntry]] = None,
) -> JudgeConstraintLens:
    """
    Build the doctrine constraints the court must apply on the current state.

    Args:
        offence: Matched offence
        elements: Element support states
        routes: Route assessments (their viable angles add route doctrines)
        dependencies: Tracked dependency states
        recorded_position: Recorded defence position, if any
        catalogue: Supplies doctrine texts
        declared: Declared dependencies
        timeline: Disclosure timeline

    Returns:
        JudgeConstraintLens, de-duplicated and capped
    """
    facts = CaseFacts(offence, elements, dependencies)
    lens = _LensBuilder(catalogue)
    declared = declared or []

    if facts.is_weak("identification"):
        lens.apply("turnbull", red_flag=bool(facts.outstanding_mentioning("cctv", "bwv")))

    if facts.is_s18 and facts.is_weak("specific_intent"):
        lens.apply("specific_intent")
        if facts.id_strong_intent_weak():
            lens.apply("alternative_mental_state")

    if facts.is_s20 and facts.is_weak("recklessness"):
        lens.apply("cunningham")

    if offence.code in OAPA_CODES and facts.is_weak(*INJURY_ELEMENTS):
        lens.apply("gbh_threshold")

    if facts.is_weak(*ACT_ELEMENTS):
        lens.apply("causation")

    weapon = facts.weapon_element()
    if weapon is not None and weapon.is_weak:
        lens.apply("weapon", red_flag=bool(weapon.gaps) or not weapon.refs)

    position = recorded_position
    position_text = (position.position_text or "").lower() if position else ""
    if position is not None and (
        position.primary == RouteId.FIGHT_CHARGE
        or "self-defence" in position_text
        or "self defence" in position_text
    ):
        if not _self_defence_evidence(elements):
            lens.apply("self_defence")

    outstanding = facts.outstanding
    if outstanding:
        has_required = any(d.status == DeclaredDependencyStatus.REQUIRED for d in declared)
        untracked = untracked_required_dependencies(declared, timeline or [])
        if has_required or untracked or len(outstanding) >= 3:
            lens.apply(
                "cpia_fair_trial",
                red_flag=bool(facts.outstanding_mentioning(*KEY_DISCLOSURE_TERMS)),
            )

    if facts.outstanding_mentioning("cctv") or facts.continuity_outstanding():
        lens.apply("cctv_continuity", red_flag=True)

    weak = facts.weak_elements
    if weak:
        lens.apply("evidence_based_resolution", applies_to=[e.id for e in weak])

    for route in routes:
        for angle in route.viable_angles():
            doctrine_id = ANGLE_DOCTRINES.get(angle.id)
            if doctrine_id == "route_intent" and not facts.is_s18:
                continue
            if doctrine_id:
                lens.apply(doctrine_id)

    return lens.build()


# =============================================================================
# Judge Analysis
# =============================================================================

@dataclass
class _AnalysisBuilder:
    catalogue: Catalogue
    legal_tests: list[str] = field(default_factory=list)
    constraints: list[str] = field(default_factory=list)
    tolerances: list[str] = field(default_factory=list)
    red_flags: list[str] = field(default_factory=list)
    evidential_requirements: list[str] = field(default_factory=list)

    def apply(self, doctrine_id: str, red_flag: bool = False) -> None:
        doctrine = self.catalogue.doctrine(doctrine_id)
        if doctrine is None:
            logger.debug("Doctrine %s not in catalogue", doctrine_id)
            return
        if doctrine.legal_test:
            self.legal_tests.append(doctrine.legal_test)
        if doctrine.constraint:
            self.constraints.append(doctrine.constraint)
        if doctrine.tolerance:
            self.tolerances.append(doctrine.tolerance)
        if doctrine.evidential_requirement:
            self.evidential_requirements.append(doctrine.evidential_requirement)
        if red_flag and doctrine.analysis_red_flag:
            self.red_flags.append(doctrine.analysis_red_flag)

    def build(self) -> JudgeAnalysis:
        return JudgeAnalysis(
            legal_tests=_dedupe(self.legal_tests, ANALYSIS_CAPS["legal_tests"]),
            constraints=_dedupe(self.constraints, ANALYSIS_CAPS["constraints"]),
            tolerances=_dedupe(self.tolerances, ANALYSIS_CAPS["tolerances"]),
            red_flags=_dedupe(self.red_flags, ANALYSIS_CAPS["red_flags"]),
            evidential_requirements=_dedupe(
                self.evidential_requirements, ANALYSIS_CAPS["evidential_requirements"]
            ),
        )


def build_judge_analysis(
    offence: OffenceDefinition,
    elements: list[OffenceElementState],
    dependencies: list[DependencyState],
    plugin_constraints: Optional[dict[str, Any]],
    catalogue: Catalogue,
) -> JudgeAnalysis:
    """
    Build legal tests and evidential requirements for the current state.

    The recorded position, procedural safety and outstanding disclosure are
    read from plugin_constraints, as assembled by the coordinator.
    """
    facts = CaseFacts(offence, elements, dependencies)
    analysis = _AnalysisBuilder(catalogue)
    plugin_constraints = plugin_constraints or {}

    if facts.is_weak("identification"):
        analysis.apply("turnbull", red_flag=bool(facts.outstanding_mentioning("cctv", "bwv")))

    if facts.is_s18 and facts.is_weak("specific_intent"):
        analysis.apply("specific_intent")

    if facts.is_s20 and facts.is_weak("recklessness"):
        analysis.apply("cunningham")

    if offence.code in OAPA_CODES and facts.is_weak(*INJURY_ELEMENTS):
        analysis.apply("gbh_threshold")

    if facts.is_weak(*ACT_ELEMENTS):
        analysis.apply("causation")

    position = plugin_constraints.get("recorded_position")
    if isinstance(position, dict) and position.get("primary") == RouteId.FIGHT_CHARGE.value:
        if not _self_defence_evidence(elements):
            analysis.apply("self_defence")

    safety = plugin_constraints.get("procedural_safety")
    safety_status = safety.get("status") if isinstance(safety, dict) else None
    if facts.outstanding or safety_status in ("UNSAFE_TO_PROCEED", "CONDITIONALLY_UNSAFE"):
        analysis.apply(
            "cpia_fair_trial",
            red_flag=bool(facts.outstanding_mentioning(*KEY_DISCLOSURE_TERMS)),
        )

    if facts.outstanding_mentioning("cctv") or facts.continuity_outstanding():
        disclosure = plugin_constraints.get("outstanding_disclosure")
        items = disclosure.get("items", []) if isinstance(disclosure, dict) else []
        flagged = any(
            "continuity" in str(item).lower() or "date" in str(item).lower()
            for item in items
        )
        analysis.apply("cctv_continuity", red_flag=flagged)

    weapon = facts.weapon_element()
    if weapon is not None and weapon.is_weak:
        analysis.apply("weapon", red_flag=bool(weapon.gaps) or not weapon.refs)

    if facts.id_strong_intent_weak():
        analysis.apply("alternative_mental_state")

    if facts.weak_elements:
        analysis.apply("evidence_based_resolution")

    return analysis.build()
