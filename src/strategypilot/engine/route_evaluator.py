"""
StrategyPilot Route Evaluator

Evaluates the three canonical defence routes. Each route is composed from
granular lines of argument ("angles"), each with its own deterministic rule:

    fight_charge       identification_challenge, act_denial,
                       weapon_uncertainty_causation, self_defence,
                       procedural_disclosure_leverage
    charge_reduction   intent_denial, alternative_mental_state_offence
    outcome_management mitigation_early_resolution

The route's angle list comes from the catalogue; the angle rules live here.

Route status:
- blocked if every angle is blocked, or if the route's required
  dependencies are all outstanding and no angle is viable
- risky if a required dependency is outstanding, a key element has only
  partial support, or no angle is viable
- viable otherwise

No predictions: reasons state facts about the evidence, never outcomes.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from ..models import (
    AngleAssessment,
    Catalogue,
    DeclaredDependency,
    DeclaredDependencyStatus,
    DependencyState,
    IrreversibleDecision,
    OffenceDefinition,
    OffenceElementState,
    RecordedPosition,
    RouteAssessment,
    RouteDefinition,
    RouteId,
    RouteStatus,
    SafetyStatus,
    SupportLevel,
)

logger = logging.getLogger(__name__)


ANGLE_LABELS = {
    "procedural_disclosure_leverage": "Procedural Disclosure Leverage",
    "identification_challenge": "Identification Challenge",
    "act_denial": "Act Denial",
    "intent_denial": "Intent Denial",
    "weapon_uncertainty_causation": "Weapon Uncertainty / Causation",
    "self_defence": "Self Defence",
    "alternative_mental_state_offence": "Alternative Mental State Offence",
    "mitigation_early_resolution": "Mitigation / Early Resolution",
}

TEMPLATE_NOTICE = (
    "Procedural template: extracted text is not usable, so this assessment "
    "is not evidence-backed"
)

ID_UNCERTAINTY = (
    "poor lighting", "dark", "uncertain", "not sure", "couldn't see clearly",
    "fast", "quick", "brief", "moment", "glimpse", "hard to see",
    "difficult to identify",
)
WEAPON_UNCERTAINTY = (
    "believes", "thinks", "not sure", "unclear", "uncertain",
    "didn't see", "couldn't see", "unsure",
)
SELF_DEFENCE_INDICATORS = (
    "self defence", "self-defense", "self defense", "self-defence",
    "defending myself", "defending himself", "defending herself",
    "acted in self defence", "threatened me", "attacked me first",
    "was attacked", "in fear", "reasonable force",
)

S18 = "s18_oapa"
MITIGATION_CONSTRAINT = "Include only procedural prep steps if later required"
NOT_APPLICABLE = "Not applicable to this offence"
STRONG_INTENT = "Strong intent evidence present"


# =============================================================================
# Evaluation Context
# =============================================================================

@dataclass
class RouteContext:
    """
    Everything an angle rule may look at.

    text is the lowercased evidence corpus; it is empty when the analysis
    gate is closed, so text-driven rules never fire on a closed gate.
    """
    offence: OffenceDefinition
    elements: list[OffenceElementState]
    dependencies: list[DependencyState]
    plugin_constraints: dict[str, Any] = field(default_factory=dict)
    recorded_position: Optional[RecordedPosition] = None
    declared: list[DeclaredDependency] = field(default_factory=list)
    irreversible: list[IrreversibleDecision] = field(default_factory=list)
    text: str = ""
    key_disclosure: frozenset[str] = frozenset()

    def element(self, *element_ids: str) -> Optional[OffenceElementState]:
        for state in self.elements:
            if state.id in element_ids:
                return state
        return None

    def element_matching(self, *fragments: str) -> Optional[OffenceElementState]:
        for state in self.elements:
            if any(fragment in state.id for fragment in fragments):
                return state
        return None

    def found(self, indicators: tuple[str, ...]) -> list[str]:
        if not self.text:
            return []
        return [indicator for indicator in indicators if indicator in self.text]

    def safety_status(self) -> Optional[str]:
        safety = self.plugin_constraints.get("procedural_safety")
        if isinstance(safety, dict):
            return safety.get("status")
        return None


def _angle(
    angle_id: str,
    status: RouteStatus,
    reasons: list[str],
    required: Optional[list[str]] = None,
    constraints: Optional[list[str]] = None,
) -> AngleAssessment:
    return AngleAssessment(
        id=angle_id,
        label=ANGLE_LABELS.get(angle_id, angle_id),
        status=status,
        reasons=reasons,
        required_dependencies=list(required or []),
        constraints=list(constraints or []),
    )


# =============================================================================
# Angle Rules
# =============================================================================

def procedural_disclosure_leverage(ctx: RouteContext) -> AngleAssessment:
    """Viable when procedural safety is compromised or key disclosure is outstanding."""
    angle_id = "procedural_disclosure_leverage"
    status = ctx.safety_status()
    if status in (SafetyStatus.UNSAFE_TO_PROCEED.value, SafetyStatus.CONDITIONALLY_UNSAFE.value):
        return _angle(angle_id, RouteStatus.VIABLE, [f"Procedural safety status: {status}"])

    outstanding = [
        d.id for d in ctx.dependencies
        if d.id in ctx.key_disclosure and d.is_outstanding
    ]
    if outstanding:
        return _angle(
            angle_id, RouteStatus.VIABLE,
            [f"{len(outstanding)} key disclosure items outstanding"],
            required=outstanding,
        )

    return _angle(
        angle_id, RouteStatus.RISKY,
        ["No outstanding key dependencies; leverage may exist from timing or procedural issues"],
    )


def identification_challenge(ctx: RouteContext) -> AngleAssessment:
    """Viable when identification support is weak or the text shows observation problems."""
    angle_id = "identification_challenge"
    element = ctx.element("identification")

    if element is not None and element.is_weak:
        reasons = [f"Identification element support: {element.support.value}"]
        if element.gaps:
            reasons.append(f"Missing evidence: {', '.join(element.gaps)}")
        return _angle(angle_id, RouteStatus.VIABLE, reasons, required=element.gaps)

    found = ctx.found(ID_UNCERTAINTY)
    if found:
        return _angle(
            angle_id, RouteStatus.VIABLE,
            [f"Extracted text indicates identification uncertainty: {', '.join(found[:3])}"],
        )

    if element is not None and element.support == SupportLevel.STRONG:
        return _angle(
            angle_id, RouteStatus.BLOCKED,
            ["Identification element support is strong"],
            constraints=["Strong identification evidence present"],
        )

    return _angle(angle_id, RouteStatus.RISKY, ["Identification element support is moderate"])


def act_denial(ctx: RouteContext) -> AngleAssessment:
    """Generally risky; viable only when the act itself is weakly supported."""
    angle_id = "act_denial"
    element = ctx.element("actus_reus", "act_causation")

    if element is not None and element.is_weak:
        return _angle(
            angle_id, RouteStatus.VIABLE,
            [f"Actus reus element support: {element.support.value}"],
            required=element.gaps,
        )

    return _angle(
        angle_id, RouteStatus.RISKY,
        ["Act denial is generally risky; actus reus element support is moderate or strong"],
    )


def weapon_uncertainty_causation(ctx: RouteContext) -> AngleAssessment:
    """Viable when weapon/causation support is weak or the text is uncertain about it."""
    angle_id = "weapon_uncertainty_causation"
    element = ctx.element_matching("weapon", "causation")

    if element is not None and element.is_weak:
        return _angle(
            angle_id, RouteStatus.VIABLE,
            [f"Weapon/causation element support: {element.support.value}"],
            required=element.gaps,
        )

    found = ctx.found(WEAPON_UNCERTAINTY)
    if found:
        return _angle(
            angle_id, RouteStatus.VIABLE,
            [f"Extracted text indicates weapon uncertainty: {', '.join(found[:2])}"],
        )

    text = ctx.text
    if "unclear" in text and any(w in text for w in ("fracture", "laceration", "mechanism")):
        return _angle(
            angle_id, RouteStatus.VIABLE,
            ["Medical mechanism or fracture confirmation is unclear"],
        )

    return _angle(angle_id, RouteStatus.RISKY, ["Weapon/causation evidence is moderate or unclear"])


def self_defence(ctx: RouteContext) -> AngleAssessment:
    """Blocked unless the evidence explicitly raises self-defence."""
    angle_id = "self_defence"
    if not ctx.found(SELF_DEFENCE_INDICATORS):
        return _angle(
            angle_id, RouteStatus.BLOCKED,
            ["Self defence is BLOCKED: no explicit evidence supports self-defence narrative"],
            constraints=["Do NOT infer self-defence; requires explicit evidence"],
        )
    return _angle(
        angle_id, RouteStatus.VIABLE,
        ["Extracted evidence explicitly mentions self-defence"],
    )


def intent_denial(ctx: RouteContext) -> AngleAssessment:
    """Only for s18: viable on weak intent, risky on some, blocked on strong."""
    angle_id = "intent_denial"
    if ctx.offence.code != S18:
        return _angle(
            angle_id, RouteStatus.BLOCKED,
            ["Intent denial only relevant for s18 offences"],
            constraints=[NOT_APPLICABLE],
        )

    element = ctx.element("specific_intent")
    if element is None:
        return _angle(angle_id, RouteStatus.RISKY, ["Specific intent element state not available"])

    if element.is_weak:
        reasons = [f"Specific intent element support: {element.support.value}"]
        if element.gaps:
            reasons.append(f"Missing evidence: {', '.join(element.gaps)}")
        return _angle(angle_id, RouteStatus.VIABLE, reasons, required=element.gaps)
    if element.support == SupportLevel.SOME:
        return _angle(angle_id, RouteStatus.RISKY, ["Specific intent element support is moderate"])
    return _angle(
        angle_id, RouteStatus.BLOCKED,
        ["Specific intent element support is strong"],
        constraints=[STRONG_INTENT],
    )


def alternative_mental_state_offence(ctx: RouteContext) -> AngleAssessment:
    """Only for s18: alternative framing (s20 recklessness) when intent is unsupported."""
    angle_id = "alternative_mental_state_offence"
    if ctx.offence.code != S18:
        return _angle(
            angle_id, RouteStatus.BLOCKED,
            ["Alternative mental state only relevant when higher mental state is charged"],
            constraints=[NOT_APPLICABLE],
        )

    element = ctx.element("specific_intent")
    if element is not None and element.is_weak:
        return _angle(
            angle_id, RouteStatus.VIABLE,
            [
                f"Specific intent element support is {element.support.value}; "
                "alternative mental state (s20 recklessness) may be applicable"
            ],
            constraints=["This is alternative framing/mental state analysis, not plea advice"],
        )
    if element is not None and element.support == SupportLevel.STRONG:
        return _angle(
            angle_id, RouteStatus.BLOCKED,
            ["Specific intent element support is strong"],
            constraints=[STRONG_INTENT],
        )
    return _angle(angle_id, RouteStatus.RISKY, ["Specific intent element support is moderate"])


def mitigation_early_resolution(ctx: RouteContext) -> AngleAssessment:
    """Risky unless the recorded position or a completed plea decision points to it."""
    angle_id = "mitigation_early_resolution"
    position = ctx.recorded_position
    if position is not None and (
        position.position_type == "guilty" or position.primary == RouteId.OUTCOME_MANAGEMENT
    ):
        return _angle(
            angle_id, RouteStatus.VIABLE,
            ["Recorded position indicates mitigation/early resolution focus"],
            constraints=[MITIGATION_CONSTRAINT],
        )

    for decision in ctx.irreversible:
        if decision.is_active and "plea" in f"{decision.id} {decision.label}".lower():
            return _angle(
                angle_id, RouteStatus.VIABLE,
                [f"Irreversible decision recorded: {decision.label} ({decision.status.value})"],
                constraints=[MITIGATION_CONSTRAINT],
            )

    return _angle(
        angle_id, RouteStatus.RISKY,
        ["Mitigation/early resolution is risky; do NOT recommend pleading"],
        constraints=[MITIGATION_CONSTRAINT],
    )


ANGLE_RULES: dict[str, Callable[[RouteContext], AngleAssessment]] = {
    "procedural_disclosure_leverage": procedural_disclosure_leverage,
    "identification_challenge": identification_challenge,
    "act_denial": act_denial,
    "weapon_uncertainty_causation": weapon_uncertainty_causation,
    "self_defence": self_defence,
    "intent_denial": intent_denial,
    "alternative_mental_state_offence": alternative_mental_state_offence,
    "mitigation_early_resolution": mitigation_early_resolution,
}


# =============================================================================
# Route Composition
# =============================================================================

def _dedupe(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def compose_route(
    route: RouteDefinition,
    ctx: RouteContext,
    gate_open: bool = True,
) -> RouteAssessment:
    """Evaluate a route's angles and combine them into one assessment."""
    angles = []
    for angle_id in route.angles:
        rule = ANGLE_RULES.get(angle_id)
        if rule is None:
            logger.warning("Route %s names unknown angle %s", route.id.value, angle_id)
            continue
        angles.append(rule(ctx))

    not_needed = {
        d.id for d in ctx.declared if d.status == DeclaredDependencyStatus.NOT_NEEDED
    }
    states = {d.id: d for d in ctx.dependencies}
    present = [
        states[dep_id] for dep_id in route.required_dependencies
        if dep_id in states and dep_id not in not_needed
    ]
    outstanding = [d for d in present if d.is_outstanding]

    viable = [a for a in angles if a.status == RouteStatus.VIABLE]
    partial = [
        e for e in ctx.elements
        if e.id in route.key_elements and e.support == SupportLevel.SOME
    ]

    headline: list[str] = []
    if angles and all(a.status == RouteStatus.BLOCKED for a in angles):
        status = RouteStatus.BLOCKED
        headline.append("Every line of argument for this route is blocked")
    elif present and len(outstanding) == len(present) and not viable:
        status = RouteStatus.BLOCKED
        headline.append(
            "All required dependencies are outstanding and no line of argument is viable"
        )
    elif outstanding or partial or not viable:
        status = RouteStatus.RISKY
        if outstanding:
            noun = "dependency" if len(outstanding) == 1 else "dependencies"
            headline.append(
                f"{len(outstanding)} required {noun} outstanding: "
                f"{', '.join(d.label for d in outstanding)}"
            )
        for element in partial:
            headline.append(f"Key element only partially supported: {element.label}")
        if not viable:
            headline.append("No line of argument is currently viable")
    else:
        status = RouteStatus.VIABLE
        headline.append(
            f"{len(viable)} viable line(s) of argument: {', '.join(a.label for a in viable)}"
        )

    reasons = list(headline)
    if not gate_open:
        reasons.insert(0, TEMPLATE_NOTICE)
    for angle in angles:
        reasons.extend(f"{angle.label}: {reason}" for reason in angle.reasons)

    required = [d.id for d in outstanding]
    for angle in angles:
        required.extend(angle.required_dependencies)

    constraints = []
    for angle in angles:
        constraints.extend(angle.constraints)

    return RouteAssessment(
        id=route.id,
        status=status,
        reasons=_dedupe(reasons),
        required_dependencies=_dedupe(required),
        constraints=_dedupe(constraints),
        angles=angles,
        evidence_backed=gate_open,
    )


def evaluate_routes(
    offence: OffenceDefinition,
    elements: list[OffenceElementState],
    dependencies: list[DependencyState],
    plugin_constraints: Optional[dict[str, Any]],
    recorded_position: Optional[RecordedPosition],
    declared: Optional[list[DeclaredDependency]],
    irreversible: Optional[list[IrreversibleDecision]],
    extracted_text: str,
    catalogue: Catalogue,
    gate_open: bool = True,
) -> list[RouteAssessment]:
    """
    Evaluate every canonical route in catalogue order.

    When the gate is closed the text is ignored and each route is returned
    as a procedural template with evidence_backed=False.
    """
    ctx = RouteContext(
        offence=offence,
        elements=elements,
        dependencies=dependencies,
        plugin_constraints=plugin_constraints or {},
        recorded_position=recorded_position,
        declared=declared or [],
        irreversible=irreversible or [],
        text=(extracted_text or "").lower() if gate_open else "",
        key_disclosure=frozenset(d.id for d in catalogue.dependencies if d.key_disclosure),
    )
    return [compose_route(route, ctx, gate_open) for route in catalogue.routes]
