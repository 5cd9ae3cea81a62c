"""
StrategyPilot Residual Attack Scanner

Enumerates the non-speculative attack angles left after the existing attack
paths, says plainly when further attack is exhausted, and lays out the
last-resort leverage plan when primary attacks are weak.

Key features:
- Exhaustion only on strong prosecution, strong identification, complete
  disclosure and clean (or unknown) PACE; a closed gate never exhausts
- Angles skipped when an existing attack path already covers their target
- Hypothesis angles without a disclosure basis flagged as judicially risky
- Closed gate: every angle becomes a hypothesis
- Fixed four-item last-resort plan when exhausted or confidence is LOW

Never invents evidence: angles describe what to request and review.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Union

from ..models import (
    AngleCategory,
    ConfidenceLevel,
    EvidenceBasis,
    EvidenceSignals,
    ExhaustionStatus,
    JudicialOptics,
    LastResortPlanItem,
    PlanTiming,
    ResidualAngle,
    ResidualAttackScan,
    RouteAssessment,
    RouteId,
)
from .confidence_drift import resolve_route_id

logger = logging.getLogger(__name__)


FISHING_WARNING = "Court may view as fishing without disclosure basis"

GATED_SUMMARY = (
    "Analysis gated - residual attack assessment pending disclosure completion. "
    "Standard residual angles available as hypotheses requiring evidence confirmation."
)
EXHAUSTED_SUMMARY = (
    "No further viable evidential/procedural attacks currently identified beyond those "
    "listed. Further challenge depends on adverse disclosure or new inconsistencies. "
    "Focus shifts to last-resort leverage (plea timing, mitigation, sentence engineering)."
)
NO_ANGLES_SUMMARY = "No residual attack angles identified beyond existing attack paths."

# Viable route angle -> attack target it already covers
ANGLE_TARGETS = {
    "identification_challenge": "identification",
    "weapon_uncertainty_causation": "medical",
    "procedural_disclosure_leverage": "procedure",
}

CONTESTED_ROUTES = (RouteId.FIGHT_CHARGE, RouteId.CHARGE_REDUCTION)


# =============================================================================
# Exhaustion
# =============================================================================

def compute_exhaustion_status(signals: EvidenceSignals, gate_open: bool = True) -> ExhaustionStatus:
    """
    EXHAUSTED only when every key signal points against further attack.

    Any unknown prosecution, identification or disclosure signal keeps
    attacks open, as does a closed gate.
    """
    if not gate_open:
        return ExhaustionStatus.ATTACKS_REMAIN

    if (
        signals.value_of("prosecution_strength") == "strong"
        and signals.value_of("id_strength") == "strong"
        and signals.value_of("disclosure_completeness") == "complete"
        and signals.value_of("pace_compliance") in ("compliant", "unknown")
    ):
        return ExhaustionStatus.EXHAUSTED
    return ExhaustionStatus.ATTACKS_REMAIN


# =============================================================================
# Residual Angles
# =============================================================================

@dataclass(frozen=True)
class AngleTemplate:
    """A residual angle and the conditions under which it is offered."""
    id: str
    title: str
    description: str
    category: AngleCategory
    routes: tuple[RouteId, ...]
    applies: Callable[[EvidenceSignals], bool]
    basis: Callable[[EvidenceSignals], EvidenceBasis]
    required_evidence: Callable[[EvidenceSignals], Optional[list[str]]]
    optics: Callable[[EvidenceSignals], JudicialOptics]
    why_optics: Callable[[EvidenceSignals], str]
    how_to_use: tuple[str, ...] = field(default_factory=tuple)
    stop_if: str = ""

    def build(self, signals: EvidenceSignals, gate_open: bool) -> ResidualAngle:
        basis = self.basis(signals) if gate_open else EvidenceBasis.HYPOTHESIS
        required = self.required_evidence(signals)
        angle = ResidualAngle(
            id=self.id,
            title=self.title,
            description=self.description,
            category=self.category,
            evidence_basis=basis,
            judicial_optics=self.optics(signals),
            why_optics=self.why_optics(signals),
            how_to_use=list(self.how_to_use),
            stop_if=self.stop_if,
            required_evidence=list(required) if required is not None else None,
        )
        if angle.evidence_basis == EvidenceBasis.HYPOTHESIS and not angle.required_evidence:
            angle.judicial_optics = JudicialOptics.RISKY
            angle.why_optics = FISHING_WARNING
        return angle


def _always(_signals: EvidenceSignals) -> bool:
    return True


def _hypothesis(_signals: EvidenceSignals) -> EvidenceBasis:
    return EvidenceBasis.HYPOTHESIS


def _neutral(_signals: EvidenceSignals) -> JudicialOptics:
    return JudicialOptics.NEUTRAL


def _fixed(value):
    return lambda _signals: value


def _id_weak(signals: EvidenceSignals) -> bool:
    return signals.value_of("id_strength") == "weak"


RESIDUAL_ANGLES: tuple[AngleTemplate, ...] = (
    AngleTemplate(
        id="residual_id_reliability",
        title="Identification Reliability Pressure Test",
        description=(
            "Cross-examine identification procedure compliance, conditions, and first "
            "account consistency. Non-speculative if ID procedure pack or CCTV "
            "continuity available."
        ),
        category=AngleCategory.IDENTIFICATION,
        routes=(RouteId.FIGHT_CHARGE,),
        applies=lambda s: s.value_of("id_strength") in ("weak", "unknown"),
        basis=lambda s: EvidenceBasis.EVIDENCE_BACKED if _id_weak(s) else EvidenceBasis.HYPOTHESIS,
        required_evidence=lambda s: (
            ["VIPER pack", "ID procedure records", "CCTV continuity"]
            if s.is_unknown("id_strength") else None
        ),
        optics=lambda s: JudicialOptics.ATTRACTIVE if _id_weak(s) else JudicialOptics.NEUTRAL,
        why_optics=lambda s: (
            "Weak identification evidence supports Turnbull challenge - judicially attractive"
            if _id_weak(s)
            else "Identification challenge requires disclosure basis - neutral until evidence available"
        ),
        how_to_use=(
            "Request VIPER pack and ID procedure records",
            "Request CCTV continuity evidence",
            "Review first account consistency",
            "Assess Turnbull compliance",
        ),
        stop_if="Strong identification from multiple independent sources under good conditions",
    ),
    AngleTemplate(
        id="residual_medical_margin",
        title="Medical Causation/Force Margin Review",
        description=(
            "Review medical evidence for causation margins, force interpretation, and "
            "injury mechanism. Hypothesis until medical reports/photos/A&E notes reviewed."
        ),
        category=AngleCategory.MEDICAL,
        routes=CONTESTED_ROUTES,
        applies=lambda s: s.is_unknown("medical_evidence"),
        basis=_hypothesis,
        required_evidence=_fixed(["Medical reports", "Injury photos", "A&E notes"]),
        optics=_neutral,
        why_optics=_fixed("Medical review is standard case management - neutral until evidence reviewed"),
        how_to_use=(
            "Request full medical evidence disclosure",
            "Review injury photos and A&E notes",
            "Assess causation and force interpretation",
            "Consider expert evidence if causation unclear",
        ),
        stop_if="Medical evidence clearly shows sustained/targeted injuries supporting intent",
    ),
    AngleTemplate(
        id="residual_consistency",
        title="Consistency-Over-Time Check",
        description=(
            "Review witness statements and accounts for consistency over time. Check first "
            "accounts, police statements, and court evidence for material changes. "
            "Hypothesis unless contradictions already identified in disclosure."
        ),
        category=AngleCategory.CREDIBILITY,
        routes=CONTESTED_ROUTES,
        applies=_always,
        basis=_hypothesis,
        required_evidence=_fixed(["Witness statements", "First accounts", "Police statements"]),
        optics=_neutral,
        why_optics=_fixed(
            "Consistency review is standard cross-examination preparation - neutral unless "
            "contradictions found"
        ),
        how_to_use=(
            "Review all witness statements chronologically",
            "Compare first accounts with later statements",
            "Identify material changes or inconsistencies",
            "Prepare cross-examination on inconsistencies if found",
        ),
        stop_if="All accounts are consistent with no material changes",
    ),
    AngleTemplate(
        id="residual_sequence_margin",
        title="Sequence/Timing Margin Analysis",
        description=(
            "Analyse sequence and timing evidence for margins supporting intent distinction "
            "or challenge. Hypothesis until CCTV/sequence evidence reviewed."
        ),
        category=AngleCategory.SEQUENCE,
        routes=CONTESTED_ROUTES,
        applies=lambda s: s.is_unknown("cctv_sequence"),
        basis=_hypothesis,
        required_evidence=_fixed(["CCTV footage", "Sequence evidence", "Timeline"]),
        optics=_neutral,
        why_optics=_fixed("Sequence analysis is standard case management - neutral until evidence reviewed"),
        how_to_use=(
            "Request CCTV footage and continuity",
            "Review sequence and timing evidence",
            "Assess duration and targeting",
            "Consider intent distinction based on sequence",
        ),
        stop_if="CCTV clearly shows prolonged or targeted sequence",
    ),
    AngleTemplate(
        id="residual_procedure_margin",
        title="Procedural Compliance Margin Review",
        description=(
            "Review PACE compliance, custody procedures, and interview conduct for material "
            "breaches. Hypothesis until custody records and interview recordings reviewed."
        ),
        category=AngleCategory.PROCEDURE,
        routes=(RouteId.FIGHT_CHARGE,),
        applies=lambda s: s.is_unknown("pace_compliance"),
        basis=_hypothesis,
        required_evidence=_fixed(
            ["Custody record", "Interview recording", "PACE compliance documentation"]
        ),
        optics=_fixed(JudicialOptics.ATTRACTIVE),
        why_optics=_fixed(
            "PACE compliance review is standard case management - attractive if breaches found"
        ),
        how_to_use=(
            "Request custody record and PACE documentation",
            "Request interview recording and transcript",
            "Review for PACE breaches",
            "Prepare exclusion application if breaches found",
        ),
        stop_if="PACE compliance confirmed with no material breaches",
    ),
    AngleTemplate(
        id="residual_context",
        title="Context/Background Margin Review",
        description=(
            "Review background context, relationship history, and circumstances for "
            "mitigation or challenge angles. Hypothesis requiring disclosure of background "
            "material."
        ),
        category=AngleCategory.CONTEXT,
        routes=CONTESTED_ROUTES,
        applies=_always,
        basis=_hypothesis,
        required_evidence=_fixed(["Background material", "Relationship history", "Circumstances"]),
        optics=_neutral,
        why_optics=_fixed(
            "Context review is standard case preparation - neutral unless material issues found"
        ),
        how_to_use=(
            "Request background and context material",
            "Review relationship history if applicable",
            "Assess circumstances for mitigation or challenge",
            "Consider character evidence if relevant",
        ),
        stop_if="Background material supports prosecution case",
    ),
)


LAST_RESORT_PLAN: tuple[tuple[str, tuple[str, ...], PlanTiming], ...] = (
    (
        "Plea Timing & Credit Preservation",
        (
            "Assess plea position before PTPH",
            "Consider early guilty plea for maximum credit",
            "Preserve plea credit window",
            "Negotiate charge reduction if applicable",
        ),
        PlanTiming.BEFORE_PTPH,
    ),
    (
        "Mitigation Pack Build",
        (
            "Gather character references",
            "Collect personal circumstances evidence",
            "Prepare mitigation statement",
            "Review sentencing guidelines",
        ),
        PlanTiming.ANYTIME,
    ),
    (
        "Character & Rehabilitation Evidence",
        (
            "Gather character references from employers/family",
            "Collect rehabilitation evidence if applicable",
            "Prepare character evidence bundle",
            "Consider expert reports if relevant",
        ),
        PlanTiming.ANYTIME,
    ),
    (
        "Sentence Engineering (Guidelines Mapping)",
        (
            "Review sentencing guidelines",
            "Identify factors supporting non-custodial outcome",
            "Map case facts to guideline categories",
            "Prepare sentencing submissions",
        ),
        PlanTiming.AFTER_DISCLOSURE,
    ),
)


def covered_targets(
    route: Optional[RouteAssessment],
    existing: Iterable[str] = (),
) -> set[str]:
    """Attack targets already covered by the caller's paths and the route's viable angles."""
    targets = {target.lower() for target in existing}
    if route is not None:
        for angle in route.viable_angles():
            if angle.id in ANGLE_TARGETS:
                targets.add(ANGLE_TARGETS[angle.id])
    return targets


def _triggers(
    status: ExhaustionStatus,
    confidence: ConfidenceLevel,
    signals: EvidenceSignals,
) -> list[str]:
    triggers = []
    if status == ExhaustionStatus.EXHAUSTED:
        triggers.append("No further viable evidential/procedural attacks identified")
        triggers.append("Prosecution case appears strong")
    if confidence == ConfidenceLevel.LOW:
        triggers.append("Route confidence is LOW - primary attacks are weak")
    if signals.value_of("prosecution_strength") == "strong":
        triggers.append("Prosecution case is strong")
    if (
        signals.value_of("id_strength") == "strong"
        and signals.value_of("disclosure_completeness") == "complete"
    ):
        triggers.append("Strong identification evidence with complete disclosure")
    return triggers


def _summary(status: ExhaustionStatus, angles: list[ResidualAngle], gate_open: bool) -> str:
    if not gate_open:
        return GATED_SUMMARY
    if status == ExhaustionStatus.EXHAUSTED:
        return EXHAUSTED_SUMMARY
    if not angles:
        return NO_ANGLES_SUMMARY
    backed = sum(1 for a in angles if a.evidence_basis == EvidenceBasis.EVIDENCE_BACKED)
    hypothesis = sum(1 for a in angles if a.evidence_basis == EvidenceBasis.HYPOTHESIS)
    return (
        f"Residual attack angles identified: {len(angles)} total ({backed} evidence-backed, "
        f"{hypothesis} hypothesis requiring disclosure). Review each angle for viability "
        "based on available evidence. Hypothesis angles require disclosure confirmation "
        "before use."
    )


def scan_residual_attacks(
    signals: EvidenceSignals,
    route: Union[RouteId, str],
    covered: Optional[Iterable[str]] = None,
    route_confidence: ConfidenceLevel = ConfidenceLevel.MEDIUM,
    gate_open: bool = True,
    max_angles: int = 6,
) -> ResidualAttackScan:
    """
    Scan one route for residual attack angles.

    Args:
        signals: Current evidence signals
        route: Route being scanned
        covered: Attack targets already covered (identification, medical, ...)
        route_confidence: Current confidence for the route
        gate_open: False when extracted text is not usable
        max_angles: Cap on the number of angles returned

    Raises:
        UnknownRouteError: If route is not a canonical route
    """
    route_id = resolve_route_id(route)
    covered_set = {target.lower() for target in covered or ()}
    status = compute_exhaustion_status(signals, gate_open)

    angles = [
        template.build(signals, gate_open)
        for template in RESIDUAL_ANGLES
        if route_id in template.routes
        and template.category.value not in covered_set
        and template.applies(signals)
    ][:max_angles]

    plan = []
    if status == ExhaustionStatus.EXHAUSTED or route_confidence == ConfidenceLevel.LOW:
        plan = [
            LastResortPlanItem(title=title, actions=list(actions), timing=timing)
            for title, actions, timing in LAST_RESORT_PLAN
        ]

    return ResidualAttackScan(
        route=route_id,
        status=status,
        summary=_summary(status, angles, gate_open),
        angles=angles,
        triggers=_triggers(status, route_confidence, signals),
        plan=plan,
    )
