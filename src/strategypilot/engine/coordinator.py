"""
StrategyPilot Strategy Coordinator

Builds the canonical StrategyCoordinatorResult for one case snapshot with a
full audit trace.

Steps, in fixed order:
1. Offence classification
2. Element support assessment
3. Dependency tracking
4. Plugin constraints (procedural safety, strategy packs, irreversible
   decisions, recorded position, outstanding disclosure)
5. Route evaluation
6. Next actions
7. Evidence signals, time pressure, route confidence and leverage
8. Residual attack scans
9. Judge analysis and judge constraint lens

Core Principle: "The solicitor decides. StrategyPilot classifies and explains."

build() never raises. Optional collaborators (strategy packs, judge
reasoning) fail on their own without stopping the assessment; anything else
is caught once at the top and the partial result is returned with the error
in the audit trace.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from ..canon import input_hash
from ..exceptions import StrategyPackError
from ..models import (
    Catalogue,
    CaseInput,
    ConfidenceLevel,
    OffenceSummary,
    ProceduralSafety,
    StrategyCoordinatorResult,
    TimelineEntry,
)
from .confidence_drift import ConfidenceCalculator
from .dependency_tracker import OUTSTANDING_ACTIONS, track_dependencies
from .element_assessor import assess_elements
from .judge_lens import build_judge_analysis, build_judge_constraint_lens
from .next_actions import generate_next_actions
from .offence_classifier import classify_offence
from .plugins import PackContext, StrategyPack, default_packs
from .procedural_safety import evaluate_procedural_safety
from .residual_scanner import covered_targets, scan_residual_attacks
from .route_evaluator import evaluate_routes
from .signal_extractor import resolve_signals
from .time_pressure import adjust_strategy_leverage, build_time_pressure_state

logger = logging.getLogger(__name__)


AUDIT_PREFIX = "[COORDINATOR]"


def _safety_constraint(safety: ProceduralSafety) -> dict[str, Any]:
    return {
        "status": safety.status.value,
        "explanation": safety.explanation,
        "outstanding_items": list(safety.outstanding_items),
        "reasons": list(safety.reasons),
    }


def _outstanding_disclosure(timeline: list[TimelineEntry]) -> Optional[dict[str, Any]]:
    items = [entry.item for entry in timeline if entry.action.lower() in OUTSTANDING_ACTIONS]
    if not items:
        return None
    return {"count": len(items), "items": items}


# =============================================================================
# Coordinator
# =============================================================================

@dataclass
class StrategyCoordinator:
    """
    Orchestrates every evaluator over one CaseInput.

    Usage:
        coordinator = StrategyCoordinator()
        result = coordinator.build(case_input)

        # With a custom catalogue and packs
        coordinator = StrategyCoordinator(
            catalogue=load_catalogue("my_pack.yaml"),
            packs=[IncidentShapePack()],
        )
    """
    catalogue: Optional[Catalogue] = None
    packs: list[StrategyPack] = field(default_factory=default_packs)

    def __post_init__(self) -> None:
        if self.catalogue is None:
            from ..packs import default_catalogue
            self.catalogue = default_catalogue()

    def build(self, case_input: Union[CaseInput, dict[str, Any]]) -> StrategyCoordinatorResult:
        """
        Build the strategy assessment for a case.

        Args:
            case_input: CaseInput, or a raw payload accepted by
                CaseInput.from_dict

        Returns:
            StrategyCoordinatorResult; partial (but fully shaped) if an
            internal step failed
        """
        audit: list[str] = []
        if not isinstance(case_input, CaseInput):
            try:
                case_input = CaseInput.from_dict(case_input)
            except Exception as exc:
                logger.warning("Case input could not be read: %s", exc)
                audit.append(f"{AUDIT_PREFIX} Input unreadable (non-fatal): {exc}")
                case_input = CaseInput(case_id="unknown")

        result = StrategyCoordinatorResult(case_id=case_input.case_id, audit_trace=audit)
        audit.insert(0, f"{AUDIT_PREFIX} Started for case {case_input.case_id}")

        try:
            self._run(case_input, result, audit)
            audit.append(f"{AUDIT_PREFIX} Completed successfully")
        except Exception as exc:
            logger.warning(
                "Coordinator error for case %s: %s",
                case_input.case_id,
                exc,
                extra={"case_id": case_input.case_id, "input_hash_short": result.input_hash[:12]},
            )
            audit.append(f"{AUDIT_PREFIX} Error caught (non-fatal): {exc}")

        return result

    def _run(
        self,
        case_input: CaseInput,
        result: StrategyCoordinatorResult,
        audit: list[str],
    ) -> None:
        catalogue = self.catalogue
        policy = catalogue.policy
        gate_open = case_input.gate.is_open

        try:
            result.input_hash = input_hash(case_input)
        except Exception as exc:
            logger.warning("Input hash failed: %s", exc, extra={"case_id": case_input.case_id})
            audit.append(f"{AUDIT_PREFIX} Input hash failed (non-fatal): {exc}")
        result.evidence_backed = gate_open
        log_extra = {"case_id": case_input.case_id, "input_hash_short": result.input_hash[:12]}
        if not gate_open:
            audit.append(
                f"{AUDIT_PREFIX} Analysis gate closed: extracted text not usable, "
                "producing procedural templates"
            )

        text = case_input.extracted_text if gate_open else ""
        documents = case_input.documents if gate_open else []

        # Step 1: Offence
        audit.append(f"{AUDIT_PREFIX} Step 1: Detecting offence")
        offence = classify_offence(case_input.charges, text, catalogue)
        result.offence = OffenceSummary(code=offence.code, label=offence.label)
        audit.append(f"{AUDIT_PREFIX} Offence detected: {offence.code} - {offence.label}")

        # Step 2: Elements
        audit.append(f"{AUDIT_PREFIX} Step 2: Assessing offence elements")
        result.elements = assess_elements(
            offence,
            text,
            documents,
            case_input.evidence_impact_map,
            keywords=catalogue.element_keywords,
        )
        audit.append(f"{AUDIT_PREFIX} Elements built: {len(result.elements)} elements")

        # Step 3: Dependencies
        audit.append(f"{AUDIT_PREFIX} Step 3: Tracking dependencies")
        result.dependencies = track_dependencies(
            catalogue,
            case_input.declared_dependencies,
            case_input.disclosure_timeline,
            case_input.evidence_impact_map,
        )
        audit.append(
            f"{AUDIT_PREFIX} Dependencies built: {len(result.dependencies)} dependencies"
        )

        # Step 4: Plugin constraints
        audit.append(f"{AUDIT_PREFIX} Step 4: Building plugin constraints")
        safety = evaluate_procedural_safety(
            case_input.evidence_impact_map,
            result.dependencies,
            case_input.declared_dependencies,
            case_input.disclosure_timeline,
            catalogue,
        )
        constraints: dict[str, Any] = {"procedural_safety": _safety_constraint(safety)}
        audit.append(f"{AUDIT_PREFIX} Procedural safety: {safety.status.value}")

        context = PackContext(
            offence=offence,
            elements=result.elements,
            dependencies=result.dependencies,
            procedural_safety=safety,
            gate_open=gate_open,
        )
        for pack in self.packs:
            constraints.update(self._run_pack(pack, case_input, context, audit, log_extra))

        active = [d for d in case_input.irreversible_decisions if d.is_active]
        if active:
            constraints["irreversible_decisions"] = {
                "count": len(active),
                "items": [
                    {
                        "id": d.id,
                        "label": d.label,
                        "status": d.status.value,
                        "updated_at": d.updated_at.isoformat() if d.updated_at else None,
                    }
                    for d in active
                ],
            }

        position = case_input.recorded_position
        if position is not None and position.primary is not None:
            constraints["recorded_position"] = {
                "primary": position.primary.value,
                "position_type": position.position_type,
            }

        disclosure = _outstanding_disclosure(case_input.disclosure_timeline)
        if disclosure:
            constraints["outstanding_disclosure"] = disclosure

        result.plugin_constraints = constraints
        audit.append(f"{AUDIT_PREFIX} Plugin constraints built: {len(constraints)} constraints")

        # Step 5: Routes
        audit.append(f"{AUDIT_PREFIX} Step 5: Evaluating canonical routes")
        result.routes = evaluate_routes(
            offence,
            result.elements,
            result.dependencies,
            constraints,
            position,
            case_input.declared_dependencies,
            case_input.irreversible_decisions,
            text,
            catalogue,
            gate_open=gate_open,
        )
        for route in result.routes:
            first = route.reasons[0] if route.reasons else "no reasons"
            audit.append(f"{AUDIT_PREFIX} Route {route.id.value}: {route.status.value} - {first}")

        # Step 6: Next actions
        audit.append(f"{AUDIT_PREFIX} Step 6: Generating next actions (max {policy.max_next_actions})")
        result.next_actions = generate_next_actions(
            result.dependencies,
            result.routes,
            position,
            case_input.irreversible_decisions,
            case_input.reference_date,
            policy,
        )
        audit.append(
            f"{AUDIT_PREFIX} Next actions generated: {len(result.next_actions)} actions"
        )

        # Step 7: Signals, time pressure, confidence, leverage
        audit.append(f"{AUDIT_PREFIX} Step 7: Assessing confidence and time pressure")
        result.signals = resolve_signals(case_input.gate, documents, case_input.signals)
        previous = case_input.previous_signals if gate_open else None
        result.time_pressure = build_time_pressure_state(
            case_input.hearing_date,
            case_input.disclosure_deadline,
            case_input.reference_date,
        )
        calculator = ConfidenceCalculator(catalogue)
        for route in result.routes:
            result.route_confidence.append(
                calculator.state(route.id, result.signals, previous, gate_open)
            )
            result.leverage.append(adjust_strategy_leverage(route.id, result.time_pressure))
        audit.append(
            f"{AUDIT_PREFIX} Confidence: "
            + ", ".join(f"{c.route.value}={c.current.value}" for c in result.route_confidence)
        )
        audit.append(
            f"{AUDIT_PREFIX} Time pressure: {result.time_pressure.current_leverage.value}"
        )

        # Step 8: Residual attacks
        audit.append(f"{AUDIT_PREFIX} Step 8: Scanning residual attacks")
        confidence = {c.route: c.current for c in result.route_confidence}
        for route in result.routes:
            result.residual_scans.append(scan_residual_attacks(
                result.signals,
                route.id,
                covered=covered_targets(route, case_input.existing_attack_targets),
                route_confidence=confidence.get(route.id, ConfidenceLevel.LOW),
                gate_open=gate_open,
                max_angles=policy.max_residual_angles,
            ))
        audit.append(
            f"{AUDIT_PREFIX} Residual scans: "
            + ", ".join(f"{s.route.value}={s.status.value}" for s in result.residual_scans)
        )

        # Step 9: Judge reasoning (optional, non-fatal)
        audit.append(f"{AUDIT_PREFIX} Step 9: Building judge analysis (doctrine-based)")
        try:
            result.judge_analysis = build_judge_analysis(
                offence, result.elements, result.dependencies, constraints, catalogue,
            )
            audit.append(
                f"{AUDIT_PREFIX} Judge analysis built: "
                f"{len(result.judge_analysis.legal_tests)} legal tests, "
                f"{len(result.judge_analysis.constraints)} constraints"
            )
        except Exception as exc:
            logger.warning("Judge analysis failed: %s", exc, extra=log_extra)
            audit.append(f"{AUDIT_PREFIX} Judge analysis failed (non-fatal): {exc}")

        try:
            result.judge_constraint_lens = build_judge_constraint_lens(
                offence,
                result.elements,
                result.routes,
                result.dependencies,
                position,
                catalogue,
                declared=case_input.declared_dependencies,
                timeline=case_input.disclosure_timeline,
            )
            audit.append(
                f"{AUDIT_PREFIX} Judge constraint lens built: "
                f"{len(result.judge_constraint_lens.constraints)} constraints"
            )
        except Exception as exc:
            logger.warning("Judge constraint lens failed: %s", exc, extra=log_extra)
            audit.append(f"{AUDIT_PREFIX} Judge constraint lens failed (non-fatal): {exc}")

        logger.debug(
            "Assessment complete: %d routes, %d actions",
            len(result.routes),
            len(result.next_actions),
            extra=log_extra,
        )

    def _run_pack(
        self,
        pack: StrategyPack,
        case_input: CaseInput,
        context: PackContext,
        audit: list[str],
        log_extra: dict[str, Any],
    ) -> dict[str, Any]:
        name = getattr(pack, "name", type(pack).__name__)
        try:
            produced = pack.constraints(case_input, context)
            if not isinstance(produced, dict):
                raise StrategyPackError(
                    message=f"Strategy pack {name} returned {type(produced).__name__}, not dict",
                    details={"pack": name},
                    case_id=case_input.case_id,
                )
        except Exception as exc:
            logger.warning("Strategy pack %s failed: %s", name, exc, extra=log_extra)
            audit.append(f"{AUDIT_PREFIX} Strategy pack {name} failed (non-fatal): {exc}")
            return {}
        if produced:
            audit.append(
                f"{AUDIT_PREFIX} Strategy pack {name} loaded: {', '.join(sorted(produced))}"
            )
        return produced


# =============================================================================
# Convenience Functions
# =============================================================================

def build_strategy_coordinator(
    case_input: Union[CaseInput, dict[str, Any]],
    catalogue: Optional[Catalogue] = None,
    packs: Optional[list[StrategyPack]] = None,
) -> StrategyCoordinatorResult:
    """
    Build a strategy assessment in one call.

    Convenience function that creates a temporary coordinator.
    """
    coordinator = StrategyCoordinator(catalogue=catalogue)
    if packs is not None:
        coordinator.packs = list(packs)
    return coordinator.build(case_input)
