"""
Tests for the strategy coordinator.

Tests cover:
- The contested s18 scenario end to end
- Determinism of the canonical output
- Never raising on bad input, failing packs or failing steps
- The closed analysis gate
- Audit trace shape
"""
from decimal import Decimal

import pytest

from strategypilot.canon import canonical_json
from strategypilot.engine import IncidentShapePack, StrategyCoordinator, build_strategy_coordinator
from strategypilot.engine.residual_scanner import GATED_SUMMARY
from strategypilot.engine.route_evaluator import TEMPLATE_NOTICE
from strategypilot.models import (
    CaseInput,
    ConfidenceLevel,
    DependencyStatus,
    DriftDirection,
    LeverageLevel,
    RouteId,
    RouteStatus,
    StrategyCoordinatorResult,
    SupportLevel,
)

from tests.conftest import make_case_payload


class ExplodingPack:
    name = "exploding"

    def constraints(self, case_input, context):
        raise RuntimeError("boom")


class ListPack:
    name = "listy"

    def constraints(self, case_input, context):
        return ["not", "a", "dict"]


class WorstCasePack:
    name = "worst_case"

    def constraints(self, case_input, context):
        return {"worst_case_cap": {"statement": "Custody cannot be excluded on this record"}}


# =============================================================================
# Scenario Tests
# =============================================================================

class TestContestedS18:
    """End-to-end tests on the contested s18 payload."""

    @pytest.fixture
    def result(self, case_payload):
        return StrategyCoordinator().build(case_payload)

    def test_offence_and_elements(self, result):
        """Test the offence and element states."""
        assert result.case_id == "CASE-001"
        assert result.offence.code == "s18_oapa"
        assert len(result.elements) == 5
        assert result.elements[0].id == "identification"
        assert result.elements[0].support == SupportLevel.WEAK

    def test_dependencies(self, result):
        """Test dependencies reconciled against the timeline."""
        by_id = {d.id: d for d in result.dependencies}

        assert list(by_id) == ["cctv_window_2310_2330", "bwv_arrest", "medical_photos"]
        assert by_id["cctv_window_2310_2330"].status == DependencyStatus.OUTSTANDING
        assert by_id["bwv_arrest"].status == DependencyStatus.OUTSTANDING
        assert by_id["medical_photos"].status == DependencyStatus.UNKNOWN

    def test_plugin_constraints(self, result):
        """Test procedural safety, recorded position and outstanding disclosure."""
        constraints = result.plugin_constraints

        assert set(constraints) == {
            "procedural_safety", "recorded_position", "outstanding_disclosure",
        }
        assert constraints["procedural_safety"]["status"] == "UNSAFE_TO_PROCEED"
        assert constraints["recorded_position"]["primary"] == "fight_charge"
        assert constraints["outstanding_disclosure"]["items"] == [
            "CCTV footage", "BWV arresting officers",
        ]

    def test_routes(self, result):
        """Test the three canonical routes, fight charge risky on outstanding disclosure."""
        assert [r.id for r in result.routes] == [
            RouteId.FIGHT_CHARGE, RouteId.CHARGE_REDUCTION, RouteId.OUTCOME_MANAGEMENT,
        ]
        fight = result.routes[0]
        assert fight.status == RouteStatus.RISKY
        assert fight.reasons[0].startswith("2 required dependencies outstanding")
        assert fight.angle("procedural_disclosure_leverage").status == RouteStatus.VIABLE
        assert all(r.evidence_backed for r in result.routes)

    def test_next_actions(self, result):
        """Test the CCTV chase comes first and actions are bounded."""
        assert result.next_actions[0] == (
            "Chase CCTV (Aroma Kebab 23:10-23:30) (last action 22 days ago)"
        )
        assert len(result.next_actions) <= 8
        assert "Record defence position if strategy commitment made" not in result.next_actions

    def test_confidence_and_pressure(self, result):
        """Test confidence bands and time pressure from the case summary."""
        confidence = {c.route: c.current for c in result.route_confidence}

        assert confidence == {
            RouteId.FIGHT_CHARGE: ConfidenceLevel.HIGH,
            RouteId.CHARGE_REDUCTION: ConfidenceLevel.HIGH,
            RouteId.OUTCOME_MANAGEMENT: ConfidenceLevel.LOW,
        }
        assert result.time_pressure.current_leverage == LeverageLevel.MEDIUM
        assert [l.route for l in result.leverage] == [r.id for r in result.routes]

    def test_residual_and_judge(self, result):
        """Test residual scans per route and doctrine output."""
        assert [s.route for s in result.residual_scans] == [r.id for r in result.routes]
        outcome_scan = result.residual_scans[2]
        assert len(outcome_scan.plan) == 4

        assert result.judge_analysis.legal_tests[0] == "Turnbull principles (reliability factors)"
        titles = [c.title for c in result.judge_constraint_lens.constraints]
        assert titles[0] == "Turnbull Identification Reliability"

    def test_audit_trace(self, result):
        """Test the audit trace brackets every step."""
        trace = result.audit_trace

        assert trace[0] == "[COORDINATOR] Started for case CASE-001"
        assert trace[-1] == "[COORDINATOR] Completed successfully"
        assert "[COORDINATOR] Procedural safety: UNSAFE_TO_PROCEED" in trace
        for step in range(1, 10):
            assert any(line.startswith(f"[COORDINATOR] Step {step}:") for line in trace)

    def test_previous_signals_drift(self, case_payload):
        """Test previous signals produce a named confidence change."""
        case_payload["previous_signals"] = {
            "medical_evidence": "sustained",
            "cctv_sequence": "brief",
            "weapon_use": "none",
        }
        result = StrategyCoordinator().build(case_payload)
        reduction = result.route_confidence[1]

        assert reduction.previous == ConfidenceLevel.LOW
        assert reduction.current == ConfidenceLevel.HIGH
        assert reduction.changes[0].direction == DriftDirection.INCREASE
        assert reduction.changes[0].trigger == "Medical evidence shows single/brief injuries"


class TestWeakIdentificationScenario:
    """s18 with weak identification, two disclosure gaps and unknown PACE."""

    @pytest.fixture
    def result(self):
        payload = make_case_payload(
            signals={
                "idStrength": "weak",
                "disclosureCompleteness": "gaps",
                "disclosureGaps": ["CCTV footage", "BWV footage"],
                "paceCompliance": "unknown",
            },
            evidence_impact_map=[
                {"evidence_item": {"name": "CCTV footage", "urgency": "outstanding"}},
                {"evidence_item": {"name": "Medical report", "urgency": "received"}},
            ],
            disclosure_timeline=[
                {"item": "CCTV footage", "action": "outstanding", "date": "2024-05-10"},
                {"item": "BWV arresting officers", "action": "served", "date": "2024-05-20"},
            ],
        )
        return StrategyCoordinator().build(payload)

    def test_conditionally_unsafe(self, result):
        """Test a single outstanding critical item is conditionally unsafe."""
        assert result.plugin_constraints["procedural_safety"]["status"] == "CONDITIONALLY_UNSAFE"

    def test_fight_charge_not_blocked(self, result):
        """Test fight_charge keeps a footing and confidence stays at most MEDIUM."""
        fight = result.routes[0]
        confidence = result.route_confidence[0]

        assert fight.id == RouteId.FIGHT_CHARGE
        assert fight.status != RouteStatus.BLOCKED
        assert confidence.current in (ConfidenceLevel.LOW, ConfidenceLevel.MEDIUM)


# =============================================================================
# Determinism Tests
# =============================================================================

class TestDeterminism:
    """Tests for byte-identical output."""

    def test_same_input_same_json(self, case_payload):
        """Test two builds over the same snapshot serialize identically."""
        first = StrategyCoordinator().build(case_payload)
        second = StrategyCoordinator().build(make_case_payload())

        assert canonical_json(first.to_dict()) == canonical_json(second.to_dict())
        assert len(first.input_hash) == 64

    def test_reference_date_changes_hash(self, case_payload):
        """Test the reference date is part of the snapshot."""
        first = StrategyCoordinator().build(case_payload)
        second = StrategyCoordinator().build(make_case_payload(reference_date="2024-06-02"))
        assert first.input_hash != second.input_hash

    def test_case_input_and_payload_agree(self, case_payload):
        """Test a parsed CaseInput and the raw payload give the same result."""
        from_payload = StrategyCoordinator().build(case_payload)
        from_input = StrategyCoordinator().build(CaseInput.from_dict(make_case_payload()))
        assert canonical_json(from_payload) == canonical_json(from_input)


# =============================================================================
# Robustness Tests
# =============================================================================

class TestNeverRaises:
    """Tests for the coordinator's non-fatal error handling."""

    @pytest.mark.parametrize("payload", [None, "garbage", {}, {"charges": "nope"}])
    def test_bad_input(self, payload):
        """Test malformed input still yields a fully shaped result."""
        result = StrategyCoordinator().build(payload)

        assert isinstance(result, StrategyCoordinatorResult)
        assert result.case_id == "unknown"
        assert result.audit_trace[0] == "[COORDINATOR] Started for case unknown"
        assert len(result.routes) == 3

    def test_failing_pack(self, case_payload):
        """Test a raising pack is recorded and skipped."""
        result = StrategyCoordinator(packs=[ExplodingPack(), IncidentShapePack()]).build(
            case_payload
        )

        assert "[COORDINATOR] Strategy pack exploding failed (non-fatal): boom" in result.audit_trace
        assert "incident_shape" in result.plugin_constraints
        assert result.audit_trace[-1] == "[COORDINATOR] Completed successfully"

    def test_pack_returning_non_dict(self, case_payload):
        """Test a pack returning the wrong type is recorded as a pack error."""
        result = build_strategy_coordinator(case_payload, packs=[ListPack()])
        failures = [line for line in result.audit_trace if "listy failed" in line]

        assert len(failures) == 1
        assert "[SP_STRATEGY_PACK_ERROR]" in failures[0]

    def test_pack_contributions_are_merged(self, case_payload):
        """Test pack constraints land in plugin_constraints with an audit line."""
        result = build_strategy_coordinator(case_payload, packs=[WorstCasePack()])

        assert result.plugin_constraints["worst_case_cap"]["statement"].startswith("Custody")
        assert "[COORDINATOR] Strategy pack worst_case loaded: worst_case_cap" in result.audit_trace

    def test_failing_step_returns_partial_result(self, case_payload, monkeypatch):
        """Test an internal failure is caught once and the partial result returned."""
        def explode(*args, **kwargs):
            raise ValueError("route table corrupt")

        monkeypatch.setattr("strategypilot.engine.coordinator.evaluate_routes", explode)
        result = StrategyCoordinator().build(case_payload)

        assert result.audit_trace[-1] == (
            "[COORDINATOR] Error caught (non-fatal): route table corrupt"
        )
        assert len(result.elements) == 5
        assert result.routes == []

    def test_failing_judge_analysis(self, case_payload, monkeypatch):
        """Test judge analysis fails on its own without stopping the build."""
        def explode(*args, **kwargs):
            raise KeyError("doctrine")

        monkeypatch.setattr("strategypilot.engine.coordinator.build_judge_analysis", explode)
        result = StrategyCoordinator().build(case_payload)

        assert result.judge_analysis is None
        assert result.judge_constraint_lens is not None
        assert any("Judge analysis failed (non-fatal)" in line for line in result.audit_trace)
        assert result.audit_trace[-1] == "[COORDINATOR] Completed successfully"

    @pytest.mark.parametrize("payload", [
        {"case_id": "c1", "charges": [{"offence": "s18 OAPA", "section": "18",
                                       "count": float("inf")}]},
        {"case_id": "c1", "signals": {"id_sources": float("inf")}},
    ])
    def test_infinite_counts(self, payload):
        """Test infinite numeric fields fall back to defaults instead of ending the run."""
        result = StrategyCoordinator().build(payload)

        assert result.case_id == "c1"
        assert len(result.routes) == 3
        assert result.audit_trace[-1] == "[COORDINATOR] Completed successfully"

    def test_unreadable_input(self, case_payload, monkeypatch):
        """Test a parser failure is recorded and the build continues on an empty case."""
        def explode(*args, **kwargs):
            raise RuntimeError("parser broke")

        monkeypatch.setattr("strategypilot.engine.coordinator.CaseInput.from_dict", explode)
        result = StrategyCoordinator().build(case_payload)

        assert result.case_id == "unknown"
        assert result.audit_trace[0] == "[COORDINATOR] Started for case unknown"
        assert result.audit_trace[1] == (
            "[COORDINATOR] Input unreadable (non-fatal): parser broke"
        )
        assert len(result.routes) == 3
        assert result.audit_trace[-1] == "[COORDINATOR] Completed successfully"

    def test_decimal_in_extracted_fields(self):
        """Test a Decimal in extracted document fields keeps the assessment."""
        payload = make_case_payload(documents=[{
            "name": "MG5 Case Summary",
            "doc_type": "mg5",
            "raw_text": "Witness saw a brief incident under poor lighting.",
            "extracted": {"height_m": Decimal("1.8")},
        }])
        result = StrategyCoordinator().build(payload)

        assert result.offence.code == "s18_oapa"
        assert len(result.routes) == 3
        assert len(result.input_hash) == 64
        assert result.audit_trace[-1] == "[COORDINATOR] Completed successfully"

    def test_failing_input_hash(self, case_payload, monkeypatch):
        """Test a hashing failure is recorded without losing the analysis."""
        def explode(*args, **kwargs):
            raise TypeError("unhashable snapshot")

        monkeypatch.setattr("strategypilot.engine.coordinator.input_hash", explode)
        result = StrategyCoordinator().build(case_payload)

        assert result.input_hash == ""
        assert (
            "[COORDINATOR] Input hash failed (non-fatal): unhashable snapshot"
            in result.audit_trace
        )
        assert len(result.routes) == 3
        assert result.audit_trace[-1] == "[COORDINATOR] Completed successfully"

    @pytest.mark.parametrize("flag", ["false", "False", "0", "no"])
    def test_gate_flag_as_string(self, flag):
        """Test a string "false" closes the analysis gate."""
        result = StrategyCoordinator().build(make_case_payload(gate={"canGenerateAnalysis": flag}))

        assert result.evidence_backed is False
        assert any("Analysis gate closed" in line for line in result.audit_trace)


# =============================================================================
# Analysis Gate Tests
# =============================================================================

class TestClosedGate:
    """Tests for a closed analysis gate."""

    @pytest.fixture
    def result(self):
        payload = make_case_payload(gate={"can_generate_analysis": False})
        return StrategyCoordinator(packs=[IncidentShapePack()]).build(payload)

    def test_templates(self, result):
        """Test routes are labelled procedural templates."""
        assert not result.evidence_backed
        for route in result.routes:
            assert route.reasons[0] == TEMPLATE_NOTICE
            assert not route.evidence_backed

    def test_confidence_held_low(self, result):
        """Test every route's confidence is LOW."""
        assert all(c.current == ConfidenceLevel.LOW for c in result.route_confidence)
        assert result.signals.is_unknown("id_strength")

    def test_residual_gated(self, result):
        """Test residual scans are gated and never exhausted."""
        assert all(s.summary == GATED_SUMMARY for s in result.residual_scans)

    def test_audit_and_packs(self, result):
        """Test the gate is recorded and the incident shape left out."""
        assert any("Analysis gate closed" in line for line in result.audit_trace)
        assert "incident_shape" not in result.plugin_constraints

    def test_offence_from_charges(self, result):
        """Test charges still classify the offence."""
        assert result.offence.code == "s18_oapa"
