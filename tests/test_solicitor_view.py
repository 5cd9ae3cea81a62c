"""
Tests for the solicitor view.

Tests cover:
- Headline posture and weakest element
- Dispute points and decisive missing items ranking
- Top routes and worst-case cap
- Bounds on every list
"""
import pytest

from strategypilot.engine import StrategyCoordinator, build_solicitor_view
from strategypilot.engine.solicitor_view import (
    build_decisive_missing_items,
    build_dispute_points,
    build_headline,
    build_top_routes,
    worst_case_cap,
)
from strategypilot.models import (
    DependencyStatus,
    OffenceSummary,
    RouteId,
    RouteStatus,
    StrategyCoordinatorResult,
    SupportLevel,
)

from tests.conftest import make_dependency, make_element, make_route


S18 = OffenceSummary(code="s18_oapa", label="Wounding / GBH with intent (s18 OAPA 1861)")


def make_result(**fields) -> StrategyCoordinatorResult:
    fields.setdefault("offence", S18)
    return StrategyCoordinatorResult(case_id="CASE-001", **fields)


def unsafe():
    return {"procedural_safety": {"status": "UNSAFE_TO_PROCEED"}}


class TestHeadline:
    """Tests for build_headline."""

    def test_unsafe_with_weak_element(self):
        """Test posture, weakest element and offence label."""
        result = make_result(
            elements=[
                make_element("identification", SupportLevel.WEAK, label="Identification"),
                make_element("unlawfulness", SupportLevel.NONE, label="Unlawfulness"),
            ],
            plugin_constraints=unsafe(),
        )
        assert build_headline(result) == (
            "Case cannot safely progress: dispute on identification "
            "(Wounding / GBH with intent (s18 OAPA 1861))"
        )

    def test_conditionally_unsafe(self):
        """Test the conditional posture wording."""
        result = make_result(
            plugin_constraints={"procedural_safety": {"status": "CONDITIONALLY_UNSAFE"}},
        )
        assert build_headline(result).startswith("Case conditionally unsafe: case under review")

    def test_safe_without_disputes(self):
        """Test a safe case with nothing weak is under review."""
        result = make_result(
            elements=[make_element("identification", SupportLevel.STRONG)],
            plugin_constraints={"procedural_safety": {"status": "SAFE"}},
        )
        assert build_headline(result) == (
            "case under review (Wounding / GBH with intent (s18 OAPA 1861))"
        )

    def test_unknown_offence_label_omitted(self):
        """Test the unknown offence adds no label."""
        result = make_result(offence=OffenceSummary(code="unknown", label="Unknown offence"))
        assert build_headline(result) == "case under review"


class TestDisputePoints:
    """Tests for build_dispute_points."""

    def elements(self):
        return [
            make_element("identification", SupportLevel.WEAK, label="Identification",
                         gaps=["CCTV footage", "BWV", "999 call"]),
            make_element("act_causation", SupportLevel.SOME, label="Act and causation"),
            make_element("specific_intent", SupportLevel.WEAK, label="Specific intent"),
            make_element("unlawfulness", SupportLevel.NONE, label="Unlawfulness"),
            make_element("injury_threshold", SupportLevel.WEAK, label="Injury threshold"),
        ]

    def test_weak_elements_first(self):
        """Test unsupported elements lead, then weak ones in order, three at most."""
        assert build_dispute_points(self.elements(), []) == [
            "Unlawfulness: insufficient evidence support",
            "Identification: evidence gaps (CCTV footage, BWV)",
            "Specific intent: insufficient evidence support",
        ]

    def test_viable_routes_follow(self):
        """Test viable route reasons follow the elements, capped at five."""
        routes = [
            make_route(RouteId.FIGHT_CHARGE, RouteStatus.VIABLE, reasons=["ID contested"]),
            make_route(RouteId.CHARGE_REDUCTION, RouteStatus.VIABLE, reasons=["Intent thin"]),
            make_route(RouteId.OUTCOME_MANAGEMENT, RouteStatus.VIABLE, reasons=["Credit"]),
        ]
        points = build_dispute_points(self.elements(), routes)

        assert len(points) == 5
        assert points[3:] == ["fight charge: ID contested", "charge reduction: Intent thin"]

    def test_risky_routes_ignored(self):
        """Test only viable routes contribute points."""
        routes = [make_route(RouteId.FIGHT_CHARGE, RouteStatus.RISKY, reasons=["Gaps"])]
        assert build_dispute_points([], routes) == []


class TestDecisiveMissingItems:
    """Tests for build_decisive_missing_items."""

    def test_ranking(self):
        """Test viable-route needs first, then weak-element gaps, then the rest."""
        elements = [
            make_element("identification", SupportLevel.WEAK, gaps=["CCTV"]),
        ]
        dependencies = [
            make_dependency("bwv_arrest", label="BWV"),
            make_dependency("cctv_window_2310_2330", label="CCTV footage"),
            make_dependency("medical_photos", DependencyStatus.SERVED, label="Medical"),
            make_dependency("interview_recording", label="Interview"),
        ]
        routes = [
            make_route(RouteId.CHARGE_REDUCTION, RouteStatus.VIABLE,
                       required=["interview_recording"]),
            make_route(RouteId.FIGHT_CHARGE, RouteStatus.RISKY, required=["bwv_arrest"]),
        ]

        assert build_decisive_missing_items(elements, dependencies, routes) == [
            "Interview", "CCTV footage", "BWV",
        ]

    def test_required_prefix_matches(self):
        """Test a catalogue dependency id matches its time-windowed variant."""
        dependencies = [
            make_dependency("bwv_arrest", label="BWV"),
            make_dependency("cctv_window_2310_2330", label="CCTV footage"),
        ]
        routes = [make_route(RouteId.FIGHT_CHARGE, RouteStatus.VIABLE, required=["cctv_window"])]
        assert build_decisive_missing_items([], dependencies, routes)[0] == "CCTV footage"

    def test_capped(self):
        """Test at most six items are returned."""
        dependencies = [make_dependency(f"item_{i}", label=f"Item {i}") for i in range(9)]
        assert len(build_decisive_missing_items([], dependencies, [])) == 6


class TestTopRoutesAndCap:
    """Tests for build_top_routes and worst_case_cap."""

    def test_best_viable_then_best_risky(self):
        """Test the first viable and first risky routes are surfaced."""
        routes = [
            make_route(RouteId.FIGHT_CHARGE, RouteStatus.RISKY, reasons=["a", "b", "c"]),
            make_route(RouteId.CHARGE_REDUCTION, RouteStatus.VIABLE, reasons=["d"]),
            make_route(RouteId.OUTCOME_MANAGEMENT, RouteStatus.VIABLE, reasons=["e"]),
        ]
        top = build_top_routes(routes)

        assert [t.id for t in top] == ["charge_reduction", "fight_charge"]
        assert top[0].label == "Charge Reduction"
        assert top[1].why == ["a", "b"]

    def test_blocked_routes_never_surface(self):
        """Test blocked routes are left out."""
        routes = [make_route(RouteId.FIGHT_CHARGE, RouteStatus.BLOCKED)]
        assert build_top_routes(routes) == []

    @pytest.mark.parametrize("constraints,expected", [
        ({"worst_case_cap": {"statement": "Custody likely"}}, "Custody likely"),
        ({"worst_case_cap": "Suspended sentence range"}, "Suspended sentence range"),
        ({"worst_case_cap": {"note": "no statement"}}, None),
        ({}, None),
    ])
    def test_worst_case_cap(self, constraints, expected):
        """Test the cap is read from a statement dict or a plain string."""
        assert worst_case_cap(constraints) == expected


class TestBuildSolicitorView:
    """Tests for build_solicitor_view."""

    def test_next_actions_capped(self):
        """Test next actions pass through capped at six."""
        result = make_result(next_actions=[f"Action {i}" for i in range(8)])
        view = build_solicitor_view(result)
        assert view.next_actions == [f"Action {i}" for i in range(6)]

    def test_from_coordinator(self, case_payload):
        """Test a view built from a full coordinator result."""
        view = build_solicitor_view(StrategyCoordinator().build(case_payload))

        assert view.headline == (
            "Case cannot safely progress: dispute on identification "
            "(Wounding / GBH with intent (s18 OAPA 1861))"
        )
        assert len(view.decisive_missing_items) == 2
        assert view.next_actions[0].startswith("Chase CCTV")
        assert len(view.dispute_points) <= 5
        assert len(view.top_routes) <= 2
        assert view.worst_case_cap is None

    def test_partial_result(self):
        """Test an empty result still yields a view."""
        view = build_solicitor_view(StrategyCoordinatorResult(case_id="unknown"))

        assert view.headline == "case under review"
        assert view.dispute_points == []
        assert view.top_routes == []
