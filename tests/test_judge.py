"""
Tests for the judge constraint lens and judge analysis.

Tests cover:
- Doctrine selection from weak elements and outstanding dependencies
- Red flags tied to missing disclosure
- Self-defence evidence suppressing its doctrine
- De-duplication
"""
from strategypilot.engine import build_judge_analysis, build_judge_constraint_lens
from strategypilot.models import (
    EvidenceRef,
    RecordedPosition,
    RouteId,
    RouteStatus,
    SupportLevel,
)

from tests.conftest import (
    make_angle,
    make_declared,
    make_dependency,
    make_element,
    make_route,
    make_timeline_entry,
)


def contested_elements(refs=None):
    return [
        make_element("identification", SupportLevel.WEAK, refs=refs),
        make_element("act_causation", SupportLevel.SOME),
        make_element("injury_threshold", SupportLevel.STRONG),
        make_element("specific_intent", SupportLevel.WEAK),
        make_element("unlawfulness", SupportLevel.NONE),
    ]


def outstanding_cctv():
    return [make_dependency("cctv_window_2310_2330", label="CCTV (Aroma Kebab 23:10-23:30)")]


def fight_route():
    return make_route(
        RouteId.FIGHT_CHARGE,
        RouteStatus.RISKY,
        angles=[make_angle("identification_challenge", RouteStatus.VIABLE)],
    )


# =============================================================================
# Judge Constraint Lens Tests
# =============================================================================

class TestJudgeConstraintLens:
    """Tests for build_judge_constraint_lens."""

    def test_contested_s18(self, catalogue, s18_offence):
        """Test doctrines for a contested s18 with CCTV outstanding."""
        lens = build_judge_constraint_lens(
            s18_offence,
            contested_elements(),
            [fight_route()],
            outstanding_cctv(),
            RecordedPosition(primary=RouteId.FIGHT_CHARGE),
            catalogue,
            declared=[make_declared("cctv_window", "CCTV")],
        )

        assert [c.title for c in lens.constraints] == [
            "Turnbull Identification Reliability",
            "Specific Intent Requirement (s18)",
            "Self-Defence Evidential Basis Requirement",
            "CPIA Fair Trial Requirement",
            "CCTV Continuity and Integrity Requirement",
            "Evidence-Based Resolution Requirement",
            "Identification Challenge Route",
        ]
        resolution = lens.constraints[5]
        assert resolution.applies_to == ["identification", "specific_intent", "unlawfulness"]
        assert len(lens.red_flags) == 3
        assert lens.red_flags[0].startswith("Missing CCTV/BWV where identification is disputed")
        assert "The court will not infer specific intent" in lens.intolerances[1]

    def test_self_defence_evidence_suppresses_doctrine(self, catalogue, s18_offence):
        """Test self-defence material in element references removes the requirement."""
        refs = [EvidenceRef(doc_type="mg11", note="Relevant", quote="he said self defence")]
        lens = build_judge_constraint_lens(
            s18_offence,
            contested_elements(refs=refs),
            [],
            [],
            RecordedPosition(primary=RouteId.FIGHT_CHARGE),
            catalogue,
        )
        titles = [c.title for c in lens.constraints]
        assert "Self-Defence Evidential Basis Requirement" not in titles

    def test_required_declaration_brings_cpia(self, catalogue, s18_offence):
        """Test outstanding disclosure with a required declaration invokes CPIA."""
        lens = build_judge_constraint_lens(
            s18_offence,
            [make_element("identification", SupportLevel.STRONG)],
            [],
            [make_dependency("medical_photos", label="Medical Photographs")],
            None,
            catalogue,
            declared=[make_declared("medical_photos")],
            timeline=[make_timeline_entry("CCTV footage")],
        )
        assert [c.title for c in lens.constraints] == ["CPIA Fair Trial Requirement"]
        assert lens.red_flags == []

    def test_s20_recklessness(self, catalogue, s20_offence):
        """Test weak recklessness on s20 applies Cunningham, not intent doctrines."""
        route = make_route(
            RouteId.CHARGE_REDUCTION,
            RouteStatus.RISKY,
            angles=[make_angle("intent_denial", RouteStatus.VIABLE)],
        )
        lens = build_judge_constraint_lens(
            s20_offence,
            [make_element("recklessness", SupportLevel.WEAK)],
            [route],
            [],
            None,
            catalogue,
        )
        titles = [c.title for c in lens.constraints]

        assert titles[0] == "Cunningham Recklessness Requirement"
        assert "Intent Denial Route" not in titles
        assert "Specific Intent Requirement (s18)" not in titles

    def test_nothing_disputed(self, catalogue, s18_offence):
        """Test strong elements and nothing outstanding yield an empty lens."""
        elements = [make_element(e, SupportLevel.STRONG) for e in s18_offence.element_ids()]
        lens = build_judge_constraint_lens(s18_offence, elements, [], [], None, catalogue)

        assert lens.constraints == []
        assert lens.required_findings == []
        assert lens.red_flags == []

    def test_deduplicated(self, catalogue, s18_offence):
        """Test a doctrine reached twice appears once."""
        lens = build_judge_constraint_lens(
            s18_offence,
            contested_elements(),
            [fight_route(), fight_route()],
            [],
            None,
            catalogue,
        )
        titles = [c.title for c in lens.constraints]
        assert titles.count("Identification Challenge Route") == 1
        assert len(lens.required_findings) == len(set(lens.required_findings))


# =============================================================================
# Judge Analysis Tests
# =============================================================================

class TestJudgeAnalysis:
    """Tests for build_judge_analysis."""

    def test_contested_s18(self, catalogue, s18_offence):
        """Test legal tests and red flags for a contested s18."""
        constraints = {
            "recorded_position": {"primary": "fight_charge"},
            "procedural_safety": {"status": "UNSAFE_TO_PROCEED"},
            "outstanding_disclosure": {"items": ["CCTV continuity statement"]},
        }
        analysis = build_judge_analysis(
            s18_offence, contested_elements(), outstanding_cctv(), constraints, catalogue
        )

        assert analysis.legal_tests == [
            "Turnbull principles (reliability factors)",
            "Woollin / direct intent principles",
            "Self-defence: necessity + reasonableness + evidential basis requirement",
            "CPIA principles (fair trial / materiality)",
            "CCTV continuity: weight depends on continuity and integrity",
        ]
        assert analysis.red_flags == [
            "Missing CCTV/BWV where identification is disputed",
            "Missing key disclosure items (CCTV/BWV/999/interview) where decisive for disputed elements",
            "Date inconsistencies / continuity issues in CCTV evidence",
        ]
        assert analysis.constraints[-1].startswith("Court must resolve disputed elements")

    def test_continuity_flag_needs_items(self, catalogue, s18_offence):
        """Test the continuity red flag needs a continuity or date item."""
        analysis = build_judge_analysis(
            s18_offence, contested_elements(), outstanding_cctv(), {}, catalogue
        )
        assert "Date inconsistencies / continuity issues in CCTV evidence" not in analysis.red_flags
        assert "CCTV continuity: weight depends on continuity and integrity" in analysis.legal_tests

    def test_unsafe_status_alone_invokes_cpia(self, catalogue, s18_offence):
        """Test an unsafe procedural status invokes CPIA with nothing tracked outstanding."""
        elements = [make_element(e, SupportLevel.STRONG) for e in s18_offence.element_ids()]
        analysis = build_judge_analysis(
            s18_offence, elements, [],
            {"procedural_safety": {"status": "CONDITIONALLY_UNSAFE"}},
            catalogue,
        )

        assert analysis.legal_tests == ["CPIA principles (fair trial / materiality)"]
        assert analysis.red_flags == []

    def test_no_constraints(self, catalogue, s18_offence):
        """Test missing plugin constraints are tolerated."""
        elements = [make_element(e, SupportLevel.STRONG) for e in s18_offence.element_ids()]
        analysis = build_judge_analysis(s18_offence, elements, [], None, catalogue)
        assert analysis.legal_tests == []
        assert analysis.evidential_requirements == []
