"""
Tests for strategy packs.

Tests cover:
- Incident shape classification
- IncidentShapePack preconditions
- The StrategyPack protocol
"""
import pytest

from strategypilot.engine import (
    IncidentShapePack,
    NullStrategyPack,
    PackContext,
    StrategyPack,
    classify_incident_shape,
)
from strategypilot.engine.plugins import default_packs
from strategypilot.models import CaseInput, IncidentShape

from tests.conftest import make_case_payload, make_document, make_impact


class TestClassifyIncidentShape:
    """Tests for classify_incident_shape."""

    def test_no_sequence_evidence(self):
        """Test the shape stays unclear without sequence evidence."""
        result = classify_incident_shape(
            [make_document("A fight happened outside the kebab shop")],
            impact_map=[make_impact("CCTV footage"), make_impact("Medical report", "received")],
        )

        assert result["shape"] == IncidentShape.UNCLEAR_DISCLOSURE_DEPENDENT.value
        assert result["evidence_basis"] == [
            "Sequence evidence not present",
            "Outstanding: CCTV footage",
            "CCTV or timeline data may clarify incident shape",
        ]

    @pytest.mark.parametrize("text,expected", [
        ("The timeline shows he struck once", IncidentShape.SINGLE_IMPULSIVE_BLOW),
        (
            "The chronology shows repeated blows, deliberate and targeted",
            IncidentShape.SUSTAINED_TARGETED_ATTACK,
        ),
        ("Sequence: a scuffle between both parties", IncidentShape.BRIEF_CHAOTIC_SCUFFLE),
        ("Sequence unknown, nothing more", IncidentShape.UNCLEAR_DISCLOSURE_DEPENDENT),
    ])
    def test_shapes(self, text, expected):
        """Test each shape from sequence-bearing text."""
        assert classify_incident_shape([make_document(text)])["shape"] == expected.value

    def test_duration_overrides_single_strike(self):
        """Test duration evidence outweighs a single-strike mention."""
        result = classify_incident_shape(
            [make_document("Timeline: struck once, but the incident lasted two minutes")]
        )

        assert result["shape"] == IncidentShape.BRIEF_CHAOTIC_SCUFFLE.value
        assert result["evidence_basis"] == ["Multiple strikes or duration evidence present"]

    def test_position_text(self):
        """Test the recorded position text is read alongside documents."""
        result = classify_incident_shape(None, "Sequence shows a single punch")
        assert result["shape"] == IncidentShape.SINGLE_IMPULSIVE_BLOW.value

    def test_words_not_fragments(self):
        """Test shape words match whole words only."""
        result = classify_incident_shape([make_document("Sequence: someone onced a bonce")])
        assert result["shape"] == IncidentShape.UNCLEAR_DISCLOSURE_DEPENDENT.value


class TestIncidentShapePack:
    """Tests for IncidentShapePack."""

    def test_contributes_shape(self, s18_offence):
        """Test the pack contributes an incident_shape constraint."""
        case_input = CaseInput.from_dict(make_case_payload())
        result = IncidentShapePack().constraints(case_input, PackContext(offence=s18_offence))

        assert list(result) == ["incident_shape"]
        assert result["incident_shape"]["shape"] == (
            IncidentShape.UNCLEAR_DISCLOSURE_DEPENDENT.value
        )
        assert "Outstanding: CCTV footage" in result["incident_shape"]["evidence_basis"]

    def test_closed_gate(self, s18_offence):
        """Test nothing is contributed on a closed gate."""
        case_input = CaseInput.from_dict(make_case_payload())
        context = PackContext(offence=s18_offence, gate_open=False)
        assert IncidentShapePack().constraints(case_input, context) == {}

    def test_nothing_to_read(self, s18_offence):
        """Test nothing is contributed without documents or position text."""
        case_input = CaseInput.from_dict(make_case_payload(documents=[]))
        assert IncidentShapePack().constraints(case_input, PackContext(offence=s18_offence)) == {}


class TestStrategyPackProtocol:
    """Tests for the pack protocol and defaults."""

    def test_implementations_satisfy_protocol(self):
        """Test bundled packs are StrategyPack instances."""
        assert isinstance(NullStrategyPack(), StrategyPack)
        assert isinstance(IncidentShapePack(), StrategyPack)

    def test_null_pack(self, s18_offence):
        """Test the null pack contributes nothing."""
        case_input = CaseInput.from_dict({})
        assert NullStrategyPack().constraints(case_input, PackContext(offence=s18_offence)) == {}

    def test_default_packs(self):
        """Test the default pack list is the null pack."""
        packs = default_packs()
        assert [p.name for p in packs] == ["null"]
