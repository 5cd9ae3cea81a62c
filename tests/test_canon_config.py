"""
Tests for canonical serialization, settings, logging and exceptions.
"""
import io
import json
import logging
import sys
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from pathlib import Path

import pytest

from strategypilot.canon import canonical_json, content_hash, content_hash_short, input_hash
from strategypilot.config import (
    DEFAULT_CATALOGUE_PATH,
    EngineSettings,
    JSONFormatter,
    configure_logging,
)
from strategypilot.exceptions import (
    CatalogueLoadError,
    StrategyPackError,
    StrategyPilotError,
    UnknownRouteError,
)
from strategypilot.models import CaseDocument, CaseInput, RouteStatus

from tests.conftest import make_case_payload


@dataclass
class Point:
    x: int
    y: int


# =============================================================================
# Canonical JSON Tests
# =============================================================================

class TestCanonicalJson:
    """Tests for canonical_json and content hashes."""

    def test_sorted_without_whitespace(self):
        """Test keys are sorted and separators compact."""
        assert canonical_json({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'

    def test_special_types(self):
        """Test dates, enums, dataclasses and sets serialize deterministically."""
        payload = {
            "day": date(2024, 6, 1),
            "at": datetime(2024, 6, 1, 9, 30, tzinfo=timezone.utc),
            "status": RouteStatus.VIABLE,
            "point": Point(1, 2),
            "tags": {"b", "a"},
        }
        decoded = json.loads(canonical_json(payload))

        assert decoded["day"] == "2024-06-01"
        assert decoded["at"] == "2024-06-01T09:30:00+00:00"
        assert decoded["status"] == RouteStatus.VIABLE.value
        assert decoded["point"] == {"x": 1, "y": 2}
        assert decoded["tags"] == ["a", "b"]

    def test_top_level_dataclass(self):
        """Test a dataclass at the top level is serialized as a dict."""
        assert canonical_json(Point(3, 4)) == '{"x":3,"y":4}'

    def test_unserializable(self):
        """Test unknown types raise TypeError."""
        with pytest.raises(TypeError):
            canonical_json({"bad": object()})

    def test_content_hash(self):
        """Test hashes ignore key order and have the expected length."""
        assert content_hash({"a": 1, "b": 2}) == content_hash({"b": 2, "a": 1})
        assert len(content_hash({"a": 1})) == 64
        assert content_hash_short({"a": 1}) == content_hash({"a": 1})[:12]
        assert len(content_hash_short({"a": 1}, length=8)) == 8

    def test_input_hash_tracks_snapshot(self):
        """Test input_hash changes with the case snapshot."""
        first = CaseInput.from_dict(make_case_payload())
        same = CaseInput.from_dict(make_case_payload())
        other = CaseInput.from_dict(make_case_payload(case_id="CASE-002"))

        assert input_hash(first) == input_hash(same)
        assert input_hash(first) != input_hash(other)

    def test_input_hash_tolerates_decimal(self):
        """Test a Decimal in extracted document fields hashes by its string form."""
        plain = CaseInput(case_id="C", documents=[CaseDocument(name="MG5", extracted={"h": "1.8"})])
        decimal = CaseInput(
            case_id="C", documents=[CaseDocument(name="MG5", extracted={"h": Decimal("1.8")})]
        )

        assert len(input_hash(decimal)) == 64
        assert input_hash(decimal) == input_hash(decimal)
        assert input_hash(decimal) != input_hash(CaseInput(case_id="C"))
        assert input_hash(plain) == input_hash(decimal)
        with pytest.raises(TypeError):
            canonical_json(decimal)


# =============================================================================
# Settings and Logging Tests
# =============================================================================

class TestEngineSettings:
    """Tests for EngineSettings.from_env."""

    def test_defaults(self, monkeypatch):
        """Test defaults with nothing set."""
        for name in ("SP_LOG_LEVEL", "SP_CATALOGUE_PATH", "SP_STRICT_CATALOGUE_VERSION"):
            monkeypatch.delenv(name, raising=False)
        settings = EngineSettings.from_env()

        assert settings.log_level == "INFO"
        assert settings.catalogue_path == DEFAULT_CATALOGUE_PATH
        assert settings.strict_catalogue_version is True
        assert DEFAULT_CATALOGUE_PATH.name == "criminal_uk.yaml"

    def test_overrides(self, monkeypatch):
        """Test environment overrides."""
        monkeypatch.setenv("SP_LOG_LEVEL", "debug")
        monkeypatch.setenv("SP_CATALOGUE_PATH", "/tmp/pack.yaml")
        monkeypatch.setenv("SP_STRICT_CATALOGUE_VERSION", "False")
        settings = EngineSettings.from_env()

        assert settings.log_level == "DEBUG"
        assert settings.catalogue_path == Path("/tmp/pack.yaml")
        assert settings.strict_catalogue_version is False


class TestLogging:
    """Tests for JSONFormatter and configure_logging."""

    @pytest.fixture
    def stream(self):
        stream = io.StringIO()
        yield stream
        logger = logging.getLogger("strategypilot")
        for handler in list(logger.handlers):
            if getattr(handler, "_strategypilot", False):
                logger.removeHandler(handler)

    def test_json_lines_with_extras(self, stream):
        """Test records are written as JSON with case context."""
        logger = configure_logging(
            EngineSettings(log_level="INFO"), logging.StreamHandler(stream)
        )
        logging.getLogger("strategypilot.engine.coordinator").info(
            "Assessment complete", extra={"case_id": "CASE-001", "input_hash_short": "abc123"}
        )
        entry = json.loads(stream.getvalue().strip())

        assert logger.name == "strategypilot"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "strategypilot.engine.coordinator"
        assert entry["message"] == "Assessment complete"
        assert entry["case_id"] == "CASE-001"
        assert entry["input_hash_short"] == "abc123"
        assert "step" not in entry

    def test_no_duplicate_handlers(self, stream):
        """Test repeated configuration replaces the previous handler."""
        configure_logging(EngineSettings(), logging.StreamHandler(io.StringIO()))
        logger = configure_logging(EngineSettings(), logging.StreamHandler(stream))

        ours = [h for h in logger.handlers if getattr(h, "_strategypilot", False)]
        assert len(ours) == 1

    def test_exception_field(self):
        """Test exception info is included when present."""
        formatter = JSONFormatter()
        try:
            raise ValueError("bad catalogue")
        except ValueError:
            record = logging.getLogger("strategypilot").makeRecord(
                "strategypilot", logging.ERROR, __file__, 1, "failed", None,
                exc_info=sys.exc_info(),
            )
        entry = json.loads(formatter.format(record))
        assert "ValueError: bad catalogue" in entry["exception"]


# =============================================================================
# Exception Tests
# =============================================================================

class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_str_with_case(self):
        """Test the code and case id appear in the message."""
        error = StrategyPackError(message="Strategy pack bad returned list, not dict",
                                  case_id="CASE-001")
        assert str(error) == (
            "[SP_STRATEGY_PACK_ERROR] Strategy pack bad returned list, not dict (case: CASE-001)"
        )

    def test_to_dict_omits_empty(self):
        """Test empty details and case id are left out."""
        assert UnknownRouteError(message="Unknown route: appeal").to_dict() == {
            "code": "SP_UNKNOWN_ROUTE",
            "message": "Unknown route: appeal",
        }

    def test_to_dict_with_details(self):
        """Test details are carried through."""
        error = CatalogueLoadError(message="Missing", details={"path": "x.yaml"})
        assert error.to_dict()["details"] == {"path": "x.yaml"}

    def test_hierarchy(self):
        """Test every error is a StrategyPilotError with the base code default."""
        assert isinstance(CatalogueLoadError(message="x"), StrategyPilotError)
        assert StrategyPilotError(message="x").code == "SP_INTERNAL_ERROR"
        with pytest.raises(StrategyPilotError):
            raise UnknownRouteError(message="Unknown route")
