"""
StrategyPilot Catalogue Pack Loader

Loads and validates catalogue packs from YAML or JSON files and converts
the Pydantic schema models to frozen domain models.
"""
from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from ..config import DEFAULT_CATALOGUE_PATH, EngineSettings
from ..exceptions import (
    CatalogueLoadError,
    CatalogueValidationError,
    CatalogueVersionMismatch,
)
from ..models import (
    SIGNAL_FIELDS,
    Catalogue,
    ConfidenceRule,
    CriticalItem,
    DependencyDefinition,
    Doctrine,
    OffenceDefinition,
    OffenceElement,
    PolicyThresholds,
    RouteDefinition,
    RouteId,
)
from .schema import (
    SCHEMA_VERSION,
    CataloguePackSchema,
    ConfidenceRuleSchema,
    DependencySchema,
    DoctrineSchema,
    OffenceSchema,
    RouteSchema,
    check_schema_version,
    validate_catalogue_pack,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Reference Integrity Validation
# =============================================================================

def validate_reference_integrity(catalogue: Catalogue, path: str = "") -> None:
    """
    Validate internal references are consistent.

    Catches:
    - Routes requiring dependencies that are not in the catalogue
    - Duplicate offence, dependency and doctrine IDs
    - Dependencies pointing at unknown critical items
    - Confidence rule values outside the signal's domain

    Raises:
        ValueError: If reference integrity errors are found
    """
    errors = []

    dependency_ids = {d.id for d in catalogue.dependencies}
    critical_ids = {c.id for c in catalogue.critical_items}

    for route in catalogue.routes:
        for dep_id in route.required_dependencies:
            if dep_id not in dependency_ids:
                errors.append(f"Route '{route.id.value}' requires unknown dependency '{dep_id}'")

    for dep in catalogue.dependencies:
        if dep.critical and dep.critical not in critical_ids:
            errors.append(f"Dependency '{dep.id}' references unknown critical item '{dep.critical}'")

    for label, ids in (
        ("offence", [o.code for o in catalogue.offences]),
        ("dependency", [d.id for d in catalogue.dependencies]),
        ("route", [r.id.value for r in catalogue.routes]),
    ):
        seen: set[str] = set()
        for item_id in ids:
            if item_id in seen:
                errors.append(f"Duplicate {label} ID: '{item_id}'")
            seen.add(item_id)

    for route_id, rules in catalogue.confidence_rules.items():
        for rule in rules:
            allowed = {member.value for member in SIGNAL_FIELDS[rule.signal]}
            if rule.value not in allowed:
                errors.append(
                    f"Confidence rule for '{route_id.value}' uses value '{rule.value}' "
                    f"outside {sorted(allowed)} for signal '{rule.signal}'"
                )

    if errors:
        raise ValueError(f"Reference integrity errors in {path}:\n" + "\n".join(errors))


# =============================================================================
# Schema to Model Converters
# =============================================================================

def _convert_offence(schema: OffenceSchema) -> OffenceDefinition:
    return OffenceDefinition(
        code=schema.code,
        label=schema.label,
        elements=tuple(OffenceElement(id=e.id, label=e.label) for e in schema.elements),
        patterns=tuple(schema.patterns),
    )


def _convert_dependency(schema: DependencySchema) -> DependencyDefinition:
    return DependencyDefinition(
        id=schema.id,
        label=schema.label,
        why=schema.why,
        aliases=tuple(a.lower() for a in schema.aliases),
        excludes=tuple(x.lower() for x in schema.excludes),
        critical=schema.critical,
        key_disclosure=schema.key_disclosure,
    )


def _convert_route(schema: RouteSchema) -> RouteDefinition:
    return RouteDefinition(
        id=RouteId(schema.id),
        label=schema.label,
        required_dependencies=tuple(schema.required_dependencies),
        key_elements=tuple(schema.key_elements),
        angles=tuple(schema.angles),
    )


def _convert_rule(schema: ConfidenceRuleSchema) -> ConfidenceRule:
    return ConfidenceRule(
        signal=schema.signal,
        value=schema.value,
        weight=schema.weight,
        min_gaps=schema.min_gaps,
    )


def _convert_doctrine(schema: DoctrineSchema) -> Doctrine:
    return Doctrine(
        id=schema.id,
        title=schema.title,
        detail=schema.detail,
        applies_to=tuple(schema.applies_to),
        required_finding=schema.required_finding,
        intolerance=schema.intolerance,
        lens_red_flag=schema.lens_red_flag,
        legal_test=schema.legal_test,
        constraint=schema.constraint,
        tolerance=schema.tolerance,
        evidential_requirement=schema.evidential_requirement,
        analysis_red_flag=schema.analysis_red_flag,
    )


def _convert_catalogue_pack(schema: CataloguePackSchema) -> Catalogue:
    """Convert a validated pack schema to a Catalogue domain model."""
    return Catalogue(
        id=schema.id,
        name=schema.name,
        version=schema.version,
        jurisdiction=schema.jurisdiction,
        offences=tuple(_convert_offence(o) for o in schema.offences),
        default_offence=_convert_offence(schema.default_offence),
        element_keywords={
            element_id: tuple(k.lower() for k in keywords)
            for element_id, keywords in schema.element_keywords.items()
        },
        dependencies=tuple(_convert_dependency(d) for d in schema.dependencies),
        critical_items=tuple(
            CriticalItem(id=c.id, label=c.label, labels=tuple(l.lower() for l in c.labels))
            for c in schema.critical_items
        ),
        routes=tuple(_convert_route(r) for r in schema.routes),
        confidence_rules={
            RouteId(route_id): tuple(_convert_rule(r) for r in rules)
            for route_id, rules in schema.confidence_rules.items()
        },
        doctrines={d.id: _convert_doctrine(d) for d in schema.doctrines},
        policy=PolicyThresholds(**schema.policy.model_dump()),
    )


# =============================================================================
# Catalogue Pack Loader
# =============================================================================

class CataloguePackLoader:
    """
    Loads catalogue packs from files.

    Usage:
        loader = CataloguePackLoader()
        catalogue = loader.load("path/to/catalogue.yaml")
    """

    def __init__(self, strict_version: bool = True):
        """
        Initialize the loader.

        Args:
            strict_version: If True, reject packs with incompatible schema versions
        """
        self.strict_version = strict_version
        self._catalogues: dict[str, Catalogue] = {}

    def load(self, path: Union[str, Path]) -> Catalogue:
        """
        Load a catalogue pack from a file.

        Raises:
            CatalogueLoadError: If file cannot be read
            CatalogueValidationError: If validation fails
            CatalogueVersionMismatch: If schema version incompatible
        """
        path = Path(path)

        try:
            data = self._load_file(path)
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise CatalogueLoadError(
                message=f"Failed to load catalogue pack: {e}",
                details={"path": str(path), "error": str(e)},
            )

        catalogue = self._build(data, str(path))
        self._catalogues[catalogue.id] = catalogue
        logger.info("Loaded catalogue pack %s (%s) from %s", catalogue.id, catalogue.version, path)
        return catalogue

    def load_from_string(self, content: str, format: str = "yaml") -> Catalogue:
        """Load a catalogue pack from a YAML or JSON string."""
        try:
            data = json.loads(content) if format.lower() == "json" else yaml.safe_load(content)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise CatalogueLoadError(
                message=f"Failed to parse catalogue pack: {e}",
                details={"format": format, "error": str(e)},
            )
        catalogue = self._build(data, "<string>")
        self._catalogues[catalogue.id] = catalogue
        return catalogue

    def _build(self, data: Any, source: str) -> Catalogue:
        if not isinstance(data, dict):
            raise CatalogueValidationError(
                message="Catalogue pack must be a mapping at the top level",
                details={"path": source},
            )

        if self.strict_version and not check_schema_version(data):
            pack_version = data.get("schema_version", "unknown")
            raise CatalogueVersionMismatch(
                message=f"Schema version mismatch: pack has {pack_version}, expected {SCHEMA_VERSION}",
                details={
                    "pack_version": pack_version,
                    "expected_version": SCHEMA_VERSION,
                },
            )

        try:
            schema = validate_catalogue_pack(data)
        except ValidationError as e:
            raise CatalogueValidationError(
                message=f"Catalogue pack validation failed: {e.error_count()} errors",
                details={"errors": e.errors(), "path": source},
            )

        catalogue = _convert_catalogue_pack(schema)

        try:
            validate_reference_integrity(catalogue, source)
        except ValueError as e:
            raise CatalogueValidationError(
                message="Reference integrity validation failed",
                details={"errors": str(e), "path": source},
            )

        return catalogue

    def _load_file(self, path: Path) -> Any:
        """Load data from YAML or JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                return json.load(f)
            return yaml.safe_load(f)

    def get_catalogue(self, catalogue_id: str) -> Optional[Catalogue]:
        """Get a cached catalogue by ID."""
        return self._catalogues.get(catalogue_id)

    def list_catalogues(self) -> list[str]:
        """List IDs of all loaded catalogues."""
        return list(self._catalogues.keys())


# =============================================================================
# Convenience Functions
# =============================================================================

def load_catalogue(
    path: Union[str, Path, None] = None,
    strict_version: bool = True,
) -> Catalogue:
    """
    Load a catalogue pack, defaulting to the packaged UK catalogue.

    Convenience function that creates a temporary loader.
    """
    loader = CataloguePackLoader(strict_version=strict_version)
    return loader.load(path or DEFAULT_CATALOGUE_PATH)


@lru_cache(maxsize=1)
def default_catalogue() -> Catalogue:
    """
    The catalogue selected by the environment, loaded once per process.

    Honours SP_CATALOGUE_PATH and SP_STRICT_CATALOGUE_VERSION.
    """
    settings = EngineSettings.from_env()
    return load_catalogue(settings.catalogue_path, settings.strict_catalogue_version)
