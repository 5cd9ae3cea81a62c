"""
StrategyPilot Catalogue Packs

Schema validation and loading for catalogue packs.

Catalogue packs are YAML or JSON files holding the static reference data
the engine reasons over: offence definitions and their regex lexicon, the
canonical dependency list with its alias table, critical disclosure items,
canonical routes, confidence scoring rules, doctrine texts and policy
thresholds.

Usage:
    from strategypilot.packs import default_catalogue, load_catalogue

    # Packaged catalogue (or SP_CATALOGUE_PATH), cached per process
    catalogue = default_catalogue()

    # A specific pack
    catalogue = load_catalogue("path/to/catalogue.yaml")
"""
from __future__ import annotations

from .loader import (
    CataloguePackLoader,
    default_catalogue,
    load_catalogue,
    validate_reference_integrity,
)
from .schema import (
    SCHEMA_VERSION,
    CataloguePackSchema,
    ConfidenceRuleSchema,
    CriticalItemSchema,
    DependencySchema,
    DoctrineSchema,
    OffenceSchema,
    PolicySchema,
    RouteSchema,
    check_schema_version,
    validate_catalogue_pack,
)

__all__ = [
    # Version
    "SCHEMA_VERSION",
    # Loader
    "CataloguePackLoader",
    "default_catalogue",
    "load_catalogue",
    # Validation
    "validate_catalogue_pack",
    "validate_reference_integrity",
    "check_schema_version",
    # Schemas (for advanced usage)
    "CataloguePackSchema",
    "ConfidenceRuleSchema",
    "CriticalItemSchema",
    "DependencySchema",
    "DoctrineSchema",
    "OffenceSchema",
    "PolicySchema",
    "RouteSchema",
]
