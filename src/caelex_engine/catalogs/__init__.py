"""
Caelex Rule Catalogs

Schema validation and loading for rule catalogs.

Catalogs are YAML or JSON files that declare a domain's requirements,
their applicability predicates and the domain's reference tables
(tier thresholds, emission factors, national law records). The three
catalogs shipped with the engine live in `catalogs/data/`.

Usage:
    from caelex_engine.catalogs import load_catalog, CatalogLoader

    # Process-wide, cached catalog
    catalog = load_catalog("debris")

    # Explicit loader, e.g. for a catalog under review
    loader = CatalogLoader(catalog_dir="path/to/catalogs")
    catalog = loader.load("environmental")
"""
from __future__ import annotations

from .loader import (
    PROFILE_TYPES,
    CatalogLoader,
    clear_catalog_cache,
    coerce_domain,
    load_catalog,
    load_catalog_from_string,
    validate_catalog_integrity,
)
from .schema import (
    CATALOG_SCHEMAS,
    SCHEMA_VERSION,
    ConditionSchema,
    DebrisCatalogSchema,
    EnvironmentalCatalogSchema,
    JurisdictionCatalogSchema,
    RuleSchema,
    check_schema_version,
    validate_catalog,
)

__all__ = [
    # Version
    "SCHEMA_VERSION",
    # Loader
    "CatalogLoader",
    "PROFILE_TYPES",
    "clear_catalog_cache",
    "coerce_domain",
    "load_catalog",
    "load_catalog_from_string",
    # Validation
    "validate_catalog",
    "validate_catalog_integrity",
    "check_schema_version",
    # Schemas (for advanced usage)
    "CATALOG_SCHEMAS",
    "ConditionSchema",
    "RuleSchema",
    "DebrisCatalogSchema",
    "EnvironmentalCatalogSchema",
    "JurisdictionCatalogSchema",
]
