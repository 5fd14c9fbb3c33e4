"""
Caelex Engine - Space Compliance Applicability and Scoring

Maps a mission or operator profile to the regulatory requirements that
apply to it and scores compliance against them. The host application owns
persistence and rendering; the engine is a pure function call.

Domains:
- debris: EU Space Act debris-mitigation checklist (Art. 63-73)
- environmental: Environmental Footprint Declaration (Art. 96-100)
- jurisdiction: national space laws of ten European jurisdictions

Quick Start:
    from caelex_engine import evaluate, build_report

    result = evaluate(
        "debris",
        {
            "orbit_type": "LEO",
            "satellite_count": 1,
            "maneuverability": "full",
            "mission_duration_years": 5,
            "deorbit_strategy": "active_deorbit",
        },
        existing_statuses={"trackability": "compliant"},
    )
    print(result.score, result.counts)

    report = build_report("debris", raw_profile)

Version: 1.0.0
"""
from __future__ import annotations

__version__ = "1.0.0"

# =============================================================================
# Core Models (Re-exported for convenience)
# =============================================================================
from .models import (
    # Enums
    Domain,
    RequirementStatus,
    Severity,
    # Conditions
    TriBool,
    Condition,
    Predicate,
    # Rules
    CatalogMeta,
    Rule,
    RuleCatalog,
    # Profiles
    DebrisProfile,
    EnvironmentalProfile,
    JurisdictionProfile,
    # Results
    IncompleteProfileWarning,
    RuleAssessment,
    ScoreResult,
    StatusRecord,
    # Report
    LEGAL_DISCLAIMER,
    ReportDocument,
    ReportSection,
)

# =============================================================================
# Pipeline
# =============================================================================
from .catalogs import load_catalog
from .engine import (
    DomainEngine,
    aggregate,
    assemble,
    build_report,
    evaluate,
    filter_applicable,
    get_engine,
    merge_statuses,
    normalize,
)

# =============================================================================
# Utilities
# =============================================================================
from .canon import canonical_json, content_hash, content_hash_short

# =============================================================================
# Exceptions
# =============================================================================
from .exceptions import (
    CaelexError,
    CatalogLoadError,
    CatalogValidationError,
    CatalogVersionMismatch,
    ConditionEvaluationError,
    InvalidProfileError,
    InvalidStatusMapError,
    UnknownDomainError,
)

# =============================================================================
# Public API
# =============================================================================
__all__ = [
    # Version
    "__version__",
    # Models
    "Domain",
    "RequirementStatus",
    "Severity",
    "TriBool",
    "Condition",
    "Predicate",
    "CatalogMeta",
    "Rule",
    "RuleCatalog",
    "DebrisProfile",
    "EnvironmentalProfile",
    "JurisdictionProfile",
    "IncompleteProfileWarning",
    "RuleAssessment",
    "ScoreResult",
    "StatusRecord",
    "LEGAL_DISCLAIMER",
    "ReportDocument",
    "ReportSection",
    # Pipeline
    "load_catalog",
    "normalize",
    "filter_applicable",
    "aggregate",
    "merge_statuses",
    "assemble",
    "evaluate",
    "build_report",
    "DomainEngine",
    "get_engine",
    # Utilities
    "canonical_json",
    "content_hash",
    "content_hash_short",
    # Exceptions
    "CaelexError",
    "CatalogLoadError",
    "CatalogValidationError",
    "CatalogVersionMismatch",
    "ConditionEvaluationError",
    "InvalidProfileError",
    "InvalidStatusMapError",
    "UnknownDomainError",
]
