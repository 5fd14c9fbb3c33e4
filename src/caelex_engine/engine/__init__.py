"""
Caelex Engine

The applicability and scoring pipeline shared by all compliance domains.

Services:
- normalize: Raw input to canonical profile
- ConditionEvaluator: Evaluate composable conditions (Kleene logic)
- filter_applicable: Select the rules that apply to a profile
- aggregate: Merge caller statuses, count and score
- calculate_footprint: Environmental lifecycle emissions and grade
- compare_jurisdictions: Country-level national space-law view
- assemble: Structured report document
- DomainEngine: The whole pipeline for one catalog

Usage:
    from caelex_engine.engine import evaluate, build_report

    result = evaluate("debris", raw_profile, existing_statuses)
    report = build_report("environmental", raw_profile)
"""
from __future__ import annotations

from .aggregator import (
    aggregate,
    compute_score,
    merge_statuses,
    parse_status,
)
from .applicability import filter_applicable
from .assembler import assemble, requirements_matrix
from .condition_evaluator import (
    ConditionEvaluator,
    check_condition,
    compare_values,
    evaluate_condition,
    resolve_field_path,
)
from .debris import (
    DebrisMetrics,
    debris_metrics,
    debris_recommendations,
    meets_twenty_five_year_rule,
    risk_level,
    severity_breakdown,
    simplified_regime_eligible,
)
from .evaluator import (
    DomainEngine,
    build_report,
    evaluate,
    get_engine,
    result_fingerprint,
)
from .footprint import (
    FootprintResult,
    PhaseImpact,
    SupplierDataRequest,
    calculate_footprint,
    format_emissions,
    format_mass,
)
from .jurisdiction import (
    ComparisonCriterion,
    JurisdictionComparison,
    JurisdictionResult,
    build_eu_preview,
    check_applicability,
    compare_jurisdictions,
    favorability,
    format_cost_estimate,
    format_key_change,
)
from .normalizer import (
    INPUT_MODELS,
    Profile,
    normalize,
)

__all__ = [
    # Pipeline
    "normalize",
    "filter_applicable",
    "aggregate",
    "assemble",
    "evaluate",
    "build_report",
    # Engine
    "DomainEngine",
    "get_engine",
    "result_fingerprint",
    # Conditions
    "ConditionEvaluator",
    "check_condition",
    "compare_values",
    "evaluate_condition",
    "resolve_field_path",
    # Aggregation
    "compute_score",
    "merge_statuses",
    "parse_status",
    # Normalization
    "INPUT_MODELS",
    "Profile",
    # Debris
    "DebrisMetrics",
    "debris_metrics",
    "debris_recommendations",
    "meets_twenty_five_year_rule",
    "risk_level",
    "severity_breakdown",
    "simplified_regime_eligible",
    # Environmental
    "FootprintResult",
    "PhaseImpact",
    "SupplierDataRequest",
    "calculate_footprint",
    "format_emissions",
    "format_mass",
    # Jurisdiction
    "ComparisonCriterion",
    "JurisdictionComparison",
    "JurisdictionResult",
    "build_eu_preview",
    "check_applicability",
    "compare_jurisdictions",
    "favorability",
    "format_cost_estimate",
    "format_key_change",
    # Reports
    "requirements_matrix",
]
