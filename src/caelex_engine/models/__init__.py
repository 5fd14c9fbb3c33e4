"""
Caelex Models

All domain models for the Caelex compliance engine.

Exports all models organized by category for convenient imports:

    from caelex_engine.models import (
        # Enums
        Domain, RequirementStatus, OrbitType, ConstellationTier,
        # Conditions
        TriBool, Condition, Predicate, AND, OR, NOT, PRED,
        # Rules
        Rule, RuleCatalog, CatalogMeta,
        # Profiles
        DebrisProfile, EnvironmentalProfile, JurisdictionProfile,
        # Results
        ScoreResult, RuleAssessment, IncompleteProfileWarning,
        # Report
        ReportDocument, ReportSection,
    )
"""
from __future__ import annotations

# =============================================================================
# Enums
# =============================================================================
from .enums import (
    ActivityType,
    ConditionOperator,
    ConstellationTier,
    CountryCode,
    DeorbitStrategy,
    Domain,
    EndOfLifeStrategy,
    EntityNationality,
    EntitySize,
    EURelationship,
    ImpactGrade,
    LegislationStatus,
    LiabilityRegime,
    LicensingStatus,
    LifecyclePhase,
    Maneuverability,
    OperatorType,
    OrbitType,
    PrimaryOrbit,
    RequirementStatus,
    Reusability,
    Severity,
    Toxicity,
)

# =============================================================================
# Conditions (TriBool + Composable Conditions)
# =============================================================================
from .conditions import (
    AND,
    BETWEEN,
    CONTAINS,
    EQ,
    GT,
    GTE,
    IN,
    IS_FALSE,
    IS_TRUE,
    LT,
    LTE,
    NE,
    NOT,
    NOT_IN,
    OR,
    PRED,
    Condition,
    EvaluationResult,
    Predicate,
    TriBool,
)

# =============================================================================
# Rules and Reference Tables
# =============================================================================
from .rules import CatalogMeta, Rule, RuleCatalog
from .reference import (
    ApplicabilityClause,
    CrossReference,
    DebrisReference,
    DebrisTerms,
    EmissionFactors,
    EnvironmentalReference,
    GradeBand,
    InsuranceTerms,
    JurisdictionLaw,
    JurisdictionReference,
    LaunchVehicleProfile,
    Legislation,
    LicensingAuthority,
    OrbitInfo,
    PropellantProfile,
    TierThreshold,
)

# =============================================================================
# Profiles
# =============================================================================
from .profile import DebrisProfile, EnvironmentalProfile, JurisdictionProfile

# =============================================================================
# Results and Reports
# =============================================================================
from .result import (
    ApplicabilityResult,
    IncompleteProfileWarning,
    RuleAssessment,
    ScoreResult,
    StatusRecord,
)
from .report import LEGAL_DISCLAIMER, ReportDocument, ReportSection


__all__ = [
    # Enums
    "ActivityType",
    "ConditionOperator",
    "ConstellationTier",
    "CountryCode",
    "DeorbitStrategy",
    "Domain",
    "EndOfLifeStrategy",
    "EntityNationality",
    "EntitySize",
    "EURelationship",
    "ImpactGrade",
    "LegislationStatus",
    "LiabilityRegime",
    "LicensingStatus",
    "LifecyclePhase",
    "Maneuverability",
    "OperatorType",
    "OrbitType",
    "PrimaryOrbit",
    "RequirementStatus",
    "Reusability",
    "Severity",
    "Toxicity",
    # Conditions
    "AND",
    "BETWEEN",
    "CONTAINS",
    "EQ",
    "GT",
    "GTE",
    "IN",
    "IS_FALSE",
    "IS_TRUE",
    "LT",
    "LTE",
    "NE",
    "NOT",
    "NOT_IN",
    "OR",
    "PRED",
    "Condition",
    "EvaluationResult",
    "Predicate",
    "TriBool",
    # Rules and reference tables
    "CatalogMeta",
    "Rule",
    "RuleCatalog",
    "ApplicabilityClause",
    "CrossReference",
    "DebrisReference",
    "DebrisTerms",
    "EmissionFactors",
    "EnvironmentalReference",
    "GradeBand",
    "InsuranceTerms",
    "JurisdictionLaw",
    "JurisdictionReference",
    "LaunchVehicleProfile",
    "Legislation",
    "LicensingAuthority",
    "OrbitInfo",
    "PropellantProfile",
    "TierThreshold",
    # Profiles
    "DebrisProfile",
    "EnvironmentalProfile",
    "JurisdictionProfile",
    # Results and reports
    "ApplicabilityResult",
    "IncompleteProfileWarning",
    "RuleAssessment",
    "ScoreResult",
    "StatusRecord",
    "LEGAL_DISCLAIMER",
    "ReportDocument",
    "ReportSection",
]
