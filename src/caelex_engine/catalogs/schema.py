"""
Caelex Rule Catalog Schemas

Pydantic models for validating rule catalog YAML/JSON files.

These schemas define the structure of the catalogs shipped with the
engine (debris, environmental, jurisdiction). They map to the domain
models in caelex_engine.models.

Schema versioning:
- schema_version field tracks breaking changes
- Loaders check the major version before validating
"""
from __future__ import annotations

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator


# =============================================================================
# Schema Version
# =============================================================================

SCHEMA_VERSION = "1.0.0"


# =============================================================================
# Enums as Literals (for YAML validation)
# =============================================================================

DomainValue = Literal["debris", "environmental", "jurisdiction"]

SeverityValue = Literal["critical", "major", "minor"]

ConditionOperatorValue = Literal[
    "and", "or", "not",
    "eq", "ne", "gt", "lt", "gte", "lte",
    "in", "not_in", "contains",
    "is_true", "is_false", "is_null", "is_not_null", "between",
]

OrbitTypeValue = Literal["LEO", "MEO", "GEO", "HEO", "cislunar"]

ConstellationTierValue = Literal["single", "small", "medium", "large", "mega"]

DeorbitStrategyValue = Literal[
    "active_deorbit", "passive_decay", "graveyard_orbit", "adr_contracted"
]

ManeuverabilityValue = Literal["full", "limited", "none"]

EndOfLifeStrategyValue = Literal[
    "controlled_deorbit", "passive_decay", "graveyard_orbit", "retrieval"
]

GradeValue = Literal["A", "B", "C", "D", "E"]

ToxicityValue = Literal["low", "medium", "high", "very_high"]

ReusabilityValue = Literal["none", "partial", "full"]

CountryCodeValue = Literal["FR", "UK", "BE", "NL", "LU", "AT", "DK", "DE", "IT", "NO"]

ActivityTypeValue = Literal[
    "spacecraft_operation", "launch_vehicle", "launch_site",
    "in_orbit_services", "earth_observation", "satellite_communications",
    "space_resources",
]

EntityNationalityValue = Literal["domestic", "eu_other", "non_eu", "esa_member"]

LegislationStatusValue = Literal["enacted", "draft", "pending", "none"]

LiabilityRegimeValue = Literal["unlimited", "capped", "tiered", "negotiable"]

EURelationshipValue = Literal["superseded", "complementary", "parallel", "gap"]


# =============================================================================
# Conditions
# =============================================================================

class ConditionSchema(BaseModel):
    """
    Schema for a composable condition.

    For logical operators (and, or, not), use children.
    For comparison operators, use field/value directly.
    """
    op: ConditionOperatorValue = Field(..., description="Operator")

    # For logical composition
    children: Optional[list["ConditionSchema"]] = Field(
        None, description="Child conditions for AND/OR/NOT"
    )

    # For leaf predicates
    field: Optional[str] = Field(None, description="Profile attribute path")
    value: Optional[Any] = Field(None, description="Value for comparison")

    # Metadata
    id: Optional[str] = Field(None, description="Condition ID for references")
    description: Optional[str] = Field(None, description="Human-readable description")

    model_config = {"extra": "forbid"}

    @model_validator(mode="after")
    def validate_structure(self) -> "ConditionSchema":
        """Validate condition structure based on operator type."""
        logical_ops = {"and", "or", "not"}
        valueless_ops = {"is_true", "is_false", "is_null", "is_not_null"}

        if self.op in logical_ops:
            if not self.children:
                raise ValueError(f"Logical operator '{self.op}' requires 'children'")
            if self.op == "not" and len(self.children) != 1:
                raise ValueError("NOT operator must have exactly one child")
            if self.field is not None:
                raise ValueError(f"Logical operator '{self.op}' cannot have 'field'")
        else:
            if self.field is None:
                raise ValueError(f"Comparison operator '{self.op}' requires 'field'")
            if self.children:
                raise ValueError(f"Comparison operator '{self.op}' cannot have 'children'")
            if self.op not in valueless_ops and self.value is None:
                raise ValueError(f"Comparison operator '{self.op}' requires 'value'")
            if self.op in {"in", "not_in"} and not isinstance(self.value, list):
                raise ValueError(f"Operator '{self.op}' requires a list value")
            if self.op == "between" and (
                not isinstance(self.value, list) or len(self.value) != 2
            ):
                raise ValueError("Operator 'between' requires [low, high]")

        return self


# =============================================================================
# Rules
# =============================================================================

class RuleSchema(BaseModel):
    """Schema for one requirement in a debris or environmental catalog."""
    id: str = Field(..., min_length=1, description="Stable rule identifier")
    title: str = Field(..., description="Requirement title")
    citation: str = Field(..., description="Article or section reference")
    severity: Optional[SeverityValue] = Field(None, description="Rule severity")
    category: Optional[str] = Field(None, description="Requirement category")
    mandatory: bool = Field(True, description="Mandatory requirement")
    standard: Optional[str] = Field(None, description="Referenced technical standard")
    tags: list[str] = Field(default_factory=list, description="Free-form tags")

    # Guidance (passed through)
    description: str = Field("", description="Requirement text")
    compliance_question: Optional[str] = Field(None, description="Question for the operator")
    tips: list[str] = Field(default_factory=list)
    evidence_required: list[str] = Field(default_factory=list)

    applies_when: list[ConditionSchema] = Field(
        default_factory=list,
        description="Applicability clauses, combined with AND",
    )

    model_config = {"extra": "forbid"}


class CatalogHeaderSchema(BaseModel):
    """Fields shared by every catalog file."""
    schema_version: str = Field(SCHEMA_VERSION, description="Catalog schema version")
    catalog_id: str = Field(..., description="Catalog identifier")
    domain: DomainValue = Field(..., description="Compliance domain")
    title: str = Field(..., description="Catalog title")
    version: str = Field(..., description="Catalog content version")
    effective_date: Optional[str] = Field(None, description="Date the rules take effect")

    # Named activity lists, referenced from rules through YAML anchors
    activity_groups: dict[str, list[ActivityTypeValue]] = Field(default_factory=dict)

    model_config = {"extra": "forbid"}


# =============================================================================
# Debris Catalog
# =============================================================================

class TierThresholdSchema(BaseModel):
    tier: ConstellationTierValue
    min_count: int = Field(..., ge=1)
    max_count: Optional[int] = Field(None, ge=1)

    model_config = {"extra": "forbid"}

    @model_validator(mode="after")
    def validate_bounds(self) -> "TierThresholdSchema":
        if self.max_count is not None and self.max_count < self.min_count:
            raise ValueError(
                f"Tier '{self.tier}': max_count {self.max_count} < min_count {self.min_count}"
            )
        return self


class OrbitInfoSchema(BaseModel):
    label: str
    altitude_range: str

    model_config = {"extra": "forbid"}


class DebrisReferenceSchema(BaseModel):
    """Lookup tables for the debris domain."""
    tier_thresholds: list[TierThresholdSchema] = Field(..., min_length=1)
    deorbit_options: dict[OrbitTypeValue, list[DeorbitStrategyValue]]
    orbits: dict[OrbitTypeValue, OrbitInfoSchema]
    deorbit_descriptions: dict[DeorbitStrategyValue, str]
    collision_avoidance_strategies: dict[ManeuverabilityValue, str]
    default_service_provider: str

    model_config = {"extra": "forbid"}


class DebrisCatalogSchema(CatalogHeaderSchema):
    """Schema for the debris mitigation catalog."""
    simplified_regime_when: list[ConditionSchema] = Field(default_factory=list)
    reference: DebrisReferenceSchema
    rules: list[RuleSchema] = Field(..., min_length=1)


# =============================================================================
# Environmental Catalog
# =============================================================================

class EmissionFactorsSchema(BaseModel):
    manufacturing_gwp_per_kg: float = Field(..., ge=0)
    manufacturing_odp_per_kg: float = Field(..., ge=0)
    raw_material_gwp_share: float = Field(..., ge=0, le=1)
    raw_material_odp_share: float = Field(..., ge=0, le=1)
    transport_distance_km: float = Field(..., ge=0)
    transport_gwp_per_kg_km: float = Field(..., ge=0)
    ground_station_gwp_per_hour: float = Field(..., ge=0)
    mission_control_gwp_per_year: float = Field(..., ge=0)
    end_of_life_gwp: dict[EndOfLifeStrategyValue, float]
    end_of_life_odp: dict[EndOfLifeStrategyValue, float]
    hotspot_share: float = Field(..., gt=0, lt=1)

    model_config = {"extra": "forbid"}


class PropellantSchema(BaseModel):
    name: str
    gwp_per_kg: float = Field(..., ge=0)
    odp_per_kg: float = Field(..., ge=0)
    toxicity: ToxicityValue
    rating: GradeValue

    model_config = {"extra": "forbid"}


class LaunchVehicleSchema(BaseModel):
    name: str
    provider: Optional[str] = None
    gwp_kg: float = Field(..., ge=0)
    odp_kg: float = Field(..., ge=0)
    reusability: ReusabilityValue
    grade: GradeValue

    model_config = {"extra": "forbid"}


class GradeBandSchema(BaseModel):
    grade: GradeValue
    label: str
    max_intensity: Optional[float] = Field(None, ge=0)

    model_config = {"extra": "forbid"}


class EnvironmentalReferenceSchema(BaseModel):
    """Emission factors and lookup tables for the environmental domain."""
    factors: EmissionFactorsSchema
    grade_bands: list[GradeBandSchema] = Field(..., min_length=1)
    grade_deductions: dict[GradeValue, int]
    propellants: dict[str, PropellantSchema]
    launch_vehicles: dict[str, LaunchVehicleSchema] = Field(..., min_length=1)

    model_config = {"extra": "forbid"}

    @model_validator(mode="after")
    def validate_grade_bands(self) -> "EnvironmentalReferenceSchema":
        """Bands ascend and only the last one is open-ended."""
        bounds = [band.max_intensity for band in self.grade_bands]
        if bounds[-1] is not None:
            raise ValueError("Last grade band must be open-ended")
        closed = bounds[:-1]
        if any(bound is None for bound in closed):
            raise ValueError("Only the last grade band may be open-ended")
        if closed != sorted(closed):
            raise ValueError("Grade bands must be in ascending order")
        return self


class EnvironmentalCatalogSchema(CatalogHeaderSchema):
    """Schema for the Environmental Footprint Declaration catalog."""
    simplified_regime_when: list[ConditionSchema] = Field(default_factory=list)
    reference: EnvironmentalReferenceSchema
    rules: list[RuleSchema] = Field(..., min_length=1)


# =============================================================================
# Jurisdiction Catalog
# =============================================================================

class LegislationSchema(BaseModel):
    name: str
    name_local: Optional[str] = None
    year_enacted: int
    year_amended: Optional[int] = None
    status: LegislationStatusValue

    model_config = {"extra": "forbid"}


class AuthoritySchema(BaseModel):
    name: str
    website: str
    contact_email: str

    model_config = {"extra": "forbid"}


class NationalRequirementSchema(BaseModel):
    """One national requirement; becomes a rule of the jurisdiction catalog."""
    id: str = Field(..., min_length=1)
    title: str
    category: str
    citation: str
    mandatory: bool = True
    applies_to: list[ActivityTypeValue] = Field(..., min_length=1)
    description: str = ""

    model_config = {"extra": "forbid"}


class ApplicabilityClauseSchema(BaseModel):
    id: str
    description: str
    applies: bool = True
    activity_types: Optional[list[ActivityTypeValue]] = None
    entity_types: Optional[list[EntityNationalityValue]] = None
    citation: Optional[str] = None

    model_config = {"extra": "forbid"}


class InsuranceSchema(BaseModel):
    mandatory: bool
    minimum_coverage: Optional[str] = None
    government_indemnification: bool
    liability_regime: LiabilityRegimeValue
    liability_cap: Optional[str] = None

    model_config = {"extra": "forbid"}


class DebrisTermsSchema(BaseModel):
    deorbit_required: bool
    deorbit_timeline: Optional[str] = None
    mitigation_plan: bool
    passivation_required: bool = False
    collision_avoidance: bool = False

    model_config = {"extra": "forbid"}


class LicensingSchema(BaseModel):
    processing_weeks: list[int] = Field(..., min_length=2, max_length=2)
    application_fee: Optional[str] = None
    annual_fee: Optional[str] = None
    remote_sensing_license: bool = False
    national_registry: bool = False

    model_config = {"extra": "forbid"}

    @field_validator("processing_weeks")
    @classmethod
    def validate_weeks(cls, v: list[int]) -> list[int]:
        if v[0] < 0 or v[1] < v[0]:
            raise ValueError(f"processing_weeks must be [min, max], got {v}")
        return v


class EUSpaceActSchema(BaseModel):
    relationship: EURelationshipValue
    description: str
    key_articles: list[str] = Field(default_factory=list)
    transition_notes: Optional[str] = None

    model_config = {"extra": "forbid"}


class JurisdictionSchema(BaseModel):
    """National space-law record for one country."""
    code: CountryCodeValue
    name: str
    flag: str
    eu_member: bool
    legislation: LegislationSchema
    authority: AuthoritySchema
    requirements: list[NationalRequirementSchema] = Field(default_factory=list)
    applicability: list[ApplicabilityClauseSchema] = Field(default_factory=list)
    insurance: InsuranceSchema
    debris: DebrisTermsSchema
    licensing: LicensingSchema
    eu_space_act: EUSpaceActSchema
    covered_activities: Optional[list[ActivityTypeValue]] = None
    coverage_gap_reason: Optional[str] = None
    space_resources_law: bool = False
    small_operator_flexibility: Optional[str] = None

    model_config = {"extra": "forbid"}

    @model_validator(mode="after")
    def validate_coverage(self) -> "JurisdictionSchema":
        if self.covered_activities is not None and not self.coverage_gap_reason:
            raise ValueError(
                f"Jurisdiction '{self.code}': covered_activities requires coverage_gap_reason"
            )
        return self


class CrossReferenceSchema(BaseModel):
    """National law area mapped to EU Space Act articles."""
    area: str
    eu_articles: list[str] = Field(default_factory=list)
    relationship: EURelationshipValue
    countries: list[CountryCodeValue] = Field(..., min_length=1)

    model_config = {"extra": "forbid"}


class JurisdictionReferenceSchema(BaseModel):
    maturity_reference_year: int = Field(..., ge=1957)
    max_recommendations: int = Field(6, ge=1)
    cross_references: list[CrossReferenceSchema] = Field(default_factory=list)

    model_config = {"extra": "forbid"}


class JurisdictionCatalogSchema(CatalogHeaderSchema):
    """Schema for the national space-law catalog."""
    reference: JurisdictionReferenceSchema
    jurisdictions: list[JurisdictionSchema] = Field(..., min_length=1)


CatalogSchema = Union[DebrisCatalogSchema, EnvironmentalCatalogSchema, JurisdictionCatalogSchema]

CATALOG_SCHEMAS: dict[str, type[CatalogHeaderSchema]] = {
    "debris": DebrisCatalogSchema,
    "environmental": EnvironmentalCatalogSchema,
    "jurisdiction": JurisdictionCatalogSchema,
}


# =============================================================================
# Validation Helpers
# =============================================================================

def validate_catalog(data: dict[str, Any]) -> CatalogSchema:
    """
    Validate a catalog dictionary against the schema for its domain.

    Args:
        data: Dictionary loaded from YAML/JSON

    Returns:
        Validated catalog schema

    Raises:
        pydantic.ValidationError: If validation fails
        ValueError: If the domain field is missing or unknown
    """
    domain = data.get("domain")
    schema_cls = CATALOG_SCHEMAS.get(domain) if isinstance(domain, str) else None
    if schema_cls is None:
        raise ValueError(f"Unknown catalog domain: {domain!r}")
    return schema_cls.model_validate(data)  # type: ignore[return-value]


def check_schema_version(data: dict[str, Any]) -> bool:
    """
    Check if a catalog's schema version is compatible.

    Only the major version has to match.
    """
    catalog_version = str(data.get("schema_version", SCHEMA_VERSION))
    catalog_major = catalog_version.split(".")[0]
    current_major = SCHEMA_VERSION.split(".")[0]
    return catalog_major == current_major


ConditionSchema.model_rebuild()
