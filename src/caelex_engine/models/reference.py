"""
Caelex Reference Tables

Domain lookup tables that ship with each rule catalog: constellation tier
thresholds and disposal options (debris), emission factors and grade bands
(environmental), national law records (jurisdiction).

Everything here is immutable and shared process-wide.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from .enums import (
    ActivityType,
    ConstellationTier,
    CountryCode,
    DeorbitStrategy,
    EndOfLifeStrategy,
    EntityNationality,
    EURelationship,
    ImpactGrade,
    LegislationStatus,
    LiabilityRegime,
    Maneuverability,
    OrbitType,
    Reusability,
    Toxicity,
)


def frozen_mapping(data: dict) -> Mapping:
    """Read-only view over a dict built at load time."""
    return MappingProxyType(dict(data))


# =============================================================================
# Debris
# =============================================================================

@dataclass(frozen=True)
class TierThreshold:
    """Inclusive satellite-count band for one constellation tier."""
    tier: ConstellationTier
    min_count: int
    max_count: Optional[int] = None

    def contains(self, count: int) -> bool:
        if count < self.min_count:
            return False
        return self.max_count is None or count <= self.max_count


@dataclass(frozen=True)
class OrbitInfo:
    label: str
    altitude_range: str


@dataclass(frozen=True)
class DebrisReference:
    tier_thresholds: tuple[TierThreshold, ...]
    deorbit_options: Mapping[OrbitType, tuple[DeorbitStrategy, ...]]
    orbits: Mapping[OrbitType, OrbitInfo]
    deorbit_descriptions: Mapping[DeorbitStrategy, str]
    collision_avoidance_strategies: Mapping[Maneuverability, str]
    default_service_provider: str

    def tier_for(self, satellite_count: int) -> Optional[ConstellationTier]:
        """Threshold lookup; None when no band covers the count."""
        for threshold in self.tier_thresholds:
            if threshold.contains(satellite_count):
                return threshold.tier
        return None


# =============================================================================
# Environmental
# =============================================================================

@dataclass(frozen=True)
class PropellantProfile:
    key: str
    name: str
    gwp_per_kg: float
    odp_per_kg: float
    toxicity: Toxicity
    rating: ImpactGrade


@dataclass(frozen=True)
class LaunchVehicleProfile:
    """Per-launch emissions for a full vehicle."""
    key: str
    name: str
    gwp_kg: float
    odp_kg: float
    reusability: Reusability
    grade: ImpactGrade
    provider: Optional[str] = None


@dataclass(frozen=True)
class GradeBand:
    """Carbon intensity band; max_intensity None means open-ended."""
    grade: ImpactGrade
    label: str
    max_intensity: Optional[float] = None


@dataclass(frozen=True)
class EmissionFactors:
    """Coefficients of the lifecycle emission model."""
    manufacturing_gwp_per_kg: float = 75.0
    manufacturing_odp_per_kg: float = 0.0008
    raw_material_gwp_share: float = 0.6
    raw_material_odp_share: float = 0.7
    transport_distance_km: float = 8000.0
    transport_gwp_per_kg_km: float = 0.0004
    ground_station_gwp_per_hour: float = 15.0
    mission_control_gwp_per_year: float = 850.0
    end_of_life_gwp: Mapping[EndOfLifeStrategy, float] = field(default_factory=dict)
    end_of_life_odp: Mapping[EndOfLifeStrategy, float] = field(default_factory=dict)
    hotspot_share: float = 0.25


@dataclass(frozen=True)
class EnvironmentalReference:
    propellants: Mapping[str, PropellantProfile]
    launch_vehicles: Mapping[str, LaunchVehicleProfile]
    grade_bands: tuple[GradeBand, ...]
    grade_deductions: Mapping[ImpactGrade, int]
    factors: EmissionFactors

    def grade_for(self, intensity: float) -> GradeBand:
        for band in self.grade_bands:
            if band.max_intensity is None or intensity <= band.max_intensity:
                return band
        return self.grade_bands[-1]


# =============================================================================
# Jurisdiction
# =============================================================================

@dataclass(frozen=True)
class Legislation:
    name: str
    year_enacted: int
    status: LegislationStatus
    name_local: Optional[str] = None
    year_amended: Optional[int] = None


@dataclass(frozen=True)
class LicensingAuthority:
    name: str
    website: str
    contact_email: str


@dataclass(frozen=True)
class ApplicabilityClause:
    """
    Country-level applicability statement.

    A clause is skipped when the profile's activity or nationality is
    outside its lists; the first non-skipped clause with applies=False
    makes the whole jurisdiction inapplicable.
    """
    id: str
    description: str
    applies: bool = True
    activity_types: Optional[frozenset[ActivityType]] = None
    entity_types: Optional[frozenset[EntityNationality]] = None
    citation: Optional[str] = None


@dataclass(frozen=True)
class InsuranceTerms:
    mandatory: bool
    government_indemnification: bool
    liability_regime: LiabilityRegime
    minimum_coverage: Optional[str] = None
    liability_cap: Optional[str] = None


@dataclass(frozen=True)
class DebrisTerms:
    deorbit_required: bool
    mitigation_plan: bool
    passivation_required: bool = False
    collision_avoidance: bool = False
    deorbit_timeline: Optional[str] = None


@dataclass(frozen=True)
class JurisdictionLaw:
    """National space-law record for one country."""
    code: CountryCode
    name: str
    flag: str
    eu_member: bool
    legislation: Legislation
    authority: LicensingAuthority
    insurance: InsuranceTerms
    debris: DebrisTerms
    processing_weeks: tuple[int, int]
    eu_relationship: EURelationship
    eu_description: str
    applicability: tuple[ApplicabilityClause, ...] = ()
    remote_sensing_license: bool = False
    application_fee: Optional[str] = None
    annual_fee: Optional[str] = None
    national_registry: bool = False
    eu_key_articles: tuple[str, ...] = ()
    eu_transition_notes: Optional[str] = None
    # When set, the law only covers these activities.
    covered_activities: Optional[frozenset[ActivityType]] = None
    coverage_gap_reason: Optional[str] = None
    space_resources_law: bool = False
    small_operator_flexibility: Optional[str] = None

    @property
    def average_processing_weeks(self) -> float:
        low, high = self.processing_weeks
        return (low + high) / 2


@dataclass(frozen=True)
class CrossReference:
    """A national law area and the EU Space Act articles that cover it."""
    area: str
    relationship: EURelationship
    countries: frozenset[CountryCode]
    eu_articles: tuple[str, ...] = ()


@dataclass(frozen=True)
class JurisdictionReference:
    laws: Mapping[CountryCode, JurisdictionLaw]
    maturity_reference_year: int
    max_recommendations: int = 6
    cross_references: tuple[CrossReference, ...] = ()

    def get(self, code: CountryCode) -> Optional[JurisdictionLaw]:
        return self.laws.get(code)

    def cross_references_for(self, code: CountryCode) -> list[CrossReference]:
        return [ref for ref in self.cross_references if code in ref.countries]
