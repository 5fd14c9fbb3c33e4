"""
Caelex Profiles

Canonical, validated mission/operator profiles, one per domain. Profiles
are produced by the normalizer and never mutated afterwards; derived
attributes (constellation tier, total mass, simplified regime) are set
once at normalization time.

Optional attributes are None when the caller did not supply them; rule
predicates that need them evaluate UNKNOWN.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Optional

from .enums import (
    ActivityType,
    ConstellationTier,
    CountryCode,
    DeorbitStrategy,
    EndOfLifeStrategy,
    EntityNationality,
    EntitySize,
    LicensingStatus,
    Maneuverability,
    OperatorType,
    OrbitType,
    PrimaryOrbit,
)
from ..canon import to_jsonable


class _ProfileMixin:
    """Shared serialization for profile dataclasses."""

    def to_dict(self) -> dict[str, Any]:
        return to_jsonable(asdict(self))  # type: ignore[call-overload]


@dataclass(frozen=True)
class DebrisProfile(_ProfileMixin):
    """Debris-mitigation mission profile."""
    orbit_type: OrbitType
    satellite_count: int
    constellation_tier: ConstellationTier
    maneuverability: Maneuverability
    deorbit_strategy: DeorbitStrategy
    mission_duration_years: float
    activity_type: ActivityType = ActivityType.SPACECRAFT_OPERATION
    has_propulsion: bool = False
    has_passivation_capability: bool = False
    is_small_enterprise: bool = False
    is_research_education: bool = False
    mission_name: Optional[str] = None
    operator_name: Optional[str] = None
    altitude_km: Optional[float] = None
    perigee_km: Optional[float] = None
    apogee_km: Optional[float] = None
    inclination_deg: Optional[float] = None
    launch_date: Optional[date] = None
    deorbit_timeline_years: Optional[float] = None
    ca_service_provider: Optional[str] = None


@dataclass(frozen=True)
class EnvironmentalProfile(_ProfileMixin):
    """Environmental footprint (EFD) mission profile."""
    operator_type: OperatorType
    spacecraft_mass_kg: float
    spacecraft_count: int
    total_mass_kg: float
    orbit_type: OrbitType
    mission_duration_years: float
    launch_vehicle: str
    launch_share_percent: float
    deorbit_strategy: EndOfLifeStrategy
    simplified_regime: bool
    ground_station_count: int = 0
    daily_contact_hours: float = 0.0
    is_small_enterprise: bool = False
    is_research_education: bool = False
    mission_name: Optional[str] = None
    mission_type: Optional[str] = None
    altitude_km: Optional[float] = None
    launch_site_country: Optional[str] = None
    spacecraft_propellant: Optional[str] = None
    propellant_mass_kg: Optional[float] = None


@dataclass(frozen=True)
class JurisdictionProfile(_ProfileMixin):
    """National space-law assessment answers."""
    selected_jurisdictions: tuple[CountryCode, ...]
    activity_type: ActivityType
    entity_nationality: Optional[EntityNationality] = None
    entity_size: Optional[EntitySize] = None
    primary_orbit: Optional[PrimaryOrbit] = None
    constellation_size: Optional[int] = None
    licensing_status: Optional[LicensingStatus] = None
