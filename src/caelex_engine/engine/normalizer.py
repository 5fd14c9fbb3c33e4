"""
Caelex Profile Normalizer

Turns raw caller input (a mapping, typically parsed JSON from the host
application) into a canonical, immutable profile for one domain.

Key features:
- Pydantic input models per domain; unknown keys are rejected
- camelCase keys accepted as aliases of the snake_case names
- Range and cross-field checks (perigee <= apogee, contact hours <= 24)
- Catalog-backed checks (launch vehicle and propellant keys, deorbit
  strategies available for the orbit)
- Derived attributes computed once: constellation tier, total mass,
  environmental simplified regime

Every failure is raised as InvalidProfileError with one entry per
offending field; nothing is silently defaulted.
"""
from __future__ import annotations

import dataclasses
import logging
from datetime import date
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from ..catalogs import coerce_domain, load_catalog
from ..exceptions import InvalidProfileError
from ..models import (
    ActivityType,
    CountryCode,
    DebrisProfile,
    DebrisReference,
    DeorbitStrategy,
    Domain,
    EndOfLifeStrategy,
    EntityNationality,
    EntitySize,
    EnvironmentalProfile,
    EnvironmentalReference,
    JurisdictionProfile,
    LicensingStatus,
    Maneuverability,
    OperatorType,
    OrbitType,
    PrimaryOrbit,
    RuleCatalog,
    TriBool,
)
from .condition_evaluator import ConditionEvaluator

logger = logging.getLogger(__name__)

Profile = Union[DebrisProfile, EnvironmentalProfile, JurisdictionProfile]


# =============================================================================
# Input Models
# =============================================================================

class ProfileInput(BaseModel):
    """Base for raw profile input: camelCase aliases, no unknown keys."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        str_strip_whitespace=True,
    )


class DebrisProfileInput(ProfileInput):
    """Raw debris-mitigation assessment answers."""
    orbit_type: OrbitType
    satellite_count: int = Field(..., ge=1)
    maneuverability: Maneuverability
    mission_duration_years: float = Field(..., gt=0)
    deorbit_strategy: DeorbitStrategy
    activity_type: ActivityType = ActivityType.SPACECRAFT_OPERATION
    has_propulsion: bool = False
    has_passivation_capability: bool = False
    is_small_enterprise: bool = False
    is_research_education: bool = False
    mission_name: Optional[str] = None
    operator_name: Optional[str] = None
    altitude_km: Optional[float] = Field(None, gt=0)
    perigee_km: Optional[float] = Field(None, ge=0)
    apogee_km: Optional[float] = Field(None, ge=0)
    inclination_deg: Optional[float] = Field(None, ge=0, le=180)
    launch_date: Optional[date] = None
    deorbit_timeline_years: Optional[float] = Field(None, ge=0)
    ca_service_provider: Optional[str] = None

    @field_validator("orbit_type")
    @classmethod
    def validate_orbit(cls, v: OrbitType) -> OrbitType:
        if v == OrbitType.DEEP_SPACE:
            raise ValueError("deep_space is not a debris-mitigation orbit regime")
        return v


class EnvironmentalProfileInput(ProfileInput):
    """Raw Environmental Footprint Declaration inputs."""
    operator_type: OperatorType
    spacecraft_mass_kg: float = Field(..., gt=0)
    spacecraft_count: int = Field(..., ge=1)
    orbit_type: OrbitType
    mission_duration_years: float = Field(..., gt=0)
    launch_vehicle: str = Field(..., min_length=1)
    launch_share_percent: float = Field(..., ge=0, le=100)
    deorbit_strategy: EndOfLifeStrategy
    ground_station_count: int = Field(0, ge=0)
    daily_contact_hours: float = Field(0.0, ge=0, le=24)
    is_small_enterprise: bool = False
    is_research_education: bool = False
    mission_name: Optional[str] = None
    mission_type: Optional[str] = None
    altitude_km: Optional[float] = Field(None, gt=0)
    launch_site_country: Optional[str] = None
    spacecraft_propellant: Optional[str] = None
    propellant_mass_kg: Optional[float] = Field(None, ge=0)


class JurisdictionProfileInput(ProfileInput):
    """Raw national space-law assessment answers."""
    selected_jurisdictions: list[CountryCode] = Field(..., min_length=1)
    activity_type: ActivityType
    entity_nationality: Optional[EntityNationality] = None
    entity_size: Optional[EntitySize] = None
    primary_orbit: Optional[PrimaryOrbit] = None
    constellation_size: Optional[int] = Field(None, ge=1)
    licensing_status: Optional[LicensingStatus] = None


INPUT_MODELS: dict[Domain, type[ProfileInput]] = {
    Domain.DEBRIS: DebrisProfileInput,
    Domain.ENVIRONMENTAL: EnvironmentalProfileInput,
    Domain.JURISDICTION: JurisdictionProfileInput,
}


# =============================================================================
# Error Mapping
# =============================================================================

def _field_name(model: type[BaseModel], loc: tuple[Any, ...]) -> str:
    """Report errors under the snake_case field name, whatever key was sent."""
    if not loc:
        return ""
    head = str(loc[0])
    for name, info in model.model_fields.items():
        if head in (name, info.alias):
            head = name
            break
    return ".".join([head, *(str(part) for part in loc[1:])])


def _field_errors(model: type[BaseModel], error: ValidationError) -> list[dict[str, str]]:
    return [
        {"field": _field_name(model, tuple(err["loc"])), "message": err["msg"]}
        for err in error.errors(include_url=False)
    ]


def _invalid(domain: Domain, field_errors: list[dict[str, str]]) -> InvalidProfileError:
    fields = ", ".join(sorted({e["field"] for e in field_errors if e["field"]}))
    return InvalidProfileError(
        message=f"Invalid {domain.value} profile" + (f": {fields}" if fields else ""),
        field_errors=field_errors,
        domain=domain.value,
    )


# =============================================================================
# Domain Normalizers
# =============================================================================

def _normalize_debris(data: DebrisProfileInput, catalog: RuleCatalog) -> DebrisProfile:
    reference: DebrisReference = catalog.reference
    errors: list[dict[str, str]] = []

    if (
        data.perigee_km is not None
        and data.apogee_km is not None
        and data.perigee_km > data.apogee_km
    ):
        errors.append({
            "field": "perigee_km",
            "message": f"Perigee ({data.perigee_km} km) exceeds apogee ({data.apogee_km} km)",
        })

    options = reference.deorbit_options.get(data.orbit_type, ())
    if data.deorbit_strategy not in options:
        available = ", ".join(s.value for s in options) or "none"
        errors.append({
            "field": "deorbit_strategy",
            "message": (
                f"'{data.deorbit_strategy.value}' is not available for "
                f"{data.orbit_type.value} (available: {available})"
            ),
        })

    tier = reference.tier_for(data.satellite_count)
    if tier is None:
        errors.append({
            "field": "satellite_count",
            "message": f"No constellation tier covers {data.satellite_count} satellites",
        })

    if errors:
        raise _invalid(Domain.DEBRIS, errors)

    return DebrisProfile(constellation_tier=tier, **data.model_dump())


def _normalize_environmental(
    data: EnvironmentalProfileInput,
    catalog: RuleCatalog,
) -> EnvironmentalProfile:
    reference: EnvironmentalReference = catalog.reference
    errors: list[dict[str, str]] = []

    if data.launch_vehicle not in reference.launch_vehicles:
        errors.append({
            "field": "launch_vehicle",
            "message": (
                f"Unknown launch vehicle '{data.launch_vehicle}' "
                f"(known: {', '.join(reference.launch_vehicles)})"
            ),
        })

    if data.spacecraft_propellant is not None and data.spacecraft_propellant not in reference.propellants:
        errors.append({
            "field": "spacecraft_propellant",
            "message": f"Unknown propellant '{data.spacecraft_propellant}'",
        })

    if data.propellant_mass_kg and data.spacecraft_propellant is None:
        errors.append({
            "field": "spacecraft_propellant",
            "message": "Propellant mass given without a propellant type",
        })

    if errors:
        raise _invalid(Domain.ENVIRONMENTAL, errors)

    profile = EnvironmentalProfile(
        total_mass_kg=data.spacecraft_mass_kg * data.spacecraft_count,
        simplified_regime=False,
        **data.model_dump(),
    )
    simplified = ConditionEvaluator().evaluate_all(catalog.simplified_regime, profile)
    return dataclasses.replace(profile, simplified_regime=simplified.value == TriBool.TRUE)


def _normalize_jurisdiction(
    data: JurisdictionProfileInput,
    catalog: RuleCatalog,
) -> JurisdictionProfile:
    values = data.model_dump()
    # De-duplicate, keeping the caller's order
    values["selected_jurisdictions"] = tuple(dict.fromkeys(data.selected_jurisdictions))
    return JurisdictionProfile(**values)


_NORMALIZERS = {
    Domain.DEBRIS: _normalize_debris,
    Domain.ENVIRONMENTAL: _normalize_environmental,
    Domain.JURISDICTION: _normalize_jurisdiction,
}


# =============================================================================
# Public API
# =============================================================================

def normalize(
    domain: Union[str, Domain],
    raw_input: Any,
    catalog: Optional[RuleCatalog] = None,
) -> Profile:
    """
    Validate raw input and build the domain's canonical profile.

    Args:
        domain: "debris", "environmental" or "jurisdiction"
        raw_input: Mapping with snake_case or camelCase keys
        catalog: Catalog to check keys against (defaults to the loaded one)

    Returns:
        Immutable profile with derived attributes set

    Raises:
        UnknownDomainError: If the domain is not registered
        InvalidProfileError: If the input violates any constraint
    """
    domain = coerce_domain(domain)
    if catalog is None:
        catalog = load_catalog(domain)

    if not isinstance(raw_input, dict):
        raise _invalid(domain, [{
            "field": "",
            "message": f"Profile must be a mapping, got {type(raw_input).__name__}",
        }])

    model = INPUT_MODELS[domain]
    try:
        data = model.model_validate(raw_input)
    except ValidationError as e:
        raise _invalid(domain, _field_errors(model, e)) from e

    profile = _NORMALIZERS[domain](data, catalog)
    logger.debug("Normalized %s profile", domain.value)
    return profile
