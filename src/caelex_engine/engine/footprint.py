"""
Caelex Environmental Footprint Calculator

Screening lifecycle assessment for the Environmental Footprint Declaration.

Key features:
- GWP (kg CO2eq) and ODP (kg CFC-11eq) per lifecycle phase
- Emission factors, launch vehicles and propellants from the catalog
- Hotspot flags, carbon intensity and grade by threshold lookup
- Fixed recommendation and required-action tables
- EFD score and supplier data requests

The simplified regime is reported as a flag only; it never changes the
emission figures.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..models import (
    EndOfLifeStrategy,
    EnvironmentalProfile,
    EnvironmentalReference,
    ImpactGrade,
    LifecyclePhase,
    OrbitType,
    Reusability,
)


PHASE_LABELS: dict[LifecyclePhase, str] = {
    LifecyclePhase.RAW_MATERIAL_EXTRACTION: "Raw Material Extraction",
    LifecyclePhase.MANUFACTURING: "Manufacturing",
    LifecyclePhase.TRANSPORT_TO_LAUNCH: "Transport to Launch Site",
    LifecyclePhase.LAUNCH: "Launch",
    LifecyclePhase.OPERATIONS: "Operations",
    LifecyclePhase.END_OF_LIFE: "End of Life",
}

HYDRAZINE_FAMILY = ("hydrazine", "monomethylhydrazine")
IMPROVEMENT_PLAN_INTENSITY = 350.0
PASSIVE_DECAY_ALTITUDE_KM = 600.0
SUPPLIER_DEADLINE_MONTHS = 3


# =============================================================================
# Result Types
# =============================================================================

@dataclass(frozen=True)
class PhaseImpact:
    """Emissions of one lifecycle phase."""
    phase: LifecyclePhase
    gwp_kg_co2eq: float
    odp_kg_cfc11eq: float
    percent_of_total: float

    @property
    def label(self) -> str:
        return PHASE_LABELS[self.phase]

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase.value,
            "label": self.label,
            "gwp_kg_co2eq": round(self.gwp_kg_co2eq, 4),
            "odp_kg_cfc11eq": round(self.odp_kg_cfc11eq, 6),
            "percent_of_total": round(self.percent_of_total, 2),
        }


@dataclass(frozen=True)
class SupplierDataRequest:
    """
    Art. 99 data request template for one supplier category.

    The deadline is relative to when the host application sends it.
    """
    supplier_name: str
    component_type: str
    data_required: tuple[str, ...]
    deadline_months: int = SUPPLIER_DEADLINE_MONTHS
    status: str = "pending"

    def to_dict(self) -> dict[str, Any]:
        return {
            "supplier_name": self.supplier_name,
            "component_type": self.component_type,
            "data_required": list(self.data_required),
            "deadline_months": self.deadline_months,
            "status": self.status,
        }


@dataclass
class FootprintResult:
    total_gwp: float
    total_odp: float
    carbon_intensity: float
    grade: ImpactGrade
    grade_label: str
    phases: list[PhaseImpact]
    hotspots: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    required_actions: list[str] = field(default_factory=list)
    is_simplified_assessment: bool = False
    efd_score: int = 100
    supplier_requests: list[SupplierDataRequest] = field(default_factory=list)

    def phase(self, phase: LifecyclePhase) -> PhaseImpact:
        for impact in self.phases:
            if impact.phase == phase:
                return impact
        raise KeyError(phase)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_gwp_kg_co2eq": round(self.total_gwp, 4),
            "total_odp_kg_cfc11eq": round(self.total_odp, 6),
            "total_gwp_display": format_emissions(self.total_gwp),
            "carbon_intensity": round(self.carbon_intensity, 4),
            "grade": self.grade.value,
            "grade_label": self.grade_label,
            "lifecycle_breakdown": [p.to_dict() for p in self.phases],
            "hotspots": list(self.hotspots),
            "required_actions": list(self.required_actions),
            "is_simplified_assessment": self.is_simplified_assessment,
            "efd_score": self.efd_score,
            "supplier_requests": [r.to_dict() for r in self.supplier_requests],
        }


# =============================================================================
# Lifecycle Model
# =============================================================================

def _phase_emissions(
    profile: EnvironmentalProfile,
    reference: EnvironmentalReference,
) -> list[tuple[LifecyclePhase, float, float]]:
    factors = reference.factors
    mass = profile.total_mass_kg

    manufacturing_gwp = mass * factors.manufacturing_gwp_per_kg
    manufacturing_odp = mass * factors.manufacturing_odp_per_kg

    vehicle = reference.launch_vehicles[profile.launch_vehicle]
    share = profile.launch_share_percent / 100
    launch_gwp = vehicle.gwp_kg * share
    launch_odp = vehicle.odp_kg * share
    if profile.spacecraft_propellant and profile.propellant_mass_kg:
        propellant = reference.propellants[profile.spacecraft_propellant]
        launch_gwp += profile.propellant_mass_kg * propellant.gwp_per_kg
        launch_odp += profile.propellant_mass_kg * propellant.odp_per_kg

    yearly_operations = (
        profile.ground_station_count
        * profile.daily_contact_hours
        * 365
        * factors.ground_station_gwp_per_hour
    ) / 24 + factors.mission_control_gwp_per_year

    strategy = profile.deorbit_strategy
    return [
        (
            LifecyclePhase.RAW_MATERIAL_EXTRACTION,
            manufacturing_gwp * factors.raw_material_gwp_share,
            manufacturing_odp * factors.raw_material_odp_share,
        ),
        (
            LifecyclePhase.MANUFACTURING,
            manufacturing_gwp * (1 - factors.raw_material_gwp_share),
            manufacturing_odp * (1 - factors.raw_material_odp_share),
        ),
        (
            LifecyclePhase.TRANSPORT_TO_LAUNCH,
            mass * factors.transport_distance_km * factors.transport_gwp_per_kg_km,
            0.0,
        ),
        (LifecyclePhase.LAUNCH, launch_gwp, launch_odp),
        (
            LifecyclePhase.OPERATIONS,
            yearly_operations * profile.mission_duration_years,
            0.0,
        ),
        (
            LifecyclePhase.END_OF_LIFE,
            mass * factors.end_of_life_gwp.get(strategy, 0.0),
            mass * factors.end_of_life_odp.get(strategy, 0.0),
        ),
    ]


# =============================================================================
# Recommendation Tables
# =============================================================================

def build_recommendations(
    profile: EnvironmentalProfile,
    reference: EnvironmentalReference,
    phases: list[PhaseImpact],
    carbon_intensity: float,
) -> list[str]:
    """Deterministic lookup of improvement suggestions, in table order."""
    by_phase = {p.phase: p for p in phases}
    vehicle = reference.launch_vehicles[profile.launch_vehicle]
    recommendations: list[str] = []

    if by_phase[LifecyclePhase.LAUNCH].percent_of_total > 40:
        if vehicle.reusability == Reusability.NONE:
            recommendations.append(
                "Consider launch providers with reusable vehicles to reduce "
                "launch emissions by 30-50%."
            )
        if profile.launch_share_percent < 50:
            recommendations.append(
                "Rideshare launches offer lower per-payload environmental impact."
            )

    if profile.spacecraft_propellant == "hydrazine":
        recommendations.append(
            "Replace hydrazine with green propellants (AF-M315E, LMP-103S) to "
            "improve toxicity profile and handling."
        )

    if by_phase[LifecyclePhase.MANUFACTURING].percent_of_total > 30:
        recommendations.append("Request environmental data from key suppliers per Art. 99.")
        recommendations.append(
            "Consider suppliers with recycled material content certifications."
        )

    if profile.ground_station_count > 3:
        recommendations.append(
            "Consolidate ground station network or use renewable energy "
            "powered facilities."
        )

    if carbon_intensity > IMPROVEMENT_PLAN_INTENSITY:
        recommendations.append(
            "Current carbon intensity exceeds industry average. Develop "
            "improvement roadmap."
        )

    if (
        profile.deorbit_strategy == EndOfLifeStrategy.PASSIVE_DECAY
        and profile.orbit_type == OrbitType.LEO
        and profile.altitude_km is not None
        and profile.altitude_km > PASSIVE_DECAY_ALTITUDE_KM
    ):
        recommendations.append(
            "Passive decay may exceed 25-year guideline. Consider active "
            "deorbit capability."
        )

    return recommendations


def build_required_actions(
    profile: EnvironmentalProfile,
    carbon_intensity: float,
) -> list[str]:
    actions = [
        "Screening LCA sufficient until 2032"
        if profile.simplified_regime
        else "Full lifecycle assessment required by 2030"
    ]
    if carbon_intensity > IMPROVEMENT_PLAN_INTENSITY:
        actions.append("Consider environmental improvement plan")
    if profile.spacecraft_propellant in HYDRAZINE_FAMILY:
        actions.append("Evaluate green propellant alternatives")
    return actions


def efd_score(
    grade: ImpactGrade,
    simplified: bool,
    required_actions: list[str],
    reference: EnvironmentalReference,
) -> int:
    """100 minus grade deduction and penalties, clamped to 0-100."""
    score = 100 - reference.grade_deductions.get(grade, 0)
    if simplified:
        score -= 10
    if len(required_actions) > 2:
        score -= 15
    return max(0, min(100, score))


def supplier_data_requests(profile: EnvironmentalProfile) -> list[SupplierDataRequest]:
    requests = [
        SupplierDataRequest(
            supplier_name="[Primary Structure Supplier]",
            component_type="Spacecraft Structure",
            data_required=(
                "Material composition (mass by material type)",
                "Recycled content percentage",
                "Manufacturing energy consumption (kWh)",
                "Waste generation (kg)",
                "Transport distance from factory (km)",
            ),
        ),
        SupplierDataRequest(
            supplier_name="[Solar Array Supplier]",
            component_type="Solar Arrays",
            data_required=(
                "Cell type and efficiency",
                "Rare material content (Ga, Ge, As)",
                "Energy payback time",
                "Manufacturing location",
            ),
        ),
        SupplierDataRequest(
            supplier_name="[Avionics Supplier]",
            component_type="Electronics/Avionics",
            data_required=(
                "PCB composition and mass",
                "Precious metal content (Au, Ag, Pd)",
                "ROHS compliance status",
                "Conflict mineral declaration",
            ),
        ),
    ]
    if profile.spacecraft_propellant:
        requests.append(SupplierDataRequest(
            supplier_name="[Propulsion Supplier]",
            component_type="Propulsion System",
            data_required=(
                "Propellant type and mass",
                "Tank material and mass",
                "Thruster manufacturing data",
                "Propellant production pathway",
            ),
        ))
    return requests


# =============================================================================
# Calculator
# =============================================================================

def calculate_footprint(
    profile: EnvironmentalProfile,
    reference: EnvironmentalReference,
) -> FootprintResult:
    """
    Run the screening lifecycle assessment for a normalized profile.

    Args:
        profile: Environmental profile (launch vehicle and propellant keys
            already checked against the catalog by the normalizer)
        reference: Reference tables of the environmental catalog

    Returns:
        FootprintResult with per-phase emissions, grade and guidance
    """
    emissions = _phase_emissions(profile, reference)
    total_gwp = sum(gwp for _, gwp, _ in emissions)
    total_odp = sum(odp for _, _, odp in emissions)

    phases = [
        PhaseImpact(
            phase=phase,
            gwp_kg_co2eq=gwp,
            odp_kg_cfc11eq=odp,
            percent_of_total=(gwp / total_gwp * 100) if total_gwp else 0.0,
        )
        for phase, gwp, odp in emissions
    ]

    hotspot_percent = reference.factors.hotspot_share * 100
    hotspots = [p.label for p in phases if p.percent_of_total > hotspot_percent]

    carbon_intensity = total_gwp / profile.total_mass_kg
    band = reference.grade_for(carbon_intensity)
    required_actions = build_required_actions(profile, carbon_intensity)

    return FootprintResult(
        total_gwp=total_gwp,
        total_odp=total_odp,
        carbon_intensity=carbon_intensity,
        grade=band.grade,
        grade_label=band.label,
        phases=phases,
        hotspots=hotspots,
        recommendations=build_recommendations(profile, reference, phases, carbon_intensity),
        required_actions=required_actions,
        is_simplified_assessment=profile.simplified_regime,
        efd_score=efd_score(band.grade, profile.simplified_regime, required_actions, reference),
        supplier_requests=supplier_data_requests(profile),
    )


# =============================================================================
# Display Helpers
# =============================================================================

def _fixed(value: float, digits: int) -> str:
    return f"{value:.{digits}f}"


def format_mass(mass_kg: float) -> str:
    """'1.2 tonnes' from 1000 kg upwards, whole kilograms below."""
    if mass_kg >= 1000:
        return f"{_fixed(mass_kg / 1000, 1)} tonnes"
    return f"{_fixed(mass_kg, 0)} kg"


def format_emissions(kg_co2eq: float) -> str:
    if kg_co2eq >= 1_000_000:
        return f"{_fixed(kg_co2eq / 1_000_000, 1)} kt CO2eq"
    if kg_co2eq >= 1000:
        return f"{_fixed(kg_co2eq / 1000, 1)} t CO2eq"
    return f"{_fixed(kg_co2eq, 0)} kg CO2eq"
