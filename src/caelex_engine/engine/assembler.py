"""
Caelex Report Assembler

Arranges a profile and its ScoreResult into a ReportDocument: header,
domain sections, requirement matrix, recommendations and the fixed legal
disclaimer.

Key features:
- Debris: the sections of a debris mitigation plan
- Environmental: lifecycle breakdown, hotspots, grade, required actions,
  supplier data requests
- Jurisdiction: one summary per country, comparison matrix, EU Space Act
  preview
- Pure data transformation; rendering belongs to the host application
"""
from __future__ import annotations

from typing import Any, Callable, Optional

from ..models import (
    CatalogMeta,
    DebrisProfile,
    DebrisReference,
    DeorbitStrategy,
    Domain,
    EnvironmentalProfile,
    JurisdictionProfile,
    OrbitType,
    ReportDocument,
    ReportSection,
    ScoreResult,
)
from ..catalogs import load_catalog
from .debris import meets_twenty_five_year_rule, risk_level
from .footprint import format_mass

REPORT_TITLES: dict[Domain, str] = {
    Domain.DEBRIS: "Debris Mitigation Plan",
    Domain.ENVIRONMENTAL: "Environmental Footprint Declaration",
    Domain.JURISDICTION: "National Space Law Assessment",
}


def _number(value: float) -> str:
    """5.0 -> '5', 2.5 -> '2.5'."""
    return str(int(value)) if float(value).is_integer() else str(value)


# =============================================================================
# Debris Mitigation Plan
# =============================================================================

def _mission_overview(profile: DebrisProfile, reference: DebrisReference) -> dict[str, Any]:
    orbit = reference.orbits.get(profile.orbit_type)
    orbit_parameters = orbit.label if orbit else profile.orbit_type.value
    if profile.altitude_km is not None:
        orbit_parameters += f" at {_number(profile.altitude_km)} km"
    return {
        "mission_name": profile.mission_name or "Unnamed Mission",
        "operator": profile.operator_name or "Unknown Operator",
        "orbit_parameters": orbit_parameters,
        "mission_duration": f"{_number(profile.mission_duration_years)} years",
        "satellite_count": profile.satellite_count,
        "constellation_tier": profile.constellation_tier.value,
    }


def _collision_avoidance(profile: DebrisProfile, reference: DebrisReference) -> dict[str, Any]:
    if profile.has_propulsion:
        capability = (
            f"Propulsion system available with {profile.maneuverability.value} maneuverability"
        )
        avoidance = "Execute avoidance maneuvers when probability exceeds threshold"
    else:
        capability = "No onboard propulsion"
        avoidance = "Coordinate with operators of maneuverable spacecraft"
    return {
        "strategy": reference.collision_avoidance_strategies.get(
            profile.maneuverability, profile.maneuverability.value
        ),
        "service_provider": profile.ca_service_provider or reference.default_service_provider,
        "maneuver_capability": capability,
        "procedures": [
            "Monitor conjunction warnings from CA service provider",
            avoidance,
            "Maintain up-to-date ephemeris data with CA service",
            "Report all executed maneuvers to space surveillance networks",
        ],
    }


def _end_of_life_disposal(profile: DebrisProfile, reference: DebrisReference) -> dict[str, Any]:
    if profile.deorbit_timeline_years is not None:
        timeline = f"Within {_number(profile.deorbit_timeline_years)} years post-mission"
    elif profile.orbit_type == OrbitType.LEO:
        timeline = "Within 25 years (5-year target for new missions)"
    elif profile.orbit_type == OrbitType.GEO:
        timeline = "Transfer to graveyard orbit before propellant depletion"
    else:
        timeline = "To be determined based on orbital analysis"

    if profile.deorbit_strategy == DeorbitStrategy.ADR_CONTRACTED:
        backup = "ADR service contracted as primary or backup"
    elif profile.has_propulsion:
        backup = "ADR service as backup if primary disposal fails"
    else:
        backup = "ADR service required if natural decay insufficient"

    return {
        "method": reference.deorbit_descriptions.get(
            profile.deorbit_strategy, profile.deorbit_strategy.value
        ),
        "timeline": timeline,
        "propellant_budget": (
            "Propellant reserved for end-of-life disposal maneuver"
            if profile.has_propulsion
            else "Natural decay / ADR required"
        ),
        "backup_strategy": backup,
    }


def _fragmentation_avoidance(profile: DebrisProfile, reference: DebrisReference) -> dict[str, Any]:
    return {
        "design_measures": [
            "Propellant tanks designed to minimize rupture risk",
            "Battery thermal protection to prevent runaway",
            "Pressure vessel design with burst mitigation",
            "No intentional fragmentation planned",
        ],
        "operational_procedures": [
            "Monitor battery health throughout mission",
            "Avoid operations that could cause tank overpressure",
            "Passivation planned before end-of-life",
        ],
    }


def _passivation(profile: DebrisProfile, reference: DebrisReference) -> dict[str, Any]:
    energy_sources = ["Batteries", "Reaction wheels / CMGs", "Solar arrays"]
    if profile.has_propulsion:
        energy_sources.insert(0, "Propellant tanks")

    if profile.has_passivation_capability:
        procedures = [
            "Deplete remaining propellant (vent or burn)",
            "Discharge batteries to safe level",
            "De-spin momentum wheels",
            "Disconnect solar arrays from charging circuit",
        ]
    else:
        procedures = [
            "Limited passivation capability - passive discharge planned",
            "Battery discharge through natural self-discharge",
        ]

    return {
        "energy_sources": energy_sources,
        "procedures": procedures,
        "timeline": "Passivation to be completed within 30 days of end-of-mission",
    }


def _compliance_verification(profile: DebrisProfile, reference: DebrisReference) -> dict[str, Any]:
    return {
        "twenty_five_year_compliance": meets_twenty_five_year_rule(profile),
        "calculation_method": (
            "Orbital lifetime analysis using [DRAMA/STK/GMAT] with Monte Carlo "
            "uncertainty propagation"
        ),
        "uncertainty_margin": (
            "Conservative assumptions used (1-sigma solar activity, worst-case "
            "ballistic coefficient)"
        ),
    }


DEBRIS_SECTIONS: tuple[tuple[str, str, Callable[[DebrisProfile, DebrisReference], dict[str, Any]]], ...] = (
    ("mission_overview", "Mission Overview", _mission_overview),
    ("collision_avoidance", "Collision Avoidance", _collision_avoidance),
    ("end_of_life_disposal", "End-of-Life Disposal", _end_of_life_disposal),
    ("fragmentation_avoidance", "Fragmentation Avoidance", _fragmentation_avoidance),
    ("passivation", "Passivation", _passivation),
    ("compliance_verification", "Compliance Verification", _compliance_verification),
)


def _debris_sections(
    profile: DebrisProfile,
    result: ScoreResult,
    reference: DebrisReference,
) -> list[ReportSection]:
    sections = [
        ReportSection(key=key, title=title, content=build(profile, reference))
        for key, title, build in DEBRIS_SECTIONS
    ]
    sections.append(ReportSection(
        key="requirements_by_severity",
        title="Requirements by Severity",
        content=dict(result.metrics.get("by_severity", {})),
    ))
    return sections


def _debris_header(profile: DebrisProfile) -> dict[str, Any]:
    return {
        "mission_name": profile.mission_name,
        "operator": profile.operator_name,
        "orbit_type": profile.orbit_type.value,
        "activity_type": profile.activity_type.value,
        "satellite_count": profile.satellite_count,
        "constellation_tier": profile.constellation_tier.value,
        "maneuverability": profile.maneuverability.value,
        "deorbit_strategy": profile.deorbit_strategy.value,
    }


# =============================================================================
# Environmental Footprint Declaration
# =============================================================================

def _environmental_sections(
    profile: EnvironmentalProfile,
    result: ScoreResult,
) -> list[ReportSection]:
    metrics = result.metrics
    return [
        ReportSection(
            key="lifecycle_breakdown",
            title="Lifecycle Breakdown",
            content={
                "phases": metrics.get("lifecycle_breakdown", []),
                "total_gwp_kg_co2eq": metrics.get("total_gwp_kg_co2eq"),
                "total_odp_kg_cfc11eq": metrics.get("total_odp_kg_cfc11eq"),
                "total_gwp_display": metrics.get("total_gwp_display"),
            },
        ),
        ReportSection(
            key="hotspots",
            title="Environmental Hotspots",
            content={"phases": metrics.get("hotspots", [])},
        ),
        ReportSection(
            key="grade",
            title="Environmental Grade",
            content={
                "grade": metrics.get("grade"),
                "grade_label": metrics.get("grade_label"),
                "carbon_intensity": metrics.get("carbon_intensity"),
                "efd_score": metrics.get("efd_score"),
                "is_simplified_assessment": metrics.get("is_simplified_assessment"),
            },
        ),
        ReportSection(
            key="required_actions",
            title="Required Actions",
            content={
                "actions": metrics.get("required_actions", []),
                "simplified_form_rules": metrics.get("simplified_form_rules", []),
            },
        ),
        ReportSection(
            key="supplier_data_requests",
            title="Supplier Data Requests",
            content={"requests": metrics.get("supplier_requests", [])},
        ),
    ]


def _environmental_header(profile: EnvironmentalProfile) -> dict[str, Any]:
    return {
        "mission_name": profile.mission_name,
        "operator_type": profile.operator_type.value,
        "orbit_type": profile.orbit_type.value,
        "spacecraft_count": profile.spacecraft_count,
        "total_mass": format_mass(profile.total_mass_kg),
        "launch_vehicle": profile.launch_vehicle,
        "launch_share_percent": profile.launch_share_percent,
        "mission_duration_years": profile.mission_duration_years,
        "simplified_regime": profile.simplified_regime,
    }


# =============================================================================
# National Space Law Assessment
# =============================================================================

def _jurisdiction_sections(
    profile: JurisdictionProfile,
    result: ScoreResult,
) -> list[ReportSection]:
    metrics = result.metrics
    sections = [
        ReportSection(
            key=f"jurisdiction_{entry['country_code']}",
            title=f"{entry['flag']} {entry['country_name']}",
            content=entry,
        )
        for entry in metrics.get("jurisdictions", [])
    ]
    sections.append(ReportSection(
        key="comparison_matrix",
        title="Jurisdiction Comparison",
        content={"criteria": metrics.get("comparison_matrix", [])},
    ))
    sections.append(ReportSection(
        key="eu_space_act_preview",
        title="EU Space Act Preview",
        content=dict(metrics.get("eu_space_act_preview", {})),
    ))
    return sections


def _jurisdiction_header(profile: JurisdictionProfile) -> dict[str, Any]:
    return {
        "selected_jurisdictions": [code.value for code in profile.selected_jurisdictions],
        "activity_type": profile.activity_type.value,
        "entity_nationality": profile.entity_nationality.value if profile.entity_nationality else None,
        "entity_size": profile.entity_size.value if profile.entity_size else None,
        "licensing_status": profile.licensing_status.value if profile.licensing_status else None,
    }


# =============================================================================
# Assembly
# =============================================================================

def requirements_matrix(result: ScoreResult) -> list[dict[str, Any]]:
    """Applicable rules in catalog order, then retired rules."""
    rows = []
    for assessment in [*result.assessments, *result.retired]:
        row: dict[str, Any] = {
            "id": assessment.rule_id,
            "status": assessment.status.value,
            "notes": assessment.record.notes,
        }
        rule = assessment.rule
        if rule is not None:
            row["title"] = rule.title
            row["citation"] = rule.citation
            if rule.severity is not None:
                row["severity"] = rule.severity.value
            if rule.category:
                row["category"] = rule.category
            if rule.jurisdiction:
                row["jurisdiction"] = rule.jurisdiction
        rows.append(row)
    return rows


def assemble(
    profile: Any,
    score_result: ScoreResult,
    catalog_meta: CatalogMeta,
    reference: Optional[Any] = None,
) -> ReportDocument:
    """
    Build the report document for one evaluation.

    Args:
        profile: The normalized profile the result was computed for
        score_result: Output of the domain engine
        catalog_meta: Identity of the catalog used
        reference: Reference tables of that catalog; loaded from the
            process-wide catalog when omitted (debris only)

    Returns:
        ReportDocument ready for the host application's templates
    """
    domain = catalog_meta.domain

    if domain == Domain.DEBRIS:
        if reference is None:
            reference = load_catalog(domain).reference
        header = _debris_header(profile)
        sections = _debris_sections(profile, score_result, reference)
    elif domain == Domain.ENVIRONMENTAL:
        header = _environmental_header(profile)
        sections = _environmental_sections(profile, score_result)
    else:
        header = _jurisdiction_header(profile)
        sections = _jurisdiction_sections(profile, score_result)

    header["catalog"] = catalog_meta.to_dict()

    summary: dict[str, Any] = {
        "score": score_result.score,
        "total_applicable": score_result.total_applicable,
        "counts": score_result.counts,
    }
    if domain == Domain.DEBRIS:
        summary["risk_level"] = risk_level(score_result.score)
    elif domain == Domain.ENVIRONMENTAL:
        summary["grade"] = score_result.metrics.get("grade")
        summary["efd_score"] = score_result.metrics.get("efd_score")

    return ReportDocument(
        domain=domain,
        title=REPORT_TITLES[domain],
        header=header,
        sections=sections,
        requirements_matrix=requirements_matrix(score_result),
        recommendations=list(score_result.recommendations),
        summary=summary,
        warnings=[w.to_dict() for w in score_result.warnings],
        fingerprint=score_result.fingerprint,
    )
