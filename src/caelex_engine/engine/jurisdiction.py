"""
Caelex Jurisdiction Comparison

Per-country results for the national space-law assessment: country-level
applicability, favorability, a side-by-side comparison matrix, the EU
Space Act preview and recommendations.

Requirement-level applicability is done by the generic filter; this
module only adds the country-level view on top of it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

from ..models import (
    ActivityType,
    CountryCode,
    CrossReference,
    EntitySize,
    EURelationship,
    JurisdictionLaw,
    JurisdictionProfile,
    JurisdictionReference,
    LegislationStatus,
    LiabilityRegime,
    LicensingStatus,
    Rule,
)

logger = logging.getLogger(__name__)

FAVORABILITY_BASE = 50
NO_LAW_SCORE = 20

EU_RELATIONSHIP_LABELS: dict[EURelationship, str] = {
    EURelationship.SUPERSEDED: "Will be superseded",
    EURelationship.COMPLEMENTARY: "Complementary",
    EURelationship.PARALLEL: "Independent",
    EURelationship.GAP: "Fills regulatory gap",
}

MAX_KEY_CHANGES = 4


# =============================================================================
# Result Types
# =============================================================================

@dataclass(frozen=True)
class Applicability:
    is_applicable: bool
    reason: str


@dataclass
class JurisdictionResult:
    """Country-level outcome for one selected jurisdiction."""
    law: JurisdictionLaw
    is_applicable: bool
    applicability_reason: str
    requirements: list[Rule]
    favorability_score: int
    favorability_factors: list[str]

    @property
    def code(self) -> CountryCode:
        return self.law.code

    @property
    def total_requirements(self) -> int:
        return len(self.requirements)

    @property
    def mandatory_requirements(self) -> int:
        return sum(1 for rule in self.requirements if rule.mandatory)

    @property
    def estimated_cost(self) -> str:
        return format_cost_estimate(self.law)

    def to_dict(self) -> dict[str, Any]:
        law = self.law
        low, high = law.processing_weeks
        return {
            "country_code": law.code.value,
            "country_name": law.name,
            "flag": law.flag,
            "is_applicable": self.is_applicable,
            "applicability_reason": self.applicability_reason,
            "total_requirements": self.total_requirements,
            "mandatory_requirements": self.mandatory_requirements,
            "requirement_ids": [rule.id for rule in self.requirements],
            "authority": {
                "name": law.authority.name,
                "website": law.authority.website,
                "contact_email": law.authority.contact_email,
            },
            "estimated_timeline_weeks": {"min": low, "max": high},
            "estimated_cost": self.estimated_cost,
            "insurance": {
                "mandatory": law.insurance.mandatory,
                "minimum_coverage": law.insurance.minimum_coverage or "Case-by-case",
                "government_indemnification": law.insurance.government_indemnification,
            },
            "debris": {
                "deorbit_required": law.debris.deorbit_required,
                "deorbit_timeline": law.debris.deorbit_timeline or "Not specified",
                "mitigation_plan": law.debris.mitigation_plan,
            },
            "legislation": {
                "name": law.legislation.name,
                "status": law.legislation.status.value,
                "year_enacted": law.legislation.year_enacted,
            },
            "favorability_score": self.favorability_score,
            "favorability_factors": list(self.favorability_factors),
        }


@dataclass(frozen=True)
class CriterionValue:
    value: str
    score: int
    notes: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"value": self.value, "score": self.score}
        if self.notes:
            result["notes"] = self.notes
        return result


@dataclass(frozen=True)
class ComparisonCriterion:
    """One row of the comparison matrix, scored 1-5 per country."""
    id: str
    label: str
    category: str
    values: tuple[tuple[CountryCode, CriterionValue], ...]

    def value_for(self, code: CountryCode) -> Optional[CriterionValue]:
        for country, value in self.values:
            if country == code:
                return value
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "category": self.category,
            "jurisdiction_values": {code.value: v.to_dict() for code, v in self.values},
        }


@dataclass
class EUSpaceActPreview:
    overall_relationship: str
    notes: dict[str, dict[str, Any]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall_relationship": self.overall_relationship,
            "jurisdiction_notes": self.notes,
        }


@dataclass
class JurisdictionComparison:
    jurisdictions: list[JurisdictionResult]
    criteria: list[ComparisonCriterion]
    eu_preview: EUSpaceActPreview
    recommendations: list[str]

    def get(self, code: CountryCode) -> Optional[JurisdictionResult]:
        for result in self.jurisdictions:
            if result.code == code:
                return result
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "jurisdictions": [j.to_dict() for j in self.jurisdictions],
            "comparison_matrix": [c.to_dict() for c in self.criteria],
            "eu_space_act_preview": self.eu_preview.to_dict(),
        }


# =============================================================================
# Country-Level Applicability
# =============================================================================

def check_applicability(
    law: JurisdictionLaw,
    profile: JurisdictionProfile,
    requirements: Sequence[Rule],
) -> Applicability:
    """
    Decide whether a national law covers the profile's activity.

    Checked in order: activities outside a partial law's coverage, an
    activity none of the country's requirements address, then the
    country's applicability clauses. A clause is skipped when the
    activity or nationality is outside its lists; the first remaining
    clause with applies=False decides.
    """
    activity = profile.activity_type

    if law.covered_activities is not None and activity not in law.covered_activities:
        return Applicability(False, law.coverage_gap_reason or "")

    if not requirements:
        return Applicability(
            False,
            f"{law.name}'s space law does not specifically address this activity "
            "type. Additional regulatory consultation may be needed.",
        )

    nationality = profile.entity_nationality
    for clause in law.applicability:
        if clause.activity_types is not None and activity not in clause.activity_types:
            continue
        if (
            nationality is not None
            and clause.entity_types is not None
            and nationality not in clause.entity_types
        ):
            continue
        if not clause.applies:
            return Applicability(False, clause.description)

    return Applicability(True, f"Authorization required under {law.legislation.name}.")


# =============================================================================
# Favorability
# =============================================================================

def favorability(law: JurisdictionLaw, profile: JurisdictionProfile) -> tuple[int, list[str]]:
    """
    Score how favorable a jurisdiction is for the profile, 0-100.

    Returns:
        (score, factors) with factors in the order they were applied
    """
    if law.legislation.status == LegislationStatus.NONE:
        return NO_LAW_SCORE, [
            "No comprehensive space law, regulatory uncertainty",
            "EU Space Act (2030) will provide framework",
        ]

    score = FAVORABILITY_BASE
    factors: list[str] = []

    average_weeks = law.average_processing_weeks
    if average_weeks <= 10:
        score += 15
        factors.append("Fast licensing timeline")
    elif average_weeks <= 16:
        score += 8
        factors.append("Moderate licensing timeline")
    else:
        score -= 5
        factors.append("Longer licensing timeline")

    if law.insurance.government_indemnification:
        score += 10
        factors.append("Government indemnification available")

    if law.insurance.liability_regime == LiabilityRegime.CAPPED:
        score += 8
        factors.append("Capped liability regime")
    elif law.insurance.liability_regime == LiabilityRegime.NEGOTIABLE:
        score += 5
        factors.append("Negotiable liability terms")

    if law.legislation.year_enacted <= 2010:
        score += 10
        factors.append("Mature regulatory framework")
    elif law.legislation.year_enacted <= 2018:
        score += 5
        factors.append("Established regulatory framework")

    if law.space_resources_law and profile.activity_type == ActivityType.SPACE_RESOURCES:
        score += 15
        factors.append("Explicit space resources legislation")

    if profile.entity_size == EntitySize.SMALL and law.small_operator_flexibility:
        score += 5
        factors.append(law.small_operator_flexibility)

    if law.national_registry:
        score += 3
        factors.append("National space registry maintained")

    return max(0, min(100, score)), factors


def format_cost_estimate(law: JurisdictionLaw) -> str:
    parts = []
    if law.application_fee:
        parts.append(f"Application: {law.application_fee}")
    if law.annual_fee:
        parts.append(f"Annual: {law.annual_fee}")
    if not parts:
        return "Contact authority for fee schedule"
    return " · ".join(parts)


# =============================================================================
# Comparison Matrix
# =============================================================================

def _processing_time(law: JurisdictionLaw, reference: JurisdictionReference) -> CriterionValue:
    low, high = law.processing_weeks
    average = law.average_processing_weeks
    if average <= 10:
        score = 5
    elif average <= 14:
        score = 4
    elif average <= 18:
        score = 3
    elif average <= 24:
        score = 2
    else:
        score = 1
    return CriterionValue(f"{low}-{high} weeks", score)


def _application_fee(law: JurisdictionLaw, reference: JurisdictionReference) -> CriterionValue:
    fee = law.application_fee or "Not specified"
    return CriterionValue(fee, 5 if fee in ("Not specified", "None") else 3)


def _insurance_minimum(law: JurisdictionLaw, reference: JurisdictionReference) -> CriterionValue:
    if not law.insurance.mandatory:
        return CriterionValue("Not mandatory", 5)
    return CriterionValue(law.insurance.minimum_coverage or "Case-by-case", 3)


def _indemnification(law: JurisdictionLaw, reference: JurisdictionReference) -> CriterionValue:
    if law.insurance.government_indemnification:
        return CriterionValue("Yes", 5)
    return CriterionValue("No", 2)


_LIABILITY_SCORES = {
    LiabilityRegime.CAPPED: 5,
    LiabilityRegime.NEGOTIABLE: 4,
    LiabilityRegime.TIERED: 3,
    LiabilityRegime.UNLIMITED: 2,
}


def _liability_regime(law: JurisdictionLaw, reference: JurisdictionReference) -> CriterionValue:
    regime = law.insurance.liability_regime
    return CriterionValue(regime.value.capitalize(), _LIABILITY_SCORES[regime])


def _deorbit_requirement(law: JurisdictionLaw, reference: JurisdictionReference) -> CriterionValue:
    if not law.debris.deorbit_required:
        return CriterionValue("No requirement", 4)
    return CriterionValue(law.debris.deorbit_timeline or "Required", 3)


def _debris_plan(law: JurisdictionLaw, reference: JurisdictionReference) -> CriterionValue:
    return CriterionValue("Mandatory" if law.debris.mitigation_plan else "Not required", 3)


def _regulatory_maturity(law: JurisdictionLaw, reference: JurisdictionReference) -> CriterionValue:
    if law.legislation.status == LegislationStatus.NONE:
        return CriterionValue("No law", 1)
    age = reference.maturity_reference_year - law.legislation.year_enacted
    if age >= 15:
        return CriterionValue("Very mature", 5)
    if age >= 8:
        return CriterionValue("Mature", 4)
    if age >= 4:
        return CriterionValue("Established", 3)
    return CriterionValue("Recent", 2)


def _remote_sensing(law: JurisdictionLaw, reference: JurisdictionReference) -> CriterionValue:
    if law.remote_sensing_license:
        return CriterionValue("Required", 3)
    return CriterionValue("Not required", 4)


_EU_SCORES = {
    EURelationship.COMPLEMENTARY: 5,
    EURelationship.PARALLEL: 4,
    EURelationship.SUPERSEDED: 3,
    EURelationship.GAP: 2,
}


def _eu_space_act(law: JurisdictionLaw, reference: JurisdictionReference) -> CriterionValue:
    return CriterionValue(
        EU_RELATIONSHIP_LABELS[law.eu_relationship],
        _EU_SCORES[law.eu_relationship],
        notes=law.eu_transition_notes,
    )


CriterionFn = Callable[[JurisdictionLaw, JurisdictionReference], CriterionValue]

CRITERIA: tuple[tuple[str, str, str, CriterionFn], ...] = (
    ("processing_time", "Processing Time", "timeline", _processing_time),
    ("application_fee", "Application Fee", "cost", _application_fee),
    ("insurance_min", "Min. Insurance", "insurance", _insurance_minimum),
    ("govt_indemnification", "Govt. Indemnification", "insurance", _indemnification),
    ("liability_regime", "Liability Regime", "liability", _liability_regime),
    ("deorbit_timeline", "Deorbit Requirement", "debris", _deorbit_requirement),
    ("debris_plan", "Debris Mitigation Plan", "debris", _debris_plan),
    ("regulatory_maturity", "Regulatory Maturity", "regulatory", _regulatory_maturity),
    ("remote_sensing", "Remote Sensing License", "regulatory", _remote_sensing),
    ("eu_space_act", "EU Space Act Impact", "regulatory", _eu_space_act),
)


def build_comparison_matrix(
    laws: Sequence[JurisdictionLaw],
    reference: JurisdictionReference,
) -> list[ComparisonCriterion]:
    return [
        ComparisonCriterion(
            id=criterion_id,
            label=label,
            category=category,
            values=tuple((law.code, fn(law, reference)) for law in laws),
        )
        for criterion_id, label, category, fn in CRITERIA
    ]


# =============================================================================
# EU Space Act Preview
# =============================================================================

def format_key_change(ref: CrossReference) -> str:
    """'Debris Mitigation (Art. 55-73): superseded'"""
    articles = f" ({', '.join(ref.eu_articles)})" if ref.eu_articles else ""
    return f"{ref.area}{articles}: {ref.relationship.value}"


def build_eu_preview(
    laws: Sequence[JurisdictionLaw],
    cross_references: Sequence[CrossReference] = (),
) -> EUSpaceActPreview:
    relationships = [law.eu_relationship for law in laws]

    if EURelationship.GAP in relationships:
        overall = (
            "The EU Space Act will fill significant regulatory gaps in some of "
            "your selected jurisdictions and harmonize requirements across all "
            "EU member states by 2030."
        )
    elif relationships and all(r == EURelationship.PARALLEL for r in relationships):
        overall = (
            "Your selected jurisdictions maintain independent regimes from the "
            "EU Space Act. Separate compliance may be required for EU market access."
        )
    else:
        overall = (
            "The EU Space Act (effective 2030) will harmonize authorization "
            "requirements across EU member states. National provisions will be "
            "gradually superseded or complemented by the unified EU framework."
        )

    notes = {
        law.code.value: {
            "relationship": law.eu_relationship.value,
            "description": law.eu_description,
            "key_articles": list(law.eu_key_articles),
            "key_changes": [
                format_key_change(ref)
                for ref in cross_references
                if law.code in ref.countries
            ][:MAX_KEY_CHANGES],
        }
        for law in laws
    }
    return EUSpaceActPreview(overall_relationship=overall, notes=notes)


# =============================================================================
# Recommendations
# =============================================================================

def build_recommendations(
    results: Sequence[JurisdictionResult],
    profile: JurisdictionProfile,
    limit: int,
) -> list[str]:
    recommendations: list[str] = []
    if not results:
        return recommendations

    # Stable sort keeps selection order among equal scores
    ranked = sorted(results, key=lambda r: -r.favorability_score)

    if len(ranked) > 1:
        top = ranked[0].law
        recommendations.append(
            f"{top.flag} {top.name} scores highest ({ranked[0].favorability_score}/100) "
            "for your profile. Consider it as your primary jurisdiction."
        )
        # Later entries win ties
        fastest = ranked[0].law
        for r in ranked[1:]:
            if r.law.average_processing_weeks <= fastest.average_processing_weeks:
                fastest = r.law
        low, high = fastest.processing_weeks
        recommendations.append(
            f"For the fastest timeline, {fastest.flag} {fastest.name} offers "
            f"{low}-{high} week processing."
        )

    if any(r.law.insurance.mandatory for r in results):
        recommendations.append(
            "Prepare insurance documentation early. Most jurisdictions require "
            "mandatory third-party liability coverage before authorization."
        )

    if any(r.law.eu_member for r in results):
        recommendations.append(
            "Plan for EU Space Act transition by 2030. EU member state national "
            "regimes will be harmonized under the new framework."
        )

    if profile.licensing_status == LicensingStatus.NEW_APPLICATION:
        recommendations.append(
            "For new applications, engage with the licensing authority early. "
            "Most NCAs offer pre-application consultations to discuss "
            "requirements and timelines."
        )

    if profile.constellation_size is not None and profile.constellation_size > 9:
        recommendations.append(
            "For constellation deployments, inquire about blanket licensing "
            "options. Some jurisdictions allow a single authorization covering "
            "multiple identical spacecraft."
        )

    for result in results:
        if result.law.covered_activities is not None and not result.is_applicable:
            recommendations.append(
                f"{result.law.name} currently lacks a comprehensive space law. "
                "Consider alternative jurisdictions for authorization, or monitor "
                "upcoming national legislation."
            )

    return recommendations[:limit]


# =============================================================================
# Entry Point
# =============================================================================

def compare_jurisdictions(
    profile: JurisdictionProfile,
    reference: JurisdictionReference,
    applicable_rules: Sequence[Rule],
) -> JurisdictionComparison:
    """
    Build the country-level comparison for the selected jurisdictions.

    Args:
        profile: Normalized jurisdiction profile
        reference: National law records of the jurisdiction catalog
        applicable_rules: Requirement rules the filter selected

    Returns:
        JurisdictionComparison in the caller's selection order
    """
    laws = [
        law for law in (reference.get(code) for code in profile.selected_jurisdictions)
        if law is not None
    ]

    results = []
    for law in laws:
        requirements = [r for r in applicable_rules if r.jurisdiction == law.code.value]
        applicability = check_applicability(law, profile, requirements)
        score, factors = favorability(law, profile)
        results.append(JurisdictionResult(
            law=law,
            is_applicable=applicability.is_applicable,
            applicability_reason=applicability.reason,
            requirements=requirements,
            favorability_score=score,
            favorability_factors=factors,
        ))
        logger.debug(
            "%s: applicable=%s, favorability %d",
            law.code.value,
            applicability.is_applicable,
            score,
        )

    return JurisdictionComparison(
        jurisdictions=results,
        criteria=build_comparison_matrix(laws, reference),
        eu_preview=build_eu_preview(laws, reference.cross_references),
        recommendations=build_recommendations(results, profile, reference.max_recommendations),
    )
