"""
Caelex Debris Metrics

Domain metrics for the debris-mitigation checklist: severity breakdown of
the applicable rules, the constellation tier, simplified-regime
eligibility and recommendations for non-compliant rules.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from ..models import (
    DebrisProfile,
    OrbitType,
    RequirementStatus,
    RuleAssessment,
    RuleCatalog,
    Severity,
    TriBool,
)
from .condition_evaluator import ConditionEvaluator

TWENTY_FIVE_YEAR_RULE = 25.0

# Lowest score for each risk level, highest band first
RISK_LEVELS: tuple[tuple[int, str], ...] = (
    (80, "low"),
    (60, "medium"),
    (40, "high"),
)

_evaluator = ConditionEvaluator()


@dataclass
class SeverityCount:
    total: int = 0
    compliant: int = 0
    non_compliant: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "compliant": self.compliant,
            "non_compliant": self.non_compliant,
        }


@dataclass
class DebrisMetrics:
    constellation_tier: str
    simplified_regime_eligible: bool
    twenty_five_year_compliant: bool
    by_severity: dict[Severity, SeverityCount] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "constellation_tier": self.constellation_tier,
            "simplified_regime_eligible": self.simplified_regime_eligible,
            "twenty_five_year_compliant": self.twenty_five_year_compliant,
            "by_severity": {
                severity.value: count.to_dict() for severity, count in self.by_severity.items()
            },
        }


def severity_breakdown(assessments: Sequence[RuleAssessment]) -> dict[Severity, SeverityCount]:
    """Counts per severity, every severity present, in severity order."""
    breakdown = {severity: SeverityCount() for severity in Severity}
    for assessment in assessments:
        if assessment.rule is None or assessment.rule.severity is None:
            continue
        count = breakdown[assessment.rule.severity]
        count.total += 1
        if assessment.status == RequirementStatus.COMPLIANT:
            count.compliant += 1
        elif assessment.status == RequirementStatus.NON_COMPLIANT:
            count.non_compliant += 1
    return breakdown


def simplified_regime_eligible(catalog: RuleCatalog, profile: DebrisProfile) -> bool:
    """
    Evaluate the catalog's debris simplified-regime predicate.

    An empty predicate means the catalog offers no simplified regime.
    """
    if not catalog.simplified_regime:
        return False
    result = _evaluator.evaluate_all(catalog.simplified_regime, profile)
    return result.value == TriBool.TRUE


def meets_twenty_five_year_rule(profile: DebrisProfile) -> bool:
    """LEO disposal must complete within 25 years; other regimes pass."""
    if profile.orbit_type != OrbitType.LEO:
        return True
    if profile.deorbit_timeline_years is None:
        return True
    return profile.deorbit_timeline_years <= TWENTY_FIVE_YEAR_RULE


def risk_level(score: int) -> str:
    """Debris plan risk level for a compliance score."""
    for threshold, level in RISK_LEVELS:
        if score >= threshold:
            return level
    return "critical"


def debris_metrics(
    catalog: RuleCatalog,
    profile: DebrisProfile,
    assessments: Sequence[RuleAssessment],
) -> DebrisMetrics:
    return DebrisMetrics(
        constellation_tier=profile.constellation_tier.value,
        simplified_regime_eligible=simplified_regime_eligible(catalog, profile),
        twenty_five_year_compliant=meets_twenty_five_year_rule(profile),
        by_severity=severity_breakdown(assessments),
    )


def debris_recommendations(assessments: Sequence[RuleAssessment]) -> list[str]:
    """
    One suggestion per non-compliant rule, critical first, then catalog order.

    Uses the rule's first tip when it has one.
    """
    order = {severity: i for i, severity in enumerate(Severity)}
    failing = [
        a for a in assessments
        if a.rule is not None and a.status == RequirementStatus.NON_COMPLIANT
    ]
    failing.sort(key=lambda a: order.get(a.rule.severity, len(order)))

    recommendations = []
    for assessment in failing:
        rule = assessment.rule
        if rule.tips:
            recommendations.append(f"{rule.title} ({rule.citation}): {rule.tips[0]}")
        else:
            recommendations.append(f"Resolve non-compliance with {rule.title} ({rule.citation}).")
    return recommendations
