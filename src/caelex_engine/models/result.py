"""
Caelex Evaluation Results

Output aggregates of one evaluation: per-rule assessments merged with the
caller's status map, status counts, the 0-100 score, incomplete-profile
warnings and domain metrics.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .enums import Domain, RequirementStatus
from .rules import CatalogMeta, Rule


@dataclass(frozen=True)
class IncompleteProfileWarning:
    """
    Non-fatal: a rule could not be evaluated because the profile lacks an
    optional attribute its predicate needs. The rule was excluded.
    """
    rule_id: str
    missing_fields: tuple[str, ...]

    @property
    def message(self) -> str:
        fields = ", ".join(self.missing_fields)
        return (
            f"Rule '{self.rule_id}' excluded: profile is missing {fields}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "missing_fields": list(self.missing_fields),
            "message": self.message,
        }


@dataclass(frozen=True)
class StatusRecord:
    """Caller-owned status of one rule, with notes and evidence refs."""
    status: RequirementStatus = RequirementStatus.NOT_ASSESSED
    notes: Optional[str] = None
    evidence: tuple[str, ...] = ()

    def with_status(self, status: RequirementStatus) -> StatusRecord:
        return StatusRecord(status=status, notes=self.notes, evidence=self.evidence)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "notes": self.notes,
            "evidence": list(self.evidence),
        }


@dataclass(frozen=True)
class RuleAssessment:
    """A rule paired with its merged status."""
    rule_id: str
    record: StatusRecord
    rule: Optional[Rule] = None

    @property
    def status(self) -> RequirementStatus:
        return self.record.status

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"rule_id": self.rule_id}
        result.update(self.record.to_dict())
        if self.rule is not None:
            result["title"] = self.rule.title
            result["citation"] = self.rule.citation
            if self.rule.severity is not None:
                result["severity"] = self.rule.severity.value
            if self.rule.category:
                result["category"] = self.rule.category
            if self.rule.jurisdiction:
                result["jurisdiction"] = self.rule.jurisdiction
            result["mandatory"] = self.rule.mandatory
        return result


@dataclass(frozen=True)
class ApplicabilityResult:
    """Output of the applicability filter."""
    applicable: tuple[Rule, ...]
    excluded_ids: tuple[str, ...] = ()
    warnings: tuple[IncompleteProfileWarning, ...] = ()

    @property
    def applicable_ids(self) -> list[str]:
        return [rule.id for rule in self.applicable]


@dataclass
class ScoreResult:
    """
    Aggregate of one evaluation.

    `assessments` are the applicable rules in catalog order. `retired` are
    rules the caller was tracking that no longer apply; they are kept with
    status not_applicable so history is never dropped.
    """
    assessments: list[RuleAssessment]
    domain: Optional[Domain] = None
    retired: list[RuleAssessment] = field(default_factory=list)
    score: int = 100
    warnings: list[IncompleteProfileWarning] = field(default_factory=list)
    catalog: Optional[CatalogMeta] = None
    profile: Any = None
    metrics: dict[str, Any] = field(default_factory=dict)
    recommendations: list[str] = field(default_factory=list)
    fingerprint: str = ""

    @property
    def total_applicable(self) -> int:
        return len(self.assessments)

    @property
    def applicable_ids(self) -> list[str]:
        return [a.rule_id for a in self.assessments]

    @property
    def counts(self) -> dict[str, int]:
        """Count of applicable rules per status, every status present."""
        counts = {status.value: 0 for status in RequirementStatus}
        for assessment in self.assessments:
            counts[assessment.status.value] += 1
        counts[RequirementStatus.NOT_APPLICABLE.value] += len(self.retired)
        return counts

    def status_map(self) -> dict[str, dict[str, Any]]:
        """Merged statuses in the shape the caller persists and passes back."""
        merged = {a.rule_id: a.record.to_dict() for a in self.assessments}
        merged.update({a.rule_id: a.record.to_dict() for a in self.retired})
        return merged

    def get(self, rule_id: str) -> Optional[RuleAssessment]:
        for assessment in self.assessments:
            if assessment.rule_id == rule_id:
                return assessment
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "domain": self.domain.value if self.domain else None,
            "catalog": self.catalog.to_dict() if self.catalog else None,
            "profile": self.profile.to_dict() if self.profile is not None else None,
            "score": self.score,
            "total_applicable": self.total_applicable,
            "counts": self.counts,
            "assessments": [a.to_dict() for a in self.assessments],
            "retired": [a.to_dict() for a in self.retired],
            "warnings": [w.to_dict() for w in self.warnings],
            "metrics": self.metrics,
            "recommendations": list(self.recommendations),
            "fingerprint": self.fingerprint,
        }
