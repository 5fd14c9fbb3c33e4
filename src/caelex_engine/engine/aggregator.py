"""
Caelex Status/Score Aggregator

Merges the caller's persisted status map with the applicable rule set
and computes status counts and the 0-100 compliance score.

Key features:
- Pure merge: inputs are never mutated, history is never dropped
- Rules that stopped applying are returned as retired (not_applicable)
- Score rounds half-up; no applicable rules scores 100
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional

from ..exceptions import InvalidStatusMapError
from ..models import (
    Domain,
    RequirementStatus,
    Rule,
    RuleAssessment,
    ScoreResult,
    StatusRecord,
)

logger = logging.getLogger(__name__)

StatusMap = Mapping[str, Any]


# =============================================================================
# Status Parsing
# =============================================================================

def parse_status(rule_id: str, raw: Any) -> StatusRecord:
    """
    Read one status map entry.

    Accepts a StatusRecord, a bare status (string or enum), or a mapping
    with `status` and optional `notes` and `evidence`.

    Raises:
        InvalidStatusMapError: If the entry cannot be read
    """
    if isinstance(raw, StatusRecord):
        return raw

    if isinstance(raw, (str, RequirementStatus)):
        return StatusRecord(status=_parse_status_value(rule_id, raw))

    if isinstance(raw, Mapping):
        unknown = set(raw) - {"status", "notes", "evidence"}
        if unknown:
            raise InvalidStatusMapError(
                message=f"Status for '{rule_id}' has unknown keys: {', '.join(sorted(unknown))}",
                details={"rule_id": rule_id},
            )
        evidence = raw.get("evidence") or ()
        if isinstance(evidence, str):
            evidence = (evidence,)
        notes = raw.get("notes")
        return StatusRecord(
            status=_parse_status_value(rule_id, raw.get("status", RequirementStatus.NOT_ASSESSED)),
            notes=str(notes) if notes is not None else None,
            evidence=tuple(str(item) for item in evidence),
        )

    raise InvalidStatusMapError(
        message=f"Status for '{rule_id}' must be a string or mapping",
        details={"rule_id": rule_id, "type": type(raw).__name__},
    )


def _parse_status_value(rule_id: str, value: Any) -> RequirementStatus:
    try:
        return RequirementStatus(value)
    except ValueError:
        raise InvalidStatusMapError(
            message=f"Unknown status '{value}' for '{rule_id}'",
            details={
                "rule_id": rule_id,
                "allowed": [s.value for s in RequirementStatus],
            },
        ) from None


# =============================================================================
# Merge and Score
# =============================================================================

def merge_statuses(
    applicable_rules: Iterable[Rule],
    existing_statuses: Optional[StatusMap] = None,
) -> tuple[list[RuleAssessment], list[RuleAssessment]]:
    """
    Merge the caller's statuses with the applicable rules.

    - An applicable rule keeps its prior status; a prior not_applicable
      resets to not_assessed because the rule applies again.
    - An applicable rule without a prior status is not_assessed.
    - A tracked rule that no longer applies is retired as not_applicable,
      keeping its notes and evidence.

    Returns:
        (assessments in rule order, retired assessments sorted by rule id)
    """
    existing = existing_statuses if existing_statuses is not None else {}
    if not isinstance(existing, Mapping):
        raise InvalidStatusMapError(
            message="Status map must be a mapping of rule id to status",
            details={"type": type(existing).__name__},
        )
    bad_keys = [key for key in existing if not isinstance(key, str)]
    if bad_keys:
        raise InvalidStatusMapError(
            message="Status map keys must be rule ids",
            details={"keys": [repr(key) for key in bad_keys]},
        )
    assessments: list[RuleAssessment] = []
    applicable_ids: set[str] = set()

    for rule in applicable_rules:
        applicable_ids.add(rule.id)
        if rule.id in existing:
            record = parse_status(rule.id, existing[rule.id])
            if record.status == RequirementStatus.NOT_APPLICABLE:
                record = record.with_status(RequirementStatus.NOT_ASSESSED)
        else:
            record = StatusRecord()
        assessments.append(RuleAssessment(rule_id=rule.id, record=record, rule=rule))

    retired = [
        RuleAssessment(
            rule_id=rule_id,
            record=parse_status(rule_id, existing[rule_id]).with_status(
                RequirementStatus.NOT_APPLICABLE
            ),
        )
        for rule_id in sorted(existing)
        if rule_id not in applicable_ids
    ]
    return assessments, retired


def compute_score(assessments: Iterable[RuleAssessment]) -> int:
    """
    round(100 * compliant / total), rounding half-up.

    An empty set is vacuously compliant and scores 100.
    """
    total = 0
    compliant = 0
    for assessment in assessments:
        total += 1
        if assessment.status == RequirementStatus.COMPLIANT:
            compliant += 1
    if total == 0:
        return 100
    # Integer form of floor(100 * compliant / total + 0.5)
    return (200 * compliant + total) // (2 * total)


def aggregate(
    applicable_rules: Iterable[Rule],
    existing_statuses: Optional[StatusMap] = None,
    domain: Optional[Domain] = None,
) -> ScoreResult:
    """
    Core aggregation shared by every domain.

    Domain engines add metrics, recommendations and the fingerprint on
    top of the returned result.
    """
    assessments, retired = merge_statuses(applicable_rules, existing_statuses)
    result = ScoreResult(
        assessments=assessments,
        domain=domain,
        retired=retired,
        score=compute_score(assessments),
    )
    logger.debug(
        "Aggregated %d applicable rules (%d retired), score %d",
        result.total_applicable,
        len(retired),
        result.score,
    )
    return result
