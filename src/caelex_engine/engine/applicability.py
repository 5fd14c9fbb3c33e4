"""
Caelex Applicability Filter

Selects the rules of a catalog that apply to a profile.

A rule applies when all of its clauses evaluate TRUE. A rule whose
clauses evaluate UNKNOWN (an optional attribute the predicate needs is
missing) is excluded and reported with exactly one
IncompleteProfileWarning; it is never guessed into the applicable set.
"""
from __future__ import annotations

import logging
from typing import Any

from ..models import (
    ApplicabilityResult,
    IncompleteProfileWarning,
    Rule,
    RuleCatalog,
    TriBool,
)
from .condition_evaluator import ConditionEvaluator

logger = logging.getLogger(__name__)

_evaluator = ConditionEvaluator()


def filter_applicable(catalog: RuleCatalog, profile: Any) -> ApplicabilityResult:
    """
    Evaluate every rule of the catalog against the profile.

    Returns:
        ApplicabilityResult with applicable rules in catalog order, the ids
        of excluded rules, and one warning per rule excluded for missing
        profile attributes
    """
    applicable: list[Rule] = []
    excluded: list[str] = []
    warnings: list[IncompleteProfileWarning] = []

    for rule in catalog.rules:
        result = _evaluator.evaluate_all(rule.clauses, profile)

        if result.value == TriBool.TRUE:
            applicable.append(rule)
            continue

        excluded.append(rule.id)
        if result.value == TriBool.UNKNOWN:
            warning = IncompleteProfileWarning(
                rule_id=rule.id,
                missing_fields=tuple(result.missing_fields),
            )
            warnings.append(warning)
            logger.warning(
                warning.message,
                extra={"rule_id": rule.id, "missing_fields": list(warning.missing_fields)},
            )

    logger.debug(
        "%s: %d of %d rules applicable",
        catalog.meta.catalog_id,
        len(applicable),
        len(catalog.rules),
    )
    return ApplicabilityResult(
        applicable=tuple(applicable),
        excluded_ids=tuple(excluded),
        warnings=tuple(warnings),
    )
