"""
Caelex Condition Evaluator

Evaluates composable conditions against a mission profile using
three-valued logic.

Key features:
- TriBool evaluation (TRUE, FALSE, UNKNOWN)
- Field path resolution on profile dataclasses and plain mappings
- Stable evaluation order for determinism
- Tracks missing profile attributes for UNKNOWN results
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterable

from ..exceptions import ConditionEvaluationError
from ..models import (
    Condition,
    ConditionOperator,
    EvaluationResult,
    TriBool,
)

logger = logging.getLogger(__name__)

_NULL_CHECKS = frozenset({ConditionOperator.IS_NULL, ConditionOperator.IS_NOT_NULL})
_ORDERING = frozenset({
    ConditionOperator.GT, ConditionOperator.GTE,
    ConditionOperator.LT, ConditionOperator.LTE,
    ConditionOperator.BETWEEN,
})


# =============================================================================
# Field Path Resolution
# =============================================================================

def resolve_field_path(obj: Any, path: str) -> tuple[Any, bool]:
    """
    Resolve a dot-notation field path to a value.

    Supports:
    - Object attributes: "orbit_type"
    - Dictionary keys: "metadata.custom_field"
    - Nested paths: "launch.vehicle.key"

    Returns:
        Tuple of (resolved_value, found). If not found, returns (None, False).
    """
    current = obj
    for part in path.split("."):
        if isinstance(current, dict):
            if part not in current:
                return (None, False)
            current = current[part]
        elif hasattr(current, part):
            current = getattr(current, part)
        else:
            return (None, False)
    return (current, True)


# =============================================================================
# Comparison Operators
# =============================================================================

def _plain(value: Any) -> Any:
    """Enum members compare by value; collections element-wise."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple, set, frozenset)):
        return tuple(_plain(v) for v in value)
    return value


def compare_values(
    actual: Any,
    operator: ConditionOperator,
    expected: Any,
) -> TriBool:
    """
    Compare two values using the specified operator.

    A None actual value is UNKNOWN for every operator except the null
    checks: the profile did not supply the attribute.

    Raises:
        ConditionEvaluationError: If the values cannot be compared
    """
    if operator == ConditionOperator.IS_NULL:
        return TriBool.TRUE if actual is None else TriBool.FALSE

    if operator == ConditionOperator.IS_NOT_NULL:
        return TriBool.TRUE if actual is not None else TriBool.FALSE

    if actual is None:
        return TriBool.UNKNOWN

    actual = _plain(actual)
    expected = _plain(expected)

    try:
        if operator == ConditionOperator.IS_TRUE:
            return TriBool.from_bool(actual is True)

        elif operator == ConditionOperator.IS_FALSE:
            return TriBool.from_bool(actual is False)

        elif operator == ConditionOperator.EQ:
            return TriBool.from_bool(actual == expected)

        elif operator == ConditionOperator.NE:
            return TriBool.from_bool(actual != expected)

        elif operator == ConditionOperator.GT:
            return TriBool.from_bool(actual > expected)

        elif operator == ConditionOperator.GTE:
            return TriBool.from_bool(actual >= expected)

        elif operator == ConditionOperator.LT:
            return TriBool.from_bool(actual < expected)

        elif operator == ConditionOperator.LTE:
            return TriBool.from_bool(actual <= expected)

        elif operator == ConditionOperator.IN:
            return TriBool.from_bool(actual in expected)

        elif operator == ConditionOperator.NOT_IN:
            return TriBool.from_bool(actual not in expected)

        elif operator == ConditionOperator.CONTAINS:
            if isinstance(actual, (str, tuple)):
                return TriBool.from_bool(expected in actual)
            return TriBool.FALSE

        elif operator == ConditionOperator.BETWEEN:
            low, high = expected
            return TriBool.from_bool(low <= actual <= high)

    except (TypeError, ValueError) as e:
        raise ConditionEvaluationError(
            message=f"Cannot apply '{operator.value}' to {actual!r} and {expected!r}",
            details={"operator": operator.value, "error": str(e)},
        ) from e

    raise ConditionEvaluationError(
        message=f"Unsupported comparison operator: {operator.value}",
        details={"operator": operator.value},
    )


# =============================================================================
# Condition Evaluator
# =============================================================================

class ConditionEvaluator:
    """
    Evaluates composable conditions against a profile.

    Supports:
    - Logical operators (AND, OR, NOT) with Kleene three-valued logic
    - Comparison operators (EQ, NE, GT, LT, IN, CONTAINS, etc.)
    - Nested conditions
    - Missing attribute tracking

    The evaluator holds no state, so one instance can serve every
    evaluation in the process.

    Usage:
        evaluator = ConditionEvaluator()
        result = evaluator.evaluate(condition, profile)

        if result.value == TriBool.UNKNOWN:
            print(f"Missing attributes: {result.missing_fields}")
    """

    def evaluate(self, condition: Condition, profile: Any) -> EvaluationResult:
        """Evaluate a condition against a profile."""
        if condition.is_logical:
            return self._evaluate_logical(condition, profile)
        return self._evaluate_predicate(condition, profile)

    def evaluate_all(
        self,
        conditions: Iterable[Condition],
        profile: Any,
    ) -> EvaluationResult:
        """Evaluate a list of clauses combined with AND."""
        return self._evaluate_and(tuple(conditions), profile)

    def _evaluate_logical(self, condition: Condition, profile: Any) -> EvaluationResult:
        """Evaluate a logical condition (AND/OR/NOT)."""
        op = condition.op

        if op == ConditionOperator.AND:
            return self._evaluate_and(condition.children, profile)
        elif op == ConditionOperator.OR:
            return self._evaluate_or(condition.children, profile)
        elif op == ConditionOperator.NOT:
            return ~self.evaluate(condition.children[0], profile)
        else:
            raise ConditionEvaluationError(
                message=f"Unknown logical operator: {op}",
                details={"operator": op.value},
            )

    def _evaluate_and(
        self,
        children: tuple[Condition, ...],
        profile: Any,
    ) -> EvaluationResult:
        """
        Evaluate AND condition with Kleene logic.

        Truth table:
        - FALSE & X = FALSE (False dominates)
        - TRUE & TRUE = TRUE
        - TRUE & UNKNOWN = UNKNOWN
        - UNKNOWN & UNKNOWN = UNKNOWN
        """
        result = EvaluationResult(value=TriBool.TRUE, explanation="AND")

        for child in _ordered(children):
            result = result & self.evaluate(child, profile)

            # Short-circuit on FALSE (False dominates in AND)
            if result.value == TriBool.FALSE:
                break

        return result

    def _evaluate_or(
        self,
        children: tuple[Condition, ...],
        profile: Any,
    ) -> EvaluationResult:
        """
        Evaluate OR condition with Kleene logic.

        Truth table:
        - TRUE | X = TRUE (True dominates)
        - FALSE | FALSE = FALSE
        - FALSE | UNKNOWN = UNKNOWN
        - UNKNOWN | UNKNOWN = UNKNOWN
        """
        result = EvaluationResult(value=TriBool.FALSE, explanation="OR")

        for child in _ordered(children):
            result = result | self.evaluate(child, profile)

            # Short-circuit on TRUE (True dominates in OR)
            if result.value == TriBool.TRUE:
                break

        return result

    def _evaluate_predicate(self, condition: Condition, profile: Any) -> EvaluationResult:
        """Evaluate a leaf predicate condition."""
        predicate = condition.predicate
        if predicate is None:
            raise ConditionEvaluationError(
                message="Predicate condition missing predicate",
                details={"condition_id": condition.id},
            )

        actual_value, found = resolve_field_path(profile, predicate.field)
        missing = (not found or actual_value is None) and predicate.operator not in _NULL_CHECKS

        if missing:
            result_value = TriBool.UNKNOWN
        else:
            result_value = compare_values(actual_value, predicate.operator, predicate.value)

        label = f"{predicate.field} {predicate.operator.value} {_plain(predicate.value)}"
        if result_value == TriBool.TRUE:
            explanation = f"{label}: PASSED"
        elif result_value == TriBool.FALSE:
            explanation = f"{label}: FAILED (actual: {_plain(actual_value)})"
        else:
            explanation = f"{label}: UNKNOWN (missing attribute)"

        logger.debug(explanation)

        return EvaluationResult(
            value=result_value,
            explanation=explanation,
            missing_fields=[predicate.field] if missing else [],
            evaluated_fields=[predicate.field],
        )

    def get_required_fields(self, condition: Condition) -> set[str]:
        """Get all profile fields referenced by a condition."""
        fields: set[str] = set()
        self._collect_fields(condition, fields)
        return fields

    def _collect_fields(self, condition: Condition, fields: set[str]) -> None:
        """Recursively collect field names from a condition."""
        if condition.is_logical:
            for child in condition.children:
                self._collect_fields(child, fields)
        elif condition.predicate:
            fields.add(condition.predicate.field)


def _ordered(children: tuple[Condition, ...]) -> list[Condition]:
    """Children with explicit ids first, by id; the rest in declaration order."""
    return sorted(children, key=lambda c: (c.id is None, c.id or ""))


# =============================================================================
# Convenience Functions
# =============================================================================

def evaluate_condition(condition: Condition, profile: Any) -> EvaluationResult:
    """Evaluate a condition against a profile."""
    return ConditionEvaluator().evaluate(condition, profile)


def check_condition(condition: Condition, profile: Any) -> bool:
    """
    Check if a condition is satisfied (TRUE).

    Returns False for both FALSE and UNKNOWN results.
    Use evaluate_condition() for full TriBool handling.
    """
    return evaluate_condition(condition, profile).value == TriBool.TRUE
