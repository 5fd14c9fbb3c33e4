"""
Caelex Composable Conditions

Provides three-valued logic (TriBool) and composable condition trees
for expressing rule applicability over a mission profile.

Key components:
- TriBool: Three-valued logic (TRUE, FALSE, UNKNOWN) with Kleene algebra
- Predicate: Leaf-level comparison against a profile attribute
- Condition: Composable AND/OR/NOT tree structure
- Helper functions: AND(), OR(), NOT(), PRED() for building conditions

Truth Tables (Kleene Logic):
    AND: False dominates, Unknown propagates
    OR: True dominates, Unknown propagates
    NOT: Unknown stays Unknown
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .enums import ConditionOperator

LOGICAL_OPERATORS = frozenset(
    {ConditionOperator.AND, ConditionOperator.OR, ConditionOperator.NOT}
)


# =============================================================================
# Three-Valued Logic (TriBool)
# =============================================================================

class TriBool(Enum):
    """
    Three-valued Boolean logic (Kleene logic).

    Used when profile attributes may be missing:
    - TRUE: Condition is definitely satisfied
    - FALSE: Condition is definitely not satisfied
    - UNKNOWN: Cannot determine (missing attribute)

    Truth Tables:

    AND:
        AND    | TRUE    FALSE   UNKNOWN
        -------|------------------------
        TRUE   | TRUE    FALSE   UNKNOWN
        FALSE  | FALSE   FALSE   FALSE
        UNKNOWN| UNKNOWN FALSE   UNKNOWN

    OR:
        OR     | TRUE    FALSE   UNKNOWN
        -------|------------------------
        TRUE   | TRUE    TRUE    TRUE
        FALSE  | TRUE    FALSE   UNKNOWN
        UNKNOWN| TRUE    UNKNOWN UNKNOWN
    """
    TRUE = True
    FALSE = False
    UNKNOWN = None

    def __and__(self, other: TriBool) -> TriBool:
        if not isinstance(other, TriBool):
            return NotImplemented

        if self == TriBool.FALSE or other == TriBool.FALSE:
            return TriBool.FALSE
        if self == TriBool.UNKNOWN or other == TriBool.UNKNOWN:
            return TriBool.UNKNOWN
        return TriBool.TRUE

    def __or__(self, other: TriBool) -> TriBool:
        if not isinstance(other, TriBool):
            return NotImplemented

        if self == TriBool.TRUE or other == TriBool.TRUE:
            return TriBool.TRUE
        if self == TriBool.UNKNOWN or other == TriBool.UNKNOWN:
            return TriBool.UNKNOWN
        return TriBool.FALSE

    def __invert__(self) -> TriBool:
        if self == TriBool.UNKNOWN:
            return TriBool.UNKNOWN
        return TriBool.FALSE if self == TriBool.TRUE else TriBool.TRUE

    def __bool__(self) -> bool:
        """
        Convert to bool for Python if statements.

        Raises ValueError for UNKNOWN to force explicit handling.
        """
        if self == TriBool.UNKNOWN:
            raise ValueError(
                "Cannot convert TriBool.UNKNOWN to bool. "
                "Handle UNKNOWN explicitly in your logic."
            )
        return self == TriBool.TRUE

    @classmethod
    def from_bool(cls, value: Optional[bool]) -> TriBool:
        """Convert Python bool/None to TriBool."""
        if value is None:
            return cls.UNKNOWN
        return cls.TRUE if value else cls.FALSE

    def is_known(self) -> bool:
        return self != TriBool.UNKNOWN

    def is_true(self) -> bool:
        return self == TriBool.TRUE

    def is_false(self) -> bool:
        return self == TriBool.FALSE

    def is_unknown(self) -> bool:
        return self == TriBool.UNKNOWN


# =============================================================================
# Evaluation Result
# =============================================================================

@dataclass
class EvaluationResult:
    """
    Result of evaluating a condition.

    Includes the TriBool result plus which profile fields were consulted
    and which were missing (when the result is UNKNOWN).
    """
    value: TriBool
    explanation: str
    missing_fields: list[str] = field(default_factory=list)
    evaluated_fields: list[str] = field(default_factory=list)

    @property
    def is_satisfied(self) -> bool:
        return self.value == TriBool.TRUE

    @property
    def is_not_satisfied(self) -> bool:
        return self.value == TriBool.FALSE

    @property
    def is_uncertain(self) -> bool:
        return self.value == TriBool.UNKNOWN

    def __and__(self, other: EvaluationResult) -> EvaluationResult:
        """Combine two results with AND logic."""
        return EvaluationResult(
            value=self.value & other.value,
            explanation=f"({self.explanation}) AND ({other.explanation})",
            missing_fields=_merge_unique(self.missing_fields, other.missing_fields),
            evaluated_fields=self.evaluated_fields + other.evaluated_fields,
        )

    def __or__(self, other: EvaluationResult) -> EvaluationResult:
        """Combine two results with OR logic."""
        return EvaluationResult(
            value=self.value | other.value,
            explanation=f"({self.explanation}) OR ({other.explanation})",
            missing_fields=_merge_unique(self.missing_fields, other.missing_fields),
            evaluated_fields=self.evaluated_fields + other.evaluated_fields,
        )

    def __invert__(self) -> EvaluationResult:
        """Negate the result with NOT logic."""
        return EvaluationResult(
            value=~self.value,
            explanation=f"NOT ({self.explanation})",
            missing_fields=self.missing_fields.copy(),
            evaluated_fields=self.evaluated_fields.copy(),
        )


def _merge_unique(left: list[str], right: list[str]) -> list[str]:
    """Order-preserving union, so warnings list fields deterministically."""
    merged = list(left)
    for item in right:
        if item not in merged:
            merged.append(item)
    return merged


# =============================================================================
# Predicate (Leaf Condition)
# =============================================================================

@dataclass(frozen=True)
class Predicate:
    """
    A leaf-level comparison in a condition tree.

    Attributes:
        field: Dot-notation path to a profile attribute (e.g., "orbit_type")
        operator: Comparison operator (eq, ne, gt, lt, in, etc.)
        value: Value to compare against
        description: Optional human-readable description
    """
    field: str
    operator: ConditionOperator
    value: Any = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        if self.operator in LOGICAL_OPERATORS:
            raise ValueError(
                f"Predicate cannot use logical operator '{self.operator}'. "
                f"Use Condition for AND/OR/NOT."
            )

    @property
    def field_path(self) -> list[str]:
        """Split field into path components."""
        return self.field.split(".")


# =============================================================================
# Condition (Composable Tree)
# =============================================================================

@dataclass(frozen=True)
class Condition:
    """
    A composable condition that can be nested (AND/OR/NOT).

    For logical operators (AND, OR, NOT), use `children`.
    For comparison operators, use `predicate`.

    Conditions are immutable: catalogs are shared by every evaluation
    in the process.

    Examples:
        # Simple predicate
        Condition(
            op=ConditionOperator.EQ,
            predicate=Predicate("orbit_type", ConditionOperator.EQ, "GEO")
        )

        # AND composition
        Condition(
            op=ConditionOperator.AND,
            children=(condition1, condition2)
        )
    """
    op: ConditionOperator

    # For logical composition (AND, OR, NOT)
    children: tuple[Condition, ...] = ()

    # For leaf predicates (comparisons)
    predicate: Optional[Predicate] = None

    # Optional metadata
    id: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate condition structure."""
        if self.op in LOGICAL_OPERATORS:
            if not self.children:
                raise ValueError(f"Logical operator '{self.op}' requires children")
            if self.predicate is not None:
                raise ValueError(f"Logical operator '{self.op}' cannot have predicate")
            if self.op == ConditionOperator.NOT and len(self.children) != 1:
                raise ValueError("NOT operator must have exactly one child")
        else:
            if self.predicate is None:
                raise ValueError(f"Comparison operator '{self.op}' requires predicate")
            if self.children:
                raise ValueError(f"Comparison operator '{self.op}' cannot have children")

    @property
    def is_logical(self) -> bool:
        return self.op in LOGICAL_OPERATORS

    @property
    def is_leaf(self) -> bool:
        return not self.is_logical

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the same shape catalog files use."""
        predicate = self.predicate
        if predicate is None:
            result: dict[str, Any] = {
                "op": self.op.value,
                "children": [child.to_dict() for child in self.children],
            }
        else:
            result = {"op": self.op.value, "field": predicate.field}
            if predicate.value is not None:
                value = predicate.value
                result["value"] = list(value) if isinstance(value, (tuple, frozenset)) else value
        if self.id:
            result["id"] = self.id
        return result


# =============================================================================
# Helper Functions for Building Conditions
# =============================================================================

def AND(*conditions: Condition) -> Condition:
    """
    Create an AND condition from multiple child conditions.

    Example:
        condition = AND(
            IN("orbit_type", ["LEO", "MEO"]),
            GTE("satellite_count", 10),
        )
    """
    return Condition(
        op=ConditionOperator.AND,
        children=tuple(conditions),
        description=f"AND of {len(conditions)} conditions",
    )


def OR(*conditions: Condition) -> Condition:
    """Create an OR condition from multiple child conditions."""
    return Condition(
        op=ConditionOperator.OR,
        children=tuple(conditions),
        description=f"OR of {len(conditions)} conditions",
    )


def NOT(condition: Condition) -> Condition:
    """Create a NOT condition (negation)."""
    return Condition(
        op=ConditionOperator.NOT,
        children=(condition,),
        description=f"NOT ({condition.description or 'condition'})",
    )


def PRED(
    field: str,
    operator: ConditionOperator,
    value: Any = None,
    description: Optional[str] = None,
) -> Condition:
    """
    Create a predicate condition (leaf).

    Example:
        condition = PRED("satellite_count", ConditionOperator.GTE, 100)
    """
    if isinstance(value, list):
        value = tuple(value)
    predicate = Predicate(
        field=field,
        operator=operator,
        value=value,
        description=description,
    )
    return Condition(
        op=operator,
        predicate=predicate,
        description=description or f"{field} {operator.value} {value}",
    )


# =============================================================================
# Convenience Predicate Builders
# =============================================================================

def EQ(field: str, value: Any, description: Optional[str] = None) -> Condition:
    """field == value"""
    return PRED(field, ConditionOperator.EQ, value, description)


def NE(field: str, value: Any, description: Optional[str] = None) -> Condition:
    """field != value"""
    return PRED(field, ConditionOperator.NE, value, description)


def GT(field: str, value: Any, description: Optional[str] = None) -> Condition:
    """field > value"""
    return PRED(field, ConditionOperator.GT, value, description)


def GTE(field: str, value: Any, description: Optional[str] = None) -> Condition:
    """field >= value"""
    return PRED(field, ConditionOperator.GTE, value, description)


def LT(field: str, value: Any, description: Optional[str] = None) -> Condition:
    """field < value"""
    return PRED(field, ConditionOperator.LT, value, description)


def LTE(field: str, value: Any, description: Optional[str] = None) -> Condition:
    """field <= value"""
    return PRED(field, ConditionOperator.LTE, value, description)


def IN(field: str, values: list[Any], description: Optional[str] = None) -> Condition:
    """field in [values]"""
    return PRED(field, ConditionOperator.IN, values, description)


def NOT_IN(field: str, values: list[Any], description: Optional[str] = None) -> Condition:
    """field not in [values]"""
    return PRED(field, ConditionOperator.NOT_IN, values, description)


def CONTAINS(field: str, value: Any, description: Optional[str] = None) -> Condition:
    """value in field (list-valued attributes)"""
    return PRED(field, ConditionOperator.CONTAINS, value, description)


def IS_TRUE(field: str, description: Optional[str] = None) -> Condition:
    """field is True"""
    return PRED(field, ConditionOperator.IS_TRUE, None, description)


def IS_FALSE(field: str, description: Optional[str] = None) -> Condition:
    """field is False"""
    return PRED(field, ConditionOperator.IS_FALSE, None, description)


def BETWEEN(
    field: str,
    low: Any,
    high: Any,
    description: Optional[str] = None,
) -> Condition:
    """low <= field <= high"""
    return PRED(field, ConditionOperator.BETWEEN, (low, high), description)
