"""
Caelex Rule Models

A rule is the atomic compliance unit: identity, citation, classification,
an applicability predicate and guidance text that is passed through to
reports untouched. Rules are grouped into a versioned RuleCatalog per
domain, together with that domain's reference tables.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

from .conditions import Condition
from .enums import Domain, Severity

RefT = TypeVar("RefT")


@dataclass(frozen=True)
class Rule:
    """
    A single requirement with its applicability predicate.

    `clauses` are combined with AND: the rule applies only when every
    clause evaluates TRUE.
    """
    id: str
    title: str
    citation: str
    clauses: tuple[Condition, ...] = ()
    severity: Optional[Severity] = None
    category: Optional[str] = None
    mandatory: bool = True
    jurisdiction: Optional[str] = None
    tags: frozenset[str] = frozenset()
    standard: Optional[str] = None

    # Guidance (passed through, never evaluated)
    description: str = ""
    compliance_question: Optional[str] = None
    tips: tuple[str, ...] = ()
    evidence_required: tuple[str, ...] = ()

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        result: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "citation": self.citation,
            "mandatory": self.mandatory,
            "description": self.description,
            "tips": list(self.tips),
            "evidence_required": list(self.evidence_required),
            "applies_when": [clause.to_dict() for clause in self.clauses],
        }
        if self.severity is not None:
            result["severity"] = self.severity.value
        if self.category:
            result["category"] = self.category
        if self.jurisdiction:
            result["jurisdiction"] = self.jurisdiction
        if self.tags:
            result["tags"] = sorted(self.tags)
        if self.compliance_question:
            result["compliance_question"] = self.compliance_question
        if self.standard:
            result["standard"] = self.standard
        return result


@dataclass(frozen=True)
class CatalogMeta:
    """Identity of the catalog a result was computed against."""
    domain: Domain
    catalog_id: str
    title: str
    version: str
    schema_version: str
    content_hash: str
    effective_date: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "domain": self.domain.value,
            "catalog_id": self.catalog_id,
            "title": self.title,
            "version": self.version,
            "schema_version": self.schema_version,
            "content_hash": self.content_hash,
            "effective_date": self.effective_date,
        }


@dataclass(frozen=True)
class RuleCatalog(Generic[RefT]):
    """
    Immutable, versioned rule table for one domain.

    `reference` holds the domain's lookup tables (tier thresholds,
    emission factors, jurisdiction records).
    """
    meta: CatalogMeta
    rules: tuple[Rule, ...]
    reference: RefT
    # Catalog-level eligibility predicate for the simplified regime, ANDed.
    simplified_regime: tuple[Condition, ...] = ()
    _index: dict[str, Rule] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_index", {rule.id: rule for rule in self.rules})

    @property
    def domain(self) -> Domain:
        return self.meta.domain

    @property
    def rule_ids(self) -> list[str]:
        return [rule.id for rule in self.rules]

    def get_rule(self, rule_id: str) -> Optional[Rule]:
        return self._index.get(rule_id)

    def __len__(self) -> int:
        return len(self.rules)
