"""
Caelex Domain Engine

One generic engine, parameterized by a domain's catalog, running the
same pipeline for every domain:

    normalize -> filter_applicable -> aggregate -> domain metrics
    (-> assemble)

Key features:
- No I/O during an evaluation; the catalog is loaded before the first call
- Deterministic: equal inputs give equal results, fingerprint included
- Module-level convenience functions backed by one engine per domain
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Optional, Union

from ..canon import content_hash
from ..catalogs import coerce_domain, load_catalog
from ..config import get_settings
from ..models import (
    DebrisProfile,
    Domain,
    EnvironmentalProfile,
    JurisdictionProfile,
    ReportDocument,
    RuleCatalog,
    ScoreResult,
)
from .aggregator import StatusMap, aggregate
from .applicability import filter_applicable
from .assembler import assemble
from .debris import debris_metrics, debris_recommendations
from .footprint import calculate_footprint
from .jurisdiction import compare_jurisdictions
from .normalizer import Profile, normalize

logger = logging.getLogger(__name__)

SIMPLIFIED_REGIME_TAG = "simplified_regime"

MetricsFn = Callable[[RuleCatalog, Any, ScoreResult], tuple[dict[str, Any], list[str]]]


# =============================================================================
# Domain Metrics
# =============================================================================

def _debris_metrics(
    catalog: RuleCatalog,
    profile: DebrisProfile,
    result: ScoreResult,
) -> tuple[dict[str, Any], list[str]]:
    metrics = debris_metrics(catalog, profile, result.assessments)
    return metrics.to_dict(), debris_recommendations(result.assessments)


def _environmental_metrics(
    catalog: RuleCatalog,
    profile: EnvironmentalProfile,
    result: ScoreResult,
) -> tuple[dict[str, Any], list[str]]:
    footprint = calculate_footprint(profile, catalog.reference)
    metrics = footprint.to_dict()
    # Applicable EFD rules that may be met in simplified form
    metrics["simplified_form_rules"] = [
        a.rule_id for a in result.assessments
        if profile.simplified_regime and a.rule is not None and a.rule.has_tag(SIMPLIFIED_REGIME_TAG)
    ]
    return metrics, list(footprint.recommendations)


def _jurisdiction_metrics(
    catalog: RuleCatalog,
    profile: JurisdictionProfile,
    result: ScoreResult,
) -> tuple[dict[str, Any], list[str]]:
    applicable = [a.rule for a in result.assessments if a.rule is not None]
    comparison = compare_jurisdictions(profile, catalog.reference, applicable)
    return comparison.to_dict(), list(comparison.recommendations)


DOMAIN_METRICS: dict[Domain, MetricsFn] = {
    Domain.DEBRIS: _debris_metrics,
    Domain.ENVIRONMENTAL: _environmental_metrics,
    Domain.JURISDICTION: _jurisdiction_metrics,
}


def result_fingerprint(result: ScoreResult) -> str:
    """Content hash of the serialized result, excluding the fingerprint."""
    data = result.to_dict()
    data.pop("fingerprint", None)
    return content_hash(data)


# =============================================================================
# Domain Engine
# =============================================================================

@dataclass(frozen=True)
class DomainEngine:
    """
    Evaluates profiles against one domain's catalog.

    Holds only the immutable catalog, so a single instance can serve
    concurrent callers.

    Usage:
        engine = DomainEngine(load_catalog("debris"))
        result = engine.evaluate({"orbit_type": "LEO", ...})
        print(result.score, result.counts)
    """
    catalog: RuleCatalog

    @property
    def domain(self) -> Domain:
        return self.catalog.domain

    def normalize(self, raw_profile: Any) -> Profile:
        return normalize(self.domain, raw_profile, self.catalog)

    def evaluate(
        self,
        raw_profile: Any,
        existing_statuses: Optional[StatusMap] = None,
    ) -> ScoreResult:
        """
        Normalize the raw profile and evaluate it.

        Raises:
            InvalidProfileError: If the raw profile is invalid
            InvalidStatusMapError: If the status map cannot be read
        """
        return self.evaluate_profile(self.normalize(raw_profile), existing_statuses)

    def evaluate_profile(
        self,
        profile: Profile,
        existing_statuses: Optional[StatusMap] = None,
    ) -> ScoreResult:
        """Evaluate an already normalized profile."""
        applicability = filter_applicable(self.catalog, profile)
        result = aggregate(applicability.applicable, existing_statuses, domain=self.domain)
        result.catalog = self.catalog.meta
        result.profile = profile
        result.warnings = list(applicability.warnings)

        metrics, recommendations = DOMAIN_METRICS[self.domain](self.catalog, profile, result)
        result.metrics = metrics
        result.recommendations = recommendations
        result.fingerprint = result_fingerprint(result)

        logger.debug(
            "Evaluated %s profile: %d applicable, %d warnings, score %d",
            self.domain.value,
            result.total_applicable,
            len(result.warnings),
            result.score,
            extra={"domain": self.domain.value, "fingerprint": result.fingerprint[:12]},
        )
        return result

    def build_report(
        self,
        raw_profile: Any,
        existing_statuses: Optional[StatusMap] = None,
    ) -> ReportDocument:
        result = self.evaluate(raw_profile, existing_statuses)
        return assemble(result.profile, result, self.catalog.meta, self.catalog.reference)


# =============================================================================
# Module-level Engines
# =============================================================================

@lru_cache(maxsize=None)
def _cached_engine(domain: Domain, catalog_dir: Path) -> DomainEngine:
    return DomainEngine(load_catalog(domain))


def get_engine(domain: Union[str, Domain]) -> DomainEngine:
    """
    Get the engine for a domain, backed by the process-wide catalog.

    Raises:
        UnknownDomainError: If the domain is not registered
        CatalogLoadError: If the catalog cannot be read
    """
    domain = coerce_domain(domain)
    catalog_dir = get_settings().catalog_dir
    engine = _cached_engine(domain, catalog_dir)
    if engine.catalog is not load_catalog(domain):
        # Catalog cache was cleared since this engine was built
        _cached_engine.cache_clear()
        engine = _cached_engine(domain, catalog_dir)
    return engine


def evaluate(
    domain: Union[str, Domain],
    raw_profile: Any,
    existing_statuses: Optional[StatusMap] = None,
) -> ScoreResult:
    """
    Evaluate a raw profile for a domain.

    Args:
        domain: "debris", "environmental" or "jurisdiction"
        raw_profile: Mapping with snake_case or camelCase keys
        existing_statuses: Caller's persisted status map, rule id to a
            status string or a {status, notes, evidence} mapping

    Returns:
        ScoreResult with applicable rules, statuses, score and metrics
    """
    return get_engine(domain).evaluate(raw_profile, existing_statuses)


def build_report(
    domain: Union[str, Domain],
    raw_profile: Any,
    existing_statuses: Optional[StatusMap] = None,
) -> ReportDocument:
    """Evaluate a raw profile and assemble its report document."""
    return get_engine(domain).build_report(raw_profile, existing_statuses)
