"""
Pytest configuration and fixtures for Caelex engine tests.

Provides raw-input factories for each domain, model factories and
fixtures for the bundled catalogs.
"""
import dataclasses
import logging

import pytest

from caelex_engine.catalogs import clear_catalog_cache, load_catalog
from caelex_engine.config import get_settings
from caelex_engine.engine import normalize
from caelex_engine.models import (
    CatalogMeta,
    Condition,
    Domain,
    RequirementStatus,
    Rule,
    RuleAssessment,
    RuleCatalog,
    Severity,
    StatusRecord,
)


# =============================================================================
# Factory Helpers
# =============================================================================

def make_debris_input(**overrides) -> dict:
    """Raw debris profile: a single maneuverable LEO spacecraft."""
    data = {
        "orbit_type": "LEO",
        "satellite_count": 1,
        "maneuverability": "full",
        "mission_duration_years": 5,
        "deorbit_strategy": "active_deorbit",
        "activity_type": "spacecraft_operation",
        "has_propulsion": True,
        "has_passivation_capability": True,
    }
    data.update(overrides)
    return data


def make_environmental_input(**overrides) -> dict:
    """Raw environmental profile: 500 kg spacecraft on a Falcon 9 rideshare."""
    data = {
        "operator_type": "spacecraft",
        "spacecraft_mass_kg": 500,
        "spacecraft_count": 1,
        "orbit_type": "LEO",
        "mission_duration_years": 5,
        "launch_vehicle": "falcon_9",
        "launch_share_percent": 10,
        "deorbit_strategy": "controlled_deorbit",
    }
    data.update(overrides)
    return data


def make_jurisdiction_input(**overrides) -> dict:
    """Raw jurisdiction profile: a domestic spacecraft operator in France."""
    data = {
        "selected_jurisdictions": ["FR"],
        "activity_type": "spacecraft_operation",
        "entity_nationality": "domestic",
        "entity_size": "medium",
        "licensing_status": "new_application",
    }
    data.update(overrides)
    return data


INPUT_FACTORIES = {
    Domain.DEBRIS: make_debris_input,
    Domain.ENVIRONMENTAL: make_environmental_input,
    Domain.JURISDICTION: make_jurisdiction_input,
}


def make_profile(domain: Domain = Domain.DEBRIS, **overrides):
    """Normalized profile for a domain against the bundled catalog."""
    return normalize(domain, INPUT_FACTORIES[domain](**overrides))


def make_rule(
    rule_id: str = "rule_1",
    clauses: tuple = (),
    severity: Severity = Severity.MAJOR,
    title: str = None,
    citation: str = "Art. 1",
    tags: frozenset = frozenset(),
    tips: tuple = (),
    mandatory: bool = True,
) -> Rule:
    """Create a Rule with required fields."""
    return Rule(
        id=rule_id,
        title=title or rule_id.replace("_", " ").title(),
        citation=citation,
        clauses=tuple(clauses),
        severity=severity,
        mandatory=mandatory,
        tags=frozenset(tags),
        tips=tuple(tips),
    )


def make_assessment(
    rule: Rule,
    status: RequirementStatus = RequirementStatus.NOT_ASSESSED,
    notes: str = None,
) -> RuleAssessment:
    """Pair a rule with a status record."""
    return RuleAssessment(
        rule_id=rule.id,
        record=StatusRecord(status=status, notes=notes),
        rule=rule,
    )


def make_catalog_meta(domain: Domain = Domain.DEBRIS) -> CatalogMeta:
    return CatalogMeta(
        domain=domain,
        catalog_id=f"test-{domain.value}",
        title=f"Test {domain.value} catalog",
        version="test",
        schema_version="1.0.0",
        content_hash="0" * 64,
    )


def make_condition(
    op,
    children: tuple = (),
    predicate=None,
    condition_id: str = None,
) -> Condition:
    """Create a Condition with required fields."""
    return Condition(
        op=op,
        children=tuple(children),
        predicate=predicate,
        id=condition_id,
    )


def with_rules(catalog: RuleCatalog, *rules: Rule) -> RuleCatalog:
    """Copy of a catalog with extra rules appended."""
    return dataclasses.replace(catalog, rules=catalog.rules + tuple(rules))


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """Bundled catalogs and default settings for every test."""
    for name in ("CAELEX_CATALOG_DIR", "CAELEX_LOG_LEVEL", "CAELEX_LOG_FORMAT"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def restore_root_logging():
    """Undo handlers installed by configure_logging()."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def fresh_catalogs():
    """Drop the process-wide catalog cache before and after a test."""
    clear_catalog_cache()
    yield
    clear_catalog_cache()


@pytest.fixture(scope="session")
def debris_catalog():
    return load_catalog(Domain.DEBRIS)


@pytest.fixture(scope="session")
def environmental_catalog():
    return load_catalog(Domain.ENVIRONMENTAL)


@pytest.fixture(scope="session")
def jurisdiction_catalog():
    return load_catalog(Domain.JURISDICTION)
