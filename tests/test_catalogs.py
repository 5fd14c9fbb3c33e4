"""
Tests for Caelex rule catalog loading

Tests cover:
- Bundled catalogs load and pass integrity checks
- Reference table lookups (tiers, grades, national laws)
- Schema, integrity and version errors
- Process-wide caching
"""
import copy
import json
from types import SimpleNamespace

import pytest
import yaml

from caelex_engine.catalogs import (
    CatalogLoader,
    clear_catalog_cache,
    load_catalog,
    load_catalog_from_string,
)
from caelex_engine.catalogs.loader import _convert_catalog
from caelex_engine.config import get_settings
from caelex_engine.exceptions import (
    CatalogLoadError,
    CatalogValidationError,
    CatalogVersionMismatch,
    UnknownDomainError,
)
from caelex_engine.models import (
    ActivityType,
    ConstellationTier,
    CountryCode,
    DeorbitStrategy,
    Domain,
    EURelationship,
    ImpactGrade,
    OrbitType,
    Severity,
)


MINIMAL_DEBRIS_CATALOG = {
    "schema_version": "1.0.0",
    "catalog_id": "mini-debris",
    "domain": "debris",
    "title": "Minimal debris catalog",
    "version": "test",
    "reference": {
        "tier_thresholds": [
            {"tier": "single", "min_count": 1, "max_count": 1},
            {"tier": "small", "min_count": 2},
        ],
        "deorbit_options": {"LEO": ["active_deorbit"]},
        "orbits": {"LEO": {"label": "Low Earth Orbit", "altitude_range": "200 - 2,000 km"}},
        "deorbit_descriptions": {},
        "collision_avoidance_strategies": {},
        "default_service_provider": "TBD",
    },
    "rules": [
        {
            "id": "rule_a",
            "title": "Rule A",
            "citation": "Art. 1",
            "severity": "major",
            "applies_when": [{"op": "eq", "field": "orbit_type", "value": "LEO"}],
        },
    ],
}


def minimal_catalog(**changes) -> dict:
    data = copy.deepcopy(MINIMAL_DEBRIS_CATALOG)
    data.update(changes)
    return data


def load_json(data: dict):
    return load_catalog_from_string(json.dumps(data), format="json")


# =============================================================================
# Bundled Catalogs
# =============================================================================

class TestBundledCatalogs:
    """The three catalogs shipped with the engine."""

    @pytest.mark.parametrize("domain", list(Domain))
    def test_loads(self, domain):
        catalog = load_catalog(domain)
        assert catalog.domain == domain
        assert len(catalog) > 0
        assert len(catalog.meta.content_hash) == 64

    @pytest.mark.parametrize("domain", list(Domain))
    def test_rule_ids_unique(self, domain):
        ids = load_catalog(domain).rule_ids
        assert len(ids) == len(set(ids))

    def test_load_by_name(self):
        assert load_catalog("debris") is load_catalog(Domain.DEBRIS)

    def test_unknown_domain(self):
        with pytest.raises(UnknownDomainError) as exc_info:
            load_catalog("orbital_pizza")
        assert exc_info.value.details["available"] == ["debris", "environmental", "jurisdiction"]

    def test_cache_clear_reloads(self, fresh_catalogs):
        first = load_catalog(Domain.DEBRIS)
        clear_catalog_cache()
        second = load_catalog(Domain.DEBRIS)
        assert first is not second
        assert first.meta == second.meta


class TestDebrisCatalog:

    def test_every_rule_has_severity(self, debris_catalog):
        assert all(isinstance(rule.severity, Severity) for rule in debris_catalog.rules)

    def test_get_rule(self, debris_catalog):
        rule = debris_catalog.get_rule("trackability")
        assert rule.citation == "Art. 63"
        assert rule.severity == Severity.CRITICAL
        assert debris_catalog.get_rule("missing") is None

    @pytest.mark.parametrize("count,tier", [
        (1, ConstellationTier.SINGLE),
        (2, ConstellationTier.SMALL),
        (9, ConstellationTier.SMALL),
        (10, ConstellationTier.MEDIUM),
        (49, ConstellationTier.MEDIUM),
        (50, ConstellationTier.LARGE),
        (99, ConstellationTier.LARGE),
        (100, ConstellationTier.MEGA),
        (150, ConstellationTier.MEGA),
    ])
    def test_tier_boundaries(self, debris_catalog, count, tier):
        assert debris_catalog.reference.tier_for(count) == tier

    def test_geo_deorbit_options(self, debris_catalog):
        options = debris_catalog.reference.deorbit_options[OrbitType.GEO]
        assert DeorbitStrategy.GRAVEYARD_ORBIT in options
        assert DeorbitStrategy.PASSIVE_DECAY not in options

    def test_simplified_regime_predicate_present(self, debris_catalog):
        assert len(debris_catalog.simplified_regime) == 2


class TestEnvironmentalCatalog:

    @pytest.mark.parametrize("intensity,grade", [
        (50, ImpactGrade.A),
        (100, ImpactGrade.A),
        (100.1, ImpactGrade.B),
        (172.2, ImpactGrade.B),
        (350, ImpactGrade.C),
        (500, ImpactGrade.D),
        (2000, ImpactGrade.E),
    ])
    def test_grade_bands(self, environmental_catalog, intensity, grade):
        assert environmental_catalog.reference.grade_for(intensity).grade == grade

    def test_launch_vehicle_lookup(self, environmental_catalog):
        falcon = environmental_catalog.reference.launch_vehicles["falcon_9"]
        assert falcon.gwp_kg == 425000
        assert falcon.name == "Falcon 9"

    def test_methodology_rule_always_applies(self, environmental_catalog):
        assert environmental_catalog.get_rule("efd_methodology").clauses == ()


class TestJurisdictionCatalog:

    def test_ten_jurisdictions(self, jurisdiction_catalog):
        assert set(jurisdiction_catalog.reference.laws) == set(CountryCode)

    def test_norway_code_survives_yaml(self, jurisdiction_catalog):
        law = jurisdiction_catalog.reference.get(CountryCode.NO)
        assert law.name == "Norway"
        assert law.eu_member is False

    def test_requirements_tagged_with_country(self, jurisdiction_catalog):
        for rule in jurisdiction_catalog.rules:
            assert rule.jurisdiction in {code.value for code in CountryCode}

    def test_germany_partial_coverage(self, jurisdiction_catalog):
        law = jurisdiction_catalog.reference.get(CountryCode.DE)
        assert law.covered_activities == frozenset({ActivityType.EARTH_OBSERVATION})
        assert law.coverage_gap_reason.startswith("Germany currently has no comprehensive")

    def test_cross_references_in_reporting_order(self, jurisdiction_catalog):
        refs = jurisdiction_catalog.reference.cross_references_for(CountryCode.DE)
        assert [ref.area for ref in refs] == [
            "Authorization",
            "Debris Mitigation",
            "Cybersecurity",
            "Environmental Footprint",
        ]
        assert all(ref.relationship == EURelationship.GAP for ref in refs)

    def test_cross_reference_to_missing_jurisdiction(self):
        path = get_settings().catalog_dir / "jurisdiction.yaml"
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        data["jurisdictions"] = [j for j in data["jurisdictions"] if j["code"] != "NO"]
        with pytest.raises(CatalogValidationError) as exc_info:
            load_json(data)
        assert "names unknown jurisdiction 'NO'" in exc_info.value.details["errors"]


# =============================================================================
# Validation Errors
# =============================================================================

class TestCatalogValidation:
    """Malformed catalogs fail loudly at load time."""

    def test_minimal_catalog_loads(self):
        catalog = load_json(minimal_catalog())
        assert catalog.rule_ids == ["rule_a"]
        assert catalog.meta.catalog_id == "mini-debris"

    def test_content_hash_tracks_content(self):
        first = load_json(minimal_catalog())
        second = load_json(minimal_catalog(version="test-2"))
        assert first.meta.content_hash != second.meta.content_hash

    def test_duplicate_rule_ids(self):
        data = minimal_catalog()
        data["rules"].append(copy.deepcopy(data["rules"][0]))
        with pytest.raises(CatalogValidationError) as exc_info:
            load_json(data)
        assert "Duplicate rule ID" in exc_info.value.details["errors"]

    def test_unknown_profile_field(self):
        data = minimal_catalog()
        data["rules"][0]["applies_when"] = [{"op": "eq", "field": "orbit_colour", "value": "blue"}]
        with pytest.raises(CatalogValidationError) as exc_info:
            load_json(data)
        assert "orbit_colour" in exc_info.value.details["errors"]

    def test_tier_gap(self):
        data = minimal_catalog()
        data["reference"]["tier_thresholds"][1]["min_count"] = 3
        with pytest.raises(CatalogValidationError) as exc_info:
            load_json(data)
        assert "expected 2" in exc_info.value.details["errors"]

    def test_last_tier_must_be_open_ended(self):
        data = minimal_catalog()
        data["reference"]["tier_thresholds"][1]["max_count"] = 9
        with pytest.raises(CatalogValidationError):
            load_json(data)

    def test_schema_error(self):
        data = minimal_catalog()
        data["rules"][0]["severity"] = "catastrophic"
        with pytest.raises(CatalogValidationError) as exc_info:
            load_json(data)
        assert exc_info.value.code == "CX_CATALOG_VALIDATION_ERROR"

    def test_in_requires_list(self):
        data = minimal_catalog()
        data["rules"][0]["applies_when"] = [{"op": "in", "field": "orbit_type", "value": "LEO"}]
        with pytest.raises(CatalogValidationError):
            load_json(data)

    def test_unknown_key_rejected(self):
        data = minimal_catalog()
        data["rules"][0]["applicable_to"] = ["spacecraft_operation"]
        with pytest.raises(CatalogValidationError):
            load_json(data)

    def test_version_mismatch(self):
        with pytest.raises(CatalogVersionMismatch) as exc_info:
            load_json(minimal_catalog(schema_version="2.0.0"))
        assert exc_info.value.details["expected_version"] == "1.0.0"

    def test_minor_version_accepted(self):
        assert len(load_json(minimal_catalog(schema_version="1.4.0"))) == 1

    def test_non_mapping_document(self):
        with pytest.raises(CatalogLoadError):
            load_catalog_from_string("- just\n- a list\n")

    def test_unsupported_schema_type(self):
        schema = SimpleNamespace(
            domain="debris",
            catalog_id="odd",
            title="Odd",
            version="test",
            schema_version="1.0.0",
            effective_date=None,
        )
        with pytest.raises(CatalogValidationError) as exc_info:
            _convert_catalog(schema, "0" * 64)
        assert exc_info.value.message == "Unsupported catalog schema: SimpleNamespace"
        assert exc_info.value.domain == "debris"


class TestCatalogLoader:
    """Loading catalog files from a directory."""

    def test_missing_file(self, tmp_path):
        loader = CatalogLoader(catalog_dir=tmp_path)
        with pytest.raises(CatalogLoadError) as exc_info:
            loader.load(Domain.DEBRIS)
        assert exc_info.value.details["path"].endswith("debris.yaml")

    def test_json_file_used_when_no_yaml(self, tmp_path):
        (tmp_path / "debris.json").write_text(json.dumps(MINIMAL_DEBRIS_CATALOG), encoding="utf-8")
        catalog = CatalogLoader(catalog_dir=tmp_path).load("debris")
        assert catalog.meta.catalog_id == "mini-debris"

    def test_domain_mismatch(self, tmp_path):
        (tmp_path / "environmental.yaml").write_text(
            yaml.safe_dump(MINIMAL_DEBRIS_CATALOG), encoding="utf-8"
        )
        with pytest.raises(CatalogValidationError) as exc_info:
            CatalogLoader(catalog_dir=tmp_path).load(Domain.ENVIRONMENTAL)
        assert "expected 'environmental'" in exc_info.value.message

    def test_invalid_yaml(self, tmp_path):
        (tmp_path / "debris.yaml").write_text("rules: [unclosed", encoding="utf-8")
        with pytest.raises(CatalogLoadError):
            CatalogLoader(catalog_dir=tmp_path).load(Domain.DEBRIS)

    def test_catalog_dir_from_environment(self, tmp_path, monkeypatch, fresh_catalogs):
        (tmp_path / "debris.yaml").write_text(
            yaml.safe_dump(MINIMAL_DEBRIS_CATALOG), encoding="utf-8"
        )
        monkeypatch.setenv("CAELEX_CATALOG_DIR", str(tmp_path))
        get_settings.cache_clear()
        assert load_catalog(Domain.DEBRIS).meta.catalog_id == "mini-debris"
