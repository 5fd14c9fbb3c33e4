"""
Tests for the Caelex Applicability Filter

Tests cover:
- Debris, environmental and jurisdiction rule selection
- Catalog order of the applicable set
- Fail-safe exclusion with exactly one warning per rule
"""
import logging

import pytest

from caelex_engine.engine import filter_applicable
from caelex_engine.models import (
    EQ,
    GT,
    OR,
    ConditionOperator,
    Domain,
    Predicate,
    RuleCatalog,
)

from tests.conftest import make_catalog_meta, make_condition, make_profile, make_rule


SINGLE_LEO_RULES = [
    "trackability",
    "collision_avoidance_service",
    "maneuverability",
    "debris_mitigation_plan",
    "fragmentation_avoidance",
    "end_of_life_leo",
    "passivation",
    "supply_chain_compliance",
    "on_orbit_servicing",
]

LARGE_CONSTELLATION_RULES = {
    "light_pollution",
    "large_constellation_management",
    "large_constellation_disposal",
}


def make_catalog(*rules) -> RuleCatalog:
    return RuleCatalog(meta=make_catalog_meta(Domain.DEBRIS), rules=tuple(rules), reference=None)


# =============================================================================
# Debris
# =============================================================================

class TestDebrisApplicability:

    def test_single_leo_spacecraft(self, debris_catalog):
        """LEO spacecraft operation: orbit-compatible rules, none GEO-only."""
        result = filter_applicable(debris_catalog, make_profile())
        assert result.applicable_ids == SINGLE_LEO_RULES
        assert "end_of_life_geo" in result.excluded_ids
        assert result.warnings == ()

    def test_mega_constellation_adds_constellation_rules(self, debris_catalog):
        single = filter_applicable(debris_catalog, make_profile(satellite_count=1))
        mega = filter_applicable(debris_catalog, make_profile(satellite_count=150))

        added = set(mega.applicable_ids) - set(single.applicable_ids)
        assert added == LARGE_CONSTELLATION_RULES
        assert not LARGE_CONSTELLATION_RULES & set(single.applicable_ids)

    @pytest.mark.parametrize("count,tier,added", [
        (9, "small", set()),
        (10, "medium", {"light_pollution"}),
        (49, "medium", {"light_pollution"}),
        (50, "large", {"light_pollution"}),
        (99, "large", {"light_pollution"}),
        (100, "mega", LARGE_CONSTELLATION_RULES),
    ])
    def test_constellation_rules_by_fleet_size(self, debris_catalog, count, tier, added):
        """Constellation-wide management and disposal start at 100 satellites."""
        profile = make_profile(satellite_count=count)
        assert profile.constellation_tier.value == tier

        result = filter_applicable(debris_catalog, profile)
        assert set(result.applicable_ids) - set(SINGLE_LEO_RULES) == added

    def test_large_tier_below_hundred_satellites(self, debris_catalog):
        result = filter_applicable(debris_catalog, make_profile(satellite_count=60))
        assert "large_constellation_management" not in result.applicable_ids
        assert "large_constellation_disposal" not in result.applicable_ids
        assert "large_constellation_management" in result.excluded_ids

    def test_geo_spacecraft(self, debris_catalog):
        result = filter_applicable(debris_catalog, make_profile(
            orbit_type="GEO", deorbit_strategy="graveyard_orbit",
        ))
        assert "end_of_life_geo" in result.applicable_ids
        assert "end_of_life_leo" not in result.applicable_ids
        assert "maneuverability" not in result.applicable_ids

    def test_non_maneuverable_spacecraft(self, debris_catalog):
        result = filter_applicable(debris_catalog, make_profile(maneuverability="none"))
        assert "maneuverability" not in result.applicable_ids

    def test_launch_vehicle_has_no_orbital_rules(self, debris_catalog):
        result = filter_applicable(debris_catalog, make_profile(activity_type="launch_vehicle"))
        assert result.applicable == ()
        assert len(result.excluded_ids) == len(debris_catalog)

    def test_applicable_in_catalog_order(self, debris_catalog):
        result = filter_applicable(debris_catalog, make_profile(satellite_count=150))
        order = debris_catalog.rule_ids
        positions = [order.index(rule_id) for rule_id in result.applicable_ids]
        assert positions == sorted(positions)


class TestFailSafeExclusion:
    """Missing optional attributes exclude the rule and warn exactly once."""

    @pytest.fixture
    def decay_catalog(self):
        rule = make_rule("passive_decay_lifetime", clauses=(
            EQ("deorbit_strategy", "passive_decay"),
            make_condition(
                ConditionOperator.GT,
                predicate=Predicate("altitude_km", ConditionOperator.GT, 600),
            ),
        ))
        return make_catalog(rule)

    def test_missing_altitude_excludes_rule(self, decay_catalog, caplog):
        profile = make_profile(deorbit_strategy="passive_decay")
        with caplog.at_level(logging.WARNING, logger="caelex_engine.engine.applicability"):
            result = filter_applicable(decay_catalog, profile)

        assert result.applicable_ids == []
        assert result.excluded_ids == ("passive_decay_lifetime",)
        assert len(result.warnings) == 1
        warning = result.warnings[0]
        assert warning.rule_id == "passive_decay_lifetime"
        assert warning.missing_fields == ("altitude_km",)
        assert "passive_decay_lifetime" in caplog.text

    def test_high_altitude_includes_rule(self, decay_catalog):
        profile = make_profile(deorbit_strategy="passive_decay", altitude_km=700)
        result = filter_applicable(decay_catalog, profile)
        assert result.applicable_ids == ["passive_decay_lifetime"]
        assert result.warnings == ()

    def test_low_altitude_excludes_without_warning(self, decay_catalog):
        profile = make_profile(deorbit_strategy="passive_decay", altitude_km=500)
        result = filter_applicable(decay_catalog, profile)
        assert result.applicable_ids == []
        assert result.warnings == ()

    def test_false_clause_settles_before_missing_attribute(self, decay_catalog):
        """Active deorbit fails the strategy clause; altitude never matters."""
        result = filter_applicable(decay_catalog, make_profile())
        assert result.warnings == ()

    def test_bundled_debris_catalog_needs_no_optional_fields(self, debris_catalog):
        result = filter_applicable(debris_catalog, make_profile(deorbit_strategy="passive_decay"))
        assert result.warnings == ()

    def test_one_warning_per_rule_with_several_missing_fields(self):
        rule = make_rule("needs_orbit_data", clauses=(
            GT("altitude_km", 600),
            GT("inclination_deg", 90),
        ))
        result = filter_applicable(make_catalog(rule), make_profile())
        assert len(result.warnings) == 1
        assert result.warnings[0].missing_fields == ("altitude_km", "inclination_deg")

    def test_or_with_true_branch_needs_no_attribute(self):
        rule = make_rule("either", clauses=(OR(GT("altitude_km", 600), EQ("orbit_type", "LEO")),))
        result = filter_applicable(make_catalog(rule), make_profile())
        assert result.applicable_ids == ["either"]
        assert result.warnings == ()

    def test_warning_message(self):
        rule = make_rule("needs_altitude", clauses=(GT("altitude_km", 600),))
        warning = filter_applicable(make_catalog(rule), make_profile()).warnings[0]
        assert warning.message == "Rule 'needs_altitude' excluded: profile is missing altitude_km"
        assert warning.to_dict()["missing_fields"] == ["altitude_km"]


# =============================================================================
# Environmental and Jurisdiction
# =============================================================================

class TestEnvironmentalApplicability:

    def test_spacecraft_operator_gets_all_rules(self, environmental_catalog):
        result = filter_applicable(environmental_catalog, make_profile(Domain.ENVIRONMENTAL))
        assert result.applicable_ids == environmental_catalog.rule_ids

    def test_launch_site_operator(self, environmental_catalog):
        result = filter_applicable(
            environmental_catalog,
            make_profile(Domain.ENVIRONMENTAL, operator_type="launch_site"),
        )
        assert result.applicable_ids == ["efd_declaration", "efd_methodology", "efd_reporting"]


class TestJurisdictionApplicability:

    def test_only_selected_countries(self, jurisdiction_catalog):
        profile = make_profile(Domain.JURISDICTION, selected_jurisdictions=["FR"])
        result = filter_applicable(jurisdiction_catalog, profile)
        assert result.applicable_ids
        assert {rule.jurisdiction for rule in result.applicable} == {"FR"}
        assert len(result.applicable) == 6

    def test_activity_filters_requirements(self, jurisdiction_catalog):
        profile = make_profile(
            Domain.JURISDICTION,
            selected_jurisdictions=["FR"],
            activity_type="launch_vehicle",
        )
        result = filter_applicable(jurisdiction_catalog, profile)
        assert "fr-end-of-life" not in result.applicable_ids
        assert len(result.applicable) == 5

    @pytest.mark.parametrize("activity,expected", [
        ("spacecraft_operation", []),
        ("earth_observation", ["de-data-handling", "de-security-clearance"]),
    ])
    def test_germany_covers_earth_observation_only(self, jurisdiction_catalog, activity, expected):
        profile = make_profile(
            Domain.JURISDICTION,
            selected_jurisdictions=["DE"],
            activity_type=activity,
        )
        assert filter_applicable(jurisdiction_catalog, profile).applicable_ids == expected
