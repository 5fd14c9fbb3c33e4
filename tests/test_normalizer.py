"""
Tests for the Caelex Profile Normalizer

Tests cover:
- Valid input for each domain, snake_case and camelCase
- Derived attributes (constellation tier, total mass, simplified regime)
- Range, cross-field and catalog-backed checks
- Error reporting per offending field
"""
import dataclasses

import pytest

from caelex_engine.engine import normalize
from caelex_engine.exceptions import InvalidProfileError, UnknownDomainError
from caelex_engine.models import (
    ConstellationTier,
    CountryCode,
    DebrisProfile,
    Domain,
    EnvironmentalProfile,
    JurisdictionProfile,
    OrbitType,
)

from tests.conftest import (
    make_debris_input,
    make_environmental_input,
    make_jurisdiction_input,
)


def error_fields(exc_info) -> set:
    return {e["field"] for e in exc_info.value.field_errors}


# =============================================================================
# Debris
# =============================================================================

class TestDebrisNormalization:

    def test_valid_profile(self):
        profile = normalize(Domain.DEBRIS, make_debris_input())
        assert isinstance(profile, DebrisProfile)
        assert profile.orbit_type == OrbitType.LEO
        assert profile.constellation_tier == ConstellationTier.SINGLE
        assert profile.altitude_km is None

    def test_camel_case_keys(self):
        profile = normalize("debris", {
            "orbitType": "MEO",
            "satelliteCount": 12,
            "maneuverability": "limited",
            "missionDurationYears": 8,
            "deorbitStrategy": "graveyard_orbit",
            "hasPropulsion": True,
        })
        assert profile.orbit_type == OrbitType.MEO
        assert profile.constellation_tier == ConstellationTier.MEDIUM
        assert profile.has_propulsion is True

    @pytest.mark.parametrize("count,tier", [
        (1, ConstellationTier.SINGLE),
        (9, ConstellationTier.SMALL),
        (10, ConstellationTier.MEDIUM),
        (150, ConstellationTier.MEGA),
    ])
    def test_constellation_tier(self, count, tier):
        profile = normalize(Domain.DEBRIS, make_debris_input(satellite_count=count))
        assert profile.constellation_tier == tier

    def test_perigee_above_apogee(self):
        with pytest.raises(InvalidProfileError) as exc_info:
            normalize(Domain.DEBRIS, make_debris_input(perigee_km=800, apogee_km=500))
        assert error_fields(exc_info) == {"perigee_km"}
        assert exc_info.value.code == "CX_INVALID_PROFILE"

    def test_equal_perigee_and_apogee_allowed(self):
        profile = normalize(Domain.DEBRIS, make_debris_input(perigee_km=550, apogee_km=550))
        assert profile.perigee_km == 550

    def test_strategy_not_available_for_orbit(self):
        with pytest.raises(InvalidProfileError) as exc_info:
            normalize(Domain.DEBRIS, make_debris_input(
                orbit_type="GEO", deorbit_strategy="passive_decay",
            ))
        assert error_fields(exc_info) == {"deorbit_strategy"}
        assert "graveyard_orbit" in exc_info.value.field_errors[0]["message"]

    def test_all_cross_field_errors_reported_together(self):
        with pytest.raises(InvalidProfileError) as exc_info:
            normalize(Domain.DEBRIS, make_debris_input(
                orbit_type="GEO",
                deorbit_strategy="passive_decay",
                perigee_km=36000,
                apogee_km=35000,
            ))
        assert error_fields(exc_info) == {"perigee_km", "deorbit_strategy"}

    def test_zero_satellites(self):
        with pytest.raises(InvalidProfileError) as exc_info:
            normalize(Domain.DEBRIS, make_debris_input(satellite_count=0))
        assert error_fields(exc_info) == {"satellite_count"}

    def test_deep_space_is_not_a_debris_orbit(self):
        with pytest.raises(InvalidProfileError) as exc_info:
            normalize(Domain.DEBRIS, make_debris_input(orbit_type="deep_space"))
        assert "orbit_type" in error_fields(exc_info)

    def test_missing_required_field(self):
        raw = make_debris_input()
        del raw["orbit_type"]
        with pytest.raises(InvalidProfileError) as exc_info:
            normalize(Domain.DEBRIS, raw)
        assert "orbit_type" in error_fields(exc_info)

    def test_unknown_key_rejected(self):
        with pytest.raises(InvalidProfileError) as exc_info:
            normalize(Domain.DEBRIS, make_debris_input(orbit_colour="blue"))
        assert error_fields(exc_info) == {"orbit_colour"}

    def test_invalid_enum_value(self):
        with pytest.raises(InvalidProfileError) as exc_info:
            normalize(Domain.DEBRIS, make_debris_input(maneuverability="partial"))
        assert error_fields(exc_info) == {"maneuverability"}

    def test_profile_is_immutable(self):
        profile = normalize(Domain.DEBRIS, make_debris_input())
        with pytest.raises(dataclasses.FrozenInstanceError):
            profile.satellite_count = 200


# =============================================================================
# Environmental
# =============================================================================

class TestEnvironmentalNormalization:

    def test_valid_profile(self):
        profile = normalize(Domain.ENVIRONMENTAL, make_environmental_input(spacecraft_count=3))
        assert isinstance(profile, EnvironmentalProfile)
        assert profile.total_mass_kg == 1500
        assert profile.simplified_regime is False

    @pytest.mark.parametrize("mass", [0, -10])
    def test_non_positive_mass(self, mass):
        raw = make_environmental_input()
        del raw["spacecraft_mass_kg"]
        raw["spacecraftMassKg"] = mass
        with pytest.raises(InvalidProfileError) as exc_info:
            normalize(Domain.ENVIRONMENTAL, raw)
        assert error_fields(exc_info) == {"spacecraft_mass_kg"}

    def test_launch_share_above_100(self):
        with pytest.raises(InvalidProfileError) as exc_info:
            normalize(Domain.ENVIRONMENTAL, make_environmental_input(launch_share_percent=101))
        assert error_fields(exc_info) == {"launch_share_percent"}

    def test_contact_hours_above_24(self):
        with pytest.raises(InvalidProfileError) as exc_info:
            normalize(Domain.ENVIRONMENTAL, make_environmental_input(
                ground_station_count=2, daily_contact_hours=25,
            ))
        assert error_fields(exc_info) == {"daily_contact_hours"}

    def test_unknown_launch_vehicle(self):
        with pytest.raises(InvalidProfileError) as exc_info:
            normalize(Domain.ENVIRONMENTAL, make_environmental_input(launch_vehicle="saturn_v"))
        assert error_fields(exc_info) == {"launch_vehicle"}
        assert "falcon_9" in exc_info.value.field_errors[0]["message"]

    def test_unknown_propellant(self):
        with pytest.raises(InvalidProfileError) as exc_info:
            normalize(Domain.ENVIRONMENTAL, make_environmental_input(
                spacecraft_propellant="unobtainium", propellant_mass_kg=10,
            ))
        assert error_fields(exc_info) == {"spacecraft_propellant"}

    def test_propellant_mass_without_type(self):
        with pytest.raises(InvalidProfileError) as exc_info:
            normalize(Domain.ENVIRONMENTAL, make_environmental_input(propellant_mass_kg=20))
        assert error_fields(exc_info) == {"spacecraft_propellant"}

    def test_simplified_regime_for_small_enterprise(self):
        profile = normalize(Domain.ENVIRONMENTAL, make_environmental_input(is_small_enterprise=True))
        assert profile.simplified_regime is True

    def test_simplified_regime_for_light_missions(self):
        profile = normalize(Domain.ENVIRONMENTAL, make_environmental_input(spacecraft_mass_kg=50))
        assert profile.simplified_regime is True

    def test_deep_space_allowed(self):
        profile = normalize(Domain.ENVIRONMENTAL, make_environmental_input(orbit_type="deep_space"))
        assert profile.orbit_type == OrbitType.DEEP_SPACE


# =============================================================================
# Jurisdiction
# =============================================================================

class TestJurisdictionNormalization:

    def test_valid_profile(self):
        profile = normalize(Domain.JURISDICTION, make_jurisdiction_input(
            selected_jurisdictions=["FR", "NO"],
        ))
        assert isinstance(profile, JurisdictionProfile)
        assert profile.selected_jurisdictions == (CountryCode.FR, CountryCode.NO)

    def test_duplicates_removed_in_order(self):
        profile = normalize(Domain.JURISDICTION, make_jurisdiction_input(
            selected_jurisdictions=["LU", "FR", "LU"],
        ))
        assert profile.selected_jurisdictions == (CountryCode.LU, CountryCode.FR)

    def test_empty_selection(self):
        with pytest.raises(InvalidProfileError) as exc_info:
            normalize(Domain.JURISDICTION, make_jurisdiction_input(selected_jurisdictions=[]))
        assert error_fields(exc_info) == {"selected_jurisdictions"}

    def test_unknown_country(self):
        with pytest.raises(InvalidProfileError) as exc_info:
            normalize(Domain.JURISDICTION, make_jurisdiction_input(selected_jurisdictions=["ES"]))
        assert error_fields(exc_info) == {"selected_jurisdictions.0"}

    def test_optional_answers_default_to_none(self):
        profile = normalize(Domain.JURISDICTION, {
            "selectedJurisdictions": ["BE"],
            "activityType": "launch_site",
        })
        assert profile.entity_size is None
        assert profile.constellation_size is None


# =============================================================================
# General
# =============================================================================

class TestNormalizeErrors:

    def test_non_mapping_input(self):
        with pytest.raises(InvalidProfileError) as exc_info:
            normalize(Domain.DEBRIS, ["LEO"])
        assert "got list" in exc_info.value.field_errors[0]["message"]

    def test_unknown_domain(self):
        with pytest.raises(UnknownDomainError):
            normalize("asteroids", {})

    def test_error_serialization(self):
        with pytest.raises(InvalidProfileError) as exc_info:
            normalize(Domain.DEBRIS, make_debris_input(perigee_km=800, apogee_km=500))
        data = exc_info.value.to_dict()
        assert data["code"] == "CX_INVALID_PROFILE"
        assert data["domain"] == "debris"
        assert data["message"] == "Invalid debris profile: perigee_km"
        assert data["field_errors"][0]["field"] == "perigee_km"
