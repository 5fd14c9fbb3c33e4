"""
Tests for the Caelex Environmental Footprint Calculator

Tests cover:
- Lifecycle phase emissions and totals
- Grade lookup, hotspots and carbon intensity
- Simplified regime as a flag only
- Recommendation and required-action tables
- EFD score and supplier data requests
- Display helpers
"""
import pytest

from caelex_engine.engine import calculate_footprint, format_emissions, format_mass
from caelex_engine.models import Domain, ImpactGrade, LifecyclePhase

from tests.conftest import make_profile


RIDESHARE = "Rideshare launches offer lower per-payload environmental impact."
REUSABLE = (
    "Consider launch providers with reusable vehicles to reduce launch "
    "emissions by 30-50%."
)


@pytest.fixture
def reference(environmental_catalog):
    return environmental_catalog.reference


def footprint(reference, **overrides):
    return calculate_footprint(make_profile(Domain.ENVIRONMENTAL, **overrides), reference)


# =============================================================================
# Lifecycle Totals
# =============================================================================

class TestLifecycleEmissions:
    """500 kg spacecraft, 10% of a Falcon 9, 5 years, controlled deorbit."""

    def test_phase_contributions(self, reference):
        result = footprint(reference)
        expected = {
            LifecyclePhase.RAW_MATERIAL_EXTRACTION: 22500,
            LifecyclePhase.MANUFACTURING: 15000,
            LifecyclePhase.TRANSPORT_TO_LAUNCH: 1600,
            LifecyclePhase.LAUNCH: 42500,
            LifecyclePhase.OPERATIONS: 4250,
            LifecyclePhase.END_OF_LIFE: 250,
        }
        for phase, gwp in expected.items():
            assert result.phase(phase).gwp_kg_co2eq == pytest.approx(gwp)

    def test_total_is_sum_of_phases(self, reference):
        result = footprint(reference)
        assert result.total_gwp == pytest.approx(86100)
        assert result.total_gwp == pytest.approx(sum(p.gwp_kg_co2eq for p in result.phases))

    def test_grade_from_intensity(self, reference):
        result = footprint(reference)
        assert result.carbon_intensity == pytest.approx(172.2)
        assert result.grade == ImpactGrade.B
        assert result.grade_label == "Good"

    def test_percentages_sum_to_100(self, reference):
        result = footprint(reference)
        assert sum(p.percent_of_total for p in result.phases) == pytest.approx(100)
        assert result.phase(LifecyclePhase.LAUNCH).percent_of_total == pytest.approx(49.36, abs=0.01)

    def test_hotspots_above_quarter_share(self, reference):
        assert footprint(reference).hotspots == ["Raw Material Extraction", "Launch"]

    def test_ground_segment_operations(self, reference):
        result = footprint(reference, ground_station_count=2, daily_contact_hours=12)
        # 2 stations * 12 h * 365 d * 15 / 24 + 850, per year for 5 years
        assert result.phase(LifecyclePhase.OPERATIONS).gwp_kg_co2eq == pytest.approx(
            (2 * 12 * 365 * 15 / 24 + 850) * 5
        )

    def test_propellant_adds_to_launch(self, reference):
        result = footprint(reference, spacecraft_propellant="hydrazine", propellant_mass_kg=100)
        assert result.phase(LifecyclePhase.LAUNCH).gwp_kg_co2eq == pytest.approx(42500 + 320)

    def test_spacecraft_count_scales_mass(self, reference):
        single = footprint(reference)
        triple = footprint(reference, spacecraft_count=3)
        assert triple.phase(LifecyclePhase.MANUFACTURING).gwp_kg_co2eq == pytest.approx(
            3 * single.phase(LifecyclePhase.MANUFACTURING).gwp_kg_co2eq
        )

    def test_retrieval_end_of_life(self, reference):
        result = footprint(reference, deorbit_strategy="retrieval")
        assert result.phase(LifecyclePhase.END_OF_LIFE).gwp_kg_co2eq == pytest.approx(7500)

    def test_deterministic(self, reference):
        assert footprint(reference).to_dict() == footprint(reference).to_dict()


# =============================================================================
# Simplified Regime
# =============================================================================

class TestSimplifiedRegime:

    def test_flag_does_not_change_emissions(self, reference):
        full = footprint(reference)
        simplified = footprint(reference, is_small_enterprise=True)

        assert full.is_simplified_assessment is False
        assert simplified.is_simplified_assessment is True
        assert simplified.total_gwp == full.total_gwp
        assert simplified.grade == full.grade

    def test_required_actions(self, reference):
        assert footprint(reference).required_actions == ["Full lifecycle assessment required by 2030"]
        assert footprint(reference, is_research_education=True).required_actions == [
            "Screening LCA sufficient until 2032",
        ]


# =============================================================================
# Recommendations and Actions
# =============================================================================

class TestRecommendations:

    def test_rideshare_for_launch_dominated_footprint(self, reference):
        assert footprint(reference).recommendations == [RIDESHARE]

    def test_expendable_vehicle_recommendation(self, reference):
        result = footprint(reference, launch_vehicle="vega_c", launch_share_percent=60)
        assert result.recommendations[0] == REUSABLE
        assert RIDESHARE not in result.recommendations

    def test_hydrazine(self, reference):
        result = footprint(reference, spacecraft_propellant="hydrazine", propellant_mass_kg=50)
        assert any(r.startswith("Replace hydrazine") for r in result.recommendations)
        assert "Evaluate green propellant alternatives" in result.required_actions

    def test_mmh_needs_green_propellant_action_only(self, reference):
        result = footprint(reference, spacecraft_propellant="monomethylhydrazine", propellant_mass_kg=50)
        assert not any(r.startswith("Replace hydrazine") for r in result.recommendations)
        assert "Evaluate green propellant alternatives" in result.required_actions

    def test_many_ground_stations(self, reference):
        result = footprint(reference, ground_station_count=4, daily_contact_hours=1)
        assert any(r.startswith("Consolidate ground station network") for r in result.recommendations)

    def test_manufacturing_dominated_footprint(self, reference):
        # Tiny launch share leaves manufacturing above 30%
        result = footprint(reference, launch_share_percent=1)
        assert "Request environmental data from key suppliers per Art. 99." in result.recommendations

    def test_high_intensity_improvement_plan(self, reference):
        # 20 kg on a full Electron: 35000 kg launch alone is 1750 kg/kg
        result = footprint(reference, spacecraft_mass_kg=20, launch_vehicle="electron", launch_share_percent=100)
        assert result.grade == ImpactGrade.E
        assert "Consider environmental improvement plan" in result.required_actions
        assert any(r.startswith("Current carbon intensity exceeds") for r in result.recommendations)

    def test_passive_decay_from_high_leo(self, reference):
        result = footprint(reference, deorbit_strategy="passive_decay", altitude_km=750)
        assert any(r.startswith("Passive decay may exceed 25-year") for r in result.recommendations)

    def test_passive_decay_without_altitude_gives_no_advice(self, reference):
        result = footprint(reference, deorbit_strategy="passive_decay")
        assert not any(r.startswith("Passive decay") for r in result.recommendations)


# =============================================================================
# EFD Score and Supplier Requests
# =============================================================================

class TestEFDScore:

    def test_grade_deduction(self, reference):
        assert footprint(reference).efd_score == 95

    def test_simplified_penalty(self, reference):
        assert footprint(reference, is_small_enterprise=True).efd_score == 85

    def test_action_penalty_and_floor(self, reference):
        result = footprint(
            reference,
            spacecraft_mass_kg=20,
            launch_vehicle="electron",
            launch_share_percent=100,
            spacecraft_propellant="hydrazine",
            propellant_mass_kg=5,
        )
        # E (-50), simplified under 100 kg (-10), three actions (-15)
        assert len(result.required_actions) == 3
        assert result.efd_score == 25


class TestSupplierRequests:

    def test_three_templates_without_propulsion(self, reference):
        requests = footprint(reference).supplier_requests
        assert [r.component_type for r in requests] == [
            "Spacecraft Structure",
            "Solar Arrays",
            "Electronics/Avionics",
        ]
        assert all(r.deadline_months == 3 and r.status == "pending" for r in requests)

    def test_propulsion_template(self, reference):
        requests = footprint(reference, spacecraft_propellant="xenon", propellant_mass_kg=10).supplier_requests
        assert requests[-1].component_type == "Propulsion System"


class TestFootprintSerialization:

    def test_to_dict_keys(self, reference):
        data = footprint(reference).to_dict()
        assert data["grade"] == "B"
        assert data["total_gwp_display"] == "86.1 t CO2eq"
        assert len(data["lifecycle_breakdown"]) == 6
        assert data["lifecycle_breakdown"][3]["phase"] == "launch"
        assert data["supplier_requests"][0]["deadline_months"] == 3


# =============================================================================
# Display Helpers
# =============================================================================

class TestFormatting:

    @pytest.mark.parametrize("mass,expected", [
        (500, "500 kg"),
        (999.4, "999 kg"),
        (1000, "1.0 tonnes"),
        (1500, "1.5 tonnes"),
    ])
    def test_format_mass(self, mass, expected):
        assert format_mass(mass) == expected

    @pytest.mark.parametrize("kg,expected", [
        (250, "250 kg CO2eq"),
        (86100, "86.1 t CO2eq"),
        (1_240_000, "1.2 kt CO2eq"),
    ])
    def test_format_emissions(self, kg, expected):
        assert format_emissions(kg) == expected
