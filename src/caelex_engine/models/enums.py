"""
Caelex Enumerations

All enumeration types used throughout the compliance engine.
Organized by domain area for clarity.

All enums inherit from (str, Enum) for JSON serialization compatibility.
"""
from __future__ import annotations

from enum import Enum


# =============================================================================
# Engine
# =============================================================================

class Domain(str, Enum):
    """Compliance domains served by the engine."""
    DEBRIS = "debris"
    ENVIRONMENTAL = "environmental"
    JURISDICTION = "jurisdiction"


class RequirementStatus(str, Enum):
    """Per-rule compliance status, owned and persisted by the caller."""
    NOT_ASSESSED = "not_assessed"
    COMPLIANT = "compliant"
    NON_COMPLIANT = "non_compliant"
    NOT_APPLICABLE = "not_applicable"


class Severity(str, Enum):
    """Rule severity for checklist-style catalogs."""
    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"


class ConditionOperator(str, Enum):
    """Operators for condition evaluation."""
    # Logical operators (for composing conditions)
    AND = "and"
    OR = "or"
    NOT = "not"

    # Comparison operators (for predicates)
    EQ = "eq"                # Equal
    NE = "ne"                # Not equal
    GT = "gt"                # Greater than
    LT = "lt"                # Less than
    GTE = "gte"              # Greater than or equal
    LTE = "lte"              # Less than or equal
    IN = "in"                # In list
    NOT_IN = "not_in"        # Not in list
    CONTAINS = "contains"    # List field contains value
    IS_TRUE = "is_true"
    IS_FALSE = "is_false"
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"
    BETWEEN = "between"      # Value between two bounds (inclusive)


# =============================================================================
# Orbits and Missions
# =============================================================================

class OrbitType(str, Enum):
    """Orbit regimes."""
    LEO = "LEO"
    MEO = "MEO"
    GEO = "GEO"
    HEO = "HEO"
    CISLUNAR = "cislunar"
    DEEP_SPACE = "deep_space"  # environmental profiles only


class ConstellationTier(str, Enum):
    """Constellation size bucket derived from satellite count."""
    SINGLE = "single"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    MEGA = "mega"


class Maneuverability(str, Enum):
    """Spacecraft maneuvering capability."""
    FULL = "full"
    LIMITED = "limited"
    NONE = "none"


class DeorbitStrategy(str, Enum):
    """Post-mission disposal strategies for debris mitigation."""
    ACTIVE_DEORBIT = "active_deorbit"
    PASSIVE_DECAY = "passive_decay"
    GRAVEYARD_ORBIT = "graveyard_orbit"
    ADR_CONTRACTED = "adr_contracted"


# =============================================================================
# Environmental Footprint
# =============================================================================

class OperatorType(str, Enum):
    """Operator categories used by EFD requirements."""
    SPACECRAFT = "spacecraft"
    LAUNCH = "launch"
    LAUNCH_SITE = "launch_site"


class EndOfLifeStrategy(str, Enum):
    """Disposal strategies used for end-of-life emission factors."""
    CONTROLLED_DEORBIT = "controlled_deorbit"
    PASSIVE_DECAY = "passive_decay"
    GRAVEYARD_ORBIT = "graveyard_orbit"
    RETRIEVAL = "retrieval"


class LifecyclePhase(str, Enum):
    """Lifecycle phases, in reporting order."""
    RAW_MATERIAL_EXTRACTION = "raw_material_extraction"
    MANUFACTURING = "manufacturing"
    TRANSPORT_TO_LAUNCH = "transport_to_launch"
    LAUNCH = "launch"
    OPERATIONS = "operations"
    END_OF_LIFE = "end_of_life"


class ImpactGrade(str, Enum):
    """Carbon intensity grade."""
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"


class Toxicity(str, Enum):
    """Propellant toxicity class."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"


class Reusability(str, Enum):
    """Launch vehicle reusability."""
    NONE = "none"
    PARTIAL = "partial"
    FULL = "full"


# =============================================================================
# National Space Law
# =============================================================================

class CountryCode(str, Enum):
    """Jurisdictions covered by the national space-law catalog."""
    FR = "FR"
    UK = "UK"
    BE = "BE"
    NL = "NL"
    LU = "LU"
    AT = "AT"
    DK = "DK"
    DE = "DE"
    IT = "IT"
    NO = "NO"


class ActivityType(str, Enum):
    """Space activity categories."""
    SPACECRAFT_OPERATION = "spacecraft_operation"
    LAUNCH_VEHICLE = "launch_vehicle"
    LAUNCH_SITE = "launch_site"
    IN_ORBIT_SERVICES = "in_orbit_services"
    EARTH_OBSERVATION = "earth_observation"
    SATELLITE_COMMUNICATIONS = "satellite_communications"
    SPACE_RESOURCES = "space_resources"


class EntityNationality(str, Enum):
    """Operator nationality relative to the jurisdiction."""
    DOMESTIC = "domestic"
    EU_OTHER = "eu_other"
    NON_EU = "non_eu"
    ESA_MEMBER = "esa_member"


class EntitySize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class PrimaryOrbit(str, Enum):
    LEO = "LEO"
    MEO = "MEO"
    GEO = "GEO"
    BEYOND = "beyond"


class LicensingStatus(str, Enum):
    NEW_APPLICATION = "new_application"
    EXISTING_LICENSE = "existing_license"
    RENEWAL = "renewal"
    PRE_ASSESSMENT = "pre_assessment"


class LegislationStatus(str, Enum):
    ENACTED = "enacted"
    DRAFT = "draft"
    PENDING = "pending"
    NONE = "none"


class LiabilityRegime(str, Enum):
    UNLIMITED = "unlimited"
    CAPPED = "capped"
    TIERED = "tiered"
    NEGOTIABLE = "negotiable"


class EURelationship(str, Enum):
    """How a national regime relates to the EU Space Act."""
    SUPERSEDED = "superseded"
    COMPLEMENTARY = "complementary"
    PARALLEL = "parallel"
    GAP = "gap"
