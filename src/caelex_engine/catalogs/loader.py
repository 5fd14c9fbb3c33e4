"""
Caelex Rule Catalog Loader

Loads and validates rule catalogs from YAML or JSON files.

Converts Pydantic schema models to Caelex domain models and checks
catalog integrity (unique rule ids, predicate fields that exist on the
domain's profile, a contiguous constellation tier table). Catalogs are
loaded once per process and shared read-only by every evaluation.
"""
from __future__ import annotations

import dataclasses
import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, Optional, Union

import yaml
from pydantic import ValidationError

from ..canon import content_hash
from ..config import get_settings
from ..exceptions import (
    CatalogLoadError,
    CatalogValidationError,
    CatalogVersionMismatch,
    UnknownDomainError,
)
from ..models import (
    CONTAINS,
    IN,
    ActivityType,
    ApplicabilityClause,
    CatalogMeta,
    Condition,
    ConditionOperator,
    ConstellationTier,
    CountryCode,
    CrossReference,
    DebrisProfile,
    DebrisReference,
    DebrisTerms,
    DeorbitStrategy,
    Domain,
    EmissionFactors,
    EndOfLifeStrategy,
    EntityNationality,
    EnvironmentalProfile,
    EnvironmentalReference,
    EURelationship,
    GradeBand,
    ImpactGrade,
    InsuranceTerms,
    JurisdictionLaw,
    JurisdictionProfile,
    JurisdictionReference,
    LaunchVehicleProfile,
    Legislation,
    LegislationStatus,
    LiabilityRegime,
    LicensingAuthority,
    Maneuverability,
    OrbitInfo,
    OrbitType,
    Predicate,
    PropellantProfile,
    Reusability,
    Rule,
    RuleCatalog,
    Severity,
    TierThreshold,
    Toxicity,
)
from ..models.reference import frozen_mapping
from .schema import (
    SCHEMA_VERSION,
    CatalogSchema,
    ConditionSchema,
    DebrisCatalogSchema,
    DebrisReferenceSchema,
    EnvironmentalCatalogSchema,
    EnvironmentalReferenceSchema,
    JurisdictionCatalogSchema,
    JurisdictionSchema,
    RuleSchema,
    check_schema_version,
    validate_catalog,
)

logger = logging.getLogger(__name__)

PROFILE_TYPES: dict[Domain, type] = {
    Domain.DEBRIS: DebrisProfile,
    Domain.ENVIRONMENTAL: EnvironmentalProfile,
    Domain.JURISDICTION: JurisdictionProfile,
}


def coerce_domain(domain: Union[str, Domain]) -> Domain:
    """Resolve a domain name; raises UnknownDomainError."""
    if isinstance(domain, Domain):
        return domain
    try:
        return Domain(str(domain).lower())
    except ValueError:
        raise UnknownDomainError(
            message=f"Unknown compliance domain: {domain!r}",
            details={"available": [d.value for d in Domain]},
        ) from None


# =============================================================================
# Catalog Integrity Validation
# =============================================================================

def _iter_predicates(condition: Condition) -> Iterable[Predicate]:
    if condition.predicate is not None:
        yield condition.predicate
    for child in condition.children:
        yield from _iter_predicates(child)


def validate_catalog_integrity(catalog: RuleCatalog, path: str = "") -> None:
    """
    Validate a converted catalog is internally consistent.

    Catches:
    - Duplicate rule IDs
    - Predicates referencing attributes the domain's profile does not have
    - Gaps or overlaps in the constellation tier table (debris)
    - Cross references naming jurisdictions the catalog lacks

    Raises:
        ValueError: If integrity errors are found
    """
    errors = []

    seen_ids: set[str] = set()
    for rule in catalog.rules:
        if rule.id in seen_ids:
            errors.append(f"Duplicate rule ID: '{rule.id}'")
        seen_ids.add(rule.id)

    profile_fields = {f.name for f in dataclasses.fields(PROFILE_TYPES[catalog.domain])}
    clauses = [(rule.id, clause) for rule in catalog.rules for clause in rule.clauses]
    clauses += [("simplified_regime", clause) for clause in catalog.simplified_regime]
    for owner, clause in clauses:
        for predicate in _iter_predicates(clause):
            if predicate.field_path[0] not in profile_fields:
                errors.append(
                    f"'{owner}' references unknown profile field '{predicate.field}'"
                )

    if isinstance(catalog.reference, DebrisReference):
        errors.extend(_tier_table_errors(catalog.reference.tier_thresholds))

    if isinstance(catalog.reference, JurisdictionReference):
        known = set(catalog.reference.laws)
        for ref in catalog.reference.cross_references:
            for code in sorted(c.value for c in ref.countries - known):
                errors.append(f"Cross reference '{ref.area}' names unknown jurisdiction '{code}'")

    if errors:
        path_str = f" in {path}" if path else ""
        raise ValueError(
            f"Catalog integrity errors{path_str}:\n" +
            "\n".join(f"  - {e}" for e in errors)
        )


def _tier_table_errors(thresholds: tuple[TierThreshold, ...]) -> list[str]:
    """Tier bands must start at 1, be contiguous and end open-ended."""
    errors = []
    expected_min = 1
    for index, threshold in enumerate(thresholds):
        if threshold.min_count != expected_min:
            errors.append(
                f"Tier '{threshold.tier.value}' starts at {threshold.min_count}, "
                f"expected {expected_min}"
            )
        is_last = index == len(thresholds) - 1
        if threshold.max_count is None:
            if not is_last:
                errors.append(f"Tier '{threshold.tier.value}' is open-ended but not last")
            break
        if is_last:
            errors.append(f"Last tier '{threshold.tier.value}' must be open-ended")
        expected_min = threshold.max_count + 1

    tiers = [t.tier for t in thresholds]
    if len(set(tiers)) != len(tiers):
        errors.append("Tier table lists a tier more than once")
    return errors


# =============================================================================
# Schema to Model Converters
# =============================================================================

def _freeze_value(value: Any) -> Any:
    if isinstance(value, list):
        return tuple(value)
    return value


def _convert_condition(schema: ConditionSchema) -> Condition:
    """Convert ConditionSchema to Condition model."""
    op = ConditionOperator(schema.op)
    logical_ops = {ConditionOperator.AND, ConditionOperator.OR, ConditionOperator.NOT}

    if op in logical_ops:
        children = tuple(_convert_condition(c) for c in (schema.children or []))
        return Condition(
            op=op,
            children=children,
            id=schema.id,
            description=schema.description,
        )
    else:
        predicate = Predicate(
            field=schema.field or "",
            operator=op,
            value=_freeze_value(schema.value),
            description=schema.description,
        )
        return Condition(
            op=op,
            predicate=predicate,
            id=schema.id,
            description=schema.description,
        )


def _convert_rule(schema: RuleSchema) -> Rule:
    """Convert RuleSchema to Rule model."""
    return Rule(
        id=schema.id,
        title=schema.title,
        citation=schema.citation,
        clauses=tuple(_convert_condition(c) for c in schema.applies_when),
        severity=Severity(schema.severity) if schema.severity else None,
        category=schema.category,
        mandatory=schema.mandatory,
        tags=frozenset(schema.tags),
        standard=schema.standard,
        description=schema.description,
        compliance_question=schema.compliance_question,
        tips=tuple(schema.tips),
        evidence_required=tuple(schema.evidence_required),
    )


def _convert_debris_reference(schema: DebrisReferenceSchema) -> DebrisReference:
    """Convert DebrisReferenceSchema to DebrisReference model."""
    return DebrisReference(
        tier_thresholds=tuple(
            TierThreshold(
                tier=ConstellationTier(t.tier),
                min_count=t.min_count,
                max_count=t.max_count,
            )
            for t in schema.tier_thresholds
        ),
        deorbit_options=frozen_mapping({
            OrbitType(orbit): tuple(DeorbitStrategy(s) for s in strategies)
            for orbit, strategies in schema.deorbit_options.items()
        }),
        orbits=frozen_mapping({
            OrbitType(orbit): OrbitInfo(label=info.label, altitude_range=info.altitude_range)
            for orbit, info in schema.orbits.items()
        }),
        deorbit_descriptions=frozen_mapping({
            DeorbitStrategy(k): v for k, v in schema.deorbit_descriptions.items()
        }),
        collision_avoidance_strategies=frozen_mapping({
            Maneuverability(k): v for k, v in schema.collision_avoidance_strategies.items()
        }),
        default_service_provider=schema.default_service_provider,
    )


def _convert_environmental_reference(
    schema: EnvironmentalReferenceSchema,
) -> EnvironmentalReference:
    """Convert EnvironmentalReferenceSchema to EnvironmentalReference model."""
    factors = schema.factors
    return EnvironmentalReference(
        propellants=frozen_mapping({
            key: PropellantProfile(
                key=key,
                name=p.name,
                gwp_per_kg=p.gwp_per_kg,
                odp_per_kg=p.odp_per_kg,
                toxicity=Toxicity(p.toxicity),
                rating=ImpactGrade(p.rating),
            )
            for key, p in schema.propellants.items()
        }),
        launch_vehicles=frozen_mapping({
            key: LaunchVehicleProfile(
                key=key,
                name=v.name,
                gwp_kg=v.gwp_kg,
                odp_kg=v.odp_kg,
                reusability=Reusability(v.reusability),
                grade=ImpactGrade(v.grade),
                provider=v.provider,
            )
            for key, v in schema.launch_vehicles.items()
        }),
        grade_bands=tuple(
            GradeBand(grade=ImpactGrade(b.grade), label=b.label, max_intensity=b.max_intensity)
            for b in schema.grade_bands
        ),
        grade_deductions=frozen_mapping({
            ImpactGrade(k): v for k, v in schema.grade_deductions.items()
        }),
        factors=EmissionFactors(
            manufacturing_gwp_per_kg=factors.manufacturing_gwp_per_kg,
            manufacturing_odp_per_kg=factors.manufacturing_odp_per_kg,
            raw_material_gwp_share=factors.raw_material_gwp_share,
            raw_material_odp_share=factors.raw_material_odp_share,
            transport_distance_km=factors.transport_distance_km,
            transport_gwp_per_kg_km=factors.transport_gwp_per_kg_km,
            ground_station_gwp_per_hour=factors.ground_station_gwp_per_hour,
            mission_control_gwp_per_year=factors.mission_control_gwp_per_year,
            end_of_life_gwp=frozen_mapping({
                EndOfLifeStrategy(k): v for k, v in factors.end_of_life_gwp.items()
            }),
            end_of_life_odp=frozen_mapping({
                EndOfLifeStrategy(k): v for k, v in factors.end_of_life_odp.items()
            }),
            hotspot_share=factors.hotspot_share,
        ),
    )


def _convert_jurisdiction(schema: JurisdictionSchema) -> tuple[JurisdictionLaw, list[Rule]]:
    """
    Convert one country record.

    Returns the law record plus its requirements as rules. A requirement
    applies when its country is selected and the profile's activity type
    is one it lists.
    """
    code = CountryCode(schema.code)
    rules = [
        Rule(
            id=req.id,
            title=req.title,
            citation=req.citation,
            clauses=(
                CONTAINS("selected_jurisdictions", code.value),
                IN("activity_type", list(req.applies_to)),
            ),
            category=req.category,
            mandatory=req.mandatory,
            jurisdiction=code.value,
            description=req.description,
        )
        for req in schema.requirements
    ]

    law = JurisdictionLaw(
        code=code,
        name=schema.name,
        flag=schema.flag,
        eu_member=schema.eu_member,
        legislation=Legislation(
            name=schema.legislation.name,
            name_local=schema.legislation.name_local,
            year_enacted=schema.legislation.year_enacted,
            year_amended=schema.legislation.year_amended,
            status=LegislationStatus(schema.legislation.status),
        ),
        authority=LicensingAuthority(
            name=schema.authority.name,
            website=schema.authority.website,
            contact_email=schema.authority.contact_email,
        ),
        insurance=InsuranceTerms(
            mandatory=schema.insurance.mandatory,
            government_indemnification=schema.insurance.government_indemnification,
            liability_regime=LiabilityRegime(schema.insurance.liability_regime),
            minimum_coverage=schema.insurance.minimum_coverage,
            liability_cap=schema.insurance.liability_cap,
        ),
        debris=DebrisTerms(
            deorbit_required=schema.debris.deorbit_required,
            mitigation_plan=schema.debris.mitigation_plan,
            passivation_required=schema.debris.passivation_required,
            collision_avoidance=schema.debris.collision_avoidance,
            deorbit_timeline=schema.debris.deorbit_timeline,
        ),
        processing_weeks=(schema.licensing.processing_weeks[0], schema.licensing.processing_weeks[1]),
        eu_relationship=EURelationship(schema.eu_space_act.relationship),
        eu_description=schema.eu_space_act.description,
        applicability=tuple(
            ApplicabilityClause(
                id=clause.id,
                description=clause.description,
                applies=clause.applies,
                activity_types=(
                    frozenset(ActivityType(a) for a in clause.activity_types)
                    if clause.activity_types is not None else None
                ),
                entity_types=(
                    frozenset(EntityNationality(e) for e in clause.entity_types)
                    if clause.entity_types is not None else None
                ),
                citation=clause.citation,
            )
            for clause in schema.applicability
        ),
        remote_sensing_license=schema.licensing.remote_sensing_license,
        application_fee=schema.licensing.application_fee,
        annual_fee=schema.licensing.annual_fee,
        national_registry=schema.licensing.national_registry,
        eu_key_articles=tuple(schema.eu_space_act.key_articles),
        eu_transition_notes=schema.eu_space_act.transition_notes,
        covered_activities=(
            frozenset(ActivityType(a) for a in schema.covered_activities)
            if schema.covered_activities is not None else None
        ),
        coverage_gap_reason=schema.coverage_gap_reason,
        space_resources_law=schema.space_resources_law,
        small_operator_flexibility=schema.small_operator_flexibility,
    )
    return law, rules


def _convert_catalog(schema: CatalogSchema, digest: str) -> RuleCatalog:
    """Convert a validated catalog schema to a RuleCatalog."""
    meta = CatalogMeta(
        domain=Domain(schema.domain),
        catalog_id=schema.catalog_id,
        title=schema.title,
        version=schema.version,
        schema_version=schema.schema_version,
        content_hash=digest,
        effective_date=schema.effective_date,
    )

    if isinstance(schema, DebrisCatalogSchema):
        return RuleCatalog(
            meta=meta,
            rules=tuple(_convert_rule(r) for r in schema.rules),
            reference=_convert_debris_reference(schema.reference),
            simplified_regime=tuple(_convert_condition(c) for c in schema.simplified_regime_when),
        )

    if isinstance(schema, EnvironmentalCatalogSchema):
        return RuleCatalog(
            meta=meta,
            rules=tuple(_convert_rule(r) for r in schema.rules),
            reference=_convert_environmental_reference(schema.reference),
            simplified_regime=tuple(_convert_condition(c) for c in schema.simplified_regime_when),
        )

    if not isinstance(schema, JurisdictionCatalogSchema):
        raise CatalogValidationError(
            message=f"Unsupported catalog schema: {type(schema).__name__}",
            domain=meta.domain.value,
        )
    laws: dict[CountryCode, JurisdictionLaw] = {}
    rules: list[Rule] = []
    for jurisdiction in schema.jurisdictions:
        law, country_rules = _convert_jurisdiction(jurisdiction)
        if law.code in laws:
            raise ValueError(f"Duplicate jurisdiction: '{law.code.value}'")
        laws[law.code] = law
        rules.extend(country_rules)

    return RuleCatalog(
        meta=meta,
        rules=tuple(rules),
        reference=JurisdictionReference(
            laws=frozen_mapping(laws),
            maturity_reference_year=schema.reference.maturity_reference_year,
            max_recommendations=schema.reference.max_recommendations,
            cross_references=tuple(
                CrossReference(
                    area=ref.area,
                    relationship=EURelationship(ref.relationship),
                    countries=frozenset(CountryCode(c) for c in ref.countries),
                    eu_articles=tuple(ref.eu_articles),
                )
                for ref in schema.reference.cross_references
            ),
        ),
    )


# =============================================================================
# Catalog Loader
# =============================================================================

class CatalogLoader:
    """
    Loads rule catalogs from YAML or JSON files.

    Usage:
        loader = CatalogLoader()
        catalog = loader.load(Domain.DEBRIS)
        catalog = loader.load_path("path/to/custom_debris.yaml")
    """

    def __init__(
        self,
        catalog_dir: Optional[Union[str, Path]] = None,
        strict_version: bool = True,
    ):
        """
        Initialize the loader.

        Args:
            catalog_dir: Directory holding `<domain>.yaml` files
                (defaults to the configured catalog directory)
            strict_version: If True, reject catalogs with incompatible schema versions
        """
        self.catalog_dir = Path(catalog_dir) if catalog_dir else get_settings().catalog_dir
        self.strict_version = strict_version

    def path_for(self, domain: Union[str, Domain]) -> Path:
        """Catalog file for a domain; YAML preferred over JSON."""
        domain = coerce_domain(domain)
        yaml_path = self.catalog_dir / f"{domain.value}.yaml"
        json_path = self.catalog_dir / f"{domain.value}.json"
        if not yaml_path.exists() and json_path.exists():
            return json_path
        return yaml_path

    def load(self, domain: Union[str, Domain]) -> RuleCatalog:
        """
        Load the catalog for a domain.

        Raises:
            UnknownDomainError: If the domain is not registered
            CatalogLoadError: If the file cannot be read
            CatalogValidationError: If validation fails
            CatalogVersionMismatch: If schema version incompatible
        """
        domain = coerce_domain(domain)
        catalog = self.load_path(self.path_for(domain))
        if catalog.domain != domain:
            raise CatalogValidationError(
                message=(
                    f"Catalog file declares domain '{catalog.domain.value}', "
                    f"expected '{domain.value}'"
                ),
                details={"path": str(self.path_for(domain))},
                domain=domain.value,
            )
        return catalog

    def load_path(self, path: Union[str, Path]) -> RuleCatalog:
        """Load a catalog from an explicit file path."""
        path = Path(path)

        try:
            data = self._load_file(path)
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise CatalogLoadError(
                message=f"Failed to load rule catalog: {e}",
                details={"path": str(path), "error": str(e)},
            ) from e

        catalog = self.load_data(data, source=str(path))
        logger.info(
            "Loaded catalog %s v%s (%d rules)",
            catalog.meta.catalog_id,
            catalog.meta.version,
            len(catalog),
            extra={
                "domain": catalog.domain.value,
                "catalog_path": str(path),
                "content_hash": catalog.meta.content_hash[:12],
            },
        )
        return catalog

    def load_data(self, data: Any, source: str = "") -> RuleCatalog:
        """Validate and convert an already-parsed catalog document."""
        if not isinstance(data, dict):
            raise CatalogLoadError(
                message="Rule catalog must be a mapping at the top level",
                details={"path": source},
            )

        if self.strict_version and not check_schema_version(data):
            catalog_version = data.get("schema_version", "unknown")
            raise CatalogVersionMismatch(
                message=(
                    f"Schema version mismatch: catalog has {catalog_version}, "
                    f"expected {SCHEMA_VERSION}"
                ),
                details={
                    "catalog_version": catalog_version,
                    "expected_version": SCHEMA_VERSION,
                    "path": source,
                },
            )

        try:
            schema = validate_catalog(data)
        except ValidationError as e:
            raise CatalogValidationError(
                message=f"Rule catalog validation failed: {e.error_count()} errors",
                details={"errors": e.errors(include_url=False), "path": source},
                domain=data.get("domain"),
            ) from e
        except ValueError as e:
            raise CatalogValidationError(
                message=str(e),
                details={"path": source},
            ) from e

        try:
            catalog = _convert_catalog(schema, content_hash(data))
            validate_catalog_integrity(catalog, source)
        except ValueError as e:
            raise CatalogValidationError(
                message="Catalog integrity validation failed",
                details={"errors": str(e), "path": source},
                domain=schema.domain,
            ) from e

        return catalog

    def _load_file(self, path: Path) -> Any:
        """Load data from YAML or JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                return json.load(f)
            return yaml.safe_load(f)


# =============================================================================
# Convenience Functions
# =============================================================================

@lru_cache(maxsize=None)
def _cached_catalog(domain: Domain, catalog_dir: Path) -> RuleCatalog:
    return CatalogLoader(catalog_dir=catalog_dir).load(domain)


def load_catalog(domain: Union[str, Domain]) -> RuleCatalog:
    """
    Process-wide catalog for a domain.

    The file is read and validated on first use; later calls return the
    same immutable catalog.
    """
    return _cached_catalog(coerce_domain(domain), get_settings().catalog_dir)


def clear_catalog_cache() -> None:
    """Drop cached catalogs (tests and catalog reloads)."""
    _cached_catalog.cache_clear()


def load_catalog_from_string(content: str, format: str = "yaml") -> RuleCatalog:
    """
    Load a catalog from a string.

    Args:
        content: YAML or JSON string
        format: "yaml" or "json"
    """
    if format.lower() == "json":
        data = json.loads(content)
    else:
        data = yaml.safe_load(content)
    return CatalogLoader(strict_version=True).load_data(data, source="<string>")
