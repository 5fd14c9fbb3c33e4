"""
Caelex Exception Hierarchy

Domain-specific exceptions for the compliance engine.
All exceptions include error codes for tracking and logging.

Exception codes follow the pattern: CX_<CATEGORY>_<SPECIFIC>
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class CaelexError(Exception):
    """
    Base exception for all Caelex engine errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (CX_*)
        details: Additional context about the error
        domain: Compliance domain the error relates to, if any
    """
    message: str
    code: str = "CX_INTERNAL_ERROR"
    details: dict[str, Any] = field(default_factory=dict)
    domain: Optional[str] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.domain:
            parts.append(f"(domain: {self.domain})")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception for logging/API responses."""
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.domain:
            result["domain"] = self.domain
        return result


# =============================================================================
# Profile Errors
# =============================================================================

@dataclass
class InvalidProfileError(CaelexError):
    """
    Raw profile failed validation.

    `field_errors` lists one {"field": ..., "message": ...} entry per
    offending input field so the host can surface them to the user.
    """
    code: str = "CX_INVALID_PROFILE"
    field_errors: list[dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field_errors:
            result["field_errors"] = self.field_errors
        return result


@dataclass
class UnknownDomainError(CaelexError):
    """Requested compliance domain is not registered."""
    code: str = "CX_UNKNOWN_DOMAIN"


# =============================================================================
# Catalog Errors
# =============================================================================

@dataclass
class CatalogLoadError(CaelexError):
    """Failed to load a rule catalog from file."""
    code: str = "CX_CATALOG_LOAD_ERROR"


@dataclass
class CatalogValidationError(CaelexError):
    """Rule catalog failed schema or integrity validation."""
    code: str = "CX_CATALOG_VALIDATION_ERROR"


@dataclass
class CatalogVersionMismatch(CaelexError):
    """Catalog schema version is not supported by this engine."""
    code: str = "CX_CATALOG_VERSION_MISMATCH"


# =============================================================================
# Condition Errors
# =============================================================================

@dataclass
class ConditionEvaluationError(CaelexError):
    """Error during condition evaluation."""
    code: str = "CX_CONDITION_ERROR"


# =============================================================================
# Status Map Errors
# =============================================================================

@dataclass
class InvalidStatusMapError(CaelexError):
    """Caller-supplied status map holds an entry that is not a valid status."""
    code: str = "CX_INVALID_STATUS_MAP"
