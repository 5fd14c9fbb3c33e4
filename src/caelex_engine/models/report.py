"""
Caelex Report Document

Structured, serializable report handed to the host application's
templating layer (UI, PDF, email). Rendering is not done here.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .enums import Domain

LEGAL_DISCLAIMER = (
    "This report is generated automatically from the information provided "
    "and is intended for guidance only. It does not constitute legal advice. "
    "Regulatory requirements are subject to change and to interpretation by "
    "the competent national authorities. Operators remain responsible for "
    "verifying their obligations with qualified counsel and the relevant NCA "
    "before submitting any authorization application."
)


@dataclass(frozen=True)
class ReportSection:
    """One titled body section; `content` is plain JSON-compatible data."""
    key: str
    title: str
    content: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "title": self.title, "content": self.content}


@dataclass
class ReportDocument:
    domain: Domain
    title: str
    header: dict[str, Any]
    sections: list[ReportSection] = field(default_factory=list)
    requirements_matrix: list[dict[str, Any]] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    summary: dict[str, Any] = field(default_factory=dict)
    warnings: list[dict[str, Any]] = field(default_factory=list)
    disclaimer: str = LEGAL_DISCLAIMER
    fingerprint: str = ""

    def section(self, key: str) -> ReportSection:
        for section in self.sections:
            if section.key == key:
                return section
        raise KeyError(key)

    def to_dict(self) -> dict[str, Any]:
        return {
            "domain": self.domain.value,
            "title": self.title,
            "header": self.header,
            "summary": self.summary,
            "sections": [section.to_dict() for section in self.sections],
            "requirements_matrix": self.requirements_matrix,
            "recommendations": list(self.recommendations),
            "warnings": self.warnings,
            "disclaimer": self.disclaimer,
            "fingerprint": self.fingerprint,
        }
