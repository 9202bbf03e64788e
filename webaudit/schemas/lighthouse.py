"""Input contract for the raw Lighthouse report.

Only the fields the normalizer reads are declared; everything else in the
Lighthouse result is ignored on validation.
"""

from pydantic import Field

from webaudit.schemas.common import CamelModel


class AuditRef(CamelModel):
    """Reference from a category to one of its audits."""

    id: str
    weight: float = 0


class RawCategory(CamelModel):
    """A Lighthouse category (performance, accessibility, ...)."""

    score: float | None = Field(default=None, ge=0, le=1)
    audit_refs: list[AuditRef] = Field(default_factory=list)


class RawAudit(CamelModel):
    """A single Lighthouse audit entry."""

    score: float | None = Field(default=None, ge=0, le=1)
    numeric_value: float | None = None
    display_value: str | None = None
    title: str = ""
    description: str = ""


class RawReport(CamelModel):
    """The slice of a Lighthouse result (LHR) used for scoring."""

    categories: dict[str, RawCategory]
    audits: dict[str, RawAudit]
