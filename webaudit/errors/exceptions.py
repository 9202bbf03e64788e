"""Custom exception classes for the web audit service."""

from __future__ import annotations

from webaudit.schemas.common import ValidationIssue


class AuditError(Exception):
    """Base exception for audit failures."""

    pass


class ValidationError(AuditError):
    """Exception for input validation failures."""

    def __init__(
        self, message: str = "Validation failed", issues: list[ValidationIssue] | None = None
    ):
        super().__init__(message)
        self.issues: list[ValidationIssue] = issues or []


class LaunchError(AuditError):
    """Raised when a browser session cannot be started."""

    pass


class LighthouseNotFoundError(AuditError):
    """Raised when Lighthouse CLI is not found in PATH."""

    pass


class AuditTimeoutError(AuditError):
    """Raised when a Lighthouse run exceeds its time budget."""

    pass


class MissingCategoryError(AuditError):
    """Raised when the Lighthouse report lacks a category a pillar is built from."""

    pass


class ProviderError(AuditError):
    """Exception for AI provider failures (unreachable, timed out, malformed reply)."""

    pass
