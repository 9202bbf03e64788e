"""Custom exceptions."""

from webaudit.errors.exceptions import (
    AuditError,
    AuditTimeoutError,
    LaunchError,
    LighthouseNotFoundError,
    MissingCategoryError,
    ProviderError,
    ValidationError,
)

__all__ = [
    "AuditError",
    "AuditTimeoutError",
    "LaunchError",
    "LighthouseNotFoundError",
    "MissingCategoryError",
    "ProviderError",
    "ValidationError",
]
