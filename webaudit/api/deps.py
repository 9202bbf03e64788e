"""API dependencies for dependency injection."""

from webaudit.config.settings import Config, get_config
from webaudit.core.ai import Enricher, build_enricher
from webaudit.services.store import AuditStore

_enricher: Enricher | None = None


def get_settings() -> Config:
    """Get application settings dependency."""
    return get_config()


def get_audit_store() -> AuditStore:
    """Get audit store dependency."""
    return AuditStore.get_instance()


def get_enricher() -> Enricher:
    """Get the AI enricher, built once from configuration."""
    global _enricher
    if _enricher is None:
        _enricher = build_enricher(get_config())
    return _enricher


def reset_enricher() -> None:
    """Drop the cached enricher (useful for testing)."""
    global _enricher
    _enricher = None
