"""In-memory store of audit records for status polling and partial updates."""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from webaudit.config.settings import get_config
from webaudit.schemas.audit import AuditResults


def new_audit_id() -> str:
    """Opaque, time-derived record id."""
    return uuid.uuid1().hex


@dataclass
class StoredAudit:
    results: AuditResults
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class AuditStore:
    _instance: AuditStore | None = None
    _lock = threading.Lock()

    def __init__(self, ttl_seconds: int = 86400) -> None:
        self.ttl_seconds = ttl_seconds
        self.audits: dict[str, StoredAudit] = {}
        self._store_lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> AuditStore:
        with cls._lock:
            if cls._instance is None:
                cls._instance = cls(ttl_seconds=get_config().store_ttl_seconds)
            return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (for testing)."""
        with cls._lock:
            cls._instance = None

    def create(self, results: AuditResults) -> AuditResults:
        with self._store_lock:
            self.audits[results.id] = StoredAudit(results=results.model_copy(deep=True))
            return results

    def get(self, audit_id: str) -> AuditResults | None:
        with self._store_lock:
            if stored := self.audits.get(audit_id):
                return stored.results.model_copy(deep=True)
            return None

    def update(self, audit_id: str, changes: dict[str, Any]) -> AuditResults | None:
        """
        Merge `changes` (field names, nested values as dicts or models) into a record.

        Returns the updated record, or None if the id is unknown.
        """
        with self._store_lock:
            stored = self.audits.get(audit_id)
            if stored is None:
                return None

            merged = stored.results.model_dump()
            for key, value in changes.items():
                merged[key] = value.model_dump() if hasattr(value, "model_dump") else value

            stored.results = AuditResults.model_validate(merged)
            return stored.results.model_copy(deep=True)

    def cleanup_expired(self) -> int:
        with self._store_lock:
            expiry_time = datetime.now(UTC) - timedelta(seconds=self.ttl_seconds)
            expired_ids = [
                audit_id
                for audit_id, stored in self.audits.items()
                if stored.created_at < expiry_time
            ]
            for audit_id in expired_ids:
                del self.audits[audit_id]
            return len(expired_ids)
