"""Web Quality Audit - Lighthouse-based website scoring with AI insights."""

from webaudit.core.audit import run_audit
from webaudit.core.normalizer import normalize_report
from webaudit.schemas.audit import AuditRequest, AuditResults
from webaudit.schemas.common import AuditStatus, Device
from webaudit.services.validators import validate_audit_request, validate_url

__all__ = [
    "run_audit",
    "normalize_report",
    "validate_audit_request",
    "validate_url",
    "AuditRequest",
    "AuditResults",
    "AuditStatus",
    "Device",
]
