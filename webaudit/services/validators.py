"""URL and audit request validation utilities."""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import urlparse

from pydantic import HttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from webaudit.errors.exceptions import ValidationError
from webaudit.schemas.audit import AuditRequest
from webaudit.schemas.common import ValidationIssue

_http_url_adapter: TypeAdapter[HttpUrl] = TypeAdapter(HttpUrl)


def normalize_url(url: str) -> str:
    """
    Validate and normalize URL.
    Returns the canonical URL or raises ValueError.
    """
    # Remove leading/trailing whitespace
    url = url.strip()
    if not url:
        raise ValueError("URL is required and must be a non-empty string")

    # Add protocol if missing (only if no protocol at all)
    if "://" not in url:
        url = f"https://{url}"

    parsed = urlparse(url)

    # Validate scheme
    if parsed.scheme not in ("http", "https"):
        raise ValueError("URL must use http or https protocol")

    # Validate netloc (domain)
    if not parsed.netloc or " " in parsed.netloc:
        raise ValueError("URL must include a valid domain")

    # Validate port if present
    try:
        port = parsed.port
    except ValueError:
        raise ValueError("URL contains an invalid port")
    if port is not None and not (1 <= port <= 65535):
        raise ValueError(f"Port {port} is out of valid range (1-65535)")

    hostname = parsed.hostname or ""
    if hostname in ("localhost", "127.0.0.1", "0.0.0.0"):
        # Allow localhost for development
        pass
    elif re.match(r"^\d+\.\d+\.\d+\.\d+$", hostname):
        # It's an IP address, basic validation
        pass
    elif not re.match(r"^[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$", hostname):
        raise ValueError("URL domain format appears invalid")

    try:
        return str(_http_url_adapter.validate_python(url))
    except PydanticValidationError:
        raise ValueError("Please provide a valid URL")


def validate_url(url: str) -> str:
    """Validate a single URL, raising ValidationError with a `url` issue."""
    try:
        return normalize_url(url or "")
    except ValueError as e:
        raise ValidationError(
            f"Invalid URL: {e}", issues=[ValidationIssue(path="url", message=str(e))]
        ) from e


def issues_from_pydantic(error: PydanticValidationError) -> list[ValidationIssue]:
    """Flatten pydantic errors into path/message pairs."""
    return [
        ValidationIssue(
            path=".".join(str(part) for part in issue["loc"]),
            message=issue["msg"],
        )
        for issue in error.errors()
    ]


def validate_audit_request(payload: Any) -> AuditRequest:
    """
    Validate and normalize an inbound audit payload.

    Returns a frozen AuditRequest or raises ValidationError listing one
    issue per offending field. Pure function.
    """
    if not isinstance(payload, dict):
        raise ValidationError(
            issues=[ValidationIssue(path="", message="Request body must be a JSON object")]
        )

    issues: list[ValidationIssue] = []
    data = dict(payload)

    url = data.get("url")
    if isinstance(url, str):
        try:
            data["url"] = normalize_url(url)
        except ValueError as e:
            issues.append(ValidationIssue(path="url", message=str(e)))

    try:
        request = AuditRequest.model_validate(data)
    except PydanticValidationError as e:
        issues.extend(issues_from_pydantic(e))

    if issues:
        raise ValidationError(issues=issues)

    return request
