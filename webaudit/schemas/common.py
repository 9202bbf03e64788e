"""Common schemas and enums shared across the application."""

from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exchanged as camelCase JSON, accepting field names too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AuditStatus(str, Enum):
    """Lifecycle status of an audit record or its AI analysis."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class Device(str, Enum):
    """Emulated device for a Lighthouse run."""

    MOBILE = "mobile"
    DESKTOP = "desktop"


class Impact(str, Enum):
    """Severity label of a metric (low score = high impact)."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ValidationIssue(CamelModel):
    """A single offending field in a rejected request."""

    path: str
    message: str
