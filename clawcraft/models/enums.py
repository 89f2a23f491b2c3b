"""
Status and type enums for the application.
"""
from enum import Enum


class PlatformHint(str, Enum):
    """Target platform inferred from issue text."""

    WEB = "WEB"
    MOBILE = "MOBILE"
    UNKNOWN = "UNKNOWN"


class ScenarioType(str, Enum):
    """Scenario groups produced for every issue."""

    POSITIVE = "Positive"
    NEGATIVE = "Negative"
    EDGE = "Edge"


class PipelineState(str, Enum):
    """States a slash-command pipeline moves through."""

    RECEIVED = "received"
    ISSUE_FETCHED = "issue_fetched"
    PROMPT_BUILT = "prompt_built"
    GENERATED = "generated"
    REPAIRING = "repairing"
    VALIDATED = "validated"
    GATED = "gated"
    DELIVERED = "delivered"
    FAILED = "failed"


class ValidationErrorKind(str, Enum):
    """Why a model response was rejected."""

    SYNTAX = "syntax"
    SCHEMA = "schema"
