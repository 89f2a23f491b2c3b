"""
Validation of raw model output against the GeneratedArtifact contract.
"""
from dataclasses import dataclass
from typing import Optional
import json
import re
from pydantic import ValidationError
from clawcraft.models.artifact import GeneratedArtifact
from clawcraft.models.enums import ValidationErrorKind


_CODE_FENCE = re.compile(r"^```(?:json)?\s*([\s\S]*?)\s*```$", re.IGNORECASE)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one model response."""

    ok: bool
    artifact: Optional[GeneratedArtifact] = None
    reason: Optional[str] = None
    error_kind: Optional[ValidationErrorKind] = None


def unwrap_code_fence(text: str) -> str:
    """Return the fenced body if the whole string is one ``` block, else the string."""
    match = _CODE_FENCE.match(text)
    return match.group(1) if match else text


def _first_violation(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid value")
    return f"{location}: {message}" if location else message


def validate_response(raw_text: Optional[str]) -> ValidationResult:
    """
    Parse and strictly validate a model response.

    Args:
        raw_text: Text returned by the model

    Returns:
        ValidationResult with the artifact on success, or the reason and
        whether the failure was syntactic (not JSON) or a schema mismatch
    """
    cleaned = unwrap_code_fence((raw_text or "").strip())

    try:
        data = json.loads(cleaned)
    except (json.JSONDecodeError, RecursionError) as e:
        # RecursionError: nesting too deep for the decoder
        return ValidationResult(ok=False, reason=str(e), error_kind=ValidationErrorKind.SYNTAX)

    try:
        artifact = GeneratedArtifact.model_validate(data)
    except ValidationError as e:
        return ValidationResult(ok=False, reason=_first_violation(e), error_kind=ValidationErrorKind.SCHEMA)

    return ValidationResult(ok=True, artifact=artifact)
