"""
Strict output contract for the LLM generation step.

The model's response is untrusted input. Every level rejects unknown keys and
no value is coerced (a "true" string is not a boolean). An instance of
GeneratedArtifact only exists after a response passed this contract.
"""
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr


MIN_SCENARIOS_PER_GROUP = 5
MIN_EXPORT_FILES = 2


class _StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class Scenario(_StrictModel):
    """A single Gherkin scenario."""

    title: StrictStr = Field(..., min_length=1, description="'<ISSUE_KEY> - <intent> - (<Positive|Negative|Edge>)'")
    priority: Literal["High", "Medium", "Low"]
    gherkin: StrictStr = Field(..., min_length=1)


class GherkinBundle(_StrictModel):
    """Feature name plus the three scenario groups."""

    feature: StrictStr = Field(..., min_length=1)
    positive: List[Scenario] = Field(..., min_length=MIN_SCENARIOS_PER_GROUP)
    negative: List[Scenario] = Field(..., min_length=MIN_SCENARIOS_PER_GROUP)
    edge: List[Scenario] = Field(..., min_length=MIN_SCENARIOS_PER_GROUP)


class ExportFile(_StrictModel):
    """Export payload as described by the model itself (only its filename is trusted)."""

    filename: StrictStr = Field(..., min_length=1)
    content_type: Literal["text/csv", "application/json"] = Field(..., alias="contentType")
    content: StrictStr = Field(..., min_length=1)


class AutomationBlock(_StrictModel):
    """Optional automation script section."""

    included: StrictBool
    target: Optional[Literal["playwright", "appium"]]
    language: Optional[Literal["TypeScript", "Python"]]
    script: StrictStr
    selectors_and_mappings: List[StrictStr]
    notes: List[StrictStr]


class GeneratedArtifact(_StrictModel):
    """Validated model output for one issue."""

    issue_key: StrictStr = Field(..., alias="issueKey", min_length=1)
    issue_type: StrictStr = Field(..., alias="issueType", min_length=1)
    summary: StrictStr = Field(..., min_length=1)
    assumptions: List[StrictStr]
    gherkin: GherkinBundle
    files: List[ExportFile] = Field(..., min_length=MIN_EXPORT_FILES)
    automation: AutomationBlock
