"""
Normalized Jira issue and slash-command context models.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ExtractedSections(BaseModel):
    """Sections recovered from a free-form issue description."""

    model_config = ConfigDict(frozen=True)

    acceptance_criteria: str = ""
    steps_to_reproduce: str = ""
    expected_result: str = ""
    actual_result: str = ""
    environment: str = ""


class ParsedIssue(BaseModel):
    """Normalized view of a Jira issue, built once per request."""

    model_config = ConfigDict(frozen=True)

    issue_key: str = Field(..., description="Stable Jira key, e.g. PROJ-123")
    issue_type: str = Field(default="", description="Jira issuetype.name")
    summary: str = ""
    description: str = ""
    acceptance_criteria: str = ""
    steps_to_reproduce: str = ""
    expected_result: str = ""
    actual_result: str = ""
    environment: str = ""


class SlashCommandContext(BaseModel):
    """Everything the pipeline needs from an accepted slash command."""

    model_config = ConfigDict(frozen=True)

    issue_key: str
    user_requested_generate_script: bool = False
    command: str = ""
    text: str = ""
    team_id: str
    channel_id: str
    user_id: str
    response_url: str
    thread_ts: Optional[str] = None
