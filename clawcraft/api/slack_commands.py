"""
POST /slack/commands endpoint for the /clawcraft slash command.

Acknowledges immediately and runs the pipeline as a background task, since a
model round-trip can exceed Slack's three-second acknowledgement window.
"""
import logging
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field, HttpUrl, ValidationError
from typing import Callable, Optional
from clawcraft.agent.orchestrator import ClawCraftOrchestrator
from clawcraft.agent.rules import parse_command_text
from clawcraft.config import SLASH_COMMAND, settings
from clawcraft.middleware.slack_signature import SlackSignatureError, verify_slack_signature
from clawcraft.models.issue import SlashCommandContext
from clawcraft.services.jira_client import JiraClient
from clawcraft.services.llm_client import LLMClient
from clawcraft.services.slack_client import SlackClient

logger = logging.getLogger(__name__)

router = APIRouter()


class SlashCommandPayload(BaseModel):
    """Form fields Slack sends with a slash command."""

    token: Optional[str] = None
    team_id: str
    team_domain: Optional[str] = None
    channel_id: str
    channel_name: Optional[str] = None
    user_id: str
    user_name: Optional[str] = None
    command: str
    text: str = Field(default="")
    response_url: HttpUrl
    trigger_id: Optional[str] = None


def build_orchestrator() -> ClawCraftOrchestrator:
    """Fresh collaborators for every request; nothing is shared between commands."""
    return ClawCraftOrchestrator(
        jira=JiraClient(settings.jira_base_url, settings.jira_email, settings.jira_api_token),
        slack=SlackClient(settings.slack_bot_token, api_base_url=settings.slack_api_base_url),
        llm=LLMClient(settings.openai_api_key, settings.openai_model),
    )


def get_orchestrator_factory() -> Callable[[], ClawCraftOrchestrator]:
    """Orchestrator builder; the route calls it only for accepted commands."""
    return build_orchestrator


def run_pipeline(orchestrator: ClawCraftOrchestrator, ctx: SlashCommandContext) -> None:
    try:
        orchestrator.handle_slash_command(ctx)
    except Exception:
        logger.exception("Unhandled async command error for %s", ctx.issue_key)


@router.post("/commands", response_class=PlainTextResponse)
async def slack_command(
    request: Request,
    background_tasks: BackgroundTasks,
    orchestrator_factory: Callable[[], ClawCraftOrchestrator] = Depends(get_orchestrator_factory),
):
    """
    Handle a /clawcraft slash command.

    Returns 401 on a bad signature, 400 on a malformed payload, a usage hint
    when the first token is not an issue key, otherwise an acknowledgement
    while the pipeline continues in the background.
    """
    raw_body = (await request.body()).decode("utf-8")
    try:
        verify_slack_signature(
            signing_secret=settings.slack_signing_secret,
            timestamp=request.headers.get("X-Slack-Request-Timestamp"),
            signature=request.headers.get("X-Slack-Signature"),
            raw_body=raw_body,
        )
    except SlackSignatureError as e:
        logger.warning("Rejected slash command: %s", e)
        raise HTTPException(status_code=401, detail="Invalid Slack signature.")

    form = await request.form()
    try:
        payload = SlashCommandPayload(**{key: value for key, value in form.items() if isinstance(value, str)})
    except ValidationError:
        raise HTTPException(status_code=400, detail="Invalid slash command payload.")

    issue_key, generate_script = parse_command_text(payload.text)
    if not issue_key:
        return f"Usage: {SLASH_COMMAND} PROJ-123 [generate script]"

    ctx = SlashCommandContext(
        issue_key=issue_key,
        user_requested_generate_script=generate_script,
        command=payload.command,
        text=payload.text,
        team_id=payload.team_id,
        channel_id=payload.channel_id,
        user_id=payload.user_id,
        response_url=str(payload.response_url),
    )
    background_tasks.add_task(run_pipeline, orchestrator_factory(), ctx)

    return f"Working on {issue_key}... I'll reply in this thread with CSV/JSON."
