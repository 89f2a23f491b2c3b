"""
Core orchestration for one /clawcraft slash command.

Drives a single request from issue fetch to Slack delivery:

    RECEIVED -> ISSUE_FETCHED -> PROMPT_BUILT -> GENERATED
             -> VALIDATED (or REPAIRING -> VALIDATED) -> GATED -> DELIVERED

Any step may end in FAILED, which posts exactly one message to the command's
response URL. Model output gets exactly one repair attempt.
"""
from dataclasses import dataclass
from typing import Optional
import logging
import uuid
from clawcraft.agent.prompt import PromptPair, build_prompt
from clawcraft.agent.rules import infer_platform_hint, is_bug_type, is_supported_issue_type
from clawcraft.models.artifact import AutomationBlock, GeneratedArtifact
from clawcraft.models.enums import PipelineState
from clawcraft.models.issue import SlashCommandContext
from clawcraft.services.jira_client import JiraClient, JiraNotFoundError
from clawcraft.services.llm_client import LLMClient, LLMClientError
from clawcraft.services.output_formatter import build_output_files, resolve_filenames
from clawcraft.services.slack_client import SlackClient
from clawcraft.validators.response_validator import validate_response

logger = logging.getLogger(__name__)

NOT_BUG_NOTE = "Script was requested but issue type is not Bug."
MISSING_STEPS_NOTE = "Script was requested but bug lacks clear Steps to Reproduce."


class UnsupportedIssueTypeError(Exception):
    """Raised when the issue is neither a Bug nor a Story."""

    def __init__(self, issue_type: str):
        super().__init__(f"Unsupported issue type: {issue_type}")
        self.issue_type = issue_type


class InvalidModelOutputError(Exception):
    """Raised when model output is still invalid after the repair attempt."""

    def __init__(self, reason: str):
        super().__init__(f"OpenAI invalid JSON after repair: {reason}")
        self.reason = reason


@dataclass
class PipelineRun:
    """Per-request record of where the pipeline ended up."""

    correlation_id: str
    state: PipelineState = PipelineState.RECEIVED
    failure_reason: Optional[str] = None
    artifact: Optional[GeneratedArtifact] = None


def apply_automation_gate(
    artifact: GeneratedArtifact,
    user_requested_generate_script: bool,
    is_bug: bool,
    has_steps: bool
) -> GeneratedArtifact:
    """
    Force automation off when a requested script is not allowed.

    A script is only allowed for Bugs with non-empty steps to reproduce. The
    model's notes are kept and an explanation is appended.
    """
    if not user_requested_generate_script or (is_bug and has_steps):
        return artifact

    automation = AutomationBlock(
        included=False,
        target=None,
        language=None,
        script="",
        selectors_and_mappings=[],
        notes=[*artifact.automation.notes, NOT_BUG_NOTE if not is_bug else MISSING_STEPS_NOTE],
    )
    return artifact.model_copy(update={"automation": automation})


class ClawCraftOrchestrator:
    """Runs the generation-validation-repair pipeline for one command at a time."""

    def __init__(self, jira: JiraClient, slack: SlackClient, llm: LLMClient):
        self.jira = jira
        self.slack = slack
        self.llm = llm

    def _transition(self, run: PipelineRun, state: PipelineState) -> None:
        run.state = state
        logger.info("[%s] state=%s", run.correlation_id, state.value)

    def handle_slash_command(self, ctx: SlashCommandContext) -> PipelineRun:
        """
        Process one accepted slash command to a terminal state.

        Never raises for pipeline failures: they are reported to the user
        through the response URL and recorded on the returned PipelineRun.
        Errors while reporting a failure propagate.
        """
        run = PipelineRun(correlation_id=str(uuid.uuid4()))
        logger.info("[%s] Received %s %s", run.correlation_id, ctx.command, ctx.text)

        try:
            self._execute(ctx, run)
        except Exception as e:
            self._fail(ctx, run, e)

        return run

    def _execute(self, ctx: SlashCommandContext, run: PipelineRun) -> None:
        issue = self.jira.get_issue(ctx.issue_key)
        self._transition(run, PipelineState.ISSUE_FETCHED)

        if not is_supported_issue_type(issue.issue_type):
            raise UnsupportedIssueTypeError(issue.issue_type)

        is_bug = is_bug_type(issue.issue_type)
        has_steps = bool(issue.steps_to_reproduce.strip())
        platform_hint = infer_platform_hint(issue)

        prompt = build_prompt(issue, platform_hint, ctx.user_requested_generate_script)
        self._transition(run, PipelineState.PROMPT_BUILT)

        artifact = self._generate_and_validate(prompt, run)
        artifact = apply_automation_gate(artifact, ctx.user_requested_generate_script, is_bug, has_steps)
        run.artifact = artifact
        self._transition(run, PipelineState.GATED)

        files = resolve_filenames(artifact, build_output_files(artifact))
        for output_file in files:
            self.slack.upload_text_file(ctx.channel_id, output_file.filename, output_file.content, ctx.thread_ts)

        missing_steps = ctx.user_requested_generate_script and is_bug and not has_steps
        summary = "\n".join([
            "✅ ClawCraft complete",
            f"- Issue: {artifact.issue_key} ({artifact.issue_type})",
            f"- Scenarios: Positive={len(artifact.gherkin.positive)}, "
            f"Negative={len(artifact.gherkin.negative)}, Edge={len(artifact.gherkin.edge)}",
            f"- Automation script included: {'Yes' if artifact.automation.included else 'No'}"
            f"{' (missing Steps to Reproduce)' if missing_steps else ''}",
            f"- Correlation ID: {run.correlation_id}",
        ])
        self.slack.post_message(ctx.channel_id, summary, ctx.thread_ts)
        self._transition(run, PipelineState.DELIVERED)

    def _generate_and_validate(self, prompt: PromptPair, run: PipelineRun) -> GeneratedArtifact:
        first = self.llm.generate(prompt.system, prompt.user)
        self._transition(run, PipelineState.GENERATED)

        result = validate_response(first)
        if result.ok:
            self._transition(run, PipelineState.VALIDATED)
            return result.artifact

        logger.warning(
            "[%s] Invalid AI output (%s: %s), attempting one repair.",
            run.correlation_id, result.error_kind.value, result.reason
        )
        self._transition(run, PipelineState.REPAIRING)

        repaired = self.llm.repair(first)
        result = validate_response(repaired)
        if result.ok:
            self._transition(run, PipelineState.VALIDATED)
            return result.artifact

        raise InvalidModelOutputError(result.reason)

    def _fail(self, ctx: SlashCommandContext, run: PipelineRun, error: Exception) -> None:
        cid = run.correlation_id
        failed_in = run.state
        run.state = PipelineState.FAILED
        run.failure_reason = str(error)

        if isinstance(error, JiraNotFoundError):
            logger.warning("[%s] %s", cid, error)
            message = f"I couldn't find Jira issue {ctx.issue_key}. Please check the key and try again."
        elif isinstance(error, UnsupportedIssueTypeError):
            logger.info("[%s] %s", cid, error)
            message = f'Unsupported issue type: "{error.issue_type}". Supported: User Story or Bug.'
        elif isinstance(error, (LLMClientError, InvalidModelOutputError)):
            logger.error("[%s] Generation failed after state=%s: %s", cid, failed_in.value, error)
            message = f"Failed to process {ctx.issue_key}. OpenAI generation failed."
        else:
            logger.exception("[%s] Error after state=%s", cid, failed_in.value)
            message = f"Failed to process {ctx.issue_key}. Please try again."

        self.slack.post_response_url(ctx.response_url, f"{message} (correlation: {cid})")
