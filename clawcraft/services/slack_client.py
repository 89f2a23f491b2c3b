"""
Slack client for delivering results back to the originating channel.

Messages and files go through the Slack Web API (slack_sdk); failures are
reported through the one-shot response_url that comes with every slash
command.
"""
from typing import Optional
import logging
import requests
from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError, SlackRequestError

logger = logging.getLogger(__name__)

# Best-effort channel join: these outcomes still allow posting (or fall back
# to response_url-only delivery).
IGNORED_JOIN_ERRORS = {
    "already_in_channel",
    "missing_scope",
    "method_not_supported_for_channel_type",
    "channel_not_found",
}


class SlackClientError(Exception):
    """Raised when a Slack API call fails."""

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.error = error


def _api_error_code(error: SlackApiError) -> Optional[str]:
    response = error.response
    return response.get("error") if response is not None else None


class SlackClient:
    """Client for Slack message and file delivery."""

    def __init__(
        self,
        bot_token: Optional[str],
        api_base_url: str = "https://slack.com/api",
        timeout: int = 15,
        client: Optional[WebClient] = None
    ):
        if not bot_token and client is None:
            raise SlackClientError("SLACK_BOT_TOKEN cannot be empty")
        self.timeout = timeout
        self.client = client or WebClient(
            token=bot_token,
            base_url=api_base_url.rstrip("/") + "/",
            timeout=timeout,
        )

    def post_response_url(self, response_url: str, text: str, response_type: str = "ephemeral") -> None:
        """Reply through the slash command's one-shot response URL."""
        try:
            response = requests.post(
                response_url,
                json={"response_type": response_type, "text": text},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise SlackClientError(f"Slack response_url post failed: {str(e)}")

    def ensure_in_channel(self, channel: str) -> None:
        try:
            self.client.conversations_join(channel=channel)
        except SlackApiError as e:
            code = _api_error_code(e)
            if code in IGNORED_JOIN_ERRORS:
                logger.debug("Ignoring conversations.join error for %s: %s", channel, code)
                return
            raise SlackClientError(f"Slack API conversations.join returned error: {code}", error=code)

    def post_message(self, channel: str, text: str, thread_ts: Optional[str] = None) -> Optional[str]:
        """
        Post a message to a channel (optionally in a thread).

        Returns:
            Timestamp of the posted message, usable as a thread id
        """
        self.ensure_in_channel(channel)
        try:
            response = self.client.chat_postMessage(channel=channel, text=text, thread_ts=thread_ts)
        except SlackApiError as e:
            code = _api_error_code(e)
            raise SlackClientError(f"Slack API chat.postMessage returned error: {code}", error=code)
        return response.get("ts")

    def upload_text_file(self, channel: str, filename: str, content: str, thread_ts: Optional[str] = None) -> None:
        """
        Upload a text file to a channel.

        Args:
            channel: Channel id
            filename: Name (and title) of the file
            content: File body
            thread_ts: Optional thread to attach the file to
        """
        self.ensure_in_channel(channel)
        try:
            self.client.files_upload_v2(
                channel=channel,
                thread_ts=thread_ts,
                filename=filename,
                title=filename,
                content=content,
            )
        except SlackApiError as e:
            code = _api_error_code(e)
            raise SlackClientError(f"Slack file upload {filename} returned error: {code}", error=code)
        except SlackRequestError as e:
            raise SlackClientError(f"Slack file upload {filename} failed: {str(e)}")
