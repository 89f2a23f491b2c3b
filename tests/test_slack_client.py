"""
Tests for Slack delivery over the Web API.
"""
from unittest.mock import MagicMock, patch

import pytest
import requests
from slack_sdk.errors import SlackApiError

from clawcraft.services.slack_client import SlackClient, SlackClientError


def _api_error(code):
    return SlackApiError(f"The request to the Slack API failed. ({code})", {"ok": False, "error": code})


def _client(web_client=None):
    web_client = web_client or MagicMock()
    return SlackClient("xoxb-test", client=web_client), web_client


def test_missing_token_raises():
    with pytest.raises(SlackClientError, match="SLACK_BOT_TOKEN"):
        SlackClient("")


def test_web_client_uses_configured_base_url():
    with patch("clawcraft.services.slack_client.WebClient") as mock_web_client:
        SlackClient("xoxb-test", api_base_url="https://slack.test/api")

    mock_web_client.assert_called_once_with(token="xoxb-test", base_url="https://slack.test/api/", timeout=15)


def test_post_response_url_sends_ephemeral_json():
    client, _ = _client()
    with patch("clawcraft.services.slack_client.requests.post") as mock_post:
        client.post_response_url("https://hooks.slack.com/x", "hello")

    mock_post.assert_called_once_with(
        "https://hooks.slack.com/x",
        json={"response_type": "ephemeral", "text": "hello"},
        timeout=15,
    )


def test_post_response_url_failure_raises():
    client, _ = _client()
    with patch(
        "clawcraft.services.slack_client.requests.post",
        side_effect=requests.exceptions.Timeout("slow"),
    ):
        with pytest.raises(SlackClientError):
            client.post_response_url("https://hooks.slack.com/x", "hello")


def test_post_message_joins_then_posts_in_thread():
    client, web_client = _client()
    web_client.conversations_join.side_effect = _api_error("already_in_channel")
    web_client.chat_postMessage.return_value = {"ok": True, "ts": "123.456"}

    ts = client.post_message("C1", "summary", thread_ts="111.222")

    assert ts == "123.456"
    web_client.conversations_join.assert_called_once_with(channel="C1")
    web_client.chat_postMessage.assert_called_once_with(channel="C1", text="summary", thread_ts="111.222")


def test_unexpected_join_error_propagates():
    client, web_client = _client()
    web_client.conversations_join.side_effect = _api_error("invalid_auth")

    with pytest.raises(SlackClientError) as exc_info:
        client.post_message("C1", "summary")

    assert exc_info.value.error == "invalid_auth"
    web_client.chat_postMessage.assert_not_called()


def test_post_message_error_is_wrapped():
    client, web_client = _client()
    web_client.chat_postMessage.side_effect = _api_error("not_in_channel")

    with pytest.raises(SlackClientError) as exc_info:
        client.post_message("C1", "summary")

    assert exc_info.value.error == "not_in_channel"


def test_upload_text_file_uploads_into_thread():
    client, web_client = _client()

    client.upload_text_file("C1", "PROJ-1_xray_tests.csv", "a,b\n“x”", thread_ts="111.222")

    web_client.conversations_join.assert_called_once_with(channel="C1")
    web_client.files_upload_v2.assert_called_once_with(
        channel="C1",
        thread_ts="111.222",
        filename="PROJ-1_xray_tests.csv",
        title="PROJ-1_xray_tests.csv",
        content="a,b\n“x”",
    )


def test_upload_error_is_wrapped():
    client, web_client = _client()
    web_client.files_upload_v2.side_effect = _api_error("file_upload_failed")

    with pytest.raises(SlackClientError, match="PROJ-1.json") as exc_info:
        client.upload_text_file("C1", "PROJ-1.json", "{}")

    assert exc_info.value.error == "file_upload_failed"
