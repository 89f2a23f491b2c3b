"""
Tests for the /slack/commands endpoint: signature gate, usage reply and
background dispatch.
"""
import time
from urllib.parse import urlencode
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from clawcraft.api.slack_commands import get_orchestrator_factory
from clawcraft.config import settings
from clawcraft.main import app
from clawcraft.middleware.slack_signature import compute_signature


SECRET = "test-signing-secret"


@pytest.fixture
def orchestrator(monkeypatch):
    """Signed requests enabled and the pipeline replaced by a mock."""
    monkeypatch.setattr(settings, "slack_signing_secret", SECRET)
    mock_orchestrator = Mock()
    app.dependency_overrides[get_orchestrator_factory] = lambda: lambda: mock_orchestrator
    yield mock_orchestrator
    app.dependency_overrides.clear()


def _form(text, **overrides):
    fields = {
        "team_id": "T1",
        "channel_id": "C1",
        "user_id": "U1",
        "command": "/clawcraft",
        "text": text,
        "response_url": "https://hooks.slack.com/commands/T1/1/abc",
    }
    fields.update(overrides)
    return urlencode(fields)


def _post(body, timestamp=None, secret=SECRET, signature=None):
    timestamp = timestamp or str(int(time.time()))
    headers = {
        "Content-Type": "application/x-www-form-urlencoded",
        "X-Slack-Request-Timestamp": timestamp,
        "X-Slack-Signature": signature or compute_signature(secret, timestamp, body),
    }
    client = TestClient(app)
    return client.post("/slack/commands", content=body, headers=headers)


def test_valid_command_acknowledges_and_runs_pipeline(orchestrator):
    response = _post(_form("proj-42 Generate Script please"))

    assert response.status_code == 200
    assert response.text == "Working on PROJ-42... I'll reply in this thread with CSV/JSON."
    orchestrator.handle_slash_command.assert_called_once()
    ctx = orchestrator.handle_slash_command.call_args[0][0]
    assert ctx.issue_key == "PROJ-42"
    assert ctx.user_requested_generate_script is True
    assert ctx.channel_id == "C1"
    assert ctx.response_url == "https://hooks.slack.com/commands/T1/1/abc"


def test_malformed_key_gets_usage_reply_without_pipeline(orchestrator):
    response = _post(_form("abc generate script"))

    assert response.status_code == 200
    assert response.text == "Usage: /clawcraft PROJ-123 [generate script]"
    orchestrator.handle_slash_command.assert_not_called()


def test_bad_signature_is_rejected(orchestrator):
    response = _post(_form("PROJ-1"), secret="wrong-secret")

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid Slack signature."
    orchestrator.handle_slash_command.assert_not_called()


def test_stale_timestamp_is_rejected(orchestrator):
    response = _post(_form("PROJ-1"), timestamp=str(int(time.time()) - 600))

    assert response.status_code == 401


def test_missing_signature_headers_are_rejected(orchestrator):
    client = TestClient(app)
    response = client.post(
        "/slack/commands",
        content=_form("PROJ-1"),
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )

    assert response.status_code == 401


def test_invalid_payload_is_rejected(orchestrator):
    response = _post(_form("PROJ-1", response_url="not-a-url"))

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid slash command payload."
    orchestrator.handle_slash_command.assert_not_called()


def test_background_errors_do_not_affect_acknowledgement(orchestrator):
    orchestrator.handle_slash_command.side_effect = RuntimeError("slack down")

    response = _post(_form("PROJ-1"))

    assert response.status_code == 200
    assert response.text.startswith("Working on PROJ-1")


def test_health():
    client = TestClient(app)

    assert client.get("/health").json() == {"status": "healthy"}


@pytest.fixture
def unconfigured(monkeypatch):
    """Signing secret set, but no Jira/Slack/OpenAI credentials."""
    monkeypatch.setattr(settings, "slack_signing_secret", SECRET)
    for name in ("slack_bot_token", "jira_base_url", "jira_email", "jira_api_token", "openai_api_key"):
        monkeypatch.setattr(settings, name, None)
    factory = Mock(side_effect=AssertionError("orchestrator must not be built"))
    app.dependency_overrides[get_orchestrator_factory] = lambda: factory
    yield factory
    app.dependency_overrides.clear()


def test_unsigned_request_is_rejected_before_clients_are_built(unconfigured):
    response = _post(_form("PROJ-1"), secret="wrong-secret")

    assert response.status_code == 401
    unconfigured.assert_not_called()


def test_usage_reply_does_not_build_clients(unconfigured):
    response = _post(_form("not a key"))

    assert response.status_code == 200
    assert response.text == "Usage: /clawcraft PROJ-123 [generate script]"
    unconfigured.assert_not_called()


def test_default_factory_is_not_resolved_for_unsigned_requests(monkeypatch):
    monkeypatch.setattr(settings, "slack_signing_secret", SECRET)
    monkeypatch.setattr(settings, "jira_base_url", None)

    response = _post(_form("PROJ-1"), secret="wrong-secret")

    assert response.status_code == 401
