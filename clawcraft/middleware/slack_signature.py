"""
Slack request signature verification.

Every inbound slash command is rejected before any processing unless its
X-Slack-Signature matches an HMAC-SHA256 of the raw body under the app's
signing secret, and its timestamp is within the replay window.
"""
from typing import Optional
import hashlib
import hmac
import logging
import time

logger = logging.getLogger(__name__)

SIGNATURE_VERSION = "v0"
MAX_REQUEST_AGE_SECONDS = 60 * 5


class SlackSignatureError(Exception):
    """Raised when an inbound request fails the authenticity check."""
    pass


def compute_signature(signing_secret: str, timestamp: str, raw_body: str) -> str:
    base = f"{SIGNATURE_VERSION}:{timestamp}:{raw_body}"
    digest = hmac.new(signing_secret.encode("utf-8"), base.encode("utf-8"), hashlib.sha256).hexdigest()
    return f"{SIGNATURE_VERSION}={digest}"


def verify_slack_signature(
    signing_secret: Optional[str],
    timestamp: Optional[str],
    signature: Optional[str],
    raw_body: Optional[str],
    now: Optional[float] = None
) -> None:
    """
    Verify a Slack request signature.

    Args:
        signing_secret: App signing secret
        timestamp: X-Slack-Request-Timestamp header
        signature: X-Slack-Signature header
        raw_body: Request body exactly as received
        now: Current unix time (defaults to time.time())

    Raises:
        SlackSignatureError: If anything is missing, stale or mismatched
    """
    if not signing_secret:
        logger.error("SLACK_SIGNING_SECRET not configured - rejecting request")
        raise SlackSignatureError("Slack signing secret not configured.")
    if not timestamp or not signature or not raw_body:
        raise SlackSignatureError("Missing Slack signature headers or body.")

    try:
        ts = int(timestamp)
    except ValueError:
        raise SlackSignatureError("Invalid Slack timestamp.")

    current = int(now if now is not None else time.time())
    if abs(current - ts) > MAX_REQUEST_AGE_SECONDS:
        raise SlackSignatureError("Slack timestamp outside tolerance window.")

    expected = compute_signature(signing_secret, timestamp, raw_body)
    if not hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8")):
        raise SlackSignatureError("Slack signature mismatch.")
