"""
Deterministic rules applied around the model call.
"""
from typing import List, Optional, Tuple
import re
from clawcraft.models.enums import PlatformHint
from clawcraft.models.issue import ParsedIssue


MOBILE_KEYWORDS: List[str] = ["ios", "android", "apk", "ipa", "device", "appium", "emulator", "simulator"]
WEB_KEYWORDS: List[str] = ["browser", "url", "webpage", "playwright", "chrome", "firefox", "safari"]

ISSUE_KEY_PATTERN = re.compile(r"^[A-Z][A-Z0-9]*-\d+$")
GENERATE_SCRIPT_PATTERN = re.compile(r"\bgenerate\s+script\b", re.IGNORECASE)


def is_bug_type(issue_type: str) -> bool:
    return "bug" in issue_type.lower()


def is_supported_issue_type(issue_type: str) -> bool:
    """Only Bugs and (User) Stories are worth a model call."""
    return is_bug_type(issue_type) or "story" in issue_type.lower()


def infer_platform_hint(issue: ParsedIssue) -> PlatformHint:
    """
    Guess the automation platform from issue text.

    Mobile keywords win over web keywords when both appear.
    """
    haystack = " ".join([
        issue.summary,
        issue.description,
        issue.steps_to_reproduce,
        issue.environment,
        issue.expected_result,
        issue.actual_result,
    ]).lower()

    if any(word in haystack for word in MOBILE_KEYWORDS):
        return PlatformHint.MOBILE
    if any(word in haystack for word in WEB_KEYWORDS):
        return PlatformHint.WEB
    return PlatformHint.UNKNOWN


def parse_command_text(text: Optional[str]) -> Tuple[Optional[str], bool]:
    """
    Parse slash-command text like "PROJ-123 generate script".

    Returns:
        Tuple of (issue_key or None when the first token is not a key,
        whether a script was requested)
    """
    trimmed = (text or "").strip()
    tokens = trimmed.split()
    issue_key = tokens[0].upper() if tokens else None
    if issue_key and not ISSUE_KEY_PATTERN.match(issue_key):
        issue_key = None
    return issue_key, bool(GENERATE_SCRIPT_PATTERN.search(trimmed))
