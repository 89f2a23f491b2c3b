"""
Tests for the generation prompt.
"""
from clawcraft.agent.prompt import SYSTEM_PROMPT, build_prompt
from clawcraft.models.enums import PlatformHint
from clawcraft.models.issue import ParsedIssue


ISSUE = ParsedIssue(
    issue_key="PROJ-7",
    issue_type="Bug",
    summary="Cart total {wrong}",
    description="Steps\nadd item",
    steps_to_reproduce="add item",
    expected_result="total updates",
)


def test_prompt_is_deterministic():
    assert build_prompt(ISSUE, PlatformHint.WEB, True) == build_prompt(ISSUE, PlatformHint.WEB, True)


def test_system_prompt_forbids_non_json():
    prompt = build_prompt(ISSUE, PlatformHint.UNKNOWN, False)

    assert prompt.system == SYSTEM_PROMPT
    assert "Return ONLY valid JSON" in prompt.system


def test_user_prompt_embeds_issue_fields():
    prompt = build_prompt(ISSUE, PlatformHint.MOBILE, True)

    assert "issueKey: PROJ-7" in prompt.user
    assert "issuetype.name: Bug" in prompt.user
    assert "summary: Cart total {wrong}" in prompt.user
    assert "stepsToReproduce: add item" in prompt.user
    assert "expectedResult: total updates" in prompt.user
    assert "actualResult: \n" in prompt.user
    assert "platformHint: MOBILE" in prompt.user
    assert "userRequestedGenerateScript: true" in prompt.user


def test_user_prompt_carries_rules_and_schema():
    prompt = build_prompt(ISSUE, PlatformHint.WEB, False)

    assert "at least 5 Positive, 5 Negative, 5 Edge scenarios" in prompt.user
    assert '"selectors_and_mappings": ["..."]' in prompt.user
    assert "IssueKey, RequirementKey, TestType, ScenarioType, Feature, ScenarioTitle, Priority, Labels, Gherkin" in prompt.user
    assert '"requirementKey": "<ISSUE_KEY>",' in prompt.user
    assert "/clawcraft <ISSUE_KEY> [generate script]" in prompt.user
    assert "userRequestedGenerateScript: false" in prompt.user
