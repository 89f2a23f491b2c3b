"""
Prompts for the ClawCraft QA generation step.
"""
from typing import NamedTuple
from clawcraft.config import SLASH_COMMAND
from clawcraft.models.enums import PlatformHint
from clawcraft.models.issue import ParsedIssue


SYSTEM_PROMPT = (
    "You are ClawCraft QA, an expert QA analyst + test automation engineer. "
    "Return ONLY valid JSON matching the required schema. Do not include markdown."
)

OUTPUT_SCHEMA = """{
  "issueKey": "...",
  "issueType": "...",
  "summary": "...",
  "assumptions": ["..."],
  "gherkin": {
    "feature": "...",
    "positive": [{"title":"...","priority":"...","gherkin":"..."}],
    "negative": [{"title":"...","priority":"...","gherkin":"..."}],
    "edge": [{"title":"...","priority":"...","gherkin":"..."}]
  },
  "files": [
    {
      "filename": "<ISSUE_KEY>_xray_tests.csv",
      "contentType": "text/csv",
      "content": "<CSV_TEXT>"
    },
    {
      "filename": "<ISSUE_KEY>_xray_tests.json",
      "contentType": "application/json",
      "content": "<JSON_TEXT>"
    }
  ],
  "automation": {
    "included": true/false,
    "target": "playwright|appium|null",
    "language": "TypeScript|Python|null",
    "script": "<FULL_SCRIPT_OR_EMPTY>",
    "selectors_and_mappings": ["..."],
    "notes": ["..."]
  }
}"""

USER_PROMPT_TEMPLATE = """Context:
- Jira is the source of truth.
- Xray Cloud will be used to import Test entities.
- Slack command is {command} <ISSUE_KEY> [generate script]
- Always trust Jira's issuetype.name to decide whether it's a User Story or Bug.

Your tasks:
1) If issuetype.name indicates User Story or Bug:
   - Generate Positive, Negative, and Edge test cases in valid Gherkin.
   - Produce TWO export payloads: CSV text and JSON text.
   - The tests must be suitable to create Xray Cloud Test entities linked back to the Requirement (story/bug).
2) Only if BOTH conditions are true:
   - issuetype.name is Bug (or equivalent)
   - userRequestedGenerateScript=true
   AND the bug includes clear steps to reproduce
   => generate an automation script:
      - Playwright (TypeScript) for web when platformHint=WEB
      - Appium (Python) for mobile when platformHint=MOBILE
      - If platformHint is UNKNOWN, infer from text; if still unclear, default to Playwright TS and state assumption.

Quality rules:
- Be faithful to the issue text; do not invent features.
- If info is missing, keep assumptions minimal and list them explicitly.
- Gherkin must use Feature/Scenario and Given/When/Then.
- Scenario titles must be stable: "<ISSUE_KEY> - <short intent> - (<Positive|Negative|Edge>)"
- Minimum coverage: at least 5 Positive, 5 Negative, 5 Edge scenarios.
- Tag each scenario with priority High/Medium/Low:
  - High: core path, auth, payments, data loss, security, crash
  - Medium: common alternate paths
  - Low: rare/cosmetic

Output format (STRICT):
Return a single JSON object with these keys:

{schema}

CSV rules:
- Use columns:
  IssueKey, RequirementKey, TestType, ScenarioType, Feature, ScenarioTitle, Priority, Labels, Gherkin
- RequirementKey must equal the Jira issueKey.
- TestType must be "Manual".
- Labels must include: "pt-claw", "clawcraft", plus issueType lowercased, plus up to 3 keywords inferred from summary.

JSON rules:
- The JSON inside <ISSUE_KEY>_xray_tests.json must be:
  {{
    "requirementKey": "<ISSUE_KEY>",
    "tests": [
      {{
        "testType": "Manual",
        "scenarioType": "Positive|Negative|Edge",
        "feature": "...",
        "title": "...",
        "priority": "High|Medium|Low",
        "labels": ["..."],
        "gherkin": "..."
      }}
    ]
  }}

Now process this Jira issue input:

<JIRA_ISSUE>
issueKey: {issue_key}
issuetype.name: {issue_type}
summary: {summary}
description: {description}
acceptanceCriteria: {acceptance_criteria}
stepsToReproduce: {steps_to_reproduce}
expectedResult: {expected_result}
actualResult: {actual_result}
environment: {environment}
platformHint: {platform_hint}
userRequestedGenerateScript: {requested}
</JIRA_ISSUE>"""


class PromptPair(NamedTuple):
    system: str
    user: str


def build_prompt(
    issue: ParsedIssue,
    platform_hint: PlatformHint,
    user_requested_generate_script: bool
) -> PromptPair:
    """
    Render the system/user prompt pair for one issue.

    Pure: the same issue, hint and flag always produce the same text.
    """
    user = USER_PROMPT_TEMPLATE.format(
        command=SLASH_COMMAND,
        schema=OUTPUT_SCHEMA,
        issue_key=issue.issue_key,
        issue_type=issue.issue_type,
        summary=issue.summary,
        description=issue.description,
        acceptance_criteria=issue.acceptance_criteria,
        steps_to_reproduce=issue.steps_to_reproduce,
        expected_result=issue.expected_result,
        actual_result=issue.actual_result,
        environment=issue.environment,
        platform_hint=platform_hint.value,
        requested="true" if user_requested_generate_script else "false",
    )
    return PromptPair(system=SYSTEM_PROMPT, user=user)
