"""
Shared fixtures: a model response that satisfies the artifact contract.
"""
import copy
import json
import os
import sys

import pytest

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def _scenarios(issue_key, scenario_type, count=5):
    return [
        {
            "title": f"{issue_key} - case {i} - ({scenario_type})",
            "priority": ["High", "Medium", "Low"][i % 3],
            "gherkin": f"Scenario: case {i}\n  Given a user\n  When they act\n  Then it works",
        }
        for i in range(count)
    ]


def make_response(issue_key="PROJ-123", issue_type="Bug", included=False):
    return {
        "issueKey": issue_key,
        "issueType": issue_type,
        "summary": "Login button fails on Safari checkout page",
        "assumptions": ["Standard test account exists"],
        "gherkin": {
            "feature": "Login",
            "positive": _scenarios(issue_key, "Positive"),
            "negative": _scenarios(issue_key, "Negative"),
            "edge": _scenarios(issue_key, "Edge"),
        },
        "files": [
            {"filename": f"{issue_key}_xray_tests.csv", "contentType": "text/csv", "content": "a,b"},
            {"filename": f"{issue_key}_xray_tests.json", "contentType": "application/json", "content": "{}"},
        ],
        "automation": {
            "included": included,
            "target": "playwright" if included else None,
            "language": "TypeScript" if included else None,
            "script": "test('login', async () => {});" if included else "",
            "selectors_and_mappings": ["#login"] if included else [],
            "notes": ["model note"],
        },
    }


@pytest.fixture
def response_dict():
    """A fresh valid model response as a dict."""
    return copy.deepcopy(make_response())


@pytest.fixture
def response_text(response_dict):
    """The same response serialized as the model would return it."""
    return json.dumps(response_dict)
