"""
Xray export rendering (CSV and JSON) from a validated artifact.

Content is always rebuilt from the validated scenarios. The files the model
describes itself are only consulted for their preferred filenames.
"""
from typing import Dict, List, NamedTuple, Sequence, Tuple
import csv
import io
import json
import re
from clawcraft.models.artifact import GeneratedArtifact, Scenario
from clawcraft.models.enums import ScenarioType


BASE_LABELS = ["pt-claw", "clawcraft"]
MAX_KEYWORDS = 3
TEST_TYPE = "Manual"
CSV_CONTENT_TYPE = "text/csv"
JSON_CONTENT_TYPE = "application/json"

CSV_HEADER = [
    "IssueKey",
    "RequirementKey",
    "TestType",
    "ScenarioType",
    "Feature",
    "ScenarioTitle",
    "Priority",
    "Labels",
    "Gherkin",
]

STOPWORDS = {
    "the", "and", "for", "with", "from", "that", "this", "when", "then",
    "user", "story", "bug", "issue", "should", "cannot", "error",
}


class OutputFile(NamedTuple):
    filename: str
    content_type: str
    content: str


def infer_keywords(summary: str) -> List[str]:
    """First three distinct meaningful words of the summary."""
    cleaned = re.sub(r"[^a-z0-9\s-]", " ", summary.lower())
    keywords: List[str] = []
    for token in cleaned.split():
        if len(token) < 3 or token in STOPWORDS or token in keywords:
            continue
        keywords.append(token)
    return keywords[:MAX_KEYWORDS]


def build_labels(issue_type: str, summary: str) -> List[str]:
    return [*BASE_LABELS, issue_type.lower(), *infer_keywords(summary)]


def flatten_scenarios(artifact: GeneratedArtifact) -> List[Tuple[ScenarioType, Scenario]]:
    """All scenarios in Positive, Negative, Edge order."""
    gherkin = artifact.gherkin
    return (
        [(ScenarioType.POSITIVE, s) for s in gherkin.positive]
        + [(ScenarioType.NEGATIVE, s) for s in gherkin.negative]
        + [(ScenarioType.EDGE, s) for s in gherkin.edge]
    )


def build_xray_json(artifact: GeneratedArtifact) -> str:
    labels = build_labels(artifact.issue_type, artifact.summary)
    tests = [
        {
            "testType": TEST_TYPE,
            "scenarioType": scenario_type.value,
            "feature": artifact.gherkin.feature,
            "title": scenario.title,
            "priority": scenario.priority,
            "labels": labels,
            "gherkin": scenario.gherkin,
        }
        for scenario_type, scenario in flatten_scenarios(artifact)
    ]
    return json.dumps({"requirementKey": artifact.issue_key, "tests": tests}, indent=2, ensure_ascii=False)


def build_xray_csv(artifact: GeneratedArtifact) -> str:
    """
    Render one quoted CSV row per scenario under a fixed 9-column header.

    Every value is wrapped in double quotes with embedded quotes doubled.
    """
    labels = ";".join(build_labels(artifact.issue_type, artifact.summary))
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for scenario_type, scenario in flatten_scenarios(artifact):
        writer.writerow([
            artifact.issue_key,
            artifact.issue_key,
            TEST_TYPE,
            scenario_type.value,
            artifact.gherkin.feature,
            scenario.title,
            scenario.priority,
            labels,
            scenario.gherkin,
        ])
    rows = buffer.getvalue().rstrip("\n")
    header = ",".join(CSV_HEADER)
    return f"{header}\n{rows}" if rows else header


def build_output_files(artifact: GeneratedArtifact) -> List[OutputFile]:
    return [
        OutputFile(f"{artifact.issue_key}_xray_tests.csv", CSV_CONTENT_TYPE, build_xray_csv(artifact)),
        OutputFile(f"{artifact.issue_key}_xray_tests.json", JSON_CONTENT_TYPE, build_xray_json(artifact)),
    ]


def resolve_filenames(artifact: GeneratedArtifact, files: Sequence[OutputFile]) -> List[OutputFile]:
    """Prefer the model's filename for each content type, keep our content."""
    preferred: Dict[str, str] = {}
    for model_file in artifact.files:
        preferred.setdefault(model_file.content_type, model_file.filename)
    return [f._replace(filename=preferred.get(f.content_type, f.filename)) for f in files]
