"""
Plain-text recovery of structured fields from Jira issue descriptions.

Descriptions arrive as plain strings, Atlassian Document Format (ADF) trees or
rendered HTML. All three are flattened to plain text, then split into named
sections using heading aliases. Nothing here raises: missing or malformed
input degrades to empty strings.
"""
import re
from typing import Any, Dict, List, Optional
from clawcraft.models.issue import ExtractedSections


# Checked in this order; a section ends at the next heading of ANY section.
SECTION_ALIASES: Dict[str, List[str]] = {
    "acceptance_criteria": ["acceptance criteria", "ac"],
    "steps_to_reproduce": ["steps to reproduce", "str", "repro steps", "steps"],
    "expected_result": ["expected result", "expected behavior", "expected"],
    "actual_result": ["actual result", "actual behavior", "actual"],
    "environment": ["environment", "env", "test environment"],
}

ALL_HEADING_ALIASES: List[str] = [alias for aliases in SECTION_ALIASES.values() for alias in aliases]

_LEADING_MARKERS = re.compile(r"^[#*\-\d.\s]+")
_TRAILING_MARKERS = re.compile(r"[:\-\s]+$")
_WHITESPACE = re.compile(r"\s+")
_LINE_BREAK = re.compile(r"\r?\n")


def normalize_heading(line: str) -> str:
    """
    Normalize a line for heading comparison.

    Strips list/markdown markers at the start, colons and dashes at the end,
    collapses whitespace and lowercases.
    """
    normalized = line.lower()
    normalized = _LEADING_MARKERS.sub("", normalized)
    normalized = _TRAILING_MARKERS.sub("", normalized)
    normalized = _WHITESPACE.sub(" ", normalized)
    return normalized.strip()


def matches_heading(line: str, aliases: List[str]) -> bool:
    normalized = normalize_heading(line)
    return any(normalized == alias or normalized.startswith(f"{alias} ") for alias in aliases)


def extract_section(lines: List[str], aliases: List[str], all_headings: List[str]) -> str:
    """
    Capture the body under the first heading matching ``aliases``.

    Args:
        lines: Description split into lines
        aliases: Headings that open this section
        all_headings: Headings of every section (any of them closes the body)

    Returns:
        Trimmed body text, or "" if the heading never appears
    """
    start = None
    for index, line in enumerate(lines):
        if matches_heading(line, aliases):
            start = index + 1
            break
    if start is None:
        return ""

    body: List[str] = []
    for line in lines[start:]:
        if matches_heading(line, all_headings):
            break
        body.append(line)

    return "\n".join(body).strip()


def extract_sections(text: Optional[str]) -> ExtractedSections:
    """
    Split a normalized description into the five known sections.

    Args:
        text: Plain-text description (may be empty or None)

    Returns:
        ExtractedSections with an empty string for every section whose
        heading was not found
    """
    if not isinstance(text, str) or not text:
        return ExtractedSections()

    lines = _LINE_BREAK.split(text)
    return ExtractedSections(**{
        name: extract_section(lines, aliases, ALL_HEADING_ALIASES)
        for name, aliases in SECTION_ALIASES.items()
    })


def adf_to_text(node: Any) -> str:
    """
    Flatten an Atlassian Document Format node tree to plain text.

    Paragraphs, headings and lists end with a newline, list items are
    prefixed with "- ". Unknown node types contribute only their children.
    """
    if not node:
        return ""
    if isinstance(node, str):
        return node
    if not isinstance(node, dict):
        return ""

    node_type = node.get("type")
    if node_type == "text":
        text = node.get("text")
        return text if isinstance(text, str) else ""
    if node_type == "hardBreak":
        return "\n"

    content = node.get("content")
    children = "".join(adf_to_text(child) for child in content) if isinstance(content, list) else ""

    if node_type in ("paragraph", "heading"):
        return f"{children}\n"
    if node_type in ("bulletList", "orderedList"):
        return f"{children}\n"
    if node_type == "listItem":
        return f"- {children}\n"

    return children


def strip_html(html: Optional[str]) -> str:
    """Convert rendered Jira HTML to plain text."""
    if not isinstance(html, str):
        return ""
    text = re.sub(r"<br\s*/?>", "\n", html, flags=re.IGNORECASE)
    text = re.sub(r"</p>", "\n", text, flags=re.IGNORECASE)
    text = re.sub(r"<[^>]+>", "", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def pick_description_text(fields: Dict[str, Any], rendered_fields: Optional[Dict[str, Any]] = None) -> str:
    """
    Choose the best available description representation.

    Preference: plain string, then ADF tree, then rendered HTML.
    """
    fields = fields if isinstance(fields, dict) else {}
    description = fields.get("description")

    if isinstance(description, str):
        return description
    if description:
        return adf_to_text(description)

    rendered = rendered_fields if isinstance(rendered_fields, dict) else fields.get("renderedFields")
    if isinstance(rendered, dict) and isinstance(rendered.get("description"), str):
        return strip_html(rendered["description"])

    return ""
