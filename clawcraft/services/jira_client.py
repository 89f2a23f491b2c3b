"""
Jira client for fetching a single issue and normalizing it.

Read-only. Produces a ParsedIssue with description sections already extracted.
"""
from typing import Dict, Any, Optional
from urllib.parse import quote
import logging
import requests
from requests.auth import HTTPBasicAuth
from clawcraft.models.issue import ParsedIssue
from clawcraft.services.section_extractor import extract_sections, pick_description_text

logger = logging.getLogger(__name__)


class JiraClientError(Exception):
    """Raised when Jira API calls fail."""
    pass


class JiraNotFoundError(JiraClientError):
    """Raised when the requested issue key does not exist."""
    pass


class JiraClient:
    """Client for fetching Jira issue data (read-only)."""

    def __init__(self, base_url: Optional[str], email: Optional[str], api_token: Optional[str], timeout: int = 20):
        """
        Initialize Jira client.

        Args:
            base_url: Jira instance URL (e.g., "https://yourcompany.atlassian.net")
            email: Jira user email for authentication
            api_token: Jira API token for authentication
            timeout: Request timeout in seconds
        """
        self.jira_url = (base_url or "").rstrip("/")
        self.email = email or ""
        self.api_token = api_token or ""
        self.timeout = timeout

        if not self.jira_url:
            raise JiraClientError("JIRA_BASE_URL cannot be empty")
        if not self.email:
            raise JiraClientError("JIRA_EMAIL cannot be empty")
        if not self.api_token:
            raise JiraClientError("JIRA_API_TOKEN cannot be empty")

    def _make_request(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Make authenticated GET request to Jira API.

        Raises:
            JiraNotFoundError: On HTTP 404
            JiraClientError: On any other failure
        """
        url = f"{self.jira_url}{endpoint}"
        auth = HTTPBasicAuth(self.email, self.api_token)
        headers = {"Accept": "application/json"}

        try:
            response = requests.get(url, auth=auth, headers=headers, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise JiraClientError(f"Jira API request failed: {str(e)}")

        if response.status_code == 404:
            raise JiraNotFoundError(f"Jira resource not found: {endpoint}")

        try:
            response.raise_for_status()
            return response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise JiraClientError(f"Jira API request failed: {str(e)}")

    def get_issue(self, issue_key: str) -> ParsedIssue:
        """
        Fetch an issue and normalize it into a ParsedIssue.

        Args:
            issue_key: Jira issue key (e.g., "PROJ-123")

        Returns:
            ParsedIssue with description sections extracted

        Raises:
            JiraNotFoundError: If the key does not resolve
            JiraClientError: If the request fails for any other reason
        """
        try:
            data = self._make_request(
                f"/rest/api/3/issue/{quote(issue_key, safe='')}",
                params={"expand": "renderedFields"},
            )
        except JiraNotFoundError:
            raise JiraNotFoundError(f"Jira issue {issue_key} not found.")
        except JiraClientError as e:
            logger.warning("Failed to fetch Jira issue %s: %s", issue_key, e)
            raise JiraClientError(f"Failed to fetch Jira issue {issue_key}.")

        data = data if isinstance(data, dict) else {}
        fields = data.get("fields") or {}
        issue_type = (fields.get("issuetype") or {}).get("name") or ""
        description = pick_description_text(fields, data.get("renderedFields")).strip()
        sections = extract_sections(description)

        return ParsedIssue(
            issue_key=data.get("key") or issue_key,
            issue_type=issue_type,
            summary=fields.get("summary") or "",
            description=description,
            acceptance_criteria=sections.acceptance_criteria,
            steps_to_reproduce=sections.steps_to_reproduce,
            expected_result=sections.expected_result,
            actual_result=sections.actual_result,
            environment=sections.environment,
        )
