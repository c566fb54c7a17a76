"""GitHub REST and GraphQL calls for issue lanes and Projects v2 status.

All requests go through request_with_retry, which retries throttling, server
errors and transport failures with exponential backoff and raises
GitHubAPIError once retries are exhausted or on a client error.
"""

import logging
import random
import time
from typing import Dict, List, Optional

import requests

from config.automation_config import (
    API_BASE_DELAY_SECONDS,
    GITHUB_API_URL,
    GITHUB_API_VERSION,
    GITHUB_GRAPHQL_URL,
    GITHUB_TOKEN,
    MAX_API_RETRIES,
    REQUEST_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)

PER_PAGE = 100
RETRYABLE_STATUS = (429, 500, 502, 503, 504)


class GitHubAPIError(Exception):
    """A GitHub call failed and will not be retried."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"GitHub API {status_code}: {message}")
        self.status_code = status_code


def request_with_retry(
    method: str,
    url: str,
    headers: Optional[Dict] = None,
    json_data=None,
    params: Optional[Dict] = None,
    timeout: int = REQUEST_TIMEOUT_SECONDS,
    max_retries: int = MAX_API_RETRIES,
    base_delay: float = API_BASE_DELAY_SECONDS,
) -> requests.Response:
    """Send an HTTP request, retrying transient failures.

    Args:
        method: HTTP method
        url: Absolute URL
        headers: HTTP headers
        json_data: JSON body
        params: Query parameters
        timeout: Request timeout in seconds
        max_retries: Retries after the first attempt
        base_delay: Base delay in seconds for exponential backoff

    Returns:
        Successful response (2xx)

    Raises:
        GitHubAPIError: On a client error or once retries are exhausted
    """
    for attempt in range(max_retries + 1):
        try:
            response = requests.request(
                method,
                url,
                headers=headers,
                json=json_data,
                params=params,
                timeout=timeout,
            )
        except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
            if attempt >= max_retries:
                logger.error("Max retries (%d) exhausted for %s %s", max_retries, method, url)
                raise GitHubAPIError(0, f"{type(e).__name__} for {method} {url}: {e}") from e
            delay = base_delay * (2 ** attempt) + random.uniform(0, 1)
            logger.warning(
                "%s for %s %s, retrying in %.2fs (attempt %d/%d)",
                type(e).__name__, method, url, delay, attempt + 1, max_retries,
            )
            time.sleep(delay)
            continue

        if response.ok:
            return response

        if response.status_code not in RETRYABLE_STATUS:
            raise GitHubAPIError(
                response.status_code,
                f"{response.reason} for {method} {url}: {response.text[:500]}",
            )

        if attempt >= max_retries:
            logger.error("Max retries (%d) exhausted for %s %s", max_retries, method, url)
            raise GitHubAPIError(
                response.status_code,
                f"{response.reason} after {max_retries} retries for {method} {url}: {response.text[:500]}",
            )

        delay = base_delay * (2 ** attempt) + random.uniform(0, 1)
        logger.warning(
            "HTTP %d for %s %s, retrying in %.2fs (attempt %d/%d)",
            response.status_code, method, url, delay, attempt + 1, max_retries,
        )
        time.sleep(delay)

    # Should never reach here
    raise RuntimeError("Retry logic failed unexpectedly")


class GitHubClient:
    """Thin client over the REST and GraphQL endpoints used by the lane scripts."""

    def __init__(
        self,
        token: Optional[str] = GITHUB_TOKEN,
        api_url: str = GITHUB_API_URL,
        graphql_url: str = GITHUB_GRAPHQL_URL,
    ):
        if not token:
            raise ValueError("GITHUB_TOKEN not set")
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.graphql_url = graphql_url

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }

    def rest(self, method: str, path: str, json_data=None, params=None) -> requests.Response:
        return request_with_retry(
            method,
            f"{self.api_url}{path}",
            headers=self._headers(),
            json_data=json_data,
            params=params,
        )

    def graphql(self, query: str, variables: Optional[Dict] = None) -> Dict:
        """Run a GraphQL query and return its data member.

        Raises:
            GitHubAPIError: If the response carries GraphQL errors
        """
        response = request_with_retry(
            "POST",
            self.graphql_url,
            headers=self._headers(),
            json_data={"query": query, "variables": variables or {}},
        )
        payload = response.json()
        if payload.get("errors"):
            raise GitHubAPIError(response.status_code, f"GraphQL error: {payload['errors']}")
        return payload.get("data") or {}

    # Issues and labels

    def list_open_issues(self, owner: str, repo: str) -> List[Dict]:
        """List open issues, excluding pull requests."""
        issues = []
        page = 1
        while True:
            data = self.rest(
                "GET",
                f"/repos/{owner}/{repo}/issues",
                params={"state": "open", "per_page": PER_PAGE, "page": page},
            ).json()
            issues.extend(item for item in data if not item.get("pull_request"))
            if len(data) < PER_PAGE:
                break
            page += 1
        logger.info("Fetched %d open issues from %s/%s", len(issues), owner, repo)
        return issues

    def get_issue(self, owner: str, repo: str, number: int) -> Dict:
        return self.rest("GET", f"/repos/{owner}/{repo}/issues/{number}").json()

    def create_issue(
        self,
        owner: str,
        repo: str,
        title: str,
        body: str,
        labels: Optional[List[str]] = None,
        assignees: Optional[List[str]] = None,
    ) -> Dict:
        payload = {"title": title, "body": body, "labels": labels or []}
        if assignees:
            payload["assignees"] = assignees
        return self.rest("POST", f"/repos/{owner}/{repo}/issues", json_data=payload).json()

    def search_issues(self, owner: str, repo: str, title: str, state: Optional[str] = None) -> List[Dict]:
        """Search issues whose title contains ``title``."""
        query = f'"{title}" in:title repo:{owner}/{repo} type:issue'
        if state:
            query += f" state:{state}"
        data = self.rest("GET", "/search/issues", params={"q": query, "per_page": PER_PAGE}).json()
        return data.get("items") or []

    def set_issue_labels(self, owner: str, repo: str, number: int, labels: List[str]) -> None:
        self.rest("PATCH", f"/repos/{owner}/{repo}/issues/{number}", json_data={"labels": labels})

    def add_comment(self, owner: str, repo: str, number: int, body: str) -> None:
        self.rest("POST", f"/repos/{owner}/{repo}/issues/{number}/comments", json_data={"body": body})

    def list_labels(self, owner: str, repo: str) -> List[Dict]:
        labels = []
        page = 1
        while True:
            data = self.rest(
                "GET",
                f"/repos/{owner}/{repo}/labels",
                params={"per_page": PER_PAGE, "page": page},
            ).json()
            labels.extend(data)
            if len(data) < PER_PAGE:
                break
            page += 1
        return labels

    def ensure_label(self, owner: str, repo: str, name: str, color: str, description: str) -> Dict:
        """Return the label, creating it if the repository lacks it."""
        for label in self.list_labels(owner, repo):
            if label.get("name", "").lower() == name.lower():
                return label
        logger.info("Creating label '%s' in %s/%s", name, owner, repo)
        return self.rest(
            "POST",
            f"/repos/{owner}/{repo}/labels",
            json_data={"name": name, "color": color, "description": description},
        ).json()

    # Projects v2

    def get_project(self, owner: str, number: int) -> Dict:
        """Find a Projects v2 board owned by an organization or a user."""
        fields = (
            "fields(first:100){ nodes{ __typename "
            "... on ProjectV2FieldCommon { id name } "
            "... on ProjectV2SingleSelectField { id name options{ id name } } } }"
        )
        for owner_type in ("organization", "user"):
            query = (
                f"query($login:String!,$number:Int!){{ {owner_type}(login:$login){{ "
                f"projectV2(number:$number){{ id number {fields} }} }} }}"
            )
            try:
                data = self.graphql(query, {"login": owner, "number": number})
            except GitHubAPIError as e:
                if owner_type == "organization":
                    logger.debug("No organization project for %s: %s", owner, e)
                    continue
                raise
            project = (data.get(owner_type) or {}).get("projectV2")
            if project:
                return project
        raise GitHubAPIError(404, f"Project {number} not found for owner {owner}")

    def get_issue_project_item_id(self, issue_node_id: str, project_id: str) -> Optional[str]:
        query = (
            "query($id:ID!){ node(id:$id){ ... on Issue { "
            "projectItems(first:20){ nodes{ id project{ id number } } } } } }"
        )
        data = self.graphql(query, {"id": issue_node_id})
        items = ((data.get("node") or {}).get("projectItems") or {}).get("nodes") or []
        for item in items:
            if (item.get("project") or {}).get("id") == project_id:
                return item.get("id")
        return None

    def add_issue_to_project(self, project_id: str, content_id: str) -> Optional[str]:
        mutation = (
            "mutation($projectId:ID!,$contentId:ID!){ "
            "addProjectV2ItemById(input:{projectId:$projectId, contentId:$contentId}){ item{ id } } }"
        )
        data = self.graphql(mutation, {"projectId": project_id, "contentId": content_id})
        return ((data.get("addProjectV2ItemById") or {}).get("item") or {}).get("id")

    def set_project_item_status(self, project_id: str, item_id: str, field_id: str, option_id: str) -> None:
        mutation = (
            "mutation($projectId:ID!,$itemId:ID!,$fieldId:ID!,$optionId:String!){ "
            "updateProjectV2ItemFieldValue(input:{ projectId:$projectId, itemId:$itemId, "
            "fieldId:$fieldId, value:{ singleSelectOptionId:$optionId }}){ projectV2Item{ id } } }"
        )
        self.graphql(
            mutation,
            {"projectId": project_id, "itemId": item_id, "fieldId": field_id, "optionId": option_id},
        )


def find_status_field(project: Dict, field_name: str) -> Dict:
    """Return the single-select field named ``field_name`` (case-insensitive).

    Raises:
        ValueError: If the field is missing or not single-select
    """
    nodes = (project.get("fields") or {}).get("nodes") or []
    for node in nodes:
        if str(node.get("name", "")).lower() == field_name.lower():
            if node.get("options") is None:
                raise ValueError(f"Field '{field_name}' is not a single-select field")
            return node
    raise ValueError(f"Field '{field_name}' not found in Project {project.get('number')}")


def option_id_by_name(field: Dict, name: str) -> Optional[str]:
    for option in field.get("options") or []:
        if str(option.get("name", "")).lower() == name.lower():
            return option.get("id")
    return None
