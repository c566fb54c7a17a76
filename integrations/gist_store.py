"""Gist-backed store for the published resources.json.

The gist holds the current list as resources.json and one dated archival
copy per publication (resources.YYYY-MM-DD.json).
"""

import json
import logging
from datetime import date
from typing import Dict, Optional

from config.automation_config import GITHUB_API_URL, RESOURCES_FILENAME, USER_AGENT
from integrations.github_api import request_with_retry

logger = logging.getLogger(__name__)


def _headers(token: str) -> Dict[str, str]:
    return {
        "Authorization": f"token {token}",
        "Accept": "application/vnd.github.v3+json",
        "User-Agent": USER_AGENT,
    }


def archive_filename(day: date) -> str:
    stem, _, suffix = RESOURCES_FILENAME.rpartition(".")
    return f"{stem}.{day.isoformat()}.{suffix}"


class GistStore:
    """Read and publish resources.json in a single gist."""

    def __init__(self, gist_id: str, token: str, api_url: str = GITHUB_API_URL):
        if not gist_id:
            raise ValueError("GIST_ID environment variable is required")
        if not token:
            raise ValueError("GIST_TOKEN environment variable is required")
        self.gist_id = gist_id
        self.token = token
        self.api_url = api_url.rstrip("/")

    @property
    def gist_url(self) -> str:
        return f"{self.api_url}/gists/{self.gist_id}"

    def verify_token(self) -> str:
        """Check the token is still valid; returns the owning login."""
        response = request_with_retry("GET", f"{self.api_url}/user", headers=_headers(self.token))
        login = response.json().get("login")
        logger.info("GIST_TOKEN is valid for user: %s", login)
        return login

    def fetch_current(self) -> Dict:
        """Fetch the published document.

        Returns:
            Parsed resources.json, or {"resources": []} when the gist has none

        Raises:
            GitHubAPIError: If the gist cannot be read
            ValueError: If resources.json is not valid JSON
        """
        logger.info("Fetching current resources from gist %s", self.gist_id)
        gist = request_with_retry("GET", self.gist_url, headers=_headers(self.token)).json()

        gist_file = (gist.get("files") or {}).get(RESOURCES_FILENAME)
        if not gist_file:
            logger.warning("No existing %s found in gist, starting fresh", RESOURCES_FILENAME)
            return {"resources": []}

        try:
            document = json.loads(gist_file.get("content") or "")
        except json.JSONDecodeError as e:
            raise ValueError(f"Published {RESOURCES_FILENAME} is not valid JSON: {e}") from e

        logger.info(
            "Current resources fetched: %d",
            len(document.get("resources") or []) if isinstance(document, dict) else 0,
        )
        return document

    def publish(self, document: Dict, day: Optional[date] = None) -> Dict:
        """Write the document as resources.json plus a dated archival copy.

        Returns:
            Gist API response
        """
        day = day or date.today()
        content = json.dumps(document, indent=2)
        archived = archive_filename(day)

        payload = {
            "files": {
                RESOURCES_FILENAME: {"content": content},
                archived: {"content": content},
            }
        }
        headers = dict(_headers(self.token), **{"Content-Type": "application/json"})
        result = request_with_retry("PATCH", self.gist_url, headers=headers, json_data=payload).json()

        logger.info(
            "Gist updated: current=%s archived=%s url=%s",
            RESOURCES_FILENAME,
            archived,
            result.get("html_url"),
        )
        return result
