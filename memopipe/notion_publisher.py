"""
Notion page publishing.

Each processed memo becomes one Notion page under a configured parent page.
The transcript is split with :func:`memopipe.chunker.split_text` because a
single rich-text block is limited to 2000 characters; every chunk becomes a
paragraph block, in order, in a single page-creation request.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

import requests

from .chunker import DEFAULT_CHUNK_SIZE, split_text
from .config import Settings
from .errors import ConfigurationError, UpstreamAPIError

logger = logging.getLogger(__name__)

NOTION_PAGES_URL = "https://api.notion.com/v1/pages"
NOTION_VERSION = "2022-06-28"


def paragraph_block(content: str) -> Dict:
    return {
        "object": "block",
        "type": "paragraph",
        "paragraph": {
            "rich_text": [{"type": "text", "text": {"content": content}}],
        },
    }


def build_page_payload(parent_page_id: str, title: str, chunks: Sequence[str]) -> Dict:
    """Build the JSON body for a page-creation request.

    Args:
        parent_page_id: ID of the page the new page is created under.
        title: Page title.
        chunks: Text chunks, one paragraph block each.

    Returns:
        A dictionary ready to be sent as JSON.
    """
    children: List[Dict] = [paragraph_block(chunk) for chunk in chunks]
    return {
        "parent": {"type": "page_id", "page_id": parent_page_id},
        "properties": {"title": {"title": [{"text": {"content": title}}]}},
        "children": children,
    }


class NotionPublisher:
    def __init__(self, api_token: str = "", parent_page_id: str = "", *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.api_token = api_token
        self.parent_page_id = parent_page_id
        self.chunk_size = chunk_size

    @classmethod
    def from_settings(cls, settings: Settings) -> "NotionPublisher":
        return cls(api_token=settings.notion_api_token, parent_page_id=settings.notion_parent_page_id)

    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
            "Notion-Version": NOTION_VERSION,
        }

    def publish(self, title: str, text: str) -> str:
        """Create a page titled ``title`` holding ``text`` and return its ID.

        Raises:
            ConfigurationError: If the token or parent page ID is not set.
                No request is made in that case.
            UpstreamAPIError: If the request fails or the response carries
                no page ID.
        """
        if not self.api_token or not self.parent_page_id:
            raise ConfigurationError("NOTION_API_TOKEN and NOTION_PARENT_PAGE_ID must be set")

        chunks = split_text(text, self.chunk_size)
        payload = build_page_payload(self.parent_page_id, title, chunks)
        logger.info("Creating Notion page: %s (%d block(s))", title, len(chunks))
        try:
            response = requests.post(NOTION_PAGES_URL, headers=self.headers(), json=payload)
        except requests.RequestException as exc:
            raise UpstreamAPIError("notion", str(exc)) from exc

        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("id"):
            return str(body["id"])

        message = "Unknown error"
        if isinstance(body, dict) and body.get("message"):
            message = str(body["message"])
        raise UpstreamAPIError("notion", message, status_code=response.status_code)
