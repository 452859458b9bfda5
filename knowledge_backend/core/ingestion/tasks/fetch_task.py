"""
Outbound HTTP fetch task.

Fetches a public URL with requests, following redirects one hop at a
time so every hop is checked against the private-host guard before it
is requested.

Dependencies: requests
System role: Network stage for crawling and URL indexing
"""

import logging
from dataclasses import dataclass
from urllib.parse import urljoin

import requests

from knowledge_backend.core.exceptions import UpstreamFetchError
from knowledge_backend.core.ingestion.url_safety import UnsafeURLError, validate_public_url

logger = logging.getLogger(__name__)

MAX_REDIRECTS = 5
REDIRECT_CODES = {301, 302, 303, 307, 308}


@dataclass(frozen=True)
class FetchedPage:
    """Response of a completed fetch."""

    url: str
    status_code: int
    content_type: str
    content: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_html(self) -> bool:
        ct = self.content_type.lower()
        return "text/html" in ct or "application/xhtml" in ct


class FetchTask:
    """Fetch pages from public hosts."""

    def __init__(
        self,
        timeout: float = 20.0,
        user_agent: str = "KnowledgeBaseCrawler/1.0",
        session: requests.Session | None = None,
    ) -> None:
        """
        Initialize fetch task.

        Args:
            timeout: Per-request timeout in seconds
            user_agent: User-Agent header sent with every request
            session: Pre-built session (tests inject a mock)
        """
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": user_agent})

    def fetch(self, url: str) -> FetchedPage:
        """
        Fetch a URL, following redirects to public hosts only.

        Args:
            url: Absolute http(s) URL

        Returns:
            FetchedPage: Final response, whatever its status

        Raises:
            UpstreamFetchError: Network failure, too many redirects, or a
                redirect to a blocked host
        """
        current = url
        for _ in range(MAX_REDIRECTS + 1):
            try:
                validate_public_url(current)
            except UnsafeURLError as e:
                raise UpstreamFetchError(f"Redirect blocked: {e}", url=current) from e

            try:
                resp = self._session.get(current, timeout=self.timeout, allow_redirects=False)
            except requests.RequestException as e:
                raise UpstreamFetchError(f"Fetch failed: {e}", url=current) from e

            location = resp.headers.get("Location")
            if resp.status_code in REDIRECT_CODES and location:
                current = urljoin(current, location)
                continue

            return FetchedPage(
                url=current,
                status_code=resp.status_code,
                content_type=resp.headers.get("Content-Type", ""),
                content=resp.content,
            )

        raise UpstreamFetchError("Too many redirects", url=url)
