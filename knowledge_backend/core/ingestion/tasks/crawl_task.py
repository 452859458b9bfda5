"""
Breadth-first crawl task.

Fetches HTML pages from seed URLs, stays on allowed public hosts, and
persists each raw page to the blob store. Bounded by page and depth caps;
individual page failures are logged and skipped.

Dependencies: beautifulsoup4, requests (via FetchTask)
System role: Source fetcher of the indexing pipeline
"""

import logging
from collections import deque
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup

from knowledge_backend.boundary.aws.s3_client import S3BlobStoreClient
from knowledge_backend.configs import IngestionSettings
from knowledge_backend.core.exceptions import KnowledgeBaseException, ValidationError
from knowledge_backend.core.ingestion.key_utils import crawl_page_key, ensure_prefix
from knowledge_backend.core.ingestion.models import CrawlResult, SavedPage
from knowledge_backend.core.ingestion.tasks.fetch_task import FetchTask
from knowledge_backend.core.ingestion.url_safety import (
    UnsafeURLError,
    canonicalize_url,
    is_private_hostname,
    validate_public_url,
)
from knowledge_backend.observability.log_utils import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)

HTML_CONTENT_TYPE = "text/html; charset=utf-8"


def extract_links(html: str, base_url: str) -> list[str]:
    """
    Resolve anchor hrefs against base_url.

    Returns:
        list[str]: Unique http(s) links without fragments, in document order
    """
    soup = BeautifulSoup(html, "html.parser")
    links: dict[str, None] = {}
    for anchor in soup.find_all("a", href=True):
        try:
            resolved = urljoin(base_url, anchor["href"].strip())
            canonicalize_url(resolved)
        except ValueError:
            continue
        if urlsplit(resolved).scheme.lower() not in ("http", "https"):
            continue
        links[resolved.split("#", 1)[0]] = None
    return list(links)


class Crawler:
    """Bounded BFS crawler that saves raw HTML to the blob store."""

    def __init__(
        self,
        blob_client: S3BlobStoreClient,
        settings: IngestionSettings,
        fetcher: FetchTask | None = None,
    ) -> None:
        self._blob_client = blob_client
        self._settings = settings
        self._fetcher = fetcher or FetchTask(
            timeout=settings.http_timeout_seconds,
            user_agent=settings.user_agent,
        )

    def crawl(
        self,
        bucket: str,
        raw_prefix: str,
        start_urls: list[str],
        max_pages: int | None = None,
        max_depth: int | None = None,
        allowed_hosts: list[str] | None = None,
    ) -> CrawlResult:
        """
        Crawl from seed URLs and persist raw pages.

        Args:
            bucket: Destination bucket
            raw_prefix: Destination prefix (pages land under {raw_prefix}crawl/)
            start_urls: Seeds; only the first max_seed_urls are considered
            max_pages: Page cap, clamped to [1, max_pages_limit]
            max_depth: Link depth, clamped to [0, max_depth_limit]; 0 follows no links
            allowed_hosts: Hosts links may point to; defaults to the seed hosts

        Returns:
            CrawlResult: Saved pages and visit counts

        Raises:
            ValidationError: Missing bucket/prefix or no valid public seed
        """
        s = self._settings
        if not bucket or not raw_prefix:
            raise ValidationError("bucket and rawPrefix are required")

        page_limit = s.default_max_pages if max_pages is None else int(max_pages)
        page_limit = max(1, min(s.max_pages_limit, page_limit))
        depth_limit = s.default_max_depth if max_depth is None else int(max_depth)
        depth_limit = max(0, min(s.max_depth_limit, depth_limit))
        raw_p = ensure_prefix(raw_prefix)

        seeds: list[str] = []
        seed_hosts: dict[str, None] = {}
        for candidate in (start_urls or [])[: s.max_seed_urls]:
            try:
                url = validate_public_url(str(candidate or ""))
            except UnsafeURLError:
                logger.info(f"{__name__}:crawl - Dropping seed {candidate!r}")
                continue
            seeds.append(url)
            seed_hosts[urlsplit(url).hostname.lower()] = None

        if not seeds:
            raise ValidationError(
                "No valid startUrls (must be public http/https)", field="start_urls"
            )

        cleaned_hosts = [str(h).strip().lower() for h in (allowed_hosts or []) if str(h or "").strip()]
        allowed = dict.fromkeys(cleaned_hosts) if cleaned_hosts else seed_hosts

        queue: deque[tuple[str, int]] = deque((url, 0) for url in seeds)
        visited: set[str] = set()
        # Final URLs after redirects; dedup only, not counted as visits
        redirect_targets: set[str] = set()
        saved: list[SavedPage] = []

        while queue and len(saved) < page_limit:
            url, depth = queue.popleft()
            canonical = canonicalize_url(url)
            if canonical in visited or canonical in redirect_targets:
                continue
            visited.add(canonical)

            try:
                page = self._fetcher.fetch(url)
            except KnowledgeBaseException as e:
                log_exception_with_context(logger, f"{__name__}:crawl - Fetch skipped", e, url=url)
                continue

            if not page.ok or not page.is_html:
                log_with_context(
                    logger,
                    logging.INFO,
                    f"{__name__}:crawl - Skipping {url}",
                    status_code=page.status_code,
                    content_type=page.content_type,
                )
                continue

            try:
                key = crawl_page_key(raw_p, page.url)
                self._blob_client.put_object(bucket, key, page.content, HTML_CONTENT_TYPE)
            except KnowledgeBaseException as e:
                log_exception_with_context(logger, f"{__name__}:crawl - Save skipped", e, url=url)
                continue
            saved.append(SavedPage(url=page.url, key=key))
            final = canonicalize_url(page.url)
            if final not in visited:
                redirect_targets.add(final)

            if depth >= depth_limit:
                continue

            html = page.content.decode("utf-8", errors="replace")
            for link in extract_links(html, page.url):
                host = (urlsplit(link).hostname or "").lower()
                if host not in allowed or is_private_hostname(host):
                    continue
                target = canonicalize_url(link)
                if target not in visited and target not in redirect_targets:
                    queue.append((link, depth + 1))

        log_with_context(
            logger,
            logging.INFO,
            f"{__name__}:crawl - Crawl finished",
            saved=len(saved),
            visited=len(visited),
            bucket=bucket,
        )
        return CrawlResult(
            saved_count=len(saved),
            saved=saved,
            visited_count=len(visited),
            allowed_hosts=list(allowed),
        )
