"""
Content Fetcher for SlideCraft

Fetches a web page and extracts the metadata and body text the deck
synthesizer works from:

- title:       og:title > twitter:title > <title>
- description: og:description > twitter:description > meta description
- image:       og:image > twitter:image
- content:     longest text among common article containers, whitespace
               collapsed and truncated to SCRAPE_CONTENT_LIMIT
"""

import re
from typing import Optional
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from config.settings import get_settings
from slidecraft.core.errors import UpstreamError, ValidationError
from slidecraft.models.content import ScrapedContent
from slidecraft.utils.logger import setup_logger

logger = setup_logger(__name__)


# Tried in order; the longest text wins, `body` is the catch-all
CONTENT_SELECTORS = [
    "article",
    "main",
    '[role="main"]',
    ".post-content",
    ".article-content",
    ".entry-content",
    "body",
]

_WHITESPACE = re.compile(r"\s+")


class ContentFetcher:
    """
    HTTP client that turns a URL into ScrapedContent.

    Usage:
        fetcher = ContentFetcher()
        page = await fetcher.fetch("https://example.com/post")

    `transport` lets tests substitute an httpx.MockTransport.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        settings = get_settings()
        self.timeout = timeout or settings.SCRAPE_TIMEOUT
        self.content_limit = settings.SCRAPE_CONTENT_LIMIT
        self.user_agent = settings.SCRAPE_USER_AGENT
        self.transport = transport

    @staticmethod
    def validate_url(url: Optional[str]) -> str:
        """Return the URL if it is an absolute http(s) URL, else raise ValidationError."""
        if not url or not url.strip():
            raise ValidationError("URL is required")

        url = url.strip()
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValidationError("Invalid URL format", details={"url": url})
        return url

    async def fetch(self, url: str) -> ScrapedContent:
        """
        Download and extract a page.

        Raises:
            ValidationError: URL missing or malformed
            UpstreamError: non-2xx response (status preserved) or network failure
        """
        url = self.validate_url(url)
        logger.info(f"Fetching content from {url}")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self.transport,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent}
            ) as client:
                response = await client.get(url)
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch {url}: {type(e).__name__}: {e}")
            raise UpstreamError(f"Failed to scrape URL: {e}") from e

        if not response.is_success:
            logger.warning(f"Fetch of {url} returned HTTP {response.status_code}")
            raise UpstreamError(
                f"Failed to fetch URL: {response.reason_phrase}",
                upstream_status=response.status_code
            )

        page = self.extract(response.text, str(response.url))
        logger.info(
            f"Extracted '{page.title[:60]}' from {url} ({len(page.content)} chars of content)"
        )
        return page

    def extract(self, html: str, url: str) -> ScrapedContent:
        """Extract metadata and main text from an HTML document."""
        soup = BeautifulSoup(html, "lxml")

        title_tag = soup.find("title")
        title = (
            _meta(soup, property="og:title")
            or _meta(soup, name="twitter:title")
            or (title_tag.get_text() if title_tag else "")
        )
        description = (
            _meta(soup, property="og:description")
            or _meta(soup, name="twitter:description")
            or _meta(soup, name="description")
        )
        image = _meta(soup, property="og:image") or _meta(soup, name="twitter:image")

        return ScrapedContent(
            title=title.strip(),
            description=description.strip(),
            image=image.strip(),
            content=self._main_text(soup),
            url=url,
        )

    def _main_text(self, soup: BeautifulSoup) -> str:
        for tag in soup(["script", "style", "noscript", "template"]):
            tag.decompose()

        best = ""
        for selector in CONTENT_SELECTORS:
            node = soup.select_one(selector)
            if node is None:
                continue
            text = node.get_text(" ")
            if len(text) > len(best):
                best = text

        return _WHITESPACE.sub(" ", best).strip()[:self.content_limit]


def _meta(soup: BeautifulSoup, **attrs) -> str:
    """`content` of the first <meta> matching attrs, or ''."""
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return ""
    return tag.get("content") or ""
