"""
Web Content Fetchers

Turn a URL into readable text, either through the Jina reader service or by
fetching the page directly and cleaning the HTML ourselves.
"""

import asyncio
import logging
import re

import httpx
from bs4 import BeautifulSoup, Tag
from bs4.element import NavigableString

from ..errors import FetchError
from ..utils import is_url_blocked, is_valid_url

logger = logging.getLogger("search_agent.web")


def _check_url(url: str) -> None:
    if not is_valid_url(url):
        raise FetchError(url, "Invalid URL format. Must start with http:// or https://")
    if is_url_blocked(url):
        raise FetchError(url, "URL blocked - domain not allowed for fetching")


class JinaReader:
    """Fetches readable markdown for a URL through r.jina.ai."""

    READER_URL = "https://r.jina.ai/"

    def __init__(
        self,
        api_key: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "X-Md-Link-Style": "discarded",
            "X-Remove-Selector": "header, footer, nav",
            "X-Retain-Images": "none",
        }

    async def fetch(self, url: str) -> str:
        _check_url(url)
        if not self.api_key:
            raise FetchError(url, "JINA_API_KEY is required for the Jina reader")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.get(
                    f"{self.READER_URL}{url}", headers=self._headers()
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(
                url, f"HTTP {e.response.status_code}: {e.response.reason_phrase}"
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(url, f"Request failed: {e}") from e

        logger.debug(f"📄 Read {url} ({len(response.text)} chars)")
        return response.text


class WebContentFetcher:
    """Fetches pages directly and extracts their main text with BeautifulSoup."""

    def __init__(
        self,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout
        self.transport = transport

    # Browser headers to avoid bot detection
    DEFAULT_HEADERS = {
        "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Accept-Encoding": "identity",
    }

    # HTML elements that add noise to content
    NOISE_ELEMENTS = ["script", "style", "nav", "header", "footer", "aside", "form"]

    # CSS selectors for finding main content
    CONTENT_SELECTORS = [
        "main",
        "article",
        '[role="main"]',
        ".content",
        ".post-content",
        ".article-content",
        ".entry-content",
        "#content",
        "#main-content",
    ]

    BLOCK_ELEMENTS = {
        "p", "div", "section", "article", "h1", "h2", "h3", "h4", "h5", "h6",
    }

    async def fetch(self, url: str) -> str:
        _check_url(url)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, follow_redirects=True, transport=self.transport
            ) as client:
                response = await self._get_with_retry(client, url)
        except httpx.HTTPStatusError as e:
            raise FetchError(
                url, f"HTTP {e.response.status_code}: {e.response.reason_phrase}"
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(url, f"Request failed: {e}") from e

        logger.debug(
            f"🔍 {url}: {response.status_code} "
            f"{response.headers.get('content-type', 'unknown')} "
            f"{len(response.content)} bytes"
        )
        return self.extract_text(response.text)

    async def _get_with_retry(
        self, client: httpx.AsyncClient, url: str
    ) -> httpx.Response:
        """GET a page, trying once more after a brief wait when rate limited."""
        response = await client.get(url, headers=self.DEFAULT_HEADERS)
        if response.status_code == 429:
            await asyncio.sleep(2)
            response = await client.get(url, headers=self.DEFAULT_HEADERS)
        response.raise_for_status()
        return response

    def extract_text(self, html: str) -> str:
        """Strip noise from an HTML document and return its main text."""
        soup = BeautifulSoup(html, "html.parser")
        for element in soup(self.NOISE_ELEMENTS):
            element.decompose()
        return self._extract_clean_text(self._find_main_content(soup))

    def _find_main_content(self, soup: BeautifulSoup) -> Tag | BeautifulSoup:
        for selector in self.CONTENT_SELECTORS:
            main_content = soup.select_one(selector)
            if main_content:
                return main_content

        body_element = soup.find("body")
        if body_element and isinstance(body_element, Tag):
            return body_element

        return soup

    def _extract_clean_text(self, element: Tag | BeautifulSoup) -> str:
        """Extract text with proper spacing between elements."""

        def extract_text_with_spacing(elem) -> str:
            if isinstance(elem, NavigableString):
                return str(elem).strip()

            text_parts = [
                child_text
                for child in elem.children
                if (child_text := extract_text_with_spacing(child))
            ]
            if elem.name == "br":
                return "\n"
            if not text_parts:
                return ""
            if elem.name in self.BLOCK_ELEMENTS:
                return " ".join(text_parts) + "\n\n"
            if elem.name == "li":
                return "• " + " ".join(text_parts) + "\n"
            return " ".join(text_parts) + " "

        text_content = extract_text_with_spacing(element)

        # Max 2 consecutive newlines, collapse runs of spaces
        text_content = re.sub(r"\n\s*\n\s*\n", "\n\n", text_content)
        text_content = re.sub(r" +", " ", text_content)

        return text_content.strip()
