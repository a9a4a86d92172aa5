import asyncio
import itertools
import logging

import httpx
from httpcore._async.connection import exponential_backoff

from ...errors import SearchError
from ...types import SearchResultItem

logger = logging.getLogger("search_agent.web")


class BraveSearch:
    """Web search through the Brave Search API."""

    API_URL = "https://api.search.brave.com/res/v1/web/search"

    def __init__(
        self,
        api_key: str,
        count: int = 10,
        timeout: float = 300.0,
        max_retries: int = 5,
        backoff_factor: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.count = count
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.transport = transport

    async def search(self, query: str) -> list[SearchResultItem]:
        """
        Perform a web search using the Brave Search API.

        Args:
            query: The search query string

        Returns:
            Results in provider rank order

        Raises:
            SearchError: If the API key is missing or the API request fails
        """
        if not self.api_key:
            raise SearchError("BRAVE_API_KEY environment variable is required", query)

        headers = {
            "Accept": "application/json",
            "Accept-Encoding": "gzip",
            "X-Subscription-Token": self.api_key,
        }

        params = {
            "q": str(query),
            "count": str(min(self.count, 20)),  # Brave API max is 20
            "search_lang": "en",
            "country": "US",
            "safesearch": "moderate",
            "freshness": "all",
        }

        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self.transport
        ) as client:
            for attempt, delay in enumerate(
                itertools.islice(
                    exponential_backoff(factor=self.backoff_factor),
                    self.max_retries + 1,
                )
            ):
                await asyncio.sleep(delay)  # 0, 1, 2, 4, 8, 16 seconds

                try:
                    response = await client.get(
                        self.API_URL, headers=headers, params=params
                    )
                    response.raise_for_status()
                except httpx.TimeoutException as e:
                    raise SearchError("Search request timed out", query) from e
                except httpx.HTTPStatusError as e:
                    # Handle rate limiting with exponential backoff
                    if e.response.status_code == 429 and attempt < self.max_retries:
                        logger.warning(
                            f"⏳ Rate limited, retrying (attempt {attempt + 1}/{self.max_retries + 1})"
                        )
                        continue
                    raise SearchError(
                        f"Search API returned status {e.response.status_code}: {e.response.text}",
                        query,
                    ) from e
                except httpx.HTTPError as e:
                    raise SearchError(f"Search request failed: {e}", query) from e

                return self.parse_results(response.json())

        raise SearchError("Maximum retries exceeded for rate limited requests", query)

    @staticmethod
    def parse_results(data: dict) -> list[SearchResultItem]:
        """Extract ordered results from a Brave API response body."""
        return [
            SearchResultItem(
                url=result.get("url", ""),
                title=result.get("title", ""),
                description=result.get("description", ""),
            )
            for result in data.get("web", {}).get("results", [])
        ]
