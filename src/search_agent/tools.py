"""
Search Tools for the Tool-Driven Agent

Tools the model can call during a tool-calling run. Each call reports itself
on the run's bridge channel before doing any work.
"""

from collections.abc import Callable
from typing import Any

from .bridge import BridgeChannel
from .errors import SearchAgentError
from .generation.capabilities import ContentFetcher, WebSearcher
from .types import reading_event, searching_event

# Results returned to the model per search call; not configurable
TOOL_SEARCH_RESULTS = 3


def create_search_tools(
    channel: BridgeChannel, searcher: WebSearcher, fetcher: ContentFetcher
) -> list[Callable[..., Any]]:
    """Create the search and read tools bound to one run's bridge channel."""

    async def search(query: str) -> list[dict[str, str]]:
        """
        Useful for when you need to answer questions using the latest knowledge.
        Input should be a google search query based on the user's question.

        Args:
            query: The generated query passed to the search tool.

        Returns:
            The top results, each with url, title and description
        """
        channel.emit(searching_event(query))
        try:
            results = await searcher.search(query)
        except SearchAgentError as e:
            channel.fail(e)
            raise
        return [
            {
                "url": result["url"],
                "title": result["title"],
                "description": result["description"],
            }
            for result in results[:TOOL_SEARCH_RESULTS]
        ]

    async def read(url: str) -> str:
        """
        Useful for when you need to read web pages.

        Args:
            url: The URL of the web page to read.

        Returns:
            The readable text of the page
        """
        channel.emit(reading_event(url))
        try:
            return await fetcher.fetch(url)
        except SearchAgentError as e:
            channel.fail(e)
            raise

    return [search, read]
