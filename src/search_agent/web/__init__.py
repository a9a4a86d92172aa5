"""
Web access: page readers and search providers.
"""

from search_agent.web.content_fetcher import JinaReader, WebContentFetcher
from search_agent.web.search import BraveSearch

__all__ = ["BraveSearch", "JinaReader", "WebContentFetcher"]
