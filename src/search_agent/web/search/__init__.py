"""
Web search providers.
"""

from search_agent.web.search.web_search import BraveSearch

__all__ = ["BraveSearch"]
