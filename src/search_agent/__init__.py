"""
Search Agent Package

A conversational web search agent that streams its progress: the queries it
searches, the pages it reads, and a cited answer as it is written.
"""

from search_agent.logger import setup_logging
from search_agent.orchestrator import SearchOrchestrator

__version__ = "1.0.0"
__all__ = ["SearchOrchestrator", "setup_logging"]
