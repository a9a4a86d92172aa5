"""
Language model capabilities.

Protocols the agents depend on, and the Strands-backed implementation.
"""

from .capabilities import ContentFetcher, LanguageModel, ToolCallingRun, WebSearcher
from .partial_json import PartialObjectParser, parse_partial_object
from .strands_model import StrandsLanguageModel, StrandsToolCallingRun

__all__ = [
    "ContentFetcher",
    "LanguageModel",
    "ToolCallingRun",
    "WebSearcher",
    "PartialObjectParser",
    "parse_partial_object",
    "StrandsLanguageModel",
    "StrandsToolCallingRun",
]
