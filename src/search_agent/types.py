"""
Common type definitions for the search agent.

TypedDict definitions for the event vocabulary shared by both agent variants,
plus the records the agents pass around.
"""

from enum import Enum
from typing import Any, Literal, TypedDict, Union


class SearchResultItem(TypedDict):
    """Individual search result from the web search provider."""

    url: str
    title: str
    description: str


class KnowledgeItem(TypedDict):
    """One fetched page, tagged with where it came from."""

    url: str
    title: str
    content: str


class SearchingEvent(TypedDict):
    type: Literal["searching"]
    query: str


class ReadingEvent(TypedDict):
    type: Literal["reading"]
    url: str


class AnswerEvent(TypedDict):
    """Cumulative answer text; consumers diff successive events themselves."""

    type: Literal["answer"]
    content: str


class CitationsEvent(TypedDict):
    """Latest citation list; replaces any previous one for the same run."""

    type: Literal["citations"]
    citations: list[dict[str, Any]]


AgentEvent = Union[SearchingEvent, ReadingEvent, AnswerEvent, CitationsEvent]


class Outcome(str, Enum):
    """How a finished agent run ended."""

    ANSWERED = "answered"
    # Tool-driven agent used up its steps without producing an answer
    EMPTY = "empty"


def searching_event(query: str) -> SearchingEvent:
    return {"type": "searching", "query": query}


def reading_event(url: str) -> ReadingEvent:
    return {"type": "reading", "url": url}


def answer_event(content: str) -> AnswerEvent:
    return {"type": "answer", "content": content}


def citations_event(citations: list[dict[str, Any]]) -> CitationsEvent:
    return {"type": "citations", "citations": citations}


class SearchAnswer(TypedDict):
    """Everything a fully consumed run produced."""

    query: str
    content: str
    citations: list[dict[str, Any]]
    search_queries: list[str]
    urls_read: list[str]
    outcome: str
    generated_at: str
