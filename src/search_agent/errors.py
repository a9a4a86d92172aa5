"""
Error Taxonomy

Exceptions raised by the search agent and its capabilities. None of these are
caught or retried by the agents; they surface to whoever is consuming a run.
"""


class SearchAgentError(Exception):
    """Base exception for all search agent failures."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class GenerationError(SearchAgentError):
    """Structured, streaming or tool-calling generation failed."""


class SearchError(SearchAgentError):
    """The web search provider failed."""

    def __init__(self, message: str, query: str | None = None) -> None:
        self.query = query
        super().__init__(message)


class FetchError(SearchAgentError):
    """Retrieving readable text for a URL failed."""

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        super().__init__(f"Failed to fetch {url}: {message}")


class RoundLimitExceeded(SearchAgentError):
    """The pipeline agent ran out of planning rounds before deciding to answer."""

    def __init__(self, max_rounds: int) -> None:
        self.max_rounds = max_rounds
        super().__init__(
            f"No answer after {max_rounds} search round(s); giving up"
        )
