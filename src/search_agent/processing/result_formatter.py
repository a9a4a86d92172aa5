"""
Result formatting and output processing.

Builds the final ``SearchAnswer`` from a consumed run and renders it as
markdown with a sources section.
"""

from datetime import datetime
from urllib.parse import urlparse, urlunparse

from ..schemas import PartialCitation
from ..types import AgentEvent, Outcome, SearchAnswer


def normalize_url(url: str) -> str:
    """
    Normalize URLs for consistent comparison.

    Lowercases scheme, host and path, drops a trailing slash and ignores
    query parameters and fragments.
    """
    parsed = urlparse(url.strip())
    path = parsed.path.rstrip("/").lower()
    return urlunparse((parsed.scheme.lower(), parsed.netloc.lower(), path, "", "", ""))


class AnswerCollector:
    """Folds a stream of agent events into the final answer state."""

    def __init__(self, query: str):
        self.query = query
        self.content = ""
        self.citations: list[dict] = []
        self.search_queries: list[str] = []
        self.urls_read: list[str] = []

    def add(self, event: AgentEvent) -> None:
        if event["type"] == "searching":
            self.search_queries.append(event["query"])
        elif event["type"] == "reading":
            self.urls_read.append(event["url"])
        elif event["type"] == "answer":
            self.content = event["content"]
        elif event["type"] == "citations":
            # Latest list wins; never merge
            self.citations = list(event["citations"])

    def result(self, outcome: Outcome | None) -> SearchAnswer:
        return SearchAnswer(
            query=self.query,
            content=self.content,
            citations=self.citations,
            search_queries=self.search_queries,
            urls_read=self.urls_read,
            outcome=(outcome or Outcome.EMPTY).value,
            generated_at=datetime.now().isoformat(),
        )


class ResultFormatter:
    """Renders search answers for display."""

    def format_sources(self, citations: list[dict]) -> str:
        """Numbered source lines for the citations that were fully streamed."""
        lines = []
        for data in citations:
            citation = PartialCitation.model_validate(data)
            if not citation.is_complete():
                continue
            lines.append(f"[{citation.number}] {citation.title} - {citation.url}")
        if not lines:
            return ""
        return "## Sources\n\n" + "\n".join(lines)

    def additional_sources(self, answer: SearchAnswer) -> list[str]:
        """Pages that were read but never cited, in reading order."""
        cited = {
            normalize_url(citation["url"])
            for citation in answer["citations"]
            if citation.get("url")
        }
        additional = []
        seen = set()
        for url in answer["urls_read"]:
            key = normalize_url(url)
            if key in cited or key in seen:
                continue
            seen.add(key)
            additional.append(url)
        return additional

    def format_answer(self, answer: SearchAnswer) -> str:
        """
        Render an answer as markdown.

        Args:
            answer: A collected search answer

        Returns:
            The answer text, its cited sources, and any pages read but not cited
        """
        if answer["outcome"] == Outcome.EMPTY.value and not answer["content"]:
            return "No answer was produced."

        sections = [answer["content"].strip()]

        sources = self.format_sources(answer["citations"])
        if sources:
            sections.append(sources)

        additional = self.additional_sources(answer)
        if additional:
            sections.append(
                "## Additional Sources\n\n"
                + "\n".join(f"- {url}" for url in additional)
            )

        return "\n\n".join(sections)
