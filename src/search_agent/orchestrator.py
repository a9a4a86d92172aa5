"""
Search Orchestration

Wires settings, capabilities and the two agent variants together and exposes
the entry points callers use: a streaming run, or a fully collected answer.
"""

import time
from typing import Literal

from .agents import (
    AgentRun,
    AnswerSynthesizer,
    BaseAgent,
    ContinuationJudge,
    FixedPipelineAgent,
    QueryPlanner,
    ToolDrivenAgent,
)
from .generation import StrandsLanguageModel
from .generation.capabilities import ContentFetcher, LanguageModel, WebSearcher
from .logger import setup_logging
from .models import create_model
from .processing import AnswerCollector
from .settings import Settings, get_settings
from .tracing import EventSink, LoggingEventSink
from .types import SearchAnswer
from .web import BraveSearch, JinaReader, WebContentFetcher

AgentMode = Literal["pipeline", "tools"]


def create_fetcher(settings: Settings) -> ContentFetcher:
    """Create the page reader selected in settings."""
    if settings.reader == "direct":
        return WebContentFetcher(timeout=settings.fetch_timeout)
    return JinaReader(settings.jina_api_key, timeout=settings.fetch_timeout)


def create_searcher(settings: Settings) -> WebSearcher:
    return BraveSearch(
        settings.brave_api_key,
        timeout=settings.search_timeout,
        max_retries=settings.search_max_retries,
    )


class SearchOrchestrator:
    """Builds agents from configuration and runs them."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        model: LanguageModel | None = None,
        searcher: WebSearcher | None = None,
        fetcher: ContentFetcher | None = None,
        sink: EventSink | None = None,
    ):
        self.settings = settings or get_settings()

        # Set up logging
        self.agent_logger = setup_logging()
        self.sink = sink or LoggingEventSink(self.agent_logger)

        self.model = model or StrandsLanguageModel(
            create_model(self.settings), sink=self.sink
        )
        self.searcher = searcher or create_searcher(self.settings)
        self.fetcher = fetcher or create_fetcher(self.settings)

    def create_agent(self, mode: AgentMode | None = None) -> BaseAgent:
        mode = mode or self.settings.agent_mode
        if mode == "pipeline":
            return FixedPipelineAgent(
                QueryPlanner(self.model, self.sink),
                ContinuationJudge(self.model, self.sink),
                AnswerSynthesizer(self.model, self.sink),
                self.searcher,
                self.fetcher,
                max_rounds=self.settings.max_rounds,
                sink=self.sink,
            )
        if mode == "tools":
            return ToolDrivenAgent(
                self.model, self.searcher, self.fetcher, sink=self.sink
            )
        raise ValueError(f"Unknown agent mode: {mode!r}")

    def run(self, query: str, mode: AgentMode | None = None) -> AgentRun:
        """Start a streaming run; nothing happens until it is iterated."""
        return self.create_agent(mode).run(query)

    async def answer(self, query: str, mode: AgentMode | None = None) -> SearchAnswer:
        """
        Run an agent to completion and collect what it produced.

        Errors from the run propagate unchanged.
        """
        start = time.time()
        self.agent_logger.info(f"🚀 Answering: {query}")

        collector = AnswerCollector(query)
        async with self.run(query, mode) as run:
            async for event in run:
                collector.add(event)

        self.agent_logger.info(
            f"✨ Finished '{query}' in {time.time() - start:.2f} seconds "
            f"({len(collector.search_queries)} searches, {len(collector.urls_read)} pages)"
        )
        return collector.result(run.outcome)
