"""
Fixed-pipeline agent.

Plans a query, searches, reads the top results one at a time and asks the
continuation judge after each page whether to answer or keep going. The loop
is an explicit state machine advanced one event at a time by ``__anext__``.
"""

from collections import deque
from collections.abc import AsyncIterator
from enum import Enum

from ..errors import RoundLimitExceeded
from ..generation.capabilities import ContentFetcher, WebSearcher
from ..schemas import PartialAnswer
from ..tracing import EventSink
from ..types import (
    AgentEvent,
    KnowledgeItem,
    Outcome,
    SearchResultItem,
    reading_event,
    searching_event,
)
from .answer_synthesizer import AnswerSynthesizer
from .base_agent import AgentRun, BaseAgent, answer_events
from .continuation_judge import ContinuationJudge
from .query_planner import QueryPlanner

# Results read per search round; not configurable
RESULTS_PER_ROUND = 2


class PipelineState(str, Enum):
    PLANNING = "planning"
    SEARCHING = "searching"
    READING = "reading"
    FETCHING = "fetching"
    JUDGING = "judging"
    SYNTHESIZING = "synthesizing"
    DONE = "done"


class AgentContext:
    """What one pipeline run has learned so far. Both lists are append-only."""

    def __init__(self, user_query: str):
        self.user_query = user_query
        self._search_queries: list[str] = []
        self._knowledges: list[KnowledgeItem] = []

    @property
    def search_queries(self) -> list[str]:
        return list(self._search_queries)

    @property
    def knowledges(self) -> list[KnowledgeItem]:
        return list(self._knowledges)

    def add_search_query(self, query: str) -> None:
        self._search_queries.append(query)

    def add_knowledge(self, url: str, title: str, content: str) -> KnowledgeItem:
        item = KnowledgeItem(url=url, title=title, content=content)
        self._knowledges.append(item)
        return item


class PipelineRun(AgentRun):
    def __init__(
        self,
        agent: "FixedPipelineAgent",
        user_query: str,
        sink: EventSink | None = None,
    ):
        super().__init__(user_query, sink)
        self.agent = agent
        self.context = AgentContext(user_query)
        self.state = PipelineState.PLANNING
        self.rounds = 0
        self._query: str | None = None
        self._batch: list[SearchResultItem] = []
        self._index = 0
        self._answer_stream: AsyncIterator[PartialAnswer] | None = None
        self._pending: deque[AgentEvent] = deque()

    def _transition(self, state: PipelineState) -> None:
        self.sink.emit(
            "pipeline.transition",
            run_id=self.run_id,
            source=self.state.value,
            target=state.value,
        )
        self.state = state

    async def _advance(self) -> AgentEvent | None:
        while True:
            if self.state is PipelineState.PLANNING:
                max_rounds = self.agent.max_rounds
                if max_rounds is not None and self.rounds >= max_rounds:
                    raise RoundLimitExceeded(max_rounds)
                self.rounds += 1
                self._query = await self.agent.planner.plan(
                    self.context.user_query, self.context.search_queries
                )
                self.context.add_search_query(self._query)
                self._transition(PipelineState.SEARCHING)
                return searching_event(self._query)

            if self.state is PipelineState.SEARCHING:
                results = await self.agent.searcher.search(self._query or "")
                self._batch = results[:RESULTS_PER_ROUND]
                self._index = 0
                if not self._batch:
                    self.sink.emit("pipeline.no_results", query=self._query)
                    self._transition(PipelineState.PLANNING)
                else:
                    self._transition(PipelineState.READING)
                continue

            if self.state is PipelineState.READING:
                self._transition(PipelineState.FETCHING)
                return reading_event(self._batch[self._index]["url"])

            if self.state is PipelineState.FETCHING:
                result = self._batch[self._index]
                content = await self.agent.fetcher.fetch(result["url"])
                self.context.add_knowledge(result["url"], result["title"], content)
                self._transition(PipelineState.JUDGING)
                continue

            if self.state is PipelineState.JUDGING:
                decision = await self.agent.judge.decide(
                    self.context.knowledges, self.context.user_query
                )
                if decision == "answer":
                    self._answer_stream = self.agent.synthesizer.synthesize(
                        self.context.knowledges, self.context.user_query
                    )
                    self._transition(PipelineState.SYNTHESIZING)
                else:
                    self._index += 1
                    self._transition(
                        PipelineState.READING
                        if self._index < len(self._batch)
                        else PipelineState.PLANNING
                    )
                continue

            if self.state is PipelineState.SYNTHESIZING:
                if self._pending:
                    return self._pending.popleft()
                assert self._answer_stream is not None
                try:
                    partial = await self._answer_stream.__anext__()
                except StopAsyncIteration:
                    self._answer_stream = None
                    self.outcome = Outcome.ANSWERED
                    self._transition(PipelineState.DONE)
                    continue
                self._pending.extend(answer_events(partial))
                continue

            return None

    async def _release(self) -> None:
        self._pending.clear()
        if self._answer_stream is not None:
            stream, self._answer_stream = self._answer_stream, None
            await stream.aclose()  # type: ignore[attr-defined]


class FixedPipelineAgent(BaseAgent):
    """Search → read → judge loop that answers once the judge is satisfied."""

    def __init__(
        self,
        planner: QueryPlanner,
        judge: ContinuationJudge,
        synthesizer: AnswerSynthesizer,
        searcher: WebSearcher,
        fetcher: ContentFetcher,
        *,
        max_rounds: int | None = None,
        sink: EventSink | None = None,
    ):
        """
        Args:
            planner: Produces the next search query
            judge: Decides between answering and searching again
            synthesizer: Streams the final answer
            searcher: Web search capability
            fetcher: Page reader
            max_rounds: Planning rounds allowed before giving up with
                RoundLimitExceeded; None keeps searching until the judge answers
            sink: Structured event sink
        """
        super().__init__(sink)
        if max_rounds is not None and max_rounds < 1:
            raise ValueError("max_rounds must be at least 1")
        self.planner = planner
        self.judge = judge
        self.synthesizer = synthesizer
        self.searcher = searcher
        self.fetcher = fetcher
        self.max_rounds = max_rounds

    def run(self, user_query: str) -> PipelineRun:
        if not user_query.strip():
            raise ValueError("Cannot run the search agent on an empty query")
        return PipelineRun(self, user_query, self.sink)
