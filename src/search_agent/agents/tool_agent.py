"""
Tool-driven agent.

Hands the search/read decisions to the model: one tool-calling generation with
``search`` and ``read`` tools. Tool calls and the streamed final answer are two
independent producers writing into one bridge channel, which the run drains.
"""

import asyncio
import logging
from textwrap import dedent

from ..bridge import BridgeChannel
from ..generation.capabilities import (
    ContentFetcher,
    LanguageModel,
    ToolCallingRun,
    WebSearcher,
)
from ..schemas import AnswerOutput, PartialAnswer
from ..tools import create_search_tools
from ..tracing import EventSink
from ..types import AgentEvent, Outcome
from .answer_synthesizer import ANSWER_FORMAT
from .base_agent import AgentRun, BaseAgent, answer_events

logger = logging.getLogger("search_agent")

# Model steps (one model call each) before the run gives up; not configurable
MAX_TOOL_STEPS = 10

TOOL_AGENT_SYSTEM_PROMPT = dedent(
    """\
    You are a search agent that assists users by searching the web.
    1. When given a user query, you must first perform a google search to find relevant information.
    2. Then you can pick the most relevant result to read and extract information from it.
    3. You should decide whether to answer the user with the information gathered or perform another search.

    Output Format:
    {answer_format}
    """
).format(answer_format=ANSWER_FORMAT)


class ToolAgentRun(AgentRun):
    def __init__(
        self,
        agent: "ToolDrivenAgent",
        user_query: str,
        sink: EventSink | None = None,
    ):
        super().__init__(user_query, sink)
        self.agent = agent
        self.channel = BridgeChannel()
        self.generation: ToolCallingRun | None = None
        self._tasks: list[asyncio.Task] = []
        self._answered = False

    def _start(self) -> None:
        tools = create_search_tools(self.channel, self.agent.searcher, self.agent.fetcher)
        self.generation = self.agent.model.stream_with_tools(
            TOOL_AGENT_SYSTEM_PROMPT,
            f"User query: {self.user_query}",
            tools,
            MAX_TOOL_STEPS,
            AnswerOutput,
        )
        forwarder = asyncio.create_task(self._forward_partials(self.generation))
        drainer = asyncio.create_task(self.generation.drain())
        closer = asyncio.create_task(self._close_when_done(forwarder, drainer))
        self._tasks = [forwarder, drainer, closer]
        self.sink.emit("tool_agent.started", run_id=self.run_id)

    async def _forward_partials(self, generation: ToolCallingRun) -> None:
        async for data in generation.partial_outputs():
            for event in answer_events(PartialAnswer.from_partial(data)):
                self.channel.emit(event)

    async def _close_when_done(
        self, forwarder: asyncio.Task, drainer: asyncio.Task
    ) -> None:
        # Both producers must finish before the channel closes, or tool events could be lost
        results = await asyncio.gather(drainer, forwarder, return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                self.channel.fail(result)
                break
        self.channel.close()

    async def _advance(self) -> AgentEvent | None:
        if not self._tasks:
            self._start()

        event = await self.channel.receive()
        if event is None:
            self.outcome = Outcome.ANSWERED if self._answered else Outcome.EMPTY
            if self.outcome is Outcome.EMPTY:
                logger.warning(
                    f"⚠️ Tool-calling run ended without an answer: {self.user_query}"
                )
                self.sink.emit(
                    "tool_agent.empty_result",
                    run_id=self.run_id,
                    max_steps=MAX_TOOL_STEPS,
                )
            return None

        if event["type"] in ("answer", "citations"):
            self._answered = True
        return event

    async def _release(self) -> None:
        pending = [task for task in self._tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    def __del__(self):
        # Abandoned without aclose(): stop the model call rather than leak it
        for task in getattr(self, "_tasks", []):
            if not task.done():
                task.cancel()


class ToolDrivenAgent(BaseAgent):
    """Lets a tool-calling model decide when to search, read and answer."""

    def __init__(
        self,
        model: LanguageModel,
        searcher: WebSearcher,
        fetcher: ContentFetcher,
        *,
        sink: EventSink | None = None,
    ):
        super().__init__(sink)
        self.model = model
        self.searcher = searcher
        self.fetcher = fetcher

    def run(self, user_query: str) -> ToolAgentRun:
        if not user_query.strip():
            raise ValueError("Cannot run the search agent on an empty query")
        return ToolAgentRun(self, user_query, self.sink)
