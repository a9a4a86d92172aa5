"""
Base agent functionality shared by both agent variants.

An agent turns a user query into an ``AgentRun``: a pull-based async iterator
of events. No work happens until the consumer asks for the next event, and
closing the run releases whatever external call or stream it is holding.
"""

import uuid
from abc import ABC, abstractmethod

from ..schemas import PartialAnswer
from ..tracing import EventSink, NullEventSink
from ..types import AgentEvent, Outcome, answer_event, citations_event


class AgentRun(ABC):
    """One agent invocation, consumed with ``async for``."""

    def __init__(self, user_query: str, sink: EventSink | None = None):
        self.run_id = str(uuid.uuid4())
        self.user_query = user_query
        self.sink = sink or NullEventSink()
        self.outcome: Outcome | None = None
        self.events_emitted = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> "AgentRun":
        return self

    async def __anext__(self) -> AgentEvent:
        if self._closed:
            raise StopAsyncIteration

        try:
            event = await self._advance()
        except BaseException as e:
            # Errors and cancellation end the run; events already consumed stay valid
            self.sink.emit(
                "run.failed",
                run_id=self.run_id,
                error=type(e).__name__,
                events_emitted=self.events_emitted,
            )
            await self.aclose()
            raise

        if event is None:
            self.sink.emit(
                "run.finished",
                run_id=self.run_id,
                outcome=self.outcome.value if self.outcome else None,
                events_emitted=self.events_emitted,
            )
            await self.aclose()
            raise StopAsyncIteration

        self.events_emitted += 1
        if event["type"] in ("searching", "reading"):
            self.sink.emit(f"run.{event['type']}", run_id=self.run_id, **event)
        return event

    async def aclose(self) -> None:
        """Stop the run and release anything held by it."""
        if self._closed:
            return
        self._closed = True
        await self._release()

    async def __aenter__(self) -> "AgentRun":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    @abstractmethod
    async def _advance(self) -> AgentEvent | None:
        """Do the work needed for the next event; None once the run is over."""

    async def _release(self) -> None:
        """Release held resources. Called exactly once."""
        return None


class BaseAgent(ABC):
    """Base class for agents producing ``AgentRun`` sequences."""

    def __init__(self, sink: EventSink | None = None):
        self.sink = sink or NullEventSink()

    @abstractmethod
    def run(self, user_query: str) -> AgentRun:
        """Start (lazily) a run for ``user_query``."""


def answer_events(partial: PartialAnswer) -> list[AgentEvent]:
    """Answer and citation events carried by one partial answer."""
    events: list[AgentEvent] = []
    if partial.content:
        events.append(answer_event(partial.content))
    if partial.citations:
        events.append(
            citations_event([c.to_event_data() for c in partial.citations])
        )
    return events
