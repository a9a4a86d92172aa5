"""
UI message stream translation.

Converts agent events into the chunk vocabulary a chat UI consumes: one
search-state data part that grows as the agent searches and reads, answer
text delivered as start/delta/end, and a citations data part that is
overwritten each time.
"""

import logging
import uuid
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

from ..errors import SearchAgentError

logger = logging.getLogger("search_agent")

Chunk = dict[str, Any]


def generate_id() -> str:
    return uuid.uuid4().hex


class AnswerStream:
    """
    Turns cumulative answer snapshots into text deltas.

    Each snapshot is expected to extend the previous one; the delta is the
    part past the previously seen length.
    """

    def __init__(self, answer_id: str | None = None):
        self.id = answer_id or generate_id()
        self.previous: str | None = None

    @property
    def started(self) -> bool:
        return self.previous is not None

    def update(self, content: str) -> list[Chunk]:
        chunks: list[Chunk] = []
        if self.previous is None:
            chunks.append({"type": "text-start", "id": self.id})
            self.previous = ""
        if content != self.previous:
            delta = content[len(self.previous):]
            if delta:
                chunks.append({"type": "text-delta", "id": self.id, "delta": delta})
            self.previous = content
        return chunks

    def done(self) -> list[Chunk]:
        if not self.started:
            return []
        return [{"type": "text-end", "id": self.id}]


async def to_ui_message_stream(
    events: AsyncIterable[dict[str, Any]],
) -> AsyncIterator[Chunk]:
    """
    Translate an agent event stream into UI message chunks.

    A failure while consuming ``events`` ends the stream with an error chunk
    instead of raising.
    """
    search_state_id = generate_id()
    citations_id = generate_id()
    search_state: list[dict[str, Any]] = []
    answer = AnswerStream()

    try:
        async for event in events:
            if event["type"] in ("searching", "reading"):
                search_state.append(dict(event))
                yield {
                    "type": "data-search-state",
                    "id": search_state_id,
                    "data": list(search_state),
                }
            elif event["type"] == "answer":
                for chunk in answer.update(event["content"]):
                    yield chunk
            elif event["type"] == "citations":
                yield {
                    "type": "data-search-citation",
                    "id": citations_id,
                    "data": {"citations": event["citations"]},
                }
    except SearchAgentError as e:
        logger.error(f"❌ Agent run failed: {e}")
        for chunk in answer.done():
            yield chunk
        yield {"type": "error", "errorText": str(e)}
        return

    for chunk in answer.done():
        yield chunk
