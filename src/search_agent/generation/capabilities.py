"""
Capability interfaces consumed by the agents.

The agents only ever talk to these protocols; the Strands-backed language
model, the Brave searcher and the page readers are one implementation each,
and tests substitute in-memory fakes.
"""

from collections.abc import AsyncIterator, Callable, Sequence
from typing import Any, Protocol, TypeVar

from pydantic import BaseModel

from ..types import SearchResultItem

OutputT = TypeVar("OutputT", bound=BaseModel)


class ToolCallingRun(Protocol):
    """
    One in-flight tool-calling generation.

    ``drain()`` drives the model call to completion (invoking tools as the
    model requests them). ``partial_outputs()`` yields partial parses of the
    final structured output and ends once ``drain()`` has finished.
    """

    def partial_outputs(self) -> AsyncIterator[dict[str, Any]]: ...

    async def drain(self) -> None: ...


class LanguageModel(Protocol):
    async def generate_structured(
        self, prompt: str, output_model: type[OutputT]
    ) -> OutputT: ...

    def stream_structured(
        self, prompt: str, output_model: type[BaseModel]
    ) -> AsyncIterator[dict[str, Any]]: ...

    def stream_with_tools(
        self,
        system_prompt: str,
        prompt: str,
        tools: Sequence[Callable[..., Any]],
        max_steps: int,
        output_model: type[BaseModel],
    ) -> ToolCallingRun: ...


class WebSearcher(Protocol):
    async def search(self, query: str) -> list[SearchResultItem]: ...


class ContentFetcher(Protocol):
    async def fetch(self, url: str) -> str: ...
