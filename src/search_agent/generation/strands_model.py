"""
Strands-backed language model.

Implements the three generation capabilities on top of a Strands ``Agent``:
one-shot structured output, a growing partial-object stream, and a
tool-calling loop whose final structured answer is parsed as it streams.
"""

import asyncio
import json
from collections.abc import AsyncIterator, Callable, Sequence
from typing import Any

from pydantic import BaseModel
from strands import Agent, tool
from strands.models.model import Model

from ..errors import GenerationError
from ..tracing import EventSink, NullEventSink
from .capabilities import OutputT
from .partial_json import PartialObjectParser

_END = object()


def schema_instructions(output_model: type[BaseModel]) -> str:
    """Instructions that make a model answer with a bare JSON object."""
    schema = json.dumps(output_model.model_json_schema())
    return (
        "Respond with a single JSON object and nothing else. "
        f"It must conform to this JSON schema:\n{schema}"
    )


def requests_tools(message: dict[str, Any]) -> bool:
    """Check whether an assistant message asks for tool invocations."""
    return any("toolUse" in block for block in message.get("content", []))


class StrandsLanguageModel:
    """Language model capabilities backed by a Strands model provider."""

    def __init__(self, model: Model, sink: EventSink | None = None):
        self.model = model
        self.sink = sink or NullEventSink()

    def _create_agent(
        self,
        system_prompt: str | None = None,
        tools: Sequence[Callable[..., Any]] | None = None,
    ) -> Agent:
        # A fresh agent per call keeps runs from sharing conversation history
        return Agent(
            model=self.model,
            system_prompt=system_prompt,
            tools=[tool(fn) for fn in tools or []],
            callback_handler=None,
        )

    async def generate_structured(
        self, prompt: str, output_model: type[OutputT]
    ) -> OutputT:
        agent = self._create_agent()
        self.sink.emit("generation.structured", schema=output_model.__name__)
        try:
            return await agent.structured_output_async(output_model, prompt)
        except Exception as e:
            raise GenerationError(
                f"Structured generation of {output_model.__name__} failed: {e}"
            ) from e

    async def stream_structured(
        self, prompt: str, output_model: type[BaseModel]
    ) -> AsyncIterator[dict[str, Any]]:
        agent = self._create_agent(system_prompt=schema_instructions(output_model))
        parser = PartialObjectParser()
        self.sink.emit("generation.stream", schema=output_model.__name__)

        stream = agent.stream_async(prompt)
        try:
            async for event in stream:
                partial = parser.feed(event.get("data", ""))
                if partial is not None:
                    yield partial
        except Exception as e:
            raise GenerationError(
                f"Streaming generation of {output_model.__name__} failed: {e}"
            ) from e
        finally:
            await stream.aclose()

    def stream_with_tools(
        self,
        system_prompt: str,
        prompt: str,
        tools: Sequence[Callable[..., Any]],
        max_steps: int,
        output_model: type[BaseModel],
    ) -> "StrandsToolCallingRun":
        agent = self._create_agent(
            system_prompt=f"{system_prompt}\n\n{schema_instructions(output_model)}",
            tools=tools,
        )
        return StrandsToolCallingRun(agent, prompt, max_steps, sink=self.sink)


class StrandsToolCallingRun:
    """
    A tool-calling generation split into its two consumer-facing halves.

    ``drain()`` runs the Strands event loop; the model's text is parsed as a
    partial JSON object and handed to ``partial_outputs()`` through a queue.
    Partial objects of a step are handed over when that step ends without a
    tool call; text produced in a step that ends with a tool call is
    discarded, since only the last step carries the final answer. The step
    that reaches ``max_steps`` still gets its tool calls executed before the
    loop stops.
    """

    def __init__(
        self,
        agent: Agent,
        prompt: str,
        max_steps: int,
        *,
        sink: EventSink | None = None,
    ):
        self.agent = agent
        self.prompt = prompt
        self.max_steps = max_steps
        self.sink = sink or NullEventSink()
        self.steps = 0
        self.step_bound_reached = False
        self._outputs: asyncio.Queue = asyncio.Queue()

    async def partial_outputs(self) -> AsyncIterator[dict[str, Any]]:
        while True:
            item = await self._outputs.get()
            if item is _END:
                return
            yield item

    def _release(self, partials: list[dict[str, Any]]) -> None:
        for partial in partials:
            self._outputs.put_nowait(partial)
        partials.clear()

    async def drain(self) -> None:
        parser = PartialObjectParser()
        # Held until the step ends; dropped if the step turns out to call tools
        step_partials: list[dict[str, Any]] = []
        stream = self.agent.stream_async(self.prompt)
        try:
            async for event in stream:
                if "data" in event:
                    partial = parser.feed(event["data"])
                    if partial is not None:
                        step_partials.append(partial)
                    continue

                message = event.get("message")
                if not message:
                    continue
                if message.get("role") != "assistant":
                    # Tool results of the last allowed step are in; stop before another model call
                    if self.step_bound_reached:
                        break
                    continue

                self.steps += 1
                if not requests_tools(message):
                    self._release(step_partials)
                    continue
                step_partials.clear()
                parser.reset()
                if self.steps >= self.max_steps:
                    self.step_bound_reached = True
                    self.sink.emit("generation.step_bound", steps=self.steps)
            else:
                self._release(step_partials)
        except Exception as e:
            raise GenerationError(f"Tool-calling generation failed: {e}") from e
        finally:
            await stream.aclose()
            self._outputs.put_nowait(_END)
