"""
Unit tests for the Strands-backed language model.

The Strands ``Agent`` is replaced with a scripted stand-in so the event
handling can be tested without a model provider.
"""

import asyncio
from unittest.mock import Mock, patch

import pytest

from search_agent.errors import GenerationError
from search_agent.generation import strands_model
from search_agent.generation.strands_model import (
    StrandsLanguageModel,
    requests_tools,
    schema_instructions,
)
from search_agent.schemas import AnswerOutput, SearchQuery
from search_agent.tracing import RecordingEventSink


class ScriptedAgent:
    """Replays Strands stream events, optionally failing at the end."""

    def __init__(self, events=(), error=None, structured=None):
        self.events = list(events)
        self.error = error
        self.structured = structured
        self.prompts = []
        self.stream_closed = False
        self.yielded = []

    async def _stream(self):
        try:
            for event in self.events:
                self.yielded.append(event)
                yield event
            if self.error:
                raise self.error
        finally:
            self.stream_closed = True

    def stream_async(self, prompt):
        self.prompts.append(prompt)
        return self._stream()

    async def structured_output_async(self, output_model, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.structured


def assistant(text=None, tool_use=False):
    content = []
    if text:
        content.append({"text": text})
    if tool_use:
        content.append({"toolUse": {"toolUseId": "t1", "name": "search", "input": {}}})
    return {"message": {"role": "assistant", "content": content}}


def tool_result():
    return {"message": {"role": "user", "content": [{"toolResult": {"toolUseId": "t1"}}]}}


async def drain_outputs(run):
    outputs = []
    async for partial in run.partial_outputs():
        outputs.append(partial)
    return outputs


class TestHelpers:
    def test_schema_instructions_embed_schema(self):
        instructions = schema_instructions(SearchQuery)
        assert "single JSON object" in instructions
        assert '"query"' in instructions

    def test_requests_tools(self):
        assert requests_tools(assistant(tool_use=True)["message"])
        assert not requests_tools(assistant(text="done")["message"])
        assert not requests_tools({})


class TestStrandsLanguageModel:
    @pytest.mark.asyncio
    async def test_generate_structured(self):
        agent = ScriptedAgent(structured=SearchQuery(query="vue fetch"))
        sink = RecordingEventSink()
        with patch.object(strands_model, "Agent", return_value=agent):
            model = StrandsLanguageModel(Mock(), sink=sink)
            result = await model.generate_structured("plan", SearchQuery)

        assert result.query == "vue fetch"
        assert agent.prompts == ["plan"]
        assert sink.names() == ["generation.structured"]

    @pytest.mark.asyncio
    async def test_generate_structured_wraps_errors(self):
        agent = ScriptedAgent(error=RuntimeError("throttled"))
        with patch.object(strands_model, "Agent", return_value=agent):
            model = StrandsLanguageModel(Mock())
            with pytest.raises(GenerationError, match="SearchQuery"):
                await model.generate_structured("plan", SearchQuery)

    @pytest.mark.asyncio
    async def test_stream_structured_yields_growing_objects(self):
        agent = ScriptedAgent(
            events=[
                {"init_event_loop": True},
                {"data": '{"content": "Vu'},
                {"data": 'e"'},
                {"data": ', "citations": []}'},
                assistant(text="..."),
            ]
        )
        with patch.object(strands_model, "Agent", return_value=agent) as agent_cls:
            model = StrandsLanguageModel(Mock())
            partials = [p async for p in model.stream_structured("answer", AnswerOutput)]

        assert partials == [
            {"content": "Vu"},
            {"content": "Vue"},
            {"content": "Vue", "citations": []},
        ]
        assert "JSON schema" in agent_cls.call_args.kwargs["system_prompt"]
        assert agent.stream_closed

    @pytest.mark.asyncio
    async def test_stream_structured_closes_on_early_exit(self):
        agent = ScriptedAgent(events=[{"data": '{"content": "a'}, {"data": "b"}])
        with patch.object(strands_model, "Agent", return_value=agent):
            stream = StrandsLanguageModel(Mock()).stream_structured("answer", AnswerOutput)
            assert await stream.__anext__() == {"content": "a"}
            await stream.aclose()

        assert agent.stream_closed

    @pytest.mark.asyncio
    async def test_stream_structured_wraps_errors(self):
        agent = ScriptedAgent(events=[{"data": "{"}], error=RuntimeError("boom"))
        with patch.object(strands_model, "Agent", return_value=agent):
            stream = StrandsLanguageModel(Mock()).stream_structured("answer", AnswerOutput)
            with pytest.raises(GenerationError):
                async for _ in stream:
                    pass

    def test_tools_are_registered_with_agent(self):
        async def search(query: str) -> list:
            """Search the web."""
            return []

        with patch.object(strands_model, "Agent") as agent_cls, patch.object(
            strands_model, "tool", side_effect=lambda fn: ("tool", fn.__name__)
        ):
            StrandsLanguageModel(Mock()).stream_with_tools(
                "system", "User query: q", [search], 10, AnswerOutput
            )

        kwargs = agent_cls.call_args.kwargs
        assert kwargs["tools"] == [("tool", "search")]
        assert kwargs["system_prompt"].startswith("system\n\n")
        assert kwargs["callback_handler"] is None


class TestStrandsToolCallingRun:
    def make_run(self, agent, max_steps=10, sink=None):
        with patch.object(strands_model, "Agent", return_value=agent):
            return StrandsLanguageModel(Mock(), sink=sink).stream_with_tools(
                "system", "User query: q", [], max_steps, AnswerOutput
            )

    @pytest.mark.asyncio
    async def test_object_from_tool_calling_step_is_discarded(self):
        agent = ScriptedAgent(
            events=[
                {"data": '{"content": "I need to search first'},
                assistant(text='{"content": "I need to search first', tool_use=True),
                tool_result(),
                {"data": '{"content": "Final"'},
                {"data": ', "citations": []}'},
                assistant(text='{"content": "Final", "citations": []}'),
            ]
        )
        run = self.make_run(agent)

        outputs, _ = await asyncio.gather(drain_outputs(run), run.drain())

        assert outputs == [
            {"content": "Final"},
            {"content": "Final", "citations": []},
        ]
        assert run.steps == 2
        assert not run.step_bound_reached
        assert agent.prompts == ["User query: q"]

    @pytest.mark.asyncio
    async def test_prose_before_tool_call_does_not_block_final_object(self):
        agent = ScriptedAgent(
            events=[
                {"data": "Calling {search}"},
                assistant(text="Calling {search}", tool_use=True),
                tool_result(),
                {"data": '{"content": "Final", "citations": []}'},
                assistant(text='{"content": "Final", "citations": []}'),
            ]
        )
        run = self.make_run(agent)

        outputs, _ = await asyncio.gather(drain_outputs(run), run.drain())

        assert outputs == [{"content": "Final", "citations": []}]

    @pytest.mark.asyncio
    async def test_step_bound_runs_last_tools_then_stops(self):
        last_tool_results = tool_result()
        agent = ScriptedAgent(
            events=[
                assistant(tool_use=True),
                tool_result(),
                assistant(tool_use=True),
                last_tool_results,
                {"data": '{"content": "never seen"}'},
                assistant(text='{"content": "never seen"}'),
            ]
        )
        sink = RecordingEventSink()
        run = self.make_run(agent, max_steps=2, sink=sink)

        outputs, _ = await asyncio.gather(drain_outputs(run), run.drain())

        assert outputs == []
        assert run.step_bound_reached
        assert run.steps == 2
        # The tool results of the last step were awaited, the next model call was not
        assert agent.yielded[-1] is last_tool_results
        assert agent.stream_closed
        assert "generation.step_bound" in sink.names()

    @pytest.mark.asyncio
    async def test_failure_is_wrapped_and_outputs_end(self):
        agent = ScriptedAgent(
            events=[{"data": '{"content": "par'}], error=RuntimeError("connection reset")
        )
        run = self.make_run(agent)

        with pytest.raises(GenerationError, match="connection reset"):
            await run.drain()

        # The unfinished step never ended, so nothing from it is surfaced
        assert await drain_outputs(run) == []
