"""
Answer synthesizer.

Streams a cited markdown answer built from the gathered knowledge.
"""

from collections.abc import AsyncIterator
from textwrap import dedent

from ..generation.capabilities import LanguageModel
from ..schemas import AnswerOutput, PartialAnswer
from ..tracing import EventSink, NullEventSink
from ..types import KnowledgeItem
from .continuation_judge import context_json

ANSWER_FORMAT = dedent(
    """\
    - A short but concise answer with inline citations marked as [1](http://citation/1), [2](http://citation/2), etc.
    - 2-3 citations with realistic source information
    - Each citation should have a title, URL, and optional description/quote
    - Make the content informative and the sources credible

    Format citations as numbered references within the text."""
)

ANSWER_SYNTHESIZER_PROMPT = dedent(
    """\
    Generate a well-researched answer in markdown about {user_query} with proper citations.
    Answer in the format of JSON.
    <context>
    {context}
    </context>

    Include:
    {answer_format}
    """
)


class AnswerSynthesizer:
    def __init__(self, model: LanguageModel, sink: EventSink | None = None):
        self.model = model
        self.sink = sink or NullEventSink()

    def build_prompt(self, knowledges: list[KnowledgeItem], user_query: str) -> str:
        return ANSWER_SYNTHESIZER_PROMPT.format(
            user_query=user_query,
            context=context_json(knowledges, user_query),
            answer_format=ANSWER_FORMAT,
        )

    async def synthesize(
        self, knowledges: list[KnowledgeItem], user_query: str
    ) -> AsyncIterator[PartialAnswer]:
        """
        Yield successive reconstructions of the answer object.

        ``content`` only ever grows by extension from one element to the next;
        ``citations`` is the full list as currently parsed.
        """
        self.sink.emit("synthesizer.start", knowledge_count=len(knowledges))
        stream = self.model.stream_structured(
            self.build_prompt(knowledges, user_query), AnswerOutput
        )
        try:
            async for partial in stream:
                yield PartialAnswer.from_partial(partial)
        finally:
            await stream.aclose()
        self.sink.emit("synthesizer.done")
