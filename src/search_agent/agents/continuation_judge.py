"""
Continuation judge.

Decides whether the knowledge gathered so far is enough to answer.
"""

import json
from textwrap import dedent
from typing import Literal

from ..generation.capabilities import LanguageModel
from ..schemas import NextStep
from ..tracing import EventSink, NullEventSink
from ..types import KnowledgeItem

Decision = Literal["answer", "search"]

CONTINUATION_JUDGE_PROMPT = dedent(
    """\
    Given the following context and user query, determine whether to answer the question using the provided knowledge or perform a further search.
    Context must be relevant and provide sufficient information to answer the query.
    Answer in the format of JSON.

    Context: {context}
    User Query: {user_query}
    Example Output:
    {{
      "nextStep": "search"
    }}
    """
)


def context_json(knowledges: list[KnowledgeItem], user_query: str) -> str:
    """Serialize the knowledge gathered so far for inclusion in a prompt."""
    return json.dumps(
        {"knowledges": list(knowledges), "userQuery": user_query},
        ensure_ascii=False,
    )


class ContinuationJudge:
    def __init__(self, model: LanguageModel, sink: EventSink | None = None):
        self.model = model
        self.sink = sink or NullEventSink()

    def build_prompt(self, knowledges: list[KnowledgeItem], user_query: str) -> str:
        return CONTINUATION_JUDGE_PROMPT.format(
            context=context_json(knowledges, user_query), user_query=user_query
        )

    async def decide(self, knowledges: list[KnowledgeItem], user_query: str) -> Decision:
        if not knowledges:
            raise ValueError("The continuation judge needs at least one knowledge item")

        result = await self.model.generate_structured(
            self.build_prompt(knowledges, user_query), NextStep
        )
        self.sink.emit(
            "judge.decision", next_step=result.next_step, knowledge_count=len(knowledges)
        )
        return result.next_step
