"""
Query planner.

Turns the user's request into the next web search query.
"""

from textwrap import dedent

from ..generation.capabilities import LanguageModel
from ..schemas import SearchQuery
from ..tracing import EventSink, NullEventSink

QUERY_PLANNER_PROMPT = dedent(
    """\
    Given the following query, generate a concise google search query that captures the main intent of the user's request.
    The search query should be specific and relevant to the topic of interest. Don't duplicate previous queries. Answer in the format of JSON.

    Original user query: {user_query}
    Previous Queries: {prior_queries}
    Example Output:
    {{
      "query": "search keywords"
    }}
    """
)


class QueryPlanner:
    """Plans search queries; novelty against earlier queries is only requested, never enforced."""

    def __init__(self, model: LanguageModel, sink: EventSink | None = None):
        self.model = model
        self.sink = sink or NullEventSink()

    def build_prompt(self, user_query: str, prior_queries: list[str]) -> str:
        return QUERY_PLANNER_PROMPT.format(
            user_query=user_query, prior_queries=", ".join(prior_queries)
        )

    async def plan(self, user_query: str, prior_queries: list[str]) -> str:
        if not user_query.strip():
            raise ValueError("Cannot plan a search for an empty user query")

        result = await self.model.generate_structured(
            self.build_prompt(user_query, prior_queries), SearchQuery
        )
        self.sink.emit(
            "planner.query", query=result.query, prior_count=len(prior_queries)
        )
        return result.query
