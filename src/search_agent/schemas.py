"""
Structured output schemas.

Pydantic models handed to the language model as output schemas, and the
all-optional partial forms observed while a structured response is streaming.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class SearchQuery(BaseModel):
    query: str = Field(
        description="A concise google search query related to the user's request."
    )


class NextStep(BaseModel):
    next_step: Literal["answer", "search"] = Field(
        alias="nextStep",
        description="The next step to take, either answer the question using the provided knowledge or perform a further search.",
    )

    model_config = ConfigDict(populate_by_name=True)


class Citation(BaseModel):
    number: str
    title: str
    url: str
    description: str | None = None
    quote: str | None = None


class AnswerOutput(BaseModel):
    content: str = Field(
        description="The main content of the answer. Must use markdown for better formatting"
    )
    citations: list[Citation]


class PartialCitation(BaseModel):
    """A citation as seen mid-stream: any field may still be missing."""

    model_config = ConfigDict(extra="ignore")

    number: str | None = None
    title: str | None = None
    url: str | None = None
    description: str | None = None
    quote: str | None = None

    def is_complete(self) -> bool:
        return all([self.number, self.title, self.url])

    def to_event_data(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class PartialAnswer(BaseModel):
    """Current best reconstruction of an ``AnswerOutput`` being streamed."""

    model_config = ConfigDict(extra="ignore")

    content: str | None = None
    citations: list[PartialCitation] | None = None

    @classmethod
    def from_partial(cls, data: dict[str, Any]) -> "PartialAnswer":
        content = data.get("content")
        citations = data.get("citations")
        return cls(
            content=content if isinstance(content, str) else None,
            citations=[
                PartialCitation.model_validate(_stringify(item))
                for item in citations
                if isinstance(item, dict)
            ]
            if isinstance(citations, list)
            else None,
        )


def _stringify(item: dict[str, Any]) -> dict[str, str]:
    # Models occasionally emit citation numbers as integers
    return {
        key: str(value)
        for key, value in item.items()
        if isinstance(value, (str, int, float)) and not isinstance(value, bool)
    }
