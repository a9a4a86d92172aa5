"""
Incremental JSON parsing for streamed structured output.

Models stream a JSON object as text. Each time more text arrives we re-parse
the whole buffer in partial mode, which gives the best reconstruction of the
object so far (unterminated strings included).
"""

from typing import Any

from pydantic_core import from_json

_FENCE = "```"


def _object_end(text: str) -> int:
    """
    Index just past the JSON object that opens ``text``.

    Fences and brackets inside string values are content, not structure. While
    the object is still open this is the index of a fence that closes the
    surrounding markdown block, or the end of the text.
    """
    depth = 0
    in_string = False
    escaped = False
    for index, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char in "{[":
            depth += 1
        elif char in "}]":
            depth -= 1
            if depth == 0:
                return index + 1
        elif text.startswith(_FENCE, index):
            return index
    return len(text)


def extract_json_candidate(text: str) -> str | None:
    """Strip any prose or markdown fence around the JSON object in ``text``."""
    start = text.find("{")
    if start == -1:
        return None
    candidate = text[start:]
    return candidate[: _object_end(candidate)].rstrip()


def parse_partial_object(text: str) -> dict[str, Any] | None:
    """
    Parse a possibly incomplete JSON object.

    Args:
        text: Everything the model has produced so far

    Returns:
        The partially populated object, or None while nothing object-shaped
        can be recovered yet
    """
    candidate = extract_json_candidate(text)
    if not candidate:
        return None
    try:
        parsed = from_json(candidate, allow_partial="trailing-strings")
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


class PartialObjectParser:
    """Accumulates text deltas and reports the object only when it changes."""

    def __init__(self):
        self.buffer = ""
        self._last: dict[str, Any] | None = None

    def feed(self, delta: str) -> dict[str, Any] | None:
        if not delta:
            return None
        self.buffer += delta
        parsed = parse_partial_object(self.buffer)
        if parsed is None or parsed == self._last:
            return None
        self._last = parsed
        return parsed

    def reset(self) -> None:
        self.buffer = ""
        self._last = None
