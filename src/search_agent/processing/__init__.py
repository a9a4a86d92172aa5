"""
Output processing components.

This package turns agent event streams into what callers display: UI message
chunks while a run is in progress, and a formatted answer once it is done.
"""

from .message_stream import AnswerStream, to_ui_message_stream
from .result_formatter import AnswerCollector, ResultFormatter, normalize_url

__all__ = [
    "AnswerCollector",
    "AnswerStream",
    "ResultFormatter",
    "normalize_url",
    "to_ui_message_stream",
]
