"""Status signal extraction.

- StatusExtractor: last assistant turn -> StatusSignal
- SignalExtractionStrategy: pluggable way of finding summaries in text
- JsonObjectStrategy: default brace-balanced JSON scan
"""

from .extractor import StatusExtractor
from .models import (
    SIGNAL_FORMAT,
    ExplicitSignal,
    InferredSignal,
    MalformedSignal,
    NoSignal,
    StatusSignal,
    StatusSummary,
)
from .strategy import JsonObjectStrategy, SignalExtractionStrategy

__all__ = [
    "StatusExtractor",
    "SignalExtractionStrategy",
    "JsonObjectStrategy",
    "SIGNAL_FORMAT",
    "StatusSignal",
    "StatusSummary",
    "ExplicitSignal",
    "MalformedSignal",
    "InferredSignal",
    "NoSignal",
]
