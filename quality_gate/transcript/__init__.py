"""Conversation transcript access.

- TranscriptReader: loads the trailing turns of a JSONL transcript
- TranscriptWindow / TranscriptTurn / ContentItem: read-only turn data
"""

from .models import ContentItem, ContentKind, TranscriptTurn, TranscriptWindow
from .reader import TranscriptReader, read_transcript

__all__ = [
    "ContentItem",
    "ContentKind",
    "TranscriptTurn",
    "TranscriptWindow",
    "TranscriptReader",
    "read_transcript",
]
