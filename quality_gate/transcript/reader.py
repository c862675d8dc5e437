"""Transcript reader.

Loads the trailing turns of the host's line-delimited (JSONL) conversation
log. Each line is one message:

    {"type": "assistant", "message": {"role": "assistant", "content": [...]}}

Older logs put the role at the top level instead of "type".
"""

import json
import logging
from collections import deque
from pathlib import Path
from typing import Any, List, Optional, Union

from ..exceptions import TranscriptReadError
from .models import ContentItem, ContentKind, TranscriptTurn, TranscriptWindow

logger = logging.getLogger(__name__)

CONVERSATION_ROLES = ("user", "assistant")


class TranscriptReader:
    """Read the tail of a JSONL transcript.

    Malformed lines and records with no readable content are skipped. A
    missing or unreadable file raises TranscriptReadError so the caller
    can decide how to degrade.
    """

    DEFAULT_TAIL_TURNS = 50

    def __init__(self, tail_turns: int = DEFAULT_TAIL_TURNS):
        """
        Args:
            tail_turns: Maximum number of trailing turns to keep.
        """
        self.tail_turns = tail_turns

    def read(self, source: Union[str, Path]) -> TranscriptWindow:
        """Read the trailing turns of a transcript file.

        Args:
            source: Path to the .jsonl transcript.

        Returns:
            TranscriptWindow holding at most `tail_turns` turns.

        Raises:
            TranscriptReadError: If the file does not exist or cannot be read.
        """
        path = Path(source)
        if not path.is_file():
            raise TranscriptReadError(f"Transcript not found: {path}")

        turns: deque = deque(maxlen=self.tail_turns)
        skipped = 0
        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                for line in f:
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        record = json.loads(line)
                    except json.JSONDecodeError:
                        skipped += 1
                        continue

                    turn = self._parse_record(record)
                    if turn is not None:
                        turns.append(turn)
        except OSError as e:
            raise TranscriptReadError(f"Cannot read transcript {path}: {e}") from e

        if skipped:
            logger.debug(f"Skipped {skipped} malformed transcript line(s) in {path}")
        return TranscriptWindow(turns=list(turns))

    def _parse_record(self, record: Any) -> Optional[TranscriptTurn]:
        """Convert one decoded line into a turn, or None if it is not one."""
        if not isinstance(record, dict):
            return None

        message = record.get("message")
        if not isinstance(message, dict):
            message = {}

        role = record.get("type")
        if role not in CONVERSATION_ROLES:
            role = record.get("role") or message.get("role")
        if role not in CONVERSATION_ROLES:
            return None

        content = self._parse_content(message.get("content", record.get("content")))
        if not content:
            # Thinking-only records would otherwise push tool use out of the window
            return None
        return TranscriptTurn(role=role, content=content)

    def _parse_content(self, content: Any) -> List[ContentItem]:
        if isinstance(content, str):
            return [ContentItem(kind=ContentKind.TEXT, text=content)]
        if not isinstance(content, list):
            return []

        items = []
        for block in content:
            if not isinstance(block, dict):
                continue
            block_type = block.get("type")
            if block_type == "text" and isinstance(block.get("text"), str):
                items.append(ContentItem(kind=ContentKind.TEXT, text=block["text"]))
            elif block_type == "tool_use" and isinstance(block.get("name"), str):
                items.append(
                    ContentItem(kind=ContentKind.TOOL_INVOCATION, tool_name=block["name"])
                )
            elif block_type == "tool_result":
                text = _tool_result_text(block.get("content"))
                if text:
                    items.append(ContentItem(kind=ContentKind.TOOL_RESULT, text=text))
        return items


def _tool_result_text(content: Any) -> str:
    """Flatten tool output, which is either a string or a list of text blocks."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "\n".join(
            block["text"] for block in content
            if isinstance(block, dict) and isinstance(block.get("text"), str)
        )
    return ""


def read_transcript(
    source: Union[str, Path],
    tail_turns: int = TranscriptReader.DEFAULT_TAIL_TURNS,
) -> TranscriptWindow:
    """Convenience wrapper around TranscriptReader.read()."""
    return TranscriptReader(tail_turns=tail_turns).read(source)
