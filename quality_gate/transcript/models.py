"""Transcript data structures.

Turns are produced by the host application; the gate only reads them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class ContentKind(Enum):
    """Kind of a single content block within a turn."""
    TEXT = "text"
    TOOL_INVOCATION = "tool_invocation"
    TOOL_RESULT = "tool_result"


@dataclass(frozen=True)
class ContentItem:
    kind: ContentKind
    text: Optional[str] = None
    tool_name: Optional[str] = None


@dataclass
class TranscriptTurn:
    """One message authored by the human or the assistant."""
    role: str
    content: List[ContentItem] = field(default_factory=list)

    @property
    def is_assistant(self) -> bool:
        return self.role == "assistant"

    @property
    def text(self) -> str:
        """Text blocks joined by newlines (tool output excluded)."""
        return "\n".join(
            item.text for item in self.content
            if item.kind is ContentKind.TEXT and item.text
        )

    @property
    def tool_names(self) -> List[str]:
        return [
            item.tool_name for item in self.content
            if item.kind is ContentKind.TOOL_INVOCATION and item.tool_name
        ]

    def evidence_text(self) -> str:
        """Tool output, plus text when the assistant wrote it.

        Human-authored text (including gate reasons fed back by the host)
        never counts as completion evidence.
        """
        kinds = (ContentKind.TOOL_RESULT,)
        if self.is_assistant:
            kinds = (ContentKind.TEXT, ContentKind.TOOL_RESULT)
        return "\n".join(
            item.text for item in self.content
            if item.kind in kinds and item.text
        )


@dataclass
class TranscriptWindow:
    """The trailing turns of a transcript, oldest first."""
    turns: List[TranscriptTurn] = field(default_factory=list)

    def assistant_turns(self) -> List[TranscriptTurn]:
        return [turn for turn in self.turns if turn.is_assistant]

    @property
    def last_assistant_turn(self) -> Optional[TranscriptTurn]:
        assistant = self.assistant_turns()
        return assistant[-1] if assistant else None

    def recent_assistant_turns(self, count: int) -> List[TranscriptTurn]:
        """The last `count` assistant turns, most recent first."""
        if count <= 0:
            return []
        return list(reversed(self.assistant_turns()[-count:]))

    def evidence_text(self, count: int) -> str:
        """Evidence-bearing text of the last `count` turns (see TranscriptTurn.evidence_text)."""
        if count <= 0:
            return ""
        return "\n".join(
            text for text in (turn.evidence_text() for turn in self.turns[-count:])
            if text
        )
