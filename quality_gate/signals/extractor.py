"""Status extraction.

Derives a StatusSignal from the last assistant turn of a transcript window.
"""

import logging
from typing import Iterable, Optional

from pydantic import ValidationError

from ..config import DEFAULT_EDIT_TOOLS
from ..transcript.models import TranscriptWindow
from .models import (
    ExplicitSignal,
    InferredSignal,
    MalformedSignal,
    NoSignal,
    StatusSignal,
    StatusSummary,
)
from .strategy import JsonObjectStrategy, SignalExtractionStrategy

logger = logging.getLogger(__name__)


class StatusExtractor:
    """Turn the trailing transcript into a single status signal.

    Order of precedence:
    1. The last summary occurrence in the last assistant turn (explicit or malformed)
    2. A mutating tool call in the last `tool_window` assistant turns (inferred)
    3. Nothing (no signal)
    """

    def __init__(
        self,
        strategy: Optional[SignalExtractionStrategy] = None,
        edit_tools: Optional[Iterable[str]] = None,
        tool_window: int = 2,
    ):
        """
        Args:
            strategy: How to find summary objects in text (default: JSON scan).
            edit_tools: Tool names that count as mutating files.
            tool_window: How many recent assistant turns to check for tools.
        """
        self.strategy = strategy or JsonObjectStrategy()
        self.edit_tools = frozenset(edit_tools if edit_tools is not None else DEFAULT_EDIT_TOOLS)
        self.tool_window = tool_window

    def extract(self, window: TranscriptWindow) -> StatusSignal:
        last_turn = window.last_assistant_turn
        if last_turn is None:
            return NoSignal()

        occurrences = self.strategy.find_occurrences(last_turn.text)
        if occurrences:
            if len(occurrences) > 1:
                logger.debug(f"Found {len(occurrences)} summaries, using the last one")
            return self._validate(occurrences[-1])

        used = [
            name
            for turn in window.recent_assistant_turns(self.tool_window)
            for name in turn.tool_names
            if name in self.edit_tools
        ]
        if used:
            return InferredSignal(tool_names=tuple(dict.fromkeys(used)))

        return NoSignal()

    @staticmethod
    def _validate(candidate: dict) -> StatusSignal:
        try:
            summary = StatusSummary.model_validate(candidate)
        except ValidationError as e:
            problems = tuple(
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in e.errors()
            )
            logger.info(f"Malformed status summary: {'; '.join(problems)}")
            return MalformedSignal(problems=problems)
        return ExplicitSignal(
            proposed_changes=summary.proposed_changes,
            made_changes=summary.made_changes,
        )
