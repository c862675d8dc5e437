"""Extraction strategies for the structured status summary.

A strategy finds candidate summary objects in free text. The extractor only
ever looks at the last candidate, so a strategy's job is to return every
occurrence in order of appearance.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List

from .models import SIGNAL_FIELDS


class SignalExtractionStrategy(ABC):
    """Abstract base class for summary extraction strategies."""

    @abstractmethod
    def find_occurrences(self, text: str) -> List[Dict[str, Any]]:
        """Return decoded summary candidates in order of appearance.

        Args:
            text: Text of the last assistant turn.

        Returns:
            List of dicts, leftmost first. Empty if there are none.
        """
        pass


class JsonObjectStrategy(SignalExtractionStrategy):
    """Find JSON objects embedded in prose using brace-balanced scanning.

    Braces inside JSON strings (and escaped quotes) do not affect nesting.
    Spans are non-overlapping: after a complete object, scanning resumes
    after its closing brace. Spans that do not decode, or that carry none
    of the summary fields, are not occurrences.
    """

    def find_occurrences(self, text: str) -> List[Dict[str, Any]]:
        occurrences = []
        for span in iter_json_object_spans(text):
            try:
                value = json.loads(span)
            except json.JSONDecodeError:
                continue
            if isinstance(value, dict) and any(key in value for key in SIGNAL_FIELDS):
                occurrences.append(value)
        return occurrences


def iter_json_object_spans(text: str) -> Iterator[str]:
    """Yield every balanced top-level {...} span in text."""
    i = 0
    length = len(text)
    while i < length:
        if text[i] != "{":
            i += 1
            continue

        depth = 0
        in_string = False
        escape = False
        end = None
        for j in range(i, length):
            char = text[j]
            if escape:
                escape = False
                continue
            if char == "\\" and in_string:
                escape = True
                continue
            if char == '"':
                in_string = not in_string
                continue
            if in_string:
                continue
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    end = j
                    break

        if end is None:
            # Unbalanced from here on; try the next opening brace
            i += 1
            continue
        yield text[i:end + 1]
        i = end + 1
