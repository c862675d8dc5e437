"""
Tests for status summary extraction.

Tests cover:
- Brace-balanced JSON scanning in prose
- Explicit, malformed, inferred and absent signals
- Last-occurrence-wins and the tool window
"""

import pytest

from quality_gate.signals import (
    ExplicitSignal,
    InferredSignal,
    JsonObjectStrategy,
    MalformedSignal,
    NoSignal,
    StatusExtractor,
)
from quality_gate.signals.strategy import iter_json_object_spans
from quality_gate.transcript import ContentItem, ContentKind, TranscriptTurn, TranscriptWindow


def assistant(text=None, tools=()):
    content = []
    if text is not None:
        content.append(ContentItem(kind=ContentKind.TEXT, text=text))
    content.extend(ContentItem(kind=ContentKind.TOOL_INVOCATION, tool_name=t) for t in tools)
    return TranscriptTurn(role="assistant", content=content)


def user(text):
    return TranscriptTurn(role="user", content=[ContentItem(kind=ContentKind.TEXT, text=text)])


def window(*turns):
    return TranscriptWindow(turns=list(turns))


# ============================================================================
# JSON span scanning
# ============================================================================

class TestJsonObjectSpans:

    def test_finds_objects_in_prose(self):
        text = 'Before {"a": 1} middle {"b": {"c": 2}} after'
        assert list(iter_json_object_spans(text)) == ['{"a": 1}', '{"b": {"c": 2}}']

    def test_braces_inside_strings_do_not_nest(self):
        text = 'x {"msg": "use } and { freely", "n": "\\"}"} y'
        spans = list(iter_json_object_spans(text))
        assert spans == ['{"msg": "use } and { freely", "n": "\\"}"}']

    def test_unbalanced_prefix_is_skipped(self):
        """An opening brace that never closes does not hide a later object."""
        text = 'if (x) { oops ... {"madeChanges": false}'
        spans = list(iter_json_object_spans(text))
        assert spans[-1] == '{"madeChanges": false}'

    def test_no_objects(self):
        assert list(iter_json_object_spans("plain text")) == []


class TestJsonObjectStrategy:

    def test_ignores_objects_without_summary_fields(self):
        strategy = JsonObjectStrategy()
        text = 'Config: {"name": "x"}. Summary: {"proposedChanges": false, "madeChanges": true}'

        occurrences = strategy.find_occurrences(text)

        assert occurrences == [{"proposedChanges": False, "madeChanges": True}]

    def test_ignores_invalid_json_spans(self):
        strategy = JsonObjectStrategy()
        assert strategy.find_occurrences("{proposedChanges: true}") == []


# ============================================================================
# Extraction
# ============================================================================

class TestStatusExtractor:

    def test_no_assistant_turn(self):
        assert isinstance(StatusExtractor().extract(window(user("hi"))), NoSignal)

    def test_explicit_summary(self):
        signal = StatusExtractor().extract(window(
            assistant('Done.\n{"proposedChanges": false, "madeChanges": true}'),
        ))

        assert signal == ExplicitSignal(proposed_changes=False, made_changes=True)
        assert signal.reports_changes

    def test_summary_with_extra_fields(self):
        """Unknown fields alongside the required ones are ignored."""
        signal = StatusExtractor().extract(window(
            assistant('{"proposedChanges": false, "madeChanges": false, "askedQuestion": true}'),
        ))

        assert signal == ExplicitSignal(proposed_changes=False, made_changes=False)
        assert not signal.reports_changes

    def test_last_occurrence_wins(self):
        """Only the last summary in the turn counts, even if an earlier one is valid."""
        signal = StatusExtractor().extract(window(
            assistant(
                'Earlier: {"proposedChanges": false, "madeChanges": false}\n'
                'Final: {"proposedChanges": true, "madeChanges": true}'
            ),
        ))

        assert signal == ExplicitSignal(proposed_changes=True, made_changes=True)

    def test_malformed_last_occurrence_wins_over_valid_earlier(self):
        signal = StatusExtractor().extract(window(
            assistant(
                '{"proposedChanges": false, "madeChanges": false} and then '
                '{"proposedChanges": "no", "madeChanges": false}'
            ),
        ))

        assert isinstance(signal, MalformedSignal)

    @pytest.mark.parametrize("summary", [
        '{"proposedChanges": true}',
        '{"madeChanges": false}',
        '{"proposedChanges": "true", "madeChanges": false}',
        '{"proposedChanges": 1, "madeChanges": 0}',
        '{"proposedChanges": null, "madeChanges": true}',
    ])
    def test_malformed_summaries(self, summary):
        """Missing fields and non-boolean values are malformed."""
        signal = StatusExtractor().extract(window(assistant(summary)))

        assert isinstance(signal, MalformedSignal)
        assert signal.problems

    def test_problems_name_the_field(self):
        signal = StatusExtractor().extract(window(assistant('{"proposedChanges": false}')))

        assert any(problem.startswith("madeChanges") for problem in signal.problems)

    def test_summary_only_read_from_last_assistant_turn(self):
        """A summary in an earlier turn does not count for the current one."""
        signal = StatusExtractor().extract(window(
            assistant('{"proposedChanges": true, "madeChanges": true}'),
            user("thanks"),
            assistant("No summary this time."),
        ))

        assert isinstance(signal, NoSignal)

    def test_inferred_from_edit_tools(self):
        signal = StatusExtractor().extract(window(
            assistant("Editing now", tools=["Read", "Edit"]),
        ))

        assert signal == InferredSignal(tool_names=("Edit",))
        assert signal.made_changes

    def test_inferred_from_previous_assistant_turn(self):
        """Tool use is split across lines; the previous assistant turn counts."""
        signal = StatusExtractor().extract(window(
            assistant(tools=["Write"]),
            user("tool output"),
            assistant("All set."),
        ))

        assert isinstance(signal, InferredSignal)
        assert signal.tool_names == ("Write",)

    def test_tool_use_outside_window_is_ignored(self):
        signal = StatusExtractor(tool_window=2).extract(window(
            assistant(tools=["Edit"]),
            assistant("reviewed"),
            assistant("still reviewing"),
        ))

        assert isinstance(signal, NoSignal)

    def test_read_only_tools_do_not_infer(self):
        signal = StatusExtractor().extract(window(
            assistant("Looking around", tools=["Read", "Grep", "Bash"]),
        ))

        assert isinstance(signal, NoSignal)

    def test_custom_edit_tools(self):
        extractor = StatusExtractor(edit_tools=["Bash"])
        signal = extractor.extract(window(assistant(tools=["Bash", "Edit"])))

        assert signal == InferredSignal(tool_names=("Bash",))

    def test_explicit_summary_beats_tool_use(self):
        """A summary always takes precedence over tool inference."""
        signal = StatusExtractor().extract(window(
            assistant('Edited. {"proposedChanges": false, "madeChanges": false}', tools=["Edit"]),
        ))

        assert signal == ExplicitSignal(proposed_changes=False, made_changes=False)
