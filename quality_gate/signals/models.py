"""Status signal variants.

A signal is what the last assistant turn says (or implies) about whether
it proposed or made changes. Exactly one variant is produced per run.
"""

from dataclasses import dataclass
from typing import Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool

SIGNAL_FORMAT = '{"proposedChanges": boolean, "madeChanges": boolean}'
SIGNAL_FIELDS = ("proposedChanges", "madeChanges")


class StatusSummary(BaseModel):
    """The structured summary an assistant turn is expected to end with."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    proposed_changes: StrictBool = Field(..., alias="proposedChanges")
    made_changes: StrictBool = Field(..., alias="madeChanges")


@dataclass(frozen=True)
class ExplicitSignal:
    proposed_changes: bool
    made_changes: bool

    @property
    def reports_changes(self) -> bool:
        return self.proposed_changes or self.made_changes


@dataclass(frozen=True)
class MalformedSignal:
    """A summary object was present but failed validation."""
    problems: Tuple[str, ...] = ()


@dataclass(frozen=True)
class InferredSignal:
    """No summary, but a mutating tool ran in the recent turns."""
    tool_names: Tuple[str, ...] = ()

    @property
    def made_changes(self) -> bool:
        return True


@dataclass(frozen=True)
class NoSignal:
    pass


StatusSignal = Union[ExplicitSignal, MalformedSignal, InferredSignal, NoSignal]
