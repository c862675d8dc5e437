"""
Gate decisions and their encoding for the host.

Encoding:
- Allow:     no output, exit 0
- SoftBlock: {"decision": "block", "reason": ...} on stdout, exit 0
- HardBlock: reason on stderr, exit 2
"""

import sys
from dataclasses import dataclass
from typing import Literal, Optional, TextIO, Union

from pydantic import BaseModel

HARD_BLOCK_EXIT_CODE = 2


@dataclass(frozen=True)
class Allow:
    outcome = "allow"


@dataclass(frozen=True)
class SoftBlock:
    """Let the session continue with guidance injected for another turn."""
    reason: str
    outcome = "soft-block"


@dataclass(frozen=True)
class HardBlock:
    """The turn may not end until the violation is resolved."""
    reason: str
    outcome = "hard-block"


Decision = Union[Allow, SoftBlock, HardBlock]


class BlockPayload(BaseModel):
    """Structured soft-block output read by the host."""
    decision: Literal["block"] = "block"
    reason: str


def emit(
    decision: Decision,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
) -> int:
    """
    Write a decision in the host's encoding.

    Args:
        decision: Decision to emit
        stdout: Stream for structured output (default: sys.stdout)
        stderr: Stream for hard-block reasons (default: sys.stderr)

    Returns:
        Process exit code
    """
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    if isinstance(decision, SoftBlock):
        stdout.write(BlockPayload(reason=decision.reason).model_dump_json() + "\n")
        stdout.flush()
        return 0
    if isinstance(decision, HardBlock):
        stderr.write(decision.reason.rstrip("\n") + "\n")
        stderr.flush()
        return HARD_BLOCK_EXIT_CODE
    return 0
