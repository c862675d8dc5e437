"""
Phase policy table.

Maps each ticket phase to the guidance shown when a turn ends in that
phase, the artifact the phase produces, and whether the phase is terminal.
Adding a phase means adding a row to PHASE_POLICIES and placing it in
PHASE_ORDER.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from ..signals.models import SIGNAL_FORMAT

DEFAULT_PHASE = "implement"

# Linear lifecycle; artifact requirements accumulate along this order
PHASE_ORDER: Tuple[str, ...] = (
    "intake",
    "define-behavior",
    "scenario-gate",
    "decomposition",
    "implement",
    "done",
)

SUMMARY_REMINDER = f"""End your response with: {SIGNAL_FORMAT}
- proposedChanges: true if THIS response suggests new code/changes to implement
- madeChanges: true if THIS response used Edit/Write tools
- Review confirmations (like this) should report both as false"""


@dataclass(frozen=True)
class PhasePolicy:
    """Static policy for one phase."""
    name: str
    guidance: str
    required_artifact: Optional[str] = None
    terminal: bool = False


@dataclass(frozen=True)
class TicketTypePolicy:
    """What a ticket type is gated on.

    gates_artifacts: cumulative phase artifacts must exist
    required_evidence: evidence classes needed to finish the terminal phase
    """
    gates_artifacts: bool = False
    required_evidence: Tuple[str, ...] = ()


def _guidance(title: str, body: str) -> str:
    return f"Quality Review ({title}):\n\n{body.strip()}\n\n{SUMMARY_REMINDER}"


QUALITY_REVIEW_CHECKLIST = """
Double check and critique your work again just in case.
Assume you've never seen it before.

- Is it correct?
- Is it elegant?
- Does it follow latest docs/best practices?
- If questions remain: research first, then ask targeted questions.
- Avoid bloat.
- If you asked a question above that's still relevant after review, re-ask it.
"""

PHASE_POLICIES: Dict[str, PhasePolicy] = {
    "intake": PhasePolicy(
        name="intake",
        guidance=_guidance("intake", """
You are still scoping this ticket.

- Is the problem statement clear and specific?
- Who is affected, and what does done look like?
- What is explicitly out of scope?
- Ask targeted questions instead of guessing.
"""),
    ),
    "define-behavior": PhasePolicy(
        name="define-behavior",
        guidance=_guidance("define behavior", """
You are describing behavior, not writing code yet.

- Is every behavior observable from the outside?
- Are edge cases and failure modes described?
- Would someone else write the same scenarios from this description?
"""),
    ),
    "scenario-gate": PhasePolicy(
        name="scenario-gate",
        guidance=_guidance("scenario gate", """
Scenarios must be agreed before implementation starts.

- Does each scenario have a single clear outcome?
- Do the scenarios cover the happy path, edge cases and errors?
- Has the user confirmed the scenarios?
"""),
        required_artifact="test-definitions.md",
    ),
    "decomposition": PhasePolicy(
        name="decomposition",
        guidance=_guidance("decomposition", """
Break the work into small, independently testable steps.

- Does each step map to one or more scenarios?
- Is the order of steps safe to ship incrementally?
- Is anything in the plan not required by a scenario?
"""),
    ),
    "implement": PhasePolicy(
        name="implement",
        guidance=_guidance("implement", QUALITY_REVIEW_CHECKLIST),
    ),
    "done": PhasePolicy(
        name="done",
        guidance=_guidance("done", """
Before closing this ticket:

- Run the full test suite and report the result.
- Confirm every scenario passes.
- Update the ticket status and notes.
"""),
        terminal=True,
    ),
}

# The only type gated on phase artifacts as well as evidence
FULL_LIFECYCLE_TYPE = "feature"

TICKET_TYPE_POLICIES: Dict[str, TicketTypePolicy] = {
    FULL_LIFECYCLE_TYPE: TicketTypePolicy(
        gates_artifacts=True,
        required_evidence=("tests", "scenarios"),
    ),
    "task": TicketTypePolicy(),
}

# Types not listed above (bug, chore, ...) need a test run to finish
DEFAULT_TYPE_POLICY = TicketTypePolicy(required_evidence=("tests",))


def resolve_phase(phase: Optional[str]) -> str:
    """Map a ticket phase to a known phase; missing or unknown means implement."""
    if phase is None:
        return DEFAULT_PHASE
    key = phase.strip().lower()
    return key if key in PHASE_POLICIES else DEFAULT_PHASE


def get_phase_policy(phase: Optional[str]) -> PhasePolicy:
    return PHASE_POLICIES[resolve_phase(phase)]


def get_type_policy(ticket_type: Optional[str]) -> TicketTypePolicy:
    if ticket_type is None:
        return TICKET_TYPE_POLICIES["task"]
    return TICKET_TYPE_POLICIES.get(ticket_type.strip().lower(), DEFAULT_TYPE_POLICY)


def required_artifacts(phase: Optional[str]) -> Tuple[str, ...]:
    """Artifacts of every phase up to and including `phase`, in phase order."""
    position = PHASE_ORDER.index(resolve_phase(phase))
    return tuple(
        PHASE_POLICIES[name].required_artifact
        for name in PHASE_ORDER[:position + 1]
        if PHASE_POLICIES[name].required_artifact
    )
