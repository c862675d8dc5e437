"""Artifact checks for the active ticket's phase."""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from ..tickets.models import WorkflowTicket
from .phases import get_type_policy, required_artifacts

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArtifactCheckResult:
    required: Tuple[str, ...] = ()
    missing: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.missing

    def describe_missing(self) -> str:
        paths = "\n".join(f"- {path}" for path in self.missing)
        return (
            "Required artifacts are missing for this ticket's phase. "
            f"Create them before continuing:\n{paths}"
        )


class ArtifactChecker:
    """Verify the cumulative artifacts a ticket must have at its phase.

    Only the full-lifecycle type (FULL_LIFECYCLE_TYPE) gates artifacts;
    every other type passes trivially.
    """

    def check(
        self,
        ticket: Optional[WorkflowTicket],
        phase: Optional[str] = None,
    ) -> ArtifactCheckResult:
        """
        Args:
            ticket: Active ticket, or None
            phase: Phase to check at (default: the ticket's own phase)

        Returns:
            ArtifactCheckResult listing missing paths relative to the ticket folder
        """
        if ticket is None or not get_type_policy(ticket.type).gates_artifacts:
            return ArtifactCheckResult()

        required = required_artifacts(phase if phase is not None else ticket.phase)
        missing = tuple(path for path in required if not (ticket.folder / path).exists())
        if missing:
            logger.info(f"Ticket {ticket.id} is missing artifacts: {', '.join(missing)}")
        return ArtifactCheckResult(required=required, missing=missing)
