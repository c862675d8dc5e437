"""
Quality gate engine.

Decides, at the end of each assistant turn, whether the turn may end:

    NoSignal                          -> allow
    Malformed summary                 -> hard-block
    Edit tools used, no summary       -> soft-block (phase guidance)
    Summary, nothing proposed/changed -> allow
    Summary with changes:
        missing phase artifact        -> soft-block (names the artifact)
        non-terminal phase            -> soft-block (phase guidance)
        terminal phase                -> allow, or hard-block on missing evidence

Reading failures never block: a missing transcript, an unmanaged project
or an unreadable ticket store all degrade to allow or to default guidance.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from .config import GateConfig
from .decision import Allow, Decision, HardBlock, SoftBlock
from .exceptions import TranscriptReadError
from .hook_input import HookInput
from .policy.artifacts import ArtifactChecker
from .policy.evidence import EvidenceScanner
from .policy.phases import PHASE_POLICIES, resolve_phase
from .signals.extractor import StatusExtractor
from .signals.models import (
    SIGNAL_FORMAT,
    ExplicitSignal,
    InferredSignal,
    MalformedSignal,
    NoSignal,
    StatusSignal,
)
from .tickets.models import WorkflowTicket
from .tickets.store import resolve_active_ticket
from .transcript.models import TranscriptWindow
from .transcript.reader import TranscriptReader

logger = logging.getLogger(__name__)

MISSING_SUMMARY_REASON = (
    "Quality gate: missing required structured summary. "
    f"End your response with:\n{SIGNAL_FORMAT}"
)

EDIT_TOOLS_NOTE = (
    "(Note: the structured summary was missing but edit tools were detected)"
)


class QualityGate:
    """
    Session-completion gate for one project.

    Holds no state between evaluations: the transcript and the ticket
    store are re-read on every call.
    """

    def __init__(
        self,
        project_dir: Union[str, Path],
        config: Optional[GateConfig] = None,
        extractor: Optional[StatusExtractor] = None,
        artifact_checker: Optional[ArtifactChecker] = None,
        evidence_scanner: Optional[EvidenceScanner] = None,
    ):
        """
        Args:
            project_dir: Project root directory
            config: Gate configuration (default: GateConfig())
            extractor: Status extractor (default built from config)
            artifact_checker: Artifact checker (default: ArtifactChecker())
            evidence_scanner: Evidence scanner (default: EvidenceScanner())
        """
        self.project_dir = Path(project_dir)
        self.config = config or GateConfig()
        self.extractor = extractor or StatusExtractor(
            edit_tools=self.config.edit_tools,
            tool_window=self.config.tool_window,
        )
        self.reader = TranscriptReader(tail_turns=self.config.transcript_tail_turns)
        self.artifact_checker = artifact_checker or ArtifactChecker()
        self.evidence_scanner = evidence_scanner or EvidenceScanner()

    @property
    def tickets_root(self) -> Path:
        return self.project_dir / self.config.tickets_dir

    def is_managed_project(self) -> bool:
        """True if the project carries the marker directory."""
        return (self.project_dir / self.config.marker_dir).is_dir()

    def evaluate(self, hook_input: Optional[HookInput]) -> Decision:
        """Evaluate a host input record."""
        if not self.config.enabled:
            logger.info("Quality gate disabled")
            return Allow()
        if not self.is_managed_project():
            logger.debug(f"Not a managed project: {self.project_dir}")
            return Allow()
        if hook_input is None or not hook_input.transcript_path:
            return Allow()
        return self.evaluate_transcript(hook_input.transcript_path)

    def evaluate_transcript(self, transcript_path: Union[str, Path]) -> Decision:
        """Evaluate a transcript file; unreadable transcripts are allowed."""
        try:
            window = self.reader.read(transcript_path)
        except TranscriptReadError as e:
            logger.warning(f"Allowing turn, transcript unavailable: {e}")
            return Allow()
        return self.decide(window)

    def decide(self, window: TranscriptWindow) -> Decision:
        """Run the decision state machine over a transcript window."""
        signal = self.extractor.extract(window)
        logger.debug(f"Status signal: {signal}")

        if isinstance(signal, NoSignal):
            return Allow()
        if isinstance(signal, MalformedSignal):
            return HardBlock(reason=self._malformed_reason(signal))
        if isinstance(signal, ExplicitSignal) and not signal.reports_changes:
            return Allow()

        ticket = self._active_ticket()
        return self._decide_for_ticket(signal, ticket, window)

    def _decide_for_ticket(
        self,
        signal: StatusSignal,
        ticket: Optional[WorkflowTicket],
        window: TranscriptWindow,
    ) -> Decision:
        phase = resolve_phase(ticket.phase if ticket else None)
        policy = PHASE_POLICIES[phase]

        if isinstance(signal, InferredSignal):
            return SoftBlock(reason=f"{policy.guidance}\n\n{EDIT_TOOLS_NOTE}")

        artifacts = self.artifact_checker.check(ticket, phase)
        if not artifacts.ok:
            return SoftBlock(reason=artifacts.describe_missing())

        if not policy.terminal:
            return SoftBlock(reason=policy.guidance)

        evidence = self.evidence_scanner.check(
            window.evidence_text(self.config.evidence_window),
            ticket.type if ticket else None,
        )
        if not evidence.required:
            return SoftBlock(reason=policy.guidance)
        if evidence.ok:
            logger.info(f"Completion evidence found for ticket {ticket.id}")
            return Allow()
        return HardBlock(reason=evidence.describe_missing())

    def _active_ticket(self) -> Optional[WorkflowTicket]:
        try:
            ticket = resolve_active_ticket(self.tickets_root)
        except OSError as e:
            logger.warning(f"Ticket store unreadable, using default phase: {e}")
            return None
        if ticket is not None:
            logger.debug(f"Active ticket {ticket.id} ({ticket.type}, phase={ticket.phase})")
        return ticket

    @staticmethod
    def _malformed_reason(signal: MalformedSignal) -> str:
        if not signal.problems:
            return MISSING_SUMMARY_REASON
        problems = "\n".join(f"- {problem}" for problem in signal.problems)
        return f"{MISSING_SUMMARY_REASON}\n\nProblems found:\n{problems}"
