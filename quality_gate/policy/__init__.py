"""
Phase policy

- PHASE_POLICIES / PHASE_ORDER: static phase table
- TICKET_TYPE_POLICIES: which ticket types are gated on artifacts/evidence
- ArtifactChecker: cumulative artifact existence checks
- EvidenceScanner: terminal-phase completion evidence
"""

from .artifacts import ArtifactChecker, ArtifactCheckResult
from .evidence import (
    EVIDENCE_PATTERNS,
    SCENARIOS,
    TESTS,
    EvidenceResult,
    EvidenceScanner,
)
from .phases import (
    DEFAULT_PHASE,
    DEFAULT_TYPE_POLICY,
    PHASE_ORDER,
    PHASE_POLICIES,
    FULL_LIFECYCLE_TYPE,
    TICKET_TYPE_POLICIES,
    PhasePolicy,
    TicketTypePolicy,
    get_phase_policy,
    get_type_policy,
    required_artifacts,
    resolve_phase,
)

__all__ = [
    "ArtifactChecker",
    "ArtifactCheckResult",
    "EVIDENCE_PATTERNS",
    "SCENARIOS",
    "TESTS",
    "EvidenceResult",
    "EvidenceScanner",
    "DEFAULT_PHASE",
    "DEFAULT_TYPE_POLICY",
    "PHASE_ORDER",
    "PHASE_POLICIES",
    "FULL_LIFECYCLE_TYPE",
    "TICKET_TYPE_POLICIES",
    "PhasePolicy",
    "TicketTypePolicy",
    "get_phase_policy",
    "get_type_policy",
    "required_artifacts",
    "resolve_phase",
]
