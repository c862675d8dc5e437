"""
Completion evidence for the terminal phase.

Looks for proof in the transcript that the work was verified:
- tests: a test runner summary with a pass count
- scenarios: a statement that the ticket's scenarios / acceptance criteria pass
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Tuple

from .phases import get_type_policy

logger = logging.getLogger(__name__)

TESTS = "tests"
SCENARIOS = "scenarios"

EVIDENCE_PATTERNS: Dict[str, List[str]] = {
    TESTS: [
        # pytest "12 passed", vitest/jest "Tests: 5 passed", cargo "3 passed;", mocha "5 passing"
        r"(?<!\()\b[1-9]\d*\s+(?:tests?\s+)?pass(?:ed|ing)\b",
        # unittest
        r"\bRan\s+[1-9]\d*\s+tests?\b[^\n]*\n+\s*OK\b",
    ],
    SCENARIOS: [
        r"\ball\s+(?:[1-9]\d*\s+)?(?:the\s+)?scenarios?\s+(?:are\s+|were\s+|have\s+been\s+)?(?:now\s+)?(?:complete|completed|passed|passing|green|done)\b",
        # cucumber/behave "3 scenarios (3 passed)"
        r"\b[1-9]\d*\s+scenarios?\s+\(\s*[1-9]\d*\s+passed\b",
        r"\b[1-9]\d*\s+scenarios?\s+(?:passed|passing|complete|completed)\b",
        r"\bacceptance\s+criteria\s+(?:are\s+|were\s+|have\s+been\s+)?(?:all\s+)?(?:met|satisfied|verified|passed)\b",
    ],
}

# Must not match EVIDENCE_PATTERNS themselves
EVIDENCE_HINTS: Dict[str, str] = {
    TESTS: "run the test suite and include the test runner's pass summary",
    SCENARIOS: "confirm that every scenario of this ticket has been verified",
}


@dataclass(frozen=True)
class EvidenceResult:
    required: Tuple[str, ...] = ()
    found: FrozenSet[str] = frozenset()

    @property
    def missing(self) -> Tuple[str, ...]:
        return tuple(name for name in self.required if name not in self.found)

    @property
    def ok(self) -> bool:
        return not self.missing

    def describe_missing(self) -> str:
        hints = "\n".join(f"- {name}: {EVIDENCE_HINTS[name]}" for name in self.missing)
        return (
            f"Missing completion evidence: {', '.join(self.missing)}.\n"
            f"This ticket is in its final phase. Before finishing:\n{hints}"
        )


class EvidenceScanner:
    """Scan transcript text for evidence classes."""

    def __init__(self, patterns: Optional[Dict[str, List[str]]] = None):
        source = patterns or EVIDENCE_PATTERNS
        self._compiled = {
            name: [re.compile(p, re.IGNORECASE) for p in pattern_list]
            for name, pattern_list in source.items()
        }

    def scan(self, text: str) -> FrozenSet[str]:
        """Return the evidence classes present in text."""
        return frozenset(
            name for name, patterns in self._compiled.items()
            if any(p.search(text) for p in patterns)
        )

    def check(self, text: str, ticket_type: Optional[str]) -> EvidenceResult:
        """Check text against the evidence required for a ticket type."""
        required = get_type_policy(ticket_type).required_evidence
        if not required:
            return EvidenceResult()
        found = self.scan(text)
        result = EvidenceResult(required=required, found=found)
        if not result.ok:
            logger.info(f"Missing evidence for {ticket_type} ticket: {', '.join(result.missing)}")
        return result
