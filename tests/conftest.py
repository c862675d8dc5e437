"""
Shared fixtures for quality gate tests.

- transcript: builds a JSONL transcript in the host's format
- project: a managed project directory with a ticket store
"""

import json
from pathlib import Path
from typing import Iterable, List, Optional

import pytest


class TranscriptBuilder:
    """Append host-format records and write them as a .jsonl file."""

    def __init__(self, path: Path):
        self.path = path
        self.records: List[dict] = []

    def user(self, text: str) -> "TranscriptBuilder":
        self.records.append({
            "type": "user",
            "message": {"role": "user", "content": text},
        })
        return self

    def assistant(self, text: Optional[str] = None, tools: Iterable[str] = ()) -> "TranscriptBuilder":
        content = []
        if text is not None:
            content.append({"type": "text", "text": text})
        for name in tools:
            content.append({"type": "tool_use", "id": f"toolu_{name}", "name": name, "input": {}})
        self.records.append({
            "type": "assistant",
            "message": {"role": "assistant", "content": content},
        })
        return self

    def tool_result(self, output: str) -> "TranscriptBuilder":
        self.records.append({
            "type": "user",
            "message": {
                "role": "user",
                "content": [{"type": "tool_result", "tool_use_id": "toolu_1", "content": output}],
            },
        })
        return self

    def raw(self, line: str) -> "TranscriptBuilder":
        self.records.append(line)
        return self

    def write(self) -> Path:
        lines = [r if isinstance(r, str) else json.dumps(r) for r in self.records]
        self.path.write_text("\n".join(lines) + "\n")
        return self.path


class ProjectBuilder:
    """A managed project: marker directory plus a ticket store."""

    def __init__(self, root: Path):
        self.root = root
        (root / ".safeword").mkdir()
        self.tickets_root = root / ".safeword-project" / "tickets"
        self.tickets_root.mkdir(parents=True)

    def ticket(
        self,
        ticket_id: str,
        type: Optional[str] = "feature",
        phase: Optional[str] = "implement",
        status: Optional[str] = "in_progress",
        last_modified: Optional[str] = "2026-01-05T10:00:00Z",
        artifacts: Iterable[str] = (),
    ) -> Path:
        """Write <root>/<ticket_id>/ticket.md and return the ticket folder."""
        folder = self.tickets_root / ticket_id
        folder.mkdir(parents=True, exist_ok=True)
        fields = {
            "id": ticket_id,
            "type": type,
            "phase": phase,
            "status": status,
            "last_modified": last_modified,
        }
        front = "\n".join(f"{k}: {v}" for k, v in fields.items() if v is not None)
        (folder / "ticket.md").write_text(f"---\n{front}\n---\n\n# {ticket_id}\n")
        for artifact in artifacts:
            (folder / artifact).write_text("# Artifact\n")
        return folder


@pytest.fixture
def transcript(tmp_path):
    """Transcript builder writing to tmp_path/transcript.jsonl."""
    return TranscriptBuilder(tmp_path / "transcript.jsonl")


@pytest.fixture
def project(tmp_path):
    """Managed project rooted at tmp_path/project."""
    root = tmp_path / "project"
    root.mkdir()
    return ProjectBuilder(root)


@pytest.fixture(autouse=True)
def clean_gate_env(monkeypatch):
    """Keep the caller's environment from leaking into config loading."""
    for name in (
        "CLAUDE_PROJECT_DIR",
        "QUALITY_GATE_ENABLED",
        "QUALITY_GATE_TICKETS_DIR",
        "QUALITY_GATE_TOOL_WINDOW",
        "QUALITY_GATE_EVIDENCE_WINDOW",
        "QUALITY_GATE_LOG_LEVEL",
        "QUALITY_GATE_LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
