"""
Tests for the quality-gate CLI.

Runs main(argv) end to end with stdin, environment and output captured.
"""

import io
import json
import logging
from unittest.mock import patch

import pytest

from quality_gate import __version__
from quality_gate.cli import main, resolve_project_dir
from quality_gate.hook_input import HookInput

SUMMARY_CHANGED = '{"proposedChanges": false, "madeChanges": true}'


@pytest.fixture(autouse=True)
def restore_logging():
    """The CLI reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def hook_stdin(monkeypatch, record):
    raw = record if isinstance(record, str) else json.dumps(record)
    monkeypatch.setattr("sys.stdin", io.StringIO(raw))


# ============================================================================
# stop
# ============================================================================

class TestStopCommand:

    def test_allow_is_silent(self, project, transcript, monkeypatch, capsys):
        path = transcript.assistant("Just answering.").write()
        monkeypatch.setenv("CLAUDE_PROJECT_DIR", str(project.root))
        hook_stdin(monkeypatch, {"transcript_path": str(path), "hook_event_name": "Stop"})

        assert main(["stop"]) == 0

        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""

    def test_soft_block_payload(self, project, transcript, monkeypatch, capsys):
        path = transcript.assistant(f"Made changes.\n\n{SUMMARY_CHANGED}").write()
        monkeypatch.setenv("CLAUDE_PROJECT_DIR", str(project.root))
        hook_stdin(monkeypatch, {"transcript_path": str(path)})

        assert main(["stop"]) == 0

        captured = capsys.readouterr()
        payload = json.loads(captured.out)
        assert payload["decision"] == "block"
        assert "Is it correct?" in payload["reason"]
        assert captured.err == ""

    def test_hard_block_exit_code(self, project, transcript, monkeypatch, capsys):
        path = transcript.assistant('{"proposedChanges": true}').write()
        monkeypatch.setenv("CLAUDE_PROJECT_DIR", str(project.root))
        hook_stdin(monkeypatch, {"transcript_path": str(path)})

        assert main(["stop"]) == 2

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "missing required structured summary" in captured.err

    def test_transcript_and_project_flags(self, project, transcript, capsys):
        path = transcript.assistant('{"proposedChanges": true}').write()

        code = main(["stop", "--project-dir", str(project.root), "--transcript", str(path)])

        assert code == 2

    def test_project_dir_from_record_cwd(self, project, transcript, monkeypatch, capsys):
        path = transcript.assistant('{"proposedChanges": true}').write()
        hook_stdin(monkeypatch, {"transcript_path": str(path), "cwd": str(project.root)})

        assert main(["stop"]) == 2

    @pytest.mark.parametrize("raw", ["", "garbage", "[]"])
    def test_bad_stdin_allows(self, project, monkeypatch, capsys, raw):
        monkeypatch.setenv("CLAUDE_PROJECT_DIR", str(project.root))
        hook_stdin(monkeypatch, raw)

        assert main(["stop"]) == 0
        assert capsys.readouterr().out == ""

    def test_unmanaged_project_allows(self, tmp_path, transcript, monkeypatch, capsys):
        path = transcript.assistant('{"proposedChanges": true}').write()
        monkeypatch.setenv("CLAUDE_PROJECT_DIR", str(tmp_path))
        hook_stdin(monkeypatch, {"transcript_path": str(path)})

        assert main(["stop"]) == 0
        assert capsys.readouterr().err == ""

    def test_kill_switch(self, project, transcript, monkeypatch, capsys):
        path = transcript.assistant('{"proposedChanges": true}').write()
        monkeypatch.setenv("CLAUDE_PROJECT_DIR", str(project.root))
        monkeypatch.setenv("QUALITY_GATE_ENABLED", "false")
        hook_stdin(monkeypatch, {"transcript_path": str(path)})

        assert main(["stop"]) == 0

    def test_unexpected_error_allows(self, project, transcript, monkeypatch, capsys):
        """A crash inside the gate never blocks the session."""
        path = transcript.assistant('{"proposedChanges": true}').write()
        monkeypatch.setenv("CLAUDE_PROJECT_DIR", str(project.root))
        hook_stdin(monkeypatch, {"transcript_path": str(path)})

        with patch("quality_gate.cli.QualityGate", side_effect=RuntimeError("boom")):
            code = main(["stop"])

        captured = capsys.readouterr()
        assert code == 0
        assert captured.out == ""
        assert captured.err == ""

    def test_log_file(self, project, transcript, tmp_path, monkeypatch, capsys):
        log_file = tmp_path / "gate.log"
        path = transcript.assistant('{"proposedChanges": true}').write()
        monkeypatch.setenv("CLAUDE_PROJECT_DIR", str(project.root))
        monkeypatch.setenv("QUALITY_GATE_LOG_FILE", str(log_file))
        monkeypatch.setenv("QUALITY_GATE_LOG_LEVEL", "INFO")
        hook_stdin(monkeypatch, {"transcript_path": str(path)})

        main(["stop"])
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "Decision: hard-block" in log_file.read_text()


class TestResolveProjectDir:

    def test_precedence(self, tmp_path):
        record = HookInput(cwd=str(tmp_path / "cwd"))
        env = {"CLAUDE_PROJECT_DIR": str(tmp_path / "env")}

        assert resolve_project_dir("explicit", record, env).name == "explicit"
        assert resolve_project_dir(None, record, env).name == "env"
        assert resolve_project_dir(None, record, {}).name == "cwd"


# ============================================================================
# status / phases
# ============================================================================

class TestStatusCommand:

    def test_json_status(self, project, capsys):
        project.ticket("f1", type="feature", phase="implement")

        assert main(["status", "--project-dir", str(project.root), "--json"]) == 0

        status = json.loads(capsys.readouterr().out)
        assert status["managed"] is True
        assert status["active_ticket"]["id"] == "f1"
        assert status["phase"] == "implement"
        assert status["required_artifacts"] == ["test-definitions.md"]
        assert status["missing_artifacts"] == ["test-definitions.md"]
        assert status["required_evidence"] == ["tests", "scenarios"]

    def test_text_status_without_ticket(self, project, capsys):
        assert main(["status", "-d", str(project.root)]) == 0

        out = capsys.readouterr().out
        assert "Active ticket: none" in out

    def test_text_status_marks_artifacts(self, project, capsys):
        project.ticket("f1", type="feature", phase="done", artifacts=["test-definitions.md"])

        main(["status", "-d", str(project.root)])

        out = capsys.readouterr().out
        assert "Active ticket: f1 (feature)" in out
        assert "✓ test-definitions.md" in out


class TestPhasesCommand:

    def test_lists_phases_in_order(self, capsys):
        assert main(["phases"]) == 0

        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "intake"
        assert "scenario-gate  (artifact: test-definitions.md)" in lines
        assert lines[-1] == "done  (terminal)"

    def test_verbose_includes_guidance(self, capsys):
        main(["phases", "--verbose"])

        assert "Is it correct?" in capsys.readouterr().out


class TestMain:

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "quality-gate" in capsys.readouterr().out

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out
