#!/usr/bin/env python3
"""
Quality Gate CLI

Usage:
    quality-gate stop                  # Stop hook: reads the host record on stdin
    quality-gate stop --transcript t.jsonl --project-dir .
    quality-gate status [--json]       # Show the active ticket and its requirements
    quality-gate phases                # Show the phase policy table
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

from . import __version__
from .config import GateConfig, load_config
from .decision import Allow, Decision, emit
from .engine import QualityGate
from .hook_input import HookInput, parse_hook_input
from .policy.phases import (
    PHASE_ORDER,
    PHASE_POLICIES,
    get_type_policy,
    required_artifacts,
    resolve_phase,
)
from .tickets.store import TicketStore

logger = logging.getLogger(__name__)

PROJECT_DIR_ENV = "CLAUDE_PROJECT_DIR"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(config: GateConfig, verbose: bool = False) -> None:
    """
    Route log records away from the decision channels.

    stdout carries soft-block payloads and stderr carries hard-block
    reasons, so logs go to a file (or nowhere) unless --verbose is given.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    if verbose:
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
        level = logging.DEBUG
    elif config.log_file:
        try:
            handler = logging.FileHandler(config.log_file, encoding="utf-8")
        except OSError:
            handler = logging.NullHandler()
        level = getattr(logging, str(config.log_level).upper(), logging.WARNING)
    else:
        handler = logging.NullHandler()
        level = logging.WARNING

    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)
    root.setLevel(level)


def resolve_project_dir(
    explicit: Optional[str],
    hook_input: Optional[HookInput] = None,
    environ: Optional[Dict[str, str]] = None,
) -> Path:
    """--project-dir, then $CLAUDE_PROJECT_DIR, then the record's cwd, then cwd."""
    env = os.environ if environ is None else environ
    if explicit:
        return Path(explicit)
    if env.get(PROJECT_DIR_ENV):
        return Path(env[PROJECT_DIR_ENV])
    if hook_input is not None and hook_input.cwd:
        return Path(hook_input.cwd)
    return Path.cwd()


def _run_stop(args) -> Decision:
    if args.transcript:
        hook_input: Optional[HookInput] = HookInput(transcript_path=args.transcript)
    else:
        hook_input = parse_hook_input(sys.stdin.read())

    project_dir = resolve_project_dir(args.project_dir, hook_input)
    config = load_config(project_dir)
    configure_logging(config, verbose=args.verbose)
    return QualityGate(project_dir, config=config).evaluate(hook_input)


def cmd_stop(args) -> int:
    """Run the gate as a stop hook and emit the decision."""
    # Keep stray records off stdout/stderr until the project config is known
    configure_logging(GateConfig(), verbose=args.verbose)

    decision: Decision
    try:
        decision = _run_stop(args)
    except Exception:
        # Never let a gate failure stop the user's session
        logger.exception("Quality gate failed, allowing turn")
        decision = Allow()

    logger.info(f"Decision: {decision.outcome}")
    return emit(decision)


def cmd_status(args) -> int:
    """Show the active ticket, its resolved phase and artifact state."""
    project_dir = resolve_project_dir(args.project_dir)
    config = load_config(project_dir)
    configure_logging(config, verbose=args.verbose)

    gate = QualityGate(project_dir, config=config)
    ticket = TicketStore(gate.tickets_root).get_active_ticket()
    phase = resolve_phase(ticket.phase if ticket else None)
    type_policy = get_type_policy(ticket.type) if ticket else None
    if type_policy is not None and type_policy.gates_artifacts:
        required = required_artifacts(phase)
    else:
        required = ()
    missing = gate.artifact_checker.check(ticket, phase).missing

    status = {
        "project_dir": str(project_dir),
        "managed": gate.is_managed_project(),
        "enabled": config.enabled,
        "tickets_root": str(gate.tickets_root),
        "active_ticket": ticket.to_dict() if ticket else None,
        "phase": phase,
        "terminal": PHASE_POLICIES[phase].terminal,
        "required_artifacts": list(required),
        "missing_artifacts": list(missing),
        "required_evidence": list(type_policy.required_evidence) if type_policy else [],
    }

    if args.json:
        print(json.dumps(status, indent=2))
        return 0

    print(f"Project: {status['project_dir']}")
    if not status["managed"]:
        print(f"  (no {config.marker_dir} directory - gate is inactive here)")
    if not config.enabled:
        print("  (gate disabled by configuration)")
    if ticket is None:
        print("Active ticket: none")
    else:
        print(f"Active ticket: {ticket.id} ({ticket.type})")
        print(f"  Phase: {ticket.phase or '-'} -> {phase}")
    for path in required:
        mark = "✗" if path in missing else "✓"
        print(f"  {mark} {path}")
    if status["required_evidence"]:
        print(f"  Evidence at done: {', '.join(status['required_evidence'])}")
    return 0


def cmd_phases(args) -> int:
    """Print the phase policy table."""
    for name in PHASE_ORDER:
        policy = PHASE_POLICIES[name]
        flags = []
        if policy.required_artifact:
            flags.append(f"artifact: {policy.required_artifact}")
        if policy.terminal:
            flags.append("terminal")
        suffix = f"  ({', '.join(flags)})" if flags else ""
        print(f"{name}{suffix}")
        if args.verbose:
            print(policy.guidance)
            print()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quality-gate",
        description="Session-completion quality gate for AI coding assistants",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  quality-gate stop < hook-input.json
  quality-gate status --json
  quality-gate phases --verbose
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    stop_parser = subparsers.add_parser("stop", help="Evaluate the end of a turn (stop hook)")
    stop_parser.add_argument("--project-dir", "-d", help="Project directory (default: $CLAUDE_PROJECT_DIR or cwd)")
    stop_parser.add_argument("--transcript", "-t", help="Transcript path (instead of reading stdin)")
    stop_parser.add_argument("--verbose", "-v", action="store_true", help="Log to stderr")
    stop_parser.set_defaults(func=cmd_stop)

    status_parser = subparsers.add_parser("status", help="Show the active ticket and its requirements")
    status_parser.add_argument("--project-dir", "-d", help="Project directory (default: $CLAUDE_PROJECT_DIR or cwd)")
    status_parser.add_argument("--json", action="store_true", help="Output as JSON")
    status_parser.add_argument("--verbose", "-v", action="store_true", help="Log to stderr")
    status_parser.set_defaults(func=cmd_status)

    phases_parser = subparsers.add_parser("phases", help="Show the phase policy table")
    phases_parser.add_argument("--verbose", "-v", action="store_true", help="Include guidance text")
    phases_parser.set_defaults(func=cmd_phases)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return 1
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
