"""Configuration for the quality gate.

Sources, lowest to highest priority:
1. Defaults below
2. Project file .safeword/quality-gate.yaml
3. Environment variables
"""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "quality-gate.yaml"

DEFAULT_EDIT_TOOLS = ["Write", "Edit", "MultiEdit", "NotebookEdit"]


@dataclass
class GateConfig:
    """Settings for one gate invocation."""

    # Kill switch: when False every turn is allowed
    enabled: bool = True

    # Project layout (relative to the project directory)
    marker_dir: str = ".safeword"
    tickets_dir: str = ".safeword-project/tickets"

    # Transcript windows, counted in turns
    tool_window: int = 2
    evidence_window: int = 20
    transcript_tail_turns: int = 50

    edit_tools: List[str] = field(default_factory=lambda: list(DEFAULT_EDIT_TOOLS))

    log_level: str = "WARNING"
    log_file: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GateConfig":
        """Create configuration from a dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.info(f"Ignoring unknown config keys: {', '.join(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known})

    def apply_environment(self, environ: Optional[Dict[str, str]] = None) -> "GateConfig":
        """Override fields from environment variables.

        Environment variables:
        - QUALITY_GATE_ENABLED (default: true)
        - QUALITY_GATE_TICKETS_DIR
        - QUALITY_GATE_TOOL_WINDOW (default: 2)
        - QUALITY_GATE_EVIDENCE_WINDOW (default: 20)
        - QUALITY_GATE_LOG_LEVEL (default: WARNING)
        - QUALITY_GATE_LOG_FILE

        Returns:
            self, for chaining.
        """
        env = os.environ if environ is None else environ

        def parse_bool(value: Optional[str], default: bool) -> bool:
            if value is None:
                return default
            return value.strip().lower() in ("true", "1", "yes")

        def parse_int(value: Optional[str], default: int) -> int:
            if value is None:
                return default
            try:
                return int(value)
            except ValueError:
                logger.warning(f"Ignoring non-integer config value: {value!r}")
                return default

        self.enabled = parse_bool(env.get("QUALITY_GATE_ENABLED"), self.enabled)
        self.tickets_dir = env.get("QUALITY_GATE_TICKETS_DIR", self.tickets_dir)
        self.tool_window = parse_int(env.get("QUALITY_GATE_TOOL_WINDOW"), self.tool_window)
        self.evidence_window = parse_int(
            env.get("QUALITY_GATE_EVIDENCE_WINDOW"), self.evidence_window
        )
        self.log_level = env.get("QUALITY_GATE_LOG_LEVEL", self.log_level)
        self.log_file = env.get("QUALITY_GATE_LOG_FILE", self.log_file)
        return self

    def validate(self) -> None:
        """Raise ConfigurationError for values the gate cannot work with."""
        for name in ("tool_window", "evidence_window", "transcript_tail_turns"):
            value = getattr(self, name)
            # bool is an int subclass; YAML `yes` must not become 1
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer")
        if self.tool_window < 1:
            raise ConfigurationError("tool_window must be at least 1")
        if self.evidence_window < 1:
            raise ConfigurationError("evidence_window must be at least 1")
        if self.transcript_tail_turns < max(self.tool_window, self.evidence_window):
            raise ConfigurationError(
                "transcript_tail_turns must cover tool_window and evidence_window"
            )
        if not isinstance(self.edit_tools, list):
            raise ConfigurationError("edit_tools must be a list of tool names")


def _read_config_file(path: Path) -> dict:
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping")
    return data


def load_config(
    project_dir: Optional[Path] = None,
    environ: Optional[Dict[str, str]] = None,
) -> GateConfig:
    """
    Load configuration for a project.

    A broken config file never stops the gate: it is logged and the
    defaults (plus environment overrides) are used instead.

    Args:
        project_dir: Project root; the config file lives in its marker dir
        environ: Environment mapping (default: os.environ)

    Returns:
        GateConfig
    """
    defaults = GateConfig()
    data: dict = {}

    if project_dir is not None:
        config_path = Path(project_dir) / defaults.marker_dir / CONFIG_FILENAME
        if config_path.exists():
            try:
                data = _read_config_file(config_path)
            except ConfigurationError as e:
                logger.warning(f"Using default configuration: {e}")

    config = GateConfig.from_dict(data).apply_environment(environ)
    try:
        config.validate()
    except ConfigurationError as e:
        logger.warning(f"Invalid configuration, using defaults: {e}")
        config = GateConfig().apply_environment(environ)
        try:
            config.validate()
        except ConfigurationError:
            config = GateConfig()
    return config
