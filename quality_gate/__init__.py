"""
Quality Gate - session-completion gate for AI coding assistants

Decides at the end of every assistant turn whether the turn may end,
must continue with injected review guidance, or must not end until a
contract violation is fixed.
"""

__version__ = "0.3.0"

from .config import GateConfig, load_config
from .decision import Allow, Decision, HardBlock, SoftBlock, emit
from .engine import QualityGate
from .hook_input import HookInput, parse_hook_input

__all__ = [
    "GateConfig",
    "load_config",
    "Allow",
    "Decision",
    "HardBlock",
    "SoftBlock",
    "emit",
    "QualityGate",
    "HookInput",
    "parse_hook_input",
]
