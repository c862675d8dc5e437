"""Input record the host writes to the hook's stdin."""

import json
import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, ValidationError

logger = logging.getLogger(__name__)


class HookInput(BaseModel):
    """Stop hook input. Only transcript_path matters to the gate."""
    model_config = ConfigDict(extra="ignore")

    transcript_path: Optional[str] = None
    session_id: Optional[str] = None
    cwd: Optional[str] = None
    hook_event_name: Optional[str] = None
    stop_hook_active: Optional[bool] = None


def parse_hook_input(raw: str) -> Optional[HookInput]:
    """Parse the stdin record; empty or invalid input yields None."""
    if not raw or not raw.strip():
        logger.info("Empty hook input")
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"Hook input is not JSON: {e}")
        return None
    if not isinstance(data, dict):
        logger.warning("Hook input is not a JSON object")
        return None
    try:
        return HookInput.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Invalid hook input: {e}")
        return None
