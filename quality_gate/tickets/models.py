"""
Workflow ticket data structures.

Tickets are written by external planning tooling. The gate takes a
read-only snapshot of them on every run.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_TICKET_TYPE = "task"
EPIC_TYPE = "epic"


class TicketStatus(Enum):
    """Status of a ticket."""
    BACKLOG = "backlog"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    BLOCKED = "blocked"

    @classmethod
    def parse(cls, value: Optional[str]) -> "TicketStatus":
        """Parse a front-matter status; missing means backlog.

        Raises:
            ValueError: If the status is not one of the known values
        """
        if value is None or not str(value).strip():
            return cls.BACKLOG
        return cls(str(value).strip().lower().replace("-", "_"))


@dataclass(frozen=True)
class WorkflowTicket:
    """
    One unit of tracked work.

    `folder` is the directory holding the ticket document; required
    artifacts are looked up relative to it.
    """
    id: str
    type: str
    status: TicketStatus
    last_modified: datetime
    folder: Path
    phase: Optional[str] = None

    @property
    def is_active(self) -> bool:
        """In progress and not an epic."""
        return self.status is TicketStatus.IN_PROGRESS and self.type != EPIC_TYPE

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "id": self.id,
            "type": self.type,
            "phase": self.phase,
            "status": self.status.value,
            "last_modified": self.last_modified.isoformat(),
            "folder": str(self.folder),
        }

    @classmethod
    def from_front_matter(
        cls,
        data: Dict[str, Any],
        folder: Path,
        default_id: str,
        fallback_modified: datetime,
    ) -> "WorkflowTicket":
        """Create a ticket from parsed front-matter values.

        Unknown keys are ignored and missing optional keys get defaults.

        Raises:
            ValueError: If status or last_modified cannot be parsed
        """
        ticket_id = _clean(data.get("id")) or default_id
        ticket_type = (_clean(data.get("type")) or DEFAULT_TICKET_TYPE).lower()
        phase = _clean(data.get("phase"))

        raw_modified = data.get("last_modified")
        last_modified = (
            parse_timestamp(raw_modified) if _clean(raw_modified) else fallback_modified
        )

        return cls(
            id=ticket_id,
            type=ticket_type,
            status=TicketStatus.parse(data.get("status")),
            last_modified=last_modified,
            folder=folder,
            phase=phase.lower() if phase else None,
        )


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip().strip("'\"").strip()
    return text or None


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp or date into an aware datetime (UTC if naive).

    Raises:
        ValueError: If the value is not a recognizable timestamp
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    else:
        text = _clean(value)
        if text is None:
            raise ValueError("empty timestamp")
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
