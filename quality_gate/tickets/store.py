"""
Ticket store reader.

Reads ticket documents from the store root:

    <root>/<folder>/ticket.md     (ticket folder = <folder>)
    <root>/<name>.md              (ticket folder = <root>)

Each document starts with a front-matter block:

    ---
    id: 042-login-form
    type: feature
    phase: implement
    status: in_progress
    last_modified: 2026-01-05T10:00:00Z
    ---
    Free text, ignored.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml

from ..exceptions import TicketParseError
from .models import WorkflowTicket

logger = logging.getLogger(__name__)

FRONT_MATTER_MARKER = "---"
TICKET_FILENAME = "ticket.md"


def parse_front_matter(content: str) -> Dict[str, str]:
    """Extract the front-matter block of a document as a dict of strings.

    Values are kept as plain strings (YAML base loader), so ids such as
    `007` are not reinterpreted as numbers.

    Raises:
        ValueError: If there is no well-formed front-matter mapping
    """
    lines = content.lstrip("\ufeff").splitlines()
    if not lines or lines[0].strip() != FRONT_MATTER_MARKER:
        raise ValueError("missing front matter")

    for end, line in enumerate(lines[1:], start=1):
        if line.strip() == FRONT_MATTER_MARKER:
            break
    else:
        raise ValueError("unterminated front matter")

    block = "\n".join(lines[1:end])
    try:
        data = yaml.load(block, Loader=yaml.BaseLoader)
    except yaml.YAMLError as e:
        raise ValueError(f"invalid front matter: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("front matter is not a mapping")
    return data


class TicketStore:
    """
    Read-only view of a ticket store directory.

    Nothing is cached: every call re-reads the documents on disk.
    """

    def __init__(self, root: Union[str, Path]):
        """
        Args:
            root: Store root directory (may not exist)
        """
        self.root = Path(root)

    def ticket_paths(self) -> List[Path]:
        """All ticket documents under the root, in sorted order."""
        if not self.root.is_dir():
            return []
        paths = [p for p in self.root.glob(f"*/{TICKET_FILENAME}") if p.is_file()]
        paths.extend(p for p in self.root.glob("*.md") if p.is_file())
        return sorted(paths)

    def load_ticket(self, path: Path) -> WorkflowTicket:
        """
        Parse one ticket document.

        Raises:
            TicketParseError: If the document cannot be read or parsed
        """
        try:
            content = path.read_text(encoding="utf-8")
            mtime = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
        except (OSError, UnicodeDecodeError) as e:
            raise TicketParseError(path, f"unreadable: {e}") from e

        if path.name == TICKET_FILENAME:
            folder, default_id = path.parent, path.parent.name
        else:
            folder, default_id = path.parent, path.stem

        try:
            data = parse_front_matter(content)
            return WorkflowTicket.from_front_matter(
                data, folder=folder, default_id=default_id, fallback_modified=mtime
            )
        except ValueError as e:
            raise TicketParseError(path, str(e)) from e

    def list_tickets(self) -> List[WorkflowTicket]:
        """
        Load every ticket, skipping (and logging) the ones that fail to parse.

        Returns:
            List[WorkflowTicket]: Parsed tickets
        """
        tickets = []
        for path in self.ticket_paths():
            try:
                tickets.append(self.load_ticket(path))
            except TicketParseError as e:
                logger.warning(f"Skipping malformed ticket {e}")
        return tickets

    def get_active_ticket(self) -> Optional[WorkflowTicket]:
        """
        Get the ticket currently being worked on.

        Eligible tickets are in progress and not epics. The most recently
        modified one wins; ties go to the lexically smallest id.

        Returns:
            Optional[WorkflowTicket]: The active ticket, or None
        """
        eligible = [t for t in self.list_tickets() if t.is_active]
        if not eligible:
            return None
        return min(eligible, key=lambda t: (-t.last_modified.timestamp(), t.id))


def resolve_active_ticket(root: Union[str, Path]) -> Optional[WorkflowTicket]:
    """Resolve the active ticket under `root`; a missing root yields None."""
    return TicketStore(root).get_active_ticket()
