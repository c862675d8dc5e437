"""
Workflow tickets - read-only access to the planning ticket store.

Usage:
    from quality_gate.tickets import resolve_active_ticket

    ticket = resolve_active_ticket(project_dir / ".safeword-project/tickets")
    if ticket is not None:
        print(ticket.id, ticket.phase)
"""

from .models import (
    DEFAULT_TICKET_TYPE,
    EPIC_TYPE,
    TicketStatus,
    WorkflowTicket,
    parse_timestamp,
)
from .store import TicketStore, parse_front_matter, resolve_active_ticket

__all__ = [
    "DEFAULT_TICKET_TYPE",
    "EPIC_TYPE",
    "TicketStatus",
    "WorkflowTicket",
    "parse_timestamp",
    "TicketStore",
    "parse_front_matter",
    "resolve_active_ticket",
]
