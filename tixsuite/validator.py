"""
Design (validator.py)
- Purpose: Decide what a scan means for the current tickets: accepted, duplicate or not-found.
- Inputs: Ticket sequence (stable order) and a ScanLookup.
- Outputs: (ScanStatus, index of the matched ticket or None).
- Side effects: None; TicketLedger applies the decision.
- Thread-safety: Pure; caller holds the ledger lock.
"""

from typing import Optional, Sequence, Tuple

from .models import ScanLookup, ScanStatus, Ticket


def find_ticket(tickets: Sequence[Ticket], lookup: ScanLookup) -> Optional[int]:
    """Index of the first ticket whose id or number matches the lookup (absent fields never match)."""
    for index, ticket in enumerate(tickets):
        if lookup.id is not None and ticket.id == lookup.id:
            return index
        if lookup.number is not None and ticket.number == lookup.number:
            return index
    return None


def decide(tickets: Sequence[Ticket], lookup: ScanLookup) -> Tuple[ScanStatus, Optional[int]]:
    index = find_ticket(tickets, lookup)
    if index is None:
        return ScanStatus.NOT_FOUND, None
    if tickets[index].is_scanned:
        return ScanStatus.DUPLICATE, index
    return ScanStatus.ACCEPTED, index
