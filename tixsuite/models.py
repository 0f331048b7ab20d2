"""
Design (models.py)
- Purpose: Define simple, typed data structures for domain entities (Ticket, Settings,
           scan lookups/outcomes, notifications).
- Inputs: Field values.
- Outputs: Dataclass instances; to_dict() gives the camelCase wire shape.
- Side effects: None.
- Thread-safety: Tickets and Settings are frozen; TicketLedger swaps whole instances.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .config import DEFAULT_MAX_USERS, DEFAULT_ORGANIZATION_NAME
from .errors import ValidationError


@dataclass(frozen=True)
class Ticket:
    """
    Design (Ticket)
    - Purpose: One issued ticket/voucher.
    - Fields:
        id: UUID string, unique per ledger.
        number: "<PREFIX>-<6-digit sequence>", unique per ledger.
        generated_at: ISO-8601 UTC timestamp.
        extra: optional free-text annotation printed on the ticket.
        scanned_at: ISO-8601 timestamp of the first accepted scan, None until then.
    """
    id: str
    number: str
    generated_at: str
    extra: str = ""
    scanned_at: Optional[str] = None

    @property
    def is_scanned(self) -> bool:
        return self.scanned_at is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "number": self.number,
            "generatedAt": self.generated_at,
            "extra": self.extra,
            "scannedAt": self.scanned_at,
        }


@dataclass(frozen=True)
class Settings:
    """Organization display name and the advisory max-users count (never enforced)."""
    organization_name: str = DEFAULT_ORGANIZATION_NAME
    max_users: int = DEFAULT_MAX_USERS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "organizationName": self.organization_name,
            "maxUsers": self.max_users,
        }


@dataclass(frozen=True)
class ScanLookup:
    """What a scan tries to match: a ticket id, a ticket number, or both (OR match)."""
    id: Optional[str] = None
    number: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id and not self.number:
            raise ValidationError("Scan lookup needs a ticket id or a ticket number")


class ScanStatus(str, Enum):
    ACCEPTED = "accepted"
    DUPLICATE = "duplicate"
    NOT_FOUND = "not-found"


@dataclass(frozen=True)
class ScanOutcome:
    """
    Design (ScanOutcome)
    - status: accepted | duplicate | not-found
    - ticket: updated ticket (accepted), stored ticket (duplicate), None (not-found)
    """
    status: ScanStatus
    ticket: Optional[Ticket] = None

    @property
    def success(self) -> bool:
        return self.status is ScanStatus.ACCEPTED

    @property
    def duplicate(self) -> bool:
        return self.status is ScanStatus.DUPLICATE

    @property
    def message(self) -> str:
        if self.status is ScanStatus.ACCEPTED:
            return "Scanned successfully"
        if self.status is ScanStatus.DUPLICATE:
            return "Already scanned"
        return "Ticket not found"


@dataclass(frozen=True)
class Notification:
    """A transient toast: message plus kind (success/error/warning/info)."""
    id: int
    message: str
    kind: str = "info"
