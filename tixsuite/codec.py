"""
Design (codec.py)
- Purpose: Convert the ledger to/from JSON documents: the versioned export document,
           the persisted ticket/settings values, the QR payload and manual scan entry.
- Inputs: Tickets/Settings for encoding; raw text or decoded JSON for decoding.
- Outputs: JSON text / dicts on encode; Ticket, Settings, ScanLookup, ImportDocument on decode.
- Side effects: None.
- Thread-safety: Stateless; safe from any thread.

Import decoding is strict: a structurally invalid document raises DecodeError and nothing
from it is adopted. Persisted tickets are decoded leniently (see tickets_from_stored).
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from .config import (
    DEFAULT_MAX_USERS,
    DEFAULT_ORGANIZATION_NAME,
    EXPORT_FILENAME_PREFIX,
    EXPORT_VERSION,
)
from .errors import DecodeError, ValidationError
from .models import ScanLookup, Settings, Ticket

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportDocument:
    """
    Design (ImportDocument)
    - tickets: replacement ticket list, or None when the document has no tickets field.
    - settings: replacement settings, or None when the document has no settings field.
    - version: the document's version field, informational only.
    """
    tickets: Optional[List[Ticket]] = None
    settings: Optional[Settings] = None
    version: Any = None


# -------- Tickets & settings --------

def ticket_from_dict(item: Any) -> Ticket:
    """
    Purpose: Build a Ticket from its wire shape, checking field presence and types.
    Raises: DecodeError on any structural problem.
    """
    if not isinstance(item, dict):
        raise DecodeError("Ticket entry must be an object")
    for key in ("id", "number", "generatedAt"):
        if not isinstance(item.get(key), str) or not item[key]:
            raise DecodeError(f"Ticket field '{key}' must be a non-empty string")
    extra = item.get("extra", "")
    if extra is None:
        extra = ""
    if not isinstance(extra, str):
        raise DecodeError("Ticket field 'extra' must be a string")
    scanned_at = item.get("scannedAt")
    if scanned_at is not None and not isinstance(scanned_at, str):
        raise DecodeError("Ticket field 'scannedAt' must be a string or null")
    return Ticket(
        id=item["id"],
        number=item["number"],
        generated_at=item["generatedAt"],
        extra=extra,
        scanned_at=scanned_at or None,
    )


def tickets_from_list(data: Any) -> List[Ticket]:
    """Decode a ticket list and reject duplicate ids or numbers."""
    if not isinstance(data, list):
        raise DecodeError("'tickets' must be a list")
    tickets = [ticket_from_dict(item) for item in data]
    seen_ids = set()
    seen_numbers = set()
    for ticket in tickets:
        if ticket.id in seen_ids:
            raise DecodeError(f"Duplicate ticket id {ticket.id}")
        if ticket.number in seen_numbers:
            raise DecodeError(f"Duplicate ticket number {ticket.number}")
        seen_ids.add(ticket.id)
        seen_numbers.add(ticket.number)
    return tickets


def tickets_from_stored(data: Any) -> List[Ticket]:
    """
    Load tickets from persisted state. Bad entries and later duplicates are
    logged and skipped so one damaged item never costs the rest.
    """
    if not isinstance(data, list):
        logger.error("Stored tickets are not a list; ignoring them")
        return []
    tickets: List[Ticket] = []
    seen_ids = set()
    seen_numbers = set()
    for position, item in enumerate(data):
        try:
            ticket = ticket_from_dict(item)
        except DecodeError as exc:
            logger.warning("Skipping stored ticket #%d: %s", position, exc)
            continue
        if ticket.id in seen_ids or ticket.number in seen_numbers:
            logger.warning("Skipping duplicate stored ticket %s (%s)", ticket.number, ticket.id)
            continue
        seen_ids.add(ticket.id)
        seen_numbers.add(ticket.number)
        tickets.append(ticket)
    return tickets


def settings_from_dict(data: Any) -> Settings:
    """Decode settings; absent fields take their defaults (wholesale replacement)."""
    if not isinstance(data, dict):
        raise DecodeError("'settings' must be an object")
    name = data.get("organizationName", DEFAULT_ORGANIZATION_NAME)
    max_users = data.get("maxUsers", DEFAULT_MAX_USERS)
    if not isinstance(name, str):
        raise DecodeError("'organizationName' must be a string")
    if isinstance(max_users, bool) or not isinstance(max_users, int):
        raise DecodeError("'maxUsers' must be an integer")
    return Settings(organization_name=name, max_users=max_users)


def tickets_to_list(tickets: Iterable[Ticket]) -> List[Dict[str, Any]]:
    return [t.to_dict() for t in tickets]


# -------- Export / import --------

def build_export(tickets: Iterable[Ticket], settings: Settings, exported_at: str) -> Dict[str, Any]:
    """Full ledger snapshot: {tickets, settings, exportedAt, version}."""
    return {
        "tickets": tickets_to_list(tickets),
        "settings": settings.to_dict(),
        "exportedAt": exported_at,
        "version": EXPORT_VERSION,
    }


def dumps_export(document: Dict[str, Any]) -> str:
    return json.dumps(document, indent=2)


def export_filename(now_ms: Optional[int] = None) -> str:
    """Default download name, e.g. tix-voucher-export-1709316245123.json"""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{EXPORT_FILENAME_PREFIX}{now_ms}.json"


def parse_import(text: str) -> ImportDocument:
    """
    Purpose: Parse an export document for import.
    Inputs: raw file text.
    Outputs: ImportDocument; a field that is absent (or null) comes back as None.
    Raises: DecodeError for malformed JSON, a non-object document, or an invalid
            tickets/settings field.
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"Import file is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise DecodeError("Import document must be a JSON object")

    tickets = None
    if data.get("tickets") is not None:
        tickets = tickets_from_list(data["tickets"])
    settings = None
    if data.get("settings") is not None:
        settings = settings_from_dict(data["settings"])

    version = data.get("version")
    if version != EXPORT_VERSION:
        logger.warning("Import document has version %r (expected %d); importing anyway", version, EXPORT_VERSION)
    return ImportDocument(tickets=tickets, settings=settings, version=version)


# -------- QR payload & manual entry --------

def encode_qr_payload(ticket: Ticket) -> str:
    """Compact JSON {"id":..., "number":...} embedded in the ticket's QR symbol."""
    return json.dumps({"id": ticket.id, "number": ticket.number}, separators=(",", ":"))


def decode_qr_payload(text: str) -> ScanLookup:
    """
    Purpose: Turn decoded QR text back into a lookup.
    Raises: DecodeError unless the text is a JSON object with string id and number.
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise DecodeError("QR payload is not valid JSON") from exc
    if not isinstance(data, dict):
        raise DecodeError("QR payload must be a JSON object")
    ticket_id = data.get("id")
    number = data.get("number")
    if not isinstance(ticket_id, str) or not isinstance(number, str) or not ticket_id or not number:
        raise DecodeError("QR payload needs string 'id' and 'number'")
    return ScanLookup(id=ticket_id, number=number)


def parse_manual_entry(text: str) -> ScanLookup:
    """
    Purpose: Interpret typed input: a full QR payload, or a bare ticket number.
    Raises: ValidationError on empty input.
    """
    raw = (text or "").strip()
    if not raw:
        raise ValidationError("Enter a ticket number or QR data")
    try:
        return decode_qr_payload(raw)
    except DecodeError:
        return ScanLookup(number=raw)
