"""
Design (repository.py)
- Purpose: Encapsulate the ledger (tickets, settings, last generation batch) behind a small API
           and a lock, so the UI never touches ticket state directly. The only mutator of tickets.
- Inputs: Generation requests, scan lookups, import text, settings changes.
- Outputs: Generated batches, ScanOutcome values, snapshots (tuples) of current state.
- Side effects: Every mutation is applied in memory, flushed to the KeyValueStore, then
                published on the Notifier.
- Thread-safety: All reading/mutating methods take the internal lock. Validation happens before
                 any change, so a rejected call leaves the ledger untouched.
"""

import json
import logging
import threading
from dataclasses import replace
from typing import Any, Callable, List, Mapping, Optional, Tuple

from .allocator import format_number, next_number
from .codec import (
    build_export,
    dumps_export,
    parse_import,
    settings_from_dict,
    tickets_from_stored,
    tickets_to_list,
)
from .config import (
    MAX_GENERATE_COUNT,
    MAX_USERS_RANGE,
    MIN_GENERATE_COUNT,
    SETTINGS_KEY,
    STORAGE_KEY,
)
from .errors import DecodeError, ValidationError
from .models import ScanLookup, ScanOutcome, ScanStatus, Settings, Ticket
from .notify import Notifier
from .storage import KeyValueStore
from .utils import format_local, new_ticket_id, utc_now_iso
from .validator import decide, find_ticket

logger = logging.getLogger(__name__)


class TicketLedger:
    """
    Design (TicketLedger)
    - State:
        _tickets: list[Ticket], newest generation batch first
        _settings: Settings
        _last_batch: tuple[Ticket, ...] | None, single-slot undo buffer (no history stack)
        _lock: threading.Lock protecting all of the above
    - Collaborators:
        store: KeyValueStore (STORAGE_KEY holds tickets + last batch, SETTINGS_KEY holds settings)
        notifier: Notifier receiving one toast per operation
        clock / id_factory: injectable for deterministic tests
    """

    def __init__(
        self,
        store: KeyValueStore,
        notifier: Optional[Notifier] = None,
        clock: Callable[[], str] = utc_now_iso,
        id_factory: Callable[[], str] = new_ticket_id,
        min_count: int = MIN_GENERATE_COUNT,
        max_count: int = MAX_GENERATE_COUNT,
    ) -> None:
        if min_count < 1 or max_count < min_count:
            raise ValueError(f"Invalid generate bounds [{min_count}, {max_count}]; need 1 <= min <= max")
        self.store = store
        self.notifier = notifier if notifier is not None else Notifier()
        self.clock = clock
        self.id_factory = id_factory
        self.min_count = min_count
        self.max_count = max_count
        self._lock = threading.Lock()
        self._tickets: List[Ticket] = []
        self._settings = Settings()
        self._last_batch: Optional[Tuple[Ticket, ...]] = None
        self.load()

    # -------- Persistence --------

    def load(self) -> None:
        """
        Purpose: Replace in-memory state with what the store holds.
        Side effects: Corrupt or missing values are logged and defaulted.
        """
        tickets: List[Ticket] = []
        last_batch: Optional[Tuple[Ticket, ...]] = None
        settings = Settings()

        raw = self.store.get(STORAGE_KEY)
        if raw:
            try:
                data = json.loads(raw)
                if isinstance(data, list):
                    # plain ticket list, as older data files store it
                    tickets = tickets_from_stored(data)
                elif isinstance(data, dict):
                    tickets = tickets_from_stored(data.get("tickets") or [])
                    if data.get("lastGeneration"):
                        known = {t.id for t in tickets}
                        stored_batch = tickets_from_stored(data["lastGeneration"])
                        last_batch = tuple(t for t in stored_batch if t.id in known) or None
                else:
                    raise DecodeError("unexpected ticket state shape")
            except (ValueError, DecodeError) as exc:
                logger.error("Failed to load tickets: %s", exc)
                tickets, last_batch = [], None

        raw_settings = self.store.get(SETTINGS_KEY)
        if raw_settings:
            try:
                settings = settings_from_dict(json.loads(raw_settings))
            except (ValueError, DecodeError) as exc:
                logger.error("Failed to load settings: %s", exc)

        with self._lock:
            self._tickets = tickets
            self._last_batch = last_batch
            self._settings = settings
        logger.info("Loaded %d ticket(s)", len(tickets))

    def _save_tickets(self) -> None:
        state = {
            "tickets": tickets_to_list(self._tickets),
            "lastGeneration": tickets_to_list(self._last_batch) if self._last_batch else None,
        }
        self.store.set(STORAGE_KEY, json.dumps(state))

    def _save_settings(self) -> None:
        self.store.set(SETTINGS_KEY, json.dumps(self._settings.to_dict()))

    # -------- Snapshots for safe reading --------

    @property
    def tickets(self) -> Tuple[Ticket, ...]:
        with self._lock:
            return tuple(self._tickets)

    @property
    def settings(self) -> Settings:
        with self._lock:
            return self._settings

    @property
    def last_batch(self) -> Optional[Tuple[Ticket, ...]]:
        with self._lock:
            return self._last_batch

    def get(self, lookup: ScanLookup) -> Optional[Ticket]:
        """Read-only lookup (same matching rule as scan, no marking)."""
        with self._lock:
            index = find_ticket(self._tickets, lookup)
            return self._tickets[index] if index is not None else None

    # -------- Generation --------

    def generate(self, count: int, prefix: str, note: str = "") -> List[Ticket]:
        """
        Purpose: Issue `count` new tickets continuing the prefix sequence.
        Inputs: count in [min_count, max_count], prefix (non-empty, already normalized), note.
        Outputs: The new batch in generation order (lowest number first).
        Side effects: Prepends the batch, makes it the undo batch, persists, success toast.
        Raises: ValidationError (nothing changes).
        """
        if isinstance(count, bool) or not isinstance(count, int):
            raise ValidationError("Count must be a whole number")
        if count < self.min_count or count > self.max_count:
            raise ValidationError(f"Count must be between {self.min_count} and {self.max_count}")
        if not isinstance(prefix, str) or not prefix.strip():
            raise ValidationError("Prefix must not be empty")
        prefix = prefix.strip()

        with self._lock:
            start = next_number((t.number for t in self._tickets), prefix)
            batch = [
                Ticket(
                    id=self.id_factory(),
                    number=format_number(prefix, start + offset),
                    generated_at=self.clock(),
                    extra=note or "",
                )
                for offset in range(count)
            ]
            self._tickets = batch + self._tickets
            self._last_batch = tuple(batch)
            self._save_tickets()

        logger.info("Generated %s..%s", batch[0].number, batch[-1].number)
        self.notifier.show(f"Successfully generated {count} ticket(s)", "success")
        return batch

    # -------- Scanning --------

    def scan(self, lookup: ScanLookup) -> ScanOutcome:
        """
        Purpose: Validate a scan and mark the ticket scanned exactly once.
        Outputs: ScanOutcome accepted (updated ticket) / duplicate (stored ticket) / not-found.
        Side effects: Only an accepted scan changes and persists state.
        """
        with self._lock:
            status, index = decide(self._tickets, lookup)
            if status is ScanStatus.ACCEPTED:
                updated = replace(self._tickets[index], scanned_at=self.clock())
                self._tickets[index] = updated
                self._replace_in_batch(updated)
                self._save_tickets()
                outcome = ScanOutcome(status, updated)
            elif status is ScanStatus.DUPLICATE:
                outcome = ScanOutcome(status, self._tickets[index])
            else:
                outcome = ScanOutcome(status)

        if outcome.status is ScanStatus.ACCEPTED:
            self.notifier.show(f"Ticket {outcome.ticket.number} scanned successfully!", "success")
        elif outcome.status is ScanStatus.DUPLICATE:
            when = format_local(outcome.ticket.scanned_at)
            self.notifier.show(f"Ticket already scanned on {when}", "warning")
        else:
            self.notifier.show("Ticket not found in system", "error")
        return outcome

    def _replace_in_batch(self, updated: Ticket) -> None:
        # keep the undo batch in step with scans of its tickets
        if self._last_batch is None:
            return
        self._last_batch = tuple(updated if t.id == updated.id else t for t in self._last_batch)

    # -------- Undo --------

    def undo_last_generation(self) -> bool:
        """
        Purpose: Remove exactly the tickets of the most recent batch (matched by id).
        Outputs: True if undone; False if there is nothing to undo (single level only).
        """
        with self._lock:
            batch = self._last_batch
            if batch:
                ids = {t.id for t in batch}
                self._tickets = [t for t in self._tickets if t.id not in ids]
                self._last_batch = None
                self._save_tickets()

        if not batch:
            self.notifier.show("No generation to undo", "error")
            return False
        logger.info("Undid generation of %d ticket(s)", len(batch))
        self.notifier.show("Last generation undone", "success")
        return True

    # -------- Import / export --------

    def export_document(self) -> dict:
        with self._lock:
            return build_export(self._tickets, self._settings, self.clock())

    def export_data(self) -> str:
        """Full ledger snapshot as JSON text, ready to be written to a file."""
        text = dumps_export(self.export_document())
        self.notifier.show("Data exported successfully", "success")
        return text

    def import_data(self, text: str) -> bool:
        """
        Purpose: Replace tickets and/or settings with the contents of an export document.
        Side effects: Fields missing from the document are left untouched; replacing tickets
                      also drops the undo batch.
        Raises: DecodeError (ledger untouched, error toast).
        """
        try:
            document = parse_import(text)
        except DecodeError as exc:
            logger.error("Import rejected: %s", exc)
            self.notifier.show("Failed to import data", "error")
            raise

        with self._lock:
            if document.tickets is not None:
                self._tickets = list(document.tickets)
                self._last_batch = None
                self._save_tickets()
            if document.settings is not None:
                self._settings = document.settings
                self._save_settings()

        logger.info(
            "Imported document version %r (%s tickets)",
            document.version,
            len(document.tickets) if document.tickets is not None else "no",
        )
        self.notifier.show("Data imported successfully", "success")
        return True

    # -------- Settings / clear --------

    def update_settings(self, changes: Mapping[str, Any]) -> Settings:
        """
        Purpose: Shallow-merge organization_name and/or max_users into Settings.
        Raises: ValidationError for unknown fields or wrong types.
        """
        unknown = set(changes) - {"organization_name", "max_users"}
        if unknown:
            raise ValidationError(f"Unknown setting(s): {', '.join(sorted(unknown))}")
        if "organization_name" in changes and not isinstance(changes["organization_name"], str):
            raise ValidationError("Organization name must be text")
        if "max_users" in changes:
            max_users = changes["max_users"]
            low, high = MAX_USERS_RANGE
            if isinstance(max_users, bool) or not isinstance(max_users, int) or not low <= max_users <= high:
                raise ValidationError(f"Max users must be a whole number between {low} and {high}")

        with self._lock:
            self._settings = replace(self._settings, **dict(changes))
            self._save_settings()
            settings = self._settings
        self.notifier.show("Settings updated", "success")
        return settings

    def clear_all_data(self) -> None:
        """Remove every ticket and the undo batch; settings are kept."""
        with self._lock:
            self._tickets = []
            self._last_batch = None
            self._save_tickets()
        logger.info("Cleared all tickets")
        self.notifier.show("All data cleared", "success")
