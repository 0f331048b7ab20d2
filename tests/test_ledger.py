import json

import pytest

from tixsuite.config import SETTINGS_KEY, STORAGE_KEY
from tixsuite.errors import DecodeError, ValidationError
from tixsuite.models import ScanLookup, ScanStatus, Settings
from tixsuite.repository import TicketLedger
from tixsuite.storage import MemoryStore
from tixsuite.utils import format_local


def numbers(tickets):
    return [t.number for t in tickets]


# -------- generate --------


def test_generate_from_empty_ledger(ledger):
    batch = ledger.generate(5, "TIX")
    assert numbers(batch) == ["TIX-000001", "TIX-000002", "TIX-000003", "TIX-000004", "TIX-000005"]
    assert len({t.id for t in batch}) == 5
    assert all(t.scanned_at is None for t in batch)
    assert all(t.extra == "" for t in batch)


def test_generate_sets_note_and_timestamps(ledger):
    batch = ledger.generate(2, "TIX", "Spring Gala")
    assert [t.extra for t in batch] == ["Spring Gala", "Spring Gala"]
    assert batch[0].generated_at == "2024-01-15T10:00:00.000Z"


def test_second_batch_continues_prefix_sequence(ledger):
    ledger.generate(3, "VIP")
    second = ledger.generate(2, "VIP")
    assert numbers(second) == ["VIP-000004", "VIP-000005"]


def test_other_prefixes_have_their_own_sequence(ledger):
    ledger.generate(3, "VIP")
    batch = ledger.generate(1, "GA")
    assert numbers(batch) == ["GA-000001"]


def test_newest_batch_is_first(ledger):
    ledger.generate(2, "TIX")
    ledger.generate(1, "TIX")
    assert numbers(ledger.tickets) == ["TIX-000003", "TIX-000001", "TIX-000002"]


@pytest.mark.parametrize("count", [0, 201, -1])
def test_generate_rejects_count_out_of_range(ledger, store, count):
    ledger.generate(1, "TIX")
    before = (ledger.tickets, ledger.last_batch, store.get(STORAGE_KEY))
    with pytest.raises(ValidationError):
        ledger.generate(count, "TIX")
    assert (ledger.tickets, ledger.last_batch, store.get(STORAGE_KEY)) == before


@pytest.mark.parametrize("count", [2.5, "3", True])
def test_generate_rejects_non_integer_count(ledger, count):
    with pytest.raises(ValidationError):
        ledger.generate(count, "TIX")
    assert ledger.tickets == ()


def test_generate_accepts_upper_bound(ledger):
    batch = ledger.generate(200, "TIX")
    assert len(batch) == 200
    assert batch[-1].number == "TIX-000200"


def test_generate_rejects_empty_prefix(ledger):
    with pytest.raises(ValidationError):
        ledger.generate(1, "   ")
    assert ledger.tickets == ()


def test_count_bounds_are_configurable(store, notifier):
    small = TicketLedger(store, notifier, max_count=5)
    with pytest.raises(ValidationError):
        small.generate(6, "TIX")
    assert len(small.generate(5, "TIX")) == 5


@pytest.mark.parametrize("bounds", [{"min_count": 0}, {"min_count": 5, "max_count": 4}])
def test_ledger_rejects_invalid_count_bounds(store, notifier, bounds):
    with pytest.raises(ValueError):
        TicketLedger(store, notifier, **bounds)


def test_generate_notifies_success(ledger, notes):
    ledger.generate(4, "TIX")
    assert notes[-1].kind == "success"
    assert notes[-1].message == "Successfully generated 4 ticket(s)"


# -------- scan --------


@pytest.fixture
def acme(ledger):
    ledger.generate(3, "TIX")
    ledger.update_settings({"organization_name": "Acme", "max_users": 1})
    return ledger


def test_scan_accepts_once_then_reports_duplicate(acme, notes):
    first = acme.scan(ScanLookup(number="TIX-000002"))
    assert first.status is ScanStatus.ACCEPTED
    assert first.success
    assert first.ticket.scanned_at is not None
    assert notes[-1].kind == "success"
    assert notes[-1].message == "Ticket TIX-000002 scanned successfully!"

    second = acme.scan(ScanLookup(number="TIX-000002"))
    assert second.status is ScanStatus.DUPLICATE
    assert not second.success
    assert second.ticket.scanned_at == first.ticket.scanned_at
    assert notes[-1].kind == "warning"
    assert notes[-1].message == f"Ticket already scanned on {format_local(first.ticket.scanned_at)}"

    stored = acme.get(ScanLookup(number="TIX-000002"))
    assert stored.scanned_at == first.ticket.scanned_at


def test_scan_unknown_number_is_not_found(acme, store, notes):
    before = (acme.tickets, store.get(STORAGE_KEY))
    outcome = acme.scan(ScanLookup(number="TIX-000099"))
    assert outcome.status is ScanStatus.NOT_FOUND
    assert outcome.ticket is None
    assert (acme.tickets, store.get(STORAGE_KEY)) == before
    assert notes[-1].kind == "error"
    assert notes[-1].message == "Ticket not found in system"


def test_scan_by_id(ledger):
    ticket = ledger.generate(2, "TIX")[1]
    outcome = ledger.scan(ScanLookup(id=ticket.id))
    assert outcome.success
    assert outcome.ticket.number == "TIX-000002"


def test_scan_matches_id_or_number(ledger):
    ticket = ledger.generate(1, "TIX")[0]
    outcome = ledger.scan(ScanLookup(id="unknown", number=ticket.number))
    assert outcome.success


def test_scan_with_id_and_number_of_different_tickets_takes_first_stored(ledger):
    first, second = ledger.generate(2, "TIX")
    assert ledger.tickets == (first, second)

    outcome = ledger.scan(ScanLookup(id=second.id, number=first.number))
    assert outcome.success
    assert outcome.ticket.id == first.id
    scanned = {t.number: t.scanned_at is not None for t in ledger.tickets}
    assert scanned == {"TIX-000001": True, "TIX-000002": False}


def test_duplicate_by_id_after_scan_by_number(ledger):
    ticket = ledger.generate(1, "TIX")[0]
    ledger.scan(ScanLookup(number=ticket.number))
    assert ledger.scan(ScanLookup(id=ticket.id)).duplicate


def test_scan_only_marks_matched_ticket(acme):
    acme.scan(ScanLookup(number="TIX-000002"))
    scanned = {t.number: t.scanned_at is not None for t in acme.tickets}
    assert scanned == {"TIX-000001": False, "TIX-000002": True, "TIX-000003": False}


def test_accepted_scan_is_persisted(acme, store):
    acme.scan(ScanLookup(number="TIX-000001"))
    state = json.loads(store.get(STORAGE_KEY))
    by_number = {t["number"]: t for t in state["tickets"]}
    assert by_number["TIX-000001"]["scannedAt"] is not None
    assert by_number["TIX-000002"]["scannedAt"] is None


def test_lookup_requires_id_or_number():
    with pytest.raises(ValidationError):
        ScanLookup()


# -------- undo --------


def test_undo_removes_exactly_last_batch(ledger, notes):
    keep = ledger.generate(3, "GA")
    ledger.generate(5, "TIX", "")
    assert ledger.undo_last_generation() is True
    assert ledger.tickets == tuple(keep)
    assert ledger.last_batch is None
    assert notes[-1].message == "Last generation undone"

    assert ledger.undo_last_generation() is False
    assert ledger.tickets == tuple(keep)
    assert notes[-1].kind == "error"
    assert notes[-1].message == "No generation to undo"


def test_undo_with_nothing_generated(ledger):
    assert ledger.undo_last_generation() is False


def test_undo_is_single_level(ledger):
    first = ledger.generate(2, "TIX")
    ledger.generate(2, "TIX")
    assert ledger.undo_last_generation()
    assert not ledger.undo_last_generation()
    assert ledger.tickets == tuple(first)


def test_undo_removes_scanned_tickets_of_batch(ledger):
    batch = ledger.generate(2, "TIX")
    ledger.scan(ScanLookup(id=batch[0].id))
    assert ledger.undo_last_generation()
    assert ledger.tickets == ()


def test_undo_frees_numbers_for_reuse(ledger):
    ledger.generate(3, "TIX")
    ledger.undo_last_generation()
    assert numbers(ledger.generate(1, "TIX")) == ["TIX-000001"]


def test_undo_after_clear_fails(ledger):
    ledger.generate(2, "TIX")
    ledger.clear_all_data()
    assert ledger.undo_last_generation() is False


# -------- settings / clear --------


def test_default_settings(ledger):
    assert ledger.settings == Settings("My Organization", 1)


def test_update_settings_merges(ledger, store, notes):
    ledger.update_settings({"organization_name": "Acme"})
    assert ledger.settings == Settings("Acme", 1)
    ledger.update_settings({"max_users": 4})
    assert ledger.settings == Settings("Acme", 4)
    assert json.loads(store.get(SETTINGS_KEY)) == {"organizationName": "Acme", "maxUsers": 4}
    assert notes[-1].message == "Settings updated"


@pytest.mark.parametrize(
    "changes",
    [{"colour": "red"}, {"organization_name": 5}, {"max_users": "2"}, {"max_users": 0}, {"max_users": 21}],
)
def test_update_settings_rejects_bad_changes(ledger, changes):
    with pytest.raises(ValidationError):
        ledger.update_settings(changes)
    assert ledger.settings == Settings()


def test_clear_all_keeps_settings(ledger, notes):
    ledger.update_settings({"organization_name": "Acme"})
    ledger.generate(3, "TIX")
    ledger.clear_all_data()
    assert ledger.tickets == ()
    assert ledger.last_batch is None
    assert ledger.settings.organization_name == "Acme"
    assert notes[-1].message == "All data cleared"


# -------- import / export --------


def test_export_document_shape(ledger):
    ledger.generate(2, "TIX")
    doc = ledger.export_document()
    assert doc["version"] == 1
    assert set(doc) == {"tickets", "settings", "exportedAt", "version"}
    assert [t["number"] for t in doc["tickets"]] == ["TIX-000001", "TIX-000002"]
    assert doc["settings"] == {"organizationName": "My Organization", "maxUsers": 1}


def test_export_import_round_trip(ledger, notifier, clock, id_factory):
    ledger.generate(3, "TIX", "Gala")
    ledger.scan(ScanLookup(number="TIX-000002"))
    ledger.update_settings({"organization_name": "Acme", "max_users": 3})
    text = ledger.export_data()

    fresh = TicketLedger(MemoryStore(), notifier, clock=clock, id_factory=id_factory)
    assert fresh.import_data(text) is True
    assert fresh.tickets == ledger.tickets
    assert fresh.settings == ledger.settings


def test_import_replaces_tickets_and_drops_undo_batch(ledger):
    other = TicketLedger(MemoryStore())
    other.generate(2, "VIP")
    ledger.generate(3, "TIX")
    ledger.import_data(other.export_data())
    assert numbers(ledger.tickets) == ["VIP-000001", "VIP-000002"]
    assert ledger.last_batch is None
    assert ledger.undo_last_generation() is False


def test_import_leaves_missing_fields_untouched(ledger):
    ledger.generate(2, "TIX")
    ledger.import_data(json.dumps({"settings": {"organizationName": "Acme", "maxUsers": 2}}))
    assert len(ledger.tickets) == 2
    assert ledger.settings == Settings("Acme", 2)

    ledger.import_data(json.dumps({"tickets": []}))
    assert ledger.tickets == ()
    assert ledger.settings == Settings("Acme", 2)


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[1, 2]",
        json.dumps({"tickets": [{"id": "a"}]}),
        json.dumps({"tickets": [], "settings": {"maxUsers": "many"}}),
    ],
)
def test_bad_import_leaves_ledger_untouched(ledger, store, notes, text):
    ledger.generate(2, "TIX")
    before = (ledger.tickets, ledger.settings, ledger.last_batch, store.get(STORAGE_KEY))
    with pytest.raises(DecodeError):
        ledger.import_data(text)
    assert (ledger.tickets, ledger.settings, ledger.last_batch, store.get(STORAGE_KEY)) == before
    assert notes[-1].message == "Failed to import data"


# -------- persistence --------


def test_state_survives_reload(ledger, store):
    ledger.generate(3, "TIX")
    ledger.scan(ScanLookup(number="TIX-000001"))
    ledger.update_settings({"organization_name": "Acme"})

    reloaded = TicketLedger(store)
    assert reloaded.tickets == ledger.tickets
    assert reloaded.settings == ledger.settings
    assert reloaded.last_batch == ledger.last_batch
    assert reloaded.undo_last_generation() is True
    assert reloaded.tickets == ()


def test_loads_plain_ticket_list(notifier):
    legacy = [
        {"id": "a", "number": "TIX-000001", "generatedAt": "2024-01-01T00:00:00.000Z", "extra": "", "scannedAt": None}
    ]
    store = MemoryStore({STORAGE_KEY: json.dumps(legacy)})
    ledger = TicketLedger(store, notifier)
    assert numbers(ledger.tickets) == ["TIX-000001"]
    assert ledger.last_batch is None


def test_corrupt_storage_falls_back_to_defaults(notifier):
    store = MemoryStore({STORAGE_KEY: "{oops", SETTINGS_KEY: "[]"})
    ledger = TicketLedger(store, notifier)
    assert ledger.tickets == ()
    assert ledger.settings == Settings()


def test_damaged_stored_ticket_is_skipped_not_the_ledger(notifier):
    good = {"id": "a", "number": "TIX-000001", "generatedAt": "2024-01-01T00:00:00.000Z", "scannedAt": None}
    damaged = {"id": "b", "number": "TIX-000002", "scannedAt": None}
    store = MemoryStore({STORAGE_KEY: json.dumps({"tickets": [good, damaged], "lastGeneration": [good, damaged]})})
    ledger = TicketLedger(store, notifier)
    assert numbers(ledger.tickets) == ["TIX-000001"]
    assert numbers(ledger.last_batch) == ["TIX-000001"]

    ledger.generate(1, "VIP")
    saved = json.loads(store.get(STORAGE_KEY))
    assert [item["number"] for item in saved["tickets"]] == ["VIP-000001", "TIX-000001"]


def test_duplicate_stored_tickets_keep_the_first(notifier):
    first = {"id": "a", "number": "TIX-000001", "generatedAt": "2024-01-01T00:00:00.000Z"}
    same_id = {"id": "a", "number": "TIX-000002", "generatedAt": "2024-01-01T00:00:00.000Z"}
    same_number = {"id": "c", "number": "TIX-000001", "generatedAt": "2024-01-01T00:00:00.000Z"}
    store = MemoryStore({STORAGE_KEY: json.dumps({"tickets": [first, same_id, same_number]})})
    ledger = TicketLedger(store, notifier)
    assert [(t.id, t.number) for t in ledger.tickets] == [("a", "TIX-000001")]
