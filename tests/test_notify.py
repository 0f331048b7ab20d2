from tixsuite import notify
from tixsuite.notify import Notifier, desktop_notifier


def test_show_sets_current_and_starts_timer(notifier, timers, notes):
    note = notifier.show("Saved", "success")
    assert notifier.current == note
    assert note.kind == "success"
    assert notes == [note]
    assert len(timers) == 1
    assert timers[0].interval == 3
    assert timers[0].started
    assert timers[0].daemon


def test_timer_expiry_dismisses(notifier, timers, notes):
    notifier.show("Saved", "success")
    timers[0].fire()
    assert notifier.current is None
    assert notes[-1] is None


def test_new_notification_supersedes_old(notifier, timers, notes):
    first = notifier.show("first")
    second = notifier.show("second", "error")
    assert first.id != second.id
    assert timers[0].cancelled
    assert notifier.current == second

    # a stale timer firing anyway must not hide the newer toast
    timers[0].function(*timers[0].args)
    assert notifier.current == second

    timers[1].fire()
    assert notifier.current is None


def test_hide_cancels_timer(notifier, timers, notes):
    notifier.show("Saved")
    notifier.hide()
    assert timers[0].cancelled
    assert notifier.current is None
    assert notes[-1] is None


def test_hide_without_notification_publishes_nothing(notifier, notes):
    notifier.hide()
    assert notes == []


def test_unknown_kind_falls_back_to_info(notifier):
    assert notifier.show("hello", "shout").kind == "info"


def test_failing_subscriber_does_not_block_others(notifier, notes):
    def broken(_note):
        raise RuntimeError("boom")

    seen = []
    notifier.subscribe(broken)
    notifier.subscribe(seen.append)
    note = notifier.show("still delivered")
    assert seen == [note]


def test_real_timer_is_cancelled_on_close():
    notifier = Notifier(duration_sec=60)
    notifier.show("bye")
    notifier.close()
    assert notifier._timer is None


def test_desktop_notifier_forwards_when_enabled(monkeypatch, notifier):
    sent = []

    class FakeNotification:
        def notify(self, **kwargs):
            sent.append(kwargs)

    monkeypatch.setattr(notify, "desktop_notification", FakeNotification())
    enabled = {"on": True}
    notifier.subscribe(desktop_notifier(lambda: enabled["on"]))

    notifier.show("Ticket TIX-000001 scanned successfully!", "success")
    enabled["on"] = False
    notifier.show("muted")
    notifier.hide()

    assert sent == [
        {"title": "Tix/Voucher Suite", "message": "Ticket TIX-000001 scanned successfully!", "timeout": 5}
    ]


def test_desktop_notifier_tolerates_missing_backend(monkeypatch, notifier):
    class Unsupported:
        def notify(self, **kwargs):
            raise NotImplementedError()

    monkeypatch.setattr(notify, "desktop_notification", Unsupported())
    notifier.subscribe(desktop_notifier(lambda: True))
    assert notifier.show("hello").message == "hello"
