"""
Design (reports.py)
- Purpose: Read-only statistics over a ticket snapshot: totals and scan rate, generated vs
           scanned per day/week/month, and the scanned / not-scanned filter.
- Inputs: Tickets (e.g. TicketLedger.tickets).
- Outputs: ReportStats, list[PeriodBucket], filtered ticket lists.
- Side effects: None.
- Thread-safety: Pure; works on the snapshot it is given.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta, tzinfo
from typing import Dict, Iterable, List, Optional

from .errors import ValidationError
from .models import Ticket
from .utils import parse_iso

logger = logging.getLogger(__name__)

FILTER_MODES = ("all", "scanned", "not-scanned")
PERIODS = ("daily", "weekly", "monthly")


@dataclass(frozen=True)
class ReportStats:
    total: int
    scanned: int
    not_scanned: int
    scan_rate: float  # percent, one decimal


@dataclass
class PeriodBucket:
    label: str
    start: date
    generated: int = 0
    scanned: int = 0


def summarize(tickets: Iterable[Ticket]) -> ReportStats:
    tickets = list(tickets)
    total = len(tickets)
    scanned = sum(1 for t in tickets if t.is_scanned)
    rate = round(scanned / total * 100, 1) if total else 0.0
    return ReportStats(total=total, scanned=scanned, not_scanned=total - scanned, scan_rate=rate)


def filter_tickets(tickets: Iterable[Ticket], mode: str = "all") -> List[Ticket]:
    if mode not in FILTER_MODES:
        raise ValidationError(f"Unknown filter '{mode}'")
    if mode == "scanned":
        return [t for t in tickets if t.is_scanned]
    if mode == "not-scanned":
        return [t for t in tickets if not t.is_scanned]
    return list(tickets)


def _period_start(day: date, period: str) -> date:
    if period == "daily":
        return day
    if period == "weekly":
        # weeks start on Sunday
        return day - timedelta(days=(day.weekday() + 1) % 7)
    return day.replace(day=1)


def _label(start: date, period: str) -> str:
    if period == "monthly":
        return f"{start.month}/{start.year}"
    return start.isoformat()


def bucket_by_period(tickets: Iterable[Ticket], period: str = "daily", tz: Optional[tzinfo] = None) -> List[PeriodBucket]:
    """
    Purpose: Count generated and scanned tickets per period, keyed by generation time.
    Inputs: period daily | weekly | monthly; tz for the calendar (None = local time).
    Outputs: Buckets sorted oldest first.
    """
    if period not in PERIODS:
        raise ValidationError(f"Unknown period '{period}'")
    buckets: Dict[date, PeriodBucket] = {}
    for ticket in tickets:
        try:
            generated = parse_iso(ticket.generated_at).astimezone(tz)
        except ValueError:
            logger.warning("Skipping ticket %s with bad timestamp %r", ticket.number, ticket.generated_at)
            continue
        start = _period_start(generated.date(), period)
        bucket = buckets.get(start)
        if bucket is None:
            bucket = buckets[start] = PeriodBucket(label=_label(start, period), start=start)
        bucket.generated += 1
        if ticket.is_scanned:
            bucket.scanned += 1
    return [buckets[key] for key in sorted(buckets)]
