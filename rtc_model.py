"""RTC time-sync data model (format-agnostic).

This module contains only the minimal dataclasses shared by the codec,
the JSONL backend and the RTC-bin backend. No file I/O lives here.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone

_TS_RE = re.compile(r"^\s*(\d{1,4})-(\d{1,2})-(\d{1,2})(?:[ T](\d{1,2}):(\d{1,2})(?::(\d{1,2}))?)?\s*$")


@dataclass(frozen=True, order=True)
class DateTime:
    """Calendar instant, second resolution, no time zone.

    Field order matters: comparison is lexicographic on
    (year, month, day, hour, minute, second).
    An instance may be invalid (e.g. freshly parsed input); only the codec decides.
    """

    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0

    def isoformat(self) -> str:
        return (
            f"{self.year:04d}-{self.month:02d}-{self.day:02d} "
            f"{self.hour:02d}:{self.minute:02d}:{self.second:02d}"
        )

    def __str__(self) -> str:
        return self.isoformat()

    def as_tuple(self) -> tuple[int, int, int, int, int, int]:
        return (self.year, self.month, self.day, self.hour, self.minute, self.second)


def parse_datetime(s: str) -> DateTime:
    """Parse 'YYYY-MM-DD[ HH:MM[:SS]]' (a 'T' separator is accepted too).

    Only the syntax is checked here: "2001-02-30" parses fine and is
    rejected later by the codec's validation.
    """
    m = _TS_RE.match(s)
    if m is None:
        raise ValueError(f"bad timestamp syntax: {s!r} (expected YYYY-MM-DD HH:MM:SS)")
    fields = [int(g) if g is not None else 0 for g in m.groups()]
    return DateTime(*fields)


@dataclass(frozen=True)
class SyncRec:
    """One RTC sample: the raw counter and the instant it stands for."""

    counter: int
    dt: DateTime


@dataclass(frozen=True)
class RTCLog:
    """An ordered series of sync records (format-agnostic)."""

    base_year: int
    records: list[SyncRec]
    created_utc: str | None = None
    note: str | None = None
    # optional summary hints (recomputable from records)
    first: int | None = None
    last: int | None = None
    monotonic: bool | None = None

    def counters(self) -> list[int]:
        return [r.counter for r in self.records]


def is_monotonic(counters: list[int]) -> bool:
    """True if counters never go backwards (equal neighbours are allowed)."""
    return all(a <= b for a, b in zip(counters, counters[1:]))


def utc_now_iso() -> str:
    """UTC now in ISO format without microseconds, suffixed with 'Z'."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


__all__ = ["DateTime", "SyncRec", "RTCLog", "parse_datetime", "is_monotonic", "utc_now_iso"]
