from __future__ import annotations

import random
from datetime import datetime

import rtc_timesync as rtc
from rtc_model import DateTime

EPOCH = datetime(rtc.BASE_YEAR, 1, 1)


def stdlib_counter(dt: DateTime) -> int:
    """Reference counter computed with the stdlib calendar (independent of the codec)."""
    delta = datetime(*dt.as_tuple()) - EPOCH
    return delta.days * 86400 + delta.seconds


def random_counters(n: int, *, seed: int = 12345) -> list[int]:
    rng = random.Random(seed)
    return [rng.randint(0, rtc.U32_MAX) for _ in range(n)]


def year_edges() -> list[DateTime]:
    """First/last second of every year plus the end of February, up to the counter limit."""
    out: list[DateTime] = []
    for y in range(rtc.BASE_YEAR, rtc.MAX_YEAR):
        out.append(DateTime(y, 1, 1, 0, 0, 0))
        out.append(DateTime(y, 2, rtc.days_in_month(2, y), 23, 59, 59))
        out.append(DateTime(y, 12, 31, 23, 59, 59))
    out.append(DateTime(rtc.MAX_YEAR, 1, 1, 0, 0, 0))
    out.append(rtc.MAX_COUNTER_DATETIME)
    return out
