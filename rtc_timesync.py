#!/usr/bin/env python3
"""
rtc_timesync.py: calendar date-time <-> 32-bit RTC counter.

Idea (summary):
- The RTC counts whole seconds since a fixed epoch: 2000-01-01 00:00:00.
- The counter is an unsigned 32-bit value, so it covers 0 .. 2^32-1 seconds,
  i.e. roughly 136 years.
- encode(dt): sum the seconds of every full year since BASE_YEAR, then every
  full month of the target year (February leap-adjusted), then days, hours,
  minutes and seconds.
- decode(c): peel off whole years, then whole months, then split the remainder
  into day/hour/minute/second. The result always passes validate().

The two directions are exact inverses on the representable window:
  decode(encode(d)) == d   and   encode(decode(c)) == c

CLI:
  python3 rtc_timesync.py encode "2000-01-02 00:00:00"
  python3 rtc_timesync.py decode 86400

Note:
  The calendar window is BASE_YEAR..MAX_YEAR (2000..2136), but the 32-bit
  counter runs out earlier, on 2136-02-07 06:28:15. Dates after that are valid
  calendar dates with no counter: encode() raises instead of wrapping.
"""

from __future__ import annotations

from rtc_model import DateTime, RTCLog, SyncRec, is_monotonic, utc_now_iso

# --- Epoch window ----------------------------------------------------------

BASE_YEAR = 2000
MAX_YEAR = 2136
U32_MAX = (1 << 32) - 1  # 4,294,967,295

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400

# Days in month (non-leap); February is fixed up by days_in_month()
DAYS_IN_MONTH: tuple[int, ...] = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


class InvalidDateTimeError(ValueError):
    pass


class CounterOutOfRangeError(ValueError):
    pass


# --- Calendar utilities ----------------------------------------------------


def is_leap_year(year: int) -> bool:
    """Gregorian rule: /400 => leap; else /4 and not /100 => leap."""
    return year % 400 == 0 or (year % 4 == 0 and year % 100 != 0)


def days_in_month(month: int, year: int) -> int:
    if month == 2 and is_leap_year(year):
        return 29
    return DAYS_IN_MONTH[month - 1]


def seconds_in_year(year: int) -> int:
    return (366 if is_leap_year(year) else 365) * SECONDS_PER_DAY


def seconds_in_month(month: int, year: int) -> int:
    return days_in_month(month, year) * SECONDS_PER_DAY


# --- Validation ------------------------------------------------------------


def validate(dt: DateTime) -> bool:
    """True if dt lies in [BASE_YEAR..MAX_YEAR] and every field is in range."""
    if dt.year < BASE_YEAR or dt.year > MAX_YEAR:
        return False
    if dt.month < 1 or dt.month > 12:
        return False
    if dt.day < 1 or dt.day > days_in_month(dt.month, dt.year):
        return False
    if dt.hour < 0 or dt.hour > 23:
        return False
    if dt.minute < 0 or dt.minute > 59:
        return False
    if dt.second < 0 or dt.second > 59:
        return False
    return True


def check_counter(value: int) -> int:
    """Range check for a candidate counter of arbitrary width.

    Returns the value unchanged if it fits in an unsigned 32-bit word.
    """
    if value < 0 or value > U32_MAX:
        raise CounterOutOfRangeError(f"RTC counter {value} out of 32-bit range [0..{U32_MAX}]")
    return value


# --- Core API ---------------------------------------------------------------


def encode(dt: DateTime) -> int:
    """DateTime -> RTC counter (seconds since BASE_YEAR-01-01 00:00:00)."""
    if not validate(dt):
        raise InvalidDateTimeError(f"invalid date-time: {dt}")

    seconds = 0
    for y in range(BASE_YEAR, dt.year):
        seconds += seconds_in_year(y)

    for m in range(1, dt.month):
        seconds += seconds_in_month(m, dt.year)

    seconds += (dt.day - 1) * SECONDS_PER_DAY
    seconds += dt.hour * SECONDS_PER_HOUR
    seconds += dt.minute * SECONDS_PER_MINUTE
    seconds += dt.second

    if seconds > U32_MAX:
        raise CounterOutOfRangeError(f"{dt} is past the last 32-bit instant ({MAX_COUNTER_DATETIME})")
    return seconds


def decode(counter: int) -> DateTime:
    """RTC counter -> DateTime. The counter must fit in 32 bits (see check_counter)."""
    seconds = check_counter(counter)

    year = BASE_YEAR
    while seconds >= seconds_in_year(year):
        seconds -= seconds_in_year(year)
        year += 1
    # unreachable for 32-bit input, kept as a hard stop
    if year > MAX_YEAR:
        raise CounterOutOfRangeError(f"RTC counter {counter} decodes past MAX_YEAR={MAX_YEAR}")

    month = 1
    while month < 12 and seconds >= seconds_in_month(month, year):
        seconds -= seconds_in_month(month, year)
        month += 1

    day = seconds // SECONDS_PER_DAY + 1
    seconds %= SECONDS_PER_DAY

    hour = seconds // SECONDS_PER_HOUR
    seconds %= SECONDS_PER_HOUR

    minute = seconds // SECONDS_PER_MINUTE
    second = seconds % SECONDS_PER_MINUTE

    return DateTime(year=year, month=month, day=day, hour=hour, minute=minute, second=second)


# Last instant the counter can hold: 2136-02-07 06:28:15
MAX_COUNTER_DATETIME = decode(U32_MAX)


# --- Sync log bridge ---------------------------------------------------------


def record_from_counter(counter: int) -> SyncRec:
    return SyncRec(counter=counter, dt=decode(counter))


def record_from_datetime(dt: DateTime) -> SyncRec:
    return SyncRec(counter=encode(dt), dt=dt)


def build_rtclog(records: list[SyncRec], note: str | None = None) -> RTCLog:
    """Wrap records into an RTCLog with summary hints filled in."""
    counters = [r.counter for r in records]
    return RTCLog(
        base_year=BASE_YEAR,
        records=list(records),
        created_utc=utc_now_iso(),
        note=note,
        first=counters[0] if counters else None,
        last=counters[-1] if counters else None,
        monotonic=is_monotonic(counters),
    )


__all__ = [
    "BASE_YEAR",
    "MAX_YEAR",
    "U32_MAX",
    "DAYS_IN_MONTH",
    "MAX_COUNTER_DATETIME",
    "InvalidDateTimeError",
    "CounterOutOfRangeError",
    "is_leap_year",
    "days_in_month",
    "validate",
    "check_counter",
    "encode",
    "decode",
    "record_from_counter",
    "record_from_datetime",
    "build_rtclog",
]


if __name__ == "__main__":
    from cli import main

    raise SystemExit(main())
