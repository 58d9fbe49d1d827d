"""JSONL backend for RTC sync logs.

File format (v1):
  - First line: header {"type":"rtc","version":1,"base_year":2000,...}
  - Next lines: sync records {"counter":86400,"ts":"2000-01-02 00:00:00"}
  - Optional last line: summary {"type":"summary","k":...,"first":...,"last":...,"monotonic":...}

The "ts" field is redundant (it is decode(counter)) and is checked on load.
This module is intentionally independent from the RTC-bin backend.
"""

from __future__ import annotations

import json

from rtc_model import RTCLog, SyncRec, is_monotonic, parse_datetime
from rtc_timesync import BASE_YEAR, check_counter, decode, validate


def _dumps(obj: dict) -> str:
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)


def dump_rtclog_jsonl(log: RTCLog, path: str, include_summary: bool = True) -> None:
    """Write a sync log to JSONL, records in their original order."""
    header: dict[str, object] = {"type": "rtc", "version": 1, "base_year": log.base_year}
    if log.created_utc:
        header["created_utc"] = log.created_utc
    if log.note:
        header["note"] = log.note

    with open(path, "w", encoding="utf-8") as f:
        f.write(_dumps(header) + "\n")

        for r in log.records:
            f.write(_dumps({"counter": int(r.counter), "ts": r.dt.isoformat()}) + "\n")

        if include_summary:
            counters = log.counters()
            summary: dict[str, object] = {"type": "summary", "k": len(counters)}
            if counters:
                summary["first"] = counters[0]
                summary["last"] = counters[-1]
            summary["monotonic"] = is_monotonic(counters)
            f.write(_dumps(summary) + "\n")


def _validate_header(obj: dict) -> RTCLog:
    allowed = {"type", "version", "base_year", "created_utc", "note"}
    extra = set(obj.keys()) - allowed
    if extra:
        raise ValueError(f"Header: keys not allowed: {sorted(extra)}")

    if obj.get("type") != "rtc":
        raise ValueError("Header: type must be 'rtc'")
    if obj.get("version") != 1:
        raise ValueError("Header: version must be 1")
    if obj.get("base_year") != BASE_YEAR:
        raise ValueError(f"Header: base_year must be {BASE_YEAR}")

    return RTCLog(
        base_year=BASE_YEAR,
        records=[],
        created_utc=obj.get("created_utc"),
        note=obj.get("note"),
    )


def _validate_record(obj: dict, lineno: int) -> SyncRec:
    allowed = {"counter", "ts"}
    extra = set(obj.keys()) - allowed
    if extra:
        raise ValueError(f"Line {lineno}: keys not allowed: {sorted(extra)}")
    if "counter" not in obj or "ts" not in obj:
        raise ValueError(f"Line {lineno}: required fields: counter, ts")

    counter = obj["counter"]
    ts = obj["ts"]
    # bool is an int subclass: reject it explicitly
    if not isinstance(counter, int) or isinstance(counter, bool):
        raise ValueError(f"Line {lineno}: counter must be an int")
    if not isinstance(ts, str):
        raise ValueError(f"Line {lineno}: ts must be a string")

    try:
        check_counter(counter)
        dt = parse_datetime(ts)
    except ValueError as e:
        raise ValueError(f"Line {lineno}: {e}") from e
    if not validate(dt):
        raise ValueError(f"Line {lineno}: invalid date-time {ts!r}")
    expected = decode(counter)
    if dt != expected:
        raise ValueError(f"Line {lineno}: ts {dt} does not match counter {counter} ({expected})")
    return SyncRec(counter=counter, dt=dt)


def _validate_summary(obj: dict) -> dict:
    allowed = {"type", "k", "first", "last", "monotonic"}
    extra = set(obj.keys()) - allowed
    if extra:
        raise ValueError(f"Summary: keys not allowed: {sorted(extra)}")
    if obj.get("type") != "summary":
        raise ValueError("Summary: type must be 'summary'")
    return obj


def _check_summary(summary: dict, records: list[SyncRec]) -> None:
    """Summary hints must agree with the records they describe."""
    k = summary.get("k")
    if not isinstance(k, int) or isinstance(k, bool):
        raise ValueError("Summary: k must be an int")
    if k != len(records):
        raise ValueError(f"Summary: k={k} but {len(records)} record(s) found")

    counters = [r.counter for r in records]
    if "first" in summary and (not counters or summary["first"] != counters[0]):
        raise ValueError(f"Summary: first={summary['first']} does not match the first record")
    if "last" in summary and (not counters or summary["last"] != counters[-1]):
        raise ValueError(f"Summary: last={summary['last']} does not match the last record")
    if "monotonic" in summary and summary["monotonic"] is not is_monotonic(counters):
        raise ValueError(f"Summary: monotonic={summary['monotonic']} does not match the records")


def load_rtclog_jsonl(path: str) -> RTCLog:
    header: RTCLog | None = None
    records: list[SyncRec] = []
    summary: dict | None = None

    with open(path, encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON at line {lineno}: {e}") from e
            if not isinstance(obj, dict):
                raise ValueError(f"Line {lineno}: expected a JSON object")

            if header is None:
                header = _validate_header(obj)
                continue

            if summary is not None:
                raise ValueError(f"Line {lineno}: nothing may follow the summary")

            if obj.get("type") == "summary":
                summary = _validate_summary(obj)
                continue

            records.append(_validate_record(obj, lineno))

    if header is None:
        raise ValueError("Empty file or missing rtc header")

    if summary is not None:
        _check_summary(summary, records)

    return RTCLog(
        base_year=header.base_year,
        records=records,
        created_utc=header.created_utc,
        note=header.note,
        first=summary.get("first") if summary else None,
        last=summary.get("last") if summary else None,
        monotonic=summary.get("monotonic") if summary else None,
    )


__all__ = ["dump_rtclog_jsonl", "load_rtclog_jsonl"]
