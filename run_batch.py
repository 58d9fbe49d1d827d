#!/usr/bin/env python3
from __future__ import annotations

import argparse
from pathlib import Path

from rtc_model import parse_datetime
from rtc_timesync import check_counter, decode, encode


def convert_line(raw: str) -> dict:
    """One input line -> one summary row. A bare integer is a counter, anything else a timestamp."""
    row: dict = {"raw": raw, "kind": None, "counter": None, "ts": None, "ok": False, "error": None}
    try:
        if raw.isdigit():
            row["kind"] = "counter"
            counter = check_counter(int(raw))
            row["counter"] = counter
            row["ts"] = decode(counter).isoformat()
        else:
            row["kind"] = "ts"
            dt = parse_datetime(raw)
            row["ts"] = dt.isoformat()
            row["counter"] = encode(dt)
        row["ok"] = True
    except ValueError as e:
        row["error"] = str(e)
    return row


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Batch RTC conversion into a TSV summary.")
    ap.add_argument("input_file", help="Text file: one timestamp or counter per line.")
    ap.add_argument("--out", default="out", help="Output directory for summary.tsv")
    args = ap.parse_args(argv)

    outdir = Path(args.out)
    outdir.mkdir(parents=True, exist_ok=True)

    items = []
    for raw in Path(args.input_file).read_text(encoding="utf-8").splitlines():
        raw = raw.strip()
        if not raw or raw.startswith("#"):
            continue
        items.append(raw)

    rows = [convert_line(raw) for raw in items]
    failed = sum(1 for r in rows if not r["ok"])

    tsv = outdir / "summary.tsv"
    cols = ["raw", "kind", "counter", "ts", "ok", "error"]
    with tsv.open("w", encoding="utf-8") as f:
        f.write("\t".join(cols) + "\n")
        for r in rows:
            f.write("\t".join("" if r[c] is None else str(r[c]) for c in cols) + "\n")

    print(f"[batch] rows={len(rows)}  failed={failed}")
    print("[ok] wrote", tsv)
    return 2 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
