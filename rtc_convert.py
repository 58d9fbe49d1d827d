"""High-level conversion tools between JSONL sync logs and RTC-bin.

This module is the *glue* layer:
  - It may import both JSONL backend and RTC-bin backend.
  - JSONL backend and RTC-bin backend MUST NOT import each other.

CLI:

  Pack one or more JSONL logs into a single .rtcbin (one frame per log):

    python3 -m rtc_convert pack --out dataset.rtcbin log1.jsonl log2.jsonl

  Unpack a .rtcbin into JSONL logs:

    python3 -m rtc_convert unpack --in dataset.rtcbin --outdir out_jsonl/

  Inspect a .rtcbin (per-frame counts and time span):

    python3 -m rtc_convert cat --in dataset.rtcbin
"""

from __future__ import annotations

import argparse
from pathlib import Path

from rtc_bin import FLAG_DELTA_C, FLAG_HAS_CRC32, FLAG_HAS_LENGTH, RTCBinError, read_rtcbin, write_rtcbin
from rtc_jsonl import dump_rtclog_jsonl, load_rtclog_jsonl
from rtc_timesync import BASE_YEAR, build_rtclog, decode, record_from_counter


def pack_jsonl_to_rtcbin(jsonl_paths: list[str], out_path: str, *, delta: bool = True) -> list[int]:
    """Pack JSONL logs into one .rtcbin, one COUNTERS frame per input file.

    Returns: number of records packed per frame, in input order.
    """
    if not jsonl_paths:
        raise ValueError("No input JSONL paths")

    frames: list[list[int]] = []
    for p in jsonl_paths:
        log = load_rtclog_jsonl(p)
        frames.append(log.counters())

    write_rtcbin(out_path, base_year=BASE_YEAR, frames=frames, delta=delta)
    return [len(c) for c in frames]


def unpack_rtcbin_to_jsonl(
    in_path: str,
    out_dir: str,
    *,
    prefix: str = "log",
    include_summary: bool = True,
) -> list[str]:
    """Unpack a .rtcbin file into individual JSONL sync logs."""
    f = read_rtcbin(in_path, expected_base_year=BASE_YEAR)
    outp = Path(out_dir)
    outp.mkdir(parents=True, exist_ok=True)

    written: list[str] = []
    for i, counters in enumerate(f.frames, start=1):
        records = [record_from_counter(c) for c in counters]
        log = build_rtclog(records, note=f"Unpacked from {Path(in_path).name} (frame={i})")
        path = outp / f"{prefix}_{i:04d}.jsonl"
        dump_rtclog_jsonl(log, str(path), include_summary=include_summary)
        written.append(str(path))
    return written


def _format_flags(flags: int) -> str:
    parts: list[str] = []
    if flags & FLAG_HAS_CRC32:
        parts.append("CRC32")
    if flags & FLAG_HAS_LENGTH:
        parts.append("LEN")
    if flags & FLAG_DELTA_C:
        parts.append("DELTA_C")
    return "|".join(parts) if parts else "none"


def build_argparser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="rtc_convert",
        description="Convert RTC JSONL sync logs <-> RTC-bin counter dumps.",
    )
    sub = ap.add_subparsers(dest="cmd", required=True)
    add_convert_subparsers(sub)
    return ap


def add_convert_subparsers(sub: argparse._SubParsersAction) -> None:
    p_pack = sub.add_parser("pack", help="Pack JSONL sync logs into one .rtcbin (one frame per log)")
    p_pack.add_argument("--out", required=True, help="Output .rtcbin path")
    p_pack.add_argument("--fixed", action="store_true", help="Store fixed 4-byte counters instead of deltas")
    p_pack.add_argument("jsonl", nargs="+", help="Input JSONL paths (one log per file)")

    p_unpack = sub.add_parser("unpack", help="Unpack a .rtcbin into JSONL sync logs")
    p_unpack.add_argument("--in", dest="inp", required=True, help="Input .rtcbin path")
    p_unpack.add_argument("--outdir", required=True, help="Output directory for JSONL files")
    p_unpack.add_argument("--prefix", default="log", help="Output filename prefix (default: log)")
    p_unpack.add_argument("--no-summary", action="store_true", help="Do not write JSONL summary line")

    p_cat = sub.add_parser("cat", help="Inspect a .rtcbin file (frames summary)")
    p_cat.add_argument("--in", dest="inp", required=True, help="Input .rtcbin path")


def _cmd_pack(args: argparse.Namespace) -> int:
    counts = pack_jsonl_to_rtcbin(args.jsonl, args.out, delta=not args.fixed)
    total = sum(counts)
    print(f"[pack] wrote {args.out}")
    print(f"[pack] records={total}  frames={len(counts)}")
    for i, c in enumerate(counts, start=1):
        pct = 100.0 * c / total if total else 0.0
        print(f"  frame={i}  count={c}  ({pct:.1f}%)")
    return 0


def _cmd_unpack(args: argparse.Namespace) -> int:
    written = unpack_rtcbin_to_jsonl(
        args.inp,
        args.outdir,
        prefix=args.prefix,
        include_summary=not args.no_summary,
    )
    print(f"[jsonl] wrote {len(written)} file(s) into: {args.outdir}")
    return 0


def _cmd_cat(args: argparse.Namespace) -> int:
    f = read_rtcbin(args.inp, expected_base_year=BASE_YEAR)
    total = sum(len(c) for c in f.frames)

    print(f"file: {args.inp}")
    print(
        f"base_year={f.header.base_year}  version={f.header.version}  "
        f"flags=0x{f.header.flags:02x}  ({_format_flags(f.header.flags)})"
    )
    print(f"frames={len(f.frames)}  records={total}")

    for i, counters in enumerate(f.frames, start=1):
        if not counters:
            print(f"  frame={i}  count=0")
            continue
        first = decode(counters[0])
        last = decode(counters[-1])
        print(f"  frame={i}  count={len(counters)}  span=[{first} .. {last}]")
    return 0


def run_convert_command(args: argparse.Namespace) -> int:
    if args.cmd == "pack":
        return _cmd_pack(args)
    if args.cmd == "unpack":
        return _cmd_unpack(args)
    if args.cmd == "cat":
        return _cmd_cat(args)
    raise ValueError(f"unknown command: {args.cmd}")


def main(argv: list[str] | None = None) -> int:
    ap = build_argparser()
    args = ap.parse_args(argv)

    try:
        return run_convert_command(args)
    except (RTCBinError, ValueError, OSError) as e:
        print(f"[error] {e}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
