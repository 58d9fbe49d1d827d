#!/usr/bin/env python3
"""CLI for RTC time sync.

Usage examples:
  - Timestamp -> RTC counter (+ dump JSONL):
      python3 cli.py encode "2024-02-29 12:00:00" --dump-jsonl log.jsonl
      python3 cli.py encode --year 2024 --month 2 --day 29 --hour 12

  - RTC counter -> timestamp:
      python3 cli.py decode 86400 4294967295

  - Thermistor readout:
      python3 cli.py temp 512 --preset 5v
      python3 cli.py temp 512 --vref 3.3 --r-fixed 10000

  - JSONL <-> RTC-bin (same subcommands as rtc_convert):
      python3 cli.py pack --out logs.rtcbin log.jsonl
      python3 cli.py cat --in logs.rtcbin
"""

from __future__ import annotations

import argparse

from rtc_convert import add_convert_subparsers, run_convert_command
from rtc_jsonl import dump_rtclog_jsonl
from rtc_model import DateTime, SyncRec, parse_datetime
from rtc_timesync import (
    BASE_YEAR,
    MAX_COUNTER_DATETIME,
    build_rtclog,
    check_counter,
    decode,
    record_from_datetime,
    validate,
)
from thermistor import adc_to_temperature, is_valid_adc_config


def resolve_adc_config(
    *,
    preset: str | None,
    vref: float | None,
    r_fixed: float | None,
) -> tuple[str, float, float]:
    """Resolve ADC front-end preset + overrides.

    Returns: (preset_effective, vref, r_fixed)
    """
    presets: dict[str, tuple[float, float]] = {
        # 3.3V MCU rail, 10k divider (default)
        "3v3": (3.3, 10_000.0),
        # 5V boards
        "5v": (5.0, 10_000.0),
        # low-voltage rail, bigger resistor to cut self-heating
        "1v8": (1.8, 47_000.0),
    }

    preset_eff = "3v3" if preset is None else preset
    if preset_eff not in presets:
        raise ValueError(f"Unknown preset: {preset_eff!r}")

    v, r = presets[preset_eff]

    # Explicit overrides always win
    if vref is not None:
        v = float(vref)
    if r_fixed is not None:
        r = float(r_fixed)

    # adc=0 is always in range: only vref and r_fixed are checked here
    if not is_valid_adc_config(0, v, r):
        raise ValueError(f"vref must be in (0, 5] V and r_fixed in [1k, 100k] ohm (got vref={v}, r_fixed={r})")

    return preset_eff, v, r


def build_argparser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description=f"RTC time sync, base time 1 Jan {BASE_YEAR} 00:00:00.")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_enc = sub.add_parser(
        "encode",
        help=f"Timestamp -> RTC counter (last representable instant: {MAX_COUNTER_DATETIME})",
    )
    p_enc.add_argument("ts", nargs="*", help='Timestamps "YYYY-MM-DD HH:MM:SS" (omit when using --year etc.)')
    p_enc.add_argument("--year", type=int, default=None)
    p_enc.add_argument("--month", type=int, default=None)
    p_enc.add_argument("--day", type=int, default=None)
    p_enc.add_argument("--hour", type=int, default=0)
    p_enc.add_argument("--minute", type=int, default=0)
    p_enc.add_argument("--second", type=int, default=0)
    p_enc.add_argument("--dump-jsonl", help="Write the accepted records to JSONL (file path).")

    p_dec = sub.add_parser("decode", help="RTC counter -> timestamp")
    p_dec.add_argument("counter", nargs="+", help="RTC counter values (decimal, 0..4294967295)")
    p_dec.add_argument("--dump-jsonl", help="Write the accepted records to JSONL (file path).")

    p_temp = sub.add_parser("temp", help="NTC thermistor: ADC value -> temperature")
    p_temp.add_argument("adc", type=int, help="Raw ADC value (0 - 1023)")
    p_temp.add_argument(
        "--preset",
        choices=["3v3", "5v", "1v8"],
        default="3v3",
        help="ADC front-end preset (Vref, fixed resistor). --vref/--r-fixed always win.",
    )
    p_temp.add_argument("--vref", type=float, default=None, help="Override: ADC reference voltage (V).")
    p_temp.add_argument("--r-fixed", type=float, default=None, help="Override: fixed resistor value (ohm).")

    add_convert_subparsers(sub)
    return ap


def _datetimes_from_args(ap: argparse.ArgumentParser, args: argparse.Namespace) -> list[str | DateTime]:
    fields_given = args.year is not None or args.month is not None or args.day is not None
    if args.ts and fields_given:
        ap.error("encode: pass timestamps OR --year/--month/--day, not both.")
    if args.ts:
        return list(args.ts)
    if args.year is None or args.month is None or args.day is None:
        ap.error("encode: pass at least one timestamp or --year, --month and --day.")
    return [DateTime(args.year, args.month, args.day, args.hour, args.minute, args.second)]


def _dump(records: list[SyncRec], path: str | None) -> None:
    if not path:
        return
    dump_rtclog_jsonl(build_rtclog(records, note="RTC time sync log"), path)
    print(f"[io] wrote {path}")


def _cmd_encode(ap: argparse.ArgumentParser, args: argparse.Namespace) -> int:
    records: list[SyncRec] = []
    failed = 0
    for item in _datetimes_from_args(ap, args):
        try:
            dt = parse_datetime(item) if isinstance(item, str) else item
            if not validate(dt):
                raise ValueError(f"invalid date-time entered: {dt}")
            rec = record_from_datetime(dt)
        except ValueError as e:
            print(f"[error] {e}")
            failed += 1
            continue
        print(f"[rtc] {dt}  ->  counter={rec.counter}")
        records.append(rec)

    _dump(records, args.dump_jsonl)
    return 2 if failed else 0


def _cmd_decode(args: argparse.Namespace) -> int:
    records: list[SyncRec] = []
    failed = 0
    for raw in args.counter:
        try:
            counter = check_counter(int(raw))
        except ValueError as e:
            print(f"[error] invalid RTC counter value {raw!r}: {e}")
            failed += 1
            continue
        dt = decode(counter)
        print(f"[ts] counter={counter}  ->  {dt}")
        records.append(SyncRec(counter=counter, dt=dt))

    _dump(records, args.dump_jsonl)
    return 2 if failed else 0


def _cmd_temp(args: argparse.Namespace) -> int:
    preset_eff, vref, r_fixed = resolve_adc_config(preset=args.preset, vref=args.vref, r_fixed=args.r_fixed)
    voltage, temperature = adc_to_temperature(args.adc, vref, r_fixed)
    print(f"[temp] preset={preset_eff}  vref={vref:g}V  r_fixed={r_fixed:g}ohm")
    print(f"[temp] adc={args.adc}  voltage={voltage:.3f}V  temperature={temperature:.2f}C")
    return 0


def main(argv: list[str] | None = None) -> int:
    ap = build_argparser()
    args = ap.parse_args(argv)

    try:
        if args.cmd == "encode":
            return _cmd_encode(ap, args)
        if args.cmd == "decode":
            return _cmd_decode(args)
        if args.cmd == "temp":
            return _cmd_temp(args)
        return run_convert_command(args)
    except (ValueError, OSError) as e:
        print(f"[error] {e}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
