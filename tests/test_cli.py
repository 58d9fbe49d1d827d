from __future__ import annotations

from pathlib import Path

import pytest

import cli
from rtc_jsonl import load_rtclog_jsonl


def test_cli_encode_timestamps(capsys):
    rc = cli.main(["encode", "2000-01-01 00:00:00", "2000-01-02T00:00:00"])
    assert rc == 0
    out = capsys.readouterr().out
    assert "counter=0" in out
    assert "counter=86400" in out


def test_cli_encode_fields(capsys):
    rc = cli.main(["encode", "--year", "2024", "--month", "2", "--day", "29", "--hour", "12"])
    assert rc == 0
    assert "counter=762523200" in capsys.readouterr().out


def test_cli_encode_rejects_invalid_but_keeps_going(tmp_path: Path, capsys):
    path = tmp_path / "enc.jsonl"
    rc = cli.main(["encode", "2001-02-29 00:00:00", "1900-01-01", "2000-01-02", "--dump-jsonl", str(path)])
    assert rc == 2
    out = capsys.readouterr().out
    assert out.count("[error]") == 2
    assert "counter=86400" in out

    log = load_rtclog_jsonl(str(path))
    assert log.counters() == [86400]


def test_cli_encode_needs_input():
    with pytest.raises(SystemExit):
        cli.main(["encode"])
    with pytest.raises(SystemExit):
        cli.main(["encode", "2000-01-01", "--year", "2000"])


def test_cli_decode_range_check(tmp_path: Path, capsys):
    path = tmp_path / "dec.jsonl"
    rc = cli.main(["decode", "86400", "4294967296", "4294967295", "--dump-jsonl", str(path)])
    assert rc == 2
    out = capsys.readouterr().out
    assert "2000-01-02 00:00:00" in out
    assert "2136-02-07 06:28:15" in out
    assert "out of 32-bit range" in out

    log = load_rtclog_jsonl(str(path))
    assert log.counters() == [86400, 4294967295]


def test_cli_decode_not_a_number(capsys):
    rc = cli.main(["decode", "12abc"])
    assert rc == 2
    assert "[error]" in capsys.readouterr().out


def test_cli_temp(capsys):
    rc = cli.main(["temp", "0"])
    assert rc == 0
    out = capsys.readouterr().out
    assert "preset=3v3" in out
    assert "temperature=50.00C" in out


def test_cli_temp_rejects_bad_config(capsys):
    rc = cli.main(["temp", "2000"])
    assert rc == 2
    assert "[error]" in capsys.readouterr().out


def test_cli_dispatch_pack_unpack_cat(tmp_path: Path, capsys):
    jsonl_path = tmp_path / "log.jsonl"
    assert cli.main(["decode", "0", "86400", "--dump-jsonl", str(jsonl_path)]) == 0

    out_bin = tmp_path / "dataset.rtcbin"
    assert cli.main(["pack", "--out", str(out_bin), str(jsonl_path)]) == 0
    assert out_bin.exists()

    assert cli.main(["cat", "--in", str(out_bin)]) == 0
    out = capsys.readouterr().out
    assert "frames=1" in out
    assert "span=[2000-01-01 00:00:00 .. 2000-01-02 00:00:00]" in out

    outdir = tmp_path / "unpacked"
    assert cli.main(["unpack", "--in", str(out_bin), "--outdir", str(outdir)]) == 0
    assert any(p.suffix == ".jsonl" for p in outdir.iterdir())


def test_cli_pack_reports_bad_input(tmp_path: Path, capsys):
    bad = tmp_path / "bad.jsonl"
    bad.write_text('{"type":"log","version":1}\n', encoding="utf-8")
    rc = cli.main(["pack", "--out", str(tmp_path / "x.rtcbin"), str(bad)])
    assert rc == 2
    assert "[error]" in capsys.readouterr().out


def test_cli_missing_input_file(tmp_path: Path, capsys):
    rc = cli.main(["pack", "--out", str(tmp_path / "x.rtcbin"), str(tmp_path / "nope.jsonl")])
    assert rc == 2
    assert "[error]" in capsys.readouterr().out
    assert not (tmp_path / "x.rtcbin").exists()
