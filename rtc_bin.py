"""RTC-bin (binary) backend: framed 32-bit counter dumps + CRC32.

Header:
  - magic: b"RTC" (3 bytes)
  - version: 1 byte
  - flags: 1 byte
  - base_year: uLEB128 varint

Frames:
  - type: 1 byte
  - len: uLEB128 varint (payload length)
  - payload: bytes
  - crc32: 4 bytes big-endian over (type||len_bytes||payload)

Frame types:
  0x01 = COUNTERS
  0x7F = END (optional)

COUNTERS payload:
  count varint
  if DELTA_C flag: first counter varint, then count-1 zigzag varint deltas
  else: count x 4-byte big-endian counters

Only counters are stored; date-times are derived by the codec.
This module does NOT deal with JSONL I/O.
"""

from __future__ import annotations

import io
import os
import zlib
from dataclasses import dataclass

from rtc_timesync import U32_MAX

MAGIC = b"RTC"
VERSION = 1

FRAME_COUNTERS = 0x01
FRAME_END = 0x7F

# flags bitfield
FLAG_HAS_CRC32 = 1 << 0
FLAG_HAS_LENGTH = 1 << 1
FLAG_DELTA_C = 1 << 2


class RTCBinError(ValueError):
    pass


def uleb128_encode(n: int) -> bytes:
    if n < 0:
        raise RTCBinError("uleb128 only supports non-negative integers")
    out = bytearray()
    while True:
        b = n & 0x7F
        n >>= 7
        if n:
            out.append(b | 0x80)
        else:
            out.append(b)
            break
    return bytes(out)


def uleb128_decode_from(data: bytes, offset: int = 0) -> tuple[int, int]:
    n = 0
    shift = 0
    i = offset
    while i < len(data):
        b = data[i]
        i += 1
        n |= (b & 0x7F) << shift
        if (b & 0x80) == 0:
            return n, i
        shift += 7
        if shift > 70:
            raise RTCBinError("uleb128 too large")
    raise RTCBinError("unexpected EOF while reading uleb128")


def zigzag_encode(n: int) -> int:
    return n * 2 if n >= 0 else -n * 2 - 1


def zigzag_decode(z: int) -> int:
    return z // 2 if z % 2 == 0 else -(z + 1) // 2


def crc32_be(data: bytes) -> bytes:
    c = zlib.crc32(data) & 0xFFFFFFFF
    return c.to_bytes(4, "big")


def _read_exact(fp: io.BufferedReader, n: int) -> bytes:
    b = fp.read(n)
    if b is None or len(b) != n:
        raise RTCBinError("unexpected EOF")
    return b


def _check_u32(c: int) -> int:
    if c < 0 or c > U32_MAX:
        raise RTCBinError(f"counter {c} out of 32-bit range")
    return c


def _encode_counters(counters: list[int], flags: int) -> bytes:
    payload = bytearray(uleb128_encode(len(counters)))
    if not counters:
        return bytes(payload)

    if flags & FLAG_DELTA_C:
        prev = _check_u32(counters[0])
        payload += uleb128_encode(prev)
        for c in counters[1:]:
            c = _check_u32(c)
            payload += uleb128_encode(zigzag_encode(c - prev))
            prev = c
    else:
        for c in counters:
            payload += _check_u32(c).to_bytes(4, "big")
    return bytes(payload)


def _decode_counters(payload: bytes, flags: int) -> list[int]:
    off = 0
    count, off = uleb128_decode_from(payload, off)
    counters: list[int] = []

    if flags & FLAG_DELTA_C:
        if count:
            prev, off = uleb128_decode_from(payload, off)
            counters.append(_check_u32(prev))
            for _ in range(count - 1):
                z, off = uleb128_decode_from(payload, off)
                prev = _check_u32(prev + zigzag_decode(z))
                counters.append(prev)
    else:
        if off + 4 * count > len(payload):
            raise RTCBinError("counters payload too short")
        for _ in range(count):
            counters.append(int.from_bytes(payload[off : off + 4], "big"))
            off += 4

    if off != len(payload):
        raise RTCBinError(f"trailing bytes in counters payload ({len(payload) - off})")
    return counters


@dataclass(frozen=True)
class RTCBinHeader:
    version: int
    flags: int
    base_year: int


@dataclass(frozen=True)
class RTCBinFile:
    header: RTCBinHeader
    frames: list[list[int]]


def write_rtcbin(path: str, *, base_year: int, frames: list[list[int]], delta: bool = True) -> None:
    flags = FLAG_HAS_CRC32 | FLAG_HAS_LENGTH
    if delta:
        flags |= FLAG_DELTA_C
    header = MAGIC + bytes([VERSION, flags]) + uleb128_encode(base_year)

    # encode everything first: a bad counter must not leave a truncated file behind
    buf = io.BytesIO()
    buf.write(header)
    for counters in frames:
        _write_frame(buf, FRAME_COUNTERS, _encode_counters(counters, flags), flags)
    _write_frame(buf, FRAME_END, b"", flags)

    with open(path, "wb") as f:
        f.write(buf.getvalue())


def _write_frame(f: io.BytesIO, frame_type: int, payload: bytes, flags: int) -> None:
    t = bytes([frame_type])
    len_bytes = uleb128_encode(len(payload))
    blob = t + len_bytes + payload
    f.write(blob)
    if flags & FLAG_HAS_CRC32:
        f.write(crc32_be(blob))


def _read_varint(f: io.BufferedReader) -> tuple[int, bytes]:
    raw = bytearray()
    while True:
        c = _read_exact(f, 1)[0]
        raw.append(c)
        if (c & 0x80) == 0:
            break
        if len(raw) > 10:
            raise RTCBinError("uleb128 too large")
    n, _ = uleb128_decode_from(bytes(raw), 0)
    return n, bytes(raw)


def read_rtcbin(path: str, *, expected_base_year: int | None = None) -> RTCBinFile:
    with open(path, "rb") as f:
        file_size = os.fstat(f.fileno()).st_size
        magic = _read_exact(f, 3)
        if magic != MAGIC:
            raise RTCBinError("bad magic")

        version = _read_exact(f, 1)[0]
        flags = _read_exact(f, 1)[0]
        if version != VERSION:
            raise RTCBinError(f"unsupported version: {version}")
        if not (flags & FLAG_HAS_LENGTH):
            raise RTCBinError("files without length are not supported")
        if not (flags & FLAG_HAS_CRC32):
            raise RTCBinError("files without CRC32 are not supported")

        base_year, _ = _read_varint(f)
        if expected_base_year is not None and base_year != expected_base_year:
            raise RTCBinError(f"base_year mismatch: file={base_year} expected={expected_base_year}")

        header = RTCBinHeader(version=version, flags=flags, base_year=base_year)
        frames: list[list[int]] = []

        while True:
            b = f.read(1)
            if not b:
                break
            frame_type = b[0]

            payload_len, len_raw = _read_varint(f)
            if payload_len > file_size - f.tell():
                raise RTCBinError("frame length exceeds file size")
            payload = _read_exact(f, payload_len)

            crc = _read_exact(f, 4)
            blob = bytes([frame_type]) + len_raw + payload
            if crc32_be(blob) != crc:
                raise RTCBinError("CRC32 mismatch")

            if frame_type == FRAME_END:
                break
            if frame_type == FRAME_COUNTERS:
                frames.append(_decode_counters(payload, flags))
                continue

            raise RTCBinError(f"unknown frame type: {frame_type}")

        return RTCBinFile(header=header, frames=frames)


__all__ = [
    "RTCBinError",
    "RTCBinHeader",
    "RTCBinFile",
    "read_rtcbin",
    "write_rtcbin",
    "uleb128_encode",
    "uleb128_decode_from",
    "zigzag_encode",
    "zigzag_decode",
]
