"""Inspect an IBG data log: count its records and print their contents."""

from __future__ import annotations

import argparse
import os
import struct
import sys
from dataclasses import dataclass
from typing import Iterator

from gpsvario.records import (
    BARO_SIZE,
    GPS_SIZE,
    HEADER_SIZE,
    IBG_MAGIC,
    IBG_RECORD_MAX_SIZE,
    IMU_SIZE,
    IbgHeader,
    LogFormatError,
)

_HEADER = struct.Struct("<HBB")
_IMU = struct.Struct("<9f")
_BARO = struct.Struct("<i")
_GPS = struct.Struct("<IiiiIiiiI")
_F32 = struct.Struct("<f")


def _f32(value: float) -> float:
    """Round a value to single precision."""
    return _F32.unpack(_F32.pack(value))[0]


def _c_div(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


@dataclass
class RecordCounts:
    """Numbers of IMU, baro and GPS records found in a log.

    ``error`` describes why the scan stopped early, if it did.
    """

    imu: int = 0
    baro: int = 0
    gps: int = 0
    error: str | None = None


def count_records(path) -> RecordCounts:
    """Count the records of an IBG log by walking its headers.

    The scan stops at the end of the file or at a header without the IBG
    magic; in the latter case ``error`` is set on the result.
    """
    counts = RecordCounts()
    with open(path, "rb") as stream:
        while True:
            head = stream.read(HEADER_SIZE)
            if len(head) < HEADER_SIZE:
                break
            magic, gps_flags, baro_flags = _HEADER.unpack(head)
            if magic != IBG_MAGIC:
                counts.error = "magic not found"
                break
            stream.seek(IbgHeader(gps_flags, baro_flags).body_size(), os.SEEK_CUR)
            counts.imu += 1
            if baro_flags:
                counts.baro += 1
            if gps_flags:
                counts.gps += 1
    return counts


def format_records(path) -> Iterator[str]:
    """Yield one text line per IMU, baro and GPS part of each record.

    A header without the IBG magic raises LogFormatError.
    """
    with open(path, "rb") as stream:
        while True:
            head = stream.read(HEADER_SIZE)
            if len(head) < HEADER_SIZE:
                return
            magic, gps_flags, baro_flags = _HEADER.unpack(head)
            if magic != IBG_MAGIC:
                raise LogFormatError("magic not found")
            header = IbgHeader(gps_flags, baro_flags)

            imu = stream.read(IMU_SIZE)
            if len(imu) == IMU_SIZE:
                values = _IMU.unpack(imu)[:6]
                yield "IMU : " + " ".join(f"{v:f}" for v in values)

            if header.has_baro_record:
                baro = stream.read(BARO_SIZE)
                if len(baro) == BARO_SIZE:
                    (height_cm,) = _BARO.unpack(baro)
                    yield f"BARO : {height_cm}"

            if header.has_gps_record:
                gps = stream.read(GPS_SIZE)
                if len(gps) == GPS_SIZE:
                    tow, lon7, lat7, height_mm = _GPS.unpack(gps)[:4]
                    lon = _f32(_f32(lon7) / 1e7)
                    lat = _f32(_f32(lat7) / 1e7)
                    yield f"GPS : {tow} {lon:f} {lat:f} {_c_div(height_mm, 10)}"


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="parseibg", description="Show the records of an IBG log.")
    parser.add_argument("log")
    args = parser.parse_args(argv)

    print(f"sizeof IBG_HDR = {HEADER_SIZE}")
    print(f"sizeof I_RECORD = {IMU_SIZE}")
    print(f"sizeof FLASHLOG_IBG_RECORD = {IBG_RECORD_MAX_SIZE}")
    print()
    try:
        counts = count_records(args.log)
        if counts.error:
            print(f"Error : {counts.error}")
        print(f"Found {counts.imu} imu records")
        print(f"Found {counts.baro} baro records")
        print(f"Found {counts.gps} gps records")
        print()
        for line in format_records(args.log):
            print(line)
    except OSError as exc:
        print(f"error opening {args.log}: {exc}", file=sys.stderr)
        return 1
    except LogFormatError as exc:
        print(f"Error : {exc}")
    return 0


if __name__ == "__main__":
    sys.exit(main())