"""Split a binary data log into one file per recording session.

A new session starts whenever the time stamps jump by more than the allowed
dropout.  IBG sessions are detected from the GPS time of week in the IBG
records, GPS track sessions from the UTC time of the track points.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import BinaryIO

from gpsvario.records import IbgRecord, LogFormatError, read_ibg_records, read_log


class _SplitWriter:
    """Writes records to the current output file and opens new ones on demand."""

    def __init__(self) -> None:
        self._file: BinaryIO | None = None
        self.paths: list[Path] = []

    def start(self, path: Path) -> None:
        self.close()
        self._file = open(path, "wb")
        self.paths.append(path)

    def write(self, data: bytes) -> None:
        if self._file is not None:
            self._file.write(data)

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "_SplitWriter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def split_ibg_log(path, max_dropout_ms: int) -> list[Path]:
    """Split an IBG log at GPS time gaps longer than ``max_dropout_ms``.

    Output files are named ``<path>_00``, ``<path>_01`` and so on; their
    paths are returned in order.  A GPS track file or unknown data raises
    LogFormatError.
    """
    base = str(path)
    last_tow = 0
    with open(path, "rb") as src, _SplitWriter() as out:
        for record in read_ibg_records(src):
            if record.header.has_gps_record:
                tow = record.gps.time_of_week_ms
                if abs(tow - last_tow) > max_dropout_ms:
                    out.start(Path(f"{base}_{len(out.paths):02d}"))
                last_tow = tow
            out.write(record.to_bytes())
        return out.paths


def split_log(path, max_ibg_dropout_secs: int, max_gps_dropout_secs: int) -> list[Path]:
    """Split a mixed log into IBG sessions and GPS track sessions.

    IBG files are named ``<path>_ibg_NN``, track files ``<path>_gps_NN``.
    Returns the paths in the order they were created.  An unknown header
    magic raises LogFormatError.
    """
    base = str(path)
    ibg_time = 0
    gps_time = 0
    ibg_count = 0
    gps_count = 0
    with open(path, "rb") as src, _SplitWriter() as out:
        for record in read_log(src):
            if isinstance(record, IbgRecord):
                if record.header.has_gps_record:
                    tow = record.gps.time_of_week_ms
                    if abs(tow - ibg_time) > max_ibg_dropout_secs * 1000:
                        out.start(Path(f"{base}_ibg_{ibg_count:02d}"))
                        ibg_count += 1
                    ibg_time = tow
            else:
                t = record.trkpt
                new_time = t.day * 86400 + t.hour * 3600 + t.minute * 60 + t.second
                if abs(new_time - gps_time) > max_gps_dropout_secs:
                    out.start(Path(f"{base}_gps_{gps_count:02d}"))
                    gps_count += 1
                gps_time = new_time
            out.write(record.to_bytes())
        return out.paths


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="logsplit", description="Split a binary data log into sessions.")
    commands = parser.add_subparsers(dest="mode", required=True)
    ibg = commands.add_parser("ibg", help="split an IBG log at GPS time gaps")
    ibg.add_argument("log")
    ibg.add_argument("max_dropout_ms", type=int)
    mixed = commands.add_parser("all", help="split a log of IBG and GPS track records")
    mixed.add_argument("log")
    mixed.add_argument("max_ibg_dropout_secs", type=int)
    mixed.add_argument("max_gps_dropout_secs", type=int)
    args = parser.parse_args(argv)

    try:
        if args.mode == "ibg":
            paths = split_ibg_log(args.log, args.max_dropout_ms)
        else:
            paths = split_log(args.log, args.max_ibg_dropout_secs, args.max_gps_dropout_secs)
    except OSError as exc:
        print(f"error opening {args.log}: {exc}", file=sys.stderr)
        return 1
    except LogFormatError as exc:
        print(f"Error : {exc}", file=sys.stderr)
        return 2
    for path in paths:
        print(f"new log {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())