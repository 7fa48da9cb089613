"""Convert binary logs to GPX track files."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator

from gpsvario.records import (
    TRACK_RECORD_SIZE,
    IbgRecord,
    LogFormatError,
    TrackRecord,
    read_ibg_records,
)

GPX_HEADER = '<?xml version="1.0"?>\n<gpx version="1.1">\r\n'
GPX_OPEN = "<trk><trkseg>\r\n"
GPX_CLOSE = "</trkseg></trk></gpx>\r\n"


def _trkpt(lat: float, lon: float, ele: float, time: str) -> str:
    return (f'<trkpt lat="{lat:f}" lon="{lon:f}"> <ele>{ele:f}</ele> '
            f"<time>{time}</time> </trkpt>\r\n")


def track_to_gpx(records: Iterable[TrackRecord]) -> str:
    """Render GPS track records as a GPX document."""
    parts = [GPX_HEADER, GPX_OPEN]
    for record in records:
        t = record.trkpt
        time = (f"{t.year}-{t.month:02d}-{t.day:02d}"
                f"T{t.hour:02d}:{t.minute:02d}:{t.second}Z")
        parts.append(_trkpt(t.lat_deg7 / 1e7, t.lon_deg7 / 1e7,
                            t.height_msl_mm / 1000.0, time))
    parts.append(GPX_CLOSE)
    return "".join(parts)


def ibg_to_gpx(records: Iterable[IbgRecord], year: int, month: int, day: int,
               hour: int, minute: int) -> str:
    """Render the GPS parts of IBG records as a GPX document.

    The time of each point is derived from the log start time given and the
    GPS time-of-week differences between records.  Records whose time of
    week has not changed are skipped.
    """
    parts = [GPX_HEADER, GPX_OPEN]
    last_tow = 0
    second = 0.0
    for record in records:
        if not record.header.has_gps_record:
            continue
        gps = record.gps
        interval_ms = abs(gps.time_of_week_ms - last_tow)
        if not interval_ms:
            continue
        if last_tow:
            second += interval_ms / 1000.0
        last_tow = gps.time_of_week_ms
        while second > 60.0:
            second -= 60.0
            minute += 1
        while minute > 59:
            minute -= 60
            hour += 1
        time = f"{year}-{month:02d}-{day:02d}T{hour:02d}:{minute:02d}:{second:f}Z"
        parts.append(_trkpt(gps.lat_deg7 / 1e7, gps.lon_deg7 / 1e7,
                            gps.height_msl_mm / 1000.0, time))
    parts.append(GPX_CLOSE)
    return "".join(parts)


def _read_track_records(stream: BinaryIO) -> Iterator[TrackRecord]:
    while True:
        chunk = stream.read(TRACK_RECORD_SIZE)
        if len(chunk) < TRACK_RECORD_SIZE:
            return
        yield TrackRecord.from_bytes(chunk)


def convert_track_file(path) -> Path:
    """Write ``<path>.gpx`` from a GPS track log; return the output path."""
    out = Path(f"{path}.gpx")
    with open(path, "rb") as src:
        text = track_to_gpx(_read_track_records(src))
    out.write_text(text, newline="")
    return out


def convert_ibg_file(path, year: int, month: int, day: int, hour: int, minute: int) -> Path:
    """Write ``<path>.gpx`` from an IBG log that starts at the given time."""
    out = Path(f"{path}.gpx")
    with open(path, "rb") as src:
        text = ibg_to_gpx(read_ibg_records(src), year, month, day, hour, minute)
    out.write_text(text, newline="")
    return out


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="log2gpx", description="Convert a binary log to GPX.")
    commands = parser.add_subparsers(dest="mode", required=True)
    track = commands.add_parser("track", help="convert a GPS track log")
    track.add_argument("log")
    ibg = commands.add_parser("ibg", help="convert an IBG log with a known start time")
    ibg.add_argument("log")
    for name in ("year", "month", "day", "hour", "minute"):
        ibg.add_argument(name, type=int)
    args = parser.parse_args(argv)

    print(f"Saving to {args.log}.gpx")
    try:
        if args.mode == "track":
            convert_track_file(args.log)
        else:
            convert_ibg_file(args.log, args.year, args.month, args.day, args.hour, args.minute)
    except OSError as exc:
        print(f"error opening {args.log}: {exc}", file=sys.stderr)
        return 1
    except LogFormatError as exc:
        print(f"Error : {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())